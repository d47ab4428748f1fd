from setuptools import setup, find_packages

setup(
    name="freqfinder",
    version="0.1.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "requests>=2.25.1",
        "beautifulsoup4>=4.9.3",
        "click>=8.0.0",
        "rich>=10.0.0",
        "google-genai>=1.0.0",
        "httpx>=0.24",
    ],
    extras_require={
        'test': [
            "pytest>=7.0",
        ],
    },
    entry_points={
        'console_scripts': [
            'freqfinder=scripts.freqfinder_cli:main',
        ],
    },
)
