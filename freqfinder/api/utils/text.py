"""
String helpers shared by the sources, the cache and the merge engine.
"""

import re

ZIP_RE = re.compile(r"^\d{5}$")
UNSAFE_LOCATION_RE = re.compile(r"[^a-zA-Z0-9\s,.-]")

MAX_LOCATION_LENGTH = 100
MAX_SERVICES = 20


def is_zipcode(value: str) -> bool:
    return bool(value) and bool(ZIP_RE.match(value))


def clean_zipcode(value) -> str:
    """Strip everything but digits."""
    return re.sub(r"\D", "", str(value or ""))


def sanitize_location(value: str) -> str:
    """
    Reduce free text to characters that are safe in a prompt or cache key.

    Keeps letters, digits, whitespace, commas, periods and hyphens, then
    trims and caps the length.
    """
    if not value:
        return ""
    return UNSAFE_LOCATION_RE.sub("", value).strip()[:MAX_LOCATION_LENGTH]


def normalize_name(name: str) -> str:
    """Lower-case and drop everything that is not a letter or digit."""
    return re.sub(r"[^a-z0-9]", "", (name or "").lower())


def compact_key(value: str) -> str:
    """Lower-case and remove all whitespace."""
    return re.sub(r"\s+", "", value.lower())
