"""
Radio frequency lookups for a location.
"""

from .api import FrequencyClient, RRCredentials
from .config import load_config

__version__ = "0.1.0"
__all__ = ["FrequencyClient", "RRCredentials", "load_config"]
