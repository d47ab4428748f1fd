"""
Frequency Lookup Client

This package looks up public-safety radio frequencies for a location from the
RadioReference database and Gemini, merges the two and caches the result.
"""

from .client import FrequencyClient
from .exceptions import (
    AuthenticationError,
    ConfigurationError,
    FreqFinderError,
    InvalidQueryError,
    LookupFailedError,
    NotFoundError,
    ParseError,
    PartialFailure,
    TransportError,
)
from .models import RegionInfo, RRCredentials, ScanResult, TripResult

__version__ = "0.1.0"
__all__ = [
    "AuthenticationError",
    "ConfigurationError",
    "FreqFinderError",
    "FrequencyClient",
    "InvalidQueryError",
    "LookupFailedError",
    "NotFoundError",
    "ParseError",
    "PartialFailure",
    "RRCredentials",
    "RegionInfo",
    "ScanResult",
    "TransportError",
    "TripResult",
]
