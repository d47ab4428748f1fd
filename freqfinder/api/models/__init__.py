"""
Data models for frequency lookups.
"""

from .frequency import Agency, Frequency
from .region import RegionInfo, RRCredentials
from .result import (
    CrossRefData,
    Geo,
    Origin,
    ScanResult,
    Source,
    TripLocation,
    TripResult,
)
from .system import TrunkedSystem, TrunkedSystemFrequency
from .talkgroup import Talkgroup

__all__ = [
    'Agency',
    'CrossRefData',
    'Frequency',
    'Geo',
    'Origin',
    'RegionInfo',
    'RRCredentials',
    'ScanResult',
    'Source',
    'Talkgroup',
    'TripLocation',
    'TripResult',
    'TrunkedSystem',
    'TrunkedSystemFrequency',
]
