"""
Data sources: the RadioReference database and the Gemini oracle.
"""

from .ai_oracle import GeminiOracle, extract_json
from .catalog import CatalogEnumerator
from .fetcher import FrequencyFetcher
from .radioreference import RadioReferenceSource
from .region_resolver import RegionResolver

__all__ = [
    "CatalogEnumerator",
    "FrequencyFetcher",
    "GeminiOracle",
    "RadioReferenceSource",
    "RegionResolver",
    "extract_json",
]
