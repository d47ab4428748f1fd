"""Region and credential models."""

from dataclasses import dataclass, asdict, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class RRCredentials:
    """A RadioReference premium account. Never cached or logged."""
    username: str
    password: str

    def __repr__(self) -> str:
        return f"RRCredentials(username={self.username!r}, password='***')"


@dataclass
class RegionInfo:
    """
    A resolved location.

    ZIP lookups against the database fill in ``county_id``/``state_id``;
    free-text lookups fill in ``name`` and the ZIP list instead.
    """
    name: str
    zipcode: Optional[str] = None
    county_id: Optional[str] = None
    state_id: Optional[str] = None
    state: Optional[str] = None  # two-letter abbreviation
    city: str = ""
    county_name: str = ""
    zips: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return asdict(self)
