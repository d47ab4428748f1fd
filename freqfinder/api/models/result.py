"""Scan and trip result models."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional

from .frequency import Agency
from .system import TrunkedSystem


class Source(str, Enum):
    """Where a result came from."""
    API = "API"
    AI = "AI"
    CACHE = "Cache"


class Origin(str, Enum):
    """Where a single agency or system came from."""
    RR = "RR"
    AI = "AI"


@dataclass(frozen=True)
class Geo:
    lat: float
    lng: float

    def to_dict(self) -> Dict:
        return {'lat': self.lat, 'lng': self.lng}

    @classmethod
    def from_dict(cls, data) -> Optional["Geo"]:
        if not isinstance(data, dict):
            return None
        try:
            return cls(lat=float(data['lat']), lng=float(data['lng']))
        except (KeyError, TypeError, ValueError):
            return None


@dataclass(frozen=True)
class CrossRefData:
    """How well a result was cross-checked."""
    verified: bool
    confidence_score: int  # 0-100
    sources_checked: int
    notes: str = ""

    def to_dict(self) -> Dict:
        return {
            'verified': self.verified,
            'confidenceScore': self.confidence_score,
            'sourcesChecked': self.sources_checked,
            'notes': self.notes,
        }

    @classmethod
    def from_dict(cls, data) -> Optional["CrossRefData"]:
        if not isinstance(data, dict):
            return None
        try:
            score = int(float(data.get('confidenceScore') or 0))
            checked = int(float(data.get('sourcesChecked') or 0))
        except (TypeError, ValueError):
            score, checked = 0, 0
        return cls(
            verified=bool(data.get('verified')),
            confidence_score=max(0, min(100, score)),
            sources_checked=max(0, checked),
            notes=str(data.get('notes') or ""),
        )


@dataclass
class ScanResult:
    """
    Everything known about one location.

    This is the unit of caching and the unit returned to callers.
    ``agencies`` and ``trunked_systems`` are always lists, never ``None``.
    """
    source: Source
    location_name: str
    summary: str = ""
    agencies: List[Agency] = field(default_factory=list)
    trunked_systems: List[TrunkedSystem] = field(default_factory=list)
    cross_ref: Optional[CrossRefData] = None
    coordinates: Optional[Geo] = None

    def is_empty(self) -> bool:
        return not self.agencies and not self.trunked_systems

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        data = {
            'source': Source(self.source).value,
            'locationName': self.location_name,
            'summary': self.summary,
            'agencies': [a.to_dict() for a in self.agencies],
            'trunkedSystems': [s.to_dict() for s in self.trunked_systems],
        }
        if self.cross_ref:
            data['crossRef'] = self.cross_ref.to_dict()
        if self.coordinates:
            data['coordinates'] = self.coordinates.to_dict()
        return data

    @classmethod
    def from_dict(cls, data: Dict, source: Optional[Source] = None) -> "ScanResult":
        """
        Build a result from loosely-shaped JSON.

        Missing or non-list collections become empty lists.
        """
        agencies = data.get('agencies')
        systems = data.get('trunkedSystems')
        if not isinstance(agencies, list):
            agencies = []
        if not isinstance(systems, list):
            systems = []

        if source is None:
            try:
                source = Source(data.get('source'))
            except ValueError:
                source = Source.AI

        return cls(
            source=source,
            location_name=str(data.get('locationName') or ""),
            summary=str(data.get('summary') or ""),
            agencies=[Agency.from_dict(a) for a in agencies if isinstance(a, dict)],
            trunked_systems=[
                TrunkedSystem.from_dict(s) for s in systems if isinstance(s, dict)
            ],
            cross_ref=CrossRefData.from_dict(data.get('crossRef')),
            coordinates=Geo.from_dict(data.get('coordinates')),
        )


@dataclass
class TripLocation:
    location_name: str
    data: ScanResult

    def to_dict(self) -> Dict:
        return {'locationName': self.location_name, 'data': self.data.to_dict()}

    @classmethod
    def from_dict(cls, data: Dict, source: Optional[Source] = None) -> "TripLocation":
        name = str(data.get('locationName') or "Unknown")
        inner = data.get('data')
        if isinstance(inner, dict):
            result = ScanResult.from_dict(inner, source=source)
        else:
            result = ScanResult(
                source=source or Source.AI,
                location_name=name,
                summary="Unavailable",
            )
        return cls(location_name=name, data=result)


@dataclass
class TripResult:
    """Ordered stops between a start and an end location."""
    start_location: str
    end_location: str
    locations: List[TripLocation] = field(default_factory=list)

    def is_empty(self) -> bool:
        return not self.locations

    def to_dict(self) -> Dict:
        return {
            'startLocation': self.start_location,
            'endLocation': self.end_location,
            'locations': [loc.to_dict() for loc in self.locations],
        }

    @classmethod
    def from_dict(cls, data: Dict, source: Optional[Source] = None) -> "TripResult":
        locations = data.get('locations')
        if not isinstance(locations, list):
            locations = []
        return cls(
            start_location=str(data.get('startLocation') or ""),
            end_location=str(data.get('endLocation') or ""),
            locations=[
                TripLocation.from_dict(loc, source=source)
                for loc in locations
                if isinstance(loc, dict)
            ],
        )
