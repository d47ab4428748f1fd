"""Trunked system models."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional

from .frequency import format_freq
from .talkgroup import Talkgroup


@dataclass(frozen=True)
class TrunkedSystemFrequency:
    """A site frequency and how it is used (control, alternate, voice)."""
    freq: str
    use: str = "Unknown"

    def to_dict(self) -> Dict:
        return {'freq': self.freq, 'use': self.use}

    @classmethod
    def from_dict(cls, data: Dict) -> "TrunkedSystemFrequency":
        return cls(
            freq=format_freq(data.get('freq')) or str(data.get('freq') or "").strip(),
            use=str(data.get('use') or "Unknown"),
        )


@dataclass
class TrunkedSystem:
    """Represents a trunked radio system as seen from one site."""
    name: str
    type: str
    location: str
    frequencies: List[TrunkedSystemFrequency] = field(default_factory=list)
    talkgroups: List[Talkgroup] = field(default_factory=list)
    origin: Optional[str] = None  # "RR" or "AI"

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        data = {
            'name': self.name,
            'type': self.type,
            'location': self.location,
            'frequencies': [f.to_dict() for f in self.frequencies],
            'talkgroups': [tg.to_dict() for tg in self.talkgroups],
        }
        if self.origin:
            data['origin'] = self.origin
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "TrunkedSystem":
        frequencies = data.get('frequencies')
        talkgroups = data.get('talkgroups')
        if not isinstance(frequencies, list):
            frequencies = []
        if not isinstance(talkgroups, list):
            talkgroups = []

        parsed_talkgroups = []
        for tg in talkgroups:
            if isinstance(tg, dict):
                talkgroup = Talkgroup.from_dict(tg)
                if talkgroup:
                    parsed_talkgroups.append(talkgroup)

        return cls(
            name=str(data.get('name') or "").strip(),
            type=str(data.get('type') or ""),
            location=str(data.get('location') or ""),
            frequencies=[
                TrunkedSystemFrequency.from_dict(f) for f in frequencies if isinstance(f, dict)
            ],
            talkgroups=parsed_talkgroups,
            origin=data.get('origin'),
        )
