"""Conventional frequency and agency models."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional


def _str(value, default: str = "") -> str:
    if value is None:
        return default
    return str(value).strip()


def format_freq(value) -> Optional[str]:
    """Format a MHz value to four decimals; ``None`` for zero or garbage."""
    try:
        freq = float(value)
    except (TypeError, ValueError):
        return None
    if freq == 0:
        return None
    return f"{freq:.4f}"


@dataclass(frozen=True)
class Frequency:
    """Represents one conventional channel."""
    freq: str  # MHz, four decimal places
    description: str = ""
    mode: str = "FM"
    tag: str = "Other"
    alpha_tag: str = ""
    tone: str = ""
    color_code: str = ""  # DMR
    nac: str = ""  # P25
    ran: str = ""  # NXDN

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        return {
            'freq': self.freq,
            'description': self.description,
            'mode': self.mode,
            'tag': self.tag,
            'alphaTag': self.alpha_tag,
            'tone': self.tone,
            'colorCode': self.color_code,
            'nac': self.nac,
            'ran': self.ran,
        }

    @classmethod
    def from_dict(cls, data: Dict) -> "Frequency":
        return cls(
            freq=format_freq(data.get('freq')) or _str(data.get('freq')),
            description=_str(data.get('description')),
            mode=_str(data.get('mode'), "FM") or "FM",
            tag=_str(data.get('tag'), "Other") or "Other",
            alpha_tag=_str(data.get('alphaTag')),
            tone=_str(data.get('tone')),
            color_code=_str(data.get('colorCode')),
            nac=_str(data.get('nac')),
            ran=_str(data.get('ran')),
        )


@dataclass
class Agency:
    """An agency and its conventional frequencies."""
    name: str
    category: str
    frequencies: List[Frequency] = field(default_factory=list)
    origin: Optional[str] = None  # "RR" or "AI"

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        data = {
            'name': self.name,
            'category': self.category,
            'frequencies': [f.to_dict() for f in self.frequencies],
        }
        if self.origin:
            data['origin'] = self.origin
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> "Agency":
        frequencies = data.get('frequencies')
        if not isinstance(frequencies, list):
            frequencies = []
        return cls(
            name=_str(data.get('name')),
            category=_str(data.get('category'), "Other") or "Other",
            frequencies=[
                Frequency.from_dict(f) for f in frequencies if isinstance(f, dict)
            ],
            origin=data.get('origin'),
        )
