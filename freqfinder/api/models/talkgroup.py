"""Talkgroup model."""

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class Talkgroup:
    """Represents a talkgroup on a trunked system."""
    dec: str
    mode: str = "D"
    alpha_tag: str = ""
    description: str = ""
    tag: str = "Other"
    hex: Optional[str] = None

    def to_dict(self) -> Dict:
        """Convert to dictionary for JSON serialization."""
        data = {
            'dec': self.dec,
            'mode': self.mode,
            'alphaTag': self.alpha_tag,
            'description': self.description,
            'tag': self.tag,
        }
        if self.hex:
            data['hex'] = self.hex
        return data

    @classmethod
    def from_dict(cls, data: Dict) -> Optional["Talkgroup"]:
        """Build a talkgroup, or ``None`` when the decimal id is missing or zero."""
        dec = str(data.get('dec') or "").strip()
        if not dec or dec == "0":
            return None
        return cls(
            dec=dec,
            mode=str(data.get('mode') or "D"),
            alpha_tag=str(data.get('alphaTag') or ""),
            description=str(data.get('description') or ""),
            tag=str(data.get('tag') or "Other"),
            hex=data.get('hex') or dec_to_hex(dec),
        )


def dec_to_hex(dec: str) -> Optional[str]:
    try:
        return format(int(dec), "x")
    except ValueError:
        return None
