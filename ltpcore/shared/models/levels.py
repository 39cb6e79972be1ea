"""
Support / resistance level models.
"""

from dataclasses import dataclass
from typing import Literal, Optional

LevelType = Literal['support', 'resistance']


@dataclass(frozen=True)
class KeyLevel:
    """
    A price level derived from bar data.

    Attributes:
        type: 'support' / 'resistance' for clustered swing levels, or a
              reference tag ('pdh', 'vwap', 'orb_high', ...) for reference levels
        price: Level price
        timeframe: Timeframe the level was derived on
        strength: 0-100 significance
    """
    type: str
    price: float
    timeframe: str
    strength: float

    def __post_init__(self):
        if not 0 <= self.strength <= 100:
            raise ValueError(f"Strength must be 0-100, got {self.strength}")

    def to_dict(self) -> dict:
        return {
            'type': self.type,
            'price': self.price,
            'timeframe': self.timeframe,
            'strength': self.strength,
        }


@dataclass(frozen=True)
class LevelResult:
    """Best nearby level for the L component."""
    score: float
    level: Optional[KeyLevel] = None
