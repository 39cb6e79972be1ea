"""
Patience candle (inside bar) models.
"""

from dataclasses import dataclass
from typing import Literal, Optional

PatienceQuality = Literal['high', 'medium', 'low']


@dataclass(frozen=True)
class PatienceCandle:
    """
    Inside-bar detection result.

    Attributes:
        is_patience_candle: Current bar is fully inside the prior bar's range
        direction: 'bullish' if close > open else 'bearish'; None when not detected
        quality: Body/compression quality when detected
        body_ratio: |close - open| / range
        compression: range / previous range
        at_level: Midpoint within tolerance of VWAP or a gamma wall
        nearest_level: Name of the level it sits at ('vwap', 'put_wall', 'call_wall')
    """
    is_patience_candle: bool
    direction: Optional[Literal['bullish', 'bearish']] = None
    quality: Optional[PatienceQuality] = None
    body_ratio: float = 0.0
    compression: float = 0.0
    at_level: bool = False
    nearest_level: Optional[str] = None

    @classmethod
    def none(cls) -> "PatienceCandle":
        return cls(is_patience_candle=False)


@dataclass(frozen=True)
class PatienceScore:
    """Patience component outcome for the confluence aggregator."""
    score: float
    candle: Optional[PatienceCandle]
    method: Literal['full', 'fallback', 'none']
    reason: str


@dataclass(frozen=True)
class PatienceResult:
    """Legacy near-level patience count over the last few bars."""
    detected: bool
    count: int
