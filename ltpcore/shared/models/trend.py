"""
Multi-timeframe trend models.
"""

from dataclasses import dataclass
from typing import Literal, Optional

TrendDirection = Literal['bullish', 'bearish', 'neutral']
StructureState = Literal['uptrend', 'downtrend', 'range']
EmaPosition = Literal['above_all', 'below_all', 'mixed']
MomentumState = Literal['strong', 'moderate', 'weak']
CloudStrength = Literal['strong', 'moderate', 'weak', 'neutral']


@dataclass(frozen=True)
class MTFAnalysis:
    """Trend read for a single timeframe, supplied externally or built by analyze_timeframe."""
    timeframe: str
    trend: TrendDirection
    structure: StructureState = 'range'
    ema_position: EmaPosition = 'mixed'
    momentum: MomentumState = 'weak'
    orb_status: Optional[str] = None
    vwap_position: Optional[str] = None

    @classmethod
    def neutral(cls, timeframe: str) -> "MTFAnalysis":
        """Neutral read used when a timeframe has too little data."""
        return cls(timeframe=timeframe, trend='neutral')


@dataclass(frozen=True)
class CloudScore:
    """Graduated EMA cloud result."""
    score: float
    direction: TrendDirection
    strength: CloudStrength
    spread_pct: float  # (ema8 - ema21) / ema21 * 100
