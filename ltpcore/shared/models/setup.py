"""
Trade setup models.

DetectedSetup rows are persisted by a collaborator; this core only
computes the numbers that populate them.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from typing import Any, Dict, Literal, Optional

SetupStage = Literal['forming', 'ready', 'triggered', 'invalidated', 'expired']

TERMINAL_STAGES = ('invalidated', 'expired')


@dataclass(frozen=True)
class TradeParams:
    """
    Entry, stop and R-multiple targets.

    All fields are None when no level was available to anchor the stop.
    """
    suggested_entry: Optional[float] = None
    suggested_stop: Optional[float] = None
    target_1: Optional[float] = None
    target_2: Optional[float] = None
    target_3: Optional[float] = None
    risk_reward: Optional[float] = None

    @property
    def is_empty(self) -> bool:
        return self.suggested_entry is None

    def to_dict(self) -> Dict[str, Optional[float]]:
        return asdict(self)


@dataclass(frozen=True)
class DetectedSetup:
    """A setup candidate with its component scores and trade parameters."""
    symbol: str
    direction: Literal['bullish', 'bearish']
    setup_stage: SetupStage
    confluence_score: float
    level_score: float
    trend_score: float
    patience_score: float
    mtf_score: float
    primary_level_type: Optional[str]
    primary_level_price: Optional[float]
    patience_candles: int
    trade_params: TradeParams
    coach_note: str
    detected_at: datetime
    expires_at: datetime

    @property
    def is_active(self) -> bool:
        return self.setup_stage not in TERMINAL_STAGES

    def to_dict(self) -> Dict[str, Any]:
        """Flat row shape expected by the setup-persistence collaborator."""
        row = asdict(self)
        row.pop('trade_params')
        row.update(self.trade_params.to_dict())
        row['detected_at'] = self.detected_at.isoformat()
        row['expires_at'] = self.expires_at.isoformat()
        return row
