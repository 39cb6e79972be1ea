"""
Confluence scoring models.

Value objects produced by the LTP 2.0 gamma scorer and the legacy v1
scorer. Breakdowns are fixed-field records, one instance per evaluation;
hysteresis state is owned by the caller and replaced, never mutated.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Literal, Optional, Tuple

Grade = Literal['Sniper', 'Decent', 'Dumb Shit']
LetterGrade = Literal['A', 'B', 'C', 'D', 'F']
ScoreDirection = Literal['bullish', 'bearish', 'neutral']

GRADE_ORDER: Tuple[str, ...] = ('Dumb Shit', 'Decent', 'Sniper')


@dataclass(frozen=True)
class ScoreWarning:
    """
    A warning raised by a component scorer.

    Attributes:
        message: Human-readable warning text
        severity: 1 (minor) .. 4 (critical); drives recommendation selection
        source: Component that raised it ('gamma_wall', 'gamma_regime', 'wall_penalty')
    """
    message: str
    severity: int
    source: str


@dataclass(frozen=True)
class ComponentScore:
    """
    Output of a single graduated component scorer.

    Attributes:
        score: Points awarded (penalties are negative)
        metric: The distance/spread (percent) that selected the bucket
        warnings: Warnings raised while scoring
    """
    score: float
    metric: Optional[float] = None
    warnings: Tuple[ScoreWarning, ...] = ()


@dataclass(frozen=True)
class ScoreBreakdown:
    """
    LTP 2.0 component scores.

    Attributes:
        cloud: EMA cloud score (0-25)
        vwap: VWAP position score (0-20)
        gamma_wall: Supportive-wall position score (0-20)
        gamma_regime: Gamma regime score (0-15)
        patience: Patience candle score (0-10)
        resistance_penalty: Opposing wall proximity penalty (-20..0)
        total: Clamped raw sum (0 to the configured maximum)
    """
    cloud: float = 0.0
    vwap: float = 0.0
    gamma_wall: float = 0.0
    gamma_regime: float = 0.0
    patience: float = 0.0
    resistance_penalty: float = 0.0
    total: float = 0.0

    def __post_init__(self):
        if self.total < 0:
            raise ValueError(f"Total score must be >= 0, got {self.total}")
        if self.resistance_penalty > 0:
            raise ValueError(f"Resistance penalty must be <= 0, got {self.resistance_penalty}")

    @property
    def component_sum(self) -> float:
        """Unclamped sum of all six components."""
        return (
            self.cloud
            + self.vwap
            + self.gamma_wall
            + self.gamma_regime
            + self.patience
            + self.resistance_penalty
        )

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class ScoreStability:
    """Hysteresis outcome attached to an LTP2Score."""
    raw_score: float
    smoothed_score: float
    candles_at_grade: int
    grade_locked: bool
    previous_grade: Optional[Grade] = None


@dataclass(frozen=True)
class ScoreHysteresisState:
    """
    Per-symbol grade history, owned and persisted by the caller.

    The scorer reads this and returns a new instance; callers swap their
    stored reference. If evaluations for one symbol can race, the caller
    must serialise the read-evaluate-replace cycle.

    Attributes:
        previous_grade: Grade from the last evaluation (None for a fresh symbol)
        previous_scores: Recent raw totals, oldest first, bounded length
        candles_at_grade: Consecutive evaluations at previous_grade
    """
    previous_grade: Optional[Grade] = None
    previous_scores: Tuple[float, ...] = ()
    candles_at_grade: int = 0

    @classmethod
    def initial(cls) -> "ScoreHysteresisState":
        return cls()

    def to_dict(self) -> Dict[str, Any]:
        return {
            'previous_grade': self.previous_grade,
            'previous_scores': list(self.previous_scores),
            'candles_at_grade': self.candles_at_grade,
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ScoreHysteresisState":
        if not data:
            return cls()
        return cls(
            previous_grade=data.get('previous_grade'),
            previous_scores=tuple(float(s) for s in data.get('previous_scores') or ()),
            candles_at_grade=int(data.get('candles_at_grade') or 0),
        )


@dataclass(frozen=True)
class LTP2Score:
    """
    LTP 2.0 gamma score.

    Attributes:
        score: Smoothed score the grade was assigned from
        grade: 'Sniper' | 'Decent' | 'Dumb Shit'
        direction: Reported direction ('neutral' inside the cloud dead zone)
        confidence: 0-100 weighted component agreement
        breakdown: Fixed-field component scores with the raw total
        warnings: Warning messages in the order they were raised
        recommendation: Template recommendation text
        stability: Hysteresis details
        scoring_direction: Direction the components were scored for
        warning_details: Warnings with severity and source
    """
    score: float
    grade: Grade
    direction: ScoreDirection
    confidence: float
    breakdown: ScoreBreakdown
    warnings: List[str]
    recommendation: str
    stability: Optional[ScoreStability] = None
    scoring_direction: Literal['bullish', 'bearish'] = 'bullish'
    warning_details: List[ScoreWarning] = field(default_factory=list)

    def __post_init__(self):
        if not 0 <= self.confidence <= 100:
            raise ValueError(f"Confidence must be 0-100, got {self.confidence}")

    @property
    def is_sniper(self) -> bool:
        return self.grade == 'Sniper'

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LTPScore:
    """
    Legacy v1 three-factor score.

    Attributes:
        level / trend / patience: Normalised component scores (0-100)
        overall: Rounded weighted average (0-100)
    """
    level: float
    trend: float
    patience: float
    overall: float

    def __post_init__(self):
        for name in ('level', 'trend', 'patience', 'overall'):
            value = getattr(self, name)
            if not 0 <= value <= 100:
                raise ValueError(f"{name} must be 0-100, got {value}")


@dataclass(frozen=True)
class ComponentExplanation:
    """Points and templated reason for one component."""
    score: float
    max_score: float
    reason: str


@dataclass(frozen=True)
class ScoreExplanation:
    """
    Audited, human-readable breakdown of an LTP 2.0 score.

    Built from an already-computed LTP2Score without touching any number.
    Downstream coaching consumers must present these values verbatim.
    """
    symbol: str
    score: float
    grade: Grade
    direction: ScoreDirection
    confidence: float
    recommendation: str
    warnings: List[str]
    breakdown: Dict[str, ComponentExplanation]
    inputs: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class LegacyScoreExplanation:
    """Audited breakdown of a legacy v1 score."""
    scores: LTPScore
    grade: LetterGrade
    reasons: Dict[str, str]
    inputs: Dict[str, Any]

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)
