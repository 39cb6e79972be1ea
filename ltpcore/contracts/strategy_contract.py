"""
Strategy contracts.

Defines the common interface the LTP scoring strategies implement. The
v1 letter-grade scorer and the LTP 2.0 gamma scorer stay distinct
implementations behind it; their grades are never mixed.
"""
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Optional, Sequence, Union

from ltpcore.shared.models.context import MarketContext
from ltpcore.shared.models.levels import KeyLevel
from ltpcore.shared.models.patience import PatienceResult
from ltpcore.shared.models.scoring import (
    LegacyScoreExplanation,
    LTP2Score,
    LTPScore,
    ScoreExplanation,
    ScoreHysteresisState,
)
from ltpcore.shared.models.trend import MTFAnalysis


@dataclass(frozen=True)
class ScoreRequest:
    """
    Already-fetched inputs for one evaluation.

    Each scorer reads the fields it needs: the gamma scorer uses
    `context` and `state`; the v1 scorer uses `current_price`, `levels`,
    `analyses`, `patience` and optionally `direction`.
    """
    symbol: str = ''
    context: Optional[MarketContext] = None
    state: Optional[ScoreHysteresisState] = None
    current_price: Optional[float] = None
    levels: Sequence[KeyLevel] = field(default_factory=tuple)
    analyses: Sequence[MTFAnalysis] = field(default_factory=tuple)
    patience: Optional[PatienceResult] = None
    direction: Optional[str] = None


@dataclass(frozen=True)
class ScoreResult:
    """
    Strategy-tagged result.

    Attributes:
        strategy: Name of the scorer that produced it
        score: Headline score on that strategy's scale
        max_score: Top of the scale (90 for LTP 2.0, 100 for v1)
        grade: Grade label on that strategy's scale
        direction: Direction the score describes
        details: The strategy's own score object
        explanation: Audited explanation for downstream consumers
        state: New hysteresis state to store (stateful strategies only)
    """
    strategy: str
    score: float
    max_score: float
    grade: str
    direction: str
    details: Union[LTP2Score, LTPScore]
    explanation: Union[ScoreExplanation, LegacyScoreExplanation]
    state: Optional[ScoreHysteresisState] = None

    def to_dict(self) -> dict:
        return {
            'strategy': self.strategy,
            'score': self.score,
            'max_score': self.max_score,
            'grade': self.grade,
            'direction': self.direction,
            'explanation': self.explanation.to_dict(),
            'state': self.state.to_dict() if self.state is not None else None,
        }


class SetupScorer(ABC):
    """Abstract interface for a named setup scoring strategy."""

    name: str = ''

    @abstractmethod
    def score(self, request: ScoreRequest, **kwargs: Any) -> ScoreResult:
        """
        Score one setup.

        Args:
            request: Inputs for this evaluation

        Returns:
            ScoreResult on this strategy's own scale

        Raises:
            ContractViolationError: If the request lacks inputs this strategy needs
        """
        pass
