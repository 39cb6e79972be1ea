"""
Scorer Registry - named scoring strategies behind the SetupScorer interface.

Two strategies coexist:
- 'ltp2_gamma': LTP 2.0 gamma confluence (0-90, Sniper / Decent / Dumb Shit)
- 'ltp_v1':     legacy three-factor average (0-100, A-F)

Scorers are stateless. The gamma scorer's hysteresis state travels in the
request and comes back in the result for the caller to store.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional

from ltpcore.analysis.key_levels import score_level_proximity
from ltpcore.analysis.mtf import infer_direction, score_trend_alignment
from ltpcore.analysis.patience import score_patience_quality
from ltpcore.contracts.strategy_contract import ScoreRequest, ScoreResult, SetupScorer
from ltpcore.shared.config.defaults import (
    DEFAULT_DETECTION_CONFIG,
    DEFAULT_LEGACY_WEIGHTS,
    DEFAULT_SCORING_CONFIG,
    DetectionConfig,
    LegacyWeights,
    ScoringConfig,
)
from ltpcore.shared.models.patience import PatienceResult
from ltpcore.shared.utils.error_policy import (
    ContractViolationError,
    UnknownScorerError,
    enforce_direction,
)
from ltpcore.strategy.confluence.explainer import explain_ltp2_score
from ltpcore.strategy.confluence.scorer import calculate_ltp2_score
from ltpcore.strategy.legacy.scorer import (
    calculate_ltp_score,
    generate_score_explanation,
    get_ltp_grade,
)


logger = logging.getLogger(__name__)


class GammaLTPScorer(SetupScorer):
    """LTP 2.0 gamma confluence with grade hysteresis."""

    name = 'ltp2_gamma'

    def __init__(self, config: ScoringConfig = DEFAULT_SCORING_CONFIG):
        self._config = config

    def score(self, request: ScoreRequest, now: Optional[datetime] = None, **kwargs: Any) -> ScoreResult:
        if request.context is None:
            raise ContractViolationError(f"{self.name} requires a MarketContext")

        result, new_state = calculate_ltp2_score(
            request.context, request.state, self._config, symbol=request.symbol,
        )
        explanation = explain_ltp2_score(request.symbol, request.context, result, now=now, config=self._config)

        return ScoreResult(
            strategy=self.name,
            score=result.score,
            max_score=self._config.weights.max_total,
            grade=result.grade,
            direction=result.direction,
            details=result,
            explanation=explanation,
            state=new_state,
        )


class LegacyLTPScorer(SetupScorer):
    """LTP v1 Level / Trend / Patience weighted average."""

    name = 'ltp_v1'

    def __init__(
        self,
        weights: LegacyWeights = DEFAULT_LEGACY_WEIGHTS,
        detection: DetectionConfig = DEFAULT_DETECTION_CONFIG,
    ):
        self._weights = weights
        self._detection = detection

    def score(self, request: ScoreRequest, **kwargs: Any) -> ScoreResult:
        if request.current_price is None:
            raise ContractViolationError(f"{self.name} requires current_price")

        direction = request.direction or infer_direction(request.analyses)
        enforce_direction(direction)

        level_result = score_level_proximity(
            request.current_price, request.levels, self._detection.level_proximity_percent,
        )
        trend_score = score_trend_alignment(request.analyses, direction, self._detection.mtf_weights)
        patience = request.patience or PatienceResult(detected=False, count=0)

        scores = calculate_ltp_score(
            level_result.score, trend_score, score_patience_quality(patience), self._weights,
        )
        explanation = generate_score_explanation(
            scores, level_result, request.analyses, patience, direction,
            request.current_price, self._weights,
        )

        logger.debug(
            f"[{request.symbol or '-'}] {self.name}: {scores.overall:.0f} "
            f"(L={scores.level:.0f} T={scores.trend:.0f} P={scores.patience:.0f}) {direction}"
        )

        return ScoreResult(
            strategy=self.name,
            score=scores.overall,
            max_score=100.0,
            grade=get_ltp_grade(scores.overall, self._weights),
            direction=direction,
            details=scores,
            explanation=explanation,
        )


SCORERS: Dict[str, type] = {
    GammaLTPScorer.name: GammaLTPScorer,
    LegacyLTPScorer.name: LegacyLTPScorer,
}


def available_scorers() -> List[str]:
    """Registered strategy names."""
    return sorted(SCORERS)


def get_scorer(name: str, **kwargs: Any) -> SetupScorer:
    """
    Instantiate a scorer by name.

    Args:
        name: 'ltp2_gamma' or 'ltp_v1'
        **kwargs: Passed to the scorer's constructor

    Raises:
        UnknownScorerError: If the name is not registered
    """
    try:
        scorer_cls = SCORERS[name]
    except KeyError:
        raise UnknownScorerError(
            f"Unknown scorer {name!r}; available: {', '.join(available_scorers())}"
        ) from None
    return scorer_cls(**kwargs)
