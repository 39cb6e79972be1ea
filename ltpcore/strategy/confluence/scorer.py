"""
LTP 2.0 Gamma Confluence Scorer

Combines the graduated components into one raw score and a stabilised grade:

    cloud (0-25) + vwap (0-20) + gamma wall (0-20) + gamma regime (0-15)
    + patience (0-10) + opposing wall penalty (-20..0), clamped to 0-90

The smoothed score and grade come from the hysteresis stabiliser; the
caller passes in and stores the per-symbol state.
"""

from typing import List, Literal, Optional, Sequence, Tuple

from ltpcore.analysis.patience import score_patience
from ltpcore.shared.config.defaults import DEFAULT_SCORING_CONFIG, ScoringConfig
from ltpcore.shared.models.context import MarketContext
from ltpcore.shared.models.scoring import (
    Grade,
    LTP2Score,
    ScoreBreakdown,
    ScoreHysteresisState,
    ScoreWarning,
)
from ltpcore.shared.utils.logging_utils import log_grade_transition, log_score_evaluation
from ltpcore.shared.utils.numeric import clamp, round_half_up, safe_divide_value
from ltpcore.strategy.confluence.gamma_walls import (
    score_gamma_regime,
    score_gamma_wall_position,
    score_opposing_wall_penalty,
)
from ltpcore.strategy.confluence.graduated import score_ema_cloud, score_vwap_position
from ltpcore.strategy.confluence.hysteresis import apply_hysteresis

STRATEGY_NAME = 'ltp2_gamma'


def calculate_confidence(
    breakdown: ScoreBreakdown,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> float:
    """
    Weighted component agreement, 0-100.

    Each component contributes its share (30/25/20/15/10) in proportion to
    score / max weight. The opposing wall penalty does not count.
    """
    weights = config.weights
    shares = config.confidence

    confidence = (
        shares.cloud * safe_divide_value(breakdown.cloud, weights.cloud)
        + shares.vwap * safe_divide_value(breakdown.vwap, weights.vwap)
        + shares.gamma_wall * safe_divide_value(breakdown.gamma_wall, weights.gamma_wall)
        + shares.gamma_regime * safe_divide_value(breakdown.gamma_regime, weights.gamma_regime)
        + shares.patience * safe_divide_value(breakdown.patience, weights.patience)
    )
    return clamp(round_half_up(confidence), 0, 100)


def strongest_warning(warnings: Sequence[ScoreWarning]) -> Optional[ScoreWarning]:
    """Highest-severity warning; the earliest one wins ties."""
    best: Optional[ScoreWarning] = None
    for warning in warnings:
        if best is None or warning.severity > best.severity:
            best = warning
    return best


def generate_recommendation(
    grade: Grade,
    direction: Literal['bullish', 'bearish', 'neutral'],
    scoring_direction: Literal['bullish', 'bearish'],
    warnings: Sequence[ScoreWarning],
) -> str:
    """Pick the recommendation template for a grade and its strongest warning."""
    top = strongest_warning(warnings)

    if grade == 'Sniper':
        side = 'long' if scoring_direction == 'bullish' else 'short'
        return f"Sniper setup. Valid {side} at current levels. All confluence factors aligned."

    if grade == 'Decent':
        if top is not None:
            return f"Decent setup but watch for: {top.message}. Consider smaller size."
        return "Decent setup. Missing some confluence. Trade with caution."

    if top is not None and top.source == 'wall_penalty':
        if scoring_direction == 'bullish':
            return "Chasing tops near Call Wall. Wait for pullback to VWAP."
        return "Chasing lows near Put Wall. Wait for bounce rejection."
    if direction == 'neutral':
        return "No clear trend. Sit on hands and wait for direction."
    if top is not None:
        return f"Low probability setup. {top.message}. Stay patient."
    return "Low probability setup. Multiple factors missing. Stay patient."


def calculate_ltp2_score(
    context: MarketContext,
    state: Optional[ScoreHysteresisState] = None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
    symbol: str = '',
) -> Tuple[LTP2Score, ScoreHysteresisState]:
    """
    Score a market context with LTP 2.0 gamma confluence.

    Direction comes from the EMA cloud. Inside the neutral zone the
    reported direction is 'neutral' and the components are scored as
    bullish when ema8 >= ema21, else bearish.

    Args:
        context: Market inputs for this evaluation
        state: Caller-owned hysteresis state for the symbol (None if fresh)
        config: Weights, buckets and thresholds
        symbol: Ticker, for logging only

    Returns:
        (score, new hysteresis state); the caller replaces its stored state
    """
    weights = config.weights
    price = context.current_price

    cloud = score_ema_cloud(context.ema8, context.ema21, weights, config.cloud)
    if cloud.direction in ('bullish', 'bearish'):
        scoring_direction = cloud.direction
    else:
        scoring_direction = 'bullish' if context.ema8 >= context.ema21 else 'bearish'

    vwap = score_vwap_position(price, context.vwap, scoring_direction, weights, config.vwap)
    wall = score_gamma_wall_position(price, context.put_wall, context.call_wall, scoring_direction, weights)
    regime = score_gamma_regime(context.gamma_exposure, scoring_direction, weights)
    patience = score_patience(context, scoring_direction, weights, config.patience)
    penalty = score_opposing_wall_penalty(
        price, context.put_wall, context.call_wall, scoring_direction, config.wall_penalty,
    )

    component_sum = (
        cloud.score + vwap.score + wall.score + regime.score + patience.score + penalty.score
    )
    raw_total = clamp(component_sum, 0, weights.max_total)

    breakdown = ScoreBreakdown(
        cloud=cloud.score,
        vwap=vwap.score,
        gamma_wall=wall.score,
        gamma_regime=regime.score,
        patience=patience.score,
        resistance_penalty=penalty.score,
        total=raw_total,
    )

    warning_details: List[ScoreWarning] = [*wall.warnings, *regime.warnings, *penalty.warnings]

    grade, stability, new_state = apply_hysteresis(raw_total, state, config.grades, config.hysteresis)

    result = LTP2Score(
        score=stability.smoothed_score,
        grade=grade,
        direction=cloud.direction,
        confidence=calculate_confidence(breakdown, config),
        breakdown=breakdown,
        warnings=[w.message for w in warning_details],
        recommendation=generate_recommendation(grade, cloud.direction, scoring_direction, warning_details),
        stability=stability,
        scoring_direction=scoring_direction,
        warning_details=warning_details,
    )

    log_score_evaluation(
        symbol,
        STRATEGY_NAME,
        cloud.direction,
        raw_total,
        stability.smoothed_score,
        grade,
        components={k: v for k, v in breakdown.to_dict().items() if k != 'total'},
    )
    log_grade_transition(symbol, stability.previous_grade, grade, stability.smoothed_score, stability.grade_locked)

    return result, new_state
