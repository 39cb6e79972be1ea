"""
Gamma Wall Scoring

Dealer hedging walls from options flow act as price magnets/barriers:
the put wall tends to hold as support, the call wall as resistance.

- Position: is price on the supportive side of the near wall?
- Regime: does the sign of net gamma exposure suit the direction?
  (positive gamma dampens moves, negative gamma amplifies them)
- Opposing wall penalty: how much room is left before the wall in the
  trade's path? Graduated by percent distance, never positive.
"""

from typing import Literal

from loguru import logger

from ltpcore.shared.config.defaults import (
    DEFAULT_GAMMA_WEIGHTS,
    DEFAULT_SCORING_CONFIG,
    GammaWeights,
    WallPenaltyBuckets,
)
from ltpcore.shared.models.scoring import ComponentScore, ScoreWarning
from ltpcore.shared.utils.error_policy import enforce_direction
from ltpcore.shared.utils.numeric import is_finite_number, is_positive_finite, safe_divide_value

Direction = Literal['bullish', 'bearish']


def score_gamma_wall_position(
    current_price: float,
    put_wall: float,
    call_wall: float,
    direction: Direction,
    weights: GammaWeights = DEFAULT_GAMMA_WEIGHTS,
) -> ComponentScore:
    """
    Supportive-wall position (0 or 20).

    Bullish needs price above the put wall; bearish needs price below the
    call wall. A missing or invalid wall scores 0 with a minor warning.
    """
    enforce_direction(direction)
    wall, wall_name = (put_wall, 'Put Wall') if direction == 'bullish' else (call_wall, 'Call Wall')

    if not is_positive_finite(wall) or not is_positive_finite(current_price):
        return ComponentScore(
            score=0.0,
            warnings=(ScoreWarning(f"{wall_name} unavailable", 1, 'gamma_wall'),),
        )

    distance = safe_divide_value(current_price - wall, wall, 0.0) * 100

    if direction == 'bullish':
        if current_price > wall:
            return ComponentScore(score=weights.gamma_wall, metric=distance)
        message = "Price below Put Wall support"
    else:
        if current_price < wall:
            return ComponentScore(score=weights.gamma_wall, metric=distance)
        message = "Price above Call Wall resistance"

    return ComponentScore(
        score=0.0,
        metric=distance,
        warnings=(ScoreWarning(message, 3, 'gamma_wall'),),
    )


def score_gamma_regime(
    gamma_exposure: float,
    direction: Direction,
    weights: GammaWeights = DEFAULT_GAMMA_WEIGHTS,
) -> ComponentScore:
    """
    Gamma regime (0 or 15).

    Bullish setups want positive net gamma (pinned, grinding tape);
    bearish setups want negative net gamma (expanding ranges).
    """
    enforce_direction(direction)

    if not is_finite_number(gamma_exposure):
        return ComponentScore(
            score=0.0,
            warnings=(ScoreWarning("Gamma exposure unavailable", 1, 'gamma_regime'),),
        )

    if direction == 'bullish':
        if gamma_exposure > 0:
            return ComponentScore(score=weights.gamma_regime, metric=gamma_exposure)
        message = "Negative gamma regime - expect volatility"
    else:
        if gamma_exposure < 0:
            return ComponentScore(score=weights.gamma_regime, metric=gamma_exposure)
        message = "Positive gamma regime - moves likely dampened"

    return ComponentScore(
        score=0.0,
        metric=gamma_exposure,
        warnings=(ScoreWarning(message, 2, 'gamma_regime'),),
    )


def _penalty_warning(penalty: float, distance_pct: float, direction: Direction) -> ScoreWarning:
    """Warning text and severity scaled to the penalty bucket."""
    if direction == 'bullish':
        wall, role, reaction = 'Call Wall', 'resistance', 'rejection'
    else:
        wall, role, reaction = 'Put Wall', 'support', 'bounce'

    if penalty <= -20:
        return ScoreWarning(
            f"At {wall} {role} ({distance_pct:.2f}% away) - high {reaction} risk", 4, 'wall_penalty',
        )
    if penalty <= -15:
        return ScoreWarning(
            f"Approaching {wall} {role} - watch for {reaction} ({distance_pct:.2f}% away)", 3, 'wall_penalty',
        )
    if penalty <= -10:
        return ScoreWarning(
            f"{wall} {role} {distance_pct:.2f}% away - limited room", 2, 'wall_penalty',
        )
    return ScoreWarning(
        f"{wall} {role} {distance_pct:.2f}% away", 1, 'wall_penalty',
    )


def score_opposing_wall_penalty(
    current_price: float,
    put_wall: float,
    call_wall: float,
    direction: Direction,
    buckets: WallPenaltyBuckets = DEFAULT_SCORING_CONFIG.wall_penalty,
) -> ComponentScore:
    """
    Penalty for trading into the opposing wall (-20..0).

    Distance is measured from price to the wall in the trade's path (call
    wall for bullish, put wall for bearish) as a percent of price:
        >= 2.0% -> 0, >= 1.5% -> -5, >= 1.0% -> -10, >= 0.5% -> -15, else -20
    Price already through the wall counts as distance 0. An invalid wall
    means nothing is in the way: no penalty.
    """
    enforce_direction(direction)
    wall = call_wall if direction == 'bullish' else put_wall

    if not is_positive_finite(wall) or not is_positive_finite(current_price):
        return ComponentScore(score=0.0)

    if direction == 'bullish':
        distance = safe_divide_value(wall - current_price, current_price, 0.0) * 100
    else:
        distance = safe_divide_value(current_price - wall, current_price, 0.0) * 100
    distance = max(distance, 0.0)

    for min_distance, penalty in buckets.buckets:
        if distance >= min_distance:
            if penalty == 0:
                return ComponentScore(score=0.0, metric=distance)
            warning = _penalty_warning(penalty, distance, direction)
            logger.debug(f"Opposing wall penalty {penalty} at {distance:.2f}%")
            return ComponentScore(score=penalty, metric=distance, warnings=(warning,))

    return ComponentScore(score=0.0, metric=distance)
