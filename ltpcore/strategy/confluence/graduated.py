"""
Graduated Trend and VWAP Scorers

Continuous (bucketed) replacements for the old all-or-nothing checks:
- EMA cloud: points scale with the 8/21 EMA spread
- VWAP: points scale with how far price sits on the right side of VWAP,
  with small partial credit just across it
"""

from typing import Literal

from loguru import logger

from ltpcore.shared.config.defaults import (
    DEFAULT_GAMMA_WEIGHTS,
    DEFAULT_SCORING_CONFIG,
    CloudBuckets,
    GammaWeights,
    VwapBuckets,
)
from ltpcore.shared.models.scoring import ComponentScore
from ltpcore.shared.models.trend import CloudScore
from ltpcore.shared.utils.error_policy import enforce_direction
from ltpcore.shared.utils.numeric import clamp, is_positive_finite, safe_divide_value


def score_ema_cloud(
    ema8: float,
    ema21: float,
    weights: GammaWeights = DEFAULT_GAMMA_WEIGHTS,
    buckets: CloudBuckets = DEFAULT_SCORING_CONFIG.cloud,
) -> CloudScore:
    """
    Graduated EMA cloud score (0-25).

    spread = (ema8 - ema21) / ema21
        |spread| < 0.1%   -> neutral zone, 30% of max, direction 'neutral'
        |spread| >= 0.5%  -> 100% (strong)
        |spread| >= 0.3%  -> 85%  (moderate)
        |spread| >= 0.15% -> 70%  (weak)
        otherwise         -> 50%  (weak)

    An invalid ema21 reads as zero spread (neutral zone).
    """
    max_weight = weights.cloud
    spread = safe_divide_value(ema8 - ema21, ema21, 0.0)

    if abs(spread) < buckets.neutral_spread:
        return CloudScore(
            score=max_weight * buckets.neutral_multiplier,
            direction='neutral',
            strength='neutral',
            spread_pct=spread * 100,
        )

    direction = 'bullish' if spread > 0 else 'bearish'
    magnitude = abs(spread)

    for min_spread, multiplier, strength in buckets.buckets:
        if magnitude >= min_spread:
            return CloudScore(
                score=clamp(max_weight * multiplier, 0, max_weight),
                direction=direction,
                strength=strength,
                spread_pct=spread * 100,
            )

    # Bucket table always ends at 0.0; unreachable with the default config
    return CloudScore(score=0.0, direction=direction, strength='weak', spread_pct=spread * 100)


def score_vwap_position(
    current_price: float,
    vwap: float,
    direction: Literal['bullish', 'bearish'],
    weights: GammaWeights = DEFAULT_GAMMA_WEIGHTS,
    buckets: VwapBuckets = DEFAULT_SCORING_CONFIG.vwap,
) -> ComponentScore:
    """
    Graduated VWAP score (0-20).

    distance = (price - vwap) / vwap * 100
    Wrong side of VWAP for the direction: 25% partial credit when within
    0.1%, else 0. Right side, by |distance|:
        >= 0.5% -> 100%, >= 0.3% -> 90%, >= 0.15% -> 75%,
        >= 0.05% -> 60%, else 50%

    Raises:
        ContractViolationError: If direction is not 'bullish' or 'bearish'
    """
    enforce_direction(direction)
    max_weight = weights.vwap

    if not is_positive_finite(vwap) or not is_positive_finite(current_price):
        logger.debug(f"VWAP score skipped: price={current_price}, vwap={vwap}")
        return ComponentScore(score=0.0, metric=None)

    distance = safe_divide_value(current_price - vwap, vwap, 0.0) * 100
    aligned = distance > 0 if direction == 'bullish' else distance < 0
    magnitude = abs(distance)

    if not aligned:
        if magnitude <= buckets.wrong_side_tolerance_pct:
            return ComponentScore(score=max_weight * buckets.wrong_side_multiplier, metric=distance)
        return ComponentScore(score=0.0, metric=distance)

    for min_distance, multiplier in buckets.buckets:
        if magnitude >= min_distance:
            return ComponentScore(score=clamp(max_weight * multiplier, 0, max_weight), metric=distance)

    return ComponentScore(score=0.0, metric=distance)
