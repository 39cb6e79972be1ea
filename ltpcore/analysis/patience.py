"""
Patience Candle Detection

A patience candle is an inside bar: its high and low sit strictly within
the prior bar's range, read as consolidation before continuation.

Enhanced detection grades the candle on body size and range compression
and checks whether it formed at a reference level (VWAP or a gamma wall).
When full OHLC for both bars is unavailable, scoring falls back to the
caller-supplied patience flag and direction.

Also carries the near-level patience counting used by the v1 setup
detector.
"""

from typing import List, Literal, Optional, Sequence

from loguru import logger

from ltpcore.shared.config.defaults import (
    DEFAULT_DETECTION_CONFIG,
    DEFAULT_GAMMA_WEIGHTS,
    DEFAULT_SCORING_CONFIG,
    GammaWeights,
    PatienceQualityConfig,
)
from ltpcore.shared.models.context import MarketContext
from ltpcore.shared.models.data import Bar
from ltpcore.shared.models.patience import (
    PatienceCandle,
    PatienceQuality,
    PatienceResult,
    PatienceScore,
)
from ltpcore.shared.utils.numeric import (
    is_positive_finite,
    round_half_up,
    safe_divide_value,
)


def detect_patience_candle(
    previous_high: float,
    previous_low: float,
    current_high: float,
    current_low: float,
    current_close: float,
    current_open: float,
) -> PatienceCandle:
    """
    Detect an inside bar.

    Returns:
        PatienceCandle flagged when current_high < previous_high and
        current_low > previous_low; direction is bullish iff close > open.
    """
    is_inside_bar = current_high < previous_high and current_low > previous_low
    if not is_inside_bar:
        return PatienceCandle.none()

    return PatienceCandle(
        is_patience_candle=True,
        direction='bullish' if current_close > current_open else 'bearish',
    )


def classify_patience_quality(
    body_ratio: float,
    compression: float,
    config: PatienceQualityConfig = DEFAULT_SCORING_CONFIG.patience,
) -> PatienceQuality:
    """
    Grade an inside bar.

    high:   body_ratio < 0.35 and compression < 0.5
    medium: body_ratio < 0.5  and compression < 0.7
    low:    anything else
    """
    if body_ratio < config.high_body_ratio and compression < config.high_compression:
        return 'high'
    if body_ratio < config.medium_body_ratio and compression < config.medium_compression:
        return 'medium'
    return 'low'


def _nearest_reference_level(
    price: float,
    context: MarketContext,
    tolerance_pct: float,
) -> Optional[str]:
    """Name of the closest reference level within tolerance_pct of price, if any."""
    candidates = (
        ('vwap', context.vwap),
        ('put_wall', context.put_wall),
        ('call_wall', context.call_wall),
    )

    best_name: Optional[str] = None
    best_distance = float('inf')
    for name, level in candidates:
        if not is_positive_finite(level):
            continue
        distance = safe_divide_value(abs(price - level), level, float('inf')) * 100
        if distance <= tolerance_pct and distance < best_distance:
            best_name = name
            best_distance = distance
    return best_name


def analyze_patience_candle(
    context: MarketContext,
    config: PatienceQualityConfig = DEFAULT_SCORING_CONFIG.patience,
) -> PatienceCandle:
    """
    Full inside-bar analysis from the context's OHLC fields.

    Returns PatienceCandle.none() when the OHLC fields are incomplete or
    the current bar is not an inside bar.
    """
    if not context.has_inside_bar_data:
        return PatienceCandle.none()

    basic = detect_patience_candle(
        context.previous_high,
        context.previous_low,
        context.current_high,
        context.current_low,
        context.current_close,
        context.current_open,
    )
    if not basic.is_patience_candle:
        return basic

    candle_range = context.current_high - context.current_low
    previous_range = context.previous_high - context.previous_low

    body_ratio = safe_divide_value(abs(context.current_close - context.current_open), candle_range, 0.0)
    compression = safe_divide_value(candle_range, previous_range, 0.0)
    quality = classify_patience_quality(body_ratio, compression, config)

    midpoint = (context.current_high + context.current_low) / 2
    nearest_level = _nearest_reference_level(midpoint, context, config.level_proximity_pct)

    return PatienceCandle(
        is_patience_candle=True,
        direction=basic.direction,
        quality=quality,
        body_ratio=body_ratio,
        compression=compression,
        at_level=nearest_level is not None,
        nearest_level=nearest_level,
    )


def score_patience(
    context: MarketContext,
    direction: Literal['bullish', 'bearish'],
    weights: GammaWeights = DEFAULT_GAMMA_WEIGHTS,
    config: PatienceQualityConfig = DEFAULT_SCORING_CONFIG.patience,
) -> PatienceScore:
    """
    Patience component (0-10).

    Full path: max_weight * quality multiplier (1.0 / 0.7 / 0.4) * level
    multiplier (1.0 at a level, 0.5 otherwise), rounded. Fallback path
    (no full OHLC): full weight when the supplied patience flag is set and
    its direction matches. Either way the candle only counts when its
    direction matches the scoring direction.
    """
    max_weight = weights.patience

    if context.has_inside_bar_data:
        candle = analyze_patience_candle(context, config)
        if not candle.is_patience_candle:
            return PatienceScore(0.0, candle, 'full', "No inside bar on the current candle")

        if candle.direction != direction:
            return PatienceScore(
                0.0, candle, 'full',
                f"{candle.quality} quality {candle.direction} inside bar opposes {direction} setup",
            )

        quality_multiplier = config.quality_multipliers[candle.quality]
        level_multiplier = config.at_level_multiplier if candle.at_level else config.off_level_multiplier
        score = round_half_up(max_weight * quality_multiplier * level_multiplier)

        where = f"at {candle.nearest_level}" if candle.at_level else "away from key levels"
        logger.debug(
            f"Patience candle: {candle.quality} quality {where} "
            f"(body {candle.body_ratio:.2f}, compression {candle.compression:.2f}) -> {score}"
        )
        return PatienceScore(
            score, candle, 'full',
            f"{candle.quality.capitalize()} quality {candle.direction} inside bar {where} "
            f"(body {candle.body_ratio:.0%} of range, {candle.compression:.0%} of prior range)",
        )

    if context.has_patience_candle and context.patience_direction == direction:
        return PatienceScore(
            max_weight, None, 'fallback',
            f"{direction.capitalize()} patience candle flagged (OHLC unavailable for quality check)",
        )

    if context.has_patience_candle:
        return PatienceScore(
            0.0, None, 'fallback',
            f"Patience candle flagged {context.patience_direction or 'without direction'}, "
            f"does not match {direction} setup",
        )

    return PatienceScore(0.0, None, 'none', "No patience candle")


def identify_patience_candles(bars: Sequence[Bar]) -> List[Bar]:
    """
    Small-bodied inside bars in a series.

    A bar qualifies when its body is under half the average body size and
    its range is within the prior bar's range (touching allowed).
    """
    if len(bars) < 2:
        return []

    average_body = safe_divide_value(sum(b.body for b in bars), len(bars), 1.0)

    patience_candles = []
    for previous, bar in zip(bars, bars[1:]):
        if bar.body < average_body * 0.5 and bar.high <= previous.high and bar.low >= previous.low:
            patience_candles.append(bar)
    return patience_candles


def detect_patience_near_level(
    bars: Sequence[Bar],
    level_price: float,
    max_candle_size: float = DEFAULT_DETECTION_CONFIG.patience_candle_max_size_percent,
    proximity_pct: float = DEFAULT_DETECTION_CONFIG.level_proximity_percent,
) -> PatienceResult:
    """
    Count small candles closing at a level over the last five bars.

    A bar counts when its body is under `max_candle_size` percent of its
    open and its close is within `proximity_pct` percent of the level.
    Detected when at least two bars count.
    """
    if not bars or len(bars) < 3:
        return PatienceResult(detected=False, count=0)

    count = 0
    for bar in bars[-5:]:
        candle_size = (bar.body / bar.open * 100) if is_positive_finite(bar.open) else 0.0
        distance = (
            abs(bar.close - level_price) / level_price * 100
            if is_positive_finite(level_price)
            else 100.0
        )
        if candle_size < max_candle_size and distance < proximity_pct:
            count += 1

    return PatienceResult(detected=count >= 2, count=count)


def score_patience_quality(result: PatienceResult) -> float:
    """v1 P component: 40 for any patience plus 20 per candle, capped at 100."""
    if not result.detected:
        return 0.0
    return 40.0 + min(result.count * 20, 60)
