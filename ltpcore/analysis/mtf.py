"""
Trend and Multi-Timeframe Analysis

- determine_trend: higher-high/higher-low vs lower-high/lower-low counting
- analyze_timeframe: single-timeframe read (EMA 9/21 trend, structure,
  EMA position, momentum, VWAP position)
- score_trend_alignment: weighted agreement of timeframe trends with a direction
- infer_direction: majority direction across timeframe reads
"""

from typing import Dict, Literal, Mapping, Optional, Sequence

import numpy as np
from loguru import logger

from ltpcore.indicators.trend import compute_ema_series
from ltpcore.indicators.volume import compute_vwap
from ltpcore.shared.config.defaults import (
    DEFAULT_DETECTION_CONFIG,
    DEFAULT_MTF_WEIGHTS,
    UNKNOWN_TIMEFRAME_WEIGHT,
)
from ltpcore.shared.models.data import Bar, bars_to_dataframe
from ltpcore.shared.models.trend import MTFAnalysis
from ltpcore.shared.utils.error_policy import enforce_direction
from ltpcore.shared.utils.logging_utils import log_degraded_input
from ltpcore.shared.utils.numeric import (
    is_positive_finite,
    round_half_up,
    safe_percent_change_value,
)

TrendState = Literal['uptrend', 'downtrend', 'range']

MIN_TIMEFRAME_BARS = 21
STRUCTURE_LOOKBACK = 5


def determine_trend(
    bars: Sequence[Bar],
    min_bars: int = DEFAULT_DETECTION_CONFIG.min_trend_bars,
) -> TrendState:
    """
    Classify a bar series as uptrend, downtrend or range.

    Counts bar-to-bar transitions: higher highs, higher lows, lower highs,
    lower lows. An uptrend needs both higher highs and higher lows on at
    least half the bars; downtrend mirrors it.

    Args:
        bars: Bars, oldest first
        min_bars: Minimum bars required

    Returns:
        'uptrend', 'downtrend' or 'range' ('range' for fewer than min_bars)
    """
    if len(bars) < min_bars:
        log_degraded_input('determine_trend', f"need {min_bars} bars, got {len(bars)}", level="DEBUG")
        return 'range'

    highs = np.fromiter((b.high for b in bars), dtype=float, count=len(bars))
    lows = np.fromiter((b.low for b in bars), dtype=float, count=len(bars))

    high_diff = np.diff(highs)
    low_diff = np.diff(lows)

    higher_highs = int((high_diff > 0).sum())
    higher_lows = int((low_diff > 0).sum())
    lower_highs = int((high_diff < 0).sum())
    lower_lows = int((low_diff < 0).sum())

    threshold = len(bars) * 0.5

    if higher_highs >= threshold and higher_lows >= threshold:
        return 'uptrend'
    elif lower_highs >= threshold and lower_lows >= threshold:
        return 'downtrend'

    return 'range'


def _structure_of(highs: np.ndarray, lows: np.ndarray) -> TrendState:
    """Structure of the last few bars; equal highs/lows do not break a sequence."""
    rising_highs = bool(np.all(np.diff(highs) >= 0))
    rising_lows = bool(np.all(np.diff(lows) >= 0))
    falling_highs = bool(np.all(np.diff(highs) <= 0))
    falling_lows = bool(np.all(np.diff(lows) <= 0))

    if rising_highs and rising_lows:
        return 'uptrend'
    if falling_highs and falling_lows:
        return 'downtrend'
    return 'range'


def analyze_timeframe(timeframe: str, bars: Sequence[Bar]) -> MTFAnalysis:
    """
    Build a trend read for one timeframe.

    Args:
        timeframe: Timeframe tag ('5m', '1h', 'daily', ...)
        bars: Bars for that timeframe, oldest first

    Returns:
        MTFAnalysis; a neutral read when fewer than 21 bars are available
    """
    if len(bars) < MIN_TIMEFRAME_BARS:
        log_degraded_input(
            'analyze_timeframe',
            f"{timeframe}: need {MIN_TIMEFRAME_BARS} bars, got {len(bars)}",
            level="DEBUG",
        )
        return MTFAnalysis.neutral(timeframe)

    df = bars_to_dataframe(bars)
    current_price = float(df['close'].iloc[-1])
    ema9 = float(compute_ema_series(df['close'], 9).iloc[-1])
    ema21 = float(compute_ema_series(df['close'], 21).iloc[-1])

    if current_price > ema9 > ema21:
        trend = 'bullish'
    elif current_price < ema9 < ema21:
        trend = 'bearish'
    else:
        trend = 'neutral'

    recent = df.tail(STRUCTURE_LOOKBACK)
    structure = _structure_of(recent['high'].to_numpy(), recent['low'].to_numpy())

    if current_price > ema9 and current_price > ema21:
        ema_position = 'above_all'
    elif current_price < ema9 and current_price < ema21:
        ema_position = 'below_all'
    else:
        ema_position = 'mixed'

    change = abs(safe_percent_change_value(current_price, float(df['close'].iloc[0])))
    if change > 2:
        momentum = 'strong'
    elif change > 1:
        momentum = 'moderate'
    else:
        momentum = 'weak'

    vwap_position: Optional[str] = None
    vwap = float(compute_vwap(df).iloc[-1])
    if is_positive_finite(vwap):
        vwap_position = 'above' if current_price >= vwap else 'below'

    return MTFAnalysis(
        timeframe=timeframe,
        trend=trend,
        structure=structure,
        ema_position=ema_position,
        momentum=momentum,
        orb_status=None,
        vwap_position=vwap_position,
    )


def score_trend_alignment(
    analyses: Sequence[MTFAnalysis],
    direction: str,
    weights: Optional[Mapping[str, float]] = None,
) -> float:
    """
    Score multi-timeframe agreement with a direction (T component).

    Each timeframe whose trend matches `direction` contributes
    weight * 100; timeframes missing from `weights` count 0.1.

    Args:
        analyses: Per-timeframe trend reads
        direction: 'bullish' or 'bearish'
        weights: Timeframe -> weight (defaults to the standard MTF weights)

    Returns:
        Rounded score (0-100 with the default weights)

    Raises:
        ContractViolationError: If direction is not 'bullish' or 'bearish'
    """
    enforce_direction(direction)
    tf_weights: Mapping[str, float] = weights or DEFAULT_MTF_WEIGHTS

    score = 0.0
    for analysis in analyses:
        if analysis.trend == direction:
            score += tf_weights.get(analysis.timeframe, UNKNOWN_TIMEFRAME_WEIGHT) * 100

    return round_half_up(score)


def infer_direction(analyses: Sequence[MTFAnalysis]) -> Literal['bullish', 'bearish']:
    """Bullish when bullish timeframes outnumber bearish ones, otherwise bearish."""
    counts: Dict[str, int] = {'bullish': 0, 'bearish': 0}
    for analysis in analyses:
        if analysis.trend in counts:
            counts[analysis.trend] += 1

    direction = 'bullish' if counts['bullish'] > counts['bearish'] else 'bearish'
    logger.debug(f"MTF direction {direction} (bullish={counts['bullish']}, bearish={counts['bearish']})")
    return direction
