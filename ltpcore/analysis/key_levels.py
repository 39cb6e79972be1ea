"""
Key Price Levels Detection

Two sources of levels:
- Clustered swing levels: swing highs/lows merged within a relative price
  tolerance; clusters touched at least twice become support/resistance.
- Reference levels: PDH/PDL/PDC, session VWAP, opening range, HOD/LOD,
  intraday EMAs and the daily 200 SMA.

Plus level-proximity scoring for the L component.
"""

from dataclasses import dataclass
from typing import List, Optional, Sequence

import numpy as np
from loguru import logger

from ltpcore.indicators.trend import calculate_ema
from ltpcore.indicators.validation_utils import validate_bars
from ltpcore.indicators.volume import calculate_vwap
from ltpcore.shared.config.defaults import DEFAULT_DETECTION_CONFIG
from ltpcore.shared.models.data import Bar
from ltpcore.shared.models.levels import KeyLevel, LevelResult
from ltpcore.shared.utils.logging_utils import log_degraded_input
from ltpcore.shared.utils.numeric import (
    is_positive_finite,
    round_half_up,
    safe_divide_value,
)

CLUSTER_TOLERANCE = 0.005  # 0.5% relative price distance
SWING_WINDOW = 2           # bars on each side that must be exceeded
MAX_LEVELS = 10
MIN_CLUSTER_TOUCHES = 2
STRENGTH_PER_TOUCH = 25


@dataclass
class _Cluster:
    price: float
    type: str
    count: int


def _find_swing_points(bars: Sequence[Bar]) -> List[tuple]:
    """Return (price, 'high'|'low') swing points in bar order."""
    highs = np.fromiter((b.high for b in bars), dtype=float, count=len(bars))
    lows = np.fromiter((b.low for b in bars), dtype=float, count=len(bars))

    points = []
    for i in range(SWING_WINDOW, len(bars) - SWING_WINDOW):
        neighbours = np.r_[i - SWING_WINDOW:i, i + 1:i + SWING_WINDOW + 1]
        if np.all(highs[i] > highs[neighbours]):
            points.append((float(highs[i]), 'high'))
        if np.all(lows[i] < lows[neighbours]):
            points.append((float(lows[i]), 'low'))
    return points


def identify_key_levels(
    bars: Sequence[Bar],
    timeframe: str = '5m',
    min_bars: int = DEFAULT_DETECTION_CONFIG.min_level_bars,
) -> List[KeyLevel]:
    """
    Cluster swing highs/lows into support and resistance levels.

    A bar is a swing high when its high is strictly above the highs of the
    two bars before and after it (mirror rule for swing lows). Each swing
    point joins the first existing cluster within 0.5% of it, and the
    cluster price moves to the midpoint of its old price and the new point.
    That running midpoint depends on arrival order and is not a true
    centroid; it is kept as an accepted approximation.

    Args:
        bars: Bars, oldest first
        timeframe: Timeframe tag for the produced levels
        min_bars: Minimum bars required (fewer returns an empty list)

    Returns:
        Up to 10 levels, strongest first; strength = min(touches * 25, 100)
    """
    if len(bars) < min_bars:
        log_degraded_input(
            'key_levels',
            f"need {min_bars} bars, got {len(bars)}",
            level="DEBUG",
        )
        return []

    validate_bars(bars, raise_on_error=False)

    clusters: List[_Cluster] = []
    for price, kind in _find_swing_points(bars):
        existing = next(
            (
                c for c in clusters
                if safe_divide_value(abs(c.price - price), price, float('inf')) < CLUSTER_TOLERANCE
            ),
            None,
        )
        if existing is not None:
            existing.count += 1
            existing.price = (existing.price + price) / 2
        else:
            clusters.append(_Cluster(
                price=price,
                type='resistance' if kind == 'high' else 'support',
                count=1,
            ))

    levels = [
        KeyLevel(
            type=cluster.type,
            price=round_half_up(cluster.price, 2),
            timeframe=timeframe,
            strength=min(cluster.count * STRENGTH_PER_TOUCH, 100),
        )
        for cluster in clusters
        if cluster.count >= MIN_CLUSTER_TOUCHES
    ]

    levels.sort(key=lambda level: level.strength, reverse=True)

    logger.debug(f"Identified {len(levels)} key levels from {len(clusters)} swing clusters")
    return levels[:MAX_LEVELS]


def calculate_reference_levels(
    daily_bars: Sequence[Bar],
    intraday_bars: Sequence[Bar],
) -> List[KeyLevel]:
    """
    Derive the standard intraday reference levels.

    Args:
        daily_bars: Daily bars, oldest first; the last bar is today (may be incomplete)
        intraday_bars: Today's intraday bars (5m), oldest first

    Returns:
        Levels in a fixed order: PDH/PDL/PDC, VWAP, ORB high/low, HOD/LOD,
        EMA 9/21, SMA 200. Levels whose inputs are missing are skipped.
    """
    levels: List[KeyLevel] = []

    if len(daily_bars) >= 2:
        prev_day = daily_bars[-2]
        levels.extend([
            KeyLevel(type='pdh', price=prev_day.high, timeframe='daily', strength=80),
            KeyLevel(type='pdl', price=prev_day.low, timeframe='daily', strength=80),
            KeyLevel(type='pdc', price=prev_day.close, timeframe='daily', strength=70),
        ])

    if intraday_bars:
        vwap = calculate_vwap(intraday_bars)
        if is_positive_finite(vwap):
            levels.append(KeyLevel(type='vwap', price=vwap, timeframe='intraday', strength=75))

        # Opening range: first 15 minutes of 5m bars
        orb_bars = intraday_bars[:3]
        if len(orb_bars) >= 3:
            levels.extend([
                KeyLevel(type='orb_high', price=max(b.high for b in orb_bars),
                         timeframe='intraday', strength=85),
                KeyLevel(type='orb_low', price=min(b.low for b in orb_bars),
                         timeframe='intraday', strength=85),
            ])

        levels.extend([
            KeyLevel(type='hod', price=max(b.high for b in intraday_bars),
                     timeframe='intraday', strength=70),
            KeyLevel(type='lod', price=min(b.low for b in intraday_bars),
                     timeframe='intraday', strength=70),
        ])

        if len(intraday_bars) >= 21:
            closes = [b.close for b in intraday_bars]
            levels.extend([
                KeyLevel(type='ema_9', price=calculate_ema(closes, 9),
                         timeframe='intraday', strength=65),
                KeyLevel(type='ema_21', price=calculate_ema(closes, 21),
                         timeframe='intraday', strength=70),
            ])

    if len(daily_bars) >= 200:
        closes = [b.close for b in daily_bars[-200:]]
        levels.append(KeyLevel(type='sma_200', price=sum(closes) / 200,
                               timeframe='daily', strength=95))

    return levels


def score_level_proximity(
    current_price: float,
    levels: Sequence[KeyLevel],
    proximity_threshold: float = DEFAULT_DETECTION_CONFIG.level_proximity_percent,
) -> LevelResult:
    """
    Score how well price sits on a key level (L component, 0-100).

    Each level within `proximity_threshold` percent of price scores
    (1 - distance / threshold) * 50 for proximity plus strength / 100 * 50;
    the best-scoring level wins.

    Args:
        current_price: Current price
        levels: Candidate levels
        proximity_threshold: Max distance in percent

    Returns:
        LevelResult with the rounded score and the chosen level (None when
        nothing is close enough or price is invalid)
    """
    if not is_positive_finite(current_price) or proximity_threshold <= 0:
        return LevelResult(score=0, level=None)

    best_score = 0.0
    best_level: Optional[KeyLevel] = None

    for level in levels:
        distance = abs(current_price - level.price) / current_price * 100
        if distance > proximity_threshold:
            continue

        proximity_score = (1 - safe_divide_value(distance, proximity_threshold, 1.0)) * 50
        strength_score = safe_divide_value(level.strength, 100, 0.0) * 50
        score = proximity_score + strength_score

        if score > best_score:
            best_score = score
            best_level = level

    return LevelResult(score=round_half_up(best_score), level=best_level)

