"""
Reusable market data fixtures for testing.

Deterministic bar series (trend, zig-zag range) and MarketContext builders.
"""

from dataclasses import replace
from typing import List, Sequence

import numpy as np

from ltpcore.shared.models.context import MarketContext
from ltpcore.shared.models.data import Bar

FIVE_MINUTES_MS = 5 * 60 * 1000


def make_bars(closes: Sequence[float], wick: float = 0.5, volume: float = 1000.0) -> List[Bar]:
    """
    Bars from a close series.

    Each bar opens at the prior close and has a symmetric wick of `wick`
    around its close.
    """
    bars = []
    previous = closes[0]
    for i, close in enumerate(closes):
        bars.append(Bar(
            open=previous,
            high=max(previous, close) + wick,
            low=min(previous, close) - wick,
            close=close,
            volume=volume,
            timestamp=i * FIVE_MINUTES_MS,
        ))
        previous = close
    return bars


def generate_uptrend_bars(periods: int = 30, base_price: float = 100.0, step: float = 1.0) -> List[Bar]:
    """Steady uptrend: every bar makes a higher high and a higher low."""
    return make_bars([base_price + i * step for i in range(periods)])


def generate_downtrend_bars(periods: int = 30, base_price: float = 130.0, step: float = 1.0) -> List[Bar]:
    """Steady downtrend: every bar makes a lower high and a lower low."""
    return make_bars([base_price - i * step for i in range(periods)])


def generate_zigzag_bars(cycles: int = 3, low: float = 100.0, high: float = 110.0, step: float = 2.0) -> List[Bar]:
    """
    Range bound zig-zag between `low` and `high` closes.

    Each bar's high/low sits 0.5 around its close, so peaks and troughs
    are clean swing points that repeat every cycle.
    """
    up = list(np.arange(low, high, step))
    down = list(np.arange(high, low, -step))
    closes = (up + down) * cycles + [low]
    return [
        Bar(
            open=float(c),
            high=float(c) + 0.5,
            low=float(c) - 0.5,
            close=float(c),
            volume=1000.0,
            timestamp=i * FIVE_MINUTES_MS,
        )
        for i, c in enumerate(closes)
    ]


def generate_noisy_bars(periods: int = 100, base_price: float = 100.0, seed: int = 42) -> List[Bar]:
    """Random walk with realistic wicks, seeded for reproducibility."""
    rng = np.random.RandomState(seed)
    closes = base_price * np.exp(np.cumsum(rng.normal(0, 0.01, periods)))
    bars = []
    previous = base_price
    for i, close in enumerate(closes):
        high = max(previous, close) * (1 + abs(rng.normal(0, 0.003)))
        low = min(previous, close) * (1 - abs(rng.normal(0, 0.003)))
        bars.append(Bar(
            open=round(previous, 2),
            high=round(high, 2),
            low=round(low, 2),
            close=round(float(close), 2),
            volume=round(1_000_000 * (1 + abs(rng.normal(0, 0.2))), 2),
            timestamp=i * FIVE_MINUTES_MS,
        ))
        previous = float(close)
    return bars


def make_context(**overrides) -> MarketContext:
    """
    Bullish reference context.

    price 101, ema8 100.6 / ema21 100, vwap 100.5, call wall 105, put wall 98,
    positive gamma, bullish patience flag, no OHLC. Scores 88 raw.
    """
    context = MarketContext(
        current_price=101.0,
        previous_close=100.8,
        ema8=100.6,
        ema21=100.0,
        vwap=100.5,
        call_wall=105.0,
        put_wall=98.0,
        zero_gamma=99.0,
        gamma_exposure=50000.0,
        has_patience_candle=True,
        patience_direction='bullish',
    )
    return replace(context, **overrides)


def make_bearish_context(**overrides) -> MarketContext:
    """Mirror of make_context below the cloud with negative gamma."""
    context = MarketContext(
        current_price=99.0,
        previous_close=99.2,
        ema8=99.4,
        ema21=100.0,
        vwap=99.5,
        call_wall=102.0,
        put_wall=95.0,
        zero_gamma=101.0,
        gamma_exposure=-50000.0,
        has_patience_candle=True,
        patience_direction='bearish',
    )
    return replace(context, **overrides)
