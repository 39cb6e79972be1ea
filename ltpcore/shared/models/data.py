"""
Data models for intraday price bars.

Bars are produced by an external market-data provider, ordered
chronologically and never mutated here. Helpers convert between bar
sequences and the pandas DataFrame shape used by the vectorised
indicator functions.
"""

from dataclasses import dataclass
from typing import Iterable, List, Sequence

import pandas as pd

BAR_COLUMNS = ['timestamp', 'open', 'high', 'low', 'close', 'volume']


@dataclass(frozen=True)
class Bar:
    """
    Single OHLCV candlestick.

    Attributes:
        open: Opening price
        high: Highest price during period
        low: Lowest price during period
        close: Closing price
        volume: Traded volume
        timestamp: Bar open time (epoch milliseconds)

    No OHLC relationship checks are enforced here: bad provider data must
    degrade downstream, not raise at construction time. Use
    ``ltpcore.indicators.validation_utils.validate_bars`` to inspect it.
    """
    open: float
    high: float
    low: float
    close: float
    volume: float = 0.0
    timestamp: int = 0

    @property
    def range(self) -> float:
        return self.high - self.low

    @property
    def body(self) -> float:
        return abs(self.close - self.open)

    @property
    def typical_price(self) -> float:
        return (self.high + self.low + self.close) / 3

    @property
    def midpoint(self) -> float:
        return (self.high + self.low) / 2

    @property
    def is_bullish(self) -> bool:
        return self.close > self.open


def bars_to_dataframe(bars: Sequence[Bar]) -> pd.DataFrame:
    """
    Convert bars to a DataFrame with columns [timestamp, open, high, low, close, volume].

    The frame gets a DatetimeIndex built from the millisecond timestamps so
    period-based indicators (e.g. daily-reset VWAP) can group on it.
    """
    df = pd.DataFrame(
        [(b.timestamp, b.open, b.high, b.low, b.close, b.volume) for b in bars],
        columns=BAR_COLUMNS,
    )
    df.index = pd.to_datetime(df['timestamp'], unit='ms')
    df.index.name = None
    return df


def bars_from_dataframe(df: pd.DataFrame) -> List[Bar]:
    """
    Convert an OHLCV DataFrame back into Bars.

    Accepts either a 'timestamp' column (epoch ms) or a DatetimeIndex.

    Raises:
        ValueError: If price columns are missing
    """
    required = {'open', 'high', 'low', 'close'}
    missing = required - set(df.columns)
    if missing:
        raise ValueError(f"DataFrame missing required columns: {sorted(missing)}")

    if 'timestamp' in df.columns:
        timestamps: Iterable[int] = (int(t) for t in df['timestamp'])
    elif isinstance(df.index, pd.DatetimeIndex):
        timestamps = (int(ts.value // 1_000_000) for ts in df.index)
    else:
        timestamps = (0 for _ in range(len(df)))

    volumes = df['volume'] if 'volume' in df.columns else pd.Series(0.0, index=df.index)

    return [
        Bar(
            open=float(o),
            high=float(h),
            low=float(l),
            close=float(c),
            volume=float(v),
            timestamp=t,
        )
        for o, h, l, c, v, t in zip(df['open'], df['high'], df['low'], df['close'], volumes, timestamps)
    ]
