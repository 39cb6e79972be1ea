"""
Volume Indicators Module

Implements Volume-Weighted Average Price (VWAP) over typical price
(high + low + close) / 3.
"""

from typing import Optional, Sequence
import logging

import numpy as np
import pandas as pd

from ltpcore.shared.models.data import Bar
from ltpcore.shared.utils.numeric import safe_divide_value

logger = logging.getLogger(__name__)


def calculate_vwap(bars: Sequence[Bar]) -> float:
    """
    Session VWAP of a bar sequence.

    Args:
        bars: Bars, oldest first

    Returns:
        float: sum(typical_price * volume) / sum(volume); 0.0 for empty input
        or zero total volume.
    """
    if not bars:
        return 0.0

    typical = np.fromiter((b.typical_price for b in bars), dtype=float, count=len(bars))
    volume = np.fromiter((b.volume for b in bars), dtype=float, count=len(bars))

    total_volume = float(volume.sum())
    if total_volume <= 0:
        logger.debug("VWAP requested on zero total volume - returning 0")
        return 0.0

    return safe_divide_value(float((typical * volume).sum()), total_volume, 0.0)


def compute_vwap(df: pd.DataFrame, reset_period: Optional[str] = None) -> pd.Series:
    """
    Running VWAP series.

    Args:
        df: DataFrame with 'high', 'low', 'close', 'volume' columns
        reset_period: Pandas frequency to reset on (e.g. 'D' for daily
                      sessions). If None, VWAP is cumulative.

    Returns:
        pd.Series: VWAP values; NaN where cumulative volume is still zero

    Raises:
        ValueError: If df is missing required columns, or reset_period is
                    given without a DatetimeIndex
    """
    required_cols = ['high', 'low', 'close', 'volume']
    missing_cols = [col for col in required_cols if col not in df.columns]
    if missing_cols:
        raise ValueError(f"DataFrame missing required columns: {missing_cols}")

    typical_price = (df['high'] + df['low'] + df['close']) / 3
    pv = typical_price * df['volume']

    if reset_period:
        if not isinstance(df.index, pd.DatetimeIndex):
            raise ValueError("DataFrame must have DatetimeIndex for period-based VWAP")
        grouper = pd.Grouper(freq=reset_period)
        cum_pv = pv.groupby(grouper).cumsum()
        cum_vol = df['volume'].groupby(grouper).cumsum()
    else:
        cum_pv = pv.cumsum()
        cum_vol = df['volume'].cumsum()

    vwap = cum_pv / cum_vol.replace(0, np.nan)
    return vwap
