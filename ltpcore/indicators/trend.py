"""
Trend Indicators Module

Implements the SMA-seeded exponential moving average used for the
8/21 EMA cloud and the 9/21 timeframe trend read.
"""

from typing import Sequence
import logging

import numpy as np
import pandas as pd

from ltpcore.shared.utils.error_policy import enforce_positive_period
from ltpcore.shared.utils.numeric import safe_divide_value

logger = logging.getLogger(__name__)


def calculate_ema(values: Sequence[float], period: int) -> float:
    """
    Latest value of an exponential moving average.

    The average is seeded with the simple mean of the first `period` values,
    then smoothed with multiplier 2 / (period + 1).

    Args:
        values: Price series, oldest first
        period: EMA period

    Returns:
        float: Latest EMA value. 0.0 for an empty series; the last value
        when the series is shorter than `period`.

    Raises:
        ContractViolationError: If period is not a positive integer
    """
    enforce_positive_period(period)

    data = np.asarray(values, dtype=float)
    if data.size == 0:
        return 0.0
    if data.size < period:
        logger.debug(f"EMA({period}) on {data.size} values - returning last value")
        return float(data[-1])

    multiplier = 2 / (period + 1)
    ema = safe_divide_value(float(data[:period].sum()), period, 0.0)

    for price in data[period:]:
        ema = (price - ema) * multiplier + ema

    return float(ema)


def compute_ema_series(close: pd.Series, period: int) -> pd.Series:
    """
    Full SMA-seeded EMA series aligned to `close`.

    Values before the seed bar are NaN. Unlike ``Series.ewm(adjust=False)``
    the first value is the SMA of the first `period` closes, so the last
    element always equals ``calculate_ema(close, period)``.

    Raises:
        ContractViolationError: If period is not a positive integer
    """
    enforce_positive_period(period)

    data = close.to_numpy(dtype=float)
    out = np.full(data.size, np.nan)
    if data.size < period:
        return pd.Series(out, index=close.index)

    multiplier = 2 / (period + 1)
    ema = float(data[:period].sum()) / period
    out[period - 1] = ema
    for i in range(period, data.size):
        ema = (data[i] - ema) * multiplier + ema
        out[i] = ema

    return pd.Series(out, index=close.index)
