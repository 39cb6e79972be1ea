"""
Technical Indicators Package

Provides:
- Trend indicators (SMA-seeded EMA)
- Volume indicators (VWAP)
- Bar validation utilities

Scalar helpers take bar or price sequences and return floats; series
helpers take pandas objects and return index-aligned Series.
"""

from ltpcore.indicators.trend import (
    calculate_ema,
    compute_ema_series,
)

from ltpcore.indicators.volume import (
    calculate_vwap,
    compute_vwap,
)

from ltpcore.indicators.validation_utils import (
    validate_bars,
    DataValidationError,
)

__all__ = [
    # Trend
    'calculate_ema',
    'compute_ema_series',
    # Volume
    'calculate_vwap',
    'compute_vwap',
    # Validation
    'validate_bars',
    'DataValidationError',
]
