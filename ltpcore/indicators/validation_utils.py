"""
Bar Data Validation Utilities

Centralised input checks for bar sequences. The scoring paths call these
in reporting mode (raise_on_error=False) and only log: malformed market
data must degrade a score, not abort it. Callers that want a hard gate
can opt into raise_on_error=True.
"""

from typing import Optional, Sequence, Union
import logging

import numpy as np
import pandas as pd

from ltpcore.shared.models.data import Bar, bars_to_dataframe

logger = logging.getLogger(__name__)


class DataValidationError(ValueError):
    """Raised when bar data fails validation checks."""


def validate_bars(
    bars: Union[Sequence[Bar], pd.DataFrame],
    check_nan: bool = True,
    check_positive_prices: bool = True,
    check_candle_integrity: bool = True,
    check_positive_volume: bool = True,
    min_rows: Optional[int] = None,
    raise_on_error: bool = False,
) -> dict:
    """
    Validate bars before level or trend analysis.

    Args:
        bars: Bar sequence or OHLCV DataFrame
        check_nan: Check for NaN/Inf in price columns
        check_positive_prices: Verify H/L/C > 0
        check_candle_integrity: Verify high >= low
        check_positive_volume: Verify volume >= 0
        min_rows: Minimum required rows (None = no minimum)
        raise_on_error: Raise DataValidationError instead of returning

    Returns:
        dict with:
            - valid: bool indicating if all checks passed
            - errors: list of error messages
            - warnings: list of warning messages

    Raises:
        DataValidationError: If validation fails and raise_on_error=True
    """
    df = bars if isinstance(bars, pd.DataFrame) else bars_to_dataframe(bars)
    result = {"valid": True, "errors": [], "warnings": []}

    missing_cols = [col for col in ("high", "low", "close") if col not in df.columns]
    if missing_cols:
        result["errors"].append(f"Missing required columns: {missing_cols}")
        result["valid"] = False
        if raise_on_error:
            raise DataValidationError("; ".join(result["errors"]))
        return result

    if min_rows is not None and len(df) < min_rows:
        result["errors"].append(f"Too few bars: need {min_rows}, got {len(df)}")
        result["valid"] = False

    if check_nan and len(df) > 0:
        for col in [c for c in ("open", "high", "low", "close") if c in df.columns]:
            bad = (~np.isfinite(df[col].astype(float))).sum()
            if bad > 0:
                bad_pct = bad / len(df) * 100
                message = f"Column '{col}' has {bad} non-finite values ({bad_pct:.1f}%)"
                if bad_pct > 10:
                    result["errors"].append(message)
                    result["valid"] = False
                else:
                    result["warnings"].append(message)

    if check_positive_prices:
        for col in ("high", "low", "close"):
            non_positive = (df[col] <= 0).sum()
            if non_positive > 0:
                result["errors"].append(f"Column '{col}' has {non_positive} non-positive values")
                result["valid"] = False

    if check_candle_integrity:
        inverted = (df["high"] < df["low"]).sum()
        if inverted > 0:
            result["errors"].append(
                f"Found {inverted} inverted bars (high < low) - data corruption suspected"
            )
            result["valid"] = False

    if check_positive_volume and "volume" in df.columns and len(df) > 0:
        negative_volume = (df["volume"] < 0).sum()
        if negative_volume > 0:
            result["errors"].append(f"Found {negative_volume} negative volume values")
            result["valid"] = False

        zero_volume = (df["volume"] == 0).sum()
        if zero_volume > 0:
            zero_pct = zero_volume / len(df) * 100
            if zero_pct > 10:
                result["warnings"].append(f"Found {zero_volume} zero volume bars ({zero_pct:.1f}%)")

    if raise_on_error and not result["valid"]:
        raise DataValidationError("; ".join(result["errors"]))

    if not result["valid"]:
        logger.warning(f"Bar validation failed: {'; '.join(result['errors'])}")

    return result
