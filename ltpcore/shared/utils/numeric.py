"""
Numeric safety utilities.

Keeps NaN and Infinity out of scores, ratios and serialized payloads.
Every division in the scoring core goes through these helpers so that a
zero or non-finite denominator degrades to a defined fallback instead of
raising or leaking an invalid float downstream.
"""

import math
from dataclasses import dataclass
from typing import Any, Literal, Optional

import numpy as np


SafeDivideReason = Literal['zero_denominator', 'invalid_input', 'infinity_result']
SafePercentReason = Literal['zero_base', 'invalid_input']


@dataclass(frozen=True)
class SafeDivideResult:
    """Outcome of a guarded division."""
    value: float
    reason: Optional[SafeDivideReason] = None


@dataclass(frozen=True)
class SafePercentResult:
    """Outcome of a guarded percent-change computation."""
    value: float
    reason: Optional[SafePercentReason] = None


def is_finite_number(value: Any) -> bool:
    """True for real numbers that are neither NaN nor +/-Infinity (bools excluded)."""
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float, np.integer, np.floating)):
        return math.isfinite(float(value))
    return False


def is_positive_finite(value: Any) -> bool:
    return is_finite_number(value) and value > 0


def safe_divide(numerator: float, denominator: float, fallback: float = 0.0) -> SafeDivideResult:
    """
    Divide with explicit handling of invalid inputs.

    Args:
        numerator: Value to divide
        denominator: Value to divide by
        fallback: Returned when the division is unsafe (default 0)

    Returns:
        SafeDivideResult with the value and, when the fallback was used,
        the reason it was used.

    Examples:
        safe_divide(10, 2)   -> SafeDivideResult(value=5.0)
        safe_divide(10, 0)   -> SafeDivideResult(value=0, reason='zero_denominator')
    """
    if not is_finite_number(numerator) or not is_finite_number(denominator):
        return SafeDivideResult(fallback, 'invalid_input')

    if denominator == 0:
        return SafeDivideResult(fallback, 'zero_denominator')

    result = numerator / denominator

    # Tiny denominators can still overflow
    if not is_finite_number(result):
        return SafeDivideResult(fallback, 'infinity_result')

    return SafeDivideResult(result)


def safe_divide_value(numerator: float, denominator: float, fallback: float = 0.0) -> float:
    """Guarded division returning only the value."""
    return safe_divide(numerator, denominator, fallback).value


def safe_percent_change(current: float, previous: float) -> SafePercentResult:
    """Percent change from previous to current, 0 when the base is zero or invalid."""
    if not is_finite_number(current) or not is_finite_number(previous):
        return SafePercentResult(0.0, 'invalid_input')

    if previous == 0:
        return SafePercentResult(0.0, 'zero_base')

    change = (current - previous) / previous * 100
    if not is_finite_number(change):
        return SafePercentResult(0.0, 'invalid_input')

    return SafePercentResult(change)


def safe_percent_change_value(current: float, previous: float) -> float:
    return safe_percent_change(current, previous).value


def clamp(value: float, minimum: float, maximum: float) -> float:
    """Clamp value into [minimum, maximum]; non-finite values collapse to minimum."""
    if not is_finite_number(value):
        return minimum
    return max(minimum, min(maximum, value))


def round_half_up(value: float, ndigits: int = 0) -> float:
    """
    Round half away from zero for positives (2.5 -> 3), unlike Python's
    banker's rounding. Scores are compared against integer thresholds, so
    the rounding mode has to be stable and predictable.
    """
    if not is_finite_number(value):
        return 0.0
    factor = 10 ** ndigits
    return math.floor(value * factor + 0.5) / factor


def safe_win_rate(wins: float, total: float) -> float:
    """Win rate in percent (0-100)."""
    return safe_divide_value(wins, total, 0.0) * 100


def safe_profit_factor(gross_profit: float, gross_loss: float) -> float:
    """Gross profit / gross loss; 0 when there are no losses rather than Infinity."""
    if not is_positive_finite(gross_loss):
        return 0.0
    return safe_divide_value(gross_profit, gross_loss, 0.0)


def safe_average(total: float, count: float) -> float:
    return safe_divide_value(total, count, 0.0)


def safe_risk_reward(reward: float, risk: float) -> float:
    """|reward| / |risk|, 0 when the risk is not a positive finite number."""
    if not is_positive_finite(risk):
        return 0.0
    return safe_divide_value(abs(reward), abs(risk), 0.0)


def sanitize_for_json(value: Any) -> Any:
    """Replace a non-finite float with None."""
    if isinstance(value, (float, np.floating)) and not math.isfinite(float(value)):
        return None
    return value


def sanitize_object_for_json(obj: Any) -> Any:
    """Recursively replace NaN/Infinity with None in dicts, lists and tuples."""
    if obj is None:
        return None
    if isinstance(obj, dict):
        return {key: sanitize_object_for_json(val) for key, val in obj.items()}
    if isinstance(obj, (list, tuple)):
        return [sanitize_object_for_json(item) for item in obj]
    return sanitize_for_json(obj)
