"""
Error policy for the scoring core.

Malformed or sparse market data never raises: it degrades to empty or
neutral results. Exceptions are reserved for programmer-level contract
violations, which must be loud.
"""

import math
from typing import Iterable

VALID_DIRECTIONS = ('bullish', 'bearish')


class LTPError(Exception):
    """Base class for errors raised by ltpcore."""


class ContractViolationError(LTPError, ValueError):
    """Raised when a caller breaks an API contract (bad period, unknown direction, ...)."""


class ExplanationIntegrityError(ContractViolationError):
    """Raised when an explanation is requested for a score whose breakdown is inconsistent."""


class UnknownScorerError(ContractViolationError):
    """Raised when a scorer name is not registered."""


def enforce_direction(direction: str) -> str:
    """
    Validate a trade direction.

    Raises:
        ContractViolationError: If direction is not 'bullish' or 'bearish'
    """
    if direction not in VALID_DIRECTIONS:
        raise ContractViolationError(
            f"Direction must be one of {VALID_DIRECTIONS}, got {direction!r}"
        )
    return direction


def enforce_positive_period(period: int, name: str = "period") -> int:
    """
    Validate an indicator period.

    Raises:
        ContractViolationError: If period is not a positive integer
    """
    if isinstance(period, bool) or not isinstance(period, int) or period <= 0:
        raise ContractViolationError(f"{name} must be a positive integer, got {period!r}")
    return period


def enforce_finite_history(scores: Iterable[float]) -> None:
    """
    Validate a caller-supplied score history.

    Raises:
        ContractViolationError: If any entry is NaN or infinite
    """
    for score in scores:
        if not isinstance(score, (int, float)) or not math.isfinite(score):
            raise ContractViolationError(
                f"Hysteresis history must contain finite numbers, got {score!r}"
            )
