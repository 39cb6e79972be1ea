"""
Logging utilities for the scoring pipeline.

Consistent, structured loguru helpers for evaluation summaries, grade
transitions, degraded inputs and timing. Logging is diagnostic only and
never feeds back into a score.
"""

import time
from typing import Any, Dict, Optional

from loguru import logger


def log_score_evaluation(
    symbol: str,
    strategy: str,
    direction: str,
    raw_score: float,
    final_score: float,
    grade: str,
    components: Optional[Dict[str, float]] = None,
    level: str = "DEBUG",
) -> None:
    """
    Log a completed score evaluation.

    Args:
        symbol: Ticker being scored (may be empty for anonymous evaluations)
        strategy: Scorer name ('ltp2_gamma', 'ltp_v1')
        direction: Scoring direction
        raw_score: Unsmoothed total
        final_score: Score after smoothing
        grade: Resulting grade label
        components: Optional component name -> points
        level: Log level
    """
    log_func = getattr(logger, level.lower(), logger.debug)

    label = symbol or "-"
    log_func(
        f"📊 [{label}] {strategy}: {final_score:.1f} (raw {raw_score:.2f}) "
        f"{direction} -> {grade}"
    )
    if components:
        for name, value in components.items():
            log_func(f"   └─ {name}: {value:.2f}")


def log_grade_transition(
    symbol: str,
    previous_grade: Optional[str],
    new_grade: str,
    smoothed_score: float,
    grade_locked: bool,
) -> None:
    """Log a grade change, or a grade held by the hysteresis buffer."""
    label = symbol or "-"
    if grade_locked:
        logger.debug(
            f"🔒 [{label}] Grade held at {new_grade} by buffer (smoothed {smoothed_score:.0f})"
        )
    elif previous_grade is not None and previous_grade != new_grade:
        logger.info(
            f"🔄 [{label}] Grade change {previous_grade} -> {new_grade} (smoothed {smoothed_score:.0f})"
        )


def log_degraded_input(
    component: str,
    reason: str,
    diagnostics: Optional[Dict[str, Any]] = None,
    level: str = "WARNING",
) -> None:
    """
    Log an input that forced a neutral/empty fallback.

    Args:
        component: Component that degraded (e.g. 'key_levels')
        reason: Human-readable reason
        diagnostics: Optional values to include
        level: Log level
    """
    log_func = getattr(logger, level.lower(), logger.warning)

    log_func(f"⚠️  [{component}] Degraded input: {reason}")
    if diagnostics:
        for key, value in diagnostics.items():
            if isinstance(value, float):
                log_func(f"   └─ {key}: {value:.4f}")
            else:
                log_func(f"   └─ {key}: {value}")


def log_timing(
    operation_name: str,
    duration_ms: float,
    symbol: Optional[str] = None,
    level: str = "DEBUG",
) -> None:
    """Log timing information for an operation."""
    log_func = getattr(logger, level.lower(), logger.debug)

    symbol_str = f" [{symbol}]" if symbol else ""

    if duration_ms < 100:
        emoji = "⚡"
    elif duration_ms < 1000:
        emoji = "⏱️"
    else:
        emoji = "🐌"

    log_func(f"{emoji} {operation_name}{symbol_str}: {duration_ms:.0f}ms")


class TimingContext:
    """Context manager for timing operations."""

    def __init__(self, operation_name: str, symbol: Optional[str] = None):
        self.operation_name = operation_name
        self.symbol = symbol
        self.start_time = None
        self.duration_ms = None

    def __enter__(self):
        self.start_time = time.perf_counter()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.duration_ms = (time.perf_counter() - self.start_time) * 1000
        log_timing(self.operation_name, self.duration_ms, self.symbol)
        return False  # Don't suppress exceptions


def time_operation(operation_name: str, symbol: Optional[str] = None) -> TimingContext:
    """
    Context manager for timing operations.

    Usage:
        with time_operation("identify_key_levels", "SPY"):
            ...
    """
    return TimingContext(operation_name, symbol)
