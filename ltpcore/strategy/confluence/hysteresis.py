"""
Grade hysteresis.

Grades are assigned from a smoothed score and held inside a buffer below
their entry threshold, so a single noisy evaluation cannot flip
Sniper -> Decent -> Sniper. Dumb Shit has no buffer and is easy to escape.

State is caller-owned: apply_hysteresis never mutates the state it is
given and returns a fresh one for the caller to store.
"""

from typing import Optional, Tuple

from ltpcore.shared.config.defaults import (
    DEFAULT_GRADE_THRESHOLDS,
    DEFAULT_HYSTERESIS,
    GradeThresholds,
    HysteresisConfig,
)
from ltpcore.shared.models.scoring import Grade, ScoreHysteresisState, ScoreStability
from ltpcore.shared.utils.error_policy import enforce_finite_history
from ltpcore.shared.utils.numeric import round_half_up, safe_average


def standard_grade(score: float, grades: GradeThresholds = DEFAULT_GRADE_THRESHOLDS) -> Grade:
    """Grade from fixed thresholds with no buffer."""
    if score >= grades.sniper:
        return 'Sniper'
    if score >= grades.decent:
        return 'Decent'
    return 'Dumb Shit'


def smooth_score(
    raw_score: float,
    previous_scores: Tuple[float, ...],
    config: HysteresisConfig = DEFAULT_HYSTERESIS,
) -> float:
    """Rounded mean of the last `smoothing_window` previous scores plus the current one."""
    window = previous_scores[-config.smoothing_window:] if config.smoothing_window > 0 else ()
    values = tuple(window) + (raw_score,)
    return round_half_up(safe_average(sum(values), len(values)))


def apply_hysteresis(
    raw_score: float,
    state: Optional[ScoreHysteresisState] = None,
    grades: GradeThresholds = DEFAULT_GRADE_THRESHOLDS,
    config: HysteresisConfig = DEFAULT_HYSTERESIS,
) -> Tuple[Grade, ScoreStability, ScoreHysteresisState]:
    """
    Assign a grade to a raw score given the previous grade history.

    Rules on the smoothed score (defaults: sniper 75, decent 50, buffer 5):
        previous Sniper: hold while > 70; otherwise Decent if >= 50, else Dumb Shit
        previous Decent: Sniper at >= 75; hold while > 45; otherwise Dumb Shit
        otherwise:       Sniper at >= 75, Decent at >= 50
    grade_locked marks a grade held by the buffer below its entry threshold.

    Args:
        raw_score: Clamped raw total for this evaluation
        state: Caller-owned state (None for a fresh symbol)
        grades: Grade thresholds
        config: Smoothing window and history length

    Returns:
        (grade, stability details, new state)

    Raises:
        ContractViolationError: If the supplied history contains non-finite values
    """
    state = state or ScoreHysteresisState.initial()
    enforce_finite_history(state.previous_scores)

    smoothed = smooth_score(raw_score, state.previous_scores, config)
    previous_grade = state.previous_grade
    grade_locked = False

    if previous_grade == 'Sniper':
        if smoothed > grades.sniper - grades.buffer:
            grade = 'Sniper'
            grade_locked = smoothed < grades.sniper
        elif smoothed >= grades.decent:
            grade = 'Decent'
        else:
            grade = 'Dumb Shit'
    elif previous_grade == 'Decent':
        if smoothed >= grades.sniper:
            grade = 'Sniper'
        elif smoothed > grades.decent - grades.buffer:
            grade = 'Decent'
            grade_locked = smoothed < grades.decent
        else:
            grade = 'Dumb Shit'
    else:
        grade = standard_grade(smoothed, grades)

    candles_at_grade = state.candles_at_grade + 1 if grade == previous_grade else 1

    history = (tuple(state.previous_scores) + (raw_score,))[-config.history_length:]
    new_state = ScoreHysteresisState(
        previous_grade=grade,
        previous_scores=history,
        candles_at_grade=candles_at_grade,
    )
    stability = ScoreStability(
        raw_score=raw_score,
        smoothed_score=smoothed,
        candles_at_grade=candles_at_grade,
        grade_locked=grade_locked,
        previous_grade=previous_grade,
    )
    return grade, stability, new_state
