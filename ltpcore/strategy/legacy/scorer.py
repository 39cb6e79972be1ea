"""
LTP v1 scorer.

The first-generation three-factor grading: weighted Level / Trend / Patience average
with fixed letter grades. No gamma inputs, no graduated components and no
hysteresis. It is kept as its own strategy next to LTP 2.0; the two grade
scales are not interchangeable.
"""

from typing import Any, Dict, Optional, Sequence

from ltpcore.shared.config.defaults import DEFAULT_LEGACY_WEIGHTS, LegacyWeights
from ltpcore.shared.models.levels import LevelResult
from ltpcore.shared.models.patience import PatienceResult
from ltpcore.shared.models.scoring import LegacyScoreExplanation, LetterGrade, LTPScore
from ltpcore.shared.models.trend import MTFAnalysis
from ltpcore.shared.utils.numeric import clamp, is_positive_finite, round_half_up


def calculate_ltp_score(
    level_score: float,
    trend_score: float,
    patience_score: float,
    weights: LegacyWeights = DEFAULT_LEGACY_WEIGHTS,
) -> LTPScore:
    """
    Weighted average of the three factors.

    Inputs are clamped to 0-100; overall = round(.35L + .35T + .30P).
    """
    level = clamp(level_score, 0, 100)
    trend = clamp(trend_score, 0, 100)
    patience = clamp(patience_score, 0, 100)

    overall = round_half_up(
        level * weights.level + trend * weights.trend + patience * weights.patience
    )
    return LTPScore(level=level, trend=trend, patience=patience, overall=clamp(overall, 0, 100))


def get_ltp_grade(overall: float, weights: LegacyWeights = DEFAULT_LEGACY_WEIGHTS) -> LetterGrade:
    if overall >= weights.grade_a:
        return 'A'
    if overall >= weights.grade_b:
        return 'B'
    if overall >= weights.grade_c:
        return 'C'
    if overall >= weights.grade_d:
        return 'D'
    return 'F'


def _level_reason(level_result: LevelResult, current_price: float) -> str:
    level = level_result.level
    if level is None or not is_positive_finite(current_price):
        return "No key level nearby - price is in no-man's land"
    distance = abs(current_price - level.price) / current_price * 100
    return (
        f"Price within {distance:.2f}% of {level.price:.2f} {level.type} "
        f"(strength: {level.strength:g})"
    )


def _trend_reason(analyses: Sequence[MTFAnalysis], direction: str) -> str:
    aligned = [a.timeframe for a in analyses if a.trend == direction]
    if not aligned:
        return f"Trend not aligned with {direction} direction"
    return f"{direction.capitalize()} trend aligned on {', '.join(aligned)} timeframes"


def _patience_reason(patience: PatienceResult) -> str:
    if not patience.detected:
        return "No patience candles detected - waiting for confirmation"
    return f"{patience.count} patience candle(s) confirmed at level"


def generate_score_explanation(
    scores: LTPScore,
    level_result: LevelResult,
    analyses: Sequence[MTFAnalysis],
    patience: PatienceResult,
    direction: str,
    current_price: float,
    weights: LegacyWeights = DEFAULT_LEGACY_WEIGHTS,
) -> LegacyScoreExplanation:
    """Describe a computed v1 score; the numbers are copied, never recomputed."""
    level = level_result.level
    inputs: Dict[str, Any] = {
        'current_price': current_price,
        'direction': direction,
        'nearest_level': level.to_dict() if level is not None else None,
        'timeframes': {a.timeframe: a.trend for a in analyses},
        'patience_candles': patience.count,
    }

    return LegacyScoreExplanation(
        scores=scores,
        grade=get_ltp_grade(scores.overall, weights),
        reasons={
            'level': _level_reason(level_result, current_price),
            'trend': _trend_reason(analyses, direction),
            'patience': _patience_reason(patience),
        },
        inputs=inputs,
    )


def generate_coach_note(
    scores: LTPScore,
    level_type: Optional[str],
    direction: str,
    patience_count: int,
) -> str:
    """Short deterministic note summarising a v1 setup."""
    parts = []

    level_name = (level_type or 'level').upper()
    if scores.level >= 70:
        parts.append(f"Strong {level_name} level confluence.")
    elif scores.level >= 50:
        parts.append(f"Price near {level_name}.")

    if scores.trend >= 70:
        parts.append(f"MTF trend strongly {direction}.")
    elif scores.trend >= 50:
        parts.append(f"Trend leaning {direction}.")

    if patience_count > 0:
        parts.append(f"{patience_count} patience candle(s) confirmed.")
    else:
        parts.append("Waiting for patience candle confirmation.")

    return " ".join(parts)
