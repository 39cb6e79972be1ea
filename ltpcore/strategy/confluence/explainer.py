"""
Score Explainer

Turns an already-computed score into an audited, human-readable breakdown.
Explanations only describe: every number in them is copied from the score
object, and the inputs snapshot records what the score was computed from.
Coaching consumers must present these explanations verbatim.
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from ltpcore.analysis.patience import analyze_patience_candle
from ltpcore.shared.config.defaults import DEFAULT_SCORING_CONFIG, ScoringConfig
from ltpcore.shared.models.context import MarketContext
from ltpcore.shared.models.scoring import (
    ComponentExplanation,
    LegacyScoreExplanation,
    LTP2Score,
    ScoreExplanation,
)
from ltpcore.shared.utils.error_policy import ExplanationIntegrityError
from ltpcore.shared.utils.numeric import (
    clamp,
    is_positive_finite,
    safe_divide_value,
    sanitize_object_for_json,
)

_TOLERANCE = 1e-9


def _points(value: float) -> str:
    return f"{value:g}"


def _verify_breakdown(score: LTP2Score, config: ScoringConfig) -> None:
    breakdown = score.breakdown
    expected = clamp(breakdown.component_sum, 0, config.weights.max_total)
    if abs(expected - breakdown.total) > _TOLERANCE:
        raise ExplanationIntegrityError(
            f"Breakdown total {breakdown.total} does not match its components ({expected})"
        )


def _cloud_reason(context: MarketContext, score: LTP2Score) -> str:
    spread = safe_divide_value(context.ema8 - context.ema21, context.ema21, 0.0) * 100
    if score.direction == 'neutral':
        return (
            f"EMA cloud flat: 8 EMA {context.ema8:.2f} vs 21 EMA {context.ema21:.2f} "
            f"(spread {spread:+.3f}%), no clear trend"
        )
    relation = 'above' if score.direction == 'bullish' else 'below'
    return (
        f"{score.direction.capitalize()} EMA cloud: 8 EMA {context.ema8:.2f} {relation} "
        f"21 EMA {context.ema21:.2f} (spread {spread:+.3f}%)"
    )


def _vwap_reason(context: MarketContext, score: LTP2Score, max_points: float) -> str:
    if not is_positive_finite(context.vwap):
        return "VWAP unavailable"

    distance = safe_divide_value(context.current_price - context.vwap, context.vwap, 0.0) * 100
    side = 'above' if distance > 0 else 'below' if distance < 0 else 'at'
    base = f"Price {context.current_price:.2f} {side} VWAP {context.vwap:.2f} ({distance:+.2f}%)"

    points = score.breakdown.vwap
    if points == 0:
        return f"{base}, wrong side for a {score.scoring_direction} setup"
    if points < max_points * 0.5:
        return f"{base}, just across VWAP (partial credit)"
    return f"{base}, aligned with {score.scoring_direction} setup"


def _gamma_wall_reason(context: MarketContext, score: LTP2Score) -> str:
    held = score.breakdown.gamma_wall > 0
    if score.scoring_direction == 'bullish':
        if not is_positive_finite(context.put_wall):
            return "Put Wall unavailable"
        relation = 'above' if held else 'not above'
        return f"Price {context.current_price:.2f} {relation} Put Wall support {context.put_wall:.2f}"

    if not is_positive_finite(context.call_wall):
        return "Call Wall unavailable"
    relation = 'below' if held else 'not below'
    return f"Price {context.current_price:.2f} {relation} Call Wall resistance {context.call_wall:.2f}"


def _gamma_regime_reason(context: MarketContext, score: LTP2Score) -> str:
    sign = 'Positive' if context.gamma_exposure > 0 else 'Negative' if context.gamma_exposure < 0 else 'Flat'
    effect = 'supports' if score.breakdown.gamma_regime > 0 else 'works against'
    return f"{sign} gamma exposure ({context.gamma_exposure:,.0f}) {effect} a {score.scoring_direction} setup"


def _patience_reason(context: MarketContext, score: LTP2Score, config: ScoringConfig) -> str:
    points = score.breakdown.patience

    if context.has_inside_bar_data:
        candle = analyze_patience_candle(context, config.patience)
        if not candle.is_patience_candle:
            return "No inside bar on the current candle"
        where = f"at {candle.nearest_level}" if candle.at_level else "away from key levels"
        description = f"{candle.quality.capitalize()} quality {candle.direction} inside bar {where}"
        if points == 0:
            return f"{description}, opposes {score.scoring_direction} setup"
        return description

    if context.has_patience_candle:
        if points > 0:
            return f"{context.patience_direction.capitalize()} patience candle flagged (no OHLC for quality check)"
        return f"Patience candle flagged {context.patience_direction or 'without direction'}, does not match setup"
    return "No patience candle"


def _penalty_reason(context: MarketContext, score: LTP2Score) -> str:
    if score.scoring_direction == 'bullish':
        wall, name = context.call_wall, 'Call Wall'
        distance = safe_divide_value(wall - context.current_price, context.current_price, 0.0) * 100
    else:
        wall, name = context.put_wall, 'Put Wall'
        distance = safe_divide_value(context.current_price - wall, context.current_price, 0.0) * 100

    if not is_positive_finite(wall):
        return f"{name} unavailable, no opposing wall penalty"
    if score.breakdown.resistance_penalty == 0:
        return f"{name} {wall:.2f} is {distance:.2f}% away, room to run"
    return f"{name} {wall:.2f} only {max(distance, 0.0):.2f}% away"


def explain_ltp2_score(
    symbol: str,
    context: MarketContext,
    score: LTP2Score,
    now: Optional[datetime] = None,
    config: ScoringConfig = DEFAULT_SCORING_CONFIG,
) -> ScoreExplanation:
    """
    Build an explanation for a computed LTP 2.0 score.

    Args:
        symbol: Ticker
        context: The context the score was computed from
        score: The computed score (read only)
        now: Snapshot timestamp (defaults to the current UTC time)
        config: Scoring config the score was computed with

    Returns:
        ScoreExplanation whose numbers equal the score's numbers

    Raises:
        ExplanationIntegrityError: If the breakdown total disagrees with its components
    """
    _verify_breakdown(score, config)
    weights = config.weights
    breakdown = score.breakdown
    timestamp = now or datetime.now(timezone.utc)

    components = {
        'cloud': ComponentExplanation(breakdown.cloud, weights.cloud, _cloud_reason(context, score)),
        'vwap': ComponentExplanation(breakdown.vwap, weights.vwap, _vwap_reason(context, score, weights.vwap)),
        'gamma_wall': ComponentExplanation(
            breakdown.gamma_wall, weights.gamma_wall, _gamma_wall_reason(context, score),
        ),
        'gamma_regime': ComponentExplanation(
            breakdown.gamma_regime, weights.gamma_regime, _gamma_regime_reason(context, score),
        ),
        'patience': ComponentExplanation(
            breakdown.patience, weights.patience, _patience_reason(context, score, config),
        ),
        'resistance_penalty': ComponentExplanation(
            breakdown.resistance_penalty, 0.0, _penalty_reason(context, score),
        ),
    }

    inputs: Dict[str, Any] = sanitize_object_for_json(context.to_dict())
    inputs['scoring_direction'] = score.scoring_direction
    inputs['raw_total'] = breakdown.total
    inputs['timestamp'] = timestamp.isoformat()

    return ScoreExplanation(
        symbol=symbol,
        score=score.score,
        grade=score.grade,
        direction=score.direction,
        confidence=score.confidence,
        recommendation=score.recommendation,
        warnings=list(score.warnings),
        breakdown=components,
        inputs=inputs,
    )


def _format_ltp2(explanation: ScoreExplanation) -> str:
    lines = [
        "=== SCORE EXPLANATION (LTP 2.0 Gamma) ===",
        "These scores are pre-computed by our deterministic engine. DO NOT modify them.",
        "",
        f"Symbol: {explanation.symbol}",
        f"Overall Score: {_points(explanation.score)}/90",
        f"Grade: {explanation.grade}",
        f"Direction: {explanation.direction}",
        f"Confidence: {_points(explanation.confidence)}%",
        f"Recommendation: {explanation.recommendation}",
        "",
        "Component Breakdown:",
    ]
    for key, component in explanation.breakdown.items():
        lines.append(f"- {key}: {_points(component.score)} pts")
        lines.append(f"  Reason: {component.reason}")

    lines.append("")
    if explanation.warnings:
        lines.append("Warnings:")
        lines.extend(f"- {warning}" for warning in explanation.warnings)
    else:
        lines.append("Warnings: None")

    lines.append("")
    lines.append("Input Data Used:")
    lines.append(json.dumps(explanation.inputs, indent=2, default=str))
    return "\n".join(lines)


def _format_legacy(explanation: LegacyScoreExplanation) -> str:
    scores = explanation.scores
    lines = [
        "=== SCORE EXPLANATION (LTP 1.0) ===",
        "These scores are pre-computed by our deterministic engine. DO NOT modify them.",
        "",
        f"Overall Score: {_points(scores.overall)}/100",
        f"Grade: {explanation.grade}",
        "",
        "Component Breakdown:",
        f"- level: {_points(scores.level)}/100",
        f"  Reason: {explanation.reasons.get('level', '')}",
        f"- trend: {_points(scores.trend)}/100",
        f"  Reason: {explanation.reasons.get('trend', '')}",
        f"- patience: {_points(scores.patience)}/100",
        f"  Reason: {explanation.reasons.get('patience', '')}",
        "",
        "Input Data Used:",
        json.dumps(sanitize_object_for_json(explanation.inputs), indent=2, default=str),
    ]
    return "\n".join(lines)


def format_explanation_for_prompt(
    explanation: Union[ScoreExplanation, LegacyScoreExplanation, None],
) -> str:
    """Render an explanation as the fixed text block handed to the coaching layer."""
    if explanation is None:
        return "No score explanation available. Do not invent numeric scores."
    if isinstance(explanation, LegacyScoreExplanation):
        return _format_legacy(explanation)
    return _format_ltp2(explanation)
