"""
Setup Service - assembles DetectedSetup values from already-fetched inputs.

The setup-persistence collaborator reads bars, levels and MTF analyses,
calls build_detected_setup, and writes whatever comes back. Lifecycle
updates go through advance_setup_stage, which returns a new setup rather
than editing the stored one.

Lifecycle: forming -> ready -> triggered -> invalidated / expired
"""

import logging
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Optional, Sequence

from ltpcore.analysis.key_levels import score_level_proximity
from ltpcore.analysis.mtf import infer_direction, score_trend_alignment
from ltpcore.analysis.patience import detect_patience_near_level, score_patience_quality
from ltpcore.shared.config.defaults import (
    DEFAULT_DETECTION_CONFIG,
    DEFAULT_LEGACY_WEIGHTS,
    DetectionConfig,
    LegacyWeights,
)
from ltpcore.shared.models.data import Bar
from ltpcore.shared.models.levels import KeyLevel
from ltpcore.shared.models.patience import PatienceResult
from ltpcore.shared.models.setup import TERMINAL_STAGES, DetectedSetup
from ltpcore.shared.models.trend import MTFAnalysis
from ltpcore.shared.utils.error_policy import enforce_direction
from ltpcore.shared.utils.numeric import is_positive_finite
from ltpcore.strategy.legacy.scorer import calculate_ltp_score, generate_coach_note
from ltpcore.strategy.planner.trade_params import calculate_trade_params


logger = logging.getLogger(__name__)


def build_detected_setup(
    symbol: str,
    current_price: float,
    levels: Sequence[KeyLevel],
    analyses: Sequence[MTFAnalysis],
    bars: Sequence[Bar] = (),
    direction: Optional[str] = None,
    config: DetectionConfig = DEFAULT_DETECTION_CONFIG,
    weights: LegacyWeights = DEFAULT_LEGACY_WEIGHTS,
    now: Optional[datetime] = None,
) -> Optional[DetectedSetup]:
    """
    Evaluate one symbol and build a setup if confluence is high enough.

    Args:
        symbol: Ticker
        current_price: Latest price
        levels: Key levels for the symbol
        analyses: Per-timeframe trend reads
        bars: Recent bars on the entry timeframe, for patience detection
        direction: Forced direction; inferred from the analyses when None
        config: Detection thresholds
        weights: L/T/P weights
        now: Detection time (defaults to the current UTC time)

    Returns:
        DetectedSetup, or None when levels/analyses are missing or
        confluence is below the threshold
    """
    if not levels or not analyses:
        logger.debug(f"[{symbol}] Skipping setup detection: {len(levels)} levels, {len(analyses)} analyses")
        return None
    if not is_positive_finite(current_price):
        logger.warning(f"[{symbol}] Skipping setup detection: invalid price {current_price!r}")
        return None

    direction = enforce_direction(direction or infer_direction(analyses))

    level_result = score_level_proximity(current_price, levels, config.level_proximity_percent)
    trend_score = score_trend_alignment(analyses, direction, config.mtf_weights)

    level = level_result.level
    if level is not None:
        patience = detect_patience_near_level(
            bars, level.price, config.patience_candle_max_size_percent, config.level_proximity_percent,
        )
    else:
        patience = PatienceResult(detected=False, count=0)

    scores = calculate_ltp_score(level_result.score, trend_score, score_patience_quality(patience), weights)

    if scores.overall < config.confluence_threshold:
        logger.debug(f"[{symbol}] Confluence {scores.overall:.0f} below {config.confluence_threshold:.0f}")
        return None

    stage = 'ready' if scores.overall >= config.ready_threshold and patience.detected else 'forming'
    detected_at = now or datetime.now(timezone.utc)

    setup = DetectedSetup(
        symbol=symbol,
        direction=direction,
        setup_stage=stage,
        confluence_score=scores.overall,
        level_score=scores.level,
        trend_score=scores.trend,
        patience_score=scores.patience,
        mtf_score=trend_score,
        primary_level_type=level.type if level is not None else None,
        primary_level_price=level.price if level is not None else None,
        patience_candles=patience.count,
        trade_params=calculate_trade_params(current_price, level, direction),
        coach_note=generate_coach_note(scores, level.type if level is not None else None, direction, patience.count),
        detected_at=detected_at,
        expires_at=detected_at + timedelta(minutes=config.setup_expiry_minutes),
    )

    logger.info(f"[{symbol}] {direction} setup {stage} at confluence {scores.overall:.0f}")
    return setup


def advance_setup_stage(
    setup: DetectedSetup,
    current_price: float,
    now: Optional[datetime] = None,
    confluence_score: Optional[float] = None,
    patience_detected: bool = False,
    config: DetectionConfig = DEFAULT_DETECTION_CONFIG,
) -> DetectedSetup:
    """
    Move a setup along its lifecycle.

    Checked in order:
        terminal stages never change
        price through the stop -> invalidated
        forming/ready past expires_at -> expired
        ready and price at or through the entry -> triggered
        forming with confluence >= ready threshold and patience -> ready

    Args:
        setup: Current setup (not modified)
        current_price: Latest price
        now: Evaluation time (defaults to the current UTC time)
        confluence_score: Fresh confluence, for the forming -> ready step
        patience_detected: Fresh patience detection, for the forming -> ready step
        config: Detection thresholds

    Returns:
        The same setup if nothing changed, otherwise an updated copy
    """
    if setup.setup_stage in TERMINAL_STAGES or not is_positive_finite(current_price):
        return setup

    now = now or datetime.now(timezone.utc)
    params = setup.trade_params
    bullish = setup.direction == 'bullish'

    stage = setup.setup_stage
    stop = params.suggested_stop
    entry = params.suggested_entry

    if stop is not None and (current_price <= stop if bullish else current_price >= stop):
        stage = 'invalidated'
    elif stage in ('forming', 'ready') and now >= setup.expires_at:
        stage = 'expired'
    elif stage == 'ready' and entry is not None and (current_price >= entry if bullish else current_price <= entry):
        stage = 'triggered'
    elif (
        stage == 'forming'
        and confluence_score is not None
        and confluence_score >= config.ready_threshold
        and patience_detected
    ):
        stage = 'ready'

    if stage == setup.setup_stage:
        return setup

    logger.info(f"[{setup.symbol}] Setup {setup.setup_stage} -> {stage} at {current_price:.2f}")
    return replace(setup, setup_stage=stage)
