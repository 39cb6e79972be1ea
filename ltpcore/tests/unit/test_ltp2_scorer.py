"""
Unit tests for the LTP 2.0 gamma confluence scorer.

Tests:
- End-to-end reference contexts (bullish 88, bearish 90)
- Raw total clamping and component bounds
- Neutral cloud direction handling
- Confidence weighting
- Recommendation templates
- Hysteresis state threading across evaluations
"""

import numpy as np
import pytest

from ltpcore.shared.config.defaults import GammaWeights, ScoringConfig
from ltpcore.shared.models.scoring import ScoreBreakdown, ScoreHysteresisState, ScoreWarning
from ltpcore.strategy.confluence.scorer import (
    calculate_confidence,
    calculate_ltp2_score,
    generate_recommendation,
    strongest_warning,
)
from ltpcore.tests.fixtures.market_data import make_bearish_context, make_context


class TestReferenceContexts:
    def test_bullish_reference_scores_88(self):
        score, state = calculate_ltp2_score(make_context())

        assert score.direction == 'bullish'
        assert score.breakdown == ScoreBreakdown(
            cloud=25.0,
            vwap=18.0,
            gamma_wall=20.0,
            gamma_regime=15.0,
            patience=10.0,
            resistance_penalty=0.0,
            total=88.0,
        )
        assert score.score == 88
        assert score.grade == 'Sniper'
        assert score.confidence == 98
        assert score.warnings == []
        assert score.recommendation == (
            "Sniper setup. Valid long at current levels. All confluence factors aligned."
        )
        assert state == ScoreHysteresisState(previous_grade='Sniper', previous_scores=(88.0,), candles_at_grade=1)

    def test_total_is_exact_component_sum(self):
        score, _ = calculate_ltp2_score(make_context())
        assert score.breakdown.total == score.breakdown.component_sum

    def test_deterministic(self):
        first, _ = calculate_ltp2_score(make_context())
        second, _ = calculate_ltp2_score(make_context())
        assert first == second

    def test_bearish_reference_scores_90(self):
        score, _ = calculate_ltp2_score(make_bearish_context())
        assert score.direction == 'bearish'
        assert score.breakdown.total == 90.0
        assert score.recommendation.startswith("Sniper setup. Valid short")


class TestDegradedContexts:
    def test_chasing_into_call_wall(self):
        # 0.2% below the call wall with negative gamma
        context = make_context(call_wall=101.2, gamma_exposure=-10000.0, has_patience_candle=False)
        score, _ = calculate_ltp2_score(context)

        assert score.breakdown.resistance_penalty == -20.0
        assert score.breakdown.gamma_regime == 0.0
        # 25 + 18 + 20 + 0 + 0 - 20
        assert score.breakdown.total == 43.0
        assert score.grade == 'Dumb Shit'
        assert score.recommendation == "Chasing tops near Call Wall. Wait for pullback to VWAP."
        assert "Negative gamma regime - expect volatility" in score.warnings

    def test_total_clamped_at_zero(self):
        context = make_context(
            ema8=100.05, vwap=105.0, put_wall=102.0, call_wall=101.1,
            gamma_exposure=-1.0, has_patience_candle=False,
        )
        score, _ = calculate_ltp2_score(context)
        assert score.breakdown.component_sum < 0
        assert score.breakdown.total == 0.0

    def test_neutral_cloud_scores_bullish_side(self):
        context = make_context(ema8=100.05, has_patience_candle=False)
        score, _ = calculate_ltp2_score(context)
        assert score.direction == 'neutral'
        assert score.scoring_direction == 'bullish'
        assert score.breakdown.cloud == pytest.approx(7.5)

    def test_neutral_cloud_below_scores_bearish_side(self):
        score, _ = calculate_ltp2_score(make_context(ema8=99.95))
        assert score.direction == 'neutral'
        assert score.scoring_direction == 'bearish'

    def test_no_trend_recommendation(self):
        context = make_context(ema8=100.05, vwap=102.0, gamma_exposure=-1.0, has_patience_candle=False)
        score, _ = calculate_ltp2_score(context)
        assert score.grade == 'Dumb Shit'
        assert score.recommendation == "No clear trend. Sit on hands and wait for direction."

    def test_raw_total_bounds_over_random_contexts(self):
        rng = np.random.RandomState(7)
        for _ in range(300):
            price = 100.0
            context = make_context(
                ema8=float(rng.uniform(98, 102)),
                vwap=float(rng.uniform(98, 102)),
                call_wall=float(rng.uniform(99, 106)),
                put_wall=float(rng.uniform(94, 101)),
                gamma_exposure=float(rng.normal(0, 1e5)),
                current_price=price,
                has_patience_candle=bool(rng.randint(2)),
            )
            score, _ = calculate_ltp2_score(context)
            assert 0 <= score.breakdown.total <= 90
            assert 0 <= score.confidence <= 100
            assert 0 <= score.breakdown.cloud <= 25
            assert 0 <= score.breakdown.vwap <= 20
            assert -20 <= score.breakdown.resistance_penalty <= 0


class TestCustomWeights:
    def test_total_follows_configured_maximum(self):
        config = ScoringConfig(weights=GammaWeights(cloud=50.0, max_total=115.0))
        score, _ = calculate_ltp2_score(make_context(), config=config)

        # 50 + 18 + 20 + 15 + 10
        assert score.breakdown.cloud == 50.0
        assert score.breakdown.total == 113.0
        assert score.grade == 'Sniper'

    def test_negative_total_rejected(self):
        with pytest.raises(ValueError):
            ScoreBreakdown(total=-1.0)


class TestStateThreading:
    def test_state_carries_across_calls(self):
        score, state = calculate_ltp2_score(make_context())
        weak = make_context(call_wall=101.2, gamma_exposure=-10000.0, has_patience_candle=False)

        score, state = calculate_ltp2_score(weak, state)
        # mean(88, 43) = 65.5 -> 66, below the Sniper buffer
        assert score.score == 66
        assert score.grade == 'Decent'
        assert score.stability.previous_grade == 'Sniper'
        assert state.previous_scores == (88.0, 43.0)


class TestConfidence:
    def test_full_agreement(self):
        breakdown = ScoreBreakdown(cloud=25, vwap=20, gamma_wall=20, gamma_regime=15, patience=10, total=90)
        assert calculate_confidence(breakdown) == 100

    def test_proportional(self):
        breakdown = ScoreBreakdown(cloud=12.5, vwap=10, gamma_wall=0, gamma_regime=15, patience=0, total=37.5)
        # 15 + 12.5 + 0 + 15 + 0
        assert calculate_confidence(breakdown) == 43

    def test_penalty_does_not_count(self):
        breakdown = ScoreBreakdown(cloud=25, vwap=20, gamma_wall=20, gamma_regime=15, patience=10,
                                   resistance_penalty=-20, total=70)
        assert calculate_confidence(breakdown) == 100


class TestRecommendation:
    def test_decent_uses_strongest_warning(self):
        warnings = [
            ScoreWarning("minor thing", 1, 'gamma_regime'),
            ScoreWarning("big thing", 3, 'gamma_wall'),
            ScoreWarning("also big", 3, 'wall_penalty'),
        ]
        assert strongest_warning(warnings).message == "big thing"
        assert generate_recommendation('Decent', 'bullish', 'bullish', warnings) == (
            "Decent setup but watch for: big thing. Consider smaller size."
        )

    def test_decent_without_warnings(self):
        assert generate_recommendation('Decent', 'bullish', 'bullish', []) == (
            "Decent setup. Missing some confluence. Trade with caution."
        )

    def test_bearish_chasing(self):
        warnings = [ScoreWarning("At Put Wall", 4, 'wall_penalty')]
        assert generate_recommendation('Dumb Shit', 'bearish', 'bearish', warnings) == (
            "Chasing lows near Put Wall. Wait for bounce rejection."
        )

    def test_low_probability_default(self):
        assert generate_recommendation('Dumb Shit', 'bullish', 'bullish', []) == (
            "Low probability setup. Multiple factors missing. Stay patient."
        )
