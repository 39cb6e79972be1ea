"""
Unit tests for trend classification and multi-timeframe alignment.
"""

import pytest

from ltpcore.analysis.mtf import (
    analyze_timeframe,
    determine_trend,
    infer_direction,
    score_trend_alignment,
)
from ltpcore.shared.models.trend import MTFAnalysis
from ltpcore.shared.utils.error_policy import ContractViolationError
from ltpcore.tests.fixtures.market_data import (
    generate_downtrend_bars,
    generate_uptrend_bars,
    generate_zigzag_bars,
)


def _analyses(**trends):
    return [MTFAnalysis(timeframe=tf, trend=trend) for tf, trend in trends.items()]


class TestDetermineTrend:
    def test_uptrend(self):
        assert determine_trend(generate_uptrend_bars(10)) == 'uptrend'

    def test_downtrend(self):
        assert determine_trend(generate_downtrend_bars(10)) == 'downtrend'

    def test_range(self):
        assert determine_trend(generate_zigzag_bars(cycles=2)) == 'range'

    def test_too_few_bars_is_range(self):
        assert determine_trend(generate_uptrend_bars(4)) == 'range'


class TestAnalyzeTimeframe:
    def test_bullish_read(self):
        analysis = analyze_timeframe('1h', generate_uptrend_bars(30))
        assert analysis.timeframe == '1h'
        assert analysis.trend == 'bullish'
        assert analysis.structure == 'uptrend'
        assert analysis.ema_position == 'above_all'
        assert analysis.momentum == 'strong'
        assert analysis.vwap_position == 'above'

    def test_bearish_read(self):
        analysis = analyze_timeframe('15m', generate_downtrend_bars(30))
        assert analysis.trend == 'bearish'
        assert analysis.structure == 'downtrend'
        assert analysis.ema_position == 'below_all'
        assert analysis.vwap_position == 'below'

    def test_weak_momentum(self):
        analysis = analyze_timeframe('5m', generate_uptrend_bars(30, base_price=1000.0, step=0.1))
        assert analysis.momentum == 'weak'

    def test_insufficient_bars_is_neutral(self):
        analysis = analyze_timeframe('daily', generate_uptrend_bars(20))
        assert analysis == MTFAnalysis.neutral('daily')


class TestTrendAlignment:
    def test_all_aligned_default_weights(self):
        analyses = _analyses(weekly='bullish', daily='bullish', **{'4h': 'bullish', '1h': 'bullish',
                             '15m': 'bullish', '5m': 'bullish', '2m': 'bullish'})
        assert score_trend_alignment(analyses, 'bullish') == 100

    def test_partial_alignment(self):
        analyses = _analyses(daily='bullish', **{'1h': 'bearish', '5m': 'bullish'})
        # daily .20 + 5m .10
        assert score_trend_alignment(analyses, 'bullish') == 30
        assert score_trend_alignment(analyses, 'bearish') == 20

    def test_unknown_timeframe_weight(self):
        analyses = _analyses(**{'3m': 'bearish'})
        assert score_trend_alignment(analyses, 'bearish') == 10

    def test_custom_weights(self):
        analyses = _analyses(daily='bullish', **{'1h': 'bullish'})
        assert score_trend_alignment(analyses, 'bullish', {'daily': 0.5, '1h': 0.25}) == 75

    def test_neutral_never_counts(self):
        analyses = _analyses(daily='neutral')
        assert score_trend_alignment(analyses, 'bullish') == 0

    def test_unknown_direction_rejected(self):
        with pytest.raises(ContractViolationError):
            score_trend_alignment([], 'sideways')


class TestInferDirection:
    def test_majority_bullish(self):
        assert infer_direction(_analyses(daily='bullish', **{'1h': 'bullish', '5m': 'bearish'})) == 'bullish'

    def test_tie_is_bearish(self):
        assert infer_direction(_analyses(daily='bullish', **{'1h': 'bearish'})) == 'bearish'

    def test_empty_is_bearish(self):
        assert infer_direction([]) == 'bearish'
