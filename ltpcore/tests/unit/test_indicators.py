"""
Unit tests for EMA, VWAP and bar validation.
"""

import numpy as np
import pandas as pd
import pytest

from ltpcore.indicators import (
    DataValidationError,
    calculate_ema,
    calculate_vwap,
    compute_ema_series,
    compute_vwap,
    validate_bars,
)
from ltpcore.shared.models.data import Bar, bars_from_dataframe, bars_to_dataframe
from ltpcore.shared.utils.error_policy import ContractViolationError
from ltpcore.tests.fixtures.market_data import generate_noisy_bars, make_bars


class TestCalculateEMA:
    @pytest.mark.parametrize("period", [1, 3, 8, 21, 50])
    def test_constant_series_returns_constant(self, period):
        assert calculate_ema([42.0] * 60, period) == pytest.approx(42.0)

    def test_short_series_returns_last_value(self):
        assert calculate_ema([1.0, 2.0, 3.0], 8) == 3.0

    def test_empty_series(self):
        assert calculate_ema([], 8) == 0.0

    def test_seeded_with_simple_mean(self):
        # Seed = mean(1, 2, 3) = 2; next = (4 - 2) * 0.5 + 2 = 3
        assert calculate_ema([1.0, 2.0, 3.0, 4.0], 3) == pytest.approx(3.0)

    @pytest.mark.parametrize("period", [0, -5, 2.5, True])
    def test_bad_period_is_contract_violation(self, period):
        with pytest.raises(ContractViolationError):
            calculate_ema([1.0, 2.0, 3.0], period)


class TestComputeEMASeries:
    def test_last_value_matches_scalar(self):
        closes = pd.Series([b.close for b in generate_noisy_bars(60)])
        series = compute_ema_series(closes, 21)
        assert series.iloc[-1] == pytest.approx(calculate_ema(closes.tolist(), 21))

    def test_nan_before_seed(self):
        series = compute_ema_series(pd.Series(np.arange(10, dtype=float)), 5)
        assert series.iloc[:4].isna().all()
        assert series.iloc[4] == pytest.approx(2.0)

    def test_short_series_all_nan(self):
        assert compute_ema_series(pd.Series([1.0, 2.0]), 5).isna().all()


class TestVWAP:
    def test_uniform_typical_price(self):
        bars = [
            Bar(open=50, high=51, low=49, close=50, volume=v)
            for v in (100, 250, 75, 1000)
        ]
        assert calculate_vwap(bars) == pytest.approx(50.0)

    def test_volume_weighting(self):
        bars = [
            Bar(open=10, high=10, low=10, close=10, volume=1),
            Bar(open=20, high=20, low=20, close=20, volume=3),
        ]
        assert calculate_vwap(bars) == pytest.approx(17.5)

    def test_empty_and_zero_volume(self):
        assert calculate_vwap([]) == 0.0
        assert calculate_vwap([Bar(open=1, high=2, low=1, close=1.5, volume=0)]) == 0.0

    def test_series_matches_scalar_at_end(self):
        bars = generate_noisy_bars(40)
        series = compute_vwap(bars_to_dataframe(bars))
        assert series.iloc[-1] == pytest.approx(calculate_vwap(bars))

    def test_series_zero_volume_is_nan(self):
        df = bars_to_dataframe(make_bars([100.0, 101.0], volume=0.0))
        assert compute_vwap(df).isna().all()

    def test_series_missing_columns(self):
        with pytest.raises(ValueError):
            compute_vwap(pd.DataFrame({'close': [1.0]}))

    def test_daily_reset(self):
        closes = [100.0, 100.0, 150.0, 150.0, 200.0, 200.0]
        df = bars_to_dataframe([Bar(open=c, high=c, low=c, close=c, volume=1.0) for c in closes])
        df.index = pd.date_range('2024-01-01', periods=6, freq='12h')

        assert compute_vwap(df, reset_period='D').iloc[-1] == pytest.approx(200.0)
        assert compute_vwap(df).iloc[-1] == pytest.approx(150.0)

    def test_reset_needs_datetime_index(self):
        df = bars_to_dataframe(make_bars([100.0, 101.0])).reset_index(drop=True)
        with pytest.raises(ValueError):
            compute_vwap(df, reset_period='D')


class TestValidateBars:
    def test_clean_bars_are_valid(self):
        result = validate_bars(generate_noisy_bars(30))
        assert result['valid']
        assert result['errors'] == []

    def test_inverted_bar_reported(self):
        bars = make_bars([100.0, 101.0, 102.0]) + [Bar(open=100, high=99, low=101, close=100, volume=10)]
        result = validate_bars(bars)
        assert not result['valid']
        assert any('inverted' in e for e in result['errors'])

    def test_raise_on_error(self):
        bars = [Bar(open=-1, high=-1, low=-2, close=-1, volume=10)]
        with pytest.raises(DataValidationError):
            validate_bars(bars, raise_on_error=True)

    def test_min_rows(self):
        result = validate_bars(make_bars([100.0, 101.0]), min_rows=10)
        assert not result['valid']


def test_dataframe_round_trip_keeps_timestamps():
    bars = make_bars([100.0, 101.0, 102.0])
    assert bars_from_dataframe(bars_to_dataframe(bars)) == bars
