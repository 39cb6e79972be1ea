"""
Unit tests for numeric safety helpers.

Tests:
- Guarded division with reason flags
- Percent change, clamp and half-up rounding
- Ratio helpers (win rate, profit factor, risk/reward)
- JSON sanitising of NaN/Infinity
"""

import numpy as np
import pytest

from ltpcore.shared.utils.numeric import (
    clamp,
    is_finite_number,
    is_positive_finite,
    round_half_up,
    safe_average,
    safe_divide,
    safe_divide_value,
    safe_percent_change,
    safe_profit_factor,
    safe_risk_reward,
    safe_win_rate,
    sanitize_object_for_json,
)


class TestSafeDivide:
    def test_plain_division(self):
        assert safe_divide_value(10, 2) == 5

    def test_zero_denominator_uses_fallback(self):
        assert safe_divide_value(10, 0, fallback=-1) == -1

    def test_zero_denominator_reason(self):
        result = safe_divide(10, 0)
        assert result.value == 0
        assert result.reason == 'zero_denominator'

    @pytest.mark.parametrize("numerator,denominator", [
        (float('nan'), 1.0),
        (1.0, float('inf')),
        (None, 2.0),
        ("10", 2.0),
    ])
    def test_invalid_input(self, numerator, denominator):
        result = safe_divide(numerator, denominator, fallback=7.0)
        assert result.value == 7.0
        assert result.reason == 'invalid_input'

    def test_overflow_reports_infinity(self):
        result = safe_divide(1e308, 1e-308)
        assert result.reason == 'infinity_result'
        assert result.value == 0.0

    def test_successful_division_has_no_reason(self):
        assert safe_divide(9, 3).reason is None

    def test_numpy_scalars_accepted(self):
        assert safe_divide_value(np.float64(9.0), np.int64(3)) == 3.0


def test_finite_checks_reject_bools():
    assert not is_finite_number(True)
    assert not is_positive_finite(False)
    assert is_positive_finite(0.01)
    assert not is_positive_finite(0)


def test_percent_change():
    assert safe_percent_change(110, 100).value == pytest.approx(10.0)
    zero = safe_percent_change(110, 0)
    assert zero.value == 0.0
    assert zero.reason == 'zero_base'


class TestClampAndRounding:
    def test_clamp_bounds(self):
        assert clamp(120, 0, 90) == 90
        assert clamp(-5, 0, 90) == 0
        assert clamp(42.5, 0, 90) == 42.5

    def test_clamp_non_finite_goes_to_minimum(self):
        assert clamp(float('nan'), 0, 90) == 0

    @pytest.mark.parametrize("value,expected", [
        (2.5, 3),
        (3.5, 4),
        (82.25, 82),
        (76.5, 77),
        (97.5, 98),
    ])
    def test_round_half_up(self, value, expected):
        # Python's round() would give 2 and 76 for the halves
        assert round_half_up(value) == expected

    def test_round_half_up_to_cents(self):
        assert round_half_up(99.125, 2) == pytest.approx(99.13)

    def test_round_non_finite(self):
        assert round_half_up(float('inf')) == 0.0


def test_ratio_helpers():
    assert safe_win_rate(3, 4) == 75.0
    assert safe_win_rate(3, 0) == 0.0
    assert safe_profit_factor(200, 100) == 2.0
    assert safe_profit_factor(200, 0) == 0.0
    assert safe_average(10, 4) == 2.5
    assert safe_average(10, 0) == 0.0


def test_risk_reward_guarded():
    assert safe_risk_reward(4.0, 2.0) == 2.0
    assert safe_risk_reward(-4.0, 2.0) == 2.0
    assert safe_risk_reward(4.0, 0.0) == 0.0


def test_sanitize_nested_payload():
    payload = {'a': float('nan'), 'b': [1.0, float('inf')], 'c': {'d': 2.0}, 'e': (np.float64('nan'),)}
    clean = sanitize_object_for_json(payload)
    assert clean == {'a': None, 'b': [1.0, None], 'c': {'d': 2.0}, 'e': [None]}
