"""
Unit tests for the scorer registry and the SetupScorer implementations.
"""

from datetime import datetime, timezone

import pytest

from ltpcore.contracts.strategy_contract import ScoreRequest, SetupScorer
from ltpcore.services.scorer_registry import (
    GammaLTPScorer,
    LegacyLTPScorer,
    available_scorers,
    get_scorer,
)
from ltpcore.shared.models.levels import KeyLevel
from ltpcore.shared.models.patience import PatienceResult
from ltpcore.shared.models.scoring import LTP2Score, LTPScore, ScoreHysteresisState
from ltpcore.shared.models.trend import MTFAnalysis
from ltpcore.shared.utils.error_policy import ContractViolationError, UnknownScorerError
from ltpcore.tests.fixtures.market_data import make_context

NOW = datetime(2024, 3, 1, 14, 30, tzinfo=timezone.utc)
LEVELS = (
    KeyLevel(type='support', price=100.0, timeframe='5m', strength=100),
    KeyLevel(type='resistance', price=104.0, timeframe='5m', strength=75),
)
ANALYSES = tuple(
    MTFAnalysis(timeframe=tf, trend='bullish') for tf in ('weekly', 'daily', '4h', '1h', '15m', '5m')
)


class TestRegistry:
    def test_available(self):
        assert available_scorers() == ['ltp2_gamma', 'ltp_v1']

    @pytest.mark.parametrize("name,cls", [('ltp2_gamma', GammaLTPScorer), ('ltp_v1', LegacyLTPScorer)])
    def test_get_scorer(self, name, cls):
        scorer = get_scorer(name)
        assert isinstance(scorer, cls)
        assert isinstance(scorer, SetupScorer)
        assert scorer.name == name

    def test_unknown_scorer(self):
        with pytest.raises(UnknownScorerError, match="ltp2_gamma, ltp_v1"):
            get_scorer('ltp3')


class TestGammaScorer:
    def test_scores_context(self):
        result = get_scorer('ltp2_gamma').score(ScoreRequest(symbol='SPY', context=make_context()), now=NOW)

        assert result.strategy == 'ltp2_gamma'
        assert result.score == 88
        assert result.max_score == 90
        assert result.grade == 'Sniper'
        assert result.direction == 'bullish'
        assert isinstance(result.details, LTP2Score)
        assert result.explanation.score == 88
        assert result.state.previous_scores == (88.0,)

    def test_state_round_trips_through_requests(self):
        scorer = get_scorer('ltp2_gamma')
        first = scorer.score(ScoreRequest(context=make_context()), now=NOW)
        weak = make_context(call_wall=101.2, gamma_exposure=-10000.0, has_patience_candle=False)
        second = scorer.score(ScoreRequest(context=weak, state=first.state), now=NOW)

        assert second.grade == 'Decent'
        assert second.state.previous_scores == (88.0, 43.0)

    def test_to_dict(self):
        row = get_scorer('ltp2_gamma').score(ScoreRequest(context=make_context()), now=NOW).to_dict()
        assert row['strategy'] == 'ltp2_gamma'
        assert row['state'] == ScoreHysteresisState(
            previous_grade='Sniper', previous_scores=(88.0,), candles_at_grade=1,
        ).to_dict()
        assert row['explanation']['grade'] == 'Sniper'

    def test_requires_context(self):
        with pytest.raises(ContractViolationError):
            get_scorer('ltp2_gamma').score(ScoreRequest(current_price=100.0))


class TestLegacyScorer:
    def test_scores_three_factors(self):
        request = ScoreRequest(
            symbol='SPY',
            current_price=100.05,
            levels=LEVELS,
            analyses=ANALYSES,
            patience=PatienceResult(detected=True, count=3),
        )
        result = get_scorer('ltp_v1').score(request)

        assert result.strategy == 'ltp_v1'
        assert result.max_score == 100
        assert result.direction == 'bullish'
        assert isinstance(result.details, LTPScore)
        # L 92, T 95, P 100
        assert (result.details.level, result.details.trend, result.details.patience) == (92, 95, 100)
        assert result.score == 95
        assert result.grade == 'A'
        assert result.state is None
        assert result.to_dict()['state'] is None

    def test_missing_patience_scores_zero(self):
        request = ScoreRequest(current_price=100.05, levels=LEVELS, analyses=ANALYSES)
        result = get_scorer('ltp_v1').score(request)
        assert result.details.patience == 0
        assert result.score == 65

    def test_explicit_direction(self):
        request = ScoreRequest(current_price=100.05, levels=LEVELS, analyses=ANALYSES, direction='bearish')
        result = get_scorer('ltp_v1').score(request)
        assert result.direction == 'bearish'
        assert result.details.trend == 0

    def test_requires_price(self):
        with pytest.raises(ContractViolationError):
            get_scorer('ltp_v1').score(ScoreRequest(context=make_context()))

    def test_rejects_unknown_direction(self):
        with pytest.raises(ContractViolationError):
            get_scorer('ltp_v1').score(ScoreRequest(current_price=100.0, direction='long'))
