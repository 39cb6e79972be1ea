"""
Market context model for a single LTP 2.0 evaluation.

Built fresh per evaluation by the caller from chart, EMA, VWAP and gamma
inputs. Optional fields are explicit Optionals so the patience detector
can branch on their presence instead of guessing.
"""

from dataclasses import asdict, dataclass
from typing import Any, Dict, Literal, Mapping, Optional

PatienceDirection = Literal['bullish', 'bearish']


@dataclass(frozen=True)
class MarketContext:
    """
    Inputs to the LTP 2.0 gamma scorer.

    Attributes:
        current_price: Last traded price
        previous_close: Prior close (defaults to current_price in the factory)
        ema8 / ema21: Fast and slow EMA forming the trend cloud
        vwap: Session volume-weighted average price
        call_wall / put_wall: Dealer hedging walls (resistance / support)
        zero_gamma: Gamma flip level
        gamma_exposure: Net dealer gamma; positive is a dampening regime
        has_patience_candle / patience_direction: Degraded patience flags,
            used when full OHLC for the current and prior bar is missing
        previous_high / previous_low / current_high / current_low /
        current_open / current_close: Optional OHLC for inside-bar detection
    """
    current_price: float
    previous_close: float
    ema8: float
    ema21: float
    vwap: float
    call_wall: float
    put_wall: float
    zero_gamma: float
    gamma_exposure: float
    has_patience_candle: bool = False
    patience_direction: Optional[PatienceDirection] = None
    previous_high: Optional[float] = None
    previous_low: Optional[float] = None
    current_high: Optional[float] = None
    current_low: Optional[float] = None
    current_open: Optional[float] = None
    current_close: Optional[float] = None

    @property
    def has_inside_bar_data(self) -> bool:
        """True when every OHLC field needed for full inside-bar detection is present."""
        return None not in (
            self.previous_high,
            self.previous_low,
            self.current_high,
            self.current_low,
            self.current_open,
            self.current_close,
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "MarketContext":
        """Build a context from a snake_case mapping, ignoring unknown keys."""
        fields = cls.__dataclass_fields__
        return cls(**{key: value for key, value in data.items() if key in fields})


def create_market_context(
    chart: Mapping[str, float],
    ema: Mapping[str, float],
    vwap: float,
    gamma: Mapping[str, float],
    patience: Optional[Mapping[str, Any]] = None,
) -> MarketContext:
    """
    Assemble a MarketContext from chart, EMA and gamma provider payloads.

    Args:
        chart: {'close', 'high', 'low', 'open', optional 'previous_close',
                'previous_high', 'previous_low'}
        ema: {'ema8', 'ema21'}
        vwap: Session VWAP
        gamma: {'call_wall', 'put_wall', 'zero_gamma', 'gamma_exposure'}
        patience: Optional {'detected': bool, 'direction': 'bullish'|'bearish'}

    Returns:
        MarketContext
    """
    close = chart['close']
    previous_close = chart.get('previous_close')
    patience = patience or {}

    return MarketContext(
        current_price=close,
        previous_close=previous_close if previous_close is not None else close,
        ema8=ema['ema8'],
        ema21=ema['ema21'],
        vwap=vwap,
        call_wall=gamma['call_wall'],
        put_wall=gamma['put_wall'],
        zero_gamma=gamma['zero_gamma'],
        gamma_exposure=gamma['gamma_exposure'],
        has_patience_candle=bool(patience.get('detected', False)),
        patience_direction=patience.get('direction'),
        previous_high=chart.get('previous_high'),
        previous_low=chart.get('previous_low'),
        current_high=chart.get('high'),
        current_low=chart.get('low'),
        current_open=chart.get('open'),
        current_close=close,
    )
