"""
Trade parameter calculator.

Entry at the current price, stop just beyond the chosen level, and
targets at 1R / 2R / 3R. The stop offset is HEURISTIC_VOLATILITY_PCT of
price, a fixed stand-in for volatility and not an Average True Range.
"""

from typing import Literal, Optional

from loguru import logger

from ltpcore.shared.config.defaults import HEURISTIC_VOLATILITY_PCT
from ltpcore.shared.models.levels import KeyLevel
from ltpcore.shared.models.setup import TradeParams
from ltpcore.shared.utils.error_policy import enforce_direction
from ltpcore.shared.utils.numeric import is_positive_finite, round_half_up, safe_risk_reward


def calculate_trade_params(
    current_price: float,
    level: Optional[KeyLevel],
    direction: Literal['bullish', 'bearish'],
    volatility_pct: float = HEURISTIC_VOLATILITY_PCT,
) -> TradeParams:
    """
    Derive entry, stop, targets and risk/reward.

    Args:
        current_price: Entry price
        level: Level anchoring the stop (None gives empty params)
        direction: 'bullish' (stop below the level) or 'bearish' (stop above)
        volatility_pct: Stop offset as a fraction of price

    Returns:
        TradeParams with prices rounded to cents and R:R to one decimal;
        R:R is 0 when entry and stop coincide

    Raises:
        ContractViolationError: If direction is not 'bullish' or 'bearish'
    """
    enforce_direction(direction)

    if level is None or not is_positive_finite(current_price) or not is_positive_finite(level.price):
        return TradeParams()

    entry = current_price
    offset = current_price * volatility_pct

    if direction == 'bullish':
        stop = level.price - offset
        risk = abs(entry - stop)
        targets = [entry + risk * r for r in (1, 2, 3)]
    else:
        stop = level.price + offset
        risk = abs(stop - entry)
        targets = [entry - risk * r for r in (1, 2, 3)]

    risk_reward = safe_risk_reward(targets[1] - entry, risk)

    if risk == 0:
        logger.debug(f"Zero risk distance at {entry:.2f}; risk/reward set to 0")

    return TradeParams(
        suggested_entry=round_half_up(entry, 2),
        suggested_stop=round_half_up(stop, 2),
        target_1=round_half_up(targets[0], 2),
        target_2=round_half_up(targets[1], 2),
        target_3=round_half_up(targets[2], 2),
        risk_reward=round_half_up(risk_reward, 1),
    )
