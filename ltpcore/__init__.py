"""
LTP Core - Level / Trend / Patience setup scoring.

Pure scoring functions over already-fetched market data: key levels,
multi-timeframe trend, patience candles, LTP 2.0 gamma confluence with
grade hysteresis, trade parameters and audited explanations.
"""

__version__ = "0.1.0"
