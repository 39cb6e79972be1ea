"""
LTP Core CLI - Command-line interface.

Reads local JSON/CSV inputs, runs the pure scoring core and prints the
result. File I/O lives here only; nothing below this module touches disk.
"""
import json
from pathlib import Path
from typing import Optional

import pandas as pd
import typer

from ltpcore import __version__
from ltpcore.analysis.key_levels import identify_key_levels
from ltpcore.shared.models.context import MarketContext, create_market_context
from ltpcore.shared.models.data import bars_from_dataframe
from ltpcore.shared.models.scoring import ScoreHysteresisState
from ltpcore.shared.utils.error_policy import LTPError
from ltpcore.shared.utils.logging_utils import time_operation
from ltpcore.shared.utils.numeric import sanitize_object_for_json
from ltpcore.strategy.confluence.explainer import explain_ltp2_score, format_explanation_for_prompt
from ltpcore.strategy.confluence.scorer import calculate_ltp2_score

app = typer.Typer(help="🎯 LTP Core - Level / Trend / Patience setup scoring")


def _load_context(payload: dict) -> MarketContext:
    """Accept a flat MarketContext mapping or the provider payload shape."""
    if 'chart' in payload:
        return create_market_context(
            chart=payload['chart'],
            ema=payload['ema'],
            vwap=payload['vwap'],
            gamma=payload['gamma'],
            patience=payload.get('patience'),
        )
    return MarketContext.from_dict(payload)


@app.command()
def score(
    context_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="MarketContext JSON file"),
    state_file: Optional[Path] = typer.Option(None, "--state", help="Hysteresis state JSON file"),
    symbol: str = typer.Option("", help="Ticker, used in logs and the explanation"),
    save_state: bool = typer.Option(False, "--save-state", help="Write the new state back to --state"),
    prompt: bool = typer.Option(False, "--prompt", help="Print the coaching prompt block instead of JSON"),
):
    """
    🎯 Score a market context with LTP 2.0 gamma confluence.
    """
    try:
        context = _load_context(json.loads(context_file.read_text()))

        state = None
        if state_file is not None and state_file.exists():
            state = ScoreHysteresisState.from_dict(json.loads(state_file.read_text()))

        with time_operation("ltp2_score", symbol or None):
            result, new_state = calculate_ltp2_score(context, state, symbol=symbol)
            explanation = explain_ltp2_score(symbol, context, result)
    except (KeyError, TypeError, ValueError, LTPError) as e:
        typer.echo(f"❌ Scoring failed: {e}", err=True)
        raise typer.Exit(code=1)

    if save_state:
        if state_file is None:
            typer.echo("❌ --save-state needs --state", err=True)
            raise typer.Exit(code=1)
        state_file.write_text(json.dumps(new_state.to_dict(), indent=2))

    if prompt:
        typer.echo(format_explanation_for_prompt(explanation))
        return

    output = {
        'score': result.to_dict(),
        'explanation': explanation.to_dict(),
        'state': new_state.to_dict(),
    }
    typer.echo(json.dumps(sanitize_object_for_json(output), indent=2, default=str))


@app.command()
def levels(
    bars_file: Path = typer.Argument(..., exists=True, dir_okay=False, help="OHLCV CSV file"),
    timeframe: str = typer.Option("5m", help="Timeframe tag for the levels"),
):
    """
    📍 Identify clustered support/resistance levels from a bar CSV.
    """
    try:
        bars = bars_from_dataframe(pd.read_csv(bars_file))
    except (ValueError, pd.errors.ParserError) as e:
        typer.echo(f"❌ Could not read bars: {e}", err=True)
        raise typer.Exit(code=1)

    found = identify_key_levels(bars, timeframe=timeframe)
    if not found:
        typer.echo("📭 No key levels found (need at least 10 bars with repeated swings)")
        return

    typer.echo(json.dumps([level.to_dict() for level in found], indent=2))


@app.command()
def version():
    """Display LTP Core version information."""
    typer.echo(f"🎯 LTP Core v{__version__}")


if __name__ == "__main__":
    app()
