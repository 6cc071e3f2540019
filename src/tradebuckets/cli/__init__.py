# SPDX-License-Identifier: Apache-2.0
"""Trade Buckets CLI package."""

from __future__ import annotations

import typer

from .aggregations import aggregations, resolutions
from .trades import load_trades
from .utils import metrics

app = typer.Typer(
    add_completion=False,
    help="Time-bucketed trade aggregation commands",
)

app.command(
    help=(
        "Answer a trade aggregation request URL and print the page as JSON.\n\n"
        "Example:\n"
        "  tradebuckets aggregations \"https://horizon.example/trade_aggregations?"
        "base_asset_type=native&counter_asset_type=credit_alphanum4&counter_asset_code=USD"
        "&counter_asset_issuer=G...&resolution=3600000\""
    )
)(aggregations)
app.command()(resolutions)
app.command(name="load-trades")(load_trades)
app.command()(metrics)


if __name__ == "__main__":
    app()
