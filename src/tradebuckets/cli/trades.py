# SPDX-License-Identifier: Apache-2.0
"""Trade store loading commands."""

from __future__ import annotations

from pathlib import Path
from typing import Optional

import typer

from .utils import build_settings


def load_trades(
    csv_path: Path = typer.Argument(..., help="CSV file of trades", exists=True, dir_okay=False),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML settings file"),
    database: Optional[str] = typer.Option(None, "--database", "-d", help="DuckDB trade store"),
):
    """Import trades from a CSV file into the trade store.

    The CSV needs the columns history_operation_id, order, ledger_closed_at
    (epoch ms), base_asset_type, base_asset_code, base_asset_issuer,
    base_amount (stroops), counter_asset_type, counter_asset_code,
    counter_asset_issuer, counter_amount (stroops), price_n and price_d.
    Assets are registered on first sight.
    """
    import pandas as pd

    from tradebuckets.aggregation.infrastructure.duckdb_store import DuckDBTradeStore

    settings = build_settings(config, database)

    try:
        df = pd.read_csv(csv_path, keep_default_na=False)
        with DuckDBTradeStore(settings.database_path) as store:
            written = store.insert_trades(df)
    except ValueError as e:
        print(f"❌ Could not load trades: {e}")
        raise typer.Exit(1) from e

    print(f"✅ Loaded {written} trades into {settings.database_path}")
