# SPDX-License-Identifier: Apache-2.0
"""Trade aggregation commands."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional

import typer

from .utils import build_settings


def aggregations(
    url: str = typer.Argument(..., help="Request URL, query string included"),
    config: Optional[Path] = typer.Option(None, "--config", "-c", help="YAML settings file"),
    database: Optional[str] = typer.Option(None, "--database", "-d", help="DuckDB trade store"),
    strict: Optional[bool] = typer.Option(
        None, "--strict/--no-strict", help="Override strict resolution filtering"
    ),
    compact: bool = typer.Option(False, "--compact", help="Print JSON on a single line"),
):
    """Answer a trade aggregation request URL and print the page as JSON."""
    from tradebuckets.aggregation.application.services import TradeAggregationService
    from tradebuckets.aggregation.domain.errors import AggregationProblem
    from tradebuckets.aggregation.infrastructure.duckdb_store import DuckDBTradeStore

    settings = build_settings(config, database, strict_resolution_filtering=strict)
    indent = None if compact else 2

    with DuckDBTradeStore(settings.database_path) as store:
        service = TradeAggregationService.build_default(settings, store=store)
        try:
            page = service.aggregate(url)
        except AggregationProblem as e:
            print(json.dumps(e.to_dict(), indent=indent))
            raise typer.Exit(1) from e
        except Exception as e:
            print(f"❌ Aggregation failed: {e}")
            raise typer.Exit(1) from e

    print(json.dumps(page.to_dict(), indent=indent))


def resolutions():
    """List the resolutions accepted under strict filtering."""
    from tradebuckets.aggregation.domain.value_objects import ALLOWED_RESOLUTIONS

    for spec in ALLOWED_RESOLUTIONS:
        print(f"{spec.name:>4}  {spec.millis}")
