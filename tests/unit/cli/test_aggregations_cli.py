# SPDX-License-Identifier: Apache-2.0
"""Tests for the aggregations, load-trades, resolutions and metrics commands."""

from __future__ import annotations

import json
from unittest.mock import patch

import pandas as pd
import pytest
from typer.testing import CliRunner

from tests.conftest import HOUR
from tradebuckets.aggregation.infrastructure.duckdb_store import TRADE_COLUMNS
from tradebuckets.cli import app

QUIET = {"TB_LOG_LEVEL": "WARNING"}


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


@pytest.fixture
def trades_csv(tmp_path, native, usd):
    rows = []
    for op_id, closed_at, base_amount, counter_amount in (
        (1, 5, 10_000_000, 20_000_000),
        (2, HOUR + 5, 10_000_000, 30_000_000),
    ):
        rows.append(
            {
                "history_operation_id": op_id,
                "order": 0,
                "ledger_closed_at": closed_at,
                "base_asset_type": native.asset_type.value,
                "base_asset_code": "",
                "base_asset_issuer": "",
                "base_amount": base_amount,
                "counter_asset_type": usd.asset_type.value,
                "counter_asset_code": usd.code,
                "counter_asset_issuer": usd.issuer,
                "counter_amount": counter_amount,
                "price_n": counter_amount // base_amount,
                "price_d": 1,
            }
        )
    path = tmp_path / "trades.csv"
    pd.DataFrame(rows, columns=TRADE_COLUMNS).to_csv(path, index=False)
    return path


@pytest.fixture
def database(tmp_path, runner, trades_csv):
    db = str(tmp_path / "trades.duckdb")
    result = runner.invoke(app, ["load-trades", str(trades_csv), "--database", db], env=QUIET)
    assert result.exit_code == 0, result.stdout
    assert "Loaded 2 trades" in result.stdout
    return db


def test_aggregations_prints_page(runner, database, aggregation_url):
    url = aggregation_url(limit=1)

    result = runner.invoke(app, ["aggregations", url, "--database", database], env=QUIET)

    assert result.exit_code == 0, result.stdout
    doc = json.loads(result.stdout)
    assert doc["_links"]["self"]["href"] == url
    assert f"start_time={HOUR}" in doc["_links"]["next"]["href"]
    [record] = doc["_embedded"]["records"]
    assert record["timestamp"] == 0
    assert record["counter_volume"] == "2.0000000"


def test_aggregations_compact_output(runner, database, aggregation_url):
    result = runner.invoke(
        app, ["aggregations", aggregation_url(), "-d", database, "--compact"], env=QUIET
    )

    assert result.exit_code == 0
    assert len(result.stdout.strip().splitlines()) == 1
    assert len(json.loads(result.stdout)["_embedded"]["records"]) == 2


def test_aggregations_problem_document(runner, database, aggregation_url):
    result = runner.invoke(
        app, ["aggregations", aggregation_url(resolution=1234), "-d", database], env=QUIET
    )

    assert result.exit_code == 1
    doc = json.loads(result.stdout)
    assert doc["status"] == 400
    assert doc["extras"]["invalid_field"] == "resolution"


def test_no_strict_allows_custom_resolution(runner, database, aggregation_url):
    result = runner.invoke(
        app,
        ["aggregations", aggregation_url(resolution=2 * HOUR), "-d", database, "--no-strict"],
        env=QUIET,
    )

    assert result.exit_code == 0, result.stdout
    [record] = json.loads(result.stdout)["_embedded"]["records"]
    assert record["trade_count"] == 2


def test_unknown_asset_is_not_found(runner, database, aggregation_url, eur):
    result = runner.invoke(
        app, ["aggregations", aggregation_url(counter=eur), "-d", database], env=QUIET
    )

    assert result.exit_code == 1
    doc = json.loads(result.stdout)
    assert doc["status"] == 404
    assert doc["extras"]["invalid_field"] == "counter_asset"


def test_load_trades_rejects_bad_csv(runner, tmp_path):
    bad = tmp_path / "bad.csv"
    bad.write_text("history_operation_id,order\n1,0\n")

    result = runner.invoke(
        app, ["load-trades", str(bad), "-d", str(tmp_path / "t.duckdb")], env=QUIET
    )

    assert result.exit_code == 1
    assert "Could not load trades" in result.stdout


def test_missing_config_file(runner, tmp_path, aggregation_url):
    result = runner.invoke(
        app, ["aggregations", aggregation_url(), "--config", str(tmp_path / "absent.yml")]
    )

    assert result.exit_code == 1
    assert "Configuration error" in result.stdout


def test_resolutions_lists_allowed_sizes(runner):
    result = runner.invoke(app, ["resolutions"])

    assert result.exit_code == 0
    for name in ("1m", "5m", "15m", "1h", "1d", "1w"):
        assert name in result.stdout
    assert "604800000" in result.stdout


def test_metrics_command_starts_server(runner):
    with patch("tradebuckets.metrics.run_metrics_server") as mock_server, patch(
        "tradebuckets.cli.utils.time.sleep", side_effect=KeyboardInterrupt
    ):
        result = runner.invoke(app, ["metrics", "--port", "9123"])

    assert result.exit_code == 0
    mock_server.assert_called_once_with(port=9123, addr="0.0.0.0")
    assert "Metrics server stopped" in result.stdout
