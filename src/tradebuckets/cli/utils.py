# SPDX-License-Identifier: Apache-2.0
"""Shared CLI helpers and utility commands."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Optional

import typer

from tradebuckets.config import ConfigVersionError, TradeBucketsSettings, load_settings


def build_settings(
    config: Optional[Path], database: Optional[str] = None, **overrides
) -> TradeBucketsSettings:
    """Load settings and apply command-line overrides, exiting on bad config."""
    try:
        settings = load_settings(config)
    except (ConfigVersionError, FileNotFoundError, ValueError) as e:
        print(f"❌ Configuration error: {e}")
        raise typer.Exit(1) from e

    updates = {k: v for k, v in overrides.items() if v is not None}
    if database is not None:
        updates["database_path"] = database
    if updates:
        settings = settings.model_copy(update=updates)

    configure_logging(settings.log_level)
    return settings


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(levelname)-5s [%(name)s] %(message)s",
        force=True,
    )


def metrics(
    port: int = typer.Option(8000, "--port", "-p", help="Port to run Prometheus metrics server"),
    addr: str = typer.Option("0.0.0.0", "--addr", help="Address to bind"),
):
    """Serve Prometheus metrics until interrupted.

    Example:
        tradebuckets metrics --port 8000
    """
    from tradebuckets.metrics import run_metrics_server

    configure_logging("INFO")
    print(f"📊 Starting metrics server on http://{addr}:{port}/metrics")
    print("Press Ctrl+C to stop the server")
    run_metrics_server(port=port, addr=addr)
    try:
        while True:
            time.sleep(1)
    except KeyboardInterrupt:
        print("📊 Metrics server stopped")
