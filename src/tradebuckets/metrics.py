# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import logging

from prometheus_client import Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)

# Trade aggregation metrics
AGG_REQUESTS = Counter("tb_aggregation_requests_total", "Trade aggregation requests", ["order"])
AGG_ERRORS = Counter(
    "tb_aggregation_errors_total", "Failed trade aggregation requests", ["problem"]
)
AGG_RECORDS = Counter(
    "tb_aggregation_records_total", "Aggregation records returned", ["resolution"]
)
AGG_LATENCY = Histogram(
    "tb_aggregation_latency_seconds",
    "Time to answer a trade aggregation request",
    buckets=[0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1, 2.5, 5],
)

# Store loading metrics
TRADES_LOADED = Counter("tb_trades_loaded_total", "Trades written to the trade store")
ASSETS_REGISTERED = Counter("tb_assets_registered_total", "Assets added to the asset table")

__all__ = [
    "AGG_REQUESTS",
    "AGG_ERRORS",
    "AGG_RECORDS",
    "AGG_LATENCY",
    "TRADES_LOADED",
    "ASSETS_REGISTERED",
    "run_metrics_server",
]


def run_metrics_server(port: int = 8000, addr: str = "0.0.0.0") -> None:
    """Expose the default registry on ``http://addr:port/metrics`` in a daemon thread."""
    start_http_server(port, addr=addr)
    logger.info("Prometheus metrics server listening on %s:%d", addr, port)
