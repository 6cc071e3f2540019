# SPDX-License-Identifier: Apache-2.0
from .application.services import TradeAggregationService
from .infrastructure.duckdb_store import DuckDBTradeStore

__all__ = ["TradeAggregationService", "DuckDBTradeStore"]
