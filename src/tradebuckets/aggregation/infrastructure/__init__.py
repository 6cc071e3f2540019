# SPDX-License-Identifier: Apache-2.0
"""Aggregation infrastructure layer."""

from .duckdb_store import TRADE_COLUMNS, DuckDBTradeStore

__all__ = ["DuckDBTradeStore", "TRADE_COLUMNS"]
