# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Tuple, Union

import duckdb
import pandas as pd
import pyarrow as pa

from tradebuckets.domain.repositories import (
    IAssetRepository,
    ITradeAggregationStore,
    NotFoundError,
)
from tradebuckets.domain.value_objects import Asset, Price
from tradebuckets.metrics import ASSETS_REGISTERED, TRADES_LOADED

from ..domain.services import TradeAggregationQuery
from ..domain.value_objects import AggregationRecord

TRADE_COLUMNS = [
    "history_operation_id",
    "order",
    "ledger_closed_at",
    "base_asset_type",
    "base_asset_code",
    "base_asset_issuer",
    "base_amount",
    "counter_asset_type",
    "counter_asset_code",
    "counter_asset_issuer",
    "counter_amount",
    "price_n",
    "price_d",
]

_SCHEMA = [
    "CREATE SEQUENCE IF NOT EXISTS asset_ids START 1",
    """
    CREATE TABLE IF NOT EXISTS assets (
        id BIGINT PRIMARY KEY DEFAULT nextval('asset_ids'),
        asset_type VARCHAR NOT NULL,
        asset_code VARCHAR NOT NULL,
        asset_issuer VARCHAR NOT NULL,
        UNIQUE (asset_type, asset_code, asset_issuer)
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS trades (
        history_operation_id BIGINT NOT NULL,
        "order" INTEGER NOT NULL,
        ledger_closed_at BIGINT NOT NULL,
        base_asset_id BIGINT NOT NULL,
        base_amount BIGINT NOT NULL,
        counter_asset_id BIGINT NOT NULL,
        counter_amount BIGINT NOT NULL,
        price_n BIGINT NOT NULL,
        price_d BIGINT NOT NULL
    )
    """,
]


class DuckDBTradeStore(IAssetRepository, ITradeAggregationStore):
    """DuckDB-backed asset table and trade history.

    Trades are kept in canonical pair order (lower asset id on the base side)
    so one pair has a single set of rows regardless of the side that was sold.
    """

    def __init__(self, database: Union[str, Path] = ":memory:"):
        """Open (or create) the store.

        Args:
            database: DuckDB file path, or ":memory:" for a throwaway store
        """
        database = str(database)
        if database != ":memory:":
            Path(database).parent.mkdir(parents=True, exist_ok=True)

        self._con = duckdb.connect(database)
        self.log = logging.getLogger(self.__class__.__name__)
        self.ensure_schema()

    def ensure_schema(self) -> None:
        for statement in _SCHEMA:
            self._con.execute(statement)

    def close(self) -> None:
        self._con.close()

    def __enter__(self) -> DuckDBTradeStore:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    def get_asset_id(self, asset: Asset) -> int:
        row = self._con.execute(
            "SELECT id FROM assets WHERE asset_type = ? AND asset_code = ? AND asset_issuer = ?",
            [asset.asset_type.value, asset.code, asset.issuer],
        ).fetchone()
        if row is None:
            raise NotFoundError(f"asset not found: {asset}")
        return int(row[0])

    def ensure_asset(self, asset: Asset) -> int:
        """Return the id of ``asset``, registering it when first seen."""
        try:
            return self.get_asset_id(asset)
        except NotFoundError:
            row = self._con.execute(
                "INSERT INTO assets (asset_type, asset_code, asset_issuer) VALUES (?, ?, ?) "
                "RETURNING id",
                [asset.asset_type.value, asset.code, asset.issuer],
            ).fetchone()
            ASSETS_REGISTERED.inc()
            self.log.debug(f"Registered asset {asset} with id {row[0]}")
            return int(row[0])

    def insert_trades(self, df: pd.DataFrame) -> int:
        """Write trades described by asset descriptors.

        Args:
            df: DataFrame with the columns listed in ``TRADE_COLUMNS``

        Returns:
            Number of trades written

        Raises:
            ValueError: If columns are missing, a descriptor is invalid, or a
                trade has the same asset on both sides
        """
        missing = [c for c in TRADE_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"Trade data is missing columns: {missing}")
        if df.empty:
            return 0

        frame = df.copy()
        for side in ("base", "counter"):
            for part in ("code", "issuer"):
                column = f"{side}_asset_{part}"
                frame[column] = frame[column].fillna("").astype(str)

        ids = self._asset_ids(frame)
        frame["base_asset_id"] = [
            ids[key]
            for key in zip(frame["base_asset_type"], frame["base_asset_code"], frame["base_asset_issuer"])
        ]
        frame["counter_asset_id"] = [
            ids[key]
            for key in zip(
                frame["counter_asset_type"], frame["counter_asset_code"], frame["counter_asset_issuer"]
            )
        ]

        if (frame["base_asset_id"] == frame["counter_asset_id"]).any():
            raise ValueError("A trade cannot have the same asset on both sides")

        frame = _canonical_order(frame)
        table = pa.Table.from_pandas(
            frame[
                [
                    "history_operation_id",
                    "order",
                    "ledger_closed_at",
                    "base_asset_id",
                    "base_amount",
                    "counter_asset_id",
                    "counter_amount",
                    "price_n",
                    "price_d",
                ]
            ].astype("int64"),
            preserve_index=False,
        )

        self._con.register("incoming_trades", table)
        try:
            self._con.execute(
                """
                INSERT INTO trades
                SELECT history_operation_id, "order", ledger_closed_at, base_asset_id,
                       base_amount, counter_asset_id, counter_amount, price_n, price_d
                FROM incoming_trades
                """
            )
        finally:
            self._con.unregister("incoming_trades")

        TRADES_LOADED.inc(len(frame))
        self.log.info(f"Inserted {len(frame)} trades")
        return len(frame)

    def _asset_ids(self, frame: pd.DataFrame) -> Dict[Tuple[str, str, str], int]:
        # Registration follows first appearance, base before counter within a row
        keys = dict.fromkeys(
            key
            for row in zip(
                frame["base_asset_type"],
                frame["base_asset_code"],
                frame["base_asset_issuer"],
                frame["counter_asset_type"],
                frame["counter_asset_code"],
                frame["counter_asset_issuer"],
            )
            for key in (row[:3], row[3:])
        )
        return {key: self.ensure_asset(Asset(*key)) for key in keys}

    def select_aggregations(self, query: TradeAggregationQuery) -> List[AggregationRecord]:
        sql, params = query.sql()
        self.log.debug(f"Executing aggregation query with params {params}")
        rows = self._con.execute(sql, params).fetchall()
        return [_to_record(row) for row in rows]


def _canonical_order(frame: pd.DataFrame) -> pd.DataFrame:
    """Swap sides so the lower asset id is always the base."""
    swap = frame["base_asset_id"] > frame["counter_asset_id"]
    if not swap.any():
        return frame

    frame = frame.copy()
    for left, right in (
        ("base_asset_id", "counter_asset_id"),
        ("base_amount", "counter_amount"),
        ("price_n", "price_d"),
    ):
        left_values = frame.loc[swap, left].copy()
        right_values = frame.loc[swap, right].copy()
        frame.loc[swap, left] = right_values
        frame.loc[swap, right] = left_values
    return frame


def _price(value: dict) -> Price:
    return Price(int(value["n"]), int(value["d"]))


def _to_record(row: tuple) -> AggregationRecord:
    timestamp, count, base_volume, counter_volume, average, high, low, open_, close = row
    return AggregationRecord(
        timestamp=int(timestamp),
        trade_count=int(count),
        base_volume=int(base_volume),
        counter_volume=int(counter_volume),
        average=float(average),
        high=_price(high),
        low=_price(low),
        open=_price(open_),
        close=_price(close),
    )
