# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from dataclasses import dataclass, replace
from typing import List, Optional, Tuple

from .errors import InvalidFieldError
from .value_objects import (
    ALLOWED_RESOLUTION_MILLIS,
    DAY_MS,
    HOUR_MS,
    FieldError,
    PageQuery,
)


def bucket_start(timestamp: int, resolution: int, offset: int) -> int:
    """Start of the bucket holding ``timestamp``.

    ``floor((t - offset) / resolution) * resolution + offset``; the result is
    always <= t and > t - resolution.
    """
    return (timestamp - offset) // resolution * resolution + offset


def round_up_to_bucket(timestamp: int, resolution: int, offset: int) -> int:
    """Smallest bucket boundary >= ``timestamp``."""
    return -((offset - timestamp) // resolution) * resolution + offset


class ParameterValidator:
    """Checks resolution and offset legality.

    Both checks always run and every failure is returned.
    """

    RESOLUTION_REASON = (
        "illegal or missing resolution. allowed resolutions are: 1 minute (60000), "
        "5 minutes (300000), 15 minutes (900000), 1 hour (3600000), 1 day (86400000) "
        "and 1 week (604800000)"
    )
    POSITIVE_RESOLUTION_REASON = "illegal or missing resolution. resolution must be greater than 0"
    OFFSET_REASON = (
        "illegal or missing offset. offset must be a multiple of an hour, "
        "less than or equal to the resolution, and less than 24 hours"
    )

    def __init__(self, strict_resolution_filtering: bool = True):
        self.strict_resolution_filtering = strict_resolution_filtering

    def validate(self, resolution: int, offset: int) -> List[FieldError]:
        errors: List[FieldError] = []

        if self.strict_resolution_filtering:
            if resolution not in ALLOWED_RESOLUTION_MILLIS:
                errors.append(FieldError("resolution", self.RESOLUTION_REASON))
        elif resolution <= 0:
            errors.append(FieldError("resolution", self.POSITIVE_RESOLUTION_REASON))

        if offset < 0 or offset % HOUR_MS != 0 or offset >= DAY_MS or offset > resolution:
            errors.append(FieldError("offset", self.OFFSET_REASON))

        return errors


@dataclass(frozen=True)
class TradeAggregationQuery:
    """Bucketed aggregation over the trades of one asset pair.

    Instances are immutable; ``with_start_time``/``with_end_time`` return
    narrowed copies.
    """

    base_asset_id: int
    counter_asset_id: int
    resolution: int
    offset: int
    page: PageQuery
    start_time: Optional[int] = None
    end_time: Optional[int] = None

    def __post_init__(self):
        if self.resolution <= 0:
            raise ValueError(f"resolution must be positive, got {self.resolution}")

    def with_start_time(self, start_time: int) -> TradeAggregationQuery:
        """Restrict to buckets starting at or after ``start_time``.

        Start times before the offset snap to the offset; others round up to
        the next bucket boundary.

        Raises:
            InvalidFieldError: If the adjusted start is not before a known end time
        """
        if start_time < self.offset:
            adjusted = self.offset
        else:
            adjusted = round_up_to_bucket(start_time, self.resolution, self.offset)

        if self.end_time is not None and adjusted >= self.end_time:
            raise InvalidFieldError.single(
                "start_time",
                "illegal start time. adjusted start time must be less than the "
                "provided end time if the end time is greater than 0",
            )
        return replace(self, start_time=adjusted)

    def with_end_time(self, end_time: int) -> TradeAggregationQuery:
        """Restrict to buckets ending at or before ``end_time``.

        The end time rounds down so no partial trailing bucket is returned.

        Raises:
            InvalidFieldError: If the adjusted end is not after the offset and a known start time
        """
        adjusted = bucket_start(end_time, self.resolution, self.offset)

        if adjusted <= self.offset or (
            self.start_time is not None and adjusted <= self.start_time
        ):
            raise InvalidFieldError.single(
                "end_time",
                "illegal end time. adjusted end time must be greater than the "
                "offset and greater than the provided start time",
            )
        return replace(self, end_time=adjusted)

    @property
    def order_preserved(self) -> bool:
        """Trades are stored with the lower asset id on the base side."""
        return self.base_asset_id < self.counter_asset_id

    def canonical_asset_ids(self) -> Tuple[int, int]:
        if self.order_preserved:
            return self.base_asset_id, self.counter_asset_id
        return self.counter_asset_id, self.base_asset_id

    def bucket_sql(self) -> str:
        """Expression assigning each trade its bucket start."""
        return (
            f"CAST(floor((ledger_closed_at - {self.offset}) / {self.resolution}) AS BIGINT)"
            f" * {self.resolution} + {self.offset}"
        )

    def sql(self, src_table: str = "trades") -> Tuple[str, list]:
        """Generate DuckDB SQL and bound parameters for this query."""
        if self.order_preserved:
            columns = """
                base_amount,
                counter_amount,
                price_n,
                price_d"""
        else:
            columns = """
                counter_amount AS base_amount,
                base_amount AS counter_amount,
                price_d AS price_n,
                price_n AS price_d"""

        low_id, high_id = self.canonical_asset_ids()
        filters = ["base_asset_id = ?", "counter_asset_id = ?"]
        params: list = [low_id, high_id]
        if self.start_time is not None:
            filters.append("ledger_closed_at >= ?")
            params.append(self.start_time)
        if self.end_time is not None:
            filters.append("ledger_closed_at < ?")
            params.append(self.end_time)

        direction = "ASC" if self.page.ascending else "DESC"
        where = " AND ".join(filters)

        sql = f"""
        SELECT
            bucket_start,
            count(*) AS trade_count,
            sum(base_amount) AS base_volume,
            sum(counter_amount) AS counter_volume,
            sum(counter_amount::DOUBLE) / sum(base_amount::DOUBLE) AS average,
            arg_max({{'n': price_n, 'd': price_d}}, price_n::DOUBLE / price_d) AS high,
            arg_min({{'n': price_n, 'd': price_d}}, price_n::DOUBLE / price_d) AS low,
            first({{'n': price_n, 'd': price_d}} ORDER BY history_operation_id, "order") AS open,
            last({{'n': price_n, 'd': price_d}} ORDER BY history_operation_id, "order") AS close
        FROM (
            SELECT
                {self.bucket_sql()} AS bucket_start,
                history_operation_id,
                "order",{columns}
            FROM {src_table}
            WHERE {where}
        ) AS htrd
        GROUP BY bucket_start
        ORDER BY bucket_start {direction}
        LIMIT {self.page.limit}
        """
        return sql, params
