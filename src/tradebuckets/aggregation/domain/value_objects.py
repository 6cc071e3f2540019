# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from tradebuckets.domain.value_objects import Asset, Price

MINUTE_MS = 60_000
HOUR_MS = 60 * MINUTE_MS
DAY_MS = 24 * HOUR_MS
WEEK_MS = 7 * DAY_MS


@dataclass(frozen=True)
class ResolutionSpec:
    """A legal bucket width."""

    name: str  # "1m", "5m", "15m", "1h", "1d", "1w"
    millis: int

    def __str__(self) -> str:
        return self.name


ALLOWED_RESOLUTIONS = [
    ResolutionSpec("1m", MINUTE_MS),
    ResolutionSpec("5m", 5 * MINUTE_MS),
    ResolutionSpec("15m", 15 * MINUTE_MS),
    ResolutionSpec("1h", HOUR_MS),
    ResolutionSpec("1d", DAY_MS),
    ResolutionSpec("1w", WEEK_MS),
]

ALLOWED_RESOLUTION_MILLIS = frozenset(spec.millis for spec in ALLOWED_RESOLUTIONS)


ORDER_ASC = "asc"
ORDER_DESC = "desc"
ORDERS = (ORDER_ASC, ORDER_DESC)


@dataclass(frozen=True)
class FieldError:
    """A single invalid request field and why it was rejected."""

    field: str
    reason: str


@dataclass(frozen=True)
class PageQuery:
    """Generic page parameters.

    The cursor is carried for completeness; aggregation pages advance by
    moving the time window instead.
    """

    order: str = ORDER_ASC
    limit: int = 10
    cursor: str = ""

    @property
    def ascending(self) -> bool:
        return self.order == ORDER_ASC


@dataclass(frozen=True)
class AggregationRequest:
    """Decoded trade aggregation request."""

    base_asset: Asset
    counter_asset: Asset
    resolution: int
    offset: int
    page: PageQuery
    url: str
    start_time: Optional[int] = None
    end_time: Optional[int] = None


@dataclass(frozen=True)
class AggregationRecord:
    """Aggregated trades for one bucket.

    Volumes are integer stroops; prices are exact rationals.
    """

    timestamp: int
    trade_count: int
    base_volume: int
    counter_volume: int
    average: float
    high: Price
    low: Price
    open: Price
    close: Price
