# SPDX-License-Identifier: Apache-2.0
"""Page assembly for trade aggregations.

Aggregation pages carry no opaque cursor. The ``next`` link is the request
URL with its time window moved past the last record, so a client can resume
from any link it kept.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from tradebuckets.domain.value_objects import Price, format_amount

from ..domain.value_objects import AggregationRecord, AggregationRequest


@dataclass(frozen=True)
class Link:
    href: str

    def to_dict(self) -> Dict[str, str]:
        return {"href": self.href}


@dataclass(frozen=True)
class Page:
    """Records of one response plus its navigation links."""

    records: List[AggregationRecord]
    order: str
    limit: int
    self_link: Link
    next_link: Link

    def to_dict(self) -> Dict[str, Any]:
        """Render as a HAL document."""
        return {
            "_links": {
                "self": self.self_link.to_dict(),
                "next": self.next_link.to_dict(),
            },
            "_embedded": {"records": [render_record(r) for r in self.records]},
        }


class ResultPager:
    """Builds pages and their window-shifting ``next`` links.

    Clamped links close the window: an ascending link clamped to
    ``end_time`` (or a descending one clamped to ``start_time``) leaves
    ``start_time == end_time`` after adjustment. Following it is rejected
    with an invalid ``end_time`` field, which tells the client the window is
    exhausted. Unclamped links past the last trade return an empty page
    whose ``next`` equals ``self``.
    """

    def page(self, request: AggregationRequest, records: Sequence[AggregationRecord]) -> Page:
        self_link = Link(request.url)
        return Page(
            records=list(records),
            order=request.page.order,
            limit=request.page.limit,
            self_link=self_link,
            next_link=self.next_link(request, records) or self_link,
        )

    def next_link(
        self, request: AggregationRequest, records: Sequence[AggregationRecord]
    ) -> Optional[Link]:
        """Link to the following window, or None when the page is empty."""
        if not records:
            return None

        last = records[-1]
        if request.page.ascending:
            new_start = last.timestamp + request.resolution
            if request.end_time is not None and new_start >= request.end_time:
                new_start = request.end_time
            return Link(with_query_param(request.url, "start_time", new_start))

        new_end = last.timestamp
        if request.start_time is not None and new_end <= request.start_time:
            new_end = request.start_time
        return Link(with_query_param(request.url, "end_time", new_end))


def with_query_param(url: str, name: str, value: int) -> str:
    """Return ``url`` with one query parameter set, all others kept in place."""
    parts = urlsplit(url)
    pairs = parse_qsl(parts.query, keep_blank_values=True)

    replaced = False
    updated = []
    for key, current in pairs:
        if key != name:
            updated.append((key, current))
        elif not replaced:
            updated.append((key, str(value)))
            replaced = True
    if not replaced:
        updated.append((name, str(value)))

    return urlunsplit(parts._replace(query=urlencode(updated)))


def _render_price(price: Price) -> Dict[str, Any]:
    return {"N": price.n, "D": price.d}


def render_record(record: AggregationRecord) -> Dict[str, Any]:
    """Render one aggregation record resource."""
    return {
        "timestamp": record.timestamp,
        "trade_count": record.trade_count,
        "base_volume": format_amount(record.base_volume),
        "counter_volume": format_amount(record.counter_volume),
        "avg": f"{record.average:.7f}",
        "high": record.high.to_string(),
        "high_r": _render_price(record.high),
        "low": record.low.to_string(),
        "low_r": _render_price(record.low),
        "open": record.open.to_string(),
        "open_r": _render_price(record.open),
        "close": record.close.to_string(),
        "close_r": _render_price(record.close),
    }
