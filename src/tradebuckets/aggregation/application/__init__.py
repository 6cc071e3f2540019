# SPDX-License-Identifier: Apache-2.0
"""Aggregation application layer."""

from .paging import Link, Page, ResultPager, render_record
from .params import AggregationParamsDecoder
from .services import TradeAggregationService

__all__ = [
    "AggregationParamsDecoder",
    "Link",
    "Page",
    "ResultPager",
    "TradeAggregationService",
    "render_record",
]
