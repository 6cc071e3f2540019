# SPDX-License-Identifier: Apache-2.0
"""Unit tests for page assembly and time-window next links."""

from __future__ import annotations

from urllib.parse import parse_qs, urlsplit

import pytest

from tests.conftest import HOUR
from tradebuckets.aggregation.application.paging import (
    ResultPager,
    render_record,
    with_query_param,
)
from tradebuckets.aggregation.domain.value_objects import (
    AggregationRecord,
    AggregationRequest,
    PageQuery,
)
from tradebuckets.domain.value_objects import Price


def record(timestamp: int) -> AggregationRecord:
    return AggregationRecord(
        timestamp=timestamp,
        trade_count=2,
        base_volume=30_000_000,
        counter_volume=45_000_000,
        average=1.5,
        high=Price(2, 1),
        low=Price(1, 1),
        open=Price(1, 1),
        close=Price(2, 1),
    )


def make_request(url, native, usd, order="asc", start_time=None, end_time=None):
    return AggregationRequest(
        base_asset=native,
        counter_asset=usd,
        resolution=HOUR,
        offset=0,
        page=PageQuery(order=order),
        url=url,
        start_time=start_time,
        end_time=end_time,
    )


def query_of(href: str) -> dict:
    return {k: v[0] for k, v in parse_qs(urlsplit(href).query).items()}


@pytest.fixture
def pager():
    return ResultPager()


class TestNextLink:
    def test_ascending_advances_start(self, pager, aggregation_url, native, usd):
        url = aggregation_url(end_time=1005 * HOUR)
        request = make_request(url, native, usd, end_time=1005 * HOUR)

        page = pager.page(request, [record(999 * HOUR), record(1000 * HOUR)])

        params = query_of(page.next_link.href)
        assert params["start_time"] == str(1001 * HOUR)
        assert params["end_time"] == str(1005 * HOUR)

    def test_ascending_clamps_to_end(self, pager, aggregation_url, native, usd):
        url = aggregation_url(start_time=0, end_time=1000 * HOUR + 10)
        request = make_request(url, native, usd, start_time=0, end_time=1000 * HOUR + 10)

        page = pager.page(request, [record(1000 * HOUR)])

        assert query_of(page.next_link.href)["start_time"] == str(1000 * HOUR + 10)

    def test_ascending_without_end_is_unbounded(self, pager, aggregation_url, native, usd):
        request = make_request(aggregation_url(), native, usd)
        page = pager.page(request, [record(7 * HOUR)])
        assert query_of(page.next_link.href)["start_time"] == str(8 * HOUR)

    def test_descending_moves_end(self, pager, aggregation_url, native, usd):
        url = aggregation_url(order="desc", start_time=2 * HOUR)
        request = make_request(url, native, usd, order="desc", start_time=2 * HOUR)

        page = pager.page(request, [record(9 * HOUR), record(6 * HOUR)])

        params = query_of(page.next_link.href)
        assert params["end_time"] == str(6 * HOUR)
        assert params["start_time"] == str(2 * HOUR)

    def test_descending_clamps_to_start(self, pager, aggregation_url, native, usd):
        url = aggregation_url(order="desc", start_time=5 * HOUR)
        request = make_request(url, native, usd, order="desc", start_time=5 * HOUR)

        page = pager.page(request, [record(4 * HOUR)])

        assert query_of(page.next_link.href)["end_time"] == str(5 * HOUR)

    @pytest.mark.parametrize("order", ["asc", "desc"])
    def test_empty_page_links_to_itself(self, pager, aggregation_url, native, usd, order):
        url = aggregation_url(order=order)
        page = pager.page(make_request(url, native, usd, order=order), [])

        assert page.records == []
        assert page.next_link == page.self_link
        assert page.self_link.href == url

    def test_other_parameters_preserved(self, pager, aggregation_url, native, usd):
        url = aggregation_url(limit=3, cursor="opaque")
        page = pager.page(make_request(url, native, usd), [record(0)])

        before, after = query_of(url), query_of(page.next_link.href)
        assert after.pop("start_time") == str(HOUR)
        assert after == before
        assert urlsplit(page.next_link.href).netloc == urlsplit(url).netloc


class TestWithQueryParam:
    def test_replaces_in_place(self):
        url = "https://h.example/trade_aggregations?start_time=1&resolution=60000"
        assert (
            with_query_param(url, "start_time", 5)
            == "https://h.example/trade_aggregations?start_time=5&resolution=60000"
        )

    def test_appends_when_missing(self):
        url = "https://h.example/trade_aggregations?resolution=60000"
        assert with_query_param(url, "end_time", 9).endswith("resolution=60000&end_time=9")

    def test_setting_same_value_is_idempotent(self):
        url = "https://h.example/trade_aggregations?resolution=60000&start_time=7"
        assert with_query_param(url, "start_time", 7) == url


class TestRendering:
    def test_render_record(self):
        rendered = render_record(record(HOUR))
        assert rendered["timestamp"] == HOUR
        assert rendered["trade_count"] == 2
        assert rendered["base_volume"] == "3.0000000"
        assert rendered["counter_volume"] == "4.5000000"
        assert rendered["avg"] == "1.5000000"
        assert rendered["high"] == "2.0000000"
        assert rendered["high_r"] == {"N": 2, "D": 1}
        assert rendered["low_r"] == {"N": 1, "D": 1}

    def test_page_document(self, pager, aggregation_url, native, usd):
        url = aggregation_url()
        page = pager.page(make_request(url, native, usd), [record(0), record(HOUR)])
        doc = page.to_dict()

        assert doc["_links"]["self"] == {"href": url}
        assert doc["_links"]["next"]["href"] != url
        assert [r["timestamp"] for r in doc["_embedded"]["records"]] == [0, HOUR]
