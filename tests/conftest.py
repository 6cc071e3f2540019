# SPDX-License-Identifier: Apache-2.0
"""Shared test fixtures for the Trade Buckets test suite.

FIXTURES PROVIDED:
- native, usd, eur: asset descriptors with valid issuers
- trade_store: FakeTradeStore with the three assets registered
- service: TradeAggregationService over the fake store
- aggregation_url: builds request URLs from keyword parameters
"""

from __future__ import annotations

from urllib.parse import urlencode

import pytest

from tests.fakes.repositories import FakeTradeStore
from tradebuckets.aggregation.application.params import AggregationParamsDecoder
from tradebuckets.aggregation.application.services import TradeAggregationService
from tradebuckets.aggregation.domain.services import ParameterValidator
from tradebuckets.domain.value_objects import Asset

USD_ISSUER = "GCEZWKCA5VLDNRLN3RPRJMRZOX3Z6G5CHCGSNFHEYVXM3XOJMDS674JZ"
EUR_ISSUER = "GDUKMGUGDZQK6YHYA5Z6AY2G4XDSZPSZ3SW5UN3ARVMO6QSRDWP5YLEX"
LONG_ISSUER = "GBSTRUSD7IRX73RQZBL3RQUH6KS3O4NYFY3QCALDLZD77XMZOPWAVTUK"

BASE_URL = "https://horizon.example/trade_aggregations"

HOUR = 3_600_000


@pytest.fixture
def native() -> Asset:
    return Asset.native()


@pytest.fixture
def usd() -> Asset:
    return Asset.credit("USD", USD_ISSUER)


@pytest.fixture
def eur() -> Asset:
    return Asset.credit("EUR", EUR_ISSUER)


@pytest.fixture
def trade_store(native, usd, eur) -> FakeTradeStore:
    store = FakeTradeStore()
    for asset in (native, usd, eur):
        store.add_asset(asset)
    return store


@pytest.fixture
def service(trade_store) -> TradeAggregationService:
    decoder = AggregationParamsDecoder(ParameterValidator(strict_resolution_filtering=True))
    return TradeAggregationService(assets=trade_store, store=trade_store, decoder=decoder)


def asset_params(prefix: str, asset: Asset) -> dict:
    params = {f"{prefix}_asset_type": asset.asset_type.value}
    if not asset.is_native:
        params[f"{prefix}_asset_code"] = asset.code
        params[f"{prefix}_asset_issuer"] = asset.issuer
    return params


@pytest.fixture
def aggregation_url(native, usd):
    """Build a request URL; native/USD at one hour unless overridden."""

    def _build(base: Asset = native, counter: Asset = usd, **params) -> str:
        query = {**asset_params("base", base), **asset_params("counter", counter)}
        query.setdefault("resolution", HOUR)
        query.update(params)
        return f"{BASE_URL}?{urlencode(query)}"

    return _build
