# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import logging
import time
from typing import Optional, Tuple

from tradebuckets.config import TradeBucketsSettings
from tradebuckets.domain.repositories import (
    IAssetRepository,
    ITradeAggregationStore,
    NotFoundError,
)
from tradebuckets.domain.value_objects import Asset
from tradebuckets.metrics import AGG_ERRORS, AGG_LATENCY, AGG_RECORDS, AGG_REQUESTS

from ..domain.errors import AggregationProblem, AssetNotFoundError
from ..domain.services import ParameterValidator, TradeAggregationQuery
from ..domain.value_objects import AggregationRequest
from ..infrastructure.duckdb_store import DuckDBTradeStore
from .paging import Page, ResultPager
from .params import AggregationParamsDecoder


class TradeAggregationService:
    """Application service answering trade aggregation requests.

    Each request flows through independent stages: decode and validate the
    parameters, resolve the asset pair, build the bucketed query, run it and
    page the result. Nothing is shared between requests.
    """

    def __init__(
        self,
        assets: IAssetRepository,
        store: ITradeAggregationStore,
        decoder: AggregationParamsDecoder,
        pager: Optional[ResultPager] = None,
    ):
        """Initialize aggregation service.

        Args:
            assets: Resolves asset descriptors to store identifiers
            store: Executes bucketed aggregation queries
            decoder: Decodes and validates request parameters
            pager: Builds pages and next links
        """
        self._assets = assets
        self._store = store
        self._decoder = decoder
        self._pager = pager or ResultPager()
        self.log = logging.getLogger(self.__class__.__name__)

    def aggregate(self, url: str) -> Page:
        """Answer the aggregation request encoded in ``url``.

        Raises:
            InvalidFieldError: If the request parameters are invalid
            AssetNotFoundError: If either asset has never traded
        """
        started = time.perf_counter()
        try:
            request = self._decoder.decode(url)
            AGG_REQUESTS.labels(order=request.page.order).inc()

            query = self.build_query(request)
            records = self._store.select_aggregations(query)
            page = self._pager.page(request, records)
        except AggregationProblem as e:
            AGG_ERRORS.labels(problem=e.problem_type).inc()
            self.log.info(f"Aggregation request rejected ({e.problem_type}): {e.detail}")
            raise
        except Exception as e:
            AGG_ERRORS.labels(problem="store").inc()
            self.log.error(f"Aggregation request failed: {e}")
            raise
        finally:
            AGG_LATENCY.observe(time.perf_counter() - started)

        AGG_RECORDS.labels(resolution=str(request.resolution)).inc(len(page.records))
        self.log.debug(
            f"Returned {len(page.records)} records for {request.base_asset}/"
            f"{request.counter_asset} at resolution {request.resolution}"
        )
        return page

    def resolve_assets(self, request: AggregationRequest) -> Tuple[int, int]:
        """Look up the store identifiers of the base and counter assets."""
        base_id = self._resolve(request.base_asset, "base_asset")
        counter_id = self._resolve(request.counter_asset, "counter_asset")
        return base_id, counter_id

    def _resolve(self, asset: Asset, field: str) -> int:
        try:
            return self._assets.get_asset_id(asset)
        except NotFoundError as e:
            raise AssetNotFoundError(field) from e

    def build_query(self, request: AggregationRequest) -> TradeAggregationQuery:
        """Resolve the asset pair and narrow the query to the requested window."""
        base_id, counter_id = self.resolve_assets(request)

        query = TradeAggregationQuery(
            base_asset_id=base_id,
            counter_asset_id=counter_id,
            resolution=request.resolution,
            offset=request.offset,
            page=request.page,
        )
        if request.start_time is not None:
            query = query.with_start_time(request.start_time)
        if request.end_time is not None:
            query = query.with_end_time(request.end_time)
        return query

    @classmethod
    def build_default(
        cls,
        settings: Optional[TradeBucketsSettings] = None,
        store: Optional[DuckDBTradeStore] = None,
    ) -> TradeAggregationService:
        """Build service backed by the configured DuckDB store.

        Args:
            settings: Deployment settings (environment defaults when omitted)
            store: Already opened store to use instead of opening settings.database_path

        Returns:
            Configured trade aggregation service
        """
        settings = settings or TradeBucketsSettings()
        store = store or DuckDBTradeStore(settings.database_path)
        decoder = AggregationParamsDecoder(
            ParameterValidator(settings.strict_resolution_filtering),
            default_limit=settings.default_page_limit,
            max_limit=settings.max_page_limit,
        )
        return cls(assets=store, store=store, decoder=decoder)
