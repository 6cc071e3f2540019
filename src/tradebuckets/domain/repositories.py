# SPDX-License-Identifier: Apache-2.0
"""Repository interfaces for the Trade Buckets domain.

Repositories provide a domain-focused interface for data access,
abstracting the underlying persistence mechanism. They are defined
in the domain layer as interfaces and implemented in infrastructure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, List

from .value_objects import Asset

if TYPE_CHECKING:
    from tradebuckets.aggregation.domain.services import TradeAggregationQuery
    from tradebuckets.aggregation.domain.value_objects import AggregationRecord


class IAssetRepository(ABC):
    """Maps asset descriptors to the numeric identifiers used by the trade store."""

    @abstractmethod
    def get_asset_id(self, asset: Asset) -> int:
        """Look up the identifier of an asset.

        Args:
            asset: Asset descriptor

        Returns:
            Numeric asset identifier

        Raises:
            NotFoundError: If the asset has never traded
        """
        ...


class ITradeAggregationStore(ABC):
    """Executes bucketed aggregation queries against stored trades."""

    @abstractmethod
    def select_aggregations(self, query: TradeAggregationQuery) -> List[AggregationRecord]:
        """Run an aggregation query.

        Args:
            query: Fully built aggregation query

        Returns:
            One record per bucket, ordered and limited as the query requests
        """
        ...


class RepositoryError(Exception):
    """Base exception for repository operations."""

    pass


class NotFoundError(RepositoryError):
    """Raised when a requested row does not exist."""

    pass
