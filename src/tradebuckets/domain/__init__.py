# SPDX-License-Identifier: Apache-2.0
"""Shared domain layer: assets, prices and store interfaces."""

from .repositories import (
    IAssetRepository,
    ITradeAggregationStore,
    NotFoundError,
    RepositoryError,
)
from .value_objects import Asset, AssetType, Price, format_amount

__all__ = [
    "Asset",
    "AssetType",
    "Price",
    "format_amount",
    "IAssetRepository",
    "ITradeAggregationStore",
    "RepositoryError",
    "NotFoundError",
]
