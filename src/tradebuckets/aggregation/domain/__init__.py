# SPDX-License-Identifier: Apache-2.0
"""Aggregation domain layer."""

from .errors import AggregationProblem, AssetNotFoundError, InvalidFieldError
from .services import ParameterValidator, TradeAggregationQuery, bucket_start
from .value_objects import (
    ALLOWED_RESOLUTIONS,
    AggregationRecord,
    AggregationRequest,
    FieldError,
    PageQuery,
    ResolutionSpec,
)

__all__ = [
    "ALLOWED_RESOLUTIONS",
    "AggregationProblem",
    "AggregationRecord",
    "AggregationRequest",
    "AssetNotFoundError",
    "FieldError",
    "InvalidFieldError",
    "PageQuery",
    "ParameterValidator",
    "ResolutionSpec",
    "TradeAggregationQuery",
    "bucket_start",
]
