# SPDX-License-Identifier: Apache-2.0
"""Decoding of trade aggregation request parameters."""

from __future__ import annotations

import logging
from typing import Dict, List, Optional
from urllib.parse import parse_qs, urlsplit

from tradebuckets.domain.value_objects import Asset

from ..domain.errors import InvalidFieldError
from ..domain.services import ParameterValidator
from ..domain.value_objects import ORDERS, AggregationRequest, FieldError, PageQuery

logger = logging.getLogger(__name__)

DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 200


class AggregationParamsDecoder:
    """Turns a request URL into a validated ``AggregationRequest``.

    Every malformed or illegal parameter is collected before failing, so a
    single InvalidFieldError describes the whole request.
    """

    def __init__(
        self,
        validator: ParameterValidator,
        default_limit: int = DEFAULT_PAGE_LIMIT,
        max_limit: int = MAX_PAGE_LIMIT,
    ):
        self._validator = validator
        self._default_limit = default_limit
        self._max_limit = max_limit

    def decode(self, url: str) -> AggregationRequest:
        """Decode and validate the query string of ``url``.

        Raises:
            InvalidFieldError: If any parameter is missing, malformed or illegal
        """
        params = _first_values(urlsplit(url).query)
        errors: List[FieldError] = []

        base = self._asset(params, "base_", errors)
        counter = self._asset(params, "counter_", errors)
        self._check_pair(params, errors)

        resolution = self._int(params, "resolution", errors, default=0)
        offset = self._int(params, "offset", errors, default=0)
        if resolution is not None and offset is not None:
            errors.extend(self._validator.validate(resolution, offset))

        start_time = self._time(params, "start_time", errors)
        end_time = self._time(params, "end_time", errors)
        page = self._page(params, errors)

        if errors:
            logger.debug("Rejected aggregation request %s: %s", url, errors)
            raise InvalidFieldError(errors)

        return AggregationRequest(
            base_asset=base,
            counter_asset=counter,
            resolution=resolution,
            offset=offset,
            page=page,
            url=url,
            start_time=start_time,
            end_time=end_time,
        )

    def _asset(
        self, params: Dict[str, str], prefix: str, errors: List[FieldError]
    ) -> Optional[Asset]:
        try:
            return Asset.from_params(
                params.get(f"{prefix}asset_type"),
                params.get(f"{prefix}asset_code"),
                params.get(f"{prefix}asset_issuer"),
            )
        except ValueError as e:
            errors.append(FieldError(f"{prefix}asset", f"invalid {prefix}asset: {e}"))
            return None

    def _check_pair(self, params: Dict[str, str], errors: List[FieldError]) -> None:
        has_base = bool(params.get("base_asset_type"))
        has_counter = bool(params.get("counter_asset_type"))

        if has_base != has_counter:
            errors.append(
                FieldError(
                    "base_asset_type,counter_asset_type",
                    "this endpoint supports asset pairs but only one asset supplied",
                )
            )
        elif not has_base:
            errors.append(FieldError("base_asset_type", "missing required field"))
            errors.append(FieldError("counter_asset_type", "missing required field"))

    def _int(
        self,
        params: Dict[str, str],
        name: str,
        errors: List[FieldError],
        default: Optional[int] = None,
    ) -> Optional[int]:
        raw = params.get(name, "")
        if raw == "":
            return default
        try:
            return int(raw)
        except ValueError:
            errors.append(FieldError(name, f"unparseable value: {raw!r}"))
            return None

    def _time(self, params: Dict[str, str], name: str, errors: List[FieldError]) -> Optional[int]:
        value = self._int(params, name, errors)
        if value is not None and value < 0:
            errors.append(FieldError(name, "time must be a non-negative number of milliseconds"))
            return None
        return value

    def _page(self, params: Dict[str, str], errors: List[FieldError]) -> PageQuery:
        order = params.get("order", "") or ORDERS[0]
        if order not in ORDERS:
            errors.append(FieldError("order", 'order must be "asc" or "desc"'))
            order = ORDERS[0]

        limit = self._int(params, "limit", errors, default=self._default_limit)
        if limit is not None and not 1 <= limit <= self._max_limit:
            errors.append(FieldError("limit", f"limit must be between 1 and {self._max_limit}"))
            limit = None

        return PageQuery(
            order=order,
            limit=limit if limit is not None else self._default_limit,
            cursor=params.get("cursor", ""),
        )


def _first_values(query: str) -> Dict[str, str]:
    """First value of each query parameter, blanks included."""
    return {key: values[0] for key, values in parse_qs(query, keep_blank_values=True).items()}
