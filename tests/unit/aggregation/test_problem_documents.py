# SPDX-License-Identifier: Apache-2.0
from __future__ import annotations

import pytest

from tradebuckets.aggregation.domain.errors import (
    AggregationProblem,
    AssetNotFoundError,
    InvalidFieldError,
)
from tradebuckets.aggregation.domain.value_objects import FieldError


def test_invalid_field_document():
    error = InvalidFieldError(
        [FieldError("resolution", "bad resolution"), FieldError("offset", "bad offset")]
    )
    doc = error.to_dict()

    assert doc["type"] == "bad_request"
    assert doc["status"] == 400
    assert doc["extras"]["invalid_field"] == "resolution"
    assert doc["extras"]["reason"] == "bad resolution"
    assert doc["extras"]["invalid_fields"] == [
        {"field": "resolution", "reason": "bad resolution"},
        {"field": "offset", "reason": "bad offset"},
    ]


def test_invalid_field_requires_errors():
    with pytest.raises(ValueError):
        InvalidFieldError([])


def test_single_field_error():
    error = InvalidFieldError.single("end_time", "too early")
    assert error.fields == ["end_time"]
    assert isinstance(error, AggregationProblem)


def test_not_found_document():
    doc = AssetNotFoundError("counter_asset").to_dict()
    assert doc["type"] == "not_found"
    assert doc["status"] == 404
    assert doc["extras"] == {"invalid_field": "counter_asset", "reason": "not found"}
    assert "counter_asset" in doc["detail"]
