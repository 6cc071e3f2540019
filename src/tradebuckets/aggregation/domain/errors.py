# SPDX-License-Identifier: Apache-2.0
"""Request-scoped problems raised while answering an aggregation request."""

from __future__ import annotations

from typing import Any, Dict, Iterable, List

from .value_objects import FieldError


class AggregationProblem(Exception):
    """Base class for problems that render as a problem document."""

    status = 500
    problem_type = "server_error"
    title = "Internal Server Error"

    def __init__(self, detail: str):
        super().__init__(detail)
        self.detail = detail

    def extras(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Render as a problem document."""
        doc: Dict[str, Any] = {
            "type": self.problem_type,
            "title": self.title,
            "status": self.status,
            "detail": self.detail,
        }
        extras = self.extras()
        if extras:
            doc["extras"] = extras
        return doc


class InvalidFieldError(AggregationProblem):
    """One or more request fields are invalid.

    Every failure found is kept; the first one is also exposed as
    ``invalid_field``/``reason`` for clients that only read a single field.
    """

    status = 400
    problem_type = "bad_request"
    title = "Bad Request"

    def __init__(self, errors: Iterable[FieldError]):
        self.errors: List[FieldError] = list(errors)
        if not self.errors:
            raise ValueError("InvalidFieldError requires at least one field error")
        fields = ", ".join(e.field for e in self.errors)
        super().__init__(
            "The request you sent was invalid in some way. "
            f"Invalid field(s): {fields}"
        )

    @classmethod
    def single(cls, field: str, reason: str) -> InvalidFieldError:
        return cls([FieldError(field, reason)])

    @property
    def fields(self) -> List[str]:
        return [e.field for e in self.errors]

    def extras(self) -> Dict[str, Any]:
        first = self.errors[0]
        return {
            "invalid_field": first.field,
            "reason": first.reason,
            "invalid_fields": [{"field": e.field, "reason": e.reason} for e in self.errors],
        }


class AssetNotFoundError(AggregationProblem):
    """One side of the asset pair has never traded."""

    status = 404
    problem_type = "not_found"
    title = "Resource Missing"

    def __init__(self, field: str):
        self.field = field
        super().__init__(
            "The resource at the url requested was not found. "
            f"No trades have been recorded for {field}."
        )

    def extras(self) -> Dict[str, Any]:
        return {"invalid_field": self.field, "reason": "not found"}
