# SPDX-License-Identifier: Apache-2.0
"""Domain value objects for Trade Buckets.

Value Objects are immutable objects that are defined by their values rather
than their identity. Assets, prices and amounts are the vocabulary shared by
the trade store and the aggregation layer.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum
from typing import Optional

STROOPS_PER_UNIT = 10_000_000
DISPLAY_PRECISION = Decimal("0.0000001")

_ISSUER_RE = re.compile(r"^G[A-Z2-7]{55}$")
_CODE_RE = re.compile(r"^[A-Za-z0-9]+$")


class AssetType(str, Enum):
    """Supported asset types."""

    NATIVE = "native"
    CREDIT_ALPHANUM4 = "credit_alphanum4"
    CREDIT_ALPHANUM12 = "credit_alphanum12"

    @classmethod
    def parse(cls, value: str) -> AssetType:
        try:
            return cls(value)
        except ValueError as e:
            allowed = ", ".join(t.value for t in cls)
            raise ValueError(f"unknown asset type {value!r}, expected one of: {allowed}") from e


@dataclass(frozen=True)
class Asset:
    """Tradable asset descriptor.

    Native assets have neither code nor issuer. Credit assets need both; the
    code length decides between alphanum4 (1-4 chars) and alphanum12 (5-12).
    """

    asset_type: AssetType
    code: str = ""
    issuer: str = ""

    def __post_init__(self):
        """Validate descriptor on creation."""
        if not isinstance(self.asset_type, AssetType):
            object.__setattr__(self, "asset_type", AssetType.parse(self.asset_type))

        if self.asset_type is AssetType.NATIVE:
            if self.code or self.issuer:
                raise ValueError("native asset cannot have a code or an issuer")
            return

        if not self.code:
            raise ValueError("credit asset requires a code")
        if not _CODE_RE.match(self.code):
            raise ValueError(f"asset code must be alphanumeric: {self.code!r}")
        if self.asset_type is AssetType.CREDIT_ALPHANUM4 and not 1 <= len(self.code) <= 4:
            raise ValueError(f"credit_alphanum4 code must be 1-4 characters: {self.code!r}")
        if self.asset_type is AssetType.CREDIT_ALPHANUM12 and not 5 <= len(self.code) <= 12:
            raise ValueError(f"credit_alphanum12 code must be 5-12 characters: {self.code!r}")

        if not self.issuer:
            raise ValueError("credit asset requires an issuer")
        if not _ISSUER_RE.match(self.issuer):
            raise ValueError(f"issuer is not a valid account id: {self.issuer!r}")

    @classmethod
    def native(cls) -> Asset:
        return cls(AssetType.NATIVE)

    @classmethod
    def credit(cls, code: str, issuer: str) -> Asset:
        """Build a credit asset, picking the type from the code length."""
        asset_type = (
            AssetType.CREDIT_ALPHANUM4 if len(code) <= 4 else AssetType.CREDIT_ALPHANUM12
        )
        return cls(asset_type, code, issuer)

    @classmethod
    def from_params(
        cls, asset_type: Optional[str], code: Optional[str], issuer: Optional[str]
    ) -> Optional[Asset]:
        """Build an asset from raw request parameters.

        Returns None when no asset type was supplied at all.

        Raises:
            ValueError: If the parameters do not describe a valid asset
        """
        if not asset_type:
            if code or issuer:
                raise ValueError("asset code or issuer supplied without an asset type")
            return None
        return cls(AssetType.parse(asset_type), code or "", issuer or "")

    @property
    def is_native(self) -> bool:
        return self.asset_type is AssetType.NATIVE

    def __str__(self) -> str:
        if self.is_native:
            return "native"
        return f"{self.code}:{self.issuer}"


@dataclass(frozen=True)
class Price:
    """Exact rational price ``n/d`` as stored with each trade."""

    n: int
    d: int

    def __post_init__(self):
        if self.d == 0:
            raise ValueError("price denominator cannot be zero")
        if self.n < 0 or self.d < 0:
            raise ValueError(f"price cannot be negative: {self.n}/{self.d}")

    def invert(self) -> Price:
        """Price of the counter asset in terms of the base asset."""
        return Price(self.d, self.n)

    def to_decimal(self) -> Decimal:
        return Decimal(self.n) / Decimal(self.d)

    def to_string(self) -> str:
        """Seven-decimal representation, halves rounded away from zero."""
        return str(self.to_decimal().quantize(DISPLAY_PRECISION, rounding=ROUND_HALF_UP))

    def __lt__(self, other: Price) -> bool:
        return self.n * other.d < other.n * self.d

    def __str__(self) -> str:
        return f"{self.n}/{self.d}"


def format_amount(stroops: int) -> str:
    """Render an integer stroop amount as a seven-decimal unit string."""
    sign = "-" if stroops < 0 else ""
    units, remainder = divmod(abs(int(stroops)), STROOPS_PER_UNIT)
    return f"{sign}{units}.{remainder:07d}"
