# SPDX-License-Identifier: Apache-2.0
"""Fake implementations of the store interfaces for tests."""

from __future__ import annotations

from .repositories import BrokenTradeStore, FakeTrade, FakeTradeStore

__all__ = [
    "FakeTrade",
    "FakeTradeStore",
    "BrokenTradeStore",
]
