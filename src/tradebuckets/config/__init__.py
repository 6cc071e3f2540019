# SPDX-License-Identifier: Apache-2.0
"""Configuration management for Trade Buckets."""

from .loader import ConfigVersionError, load_settings
from .settings import CURRENT_CONFIG_VERSION, MIN_SUPPORTED_VERSION, TradeBucketsSettings

__all__ = [
    "TradeBucketsSettings",
    "CURRENT_CONFIG_VERSION",
    "MIN_SUPPORTED_VERSION",
    "load_settings",
    "ConfigVersionError",
]
