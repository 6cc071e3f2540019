# SPDX-License-Identifier: Apache-2.0
"""Trade Buckets package initialization."""

__version__ = "0.1.0"

__all__ = [
    "aggregation",
    "cli",
    "config",
    "domain",
    "metrics",
    "__version__",
]
