# SPDX-License-Identifier: Apache-2.0
"""Centralized configuration loader with version validation."""

from __future__ import annotations

import os
import warnings
from pathlib import Path
from typing import Any, Dict, Optional, Union

import yaml

from .settings import CURRENT_CONFIG_VERSION, MIN_SUPPORTED_VERSION, TradeBucketsSettings

PathLike = Union[str, Path]


class ConfigVersionError(RuntimeError):
    """Error when configuration version is incompatible."""
    pass


def load_settings(path: Optional[PathLike] = None) -> TradeBucketsSettings:
    """Load settings from the environment, overlaid with an optional YAML file.

    Args:
        path: Path to YAML configuration file

    Returns:
        TradeBucketsSettings instance

    Raises:
        ConfigVersionError: If config version is missing, too old, or incompatible
        FileNotFoundError: If the YAML file doesn't exist
        ValueError: If the YAML is invalid or contains invalid configuration
    """
    if path is None:
        return TradeBucketsSettings()

    yaml_path = Path(path)
    if not yaml_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        with open(yaml_path, "r") as f:
            yaml_content = f.read()

        # Expand environment variables
        expanded_content = os.path.expandvars(yaml_content)

        cfg_dict = yaml.safe_load(expanded_content)
        if not isinstance(cfg_dict, dict):
            raise ValueError("YAML file must contain a dictionary at the root level")

        normalized_data = _normalize_yaml_keys(cfg_dict)

        ver = str(normalized_data.get("config_version", ""))
        if not ver:
            raise ConfigVersionError(
                "config_version missing. Add `config_version: \"1\"` to your YAML."
            )

        if not ver.isdigit():
            raise ConfigVersionError(
                f"config_version must be a whole number, got {ver!r}."
            )

        if int(ver) < int(MIN_SUPPORTED_VERSION):
            raise ConfigVersionError(
                f"Config version {ver} is too old. "
                f"Minimum supported is {MIN_SUPPORTED_VERSION}. "
                "Please upgrade your configuration."
            )

        if int(ver) > int(CURRENT_CONFIG_VERSION):
            warnings.warn(
                f"This binary understands config_version {CURRENT_CONFIG_VERSION}, "
                f"but file is {ver}. Attempting best-effort parse.",
                UserWarning,
                stacklevel=2,
            )

        normalized_data["config_version"] = ver
        return TradeBucketsSettings(**normalized_data)

    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in configuration file: {e}") from e
    except Exception as e:
        if isinstance(e, (ConfigVersionError, FileNotFoundError, ValueError)):
            raise
        raise ValueError(f"Failed to load configuration from {path}: {e}") from e


def _normalize_yaml_keys(data: Dict[str, Any]) -> Dict[str, Any]:
    """Normalize YAML keys from kebab-case to snake_case."""
    return {str(key).replace("-", "_"): value for key, value in data.items()}
