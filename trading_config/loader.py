"""
Configuration Loader (``trading_config.loader``).

Responsibility
--------------
Load YAML configuration files and parse them into typed configuration
objects.  Runtime callers go through ``trading_config.get_active_config()``
rather than calling this module directly.

Architecture position
---------------------
**Config layer** -- infrastructure tooling.  Depends on the modules'
configuration schemas; the kernel never imports it.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Missing ``contracts`` section, unknown or out-of-range settings  ->
  ``ConfigurationError``.
"""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any

import yaml

from trading_kernel.exceptions import ConfigurationError
from trading_modules.contracts.config import ContractsConfig


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Preconditions:
        - ``path`` must point to an existing, readable YAML file.
    Postconditions:
        - Returns a ``dict`` (possibly empty if the YAML is empty).
    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
    """
    with open(path, encoding="utf-8") as f:
        return yaml.safe_load(f) or {}


def compute_checksum(data: dict[str, Any]) -> str:
    """Deterministic SHA-256 of a parsed configuration document."""
    canonical = json.dumps(data, sort_keys=True, default=str)
    return hashlib.sha256(canonical.encode("utf-8")).hexdigest()


def parse_contracts_config(data: dict[str, Any]) -> ContractsConfig:
    """Build ``ContractsConfig`` from the ``contracts`` section of a document."""
    section = data.get("contracts")
    if section is None:
        raise ConfigurationError("contracts", "section is missing")
    if not isinstance(section, dict):
        raise ConfigurationError("contracts", "must be a mapping")

    if "units" in section:
        section = {**section, "units": tuple(section["units"])}
    return ContractsConfig.from_dict(section)
