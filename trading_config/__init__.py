"""
trading_config -- single public entrypoint for contract editor configuration.

Responsibility:
    Provides the ONLY way to obtain configuration at runtime through
    ``get_active_config()``.  Other components receive a ``ContractsConfig``
    and never read configuration files or environment variables directly.

Architecture position:
    Configuration -- YAML-driven settings.  This package sits above
    ``trading_kernel`` and beside ``trading_modules``.  The kernel MUST
    NEVER import from ``trading_config``.

Resolution order:
    1. ``path`` argument
    2. ``TRADING_CONTRACTS_CONFIG`` environment variable
    3. ``trading_config/sets/contracts.yaml``

Failure modes:
    - ``FileNotFoundError`` -- the resolved file does not exist.
    - ``ConfigurationError`` -- missing section, unknown or invalid setting.

Every successful ``get_active_config()`` call emits a ``config_loaded``
log entry with the source path, config id, version and checksum.
"""

from __future__ import annotations

import os
from pathlib import Path

from trading_config.loader import compute_checksum, load_yaml_file, parse_contracts_config
from trading_kernel.logging_config import get_logger
from trading_modules.contracts.config import ContractsConfig

_logger = get_logger("config")

CONFIG_ENV_VAR = "TRADING_CONTRACTS_CONFIG"

# Default configuration file
_DEFAULT_CONFIG_PATH = Path(__file__).parent / "sets" / "contracts.yaml"


def resolve_config_path(path: Path | str | None = None) -> Path:
    if path is not None:
        return Path(path)
    override = os.environ.get(CONFIG_ENV_VAR)
    if override:
        return Path(override)
    return _DEFAULT_CONFIG_PATH


def get_active_config(path: Path | str | None = None) -> ContractsConfig:
    """The ONLY public configuration entrypoint.

    Args:
        path: Override path to a YAML configuration file.

    Raises:
        FileNotFoundError: If the configuration file does not exist.
        ConfigurationError: If the file holds invalid settings.
    """
    source = resolve_config_path(path)
    data = load_yaml_file(source)
    config = parse_contracts_config(data)

    _logger.info(
        "config_loaded",
        extra={
            "source": str(source),
            "config_id": data.get("config_id", "default"),
            "config_version": data.get("version"),
            "checksum": compute_checksum(data),
        },
    )
    return config


__all__ = ["CONFIG_ENV_VAR", "get_active_config", "resolve_config_path"]
