"""
Contracts Configuration Schema.

Defines the structure and sensible defaults for the contract editor.
Actual values are loaded from YAML through ``trading_config.get_active_config``.
"""

from dataclasses import dataclass, field
from typing import Self

from trading_kernel.exceptions import ConfigurationError
from trading_kernel.logging_config import get_logger
from trading_modules.contracts.models import ContractStatus

logger = get_logger("modules.contracts.config")


DEFAULT_UNITS = ("kg", "ton", "L", "m3", "piece", "drum")


@dataclass
class ContractsConfig:
    """
    Configuration schema for the contracts module.

    Override at instantiation with company-specific values:

        config = ContractsConfig(
            default_currency="AED",
            fallback_unit="L",
        )
    """

    # Draft defaults
    default_currency: str = "OMR"
    fallback_unit: str = "kg"
    units: tuple[str, ...] = field(default_factory=lambda: DEFAULT_UNITS)
    default_status: ContractStatus = ContractStatus.ACTIVE
    default_term_days: int = 365

    # Numbering
    contract_number_prefix: str = "CON"

    # Listing
    expiring_within_days: int = 30

    # Validation
    enforce_quantity_range: bool = False

    def __post_init__(self) -> None:
        if not self.default_currency or len(self.default_currency) != 3:
            raise ConfigurationError(
                "default_currency",
                f"must be a 3-letter currency code, got '{self.default_currency}'",
            )

        self.units = tuple(self.units)
        if not self.fallback_unit:
            raise ConfigurationError("fallback_unit", "cannot be blank")
        if self.fallback_unit not in self.units:
            raise ConfigurationError(
                "fallback_unit",
                f"must be one of {self.units}, got '{self.fallback_unit}'",
            )

        try:
            self.default_status = ContractStatus(self.default_status)
        except ValueError:
            raise ConfigurationError(
                "default_status",
                f"must be one of {[s.value for s in ContractStatus]}, "
                f"got '{self.default_status}'",
            ) from None

        if self.default_term_days <= 0:
            raise ConfigurationError("default_term_days", "must be positive")

        if self.expiring_within_days <= 0:
            raise ConfigurationError("expiring_within_days", "must be positive")

        if not self.contract_number_prefix:
            raise ConfigurationError("contract_number_prefix", "cannot be blank")

        logger.info(
            "contracts_config_initialized",
            extra={
                "default_currency": self.default_currency,
                "fallback_unit": self.fallback_unit,
                "default_status": self.default_status.value,
                "default_term_days": self.default_term_days,
                "enforce_quantity_range": self.enforce_quantity_range,
            },
        )

    @classmethod
    def with_defaults(cls) -> Self:
        """Create config with the module defaults."""
        logger.info("contracts_config_created_with_defaults")
        return cls()

    @classmethod
    def from_dict(cls, data: dict) -> Self:
        """Create config from dictionary (e.g., loaded from a YAML file)."""
        logger.info(
            "contracts_config_loading_from_dict",
            extra={"keys": sorted(data.keys())},
        )
        known = set(cls.__dataclass_fields__)
        unknown = sorted(set(data) - known)
        if unknown:
            raise ConfigurationError(unknown[0], "unknown setting")
        return cls(**data)
