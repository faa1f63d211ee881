"""
Settlement configuration for UTXO Settle.
"""

import logging

logger = logging.getLogger(__name__)
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from ..errors.exceptions import ConfigurationError


class SettlementPolicy(Enum):
    """Order in which a batch is offered to the pool."""

    FIRST_FIT = "first_fit"  # supplied order
    MAX_FEE = "max_fee"  # highest opening fee first, stable

    @classmethod
    def parse(cls, value: Any) -> "SettlementPolicy":
        """Accept a policy, its value or its name (case-insensitive)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            for policy in cls:
                if value.lower() in (policy.value, policy.name.lower()):
                    return policy
        raise ConfigurationError(
            f"Unknown settlement policy: {value!r}",
            config_key="policy",
            config_value=value,
        )


@dataclass
class SettlementConfig:
    """Configuration for batch settlement."""

    policy: SettlementPolicy = SettlementPolicy.FIRST_FIT

    # Malformed candidates are logged and skipped; False re-raises them
    skip_malformed: bool = True

    # Log every rejected candidate at debug level
    log_rejections: bool = True

    # Largest batch accepted by a single settle call; None for unbounded
    max_batch_size: Optional[int] = None

    def validate(self) -> None:
        """Raise ConfigurationError if the configuration is unusable."""
        if not isinstance(self.policy, SettlementPolicy):
            raise ConfigurationError(
                f"Unknown settlement policy: {self.policy!r}",
                config_key="policy",
                config_value=self.policy,
            )
        if self.max_batch_size is not None and (
            not isinstance(self.max_batch_size, int) or self.max_batch_size <= 0
        ):
            raise ConfigurationError(
                "max_batch_size must be a positive integer",
                config_key="max_batch_size",
                config_value=self.max_batch_size,
            )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SettlementConfig":
        """Build a configuration from a plain mapping."""
        known = {"policy", "skip_malformed", "log_rejections", "max_batch_size"}
        unknown = set(data) - known
        if unknown:
            raise ConfigurationError(
                f"Unknown settlement configuration keys: {sorted(unknown)}",
                config_key=sorted(unknown)[0],
            )

        values = dict(data)
        if "policy" in values:
            values["policy"] = SettlementPolicy.parse(values["policy"])

        config = cls(**values)
        config.validate()
        return config

    def to_dict(self) -> Dict[str, Any]:
        return {
            "policy": self.policy.value,
            "skip_malformed": self.skip_malformed,
            "log_rejections": self.log_rejections,
            "max_batch_size": self.max_batch_size,
        }
