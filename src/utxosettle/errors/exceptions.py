"""Exception hierarchy for UTXO Settle.

This module defines the exceptions the settlement core raises. Ordinary
transaction invalidity is never an exception; these cover contract
violations, corrupted input and bad configuration.
"""

import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """Error severity levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories."""

    VALIDATION = "validation"
    STORAGE = "storage"
    TRANSACTION = "transaction"
    CONFIGURATION = "configuration"
    SYSTEM = "system"


@dataclass
class ErrorContext:
    """Context information for an error."""

    timestamp: float = field(default_factory=time.time)
    component: Optional[str] = None
    operation: Optional[str] = None
    batch_id: Optional[str] = None
    metadata: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert context to dictionary."""
        return {
            "timestamp": self.timestamp,
            "component": self.component,
            "operation": self.operation,
            "batch_id": self.batch_id,
            "metadata": self.metadata,
        }


class UTXOSettleError(Exception):
    """Base exception for all UTXO Settle errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        severity: ErrorSeverity = ErrorSeverity.MEDIUM,
        category: ErrorCategory = ErrorCategory.SYSTEM,
        context: Optional[ErrorContext] = None,
        cause: Optional[Exception] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.severity = severity
        self.category = category
        self.context = context or ErrorContext()
        self.cause = cause
        self.metadata = metadata or {}
        self.timestamp = time.time()

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary."""
        return {
            "type": self.__class__.__name__,
            "message": self.message,
            "error_code": self.error_code,
            "severity": self.severity.value,
            "category": self.category.value,
            "context": self.context.to_dict(),
            "cause": str(self.cause) if self.cause else None,
            "metadata": self.metadata,
            "timestamp": self.timestamp,
        }

    def __str__(self) -> str:
        parts = [f"{self.__class__.__name__}: {self.message}"]

        if self.error_code:
            parts.append(f"Code: {self.error_code}")

        if self.severity != ErrorSeverity.MEDIUM:
            parts.append(f"Severity: {self.severity.value}")

        if self.category != ErrorCategory.SYSTEM:
            parts.append(f"Category: {self.category.value}")

        return " | ".join(parts)


class ValidationError(UTXOSettleError):
    """Validation error."""

    def __init__(
        self,
        message: str,
        field: Optional[str] = None,
        value: Optional[Any] = None,
        expected: Optional[Any] = None,
        **kwargs,
    ):
        super().__init__(message, category=ErrorCategory.VALIDATION, **kwargs)
        self.field = field
        self.value = value
        self.expected = expected

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "field": self.field,
                "value": str(self.value) if self.value is not None else None,
                "expected": str(self.expected) if self.expected is not None else None,
            }
        )
        return data


class StorageError(UTXOSettleError):
    """Storage error."""

    def __init__(
        self,
        message: str,
        storage_type: Optional[str] = None,
        operation: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, category=ErrorCategory.STORAGE, **kwargs)
        self.storage_type = storage_type
        self.operation = operation

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"storage_type": self.storage_type, "operation": self.operation})
        return data


class UTXONotFoundError(StorageError, KeyError):
    """Lookup of a UTXO that is not in the pool."""

    def __init__(self, utxo: Any, **kwargs):
        super().__init__(
            f"UTXO {utxo} not found",
            storage_type="utxo_pool",
            operation="get_output",
            error_code="UTXO_NOT_FOUND",
            **kwargs,
        )
        self.utxo = utxo

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return UTXOSettleError.__str__(self)


class TransactionError(UTXOSettleError):
    """Transaction error."""

    def __init__(
        self,
        message: str,
        transaction_id: Optional[str] = None,
        **kwargs,
    ):
        super().__init__(message, category=ErrorCategory.TRANSACTION, **kwargs)
        self.transaction_id = transaction_id

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update({"transaction_id": self.transaction_id})
        return data


class MalformedTransactionError(TransactionError):
    """A transaction whose structure is corrupt, as opposed to merely invalid."""

    def __init__(self, message: str, **kwargs):
        kwargs.setdefault("error_code", "MALFORMED_TRANSACTION")
        kwargs.setdefault("severity", ErrorSeverity.HIGH)
        super().__init__(message, **kwargs)


class ConfigurationError(UTXOSettleError):
    """Configuration error."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        **kwargs,
    ):
        super().__init__(message, category=ErrorCategory.CONFIGURATION, **kwargs)
        self.config_key = config_key
        self.config_value = config_value

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        data.update(
            {
                "config_key": self.config_key,
                "config_value": str(self.config_value)
                if self.config_value is not None
                else None,
            }
        )
        return data


def create_validation_error(
    field: str, value: Any, expected: Any, message: Optional[str] = None
) -> ValidationError:
    """Create a validation error."""
    if message is None:
        message = f"Invalid value for field '{field}': expected {expected}, got {value}"

    return ValidationError(message=message, field=field, value=value, expected=expected)
