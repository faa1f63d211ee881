"""UTXO Settle error handling.

Exception hierarchy for contract violations and corrupted input. A rejected
transaction is a normal outcome and is reported through validation results,
not through these exceptions.
"""

from .exceptions import (
    ConfigurationError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    MalformedTransactionError,
    StorageError,
    TransactionError,
    UTXONotFoundError,
    UTXOSettleError,
    ValidationError,
    create_validation_error,
)

__all__ = [
    "UTXOSettleError",
    "ValidationError",
    "StorageError",
    "UTXONotFoundError",
    "TransactionError",
    "MalformedTransactionError",
    "ConfigurationError",
    "ErrorSeverity",
    "ErrorCategory",
    "ErrorContext",
    "create_validation_error",
]
