"""
Tests for the exception hierarchy.
"""

import pytest

from utxosettle.errors import (
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


class TestUTXOSettleError:
    """Test the base exception."""

    def test_defaults(self):
        error = UTXOSettleError("boom")

        assert error.message == "boom"
        assert error.severity is ErrorSeverity.MEDIUM
        assert error.category is ErrorCategory.SYSTEM
        assert isinstance(error.context, ErrorContext)
        assert str(error) == "UTXOSettleError: boom"

    def test_str_includes_non_default_fields(self):
        error = UTXOSettleError(
            "boom",
            error_code="E1",
            severity=ErrorSeverity.CRITICAL,
            category=ErrorCategory.STORAGE,
        )
        assert str(error) == (
            "UTXOSettleError: boom | Code: E1 | Severity: critical | Category: storage"
        )

    def test_to_dict(self):
        cause = ValueError("root cause")
        context = ErrorContext(component="settlement", operation="settle", batch_id="b1")
        error = UTXOSettleError("boom", context=context, cause=cause, metadata={"k": 1})

        data = error.to_dict()

        assert data["type"] == "UTXOSettleError"
        assert data["cause"] == "root cause"
        assert data["metadata"] == {"k": 1}
        assert data["context"]["batch_id"] == "b1"
        assert data["context"]["component"] == "settlement"


class TestSubclasses:
    """Test the specific error types."""

    def test_hierarchy(self):
        assert issubclass(MalformedTransactionError, TransactionError)
        assert issubclass(UTXONotFoundError, StorageError)
        assert issubclass(UTXONotFoundError, KeyError)
        for cls in (
            ValidationError,
            StorageError,
            TransactionError,
            ConfigurationError,
        ):
            assert issubclass(cls, UTXOSettleError)

    def test_malformed_defaults(self):
        error = MalformedTransactionError("bad", transaction_id="abc")

        assert error.error_code == "MALFORMED_TRANSACTION"
        assert error.severity is ErrorSeverity.HIGH
        assert error.category is ErrorCategory.TRANSACTION
        assert error.to_dict()["transaction_id"] == "abc"

    def test_malformed_overrides(self):
        error = MalformedTransactionError("bad", severity=ErrorSeverity.LOW)
        assert error.severity is ErrorSeverity.LOW

    def test_utxo_not_found(self):
        error = UTXONotFoundError("utxo-1")

        assert error.utxo == "utxo-1"
        assert error.operation == "get_output"
        assert str(error).startswith("UTXONotFoundError: UTXO utxo-1 not found")
        with pytest.raises(KeyError):
            raise error

    def test_configuration_to_dict(self):
        error = ConfigurationError("bad", config_key="max_batch_size", config_value=0)
        data = error.to_dict()
        assert data["config_key"] == "max_batch_size"
        assert data["config_value"] == "0"

    def test_create_validation_error(self):
        error = create_validation_error("candidates", 5, "at most 2 transactions")

        assert error.field == "candidates"
        assert error.category is ErrorCategory.VALIDATION
        assert "expected at most 2 transactions, got 5" in error.message
        assert error.to_dict()["value"] == "5"
