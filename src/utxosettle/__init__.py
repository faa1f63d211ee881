"""
UTXO Settle: batch settlement of UTXO transactions.

Validates candidate transactions against a pool of unspent outputs and
commits a conflict-free subset of each batch, either in supplied order or
highest fee first.
"""

from .core import (
    UTXO,
    SettlementConfig,
    SettlementEngine,
    SettlementPolicy,
    SettlementReport,
    Transaction,
    TransactionInput,
    TransactionOutput,
    TransactionValidator,
    UTXOPool,
    ValidationResult,
    first_fit_engine,
    max_fee_engine,
)
from .crypto import Hash, PrivateKey, PublicKey, Signature

__version__ = "0.1.0"

__all__ = [
    "UTXO",
    "Transaction",
    "TransactionInput",
    "TransactionOutput",
    "UTXOPool",
    "TransactionValidator",
    "ValidationResult",
    "SettlementPolicy",
    "SettlementConfig",
    "SettlementEngine",
    "SettlementReport",
    "first_fit_engine",
    "max_fee_engine",
    "Hash",
    "PrivateKey",
    "PublicKey",
    "Signature",
]
