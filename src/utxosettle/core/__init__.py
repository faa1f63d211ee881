"""
Core settlement components for UTXO Settle.

This module provides the ledger data structures and settlement logic:
- Transaction, its inputs and outputs, and the UTXO coordinate
- The UTXO pool
- Transaction validation
- Batch settlement under first-fit and max-fee policies
"""

import logging

logger = logging.getLogger(__name__)
from .config import SettlementConfig, SettlementPolicy
from .settlement import (
    SettlementEngine,
    SettlementReport,
    first_fit_engine,
    max_fee_engine,
)
from .transaction import UTXO, Amount, Transaction, TransactionInput, TransactionOutput
from .utxo_pool import UTXOPool
from .validator import RejectionReason, TransactionValidator, ValidationResult

__all__ = [
    "UTXO",
    "Amount",
    "Transaction",
    "TransactionInput",
    "TransactionOutput",
    "UTXOPool",
    "TransactionValidator",
    "ValidationResult",
    "RejectionReason",
    "SettlementPolicy",
    "SettlementConfig",
    "SettlementEngine",
    "SettlementReport",
    "first_fit_engine",
    "max_fee_engine",
]
