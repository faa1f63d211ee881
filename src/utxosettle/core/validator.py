"""
Transaction validation against a UTXO pool.

A transaction is valid iff every claimed UTXO is in the pool, no UTXO is
claimed twice by the same transaction, every input signature verifies under
the claimed output's recipient, no output value is negative and the input
value covers the output value. Nothing else is checked. Validation never
mutates the pool.
"""

import logging

logger = logging.getLogger(__name__)
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional, Set

from ..crypto.hashing import TransactionHasher, default_hasher
from .transaction import UTXO, Amount, Transaction
from .utxo_pool import UTXOPool


class RejectionReason(Enum):
    """Why a transaction was found invalid."""

    CLAIM_NOT_FOUND = "claim_not_found"
    DOUBLE_CLAIM = "double_claim"
    BAD_SIGNATURE = "bad_signature"
    NEGATIVE_OUTPUT = "negative_output"
    VALUE_NOT_CONSERVED = "value_not_conserved"


@dataclass(frozen=True)
class ValidationResult:
    """Outcome of validating one transaction."""

    is_valid: bool
    reason: Optional[RejectionReason] = None
    input_index: Optional[int] = None
    output_index: Optional[int] = None
    fee: Optional[Amount] = None

    def __bool__(self) -> bool:
        return self.is_valid

    @classmethod
    def accepted(cls, fee: Amount) -> "ValidationResult":
        return cls(is_valid=True, fee=fee)

    @classmethod
    def rejected(
        cls,
        reason: RejectionReason,
        input_index: Optional[int] = None,
        output_index: Optional[int] = None,
    ) -> "ValidationResult":
        return cls(
            is_valid=False,
            reason=reason,
            input_index=input_index,
            output_index=output_index,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_valid": self.is_valid,
            "reason": self.reason.value if self.reason else None,
            "input_index": self.input_index,
            "output_index": self.output_index,
            "fee": str(self.fee) if self.fee is not None else None,
        }


class TransactionValidator:
    """Pure validity predicate for transactions."""

    def __init__(self, hasher: TransactionHasher = default_hasher):
        self.hasher = hasher

    def is_valid(self, transaction: Transaction, pool: UTXOPool) -> bool:
        """Check if the transaction is valid against ``pool``; see :meth:`check`."""
        return self.check(transaction, pool).is_valid

    def check(self, transaction: Transaction, pool: UTXOPool) -> ValidationResult:
        """
        Validate a transaction and report the first failure found.

        Args:
            transaction: Transaction to validate
            pool: Pool to validate against; only read

        Returns:
            ValidationResult with the fee when valid, the reason otherwise

        Raises:
            MalformedTransactionError: If the transaction is structurally
                corrupt, or its claimed and output values mix Decimal and float
        """
        transaction.check_structure(self.hasher)
        transaction.check_amounts(
            pool.get_output(utxo).value
            for utxo in transaction.input_utxos()
            if pool.contains(utxo)
        )

        claimed: Set[UTXO] = set()
        input_sum: Amount = 0

        for i, input_tx in enumerate(transaction.inputs):
            utxo = input_tx.utxo

            if not pool.contains(utxo):
                return ValidationResult.rejected(RejectionReason.CLAIM_NOT_FOUND, input_index=i)

            if utxo in claimed:
                return ValidationResult.rejected(RejectionReason.DOUBLE_CLAIM, input_index=i)
            claimed.add(utxo)

            output = pool.get_output(utxo)
            if not self._verify_input(transaction, i, output.recipient, input_tx.signature):
                return ValidationResult.rejected(RejectionReason.BAD_SIGNATURE, input_index=i)

            input_sum += output.value

        output_sum: Amount = 0
        for i, output in enumerate(transaction.outputs):
            if output.value < 0:
                return ValidationResult.rejected(RejectionReason.NEGATIVE_OUTPUT, output_index=i)
            output_sum += output.value

        if input_sum < output_sum:
            return ValidationResult.rejected(RejectionReason.VALUE_NOT_CONSERVED)

        return ValidationResult.accepted(input_sum - output_sum)

    def calculate_fee(self, transaction: Transaction, pool: UTXOPool) -> Amount:
        """
        Input value minus output value, looked up in ``pool``.

        Raises:
            UTXONotFoundError: If an input claims a UTXO absent from the pool
            MalformedTransactionError: If the claimed and output values mix
                Decimal and float
        """
        claimed_values = [pool.get_output(utxo).value for utxo in transaction.input_utxos()]
        transaction.check_amounts(claimed_values)
        return sum(claimed_values) - transaction.total_output_value()

    def _verify_input(
        self,
        transaction: Transaction,
        input_index: int,
        recipient: Any,
        signature: Optional[bytes],
    ) -> bool:
        if signature is None:
            return False

        message = transaction.get_data_to_sign(input_index, self.hasher)
        try:
            return bool(recipient.verify(message, bytes(signature)))
        except Exception as e:
            # A verifier that cannot process the signature has not accepted it.
            logger.debug(f"Signature verification raised for input {input_index}: {e}")
            return False
