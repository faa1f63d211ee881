"""
Batch settlement for UTXO Settle.

A settlement engine owns a private copy of a UTXO pool and settles batches
of candidate transactions against it. Each candidate is validated against
the pool as it stands at that moment and, if valid, committed immediately,
so later candidates in the same batch see its effects. Two orders are
supported:

- FIRST_FIT: candidates are offered in the order supplied.
- MAX_FEE: candidates are offered highest fee first. Fees are computed once
  against the pool as it stood before the batch, and the sort is stable so
  equal fees keep their supplied order. This is a single greedy pass: it does
  not search for the fee-maximizing combination of non-conflicting
  transactions.

Rejected candidates are a normal outcome and never raise.
"""

import logging

logger = logging.getLogger(__name__)
import threading
import uuid
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..crypto.hashing import TransactionHasher, default_hasher
from ..errors.exceptions import (
    MalformedTransactionError,
    UTXONotFoundError,
    create_validation_error,
)
from ..logging import LogContext, get_logger
from .config import SettlementConfig, SettlementPolicy
from .transaction import UTXO, Amount, Transaction, TransactionOutput
from .utxo_pool import UTXOPool
from .validator import TransactionValidator, ValidationResult


@dataclass
class SettlementReport:
    """Everything that happened to one batch."""

    policy: SettlementPolicy
    batch_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    accepted: List[Transaction] = field(default_factory=list)
    fees: List[Amount] = field(default_factory=list)
    rejected: List[Tuple[Transaction, ValidationResult]] = field(default_factory=list)
    malformed: List[Tuple[Any, MalformedTransactionError]] = field(default_factory=list)

    @property
    def total_fees(self) -> Amount:
        return sum(self.fees)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "batch_id": self.batch_id,
            "policy": self.policy.value,
            "accepted": [tx.get_hash().to_hex() for tx in self.accepted],
            "fees": [str(fee) for fee in self.fees],
            "total_fees": str(self.total_fees),
            "rejected": [
                {"transaction": tx.get_hash().to_hex(), **result.to_dict()}
                for tx, result in self.rejected
            ],
            "malformed": [error.message for _, error in self.malformed],
        }


class SettlementEngine:
    """Settles batches of transactions against an owned UTXO pool."""

    def __init__(
        self,
        pool: Union[UTXOPool, Mapping[UTXO, TransactionOutput]],
        policy: Optional[Union[SettlementPolicy, str]] = None,
        config: Optional[SettlementConfig] = None,
        validator: Optional[TransactionValidator] = None,
        hasher: Optional[TransactionHasher] = None,
    ):
        """
        Create an engine over a defensive copy of ``pool``.

        Args:
            pool: Opening UTXO snapshot; never mutated
            policy: Overrides ``config.policy`` when given
            config: Settlement configuration
            validator: Validity predicate; defaults to one using ``hasher``
            hasher: Transaction hasher used for commits
        """
        config = config or SettlementConfig()
        if policy is not None:
            config = replace(config, policy=SettlementPolicy.parse(policy))
        config.validate()

        self.config = config
        self.hasher = hasher or (validator.hasher if validator else default_hasher)
        self.validator = validator or TransactionValidator(self.hasher)
        self._pool = UTXOPool(pool)
        self._lock = threading.RLock()

    @property
    def policy(self) -> SettlementPolicy:
        return self.config.policy

    @property
    def pool(self) -> UTXOPool:
        """The live pool; it reflects every commit made by this engine."""
        return self._pool

    def snapshot(self) -> UTXOPool:
        """Get an independent copy of the current pool."""
        with self._lock:
            return self._pool.copy()

    def is_valid(self, transaction: Transaction) -> bool:
        """
        Check a transaction against the current pool.

        Raises:
            MalformedTransactionError: If the transaction is structurally corrupt
        """
        with self._lock:
            return self.validator.is_valid(transaction, self._pool)

    def settle(self, candidates: Iterable[Transaction]) -> List[Transaction]:
        """
        Settle a batch and return the committed transactions in commit order.

        Raises:
            ValidationError: If the batch exceeds ``max_batch_size``
            MalformedTransactionError: If a candidate is structurally corrupt
                and ``skip_malformed`` is off
        """
        return self.settle_with_report(candidates).accepted

    def settle_with_report(self, candidates: Iterable[Transaction]) -> SettlementReport:
        """Settle a batch and report accepted, rejected and malformed candidates."""
        candidates = list(candidates)

        with self._lock:
            max_size = self.config.max_batch_size
            if max_size is not None and len(candidates) > max_size:
                raise create_validation_error(
                    field="candidates",
                    value=len(candidates),
                    expected=f"at most {max_size} transactions",
                )

            report = SettlementReport(policy=self.config.policy)
            well_formed = self._screen(candidates, report)

            for transaction in self._order(well_formed):
                result = self.validator.check(transaction, self._pool)
                if result.is_valid:
                    self._pool.apply(transaction, self.hasher)
                    report.accepted.append(transaction)
                    report.fees.append(result.fee)
                else:
                    report.rejected.append((transaction, result))
                    if self.config.log_rejections:
                        logger.debug(
                            f"Rejected {transaction}: {result.reason.value}"
                            f" (input={result.input_index}, output={result.output_index})"
                        )

            self._log_summary(len(candidates), report)
            return report

    def _screen(self, candidates: List[Any], report: SettlementReport) -> List[Transaction]:
        """Drop or raise on corrupt candidates before anything is committed."""
        structural = []
        for position, candidate in enumerate(candidates):
            try:
                if not isinstance(candidate, Transaction):
                    raise MalformedTransactionError(
                        f"Candidate {position} is a {type(candidate).__name__}, "
                        "not a Transaction"
                    )
                candidate.check_structure(self.hasher)
            except MalformedTransactionError as e:
                self._reject_malformed(position, candidate, e, report)
                continue
            structural.append((position, candidate))

        # Claims may resolve to the opening pool or to outputs created in the batch.
        batch_outputs: Dict[UTXO, TransactionOutput] = {}
        for _, candidate in structural:
            batch_outputs.update(candidate.produced_utxos(self.hasher))

        well_formed = []
        for position, candidate in structural:
            claimed_values = []
            for utxo in candidate.input_utxos():
                if self._pool.contains(utxo):
                    claimed_values.append(self._pool.get_output(utxo).value)
                elif utxo in batch_outputs:
                    claimed_values.append(batch_outputs[utxo].value)
            try:
                candidate.check_amounts(claimed_values)
            except MalformedTransactionError as e:
                self._reject_malformed(position, candidate, e, report)
                continue
            well_formed.append(candidate)
        return well_formed

    def _reject_malformed(
        self,
        position: int,
        candidate: Any,
        error: MalformedTransactionError,
        report: SettlementReport,
    ) -> None:
        if not self.config.skip_malformed:
            raise error
        logger.warning(f"Skipping malformed candidate {position}: {error.message}")
        report.malformed.append((candidate, error))

    def _order(self, candidates: List[Transaction]) -> List[Transaction]:
        if self.config.policy is SettlementPolicy.FIRST_FIT:
            return candidates

        # Every fee is taken before the first commit of the batch.
        priced: List[Tuple[Amount, Transaction]] = []
        unpriced: List[Transaction] = []
        for transaction in candidates:
            try:
                priced.append(
                    (self.validator.calculate_fee(transaction, self._pool), transaction)
                )
            except UTXONotFoundError:
                unpriced.append(transaction)

        # list.sort is stable, also with reverse=True
        priced.sort(key=lambda entry: entry[0], reverse=True)
        return [transaction for _, transaction in priced] + unpriced

    def _log_summary(self, candidate_count: int, report: SettlementReport) -> None:
        get_logger(__name__).info(
            "Batch settled",
            context=LogContext(
                component="settlement", operation="settle", batch_id=report.batch_id
            ),
            extra={
                "policy": report.policy.value,
                "candidates": candidate_count,
                "accepted": len(report.accepted),
                "rejected": len(report.rejected),
                "malformed": len(report.malformed),
                "total_fees": str(report.total_fees),
                "pool_size": len(self._pool),
            },
        )


def first_fit_engine(
    pool: Union[UTXOPool, Mapping[UTXO, TransactionOutput]], **kwargs
) -> SettlementEngine:
    """Engine that commits candidates in supplied order."""
    return SettlementEngine(pool, policy=SettlementPolicy.FIRST_FIT, **kwargs)


def max_fee_engine(
    pool: Union[UTXOPool, Mapping[UTXO, TransactionOutput]], **kwargs
) -> SettlementEngine:
    """Engine that commits candidates highest opening fee first."""
    return SettlementEngine(pool, policy=SettlementPolicy.MAX_FEE, **kwargs)
