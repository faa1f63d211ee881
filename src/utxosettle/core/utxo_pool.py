"""
UTXO pool for UTXO Settle.

The pool is the authoritative set of currently spendable outputs, keyed by
UTXO coordinate. It performs no invariant checking of its own; the
settlement engine is the only writer and keeps it consistent.
"""

import logging

logger = logging.getLogger(__name__)
from typing import Dict, Iterator, List, Mapping, Optional, Tuple, Union

from ..crypto.hashing import Hash, TransactionHasher, default_hasher
from ..errors.exceptions import UTXONotFoundError
from .transaction import UTXO, Amount, Transaction, TransactionOutput


class UTXOPool:
    """Mapping from UTXO to the output it names."""

    def __init__(
        self, source: Optional[Union["UTXOPool", Mapping[UTXO, TransactionOutput]]] = None
    ):
        """
        Create a pool, optionally copying ``source``.

        Outputs are immutable, so copying the mapping is a full structural
        copy: nothing done to this pool is visible through ``source``.
        """
        self._utxos: Dict[UTXO, TransactionOutput] = {}
        if source is None:
            return

        items = source.items()
        for utxo, output in items:
            if not isinstance(utxo, UTXO):
                raise TypeError(f"Pool keys must be UTXO, got {type(utxo).__name__}")
            if not isinstance(output, TransactionOutput):
                raise TypeError(
                    f"Pool values must be TransactionOutput, got {type(output).__name__}"
                )
            self._utxos[utxo] = output

    def contains(self, utxo: UTXO) -> bool:
        """Check if a UTXO is currently spendable."""
        return utxo in self._utxos

    def get_output(self, utxo: UTXO) -> TransactionOutput:
        """
        Get the output a UTXO names.

        Raises:
            UTXONotFoundError: If the UTXO is not in the pool
        """
        try:
            return self._utxos[utxo]
        except KeyError:
            raise UTXONotFoundError(utxo) from None

    def add(self, utxo: UTXO, output: TransactionOutput) -> None:
        """Insert or overwrite a UTXO."""
        self._utxos[utxo] = output

    def remove(self, utxo: UTXO) -> None:
        """Remove a UTXO; absent UTXOs are ignored."""
        self._utxos.pop(utxo, None)

    def apply(
        self, transaction: Transaction, hasher: TransactionHasher = default_hasher
    ) -> Hash:
        """
        Commit a transaction: consume its claims and add its outputs.

        The produced UTXOs are computed before the pool is touched, so a
        hashing failure leaves the pool unchanged.

        Returns:
            The content hash the new UTXOs are keyed by
        """
        tx_hash = transaction.get_hash(hasher)
        produced = [
            (UTXO(tx_hash, i), output) for i, output in enumerate(transaction.outputs)
        ]

        for utxo in transaction.input_utxos():
            self.remove(utxo)
        for utxo, output in produced:
            self.add(utxo, output)

        return tx_hash

    def copy(self) -> "UTXOPool":
        return UTXOPool(self)

    def snapshot(self) -> Dict[UTXO, TransactionOutput]:
        """Get a plain-dict copy of the pool."""
        return dict(self._utxos)

    def items(self) -> List[Tuple[UTXO, TransactionOutput]]:
        return list(self._utxos.items())

    def all_utxos(self) -> List[UTXO]:
        return list(self._utxos)

    def get_total_value(self) -> Amount:
        """Sum of all spendable output values."""
        return sum(output.value for output in self._utxos.values())

    def __contains__(self, utxo: object) -> bool:
        return utxo in self._utxos

    def __len__(self) -> int:
        return len(self._utxos)

    def __iter__(self) -> Iterator[UTXO]:
        return iter(self._utxos)

    def __eq__(self, other: object) -> bool:
        if isinstance(other, UTXOPool):
            return self._utxos == other._utxos
        if isinstance(other, Mapping):
            return self._utxos == dict(other)
        return NotImplemented

    def __repr__(self) -> str:
        return f"UTXOPool(size={len(self._utxos)})"
