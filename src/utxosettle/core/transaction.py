"""
Transaction model for UTXO Settle.

Implements the UTXO coordinate, transaction inputs and outputs and the
transaction itself. Transactions are immutable; builder methods return a new
transaction.
"""

import logging

logger = logging.getLogger(__name__)
import math
from dataclasses import dataclass, field, replace
from decimal import Decimal
from typing import Any, Iterable, List, Optional, Tuple, Union

from ..crypto.hashing import Hash, TransactionHasher, default_hasher
from ..crypto.signatures import PrivateKey, Signature
from ..errors.exceptions import MalformedTransactionError

Amount = Union[int, float, Decimal]


def is_amount(value: Any) -> bool:
    """True if ``value`` is a finite number usable as an output value."""
    if isinstance(value, bool):
        return False
    if isinstance(value, Decimal):
        return value.is_finite()
    if isinstance(value, float):
        return math.isfinite(value)
    return isinstance(value, int)


def mixes_amount_kinds(values: Iterable[Any]) -> bool:
    """True if ``values`` holds both a Decimal and a float; they cannot be summed."""
    kinds = {type(value) for value in values}
    has_decimal = any(issubclass(kind, Decimal) for kind in kinds)
    has_float = any(issubclass(kind, float) for kind in kinds)
    return has_decimal and has_float


@dataclass(frozen=True)
class UTXO:
    """Coordinate of a spendable output: source transaction hash and index."""

    tx_hash: Hash
    output_index: int

    def __post_init__(self) -> None:
        if self.output_index < 0:
            raise ValueError("Output index must be non-negative")

    def __str__(self) -> str:
        return f"UTXO({self.tx_hash.to_hex()[:16]}...:{self.output_index})"


@dataclass(frozen=True)
class TransactionInput:
    """Input to a transaction (claim on a prior output)."""

    previous_tx_hash: Hash
    output_index: int
    signature: Optional[bytes] = None

    def __post_init__(self) -> None:
        if self.output_index < 0:
            raise ValueError("Output index must be non-negative")

    @property
    def utxo(self) -> UTXO:
        """The UTXO this input claims."""
        return UTXO(self.previous_tx_hash, self.output_index)

    def reference_bytes(self) -> bytes:
        """Serialize the claimed reference; the signature is not included."""
        return self.previous_tx_hash.value + self.output_index.to_bytes(
            4, byteorder="big"
        )

    def with_signature(self, signature: Optional[bytes]) -> "TransactionInput":
        return replace(self, signature=signature)


@dataclass(frozen=True)
class TransactionOutput:
    """Output from a transaction: a value payable to a recipient key."""

    value: Amount
    recipient: Any

    def recipient_bytes(self) -> bytes:
        """
        Stable byte form of the recipient handle.

        Recipients are bytes, text, or objects whose ``to_bytes()`` returns
        bytes. Anything else raises TypeError.
        """
        recipient = self.recipient
        if isinstance(recipient, (bytes, bytearray)):
            return bytes(recipient)
        if isinstance(recipient, str):
            return recipient.encode("utf-8")
        if isinstance(recipient, int):
            raise TypeError("Integer recipients have no byte form")

        to_bytes = getattr(recipient, "to_bytes", None)
        if to_bytes is None:
            raise TypeError(f"Recipient of type {type(recipient).__name__} has no to_bytes()")
        data = to_bytes()
        if not isinstance(data, (bytes, bytearray)):
            raise TypeError(
                f"Recipient to_bytes() returned {type(data).__name__}, not bytes"
            )
        return bytes(data)

    def to_bytes(self) -> bytes:
        """Serialize transaction output to bytes."""
        value_bytes = str(self.value).encode("utf-8")
        recipient_bytes = self.recipient_bytes()
        return (
            len(value_bytes).to_bytes(4, byteorder="big")
            + value_bytes
            + len(recipient_bytes).to_bytes(4, byteorder="big")
            + recipient_bytes
        )


@dataclass(frozen=True)
class Transaction:
    """
    A ledger transaction.

    Attributes:
        inputs: Ordered claims on prior outputs
        outputs: Ordered outputs this transaction creates
        tx_hash: Content hash pinned by :meth:`finalize`, if any. It is not
            part of the hashed content and must match :meth:`get_hash`.
    """

    inputs: Tuple[TransactionInput, ...] = ()
    outputs: Tuple[TransactionOutput, ...] = ()
    tx_hash: Optional[Hash] = field(default=None, compare=False)

    def __post_init__(self) -> None:
        if isinstance(self.inputs, list):
            object.__setattr__(self, "inputs", tuple(self.inputs))
        if isinstance(self.outputs, list):
            object.__setattr__(self, "outputs", tuple(self.outputs))

    @property
    def num_inputs(self) -> int:
        return len(self.inputs)

    @property
    def num_outputs(self) -> int:
        return len(self.outputs)

    def get_hash(self, hasher: TransactionHasher = default_hasher) -> Hash:
        """Recompute the content hash of this transaction."""
        return hasher.hash(self)

    def get_data_to_sign(
        self, input_index: int, hasher: TransactionHasher = default_hasher
    ) -> bytes:
        """Bytes the signature of input ``input_index`` must cover."""
        return hasher.data_to_sign(self, input_index)

    def input_utxos(self) -> List[UTXO]:
        """Get the UTXOs this transaction claims, in input order."""
        return [input_tx.utxo for input_tx in self.inputs]

    def total_output_value(self) -> Amount:
        return sum(output.value for output in self.outputs)

    def produced_utxos(
        self, hasher: TransactionHasher = default_hasher
    ) -> List[Tuple[UTXO, TransactionOutput]]:
        """Get the UTXOs this transaction creates once committed."""
        tx_hash = self.get_hash(hasher)
        return [(UTXO(tx_hash, i), output) for i, output in enumerate(self.outputs)]

    def add_input(self, previous_tx_hash: Hash, output_index: int) -> "Transaction":
        """Return a copy with an unsigned input appended."""
        new_input = TransactionInput(previous_tx_hash, output_index)
        return Transaction(inputs=self.inputs + (new_input,), outputs=self.outputs)

    def add_output(self, value: Amount, recipient: Any) -> "Transaction":
        """Return a copy with an output appended."""
        new_output = TransactionOutput(value=value, recipient=recipient)
        return Transaction(inputs=self.inputs, outputs=self.outputs + (new_output,))

    def remove_input(self, target: Union[int, UTXO]) -> "Transaction":
        """
        Return a copy without one input.

        ``target`` is either an input index or the UTXO the input claims;
        removing a UTXO that no input claims returns an equal transaction.
        """
        if isinstance(target, UTXO):
            inputs = list(self.inputs)
            for i, input_tx in enumerate(inputs):
                if input_tx.utxo == target:
                    del inputs[i]
                    break
            return Transaction(inputs=tuple(inputs), outputs=self.outputs)

        if target < 0 or target >= len(self.inputs):
            raise IndexError("Input index out of range")
        inputs = self.inputs[:target] + self.inputs[target + 1 :]
        return Transaction(inputs=inputs, outputs=self.outputs)

    def add_signature(
        self, signature: Union[bytes, Signature], input_index: int
    ) -> "Transaction":
        """Return a copy with the signature of one input replaced."""
        if input_index < 0 or input_index >= len(self.inputs):
            raise IndexError("Input index out of range")
        if isinstance(signature, Signature):
            signature = signature.to_bytes()

        inputs = list(self.inputs)
        inputs[input_index] = inputs[input_index].with_signature(signature)
        # Signatures are outside the content hash, so a pinned hash survives.
        return Transaction(inputs=tuple(inputs), outputs=self.outputs, tx_hash=self.tx_hash)

    def sign_input(
        self,
        input_index: int,
        private_key: PrivateKey,
        hasher: TransactionHasher = default_hasher,
    ) -> "Transaction":
        """Sign a specific input of the transaction."""
        message = self.get_data_to_sign(input_index, hasher)
        return self.add_signature(private_key.sign(message), input_index)

    def finalize(self, hasher: TransactionHasher = default_hasher) -> "Transaction":
        """Return a copy with the content hash pinned into ``tx_hash``."""
        return replace(self, tx_hash=self.get_hash(hasher))

    def check_structure(self, hasher: TransactionHasher = default_hasher) -> None:
        """
        Check structural integrity.

        Raises:
            MalformedTransactionError: If the sequences, their elements or the
                pinned hash are corrupt, or the outputs mix Decimal and float
                values. Semantic problems (missing claims, bad signatures,
                negative values) are not structural.
        """
        if not isinstance(self.inputs, tuple) or not isinstance(self.outputs, tuple):
            raise MalformedTransactionError("Inputs and outputs must be sequences")

        for i, input_tx in enumerate(self.inputs):
            if not isinstance(input_tx, TransactionInput):
                raise MalformedTransactionError(f"Input {i} is not a TransactionInput")
            if not isinstance(input_tx.previous_tx_hash, Hash):
                raise MalformedTransactionError(f"Input {i} has no valid previous hash")
            if (
                not isinstance(input_tx.output_index, int)
                or isinstance(input_tx.output_index, bool)
                or input_tx.output_index < 0
            ):
                raise MalformedTransactionError(f"Input {i} has a bad output index")
            if input_tx.signature is not None and not isinstance(
                input_tx.signature, (bytes, bytearray)
            ):
                raise MalformedTransactionError(f"Input {i} signature is not bytes")

        for i, output in enumerate(self.outputs):
            if not isinstance(output, TransactionOutput):
                raise MalformedTransactionError(f"Output {i} is not a TransactionOutput")
            if not is_amount(output.value):
                raise MalformedTransactionError(f"Output {i} value is not a finite number")
            try:
                output.recipient_bytes()
            except (AttributeError, TypeError, ValueError, OverflowError) as e:
                raise MalformedTransactionError(
                    f"Output {i} recipient has no byte form: {e}", cause=e
                ) from e

        self.check_amounts()

        if self.tx_hash is not None:
            if not isinstance(self.tx_hash, Hash):
                raise MalformedTransactionError("Pinned transaction hash is not a Hash")
            try:
                computed = self.get_hash(hasher)
            except (AttributeError, TypeError, ValueError, OverflowError) as e:
                raise MalformedTransactionError(
                    f"Transaction content cannot be hashed: {e}", cause=e
                ) from e
            if computed != self.tx_hash:
                raise MalformedTransactionError(
                    "Pinned transaction hash does not match its content",
                    transaction_id=self.tx_hash.to_hex(),
                )

    def check_amounts(self, claimed_values: Iterable[Amount] = ()) -> None:
        """
        Check that the claimed and output values can be summed together.

        Raises:
            MalformedTransactionError: If Decimal and float values are mixed
        """
        values = list(claimed_values) + [output.value for output in self.outputs]
        if mixes_amount_kinds(values):
            raise MalformedTransactionError(
                "Transaction mixes Decimal and float values"
            )

    def __str__(self) -> str:
        return f"Transaction({self.get_hash().to_hex()[:16]}...)"

    def __repr__(self) -> str:
        pinned = self.tx_hash.to_hex()[:16] if isinstance(self.tx_hash, Hash) else None
        return (
            f"Transaction(tx_hash={pinned}, "
            f"inputs={len(self.inputs)}, outputs={len(self.outputs)})"
        )
