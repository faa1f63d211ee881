"""
Hash functions and transaction hashing for UTXO Settle.

Implements SHA-256 hashing plus the default content hasher used to identify
transactions and to derive the bytes each input signature covers.
"""

import logging

logger = logging.getLogger(__name__)
import hashlib
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol, Union

if TYPE_CHECKING:
    from ..core.transaction import Transaction


@dataclass(frozen=True)
class Hash:
    """Immutable 32-byte hash value."""

    value: bytes

    def __post_init__(self) -> None:
        if not isinstance(self.value, bytes):
            raise TypeError("Hash value must be bytes")
        if len(self.value) != 32:
            raise ValueError("Hash must be exactly 32 bytes")

    def __str__(self) -> str:
        return self.value.hex()

    def __repr__(self) -> str:
        return f"Hash('{self.value.hex()}')"

    @classmethod
    def from_hex(cls, hex_string: str) -> "Hash":
        """Create a Hash from a hexadecimal string."""
        return cls(bytes.fromhex(hex_string))

    def to_hex(self) -> str:
        """Convert hash to hexadecimal string."""
        return self.value.hex()


class SHA256Hasher:
    """SHA-256 hasher with ledger-specific utilities."""

    @staticmethod
    def hash(data: Union[bytes, str]) -> Hash:
        """
        Hash data using SHA-256.

        Args:
            data: Data to hash (bytes or string)

        Returns:
            Hash object containing the SHA-256 hash
        """
        if isinstance(data, str):
            data = data.encode("utf-8")

        digest = hashlib.sha256(data).digest()
        return Hash(digest)

    @staticmethod
    def double_hash(data: Union[bytes, str]) -> Hash:
        """Double SHA-256 hash (Bitcoin-style)."""
        if isinstance(data, str):
            data = data.encode("utf-8")

        first_hash = hashlib.sha256(data).digest()
        return Hash(hashlib.sha256(first_hash).digest())


class TransactionHasher(Protocol):
    """Capability that identifies transactions and derives signing data."""

    def hash(self, transaction: "Transaction") -> Hash:
        ...

    def data_to_sign(self, transaction: "Transaction", input_index: int) -> bytes:
        ...


class SHA256TransactionHasher:
    """
    Default transaction hasher.

    The content hash covers input references and outputs only. Signatures are
    left out so that signers can sign over the unsigned content, and the data
    to sign for input ``i`` appends ``i`` so a signature cannot be moved to a
    different input position.
    """

    def unsigned_content(self, transaction: "Transaction") -> bytes:
        """Serialize the unsigned content of a transaction."""
        data = len(transaction.inputs).to_bytes(4, byteorder="big")
        for input_tx in transaction.inputs:
            data += input_tx.reference_bytes()

        data += len(transaction.outputs).to_bytes(4, byteorder="big")
        for output in transaction.outputs:
            data += output.to_bytes()

        return data

    def hash(self, transaction: "Transaction") -> Hash:
        return SHA256Hasher.hash(self.unsigned_content(transaction))

    def data_to_sign(self, transaction: "Transaction", input_index: int) -> bytes:
        if input_index < 0 or input_index >= len(transaction.inputs):
            raise IndexError("Input index out of range")
        return self.unsigned_content(transaction) + input_index.to_bytes(
            4, byteorder="big"
        )


default_hasher = SHA256TransactionHasher()
