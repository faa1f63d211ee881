"""Shared fixtures for UTXO Settle tests."""

import hashlib
from dataclasses import dataclass
from typing import Any, List, Sequence, Tuple

import pytest

from utxosettle.core.transaction import UTXO, Transaction, TransactionOutput
from utxosettle.core.utxo_pool import UTXOPool
from utxosettle.crypto.hashing import Hash
from utxosettle.crypto.signatures import PrivateKey
from utxosettle.logging import LogConfig, LogLevel, MemoryHandler, setup_logging, shutdown_logging


@dataclass(frozen=True)
class FakeKey:
    """Deterministic stand-in for a public key.

    A signature is valid iff it is ``name:`` followed by the SHA-256 of the
    message.
    """

    name: str

    def sign(self, message: bytes) -> bytes:
        return self.name.encode() + b":" + hashlib.sha256(message).digest()

    def verify(self, message: bytes, signature: bytes) -> bool:
        return signature == self.sign(message)

    def to_bytes(self) -> bytes:
        return self.name.encode()


def source_hash(n: int) -> Hash:
    """Hash of a made-up funding transaction."""
    return Hash(hashlib.sha256(f"funding-{n}".encode()).digest())


def sign_all(transaction: Transaction, keys: Sequence[Any]) -> Transaction:
    """Sign input ``i`` with ``keys[i]`` (FakeKey or PrivateKey)."""
    for i, key in enumerate(keys):
        if isinstance(key, PrivateKey):
            transaction = transaction.sign_input(i, key)
        else:
            transaction = transaction.add_signature(
                key.sign(transaction.get_data_to_sign(i)), i
            )
    return transaction


@pytest.fixture
def alice():
    return FakeKey("alice")


@pytest.fixture
def bob():
    return FakeKey("bob")


@pytest.fixture
def carol():
    return FakeKey("carol")


@pytest.fixture
def keypair():
    """Real secp256k1 key pair."""
    private_key = PrivateKey.generate()
    return private_key, private_key.get_public_key()


@pytest.fixture
def make_pool():
    """Factory: ``make_pool([(value, key), ...])`` -> (pool, [utxo, ...]).

    Each entry becomes output 0 of its own funding transaction.
    """

    def _make(entries: List[Tuple[Any, Any]]) -> Tuple[UTXOPool, List[UTXO]]:
        pool = UTXOPool()
        utxos = []
        for n, (value, key) in enumerate(entries):
            utxo = UTXO(source_hash(n), 0)
            pool.add(utxo, TransactionOutput(value=value, recipient=key))
            utxos.append(utxo)
        return pool, utxos

    return _make


@pytest.fixture
def spend():
    """Factory: ``spend([(utxo, key), ...], [(value, recipient), ...])``.

    Builds a transaction claiming the given UTXOs, paying the given outputs
    and signing each input with its key.
    """

    def _spend(claims, outputs) -> Transaction:
        transaction = Transaction()
        for utxo, _ in claims:
            transaction = transaction.add_input(utxo.tx_hash, utxo.output_index)
        for value, recipient in outputs:
            transaction = transaction.add_output(value, recipient)
        return sign_all(transaction, [key for _, key in claims])

    return _spend


@pytest.fixture
def memory_logs():
    """Route structured logs to an in-memory handler for the test."""
    manager = setup_logging(LogConfig(level=LogLevel.DEBUG))
    manager.remove_handler("console")
    handler = MemoryHandler()
    manager.add_handler("memory", handler)
    yield handler
    shutdown_logging()
