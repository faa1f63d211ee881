"""
Unit tests for hashing and the default transaction hasher.
"""

import hashlib

import pytest

from utxosettle.core.transaction import Transaction
from utxosettle.crypto.hashing import Hash, SHA256Hasher, SHA256TransactionHasher


class TestHash:
    """Test the Hash class."""

    def test_hash_requires_32_bytes(self):
        """Test that only 32-byte values are accepted."""
        with pytest.raises(ValueError, match="exactly 32 bytes"):
            Hash(b"\x00" * 31)
        with pytest.raises(TypeError):
            Hash("00" * 32)

    def test_hex_round_trip(self):
        hex_string = "ab" * 32
        assert Hash.from_hex(hex_string).to_hex() == hex_string
        assert str(Hash.from_hex(hex_string)) == hex_string


class TestSHA256Hasher:
    """Test the SHA256Hasher class."""

    def test_hash_string_and_bytes(self):
        expected = hashlib.sha256(b"hello").digest()
        assert SHA256Hasher.hash("hello").value == expected
        assert SHA256Hasher.hash(b"hello").value == expected

    def test_double_hash(self):
        expected = hashlib.sha256(hashlib.sha256(b"hello").digest()).digest()
        assert SHA256Hasher.double_hash("hello").value == expected


class TestSHA256TransactionHasher:
    """Test the default transaction hasher."""

    @pytest.fixture
    def hasher(self):
        return SHA256TransactionHasher()

    @pytest.fixture
    def transaction(self, alice):
        return (
            Transaction()
            .add_input(SHA256Hasher.hash("funding"), 1)
            .add_output(10, alice)
        )

    def test_hash_is_sha256_of_unsigned_content(self, hasher, transaction):
        content = hasher.unsigned_content(transaction)
        assert hasher.hash(transaction).value == hashlib.sha256(content).digest()

    def test_unsigned_content_layout(self, hasher, transaction):
        content = hasher.unsigned_content(transaction)

        assert content[:4] == b"\x00\x00\x00\x01"
        assert content[4:36] == SHA256Hasher.hash("funding").value
        assert content[36:40] == b"\x00\x00\x00\x01"
        assert content[40:44] == b"\x00\x00\x00\x01"
        assert content[44:] == transaction.outputs[0].to_bytes()

    def test_data_to_sign_appends_index(self, hasher, transaction):
        data = hasher.data_to_sign(transaction, 0)
        assert data == hasher.unsigned_content(transaction) + b"\x00\x00\x00\x00"

    def test_data_to_sign_out_of_range(self, hasher, transaction):
        with pytest.raises(IndexError):
            hasher.data_to_sign(transaction, 1)
        with pytest.raises(IndexError):
            hasher.data_to_sign(transaction, -1)

    def test_signatures_excluded(self, hasher, transaction):
        signed = transaction.add_signature(b"anything", 0)
        assert hasher.unsigned_content(signed) == hasher.unsigned_content(transaction)
