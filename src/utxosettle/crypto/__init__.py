"""
Cryptographic capabilities for UTXO Settle.

This module provides the hashing and signature primitives the settlement
core is parameterised over:
- SHA-256 hashing and the default transaction content hasher
- ECDSA (secp256k1) keys and signatures
"""

import logging

logger = logging.getLogger(__name__)
from .hashing import (
    Hash,
    SHA256Hasher,
    SHA256TransactionHasher,
    TransactionHasher,
    default_hasher,
)
from .signatures import (
    PrivateKey,
    PublicKey,
    Signature,
    SignatureVerifier,
)

__all__ = [
    "Hash",
    "SHA256Hasher",
    "TransactionHasher",
    "SHA256TransactionHasher",
    "default_hasher",
    "PrivateKey",
    "PublicKey",
    "Signature",
    "SignatureVerifier",
]
