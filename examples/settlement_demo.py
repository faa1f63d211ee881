#!/usr/bin/env python3
"""
Basic UTXO Settle Demo

This script demonstrates batch settlement:
- Funding a UTXO pool with ECDSA-owned outputs
- Building and signing transactions
- Settling a conflicting batch under both policies
"""

import logging

logger = logging.getLogger(__name__)
from utxosettle import (
    UTXO,
    PrivateKey,
    SettlementPolicy,
    Transaction,
    TransactionOutput,
    UTXOPool,
    first_fit_engine,
    max_fee_engine,
)
from utxosettle.crypto import SHA256Hasher
from utxosettle.logging import LogConfig, setup_logging


def main():
    logging.basicConfig(level=logging.INFO, format="%(message)s")
    setup_logging(LogConfig(format_type="text"))

    logger.info("🚀 UTXO Settle - Batch Settlement Demo")
    logger.info("=" * 50)

    # Wallets
    alice_private = PrivateKey.generate()
    alice = alice_private.get_public_key()
    bob = PrivateKey.generate().get_public_key()
    carol = PrivateKey.generate().get_public_key()
    logger.info(f"Alice's address: {alice.to_address()}")

    # Fund Alice with three outputs of 100
    pool = UTXOPool()
    funding = []
    for i in range(3):
        utxo = UTXO(SHA256Hasher.hash(f"genesis-{i}"), 0)
        pool.add(utxo, TransactionOutput(100, alice))
        funding.append(utxo)
    logger.info(f"\n📦 Opening pool: {len(pool)} UTXOs worth {pool.get_total_value()}")

    def pay(utxo, recipient, amount):
        tx = Transaction().add_input(utxo.tx_hash, utxo.output_index).add_output(amount, recipient)
        return tx.sign_input(0, alice_private)

    # Two transactions race for the same output
    to_bob = pay(funding[0], bob, 95)
    to_carol = pay(funding[0], carol, 80)
    batch = [to_bob, to_carol, pay(funding[1], bob, 99), pay(funding[2], carol, 97)]

    for policy, factory in (
        (SettlementPolicy.FIRST_FIT, first_fit_engine),
        (SettlementPolicy.MAX_FEE, max_fee_engine),
    ):
        logger.info(f"\n⚖️  Settling with {policy.value}...")
        report = factory(pool).settle_with_report(batch)
        for tx, fee in zip(report.accepted, report.fees):
            logger.info(f"   ✅ {tx} fee={fee}")
        for tx, result in report.rejected:
            logger.info(f"   ❌ {tx} {result.reason.value}")
        logger.info(f"   Total fees: {report.total_fees}")

    logger.info("\n🎉 Demo completed successfully!")


if __name__ == "__main__":
    main()
