from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Iterable, List, Tuple

from .currency import CurrencyConverter
from .types import NormalizedTransaction, Transaction

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class NormalizationResult:
    entries: Tuple[NormalizedTransaction, ...]
    skipped: int = 0

    @property
    def spend(self) -> Tuple[NormalizedTransaction, ...]:
        return tuple(entry for entry in self.entries if entry.is_spend)


def is_malformed(tx: Transaction) -> bool:
    if tx.date is None or tx.gross_amount is None:
        return True
    if not tx.category or not str(tx.category).strip():
        return True
    return not tx.currency


def payment_basis(tx: Transaction) -> Tuple[float, str]:
    """Amount and currency the card statement was charged in."""
    amount = tx.payment_amount if tx.payment_amount is not None else tx.gross_amount
    currency = tx.payment_currency or tx.currency
    return float(amount or 0.0), currency


def normalize_transaction(
    tx: Transaction,
    display_currency: str,
    converter: CurrencyConverter,
) -> NormalizedTransaction:
    amount, currency = payment_basis(tx)
    gross = converter.convert(amount, currency, display_currency)
    # only positive reimbursements reduce spend
    reimbursed = converter.convert(max(0.0, tx.reimbursement_amount or 0.0), currency, display_currency)
    return NormalizedTransaction(transaction=tx, gross=gross, reimbursed=reimbursed)


def net_amount(tx: Transaction, display_currency: str, converter: CurrencyConverter) -> float:
    return normalize_transaction(tx, display_currency, converter).net


def normalize_transactions(
    transactions: Iterable[Transaction],
    display_currency: str,
    converter: CurrencyConverter,
) -> NormalizationResult:
    entries: List[NormalizedTransaction] = []
    skipped = 0
    for tx in transactions:
        if is_malformed(tx):
            skipped += 1
            logger.debug(f"Skipping malformed transaction {tx.id!r}")
            continue
        entries.append(normalize_transaction(tx, display_currency, converter))

    if skipped:
        logger.info(f"Skipped {skipped} malformed transactions during normalization")
    return NormalizationResult(entries=tuple(entries), skipped=skipped)
