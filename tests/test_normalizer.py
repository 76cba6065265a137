from datetime import date

import pytest

from spendboard.analytics.currency import CurrencyConverter
from spendboard.analytics.normalizer import net_amount, normalize_transactions
from spendboard.analytics.types import Transaction

converter = CurrencyConverter()


def test_malformed_rows_are_skipped_and_counted():
    transactions = [
        Transaction(id="ok", date=date(2024, 6, 1), gross_amount=10.0, currency="USD", category="Groceries"),
        Transaction(id="no-date", date=None, gross_amount=10.0, currency="USD", category="Groceries"),
        Transaction(id="no-amount", date=date(2024, 6, 1), gross_amount=None, currency="USD", category="Groceries"),
        Transaction(id="no-category", date=date(2024, 6, 1), gross_amount=10.0, currency="USD", category="  "),
    ]
    result = normalize_transactions(transactions, "USD", converter)
    assert result.skipped == 3
    assert [entry.transaction.id for entry in result.entries] == ["ok"]


def test_payment_amount_takes_precedence_over_gross():
    tx = Transaction(
        id="trip",
        date=date(2024, 6, 2),
        gross_amount=100.0,
        currency="EUR",
        category="Travel & Vacation",
        payment_amount=110.0,
        payment_currency="USD",
        reimbursement_amount=30.0,
    )
    entry = normalize_transactions([tx], "USD", converter).entries[0]
    assert entry.gross == pytest.approx(110.0)
    assert entry.reimbursed == pytest.approx(30.0)
    assert entry.net == pytest.approx(80.0)


def test_converts_into_display_currency():
    tx = Transaction(id="eu", date=date(2024, 6, 2), gross_amount=93.0, currency="EUR", category="Dining Out")
    assert net_amount(tx, "USD", converter) == pytest.approx(100.0)


def test_refunds_are_kept_but_not_spend():
    tx = Transaction(id="refund", date=date(2024, 6, 3), gross_amount=-25.0, currency="USD", category="Groceries")
    result = normalize_transactions([tx], "USD", converter)
    assert len(result.entries) == 1
    assert result.spend == ()


def test_datetime_dates_are_coerced():
    from datetime import datetime

    tx = Transaction(id="dt", date=datetime(2024, 6, 3, 14, 30), gross_amount=5.0, currency="USD", category="Groceries")
    assert tx.date == date(2024, 6, 3)


def test_negative_reimbursement_does_not_add_spend():
    tx = Transaction(id="odd", date=date(2024, 6, 4), gross_amount=50.0, currency="USD",
                     category="Groceries", reimbursement_amount=-20.0)
    entry = normalize_transactions([tx], "USD", converter).entries[0]
    assert entry.reimbursed == 0.0
    assert entry.net == pytest.approx(50.0)
