from datetime import date

import pytest

from spendboard.analytics.currency import CurrencyConverter
from spendboard.analytics.metrics import category_changes, compute_metrics, percentage_change
from spendboard.analytics.normalizer import normalize_transactions
from spendboard.analytics.types import NEW_SPEND, Transaction

converter = CurrencyConverter()

# 2024-06-03 is a Monday
current_transactions = [
    Transaction(id="a", date=date(2024, 6, 3), gross_amount=100.0, currency="USD", category="Dining Out",
                merchant="Cafe", payment_method="Visa", reimbursement_amount=20.0, reward_points=5.0),
    Transaction(id="b", date=date(2024, 6, 3), gross_amount=50.0, currency="USD", category="Groceries",
                merchant="Market", payment_method="Cash"),
    Transaction(id="c", date=date(2024, 6, 4), gross_amount=30.0, currency="USD", category="Dining Out",
                merchant="Cafe", payment_method="Cash"),
    Transaction(id="refund", date=date(2024, 6, 5), gross_amount=-40.0, currency="USD", category="Groceries",
                merchant="Market", payment_method="Visa", reward_points=3.0),
]

previous_transactions = [
    Transaction(id="p", date=date(2024, 5, 10), gross_amount=80.0, currency="USD", category="Groceries",
                merchant="Market", payment_method="Cash"),
]

current = normalize_transactions(current_transactions, "USD", converter).entries
previous = normalize_transactions(previous_transactions, "USD", converter).entries


def test_percentage_change_from_nothing_is_new():
    assert percentage_change(200.0, 0.0) == NEW_SPEND


def test_percentage_change_edge_values():
    assert percentage_change(0.0, 0.0) == 0.0
    assert percentage_change(-5.0, 0.0) == 0.0
    assert percentage_change(150.0, 100.0) == pytest.approx(50.0)
    assert percentage_change(50.0, -100.0) == pytest.approx(150.0)


def test_compute_metrics_totals():
    metrics = compute_metrics(current, previous)

    assert metrics.total_expenses == pytest.approx(180.0)
    assert metrics.total_reimbursed == pytest.approx(20.0)
    assert metrics.net_expenses == pytest.approx(160.0)
    assert metrics.transaction_count == 3
    assert metrics.average_amount == pytest.approx(60.0)
    assert metrics.previous_net_expenses == pytest.approx(80.0)
    assert metrics.percentage_change == pytest.approx(100.0)
    assert metrics.total_reward_points == pytest.approx(5.0)


def test_compute_metrics_leaders():
    metrics = compute_metrics(current, previous)

    assert metrics.top_merchant.name == "Cafe"
    assert metrics.top_merchant.value == pytest.approx(110.0)
    assert metrics.top_category.name == "Dining Out"
    assert metrics.top_category.value == pytest.approx(68.75)
    assert metrics.top_payment_method.name == "Cash"
    assert metrics.top_payment_method.value == 2


def test_day_of_week_average():
    averages = dict(compute_metrics(current).day_of_week_average)
    assert averages["Monday"] == pytest.approx(65.0)
    assert averages["Tuesday"] == pytest.approx(30.0)
    assert averages["Sunday"] == 0.0


def test_no_current_spend():
    metrics = compute_metrics((), previous)
    assert metrics.net_expenses == 0.0
    assert metrics.transaction_count == 0
    assert metrics.top_merchant is None
    assert metrics.percentage_change == pytest.approx(-100.0)


def test_category_changes_sorted_by_size_of_change():
    changes = category_changes(current, previous)

    assert [c.category for c in changes] == ["Dining Out", "Groceries"]
    dining, groceries = changes
    assert dining.change == pytest.approx(110.0)
    assert dining.percentage == 0.0
    assert groceries.change == pytest.approx(-30.0)
    assert groceries.percentage == pytest.approx(-37.5)
