from datetime import date

import pytest

from spendboard.analytics.anomalies import AnomalyDetector
from spendboard.analytics.currency import CurrencyConverter
from spendboard.analytics.normalizer import normalize_transactions
from spendboard.analytics.types import Severity, Transaction


def entries(*rows, month=6):
    transactions = [
        Transaction(
            id=tx_id,
            date=date(2024, month, 1 + i),
            gross_amount=amount,
            currency="USD",
            category=category,
            merchant=merchant,
        )
        for i, (tx_id, amount, category, merchant) in enumerate(rows)
    ]
    return normalize_transactions(transactions, "USD", CurrencyConverter()).entries


history = entries(
    ("h1", 50.0, "Groceries", "Shop A"),
    ("h2", 50.0, "Groceries", "Shop B"),
    month=5,
)


def test_ten_times_category_baseline_is_high_and_reported_once():
    current = entries(("big", 500.0, "Groceries", "Shop C"))
    anomalies = AnomalyDetector().detect(current, history)

    assert len(anomalies) == 1
    anomaly = anomalies[0]
    assert anomaly.transaction_id == "big"
    assert anomaly.severity is Severity.HIGH
    assert anomaly.baseline == pytest.approx(50.0)


def test_merchant_history_is_preferred():
    past = entries(
        ("m1", 100.0, "Groceries", "Market"),
        ("m2", 100.0, "Groceries", "Market"),
        ("m3", 10.0, "Groceries", "Kiosk"),
        ("m4", 10.0, "Groceries", "Kiosk"),
        month=5,
    )
    current = entries(("c1", 200.0, "Groceries", "Market"))
    assert AnomalyDetector().detect(current, past) == []


def test_four_times_baseline_is_medium():
    current = entries(("mid", 200.0, "Groceries", "Shop C"))
    anomalies = AnomalyDetector().detect(current, history)
    assert [a.severity for a in anomalies] == [Severity.MEDIUM]


@pytest.mark.parametrize("amount", [10.0, 25.0, 40.0, 49.99])
def test_nothing_below_the_floor_is_flagged(amount):
    past = entries(("k1", 1.0, "Groceries", "Kiosk"), ("k2", 1.0, "Groceries", "Kiosk"), month=5)
    current = entries(("small", amount, "Groceries", "Kiosk"))
    assert AnomalyDetector(floor=50.0).detect(current, past) == []


def test_current_window_baseline_leaves_the_candidate_out():
    current = entries(
        ("d1", 20.0, "Dining Out", "Bistro"),
        ("d2", 20.0, "Dining Out", "Bistro"),
        ("d3", 20.0, "Dining Out", "Bistro"),
        ("d4", 300.0, "Dining Out", "Bistro"),
    )
    anomalies = AnomalyDetector().detect(current)

    assert [a.transaction_id for a in anomalies] == ["d4"]
    assert anomalies[0].baseline == pytest.approx(20.0)
    assert anomalies[0].severity is Severity.HIGH


def test_first_large_purchase_at_new_merchant_is_low():
    current = entries(("tv", 300.0, "Shopping", "Electronics Hub"))
    anomalies = AnomalyDetector().detect(current, history)

    assert len(anomalies) == 1
    assert anomalies[0].severity is Severity.LOW
    assert "Electronics Hub" in anomalies[0].reason


def test_no_history_means_no_new_merchant_flags():
    current = entries(("tv", 300.0, "Shopping", "Electronics Hub"))
    assert AnomalyDetector().detect(current) == []


def test_refunds_are_ignored():
    current = entries(("r", -900.0, "Groceries", "Shop C"))
    assert AnomalyDetector().detect(current, history) == []


def test_results_sorted_by_amount():
    current = entries(
        ("mid", 200.0, "Groceries", "Shop C"),
        ("big", 500.0, "Groceries", "Shop D"),
    )
    anomalies = AnomalyDetector().detect(current, history)
    assert [a.transaction_id for a in anomalies] == ["big", "mid"]


def cafe_visits(*days, amount=60.0, month=6, prefix="jun"):
    transactions = [
        Transaction(id=f"{prefix}-{day}", date=date(2024, month, day), gross_amount=amount,
                    currency="USD", category="Dining Out", merchant="Cafe")
        for day in days
    ]
    return normalize_transactions(transactions, "USD", CurrencyConverter()).entries


cafe_history = cafe_visits(1, 15, 29, month=5, prefix="may")


def test_burst_of_visits_flags_most_recent_once():
    anomalies = AnomalyDetector().detect(cafe_visits(10, 11, 12, 13), cafe_history)

    assert len(anomalies) == 1
    anomaly = anomalies[0]
    assert anomaly.transaction_id == "jun-13"
    assert anomaly.severity is Severity.MEDIUM
    assert anomaly.reason.startswith("4th purchase at Cafe")


def test_usual_visit_rate_is_not_flagged():
    assert AnomalyDetector().detect(cafe_visits(3, 13), cafe_history) == []


def test_visit_burst_below_floor_is_not_flagged():
    history = cafe_visits(1, 15, 29, amount=20.0, month=5, prefix="may")
    assert AnomalyDetector().detect(cafe_visits(10, 11, 12, 13, amount=20.0), history) == []


def test_visit_burst_does_not_duplicate_an_amount_anomaly():
    current = cafe_visits(10, 11, 12) + cafe_visits(13, amount=600.0)
    anomalies = AnomalyDetector().detect(current, cafe_history)

    assert [a.transaction_id for a in anomalies] == ["jun-13"]
    assert anomalies[0].severity is Severity.HIGH
