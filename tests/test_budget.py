from datetime import date

import pytest

from spendboard.analytics.budget import (
    BudgetPacer,
    category_budgets,
    largest_overspend,
    pace_color,
    scale_budget,
)
from spendboard.analytics.currency import CurrencyConverter
from spendboard.analytics.normalizer import normalize_transactions
from spendboard.analytics.timeframes import resolve_timeframe
from spendboard.analytics.types import BudgetConfig, BudgetPeriod, DateWindow, PaceStatus, Transaction
from spendboard.db.budget_store import InMemoryBudgetStore

june = resolve_timeframe("thisMonth", date(2024, 6, 15))


def pacer_with(amount, period=BudgetPeriod.MONTHLY):
    store = InMemoryBudgetStore()
    store.set(BudgetConfig(amount=amount, currency="USD", period=period))
    return BudgetPacer(store)


def entries(*rows):
    transactions = [
        Transaction(id=f"tx-{i}", date=date(2024, 6, 1), gross_amount=amount, currency="USD", category=category)
        for i, (amount, category) in enumerate(rows)
    ]
    return normalize_transactions(transactions, "USD", CurrencyConverter()).entries


def test_ahead_of_pace_halfway_through_month():
    pace = pacer_with(1000.0).pace(june, 600.0, "USD")

    assert pace.scaled_budget == pytest.approx(1000.0)
    assert pace.expected_spend == pytest.approx(500.0)
    assert pace.variance_ratio == pytest.approx(1.2)
    assert pace.status is PaceStatus.AHEAD_OF_PACE
    assert pace.projection == pytest.approx(1200.0)
    assert pace.remaining == pytest.approx(400.0)
    assert pace.daily_limit == pytest.approx(400.0 / 15)


def test_over_budget():
    pace = pacer_with(1000.0).pace(june, 1100.0, "USD")
    assert pace.status is PaceStatus.OVER
    assert pace.daily_limit == 0.0


def test_on_track():
    pace = pacer_with(1000.0).pace(june, 400.0, "USD")
    assert pace.status is PaceStatus.ON_TRACK
    assert pace.variance_ratio == pytest.approx(0.8)


def test_no_budget_means_no_pace():
    assert BudgetPacer(InMemoryBudgetStore()).pace(june, 400.0, "USD") is None


def test_multi_month_window_has_no_expected_spend():
    resolved = resolve_timeframe("lastThreeMonths", date(2024, 6, 15))
    pace = pacer_with(1000.0).pace(resolved, 1500.0, "USD")

    assert pace.scaled_budget == pytest.approx(3000.0)
    assert pace.expected_spend == 0.0
    assert pace.variance_ratio == 0.0
    assert pace.status is PaceStatus.ON_TRACK


def test_weekly_budget_scales_by_days():
    config = BudgetConfig(amount=70.0, currency="USD", period=BudgetPeriod.WEEKLY)
    assert scale_budget(config, DateWindow(date(2024, 6, 1), date(2024, 6, 30))) == pytest.approx(300.0)


def test_budget_in_another_currency_is_converted():
    class FixedStore:
        def get(self, currency):
            return BudgetConfig(amount=93.0, currency="EUR")

        def set(self, config):
            raise NotImplementedError

    config = BudgetPacer(FixedStore()).budget_for("USD", CurrencyConverter())
    assert config.currency == "USD"
    assert config.amount == pytest.approx(100.0)


def test_pace_color_endpoints():
    assert pace_color(0.5) == "#10b981"
    assert pace_color(1.0) == "#10b981"
    assert pace_color(1.5) == "#ef4444"
    assert pace_color(3.0) == "#ef4444"
    assert pace_color(1.25) not in ("#10b981", "#ef4444")


def test_category_budgets_follow_historical_share():
    history = entries((300.0, "Groceries"), (100.0, "Dining Out"))
    current = entries((500.0, "Groceries"), (400.0, "Dining Out"))

    budgets = category_budgets(current, history, 1000.0)
    by_name = {b.category: b for b in budgets}

    assert by_name["Groceries"].proportional_budget == pytest.approx(750.0)
    assert by_name["Dining Out"].proportional_budget == pytest.approx(250.0)
    assert budgets[0].category == "Dining Out"
    assert largest_overspend(budgets).variance == pytest.approx(150.0)


def test_category_budgets_without_history_use_current_mix():
    current = entries((75.0, "Groceries"), (25.0, "Dining Out"))
    budgets = category_budgets(current, (), 200.0)
    by_name = {b.category: b for b in budgets}
    assert by_name["Groceries"].historical_share == pytest.approx(0.75)
    assert largest_overspend(budgets) is None


def test_store_last_write_wins():
    store = InMemoryBudgetStore()
    store.set(BudgetConfig(amount=1000.0, currency="usd"))
    store.set(BudgetConfig(amount=500.0, currency="USD", period=BudgetPeriod.WEEKLY))

    config = store.get("Usd")
    assert config.amount == 500.0
    assert config.period is BudgetPeriod.WEEKLY
    assert store.delete("USD")
    assert store.get("USD") is None
