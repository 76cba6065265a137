from __future__ import annotations

import logging
from typing import Iterable, Optional, Protocol, Sequence, Tuple

from .currency import CurrencyConverter
from .metrics import spend_only
from .rollup import by_category, rollup
from .timeframes import calendar_months, days_in_month
from .types import (
    BudgetConfig,
    BudgetPace,
    BudgetPeriod,
    CategoryBudget,
    DateWindow,
    NormalizedTransaction,
    PaceStatus,
    ResolvedTimeframe,
)

logger = logging.getLogger(__name__)

PACE_GREEN = (16, 185, 129)
PACE_RED = (239, 68, 68)


class BudgetStore(Protocol):
    """Key-value capability holding one budget per currency, last write wins."""

    def get(self, currency: str) -> Optional[BudgetConfig]:
        ...

    def set(self, config: BudgetConfig) -> None:
        ...


def scale_budget(config: BudgetConfig, window: DateWindow) -> float:
    """
    Scale a budget to the window's day count.

    Weekly budgets scale by days / 7. Monthly budgets scale by the fraction of
    each calendar month the window covers, so a calendar-aligned window gets
    exactly one monthly amount per month.
    """
    if config.amount <= 0:
        return 0.0
    if config.period is BudgetPeriod.WEEKLY:
        return config.amount * window.days / 7
    months = sum(days / days_in_month(year, month) for year, month, days in calendar_months(window))
    return config.amount * months


def linear_projection(net_expenses: float, days_in_window: int, days_elapsed: int) -> float:
    if days_elapsed <= 0:
        return net_expenses
    return net_expenses * days_in_window / days_elapsed


def daily_limit(remaining: float, days_remaining: int) -> float:
    if days_remaining <= 0:
        return 0.0
    return max(0.0, remaining / days_remaining)


def classify_pace(
    net_expenses: float,
    scaled_budget: float,
    variance_ratio: float,
    tolerance: float = 1.1,
) -> PaceStatus:
    if net_expenses > scaled_budget:
        return PaceStatus.OVER
    if variance_ratio > tolerance:
        return PaceStatus.AHEAD_OF_PACE
    return PaceStatus.ON_TRACK


def pace_color(variance_ratio: float) -> str:
    """Hex color for a variance ratio: green up to 1.0, blending to red at 1.5."""
    if variance_ratio <= 1.0:
        blend = 0.0
    elif variance_ratio >= 1.5:
        blend = 1.0
    else:
        blend = (variance_ratio - 1.0) / 0.5
    channels = (
        round(green + (red - green) * blend)
        for green, red in zip(PACE_GREEN, PACE_RED)
    )
    return "#" + "".join(f"{c:02x}" for c in channels)


def category_budgets(
    current: Iterable[NormalizedTransaction],
    history: Iterable[NormalizedTransaction],
    overall_budget: float,
) -> Tuple[CategoryBudget, ...]:
    """
    Split the overall budget across leaf categories by their historical share.

    Falls back to the current window's own distribution when there is no
    historical spend. Sorted by variance, largest overspend first.
    """
    if overall_budget <= 0:
        return ()

    current_items = rollup(spend_only(current), by_category)
    history_items = rollup(spend_only(history), by_category) or current_items
    history_total = sum(item.amount for item in history_items)

    shares = {
        item.key: (item.amount / history_total if history_total > 0 else 0.0)
        for item in history_items
    }
    spent = {item.key: item.amount for item in current_items}

    budgets = [
        CategoryBudget(
            category=name,
            proportional_budget=overall_budget * shares.get(name, 0.0),
            historical_share=shares.get(name, 0.0),
            current_spend=spent.get(name, 0.0),
        )
        for name in list(shares) + [key for key in spent if key not in shares]
    ]
    budgets.sort(key=lambda b: (-b.variance, b.category))
    return tuple(budgets)


def largest_overspend(budgets: Sequence[CategoryBudget]) -> Optional[CategoryBudget]:
    over = [b for b in budgets if b.variance > 0]
    return over[0] if over else None


class BudgetPacer:
    """Reads the budget for a currency from the injected store and measures pace against it."""

    def __init__(self, store: BudgetStore, tolerance: float = 1.1) -> None:
        self._store = store
        self._tolerance = tolerance

    @staticmethod
    def in_currency(
        config: Optional[BudgetConfig],
        currency: str,
        converter: Optional[CurrencyConverter] = None,
    ) -> Optional[BudgetConfig]:
        if config is None:
            return None
        if config.currency.upper() != currency.upper() and converter is not None:
            amount = converter.convert(config.amount, config.currency, currency)
            return BudgetConfig(amount=amount, currency=currency, period=config.period)
        return config

    def budget_for(self, currency: str, converter: Optional[CurrencyConverter] = None) -> Optional[BudgetConfig]:
        return self.in_currency(self._store.get(currency), currency, converter)

    def pace(
        self,
        resolved: ResolvedTimeframe,
        net_expenses: float,
        display_currency: str,
        converter: Optional[CurrencyConverter] = None,
        current: Sequence[NormalizedTransaction] = (),
        history: Sequence[NormalizedTransaction] = (),
    ) -> Optional[BudgetPace]:
        return self.pace_against(
            self._store.get(display_currency),
            resolved,
            net_expenses,
            display_currency,
            converter=converter,
            current=current,
            history=history,
        )

    def pace_against(
        self,
        budget: Optional[BudgetConfig],
        resolved: ResolvedTimeframe,
        net_expenses: float,
        display_currency: str,
        converter: Optional[CurrencyConverter] = None,
        current: Sequence[NormalizedTransaction] = (),
        history: Sequence[NormalizedTransaction] = (),
    ) -> Optional[BudgetPace]:
        """Pace against a budget the caller already read from the store."""
        config = self.in_currency(budget, display_currency, converter)
        if config is None:
            logger.debug(f"No budget configured for {display_currency}")
            return None

        scaled = scale_budget(config, resolved.current)
        ratio = resolved.elapsed_ratio
        expected = scaled * ratio if ratio is not None else 0.0
        variance_ratio = net_expenses / expected if expected > 0 else 0.0
        remaining = scaled - net_expenses

        return BudgetPace(
            scaled_budget=scaled,
            expected_spend=expected,
            variance_ratio=variance_ratio,
            status=classify_pace(net_expenses, scaled, variance_ratio, self._tolerance),
            projection=linear_projection(net_expenses, resolved.days_in_window, resolved.days_elapsed),
            remaining=remaining,
            daily_limit=daily_limit(remaining, resolved.days_remaining),
            category_budgets=category_budgets(current, history, scaled),
        )
