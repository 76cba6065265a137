from __future__ import annotations

from typing import Dict, Iterable, List, Sequence, Tuple

from .rollup import by_category, by_merchant, by_payment_method, leader, rollup
from .types import NEW_SPEND, CategoryChange, Metrics, NormalizedTransaction, PercentageChange

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")


def spend_only(entries: Iterable[NormalizedTransaction]) -> List[NormalizedTransaction]:
    return [entry for entry in entries if entry.is_spend]


def net_total(entries: Iterable[NormalizedTransaction]) -> float:
    spend = spend_only(entries)
    return sum(entry.gross for entry in spend) - sum(entry.reimbursed for entry in spend)


def percentage_change(current: float, previous: float) -> PercentageChange:
    """
    Period-over-period change in percent.

    Returns ``NEW_SPEND`` when there was nothing to compare against but spend
    appeared, and 0.0 when both periods are empty.
    """
    if previous == 0:
        return NEW_SPEND if current > 0 else 0.0
    return (current - previous) / abs(previous) * 100


def day_of_week_average(entries: Sequence[NormalizedTransaction]) -> Tuple[Tuple[str, float], ...]:
    totals = [0.0] * 7
    counts = [0] * 7
    for entry in entries:
        weekday = entry.transaction.date.weekday()
        totals[weekday] += entry.net
        counts[weekday] += 1
    return tuple(
        (name, totals[i] / counts[i] if counts[i] else 0.0)
        for i, name in enumerate(WEEKDAYS)
    )


def compute_metrics(
    current: Iterable[NormalizedTransaction],
    previous: Iterable[NormalizedTransaction] = (),
) -> Metrics:
    """Scalar summary metrics for the current window, compared with the previous one."""
    spend = spend_only(current)
    previous_net = net_total(previous)

    if not spend:
        return Metrics(
            previous_net_expenses=previous_net,
            percentage_change=percentage_change(0.0, previous_net),
            day_of_week_average=day_of_week_average(()),
        )

    total_expenses = sum(entry.gross for entry in spend)
    total_reimbursed = sum(entry.reimbursed for entry in spend)
    net_expenses = total_expenses - total_reimbursed
    count = len(spend)

    return Metrics(
        total_expenses=total_expenses,
        total_reimbursed=total_reimbursed,
        net_expenses=net_expenses,
        transaction_count=count,
        average_amount=total_expenses / count,
        percentage_change=percentage_change(net_expenses, previous_net),
        previous_net_expenses=previous_net,
        total_reward_points=sum(entry.transaction.reward_points or 0.0 for entry in spend),
        top_merchant=leader(rollup(spend, by_merchant), "amount"),
        top_category=leader(rollup(spend, by_category), "percentage"),
        top_payment_method=leader(rollup(spend, by_payment_method), "count"),
        day_of_week_average=day_of_week_average(spend),
    )


def category_changes(
    current: Iterable[NormalizedTransaction],
    previous: Iterable[NormalizedTransaction],
) -> Tuple[CategoryChange, ...]:
    """Per leaf category, how this window compares with the previous one."""
    now: Dict[str, float] = {item.key: item.amount for item in rollup(spend_only(current), by_category)}
    before: Dict[str, float] = {item.key: item.amount for item in rollup(spend_only(previous), by_category)}

    changes = []
    for category in list(now) + [name for name in before if name not in now]:
        current_amount = now.get(category, 0.0)
        previous_amount = before.get(category, 0.0)
        change = current_amount - previous_amount
        changes.append(CategoryChange(
            category=category,
            current=current_amount,
            previous=previous_amount,
            change=change,
            percentage=change / previous_amount * 100 if previous_amount > 0 else 0.0,
        ))
    changes.sort(key=lambda c: (-abs(c.change), c.category))
    return tuple(changes)
