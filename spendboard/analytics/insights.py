from __future__ import annotations

from typing import Callable, List, Optional, Sequence

from .budget import largest_overspend
from .types import (
    SEVERITY_RANK,
    Anomaly,
    BudgetPace,
    Insight,
    Metrics,
    PaceStatus,
    ResolvedTimeframe,
    Severity,
)

AmountFormatter = Callable[[float], str]

TRENDING_UP_PERCENT = 15.0
CATEGORY_OVERSPEND_PERCENT = 50.0


def plain_amount(amount: float) -> str:
    return f"{amount:.2f}"


def _budget_insights(
    pace: BudgetPace,
    resolved: ResolvedTimeframe,
    net_expenses: float,
    fmt: AmountFormatter,
) -> List[Insight]:
    insights: List[Insight] = []
    driver = largest_overspend(pace.category_budgets)

    if pace.status is PaceStatus.OVER:
        message = f"Net spend is {fmt(net_expenses)} against a budget of {fmt(pace.scaled_budget)}."
        if driver is not None:
            message += f" Biggest driver: {driver.category} (+{fmt(driver.variance)} over)."
        insights.append(Insight(
            kind="over_budget",
            severity=Severity.HIGH,
            title=f"You're {fmt(-pace.remaining)} over budget.",
            message=message,
            action=f"review_category:{driver.category}" if driver else "adjust_budget",
        ))
        return insights

    if pace.status is PaceStatus.AHEAD_OF_PACE:
        message = (
            f"{fmt(net_expenses)} spent against {fmt(pace.expected_spend)} expected so far; "
            f"projected {fmt(pace.projection)} for the period."
        )
        if resolved.days_remaining > 0:
            message += f" Keep to {fmt(pace.daily_limit)}/day for the next {resolved.days_remaining} days."
        insights.append(Insight(
            kind="ahead_of_pace",
            severity=Severity.MEDIUM,
            title="Spending is ahead of pace.",
            message=message,
            action="adjust_budget",
        ))

    if driver is not None and driver.proportional_budget > 0:
        over_percent = driver.variance / driver.proportional_budget * 100
        if over_percent > CATEGORY_OVERSPEND_PERCENT:
            insights.append(Insight(
                kind="category_overspend",
                severity=Severity.MEDIUM,
                title=f"{driver.category} is +{fmt(driver.variance)} over typical.",
                message=f"{fmt(driver.current_spend)} spent against a typical {fmt(driver.proportional_budget)}.",
                action=f"review_category:{driver.category}",
            ))

    if pace.status is PaceStatus.ON_TRACK:
        under_expected = pace.expected_spend - net_expenses
        if under_expected > 0 and pace.projection < pace.scaled_budget:
            insights.append(Insight(
                kind="under_budget",
                severity=Severity.LOW,
                title=f"On track to save {fmt(pace.scaled_budget - pace.projection)}.",
                message=f"You're {fmt(under_expected)} under where you'd typically be at this point.",
            ))
        else:
            insights.append(Insight(
                kind="on_track",
                severity=Severity.LOW,
                title="Spending is on track.",
                message=f"You're within budget with {resolved.days_remaining} days remaining.",
            ))
    return insights


def _anomaly_insight(anomalies: Sequence[Anomaly], fmt: AmountFormatter) -> Optional[Insight]:
    if not anomalies:
        return None
    worst = min(anomalies, key=lambda a: SEVERITY_RANK[a.severity])
    count = len(anomalies)
    noun = "transaction" if count == 1 else "transactions"
    return Insight(
        kind="unusual_spending",
        severity=worst.severity,
        title=f"{count} unusual {noun} this period.",
        message=f"{worst.merchant or worst.category}: {fmt(worst.amount)}. {worst.reason}.",
        action=f"view_transaction:{worst.transaction_id}",
    )


def generate_insights(
    metrics: Metrics,
    resolved: ResolvedTimeframe,
    pace: Optional[BudgetPace] = None,
    anomalies: Sequence[Anomaly] = (),
    format_amount: AmountFormatter = plain_amount,
) -> List[Insight]:
    """
    Turn metrics, budget pace and anomalies into ranked recommendations.

    Ordering is by severity (high first), then by the order the rules fire.
    """
    insights: List[Insight] = []
    if pace is not None:
        insights.extend(_budget_insights(pace, resolved, metrics.net_expenses, format_amount))

    change = metrics.percentage_change
    if isinstance(change, float) and change > TRENDING_UP_PERCENT:
        top = metrics.top_category.name if metrics.top_category else None
        insights.append(Insight(
            kind="trending_up",
            severity=Severity.MEDIUM,
            title="Spending trending higher than usual.",
            message=(
                f"Net spend is up {change:.0f}% on the previous period"
                + (f", led by {top}." if top else ".")
            ),
            action=f"review_category:{top}" if top else None,
        ))

    anomaly = _anomaly_insight(anomalies, format_amount)
    if anomaly is not None:
        insights.append(anomaly)

    # sorted() is stable, so rule order survives within a severity
    return sorted(insights, key=lambda i: SEVERITY_RANK[i.severity])
