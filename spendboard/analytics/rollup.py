from __future__ import annotations

from enum import Enum
from typing import Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from .types import Leader, NormalizedTransaction, RollupItem

KeyFn = Callable[[NormalizedTransaction], str]
ValueFn = Callable[[NormalizedTransaction], float]

UNKNOWN = "Unknown"


class ViewMode(str, Enum):
    CATEGORY = "category"
    PAYMENT_METHOD = "payment_method"
    MERCHANT = "merchant"


def by_category(entry: NormalizedTransaction) -> str:
    return (entry.transaction.category or "").strip() or UNKNOWN


def by_merchant(entry: NormalizedTransaction) -> str:
    return (entry.transaction.merchant or "").strip() or UNKNOWN


def by_payment_method(entry: NormalizedTransaction) -> str:
    return (entry.transaction.payment_method or "").strip() or UNKNOWN


KEY_EXTRACTORS: Mapping[ViewMode, KeyFn] = {
    ViewMode.CATEGORY: by_category,
    ViewMode.PAYMENT_METHOD: by_payment_method,
    ViewMode.MERCHANT: by_merchant,
}


def net_value(entry: NormalizedTransaction) -> float:
    return entry.net


def rollup(
    entries: Iterable[NormalizedTransaction],
    key: KeyFn,
    value: ValueFn = net_value,
) -> List[RollupItem]:
    """
    Group entries by ``key`` and sum ``value`` in input order.

    Groups come back in first-encountered order with their share of the
    overall total.
    """
    sums: Dict[str, float] = {}
    counts: Dict[str, int] = {}
    for entry in entries:
        group = key(entry)
        sums[group] = sums.get(group, 0.0) + value(entry)
        counts[group] = counts.get(group, 0) + 1

    total = sum(sums.values())
    return [
        RollupItem(
            key=group,
            amount=amount,
            count=counts[group],
            percentage=(amount / total * 100) if total > 0 else 0.0,
        )
        for group, amount in sums.items()
    ]


def ranked(items: Iterable[RollupItem]) -> Tuple[RollupItem, ...]:
    return tuple(sorted(items, key=lambda item: (-item.amount, item.key)))


def leader(items: Sequence[RollupItem], metric: str = "amount") -> Optional[Leader]:
    """Largest item by ``metric``; ties go to the first-encountered group."""
    best: Optional[RollupItem] = None
    for item in items:
        if best is None or getattr(item, metric) > getattr(best, metric):
            best = item
    if best is None:
        return None
    return Leader(name=best.key, value=float(getattr(best, metric)))


def parse_view(value: Union[str, ViewMode]) -> ViewMode:
    if isinstance(value, ViewMode):
        return value
    try:
        return ViewMode(value)
    except ValueError:
        valid = ", ".join(v.value for v in ViewMode)
        raise ValueError(f"Unknown view mode {value!r}; expected one of: {valid}")


def breakdown(
    entries: Iterable[NormalizedTransaction],
    view: Union[str, ViewMode],
) -> Tuple[RollupItem, ...]:
    """Spend totals for one dashboard view mode, largest first."""
    spend = [entry for entry in entries if entry.is_spend]
    return ranked(rollup(spend, KEY_EXTRACTORS[parse_view(view)]))
