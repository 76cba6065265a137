from __future__ import annotations

import hashlib
import json
import logging
import threading
from collections import OrderedDict
from dataclasses import asdict
from datetime import date, datetime
from typing import Any, Callable, List, Optional, Sequence, Tuple, TypeVar, Union

from .anomalies import AnomalyDetector
from .budget import BudgetPacer, BudgetStore
from .currency import CurrencyConverter, RateTable
from .hierarchy import build_category_tree
from .insights import AmountFormatter, generate_insights, plain_amount
from .metrics import category_changes, compute_metrics
from .normalizer import normalize_transactions
from .rollup import ViewMode, breakdown, parse_view
from .taxonomy import DEFAULT_TAXONOMY, CategoryTaxonomy
from .timeframes import before, in_window, resolve_timeframe
from .types import BudgetConfig, DashboardSummary, Diagnostics, RollupItem, Timeframe, Transaction

logger = logging.getLogger(__name__)

T = TypeVar("T")


def snapshot_key(*parts: Any) -> str:
    """sha256 over a canonical JSON rendering of the inputs."""
    payload = json.dumps(parts, sort_keys=True, separators=(",", ":"), default=str)
    return hashlib.sha256(payload.encode("utf-8")).hexdigest()


def _fingerprint(transactions: Sequence[Transaction]) -> List[dict]:
    return [asdict(tx) for tx in transactions]


class DashboardAnalyzer:
    """
    Facade over the analytics engine used by the API routers.

    Every call recomputes from the snapshot it is given. Results are memoized
    by a content hash of the snapshot and settings, so repeated renders of an
    unchanged snapshot are cheap; a changed snapshot simply misses the cache.
    """

    def __init__(
        self,
        budget_store: BudgetStore,
        taxonomy: CategoryTaxonomy = DEFAULT_TAXONOMY,
        cutoff_percent: float = 3.0,
        detector: Optional[AnomalyDetector] = None,
        pace_tolerance: float = 1.1,
        format_amount: AmountFormatter = plain_amount,
        cache_size: int = 64,
    ) -> None:
        self._store = budget_store
        self._taxonomy = taxonomy
        self._cutoff_percent = cutoff_percent
        self._detector = detector or AnomalyDetector()
        self._pacer = BudgetPacer(budget_store, tolerance=pace_tolerance)
        self._format_amount = format_amount
        self._cache_size = cache_size
        self._cache: "OrderedDict[str, DashboardSummary]" = OrderedDict()
        self._lock = threading.Lock()

    def clear_cache(self) -> None:
        with self._lock:
            self._cache.clear()

    def _recall(self, key: str) -> Optional[DashboardSummary]:
        with self._lock:
            cached = self._cache.get(key)
            if cached is not None:
                self._cache.move_to_end(key)
            return cached

    def _remember(self, key: str, summary: DashboardSummary) -> None:
        with self._lock:
            self._cache[key] = summary
            self._cache.move_to_end(key)
            while len(self._cache) > self._cache_size:
                self._cache.popitem(last=False)

    @staticmethod
    def _safely(label: str, fn: Callable[[], List[T]], errors: List[str]) -> List[T]:
        try:
            return fn()
        except Exception as e:
            logger.error(f"{label} failed: {str(e)}", exc_info=True)
            errors.append(f"{label}: {str(e)}")
            return []

    def summarize(
        self,
        transactions: Sequence[Transaction],
        display_currency: str,
        timeframe: Union[str, Timeframe],
        now: Union[date, datetime],
        rates: Optional[RateTable] = None,
        cutoff_percent: Optional[float] = None,
        include_merchants: bool = True,
    ) -> DashboardSummary:
        display_currency = display_currency.upper()
        resolved = resolve_timeframe(timeframe, now)
        cutoff = self._cutoff_percent if cutoff_percent is None else cutoff_percent
        table = rates or RateTable.default()
        budget = self._store.get(display_currency)

        key = snapshot_key(
            _fingerprint(transactions),
            display_currency,
            resolved.timeframe.value,
            resolved.current.start,
            resolved.days_elapsed,
            list(table.items()),
            table.base,
            asdict(budget) if budget else None,
            cutoff,
            include_merchants,
        )
        cached = self._recall(key)
        if cached is not None:
            return cached

        # built on the same budget read that went into the key
        summary = self._compute(transactions, display_currency, resolved, table, budget, cutoff, include_merchants)
        self._remember(key, summary)
        return summary

    def _compute(
        self,
        transactions,
        display_currency,
        resolved,
        table,
        budget: Optional[BudgetConfig],
        cutoff,
        include_merchants,
    ) -> DashboardSummary:
        converter = CurrencyConverter(table)
        normalized = normalize_transactions(transactions, display_currency, converter)
        current = in_window(normalized.entries, resolved.current)
        previous = in_window(normalized.entries, resolved.previous)
        history = before(normalized.entries, resolved.current.start)
        errors: List[str] = []

        metrics = compute_metrics(current, previous)
        tree = build_category_tree(current, self._taxonomy, cutoff, include_merchants)
        pace = self._pacer.pace_against(
            budget,
            resolved,
            metrics.net_expenses,
            display_currency,
            converter=converter,
            current=current,
            history=previous,
        )
        anomalies = self._safely("Anomaly detection", lambda: self._detector.detect(current, history), errors)
        insights = self._safely(
            "Insight generation",
            lambda: generate_insights(metrics, resolved, pace, anomalies, self._format_amount),
            errors,
        )

        logger.info(
            f"Summarized {len(current)} transactions for {resolved.timeframe.value} "
            f"in {display_currency}: net={metrics.net_expenses:.2f}"
        )
        return DashboardSummary(
            display_currency=display_currency,
            timeframe=resolved,
            categories=tree,
            metrics=metrics,
            budget=pace,
            anomalies=tuple(anomalies),
            insights=tuple(insights),
            category_changes=category_changes(current, previous),
            diagnostics=Diagnostics(
                skipped=normalized.skipped,
                degraded_pairs=converter.degraded_pairs,
                errors=tuple(errors),
            ),
        )

    def breakdown(
        self,
        transactions: Sequence[Transaction],
        display_currency: str,
        timeframe: Union[str, Timeframe],
        now: Union[date, datetime],
        view: Union[str, ViewMode],
        rates: Optional[RateTable] = None,
    ) -> Tuple[RollupItem, ...]:
        view = parse_view(view)
        resolved = resolve_timeframe(timeframe, now)
        converter = CurrencyConverter(rates or RateTable.default())
        normalized = normalize_transactions(transactions, display_currency.upper(), converter)
        return breakdown(in_window(normalized.entries, resolved.current), view)
