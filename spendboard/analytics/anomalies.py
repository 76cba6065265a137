from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Dict, Iterable, List, Optional, Sequence, Set, Tuple

from .rollup import KeyFn, by_category, by_merchant
from .types import Anomaly, NormalizedTransaction, Severity


@dataclass
class _Tally:
    total: float = 0.0
    count: int = 0
    first: Optional[date] = None
    last: Optional[date] = None

    def add(self, amount: float, day: date) -> None:
        self.total += amount
        self.count += 1
        self.first = day if self.first is None else min(self.first, day)
        self.last = day if self.last is None else max(self.last, day)

    @property
    def mean(self) -> float:
        return self.total / self.count if self.count else 0.0

    @property
    def weekly_frequency(self) -> float:
        """Visits per week across the span of the history."""
        if not self.count:
            return 0.0
        weeks = (self.last - self.first).days / 7
        if weeks < 0.5:
            return float(self.count)
        return self.count / max(1.0, weeks)


def _tally(entries: Iterable[NormalizedTransaction], key: KeyFn) -> Dict[str, _Tally]:
    tallies: Dict[str, _Tally] = {}
    for entry in entries:
        tallies.setdefault(key(entry), _Tally()).add(entry.gross, entry.transaction.date)
    return tallies


def _ordinal(n: int) -> str:
    if n % 100 in (11, 12, 13):
        return f"{n}th"
    suffix = {1: "st", 2: "nd", 3: "rd"}.get(n % 10, "th")
    return f"{n}{suffix}"


class AnomalyDetector:
    """
    Heuristic outlier detection against merchant and category norms.

    A transaction is an outlier when it exceeds ``ratio`` times its baseline
    and is at least ``floor`` in display currency. Baselines are tried in
    order: merchant history, category history, then the rest of the same
    category in the current window. A first large purchase at a merchant
    with no history is flagged as low severity.

    Merchants visited more than ``frequency_multiplier`` times their usual
    weekly rate during the last ``lookback_days`` of the window are flagged
    once, on their most recent transaction.
    """

    def __init__(
        self,
        ratio: float = 3.0,
        high_ratio: float = 5.0,
        floor: float = 50.0,
        min_samples: int = 2,
        new_merchant_amount: float = 250.0,
        frequency_multiplier: float = 2.0,
        lookback_days: int = 7,
    ) -> None:
        self.ratio = ratio
        self.high_ratio = high_ratio
        self.floor = floor
        self.min_samples = max(1, min_samples)
        self.new_merchant_amount = new_merchant_amount
        self.frequency_multiplier = frequency_multiplier
        self.lookback_days = max(1, lookback_days)

    def _baseline(
        self,
        entry: NormalizedTransaction,
        merchant_history: Dict[str, _Tally],
        category_history: Dict[str, _Tally],
        category_current: Dict[str, _Tally],
    ) -> Tuple[Optional[float], str]:
        merchant = by_merchant(entry)
        category = by_category(entry)

        tally = merchant_history.get(merchant)
        if tally and tally.count >= self.min_samples:
            return tally.mean, f"the usual spend at {merchant}"

        tally = category_history.get(category)
        if tally and tally.count >= self.min_samples:
            return tally.mean, f"typical {category} spend"

        tally = category_current.get(category)
        if tally and tally.count - 1 >= self.min_samples:
            return (tally.total - entry.gross) / (tally.count - 1), f"other {category} spend this period"

        return None, ""

    def severity_for(self, multiple: float) -> Severity:
        return Severity.HIGH if multiple > self.high_ratio else Severity.MEDIUM

    def _frequency_anomalies(
        self,
        spend: Sequence[NormalizedTransaction],
        merchant_history: Dict[str, _Tally],
        flagged: Set[str],
    ) -> List[Anomaly]:
        if not spend:
            return []
        latest = max(entry.transaction.date for entry in spend)
        since = latest - timedelta(days=self.lookback_days - 1)

        recent: Dict[str, List[NormalizedTransaction]] = {}
        for entry in spend:
            if entry.transaction.date >= since:
                recent.setdefault(by_merchant(entry), []).append(entry)

        anomalies: List[Anomaly] = []
        for merchant, visits in recent.items():
            usual = merchant_history.get(merchant)
            if len(visits) < self.min_samples or not usual or usual.count < self.min_samples:
                continue
            weekly = len(visits) / (self.lookback_days / 7)
            if weekly <= usual.weekly_frequency * self.frequency_multiplier:
                continue

            # last occurrence of the most recent date
            newest = max(reversed(visits), key=lambda e: e.transaction.date)
            if newest.gross < self.floor or newest.transaction.id in flagged:
                continue
            flagged.add(newest.transaction.id)
            anomalies.append(self._record(
                newest,
                Severity.MEDIUM,
                f"{_ordinal(len(visits))} purchase at {merchant} in {self.lookback_days} days "
                f"(usually {usual.weekly_frequency:.1f} a week)",
                usual.mean,
            ))
        return anomalies

    def detect(
        self,
        current: Sequence[NormalizedTransaction],
        history: Sequence[NormalizedTransaction] = (),
    ) -> List[Anomaly]:
        spend = [entry for entry in current if entry.is_spend]
        past = [entry for entry in history if entry.is_spend]

        merchant_history = _tally(past, by_merchant)
        category_history = _tally(past, by_category)
        category_current = _tally(spend, by_category)

        first_visit: Dict[str, NormalizedTransaction] = {}
        for entry in sorted(spend, key=lambda e: e.transaction.date):
            first_visit.setdefault(by_merchant(entry), entry)

        anomalies: List[Anomaly] = []
        for entry in spend:
            amount = entry.gross
            if amount < self.floor:
                continue

            baseline, basis = self._baseline(entry, merchant_history, category_history, category_current)
            if baseline is not None and baseline > 0 and amount > self.ratio * baseline:
                multiple = amount / baseline
                anomalies.append(self._record(
                    entry,
                    self.severity_for(multiple),
                    f"Amount {multiple:.1f}x {basis}",
                    baseline,
                ))
                continue

            merchant = by_merchant(entry)
            if (
                merchant_history
                and merchant not in merchant_history
                and first_visit.get(merchant) is entry
                and amount >= self.new_merchant_amount
            ):
                anomalies.append(self._record(entry, Severity.LOW, f"First large purchase at {merchant}", baseline))

        flagged = {anomaly.transaction_id for anomaly in anomalies}
        anomalies.extend(self._frequency_anomalies(spend, merchant_history, flagged))

        anomalies.sort(key=lambda a: -a.amount)
        return anomalies

    @staticmethod
    def _record(
        entry: NormalizedTransaction,
        severity: Severity,
        reason: str,
        baseline: Optional[float],
    ) -> Anomaly:
        return Anomaly(
            transaction_id=entry.transaction.id,
            severity=severity,
            reason=reason,
            amount=entry.gross,
            merchant=by_merchant(entry),
            category=by_category(entry),
            baseline=baseline,
        )
