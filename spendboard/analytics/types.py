from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from typing import Optional, Tuple, Union


class Timeframe(str, Enum):
    THIS_MONTH = "thisMonth"
    LAST_MONTH = "lastMonth"
    LAST_TWO_MONTHS = "lastTwoMonths"
    LAST_THREE_MONTHS = "lastThreeMonths"
    LAST_SIX_MONTHS = "lastSixMonths"
    THIS_YEAR = "thisYear"


class BudgetPeriod(str, Enum):
    WEEKLY = "weekly"
    MONTHLY = "monthly"


class Severity(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


SEVERITY_RANK = {Severity.HIGH: 0, Severity.MEDIUM: 1, Severity.LOW: 2}

# Reported instead of a ratio when the previous window had no net spend.
NEW_SPEND = "new"

PercentageChange = Union[float, str]


@dataclass(frozen=True)
class Transaction:
    """A single card or cash transaction as supplied by the persistence layer.

    ``date``, ``gross_amount`` and ``category`` are optional so that malformed
    rows can reach the engine and be tallied instead of rejected upstream.
    """

    id: str
    date: Optional[date]
    gross_amount: Optional[float]
    currency: str
    category: Optional[str]
    merchant: str = ""
    payment_method: str = ""
    payment_amount: Optional[float] = None
    payment_currency: Optional[str] = None
    reimbursement_amount: Optional[float] = None
    reward_points: float = 0.0

    def __post_init__(self) -> None:
        # Windows compare plain dates; a datetime would not order against them.
        if isinstance(self.date, datetime):
            object.__setattr__(self, "date", self.date.date())

    @property
    def is_spend(self) -> bool:
        return self.gross_amount is not None and self.gross_amount > 0


@dataclass(frozen=True)
class BudgetConfig:
    amount: float
    currency: str
    period: BudgetPeriod = BudgetPeriod.MONTHLY


@dataclass(frozen=True)
class NormalizedTransaction:
    transaction: Transaction
    gross: float
    reimbursed: float

    @property
    def net(self) -> float:
        return self.gross - self.reimbursed

    @property
    def is_spend(self) -> bool:
        return self.transaction.is_spend


@dataclass(frozen=True)
class DateWindow:
    start: date
    end: date

    @property
    def days(self) -> int:
        return (self.end - self.start).days + 1

    def contains(self, day: date) -> bool:
        return self.start <= day <= self.end


@dataclass(frozen=True)
class ResolvedTimeframe:
    timeframe: Timeframe
    current: DateWindow
    previous: DateWindow
    days_elapsed: int
    elapsed_ratio: Optional[float]

    @property
    def days_in_window(self) -> int:
        return self.current.days

    @property
    def days_remaining(self) -> int:
        return max(0, self.current.days - self.days_elapsed)


@dataclass(frozen=True)
class CategoryNode:
    name: str
    amount: float
    percentage: float
    transaction_count: int = 0
    children: Tuple["CategoryNode", ...] = ()
    is_other: bool = False
    id: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None


@dataclass(frozen=True)
class CategoryTree:
    total: float
    nodes: Tuple[CategoryNode, ...] = ()


@dataclass(frozen=True)
class RollupItem:
    key: str
    amount: float
    count: int
    percentage: float = 0.0


@dataclass(frozen=True)
class Leader:
    name: str
    value: float


@dataclass(frozen=True)
class CategoryChange:
    category: str
    current: float
    previous: float
    change: float
    percentage: float


@dataclass(frozen=True)
class Metrics:
    total_expenses: float = 0.0
    total_reimbursed: float = 0.0
    net_expenses: float = 0.0
    transaction_count: int = 0
    average_amount: float = 0.0
    percentage_change: PercentageChange = 0.0
    previous_net_expenses: float = 0.0
    total_reward_points: float = 0.0
    top_merchant: Optional[Leader] = None
    top_category: Optional[Leader] = None
    top_payment_method: Optional[Leader] = None
    day_of_week_average: Tuple[Tuple[str, float], ...] = ()


@dataclass(frozen=True)
class CategoryBudget:
    category: str
    proportional_budget: float
    historical_share: float
    current_spend: float

    @property
    def variance(self) -> float:
        return self.current_spend - self.proportional_budget


class PaceStatus(str, Enum):
    OVER = "over"
    AHEAD_OF_PACE = "ahead_of_pace"
    ON_TRACK = "on_track"


@dataclass(frozen=True)
class BudgetPace:
    scaled_budget: float
    expected_spend: float
    variance_ratio: float
    status: PaceStatus
    projection: float
    remaining: float
    daily_limit: float
    category_budgets: Tuple[CategoryBudget, ...] = ()


@dataclass(frozen=True)
class Anomaly:
    transaction_id: str
    severity: Severity
    reason: str
    amount: float
    merchant: str = ""
    category: str = ""
    baseline: Optional[float] = None


@dataclass(frozen=True)
class Insight:
    kind: str
    severity: Severity
    title: str
    message: str
    action: Optional[str] = None


@dataclass(frozen=True)
class Diagnostics:
    skipped: int = 0
    degraded_pairs: Tuple[Tuple[str, str], ...] = ()
    errors: Tuple[str, ...] = ()


@dataclass(frozen=True)
class DashboardSummary:
    display_currency: str
    timeframe: ResolvedTimeframe
    categories: CategoryTree
    metrics: Metrics
    budget: Optional[BudgetPace]
    anomalies: Tuple[Anomaly, ...] = ()
    insights: Tuple[Insight, ...] = ()
    category_changes: Tuple[CategoryChange, ...] = ()
    diagnostics: Diagnostics = field(default_factory=Diagnostics)
