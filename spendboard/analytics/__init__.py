"""
spendboard.analytics
~~~~~~~~~~~~~~~~~~~~

Financial analytics engine behind the spendboard dashboard. It turns an
immutable snapshot of multi-currency transactions into normalized metrics, a
category hierarchy, budget pace figures, anomaly flags and insights. Nothing
in this package performs I/O, so it can be reused by the API routers, tests,
or any batch job.
"""

from .anomalies import AnomalyDetector
from .budget import BudgetPacer, BudgetStore, pace_color, scale_budget
from .currency import CurrencyConverter, RateTable
from .engine import DashboardAnalyzer
from .hierarchy import build_category_tree
from .insights import generate_insights
from .metrics import compute_metrics, percentage_change
from .normalizer import net_amount, normalize_transactions
from .rollup import ViewMode, breakdown
from .taxonomy import DEFAULT_TAXONOMY, CategoryTaxonomy, ParentCategory
from .timeframes import resolve_timeframe
from .types import (
    NEW_SPEND,
    Anomaly,
    BudgetConfig,
    BudgetPace,
    BudgetPeriod,
    CategoryNode,
    CategoryTree,
    DashboardSummary,
    Insight,
    Metrics,
    PaceStatus,
    Severity,
    Timeframe,
    Transaction,
)

__all__ = [
    "NEW_SPEND",
    "Anomaly",
    "AnomalyDetector",
    "BudgetConfig",
    "BudgetPace",
    "BudgetPacer",
    "BudgetPeriod",
    "BudgetStore",
    "CategoryNode",
    "CategoryTaxonomy",
    "CategoryTree",
    "CurrencyConverter",
    "DEFAULT_TAXONOMY",
    "DashboardAnalyzer",
    "DashboardSummary",
    "Insight",
    "Metrics",
    "PaceStatus",
    "ParentCategory",
    "RateTable",
    "Severity",
    "Timeframe",
    "Transaction",
    "ViewMode",
    "breakdown",
    "build_category_tree",
    "compute_metrics",
    "generate_insights",
    "net_amount",
    "normalize_transactions",
    "pace_color",
    "percentage_change",
    "resolve_timeframe",
    "scale_budget",
]
