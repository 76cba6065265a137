"""
Dashboard Router
Runs the analytics engine over a transaction snapshot posted by the client
"""
import logging
from datetime import date
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException
from fastapi.encoders import jsonable_encoder

from spendboard.analytics import AnomalyDetector, DashboardAnalyzer, RateTable, pace_color
from spendboard.core.config import settings
from spendboard.db.budget_store import budget_store
from spendboard.models.dashboard import SnapshotRequest, SummaryRequest

router = APIRouter()
logger = logging.getLogger(__name__)

dashboard_analyzer = DashboardAnalyzer(
    budget_store,
    cutoff_percent=settings.OTHER_CUTOFF_PERCENT,
    detector=AnomalyDetector(
        ratio=settings.ANOMALY_RATIO,
        high_ratio=settings.ANOMALY_HIGH_RATIO,
        floor=settings.ANOMALY_FLOOR,
        min_samples=settings.ANOMALY_MIN_SAMPLES,
        new_merchant_amount=settings.NEW_MERCHANT_LARGE_AMOUNT,
        frequency_multiplier=settings.ANOMALY_FREQUENCY_MULTIPLIER,
        lookback_days=settings.ANOMALY_LOOKBACK_DAYS,
    ),
    pace_tolerance=settings.PACE_TOLERANCE,
    cache_size=settings.SUMMARY_CACHE_SIZE,
)


def get_analyzer() -> DashboardAnalyzer:
    return dashboard_analyzer


def _rate_table(rates: Optional[Dict[str, Dict[str, float]]]) -> Optional[RateTable]:
    if not rates:
        return None
    return RateTable.from_nested(rates, base=settings.BASE_CURRENCY)


def _display_currency(request: SnapshotRequest) -> str:
    return (request.display_currency or settings.DEFAULT_DISPLAY_CURRENCY).upper()


@router.post("/summary")
def dashboard_summary(request: SummaryRequest, analyzer: DashboardAnalyzer = Depends(get_analyzer)) -> Dict:
    """
    Metrics, category tree, budget pace, anomalies and insights for the
    requested timeframe. Budgets come from the settings store.
    """
    transactions = [tx.to_transaction() for tx in request.transactions]
    try:
        summary = analyzer.summarize(
            transactions,
            display_currency=_display_currency(request),
            timeframe=request.timeframe,
            now=request.now or date.today(),
            rates=_rate_table(request.rates),
            cutoff_percent=request.cutoff_percent,
            include_merchants=request.include_merchants,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Unexpected error building dashboard summary: {str(e)}", exc_info=True)
        raise HTTPException(status_code=500, detail="Internal server error")

    payload = jsonable_encoder(summary)
    payload["budget_color"] = pace_color(summary.budget.variance_ratio) if summary.budget else None
    return payload


@router.post("/breakdown/{view}")
def dashboard_breakdown(
    view: str,
    request: SnapshotRequest,
    limit: int = settings.TOP_N,
    analyzer: DashboardAnalyzer = Depends(get_analyzer),
) -> Dict:
    """
    Spend grouped by category, payment_method or merchant, largest first.
    """
    transactions = [tx.to_transaction() for tx in request.transactions]
    try:
        items = analyzer.breakdown(
            transactions,
            display_currency=_display_currency(request),
            timeframe=request.timeframe,
            now=request.now or date.today(),
            view=view,
            rates=_rate_table(request.rates),
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    top: List = list(items[:limit]) if limit > 0 else list(items)
    return {"view": view, "items": jsonable_encoder(top), "total_groups": len(items)}
