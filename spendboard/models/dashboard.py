import datetime as dt
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from spendboard.models.transaction import TransactionIn


class SnapshotRequest(BaseModel):
    transactions: List[TransactionIn] = Field(default_factory=list)
    display_currency: Optional[str] = None
    timeframe: str = "thisMonth"
    now: Optional[dt.date] = None
    # {"USD": {"EUR": 0.93, ...}, ...}; omitted means the built-in table
    rates: Optional[Dict[str, Dict[str, float]]] = None


class SummaryRequest(SnapshotRequest):
    cutoff_percent: Optional[float] = None
    include_merchants: bool = True
