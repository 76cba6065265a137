"""
Budget storage collaborators.

The analytics engine only sees the ``BudgetStore`` protocol. This module holds
the in-process implementation the API uses by default: one budget per
currency, last write wins.
"""
import logging
import threading
from typing import Dict, Optional

from spendboard.analytics.types import BudgetConfig

logger = logging.getLogger(__name__)


class InMemoryBudgetStore:
    def __init__(self, initial: Optional[Dict[str, BudgetConfig]] = None) -> None:
        self._lock = threading.Lock()
        self._budgets: Dict[str, BudgetConfig] = {
            currency.upper(): config for currency, config in (initial or {}).items()
        }

    def get(self, currency: str) -> Optional[BudgetConfig]:
        with self._lock:
            return self._budgets.get(currency.upper())

    def set(self, config: BudgetConfig) -> None:
        with self._lock:
            self._budgets[config.currency.upper()] = config
        logger.info(f"Budget for {config.currency.upper()} set to {config.amount} ({config.period.value})")

    def delete(self, currency: str) -> bool:
        with self._lock:
            return self._budgets.pop(currency.upper(), None) is not None


budget_store = InMemoryBudgetStore()
