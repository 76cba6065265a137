"""
Settings Router
Reads and writes the per-currency budget used for pacing
"""
import logging
from typing import Dict

from fastapi import APIRouter, Depends, HTTPException, status

from spendboard.analytics.types import BudgetConfig
from spendboard.db.budget_store import InMemoryBudgetStore, budget_store
from spendboard.models.budget import BudgetPublic, BudgetUpdate

router = APIRouter()
logger = logging.getLogger(__name__)


def get_budget_store() -> InMemoryBudgetStore:
    return budget_store


@router.get("/budget/{currency}", response_model=BudgetPublic)
def get_budget(currency: str, store: InMemoryBudgetStore = Depends(get_budget_store)):
    config = store.get(currency)
    if config is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"No budget set for {currency.upper()}")
    return BudgetPublic(currency=config.currency, amount=config.amount, period=config.period)


@router.put("/budget/{currency}", response_model=BudgetPublic)
def update_budget(
    currency: str,
    update: BudgetUpdate,
    store: InMemoryBudgetStore = Depends(get_budget_store),
):
    """
    Set the budget for a currency. The latest write replaces any earlier one.
    """
    if update.amount < 0:
        raise HTTPException(status_code=400, detail="Budget amount must not be negative")

    config = BudgetConfig(amount=update.amount, currency=currency.upper(), period=update.period)
    store.set(config)
    return BudgetPublic(currency=config.currency, amount=config.amount, period=config.period)


@router.delete("/budget/{currency}", status_code=status.HTTP_204_NO_CONTENT)
def delete_budget(currency: str, store: InMemoryBudgetStore = Depends(get_budget_store)):
    if not store.delete(currency):
        raise HTTPException(status_code=404, detail=f"No budget set for {currency.upper()}")
    return None
