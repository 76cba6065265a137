from pydantic import BaseModel

from spendboard.analytics.types import BudgetPeriod


class BudgetUpdate(BaseModel):
    amount: float
    period: BudgetPeriod = BudgetPeriod.MONTHLY


class BudgetPublic(BaseModel):
    currency: str
    amount: float
    period: BudgetPeriod
