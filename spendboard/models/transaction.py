import datetime as dt
from typing import Optional

from pydantic import BaseModel

from spendboard.analytics.types import Transaction


class TransactionIn(BaseModel):
    id: str
    date: Optional[dt.date] = None
    amount: Optional[float] = None
    currency: str = "USD"
    category: Optional[str] = None
    merchant: Optional[str] = ""
    payment_method: Optional[str] = ""
    payment_amount: Optional[float] = None
    payment_currency: Optional[str] = None
    reimbursement_amount: Optional[float] = None
    reward_points: Optional[float] = 0.0

    def to_transaction(self) -> Transaction:
        return Transaction(
            id=self.id,
            date=self.date,
            gross_amount=self.amount,
            currency=self.currency.upper(),
            category=self.category,
            merchant=self.merchant or "",
            payment_method=self.payment_method or "",
            payment_amount=self.payment_amount,
            payment_currency=self.payment_currency.upper() if self.payment_currency else None,
            reimbursement_amount=self.reimbursement_amount,
            reward_points=self.reward_points or 0.0,
        )
