"""
Reporting Schemas.
"""

from pydantic import BaseModel, Field
from datetime import date
from decimal import Decimal
from typing import Optional, List


class UnclassifiedTransactionView(BaseModel):
    """Read-only projection of a transaction that still needs an account."""
    id: int
    transaction_date: date
    description: str
    amount: Decimal
    transaction_type: str  # CREDIT for money in, DEBIT for money out
    reference: Optional[str]
    fiscal_period_id: Optional[int]


class PeriodClassificationSummary(BaseModel):
    fiscal_period_id: Optional[int]
    period_name: Optional[str]
    total: int
    classified: int
    unclassified: int
    classification_rate: float


class ClassificationSummary(BaseModel):
    company_id: int
    total: int
    classified: int
    unclassified: int
    classification_rate: float
    periods: List[PeriodClassificationSummary] = Field(default_factory=list)
