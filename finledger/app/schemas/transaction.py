"""
Bank Transaction Schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List
from finledger.app.models.accounting_enums import ClassificationStatus, ClassificationSource


class TransactionImportItem(BaseModel):
    """One statement line. Positive amount is money in, negative is money out."""
    transaction_date: date
    description: str = Field(..., min_length=1, max_length=500)
    amount: Decimal = Field(..., max_digits=15, decimal_places=2)
    reference: Optional[str] = Field(default=None, max_length=100)
    fiscal_period_id: Optional[int] = None


class TransactionImportRequest(BaseModel):
    transactions: List[TransactionImportItem] = Field(..., min_length=1)


class TransactionImportResult(BaseModel):
    imported: int
    assigned_to_period: int
    without_period: int


class TransactionResponse(BaseModel):
    id: int
    company_id: int
    fiscal_period_id: Optional[int]
    transaction_date: date
    description: str
    reference: Optional[str]
    amount: Decimal
    classification_status: ClassificationStatus
    account_id: Optional[int]
    classification_source: Optional[ClassificationSource]
    classified_by_rule_id: Optional[int]
    classified_by: Optional[str]
    classified_at: Optional[datetime]
    manual_debit_account_id: Optional[int]
    manual_credit_account_id: Optional[int]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
