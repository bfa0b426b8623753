"""
Journal Schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime, date
from decimal import Decimal
from typing import Optional, List
from finledger.app.models.accounting_enums import JournalEntrySource


class JournalEntryResponse(BaseModel):
    id: int
    company_id: int
    fiscal_period_id: Optional[int]
    transaction_id: int
    entry_date: date
    reference: Optional[str]
    description: Optional[str]
    debit_account_id: int
    credit_account_id: int
    amount: Decimal
    source: JournalEntrySource
    created_by: str
    updated_by: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class SkippedTransaction(BaseModel):
    transaction_id: int
    reason: str


class JournalSyncResult(BaseModel):
    """Outcome of a sync or regeneration run."""
    created: int = 0
    deleted: int = 0
    skipped: int = 0
    skipped_transactions: List[SkippedTransaction] = Field(default_factory=list)
