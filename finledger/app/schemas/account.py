"""
Account Schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional
from finledger.app.models.accounting_enums import AccountType


class AccountCreate(BaseModel):
    account_code: str = Field(..., min_length=1, max_length=20)
    account_name: str = Field(..., min_length=1, max_length=255)
    account_type: AccountType
    category: Optional[str] = Field(default=None, max_length=100)
    description: Optional[str] = Field(default=None, max_length=500)
    is_active: bool = True


class AccountResponse(BaseModel):
    id: int
    company_id: int
    account_code: str
    account_name: str
    account_type: AccountType
    category: Optional[str]
    description: Optional[str]
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
