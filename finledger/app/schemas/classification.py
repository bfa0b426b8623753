"""
Classification Schemas.
"""

from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional, Dict, List
from finledger.app.models.accounting_enums import MatchType


class RuleCreate(BaseModel):
    """Schema for creating a classification rule. Target by account_id or account_code."""
    rule_name: str = Field(..., min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    match_type: MatchType
    match_value: str = Field(..., min_length=1, max_length=1000)
    account_id: Optional[int] = None
    account_code: Optional[str] = None
    priority: int = Field(default=100, ge=0)
    is_active: bool = True


class RuleUpdate(BaseModel):
    """Schema for updating a classification rule. Omitted fields stay unchanged."""
    rule_name: Optional[str] = Field(default=None, min_length=1, max_length=255)
    description: Optional[str] = Field(default=None, max_length=1000)
    match_type: Optional[MatchType] = None
    match_value: Optional[str] = Field(default=None, min_length=1, max_length=1000)
    account_id: Optional[int] = None
    account_code: Optional[str] = None
    priority: Optional[int] = Field(default=None, ge=0)
    is_active: Optional[bool] = None


class RuleResponse(BaseModel):
    id: int
    company_id: int
    rule_name: str
    description: Optional[str]
    match_type: MatchType
    match_value: str
    account_id: int
    priority: int
    is_active: bool
    created_by: Optional[str]
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True


class ClassifyTransactionRequest(BaseModel):
    """Direct assignment, bypassing rules. Give account_id or account_code."""
    account_id: Optional[int] = None
    account_code: Optional[str] = None


class ClassificationUpdateRequest(BaseModel):
    """Manual debit/credit override for one transaction."""
    debit_account_id: int
    credit_account_id: int


class BatchClassificationResult(BaseModel):
    total: int = 0
    matched: int = 0
    unmatched: int = 0
    errored: int = 0
    reset: int = 0
    matched_by_rule: Dict[int, int] = Field(default_factory=dict)
    errors: List[str] = Field(default_factory=list)


class InitializationResult(BaseModel):
    created: int
    skipped: int
