"""
Company and Fiscal Period Schemas.
"""

from pydantic import BaseModel, Field, model_validator
from datetime import datetime, date
from typing import Optional


class CompanyCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    registration_number: Optional[str] = Field(default=None, max_length=50)
    tax_number: Optional[str] = Field(default=None, max_length=50)


class CompanyResponse(BaseModel):
    id: int
    name: str
    registration_number: Optional[str]
    tax_number: Optional[str]
    created_at: datetime

    class Config:
        from_attributes = True


class FiscalPeriodCreate(BaseModel):
    period_name: str = Field(..., min_length=1, max_length=100)
    start_date: date
    end_date: date

    @model_validator(mode="after")
    def check_dates(self):
        if self.start_date > self.end_date:
            raise ValueError("start_date must be on or before end_date")
        return self


class FiscalPeriodResponse(BaseModel):
    id: int
    company_id: int
    period_name: str
    start_date: date
    end_date: date
    is_closed: bool
    created_at: datetime

    class Config:
        from_attributes = True
