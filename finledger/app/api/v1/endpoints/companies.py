"""
Company Setup API Endpoints.

Companies, fiscal periods, accounts, transaction import and the journal listing.
"""

from typing import List, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from finledger.app.db.session import get_db
from finledger.app.core.guards import require_writer, require_reader
from finledger.app.models.accounting_enums import ClassificationStatus
from finledger.app.schemas.common import ApiResponse
from finledger.app.schemas.company import (
    CompanyCreate, CompanyResponse, FiscalPeriodCreate, FiscalPeriodResponse
)
from finledger.app.schemas.account import AccountCreate, AccountResponse
from finledger.app.schemas.transaction import (
    TransactionImportRequest, TransactionImportResult, TransactionResponse
)
from finledger.app.schemas.journal import JournalEntryResponse
from finledger.app.domain.setup.company_setup import CompanySetup

router = APIRouter(prefix="/companies", tags=["Company Setup"])


@router.post("", response_model=ApiResponse[CompanyResponse], status_code=status.HTTP_201_CREATED)
async def create_company(
    company_data: CompanyCreate,
    current_user: dict = Depends(require_writer),
    db: AsyncSession = Depends(get_db)
):
    company = await CompanySetup.create_company(db, company_data, current_user["sub"])
    return ApiResponse.ok("Company created", CompanyResponse.model_validate(company))


@router.get("", response_model=ApiResponse[List[CompanyResponse]])
async def list_companies(
    current_user: dict = Depends(require_reader),
    db: AsyncSession = Depends(get_db)
):
    companies = await CompanySetup.list_companies(db)
    return ApiResponse.ok(f"{len(companies)} companies", [CompanyResponse.model_validate(c) for c in companies])


@router.get("/{company_id}", response_model=ApiResponse[CompanyResponse])
async def get_company(
    company_id: int,
    current_user: dict = Depends(require_reader),
    db: AsyncSession = Depends(get_db)
):
    company = await CompanySetup.get_company(db, company_id)
    return ApiResponse.ok("Company", CompanyResponse.model_validate(company))


@router.post(
    "/{company_id}/fiscal-periods",
    response_model=ApiResponse[FiscalPeriodResponse],
    status_code=status.HTTP_201_CREATED
)
async def create_fiscal_period(
    company_id: int,
    period_data: FiscalPeriodCreate,
    current_user: dict = Depends(require_writer),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a fiscal period.

    Periods of a company may not overlap. Existing transactions without a
    period that fall inside the new dates are attached to it.
    """
    period = await CompanySetup.create_fiscal_period(db, company_id, period_data, current_user["sub"])
    return ApiResponse.ok("Fiscal period created", FiscalPeriodResponse.model_validate(period))


@router.get("/{company_id}/fiscal-periods", response_model=ApiResponse[List[FiscalPeriodResponse]])
async def list_fiscal_periods(
    company_id: int,
    current_user: dict = Depends(require_reader),
    db: AsyncSession = Depends(get_db)
):
    periods = await CompanySetup.list_fiscal_periods(db, company_id)
    return ApiResponse.ok(
        f"{len(periods)} fiscal periods", [FiscalPeriodResponse.model_validate(p) for p in periods]
    )


@router.post(
    "/{company_id}/accounts",
    response_model=ApiResponse[AccountResponse],
    status_code=status.HTTP_201_CREATED
)
async def create_account(
    company_id: int,
    account_data: AccountCreate,
    current_user: dict = Depends(require_writer),
    db: AsyncSession = Depends(get_db)
):
    account = await CompanySetup.create_account(db, company_id, account_data)
    return ApiResponse.ok("Account created", AccountResponse.model_validate(account))


@router.get("/{company_id}/accounts", response_model=ApiResponse[List[AccountResponse]])
async def list_accounts(
    company_id: int,
    active_only: bool = Query(False),
    current_user: dict = Depends(require_reader),
    db: AsyncSession = Depends(get_db)
):
    accounts = await CompanySetup.list_accounts(db, company_id, active_only=active_only)
    return ApiResponse.ok(f"{len(accounts)} accounts", [AccountResponse.model_validate(a) for a in accounts])


@router.post(
    "/{company_id}/transactions",
    response_model=ApiResponse[TransactionImportResult],
    status_code=status.HTTP_201_CREATED
)
async def import_transactions(
    company_id: int,
    import_data: TransactionImportRequest,
    current_user: dict = Depends(require_writer),
    db: AsyncSession = Depends(get_db)
):
    """Import statement lines as unclassified bank transactions."""
    result = await CompanySetup.import_transactions(db, company_id, import_data, current_user["sub"])
    return ApiResponse.ok(f"Imported {result.imported} transactions", result)


@router.get("/{company_id}/transactions", response_model=ApiResponse[List[TransactionResponse]])
async def list_transactions(
    company_id: int,
    fiscal_period_id: Optional[int] = Query(None),
    classification_status: Optional[ClassificationStatus] = Query(None, alias="status"),
    current_user: dict = Depends(require_reader),
    db: AsyncSession = Depends(get_db)
):
    transactions = await CompanySetup.list_transactions(
        db, company_id, fiscal_period_id=fiscal_period_id, status=classification_status
    )
    return ApiResponse.ok(
        f"{len(transactions)} transactions", [TransactionResponse.model_validate(t) for t in transactions]
    )


@router.get("/{company_id}/journal-entries", response_model=ApiResponse[List[JournalEntryResponse]])
async def list_journal_entries(
    company_id: int,
    fiscal_period_id: Optional[int] = Query(None),
    current_user: dict = Depends(require_reader),
    db: AsyncSession = Depends(get_db)
):
    entries = await CompanySetup.list_journal_entries(db, company_id, fiscal_period_id=fiscal_period_id)
    return ApiResponse.ok(
        f"{len(entries)} journal entries", [JournalEntryResponse.model_validate(e) for e in entries]
    )
