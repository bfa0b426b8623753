"""
Tests for company setup: companies, fiscal periods, accounts, import.
"""

import pytest
from datetime import date
from decimal import Decimal
from finledger.app.core.exceptions import ValidationError
from finledger.app.models.accounting_enums import AccountType, ClassificationStatus
from finledger.app.schemas.company import CompanyCreate, FiscalPeriodCreate
from finledger.app.schemas.account import AccountCreate
from finledger.app.schemas.transaction import TransactionImportRequest, TransactionImportItem
from finledger.app.domain.setup.company_setup import CompanySetup

API = "/api/v1"


@pytest.mark.asyncio
async def test_duplicate_company_name_rejected(db_session):
    await CompanySetup.create_company(db_session, CompanyCreate(name="Acme"), "admin")
    with pytest.raises(ValidationError) as exc:
        await CompanySetup.create_company(db_session, CompanyCreate(name="Acme"), "admin")
    assert exc.value.error_code == "DUPLICATE_COMPANY"


@pytest.mark.asyncio
async def test_overlapping_fiscal_period_rejected(db_session, company, fiscal_period):
    overlapping = FiscalPeriodCreate(
        period_name="Odd", start_date=date(2025, 1, 1), end_date=date(2025, 12, 31)
    )
    with pytest.raises(ValidationError) as exc:
        await CompanySetup.create_fiscal_period(db_session, company.id, overlapping, "admin")
    assert exc.value.error_code == "OVERLAPPING_FISCAL_PERIOD"


@pytest.mark.asyncio
async def test_new_period_adopts_unassigned_transactions(db_session, company, make_transaction):
    inside = await make_transaction("IN RANGE", "-1.00", day=date(2023, 6, 1), fiscal_period_id=None)
    outside = await make_transaction("OUT OF RANGE", "-1.00", day=date(2022, 6, 1), fiscal_period_id=None)

    period = await CompanySetup.create_fiscal_period(
        db_session, company.id,
        FiscalPeriodCreate(period_name="FY2023", start_date=date(2023, 3, 1), end_date=date(2024, 2, 29)),
        "admin"
    )

    transactions = await CompanySetup.list_transactions(db_session, company.id, fiscal_period_id=period.id)
    assert [t.id for t in transactions] == [inside.id]
    assert outside.id not in [t.id for t in transactions]


@pytest.mark.asyncio
async def test_import_assigns_period_by_date(db_session, company, fiscal_period):
    request = TransactionImportRequest(transactions=[
        TransactionImportItem(transaction_date=date(2024, 6, 1), description="IN", amount=Decimal("10.00")),
        TransactionImportItem(transaction_date=date(2020, 1, 1), description="OLD", amount=Decimal("-3.00")),
    ])

    result = await CompanySetup.import_transactions(db_session, company.id, request, "admin")

    assert result.imported == 2
    assert result.assigned_to_period == 1
    assert result.without_period == 1
    unclassified = await CompanySetup.list_transactions(
        db_session, company.id, status=ClassificationStatus.UNCLASSIFIED
    )
    assert len(unclassified) == 2


@pytest.mark.asyncio
async def test_import_rejects_foreign_period(db_session, company, other_company, fiscal_period):
    request = TransactionImportRequest(transactions=[
        TransactionImportItem(
            transaction_date=date(2024, 6, 1), description="X", amount=Decimal("1.00"),
            fiscal_period_id=fiscal_period.id
        ),
    ])
    with pytest.raises(ValidationError):
        await CompanySetup.import_transactions(db_session, other_company.id, request, "admin")


@pytest.mark.asyncio
async def test_duplicate_account_code_rejected(db_session, company, accounts):
    with pytest.raises(ValidationError) as exc:
        await CompanySetup.create_account(
            db_session, company.id,
            AccountCreate(account_code="1100", account_name="Another Bank", account_type=AccountType.ASSET)
        )
    assert exc.value.error_code == "DUPLICATE_ACCOUNT_CODE"


@pytest.mark.asyncio
async def test_fiscal_period_end_before_start_is_400(client, admin_headers, company):
    response = await client.post(
        f"{API}/companies/{company.id}/fiscal-periods",
        json={"period_name": "Backwards", "start_date": "2024-12-31", "end_date": "2024-01-01"},
        headers=admin_headers
    )
    assert response.status_code == 400
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_unknown_company_is_400(client, admin_headers):
    response = await client.get(f"{API}/companies/999", headers=admin_headers)
    assert response.status_code == 400
    assert response.json()["error_code"] == "COMPANY_NOT_FOUND"


@pytest.mark.asyncio
async def test_health(client):
    response = await client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"
    assert "X-Correlation-ID" in response.headers
