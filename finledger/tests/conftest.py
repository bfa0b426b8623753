"""
Centralized Test Configuration.
"""

import pytest
from datetime import date
from decimal import Decimal
from httpx import AsyncClient, ASGITransport
from sqlalchemy.ext.asyncio import create_async_engine, async_sessionmaker, AsyncSession
from sqlalchemy.pool import StaticPool

from finledger.app.main import app
from finledger.app.db.session import get_db, Base
from finledger.app.core.jwt import create_access_token
from finledger.app.models.company import Company
from finledger.app.models.fiscal_period import FiscalPeriod
from finledger.app.models.account import Account
from finledger.app.models.bank_transaction import BankTransaction
from finledger.app.models.accounting_enums import AccountType

# Setup In-Memory Test Database
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

# Event handler to enable foreign keys for SQLite
from sqlalchemy import event
from sqlalchemy.pool import Pool

@event.listens_for(Pool, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    """Enable foreign key constraints for SQLite."""
    if 'sqlite' in str(type(dbapi_conn)):
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

engine = create_async_engine(
    TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)

TestingSessionLocal = async_sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False
)


@pytest.fixture(scope="session", autouse=True)
def apply_overrides():
    """Route every request's session to the in-memory database."""

    async def override_get_db():
        async with TestingSessionLocal() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    yield
    app.dependency_overrides = {}


@pytest.fixture(autouse=True)
async def setup_database():
    """Create tables before each test function and drop after."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)


@pytest.fixture
async def client():
    """Async client for testing."""
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac


# Shared session for fixture data creation
@pytest.fixture
async def db_session():
    async with TestingSessionLocal() as session:
        yield session


# Tokens

def _token(username: str, user_id: int, role: str) -> str:
    return create_access_token(data={"sub": username, "user_id": user_id, "role": role})


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {_token('admin', 1, 'ADMIN')}"}


@pytest.fixture
def accountant_headers():
    return {"Authorization": f"Bearer {_token('jane.accountant', 2, 'ACCOUNTANT')}"}


@pytest.fixture
def viewer_headers():
    return {"Authorization": f"Bearer {_token('viewer', 3, 'VIEWER')}"}


# Bookkeeping data

@pytest.fixture
async def company(db_session):
    company = Company(name="Acme Trading", registration_number="2020/123456/07")
    db_session.add(company)
    await db_session.commit()
    return company


@pytest.fixture
async def other_company(db_session):
    company = Company(name="Other Holdings")
    db_session.add(company)
    await db_session.commit()
    return company


@pytest.fixture
async def fiscal_period(db_session, company):
    period = FiscalPeriod(
        company_id=company.id,
        period_name="FY2024",
        start_date=date(2024, 3, 1),
        end_date=date(2025, 2, 28),
    )
    db_session.add(period)
    await db_session.commit()
    return period


@pytest.fixture
async def accounts(db_session, company):
    """Bank, revenue and two expense accounts keyed by code."""
    rows = [
        Account(company_id=company.id, account_code="1100", account_name="Bank - Current Account",
                account_type=AccountType.ASSET, category="Current Assets"),
        Account(company_id=company.id, account_code="6100", account_name="Service Revenue",
                account_type=AccountType.REVENUE, category="Operating Revenue"),
        Account(company_id=company.id, account_code="8100", account_name="Employee Costs",
                account_type=AccountType.EXPENSE, category="Operating Expenses"),
        Account(company_id=company.id, account_code="9600", account_name="Bank Charges",
                account_type=AccountType.EXPENSE, category="Finance Costs"),
    ]
    db_session.add_all(rows)
    await db_session.commit()
    return {account.account_code: account for account in rows}


@pytest.fixture
def make_transaction(db_session, company, fiscal_period):
    """Factory for unclassified transactions of the test company."""

    async def _make(description: str, amount: str, day: date = date(2024, 6, 15), **kwargs) -> BankTransaction:
        transaction = BankTransaction(
            company_id=kwargs.pop("company_id", company.id),
            fiscal_period_id=kwargs.pop("fiscal_period_id", fiscal_period.id),
            transaction_date=day,
            description=description,
            amount=Decimal(amount),
            **kwargs
        )
        db_session.add(transaction)
        await db_session.commit()
        return transaction

    return _make
