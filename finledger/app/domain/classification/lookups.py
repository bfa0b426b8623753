"""
Company-scoped lookups shared by the classification services.

Each helper raises ResourceNotFoundError (a ValidationError) when the row is
missing or belongs to another company, so callers never act across companies.
"""

from typing import Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from finledger.app.core.exceptions import ResourceNotFoundError, ValidationError
from finledger.app.models.company import Company
from finledger.app.models.account import Account
from finledger.app.models.bank_transaction import BankTransaction
from finledger.app.models.fiscal_period import FiscalPeriod


async def get_company(db: AsyncSession, company_id: int) -> Company:
    company = await db.get(Company, company_id)
    if not company:
        raise ResourceNotFoundError("Company", company_id)
    return company


async def get_company_account(db: AsyncSession, company_id: int, account_id: int, role: str = "Account") -> Account:
    account = await db.get(Account, account_id)
    if not account:
        raise ResourceNotFoundError(role, account_id)
    if account.company_id != company_id:
        raise ValidationError(
            f"{role} {account_id} does not belong to company {company_id}",
            error_code="ACCOUNT_COMPANY_MISMATCH",
            details={"account_id": account_id, "company_id": company_id}
        )
    return account


async def find_account_by_code(db: AsyncSession, company_id: int, account_code: str) -> Optional[Account]:
    result = await db.execute(
        select(Account).where(Account.company_id == company_id, Account.account_code == account_code)
    )
    return result.scalar_one_or_none()


async def get_account_by_code(db: AsyncSession, company_id: int, account_code: str) -> Account:
    account = await find_account_by_code(db, company_id, account_code)
    if not account:
        raise ResourceNotFoundError("Account", account_code)
    return account


async def get_company_transaction(db: AsyncSession, company_id: int, transaction_id: int) -> BankTransaction:
    transaction = await db.get(BankTransaction, transaction_id)
    if not transaction:
        raise ResourceNotFoundError("Transaction", transaction_id)
    if transaction.company_id != company_id:
        raise ValidationError(
            f"Transaction {transaction_id} does not belong to company {company_id}",
            error_code="TRANSACTION_COMPANY_MISMATCH",
            details={"transaction_id": transaction_id, "company_id": company_id}
        )
    return transaction


async def get_company_fiscal_period(db: AsyncSession, company_id: int, fiscal_period_id: int) -> FiscalPeriod:
    period = await db.get(FiscalPeriod, fiscal_period_id)
    if not period or period.company_id != company_id:
        raise ResourceNotFoundError("Fiscal period", fiscal_period_id)
    return period
