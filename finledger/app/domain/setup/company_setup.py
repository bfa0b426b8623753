"""
Company Setup Service.

Companies, fiscal periods, chart accounts and statement import: the data
the classification workflow runs on.
"""

import logging
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from finledger.app.core.exceptions import ValidationError
from finledger.app.models.company import Company
from finledger.app.models.fiscal_period import FiscalPeriod
from finledger.app.models.account import Account
from finledger.app.models.bank_transaction import BankTransaction
from finledger.app.models.journal_entry import JournalEntry
from finledger.app.models.accounting_enums import ClassificationStatus
from finledger.app.schemas.company import CompanyCreate, FiscalPeriodCreate
from finledger.app.schemas.account import AccountCreate
from finledger.app.schemas.transaction import TransactionImportRequest, TransactionImportResult
from finledger.app.services.audit import log_event, AuditAction
from finledger.app.domain.classification.lookups import (
    get_company, get_company_fiscal_period, find_account_by_code
)

logger = logging.getLogger("finledger.setup")


class CompanySetup:

    # Companies

    @staticmethod
    async def create_company(db: AsyncSession, data: CompanyCreate, username: str) -> Company:
        existing = await db.execute(select(Company.id).where(Company.name == data.name))
        if existing.scalar_one_or_none() is not None:
            raise ValidationError(f"Company '{data.name}' already exists", error_code="DUPLICATE_COMPANY")

        company = Company(
            name=data.name,
            registration_number=data.registration_number,
            tax_number=data.tax_number,
        )
        db.add(company)
        await db.commit()

        await log_event(
            db, action=AuditAction.COMPANY_CREATED, actor_username=username,
            company_id=company.id, metadata={"name": company.name}
        )
        return company

    @staticmethod
    async def list_companies(db: AsyncSession) -> List[Company]:
        result = await db.execute(select(Company).order_by(Company.id.asc()))
        return list(result.scalars().all())

    @staticmethod
    async def get_company(db: AsyncSession, company_id: int) -> Company:
        return await get_company(db, company_id)

    # Fiscal periods

    @staticmethod
    async def create_fiscal_period(
        db: AsyncSession, company_id: int, data: FiscalPeriodCreate, username: str
    ) -> FiscalPeriod:
        """
        Create a fiscal period and attach to it the company's transactions
        that have no period yet and fall inside its dates.

        Raises:
            ValidationError: unknown company, end before start, duplicate
                name, or overlap with an existing period of the company.
        """
        await get_company(db, company_id)
        if data.start_date > data.end_date:
            raise ValidationError("start_date must be on or before end_date", error_code="INVALID_PERIOD_DATES")

        duplicate = await db.execute(
            select(FiscalPeriod.id).where(
                FiscalPeriod.company_id == company_id,
                FiscalPeriod.period_name == data.period_name
            )
        )
        if duplicate.scalar_one_or_none() is not None:
            raise ValidationError(
                f"Fiscal period '{data.period_name}' already exists", error_code="DUPLICATE_FISCAL_PERIOD"
            )

        overlap = await db.execute(
            select(FiscalPeriod).where(
                FiscalPeriod.company_id == company_id,
                FiscalPeriod.start_date <= data.end_date,
                FiscalPeriod.end_date >= data.start_date
            )
        )
        clash = overlap.scalars().first()
        if clash:
            raise ValidationError(
                f"Fiscal period overlaps '{clash.period_name}' ({clash.start_date} to {clash.end_date})",
                error_code="OVERLAPPING_FISCAL_PERIOD",
                details={"fiscal_period_id": clash.id}
            )

        period = FiscalPeriod(
            company_id=company_id,
            period_name=data.period_name,
            start_date=data.start_date,
            end_date=data.end_date,
            is_closed=False,
        )
        db.add(period)
        await db.flush()

        assigned = await db.execute(
            update(BankTransaction)
            .where(
                BankTransaction.company_id == company_id,
                BankTransaction.fiscal_period_id.is_(None),
                BankTransaction.transaction_date >= data.start_date,
                BankTransaction.transaction_date <= data.end_date
            )
            .values(fiscal_period_id=period.id)
            .execution_options(synchronize_session="fetch")
        )
        await db.execute(
            update(JournalEntry)
            .where(
                JournalEntry.company_id == company_id,
                JournalEntry.fiscal_period_id.is_(None),
                JournalEntry.entry_date >= data.start_date,
                JournalEntry.entry_date <= data.end_date
            )
            .values(fiscal_period_id=period.id)
            .execution_options(synchronize_session="fetch")
        )
        await db.commit()

        logger.info(
            "Fiscal period %s created for company %s; %d transactions assigned",
            period.id, company_id, assigned.rowcount or 0
        )
        await log_event(
            db, action=AuditAction.FISCAL_PERIOD_CREATED, actor_username=username, company_id=company_id,
            metadata={"fiscal_period_id": period.id, "transactions_assigned": assigned.rowcount or 0}
        )
        return period

    @staticmethod
    async def list_fiscal_periods(db: AsyncSession, company_id: int) -> List[FiscalPeriod]:
        await get_company(db, company_id)
        result = await db.execute(
            select(FiscalPeriod)
            .where(FiscalPeriod.company_id == company_id)
            .order_by(FiscalPeriod.start_date.asc())
        )
        return list(result.scalars().all())

    # Accounts

    @staticmethod
    async def create_account(db: AsyncSession, company_id: int, data: AccountCreate) -> Account:
        await get_company(db, company_id)
        if await find_account_by_code(db, company_id, data.account_code):
            raise ValidationError(
                f"Account code {data.account_code} already exists", error_code="DUPLICATE_ACCOUNT_CODE"
            )

        account = Account(company_id=company_id, **data.model_dump())
        db.add(account)
        await db.commit()
        return account

    @staticmethod
    async def list_accounts(db: AsyncSession, company_id: int, active_only: bool = False) -> List[Account]:
        await get_company(db, company_id)
        query = select(Account).where(Account.company_id == company_id)
        if active_only:
            query = query.where(Account.is_active == True)  # noqa: E712
        result = await db.execute(query.order_by(Account.account_code.asc()))
        return list(result.scalars().all())

    # Transactions

    @staticmethod
    async def import_transactions(
        db: AsyncSession, company_id: int, data: TransactionImportRequest, username: str
    ) -> TransactionImportResult:
        """
        Store statement lines as UNCLASSIFIED transactions.

        A line without fiscal_period_id is attached to the company's period
        covering its date, if there is one.
        """
        await get_company(db, company_id)

        periods = await CompanySetup.list_fiscal_periods(db, company_id)
        period_ids = {p.id for p in periods}

        assigned = 0
        for item in data.transactions:
            period_id = item.fiscal_period_id
            if period_id is not None:
                if period_id not in period_ids:
                    await get_company_fiscal_period(db, company_id, period_id)
            else:
                period_id = next(
                    (p.id for p in periods if p.start_date <= item.transaction_date <= p.end_date), None
                )
            if period_id is not None:
                assigned += 1

            db.add(BankTransaction(
                company_id=company_id,
                fiscal_period_id=period_id,
                transaction_date=item.transaction_date,
                description=item.description,
                reference=item.reference,
                amount=item.amount,
                classification_status=ClassificationStatus.UNCLASSIFIED,
            ))

        await db.commit()

        imported = len(data.transactions)
        await log_event(
            db, action=AuditAction.TRANSACTIONS_IMPORTED, actor_username=username, company_id=company_id,
            metadata={"imported": imported, "assigned_to_period": assigned}
        )
        return TransactionImportResult(
            imported=imported, assigned_to_period=assigned, without_period=imported - assigned
        )

    @staticmethod
    async def list_transactions(
        db: AsyncSession,
        company_id: int,
        fiscal_period_id: Optional[int] = None,
        status: Optional[ClassificationStatus] = None,
    ) -> List[BankTransaction]:
        await get_company(db, company_id)
        query = select(BankTransaction).where(BankTransaction.company_id == company_id)
        if fiscal_period_id is not None:
            await get_company_fiscal_period(db, company_id, fiscal_period_id)
            query = query.where(BankTransaction.fiscal_period_id == fiscal_period_id)
        if status is not None:
            query = query.where(BankTransaction.classification_status == status)
        result = await db.execute(query.order_by(BankTransaction.transaction_date.asc(), BankTransaction.id.asc()))
        return list(result.scalars().all())

    @staticmethod
    async def list_journal_entries(
        db: AsyncSession, company_id: int, fiscal_period_id: Optional[int] = None
    ) -> List[JournalEntry]:
        await get_company(db, company_id)
        query = select(JournalEntry).where(JournalEntry.company_id == company_id)
        if fiscal_period_id is not None:
            query = query.where(JournalEntry.fiscal_period_id == fiscal_period_id)
        result = await db.execute(query.order_by(JournalEntry.entry_date.asc(), JournalEntry.id.asc()))
        return list(result.scalars().all())
