"""
Journal Sync.

Derives double-entry journal entries from classified bank transactions.

Derivation for a classified transaction (bank = configured bank account):
    money in  (amount > 0): debit bank, credit classified account
    money out (amount < 0): debit classified account, credit bank
A recorded manual override (debit/credit pair on the transaction) takes
precedence over the derivation.

Entries are written with INSERT .. ON CONFLICT (transaction_id) so two
concurrent syncs cannot create two entries for one transaction.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional, Tuple
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, insert
from sqlalchemy.dialects import postgresql, sqlite

from finledger.app.core.config import settings
from finledger.app.core.exceptions import ValidationError, InternalError
from finledger.app.models.account import Account
from finledger.app.models.bank_transaction import BankTransaction
from finledger.app.models.journal_entry import JournalEntry
from finledger.app.models.accounting_enums import (
    ClassificationStatus, ClassificationSource, JournalEntrySource
)
from finledger.app.schemas.journal import JournalSyncResult, SkippedTransaction
from finledger.app.services.audit import log_event, AuditAction
from finledger.app.domain.classification.lookups import (
    get_company, get_company_account, get_company_transaction, find_account_by_code
)

logger = logging.getLogger("finledger.journal")

# Columns refreshed when an existing entry is overwritten; created_by/created_at stay
_UPDATABLE_COLUMNS = (
    "fiscal_period_id", "entry_date", "reference", "description",
    "debit_account_id", "credit_account_id", "amount", "source",
    "updated_by", "updated_at",
)


def build_journal_entry(
    transaction: BankTransaction, bank_account: Optional[Account], username: str
) -> Tuple[Optional[Dict[str, Any]], Optional[str]]:
    """
    Build the journal entry row for one classified transaction.

    Returns:
        (values, None) when an entry can be derived, or (None, reason)
        when the transaction has to be skipped.
    """
    amount = transaction.amount
    if amount is None or amount == 0:
        return None, "zero amount"

    if transaction.manual_debit_account_id and transaction.manual_credit_account_id:
        debit_id = transaction.manual_debit_account_id
        credit_id = transaction.manual_credit_account_id
        source = JournalEntrySource.MANUAL
    else:
        if transaction.account_id is None:
            return None, "transaction is not classified"
        if bank_account is None:
            return None, f"bank account {settings.bank_account_code} not found"
        if transaction.account_id == bank_account.id:
            return None, "classified account is the bank account"
        if amount > 0:
            debit_id, credit_id = bank_account.id, transaction.account_id
        else:
            debit_id, credit_id = transaction.account_id, bank_account.id
        source = JournalEntrySource.AUTO

    if debit_id == credit_id:
        return None, "debit and credit accounts are the same"

    now = datetime.utcnow()
    values = {
        "company_id": transaction.company_id,
        "fiscal_period_id": transaction.fiscal_period_id,
        "transaction_id": transaction.id,
        "entry_date": transaction.transaction_date,
        "reference": transaction.reference,
        "description": transaction.description,
        "debit_account_id": debit_id,
        "credit_account_id": credit_id,
        "amount": abs(amount),
        "source": source,
        "created_by": username,
        "updated_by": None,
        "created_at": now,
        "updated_at": now,
    }
    return values, None


def _dialect_insert(db: AsyncSession):
    dialect = db.get_bind().dialect.name
    if dialect == "postgresql":
        return postgresql.insert(JournalEntry)
    if dialect == "sqlite":
        return sqlite.insert(JournalEntry)
    return None


async def insert_journal_entry(db: AsyncSession, values: Dict[str, Any]) -> bool:
    """Insert unless an entry for the transaction exists. Returns True if a row was written."""
    stmt = _dialect_insert(db)
    if stmt is None:
        await db.execute(insert(JournalEntry).values(**values))
        return True
    stmt = stmt.values(**values).on_conflict_do_nothing(index_elements=["transaction_id"])
    result = await db.execute(stmt.returning(JournalEntry.id))
    return result.scalar_one_or_none() is not None


async def upsert_journal_entry(db: AsyncSession, values: Dict[str, Any], username: str) -> None:
    """Insert, or overwrite the entry of the same transaction keeping its creator."""
    stmt = _dialect_insert(db)
    if stmt is None:
        existing = await db.execute(
            select(JournalEntry).where(JournalEntry.transaction_id == values["transaction_id"])
        )
        entry = existing.scalar_one_or_none()
        if entry is None:
            db.add(JournalEntry(**values))
        else:
            for column in _UPDATABLE_COLUMNS:
                setattr(entry, column, values[column])
            entry.updated_by = username
        return

    stmt = stmt.values(**values)
    update_set = {column: stmt.excluded[column] for column in _UPDATABLE_COLUMNS}
    update_set["updated_by"] = username
    await db.execute(stmt.on_conflict_do_update(index_elements=["transaction_id"], set_=update_set))


async def _classified_transactions(db: AsyncSession, company_id: int, without_entry: bool):
    query = select(BankTransaction).where(
        BankTransaction.company_id == company_id,
        BankTransaction.account_id.is_not(None)
    )
    if without_entry:
        query = query.outerjoin(
            JournalEntry, JournalEntry.transaction_id == BankTransaction.id
        ).where(JournalEntry.id.is_(None))
    result = await db.execute(query.order_by(BankTransaction.id.asc()))
    return result.scalars().all()


def _skip(outcome: JournalSyncResult, transaction_id: int, reason: str) -> None:
    logger.warning("Skipping journal entry for transaction %s: %s", transaction_id, reason)
    outcome.skipped += 1
    outcome.skipped_transactions.append(SkippedTransaction(transaction_id=transaction_id, reason=reason))


class JournalSync:

    @staticmethod
    async def sync_journal_entries(db: AsyncSession, company_id: int, username: str) -> JournalSyncResult:
        """
        Create entries for classified transactions that have none.

        Existing entries are never modified.
        """
        await get_company(db, company_id)
        bank_account = await find_account_by_code(db, company_id, settings.bank_account_code)
        outcome = JournalSyncResult()

        for transaction in await _classified_transactions(db, company_id, without_entry=True):
            values, reason = build_journal_entry(transaction, bank_account, username)
            if reason:
                _skip(outcome, transaction.id, reason)
                continue
            if await insert_journal_entry(db, values):
                outcome.created += 1

        await db.commit()

        logger.info("Journal sync for company %s: created=%d skipped=%d", company_id, outcome.created, outcome.skipped)
        await log_event(
            db,
            action=AuditAction.JOURNAL_ENTRIES_SYNCED,
            actor_username=username,
            company_id=company_id,
            metadata={"created": outcome.created, "skipped": outcome.skipped}
        )
        return outcome

    @staticmethod
    async def regenerate_all_journal_entries(
        db: AsyncSession, company_id: int, username: str
    ) -> JournalSyncResult:
        """
        Delete and rebuild every journal entry of a company from current
        classification state, as one database transaction.

        Raises:
            InternalError: the rebuild failed; the previous entries are kept.
        """
        await get_company(db, company_id)
        bank_account = await find_account_by_code(db, company_id, settings.bank_account_code)
        outcome = JournalSyncResult()

        try:
            deleted = await db.execute(
                delete(JournalEntry)
                .where(JournalEntry.company_id == company_id)
                .execution_options(synchronize_session=False)
            )
            outcome.deleted = deleted.rowcount or 0

            for transaction in await _classified_transactions(db, company_id, without_entry=False):
                values, reason = build_journal_entry(transaction, bank_account, username)
                if reason:
                    _skip(outcome, transaction.id, reason)
                    continue
                if await insert_journal_entry(db, values):
                    outcome.created += 1

            await db.commit()
        except Exception as e:
            await db.rollback()
            logger.exception("Journal regeneration failed for company %s; rolled back", company_id)
            raise InternalError(
                "Journal regeneration failed; existing entries were kept",
                details={"company_id": company_id}
            ) from e

        logger.info(
            "Journal regeneration for company %s: deleted=%d created=%d skipped=%d",
            company_id, outcome.deleted, outcome.created, outcome.skipped
        )
        await log_event(
            db,
            action=AuditAction.JOURNAL_ENTRIES_REGENERATED,
            actor_username=username,
            company_id=company_id,
            metadata={"deleted": outcome.deleted, "created": outcome.created, "skipped": outcome.skipped}
        )
        return outcome

    @staticmethod
    async def update_transaction_classification(
        db: AsyncSession,
        company_id: int,
        transaction_id: int,
        debit_account_id: int,
        credit_account_id: int,
        username: str,
    ) -> JournalEntry:
        """
        Manually set the debit and credit accounts of a transaction.

        The pair is recorded on the transaction, so later regenerations
        reproduce it, and the transaction's single journal entry is created
        or overwritten. The transaction is classified to the non-bank side:
        the credit account for money in, the debit account for money out.

        Raises:
            ValidationError: same account on both sides, unknown or
                foreign transaction or account, zero amount.
        """
        if debit_account_id == credit_account_id:
            raise ValidationError(
                "Debit and credit accounts must be different",
                error_code="SAME_DEBIT_CREDIT_ACCOUNT",
                details={"debit_account_id": debit_account_id, "credit_account_id": credit_account_id}
            )

        transaction = await get_company_transaction(db, company_id, transaction_id)
        debit = await get_company_account(db, company_id, debit_account_id, role="Debit account")
        credit = await get_company_account(db, company_id, credit_account_id, role="Credit account")

        if not transaction.amount:
            raise ValidationError(
                f"Transaction {transaction_id} has a zero amount",
                error_code="ZERO_AMOUNT_TRANSACTION"
            )

        now = datetime.utcnow()
        transaction.manual_debit_account_id = debit.id
        transaction.manual_credit_account_id = credit.id
        transaction.account_id = credit.id if transaction.amount > 0 else debit.id
        transaction.classification_status = ClassificationStatus.CLASSIFIED
        transaction.classification_source = ClassificationSource.MANUAL
        transaction.classified_by_rule_id = None
        transaction.classified_by = username
        transaction.classified_at = now
        transaction.updated_at = now
        await db.flush()

        values, reason = build_journal_entry(transaction, None, username)
        if reason:
            await db.rollback()
            raise ValidationError(f"Cannot build journal entry: {reason}", error_code="INVALID_JOURNAL_ENTRY")

        await upsert_journal_entry(db, values, username)
        await db.commit()

        result = await db.execute(
            select(JournalEntry)
            .where(JournalEntry.transaction_id == transaction.id)
            .execution_options(populate_existing=True)
        )
        entry = result.scalar_one()

        await log_event(
            db,
            action=AuditAction.CLASSIFICATION_OVERRIDDEN,
            actor_username=username,
            company_id=company_id,
            metadata={
                "transaction_id": transaction.id,
                "debit_account_id": debit.id,
                "credit_account_id": credit.id,
            }
        )
        return entry
