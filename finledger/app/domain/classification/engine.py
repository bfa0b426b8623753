"""
Classification Engine.

Applies a company's rules to its unclassified bank transactions, or assigns
an account to a single transaction directly.
"""

import logging
from datetime import datetime
from typing import Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update, delete

from finledger.app.core.exceptions import ValidationError
from finledger.app.models.account import Account
from finledger.app.models.bank_transaction import BankTransaction
from finledger.app.models.journal_entry import JournalEntry
from finledger.app.models.accounting_enums import (
    ClassificationStatus, ClassificationSource, JournalEntrySource
)
from finledger.app.schemas.classification import BatchClassificationResult
from finledger.app.services.audit import log_event, AuditAction
from finledger.app.domain.classification.rule_store import RuleStore
from finledger.app.domain.classification.matching import RuleMatcher, order_rules, first_match
from finledger.app.domain.classification.lookups import (
    get_company, get_company_account, get_account_by_code, get_company_transaction,
    get_company_fiscal_period
)

logger = logging.getLogger("finledger.classification")


class ClassificationEngine:

    @staticmethod
    async def _reset_rule_classifications(
        db: AsyncSession, company_id: int, fiscal_period_id: Optional[int] = None
    ) -> int:
        """
        Return RULE-sourced transactions to UNCLASSIFIED and drop their
        derived entries. MANUAL classifications are kept.
        """
        scope = [
            BankTransaction.company_id == company_id,
            BankTransaction.classification_source == ClassificationSource.RULE,
        ]
        if fiscal_period_id is not None:
            scope.append(BankTransaction.fiscal_period_id == fiscal_period_id)

        rule_classified = select(BankTransaction.id).where(*scope)
        await db.execute(
            delete(JournalEntry)
            .where(
                JournalEntry.transaction_id.in_(rule_classified),
                JournalEntry.source == JournalEntrySource.AUTO
            )
            .execution_options(synchronize_session=False)
        )
        result = await db.execute(
            update(BankTransaction)
            .where(*scope)
            .values(
                classification_status=ClassificationStatus.UNCLASSIFIED,
                account_id=None,
                classification_source=None,
                classified_by_rule_id=None,
                classified_by=None,
                classified_at=None,
                updated_at=datetime.utcnow(),
            )
            .execution_options(synchronize_session="fetch")
        )
        return result.rowcount or 0

    @staticmethod
    async def auto_classify_transactions(
        db: AsyncSession,
        company_id: int,
        username: str,
        reclassify: bool = False,
        fiscal_period_id: Optional[int] = None,
    ) -> BatchClassificationResult:
        """
        Classify every unclassified transaction of a company with its active rules.

        Rules are tried in ascending priority, ties broken by ascending id;
        the first match wins. Unmatched transactions stay unclassified, so
        running this again without new rules changes nothing.

        Args:
            db: Database session
            company_id: Company to process
            username: Actor recorded on each classification
            reclassify: Reset RULE-sourced classifications first
            fiscal_period_id: Limit the run to one fiscal period of the company

        Returns:
            BatchClassificationResult with per-rule hit counts
        """
        await get_company(db, company_id)
        if fiscal_period_id is not None:
            await get_company_fiscal_period(db, company_id, fiscal_period_id)
        batch = BatchClassificationResult()

        if reclassify:
            batch.reset = await ClassificationEngine._reset_rule_classifications(
                db, company_id, fiscal_period_id
            )

        rules = await RuleStore.list_rules(db, company_id, active_only=True)
        matchers = [RuleMatcher.from_rule(rule) for rule in order_rules(rules)]

        accounts = await db.execute(
            select(Account.id, Account.is_active).where(Account.company_id == company_id)
        )
        account_active: Dict[int, bool] = {account_id: active for account_id, active in accounts.all()}

        query = select(BankTransaction).where(
            BankTransaction.company_id == company_id,
            BankTransaction.account_id.is_(None)
        )
        if fiscal_period_id is not None:
            query = query.where(BankTransaction.fiscal_period_id == fiscal_period_id)
        result = await db.execute(query.order_by(BankTransaction.id.asc()))
        transactions = result.scalars().all()
        batch.total = len(transactions)

        now = datetime.utcnow()
        for transaction in transactions:
            matcher = first_match(matchers, transaction.description)
            if matcher is None:
                batch.unmatched += 1
                continue

            if not account_active.get(matcher.account_id, False):
                batch.errored += 1
                batch.errors.append(
                    f"Transaction {transaction.id}: rule '{matcher.rule_name}' targets "
                    f"inactive or missing account {matcher.account_id}"
                )
                continue

            transaction.account_id = matcher.account_id
            transaction.classification_status = ClassificationStatus.CLASSIFIED
            transaction.classification_source = ClassificationSource.RULE
            transaction.classified_by_rule_id = matcher.rule_id
            transaction.classified_by = username
            transaction.classified_at = now
            transaction.updated_at = now
            batch.matched += 1
            batch.matched_by_rule[matcher.rule_id] = batch.matched_by_rule.get(matcher.rule_id, 0) + 1

        await db.commit()

        logger.info(
            "Auto-classified company %s period %s: total=%d matched=%d unmatched=%d errored=%d reset=%d",
            company_id, fiscal_period_id, batch.total, batch.matched, batch.unmatched, batch.errored, batch.reset
        )
        await log_event(
            db,
            action=AuditAction.TRANSACTIONS_AUTO_CLASSIFIED,
            actor_username=username,
            company_id=company_id,
            metadata={
                "fiscal_period_id": fiscal_period_id,
                "total": batch.total,
                "matched": batch.matched,
                "unmatched": batch.unmatched,
                "errored": batch.errored,
                "reset": batch.reset,
            }
        )
        return batch

    @staticmethod
    async def classify_transaction(
        db: AsyncSession,
        company_id: int,
        transaction_id: int,
        username: str,
        account_id: Optional[int] = None,
        account_code: Optional[str] = None,
    ) -> BankTransaction:
        """
        Assign an account to one transaction, bypassing rules.

        A previously recorded debit/credit override is cleared and the
        transaction's existing journal entry is dropped, so the next sync
        derives it from the new account.

        Raises:
            ValidationError: unknown transaction or account, account of
                another company, inactive account, no account given.
        """
        transaction = await get_company_transaction(db, company_id, transaction_id)

        if account_id is not None:
            account = await get_company_account(db, company_id, account_id)
        elif account_code:
            account = await get_account_by_code(db, company_id, account_code)
        else:
            raise ValidationError("account_id or account_code is required", error_code="ACCOUNT_REQUIRED")

        if not account.is_active:
            raise ValidationError(
                f"Account {account.account_code} is inactive",
                error_code="ACCOUNT_INACTIVE",
                details={"account_id": account.id}
            )

        now = datetime.utcnow()
        transaction.account_id = account.id
        transaction.classification_status = ClassificationStatus.CLASSIFIED
        transaction.classification_source = ClassificationSource.MANUAL
        transaction.classified_by_rule_id = None
        transaction.classified_by = username
        transaction.classified_at = now
        transaction.manual_debit_account_id = None
        transaction.manual_credit_account_id = None
        transaction.updated_at = now

        await db.execute(
            delete(JournalEntry)
            .where(JournalEntry.transaction_id == transaction.id)
            .execution_options(synchronize_session=False)
        )
        await db.commit()

        await log_event(
            db,
            action=AuditAction.TRANSACTION_CLASSIFIED,
            actor_username=username,
            company_id=company_id,
            metadata={"transaction_id": transaction.id, "account_id": account.id}
        )
        return transaction
