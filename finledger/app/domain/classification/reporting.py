"""
Reporting View.

Read-only projections over classification state. Nothing here writes or caches.
"""

from typing import List
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, func, case

from finledger.app.models.bank_transaction import BankTransaction
from finledger.app.models.fiscal_period import FiscalPeriod
from finledger.app.schemas.reporting import (
    UnclassifiedTransactionView, PeriodClassificationSummary, ClassificationSummary
)
from finledger.app.domain.classification.lookups import get_company, get_company_fiscal_period


def _rate(classified: int, total: int) -> float:
    if not total:
        return 0.0
    return round(classified * 100.0 / total, 2)


class ClassificationReports:

    @staticmethod
    async def get_unclassified_transactions(
        db: AsyncSession, company_id: int, fiscal_period_id: int
    ) -> List[UnclassifiedTransactionView]:
        """
        Transactions of one fiscal period that have no account, by date then id.

        Raises:
            ValidationError: the period does not exist or is another company's.
        """
        await get_company(db, company_id)
        await get_company_fiscal_period(db, company_id, fiscal_period_id)

        result = await db.execute(
            select(
                BankTransaction.id,
                BankTransaction.transaction_date,
                BankTransaction.description,
                BankTransaction.amount,
                BankTransaction.reference,
                BankTransaction.fiscal_period_id,
            )
            .where(
                BankTransaction.company_id == company_id,
                BankTransaction.fiscal_period_id == fiscal_period_id,
                BankTransaction.account_id.is_(None)
            )
            .order_by(BankTransaction.transaction_date.asc(), BankTransaction.id.asc())
        )

        return [
            UnclassifiedTransactionView(
                id=row.id,
                transaction_date=row.transaction_date,
                description=row.description,
                amount=row.amount,
                transaction_type="CREDIT" if row.amount > 0 else "DEBIT",
                reference=row.reference,
                fiscal_period_id=row.fiscal_period_id,
            )
            for row in result.all()
        ]

    @staticmethod
    async def get_classification_summary(db: AsyncSession, company_id: int) -> ClassificationSummary:
        """Classified/unclassified counts per fiscal period and overall."""
        await get_company(db, company_id)

        classified_count = func.sum(case((BankTransaction.account_id.is_not(None), 1), else_=0))
        result = await db.execute(
            select(
                BankTransaction.fiscal_period_id,
                FiscalPeriod.period_name,
                FiscalPeriod.start_date,
                func.count(BankTransaction.id).label("total"),
                classified_count.label("classified"),
            )
            .outerjoin(FiscalPeriod, FiscalPeriod.id == BankTransaction.fiscal_period_id)
            .where(BankTransaction.company_id == company_id)
            .group_by(BankTransaction.fiscal_period_id, FiscalPeriod.period_name, FiscalPeriod.start_date)
        )
        rows = result.all()

        periods = []
        # Periods in date order; transactions outside any period come last
        for row in sorted(rows, key=lambda r: (r.fiscal_period_id is None, r.start_date or r.fiscal_period_id or 0)):
            total = row.total or 0
            classified = int(row.classified or 0)
            periods.append(PeriodClassificationSummary(
                fiscal_period_id=row.fiscal_period_id,
                period_name=row.period_name,
                total=total,
                classified=classified,
                unclassified=total - classified,
                classification_rate=_rate(classified, total),
            ))

        total = sum(p.total for p in periods)
        classified = sum(p.classified for p in periods)
        return ClassificationSummary(
            company_id=company_id,
            total=total,
            classified=classified,
            unclassified=total - classified,
            classification_rate=_rate(classified, total),
            periods=periods,
        )
