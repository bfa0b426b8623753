"""
Journal Entry database model.

Double-entry record derived from a classified bank transaction.
"""

from datetime import datetime
from sqlalchemy import (
    Column, Integer, String, Date, DateTime, Numeric, ForeignKey, Enum, CheckConstraint
)
from finledger.app.db.session import Base
from finledger.app.models.accounting_enums import JournalEntrySource


class JournalEntry(Base):
    """
    Journal Entry model.

    One row carries both legs (debit account, credit account, one amount),
    so an entry always balances. At most one entry exists per transaction:
    the unique transaction_id is what keeps concurrent syncs from
    double-creating.
    """
    __tablename__ = "journal_entries"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey('companies.id'), nullable=False, index=True)
    fiscal_period_id = Column(Integer, ForeignKey('fiscal_periods.id'), nullable=True, index=True)

    # Linkage
    transaction_id = Column(Integer, ForeignKey('bank_transactions.id'), nullable=False, unique=True)

    # Entry details
    entry_date = Column(Date, nullable=False)
    reference = Column(String(100), nullable=True)
    description = Column(String(500), nullable=True)

    debit_account_id = Column(Integer, ForeignKey('accounts.id'), nullable=False, index=True)
    credit_account_id = Column(Integer, ForeignKey('accounts.id'), nullable=False, index=True)
    amount = Column(Numeric(15, 2), nullable=False)

    source = Column(Enum(JournalEntrySource), nullable=False, default=JournalEntrySource.AUTO)

    # Audit
    created_by = Column(String(100), nullable=False)
    updated_by = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint('debit_account_id <> credit_account_id', name='ck_journal_entries_distinct_accounts'),
        CheckConstraint('amount > 0', name='ck_journal_entries_positive_amount'),
    )

    def __repr__(self):
        return (
            f"<JournalEntry(id={self.id}, transaction_id={self.transaction_id}, "
            f"debit={self.debit_account_id}, credit={self.credit_account_id}, amount={self.amount})>"
        )
