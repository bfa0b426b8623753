"""
Bank Transaction database model.

Bank-derived record created by statement import. Only classification
operations mutate it afterwards.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, Date, DateTime, Numeric, ForeignKey, Enum, Index
from finledger.app.db.session import Base
from finledger.app.models.accounting_enums import ClassificationStatus, ClassificationSource


class BankTransaction(Base):
    """
    Bank Transaction model.

    Invariant: classification_status is CLASSIFIED exactly when account_id is set.
    Amount sign: positive is money in (deposit), negative is money out.
    """
    __tablename__ = "bank_transactions"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey('companies.id'), nullable=False, index=True)
    fiscal_period_id = Column(Integer, ForeignKey('fiscal_periods.id'), nullable=True, index=True)

    # Statement data
    transaction_date = Column(Date, nullable=False)
    description = Column(String(500), nullable=False)
    reference = Column(String(100), nullable=True)
    amount = Column(Numeric(15, 2), nullable=False)

    # Classification state
    classification_status = Column(
        Enum(ClassificationStatus), default=ClassificationStatus.UNCLASSIFIED, nullable=False
    )
    account_id = Column(Integer, ForeignKey('accounts.id'), nullable=True, index=True)
    classification_source = Column(Enum(ClassificationSource), nullable=True)
    classified_by_rule_id = Column(
        Integer, ForeignKey('classification_rules.id', ondelete='SET NULL'), nullable=True
    )
    classified_by = Column(String(100), nullable=True)
    classified_at = Column(DateTime(timezone=True), nullable=True)

    # Manual debit/credit override; regeneration reproduces it
    manual_debit_account_id = Column(Integer, ForeignKey('accounts.id'), nullable=True)
    manual_credit_account_id = Column(Integer, ForeignKey('accounts.id'), nullable=True)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    __table_args__ = (
        Index('ix_bank_transactions_company_status', 'company_id', 'classification_status'),
    )

    @property
    def is_classified(self) -> bool:
        return self.account_id is not None

    def __repr__(self):
        return f"<BankTransaction(id={self.id}, amount={self.amount}, status='{self.classification_status.value}')>"
