"""
Account database model.

Chart-of-accounts entry referenced by rules, classified transactions and journal entries.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Enum, UniqueConstraint
from finledger.app.db.session import Base
from finledger.app.models.accounting_enums import AccountType


class Account(Base):
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey('companies.id'), nullable=False, index=True)

    account_code = Column(String(20), nullable=False)
    account_name = Column(String(255), nullable=False)
    account_type = Column(Enum(AccountType), nullable=False)
    category = Column(String(100), nullable=True)
    description = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('company_id', 'account_code', name='uq_accounts_company_code'),
    )

    def __repr__(self):
        return f"<Account(id={self.id}, code='{self.account_code}', name='{self.account_name}')>"
