"""
Classification Rule database model.

Pattern-to-account mapping used to auto-assign transactions.
"""

from datetime import datetime
from sqlalchemy import Column, Integer, String, DateTime, Boolean, ForeignKey, Enum, UniqueConstraint
from finledger.app.db.session import Base
from finledger.app.models.accounting_enums import MatchType


class ClassificationRule(Base):
    """
    Classification Rule model.

    Rules are evaluated in ascending priority (lower number wins),
    ties broken by ascending id. Inactive rules are never evaluated.
    """
    __tablename__ = "classification_rules"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)
    company_id = Column(Integer, ForeignKey('companies.id'), nullable=False, index=True)

    # Rule details
    rule_name = Column(String(255), nullable=False)
    description = Column(String(1000), nullable=True)
    match_type = Column(Enum(MatchType), nullable=False)
    match_value = Column(String(1000), nullable=False)

    # Target
    account_id = Column(Integer, ForeignKey('accounts.id'), nullable=False)

    priority = Column(Integer, default=100, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)

    # Audit
    created_by = Column(String(100), nullable=True)
    created_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=datetime.utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint('company_id', 'rule_name', name='uq_classification_rules_company_name'),
    )

    def __repr__(self):
        return f"<ClassificationRule(id={self.id}, name='{self.rule_name}', priority={self.priority})>"
