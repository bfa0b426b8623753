"""
Audit Log Database Model.

Tracks classification and ledger actions for compliance monitoring.
"""

from sqlalchemy import Column, Integer, String, DateTime, JSON
from sqlalchemy.sql import func
from finledger.app.db.session import Base


class AuditLog(Base):
    """
    Audit log model for tracking bookkeeping actions.

    Events logged:
    - RULE_CREATED / RULE_UPDATED / RULE_DELETED
    - TRANSACTIONS_AUTO_CLASSIFIED / TRANSACTION_CLASSIFIED
    - CLASSIFICATION_OVERRIDDEN
    - JOURNAL_ENTRIES_SYNCED / JOURNAL_ENTRIES_REGENERATED
    """
    __tablename__ = "audit_logs"

    id = Column(Integer, primary_key=True, index=True, autoincrement=True)

    # Who performed the action
    actor_username = Column(String(100), nullable=True)

    # What action was performed
    action = Column(String(100), nullable=False, index=True)

    # Which company's books were touched
    company_id = Column(Integer, index=True, nullable=True)

    # Additional context (JSON for flexibility)
    meta_data = Column(JSON, nullable=True)

    # Timestamp
    timestamp = Column(DateTime(timezone=True), server_default=func.now(), nullable=False, index=True)

    def __repr__(self):
        return f"<AuditLog(id={self.id}, action='{self.action}', actor={self.actor_username}, company={self.company_id})>"
