"""
Audit logging service for tracking bookkeeping actions.

Provides centralized logging for compliance monitoring.
"""

from typing import Optional, Dict, Any
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, desc
from finledger.app.models.audit_log import AuditLog


# Audit event constants
class AuditAction:
    """Standardized audit action constants."""
    COMPANY_CREATED = "COMPANY_CREATED"
    FISCAL_PERIOD_CREATED = "FISCAL_PERIOD_CREATED"
    TRANSACTIONS_IMPORTED = "TRANSACTIONS_IMPORTED"

    # Chart of accounts and rules
    CHART_OF_ACCOUNTS_INITIALIZED = "CHART_OF_ACCOUNTS_INITIALIZED"
    MAPPING_RULES_INITIALIZED = "MAPPING_RULES_INITIALIZED"
    RULE_CREATED = "RULE_CREATED"
    RULE_UPDATED = "RULE_UPDATED"
    RULE_DELETED = "RULE_DELETED"

    # Classification
    TRANSACTIONS_AUTO_CLASSIFIED = "TRANSACTIONS_AUTO_CLASSIFIED"
    TRANSACTION_CLASSIFIED = "TRANSACTION_CLASSIFIED"
    CLASSIFICATION_OVERRIDDEN = "CLASSIFICATION_OVERRIDDEN"

    # Journal
    JOURNAL_ENTRIES_SYNCED = "JOURNAL_ENTRIES_SYNCED"
    JOURNAL_ENTRIES_REGENERATED = "JOURNAL_ENTRIES_REGENERATED"


async def log_event(
    db: AsyncSession,
    action: str,
    actor_username: Optional[str] = None,
    company_id: Optional[int] = None,
    metadata: Optional[Dict[str, Any]] = None,
) -> AuditLog:
    """
    Log a bookkeeping event to the audit log.

    Commits on its own, so call it only after the audited change is committed.

    Args:
        db: Database session
        action: Action being performed (use AuditAction constants)
        actor_username: Username of actor
        company_id: Company whose books were touched
        metadata: Additional context as JSON

    Returns:
        Created AuditLog instance
    """
    audit_log = AuditLog(
        actor_username=actor_username,
        action=action,
        company_id=company_id,
        meta_data=metadata,
    )

    db.add(audit_log)
    await db.commit()
    await db.refresh(audit_log)

    return audit_log


async def get_audit_trail(
    db: AsyncSession,
    company_id: Optional[int] = None,
    action: Optional[str] = None,
    limit: int = 100
) -> list[AuditLog]:
    """
    Retrieve audit trail with optional filtering, most recent first.
    """
    query = select(AuditLog).order_by(desc(AuditLog.timestamp), desc(AuditLog.id))

    if company_id:
        query = query.where(AuditLog.company_id == company_id)

    if action:
        query = query.where(AuditLog.action == action)

    query = query.limit(limit)

    result = await db.execute(query)
    return result.scalars().all()
