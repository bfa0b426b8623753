"""
Classification API Endpoints.

Rule management, auto/manual classification, journal sync and the
unclassified/summary views of one company.
"""

from typing import List, Dict, Optional
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession
from finledger.app.db.session import get_db
from finledger.app.core.guards import require_writer, require_reader
from finledger.app.schemas.common import ApiResponse
from finledger.app.schemas.classification import (
    RuleCreate, RuleUpdate, RuleResponse, ClassifyTransactionRequest,
    ClassificationUpdateRequest, BatchClassificationResult, InitializationResult
)
from finledger.app.schemas.journal import JournalEntryResponse, JournalSyncResult
from finledger.app.schemas.reporting import UnclassifiedTransactionView, ClassificationSummary
from finledger.app.schemas.transaction import TransactionResponse
from finledger.app.domain.classification.rule_store import RuleStore
from finledger.app.domain.classification.initialization import ChartInitializer
from finledger.app.domain.classification.engine import ClassificationEngine
from finledger.app.domain.classification.journal_sync import JournalSync
from finledger.app.domain.classification.reporting import ClassificationReports
from finledger.app.services.audit import log_event, AuditAction

router = APIRouter(prefix="/companies/{company_id}/classification", tags=["Classification"])


# Initialization

@router.post("/initialize-chart-of-accounts", response_model=ApiResponse[InitializationResult])
async def initialize_chart_of_accounts(
    company_id: int,
    current_user: dict = Depends(require_writer),
    db: AsyncSession = Depends(get_db)
):
    """Create the standard chart of accounts. Existing account codes are kept."""
    result = await ChartInitializer.initialize_chart_of_accounts(db, company_id)
    await log_event(
        db=db,
        action=AuditAction.CHART_OF_ACCOUNTS_INITIALIZED,
        actor_username=current_user["sub"],
        company_id=company_id,
        metadata=result.model_dump()
    )
    return ApiResponse.ok(f"Chart of accounts initialized: {result.created} accounts created", result)


@router.post("/initialize-mapping-rules", response_model=ApiResponse[InitializationResult])
async def initialize_mapping_rules(
    company_id: int,
    current_user: dict = Depends(require_writer),
    db: AsyncSession = Depends(get_db)
):
    """Create the standard mapping rules. Rules whose name exists are kept."""
    result = await ChartInitializer.initialize_mapping_rules(db, company_id, current_user["sub"])
    await log_event(
        db=db,
        action=AuditAction.MAPPING_RULES_INITIALIZED,
        actor_username=current_user["sub"],
        company_id=company_id,
        metadata=result.model_dump()
    )
    return ApiResponse.ok(f"Mapping rules initialized: {result.created} rules created", result)


@router.post("/full-initialization", response_model=ApiResponse[Dict[str, InitializationResult]])
async def full_initialization(
    company_id: int,
    current_user: dict = Depends(require_writer),
    db: AsyncSession = Depends(get_db)
):
    results = await ChartInitializer.full_initialization(db, company_id, current_user["sub"])
    for action, key in (
        (AuditAction.CHART_OF_ACCOUNTS_INITIALIZED, "accounts"),
        (AuditAction.MAPPING_RULES_INITIALIZED, "rules"),
    ):
        await log_event(
            db=db,
            action=action,
            actor_username=current_user["sub"],
            company_id=company_id,
            metadata=results[key].model_dump()
        )
    return ApiResponse.ok("Chart of accounts and mapping rules initialized", results)


# Classification

@router.post("/auto-classify", response_model=ApiResponse[BatchClassificationResult])
async def auto_classify(
    company_id: int,
    reclassify: bool = Query(False, description="Reset rule-based classifications before matching"),
    fiscal_period_id: Optional[int] = Query(None, description="Limit the run to one fiscal period"),
    current_user: dict = Depends(require_writer),
    db: AsyncSession = Depends(get_db)
):
    """
    Run the company's active rules over its unclassified transactions.

    Returns matched/unmatched/errored counts and hits per rule id.
    """
    result = await ClassificationEngine.auto_classify_transactions(
        db, company_id, current_user["sub"], reclassify=reclassify, fiscal_period_id=fiscal_period_id
    )
    return ApiResponse.ok(f"Classified {result.matched} of {result.total} transactions", result)


@router.post(
    "/transactions/{transaction_id}/classify",
    response_model=ApiResponse[TransactionResponse]
)
async def classify_transaction(
    company_id: int,
    transaction_id: int,
    request: ClassifyTransactionRequest,
    current_user: dict = Depends(require_writer),
    db: AsyncSession = Depends(get_db)
):
    """Assign an account to one transaction directly, by id or code."""
    transaction = await ClassificationEngine.classify_transaction(
        db,
        company_id,
        transaction_id,
        current_user["sub"],
        account_id=request.account_id,
        account_code=request.account_code,
    )
    return ApiResponse.ok("Transaction classified", TransactionResponse.model_validate(transaction))


@router.put("/transactions/{transaction_id}", response_model=ApiResponse[JournalEntryResponse])
async def update_transaction_classification(
    company_id: int,
    transaction_id: int,
    request: ClassificationUpdateRequest,
    current_user: dict = Depends(require_writer),
    db: AsyncSession = Depends(get_db)
):
    """Override the debit and credit accounts of a transaction's journal entry."""
    entry = await JournalSync.update_transaction_classification(
        db,
        company_id,
        transaction_id,
        request.debit_account_id,
        request.credit_account_id,
        current_user["sub"],
    )
    return ApiResponse.ok("Transaction classification updated", JournalEntryResponse.model_validate(entry))


# Journal

@router.post("/sync-journal-entries", response_model=ApiResponse[JournalSyncResult])
async def sync_journal_entries(
    company_id: int,
    current_user: dict = Depends(require_writer),
    db: AsyncSession = Depends(get_db)
):
    result = await JournalSync.sync_journal_entries(db, company_id, current_user["sub"])
    return ApiResponse.ok(f"Created {result.created} journal entries", result)


@router.post("/regenerate-journal-entries", response_model=ApiResponse[JournalSyncResult])
async def regenerate_journal_entries(
    company_id: int,
    current_user: dict = Depends(require_writer),
    db: AsyncSession = Depends(get_db)
):
    """Rebuild every journal entry of the company. All or nothing."""
    result = await JournalSync.regenerate_all_journal_entries(db, company_id, current_user["sub"])
    return ApiResponse.ok(
        f"Regenerated journal entries: {result.deleted} removed, {result.created} created", result
    )


# Views

@router.get(
    "/unclassified/{fiscal_period_id}",
    response_model=ApiResponse[List[UnclassifiedTransactionView]]
)
async def get_unclassified_transactions(
    company_id: int,
    fiscal_period_id: int,
    current_user: dict = Depends(require_reader),
    db: AsyncSession = Depends(get_db)
):
    rows = await ClassificationReports.get_unclassified_transactions(db, company_id, fiscal_period_id)
    return ApiResponse.ok(f"{len(rows)} unclassified transactions", rows)


@router.get("/summary", response_model=ApiResponse[ClassificationSummary])
async def get_classification_summary(
    company_id: int,
    current_user: dict = Depends(require_reader),
    db: AsyncSession = Depends(get_db)
):
    summary = await ClassificationReports.get_classification_summary(db, company_id)
    return ApiResponse.ok("Classification summary", summary)


# Rules

@router.post("/rules", response_model=ApiResponse[RuleResponse], status_code=status.HTTP_201_CREATED)
async def create_rule(
    company_id: int,
    rule_data: RuleCreate,
    current_user: dict = Depends(require_writer),
    db: AsyncSession = Depends(get_db)
):
    """
    Create a classification rule.

    The target account may be given by id or by code and must belong to
    the company. REGEX values must compile.
    """
    rule = await RuleStore.add_rule(db, company_id, rule_data, current_user["sub"])
    await log_event(
        db=db,
        action=AuditAction.RULE_CREATED,
        actor_username=current_user["sub"],
        company_id=company_id,
        metadata={"rule_id": rule.id, "rule_name": rule.rule_name, "account_id": rule.account_id}
    )
    return ApiResponse.ok("Rule created", RuleResponse.model_validate(rule))


@router.get("/rules", response_model=ApiResponse[List[RuleResponse]])
async def list_rules(
    company_id: int,
    active_only: bool = Query(False),
    current_user: dict = Depends(require_reader),
    db: AsyncSession = Depends(get_db)
):
    """Rules in evaluation order."""
    rules = await RuleStore.list_rules(db, company_id, active_only=active_only)
    return ApiResponse.ok(f"{len(rules)} rules", [RuleResponse.model_validate(r) for r in rules])


@router.put("/rules/{rule_id}", response_model=ApiResponse[RuleResponse])
async def update_rule(
    company_id: int,
    rule_id: int,
    rule_data: RuleUpdate,
    current_user: dict = Depends(require_writer),
    db: AsyncSession = Depends(get_db)
):
    rule = await RuleStore.update_rule(db, company_id, rule_id, rule_data)
    await log_event(
        db=db,
        action=AuditAction.RULE_UPDATED,
        actor_username=current_user["sub"],
        company_id=company_id,
        metadata={"rule_id": rule.id, "changes": rule_data.model_dump(exclude_unset=True, mode="json")}
    )
    return ApiResponse.ok("Rule updated", RuleResponse.model_validate(rule))


@router.delete("/rules/{rule_id}", response_model=ApiResponse[dict])
async def delete_rule(
    company_id: int,
    rule_id: int,
    current_user: dict = Depends(require_writer),
    db: AsyncSession = Depends(get_db)
):
    await RuleStore.delete_rule(db, company_id, rule_id)
    await log_event(
        db=db,
        action=AuditAction.RULE_DELETED,
        actor_username=current_user["sub"],
        company_id=company_id,
        metadata={"rule_id": rule_id}
    )
    return ApiResponse.ok("Rule deleted")
