"""
Rule Store.

CRUD over classification rules scoped by company. Writes are validated here
so that every stored rule can be evaluated: match type and value present,
REGEX values compile, target account exists in the same company.
"""

from datetime import datetime
from typing import List, Optional
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, update

from finledger.app.core.exceptions import ValidationError, ResourceNotFoundError
from finledger.app.models.account import Account
from finledger.app.models.bank_transaction import BankTransaction
from finledger.app.models.classification_rule import ClassificationRule
from finledger.app.schemas.classification import RuleCreate, RuleUpdate
from finledger.app.domain.classification.lookups import (
    get_company, get_company_account, get_account_by_code
)
from finledger.app.domain.classification.matching import validate_match


class RuleStore:

    @staticmethod
    async def _resolve_target(
        db: AsyncSession, company_id: int, account_id: Optional[int], account_code: Optional[str]
    ) -> Account:
        if account_id is not None:
            return await get_company_account(db, company_id, account_id, role="Target account")
        if account_code:
            return await get_account_by_code(db, company_id, account_code)
        raise ValidationError("Target account is required (account_id or account_code)", error_code="INVALID_RULE")

    @staticmethod
    async def _ensure_unique_name(
        db: AsyncSession, company_id: int, rule_name: str, exclude_id: Optional[int] = None
    ) -> None:
        query = select(ClassificationRule.id).where(
            ClassificationRule.company_id == company_id,
            ClassificationRule.rule_name == rule_name
        )
        if exclude_id is not None:
            query = query.where(ClassificationRule.id != exclude_id)
        existing = await db.execute(query)
        if existing.scalar_one_or_none() is not None:
            raise ValidationError(
                f"A rule named '{rule_name}' already exists for company {company_id}",
                error_code="DUPLICATE_RULE_NAME"
            )

    @staticmethod
    async def add_rule(db: AsyncSession, company_id: int, data: RuleCreate, username: str) -> ClassificationRule:
        """
        Create a rule for a company.

        Raises:
            ValidationError: missing match fields or target, bad regex,
                cross-company target, duplicate name, unknown company.
        """
        await get_company(db, company_id)
        validate_match(data.match_type, data.match_value)
        account = await RuleStore._resolve_target(db, company_id, data.account_id, data.account_code)
        await RuleStore._ensure_unique_name(db, company_id, data.rule_name)

        now = datetime.utcnow()
        rule = ClassificationRule(
            company_id=company_id,
            rule_name=data.rule_name,
            description=data.description,
            match_type=data.match_type,
            match_value=data.match_value,
            account_id=account.id,
            priority=data.priority,
            is_active=data.is_active,
            created_by=username,
            created_at=now,
            updated_at=now,
        )
        db.add(rule)
        await db.commit()
        return rule

    @staticmethod
    async def get_rule(db: AsyncSession, company_id: int, rule_id: int) -> ClassificationRule:
        rule = await db.get(ClassificationRule, rule_id)
        if not rule or rule.company_id != company_id:
            raise ResourceNotFoundError("Rule", rule_id)
        return rule

    @staticmethod
    async def update_rule(
        db: AsyncSession, company_id: int, rule_id: int, data: RuleUpdate
    ) -> ClassificationRule:
        """Apply the fields present in ``data``; the merged rule is validated as a whole."""
        rule = await RuleStore.get_rule(db, company_id, rule_id)
        changes = data.model_dump(exclude_unset=True)

        match_type = changes.get("match_type", rule.match_type)
        match_value = changes.get("match_value", rule.match_value)
        validate_match(match_type, match_value)

        if "account_id" in changes or "account_code" in changes:
            account = await RuleStore._resolve_target(
                db, company_id, changes.get("account_id"), changes.get("account_code")
            )
            rule.account_id = account.id

        if changes.get("rule_name") and changes["rule_name"] != rule.rule_name:
            await RuleStore._ensure_unique_name(db, company_id, changes["rule_name"], exclude_id=rule.id)
            rule.rule_name = changes["rule_name"]

        rule.match_type = match_type
        rule.match_value = match_value
        if "description" in changes:
            rule.description = changes["description"]
        if changes.get("priority") is not None:
            rule.priority = changes["priority"]
        if changes.get("is_active") is not None:
            rule.is_active = changes["is_active"]
        rule.updated_at = datetime.utcnow()

        await db.commit()
        return rule

    @staticmethod
    async def delete_rule(db: AsyncSession, company_id: int, rule_id: int) -> None:
        """
        Delete a rule. Transactions it classified keep their account;
        only the back-reference to the rule is cleared.
        """
        rule = await RuleStore.get_rule(db, company_id, rule_id)
        await db.execute(
            update(BankTransaction)
            .where(BankTransaction.classified_by_rule_id == rule.id)
            .values(classified_by_rule_id=None)
        )
        await db.delete(rule)
        await db.commit()

    @staticmethod
    async def list_rules(
        db: AsyncSession, company_id: int, active_only: bool = False
    ) -> List[ClassificationRule]:
        """Rules in evaluation order: ascending priority, then ascending id."""
        await get_company(db, company_id)
        query = select(ClassificationRule).where(ClassificationRule.company_id == company_id)
        if active_only:
            query = query.where(ClassificationRule.is_active == True)  # noqa: E712
        query = query.order_by(ClassificationRule.priority.asc(), ClassificationRule.id.asc())
        result = await db.execute(query)
        return list(result.scalars().all())
