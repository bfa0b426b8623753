"""
Chart of accounts and mapping rule initialization.
"""

import logging
from datetime import datetime
from typing import Dict
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select

from finledger.app.core.config import settings
from finledger.app.models.account import Account
from finledger.app.models.classification_rule import ClassificationRule
from finledger.app.schemas.classification import InitializationResult
from finledger.app.domain.classification.lookups import get_company
from finledger.app.domain.classification.templates import STANDARD_CHART, STANDARD_RULES

logger = logging.getLogger("finledger.classification")


class ChartInitializer:

    @staticmethod
    async def initialize_chart_of_accounts(db: AsyncSession, company_id: int) -> InitializationResult:
        """
        Create the standard chart of accounts for a company.

        Accounts whose code already exists are left as they are, so running
        this twice creates nothing the second time.
        """
        await get_company(db, company_id)

        result = await db.execute(select(Account.account_code).where(Account.company_id == company_id))
        existing = set(result.scalars().all())

        created = 0
        for template in STANDARD_CHART:
            if template.code in existing:
                continue
            db.add(Account(
                company_id=company_id,
                account_code=template.code,
                account_name=template.name,
                account_type=template.account_type,
                category=template.category,
                is_active=True,
            ))
            created += 1

        await db.commit()
        skipped = len(STANDARD_CHART) - created
        logger.info("Chart of accounts for company %s: %d created, %d existing", company_id, created, skipped)
        return InitializationResult(created=created, skipped=skipped)

    @staticmethod
    async def initialize_mapping_rules(
        db: AsyncSession, company_id: int, username: str = None
    ) -> InitializationResult:
        """
        Create the standard mapping rules for a company.

        A template is skipped when a rule with the same name exists or when
        its target account code is not in the company's chart.
        """
        await get_company(db, company_id)

        accounts = await db.execute(
            select(Account.account_code, Account.id).where(Account.company_id == company_id)
        )
        account_ids: Dict[str, int] = {code: account_id for code, account_id in accounts.all()}

        names = await db.execute(
            select(ClassificationRule.rule_name).where(ClassificationRule.company_id == company_id)
        )
        existing = set(names.scalars().all())

        created = 0
        now = datetime.utcnow()
        for template in STANDARD_RULES:
            if template.name in existing:
                continue
            account_id = account_ids.get(template.account_code)
            if account_id is None:
                logger.warning(
                    "Skipping rule '%s' for company %s: account %s not in chart",
                    template.name, company_id, template.account_code
                )
                continue
            db.add(ClassificationRule(
                company_id=company_id,
                rule_name=template.name,
                description=template.description,
                match_type=template.match_type,
                match_value=template.match_value,
                account_id=account_id,
                priority=template.priority,
                is_active=True,
                created_by=username or settings.system_username,
                created_at=now,
                updated_at=now,
            ))
            created += 1

        await db.commit()
        skipped = len(STANDARD_RULES) - created
        logger.info("Mapping rules for company %s: %d created, %d skipped", company_id, created, skipped)
        return InitializationResult(created=created, skipped=skipped)

    @staticmethod
    async def full_initialization(
        db: AsyncSession, company_id: int, username: str = None
    ) -> Dict[str, InitializationResult]:
        """Chart of accounts first, then the rules that target it."""
        accounts = await ChartInitializer.initialize_chart_of_accounts(db, company_id)
        rules = await ChartInitializer.initialize_mapping_rules(db, company_id, username)
        return {"accounts": accounts, "rules": rules}
