"""
Database seeding script for a demo company.

Creates one company with a fiscal period, the standard chart of accounts,
the standard mapping rules and a handful of statement lines, then prints
tokens for each role so the API can be tried straight away.
Run this script after the database is set up.
"""

import asyncio
import sys
from datetime import date
from decimal import Decimal
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from sqlalchemy import select
from finledger.app.db.session import AsyncSessionLocal, engine, Base
from finledger.app.core.config import settings
from finledger.app.core.jwt import create_access_token
from finledger.app.models.company import Company
from finledger.app.models.enums import UserRole
from finledger.app.schemas.company import CompanyCreate, FiscalPeriodCreate
from finledger.app.schemas.transaction import TransactionImportRequest, TransactionImportItem
from finledger.app.domain.setup.company_setup import CompanySetup
from finledger.app.domain.classification.initialization import ChartInitializer

DEMO_COMPANY = "Demo Trading (Pty) Ltd"

DEMO_LINES = [
    (date(2024, 3, 1), "CREDIT TRANSFER ACME HOLDINGS", "18500.00"),
    (date(2024, 3, 2), "FEE IMMEDIATE PAYMENT", "-12.50"),
    (date(2024, 3, 25), "SALARY MARCH J DOE", "-15000.00"),
    (date(2024, 3, 26), "ENGEN FUEL MIDRAND", "-850.40"),
    (date(2024, 3, 28), "INSURANCE PREMIUM DOTSURE", "-1210.00"),
    (date(2024, 3, 30), "PAYMENT TO RIVERSIDE COLLEGE", "-3400.00"),
    (date(2024, 3, 31), "MONTHLY SERVICE FEE", "-65.00"),
    (date(2024, 3, 31), "UNKNOWN DEBIT ORDER 88213", "-249.99"),
]


async def seed_demo():
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as db:
        print("🌱 Starting demo seeding...")

        existing = await db.execute(select(Company).where(Company.name == DEMO_COMPANY))
        if existing.scalar_one_or_none():
            print("ℹ️  Demo company already exists, skipping seeding")
            return

        username = settings.system_username
        company = await CompanySetup.create_company(db, CompanyCreate(name=DEMO_COMPANY), username)
        print(f"✅ Created company {company.name} (id={company.id})")

        await CompanySetup.create_fiscal_period(
            db, company.id,
            FiscalPeriodCreate(period_name="FY2025", start_date=date(2024, 3, 1), end_date=date(2025, 2, 28)),
            username
        )
        print("✅ Created fiscal period FY2025")

        results = await ChartInitializer.full_initialization(db, company.id, username)
        print(f"✅ Chart of accounts: {results['accounts'].created} accounts")
        print(f"✅ Mapping rules: {results['rules'].created} rules")

        imported = await CompanySetup.import_transactions(
            db, company.id,
            TransactionImportRequest(transactions=[
                TransactionImportItem(transaction_date=day, description=text, amount=Decimal(amount))
                for day, text, amount in DEMO_LINES
            ]),
            username
        )
        print(f"✅ Imported {imported.imported} bank transactions")

        print("\n🎉 Demo seeding completed successfully!")
        print("\nBearer tokens:")
        for role in UserRole:
            token = create_access_token({"sub": role.value.lower(), "user_id": 0, "role": role.value})
            print(f"  - {role.value:<10} {token}")


if __name__ == "__main__":
    asyncio.run(seed_demo())
