"""
Tests for journal entry derivation, sync, regeneration and manual override.
"""

import pytest
from decimal import Decimal
from sqlalchemy import select, update
from finledger.app.core.exceptions import ValidationError, InternalError
from finledger.app.models.journal_entry import JournalEntry
from finledger.app.models.bank_transaction import BankTransaction
from finledger.app.models.accounting_enums import JournalEntrySource, ClassificationSource
from finledger.app.domain.classification import journal_sync
from finledger.app.domain.classification.journal_sync import JournalSync
from finledger.app.domain.classification.engine import ClassificationEngine


async def _classify(db, company_id, transaction, account):
    return await ClassificationEngine.classify_transaction(
        db, company_id, transaction.id, "jane", account_id=account.id
    )


async def _repoint(db, transaction, account):
    await db.execute(
        update(BankTransaction).where(BankTransaction.id == transaction.id).values(account_id=account.id)
    )
    await db.commit()


async def _entries(db):
    result = await db.execute(
        select(
            JournalEntry.id, JournalEntry.transaction_id, JournalEntry.debit_account_id,
            JournalEntry.credit_account_id, JournalEntry.amount
        ).order_by(JournalEntry.transaction_id)
    )
    return result.all()


@pytest.mark.asyncio
async def test_sync_derives_legs_from_amount_sign(db_session, company, accounts, make_transaction):
    deposit = await make_transaction("CREDIT TRANSFER ACME", "2500.00")
    salary = await make_transaction("SALARY JUNE", "-15000.00")
    await _classify(db_session, company.id, deposit, accounts["6100"])
    await _classify(db_session, company.id, salary, accounts["8100"])

    result = await JournalSync.sync_journal_entries(db_session, company.id, "jane")

    assert result.created == 2
    assert result.skipped == 0
    rows = {row.transaction_id: row for row in await _entries(db_session)}
    bank = accounts["1100"].id
    assert (rows[deposit.id].debit_account_id, rows[deposit.id].credit_account_id) == (bank, accounts["6100"].id)
    assert (rows[salary.id].debit_account_id, rows[salary.id].credit_account_id) == (accounts["8100"].id, bank)
    assert Decimal(rows[salary.id].amount) == Decimal("15000.00")


@pytest.mark.asyncio
async def test_sync_one_balanced_entry_per_classified_transaction(db_session, company, accounts,
                                                                  make_transaction):
    for description, amount, code in (("A", "-1.00", "8100"), ("B", "-2.00", "9600"), ("C", "3.00", "6100")):
        transaction = await make_transaction(description, amount)
        await _classify(db_session, company.id, transaction, accounts[code])
    await make_transaction("UNCLASSIFIED", "-4.00")

    await JournalSync.sync_journal_entries(db_session, company.id, "jane")
    again = await JournalSync.sync_journal_entries(db_session, company.id, "jane")

    rows = await _entries(db_session)
    assert len(rows) == 3
    assert len({row.transaction_id for row in rows}) == 3
    assert all(row.debit_account_id != row.credit_account_id for row in rows)
    assert again.created == 0


@pytest.mark.asyncio
async def test_sync_never_modifies_existing_entries(db_session, company, accounts, make_transaction):
    transaction = await make_transaction("FEE", "-5.00")
    await _classify(db_session, company.id, transaction, accounts["9600"])
    await JournalSync.sync_journal_entries(db_session, company.id, "jane")
    before = await _entries(db_session)

    # Account changed behind the entry; sync must leave it alone
    await _repoint(db_session, transaction, accounts["8100"])
    await JournalSync.sync_journal_entries(db_session, company.id, "jane")

    assert await _entries(db_session) == before


@pytest.mark.asyncio
async def test_sync_skips_bank_account_classification(db_session, company, accounts, make_transaction):
    transaction = await make_transaction("TRANSFER BETWEEN ACCOUNTS", "-100.00")
    await _classify(db_session, company.id, transaction, accounts["1100"])

    result = await JournalSync.sync_journal_entries(db_session, company.id, "jane")

    assert result.created == 0
    assert result.skipped == 1
    assert result.skipped_transactions[0].transaction_id == transaction.id
    assert "bank account" in result.skipped_transactions[0].reason


@pytest.mark.asyncio
async def test_sync_skips_when_bank_account_missing(db_session, company, accounts, make_transaction):
    await db_session.delete(accounts["1100"])
    await db_session.commit()
    transaction = await make_transaction("FEE", "-5.00")
    await _classify(db_session, company.id, transaction, accounts["9600"])

    result = await JournalSync.sync_journal_entries(db_session, company.id, "jane")

    assert result.created == 0
    assert "not found" in result.skipped_transactions[0].reason


@pytest.mark.asyncio
async def test_build_entry_skips_zero_amount(company, accounts):
    transaction = BankTransaction(
        id=1, company_id=company.id, description="ZERO", amount=Decimal("0.00"), account_id=accounts["8100"].id
    )
    values, reason = journal_sync.build_journal_entry(transaction, accounts["1100"], "jane")
    assert values is None
    assert reason == "zero amount"


@pytest.mark.asyncio
async def test_regenerate_rebuilds_from_current_state(db_session, company, accounts, make_transaction):
    transaction = await make_transaction("FEE", "-5.00")
    await _classify(db_session, company.id, transaction, accounts["9600"])
    await JournalSync.sync_journal_entries(db_session, company.id, "jane")
    await _repoint(db_session, transaction, accounts["8100"])

    result = await JournalSync.regenerate_all_journal_entries(db_session, company.id, "jane")

    rows = await _entries(db_session)
    assert result.deleted == 1
    assert result.created == 1
    assert len(rows) == 1
    assert rows[0].debit_account_id == accounts["8100"].id


@pytest.mark.asyncio
async def test_regenerate_failure_keeps_prior_entries(db_session, company, accounts, make_transaction, mocker):
    for description, code in (("FEE", "9600"), ("SALARY", "8100"), ("WAGES", "8100")):
        transaction = await make_transaction(description, "-10.00")
        await _classify(db_session, company.id, transaction, accounts[code])
    await JournalSync.sync_journal_entries(db_session, company.id, "jane")
    before = await _entries(db_session)
    assert len(before) == 3

    real_build = journal_sync.build_journal_entry
    calls = {"count": 0}

    def failing_build(transaction, bank_account, username):
        calls["count"] += 1
        if calls["count"] == 2:
            raise RuntimeError("storage went away")
        return real_build(transaction, bank_account, username)

    mocker.patch.object(journal_sync, "build_journal_entry", side_effect=failing_build)

    with pytest.raises(InternalError):
        await JournalSync.regenerate_all_journal_entries(db_session, company.id, "jane")

    assert await _entries(db_session) == before


@pytest.mark.asyncio
async def test_manual_update_same_account_rejected(db_session, company, accounts, make_transaction):
    transaction = await make_transaction("FEE", "-5.00")
    with pytest.raises(ValidationError) as exc:
        await JournalSync.update_transaction_classification(
            db_session, company.id, transaction.id, accounts["9600"].id, accounts["9600"].id, "jane"
        )
    assert exc.value.error_code == "SAME_DEBIT_CREDIT_ACCOUNT"


@pytest.mark.asyncio
async def test_manual_update_creates_then_updates_single_entry(db_session, company, accounts, make_transaction):
    transaction = await make_transaction("PAYMENT TO SUPPLIER", "-250.00")

    created = await JournalSync.update_transaction_classification(
        db_session, company.id, transaction.id, accounts["9600"].id, accounts["1100"].id, "jane"
    )
    assert created.source == JournalEntrySource.MANUAL
    assert created.created_by == "jane"
    assert created.updated_by is None

    updated = await JournalSync.update_transaction_classification(
        db_session, company.id, transaction.id, accounts["8100"].id, accounts["1100"].id, "admin"
    )

    rows = await _entries(db_session)
    assert len(rows) == 1
    assert updated.id == created.id
    assert updated.debit_account_id == accounts["8100"].id
    assert updated.created_by == "jane"
    assert updated.updated_by == "admin"

    result = await db_session.execute(
        select(BankTransaction).where(BankTransaction.id == transaction.id)
        .execution_options(populate_existing=True)
    )
    refreshed = result.scalar_one()
    assert refreshed.account_id == accounts["8100"].id
    assert refreshed.classification_source == ClassificationSource.MANUAL


@pytest.mark.asyncio
async def test_manual_update_rejects_foreign_account(db_session, company, other_company, accounts,
                                                     make_transaction):
    from finledger.app.models.account import Account
    from finledger.app.models.accounting_enums import AccountType
    foreign = Account(company_id=other_company.id, account_code="1100", account_name="Bank",
                      account_type=AccountType.ASSET)
    db_session.add(foreign)
    await db_session.commit()
    transaction = await make_transaction("FEE", "-5.00")

    with pytest.raises(ValidationError) as exc:
        await JournalSync.update_transaction_classification(
            db_session, company.id, transaction.id, accounts["9600"].id, foreign.id, "jane"
        )
    assert exc.value.error_code == "ACCOUNT_COMPANY_MISMATCH"


@pytest.mark.asyncio
async def test_regenerate_reproduces_manual_override(db_session, company, accounts, make_transaction):
    transaction = await make_transaction("OWNER CONTRIBUTION", "1000.00")
    await JournalSync.update_transaction_classification(
        db_session, company.id, transaction.id, accounts["1100"].id, accounts["6100"].id, "jane"
    )

    await JournalSync.regenerate_all_journal_entries(db_session, company.id, "jane")

    result = await db_session.execute(select(JournalEntry).execution_options(populate_existing=True))
    entries = result.scalars().all()
    assert len(entries) == 1
    assert entries[0].source == JournalEntrySource.MANUAL
    assert entries[0].debit_account_id == accounts["1100"].id
    assert entries[0].credit_account_id == accounts["6100"].id


@pytest.mark.asyncio
async def test_direct_classify_replaces_manual_entry(db_session, company, accounts, make_transaction):
    transaction = await make_transaction("PAYMENT TO SUPPLIER", "-250.00")
    await JournalSync.update_transaction_classification(
        db_session, company.id, transaction.id, accounts["9600"].id, accounts["1100"].id, "jane"
    )

    await _classify(db_session, company.id, transaction, accounts["8100"])
    result = await JournalSync.sync_journal_entries(db_session, company.id, "jane")

    entries = (await db_session.execute(
        select(JournalEntry).execution_options(populate_existing=True)
    )).scalars().all()
    assert result.created == 1
    assert len(entries) == 1
    assert entries[0].debit_account_id == accounts["8100"].id
    assert entries[0].credit_account_id == accounts["1100"].id
    assert entries[0].source == JournalEntrySource.AUTO


@pytest.mark.asyncio
async def test_insert_same_transaction_twice_writes_one_row(db_session, company, accounts, make_transaction):
    transaction = await make_transaction("FEE", "-5.00")
    await _classify(db_session, company.id, transaction, accounts["9600"])
    values, _ = journal_sync.build_journal_entry(transaction, accounts["1100"], "jane")

    first = await journal_sync.insert_journal_entry(db_session, dict(values))
    second = await journal_sync.insert_journal_entry(db_session, dict(values))
    await db_session.commit()

    assert (first, second) == (True, False)
    assert len(await _entries(db_session)) == 1


@pytest.mark.asyncio
async def test_sync_does_not_count_entry_written_concurrently(db_session, company, accounts, make_transaction,
                                                              mocker):
    first = await make_transaction("FEE", "-5.00")
    second = await make_transaction("SALARY", "-50.00")
    await _classify(db_session, company.id, first, accounts["9600"])
    await _classify(db_session, company.id, second, accounts["8100"])
    real_select = journal_sync._classified_transactions

    async def select_then_race(db, company_id, without_entry):
        transactions = await real_select(db, company_id, without_entry)
        # Another sync writes the first entry after our read
        values, _ = journal_sync.build_journal_entry(transactions[0], accounts["1100"], "other")
        await journal_sync.insert_journal_entry(db, values)
        return transactions

    mocker.patch.object(journal_sync, "_classified_transactions", select_then_race)

    result = await JournalSync.sync_journal_entries(db_session, company.id, "jane")

    rows = await _entries(db_session)
    assert result.created == 1
    assert len(rows) == 2
    assert {row.transaction_id for row in rows} == {first.id, second.id}
