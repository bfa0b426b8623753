"""
Integration tests for the classification API: envelope, access control and
the full initialize -> import -> classify -> sync workflow.
"""

import pytest
from decimal import Decimal

API = "/api/v1"


async def _create_company(client, headers, name="Acme Trading"):
    response = await client.post(f"{API}/companies", json={"name": name}, headers=headers)
    assert response.status_code == 201
    return response.json()["data"]["id"]


async def _import(client, headers, company_id, lines):
    response = await client.post(
        f"{API}/companies/{company_id}/transactions", json={"transactions": lines}, headers=headers
    )
    assert response.status_code == 201
    return response.json()["data"]


@pytest.mark.asyncio
async def test_full_workflow(client, accountant_headers):
    company_id = await _create_company(client, accountant_headers)
    period = await client.post(
        f"{API}/companies/{company_id}/fiscal-periods",
        json={"period_name": "FY2024", "start_date": "2024-03-01", "end_date": "2025-02-28"},
        headers=accountant_headers
    )
    period_id = period.json()["data"]["id"]

    init = await client.post(
        f"{API}/companies/{company_id}/classification/full-initialization", headers=accountant_headers
    )
    assert init.status_code == 200
    body = init.json()
    assert body["success"] is True
    assert body["data"]["accounts"]["created"] > 50
    assert body["data"]["rules"]["created"] > 10

    imported = await _import(client, accountant_headers, company_id, [
        {"transaction_date": "2024-04-01", "description": "FEE IMMEDIATE PAYMENT", "amount": "-12.50"},
        {"transaction_date": "2024-04-25", "description": "SALARY APRIL J DOE", "amount": "-15000.00"},
        {"transaction_date": "2024-04-28", "description": "MYSTERY PAYEE", "amount": "-99.00"},
    ])
    assert imported["assigned_to_period"] == 3

    classify = await client.post(
        f"{API}/companies/{company_id}/classification/auto-classify", headers=accountant_headers
    )
    result = classify.json()["data"]
    assert result["total"] == 3
    assert result["matched"] == 2
    assert result["unmatched"] == 1
    assert sum(result["matched_by_rule"].values()) == 2

    sync = await client.post(
        f"{API}/companies/{company_id}/classification/sync-journal-entries", headers=accountant_headers
    )
    assert sync.json()["data"]["created"] == 2

    entries = await client.get(f"{API}/companies/{company_id}/journal-entries", headers=accountant_headers)
    amounts = sorted(Decimal(e["amount"]) for e in entries.json()["data"])
    assert amounts == [Decimal("12.50"), Decimal("15000.00")]

    unclassified = await client.get(
        f"{API}/companies/{company_id}/classification/unclassified/{period_id}", headers=accountant_headers
    )
    rows = unclassified.json()["data"]
    assert [row["description"] for row in rows] == ["MYSTERY PAYEE"]

    summary = await client.get(f"{API}/companies/{company_id}/classification/summary", headers=accountant_headers)
    assert summary.json()["data"]["classified"] == 2


@pytest.mark.asyncio
async def test_initialize_chart_is_idempotent(client, admin_headers):
    company_id = await _create_company(client, admin_headers)
    url = f"{API}/companies/{company_id}/classification/initialize-chart-of-accounts"

    first = await client.post(url, headers=admin_headers)
    second = await client.post(url, headers=admin_headers)

    assert first.json()["data"]["skipped"] == 0
    assert second.json()["data"]["created"] == 0
    assert second.json()["data"]["skipped"] == first.json()["data"]["created"]


@pytest.mark.asyncio
async def test_mapping_rules_skip_without_chart(client, admin_headers):
    company_id = await _create_company(client, admin_headers)

    response = await client.post(
        f"{API}/companies/{company_id}/classification/initialize-mapping-rules", headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["data"]["created"] == 0


@pytest.mark.asyncio
async def test_rule_crud(client, accountant_headers):
    company_id = await _create_company(client, accountant_headers)
    await client.post(
        f"{API}/companies/{company_id}/classification/initialize-chart-of-accounts", headers=accountant_headers
    )
    rules_url = f"{API}/companies/{company_id}/classification/rules"

    created = await client.post(rules_url, json={
        "rule_name": "Education",
        "match_type": "REGEX",
        "match_value": "COLLEGE|SCHOOL|UNIVERSITY",
        "account_code": "9300",
        "priority": 5,
    }, headers=accountant_headers)
    assert created.status_code == 201
    rule = created.json()["data"]
    assert rule["match_type"] == "REGEX"
    assert rule["created_by"] == "jane.accountant"

    updated = await client.put(f"{rules_url}/{rule['id']}", json={"is_active": False}, headers=accountant_headers)
    assert updated.json()["data"]["is_active"] is False

    listed = await client.get(rules_url, headers=accountant_headers)
    assert [r["id"] for r in listed.json()["data"]] == [rule["id"]]

    deleted = await client.delete(f"{rules_url}/{rule['id']}", headers=accountant_headers)
    assert deleted.status_code == 200
    assert deleted.json()["success"] is True

    missing = await client.delete(f"{rules_url}/{rule['id']}", headers=accountant_headers)
    assert missing.status_code == 400
    assert missing.json()["error_code"] == "RULE_NOT_FOUND"


@pytest.mark.asyncio
async def test_invalid_regex_returns_400_envelope(client, accountant_headers):
    company_id = await _create_company(client, accountant_headers)
    await client.post(
        f"{API}/companies/{company_id}/classification/initialize-chart-of-accounts", headers=accountant_headers
    )

    response = await client.post(f"{API}/companies/{company_id}/classification/rules", json={
        "rule_name": "Broken",
        "match_type": "REGEX",
        "match_value": "([",
        "account_code": "9600",
    }, headers=accountant_headers)

    assert response.status_code == 400
    body = response.json()
    assert body["success"] is False
    assert body["data"] is None
    assert body["error_code"] == "INVALID_RULE_PATTERN"
    assert "timestamp" in body


@pytest.mark.asyncio
async def test_unknown_match_type_is_400(client, accountant_headers):
    company_id = await _create_company(client, accountant_headers)
    response = await client.post(f"{API}/companies/{company_id}/classification/rules", json={
        "rule_name": "Fuzzy",
        "match_type": "FUZZY",
        "match_value": "x",
        "account_code": "9600",
    }, headers=accountant_headers)

    assert response.status_code == 400
    assert response.json()["error_code"] == "VALIDATION_ERROR"


@pytest.mark.asyncio
async def test_manual_update_same_accounts_is_400(client, accountant_headers):
    company_id = await _create_company(client, accountant_headers)
    await client.post(
        f"{API}/companies/{company_id}/classification/initialize-chart-of-accounts", headers=accountant_headers
    )
    await _import(client, accountant_headers, company_id, [
        {"transaction_date": "2024-04-01", "description": "X", "amount": "-1.00"}
    ])
    transactions = await client.get(f"{API}/companies/{company_id}/transactions", headers=accountant_headers)
    transaction_id = transactions.json()["data"][0]["id"]
    accounts = await client.get(f"{API}/companies/{company_id}/accounts", headers=accountant_headers)
    account_id = accounts.json()["data"][0]["id"]

    response = await client.put(
        f"{API}/companies/{company_id}/classification/transactions/{transaction_id}",
        json={"debit_account_id": account_id, "credit_account_id": account_id},
        headers=accountant_headers
    )

    assert response.status_code == 400
    assert response.json()["error_code"] == "SAME_DEBIT_CREDIT_ACCOUNT"


@pytest.mark.asyncio
async def test_classify_unknown_transaction_is_400(client, accountant_headers):
    company_id = await _create_company(client, accountant_headers)
    response = await client.post(
        f"{API}/companies/{company_id}/classification/transactions/424242/classify",
        json={"account_code": "9600"},
        headers=accountant_headers
    )

    assert response.status_code == 400
    assert response.json()["error_code"] == "TRANSACTION_NOT_FOUND"


@pytest.mark.asyncio
async def test_missing_token_is_401(client):
    response = await client.post(f"{API}/companies/1/classification/auto-classify")
    assert response.status_code == 401
    assert response.json()["error_code"] == "UNAUTHORIZED"


@pytest.mark.asyncio
async def test_garbage_token_is_401(client):
    response = await client.get(
        f"{API}/companies", headers={"Authorization": "Bearer not-a-jwt"}
    )
    assert response.status_code == 401


@pytest.mark.asyncio
async def test_viewer_cannot_write(client, admin_headers, viewer_headers):
    company_id = await _create_company(client, admin_headers)

    write = await client.post(
        f"{API}/companies/{company_id}/classification/auto-classify", headers=viewer_headers
    )
    read = await client.get(f"{API}/companies/{company_id}/classification/summary", headers=viewer_headers)

    assert write.status_code == 403
    assert write.json()["error_code"] == "FORBIDDEN"
    assert read.status_code == 200


@pytest.mark.asyncio
async def test_auto_classify_unknown_fiscal_period_is_400(client, accountant_headers):
    company_id = await _create_company(client, accountant_headers)

    response = await client.post(
        f"{API}/companies/{company_id}/classification/auto-classify",
        params={"fiscal_period_id": 424242},
        headers=accountant_headers
    )

    assert response.status_code == 400
    assert response.json()["error_code"] == "FISCAL_PERIOD_NOT_FOUND"
