"""Integration tests for the wallet endpoints."""

from decimal import Decimal

import pytest

WALLET = "/api/v1/wallet"
ADMIN_WALLET = "/api/v1/admin/wallet"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_my_wallet_is_created_on_first_access(client, auth, market):
    auth.login(market.buyer.id)

    response = await client.get(f"{WALLET}/me")

    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["user_id"] == market.buyer.id
    assert Decimal(data["balance"]) == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_deposit_and_withdraw(client, auth, market):
    auth.login(market.buyer.id)

    deposit = await client.post(f"{WALLET}/deposit", json={"amount": "80.00"})
    assert deposit.status_code == 200, deposit.text
    assert deposit.json()["message"] == "Deposit successful"
    assert deposit.json()["data"]["transaction_type"] == "deposit"
    assert Decimal(deposit.json()["data"]["balance_after"]) == Decimal("80.00")

    withdraw = await client.post(f"{WALLET}/withdraw", json={"amount": "30.00"})
    assert withdraw.status_code == 200
    assert withdraw.json()["data"]["direction"] == "debit"

    balance = await client.get(f"{WALLET}/balance")
    assert Decimal(balance.json()["data"]["balance"]) == Decimal("50.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_withdraw_more_than_balance(client, auth, market):
    auth.login(market.buyer.id)
    await client.post(f"{WALLET}/deposit", json={"amount": "10.00"})

    response = await client.post(f"{WALLET}/withdraw", json={"amount": "25.00"})

    assert response.status_code == 400
    assert response.json()["kind"] == "invalid_state"
    balance = await client.get(f"{WALLET}/balance")
    assert Decimal(balance.json()["data"]["balance"]) == Decimal("10.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_non_positive_amount_rejected(client, auth, market):
    auth.login(market.buyer.id)

    response = await client.post(f"{WALLET}/deposit", json={"amount": "0"})

    assert response.status_code == 400
    assert response.json()["kind"] == "validation"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_transfer_between_users(client, auth, market):
    auth.login(market.buyer.id)
    await client.post(f"{WALLET}/deposit", json={"amount": "40.00"})

    response = await client.post(
        f"{WALLET}/transfer",
        json={"toUserId": market.vendor.id, "amount": "15.00"},
    )

    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["outgoing"]["transaction_type"] == "transfer_out"
    assert data["incoming"]["transaction_type"] == "transfer_in"

    auth.login(market.vendor.id, role="vendor")
    balance = await client.get(f"{WALLET}/balance")
    assert Decimal(balance.json()["data"]["balance"]) == Decimal("15.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_transaction_history_newest_first(client, auth, market):
    auth.login(market.buyer.id)
    await client.post(f"{WALLET}/deposit", json={"amount": "10.00"})
    await client.post(f"{WALLET}/deposit", json={"amount": "20.00"})

    response = await client.get(f"{WALLET}/transactions", params={"limit": 1})

    data = response.json()["data"]
    assert data["total"] == 2
    assert data["limit"] == 1
    [latest] = data["transactions"]
    assert Decimal(latest["amount"]) == Decimal("20.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_admin_ledger_check(client, auth, market):
    auth.login(market.buyer.id)
    await client.post(f"{WALLET}/deposit", json={"amount": "12.50"})

    forbidden = await client.get(f"{ADMIN_WALLET}/{market.buyer.id}/ledger-check")
    assert forbidden.status_code == 403
    assert forbidden.json()["kind"] == "authorization"

    auth.login(market.admin.id, role="admin")
    response = await client.get(f"{ADMIN_WALLET}/{market.buyer.id}/ledger-check")

    assert response.status_code == 200
    data = response.json()["data"]
    assert data["consistent"] is True
    assert data["transaction_count"] == 1
    assert Decimal(data["ledger_balance"]) == Decimal("12.50")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_deposit_request_approved_by_admin(client, auth, market):
    auth.login(market.buyer.id)
    filed = await client.post(
        f"{WALLET}/requests/deposit",
        json={"amount": "75.00", "evidenceUrl": "receipts/75.jpg"},
    )
    assert filed.status_code == 201, filed.text
    assert filed.json()["message"] == "Deposit request submitted"
    request_id = filed.json()["data"]["id"]
    assert filed.json()["data"]["status"] == "pending"

    auth.login(market.admin.id, role="admin")
    queue = await client.get(f"{ADMIN_WALLET}/requests", params={"status": "pending"})
    assert queue.json()["data"]["total"] == 1

    approved = await client.post(f"{ADMIN_WALLET}/requests/{request_id}/approve-deposit")
    assert approved.status_code == 200, approved.text
    assert approved.json()["data"]["status"] == "approved"
    assert approved.json()["data"]["reviewed_by"] == market.admin.id

    again = await client.post(f"{ADMIN_WALLET}/requests/{request_id}/approve-deposit")
    assert again.status_code == 400
    assert again.json()["kind"] == "invalid_state"

    auth.login(market.buyer.id)
    balance = await client.get(f"{WALLET}/balance")
    assert Decimal(balance.json()["data"]["balance"]) == Decimal("75.00")
    inbox = await client.get("/api/v1/notifications")
    assert [n["type"] for n in inbox.json()["data"]] == ["wallet_deposit_approved"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_withdrawal_request_lifecycle(client, auth, market):
    auth.login(market.buyer.id)
    await client.post(f"{WALLET}/deposit", json={"amount": "100.00"})

    too_much = await client.post(
        f"{WALLET}/requests/withdrawal",
        json={"amount": "150.00", "payoutAccount": "01011112222"},
    )
    assert too_much.status_code == 400
    assert too_much.json()["kind"] == "invalid_state"

    filed = await client.post(
        f"{WALLET}/requests/withdrawal",
        json={"amount": "40.00", "payoutAccount": "01011112222"},
    )
    assert filed.status_code == 201, filed.text
    request_id = filed.json()["data"]["id"]

    auth.login(market.admin.id, role="admin")
    no_evidence = await client.post(
        f"{ADMIN_WALLET}/requests/{request_id}/approve-withdrawal", json={}
    )
    assert no_evidence.status_code == 400
    assert no_evidence.json()["kind"] == "validation"

    wrong_kind = await client.post(f"{ADMIN_WALLET}/requests/{request_id}/approve-deposit")
    assert wrong_kind.status_code == 400
    assert wrong_kind.json()["kind"] == "invalid_state"

    approved = await client.post(
        f"{ADMIN_WALLET}/requests/{request_id}/approve-withdrawal",
        json={"evidenceUrl": "transfers/40.jpg"},
    )
    assert approved.status_code == 200, approved.text
    assert approved.json()["data"]["transaction_id"] is not None

    auth.login(market.buyer.id)
    balance = await client.get(f"{WALLET}/balance")
    assert Decimal(balance.json()["data"]["balance"]) == Decimal("60.00")
    mine = await client.get(f"{WALLET}/requests", params={"type": "withdrawal"})
    assert [r["status"] for r in mine.json()["data"]] == ["approved"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_rejected_request_notifies_member(client, auth, market):
    auth.login(market.buyer.id)
    filed = await client.post(
        f"{WALLET}/requests/deposit",
        json={"amount": "20.00", "evidenceUrl": "receipts/20.jpg"},
    )
    request_id = filed.json()["data"]["id"]

    auth.login(market.admin.id, role="admin")
    rejected = await client.post(
        f"{ADMIN_WALLET}/requests/{request_id}/reject",
        json={"reason": "Receipt is unreadable"},
    )
    assert rejected.status_code == 200, rejected.text
    assert rejected.json()["data"]["rejection_reason"] == "Receipt is unreadable"

    auth.login(market.buyer.id)
    assert Decimal((await client.get(f"{WALLET}/balance")).json()["data"]["balance"]) == 0
    [notification] = (await client.get("/api/v1/notifications")).json()["data"]
    assert notification["type"] == "wallet_deposit_rejected"
    assert "Receipt is unreadable" in notification["body"]


@pytest.mark.asyncio
@pytest.mark.integration
async def test_request_review_requires_admin(client, auth, market):
    auth.login(market.buyer.id)
    filed = await client.post(
        f"{WALLET}/requests/deposit",
        json={"amount": "20.00", "evidenceUrl": "receipts/20.jpg"},
    )
    request_id = filed.json()["data"]["id"]

    approve = await client.post(f"{ADMIN_WALLET}/requests/{request_id}/approve-deposit")
    queue = await client.get(f"{ADMIN_WALLET}/requests")

    assert approve.status_code == 403
    assert queue.status_code == 403
