"""Integration tests for checkout and the order lifecycle endpoints."""

from decimal import Decimal

import pytest
from tests.factories import fund_wallet

ORDERS = "/api/v1/orders"
CART = "/api/v1/cart"


async def _add(client, product, quantity=1):
    response = await client.post(
        CART, json={"productId": str(product.id), "quantity": quantity}
    )
    assert response.status_code == 201, response.text


def _checkout_body(market, method="cash"):
    return {
        "toCityId": str(market.giza.id),
        "shippingAddress": "12 Nile St",
        "phone": "01011112222",
        "paymentMethod": method,
    }


@pytest.mark.asyncio
@pytest.mark.integration
async def test_price_quote(client, auth, market, db_session):
    auth.login(market.buyer.id)
    await fund_wallet(db_session, market.buyer.id, 100)
    await _add(client, market.shirt, 2)

    response = await client.get(
        f"{ORDERS}/price-quote", params={"toCityId": str(market.giza.id)}
    )

    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert Decimal(data["grand_total"]) == Decimal("55.00")
    assert data["can_checkout"] is True
    assert data["groups"][0]["shipping_available"] is True
    assert data["wallet"]["sufficient_balance"] is True
    assert Decimal(data["wallet"]["remaining_after_payment"]) == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_price_quote_empty_cart(client, auth, market):
    auth.login(market.buyer.id)

    response = await client.get(
        f"{ORDERS}/price-quote", params={"toCityId": str(market.giza.id)}
    )

    assert response.status_code == 400
    assert response.json()["message"] == "Cart is empty"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_cash_order(client, auth, market):
    auth.login(market.buyer.id)
    await _add(client, market.shirt, 2)
    await _add(client, market.mug, 1)

    response = await client.post(ORDERS, json=_checkout_body(market))

    assert response.status_code == 201, response.text
    body = response.json()
    assert body["message"] == "Order created successfully"
    [order] = body["data"]
    assert order["status"] == "pending"
    assert order["payment_method"] == "cash"
    assert order["payment_status"] == "paid"
    assert Decimal(order["total"]) == Decimal("64.00")
    assert len(order["items"]) == 2

    cart = await client.get(CART)
    assert cart.json()["data"]["items"] == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_create_wallet_order_partial(client, auth, market, db_session):
    auth.login(market.buyer.id)
    await fund_wallet(db_session, market.buyer.id, 30)
    await _add(client, market.shirt, 2)

    response = await client.post(ORDERS, json=_checkout_body(market, "wallet"))

    assert response.status_code == 201, response.text
    [order] = response.json()["data"]
    assert order["payment_status"] == "remaining"
    assert Decimal(order["remaining_amount"]) == Decimal("25.00")

    balance = await client.get("/api/v1/wallet/balance")
    assert Decimal(balance.json()["data"]["balance"]) == 0


@pytest.mark.asyncio
@pytest.mark.integration
async def test_wallet_order_with_empty_wallet(client, auth, market):
    auth.login(market.buyer.id)
    await _add(client, market.shirt)

    response = await client.post(ORDERS, json=_checkout_body(market, "wallet"))

    assert response.status_code == 400
    assert response.json()["kind"] == "invalid_state"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_idempotency_key_replays_checkout(client, auth, market, db_session):
    auth.login(market.buyer.id)
    await fund_wallet(db_session, market.buyer.id, 100)
    await _add(client, market.shirt)
    headers = {"Idempotency-Key": "checkout-42"}

    first = await client.post(ORDERS, json=_checkout_body(market, "wallet"), headers=headers)
    second = await client.post(ORDERS, json=_checkout_body(market, "wallet"), headers=headers)

    assert first.status_code == second.status_code == 201
    assert [o["id"] for o in first.json()["data"]] == [o["id"] for o in second.json()["data"]]
    balance = await client.get("/api/v1/wallet/balance")
    assert Decimal(balance.json()["data"]["balance"]) == Decimal("65.00")


@pytest.mark.asyncio
@pytest.mark.integration
async def test_missing_lane_rejects_checkout(client, auth, market):
    auth.login(market.buyer.id)
    await _add(client, market.lamp)

    response = await client.post(ORDERS, json=_checkout_body(market))

    assert response.status_code == 400
    body = response.json()
    assert body["kind"] == "invalid_state"
    assert body["details"]["to_city_id"] == str(market.giza.id)
    assert len((await client.get(CART)).json()["data"]["items"]) == 1
    assert (await client.get(ORDERS)).json()["data"] == []


@pytest.mark.asyncio
@pytest.mark.integration
async def test_order_listing_and_visibility(client, auth, market):
    auth.login(market.buyer.id)
    await _add(client, market.mug)
    order_id = (await client.post(ORDERS, json=_checkout_body(market))).json()["data"][0]["id"]

    mine = await client.get(ORDERS)
    assert [o["id"] for o in mine.json()["data"]] == [order_id]

    auth.login(market.vendor.id, role="vendor")
    vendor_orders = await client.get(f"{ORDERS}/vendor")
    assert [o["id"] for o in vendor_orders.json()["data"]] == [order_id]
    assert (await client.get(f"{ORDERS}/{order_id}")).status_code == 200

    auth.login(market.other_vendor.id, role="vendor")
    forbidden = await client.get(f"{ORDERS}/{order_id}")
    assert forbidden.status_code == 403
    assert forbidden.json()["kind"] == "authorization"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_status_update_permissions(client, auth, market):
    auth.login(market.buyer.id)
    await _add(client, market.mug)
    order_id = (await client.post(ORDERS, json=_checkout_body(market))).json()["data"][0]["id"]

    by_buyer = await client.patch(f"{ORDERS}/{order_id}/status", json={"status": "confirmed"})
    assert by_buyer.status_code == 403

    unknown_by_buyer = await client.patch(f"{ORDERS}/{order_id}/status", json={"status": "lost"})
    assert unknown_by_buyer.status_code == 403

    auth.login(market.vendor.id, role="vendor")
    by_vendor = await client.patch(f"{ORDERS}/{order_id}/status", json={"status": "confirmed"})
    assert by_vendor.status_code == 200
    assert by_vendor.json()["data"]["status"] == "confirmed"

    skipped = await client.patch(f"{ORDERS}/{order_id}/status", json={"status": "delivered"})
    assert skipped.status_code == 400
    assert skipped.json()["kind"] == "invalid_state"

    unknown = await client.patch(f"{ORDERS}/{order_id}/status", json={"status": "lost"})
    assert unknown.status_code == 400
    assert unknown.json()["kind"] == "validation"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_cancel_wallet_order_refunds(client, auth, market, db_session):
    auth.login(market.buyer.id)
    await fund_wallet(db_session, market.buyer.id, 100)
    await _add(client, market.shirt)
    order_id = (
        await client.post(ORDERS, json=_checkout_body(market, "wallet"))
    ).json()["data"][0]["id"]

    response = await client.post(f"{ORDERS}/{order_id}/cancel")

    assert response.status_code == 200, response.text
    data = response.json()["data"]
    assert data["status"] == "cancelled"
    assert data["payment_status"] == "refunded"
    balance = await client.get("/api/v1/wallet/balance")
    assert Decimal(balance.json()["data"]["balance"]) == Decimal("100.00")

    again = await client.post(f"{ORDERS}/{order_id}/cancel")
    assert again.status_code == 400
    assert again.json()["kind"] == "invalid_state"


@pytest.mark.asyncio
@pytest.mark.integration
async def test_order_events_reach_inbox(client, auth, market):
    auth.login(market.buyer.id)
    await _add(client, market.mug)
    await client.post(ORDERS, json=_checkout_body(market))

    inbox = await client.get("/api/v1/notifications")
    [notification] = inbox.json()["data"]
    assert notification["type"] == "order_created"
    assert notification["is_read"] is False

    read = await client.post(f"/api/v1/notifications/{notification['id']}/read")
    assert read.json()["data"]["is_read"] is True
    unread = await client.get("/api/v1/notifications", params={"unreadOnly": "true"})
    assert unread.json()["data"] == []

    auth.login(market.vendor.id, role="vendor")
    vendor_inbox = await client.get("/api/v1/notifications")
    assert [n["type"] for n in vendor_inbox.json()["data"]] == ["new_order"]
