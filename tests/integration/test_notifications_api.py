"""Integration tests for the notification inbox."""

import pytest
from services.communications_service.models import Notification

INBOX = "/api/v1/notifications"


async def _seed(db, user_id, *titles):
    for title in titles:
        db.add(Notification(user_id=user_id, title=title, body="Body", type="order"))
    await db.commit()


@pytest.mark.asyncio
@pytest.mark.integration
async def test_unread_count_and_read_all(client, auth, market, db_session):
    await _seed(db_session, market.buyer.id, "One", "Two", "Three")
    await _seed(db_session, market.vendor.id, "Vendor")
    auth.login(market.buyer.id)

    count = await client.get(f"{INBOX}/unread-count")
    assert count.status_code == 200, count.text
    assert count.json()["data"] == {"count": 3}

    read_all = await client.post(f"{INBOX}/read-all")
    assert read_all.json()["data"] == {"updated": 3}
    assert read_all.json()["message"] == "All notifications marked as read"

    assert (await client.get(f"{INBOX}/unread-count")).json()["data"]["count"] == 0
    unread = await client.get(INBOX, params={"unreadOnly": "true"})
    assert unread.json()["data"] == []

    auth.login(market.vendor.id, role="vendor")
    assert (await client.get(f"{INBOX}/unread-count")).json()["data"]["count"] == 1


@pytest.mark.asyncio
@pytest.mark.integration
async def test_delete_notification(client, auth, market, db_session):
    await _seed(db_session, market.buyer.id, "Keep", "Drop")
    auth.login(market.buyer.id)
    listed = (await client.get(INBOX)).json()["data"]
    drop_id = next(n["id"] for n in listed if n["title"] == "Drop")

    auth.login(market.vendor.id, role="vendor")
    foreign = await client.delete(f"{INBOX}/{drop_id}")
    assert foreign.status_code == 404

    auth.login(market.buyer.id)
    deleted = await client.delete(f"{INBOX}/{drop_id}")
    assert deleted.status_code == 200, deleted.text
    assert deleted.json()["message"] == "Notification deleted"

    remaining = (await client.get(INBOX)).json()["data"]
    assert [n["title"] for n in remaining] == ["Keep"]
    assert (await client.delete(f"{INBOX}/{drop_id}")).status_code == 404


@pytest.mark.asyncio
@pytest.mark.integration
async def test_inbox_requires_login(client, auth):
    response = await client.get(f"{INBOX}/unread-count")

    assert response.status_code == 401
