"""A user's notification inbox: listing, unread count, read marks, deletion."""

import uuid

from libs.common.datetime_utils import utc_now
from libs.common.errors import NotFoundError
from services.communications_service.models import Notification
from sqlalchemy import desc, func, select, update
from sqlalchemy.ext.asyncio import AsyncSession


async def list_notifications(
    db: AsyncSession, user_id: str, *, unread_only: bool = False, limit: int = 50
) -> list[Notification]:
    query = (
        select(Notification)
        .where(Notification.user_id == user_id)
        .order_by(desc(Notification.created_at))
        .limit(limit)
    )
    if unread_only:
        query = query.where(Notification.is_read.is_(False))
    result = await db.execute(query)
    return list(result.scalars().all())


async def unread_count(db: AsyncSession, user_id: str) -> int:
    count = await db.scalar(
        select(func.count())
        .select_from(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
    )
    return count or 0


async def _own(
    db: AsyncSession, user_id: str, notification_id: uuid.UUID
) -> Notification:
    notification = await db.get(Notification, notification_id)
    if notification is None or notification.user_id != user_id:
        raise NotFoundError(
            "Notification not found", notification_id=str(notification_id)
        )
    return notification


async def mark_read(
    db: AsyncSession, user_id: str, notification_id: uuid.UUID
) -> Notification:
    notification = await _own(db, user_id, notification_id)
    if not notification.is_read:
        notification.is_read = True
        notification.read_at = utc_now()
        await db.flush()
    return notification


async def mark_all_read(db: AsyncSession, user_id: str) -> int:
    """Mark every unread notification of the user as read. Returns how many."""
    result = await db.execute(
        update(Notification)
        .where(Notification.user_id == user_id, Notification.is_read.is_(False))
        .values(is_read=True, read_at=utc_now())
    )
    return result.rowcount or 0


async def delete_notification(
    db: AsyncSession, user_id: str, notification_id: uuid.UUID
) -> None:
    notification = await _own(db, user_id, notification_id)
    await db.delete(notification)
    await db.flush()
