"""Notification inbox endpoints."""

import uuid

from fastapi import APIRouter, Depends, Query
from libs.auth.dependencies import get_current_user
from libs.auth.models import AuthUser
from libs.common.responses import ApiResponse, ok
from libs.db.session import get_async_db
from services.communications_service.inbox import (
    delete_notification,
    list_notifications,
    mark_all_read,
    mark_read,
    unread_count,
)
from services.communications_service.schemas import (
    MarkAllReadResponse,
    NotificationResponse,
    UnreadCountResponse,
)
from sqlalchemy.ext.asyncio import AsyncSession

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=ApiResponse[list[NotificationResponse]])
async def list_my_notifications(
    unread_only: bool = Query(False, alias="unreadOnly"),
    limit: int = Query(50, ge=1, le=100),
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    notifications = await list_notifications(
        db, current_user.user_id, unread_only=unread_only, limit=limit
    )
    return ok([NotificationResponse.model_validate(n) for n in notifications])


@router.get("/unread-count", response_model=ApiResponse[UnreadCountResponse])
async def get_unread_count(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    return ok(UnreadCountResponse(count=await unread_count(db, current_user.user_id)))


@router.post("/read-all", response_model=ApiResponse[MarkAllReadResponse])
async def mark_all_notifications_read(
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    updated = await mark_all_read(db, current_user.user_id)
    await db.commit()
    return ok(MarkAllReadResponse(updated=updated), "All notifications marked as read")


@router.post("/{notification_id}/read", response_model=ApiResponse[NotificationResponse])
async def mark_notification_read(
    notification_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    notification = await mark_read(db, current_user.user_id, notification_id)
    await db.commit()
    return ok(NotificationResponse.model_validate(notification))


@router.delete("/{notification_id}", response_model=ApiResponse[None])
async def delete_my_notification(
    notification_id: uuid.UUID,
    current_user: AuthUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_async_db),
):
    await delete_notification(db, current_user.user_id, notification_id)
    await db.commit()
    return ok(None, "Notification deleted")
