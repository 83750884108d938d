"""Best-effort in-app notifications.

``NotificationSink.notify`` writes through its own session, so a notification
is never part of (and can never roll back) the caller's transaction. Any
failure is logged and swallowed.
"""

from typing import Any, Optional

from libs.common.config import get_settings
from libs.common.logging import get_logger
from services.communications_service.models import Notification, NotificationType
from services.communications_service.templates import orders as order_templates
from services.communications_service.templates import wallet as wallet_templates
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

logger = get_logger(__name__)
settings = get_settings()


class NotificationSink:
    def __init__(
        self,
        session_factory: async_sessionmaker[AsyncSession],
        enabled: Optional[bool] = None,
    ):
        self.session_factory = session_factory
        self.enabled = settings.NOTIFICATIONS_ENABLED if enabled is None else enabled

    async def notify(
        self,
        user_id: str,
        title: str,
        message: str,
        type: str,
        data: Optional[dict[str, Any]] = None,
    ) -> Optional[Notification]:
        if not self.enabled:
            return None
        try:
            async with self.session_factory() as session:
                notification = Notification(
                    user_id=user_id, title=title, body=message, type=type, data=data
                )
                session.add(notification)
                await session.commit()
                return notification
        except Exception:
            logger.exception(
                "Failed to store %s notification for user %s", type, user_id
            )
            return None


class OrderNotifier:
    """Order lifecycle messages on top of a sink."""

    def __init__(self, sink: NotificationSink, currency: Optional[str] = None):
        self.sink = sink
        self.currency = currency or settings.CURRENCY

    @staticmethod
    def _ref(order) -> str:
        return str(order.id)[:8]

    @staticmethod
    def _data(order, **extra) -> dict[str, Any]:
        data = {"order_id": str(order.id)}
        data.update({key: str(value) for key, value in extra.items()})
        return data

    async def order_created(self, order, customer_name: str) -> None:
        title, body = order_templates.order_created(
            self._ref(order), order.total, self.currency
        )
        await self.sink.notify(
            order.buyer_id,
            title,
            body,
            NotificationType.ORDER_CREATED.value,
            self._data(order, total=order.total),
        )

        title, body = order_templates.vendor_new_order(
            self._ref(order), customer_name, order.total, self.currency
        )
        await self.sink.notify(
            order.vendor_id,
            title,
            body,
            NotificationType.NEW_ORDER.value,
            self._data(order, total=order.total),
        )

    async def status_changed(self, order) -> None:
        status = order.status.value
        title, body = order_templates.order_status_changed(self._ref(order), status)
        await self.sink.notify(
            order.buyer_id,
            title,
            body,
            NotificationType.ORDER_STATUS.value,
            self._data(order, status=status),
        )

    async def delivered(self, order) -> None:
        title, body = order_templates.order_delivered(self._ref(order))
        await self.sink.notify(
            order.buyer_id,
            title,
            body,
            NotificationType.ORDER_DELIVERED.value,
            self._data(order),
        )

    async def payment_received(self, order) -> None:
        title, body = order_templates.payment_received(
            self._ref(order), order.total, self.currency
        )
        await self.sink.notify(
            order.vendor_id,
            title,
            body,
            NotificationType.PAYMENT_RECEIVED.value,
            self._data(order, amount=order.total),
        )

    async def cancelled(self, order, refunded) -> None:
        title, body = order_templates.order_cancelled(
            self._ref(order), refunded, self.currency
        )
        await self.sink.notify(
            order.buyer_id,
            title,
            body,
            NotificationType.ORDER_CANCELLED.value,
            self._data(order, refunded=refunded or 0),
        )


class WalletRequestNotifier:
    """Tell members how an admin decided their deposit or withdrawal request."""

    def __init__(self, sink: NotificationSink, currency: Optional[str] = None):
        self.sink = sink
        self.currency = currency or settings.CURRENCY

    @staticmethod
    def _data(request, **extra) -> dict[str, Any]:
        data = {"request_id": str(request.id), "amount": str(request.amount)}
        data.update(extra)
        return data

    async def approved(self, request) -> None:
        kind = request.request_type.value
        title, body = wallet_templates.request_approved(
            kind, request.amount, self.currency
        )
        await self.sink.notify(
            request.user_id,
            title,
            body,
            NotificationType(f"wallet_{kind}_approved").value,
            self._data(request),
        )

    async def rejected(self, request) -> None:
        kind = request.request_type.value
        title, body = wallet_templates.request_rejected(
            kind, request.amount, self.currency, request.rejection_reason
        )
        await self.sink.notify(
            request.user_id,
            title,
            body,
            NotificationType(f"wallet_{kind}_rejected").value,
            self._data(request, reason=request.rejection_reason),
        )
