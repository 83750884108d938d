import enum


class NotificationType(str, enum.Enum):
    ORDER = "order"
    ORDER_CREATED = "order_created"
    NEW_ORDER = "new_order"
    ORDER_STATUS = "order_status"
    ORDER_DELIVERED = "order_delivered"
    ORDER_CANCELLED = "order_cancelled"
    PAYMENT_RECEIVED = "payment_received"
    WALLET_DEPOSIT_APPROVED = "wallet_deposit_approved"
    WALLET_WITHDRAWAL_APPROVED = "wallet_withdrawal_approved"
    WALLET_DEPOSIT_REJECTED = "wallet_deposit_rejected"
    WALLET_WITHDRAWAL_REJECTED = "wallet_withdrawal_rejected"
