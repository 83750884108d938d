"""initial_marketplace_schema

Revision ID: 3f9c1a7b2d10
Revises:
Create Date: 2026-10-18 10:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3f9c1a7b2d10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

user_type_enum = sa.Enum('user', 'vendor', 'admin', name='user_type_enum')
transaction_type_enum = sa.Enum(
    'deposit', 'withdrawal', 'payment', 'refund', 'transfer_in', 'transfer_out',
    name='wallet_transaction_type_enum',
)
transaction_direction_enum = sa.Enum(
    'credit', 'debit', name='wallet_transaction_direction_enum'
)
wallet_request_type_enum = sa.Enum(
    'deposit', 'withdrawal', name='wallet_request_type_enum'
)
wallet_request_status_enum = sa.Enum(
    'pending', 'approved', 'rejected', name='wallet_request_status_enum'
)
order_status_enum = sa.Enum(
    'pending', 'confirmed', 'processing', 'shipped', 'delivered', 'cancelled',
    name='order_status_enum',
)
payment_method_enum = sa.Enum('cash', 'wallet', name='payment_method_enum')
payment_status_enum = sa.Enum(
    'pending', 'paid', 'remaining', 'refunded', name='payment_status_enum'
)


def upgrade() -> None:
    """Upgrade schema - Create catalog, shipping, wallet, store and notification tables."""

    # Catalog collaborators
    op.create_table(
        'governments',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('sort_order', sa.Integer(), server_default='0', nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table(
        'cities',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=100), nullable=False),
        sa.Column('government_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['government_id'], ['governments.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table(
        'users',
        sa.Column('id', sa.String(length=255), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=True),
        sa.Column('type', user_type_enum, nullable=False),
        sa.Column('city_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.ForeignKeyConstraint(['city_id'], ['cities.id'], ondelete='SET NULL'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_table(
        'products',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('name', sa.String(length=255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('vendor_id', sa.String(length=255), nullable=True),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=True),
        sa.Column('is_price', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('discount', sa.Numeric(precision=5, scale=2), server_default='0', nullable=False),
        sa.Column('sizes', sa.JSON(), nullable=True),
        sa.Column('colors', sa.JSON(), nullable=True),
        sa.Column('is_active', sa.Boolean(), server_default=sa.true(), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('discount >= 0 AND discount <= 100', name='discount_percent'),
        sa.ForeignKeyConstraint(['vendor_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_products_vendor_id', 'products', ['vendor_id'])

    # Shipping lanes
    op.create_table(
        'shipping_lanes',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('from_city_id', sa.Uuid(), nullable=False),
        sa.Column('to_city_id', sa.Uuid(), nullable=False),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('price >= 0', name='non_negative_shipping_price'),
        sa.CheckConstraint('from_city_id <> to_city_id', name='distinct_route_cities'),
        sa.ForeignKeyConstraint(['from_city_id'], ['cities.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['to_city_id'], ['cities.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('from_city_id', 'to_city_id', name='unique_shipping_route')
    )
    op.create_index('ix_shipping_lanes_from_city_id', 'shipping_lanes', ['from_city_id'])
    op.create_index('ix_shipping_lanes_to_city_id', 'shipping_lanes', ['to_city_id'])

    # Wallet and ledger
    op.create_table(
        'wallets',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('balance', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('balance >= 0', name='non_negative_wallet_balance'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_wallets_user_id', 'wallets', ['user_id'], unique=True)
    op.create_table(
        'wallet_transactions',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('wallet_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('transaction_type', transaction_type_enum, nullable=False),
        sa.Column('direction', transaction_direction_enum, nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('balance_before', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('balance_after', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('reference_type', sa.String(length=50), nullable=True),
        sa.Column('reference_id', sa.String(length=255), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('amount > 0', name='positive_transaction_amount'),
        sa.CheckConstraint('balance_after >= 0', name='non_negative_balance_after'),
        sa.ForeignKeyConstraint(['wallet_id'], ['wallets.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_wallet_transactions_wallet_id', 'wallet_transactions', ['wallet_id'])
    op.create_index('ix_wallet_transactions_user_id', 'wallet_transactions', ['user_id'])
    op.create_index('ix_wallet_transactions_transaction_type', 'wallet_transactions', ['transaction_type'])
    op.create_index('ix_wallet_transactions_created_at', 'wallet_transactions', ['created_at'])
    op.create_index(
        'ix_wallet_transactions_reference',
        'wallet_transactions',
        ['reference_type', 'reference_id'],
    )
    op.create_table(
        'wallet_requests',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('wallet_id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('request_type', wallet_request_type_enum, nullable=False),
        sa.Column('status', wallet_request_status_enum, nullable=False),
        sa.Column('amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('evidence_url', sa.String(length=500), nullable=True),
        sa.Column('payout_account', sa.String(length=100), nullable=True),
        sa.Column('reviewed_by', sa.String(length=255), nullable=True),
        sa.Column('reviewed_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('rejection_reason', sa.Text(), nullable=True),
        sa.Column('transaction_id', sa.Uuid(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('amount > 0', name='positive_request_amount'),
        sa.ForeignKeyConstraint(['wallet_id'], ['wallets.id']),
        sa.ForeignKeyConstraint(['transaction_id'], ['wallet_transactions.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_wallet_requests_wallet_id', 'wallet_requests', ['wallet_id'])
    op.create_index('ix_wallet_requests_user_id', 'wallet_requests', ['user_id'])
    op.create_index('ix_wallet_requests_status', 'wallet_requests', ['status'])
    op.create_index('ix_wallet_requests_created_at', 'wallet_requests', ['created_at'])

    # Cart, orders, order items
    op.create_table(
        'carts',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('size', sa.String(length=50), server_default='', nullable=False),
        sa.Column('color', sa.String(length=50), server_default='', nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('quantity > 0', name='positive_cart_quantity'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['user_id'], ['users.id'], ondelete='CASCADE'),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint(
            'user_id', 'product_id', 'size', 'color',
            name='unique_user_product_size_color',
        )
    )
    op.create_index('ix_carts_user_id', 'carts', ['user_id'])
    op.create_table(
        'orders',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('buyer_id', sa.String(length=255), nullable=False),
        sa.Column('vendor_id', sa.String(length=255), nullable=False),
        sa.Column('status', order_status_enum, nullable=False),
        sa.Column('subtotal', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('shipping_price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('total', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('from_city_id', sa.Uuid(), nullable=True),
        sa.Column('to_city_id', sa.Uuid(), nullable=True),
        sa.Column('shipping_address', sa.Text(), nullable=True),
        sa.Column('phone', sa.String(length=20), nullable=False),
        sa.Column('payment_method', payment_method_enum, nullable=False),
        sa.Column('payment_status', payment_status_enum, nullable=False),
        sa.Column('remaining_amount', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('checkout_key', sa.String(length=100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('updated_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('total >= 0', name='non_negative_order_total'),
        sa.CheckConstraint('remaining_amount >= 0', name='non_negative_remaining'),
        sa.CheckConstraint('remaining_amount <= total', name='remaining_within_total'),
        sa.UniqueConstraint('buyer_id', 'vendor_id', 'checkout_key', name='unique_order_checkout_vendor'),
        sa.ForeignKeyConstraint(['buyer_id'], ['users.id']),
        sa.ForeignKeyConstraint(['vendor_id'], ['users.id']),
        sa.ForeignKeyConstraint(['from_city_id'], ['cities.id']),
        sa.ForeignKeyConstraint(['to_city_id'], ['cities.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_orders_buyer_id', 'orders', ['buyer_id'])
    op.create_index('ix_orders_vendor_id', 'orders', ['vendor_id'])
    op.create_index('ix_orders_buyer_checkout_key', 'orders', ['buyer_id', 'checkout_key'])
    op.create_table(
        'order_items',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('order_id', sa.Uuid(), nullable=False),
        sa.Column('product_id', sa.Uuid(), nullable=False),
        sa.Column('product_name', sa.String(length=255), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.Column('price', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('subtotal', sa.Numeric(precision=12, scale=2), nullable=False),
        sa.Column('size', sa.String(length=50), nullable=True),
        sa.Column('color', sa.String(length=50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint('quantity > 0', name='positive_item_quantity'),
        sa.ForeignKeyConstraint(['order_id'], ['orders.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['product_id'], ['products.id']),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_order_items_order_id', 'order_items', ['order_id'])

    # Notifications
    op.create_table(
        'notifications',
        sa.Column('id', sa.Uuid(), nullable=False),
        sa.Column('user_id', sa.String(length=255), nullable=False),
        sa.Column('title', sa.String(length=255), nullable=False),
        sa.Column('body', sa.Text(), nullable=False),
        sa.Column('type', sa.String(length=50), nullable=True),
        sa.Column('data', sa.JSON(), nullable=True),
        sa.Column('is_read', sa.Boolean(), nullable=False),
        sa.Column('read_at', sa.DateTime(timezone=True), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('ix_notifications_user_id', 'notifications', ['user_id'])
    op.create_index('ix_notifications_created_at', 'notifications', ['created_at'])


def downgrade() -> None:
    """Downgrade schema - Drop all marketplace tables."""
    op.drop_table('notifications')
    op.drop_table('order_items')
    op.drop_table('orders')
    op.drop_table('carts')
    op.drop_table('wallet_requests')
    op.drop_table('wallet_transactions')
    op.drop_table('wallets')
    op.drop_table('shipping_lanes')
    op.drop_table('products')
    op.drop_table('users')
    op.drop_table('cities')
    op.drop_table('governments')

    bind = op.get_bind()
    for enum in (
        payment_status_enum,
        payment_method_enum,
        order_status_enum,
        wallet_request_status_enum,
        wallet_request_type_enum,
        transaction_direction_enum,
        transaction_type_enum,
        user_type_enum,
    ):
        enum.drop(bind, checkfirst=True)
