"""Initial schema setup

Revision ID: 001_initial_schema
Revises:
Create Date: 2026-10-19 09:00:00.000000

"""
from collections.abc import Sequence

import sqlalchemy as sa

from alembic import op

# revision identifiers, used by Alembic.
revision: str = '001_initial_schema'
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table('categories',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('slug', sa.String(length=200), nullable=False),
        sa.Column('order', sa.Integer(), nullable=False, server_default='0'),
        sa.Column('type', sa.String(length=20), nullable=False),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_categories_slug'), 'categories', ['slug'], unique=False)
    op.create_index(op.f('ix_categories_type'), 'categories', ['type'], unique=False)
    op.create_index('idx_categories_order_created', 'categories', ['order', 'created_at'], unique=False)

    op.create_table('vip_numbers',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('number', sa.String(length=32), nullable=False),
        sa.Column('price', sa.Integer(), nullable=False),
        sa.Column('original_price', sa.Integer(), nullable=True),
        sa.Column('discount', sa.Float(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='available'),
        sa.Column('category_slug', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_hint', sa.String(length=50), nullable=True),
        sa.Column('is_vip', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('sum_of_digits', sa.String(length=8), nullable=True),
        sa.Column('total_digits', sa.String(length=8), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index(op.f('ix_vip_numbers_number'), 'vip_numbers', ['number'], unique=False)
    op.create_index('idx_vip_numbers_created', 'vip_numbers', ['created_at', 'id'], unique=False)
    op.create_index('idx_vip_numbers_status_created', 'vip_numbers', ['status', 'created_at', 'id'], unique=False)
    op.create_index('idx_vip_numbers_category_created', 'vip_numbers', ['category_slug', 'created_at', 'id'], unique=False)

    op.create_table('number_packs',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=False),
        sa.Column('numbers', sa.JSON(), nullable=False),
        sa.Column('total_original_price', sa.Float(), nullable=True),
        sa.Column('status', sa.String(length=20), nullable=False, server_default='available'),
        sa.Column('category_slug', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_hint', sa.String(length=50), nullable=True),
        sa.Column('is_vip_pack', sa.Boolean(), nullable=False, server_default=sa.false()),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_number_packs_created', 'number_packs', ['created_at', 'id'], unique=False)
    op.create_index('idx_number_packs_status_created', 'number_packs', ['status', 'created_at', 'id'], unique=False)
    op.create_index('idx_number_packs_category_created', 'number_packs', ['category_slug', 'created_at', 'id'], unique=False)

    op.create_table('payments',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('payment_id', sa.String(length=100), nullable=False),
        sa.Column('order_id', sa.String(length=100), nullable=False),
        sa.Column('amount', sa.Float(), nullable=True),
        sa.Column('currency', sa.String(length=8), nullable=False, server_default='INR'),
        sa.Column('status', sa.String(length=30), nullable=True),
        sa.Column('method', sa.String(length=30), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=True),
        sa.Column('provider', sa.String(length=50), nullable=True),
        sa.Column('user_id', sa.String(length=100), nullable=True),
        sa.Column('verified', sa.Boolean(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_payments_created', 'payments', ['created_at', 'id'], unique=False)
    op.create_index('idx_payments_status_created', 'payments', ['status', 'created_at', 'id'], unique=False)
    op.create_index('idx_payments_method_created', 'payments', ['method', 'created_at', 'id'], unique=False)

    op.create_table('refunds',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('refund_id', sa.String(length=100), nullable=False),
        sa.Column('payment_id', sa.String(length=100), nullable=False),
        sa.Column('order_id', sa.String(length=100), nullable=False),
        sa.Column('amount', sa.Float(), nullable=True),
        sa.Column('currency', sa.String(length=8), nullable=False, server_default='INR'),
        sa.Column('status', sa.String(length=30), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_refunds_created', 'refunds', ['created_at', 'id'], unique=False)
    op.create_index('idx_refunds_status_created', 'refunds', ['status', 'created_at', 'id'], unique=False)

    op.create_table('orders',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('order_id', sa.String(length=100), nullable=False),
        sa.Column('customer_name', sa.String(length=200), nullable=True),
        sa.Column('customer_email', sa.String(length=255), nullable=True),
        sa.Column('amount', sa.Float(), nullable=True),
        sa.Column('currency', sa.String(length=8), nullable=False, server_default='INR'),
        sa.Column('order_status', sa.String(length=30), nullable=False, server_default='created'),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_orders_created', 'orders', ['created_at', 'id'], unique=False)
    op.create_index('idx_orders_status_created', 'orders', ['order_status', 'created_at', 'id'], unique=False)

    op.create_table('users',
        sa.Column('id', sa.String(length=32), nullable=False),
        sa.Column('name', sa.String(length=200), nullable=True),
        sa.Column('email', sa.String(length=255), nullable=False),
        sa.Column('phone', sa.String(length=32), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_users_created', 'users', ['created_at', 'id'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_users_created', table_name='users')
    op.drop_table('users')
    op.drop_index('idx_orders_status_created', table_name='orders')
    op.drop_index('idx_orders_created', table_name='orders')
    op.drop_table('orders')
    op.drop_index('idx_refunds_status_created', table_name='refunds')
    op.drop_index('idx_refunds_created', table_name='refunds')
    op.drop_table('refunds')
    op.drop_index('idx_payments_method_created', table_name='payments')
    op.drop_index('idx_payments_status_created', table_name='payments')
    op.drop_index('idx_payments_created', table_name='payments')
    op.drop_table('payments')
    op.drop_index('idx_number_packs_category_created', table_name='number_packs')
    op.drop_index('idx_number_packs_status_created', table_name='number_packs')
    op.drop_index('idx_number_packs_created', table_name='number_packs')
    op.drop_table('number_packs')
    op.drop_index('idx_vip_numbers_category_created', table_name='vip_numbers')
    op.drop_index('idx_vip_numbers_status_created', table_name='vip_numbers')
    op.drop_index('idx_vip_numbers_created', table_name='vip_numbers')
    op.drop_index(op.f('ix_vip_numbers_number'), table_name='vip_numbers')
    op.drop_table('vip_numbers')
    op.drop_index('idx_categories_order_created', table_name='categories')
    op.drop_index(op.f('ix_categories_type'), table_name='categories')
    op.drop_index(op.f('ix_categories_slug'), table_name='categories')
    op.drop_table('categories')
