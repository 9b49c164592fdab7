"""ORM tables backing the store collections.

Each table mirrors one storefront collection. ``id`` is assigned by the
store on insert and ``created_at`` is stamped there too; both are the
pagination keys, so every filterable table carries a composite index that
ends in ``(created_at, id)``.
"""

from sqlalchemy import JSON, Boolean, Column, DateTime, Float, Index, Integer, String, Text

from vip_admin.core.db import Base


class Category(Base):
    __tablename__ = "categories"

    id = Column(String(32), primary_key=True)
    title = Column(String(200), nullable=False)
    slug = Column(String(200), nullable=False, index=True)
    order = Column(Integer, nullable=False, default=0)
    type = Column(String(20), nullable=False, index=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    __table_args__ = (Index("idx_categories_order_created", "order", "created_at"),)


class VipNumber(Base):
    __tablename__ = "vip_numbers"

    id = Column(String(32), primary_key=True)
    number = Column(String(32), nullable=False, index=True)
    price = Column(Integer, nullable=False)
    original_price = Column(Integer, nullable=True)
    discount = Column(Float, nullable=True)
    status = Column(String(20), nullable=False, default="available")
    category_slug = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    image_hint = Column(String(50), nullable=True)
    is_vip = Column(Boolean, nullable=False, default=False)
    sum_of_digits = Column(String(8), nullable=True)
    total_digits = Column(String(8), nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_vip_numbers_created", "created_at", "id"),
        Index("idx_vip_numbers_status_created", "status", "created_at", "id"),
        Index("idx_vip_numbers_category_created", "category_slug", "created_at", "id"),
    )


class NumberPack(Base):
    __tablename__ = "number_packs"

    id = Column(String(32), primary_key=True)
    name = Column(String(200), nullable=False)
    # [{"number": "...", "price": 0.0, "original_vip_number_id": "..."}]
    numbers = Column(JSON, nullable=False, default=list)
    total_original_price = Column(Float, nullable=True)
    status = Column(String(20), nullable=False, default="available")
    category_slug = Column(String(200), nullable=False)
    description = Column(Text, nullable=True)
    image_hint = Column(String(50), nullable=True)
    is_vip_pack = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_number_packs_created", "created_at", "id"),
        Index("idx_number_packs_status_created", "status", "created_at", "id"),
        Index("idx_number_packs_category_created", "category_slug", "created_at", "id"),
    )


class Transaction(Base):
    """Payment record written by the storefront checkout."""

    __tablename__ = "payments"

    id = Column(String(32), primary_key=True)
    payment_id = Column(String(100), nullable=False)
    order_id = Column(String(100), nullable=False)
    amount = Column(Float, nullable=True)
    currency = Column(String(8), nullable=False, default="INR")
    status = Column(String(30), nullable=True)
    method = Column(String(30), nullable=True)
    email = Column(String(255), nullable=True)
    provider = Column(String(50), nullable=True)
    user_id = Column(String(100), nullable=True)
    verified = Column(Boolean, nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_payments_created", "created_at", "id"),
        Index("idx_payments_status_created", "status", "created_at", "id"),
        Index("idx_payments_method_created", "method", "created_at", "id"),
    )


class Refund(Base):
    __tablename__ = "refunds"

    id = Column(String(32), primary_key=True)
    refund_id = Column(String(100), nullable=False)
    payment_id = Column(String(100), nullable=False)
    order_id = Column(String(100), nullable=False)
    amount = Column(Float, nullable=True)
    currency = Column(String(8), nullable=False, default="INR")
    status = Column(String(30), nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_refunds_created", "created_at", "id"),
        Index("idx_refunds_status_created", "status", "created_at", "id"),
    )


class Order(Base):
    __tablename__ = "orders"

    id = Column(String(32), primary_key=True)
    order_id = Column(String(100), nullable=False)
    customer_name = Column(String(200), nullable=True)
    customer_email = Column(String(255), nullable=True)
    amount = Column(Float, nullable=True)
    currency = Column(String(8), nullable=False, default="INR")
    order_status = Column(String(30), nullable=False, default="created")
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    __table_args__ = (
        Index("idx_orders_created", "created_at", "id"),
        Index("idx_orders_status_created", "order_status", "created_at", "id"),
    )


class Customer(Base):
    __tablename__ = "users"

    id = Column(String(32), primary_key=True)
    name = Column(String(200), nullable=True)
    email = Column(String(255), nullable=False)
    phone = Column(String(32), nullable=True)
    created_at = Column(DateTime, nullable=False)
    updated_at = Column(DateTime, nullable=True)

    __table_args__ = (Index("idx_users_created", "created_at", "id"),)
