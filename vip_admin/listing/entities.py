"""Per-entity configuration for the generic list views."""

from dataclasses import dataclass
from typing import Literal

from fastapi import HTTPException, status
from pydantic import BaseModel

from vip_admin.listing.filters import FilterField
from vip_admin.listing.mutations import UniqueField
from vip_admin.models import records
from vip_admin.store import collections

ColumnKind = Literal["text", "mono", "currency", "datetime", "badge", "bool", "count"]


@dataclass(frozen=True)
class Column:
    key: str
    label: str
    kind: ColumnKind = "text"


@dataclass(frozen=True)
class EntitySpec:
    slug: str
    title: str
    description: str
    collection: str
    search_fields: tuple[str, ...]
    search_placeholder: str
    columns: tuple[Column, ...]
    filter_fields: tuple[FilterField, ...] = ()
    form_model: type[BaseModel] | None = None
    unique_field: UniqueField | None = None
    deletable: bool = False
    label_field: str = "id"
    noun: str = "Record"

    @property
    def editable(self) -> bool:
        return self.form_model is not None


def status_variant(value: str | None) -> str:
    """Badge variant for a status string."""
    lowered = (value or "").lower()
    if lowered in {"available", "succeeded", "paid", "completed", "captured", "refunded", "delivered"}:
        return "default"
    if lowered in {"pending", "processing", "booked", "partially-sold", "created", "shipped", "confirmed"}:
        return "secondary"
    if lowered in {"failed", "cancelled", "disputed", "sold"}:
        return "destructive"
    return "outline"


_DATE_RANGE = (
    FilterField("date_from", "created_at", "date_from", label="From"),
    FilterField("date_to", "created_at", "date_to", label="To"),
)

VIP_NUMBERS = EntitySpec(
    slug="vip-numbers",
    title="VIP Numbers",
    description="Individual VIP numbers, newest first.",
    collection=collections.VIP_NUMBERS,
    search_fields=("number",),
    search_placeholder="Search numbers...",
    columns=(
        Column("number", "Number", "mono"),
        Column("price", "Price", "currency"),
        Column("status", "Status", "badge"),
        Column("category_slug", "Category"),
        Column("is_vip", "VIP", "bool"),
        Column("created_at", "Created", "datetime"),
    ),
    filter_fields=(
        FilterField("status", "status", choices=("available", "sold", "booked"), label="Status"),
        FilterField("category", "category_slug", label="Category"),
        *_DATE_RANGE,
    ),
    form_model=records.VipNumberForm,
    unique_field=UniqueField("number", "VIP number"),
    deletable=True,
    label_field="number",
    noun="VIP number",
)

NUMBER_PACKS = EntitySpec(
    slug="number-packs",
    title="Number Packs",
    description="Bundles of numbers sold together, newest first.",
    collection=collections.NUMBER_PACKS,
    search_fields=("name",),
    search_placeholder="Search packs...",
    columns=(
        Column("name", "Pack Name"),
        Column("items_count", "Items", "count"),
        Column("pack_price", "Pack Price", "currency"),
        Column("status", "Status", "badge"),
        Column("category_slug", "Category"),
        Column("created_at", "Created", "datetime"),
    ),
    filter_fields=(
        FilterField(
            "status", "status", choices=("available", "sold", "partially-sold"), label="Status"
        ),
        FilterField("category", "category_slug", label="Category"),
    ),
    form_model=records.NumberPackForm,
    deletable=True,
    label_field="name",
    noun="Number pack",
)

TRANSACTIONS = EntitySpec(
    slug="transactions",
    title="Transaction Log",
    description="Payment transactions from the 'payments' collection, newest first.",
    collection=collections.PAYMENTS,
    search_fields=("payment_id", "order_id", "email"),
    search_placeholder="Search by payment ID, order ID, email...",
    columns=(
        Column("payment_id", "Payment ID", "mono"),
        Column("order_id", "Order ID", "mono"),
        Column("email", "Email"),
        Column("amount", "Amount", "currency"),
        Column("method", "Method"),
        Column("status", "Status", "badge"),
        Column("created_at", "Date", "datetime"),
    ),
    filter_fields=(
        FilterField(
            "status",
            "status",
            choices=("succeeded", "paid", "captured", "pending", "processing", "failed", "cancelled"),
            label="Status",
        ),
        FilterField("method", "method", choices=("card", "upi", "netbanking", "wallet"), label="Method"),
    ),
    deletable=True,
    label_field="payment_id",
    noun="Transaction",
)

REFUNDS = EntitySpec(
    slug="refunds",
    title="Refund Log",
    description="Refund records from the 'refunds' collection, newest first.",
    collection=collections.REFUNDS,
    search_fields=("refund_id", "payment_id", "order_id"),
    search_placeholder="Search by refund, payment or order ID...",
    columns=(
        Column("refund_id", "Refund ID", "mono"),
        Column("payment_id", "Payment ID", "mono"),
        Column("order_id", "Order ID", "mono"),
        Column("amount", "Amount", "currency"),
        Column("status", "Status", "badge"),
        Column("created_at", "Date", "datetime"),
    ),
    filter_fields=(
        FilterField(
            "status",
            "status",
            choices=("refunded", "succeeded", "pending", "processing", "failed", "cancelled"),
            label="Status",
        ),
    ),
    deletable=True,
    label_field="refund_id",
    noun="Refund",
)

ORDERS = EntitySpec(
    slug="orders",
    title="Orders",
    description="Customer orders, newest first.",
    collection=collections.ORDERS,
    search_fields=("order_id", "customer_name", "customer_email"),
    search_placeholder="Search by order ID, customer...",
    columns=(
        Column("order_id", "Order ID", "mono"),
        Column("customer_name", "Customer"),
        Column("customer_email", "Email"),
        Column("amount", "Amount", "currency"),
        Column("order_status", "Status", "badge"),
        Column("created_at", "Date", "datetime"),
    ),
    filter_fields=(
        FilterField("status", "order_status", choices=records.ORDER_STATUSES, label="Status"),
        *_DATE_RANGE,
        FilterField("min_amount", "amount", "amount_min", label="Min Amount"),
        FilterField("max_amount", "amount", "amount_max", label="Max Amount"),
    ),
    deletable=True,
    label_field="order_id",
    noun="Order",
)

CUSTOMERS = EntitySpec(
    slug="customers",
    title="Customers",
    description="Registered storefront users, newest first.",
    collection=collections.USERS,
    search_fields=("name", "email"),
    search_placeholder="Search by name or email...",
    columns=(
        Column("name", "Name"),
        Column("email", "Email"),
        Column("phone", "Phone"),
        Column("created_at", "Registered", "datetime"),
    ),
    label_field="email",
    noun="Customer",
)

ENTITIES: dict[str, EntitySpec] = {
    spec.slug: spec for spec in (VIP_NUMBERS, NUMBER_PACKS, TRANSACTIONS, REFUNDS, ORDERS, CUSTOMERS)
}


def get_entity(slug: str) -> EntitySpec:
    """Look up an entity by its URL slug, 404 when unknown."""
    spec = ENTITIES.get(slug)
    if spec is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unknown list: {slug}")
    return spec
