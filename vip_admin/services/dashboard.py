"""Headline numbers for the dashboard overview."""

from dataclasses import dataclass
from datetime import UTC, datetime

from vip_admin.listing.query import CREATED_AT, Where
from vip_admin.store.base import DocumentStore
from vip_admin.store.collections import NUMBER_PACKS, ORDERS, PAYMENTS, REFUNDS, USERS, VIP_NUMBERS


@dataclass(frozen=True)
class DashboardStats:
    products_in_stock: int
    orders_this_month: int
    new_customers: int
    transactions: int
    refunds: int


def start_of_month(now: datetime | None = None) -> datetime:
    now = now or datetime.now(UTC).replace(tzinfo=None)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


async def load_dashboard_stats(store: DocumentStore, now: datetime | None = None) -> DashboardStats:
    """Count available products and this month's activity.

    Products in stock is available VIP numbers plus available packs.
    """
    available = (Where("status", "==", "available"),)
    this_month = (Where(CREATED_AT, ">=", start_of_month(now)),)
    return DashboardStats(
        products_in_stock=await store.count(VIP_NUMBERS, available)
        + await store.count(NUMBER_PACKS, available),
        orders_this_month=await store.count(ORDERS, this_month),
        new_customers=await store.count(USERS, this_month),
        transactions=await store.count(PAYMENTS),
        refunds=await store.count(REFUNDS),
    )
