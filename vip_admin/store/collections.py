"""Registry of store collections: table, read model and accepted write models."""

from dataclasses import dataclass

from pydantic import BaseModel

from vip_admin.core.db import Base
from vip_admin.models import records, schema


@dataclass(frozen=True)
class CollectionSpec:
    name: str
    table: type[Base]
    record_model: type[records.ListableRecord]
    # Models the store accepts for add/update; empty means read-only
    write_models: tuple[type[BaseModel], ...] = ()
    deletable: bool = False


CATEGORIES = "categories"
VIP_NUMBERS = "vipNumbers"
NUMBER_PACKS = "numberPacks"
PAYMENTS = "payments"
REFUNDS = "refunds"
ORDERS = "orders"
USERS = "users"

COLLECTIONS: dict[str, CollectionSpec] = {
    CATEGORIES: CollectionSpec(
        CATEGORIES,
        schema.Category,
        records.CategoryRecord,
        (records.CategoryForm,),
        deletable=True,
    ),
    VIP_NUMBERS: CollectionSpec(
        VIP_NUMBERS,
        schema.VipNumber,
        records.VipNumberRecord,
        (records.VipNumberForm,),
        deletable=True,
    ),
    NUMBER_PACKS: CollectionSpec(
        NUMBER_PACKS,
        schema.NumberPack,
        records.NumberPackRecord,
        (records.NumberPackForm,),
        deletable=True,
    ),
    PAYMENTS: CollectionSpec(PAYMENTS, schema.Transaction, records.TransactionRecord, deletable=True),
    REFUNDS: CollectionSpec(REFUNDS, schema.Refund, records.RefundRecord, deletable=True),
    ORDERS: CollectionSpec(
        ORDERS,
        schema.Order,
        records.OrderRecord,
        (records.OrderStatusPatch,),
        deletable=True,
    ),
    USERS: CollectionSpec(USERS, schema.Customer, records.CustomerRecord),
}


def get_collection(name: str) -> CollectionSpec:
    try:
        return COLLECTIONS[name]
    except KeyError as e:
        raise ValueError(f"Unknown collection: {name}") from e
