"""Helpers for the VIP number and number pack forms."""

from typing import Any

from vip_admin.core.errors import RecordValidationError
from vip_admin.listing.query import OrderBy, StoreQuery, Where
from vip_admin.models.records import NumberPackRecord, VipNumberRecord
from vip_admin.store.base import DocumentStore
from vip_admin.store.collections import VIP_NUMBERS


async def available_vip_numbers(store: DocumentStore) -> list[VipNumberRecord]:
    """Available VIP numbers for the pack item picker, ordered by number."""
    query = StoreQuery(
        VIP_NUMBERS,
        (Where("status", "==", "available"), OrderBy("number", "asc")),
    )
    return await store.query(query)


def parse_pack_items(text: str, picker: list[VipNumberRecord] | None = None) -> list[dict[str, Any]]:
    """Parse one ``number, price`` pair per line into pack item dicts.

    Blank lines are skipped. When a number matches an available VIP number
    from the picker, its id is linked as ``original_vip_number_id``.

    Raises:
        RecordValidationError: for a line without both parts.
    """
    by_number = {record.number: record.id for record in picker or []}
    items = []
    for line_no, line in enumerate(text.splitlines(), start=1):
        if not line.strip():
            continue
        number, sep, price = line.rpartition(",")
        if not sep or not number.strip():
            raise RecordValidationError(
                f'Line {line_no}: expected "number, price", got "{line.strip()}".',
                details={"fields": {"numbers": "Each line needs a number and a price."}},
            )
        number = number.strip()
        items.append(
            {
                "number": number,
                "price": price.strip(),
                "original_vip_number_id": by_number.get(number),
            }
        )
    return items


def format_pack_items(pack: NumberPackRecord) -> str:
    """Inverse of ``parse_pack_items`` for pre-filling the edit form."""
    return "\n".join(f"{item.number}, {_plain(item.price)}" for item in pack.numbers)


def _plain(price: float) -> str:
    return str(int(price)) if price.is_integer() else str(price)
