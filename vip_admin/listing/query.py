"""Store query constraints and the page query builder.

Constraints are plain values so a built query can be inspected (and
asserted on) before any store executes it.
"""

from dataclasses import dataclass
from datetime import datetime, time
from typing import Any, Literal

from vip_admin.listing.filters import FilterField, FilterSet
from vip_admin.models.pagination import PageCursor

CREATED_AT = "created_at"
RECORD_ID = "id"


@dataclass(frozen=True)
class Where:
    field: str
    op: Literal["==", ">=", "<="]
    value: Any


@dataclass(frozen=True)
class OrderBy:
    field: str
    direction: Literal["asc", "desc"] = "desc"


@dataclass(frozen=True)
class StartAfter:
    cursor: PageCursor


@dataclass(frozen=True)
class Limit:
    count: int


Constraint = Where | OrderBy | StartAfter | Limit


@dataclass(frozen=True)
class StoreQuery:
    collection: str
    constraints: tuple[Constraint, ...] = ()

    @property
    def wheres(self) -> list[Where]:
        return [c for c in self.constraints if isinstance(c, Where)]

    @property
    def orderings(self) -> list[OrderBy]:
        return [c for c in self.constraints if isinstance(c, OrderBy)]

    @property
    def start_after(self) -> PageCursor | None:
        return next((c.cursor for c in self.constraints if isinstance(c, StartAfter)), None)

    @property
    def limit(self) -> int | None:
        return next((c.count for c in self.constraints if isinstance(c, Limit)), None)

    def index_hint(self) -> str:
        """Composite index a filtered, ordered query needs, e.g.
        ``vipNumbers(status, created_at DESC, id DESC)``."""
        parts: list[str] = []
        for where in self.wheres:
            if where.field not in parts and where.field != CREATED_AT:
                parts.append(where.field)
        parts.extend(f"{o.field} {o.direction.upper()}" for o in self.orderings)
        return f"{self.collection}({', '.join(parts)})"


def build_page_query(
    collection: str,
    filter_fields: tuple[FilterField, ...],
    filters: FilterSet,
    cursor: PageCursor | None,
    page_size: int,
) -> StoreQuery:
    """Translate a filter set and cursor into one bounded store query.

    Constraint order is fixed: equality filters in declared order, then the
    creation-date range, then ``created_at DESC, id DESC``, then the cursor,
    then the limit. Amount bounds are not sent to the store; see
    ``apply_post_filters``.
    """
    if page_size <= 0:
        raise ValueError("page_size must be a positive integer")

    constraints: list[Constraint] = []
    for f in filter_fields:
        if f.kind == "equality" and f.name in filters:
            constraints.append(Where(f.field, "==", filters[f.name]))
    for f in filter_fields:
        if f.name not in filters:
            continue
        if f.kind == "date_from":
            constraints.append(Where(CREATED_AT, ">=", datetime.combine(filters[f.name], time.min)))
        elif f.kind == "date_to":
            constraints.append(Where(CREATED_AT, "<=", datetime.combine(filters[f.name], time.max)))

    constraints.append(OrderBy(CREATED_AT, "desc"))
    # id breaks ties between records created in the same instant
    constraints.append(OrderBy(RECORD_ID, "desc"))
    if cursor is not None:
        constraints.append(StartAfter(cursor))
    constraints.append(Limit(page_size))
    return StoreQuery(collection, tuple(constraints))
