"""Active filter sets for list views."""

from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from datetime import date
from typing import Any, Literal

from vip_admin.core.errors import RecordValidationError
from vip_admin.models.records import ListableRecord
from vip_admin.utils.pagination import hash_filters
from vip_admin.utils.text import parse_amount

# Select inputs post "all" for "no filter"
_BLANK_VALUES = ("", "all")

FilterKind = Literal["equality", "date_from", "date_to", "amount_min", "amount_max"]

# Applied to each fetched page rather than sent to the store
POST_FILTER_KINDS = ("amount_min", "amount_max")


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    return isinstance(value, str) and value.strip().lower() in _BLANK_VALUES


class FilterSet(Mapping[str, Any]):
    """Immutable mapping of filter name to value.

    Blank values are dropped on construction, so ``FilterSet(status="")``
    equals ``FilterSet()`` and both have the same fingerprint.
    """

    __slots__ = ("_values",)

    def __init__(self, values: Mapping[str, Any] | None = None, **kwargs: Any) -> None:
        merged = {**(values or {}), **kwargs}
        self._values = {k: v for k, v in sorted(merged.items()) if not _is_blank(v)}

    def __getitem__(self, key: str) -> Any:
        return self._values[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __hash__(self) -> int:
        return hash(tuple(self._values.items()))

    def __repr__(self) -> str:
        return f"FilterSet({self._values!r})"

    def fingerprint(self) -> str:
        return hash_filters(self._values)

    def to_query_params(self) -> dict[str, str]:
        return {
            k: v.isoformat() if isinstance(v, date) else str(v) for k, v in self._values.items()
        }


@dataclass(frozen=True)
class FilterField:
    """A filter an entity list accepts.

    Attributes:
        name: form/query parameter name
        field: record field the filter constrains
        kind: equality match, an inclusive bound on the creation date, or an
            inclusive bound on a numeric field checked after the fetch
        choices: allowed values for equality filters (empty = free text)
        label: shown next to the input
    """

    name: str
    field: str
    kind: FilterKind = "equality"
    choices: tuple[str, ...] = ()
    label: str = ""

    def parse(self, raw: Any) -> Any:
        if _is_blank(raw):
            return None
        if self.kind == "equality":
            value = str(raw).strip()
            if self.choices and value not in self.choices:
                raise RecordValidationError(
                    f"Unknown {self.label or self.name}: {value}",
                    details={"filter": self.name, "value": value},
                )
            return value
        if self.kind in POST_FILTER_KINDS:
            try:
                return parse_amount(raw)
            except ValueError as e:
                raise RecordValidationError(
                    f"{self.label or self.name} must be a number.",
                    details={"filter": self.name, "value": str(raw)},
                ) from e
        if isinstance(raw, date):
            return raw
        try:
            return date.fromisoformat(str(raw).strip())
        except ValueError as e:
            raise RecordValidationError(
                f"{self.label or self.name} must be a date (YYYY-MM-DD).",
                details={"filter": self.name, "value": str(raw)},
            ) from e


def parse_filters(fields: tuple[FilterField, ...], raw: Mapping[str, Any]) -> FilterSet:
    """Build a FilterSet from submitted form/query values.

    Unknown parameter names are ignored; a date or amount range whose lower
    bound is above its upper bound is rejected.

    Raises:
        RecordValidationError: for out-of-range choices, malformed dates or
            amounts that are not numbers.
    """
    values = {f.name: f.parse(raw.get(f.name)) for f in fields}

    def bound(kind: FilterKind) -> Any:
        return next((values[f.name] for f in fields if f.kind == kind), None)

    date_from, date_to = bound("date_from"), bound("date_to")
    if date_from and date_to and date_from > date_to:
        raise RecordValidationError("The start date must be on or before the end date.")
    amount_min, amount_max = bound("amount_min"), bound("amount_max")
    if amount_min is not None and amount_max is not None and amount_min > amount_max:
        raise RecordValidationError("The minimum amount must not exceed the maximum amount.")
    return FilterSet(values)


def apply_post_filters(
    fields: tuple[FilterField, ...], filters: FilterSet, records: list[ListableRecord]
) -> list[ListableRecord]:
    """Keep the records of a fetched page that satisfy the amount bounds.

    A record with no value for a bounded field counts as 0.
    """
    bounds = [
        (f, filters[f.name]) for f in fields if f.kind in POST_FILTER_KINDS and f.name in filters
    ]
    if not bounds:
        return list(records)

    def keep(record: ListableRecord) -> bool:
        for f, limit in bounds:
            value = getattr(record, f.field, None) or 0
            if f.kind == "amount_min" and value < limit:
                return False
            if f.kind == "amount_max" and value > limit:
                return False
        return True

    return [record for record in records if keep(record)]
