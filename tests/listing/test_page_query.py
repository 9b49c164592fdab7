"""Tests for filter parsing and page query construction."""

from datetime import date, datetime, time

import pytest

from vip_admin.core.errors import RecordValidationError
from vip_admin.listing.entities import ORDERS, TRANSACTIONS, VIP_NUMBERS
from vip_admin.listing.filters import FilterSet, parse_filters
from vip_admin.listing.query import Limit, OrderBy, StartAfter, StoreQuery, Where, build_page_query
from vip_admin.models.pagination import PageCursor


class TestFilterSet:
    def test_blank_and_all_values_are_dropped(self):
        assert FilterSet(status="", method="all", category=None) == FilterSet()
        assert FilterSet(status="").fingerprint() == FilterSet().fingerprint()

    def test_equal_sets_hash_alike_regardless_of_order(self):
        a = FilterSet({"status": "sold", "category": "gold"})
        b = FilterSet(category="gold", status="sold")
        assert a == b
        assert hash(a) == hash(b)
        assert a.fingerprint() == b.fingerprint()

    def test_query_params_render_dates_as_iso(self):
        filters = FilterSet(date_from=date(2026, 5, 1), status="sold")
        assert filters.to_query_params() == {"date_from": "2026-05-01", "status": "sold"}


class TestParseFilters:
    def test_parses_choices_and_dates_ignoring_unknown_names(self):
        filters = parse_filters(
            VIP_NUMBERS.filter_fields,
            {"status": "sold", "date_from": "2026-05-01", "q": "ignored", "category": "all"},
        )
        assert dict(filters) == {"status": "sold", "date_from": date(2026, 5, 1)}

    def test_rejects_unknown_choice(self):
        with pytest.raises(RecordValidationError):
            parse_filters(VIP_NUMBERS.filter_fields, {"status": "stolen"})

    def test_rejects_malformed_date(self):
        with pytest.raises(RecordValidationError):
            parse_filters(ORDERS.filter_fields, {"date_to": "05/01/2026"})

    def test_rejects_inverted_date_range(self):
        with pytest.raises(RecordValidationError):
            parse_filters(ORDERS.filter_fields, {"date_from": "2026-05-02", "date_to": "2026-05-01"})

    def test_free_text_filter_accepts_any_value(self):
        filters = parse_filters(VIP_NUMBERS.filter_fields, {"category": " platinum "})
        assert filters["category"] == "platinum"

    def test_parses_amount_bounds(self):
        filters = parse_filters(ORDERS.filter_fields, {"min_amount": "0", "max_amount": "2,500"})
        assert dict(filters) == {"max_amount": 2500.0, "min_amount": 0.0}

    def test_rejects_non_numeric_amount(self):
        with pytest.raises(RecordValidationError):
            parse_filters(ORDERS.filter_fields, {"min_amount": "lots"})

    def test_rejects_inverted_amount_range(self):
        with pytest.raises(RecordValidationError):
            parse_filters(ORDERS.filter_fields, {"min_amount": "500", "max_amount": "100"})


class TestBuildPageQuery:
    def test_unfiltered_first_page(self):
        query = build_page_query("payments", TRANSACTIONS.filter_fields, FilterSet(), None, 10)
        assert query == StoreQuery(
            "payments",
            (OrderBy("created_at", "desc"), OrderBy("id", "desc"), Limit(10)),
        )

    def test_constraint_order_is_fixed(self):
        cursor = PageCursor(last_id="abc", last_created_at=datetime(2026, 5, 3, 9, 30))
        filters = FilterSet(
            date_to=date(2026, 5, 31),
            category="gold",
            date_from=date(2026, 5, 1),
            status="available",
        )

        query = build_page_query("vipNumbers", VIP_NUMBERS.filter_fields, filters, cursor, 25)

        assert query.constraints == (
            Where("status", "==", "available"),
            Where("category_slug", "==", "gold"),
            Where("created_at", ">=", datetime.combine(date(2026, 5, 1), time.min)),
            Where("created_at", "<=", datetime.combine(date(2026, 5, 31), time.max)),
            OrderBy("created_at", "desc"),
            OrderBy("id", "desc"),
            StartAfter(cursor),
            Limit(25),
        )

    def test_filter_name_maps_to_record_field(self):
        query = build_page_query("orders", ORDERS.filter_fields, FilterSet(status="paid"), None, 10)
        assert query.wheres == [Where("order_status", "==", "paid")]

    def test_amount_bounds_are_not_sent_to_the_store(self):
        filters = FilterSet(status="paid", min_amount=100.0, max_amount=900.0)
        query = build_page_query("orders", ORDERS.filter_fields, filters, None, 10)
        assert query.wheres == [Where("order_status", "==", "paid")]
        assert query.limit == 10

    def test_index_hint_names_filter_and_ordering_fields(self):
        filters = FilterSet(status="paid", method="upi")
        query = build_page_query("payments", TRANSACTIONS.filter_fields, filters, None, 10)
        assert query.index_hint() == "payments(status, method, created_at DESC, id DESC)"

    def test_rejects_non_positive_page_size(self):
        with pytest.raises(ValueError):
            build_page_query("payments", (), FilterSet(), None, 0)
