"""Tests for the generic list pages: paging, filters, search, delete."""

from datetime import datetime

import pytest

from vip_admin.auth.session import ADMIN_SESSION_COOKIE, session_manager
from vip_admin.models import schema


@pytest.fixture
def twelve_numbers(db_session, make_vip_row):
    db_session.add_all([make_vip_row(i, status="sold" if i % 4 == 0 else "available") for i in range(12)])
    db_session.commit()


def test_first_page_renders_newest_rows(admin_client, twelve_numbers):
    response = admin_client.get("/admin/vip-numbers")

    assert response.status_code == 200
    assert response.headers["X-Has-More"] == "true"
    assert "9876500011" in response.text
    assert "9876500002" in response.text
    assert "9876500001" not in response.text
    assert 'id="list-sentinel"' in response.text


def test_unknown_entity_is_404(admin_client):
    assert admin_client.get("/admin/widgets").status_code == 404


def test_sentinel_loads_next_page_then_stops(admin_client, twelve_numbers):
    admin_client.get("/admin/vip-numbers")

    response = admin_client.post("/admin/vip-numbers/sentinel", data={"visible": "true"})

    assert response.status_code == 200
    assert response.headers["X-Has-More"] == "false"
    assert "9876500001" in response.text
    assert "9876500000" in response.text

    exhausted = admin_client.post("/admin/vip-numbers/sentinel", data={"visible": "true"})
    assert exhausted.status_code == 204
    assert exhausted.headers["X-Has-More"] == "false"


def test_hidden_sentinel_does_not_load(admin_client, twelve_numbers):
    admin_client.get("/admin/vip-numbers")

    response = admin_client.post("/admin/vip-numbers/sentinel", data={"visible": "false"})

    assert response.status_code == 204
    assert response.headers["X-Has-More"] == "true"


def test_filters_reload_from_first_page(admin_client, twelve_numbers):
    response = admin_client.post("/admin/vip-numbers/filters", data={"status": "sold"})

    assert response.status_code == 200
    assert "9876500008" in response.text
    assert "9876500004" in response.text
    assert "9876500011" not in response.text
    assert response.headers["X-Has-More"] == "false"

    cleared = admin_client.post("/admin/vip-numbers/filters", data={"status": "all"})
    assert "9876500011" in cleared.text


def test_invalid_filter_value_shows_notice(admin_client, twelve_numbers):
    response = admin_client.post("/admin/vip-numbers/filters", data={"date_from": "not-a-date"})

    assert "Invalid Filter" in response.text


def test_search_narrows_loaded_rows_only(admin_client, twelve_numbers, store, monkeypatch):
    admin_client.get("/admin/vip-numbers")

    async def no_queries(query):
        raise AssertionError("search must not query the store")

    monkeypatch.setattr(store, "query", no_queries)

    response = admin_client.get("/admin/vip-numbers/rows", params={"q": "00011"})

    assert response.status_code == 200
    assert "9876500011" in response.text
    assert "9876500010" not in response.text

    # Rows from the unloaded second page are never searched
    missing = admin_client.get("/admin/vip-numbers/rows", params={"q": "9876500001"})
    assert "match your search" in missing.text


def test_refresh_clears_search_and_reports(admin_client, twelve_numbers, db_session, make_vip_row):
    admin_client.get("/admin/vip-numbers/rows", params={"q": "00011"})
    db_session.add(make_vip_row(50))
    db_session.commit()

    response = admin_client.post("/admin/vip-numbers/refresh")

    assert "9876500050" in response.text
    assert "9876500010" in response.text
    assert "Refreshed" in response.text


def test_confirmed_delete_removes_row(admin_client, twelve_numbers, session_factory):
    admin_client.get("/admin/vip-numbers")

    response = admin_client.post("/admin/vip-numbers/vip011/delete", data={"confirmed": "true"})

    assert response.status_code == 200
    assert "VIP number Deleted" in response.text
    assert "/admin/vip-numbers/vip011/delete" not in response.text
    with session_factory() as db:
        assert db.get(schema.VipNumber, "vip011") is None


def test_unconfirmed_delete_keeps_row(admin_client, twelve_numbers, session_factory):
    response = admin_client.post("/admin/vip-numbers/vip011/delete")

    assert "9876500011" in response.text
    with session_factory() as db:
        assert db.get(schema.VipNumber, "vip011") is not None


def test_customers_cannot_be_deleted(admin_client, db_session, session_factory):
    db_session.add(schema.Customer(id="u1", email="a@b.test", created_at=datetime(2026, 3, 1)))
    db_session.commit()

    admin_client.post("/admin/customers/u1/delete", data={"confirmed": "true"})

    with session_factory() as db:
        assert db.get(schema.Customer, "u1") is not None


def test_mark_order_delivered(admin_client, db_session, session_factory):
    db_session.add(
        schema.Order(id="o1", order_id="ORD-1", order_status="paid", created_at=datetime(2026, 3, 2))
    )
    db_session.commit()

    response = admin_client.post("/admin/orders/o1/deliver")

    assert response.status_code == 200
    assert "marked as delivered" in response.text
    with session_factory() as db:
        assert db.get(schema.Order, "o1").order_status == "delivered"


def test_order_amount_bounds_filter_loaded_rows(admin_client, db_session):
    db_session.add_all(
        [
            schema.Order(
                id=f"o{day}",
                order_id=f"ORD-{code}",
                amount=amount,
                order_status="paid",
                created_at=datetime(2026, 3, day),
            )
            for day, code, amount in [(1, "LOW", 100.0), (2, "MID", 600.0), (3, "TOP", 900.0)]
        ]
    )
    db_session.commit()

    bounds = {"min_amount": "500", "max_amount": "800"}
    response = admin_client.post("/admin/orders/filters", data=bounds)

    assert response.status_code == 200
    assert "ORD-MID" in response.text
    assert "ORD-LOW" not in response.text
    assert "ORD-TOP" not in response.text

    inverted = {"min_amount": "800", "max_amount": "500"}
    assert "Invalid Filter" in admin_client.post("/admin/orders/filters", data=inverted).text


def test_views_are_per_session(admin_client, twelve_numbers):
    admin_client.post("/admin/vip-numbers/filters", data={"status": "sold"})

    admin_client.cookies.set(ADMIN_SESSION_COOKIE, session_manager.issue("admin@numbersguru.test"))
    response = admin_client.get("/admin/vip-numbers")

    assert "9876500011" in response.text
