"""Tests for the JSONL error payload."""

import logging

from vip_admin.core.logging import _build_error_json_payload


def _record(msg, *, level=logging.ERROR, exc_info=None, **extra):
    record = logging.LogRecord(
        name="vip_admin.store",
        level=level,
        pathname="sqlalchemy_store.py",
        lineno=120,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_store_failure_payload_carries_collection_and_operation():
    payload = _build_error_json_payload(
        _record(
            "Query against vipNumbers failed",
            collection="vipNumbers",
            operation="query",
            context_data={"index_hint": "vipNumbers(status, created_at DESC, id DESC)"},
        )
    )

    assert payload["collection"] == "vipNumbers"
    assert payload["operation"] == "query"
    assert payload["context_data"]["index_hint"] == "vipNumbers(status, created_at DESC, id DESC)"
    assert payload["source_line"] == 120
    assert "record_id" not in payload


def test_exception_fills_error_type_and_stack():
    try:
        raise RuntimeError("connection reset")
    except RuntimeError as e:
        exc_info = (type(e), e, e.__traceback__)

    payload = _build_error_json_payload(_record("Delete failed", exc_info=exc_info, record_id="vip001"))

    assert payload["error_type"] == "RuntimeError"
    assert payload["error_message"] == "connection reset"
    assert "RuntimeError: connection reset" in payload["stack_trace"]
    assert payload["record_id"] == "vip001"


def test_unknown_extra_fields_are_merged_and_redacted():
    payload = _build_error_json_payload(
        _record("Sign-in failed", email="admin@numbersguru.test", password="correct-horse")
    )

    assert payload["context_data"]["email"] == "admin@numbersguru.test"
    assert payload["context_data"]["password"] != "correct-horse"
    assert payload["error_type"] == "LogError"
