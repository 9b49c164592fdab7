"""Opaque cursor tokens for the JSON list API."""

import base64
import hashlib
import json
from collections.abc import Mapping
from datetime import date, datetime
from typing import Any

from pydantic import ValidationError

from vip_admin.models.pagination import PageCursor


def hash_filters(filters: Mapping[str, Any]) -> str:
    """Create a hash of filter parameters for validation.

    Args:
        filters: Mapping of filter name to value

    Returns:
        SHA256 hash of normalized filter params
    """
    normalized = {k: _normalize(v) for k, v in sorted(filters.items()) if v is not None}
    json_str = json.dumps(normalized, sort_keys=True)
    return hashlib.sha256(json_str.encode()).hexdigest()


def _normalize(value: Any) -> Any:
    if isinstance(value, datetime | date):
        return value.isoformat()
    return value


def encode_cursor(cursor: PageCursor) -> str:
    """Encode pagination state into an opaque, URL-safe token."""
    json_str = json.dumps(cursor.model_dump(mode="json"), sort_keys=True)
    return base64.urlsafe_b64encode(json_str.encode()).decode()


def decode_cursor(token: str) -> PageCursor:
    """Decode an opaque cursor token into pagination state.

    Raises:
        ValueError: If the token is invalid or malformed
    """
    try:
        json_str = base64.urlsafe_b64decode(token.encode()).decode()
        return PageCursor.model_validate(json.loads(json_str))
    except (ValueError, ValidationError, UnicodeDecodeError) as e:
        raise ValueError(f"Invalid pagination cursor: {str(e)}") from e


def cursor_matches(cursor: PageCursor, current_filters: Mapping[str, Any]) -> bool:
    """Check that a cursor was issued under the filters of the current request.

    A cursor without a filter hash only matches an empty filter set.
    """
    if cursor.filters_hash is None:
        return not current_filters
    return cursor.filters_hash == hash_filters(current_filters)
