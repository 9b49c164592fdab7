"""Domain exceptions for the admin dashboard.

Every error a view can surface derives from ``AdminError`` so call sites can
turn it into a notice (HTML pages) or a JSON payload (API routes) without
leaking driver details to the browser.
"""

from dataclasses import dataclass, field
from typing import Any

from fastapi import status


@dataclass(eq=False)
class AdminError(Exception):
    """Base domain error.

    Fields:
        code: stable machine-readable code (snake_case)
        message: short, safe message for the user
        http_status: default HTTP status for API responses
        details: safe extra context (never secrets)
    """

    code: str
    message: str
    http_status: int = status.HTTP_400_BAD_REQUEST
    details: dict[str, Any] = field(default_factory=dict)

    def to_payload(self) -> dict[str, Any]:
        payload: dict[str, Any] = {"error": self.code, "message": self.message}
        if self.details:
            payload["details"] = self.details
        return payload

    def __str__(self) -> str:
        return f"{self.code}: {self.message}"


class ConfigurationError(AdminError):
    """Required configuration is missing or invalid at startup."""

    def __init__(self, message: str, *, details: dict[str, Any] | None = None) -> None:
        super().__init__(
            code="configuration_error",
            message=message,
            http_status=status.HTTP_500_INTERNAL_SERVER_ERROR,
            details=details or {},
        )


class StoreQueryError(AdminError):
    """A read against the document store failed.

    ``index_hint`` names the composite index the query needs, which is the
    usual cause when a filtered, ordered query is rejected by the store.
    """

    def __init__(
        self,
        collection: str,
        message: str | None = None,
        *,
        index_hint: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        text = message or f"Could not load {collection}."
        if index_hint:
            text = f"{text} Check that the index {index_hint} exists."
        super().__init__(
            code="store_query_error",
            message=text,
            http_status=status.HTTP_502_BAD_GATEWAY,
            details={"collection": collection, **(details or {})},
        )
        self.collection = collection
        self.index_hint = index_hint


class StoreWriteError(AdminError):
    """An add/update/delete against the document store failed."""

    def __init__(
        self,
        collection: str,
        operation: str,
        message: str | None = None,
        *,
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code="store_write_error",
            message=message or f"Could not {operation} the {collection} record.",
            http_status=status.HTTP_502_BAD_GATEWAY,
            details={"collection": collection, "operation": operation, **(details or {})},
        )
        self.collection = collection
        self.operation = operation


class RecordNotFoundError(AdminError):
    """The record addressed by id does not exist."""

    def __init__(self, collection: str, record_id: str) -> None:
        super().__init__(
            code="not_found",
            message=f"No {collection} record with id {record_id}.",
            http_status=status.HTTP_404_NOT_FOUND,
            details={"collection": collection, "record_id": record_id},
        )


class RecordValidationError(AdminError):
    """Local validation failure; the write never reaches the store."""

    def __init__(
        self,
        message: str = "Invalid data.",
        *,
        code: str = "validation_error",
        details: dict[str, Any] | None = None,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            http_status=status.HTTP_422_UNPROCESSABLE_ENTITY,
            details=details or {},
        )


class DuplicateValueError(RecordValidationError):
    """Another record already holds a value that must be unique."""

    def __init__(self, field_name: str, value: str) -> None:
        super().__init__(
            f'The value "{value}" already exists. Please enter a unique {field_name}.',
            code="duplicate_value",
            details={"field": field_name, "value": value},
        )
        self.field_name = field_name
        self.value = value


class AuthError(AdminError):
    """Sign-in failed. The message never says which credential was wrong."""

    def __init__(self) -> None:
        super().__init__(
            code="invalid_credentials",
            message="Invalid email or password.",
            http_status=status.HTTP_401_UNAUTHORIZED,
        )


class AccessDeniedError(AdminError):
    """Signed in, but the account is not the dashboard admin."""

    def __init__(self) -> None:
        super().__init__(
            code="access_denied",
            message="You do not have admin privileges.",
            http_status=status.HTTP_403_FORBIDDEN,
        )
