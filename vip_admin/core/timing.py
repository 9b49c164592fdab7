"""Timing helper for store round trips."""

import time
from collections.abc import Generator
from contextlib import contextmanager

from vip_admin.core.logging import get_logger

logger = get_logger(__name__)


@contextmanager
def timed(operation: str, *, collection: str | None = None) -> Generator[None, None, None]:
    """Log how long a store operation took.

    Usage:
        with timed("query page", collection="vipNumbers"):
            rows = session.execute(stmt).scalars().all()
    """
    start = time.perf_counter()
    try:
        yield
    finally:
        duration_ms = (time.perf_counter() - start) * 1000
        extra = {"operation": operation, "collection": collection}
        if duration_ms < 50:
            logger.debug(f"[{duration_ms:.2f}ms] {operation}", extra=extra)
        elif duration_ms < 200:
            logger.info(f"[{duration_ms:.2f}ms] {operation} (slow)", extra=extra)
        else:
            logger.warning(f"[{duration_ms:.2f}ms] {operation} (very slow)", extra=extra)
