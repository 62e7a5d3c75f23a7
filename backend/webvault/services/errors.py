"""Translation of unexpected persistence failures into DatabaseError."""

import logging
from contextlib import contextmanager
from typing import Any, Iterator, Optional

from webvault.exceptions import DatabaseError, WebVaultError
from webvault.middleware.request_id import request_id_var

logger = logging.getLogger(__name__)


@contextmanager
def database_errors(
    operation: str, message: Optional[str] = None, **context: Any
) -> Iterator[None]:
    """
    Re-raise WebVaultError subclasses untouched; log anything else with the
    request id and raise a generic DatabaseError in its place.

    Usage:
        with database_errors("list_tags"):
            result = await db.execute(...)
    """
    try:
        yield
    except WebVaultError:
        raise
    except Exception as exc:
        logger.error(
            "[%s] %s failed: %s",
            request_id_var.get(""),
            operation,
            str(exc),
            exc_info=True,
        )
        kwargs = {"context": {"operation": operation, "error_type": type(exc).__name__, **context}}
        if message:
            kwargs["message"] = message
        raise DatabaseError(**kwargs) from exc
