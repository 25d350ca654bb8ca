"""Translation of driver-level failures into application errors."""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from sqlalchemy.exc import DBAPIError, InterfaceError, OperationalError
from sqlalchemy.exc import TimeoutError as PoolTimeoutError

from inbox.core.exceptions import StoreUnavailableError

logger = logging.getLogger(__name__)


def is_store_wide(exc: BaseException) -> bool:
    """True when the error means the whole store is unreachable, not one query."""
    if isinstance(exc, (OperationalError, InterfaceError, PoolTimeoutError)):
        return True
    return isinstance(exc, DBAPIError) and exc.connection_invalidated


@asynccontextmanager
async def store_error_handler(operation: str) -> AsyncIterator[None]:
    """
    Usage:
        async with store_error_handler("count_messages"):
            ... queries ...
    Connection-level failures are re-raised as StoreUnavailableError;
    everything else propagates unchanged.
    """
    try:
        yield
    except (OperationalError, InterfaceError, PoolTimeoutError, DBAPIError) as exc:
        if not is_store_wide(exc):
            raise
        logger.error("Store unavailable during %s: %s", operation, exc.__class__.__name__)
        raise StoreUnavailableError(operation=operation) from exc
