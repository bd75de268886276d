# This project was developed with assistance from AI tools.
"""Transaction helpers: isolation level selection and transient-failure retry."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import settings
from .errors import CaseError, StorageError, TransientStoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

# PostgreSQL: serialization_failure, deadlock_detected, lock_not_available
_TRANSIENT_SQLSTATES = frozenset({"40001", "40P01", "55P03"})
_TRANSIENT_MESSAGES = ("database is locked", "deadlock", "lock wait timeout")


def is_transient(exc: DBAPIError) -> bool:
    """True if the failure is worth retrying (lock timeout, deadlock, serialization)."""
    orig = exc.orig
    sqlstate = getattr(orig, "sqlstate", None) or getattr(
        getattr(orig, "__cause__", None), "sqlstate", None
    )
    if sqlstate in _TRANSIENT_SQLSTATES:
        return True
    message = str(orig if orig is not None else exc).lower()
    return any(marker in message for marker in _TRANSIENT_MESSAGES)


async def use_serializable(session: AsyncSession) -> None:
    """Run the session's next transaction at SERIALIZABLE isolation.

    Isolation can only be chosen before the transaction's first statement;
    if one is already open the current level is kept.
    """
    if session.in_transaction():
        logger.debug("Transaction already open; keeping current isolation level")
        return
    await session.connection(execution_options={"isolation_level": "SERIALIZABLE"})


async def run_with_retry(
    session: AsyncSession,
    operation: Callable[..., Awaitable[T]],
    *args,
    attempts: int | None = None,
    backoff: float | None = None,
    **kwargs,
) -> T:
    """Run ``operation(session, *args, **kwargs)`` as one unit of work.

    The operation commits on success. Any failure rolls the session back.
    Transient store failures are retried with a fixed backoff and surface
    as TransientStoreError once attempts run out; other database errors
    become StorageError.
    """
    attempts = attempts or settings.RETRY_ATTEMPTS
    backoff = settings.RETRY_BACKOFF_SECONDS if backoff is None else backoff

    for attempt in range(1, attempts + 1):
        try:
            return await operation(session, *args, **kwargs)
        except CaseError:
            await session.rollback()
            raise
        except DBAPIError as exc:
            await session.rollback()
            if not is_transient(exc):
                logger.error("Store failure in %s: %s", operation.__name__, exc)
                raise StorageError("The registry store rejected the operation.") from exc
            if attempt == attempts:
                logger.error(
                    "%s still failing after %d attempts: %s", operation.__name__, attempts, exc
                )
                raise TransientStoreError(
                    "The registry is busy. Please try again shortly."
                ) from exc
            logger.warning(
                "Transient store failure in %s (attempt %d/%d), retrying in %.1fs: %s",
                operation.__name__,
                attempt,
                attempts,
                backoff,
                exc,
            )
            await asyncio.sleep(backoff)

    raise AssertionError("unreachable")  # pragma: no cover
