"""Unit-of-work helper used by repositories and services.

Everything written to the session inside ``atomic`` is committed once on a
clean exit and rolled back on any error, so callers never observe a partially
applied operation.
"""
from __future__ import annotations
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Optional, Type

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from prephub.errors import PersistenceError, ServiceError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def atomic(
    session: AsyncSession,
    action: str,
    on_conflict: Optional[Type[ServiceError]] = None,
) -> AsyncIterator[AsyncSession]:
    """Commit the enclosed writes as one transaction.

    ``IntegrityError`` is reported as ``on_conflict`` when given (e.g. a
    unique constraint tripped by a concurrent request); any other storage
    failure becomes ``PersistenceError("Failed to <action>")``.
    """
    try:
        yield session
        await session.commit()
    except IntegrityError as exc:
        await session.rollback()
        if on_conflict is not None:
            raise on_conflict() from exc
        logger.error("Integrity failure during %s: %s", action, exc)
        raise PersistenceError(f"Failed to {action}") from exc
    except SQLAlchemyError as exc:
        await session.rollback()
        logger.error("Storage failure during %s: %s", action, exc, exc_info=True)
        raise PersistenceError(f"Failed to {action}") from exc
    except Exception:
        await session.rollback()
        raise
