"""
FamilyEvents Backend — Shared Persistence Helpers
=================================================

What:  Translates SQLAlchemy failures into the application's exception
       hierarchy, for use inside the service classes.

    flush_or_conflict()   IntegrityError on flush → ConflictError (409)
    database_errors()     any other SQLAlchemyError → DatabaseError (500)

Services flush; get_db_session() commits once the handler returns, and
rolls back whenever one of these exceptions propagates. The one exception
is media deletion, which commits before touching the disk.
"""

import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions import ConflictError, DatabaseError

logger = logging.getLogger(__name__)


async def flush_or_conflict(
    db: AsyncSession,
    message: str,
    context: Optional[Dict[str, Any]] = None,
) -> None:
    """Flush pending writes; a unique-constraint violation becomes ConflictError."""
    try:
        await db.flush()
    except IntegrityError as e:
        logger.warning("Integrity violation: %s | %s", message, e.orig)
        raise ConflictError(message=message, context=context) from e


@contextmanager
def database_errors(operation: str, **context: Any) -> Iterator[None]:
    """
    Wrap a block of queries so driver errors surface as DatabaseError.

    The SQL error goes to the log; the client only sees the generic message.
    """
    try:
        yield
    except SQLAlchemyError as e:
        logger.error("Database error during %s: %s", operation, e, exc_info=True)
        raise DatabaseError(
            context={"operation": operation, "error_type": type(e).__name__, **context}
        ) from e
