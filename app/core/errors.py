import logging
from contextlib import contextmanager
from typing import Iterator, Optional

from fastapi import HTTPException, status
from sqlalchemy.exc import DBAPIError, NoResultFound, SQLAlchemyError

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Service-level failure carrying the HTTP status it maps to."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(self, message: str, **extra):
        super().__init__(message)
        self.message = message
        self.extra = extra


class BadRequestError(ApiError):
    status_code = status.HTTP_400_BAD_REQUEST


class ForbiddenError(ApiError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ApiError):
    status_code = status.HTTP_404_NOT_FOUND


class ConflictError(ApiError):
    status_code = status.HTTP_409_CONFLICT


def database_message(exc: SQLAlchemyError) -> str:
    """The driver's own error text, without SQLAlchemy's statement dump."""
    if isinstance(exc, DBAPIError) and exc.orig is not None:
        return str(exc.orig)
    return str(exc)


@contextmanager
def handle_errors(not_found: Optional[str] = None) -> Iterator[None]:
    """
    Translate service and database failures into HTTP errors for one route.

    ``NoResultFound`` is the "no rows" signal from ``scalar_one()`` and becomes
    a 404 carrying ``not_found``; any other database error is a 500 with the
    database message passed through.
    """
    try:
        yield
    except ApiError as e:
        detail = {"error": e.message, **e.extra} if e.extra else e.message
        raise HTTPException(status_code=e.status_code, detail=detail) from e
    except NoResultFound as e:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=not_found or "Resource not found") from e
    except SQLAlchemyError as e:
        message = database_message(e)
        logger.error(f"Database error: {message}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=message) from e
