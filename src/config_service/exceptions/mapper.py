import logging
from contextlib import asynccontextmanager

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from .integrity_classifier import (
    classify_integrity_error,
    UniqueConstraintError,
    NotNullConstraintError,
    ForeignKeyConstraintError,
    CheckConstraintError,
    extract_columns_from_integrity,
    extract_constraint_from_message,
)
from .base import DuplicateError, InternalError, ServiceError

logger = logging.getLogger(__name__)

# -----------------------
# Mapper
# -----------------------

def raise_mapped_integrity_error(exc: IntegrityError, model_name: str | None = None) -> None:
    """
    Map a SQLAlchemy IntegrityError to an app-level exception and raise it.
    Populates `.fields` and `.constraint` where possible. Raw DB text never
    reaches the raised message; it is logged at DEBUG only.
    """
    exc_cls, constraint_name = classify_integrity_error(exc)
    columns = extract_columns_from_integrity(exc)
    constraint_name = constraint_name or extract_constraint_from_message(exc)

    model_part = f"{model_name}" if model_name else "Record"

    if exc_cls is UniqueConstraintError:
        # Duplicates are expected client-level scenarios (409), INFO is enough
        logger.info(
            "mapper.duplicate_detected",
            extra={"model": model_part, "fields": columns, "constraint": constraint_name},
        )
        if columns:
            raise DuplicateError(f"{model_part} already exists",
                                 details=f"Duplicate value for field(s): {', '.join(columns)}",
                                 fields=columns, constraint=constraint_name) from exc
        raise DuplicateError(f"{model_part} already exists", details="Duplicate value (unique constraint)",
                             fields=None, constraint=constraint_name) from exc

    if exc_cls is NotNullConstraintError:
        logger.info(
            "mapper.not_null_violation",
            extra={"model": model_part, "fields": columns, "constraint": constraint_name},
        )
        raise InternalError(f"Missing required field for {model_part}", fields=columns,
                            constraint=constraint_name) from exc

    if exc_cls is ForeignKeyConstraintError:
        logger.info(
            "mapper.foreign_key_violation",
            extra={"model": model_part, "fields": columns, "constraint": constraint_name},
        )
        raise InternalError(f"{model_part} references a missing entity", fields=columns,
                            constraint=constraint_name) from exc

    if exc_cls is CheckConstraintError:
        raw = str(exc.orig) if exc.orig is not None else str(exc)
        logger.debug(
            "mapper.check_constraint_failure",
            extra={"model": model_part, "raw": raw, "constraint": constraint_name},
        )
        raise InternalError(f"{model_part} business rule violated (check constraint)",
                            constraint=constraint_name) from exc

    # Unknown/unclassified integrity error
    raw = str(exc.orig) if exc.orig is not None else str(exc)
    logger.warning(
        "mapper.unknown_integrity_error",
        extra={"model": model_part, "constraint": constraint_name},
    )
    logger.debug("mapper.unknown_integrity_raw", extra={"model": model_part, "raw": raw})

    raise InternalError(f"{model_part} database integrity error") from exc


# -----------------------
# Async context manager to DRY error handling in repositories and services
# -----------------------
@asynccontextmanager
async def db_error_handler(db: AsyncSession, model_name: str | None = None):
    """
    Usage:
        async with db_error_handler(self.db, "Application"):
            ... DB ops that may raise ...

    Rolls the session back on any error, then:
      - IntegrityError   -> mapped app-level exception (DuplicateError, InternalError)
      - ServiceError     -> re-raised unchanged (already classified further down)
      - anything else    -> InternalError
    """
    try:
        yield
    except IntegrityError as exc:
        await _safe_rollback(db, model_name, "IntegrityError")
        raise_mapped_integrity_error(exc, model_name)
    except ServiceError:
        await _safe_rollback(db, model_name, "ServiceError")
        raise
    except Exception as exc:
        await _safe_rollback(db, model_name, "unexpected error")
        logger.exception("Unexpected DB error for %s", model_name, extra={"model": model_name})
        raise InternalError(f"Failed to operate on {model_name or 'database'}") from exc


async def _safe_rollback(db: AsyncSession, model_name: str | None, reason: str) -> None:
    try:
        await db.rollback()
    except Exception:
        # the caller still gets the error that triggered the rollback
        logger.exception("Failed to rollback session after %s", reason, extra={"model": model_name})
