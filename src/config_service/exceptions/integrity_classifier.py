r"""
Classify SQLAlchemy IntegrityErrors by the store's native error signal.

Two levels of exception handling
--------------------------------
1. Constraint-specific errors (this module) say *what failed in the database*:

    ConstraintViolationError
    ├── UniqueConstraintError
    ├── NotNullConstraintError
    ├── ForeignKeyConstraintError
    ├── CheckConstraintError
    └── UnknownIntegrityError

   They are internal labels produced by `classify_integrity_error()` and are
   never raised to API callers.

2. App-level errors (`exceptions/base.py`: DuplicateError, InternalError, ...)
   are what services raise and the API renders. `mapper.py` turns the labels
   above into those.

Recognised signals
------------------
| Store       | Attribute / source                | Unique violation codes |
| ----------- | --------------------------------- | ---------------------- |
| PostgreSQL  | `orig.pgcode` / `orig.sqlstate`   | 23505                  |
| SQL Server  | `orig.number` or "(2627)" in text | 2627, 2601             |
| MySQL       | `orig.args[0]`                    | 1062                   |
| SQLite etc. | message text                      | "UNIQUE constraint ..."|

`is_unique_violation(exc, columns=..., constraints=...)` is the single predicate
services use to ask "did this write lose a uniqueness race on <column>?".
SQL Server reports unique *indexes* (2601) by index name only, so callers pass
both the column and the constraint/index names that guard it.
"""
import logging
import re
from enum import Enum
from typing import Iterable, Type
from sqlalchemy.exc import IntegrityError
from .base import ServiceError

logger = logging.getLogger(__name__)

# =================================================================================================================
# Constraint-specific exceptions
# =================================================================================================================


class ConstraintViolationError(ServiceError):
    """Base for integrity/constraint violations."""
    pass


class UniqueConstraintError(ConstraintViolationError):
    """Unique constraint / duplicate value."""
    pass


class NotNullConstraintError(ConstraintViolationError):
    """NOT NULL violation (missing required field)."""
    pass


class ForeignKeyConstraintError(ConstraintViolationError):
    """Foreign key constraint violated."""
    pass


class CheckConstraintError(ConstraintViolationError):
    """CHECK constraint violated."""
    pass


class UnknownIntegrityError(ConstraintViolationError):
    """Unrecognized integrity error."""
    pass


# =================================================================================================================
# Vendor error code mapping
# =================================================================================================================

# https://www.postgresql.org/docs/current/errcodes-appendix.html
class PostgresErrorCodes(str, Enum):
    UNIQUE_VIOLATION = "23505"
    NOT_NULL_VIOLATION = "23502"
    FOREIGN_KEY_VIOLATION = "23503"
    CHECK_VIOLATION = "23514"


PGCODE_EXCEPTION_MAP = {
    PostgresErrorCodes.UNIQUE_VIOLATION: UniqueConstraintError,
    PostgresErrorCodes.NOT_NULL_VIOLATION: NotNullConstraintError,
    PostgresErrorCodes.FOREIGN_KEY_VIOLATION: ForeignKeyConstraintError,
    PostgresErrorCodes.CHECK_VIOLATION: CheckConstraintError,
}

# SQL Server: 2627 = unique/primary key constraint, 2601 = unique index.
# 515 = NULL insert, 547 = FK or CHECK conflict (ambiguous, classified by message).
SQLSERVER_NUMBER_EXCEPTION_MAP = {
    2627: UniqueConstraintError,
    2601: UniqueConstraintError,
    515: NotNullConstraintError,
}

# MySQL / MariaDB
MYSQL_ERRNO_EXCEPTION_MAP = {
    1062: UniqueConstraintError,
    1048: NotNullConstraintError,
    1451: ForeignKeyConstraintError,
    1452: ForeignKeyConstraintError,
    3819: CheckConstraintError,
}

_SQLSERVER_NUMBER_RE = re.compile(r"\((2627|2601|515)\)")
_SQLSERVER_CONSTRAINT_RE = re.compile(r"(?:constraint|unique index) '(?P<name>[^']+)'", re.IGNORECASE)


# =================================================================================================================
# Integrity Error Classifiers
# =================================================================================================================

def _match_any(msg: str, keywords: list[str]) -> bool:
    return any(keyword in msg for keyword in keywords)


def _classify_from_postgres_diag(orig) -> tuple[Type[ConstraintViolationError] | None, str | None]:
    """
    Classify Postgres integrity error based on SQLSTATE and diagnostics.
    psycopg exposes `pgcode`/`diag`; asyncpg (through SQLAlchemy's adapter) exposes `sqlstate`.
    """
    pgcode = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if not pgcode:
        return None, None

    diag = getattr(orig, "diag", None)
    constraint_name = getattr(diag, "constraint_name", None) if diag else None
    if constraint_name is None:
        # asyncpg keeps the driver exception as __cause__ of the adapted one
        constraint_name = getattr(orig, "constraint_name", None) or getattr(
            getattr(orig, "__cause__", None), "constraint_name", None
        )

    exception_class = PGCODE_EXCEPTION_MAP.get(pgcode)

    if exception_class:
        logger.debug("Postgres integrity diagnostic",
                     extra={"pgcode": pgcode, "constraint_name": constraint_name})
        return exception_class, constraint_name

    logger.warning(
        "Unknown Postgres integrity error code encountered",
        extra={"pgcode": pgcode, "constraint_name": constraint_name}
    )
    logger.debug("Postgres orig diagnostic (raw)", extra={"orig_repr": repr(orig)})

    return UnknownIntegrityError, constraint_name


def _classify_from_sqlserver_number(orig) -> tuple[Type[ConstraintViolationError] | None, str | None]:
    """
    Classify SQL Server integrity errors by native error number.
    pymssql exposes `number`; pyodbc only embeds it in the message, e.g. "... (2627) ...".
    """
    number = getattr(orig, "number", None)
    msg = str(orig)
    if number is None:
        m = _SQLSERVER_NUMBER_RE.search(msg)
        if m:
            number = int(m.group(1))

    exception_class = SQLSERVER_NUMBER_EXCEPTION_MAP.get(number) if number is not None else None
    if exception_class is None:
        return None, None

    m = _SQLSERVER_CONSTRAINT_RE.search(msg)
    constraint_name = m.group("name") if m else None
    logger.debug("SQL Server integrity diagnostic",
                 extra={"number": number, "constraint_name": constraint_name})
    return exception_class, constraint_name


def _classify_from_mysql_errno(orig) -> tuple[Type[ConstraintViolationError] | None, None]:
    args = getattr(orig, "args", None) or ()
    errno = args[0] if args and isinstance(args[0], int) else None
    exception_class = MYSQL_ERRNO_EXCEPTION_MAP.get(errno) if errno is not None else None
    if exception_class:
        logger.debug("MySQL integrity diagnostic", extra={"errno": errno})
    return exception_class, None


def _classify_from_generic_message(msg: str) -> tuple[Type[ConstraintViolationError], None]:
    """
    Classify integrity error based on message content (fallback for SQLite and unknown drivers).
    """
    normalized = msg.lower()

    if _match_any(normalized, ["unique constraint", "unique failed", "unique violation", "duplicate"]):
        return UniqueConstraintError, None

    if _match_any(normalized, ["not null constraint", "not null", "null value in column"]):
        return NotNullConstraintError, None

    if _match_any(normalized, ["foreign key constraint", "foreign key", "is not present in table"]):
        return ForeignKeyConstraintError, None

    if _match_any(normalized, ["check constraint", "check failed"]):
        return CheckConstraintError, None

    logger.warning("Unknown integrity error message encountered", extra={"message_snippet": (msg or "")[:200]})
    logger.debug("Unknown integrity raw message", extra={"raw": msg})
    return UnknownIntegrityError, None


def classify_integrity_error(exc: IntegrityError) -> tuple[Type[ConstraintViolationError], str | None]:
    """
    Classify a SQLAlchemy IntegrityError into a ConstraintViolationError subclass.

    Native codes are checked first (Postgres, SQL Server, MySQL); message parsing is the fallback.

    Returns:
        A tuple of (ExceptionClass, constraint_name if available)
    """
    orig = exc.orig

    for classifier in (_classify_from_postgres_diag, _classify_from_sqlserver_number, _classify_from_mysql_errno):
        exception_class, constraint_name = classifier(orig)
        if exception_class is not None:
            return exception_class, constraint_name

    return _classify_from_generic_message(str(orig) if orig is not None else str(exc))


# =================================================================================================================
# Column / constraint extraction
# =================================================================================================================

def _extract_columns_postgres(msg: str) -> list[str] | None:
    """
    Try to extract involved column names from common Postgres messages:
      - 'null value in column "name" violates not-null constraint'
      - 'DETAIL:  Key (name)=(billing) already exists.'
    """
    if not msg:
        return None

    m = re.search(r'null value in column "(?P<col>[^"]+)"', msg, flags=re.IGNORECASE)
    if m:
        return [m.group("col")]

    m = re.search(r'key \((?P<cols>[^)]+)\)=', msg, flags=re.IGNORECASE)
    if m:
        return [c.strip().strip('"') for c in m.group("cols").split(",")]

    return None


def _extract_columns_sqlite(msg: str) -> list[str] | None:
    # SQLite: 'UNIQUE constraint failed: applications.name'
    m = re.search(r'(?:UNIQUE|NOT NULL) constraint failed: (?P<cols>.+)$', msg, flags=re.IGNORECASE | re.MULTILINE)
    if m:
        return [c.split('.')[-1].strip() for c in re.split(r',\s*', m.group("cols"))]

    return None


def _extract_columns_mysql(msg: str) -> list[str] | None:
    # MySQL: "Duplicate entry 'foo' for key 'applications.uq_applications_name'"
    m = re.search(r"Duplicate entry .* for key '?([^']+)'?", msg, flags=re.IGNORECASE)
    if m:
        return [m.group(1).split('.')[-1]]
    return None


def extract_columns_from_integrity(exc: IntegrityError) -> list[str] | None:
    """
    Best-effort extraction of column names from the DB message (Postgres, SQLite, MySQL).
    """
    orig = exc.orig
    msg = str(orig) if orig is not None else str(exc)

    for extractor in (_extract_columns_postgres, _extract_columns_sqlite, _extract_columns_mysql):
        cols = extractor(msg)
        if cols:
            return cols

    return None


def extract_constraint_from_message(exc: IntegrityError) -> str | None:
    """
    Constraint or index name as quoted in the message:
      - Postgres: 'violates unique constraint "uq_applications_name"'
      - SQL Server 2627: "Violation of UNIQUE KEY constraint 'uq_applications_name'"
      - SQL Server 2601: "Cannot insert duplicate key row ... with unique index 'IX_applications_name'"
    """
    msg = str(exc.orig) if exc.orig is not None else str(exc)
    m = re.search(r"""(?:constraint|unique index) ["'](?P<name>[^"']+)["']""", msg, flags=re.IGNORECASE)
    return m.group("name") if m else None


# =================================================================================================================
# Predicate
# =================================================================================================================

def is_unique_violation(
    exc: BaseException | None,
    *,
    columns: Iterable[str] | None = None,
    constraints: Iterable[str] | None = None,
) -> bool:
    """
    True if `exc` is an IntegrityError caused by a uniqueness constraint.

    With `columns` and/or `constraints`, the violation must also be on one of
    them: a reported column or a reported constraint/index name matches
    (case-insensitive). Without either, any uniqueness violation counts.

        is_unique_violation(exc, columns=["name"], constraints=["uq_applications_name"])
    """
    if not isinstance(exc, IntegrityError):
        return False

    exception_class, constraint_name = classify_integrity_error(exc)
    if exception_class is not UniqueConstraintError:
        return False

    if columns is None and constraints is None:
        return True

    constraint_name = constraint_name or extract_constraint_from_message(exc)
    found = {c.lower() for c in extract_columns_from_integrity(exc) or ()}
    if constraint_name:
        found.add(constraint_name.lower())

    # MySQL only names the key, which the column extractor returns in place of a column
    wanted = {c.lower() for c in columns or ()} | {c.lower() for c in constraints or ()}
    return bool(found & wanted)
