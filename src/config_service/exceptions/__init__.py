# exceptions/
# │
# ├── __init__.py
# ├── base.py                    # App-level errors (ServiceError, DuplicateError, InternalError, ...)
# ├── integrity_classifier.py    # SQL-level / DB-specific errors
# └── mapper.py                  # Map SQL-level / DB-specific errors to app-level errors

from .base import (
    ServiceError,
    ValidationFailedError,
    DuplicateError,
    ApplicationNameConflictError,
    InternalError,
    RepositoryError,
)
from .integrity_classifier import classify_integrity_error, is_unique_violation

__all__ = [
    "ServiceError",
    "ValidationFailedError",
    "DuplicateError",
    "ApplicationNameConflictError",
    "InternalError",
    "RepositoryError",
    "classify_integrity_error",
    "is_unique_violation",
]
