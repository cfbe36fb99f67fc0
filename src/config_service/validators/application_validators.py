"""
Request validation for application creation.

Validation runs before any database I/O. Every rule is evaluated independently
and all violations are collected, so a client sees every problem with its
payload in one round trip:

    >>> [i.message for i in validate_create_application("bad name!", None)]
    ['Application name can only contain alphanumeric characters, underscores, and hyphens']

The name is never trimmed here; uniqueness is the store's job and is reported
later as a conflict by the service layer.
"""

import re
from dataclasses import dataclass
from typing import Iterable

NAME_MIN_LENGTH = 1
NAME_MAX_LENGTH = 255
DESCRIPTION_MAX_LENGTH = 1000

NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

NAME_REQUIRED_MESSAGE = "Application name is required"
NAME_LENGTH_MESSAGE = (
    f"Application name must be between {NAME_MIN_LENGTH} and {NAME_MAX_LENGTH} characters"
)
NAME_CHARSET_MESSAGE = (
    "Application name can only contain alphanumeric characters, underscores, and hyphens"
)
DESCRIPTION_LENGTH_MESSAGE = f"Description must not exceed {DESCRIPTION_MAX_LENGTH} characters"


@dataclass(frozen=True)
class ValidationIssue:
    """One rule violation: the offending field and a human-readable message."""

    field: str
    message: str


def validate_create_application(name: str | None, description: str | None) -> list[ValidationIssue]:
    """
    Check a creation request and return the ordered list of violations.

    An empty list means the request is valid. `name=None` is treated like an
    empty string (a missing field is still "required").
    """
    issues: list[ValidationIssue] = []
    candidate = name if name is not None else ""

    if candidate == "":
        issues.append(ValidationIssue("name", NAME_REQUIRED_MESSAGE))

    if not (NAME_MIN_LENGTH <= len(candidate) <= NAME_MAX_LENGTH):
        issues.append(ValidationIssue("name", NAME_LENGTH_MESSAGE))

    # fullmatch: "$" alone would accept a trailing newline
    if not NAME_PATTERN.fullmatch(candidate):
        issues.append(ValidationIssue("name", NAME_CHARSET_MESSAGE))

    if description is not None and description.strip() and len(description) > DESCRIPTION_MAX_LENGTH:
        issues.append(ValidationIssue("description", DESCRIPTION_LENGTH_MESSAGE))

    return issues


def format_issues(issues: Iterable[ValidationIssue]) -> str:
    """Join issue messages for display (`"; "` separated)."""
    return "; ".join(issue.message for issue in issues)


__all__ = [
    "ValidationIssue",
    "validate_create_application",
    "format_issues",
    "NAME_MAX_LENGTH",
    "DESCRIPTION_MAX_LENGTH",
]
