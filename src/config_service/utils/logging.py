"""
Project metadata and log-safety helpers used by the logging stack.

- get_project_name / get_project_version read `[project]` from the nearest
  pyproject.toml (or the installed distribution) so JSON logs can carry the
  service version.
- safe_log_db_url masks the password of a database URL before it is logged.
"""
from pathlib import Path
from importlib import metadata as importlib_metadata
from typing import Any
import tomllib

from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError


def find_pyproject(start: Path, max_up: int = 5) -> Path | None:
    p = start
    for _ in range(max_up):
        candidate = p / "pyproject.toml"
        if candidate.exists():
            return candidate
        if p.parent == p:
            break
        p = p.parent
    return None


def get_pyproject_value(
    key: str,
    start: str | Path | None = None,
    max_up: int = 5,
    default: Any = None,
) -> Any:
    """
    Return the value for a dot-separated `key` (e.g. "project.version") from the
    nearest pyproject.toml, or `default` if the file or the key is missing.
    """
    start_path = Path(start).resolve() if start is not None else Path(__file__).resolve().parent

    pyproject = find_pyproject(start=start_path, max_up=max_up)
    if not pyproject or not key:
        return default

    try:
        with pyproject.open("rb") as f:
            data = tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError):
        return default

    cur = data
    for part in key.split("."):
        if isinstance(cur, dict) and part in cur:
            cur = cur[part]
        else:
            return default
    return cur


def get_project_name(default: str | None = None) -> str | None:
    return get_pyproject_value("project.name", default=default)


def get_project_version(default: str = "unknown", prefer_installed: bool = True) -> str:
    """
    Installed distribution version first (containers), pyproject.toml second (checkouts).
    """
    name = get_project_name()
    if prefer_installed and name:
        try:
            return importlib_metadata.version(name)
        except importlib_metadata.PackageNotFoundError:
            pass

    val = get_pyproject_value("project.version")
    return val if val is not None else default


def safe_log_db_url(db_url: str) -> str:
    """
    Render a database URL with its password masked.

    >>> safe_log_db_url("postgresql+asyncpg://user:secret@db:5432/app")
    'postgresql+asyncpg://user:***@db:5432/app'
    """
    try:
        url = make_url(db_url)
    except ArgumentError:
        return "<unparseable database url>"
    return url.render_as_string(hide_password=True)


__all__ = [
    "find_pyproject",
    "get_pyproject_value",
    "get_project_name",
    "get_project_version",
    "safe_log_db_url",
]
