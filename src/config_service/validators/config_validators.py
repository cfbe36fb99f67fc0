"""
Small normalisers used by Settings field validators.

Environment values frequently arrive with stray whitespace or the "wrong"
case (`LOG_LEVEL=debug `); these helpers make them match the Literal choices.
"""


def to_uppercase(value: str | None) -> str | None:
    """Strip and uppercase a string value; `None` passes through."""
    if value is None:
        return None
    return str(value).strip().upper()


def to_lowercase(value: str | None) -> str | None:
    """Strip and lowercase a string value; `None` passes through."""
    if value is None:
        return None
    return str(value).strip().lower()
