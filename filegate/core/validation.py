import re

from fastapi import HTTPException, status

_UNSAFE_CHARS = re.compile(r"[^\w.\-]", re.ASCII)


def require_string(value, name: str) -> str:
    """Return ``value`` trimmed, or raise a 400 naming the field."""
    if not isinstance(value, str) or not value.strip():
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"{name} is required",
        )
    return value.strip()


def safe_object_name(filename: str) -> str:
    # one underscore per rejected character, so "a (1)" -> "a__1_"
    return _UNSAFE_CHARS.sub("_", filename)
