# This project was developed with assistance from AI tools.
"""Case-insensitive substring filters for free-text search parameters."""

from sqlalchemy import func

LIKE_ESCAPE = "\\"


def contains_pattern(text: str) -> str:
    """``%text%`` with LIKE wildcards in ``text`` matched literally."""
    escaped = (
        text.lower()
        .replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"


def icontains(column, text: str):
    return func.lower(column).like(contains_pattern(text), escape=LIKE_ESCAPE)
