"""
Input checks shared by services: identifier parsing, link URLs, LIKE patterns, csv filters.
"""
import re
import uuid

# http(s) URL with a dotted host, same shape the catalog has always accepted for links
URL_RE = re.compile(
    r"^https?://(www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b([-a-zA-Z0-9()@:%_+.~#?&/=]*)$"
)


def parse_id(value) -> uuid.UUID | None:
    """UUID from path/body value; None when malformed."""
    if isinstance(value, uuid.UUID):
        return value
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        return uuid.UUID(value.strip())
    except ValueError:
        return None


def validate_link(v: str | None) -> str | None:
    """Pydantic helper: empty -> None; otherwise must be an http(s) URL."""
    if v is None:
        return None
    v = v.strip()
    if not v:
        return None
    if not URL_RE.match(v):
        raise ValueError("Please use a valid URL with HTTP or HTTPS")
    return v


def like_pattern(term: str) -> str:
    """Case-insensitive substring pattern for ilike(..., escape='\\')."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def csv_values(value: str | None) -> list[str]:
    if not value:
        return []
    return [v.strip() for v in value.split(",") if v.strip()]
