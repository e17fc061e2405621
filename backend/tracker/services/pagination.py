"""
Pagination shared by every list endpoint: lenient page/limit parsing, clamping, and the
{items, pagination: {page, limit, totalPages, total}} payload.
"""
import math
import sys
from dataclasses import dataclass

from sqlalchemy.orm import Query

from tracker.config import settings


@dataclass(frozen=True)
class PageParams:
    page: int
    limit: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit


def _to_int(value) -> int | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return int(str(value).strip())
    except ValueError:
        return None


def page_params(page=None, limit=None) -> PageParams:
    """page < 1 or unparsable -> 1; limit unparsable -> default, clamped to [1, max_page_limit].
    page is capped so the row offset still fits a 64-bit integer.
    """
    p = _to_int(page)
    n = _to_int(limit)
    if n is None:
        n = settings.default_page_limit
    limit = min(settings.max_page_limit, max(1, n))
    return PageParams(page=min(max(1, p or 1), sys.maxsize // limit), limit=limit)


def pagination_meta(params: PageParams, total: int) -> dict:
    return {
        "page": params.page,
        "limit": params.limit,
        "totalPages": math.ceil(total / params.limit) if total else 0,
        "total": total,
    }


def paginate(query: Query, params: PageParams) -> tuple[list, dict]:
    """Run count + page query; caller applies ordering before calling."""
    total = query.order_by(None).count()
    items = query.offset(params.offset).limit(params.limit).all()
    return items, pagination_meta(params, total)


def page_payload(items: list, meta: dict) -> dict:
    return {"items": items, "pagination": meta}
