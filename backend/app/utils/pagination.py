"""
page/page_size pagination for the admin list endpoints (schools, staff, students).
"""
from typing import Any, Callable, Optional
from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.sql import Select

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


def clamp_page(page: int, page_size: int) -> tuple:
    return max(1, page), max(1, min(MAX_PAGE_SIZE, page_size))


async def paginate(
    db: AsyncSession,
    query: Select,
    page: int = 1,
    page_size: int = DEFAULT_PAGE_SIZE,
    serializer: Optional[Callable[[Any], Any]] = None,
) -> dict:
    """
    Run an already filtered and ordered query one page at a time.

    The total is counted over the same filters, so the tenant scoping applied
    by the caller holds for both numbers. serializer, when given, maps each row.
    """
    page, page_size = clamp_page(page, page_size)

    total = (await db.execute(
        select(func.count()).select_from(query.order_by(None).subquery())
    )).scalar() or 0
    rows = (await db.execute(query.offset((page - 1) * page_size).limit(page_size))).scalars().all()

    total_pages = max(1, -(-total // page_size))
    return {
        "items": [serializer(row) for row in rows] if serializer else list(rows),
        "total": total,
        "page": page,
        "page_size": page_size,
        "total_pages": total_pages,
        "has_next": page < total_pages,
        "has_previous": page > 1,
    }
