"""
Aquarium Log Backend: Offset Pagination Helpers
=================================================

What:  Normalizes page/per parameters and paginates SELECT statements.
How:   COUNT(*) over the filtered statement as a subquery, then
       LIMIT/OFFSET on the ordered statement.
"""

from typing import Any, List, NamedTuple, Optional, Tuple

from sqlalchemy import Select, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from aquarium_log.config import settings
from aquarium_log.schemas.common import PaginationMeta


class PageRequest(NamedTuple):
    page: int
    per: int

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.per


def page_request(page: Optional[int] = None, per: Optional[int] = None) -> PageRequest:
    """
    Clamp caller input: page < 1 becomes 1, per falls back to the default
    page size and is capped at max_page_size.
    """
    page = page if page and page > 0 else 1
    if not per or per < 1:
        per = settings.default_page_size
    per = min(per, settings.max_page_size)
    return PageRequest(page=page, per=per)


async def count_rows(db: AsyncSession, stmt: Select) -> int:
    """Number of rows `stmt` would return, ignoring ORDER BY."""
    count_stmt = select(func.count()).select_from(stmt.order_by(None).subquery())
    return int((await db.execute(count_stmt)).scalar_one())


async def paginate(
    db: AsyncSession,
    stmt: Select,
    request: PageRequest,
    scalars: bool = True,
) -> Tuple[List[Any], PaginationMeta]:
    """
    Execute one page of `stmt`.

    Returns: (rows, pagination metadata). With scalars=True the first
    column of each row is returned (ORM entities for select(Model)).
    """
    total_count = await count_rows(db, stmt)
    result = await db.execute(stmt.limit(request.per).offset(request.offset))
    rows = list(result.scalars().all()) if scalars else list(result.all())
    return rows, PaginationMeta.build(request.page, request.per, total_count)


def paginate_list(items: List[Any], request: PageRequest) -> Tuple[List[Any], PaginationMeta]:
    """Paginate an already materialized, ordered list."""
    window = items[request.offset:request.offset + request.per]
    return window, PaginationMeta.build(request.page, request.per, len(items))
