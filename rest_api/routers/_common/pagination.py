"""
Limit/offset paging for the order list.

The page is selected with ?limit=&offset= and the total number of matching
rows is returned in the X-Total-Count header, so the body stays a plain list.
"""

from dataclasses import dataclass

from fastapi import Query, Response

from shared.config.constants import Limits

TOTAL_COUNT_HEADER = "X-Total-Count"


@dataclass(frozen=True)
class Pagination:
    limit: int
    offset: int


def get_pagination(
    limit: int = Query(default=Limits.DEFAULT_PAGE_SIZE, ge=1, le=Limits.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
) -> Pagination:
    """FastAPI dependency; out-of-range values are rejected with 422."""
    return Pagination(limit=limit, offset=offset)


def set_total_count(response: Response, total: int) -> None:
    response.headers[TOTAL_COUNT_HEADER] = str(total)
