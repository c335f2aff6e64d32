"""Shared query parameters for keyset-paginated list endpoints.

Learn: ?start=<cursor>&limit=<n>. A cursor that doesn't decode is
treated as absent (first page), never as a 4xx. limit is clamped to
QUILL_MAX_PAGE_SIZE here, at the HTTP boundary; the planner itself
would happily fetch any size.
"""

from dataclasses import dataclass
from typing import Optional

from fastapi import Query

from quill.config import settings
from quill.pagination import Cursor, decode_cursor


@dataclass
class PageParams:
    cursor: Optional[Cursor]
    limit: int


def page_params(
    start: Optional[str] = Query(None, description="Cursor from a previous page's next_cursor"),
    limit: int = Query(settings.default_page_size, ge=0, description="Page size"),
) -> PageParams:
    return PageParams(
        cursor=decode_cursor(start),
        limit=min(limit, settings.max_page_size),
    )
