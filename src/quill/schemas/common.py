"""Shared response envelopes.

Learn: Every list endpoint answers with the same keyset page shape:
    {"data": [...], "next_cursor": "<ticks>_<uuid>" | null, "has_more": bool}
Pass next_cursor back as ?start= to get the following page.
"""

from typing import Generic, Optional, TypeVar

from pydantic import BaseModel

from quill.pagination import Page

ItemT = TypeVar("ItemT")


class PageResponse(BaseModel, Generic[ItemT]):
    data: list[ItemT]
    next_cursor: Optional[str] = None
    has_more: bool = False


def page_response(page: Page) -> dict:
    return {
        "data": page.items,
        "next_cursor": page.next_cursor(),
        "has_more": page.has_more,
    }
