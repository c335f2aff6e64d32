"""Keyset (seek) pagination.

Learn: Offset pagination re-scans and shifts under concurrent inserts;
keyset pagination doesn't. Every list endpoint orders by
(created_at DESC, id DESC) and resumes strictly after the last row the
client saw, which that client carries around as an opaque cursor.

- cursor.py → the "<ticks>_<uuid>" cursor codec
- keyset.py → the seek predicate, ordering, and has-more computation
"""

from quill.pagination.cursor import Cursor, decode_cursor, encode_cursor
from quill.pagination.keyset import Page, fetch_page

__all__ = ["Cursor", "Page", "decode_cursor", "encode_cursor", "fetch_page"]
