"""Keyset pagination tests — against real queries on SQLite.

Learn: Rows are inserted with explicit created_at values so order is
deterministic. Covers page boundaries, the id tiebreak, NULL
timestamps, zero-size pages, filtered listings, and the guarantee that
following next_cursor visits every row exactly once even while new
rows keep arriving.
"""

import uuid
from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import select, update

from quill.db.models import Article, Tag, User
from quill.pagination import decode_cursor, fetch_page
from quill.services.article_service import ArticleService
from quill.services.tag_service import TagService

BASE_TIME = datetime(2024, 6, 1, 12, 0, tzinfo=timezone.utc)


async def _author(db, name="author") -> User:
    user = User(id=uuid.uuid4(), username=name)
    db.add(user)
    await db.commit()
    return user


async def _articles(db, author, timestamps, tags=()) -> list[Article]:
    rows = [
        Article(
            id=uuid.uuid4(),
            author_id=author.id,
            title=f"post {i}",
            created_at=ts,
            tags=list(tags),
        )
        for i, ts in enumerate(timestamps)
    ]
    db.add_all(rows)
    await db.commit()

    # None on insert means "use the column default"; null it out after.
    undated = [r.id for r, ts in zip(rows, timestamps) if ts is None]
    if undated:
        await db.execute(
            update(Article).where(Article.id.in_(undated)).values(created_at=None)
        )
        await db.commit()
    return rows


async def _walk(svc: ArticleService, page_size: int) -> list[list[uuid.UUID]]:
    """Follow next_cursor to the end; return the ids on each page."""
    pages, cursor = [], None
    while True:
        page = await svc.list_all(page_size, cursor)
        pages.append([a.id for a in page.items])
        if not page.has_more:
            assert page.next_cursor() is None
            return pages
        cursor = decode_cursor(page.next_cursor())


# ═══════════════════════════════════════════════════════════
# Page boundaries
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_five_rows_in_pages_of_two(db_session):
    author = await _author(db_session)
    rows = await _articles(
        db_session, author, [BASE_TIME + timedelta(minutes=i) for i in range(5)]
    )
    newest_first = [r.id for r in reversed(rows)]
    svc = ArticleService(db_session)

    p1 = await svc.list_all(2)
    assert [a.id for a in p1.items] == newest_first[0:2]
    assert p1.has_more is True

    p2 = await svc.list_all(2, decode_cursor(p1.next_cursor()))
    assert [a.id for a in p2.items] == newest_first[2:4]
    assert p2.has_more is True

    p3 = await svc.list_all(2, decode_cursor(p2.next_cursor()))
    assert [a.id for a in p3.items] == newest_first[4:5]
    assert p3.has_more is False
    assert p3.next_cursor() is None


@pytest.mark.asyncio
async def test_exact_fit_page_has_no_more(db_session):
    author = await _author(db_session)
    await _articles(db_session, author, [BASE_TIME + timedelta(minutes=i) for i in range(5)])

    page = await ArticleService(db_session).list_all(5)
    assert len(page.items) == 5
    assert page.has_more is False


@pytest.mark.asyncio
async def test_zero_page_size_is_empty(db_session):
    author = await _author(db_session)
    await _articles(db_session, author, [BASE_TIME])

    page = await ArticleService(db_session).list_all(0)
    assert page.items == []
    assert page.has_more is False
    assert page.next_cursor() is None


@pytest.mark.asyncio
async def test_empty_table(db_session):
    page = await ArticleService(db_session).list_all(10)
    assert page.items == []
    assert page.has_more is False


@pytest.mark.asyncio
async def test_cursor_past_the_end_gives_empty_page(db_session):
    author = await _author(db_session)
    await _articles(db_session, author, [BASE_TIME])

    cursor = decode_cursor(f"0_{uuid.UUID(int=0)}")
    page = await ArticleService(db_session).list_all(10, cursor)
    assert page.items == []
    assert page.has_more is False


# ═══════════════════════════════════════════════════════════
# Ordering
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_equal_timestamps_break_ties_by_id_descending(db_session):
    author = await _author(db_session)
    rows = await _articles(db_session, author, [BASE_TIME] * 4)
    expected = sorted((r.id for r in rows), reverse=True)

    pages = await _walk(ArticleService(db_session), 1)
    assert [ids[0] for ids in pages] == expected


@pytest.mark.asyncio
async def test_null_created_at_sorts_last(db_session):
    author = await _author(db_session)
    dated = await _articles(db_session, author, [BASE_TIME, BASE_TIME + timedelta(days=1)])
    undated = await _articles(db_session, author, [None, None])

    pages = await _walk(ArticleService(db_session), 1)
    ids = [p[0] for p in pages]

    assert ids[:2] == [dated[1].id, dated[0].id]
    assert ids[2:] == sorted((r.id for r in undated), reverse=True)


@pytest.mark.asyncio
async def test_null_created_at_cursor_encodes_as_tick_zero(db_session):
    author = await _author(db_session)
    await _articles(db_session, author, [None, None])

    page = await ArticleService(db_session).list_all(1)
    assert page.next_cursor().startswith("0_")


# ═══════════════════════════════════════════════════════════
# Completeness
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_every_row_seen_exactly_once(db_session):
    author = await _author(db_session)
    timestamps = [BASE_TIME + timedelta(seconds=i // 3) for i in range(17)]
    rows = await _articles(db_session, author, timestamps)

    pages = await _walk(ArticleService(db_session), 4)
    seen = [i for p in pages for i in p]
    assert len(seen) == len(set(seen)) == 17
    assert set(seen) == {r.id for r in rows}


@pytest.mark.asyncio
async def test_inserts_between_pages_cause_no_skips_or_duplicates(db_session):
    """Rows present at the start are each returned once; newer rows
    inserted mid-walk land ahead of the cursor and are not served."""
    author = await _author(db_session)
    original = await _articles(
        db_session, author, [BASE_TIME + timedelta(minutes=i) for i in range(6)]
    )
    svc = ArticleService(db_session)

    seen: list[uuid.UUID] = []
    page = await svc.list_all(2)
    seen += [a.id for a in page.items]
    while page.has_more:
        # Something else publishes in between page fetches.
        await _articles(db_session, author, [datetime.now(timezone.utc)])
        page = await svc.list_all(2, decode_cursor(page.next_cursor()))
        seen += [a.id for a in page.items]

    assert seen == [r.id for r in reversed(original)]


@pytest.mark.asyncio
async def test_garbage_cursor_restarts_from_first_page(db_session):
    author = await _author(db_session)
    rows = await _articles(db_session, author, [BASE_TIME, BASE_TIME + timedelta(hours=1)])

    page = await ArticleService(db_session).list_all(1, decode_cursor("not-a-cursor"))
    assert [a.id for a in page.items] == [rows[1].id]


# ═══════════════════════════════════════════════════════════
# Filtered listings
# ═══════════════════════════════════════════════════════════


@pytest.mark.asyncio
async def test_list_by_author_only_returns_that_author(db_session):
    alice = await _author(db_session, "alice")
    bob = await _author(db_session, "bob")
    mine = await _articles(db_session, alice, [BASE_TIME + timedelta(minutes=i) for i in range(3)])
    await _articles(db_session, bob, [BASE_TIME + timedelta(minutes=i) for i in range(3)])
    svc = ArticleService(db_session)

    p1 = await svc.list_by_author(alice.id, 2)
    p2 = await svc.list_by_author(alice.id, 2, decode_cursor(p1.next_cursor()))

    assert [a.id for a in p1.items + p2.items] == [r.id for r in reversed(mine)]
    assert p2.has_more is False


@pytest.mark.asyncio
async def test_list_by_tag_only_returns_tagged(db_session):
    author = await _author(db_session)
    tag = Tag(id=uuid.uuid4(), name="python", created_at=BASE_TIME)
    db_session.add(tag)
    await db_session.commit()

    tagged = await _articles(
        db_session, author, [BASE_TIME + timedelta(minutes=i) for i in range(3)], tags=[tag]
    )
    await _articles(db_session, author, [BASE_TIME + timedelta(minutes=10)])

    page = await ArticleService(db_session).list_by_tag(tag.id, 10)
    assert [a.id for a in page.items] == [r.id for r in reversed(tagged)]
    assert all(tag.id in a.tag_ids for a in page.items)


@pytest.mark.asyncio
async def test_tags_paginate_newest_first(db_session):
    svc = TagService(db_session)
    created = [
        Tag(id=uuid.uuid4(), name=f"tag-{i}", created_at=BASE_TIME + timedelta(days=i))
        for i in range(3)
    ]
    db_session.add_all(created)
    await db_session.commit()

    p1 = await svc.list_all(2)
    p2 = await svc.list_all(2, decode_cursor(p1.next_cursor()))
    assert [t.name for t in p1.items + p2.items] == ["tag-2", "tag-1", "tag-0"]


@pytest.mark.asyncio
async def test_fetch_page_accepts_any_base_query(db_session):
    """The planner adds seek + order + limit to whatever select it's given."""
    author = await _author(db_session)
    rows = await _articles(db_session, author, [BASE_TIME + timedelta(minutes=i) for i in range(3)])

    stmt = select(Article).where(Article.title != "post 1")
    page = await fetch_page(db_session, stmt, Article, 10)
    assert [a.id for a in page.items] == [rows[2].id, rows[0].id]
