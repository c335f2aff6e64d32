"""CLI tests — session storage and cursor following.

Learn: The HTTP side is stubbed with httpx.MockTransport, so these run
without a server.
"""

import httpx
import pytest
from click.testing import CliRunner

from quill.cli import main as cli


@pytest.fixture(autouse=True)
def session_file(tmp_path, monkeypatch):
    path = tmp_path / "session.json"
    monkeypatch.setenv("QUILL_SESSION_FILE", str(path))
    return path


def test_session_round_trip(session_file):
    assert cli.load_session() == {}
    cli.save_session({"access_token": "a", "refresh_token": "r"})
    assert cli.load_session() == {"access_token": "a", "refresh_token": "r"}
    assert session_file.stat().st_mode & 0o777 == 0o600


def test_corrupt_session_file_is_empty(session_file):
    session_file.write_text("{not json")
    assert cli.load_session() == {}


def test_post_requires_login():
    result = CliRunner().invoke(cli.main, ["post", "Hello"])
    assert result.exit_code == 1
    assert "Not logged in" in result.output


def test_author_and_tag_are_exclusive():
    result = CliRunner().invoke(cli.main, ["articles", "--author", "a", "--tag", "b"])
    assert result.exit_code != 0
    assert "mutually exclusive" in result.output


@pytest.mark.asyncio
async def test_iter_pages_follows_cursor():
    pages = {
        None: {"data": [{"n": 1}, {"n": 2}], "next_cursor": "c1", "has_more": True},
        "c1": {"data": [{"n": 3}], "next_cursor": None, "has_more": False},
    }
    seen_params = []

    def handler(request: httpx.Request) -> httpx.Response:
        start = request.url.params.get("start")
        seen_params.append(dict(request.url.params))
        return httpx.Response(200, json=pages[start])

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://t") as c:
        got = [p async for p in cli.iter_pages(c, "/api/v1/articles", 2, follow=True)]

    assert got == [[{"n": 1}, {"n": 2}], [{"n": 3}]]
    assert seen_params == [{"limit": "2"}, {"limit": "2", "start": "c1"}]


@pytest.mark.asyncio
async def test_iter_pages_single_page_without_follow():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json={"data": [{"n": 1}], "next_cursor": "c1", "has_more": True})

    async with httpx.AsyncClient(transport=httpx.MockTransport(handler), base_url="http://t") as c:
        got = [p async for p in cli.iter_pages(c, "/api/v1/articles", 1)]

    assert got == [[{"n": 1}]]
