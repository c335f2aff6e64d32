"""Quill CLI — log in, browse, and post to a Quill blog API.

Usage:
    quill login alice                        # Prompt for password, store tokens
    quill refresh                            # Swap in a fresh access token
    quill articles                           # First page of articles
    quill articles --tag <uuid> --all        # Every article with that tag
    quill tags                               # List tags
    quill post "Hello" --content "..."       # Create a draft
    quill change-password                    # Rotate password, log out everywhere
"""

from __future__ import annotations

import asyncio
import concurrent.futures
import json
import os
import sys
from pathlib import Path
from typing import Any, AsyncIterator, Optional

import click
import httpx

# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------

DEFAULT_API_URL = "http://localhost:8000"


def _api_url() -> str:
    return os.environ.get("QUILL_API_URL", DEFAULT_API_URL).rstrip("/")


def session_path() -> Path:
    return Path(os.environ.get("QUILL_SESSION_FILE", Path.home() / ".quill" / "session.json"))


def _client(token: Optional[str] = None) -> httpx.AsyncClient:
    """Build an async HTTP client pointed at the Quill backend."""
    headers = {"Authorization": f"Bearer {token}"} if token else {}
    return httpx.AsyncClient(base_url=_api_url(), headers=headers, timeout=30.0)


# ---------------------------------------------------------------------------
# Session file
# ---------------------------------------------------------------------------


def load_session() -> dict[str, str]:
    path = session_path()
    if not path.exists():
        return {}
    try:
        return json.loads(path.read_text())
    except json.JSONDecodeError:
        return {}


def save_session(data: dict[str, str]) -> None:
    path = session_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2))
    path.chmod(0o600)


def _require_token(kind: str = "access_token") -> str:
    token = load_session().get(kind)
    if not token:
        click.secho("Not logged in. Run: quill login <username>", fg="red", err=True)
        sys.exit(1)
    return token


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _run(coro):
    """Run an async coroutine from a synchronous Click handler.

    Falls back to a worker thread when a loop is already running
    (e.g. CliRunner invoked from an async test).
    """
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)
    else:
        with concurrent.futures.ThreadPoolExecutor(max_workers=1) as pool:
            return pool.submit(asyncio.run, coro).result()


def _fail(r: httpx.Response) -> None:
    """Print the API's error detail and exit on a non-2xx response."""
    if r.is_success:
        return
    try:
        detail = r.json().get("detail", r.text)
    except ValueError:
        detail = r.text
    if r.status_code == 401:
        detail = f"{detail} (session expired or revoked; try `quill refresh` or `quill login`)"
    click.secho(f"Error {r.status_code}: {detail}", fg="red", err=True)
    sys.exit(1)


def _print_table(rows: list[dict], columns: list[tuple[str, str, int]]):
    """Print a simple ASCII table.

    columns: list of (header, dict_key, width)
    """
    header = "  ".join(h.ljust(w) for h, _, w in columns)
    click.secho(header, bold=True)
    click.echo("-" * len(header))
    for row in rows:
        line = "  ".join(str(row.get(k) or "-")[:w].ljust(w) for _, k, w in columns)
        click.echo(line)


async def iter_pages(
    c: httpx.AsyncClient,
    path: str,
    limit: int,
    follow: bool = False,
) -> AsyncIterator[list[dict[str, Any]]]:
    """Yield pages from a keyset-paginated endpoint.

    With follow=True, keeps passing next_cursor back as ?start= until the
    server says has_more is false.
    """
    params: dict[str, Any] = {"limit": limit}
    while True:
        r = await c.get(path, params=params)
        _fail(r)
        page = r.json()
        yield page["data"]
        if not (follow and page["has_more"] and page["next_cursor"]):
            return
        params["start"] = page["next_cursor"]


_STATUS_COLORS = {"draft": "white", "published": "green", "hidden": "yellow"}


# ---------------------------------------------------------------------------
# CLI group
# ---------------------------------------------------------------------------


@click.group()
@click.version_option(version="0.1.0", prog_name="quill")
def main():
    """Quill — a command-line client for the Quill blog API."""


# ---------------------------------------------------------------------------
# quill login / refresh / change-password
# ---------------------------------------------------------------------------


@main.command()
@click.argument("username")
@click.password_option(confirmation_prompt=False)
def login(username: str, password: str):
    """Log in and store the access and refresh tokens."""
    _run(_login_impl(username, password))


async def _login_impl(username: str, password: str):
    async with _client() as c:
        r = await c.post("/api/v1/auth/login", json={"username": username, "password": password})
        _fail(r)
        tokens = r.json()

    save_session({
        "username": username,
        "access_token": tokens["access_token"],
        "refresh_token": tokens["refresh_token"],
    })
    click.secho(f"Logged in as {username}", fg="green")


@main.command()
def refresh():
    """Exchange the stored refresh token for a new access token."""
    _run(_refresh_impl())


async def _refresh_impl():
    refresh_token = _require_token("refresh_token")
    async with _client() as c:
        r = await c.post("/api/v1/auth/refresh", json={"refresh_token": refresh_token})
        _fail(r)

    session = load_session()
    session["access_token"] = r.json()["access_token"]
    save_session(session)
    click.secho("Access token refreshed", fg="green")


@main.command("change-password")
@click.option("--old-password", prompt=True, hide_input=True)
@click.option("--new-password", prompt=True, hide_input=True, confirmation_prompt=True)
def change_password(old_password: str, new_password: str):
    """Change your password. All existing sessions, this one included, end."""
    _run(_change_password_impl(old_password, new_password))


async def _change_password_impl(old_password: str, new_password: str):
    session = load_session()
    async with _client(_require_token()) as c:
        r = await c.post("/api/v1/auth/change-password", json={
            "old_password": old_password,
            "new_password": new_password,
        })
        _fail(r)

    # Stored tokens are now dead; log straight back in with the new password.
    username = session.get("username")
    if username:
        await _login_impl(username, new_password)
    else:
        save_session({})
        click.echo("Password changed. Log in again.")


# ---------------------------------------------------------------------------
# quill articles / tags / post
# ---------------------------------------------------------------------------


@main.command()
@click.option("--author", "author_id", help="Only articles by this user UUID")
@click.option("--tag", "tag_id", help="Only articles with this tag UUID")
@click.option("--limit", "-l", default=10, show_default=True, help="Page size")
@click.option("--all", "follow", is_flag=True, help="Follow cursors to the last page")
def articles(author_id: Optional[str], tag_id: Optional[str], limit: int, follow: bool):
    """List articles, newest first."""
    if author_id and tag_id:
        raise click.UsageError("--author and --tag are mutually exclusive")
    _run(_articles_impl(author_id, tag_id, limit, follow))


async def _articles_impl(
    author_id: Optional[str], tag_id: Optional[str], limit: int, follow: bool
):
    if author_id:
        path = f"/api/v1/users/{author_id}/articles"
    elif tag_id:
        path = f"/api/v1/tags/{tag_id}/articles"
    else:
        path = "/api/v1/articles"

    shown = 0
    async with _client() as c:
        async for page in iter_pages(c, path, limit, follow=follow):
            for a in page:
                status = click.style(a["status"], fg=_STATUS_COLORS.get(a["status"], "white"))
                click.echo(f"  {a['id']}  {str(a['created_at'])[:19]:19s}  {status:18s}  {a['title'][:60]}")
            shown += len(page)

    if not shown:
        click.echo("No articles found.")


@main.command()
@click.option("--limit", "-l", default=50, show_default=True, help="Page size")
@click.option("--all", "follow", is_flag=True, help="Follow cursors to the last page")
def tags(limit: int, follow: bool):
    """List tags, newest first."""
    _run(_tags_impl(limit, follow))


async def _tags_impl(limit: int, follow: bool):
    rows: list[dict] = []
    async with _client() as c:
        async for page in iter_pages(c, "/api/v1/tags", limit, follow=follow):
            rows.extend(page)

    if not rows:
        click.echo("No tags found.")
        return
    _print_table(rows, [("ID", "id", 36), ("Name", "name", 30), ("Created", "created_at", 19)])


@main.command()
@click.argument("title")
@click.option("--content", "-c", help="Article body")
@click.option("--tag", "tag_ids", multiple=True, help="Tag UUID (repeatable)")
def post(title: str, content: Optional[str], tag_ids: tuple[str, ...]):
    """Create a draft article as the logged-in user."""
    _run(_post_impl(title, content, list(tag_ids)))


async def _post_impl(title: str, content: Optional[str], tag_ids: list[str]):
    async with _client(_require_token()) as c:
        r = await c.post("/api/v1/articles", json={
            "title": title,
            "content": content,
            "tag_ids": tag_ids,
        })
        _fail(r)
        article = r.json()
    click.secho(f"Draft created: {article['id']}", fg="green")


if __name__ == "__main__":
    main()
