"""
Shared helpers for Quill examples.

Handles the health check and authentication (register + login) so each
example can focus on its specific workflow.
"""

import sys
import uuid

import httpx

BASE = "http://localhost:8000/api/v1"
PASSWORD = "demo-password-123"


def check_backend() -> None:
    """Verify the backend is reachable and its database is up."""
    try:
        resp = httpx.get(f"{BASE}/health", timeout=5)
    except httpx.ConnectError:
        print(f"ERROR: Backend not reachable at {BASE}")
        print("Start it with:  uvicorn quill.main:app --reload --port 8000")
        sys.exit(1)

    health = resp.json()
    print("Backend health:")
    print(f"  Database: {'✓' if health['database'] == 'ok' else '✗'}")
    print(f"  Redis:    {'✓' if health['redis'] == 'ok' else '✗ (rate limiting off)'}")

    if health["database"] != "ok":
        print("\nERROR: Database is not reachable. Start it with: docker compose up -d")
        sys.exit(1)


def register_and_login(password: str = PASSWORD) -> tuple[str, dict]:
    """Register a fresh user and log in.

    Uses a unique username per run so examples can be re-run.
    Returns (username, token response).
    """
    username = f"demo-{uuid.uuid4().hex[:8]}"

    resp = httpx.post(
        f"{BASE}/auth/register",
        json={"username": username, "email": f"{username}@example.com", "password": password},
        timeout=10,
    )
    if resp.status_code != 201:
        print(f"ERROR: Registration failed: {resp.status_code} {resp.text}")
        sys.exit(1)

    resp = httpx.post(
        f"{BASE}/auth/login",
        json={"username": username, "password": password},
        timeout=10,
    )
    if resp.status_code != 200:
        print(f"ERROR: Login failed: {resp.status_code} {resp.text}")
        sys.exit(1)

    return username, resp.json()


def bearer(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}


def create_client() -> httpx.Client:
    """Check backend, authenticate, and return an httpx Client with auth headers."""
    check_backend()
    username, tokens = register_and_login()
    print(f"  Auth:     ✓ ({username})")
    return httpx.Client(base_url=BASE, timeout=10, headers=bearer(tokens["access_token"]))
