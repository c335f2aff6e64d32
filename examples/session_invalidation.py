#!/usr/bin/env python3
"""
Quill session invalidation — one password change logs out every device.

Logs in twice (a "laptop" and a "phone"), changes the password from the
laptop, and shows that both sessions and their refresh tokens are dead
while a fresh login works.

Run with: python examples/session_invalidation.py
"""

import httpx

from _common import BASE, PASSWORD, bearer, check_backend, register_and_login


def status_of(token: str) -> int:
    return httpx.get(f"{BASE}/auth/me", headers=bearer(token), timeout=10).status_code


def main():
    check_backend()
    username, laptop = register_and_login()
    phone = httpx.post(
        f"{BASE}/auth/login", json={"username": username, "password": PASSWORD}, timeout=10
    ).json()

    print(f"\n1. Two sessions for {username}")
    print(f"   laptop /me → {status_of(laptop['access_token'])}")
    print(f"   phone  /me → {status_of(phone['access_token'])}")

    print("\n2. Changing password from the laptop...")
    resp = httpx.post(
        f"{BASE}/auth/change-password",
        json={"old_password": PASSWORD, "new_password": "a-much-better-password"},
        headers=bearer(laptop["access_token"]),
        timeout=10,
    )
    print(f"   → {resp.status_code}")

    print("\n3. Old sessions")
    print(f"   laptop /me → {status_of(laptop['access_token'])}")
    print(f"   phone  /me → {status_of(phone['access_token'])}")
    resp = httpx.post(
        f"{BASE}/auth/refresh", json={"refresh_token": phone["refresh_token"]}, timeout=10
    )
    print(f"   phone refresh → {resp.status_code}")

    print("\n4. Fresh login with the new password")
    fresh = httpx.post(
        f"{BASE}/auth/login",
        json={"username": username, "password": "a-much-better-password"},
        timeout=10,
    ).json()
    print(f"   new /me → {status_of(fresh['access_token'])}")


if __name__ == "__main__":
    main()
