#!/usr/bin/env python3
"""
Quill Quickstart — tags, articles, publishing, and cursor pagination.

Run with: python examples/quickstart.py

Requires: pip install httpx
Backend must be running: http://localhost:8000
"""

from _common import create_client


def main():
    client = create_client()
    me = client.get("/auth/me").json()

    # ── Tags ──────────────────────────────────────────────────────
    print("\n1. Creating tags...")
    tags = {}
    for name in (f"python-{me['id'][:6]}", f"databases-{me['id'][:6]}"):
        resp = client.post("/tags", json={"name": name})
        assert resp.status_code == 201, f"Failed: {resp.text}"
        tags[name] = resp.json()
        print(f"   Tag: {name}")
    python_tag, db_tag = tags.values()

    # ── Articles ──────────────────────────────────────────────────
    print("\n2. Writing seven drafts...")
    for i in range(7):
        tag_ids = [python_tag["id"]] if i % 2 == 0 else [db_tag["id"]]
        resp = client.post("/articles", json={
            "title": f"Keyset pagination, part {i + 1}",
            "content": "Seek, don't skip.",
            "tag_ids": tag_ids,
        })
        assert resp.status_code == 201, f"Failed: {resp.text}"
    print("   Done.")

    # ── Publish the newest ────────────────────────────────────────
    print("\n3. Publishing the newest article...")
    newest = client.get(f"/users/{me['id']}/articles", params={"limit": 1}).json()["data"][0]
    resp = client.patch(f"/articles/{newest['id']}/status", json={"status": "published"})
    print(f"   {newest['title']}: {resp.json()['previous_status']} → {resp.json()['status']}")

    # ── Walk pages ────────────────────────────────────────────────
    print("\n4. Reading my articles three at a time...")
    params = {"limit": 3}
    page_no = 1
    while True:
        page = client.get(f"/users/{me['id']}/articles", params=params).json()
        titles = ", ".join(a["title"].rsplit(" ", 1)[-1] for a in page["data"])
        print(f"   Page {page_no}: parts {titles}  (has_more={page['has_more']})")
        if not page["has_more"]:
            break
        params["start"] = page["next_cursor"]
        page_no += 1

    # ── By tag ────────────────────────────────────────────────────
    print("\n5. Articles tagged with the python tag...")
    page = client.get(f"/tags/{python_tag['id']}/articles", params={"limit": 10}).json()
    for a in page["data"]:
        print(f"   {a['title']} [{a['status']}]")

    print("\nDone!")


if __name__ == "__main__":
    main()
