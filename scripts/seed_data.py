"""Seed the notes store with realistic sample data.

Creates a handful of tagged notes through the REST API so the dashboard
and the chat-assistant bridge have something to show.
Requires the notes API to be running (``notes-api``).

Usage:
    python scripts/seed_data.py [--base-url http://localhost:3000]
"""

from __future__ import annotations

import argparse
import sys

import requests

DEFAULT_BASE_URL = "http://localhost:3000"
TIMEOUT = 10


# Each entry: (title, content, tags)
NOTES: list[tuple[str, str, list[str]]] = [
    (
        "Project Ideas",
        "# Project Ideas\n\n"
        "- MCP-powered code review assistant\n"
        "- Markdown notes synced to a chat assistant\n",
        ["ideas", "mcp"],
    ),
    (
        "Architecture sync",
        "# Architecture sync\n\n"
        "**Attendees:** Priya, Marco\n\n"
        "## Decisions\n"
        "- Keep notes as plain Markdown files\n"
        "- One JSON index for metadata\n",
        ["meeting", "architecture"],
    ),
    (
        "Reading List",
        "Papers to read:\n\n"
        "1. Attention Is All You Need\n"
        "2. ReAct: Synergizing Reasoning and Acting\n"
        "3. Toolformer\n",
        ["reading", "papers"],
    ),
    (
        "Python: async file writes",
        "# Code Snippet: Python\n\n"
        "```python\n"
        "async with await anyio.open_file(path, 'wb') as f:\n"
        "    await f.write(data)\n"
        "```\n",
        ["code", "python"],
    ),
    (
        "Groceries",
        "Eggs, milk, bread, coffee",
        ["personal"],
    ),
    (
        "Weekly review",
        "What went well, what didn't, what to try next week.",
        ["personal", "meeting"],
    ),
]


def check_health(base_url: str) -> bool:
    """Verify the notes API is reachable and healthy."""
    try:
        resp = requests.get(f"{base_url}/health", timeout=TIMEOUT)
        return resp.json().get("status") == "healthy"
    except (requests.RequestException, ValueError) as e:
        print(f"  Health check failed: {e}")
        return False


def create_note(base_url: str, title: str, content: str, tags: list[str]) -> dict:
    """Create a single note and return it."""
    resp = requests.post(
        f"{base_url}/api/notes",
        json={"title": title, "content": content, "tags": tags},
        timeout=TIMEOUT,
    )
    resp.raise_for_status()
    return resp.json()["data"]


def main() -> None:
    """Create all sample notes sequentially."""
    parser = argparse.ArgumentParser(description="Seed sample notes")
    parser.add_argument(
        "--base-url",
        default=DEFAULT_BASE_URL,
        help=f"Notes API base URL (default: {DEFAULT_BASE_URL})",
    )
    args = parser.parse_args()
    base_url = args.base_url.rstrip("/")
    total = len(NOTES)

    print(f"\n  Seeding notes via {base_url}")
    print("  " + "=" * 58)

    print(f"\n  [0/{total}] Checking API health...")
    if not check_health(base_url):
        print("  FAIL: Notes API is not healthy. Is notes-api running?")
        sys.exit(1)
    print("  OK: API is healthy.\n")

    created = 0
    for i, (title, content, tags) in enumerate(NOTES, 1):
        try:
            note = create_note(base_url, title, content, tags)
            created += 1
            print(f"  [{i}/{total}] {title}  ->  {note['id']}  {tags}")
        except requests.RequestException as e:
            print(f"  [{i}/{total}] {title}  ERROR: {e}")

    print("  " + "=" * 58)
    print(f"  Done! {created}/{total} notes created.")
    print("    - Dashboard:     streamlit run ui/app.py")
    print(f"    - API Docs:      {base_url}/docs")
    print()


if __name__ == "__main__":
    main()
