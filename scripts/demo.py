#!/usr/bin/env python3
"""
MCP Notes Server Demo

Starts the notes MCP server over stdio in a throwaway directory and walks
through every tool, resource and prompt it exposes, the same way a desktop
chat assistant would.
"""

from __future__ import annotations

import os
import re
import sys
import tempfile

import anyio
from mcp import ClientSession, StdioServerParameters
from mcp.client.stdio import stdio_client

SERVER_MODULE = "mcp_servers.notes.server"

# ---------------------------------------------------------------------------
# ANSI colours
# ---------------------------------------------------------------------------
BOLD = "\033[1m"
DIM = "\033[2m"
RESET = "\033[0m"
CYAN = "\033[96m"
GREEN = "\033[92m"
YELLOW = "\033[93m"
RED = "\033[91m"
MAGENTA = "\033[95m"


def banner(text: str) -> None:
    """Print a bold cyan banner."""
    width = 60
    print()
    print(f"{CYAN}{BOLD}{'=' * width}{RESET}")
    print(f"{CYAN}{BOLD}  {text}{RESET}")
    print(f"{CYAN}{BOLD}{'=' * width}{RESET}")
    print()


def step(number: int, title: str) -> None:
    """Print a step header."""
    print(f"\n{YELLOW}{BOLD}--- Step {number}: {title} ---{RESET}\n")


def info(msg: str) -> None:
    print(f"  {DIM}{msg}{RESET}")


def success(msg: str) -> None:
    print(f"  {GREEN}{msg}{RESET}")


def show(text: str, max_lines: int = 8) -> None:
    """Print a tool result, truncated."""
    lines = text.strip().splitlines()
    preview = "\n    ".join(lines[:max_lines])
    if len(lines) > max_lines:
        preview += f"\n    {DIM}...({len(lines) - max_lines} more lines){RESET}"
    print(f"    {preview}")


def text_of(result) -> str:
    """Concatenate the text blocks of a CallToolResult."""
    return "\n".join(c.text for c in result.content if getattr(c, "text", None))


def note_id_of(text: str) -> str | None:
    """Pull the note ID out of a create_note confirmation."""
    match = re.search(r"^ID: (\S+)$", text, re.MULTILINE)
    return match.group(1) if match else None


# ---------------------------------------------------------------------------
# Demo flow
# ---------------------------------------------------------------------------


async def run(notes_dir: str) -> None:
    params = StdioServerParameters(
        command=sys.executable,
        args=["-m", SERVER_MODULE],
        env={**os.environ, "NOTES_DIR": notes_dir},
    )
    async with stdio_client(params) as (read, write):
        async with ClientSession(read, write) as session:
            await session.initialize()

            step(1, "Discover capabilities")
            tools = await session.list_tools()
            success(f"{len(tools.tools)} tools: " + ", ".join(t.name for t in tools.tools))
            prompts = await session.list_prompts()
            names = ", ".join(p.name for p in prompts.prompts)
            success(f"{len(prompts.prompts)} prompts: {names}")

            step(2, "Create notes")
            ids = []
            for title, content, tags in [
                ("Python tips", "Use list comprehensions", ["python", "tips"]),
                ("Grocery list", "Eggs, milk, bread", ["personal"]),
                ("MCP notes", "FastMCP uses decorators", ["python", "mcp"]),
            ]:
                r = await session.call_tool(
                    "create_note", {"title": title, "content": content, "tags": tags}
                )
                ids.append(note_id_of(text_of(r)))
                show(text_of(r), max_lines=2)

            step(3, "List, search and tags")
            show(text_of(await session.call_tool("list_notes", {})))
            show(text_of(await session.call_tool(
                "search_notes", {"query": "", "tags": ["python"]}
            )))
            show(text_of(await session.call_tool("list_tags", {})))

            step(4, "Update and read back")
            if ids[0]:
                await session.call_tool(
                    "update_note",
                    {"id": ids[0], "content": "Prefer generators for big data"},
                )
                show(text_of(await session.call_tool("get_note", {"id": ids[0]})))

            step(5, "Resources")
            resource = await session.read_resource("notes://all")
            show(resource.contents[0].text, max_lines=6)

            step(6, "Prompts")
            prompt = await session.get_prompt(
                "create_meeting_notes",
                {"meeting_title": "Sprint planning", "attendees": "Ana, Li"},
            )
            show(prompt.messages[0].content.text, max_lines=6)

            step(7, "Delete")
            show(text_of(await session.call_tool("delete_note", {"id": ids[1]})))
            r = await session.call_tool("get_note", {"id": ids[1]})
            if r.isError:
                success("Deleted note is gone: " + text_of(r))
            else:
                print(f"  {RED}Deleted note still readable!{RESET}")

            step(8, "Health")
            show(text_of(await session.call_tool("health_check", {})))


def main() -> None:
    """Run the full demo against a temporary notes directory."""
    banner("\U0001f4dd MCP Notes Server Demo")
    with tempfile.TemporaryDirectory(prefix="notes-demo-") as notes_dir:
        info(f"Storage: {notes_dir}")
        anyio.run(run, notes_dir)
    print(f"\n{MAGENTA}{BOLD}Demo complete.{RESET}\n")


if __name__ == "__main__":
    main()
