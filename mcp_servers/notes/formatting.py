"""Plain-text renderings of notes for MCP tool and resource results."""

from .models import Note, NoteMetadata

PREVIEW_LENGTH = 100


def tag_line(tags: list[str]) -> str:
    return ", ".join(tags) or "none"


def preview(content: str, length: int = PREVIEW_LENGTH) -> str:
    """First *length* characters of the content, with an ellipsis if cut."""
    if len(content) <= length:
        return content
    return content[:length] + "..."


def format_created(note: Note) -> str:
    return (
        "Note created successfully!\n\n"
        f"ID: {note.id}\n"
        f"Title: {note.title}\n"
        f"Tags: {tag_line(note.tags)}\n"
        f"Created: {note.created_at}"
    )


def format_updated(note: Note) -> str:
    return (
        "Note updated successfully!\n\n"
        f"ID: {note.id}\n"
        f"Title: {note.title}\n"
        f"Tags: {tag_line(note.tags)}\n"
        f"Updated: {note.updated_at}"
    )


def format_note(note: Note, include_id: bool = True) -> str:
    """Full markdown view of a note with a metadata footer."""
    footer = [f"ID: {note.id}"] if include_id else []
    footer += [
        f"Tags: {tag_line(note.tags)}",
        f"Created: {note.created_at}",
        f"Updated: {note.updated_at}",
    ]
    return f"# {note.title}\n\n{note.content}\n\n---\n" + "\n".join(footer)


def format_search_results(notes: list[Note]) -> str:
    if not notes:
        return "No notes found matching your search criteria."
    blocks = [
        f"### {n.title}\nID: {n.id}\nTags: {tag_line(n.tags)}\n"
        f"Preview: {preview(n.content)}\n"
        for n in notes
    ]
    return f"Found {len(notes)} note(s):\n\n" + "\n".join(blocks)


def format_listing(notes: list[NoteMetadata]) -> str:
    if not notes:
        return "No notes yet."
    lines = [f"- {n.title} (ID: {n.id}) [{tag_line(n.tags)}]" for n in notes]
    return f"{len(notes)} note(s):\n" + "\n".join(lines)


def format_tags(tags: list[str]) -> str:
    return f"Available tags: {', '.join(tags)}" if tags else "No tags found."
