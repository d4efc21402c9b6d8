"""File-based storage layer for the Notes server.

Layout of the storage directory::

    index.json    JSON array of note metadata, in creation order
    <id>.md       raw content of one note, nothing else

The index is the only source of truth for titles, tags and timestamps.
All index mutations go through a single per-store lock, and every file is
written to a temporary sibling first and then moved into place, so readers
never observe a half-written index.  Several processes sharing one
directory are still last-writer-wins.
"""

import logging
import re
from datetime import UTC, datetime, timedelta
from pathlib import Path
from uuid import uuid4

import anyio
from pydantic import TypeAdapter, ValidationError

from .models import NOTE_ID_PATTERN, Note, NoteMetadata, NoteUpdate

logger = logging.getLogger("notes.storage")

DEFAULT_STORAGE_DIR = Path("./notes-data")
INDEX_FILENAME = "index.json"
CONTENT_SUFFIX = ".md"

_INDEX = TypeAdapter(list[NoteMetadata])
_SAFE_ID = re.compile(NOTE_ID_PATTERN)


class StorageError(RuntimeError):
    """The storage directory, index or a content file could not be accessed."""


def _is_valid_id(note_id: str) -> bool:
    return isinstance(note_id, str) and _SAFE_ID.fullmatch(note_id) is not None


def _position(index: list[NoteMetadata], note_id: str) -> int | None:
    for i, entry in enumerate(index):
        if entry.id == note_id:
            return i
    return None


def timestamp(after: str | None = None) -> str:
    """Current UTC time as a fixed-width ISO-8601 string.

    If *after* is given the result is strictly later than it, so two
    writes inside one clock tick still produce increasing timestamps.
    """
    now = datetime.now(UTC)
    if after:
        try:
            previous = datetime.fromisoformat(after)
        except ValueError:
            previous = None
        if previous is not None:
            if previous.tzinfo is None:
                previous = previous.replace(tzinfo=UTC)
            if now <= previous:
                now = previous + timedelta(microseconds=1)
    return now.isoformat(timespec="microseconds")


class NotesStorage:
    """Manages note persistence: one content file per note plus a JSON index."""

    def __init__(self, base_dir: Path | str = DEFAULT_STORAGE_DIR) -> None:
        self._base = Path(base_dir).resolve()
        self._index_path = self._base / INDEX_FILENAME
        self._lock = anyio.Lock()

    @property
    def base_dir(self) -> Path:
        return self._base

    @property
    def index_path(self) -> Path:
        return self._index_path

    def content_path(self, note_id: str) -> Path:
        """Path of the content file for *note_id*.

        Raises ValueError for ids that could escape the storage directory.
        """
        if not _is_valid_id(note_id):
            raise ValueError(f"Invalid note id: {note_id!r}")
        return self._base / f"{note_id}{CONTENT_SUFFIX}"

    # ------------------------------------------------------------------
    # Setup
    # ------------------------------------------------------------------

    async def initialize(self) -> None:
        """Create the storage directory and an empty index if missing."""
        try:
            await anyio.Path(self._base).mkdir(parents=True, exist_ok=True)
            try:
                # Exclusive create: never clobbers an index another caller wrote.
                async with await anyio.open_file(self._index_path, "x") as f:
                    await f.write("[]")
                logger.info("Created empty index at %s", self._index_path)
            except FileExistsError:
                pass
        except OSError as exc:
            raise StorageError(
                f"Failed to initialize storage at {self._base}: {exc}"
            ) from exc

    # ------------------------------------------------------------------
    # Operations
    # ------------------------------------------------------------------

    async def create_note(
        self, title: str, content: str, tags: list[str] | None = None
    ) -> Note:
        """Create and persist a new note."""
        now = timestamp()
        note = Note(
            id=str(uuid4()),
            title=title,
            content=content,
            tags=tags,
            created_at=now,
            updated_at=now,
        )
        async with self._lock:
            # Content first: a crash before the index write leaves a stray
            # file, never an index entry without content.
            await self._write_content(note.id, note.content)
            index = await self._read_index()
            index.append(note.metadata())
            await self._commit(index)
        logger.info("Created note %s: '%s'", note.id, note.title)
        return note

    async def get_note(self, note_id: str) -> Note | None:
        """Return the full note, or None if it does not exist.

        An index entry whose content file is gone is repaired away and
        reported as missing.
        """
        if not _is_valid_id(note_id):
            return None
        index = await self._read_index()
        position = _position(index, note_id)
        if position is None:
            return None
        content = await self._read_content(note_id)
        if content is None:
            await self.repair_orphan(note_id)
            return None
        return Note(**index[position].model_dump(), content=content)

    async def list_notes(self) -> list[NoteMetadata]:
        """Return metadata for every note, oldest first."""
        return await self._read_index()

    async def update_note(self, note_id: str, changes: NoteUpdate) -> Note | None:
        """Apply the supplied fields of *changes*; None if the note is missing."""
        if not _is_valid_id(note_id):
            return None
        async with self._lock:
            index = await self._read_index()
            position = _position(index, note_id)
            if position is None:
                return None
            current = index[position]
            content = await self._read_content(note_id)
            if content is None:
                await self._repair_orphan_locked(note_id)
                return None

            note = Note(
                id=current.id,
                title=current.title if changes.title is None else changes.title,
                content=content if changes.content is None else changes.content,
                tags=current.tags if changes.tags is None else changes.tags,
                created_at=current.created_at,
                updated_at=timestamp(after=current.updated_at),
            )
            if changes.content is not None:
                await self._write_content(note_id, note.content)
            index[position] = note.metadata()
            await self._commit(index)
        logger.info("Updated note %s: '%s'", note.id, note.title)
        return note

    async def delete_note(self, note_id: str) -> bool:
        """Delete a note. Returns False if it did not exist."""
        if not _is_valid_id(note_id):
            return False
        async with self._lock:
            deleted = await self._remove(note_id)
        if deleted:
            logger.info("Deleted note %s", note_id)
        return deleted

    async def search_notes(
        self, query: str, tags: list[str] | None = None
    ) -> list[Note]:
        """Notes carrying every tag in *tags* whose title or content contains
        *query* (case-insensitive). An empty query matches everything."""
        needle = query.lower()
        required = tags or []
        results: list[Note] = []
        for metadata in await self._read_index():
            if not all(tag in metadata.tags for tag in required):
                continue
            note = await self.get_note(metadata.id)
            if note is None:
                continue
            if needle in note.title.lower() or needle in note.content.lower():
                results.append(note)
        return results

    async def get_all_tags(self) -> list[str]:
        """Every tag in use, sorted and without duplicates."""
        index = await self._read_index()
        return sorted({tag for entry in index for tag in entry.tags})

    async def count(self) -> int:
        """Number of stored notes."""
        return len(await self._read_index())

    async def repair_orphan(self, note_id: str) -> bool:
        """Drop the index entry for a note whose content file is missing.

        Returns True if an entry was removed. A note whose content is still
        readable is left alone.
        """
        async with self._lock:
            return await self._repair_orphan_locked(note_id)

    # ------------------------------------------------------------------
    # Internal helpers (callers of the *_locked / _remove helpers hold the lock)
    # ------------------------------------------------------------------

    async def _repair_orphan_locked(self, note_id: str) -> bool:
        if not _is_valid_id(note_id):
            return False
        # Another writer may have restored the content since it was checked.
        if await self._read_content(note_id) is not None:
            return False
        removed = await self._remove(note_id)
        if removed:
            logger.warning("Removed orphaned index entry %s", note_id)
        return removed

    async def _remove(self, note_id: str) -> bool:
        index = await self._read_index()
        position = _position(index, note_id)
        if position is None:
            return False
        try:
            await anyio.Path(self.content_path(note_id)).unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove content file for %s: %s", note_id, exc)
        del index[position]
        await self._commit(index)
        return True

    async def _read_index(self) -> list[NoteMetadata]:
        try:
            raw = await anyio.Path(self._index_path).read_bytes()
        except OSError as exc:
            raise StorageError(f"Failed to read index: {exc}") from exc
        # An index still being created by initialize() reads as empty.
        if not raw.strip():
            return []
        try:
            return _INDEX.validate_json(raw)
        except ValidationError as exc:
            raise StorageError(f"Corrupt index {self._index_path}: {exc}") from exc

    async def _commit(self, index: list[NoteMetadata]) -> None:
        data = _INDEX.dump_json(index, indent=2, by_alias=True)
        # Once started, an index write finishes even if the caller times out.
        with anyio.CancelScope(shield=True):
            try:
                await _write_atomic(self._index_path, data)
            except OSError as exc:
                raise StorageError(f"Failed to write index: {exc}") from exc

    async def _read_content(self, note_id: str) -> str | None:
        """Note body, or None if the file is missing or unreadable."""
        try:
            raw = await anyio.Path(self.content_path(note_id)).read_bytes()
            return raw.decode("utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            logger.warning("Content of note %s is unreadable: %s", note_id, exc)
            return None

    async def _write_content(self, note_id: str, content: str) -> None:
        try:
            await _write_atomic(self.content_path(note_id), content.encode("utf-8"))
        except OSError as exc:
            raise StorageError(f"Failed to write note {note_id}: {exc}") from exc


async def _write_atomic(path: Path, data: bytes) -> None:
    """Write *data* to a temporary sibling of *path*, then move it into place."""
    target = anyio.Path(path)
    tmp = target.with_name(f".{target.name}.{uuid4().hex}.tmp")
    try:
        await tmp.write_bytes(data)
        await tmp.replace(target)
    except OSError:
        await tmp.unlink(missing_ok=True)
        raise
