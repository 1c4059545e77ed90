"""Note sources for the graph engine."""

import logging
from collections.abc import Iterable
from typing import Protocol

from notegraph.models import Note

logger = logging.getLogger(__name__)


class NoteStore(Protocol):
    """Ordered source of notes."""

    def list_notes(self) -> list[Note]: ...

    def get_note(self, note_id: str) -> Note | None: ...


class InMemoryNoteStore:
    """Keeps notes in insertion order; later writes of an id replace earlier ones in place."""

    def __init__(self, notes: Iterable[Note] | None = None) -> None:
        self._notes: dict[str, Note] = {}
        if notes:
            self.replace_all(notes)

    def list_notes(self) -> list[Note]:
        return list(self._notes.values())

    def get_note(self, note_id: str) -> Note | None:
        return self._notes.get(note_id)

    def upsert(self, note: Note) -> None:
        self._notes[note.id] = note

    def delete(self, note_id: str) -> bool:
        return self._notes.pop(note_id, None) is not None

    def replace_all(self, notes: Iterable[Note]) -> None:
        self._notes = {}
        for note in notes:
            if note.id in self._notes:
                logger.warning(f"Duplicate note id {note.id!r}, keeping the last one")
            self._notes[note.id] = note

    def __len__(self) -> int:
        return len(self._notes)
