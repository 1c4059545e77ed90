"""Storage layer for notegraph."""

from notegraph.storage.notes import InMemoryNoteStore, NoteStore
from notegraph.storage.preferences import InMemoryPreferenceStore, PreferenceStore

__all__ = [
    "NoteStore",
    "InMemoryNoteStore",
    "PreferenceStore",
    "InMemoryPreferenceStore",
]
