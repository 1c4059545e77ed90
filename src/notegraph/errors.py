"""Exceptions raised by notegraph."""


class NoteGraphError(Exception):
    """Base class for notegraph errors."""


class SurfaceUnavailableError(NoteGraphError):
    """No drawing surface could be created for a render."""


class UnknownNodeError(NoteGraphError, KeyError):
    """A node id is not part of the current simulation."""

    def __init__(self, node_id: str) -> None:
        super().__init__(node_id)
        self.node_id = node_id

    def __str__(self) -> str:
        return f"Unknown node: {self.node_id}"
