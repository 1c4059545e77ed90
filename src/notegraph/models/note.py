"""Note model - the read-only record supplied by the external note store."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def parse_datetime(value: Any) -> datetime | None:
    """Parse datetime from various formats (ISO string, epoch millis, or native datetime).

    Naive values are assumed to be UTC so that every timestamp in the graph
    compares against the same clock.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, (int, float)):
        # Epoch milliseconds, as produced by JavaScript note stores
        parsed = datetime.fromtimestamp(value / 1000.0, tz=timezone.utc)
    else:
        text = str(value)
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        parsed = datetime.fromisoformat(text)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


@dataclass(frozen=True)
class Note:
    """
    A single note in the knowledge base.

    The graph engine only reads notes; storage and editing belong to the
    note store. `body` may embed `[[Title]]` references to other notes.
    """

    id: str
    title: str
    body: str = ""
    tags: tuple[str, ...] = ()

    created_at: datetime = field(default_factory=utcnow)
    updated_at: datetime = field(default_factory=utcnow)

    def __post_init__(self) -> None:
        # Accept any iterable of tags but keep first-seen order without duplicates
        object.__setattr__(self, "tags", tuple(dict.fromkeys(self.tags)))

    @property
    def primary_tag(self) -> str | None:
        """First tag of the note, used for colouring."""
        return self.tags[0] if self.tags else None

    def to_dict(self) -> dict:
        """Convert to dictionary using the note store's field names."""
        return {
            "id": self.id,
            "title": self.title,
            "body": self.body,
            "tags": list(self.tags),
            "createdAt": self.created_at.isoformat(),
            "updatedAt": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Note":
        """Create from a note store record (camelCase or snake_case keys)."""
        created = data.get("createdAt", data.get("created_at"))
        updated = data.get("updatedAt", data.get("updated_at"))
        return cls(
            id=str(data["id"]),
            title=data.get("title") or "",
            body=data.get("body") or "",
            tags=tuple(data.get("tags") or ()),
            created_at=parse_datetime(created) or utcnow(),
            updated_at=parse_datetime(updated) or utcnow(),
        )
