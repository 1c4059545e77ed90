"""Filter pipeline: narrow the node set by search, tags, date, content and size."""

import logging
from calendar import monthrange
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone
from enum import Enum

from notegraph.config import settings
from notegraph.graph.links import INTERNAL_LINK_RE
from notegraph.models import GraphLink, GraphNode, Note

logger = logging.getLogger(__name__)


class DateBucket(str, Enum):
    """Trailing creation-date windows."""

    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"


class ContentFilter(str, Enum):
    """Predicates on a note's body and tags."""

    ALL = "all"
    HAS_LINKS = "has-links"
    HAS_TAGS = "has-tags"
    HAS_CONTENT = "has-content"


class SizeBucket(str, Enum):
    """Derived node-size buckets."""

    ALL = "all"
    SMALL = "small"  # size <= 25
    MEDIUM = "medium"  # 25 < size <= 40
    LARGE = "large"  # size > 40


def _coerce(enum_cls, value):
    """Unknown or empty values mean "match all"."""
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        return enum_cls("all")


@dataclass(frozen=True)
class FilterCriteria:
    """Filter settings, combined with AND. The default instance matches everything."""

    search: str = ""
    tags: frozenset[str] = field(default_factory=frozenset)
    date: DateBucket = DateBucket.ALL
    content: ContentFilter = ContentFilter.ALL
    size: SizeBucket = SizeBucket.ALL

    def __post_init__(self) -> None:
        object.__setattr__(self, "search", (self.search or "").strip())
        object.__setattr__(self, "tags", frozenset(t for t in (self.tags or ()) if t))
        object.__setattr__(self, "date", _coerce(DateBucket, self.date))
        object.__setattr__(self, "content", _coerce(ContentFilter, self.content))
        object.__setattr__(self, "size", _coerce(SizeBucket, self.size))

    @property
    def is_empty(self) -> bool:
        return (
            not self.search
            and not self.tags
            and self.date == DateBucket.ALL
            and self.content == ContentFilter.ALL
            and self.size == SizeBucket.ALL
        )

    def to_dict(self) -> dict:
        return {
            "search": self.search,
            "tags": sorted(self.tags),
            "date": self.date.value,
            "content": self.content.value,
            "size": self.size.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "FilterCriteria":
        return cls(
            search=data.get("search") or "",
            tags=frozenset(data.get("tags") or ()),
            date=data.get("date") or DateBucket.ALL,
            content=data.get("content") or ContentFilter.ALL,
            size=data.get("size") or SizeBucket.ALL,
        )


def _subtract_months(moment: datetime, months: int) -> datetime:
    month_index = moment.month - 1 - months
    year = moment.year + month_index // 12
    month = month_index % 12 + 1
    day = min(moment.day, monthrange(year, month)[1])
    return moment.replace(year=year, month=month, day=day)


def date_cutoff(bucket: DateBucket, now: datetime) -> datetime | None:
    """Earliest creation time admitted by `bucket`, or None for all."""
    if bucket == DateBucket.TODAY:
        return now - timedelta(days=1)
    if bucket == DateBucket.WEEK:
        return now - timedelta(days=7)
    if bucket == DateBucket.MONTH:
        return _subtract_months(now, 1)
    if bucket == DateBucket.YEAR:
        return _subtract_months(now, 12)
    return None


def size_bucket(size: float) -> SizeBucket:
    """Bucket a node size.

    With the default sizing every node is at least `node_base_size` (30), so
    "small" (<= 25) only matches when the base size is configured lower.
    """
    if size <= settings.small_node_max_size:
        return SizeBucket.SMALL
    if size <= settings.medium_node_max_size:
        return SizeBucket.MEDIUM
    return SizeBucket.LARGE


def _matches_content(note: Note | None, content: ContentFilter) -> bool:
    if note is None:
        return False
    if content == ContentFilter.HAS_LINKS:
        return INTERNAL_LINK_RE.search(note.body) is not None
    if content == ContentFilter.HAS_TAGS:
        return len(note.tags) > 0
    if content == ContentFilter.HAS_CONTENT:
        return len(note.body) > settings.content_length_threshold
    return True


def _predicates(
    criteria: FilterCriteria,
    notes_by_id: Mapping[str, Note],
    now: datetime,
) -> list[Callable[[GraphNode], bool]]:
    predicates: list[Callable[[GraphNode], bool]] = []

    if criteria.search:
        query = criteria.search.lower()
        predicates.append(
            lambda node: query in node.title.lower()
            or any(query in tag.lower() for tag in node.tags)
        )

    if criteria.tags:
        wanted = criteria.tags
        predicates.append(lambda node: not wanted.isdisjoint(node.tags))

    cutoff = date_cutoff(criteria.date, now)
    if cutoff is not None:
        def created_after(node: GraphNode) -> bool:
            note = notes_by_id.get(node.id)
            return note is not None and note.created_at >= cutoff

        predicates.append(created_after)

    if criteria.content != ContentFilter.ALL:
        content = criteria.content
        predicates.append(lambda node: _matches_content(notes_by_id.get(node.id), content))

    if criteria.size != SizeBucket.ALL:
        bucket = criteria.size
        predicates.append(lambda node: size_bucket(node.size) == bucket)

    return predicates


def filter_nodes(
    nodes: Sequence[GraphNode],
    criteria: FilterCriteria | None,
    notes_by_id: Mapping[str, Note] | None = None,
    now: datetime | None = None,
) -> list[GraphNode]:
    """Keep nodes matching every active predicate, preserving order.

    Date and content predicates look the node's note up in `notes_by_id`;
    a node without a note fails them.
    """
    if criteria is None or criteria.is_empty:
        return list(nodes)

    predicates = _predicates(criteria, notes_by_id or {}, now or datetime.now(timezone.utc))
    kept = [node for node in nodes if all(check(node) for check in predicates)]
    logger.debug(f"Filter kept {len(kept)}/{len(nodes)} nodes")
    return kept


def filter_links(links: Iterable[GraphLink], surviving_ids: Iterable[str]) -> list[GraphLink]:
    """Keep links whose both endpoints survived."""
    ids = surviving_ids if isinstance(surviving_ids, (set, frozenset)) else set(surviving_ids)
    return [link for link in links if link.source in ids and link.target in ids]
