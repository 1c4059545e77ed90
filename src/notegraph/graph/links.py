"""Link generation: derive typed, weighted edges between notes.

Every strategy is a pure function of the ordered note list, so the same
notes and mode always yield the same links in the same order.
"""

import logging
import re
from collections.abc import Sequence
from itertools import combinations

from notegraph.config import settings
from notegraph.models import GraphLink, LinkType, Note, RenderMode

logger = logging.getLogger(__name__)

INTERNAL_LINK_RE = re.compile(r"\[\[([^\[\]]+)\]\]")
HIERARCHY_ID_RE = re.compile(r"^(?P<prefix>.+)-(?P<number>\d+)$")
_WORD_RE = re.compile(r"[^\W_]+(?:'[^\W_]+)?")

# Common English words that don't carry topical meaning
ENGLISH_STOPWORDS: frozenset[str] = frozenset([
    "the", "a", "an", "and", "or", "but", "in", "on", "at", "to", "for",
    "of", "with", "by", "is", "are", "was", "were", "be", "been", "being",
    "have", "has", "had", "do", "does", "did", "will", "would", "could",
    "should", "may", "might", "can", "shall", "must", "this", "that",
    "these", "those", "i", "you", "he", "she", "it", "we", "they", "me",
    "him", "her", "us", "them", "my", "your", "his", "its", "our", "their",
    "from", "as", "into", "about", "than", "then", "there", "here", "not",
    "no", "so", "if", "also", "just", "all", "any", "some", "such", "what",
    "which", "who", "when", "where", "how", "why", "out", "up", "over",
])


def extract_keywords(text: str, min_length: int | None = None) -> frozenset[str]:
    """Lowercase word set of `text` without stop-words and short tokens."""
    min_len = min_length if min_length is not None else settings.similarity_min_token_length
    return frozenset(
        word
        for word in _WORD_RE.findall(text.lower())
        if len(word) >= min_len and word not in ENGLISH_STOPWORDS
    )


def jaccard(a: frozenset[str] | set[str], b: frozenset[str] | set[str]) -> float:
    """|a ∩ b| / |a ∪ b|, or 0.0 when both are empty."""
    union = len(a | b)
    if union == 0:
        return 0.0
    return len(a & b) / union


class LinkGenerator:
    """
    Builds the links for one render mode.

    Strategies:
    - internal: [[Title]] references, strength saturating at K occurrences
    - tag: Jaccard of tag sets
    - similarity: Jaccard of body keyword sets above a threshold
    - hierarchical: {prefix}-{n} links to {prefix}-{n-1}
    - hybrid: internal + tag
    """

    def __init__(
        self,
        internal_saturation: int | None = None,
        similarity_threshold: float | None = None,
        similarity_ceiling: int | None = None,
        similarity_window: int | None = None,
        min_token_length: int | None = None,
    ) -> None:
        self.internal_saturation = max(
            1,
            internal_saturation if internal_saturation is not None else settings.internal_link_saturation,
        )
        self.similarity_threshold = (
            similarity_threshold if similarity_threshold is not None else settings.similarity_threshold
        )
        self.similarity_ceiling = (
            similarity_ceiling if similarity_ceiling is not None else settings.similarity_node_ceiling
        )
        self.similarity_window = (
            similarity_window if similarity_window is not None else settings.similarity_sample_window
        )
        self.min_token_length = (
            min_token_length if min_token_length is not None else settings.similarity_min_token_length
        )

    def generate(self, notes: Sequence[Note], mode: RenderMode | str) -> list[GraphLink]:
        """Generate the links of a single render mode."""
        mode = RenderMode.parse(mode)
        if mode == RenderMode.TAG:
            return self.tag_links(notes)
        if mode == RenderMode.SIMILARITY:
            return self.similarity_links(notes)
        if mode == RenderMode.HIERARCHICAL:
            return self.hierarchical_links(notes)
        if mode == RenderMode.HYBRID:
            return self.internal_links(notes) + self.tag_links(notes)
        return self.internal_links(notes)

    def internal_links(self, notes: Sequence[Note]) -> list[GraphLink]:
        """Links from [[Title]] references, one per unordered pair."""
        by_title: dict[str, Note] = {}
        for note in notes:
            # Duplicate titles resolve to the first note in list order
            by_title.setdefault(note.title.strip().lower(), note)

        # pair -> [source, target, occurrences]
        pairs: dict[frozenset[str], list] = {}
        unresolved = 0
        for note in notes:
            for match in INTERNAL_LINK_RE.finditer(note.body):
                target = by_title.get(match.group(1).strip().lower())
                if target is None:
                    unresolved += 1
                    continue
                if target.id == note.id:
                    continue
                key = frozenset((note.id, target.id))
                entry = pairs.get(key)
                if entry is None:
                    pairs[key] = [note.id, target.id, 1]
                else:
                    entry[2] += 1

        if unresolved:
            logger.debug(f"Dropped {unresolved} unresolved [[...]] references")

        return [
            GraphLink(
                source=source,
                target=target,
                type=LinkType.INTERNAL,
                strength=min(1.0, count / self.internal_saturation),
            )
            for source, target, count in pairs.values()
        ]

    def tag_links(self, notes: Sequence[Note]) -> list[GraphLink]:
        """Links between notes sharing at least one tag."""
        tag_sets = [(note.id, frozenset(note.tags)) for note in notes]
        links: list[GraphLink] = []
        for (id_a, tags_a), (id_b, tags_b) in combinations(tag_sets, 2):
            if id_a == id_b or not (tags_a & tags_b):
                continue
            links.append(GraphLink(id_a, id_b, LinkType.TAG, jaccard(tags_a, tags_b)))
        return links

    def similarity_links(self, notes: Sequence[Note]) -> list[GraphLink]:
        """Links between notes whose body keyword sets overlap enough.

        Comparing every pair is O(n²); above the ceiling each note is only
        compared with the next `similarity_window` notes.
        """
        keywords = [(note.id, extract_keywords(note.body, self.min_token_length)) for note in notes]
        count = len(keywords)
        window = count
        if count > self.similarity_ceiling:
            window = self.similarity_window
            logger.warning(
                f"Similarity links sampled: {count} notes exceed ceiling "
                f"{self.similarity_ceiling}, comparing {window} neighbours each"
            )

        links: list[GraphLink] = []
        for i, (id_a, words_a) in enumerate(keywords):
            if not words_a:
                continue
            for id_b, words_b in keywords[i + 1 : i + 1 + window]:
                if id_a == id_b:
                    continue
                score = jaccard(words_a, words_b)
                if score > self.similarity_threshold:
                    links.append(GraphLink(id_a, id_b, LinkType.SIMILARITY, score))
        return links

    def hierarchical_links(self, notes: Sequence[Note]) -> list[GraphLink]:
        """Link each {prefix}-{n} note to its {prefix}-{n-1} predecessor."""
        sequence: dict[tuple[str, int], str] = {}
        parsed: list[tuple[str, str, int]] = []
        for note in notes:
            match = HIERARCHY_ID_RE.match(note.id)
            if not match:
                continue
            key = (match.group("prefix"), int(match.group("number")))
            sequence.setdefault(key, note.id)
            parsed.append((note.id, key[0], key[1]))

        links: list[GraphLink] = []
        seen: set[frozenset[str]] = set()
        for note_id, prefix, number in parsed:
            parent = sequence.get((prefix, number - 1))
            if parent is None or parent == note_id:
                continue
            pair = frozenset((parent, note_id))
            if pair in seen:
                continue
            seen.add(pair)
            links.append(GraphLink(parent, note_id, LinkType.HIERARCHICAL, 1.0))
        return links


def generate_links(notes: Sequence[Note], mode: RenderMode | str) -> list[GraphLink]:
    """
    Convenience function for link generation with configured defaults.

    Only the links of `mode` are produced.
    """
    return LinkGenerator().generate(notes, mode)
