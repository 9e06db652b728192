"""Relevance scoring for search candidates."""
from dataclasses import dataclass, field
from typing import List, Sequence

from catalog_search.normalizer import normalize


TITLE_WEIGHT = 3
EXCERPT_WEIGHT = 1
TAG_WEIGHT = 2


@dataclass
class ScoredFields:
    """Normalized text of the fields a candidate is scored on."""
    title: str
    excerpt: str
    tags: List[str] = field(default_factory=list)

    @classmethod
    def from_raw(cls, title: str, excerpt: str, tags: Sequence[str] = ()) -> "ScoredFields":
        """Build scored fields from raw (non-normalized) entity text."""
        return cls(
            title=normalize(title),
            excerpt=normalize(excerpt),
            tags=[normalize(tag) for tag in tags],
        )


def score(fields: ScoredFields, query_words: Sequence[str]) -> int:
    """Score a candidate against normalized query words.

    Each word adds TITLE_WEIGHT per occurrence in the title, EXCERPT_WEIGHT per
    occurrence in the excerpt and TAG_WEIGHT once if any tag contains it.

    Args:
        fields: Normalized candidate fields
        query_words: Normalized query words

    Returns:
        Weighted match count (0 means no match)
    """
    total = 0
    for word in query_words:
        if not word:
            continue
        total += fields.title.count(word) * TITLE_WEIGHT
        total += fields.excerpt.count(word) * EXCERPT_WEIGHT
        if any(word in tag for tag in fields.tags):
            total += TAG_WEIGHT
    return total
