"""Query term highlighting."""
from typing import List, Tuple

from catalog_search.normalizer import fold_with_offsets, split_words


MARK_OPEN = "<mark>"
MARK_CLOSE = "</mark>"

# Single letters are noise in highlighted output
MIN_WORD_LENGTH = 2


def _find_spans(folded: str, words: List[str]) -> List[Tuple[int, int]]:
    """Find every occurrence of every word in folded text, merged into disjoint spans."""
    spans = []
    for word in words:
        start = folded.find(word)
        while start != -1:
            spans.append((start, start + len(word)))
            start = folded.find(word, start + 1)

    spans.sort()
    merged: List[Tuple[int, int]] = []
    for start, end in spans:
        if merged and start <= merged[-1][1]:
            merged[-1] = (merged[-1][0], max(merged[-1][1], end))
        else:
            merged.append((start, end))
    return merged


def highlight(text: str, query: str) -> str:
    """Wrap query word occurrences in the original text with <mark> tags.

    Matching is done on folded text (case, diacritics and punctuation
    insensitive), but the marks are placed around the original characters,
    so removing them gives back `text` unchanged. Overlapping matches are
    merged into one mark.

    Args:
        text: Original text
        query: Raw query string

    Returns:
        Text with <mark>...</mark> around matches, or `text` itself if
        nothing matched
    """
    words = split_words(query, min_length=MIN_WORD_LENGTH)
    if not words or not text:
        return text

    folded, offsets = fold_with_offsets(text)
    spans = _find_spans(folded, words)
    if not spans:
        return text

    # Map folded spans back onto original character ranges
    original_spans: List[Tuple[int, int]] = []
    for start, end in spans:
        orig_start = offsets[start]
        orig_end = offsets[end - 1] + 1
        if original_spans and orig_start <= original_spans[-1][1]:
            original_spans[-1] = (original_spans[-1][0], max(original_spans[-1][1], orig_end))
        else:
            original_spans.append((orig_start, orig_end))

    parts = []
    cursor = 0
    for start, end in original_spans:
        parts.append(text[cursor:start])
        parts.append(MARK_OPEN + text[start:end] + MARK_CLOSE)
        cursor = end
    parts.append(text[cursor:])
    return "".join(parts)


def strip_highlights(text: str) -> str:
    """Remove <mark> tags added by highlight()."""
    return text.replace(MARK_OPEN, "").replace(MARK_CLOSE, "")
