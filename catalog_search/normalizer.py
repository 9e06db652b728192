"""Text normalization shared by scoring, highlighting and suggestions."""
import re
import unicodedata
from typing import List, Tuple


_WHITESPACE = re.compile(r"\s+")


def fold_char(char: str) -> str:
    """Fold a single character for comparison.

    Lower-cases, decomposes and drops combining marks (so 'ё' becomes 'е',
    'й' becomes 'и', 'é' becomes 'e'). Anything that is not a letter or a
    digit turns into a space.

    Args:
        char: A single character

    Returns:
        Folded string (may be empty or longer than one character)
    """
    decomposed = unicodedata.normalize("NFKD", unicodedata.normalize("NFKD", char).casefold())
    folded = []
    for c in decomposed:
        if unicodedata.combining(c):
            continue
        folded.append(c if c.isalnum() else " ")
    return "".join(folded)


def fold_with_offsets(text: str) -> Tuple[str, List[int]]:
    """Fold text character by character, remembering where each output char came from.

    Args:
        text: Original text

    Returns:
        Tuple of (folded text, offsets) where offsets[i] is the index in
        `text` of the character that produced folded[i]
    """
    folded_parts = []
    offsets: List[int] = []
    for index, char in enumerate(text):
        folded = fold_char(char)
        folded_parts.append(folded)
        offsets.extend([index] * len(folded))
    return "".join(folded_parts), offsets


def normalize(text: str) -> str:
    """Normalize text for search comparison.

    Args:
        text: Any text

    Returns:
        Lower-cased, diacritic-free text with punctuation removed and
        whitespace collapsed to single spaces
    """
    folded, _ = fold_with_offsets(text)
    return _WHITESPACE.sub(" ", folded).strip()


def split_words(query: str, min_length: int = 1) -> List[str]:
    """Split a query into normalized words.

    Args:
        query: Raw query string
        min_length: Shortest word length to keep

    Returns:
        Normalized words in query order
    """
    return [word for word in normalize(query).split() if len(word) >= min_length]
