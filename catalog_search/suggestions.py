"""Autocomplete suggestions from the product catalog and search history."""
from typing import List, Optional, Sequence

from catalog_search.models import Product, SearchHistoryEntry, SearchSuggestion, SuggestionType
from catalog_search.normalizer import normalize


MAX_SUGGESTIONS = 8
MIN_QUERY_LENGTH = 2

MAX_HISTORY_SUGGESTIONS = 3
MAX_PRODUCT_SUGGESTIONS = 5
MAX_BRAND_SUGGESTIONS = 3
MAX_CATEGORY_SUGGESTIONS = 3


def is_related(candidate: str, normalized_query: str) -> bool:
    """Check if a candidate contains the query or the query contains the candidate.

    Args:
        candidate: Raw candidate text
        normalized_query: Already normalized query

    Returns:
        True when either normalized string is a substring of the other
    """
    normalized = normalize(candidate)
    if not normalized or not normalized_query:
        return False
    return normalized_query in normalized or normalized in normalized_query


def _history_suggestions(
    history: Sequence[SearchHistoryEntry], normalized_query: str
) -> List[SearchSuggestion]:
    newest_first = sorted(history, key=lambda entry: entry.timestamp, reverse=True)
    suggestions = []
    for entry in newest_first:
        if not is_related(entry.query, normalized_query):
            continue
        suggestions.append(SearchSuggestion(
            id=f"history_{entry.id}",
            text=entry.query,
            type=SuggestionType.QUERY,
            count=entry.results_count,
        ))
        if len(suggestions) >= MAX_HISTORY_SUGGESTIONS:
            break
    return suggestions


def _product_suggestions(
    products: Sequence[Product], normalized_query: str
) -> List[SearchSuggestion]:
    suggestions = []
    for product in products:
        if not is_related(product.name, normalized_query):
            continue
        suggestions.append(SearchSuggestion(
            id=f"product_{product.id}",
            text=product.name,
            type=SuggestionType.PRODUCT,
            category=product.category,
        ))
        if len(suggestions) >= MAX_PRODUCT_SUGGESTIONS:
            break
    return suggestions


def _distinct_suggestions(
    values: Sequence[str],
    normalized_query: str,
    suggestion_type: SuggestionType,
    limit: int,
) -> List[SearchSuggestion]:
    seen = set()
    suggestions = []
    for value in values:
        key = normalize(value)
        if key in seen or not is_related(value, normalized_query):
            continue
        seen.add(key)
        suggestions.append(SearchSuggestion(
            id=f"{suggestion_type.value}_{value}",
            text=value,
            type=suggestion_type,
        ))
        if len(suggestions) >= limit:
            break
    return suggestions


def generate_suggestions(
    query: str,
    products: Sequence[Product],
    history: Optional[Sequence[SearchHistoryEntry]] = None,
) -> List[SearchSuggestion]:
    """Generate autocomplete suggestions for a partial query.

    Candidates come from prior searches, product names, brands and
    categories, in that order. Duplicates (by normalized text) are dropped
    and the result is capped at MAX_SUGGESTIONS.

    Args:
        query: Partial query typed by the user
        products: Product collection
        history: Search history entries

    Returns:
        Relevant suggestions, at most MAX_SUGGESTIONS
    """
    normalized_query = normalize(query)
    if len(normalized_query) < MIN_QUERY_LENGTH:
        return []

    candidates: List[SearchSuggestion] = []
    candidates.extend(_history_suggestions(history or [], normalized_query))
    candidates.extend(_product_suggestions(products, normalized_query))
    candidates.extend(_distinct_suggestions(
        [product.brand for product in products],
        normalized_query,
        SuggestionType.BRAND,
        MAX_BRAND_SUGGESTIONS,
    ))
    candidates.extend(_distinct_suggestions(
        [product.category for product in products],
        normalized_query,
        SuggestionType.CATEGORY,
        MAX_CATEGORY_SUGGESTIONS,
    ))

    unique: List[SearchSuggestion] = []
    seen_texts = set()
    for suggestion in candidates:
        key = normalize(suggestion.text)
        if key in seen_texts:
            continue
        seen_texts.add(key)
        unique.append(suggestion)
        if len(unique) >= MAX_SUGGESTIONS:
            break

    return unique
