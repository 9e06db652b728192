"""In-memory search and relevance ranking for a product and content catalog."""
from catalog_search.highlighter import highlight, strip_highlights
from catalog_search.history import SearchHistoryStore
from catalog_search.normalizer import normalize
from catalog_search.search import (
    CatalogSearchEngine,
    search_articles,
    search_news,
    search_products,
    search_ratings,
)
from catalog_search.suggestions import generate_suggestions

__all__ = [
    "CatalogSearchEngine",
    "SearchHistoryStore",
    "generate_suggestions",
    "highlight",
    "normalize",
    "search_articles",
    "search_news",
    "search_products",
    "search_ratings",
    "strip_highlights",
]
