"""Search engine module for the product and content catalog."""
from typing import Dict, List, Optional, Protocol, Sequence

from catalog_search.highlighter import highlight
from catalog_search.models import (
    Article,
    Catalog,
    Entity,
    EntityKind,
    NewsItem,
    Product,
    Rating,
    SearchFilters,
    SearchResult,
)
from catalog_search.normalizer import normalize, split_words
from catalog_search.scorer import ScoredFields, score


class SearchEngine(Protocol):
    """Protocol for search engines to allow extensibility."""

    def search(
        self,
        query: str,
        catalog: Catalog,
        filters: Optional[SearchFilters] = None,
        limit: Optional[int] = None,
    ) -> List[SearchResult]:
        """Search the catalog based on query.

        Args:
            query: Search query string
            catalog: Collections to search
            filters: Optional result filters
            limit: Maximum number of results to return

        Returns:
            List of matching results, sorted by relevance
        """
        ...


def _highlighted(excerpt: str, query: str) -> Optional[str]:
    marked = highlight(excerpt, query)
    return marked if marked != excerpt else None


def search_products(products: Sequence[Product], query: str) -> List[SearchResult]:
    """Search products by name, description and tags.

    Args:
        products: Product collection
        query: Raw query string

    Returns:
        Matching results in collection order
    """
    query_words = split_words(query)
    if not query_words:
        return []

    results = []
    for product in products:
        relevance = score(
            ScoredFields.from_raw(product.name, product.description, product.tags),
            query_words,
        )
        if relevance <= 0:
            continue
        results.append(SearchResult(
            id=product.id,
            title=product.name,
            excerpt=product.description,
            type=EntityKind.PRODUCT,
            url=f"/catalog?product={product.id}",
            category=product.category,
            tags=list(product.tags),
            relevance_score=relevance,
            highlighted_text=_highlighted(product.description, query),
            image=product.image,
            price=product.price,
            rating=product.rating,
            brand=product.brand,
        ))
    return results


def search_articles(articles: Sequence[Article], query: str) -> List[SearchResult]:
    """Search articles and guides by title, excerpt and tags."""
    query_words = split_words(query)
    if not query_words:
        return []

    results = []
    for article in articles:
        relevance = score(
            ScoredFields.from_raw(article.title, article.excerpt, article.tags),
            query_words,
        )
        if relevance <= 0:
            continue
        results.append(SearchResult(
            id=article.id,
            title=article.title,
            excerpt=article.excerpt,
            type=EntityKind.ARTICLE,
            url=f"/articles/{article.slug}",
            category=article.category,
            tags=list(article.tags),
            relevance_score=relevance,
            highlighted_text=_highlighted(article.excerpt, query),
            image=article.image,
            published_at=article.published_at,
        ))
    return results


def search_news(news: Sequence[NewsItem], query: str) -> List[SearchResult]:
    """Search news items by title, excerpt and tags."""
    query_words = split_words(query)
    if not query_words:
        return []

    results = []
    for item in news:
        relevance = score(
            ScoredFields.from_raw(item.title, item.excerpt, item.tags),
            query_words,
        )
        if relevance <= 0:
            continue
        results.append(SearchResult(
            id=item.id,
            title=item.title,
            excerpt=item.excerpt,
            type=EntityKind.NEWS,
            url=f"/news/{item.slug}",
            category=item.category,
            tags=list(item.tags),
            relevance_score=relevance,
            highlighted_text=_highlighted(item.excerpt, query),
            image=item.image,
            published_at=item.published_at,
        ))
    return results


def search_ratings(ratings: Sequence[Rating], query: str) -> List[SearchResult]:
    """Search product ratings by title, description and tags."""
    query_words = split_words(query)
    if not query_words:
        return []

    results = []
    for rating in ratings:
        relevance = score(
            ScoredFields.from_raw(rating.title, rating.description, rating.tags),
            query_words,
        )
        if relevance <= 0:
            continue
        results.append(SearchResult(
            id=rating.id,
            title=rating.title,
            excerpt=rating.description,
            type=EntityKind.RATING,
            url=f"/ratings/{rating.slug}",
            category=rating.category,
            tags=list(rating.tags),
            relevance_score=relevance,
            highlighted_text=_highlighted(rating.description, query),
            image=rating.image,
            published_at=rating.published_at,
        ))
    return results


def search_entities(kind: EntityKind, collection: Sequence[Entity], query: str) -> List[SearchResult]:
    """Run the search function matching an entity kind.

    Args:
        kind: Entity kind of the collection
        collection: Entities of that kind
        query: Raw query string

    Returns:
        Matching results in collection order
    """
    if kind is EntityKind.PRODUCT:
        return search_products(collection, query)
    if kind is EntityKind.ARTICLE:
        return search_articles(collection, query)
    if kind is EntityKind.NEWS:
        return search_news(collection, query)
    if kind is EntityKind.RATING:
        return search_ratings(collection, query)
    raise ValueError(f"Unknown entity kind: {kind}")


def sort_by_relevance(results: List[SearchResult]) -> List[SearchResult]:
    """Sort results by descending relevance; equal scores keep their order."""
    return sorted(results, key=lambda result: result.relevance_score, reverse=True)


def matches_filters(result: SearchResult, filters: SearchFilters) -> bool:
    """Check whether a result satisfies every filter that is set."""
    if filters.type and filters.type != "all" and result.type.value != filters.type:
        return False

    if filters.category and normalize(result.category) != normalize(filters.category):
        return False

    if filters.price_range is not None:
        low, high = filters.price_range
        if result.price is None or not (low <= result.price <= high):
            return False

    if filters.min_rating is not None:
        if result.rating is None or result.rating < filters.min_rating:
            return False

    if filters.brands:
        wanted = {normalize(brand) for brand in filters.brands}
        if result.brand is None or normalize(result.brand) not in wanted:
            return False

    if filters.tags:
        # AND logic: every requested tag must be present
        result_tags = {normalize(tag) for tag in result.tags}
        if not all(normalize(tag) in result_tags for tag in filters.tags):
            return False

    if filters.date_range is not None:
        start, end = filters.date_range
        if result.published_at is None or not (start <= result.published_at <= end):
            return False

    return True


def apply_filters(results: List[SearchResult], filters: Optional[SearchFilters]) -> List[SearchResult]:
    if filters is None:
        return list(results)
    return [result for result in results if matches_filters(result, filters)]


def group_by_type(results: Sequence[SearchResult]) -> Dict[EntityKind, List[SearchResult]]:
    """Group results by entity kind, keeping first-seen kind order."""
    grouped: Dict[EntityKind, List[SearchResult]] = {}
    for result in results:
        grouped.setdefault(result.type, []).append(result)
    return grouped


def type_counts(results: Sequence[SearchResult]) -> Dict[str, int]:
    """Count results per entity kind."""
    return {kind.value: len(items) for kind, items in group_by_type(results).items()}


class CatalogSearchEngine:
    """Keyword search across products, articles, news and ratings."""

    def search(
        self,
        query: str,
        catalog: Catalog,
        filters: Optional[SearchFilters] = None,
        limit: Optional[int] = None,
    ) -> List[SearchResult]:
        """Search every collection in the catalog and rank the combined results.

        Args:
            query: Search query string
            catalog: Collections to search
            filters: Optional result filters
            limit: Maximum number of results to return (None = all)

        Returns:
            List of results, sorted by relevance (highest score first)
        """
        if not query or not query.strip():
            return []

        combined: List[SearchResult] = []
        for kind in EntityKind:
            combined.extend(search_entities(kind, catalog.collection(kind), query))

        ranked = sort_by_relevance(apply_filters(combined, filters))

        if limit is not None:
            ranked = ranked[:limit]
        return ranked
