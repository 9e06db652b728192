"""Data models for catalog search: entities, results, suggestions and history."""
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Union


class EntityKind(str, Enum):
    """Kinds of searchable catalog entities."""
    PRODUCT = "product"
    ARTICLE = "article"
    NEWS = "news"
    RATING = "rating"


class SuggestionType(str, Enum):
    QUERY = "query"
    PRODUCT = "product"
    CATEGORY = "category"
    BRAND = "brand"


# ----------------------------------------------------------------------------
# Entities
# ----------------------------------------------------------------------------

@dataclass
class Product:
    id: str
    name: str
    brand: str
    category: str
    description: str
    tags: List[str] = field(default_factory=list)
    price: Optional[float] = None
    rating: Optional[float] = None
    image: Optional[str] = None


@dataclass
class Article:
    id: str
    title: str
    slug: str
    excerpt: str
    category: str
    tags: List[str] = field(default_factory=list)
    content: str = ""
    published_at: Optional[datetime] = None
    author: Optional[str] = None
    image: Optional[str] = None


@dataclass
class NewsItem:
    id: str
    title: str
    slug: str
    excerpt: str
    category: str
    tags: List[str] = field(default_factory=list)
    content: str = ""
    published_at: Optional[datetime] = None
    author: Optional[str] = None
    image: Optional[str] = None
    priority: str = "normal"  # low, normal, high, urgent


@dataclass
class Rating:
    id: str
    title: str
    slug: str
    description: str
    category: str
    tags: List[str] = field(default_factory=list)
    published_at: Optional[datetime] = None
    author: Optional[str] = None
    image: Optional[str] = None


Entity = Union[Product, Article, NewsItem, Rating]


@dataclass
class Catalog:
    """In-memory collections handed to the search engine for one call."""
    products: List[Product] = field(default_factory=list)
    articles: List[Article] = field(default_factory=list)
    news: List[NewsItem] = field(default_factory=list)
    ratings: List[Rating] = field(default_factory=list)

    def collection(self, kind: EntityKind) -> List[Any]:
        """Get the collection holding entities of the given kind."""
        if kind is EntityKind.PRODUCT:
            return self.products
        if kind is EntityKind.ARTICLE:
            return self.articles
        if kind is EntityKind.NEWS:
            return self.news
        if kind is EntityKind.RATING:
            return self.ratings
        raise ValueError(f"Unknown entity kind: {kind}")

    def sizes(self) -> Dict[str, int]:
        return {kind.value: len(self.collection(kind)) for kind in EntityKind}


# ----------------------------------------------------------------------------
# Search output
# ----------------------------------------------------------------------------

@dataclass
class SearchResult:
    """A scored match for one entity."""
    id: str
    title: str
    excerpt: str
    type: EntityKind
    url: str
    category: str
    tags: List[str]
    relevance_score: float
    highlighted_text: Optional[str] = None
    image: Optional[str] = None
    published_at: Optional[datetime] = None
    price: Optional[float] = None
    rating: Optional[float] = None
    brand: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dictionary, dropping empty optionals."""
        result: Dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "excerpt": self.excerpt,
            "type": self.type.value,
            "url": self.url,
            "category": self.category,
            "tags": list(self.tags),
            "relevance_score": self.relevance_score,
        }
        optional = {
            "highlighted_text": self.highlighted_text,
            "image": self.image,
            "published_at": self.published_at.isoformat() if self.published_at else None,
            "price": self.price,
            "rating": self.rating,
            "brand": self.brand,
        }
        result.update({key: value for key, value in optional.items() if value is not None})
        return result


@dataclass
class SearchSuggestion:
    """An autocomplete candidate."""
    id: str
    text: str
    type: SuggestionType
    category: Optional[str] = None
    count: Optional[int] = None

    def to_dict(self) -> Dict[str, Any]:
        result: Dict[str, Any] = {"id": self.id, "text": self.text, "type": self.type.value}
        if self.category is not None:
            result["category"] = self.category
        if self.count is not None:
            result["count"] = self.count
        return result


@dataclass(frozen=True)
class SearchHistoryEntry:
    """One recorded search. Immutable once created."""
    id: str
    query: str
    results_count: int
    timestamp: datetime
    clicked_results: Tuple[str, ...] = ()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "query": self.query,
            "results_count": self.results_count,
            "clicked_results": list(self.clicked_results),
            "timestamp": self.timestamp.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SearchHistoryEntry":
        """Rebuild an entry from to_dict() output."""
        timestamp = data["timestamp"]
        if isinstance(timestamp, str):
            timestamp = datetime.fromisoformat(timestamp)
        return cls(
            id=data["id"],
            query=data["query"],
            results_count=int(data["results_count"]),
            timestamp=timestamp,
            clicked_results=tuple(data.get("clicked_results") or ()),
        )


# ----------------------------------------------------------------------------
# Filters and analytics
# ----------------------------------------------------------------------------

@dataclass
class SearchFilters:
    """Optional constraints applied to combined search results."""
    type: str = "all"  # "all" or an EntityKind value
    category: Optional[str] = None
    price_range: Optional[Tuple[float, float]] = None
    min_rating: Optional[float] = None
    brands: Optional[List[str]] = None
    tags: Optional[List[str]] = None
    date_range: Optional[Tuple[datetime, datetime]] = None


@dataclass
class PopularSearch:
    query: str
    count: int
    trend: str  # "up", "down" or "stable"

    def to_dict(self) -> Dict[str, Any]:
        return {"query": self.query, "count": self.count, "trend": self.trend}


@dataclass
class SearchAnalytics:
    """Aggregate statistics over the search history log."""
    total_searches: int
    unique_queries: int
    average_results_per_query: float
    top_queries: List[PopularSearch]
    no_results_queries: List[str]
    click_through_rate: float

    def to_dict(self) -> Dict[str, Any]:
        return {
            "total_searches": self.total_searches,
            "unique_queries": self.unique_queries,
            "average_results_per_query": self.average_results_per_query,
            "top_queries": [popular.to_dict() for popular in self.top_queries],
            "no_results_queries": list(self.no_results_queries),
            "click_through_rate": self.click_through_rate,
        }
