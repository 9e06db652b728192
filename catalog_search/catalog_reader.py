"""Catalog reader module.

Loads products, articles, news and ratings from a JSON catalog export,
either from a local file or from an HTTP endpoint, into typed records.
"""
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httpx

from catalog_search.models import Article, Catalog, NewsItem, Product, Rating


def _require(record: Dict[str, Any], kind: str, keys: List[str]) -> None:
    """Raise if a record is missing any required key."""
    if not isinstance(record, dict):
        raise ValueError(f"Malformed {kind} record: expected an object, got {type(record).__name__}")
    missing = [key for key in keys if record.get(key) is None]
    if missing:
        raise ValueError(f"Malformed {kind} record {record.get('id', '?')!r}: missing {', '.join(missing)}")


def _name(value: Any) -> str:
    """Accept either a plain string or an object with a 'name' key."""
    if isinstance(value, dict):
        return str(value.get("name", ""))
    return str(value)


def _tags(record: Dict[str, Any]) -> List[str]:
    return [_name(tag) for tag in record.get("tags") or []]


def _date(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    # Python < 3.11 does not accept a trailing 'Z'
    return datetime.fromisoformat(value.replace("Z", "+00:00"))


def _author(value: Any) -> Optional[str]:
    if value is None:
        return None
    return _name(value)


def parse_product(record: Dict[str, Any]) -> Product:
    _require(record, "product", ["id", "name", "brand", "category", "description"])
    price = record.get("price")
    rating = record.get("rating")
    return Product(
        id=str(record["id"]),
        name=record["name"],
        brand=record["brand"],
        category=_name(record["category"]),
        description=record["description"],
        tags=_tags(record),
        price=float(price) if price is not None else None,
        rating=float(rating) if rating is not None else None,
        image=record.get("image"),
    )


def parse_article(record: Dict[str, Any]) -> Article:
    _require(record, "article", ["id", "title", "slug", "excerpt", "category"])
    return Article(
        id=str(record["id"]),
        title=record["title"],
        slug=record["slug"],
        excerpt=record["excerpt"],
        category=_name(record["category"]),
        tags=_tags(record),
        content=record.get("content", ""),
        published_at=_date(record.get("published_at")),
        author=_author(record.get("author")),
        image=record.get("image"),
    )


def parse_news(record: Dict[str, Any]) -> NewsItem:
    _require(record, "news", ["id", "title", "slug", "excerpt", "category"])
    return NewsItem(
        id=str(record["id"]),
        title=record["title"],
        slug=record["slug"],
        excerpt=record["excerpt"],
        category=_name(record["category"]),
        tags=_tags(record),
        content=record.get("content", ""),
        published_at=_date(record.get("published_at")),
        author=_author(record.get("author")),
        image=record.get("image"),
        priority=record.get("priority", "normal"),
    )


def parse_rating(record: Dict[str, Any]) -> Rating:
    _require(record, "rating", ["id", "title", "slug", "description", "category"])
    return Rating(
        id=str(record["id"]),
        title=record["title"],
        slug=record["slug"],
        description=record["description"],
        category=_name(record["category"]),
        tags=_tags(record),
        published_at=_date(record.get("published_at")),
        author=_author(record.get("author")),
        image=record.get("image"),
    )


_PARSERS: Dict[str, Callable[[Dict[str, Any]], Any]] = {
    "products": parse_product,
    "articles": parse_article,
    "news": parse_news,
    "ratings": parse_rating,
}


def parse_catalog(data: Dict[str, Any]) -> Catalog:
    """Build a Catalog from decoded catalog JSON.

    Args:
        data: Object with optional 'products', 'articles', 'news' and 'ratings' lists

    Returns:
        Catalog with typed records

    Raises:
        ValueError: If the data or any record is malformed
    """
    if not isinstance(data, dict):
        raise ValueError("Catalog must be a JSON object")

    collections: Dict[str, List[Any]] = {}
    for key, parser in _PARSERS.items():
        records = data.get(key) or []
        if not isinstance(records, list):
            raise ValueError(f"Catalog '{key}' must be a list")
        collections[key] = [parser(record) for record in records]

    return Catalog(**collections)


def load_catalog_file(catalog_path: Path) -> Catalog:
    """Load a catalog from a JSON file.

    Args:
        catalog_path: Path to the catalog export

    Returns:
        Parsed Catalog

    Raises:
        FileNotFoundError: If the catalog file doesn't exist
        json.JSONDecodeError: If the catalog file is not valid JSON
        ValueError: If a record is malformed
    """
    if not catalog_path.exists():
        raise FileNotFoundError(f"Catalog file not found at {catalog_path}")

    with open(catalog_path, "r", encoding="utf-8") as f:
        return parse_catalog(json.load(f))


async def fetch_catalog(
    url: str,
    timeout: float = 30.0,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> Catalog:
    """Fetch a catalog export over HTTP.

    Args:
        url: URL returning catalog JSON
        timeout: Request timeout in seconds
        transport: Optional httpx transport (used by tests)

    Returns:
        Parsed Catalog

    Raises:
        httpx.HTTPError: If the request fails
        ValueError: If the payload is malformed
    """
    async with httpx.AsyncClient(
        timeout=timeout,
        follow_redirects=True,
        headers={"User-Agent": "CatalogSearchMCP/1.0"},
        transport=transport,
    ) as client:
        response = await client.get(url)
        response.raise_for_status()
        return parse_catalog(response.json())
