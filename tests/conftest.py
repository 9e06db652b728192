"""Shared fixtures for tests."""
import json
from datetime import datetime, timedelta, timezone

import pytest

from catalog_search.history import SearchHistoryStore
from catalog_search.models import Article, Catalog, NewsItem, Product, Rating


SAMPLE_CATALOG = {
    "products": [
        {
            "id": "p1",
            "name": "Яндекс Розетка",
            "brand": "Яндекс",
            "category": "Умные розетки",
            "description": "Умная розетка с голосовым управлением через Алису",
            "tags": ["розетка", "алиса"],
            "price": 1290,
            "rating": 4.7,
        },
        {
            "id": "p2",
            "name": "Xiaomi Lamp",
            "brand": "Xiaomi",
            "category": "Освещение",
            "description": "Настольная лампа с регулировкой яркости",
            "tags": ["лампа", "свет"],
            "price": 2490,
            "rating": 4.5,
        },
        {
            "id": "p3",
            "name": "Aqara Датчик движения",
            "brand": "Aqara",
            "category": "Датчики",
            "description": "Беспроводной датчик движения для умного дома",
            "tags": ["датчик", "zigbee"],
            "price": 1590,
            "rating": 4.6,
        },
    ],
    "articles": [
        {
            "id": "a1",
            "title": "Как выбрать умную розетку",
            "slug": "kak-vybrat-umnuyu-rozetku",
            "excerpt": "Разбираем, на что смотреть при выборе розетки для умного дома",
            "category": {"name": "Гайды"},
            "tags": [{"name": "розетки"}, {"name": "гайд"}],
            "published_at": "2025-03-01T10:00:00Z",
            "author": {"name": "Иван"},
        },
    ],
    "news": [
        {
            "id": "n1",
            "title": "Xiaomi представила новую лампу",
            "slug": "xiaomi-new-lamp",
            "excerpt": "Новая лампа поддерживает Matter",
            "category": "products",
            "tags": ["xiaomi", "matter"],
            "priority": "high",
        },
    ],
    "ratings": [
        {
            "id": "r1",
            "title": "Лучшие умные розетки 2025",
            "slug": "best-smart-sockets",
            "description": "Рейтинг розеток по надежности и функциям",
            "category": "Умные розетки",
        },
    ],
}


@pytest.fixture
def products():
    return [
        Product(
            id="p1",
            name="Яндекс Розетка",
            brand="Яндекс",
            category="Умные розетки",
            description="Умная розетка с голосовым управлением через Алису",
            tags=["розетка", "алиса"],
            price=1290.0,
            rating=4.7,
        ),
        Product(
            id="p2",
            name="Xiaomi Lamp",
            brand="Xiaomi",
            category="Освещение",
            description="Настольная лампа с регулировкой яркости",
            tags=["лампа", "свет"],
            price=2490.0,
            rating=4.5,
        ),
        Product(
            id="p3",
            name="Aqara Датчик движения",
            brand="Aqara",
            category="Датчики",
            description="Беспроводной датчик движения для умного дома",
            tags=["датчик", "zigbee"],
            price=1590.0,
            rating=4.6,
        ),
        Product(
            id="p4",
            name="Xiaomi Mi Smart Plug",
            brand="Xiaomi",
            category="Умные розетки",
            description="Компактная розетка с Wi-Fi и таймером",
            tags=["розетка", "wi-fi"],
            price=990.0,
            rating=4.2,
        ),
    ]


@pytest.fixture
def articles():
    return [
        Article(
            id="a1",
            title="Как выбрать умную розетку",
            slug="kak-vybrat-umnuyu-rozetku",
            excerpt="Разбираем, на что смотреть при выборе розетки для умного дома",
            category="Гайды",
            tags=["розетки", "гайд"],
            published_at=datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc),
        ),
        Article(
            id="a2",
            title="Сценарии освещения",
            slug="lighting-scenarios",
            excerpt="Настраиваем свет по расписанию",
            category="Гайды",
            tags=["освещение"],
            published_at=datetime(2025, 5, 1, 10, 0, tzinfo=timezone.utc),
        ),
    ]


@pytest.fixture
def news():
    return [
        NewsItem(
            id="n1",
            title="Xiaomi представила новую лампу",
            slug="xiaomi-new-lamp",
            excerpt="Новая лампа поддерживает Matter",
            category="products",
            tags=["xiaomi", "matter"],
            priority="high",
        ),
    ]


@pytest.fixture
def ratings():
    return [
        Rating(
            id="r1",
            title="Лучшие умные розетки 2025",
            slug="best-smart-sockets",
            description="Рейтинг розеток по надежности и функциям",
            category="Умные розетки",
        ),
    ]


@pytest.fixture
def catalog(products, articles, news, ratings):
    return Catalog(products=products, articles=articles, news=news, ratings=ratings)


class FakeClock:
    """Deterministic clock advancing one second per call."""

    def __init__(self, start=None):
        self.now = start or datetime(2025, 1, 1, tzinfo=timezone.utc)

    def __call__(self):
        current = self.now
        self.now = self.now + timedelta(seconds=1)
        return current


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def history_store(clock):
    """Fresh history store per test."""
    return SearchHistoryStore(clock=clock)


@pytest.fixture
def sample_catalog_path(tmp_path):
    """Create a temporary catalog file with sample data."""
    catalog_file = tmp_path / "catalog.json"
    catalog_file.write_text(json.dumps(SAMPLE_CATALOG, ensure_ascii=False, indent=2), encoding="utf-8")
    return catalog_file


@pytest.fixture
def history_db_path(tmp_path):
    """Return path for a temporary history database."""
    return tmp_path / "test_history.db"


@pytest.fixture
def sample_catalog_data():
    """Return the sample catalog as decoded JSON."""
    return json.loads(json.dumps(SAMPLE_CATALOG))
