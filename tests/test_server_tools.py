"""Tests for server tools."""
import asyncio
import json

import pytest
import pytest_asyncio
from unittest.mock import patch

from catalog_search.config import Config, HistoryConfig
from catalog_search.history_db import HistoryDatabase
from catalog_search.server import (
    clear_search_history_tool,
    create_server,
    get_popular_searches_tool,
    get_search_analytics_tool,
    get_search_history_tool,
    health_check_tool,
    load_catalog,
    search_tool,
    suggest_tool,
)


@pytest.fixture
def no_persist_config():
    return Config(history=HistoryConfig(persist=False))


@pytest.fixture
def server_state(catalog, history_store, no_persist_config):
    """Point the server globals at test fixtures."""
    with patch("catalog_search.server._catalog_cache", catalog), \
         patch("catalog_search.server._history_store", history_store), \
         patch("catalog_search.server.get_config", return_value=no_persist_config):
        yield history_store


@pytest_asyncio.fixture
async def history_db(history_db_path):
    db = HistoryDatabase(history_db_path)
    await db.initialize()
    yield db
    await db.close()


class TestServerTools:
    def test_server_creates(self):
        server = create_server()
        assert server.name == "catalog-search-mcp"

    def test_all_tools_registered(self):
        from mcp.types import ListToolsRequest

        server = create_server()

        async def check():
            result = await server.request_handlers[ListToolsRequest](None)
            return result.root.tools

        tools = asyncio.run(check())
        tool_names = [t.name for t in tools]

        expected = [
            "health_check",
            "search",
            "suggest",
            "get_search_history",
            "get_popular_searches",
            "get_search_analytics",
            "clear_search_history",
        ]

        assert len(tools) == 7
        for name in expected:
            assert name in tool_names, f"Missing tool: {name}"


@pytest.mark.asyncio
class TestSearchTool:
    async def test_returns_ranked_results(self, server_state):
        result = await search_tool("умная розетка")
        data = json.loads(result[0].text)
        scores = [r["relevance_score"] for r in data["results"]]
        assert scores == sorted(scores, reverse=True)
        assert data["total"] == len(data["results"])
        assert data["by_type"]["product"] == 2

    async def test_records_history(self, server_state):
        await search_tool("  розетка ")
        latest = server_state.get_search_history()[0]
        assert latest.query == "розетка"
        assert latest.results_count > 0

    async def test_no_results_still_recorded(self, server_state):
        result = await search_tool("телепорт")
        assert result[0].text == "No results found matching query: телепорт"
        assert server_state.get_search_history()[0].results_count == 0

    async def test_blank_query_not_recorded(self, server_state):
        result = await search_tool("   ")
        assert result[0].text.startswith("No results found")
        assert server_state.get_search_history() == []

    async def test_type_filter(self, server_state):
        result = await search_tool("розетки", result_type="rating")
        data = json.loads(result[0].text)
        assert {r["type"] for r in data["results"]} == {"rating"}

    async def test_limit(self, server_state):
        result = await search_tool("розетка лампа датчик", limit=1)
        data = json.loads(result[0].text)
        assert len(data["results"]) == 1
        assert data["total"] > 1

    async def test_persists_to_database(self, catalog, history_store, history_db):
        config = Config(history=HistoryConfig(persist=True))
        with patch("catalog_search.server._catalog_cache", catalog), \
             patch("catalog_search.server._history_store", history_store), \
             patch("catalog_search.server.get_config", return_value=config), \
             patch("catalog_search.server.get_history_db", return_value=history_db):
            await search_tool("лампа")
            stored = await history_db.load_recent()
            assert [e.query for e in stored] == ["лампа"]

            await clear_search_history_tool()
            assert await history_db.load_recent() == []
            assert history_store.get_search_history() == []


@pytest.mark.asyncio
class TestOtherTools:
    async def test_suggest(self, server_state):
        result = await suggest_tool("Xia")
        data = json.loads(result[0].text)
        assert any(s["type"] == "brand" and s["text"] == "Xiaomi" for s in data)

    async def test_history_and_popular(self, server_state):
        await search_tool("лампа")
        await search_tool("розетка")
        await search_tool("лампа")

        history = json.loads((await get_search_history_tool(limit=2))[0].text)
        assert [h["query"] for h in history] == ["лампа", "розетка"]

        popular = json.loads((await get_popular_searches_tool(limit=5))[0].text)
        assert popular == ["лампа", "розетка"]

    async def test_analytics(self, server_state):
        await search_tool("лампа")
        await search_tool("телепорт")
        data = json.loads((await get_search_analytics_tool())[0].text)
        assert data["total_searches"] == 2
        assert data["no_results_queries"] == ["телепорт"]

    async def test_clear(self, server_state):
        await search_tool("лампа")
        result = await clear_search_history_tool()
        assert result[0].text == "Search history cleared."
        assert server_state.get_search_history() == []

    async def test_health_check(self, server_state):
        data = json.loads((await health_check_tool())[0].text)
        assert data["status"] == "ok"
        assert data["catalog"]["product"] == 4


@pytest.mark.asyncio
class TestLoadCatalog:
    async def test_loads_from_file(self, sample_catalog_path):
        config = Config(history=HistoryConfig(persist=False), catalog_path=sample_catalog_path)
        with patch("catalog_search.server._catalog_cache", None), \
             patch("catalog_search.server.get_config", return_value=config):
            catalog = await load_catalog()
            assert len(catalog.products) == 3

    async def test_missing_file_gives_empty_catalog(self, tmp_path):
        config = Config(history=HistoryConfig(persist=False), catalog_path=tmp_path / "missing.json")
        with patch("catalog_search.server._catalog_cache", None), \
             patch("catalog_search.server.get_config", return_value=config):
            catalog = await load_catalog()
            assert catalog.sizes() == {"product": 0, "article": 0, "news": 0, "rating": 0}
