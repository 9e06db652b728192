"""MCP server for product and content catalog search."""
import json
import sys
from typing import Any, Optional

import aiosqlite
import httpx
from mcp.server import Server
from mcp.server.stdio import stdio_server
from mcp.types import Tool, TextContent

from catalog_search.catalog_reader import fetch_catalog, load_catalog_file
from catalog_search.config import get_config
from catalog_search.history import SearchHistoryStore
from catalog_search.history_db import get_history_db
from catalog_search.models import Catalog, EntityKind, SearchFilters
from catalog_search.search import CatalogSearchEngine, SearchEngine, type_counts
from catalog_search.suggestions import generate_suggestions


SERVER_NAME = "catalog-search-mcp"

# Global state
_catalog_cache: Optional[Catalog] = None
_history_store: Optional[SearchHistoryStore] = None
_search_engine: SearchEngine = CatalogSearchEngine()


def _text(text: str) -> list[TextContent]:
    return [TextContent(type="text", text=text)]


def _json(data: Any) -> list[TextContent]:
    return _text(json.dumps(data, indent=2, ensure_ascii=False))


async def load_catalog() -> Catalog:
    """Load the catalog, using cache if available.

    Returns:
        Catalog from the configured file or URL (empty if neither works)
    """
    global _catalog_cache

    if _catalog_cache is None:
        config = get_config()
        try:
            if config.catalog_path is not None:
                _catalog_cache = load_catalog_file(config.catalog_path)
            elif config.catalog_url:
                _catalog_cache = await fetch_catalog(config.catalog_url, timeout=config.request_timeout)
            else:
                print("Warning: No catalog configured (set CATALOG_SEARCH_CATALOG)", file=sys.stderr)
                _catalog_cache = Catalog()
        except FileNotFoundError as e:
            print(f"Warning: Could not find catalog file: {e}", file=sys.stderr)
            _catalog_cache = Catalog()
        except httpx.HTTPError as e:
            print(f"HTTP error fetching catalog: {e}", file=sys.stderr)
            _catalog_cache = Catalog()
        except ValueError as e:
            print(f"Error loading catalog: {e}", file=sys.stderr)
            _catalog_cache = Catalog()

    return _catalog_cache


def get_history_store() -> SearchHistoryStore:
    """Get or create the process-wide search history store."""
    global _history_store

    if _history_store is None:
        _history_store = SearchHistoryStore(max_entries=get_config().history.max_entries)

    return _history_store


async def restore_history() -> int:
    """Load persisted history into the in-memory store.

    Returns:
        Number of entries restored
    """
    if not get_config().history.persist:
        return 0
    try:
        db = await get_history_db()
        entries = await db.load_recent()
    except aiosqlite.Error as e:
        print(f"Error restoring search history: {e}", file=sys.stderr)
        return 0
    get_history_store().load(entries)
    return len(entries)


async def health_check_tool() -> list[TextContent]:
    catalog = await load_catalog()
    return _json({
        "status": "ok",
        "catalog": catalog.sizes(),
        "history_entries": len(get_history_store()),
    })


async def search_tool(
    query: str,
    result_type: str = "all",
    category: Optional[str] = None,
    limit: Optional[int] = None,
) -> list[TextContent]:
    """Tool handler for search.

    Args:
        query: Search query string
        result_type: "all" or a single entity kind
        category: Optional category filter
        limit: Maximum number of results

    Returns:
        List of TextContent with ranked results
    """
    catalog = await load_catalog()
    filters = SearchFilters(type=result_type, category=category)
    all_results = _search_engine.search(query, catalog, filters=filters)

    entry = get_history_store().save_search_to_history(query, len(all_results))
    if entry is not None and get_config().history.persist:
        try:
            db = await get_history_db()
            await db.record(entry)
        except aiosqlite.Error as e:
            print(f"Error persisting search history: {e}", file=sys.stderr)

    if not all_results:
        return _text(f"No results found matching query: {query}")

    if limit is None:
        limit = get_config().result_limit
    results = all_results[:limit]

    return _json({
        "query": query,
        "total": len(all_results),
        "by_type": type_counts(all_results),
        "results": [result.to_dict() for result in results],
    })


async def suggest_tool(query: str) -> list[TextContent]:
    catalog = await load_catalog()
    suggestions = generate_suggestions(
        query,
        catalog.products,
        get_history_store().get_search_history(),
    )
    return _json([suggestion.to_dict() for suggestion in suggestions])


async def get_search_history_tool(limit: Optional[int] = None) -> list[TextContent]:
    history = get_history_store().get_search_history()
    if limit is not None:
        history = history[:limit]
    return _json([entry.to_dict() for entry in history])


async def get_popular_searches_tool(limit: int = 10) -> list[TextContent]:
    return _json(get_history_store().get_popular_searches(limit))


async def get_search_analytics_tool() -> list[TextContent]:
    return _json(get_history_store().get_search_analytics().to_dict())


async def clear_search_history_tool() -> list[TextContent]:
    get_history_store().clear_search_history()
    if get_config().history.persist:
        try:
            db = await get_history_db()
            await db.clear()
        except aiosqlite.Error as e:
            print(f"Error clearing persisted search history: {e}", file=sys.stderr)
    return _text("Search history cleared.")


_TYPE_VALUES = ["all"] + [kind.value for kind in EntityKind]


def create_server() -> Server:
    """Create and configure the MCP server.

    Returns:
        Configured Server instance
    """
    server = Server(SERVER_NAME)

    @server.list_tools()
    async def list_tools() -> list[Tool]:
        """List available tools."""
        return [
            Tool(
                name="health_check",
                description="Report catalog sizes and the number of recorded searches.",
                inputSchema={"type": "object", "properties": {}},
            ),
            Tool(
                name="search",
                description="Search products, articles, news and ratings. Returns results ranked by relevance with matches highlighted.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "query": {
                            "type": "string",
                            "description": "Search query",
                        },
                        "type": {
                            "type": "string",
                            "enum": _TYPE_VALUES,
                            "description": "Restrict results to one entity type",
                        },
                        "category": {
                            "type": "string",
                            "description": "Restrict results to one category",
                        },
                        "limit": {
                            "type": "integer",
                            "minimum": 1,
                            "description": "Maximum number of results",
                        },
                    },
                    "required": ["query"],
                },
            ),
            Tool(
                name="suggest",
                description="Autocomplete suggestions for a partial query from products, brands, categories and past searches.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "query": {"type": "string", "description": "Partial query"},
                    },
                    "required": ["query"],
                },
            ),
            Tool(
                name="get_search_history",
                description="Recent searches, newest first.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "limit": {"type": "integer", "minimum": 1},
                    },
                },
            ),
            Tool(
                name="get_popular_searches",
                description="Most frequent search queries.",
                inputSchema={
                    "type": "object",
                    "properties": {
                        "limit": {"type": "integer", "minimum": 1, "default": 10},
                    },
                },
            ),
            Tool(
                name="get_search_analytics",
                description="Aggregate statistics over the search history.",
                inputSchema={"type": "object", "properties": {}},
            ),
            Tool(
                name="clear_search_history",
                description="Delete all recorded searches.",
                inputSchema={"type": "object", "properties": {}},
            ),
        ]

    @server.call_tool()
    async def call_tool(name: str, arguments: Any) -> list[TextContent]:
        """Handle tool calls."""
        arguments = arguments or {}
        if name == "health_check":
            return await health_check_tool()
        elif name == "search":
            query = arguments.get("query", "")
            if not query or not query.strip():
                return _text("Error: 'query' parameter is required")
            search_type = arguments.get("type", "all")
            if search_type not in _TYPE_VALUES:
                return _text(f"Error: unknown type '{search_type}'")
            return await search_tool(
                query,
                result_type=search_type,
                category=arguments.get("category"),
                limit=arguments.get("limit"),
            )
        elif name == "suggest":
            return await suggest_tool(arguments.get("query", ""))
        elif name == "get_search_history":
            return await get_search_history_tool(arguments.get("limit"))
        elif name == "get_popular_searches":
            return await get_popular_searches_tool(arguments.get("limit", 10))
        elif name == "get_search_analytics":
            return await get_search_analytics_tool()
        elif name == "clear_search_history":
            return await clear_search_history_tool()
        else:
            raise ValueError(f"Unknown tool: {name}")

    return server


async def main():
    """Main entry point for the MCP server."""
    restored = await restore_history()
    if restored:
        print(f"Restored {restored} search history entries", file=sys.stderr)

    server = create_server()

    async with stdio_server() as (read_stream, write_stream):
        initialization_options = server.create_initialization_options()
        await server.run(read_stream, write_stream, initialization_options)
