"""Main entry point for the catalog search MCP server."""
import asyncio

from catalog_search.server import main as server_main


def main():
    asyncio.run(server_main())


if __name__ == "__main__":
    main()
