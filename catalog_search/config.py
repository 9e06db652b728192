"""Configuration for the catalog search MCP server."""
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from catalog_search.history import MAX_HISTORY_ENTRIES


@dataclass
class HistoryConfig:
    """Configuration for the search history log and its SQLite mirror."""
    db_path: Optional[Path] = None  # None = use default
    max_entries: int = MAX_HISTORY_ENTRIES  # Never above MAX_HISTORY_ENTRIES
    persist: bool = True  # Mirror history to SQLite

    @classmethod
    def from_env(cls) -> "HistoryConfig":
        """Create config from environment variables."""
        db_path_str = os.environ.get("CATALOG_SEARCH_HISTORY_DB")
        max_entries = int(os.environ.get("CATALOG_SEARCH_HISTORY_LIMIT", str(MAX_HISTORY_ENTRIES)))
        return cls(
            db_path=Path(db_path_str) if db_path_str else None,
            max_entries=min(max_entries, MAX_HISTORY_ENTRIES),
            persist=os.environ.get("CATALOG_SEARCH_PERSIST_HISTORY", "1").lower() not in ("0", "false", "no"),
        )


@dataclass
class Config:
    """Main configuration for the catalog search MCP server."""
    history: HistoryConfig = field(default_factory=HistoryConfig.from_env)
    catalog_path: Optional[Path] = None  # JSON catalog file
    catalog_url: Optional[str] = None  # Fetched when no catalog_path is set
    result_limit: int = 20  # Default max results per search
    request_timeout: float = 30.0  # Seconds, for catalog_url

    @classmethod
    def from_env(cls) -> "Config":
        """Create config from environment variables."""
        catalog_path_str = os.environ.get("CATALOG_SEARCH_CATALOG")

        return cls(
            history=HistoryConfig.from_env(),
            catalog_path=Path(catalog_path_str) if catalog_path_str else None,
            catalog_url=os.environ.get("CATALOG_SEARCH_CATALOG_URL") or None,
            result_limit=int(os.environ.get("CATALOG_SEARCH_RESULT_LIMIT", "20")),
            request_timeout=float(os.environ.get("CATALOG_SEARCH_TIMEOUT", "30.0")),
        )


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global config instance.

    Returns:
        Config loaded from environment
    """
    global _config

    if _config is None:
        _config = Config.from_env()

    return _config
