"""Tests for config module."""
import pytest

from catalog_search.config import Config, HistoryConfig
from catalog_search.history import MAX_HISTORY_ENTRIES


class TestConfig:
    def test_default_values(self, monkeypatch):
        monkeypatch.delenv("CATALOG_SEARCH_HISTORY_DB", raising=False)
        monkeypatch.delenv("CATALOG_SEARCH_HISTORY_LIMIT", raising=False)
        monkeypatch.delenv("CATALOG_SEARCH_PERSIST_HISTORY", raising=False)
        config = Config()
        assert config.history.db_path is None
        assert config.history.max_entries == 100
        assert config.history.persist is True
        assert config.catalog_path is None
        assert config.catalog_url is None
        assert config.result_limit == 20
        assert config.request_timeout == 30.0

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("CATALOG_SEARCH_CATALOG", "/tmp/catalog.json")
        monkeypatch.setenv("CATALOG_SEARCH_HISTORY_DB", "/tmp/history.db")
        monkeypatch.setenv("CATALOG_SEARCH_RESULT_LIMIT", "5")
        monkeypatch.setenv("CATALOG_SEARCH_TIMEOUT", "2.5")

        config = Config.from_env()
        assert str(config.catalog_path) == "/tmp/catalog.json"
        assert str(config.history.db_path) == "/tmp/history.db"
        assert config.result_limit == 5
        assert config.request_timeout == 2.5

    def test_catalog_url_from_env(self, monkeypatch):
        monkeypatch.setenv("CATALOG_SEARCH_CATALOG_URL", "https://shop.example.com/catalog.json")
        config = Config.from_env()
        assert config.catalog_url == "https://shop.example.com/catalog.json"

    @pytest.mark.parametrize("value,expected", [("0", False), ("false", False), ("no", False), ("1", True), ("yes", True)])
    def test_persist_flag(self, monkeypatch, value, expected):
        monkeypatch.setenv("CATALOG_SEARCH_PERSIST_HISTORY", value)
        assert HistoryConfig.from_env().persist is expected

    def test_history_limit_from_env(self, monkeypatch):
        monkeypatch.setenv("CATALOG_SEARCH_HISTORY_LIMIT", "25")
        assert HistoryConfig.from_env().max_entries == 25

    @pytest.mark.parametrize("value", ["101", "500"])
    def test_history_limit_capped(self, monkeypatch, value):
        monkeypatch.setenv("CATALOG_SEARCH_HISTORY_LIMIT", value)
        assert HistoryConfig.from_env().max_entries == MAX_HISTORY_ENTRIES
