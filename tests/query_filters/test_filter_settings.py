"""Tests for environment-driven query-filters settings."""

import pytest

from src.errors.domain import ConfigurationError
from src.query_filters.config import get_filter_key, get_order_key, is_auto_discovery_enabled


class TestRequestKeys:
    """Verify request key getters."""

    def test_defaults(self):
        assert get_filter_key() == "f"
        assert get_order_key() == "o"

    def test_overrides(self, monkeypatch):
        monkeypatch.setenv("QUERY_FILTERS_KEY", "filter")
        monkeypatch.setenv("QUERY_FILTERS_ORDER_KEY", "sort")
        assert get_filter_key() == "filter"
        assert get_order_key() == "sort"

    def test_blank_override_uses_default(self, monkeypatch):
        monkeypatch.setenv("QUERY_FILTERS_KEY", "  ")
        assert get_filter_key() == "f"


class TestAutoDiscovery:
    """Verify QUERY_FILTERS_AUTO_DISCOVERY parsing."""

    def test_enabled_by_default(self):
        assert is_auto_discovery_enabled() is True

    @pytest.mark.parametrize("raw", ["0", "false", "No", "OFF"])
    def test_falsy_values(self, monkeypatch, raw):
        monkeypatch.setenv("QUERY_FILTERS_AUTO_DISCOVERY", raw)
        assert is_auto_discovery_enabled() is False

    @pytest.mark.parametrize("raw", ["1", "TRUE", "yes", "on"])
    def test_truthy_values(self, monkeypatch, raw):
        monkeypatch.setenv("QUERY_FILTERS_AUTO_DISCOVERY", raw)
        assert is_auto_discovery_enabled() is True

    def test_invalid_value_raises(self, monkeypatch):
        monkeypatch.setenv("QUERY_FILTERS_AUTO_DISCOVERY", "sometimes")
        with pytest.raises(ConfigurationError, match="QUERY_FILTERS_AUTO_DISCOVERY"):
            is_auto_discovery_enabled()
