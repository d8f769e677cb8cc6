"""Configuration for query-filters.

Request keys and registry behaviour are read from the environment on every
call, so tests and long-running processes pick up changes without reloads.

Environment Variables:
    QUERY_FILTERS_KEY: Query-string key holding filter conditions.
        Defaults to "f".
    QUERY_FILTERS_ORDER_KEY: Query-string key holding order entries.
        Defaults to "o".
    QUERY_FILTERS_AUTO_DISCOVERY: Whether resolve_filter() falls back to the
        Filter class registered for a schema. Defaults to "true".
"""

import os

from src.errors.domain import ConfigurationError

DEFAULT_FILTER_KEY = "f"
DEFAULT_ORDER_KEY = "o"

_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def get_filter_key() -> str:
    """Get the request key holding filter conditions.

    Returns:
        The configured key, or "f" when unset or blank.

    Example:
        >>> import os
        >>> os.environ["QUERY_FILTERS_KEY"] = "filter"
        >>> get_filter_key()
        'filter'
    """
    return os.environ.get("QUERY_FILTERS_KEY", "").strip() or DEFAULT_FILTER_KEY


def get_order_key() -> str:
    """Get the request key holding order entries ("o" by default)."""
    return os.environ.get("QUERY_FILTERS_ORDER_KEY", "").strip() or DEFAULT_ORDER_KEY


def is_auto_discovery_enabled() -> bool:
    """Return whether registered Filter classes are looked up per schema.

    Raises:
        ConfigurationError: If QUERY_FILTERS_AUTO_DISCOVERY is not a boolean.
    """
    raw = os.environ.get("QUERY_FILTERS_AUTO_DISCOVERY", "").strip()
    if not raw:
        return True
    value = raw.lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigurationError("QUERY_FILTERS_AUTO_DISCOVERY", raw)
