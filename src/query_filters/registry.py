"""Filter class registry and the combined filter + order entry point.

A Filter subclass can be bound to a schema class so callers need not name it:

    @filter_for(Product)
    class ProductFilter(Filter):
        @custom_filter
        def visible(self, builder):
            builder.where("is_visible", "=", 1)

    apply_filters(SQLAlchemyBuilder(Product), Product, filters=f, orders=o)

Lookup by schema is controlled by QUERY_FILTERS_AUTO_DISCOVERY.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, TypeVar

from src.query_filters.builder import QueryBuilder
from src.query_filters.config import is_auto_discovery_enabled
from src.query_filters.filter import Filter
from src.query_filters.ordering import Ordering

logger = logging.getLogger(__name__)

B = TypeVar("B", bound=QueryBuilder)
F = TypeVar("F", bound=type[Filter])

_FILTER_REGISTRY: dict[type, type[Filter]] = {}


def filter_for(schema_cls: type) -> Callable[[F], F]:
    """Class decorator registering a Filter subclass for a schema class."""

    def register(filter_cls: F) -> F:
        if not (isinstance(filter_cls, type) and issubclass(filter_cls, Filter)):
            raise TypeError(f"{filter_cls!r} is not a Filter subclass")
        previous = _FILTER_REGISTRY.get(schema_cls)
        if previous is not None and previous is not filter_cls:
            logger.warning(
                "Replacing filter %s for %s with %s",
                previous.__name__,
                schema_cls.__name__,
                filter_cls.__name__,
            )
        _FILTER_REGISTRY[schema_cls] = filter_cls
        return filter_cls

    return register


def unregister_filter(schema_cls: type) -> None:
    _FILTER_REGISTRY.pop(schema_cls, None)


def registered_filter(schema: Any) -> type[Filter] | None:
    """Return the Filter class registered for a schema class or instance.

    The schema's MRO is searched, so subclasses inherit their parent's filter.
    """
    schema_cls = schema if isinstance(schema, type) else type(schema)
    for cls in schema_cls.__mro__:
        filter_cls = _FILTER_REGISTRY.get(cls)
        if filter_cls is not None:
            return filter_cls
    return None


def resolve_filter(
    schema: Any,
    name: Filter | type[Filter] | None = None,
    context: Mapping[str, Any] | None = None,
) -> Filter:
    """Pick the Filter instance to apply for a schema.

    Precedence:
    1. ``name`` as a Filter instance, used as is
    2. ``name`` as a Filter subclass, instantiated with ``context``
    3. the class registered for the schema (when auto-discovery is enabled)
    4. the base Filter
    """
    if isinstance(name, Filter):
        return name
    if isinstance(name, type) and issubclass(name, Filter):
        return name(context)
    if name is not None:
        raise TypeError(f"Expected a Filter instance or subclass, got {name!r}")

    if is_auto_discovery_enabled():
        filter_cls = registered_filter(schema)
        if filter_cls is not None:
            return filter_cls(context)
    return Filter(context)


def apply_filters(
    builder: B,
    schema: Any,
    filters: Any = None,
    orders: Any = None,
    filter: Filter | type[Filter] | None = None,
    context: Mapping[str, Any] | None = None,
) -> B:
    """Apply filter conditions and then ordering to a builder.

    Filters (including custom hooks) run only when ``filters`` is
    non-empty; ordering only when ``orders`` is non-empty.

    Args:
        builder: QueryBuilder receiving the clauses.
        schema: Schema source for column policies.
        filters: Raw filter conditions from the client.
        orders: Raw order entries from the client.
        filter: Filter instance or class overriding registry lookup.
        context: Request-scoped values for custom hooks.

    Returns:
        The same builder.
    """
    if filters:
        resolve_filter(schema, filter, context).load(filters, schema).apply(builder)
    if orders:
        Ordering().load(orders, schema).apply(builder)
    return builder
