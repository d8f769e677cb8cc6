"""Safe filtering and ordering from untrusted request parameters.

This package compiles client-supplied filter conditions and order entries
into calls against a query builder, letting an API expose ad-hoc filtering
and sorting without SQL injection or access to undeclared columns.

Main Entry Points:
    apply_filters: Run a schema's Filter and then Ordering on a builder.
    Filter: Filter compiler; subclass it to add custom hooks.
    Ordering: Ordering compiler.
    SQLAlchemyBuilder: Builder adapter producing SQLAlchemy Select statements.

Supporting Modules:
    policy: Column policy resolution (whitelists, aliases, wildcards).
    parser: Raw input and bracketed query strings to grammar nodes.
    sanitize: Value and column-name sanitizers.
"""

from src.query_filters.builder import QueryBuilder, SQLAlchemyBuilder
from src.query_filters.filter import Filter, custom_filter
from src.query_filters.models import (
    ColumnPolicy,
    ColumnRule,
    FilterCondition,
    FilterGroup,
    FilterOperator,
    OrderSpec,
)
from src.query_filters.ordering import Ordering
from src.query_filters.parser import (
    parse_conditions,
    parse_orders,
    parse_query_params,
    parse_query_string,
)
from src.query_filters.policy import (
    Fillable,
    Filterable,
    Orderable,
    is_column_allowed,
    is_operator_allowed,
    normalize_direction,
    resolve_filter_policy,
    resolve_order_policy,
    resolve_real_column,
)
from src.query_filters.registry import (
    apply_filters,
    filter_for,
    registered_filter,
    resolve_filter,
    unregister_filter,
)
from src.query_filters.sanitize import parse_list, sanitize_column_name, sanitize_value

__all__ = [
    # Compilers
    "Filter",
    "Ordering",
    "custom_filter",
    # Entry point and registry
    "apply_filters",
    "filter_for",
    "registered_filter",
    "resolve_filter",
    "unregister_filter",
    # Builders
    "QueryBuilder",
    "SQLAlchemyBuilder",
    # Models
    "ColumnPolicy",
    "ColumnRule",
    "FilterCondition",
    "FilterGroup",
    "FilterOperator",
    "OrderSpec",
    # Policy
    "Filterable",
    "Orderable",
    "Fillable",
    "resolve_filter_policy",
    "resolve_order_policy",
    "is_column_allowed",
    "is_operator_allowed",
    "resolve_real_column",
    "normalize_direction",
    # Parsing and sanitizing
    "parse_conditions",
    "parse_orders",
    "parse_query_params",
    "parse_query_string",
    "parse_list",
    "sanitize_value",
    "sanitize_column_name",
]
