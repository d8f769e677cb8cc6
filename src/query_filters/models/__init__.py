"""Data models for query-filters.

This module exports the grammar nodes produced by the parser and the column
policy models consumed by the compilers.
"""

from src.query_filters.models.nodes import (
    COMPARISON_OPERATORS,
    VALUELESS_OPERATORS,
    Connector,
    FilterCondition,
    FilterGroup,
    FilterOperator,
    OrderSpec,
)
from src.query_filters.models.policy import (
    DEFAULT_DIRECTIONS,
    WILDCARD,
    ColumnPolicy,
    ColumnRule,
)

__all__ = [
    # Grammar nodes
    "Connector",
    "FilterOperator",
    "FilterCondition",
    "FilterGroup",
    "OrderSpec",
    "COMPARISON_OPERATORS",
    "VALUELESS_OPERATORS",
    # Policy
    "ColumnPolicy",
    "ColumnRule",
    "WILDCARD",
    "DEFAULT_DIRECTIONS",
]
