"""Ordering compiler: client order entries to ``order_by`` calls.

Each entry ``{"c": alias, "v": direction}`` is checked against the schema's
order policy. Unknown columns are dropped; a direction outside the allowed
set is coerced to the column's first allowed direction rather than dropped.
Real column names are reduced to ``[A-Za-z0-9_]`` before reaching the
builder. Entry order is preserved and sets tie-break precedence.
"""

from __future__ import annotations

import logging
from typing import Any, TypeVar

from src.query_filters.builder import QueryBuilder
from src.query_filters.parser import parse_orders
from src.query_filters.policy import (
    is_column_allowed,
    normalize_direction,
    resolve_order_policy,
    resolve_real_column,
)
from src.query_filters.sanitize import sanitize_column_name

logger = logging.getLogger(__name__)

B = TypeVar("B", bound=QueryBuilder)


class Ordering:
    """Compiles client order entries against a schema's order policy."""

    def __init__(self) -> None:
        self.orders: Any = []
        self.schema: Any = None

    def load(self, orders: Any, schema: Any) -> Ordering:
        self.orders = orders
        self.schema = schema
        return self

    def apply(self, builder: B) -> B:
        """Emit one ``order_by`` per usable entry, in input order.

        Raises:
            PolicyResolutionError: If entries are present and the schema
                source cannot produce a column policy.
        """
        if not self.orders:
            return builder

        policy = resolve_order_policy(self.schema)

        for spec in parse_orders(self.orders):
            alias = spec.column
            if not is_column_allowed(alias, policy):
                logger.debug("Dropping order on %r: column not allowed", alias)
                continue

            direction = normalize_direction(spec.direction, alias, policy)
            column = sanitize_column_name(resolve_real_column(alias, policy))
            if not column:
                logger.debug("Dropping order on %r: unusable column name", alias)
                continue

            builder.order_by(column, direction)

        return builder
