"""Filter compiler: client conditions to builder calls.

A Filter is loaded with raw client conditions and a schema source, then
applied to a QueryBuilder:

    Filter().load(params.filters, Product).apply(builder)

Application runs in two parts:

1. Custom filter hooks: methods of a Filter subclass marked with
   ``@custom_filter``. They always run (subject to ``only`` / ``exclude``)
   and may add any clause, typically based on ``self.context``.
2. The declarative conditions: parsed into a FilterGroup tree, validated
   against the schema's column policy, sanitized, alias-resolved and
   emitted. Invalid leaves and empty groups are dropped without error.

Instances hold per-request state after ``load`` and must not be shared
between concurrent requests.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any, ClassVar, TypeVar

from src.query_filters.builder import QueryBuilder
from src.query_filters.models.nodes import (
    COMPARISON_OPERATORS,
    FilterCondition,
    FilterGroup,
    FilterOperator,
)
from src.query_filters.models.policy import ColumnPolicy
from src.query_filters.parser import parse_conditions
from src.query_filters.policy import (
    is_column_allowed,
    is_operator_allowed,
    resolve_filter_policy,
    resolve_real_column,
)
from src.query_filters.sanitize import parse_list, sanitize_column_name, sanitize_value

logger = logging.getLogger(__name__)

B = TypeVar("B", bound=QueryBuilder)

_LIST_OPERATORS = frozenset({FilterOperator.in_, FilterOperator.not_in})


def custom_filter(func: Callable | None = None, *, name: str | None = None):
    """Mark a Filter method as a custom filter hook.

    The hook is called with the builder on every ``apply``. Usable bare
    (``@custom_filter``) or with an explicit hook name
    (``@custom_filter(name="tenant")``) for ``only`` / ``exclude`` lists.
    """

    def decorate(fn: Callable) -> Callable:
        fn.__custom_filter__ = name or fn.__name__
        return fn

    if func is not None:
        return decorate(func)
    return decorate


class Filter:
    """Compiles client filter conditions against a schema's column policy.

    Attributes:
        only: When non-empty, only these custom hooks run.
        exclude: Custom hooks that never run. Applied before ``only``.
        custom_filters: Hook name → method name, in registration order.
            Built automatically for each subclass.
        context: Request-scoped values available to custom hooks.
    """

    only: ClassVar[tuple[str, ...]] = ()
    exclude: ClassVar[tuple[str, ...]] = ()
    custom_filters: ClassVar[dict[str, str]] = {}

    def __init_subclass__(cls, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        hooks = dict(cls.custom_filters)
        for attr, member in vars(cls).items():
            hook_name = getattr(member, "__custom_filter__", None)
            if hook_name is not None:
                hooks[hook_name] = attr
        cls.custom_filters = hooks

    def __init__(self, context: Mapping[str, Any] | None = None) -> None:
        self.context: dict[str, Any] = dict(context or {})
        self.conditions: Any = []
        self.schema: Any = None

    def load(self, conditions: Any, schema: Any) -> Filter:
        """Store the raw conditions and schema source. Nothing is validated yet."""
        self.conditions = conditions
        self.schema = schema
        return self

    def apply(self, builder: B) -> B:
        """Run custom hooks, then emit the declarative conditions.

        Returns:
            The same builder, for chaining.

        Raises:
            PolicyResolutionError: If conditions are present and the schema
                source cannot produce a column policy.
        """
        self._apply_custom_filters(builder)
        self._apply_conditions(builder)
        return builder

    # -- custom hooks ----------------------------------------------------

    def selected_filters(self) -> list[str]:
        """Hook names that will run, after ``exclude`` then ``only``."""
        names = list(self.custom_filters)
        if self.exclude:
            names = [name for name in names if name not in self.exclude]
        if self.only:
            names = [name for name in names if name in self.only]
        return names

    def _apply_custom_filters(self, builder: QueryBuilder) -> None:
        for hook_name in self.selected_filters():
            logger.debug("Running custom filter %s.%s", type(self).__name__, hook_name)
            getattr(self, self.custom_filters[hook_name])(builder)

    # -- declarative conditions ------------------------------------------

    def _apply_conditions(self, builder: QueryBuilder) -> None:
        if not self.conditions:
            return

        policy = resolve_filter_policy(self.schema)
        root = self.compile(parse_conditions(self.conditions), policy)
        _emit_items(builder, root.items)

    def compile(self, group: FilterGroup, policy: ColumnPolicy) -> FilterGroup:
        """Return a copy of the tree holding only emit-ready nodes.

        Leaves are checked against the policy, sanitized and rewritten to
        their real column. Groups left without children are removed.
        """
        compiled = FilterGroup(connector=group.connector)
        for node in group.items:
            if isinstance(node, FilterGroup):
                child = self.compile(node, policy)
                if child.is_empty():
                    logger.debug("Skipping empty filter group")
                    continue
                compiled.items.append(child)
            else:
                leaf = self.compile_condition(node, policy)
                if leaf is not None:
                    compiled.items.append(leaf)
        return compiled

    def compile_condition(
        self, condition: FilterCondition, policy: ColumnPolicy
    ) -> FilterCondition | None:
        """Validate one leaf against the policy and prepare it for emission.

        Returns:
            The leaf with its real column and sanitized value, or None when
            the column or operator is not permitted.
        """
        alias = condition.column
        if not is_column_allowed(alias, policy):
            logger.debug("Dropping filter on %r: column not allowed", alias)
            return None
        if not is_operator_allowed(alias, condition.operator, policy):
            logger.debug(
                "Dropping filter on %r: operator %r not allowed",
                alias,
                condition.operator.value,
            )
            return None

        column = resolve_real_column(alias, policy)
        if column == alias and policy.grants_by_wildcard(alias):
            column = sanitize_column_name(column)
            if not column:
                logger.debug("Dropping filter on %r: unusable column name", alias)
                return None

        value = condition.value
        if value is not None and condition.operator not in _LIST_OPERATORS:
            value = sanitize_value(value)

        return condition.model_copy(update={"column": column, "value": value})


def _emit_items(builder: QueryBuilder, items: list[FilterCondition | FilterGroup]) -> None:
    for node in items:
        if isinstance(node, FilterGroup):
            method = builder.or_where if node.connector == "or" else builder.where
            method(lambda query, group=node: _emit_items(query, group.items))
        else:
            _emit_condition(builder, node)


def _emit_condition(builder: QueryBuilder, condition: FilterCondition) -> None:
    column = condition.column
    value = condition.value
    operator = condition.operator
    is_or = condition.connector == "or"

    if operator in COMPARISON_OPERATORS:
        where = builder.or_where if is_or else builder.where
        where(column, operator.value, value)

    elif operator == FilterOperator.like:
        where = builder.or_where if is_or else builder.where
        where(column, "LIKE", f"%{value}%")

    elif operator == FilterOperator.not_like:
        where = builder.or_where if is_or else builder.where
        where(column, "NOT LIKE", f"%{value}%")

    elif operator == FilterOperator.in_:
        where_in = builder.or_where_in if is_or else builder.where_in
        where_in(column, [sanitize_value(item) for item in parse_list(value or "")])

    elif operator == FilterOperator.not_in:
        where_not_in = builder.or_where_not_in if is_or else builder.where_not_in
        where_not_in(column, [sanitize_value(item) for item in parse_list(value or "")])

    elif operator == FilterOperator.null:
        where_null = builder.or_where_null if is_or else builder.where_null
        where_null(column)

    elif operator == FilterOperator.not_null:
        where_not_null = builder.or_where_not_null if is_or else builder.where_not_null
        where_not_null(column)

    else:
        # Unreachable while FilterOperator and this dispatch agree
        raise ValueError(f"Unhandled operator {operator!r}")
