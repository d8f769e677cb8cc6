"""Query builder abstraction and its SQLAlchemy adapter.

The compilers never produce SQL text. They call a small builder interface
(QueryBuilder) with already validated column names and values; whatever
implements it decides how clauses become a query.

SQLAlchemyBuilder implements the interface over SQLAlchemy 2.0 Core:

    builder = SQLAlchemyBuilder(Product)
    Filter().load(request_filters, Product).apply(builder)
    rows = session.scalars(builder.build()).all()

Clause combination follows SQL precedence, as if the calls were written out
in order: ``where(a).where(b).or_where(c)`` means ``(a AND b) OR c``. The
connector of the first clause is ignored. Nested callbacks become
parenthesised groups and are skipped when they add nothing.
"""

from __future__ import annotations

import operator as op
from collections.abc import Callable, Sequence
from typing import Any, Literal, Protocol

from sqlalchemy import Select, and_, inspect, or_, select
from sqlalchemy.sql.expression import ColumnElement, FromClause

from src.errors.domain import UnknownColumnError

Boolean = Literal["and", "or"]

GroupCallback = Callable[["QueryBuilder"], Any]


class QueryBuilder(Protocol):
    """Interface the filter and ordering compilers emit against."""

    def where(
        self, column: str | GroupCallback, operator: str | None = None, value: Any = None
    ) -> QueryBuilder: ...

    def or_where(
        self, column: str | GroupCallback, operator: str | None = None, value: Any = None
    ) -> QueryBuilder: ...

    def where_in(self, column: str, values: Sequence[Any]) -> QueryBuilder: ...

    def or_where_in(self, column: str, values: Sequence[Any]) -> QueryBuilder: ...

    def where_not_in(self, column: str, values: Sequence[Any]) -> QueryBuilder: ...

    def or_where_not_in(self, column: str, values: Sequence[Any]) -> QueryBuilder: ...

    def where_null(self, column: str) -> QueryBuilder: ...

    def or_where_null(self, column: str) -> QueryBuilder: ...

    def where_not_null(self, column: str) -> QueryBuilder: ...

    def or_where_not_null(self, column: str) -> QueryBuilder: ...

    def order_by(self, column: str, direction: str = "asc") -> QueryBuilder: ...


_COMPARATORS: dict[str, Callable[[Any, Any], ColumnElement[bool]]] = {
    "=": op.eq,
    "!=": op.ne,
    ">": op.gt,
    "<": op.lt,
    ">=": op.ge,
    "<=": op.le,
    "LIKE": lambda column, value: column.like(value),
    "NOT LIKE": lambda column, value: column.not_like(value),
}


def _resolve_table(source: Any) -> FromClause:
    if isinstance(source, FromClause):
        return source
    return inspect(source).local_table


class SQLAlchemyBuilder:
    """QueryBuilder over a mapped class or Table, producing a Select."""

    def __init__(self, source: Any, statement: Select | None = None) -> None:
        """Initialize the builder.

        Args:
            source: Mapped ORM class or Table whose columns are filtered.
            statement: Select to extend. Defaults to ``select(source)``.
        """
        self._source = source
        self._table = _resolve_table(source)
        self._statement = statement
        self._clauses: list[tuple[Boolean, ColumnElement[bool]]] = []
        self._orderings: list[ColumnElement[Any]] = []

    # -- where -----------------------------------------------------------

    def where(self, column, operator=None, value=None) -> SQLAlchemyBuilder:
        return self._add_where("and", column, operator, value)

    def or_where(self, column, operator=None, value=None) -> SQLAlchemyBuilder:
        return self._add_where("or", column, operator, value)

    def where_in(self, column: str, values: Sequence[Any]) -> SQLAlchemyBuilder:
        return self._add("and", self.column(column).in_(list(values)))

    def or_where_in(self, column: str, values: Sequence[Any]) -> SQLAlchemyBuilder:
        return self._add("or", self.column(column).in_(list(values)))

    def where_not_in(self, column: str, values: Sequence[Any]) -> SQLAlchemyBuilder:
        return self._add("and", self.column(column).not_in(list(values)))

    def or_where_not_in(self, column: str, values: Sequence[Any]) -> SQLAlchemyBuilder:
        return self._add("or", self.column(column).not_in(list(values)))

    def where_null(self, column: str) -> SQLAlchemyBuilder:
        return self._add("and", self.column(column).is_(None))

    def or_where_null(self, column: str) -> SQLAlchemyBuilder:
        return self._add("or", self.column(column).is_(None))

    def where_not_null(self, column: str) -> SQLAlchemyBuilder:
        return self._add("and", self.column(column).is_not(None))

    def or_where_not_null(self, column: str) -> SQLAlchemyBuilder:
        return self._add("or", self.column(column).is_not(None))

    # -- order -----------------------------------------------------------

    def order_by(self, column: str, direction: str = "asc") -> SQLAlchemyBuilder:
        col = self.column(column)
        direction = direction.lower()
        if direction == "asc":
            self._orderings.append(col.asc())
        elif direction == "desc":
            self._orderings.append(col.desc())
        else:
            raise ValueError(f"Unknown order direction {direction!r}")
        return self

    # -- output ----------------------------------------------------------

    def column(self, name: str) -> ColumnElement[Any]:
        """Look up a storage column by name.

        Raises:
            UnknownColumnError: If the table has no such column.
        """
        try:
            return self._table.c[name]
        except KeyError:
            raise UnknownColumnError(name, getattr(self._table, "name", str(self._table)))

    def where_clause(self) -> ColumnElement[bool] | None:
        """Combine the collected clauses, or None when there are none.

        Consecutive AND clauses bind first; each OR clause starts a new
        alternative.
        """
        if not self._clauses:
            return None

        alternatives: list[list[ColumnElement[bool]]] = []
        for index, (boolean, clause) in enumerate(self._clauses):
            if index == 0 or boolean == "or":
                alternatives.append([clause])
            else:
                alternatives[-1].append(clause)

        terms = [chain[0] if len(chain) == 1 else and_(*chain) for chain in alternatives]
        return terms[0] if len(terms) == 1 else or_(*terms)

    def build(self) -> Select:
        """Return the Select with all where and order clauses applied."""
        statement = self._statement if self._statement is not None else select(self._source)
        clause = self.where_clause()
        if clause is not None:
            statement = statement.where(clause)
        if self._orderings:
            statement = statement.order_by(*self._orderings)
        return statement

    # -- internals -------------------------------------------------------

    def _add_where(self, boolean: Boolean, column, operator, value) -> SQLAlchemyBuilder:
        if callable(column):
            nested = SQLAlchemyBuilder(self._table)
            column(nested)
            clause = nested.where_clause()
            if clause is None:
                return self
            return self._add(boolean, clause.self_group())

        try:
            comparator = _COMPARATORS[(operator or "").upper()]
        except KeyError:
            raise ValueError(f"Unsupported comparison operator {operator!r}")
        return self._add(boolean, comparator(self.column(column), value))

    def _add(self, boolean: Boolean, clause: ColumnElement[bool]) -> SQLAlchemyBuilder:
        self._clauses.append((boolean, clause))
        return self
