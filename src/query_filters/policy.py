"""Column policy resolution.

Answers, for a schema source, whether an API-facing column alias is usable,
with which operator or direction, and what its real storage column is.

Schema sources come in three shapes, checked in this order:

1. Filterable / Orderable: ``filters()`` / ``orders()`` return a rich
   per-column declaration, used verbatim.
2. A flat whitelist: ``get_fillable()``, a ``fillable`` attribute, or the
   schema itself being a sequence of names. Each name gets every operator
   and both directions; an empty or "*" whitelist grants every column.
3. A plain mapping, treated as a rich declaration.

Anything else is a programming error and raises PolicyResolutionError.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol, runtime_checkable

from pydantic import ValidationError as PydanticValidationError

from src.errors.domain import PolicyResolutionError
from src.query_filters.models.nodes import FilterOperator
from src.query_filters.models.policy import ColumnPolicy

logger = logging.getLogger(__name__)


@runtime_checkable
class Filterable(Protocol):
    """Schema source declaring which columns may be filtered and how."""

    def filters(self) -> Mapping[str, Mapping[str, Any]]:
        """Return ``{alias: {"allowedOperators": [...], "column"?: str}}``."""
        ...


@runtime_checkable
class Orderable(Protocol):
    """Schema source declaring which columns may be ordered and how."""

    def orders(self) -> Mapping[str, Mapping[str, Any]]:
        """Return ``{alias: {"allowedDirections": [...], "column"?: str}}``."""
        ...


@runtime_checkable
class Fillable(Protocol):
    """Schema source exposing a flat column whitelist."""

    def get_fillable(self) -> Sequence[str]:
        ...


def resolve_filter_policy(schema: Any) -> ColumnPolicy:
    """Resolve the policy that governs filter conditions for a schema source.

    Args:
        schema: A model class or instance, a whitelist, or a policy mapping.

    Returns:
        ColumnPolicy for filter validation.

    Raises:
        PolicyResolutionError: If the schema source cannot produce a policy.
    """
    if isinstance(schema, Filterable):
        return _from_config(schema, schema.filters())
    return _fallback_policy(schema)


def resolve_order_policy(schema: Any) -> ColumnPolicy:
    """Resolve the policy that governs order entries for a schema source.

    Raises:
        PolicyResolutionError: If the schema source cannot produce a policy.
    """
    if isinstance(schema, Orderable):
        return _from_config(schema, schema.orders())
    return _fallback_policy(schema)


def _from_config(schema: Any, config: Any) -> ColumnPolicy:
    if not isinstance(config, Mapping):
        raise PolicyResolutionError(
            schema, f"policy declaration must be a mapping, got {type(config).__name__}"
        )
    try:
        return ColumnPolicy.from_config(config)
    except PydanticValidationError as e:
        raise PolicyResolutionError(schema, f"invalid policy declaration: {e}") from e


def _fallback_policy(schema: Any) -> ColumnPolicy:
    if isinstance(schema, ColumnPolicy):
        return schema
    if isinstance(schema, Fillable):
        return ColumnPolicy.from_whitelist(schema.get_fillable())

    fillable = getattr(schema, "fillable", None)
    if _is_name_list(fillable):
        return ColumnPolicy.from_whitelist(fillable)
    if _is_name_list(schema):
        return ColumnPolicy.from_whitelist(schema)
    if isinstance(schema, Mapping):
        return _from_config(schema, schema)

    raise PolicyResolutionError(schema)


def _is_name_list(value: Any) -> bool:
    return isinstance(value, (Sequence, set, frozenset)) and not isinstance(
        value, (str, bytes)
    )


def is_column_allowed(alias: str, policy: ColumnPolicy) -> bool:
    """True iff the policy has a wildcard entry or an entry for the alias."""
    return policy.wildcard_rule is not None or alias in policy.rules


def is_operator_allowed(alias: str, operator: FilterOperator, policy: ColumnPolicy) -> bool:
    """True iff the alias's rule (or the wildcard rule) permits the operator."""
    rule = policy.rule_for(alias)
    return rule is not None and operator in rule.allowed_operators


def resolve_real_column(alias: str, policy: ColumnPolicy) -> str:
    """Map an alias to its storage column.

    The alias's own ``column`` override wins, then the wildcard's, else the
    alias is returned unchanged. Resolution is a single step: the result is
    never looked up again.
    """
    rule = policy.rules.get(alias)
    if rule is not None and rule.column:
        return rule.column
    wildcard = policy.wildcard_rule
    if wildcard is not None and wildcard.column:
        return wildcard.column
    return alias


def normalize_direction(requested: str, alias: str, policy: ColumnPolicy) -> str:
    """Coerce a requested direction into the alias's allowed set.

    The request is lower-cased; if the alias (or wildcard) rule allows it,
    it is returned. An alias's own rule takes precedence over a "*" rule
    declared alongside it, so an explicit entry can narrow the wildcard. Otherwise the first allowed direction is used, and
    "asc" when the rule lists none. Ordering never drops an entry over its
    direction.
    """
    direction = requested.lower()
    rule = policy.rule_for(alias)
    allowed = rule.allowed_directions if rule is not None else ["asc", "desc"]

    if direction in allowed:
        return direction

    fallback = allowed[0] if allowed else "asc"
    logger.debug(
        "Direction %r not allowed for %r; using %r", requested, alias, fallback
    )
    return fallback
