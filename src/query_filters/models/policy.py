"""Column policy models.

A ColumnPolicy maps API-facing column aliases to the operators (filters) or
directions (ordering) a client may use with them, plus an optional real
storage column. The "*" entry is a wildcard granting every alias.

Rich policies are written the way schema sources declare them:

    {
        "name": {"allowedOperators": ["=", "like"], "column": "product_name"},
        "price": {"allowedDirections": ["desc"]},
    }
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from src.query_filters.models.nodes import FilterOperator

WILDCARD = "*"

DEFAULT_DIRECTIONS: tuple[str, ...] = ("asc", "desc")


def _all_operators() -> list[FilterOperator]:
    return list(FilterOperator)


def _default_directions() -> list[str]:
    return list(DEFAULT_DIRECTIONS)


class ColumnRule(BaseModel):
    """Permissions and storage mapping for one column alias."""

    model_config = ConfigDict(populate_by_name=True)

    allowed_operators: list[FilterOperator] = Field(
        default_factory=_all_operators, alias="allowedOperators"
    )
    allowed_directions: list[str] = Field(
        default_factory=_default_directions, alias="allowedDirections"
    )
    column: str | None = Field(
        default=None, description="Real storage column behind the alias."
    )

    @field_validator("allowed_directions")
    @classmethod
    def _lowercase_directions(cls, value: list[str]) -> list[str]:
        return [direction.lower() for direction in value]


class ColumnPolicy(BaseModel):
    """Alias → ColumnRule mapping with optional wildcard entry."""

    rules: dict[str, ColumnRule] = Field(default_factory=dict)

    @classmethod
    def from_config(cls, config: Mapping[str, Any]) -> ColumnPolicy:
        """Build a policy from a rich per-column declaration."""
        return cls(
            rules={
                alias: rule if isinstance(rule, ColumnRule) else ColumnRule.model_validate(rule or {})
                for alias, rule in config.items()
            }
        )

    @classmethod
    def from_whitelist(cls, names: Iterable[str]) -> ColumnPolicy:
        """Build a policy granting every operator and direction on each name.

        An empty whitelist, or one containing "*", grants every column.
        """
        names = list(names)
        if not names or WILDCARD in names:
            return cls.wildcard()
        return cls(rules={name: ColumnRule() for name in names})

    @classmethod
    def wildcard(cls) -> ColumnPolicy:
        return cls(rules={WILDCARD: ColumnRule()})

    @property
    def wildcard_rule(self) -> ColumnRule | None:
        return self.rules.get(WILDCARD)

    def rule_for(self, alias: str) -> ColumnRule | None:
        """Return the alias's own rule, falling back to the wildcard rule."""
        rule = self.rules.get(alias)
        if rule is None:
            rule = self.wildcard_rule
        return rule

    def grants_by_wildcard(self, alias: str) -> bool:
        """True when only the wildcard entry lets this alias through."""
        return alias not in self.rules and self.wildcard_rule is not None
