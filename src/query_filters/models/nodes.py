"""Node models for the filter and ordering grammar.

Client input arrives as nested mappings and lists using short wire keys:

    filter leaf:  {"c": column, "o": operator, "v": value, "t": "and" | "or"}
    filter group: [leaf | group, ...] with an optional "t" connector
    order entry:  {"c": column, "v": "asc" | "desc"}

The parser turns that input into the tagged union below
(FilterCondition | FilterGroup) before anything is validated against a
column policy or emitted to a builder. All models are Pydantic v2; leaf
validation failures are how the parser recognises leaves it must drop.
"""

from __future__ import annotations

from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

Connector = Literal["and", "or"]


class FilterOperator(str, Enum):
    """Operator codes accepted on the wire."""

    eq = "="
    neq = "!="
    gt = ">"
    lt = "<"
    gte = ">="
    lte = "<="
    like = "like"
    not_like = "nlike"
    in_ = "in"        # Python attribute is `in_` (reserved word)
    not_in = "nin"
    null = "null"
    not_null = "nnull"


COMPARISON_OPERATORS = frozenset(
    {
        FilterOperator.eq,
        FilterOperator.neq,
        FilterOperator.gt,
        FilterOperator.lt,
        FilterOperator.gte,
        FilterOperator.lte,
    }
)

# Operators that test for NULL and never carry a value
VALUELESS_OPERATORS = frozenset({FilterOperator.null, FilterOperator.not_null})


class FilterCondition(BaseModel):
    """A single column comparison."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    column: str = Field(..., alias="c", description="API-facing column alias.")
    operator: FilterOperator = Field(..., alias="o", description="Operator code.")
    value: str | None = Field(
        default=None,
        alias="v",
        description="Raw value. Required unless the operator is null/nnull.",
    )
    connector: Connector = Field(
        default="and",
        alias="t",
        description="How the condition joins its preceding siblings.",
    )

    @model_validator(mode="after")
    def _require_value(self) -> FilterCondition:
        if self.operator in VALUELESS_OPERATORS:
            self.value = None
        elif self.value is None:
            raise ValueError(f"operator {self.operator.value!r} requires a value")
        return self


class FilterGroup(BaseModel):
    """A parenthesised sequence of conditions and nested groups."""

    connector: Connector = Field(
        default="and", description="How the group joins its preceding siblings."
    )
    items: list[FilterCondition | FilterGroup] = Field(
        default_factory=list, description="Child conditions or nested groups."
    )

    def is_empty(self) -> bool:
        return not self.items


# Rebuild for forward reference resolution
FilterGroup.model_rebuild()


class OrderSpec(BaseModel):
    """A single ORDER BY entry as requested by the client."""

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    column: str = Field(..., alias="c", description="API-facing column alias.")
    direction: str = Field(default="asc", alias="v", description="Requested direction.")

    @field_validator("direction", mode="before")
    @classmethod
    def _default_direction(cls, value: object) -> object:
        if value is None:
            return "asc"
        # Unusable directions fall through to the column's first allowed one
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            return ""
        return value
