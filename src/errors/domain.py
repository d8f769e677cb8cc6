"""Typed domain exceptions for API error mapping.

Malformed or hostile filter input never raises: it is dropped and the query
simply carries fewer constraints. The exceptions below cover programming and
configuration mistakes upstream of the compilers, plus the builder adapter
rejecting a column its table does not have.

Usage:
    # In a route handler
    try:
        apply_filters(builder, Product, filters=params.filters)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
"""


class DomainError(Exception):
    """Base exception for all domain errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class ConfigurationError(DomainError):
    """An environment setting has a value that cannot be interpreted."""

    def __init__(self, name: str, value: str) -> None:
        super().__init__(f"Invalid value {value!r} for setting {name}")
        self.name = name
        self.value = value


class PolicyResolutionError(DomainError):
    """A schema source exposes neither a rich column policy nor a whitelist."""

    def __init__(self, schema: object, reason: str | None = None) -> None:
        schema_name = getattr(schema, "__name__", type(schema).__name__)
        super().__init__(
            f"Cannot resolve a column policy for {schema_name}: "
            + (reason or "implement filters()/orders(), get_fillable() or a fillable list")
        )
        self.schema = schema
        self.reason = reason


class ValidationError(DomainError):
    """Validation failure. Maps to HTTP 400."""

    def __init__(self, message: str) -> None:
        super().__init__(message)


class UnknownColumnError(ValidationError):
    """The query builder was asked for a column its table does not define."""

    def __init__(self, column: str, table: str) -> None:
        super().__init__(f"Column '{column}' does not exist on '{table}'")
        self.column = column
        self.table = table
