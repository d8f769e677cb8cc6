"""Error types for query-filters.

Grammar-level problems in client input never raise. The exceptions here
describe failures a caller has to fix in code or configuration:

- PolicyResolutionError: a schema source offers no column policy
- ConfigurationError: an environment setting cannot be parsed
- UnknownColumnError: a builder adapter was given a column its table lacks
"""

from src.errors.domain import (
    ConfigurationError,
    DomainError,
    PolicyResolutionError,
    UnknownColumnError,
    ValidationError,
)

__all__ = [
    "DomainError",
    "ConfigurationError",
    "PolicyResolutionError",
    "ValidationError",
    "UnknownColumnError",
]
