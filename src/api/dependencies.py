"""FastAPI integration for query-filters.

Extracts filter and order input from the request query string, where
clients send bracketed keys:

    GET /products?f[0][c]=price&f[0][o]=>=&f[0][v]=10&o[0][c]=name&o[0][v]=desc

Usage:
    @router.get("/products")
    def list_products(
        params: FilterParams = Depends(get_filter_params),
        db: Session = Depends(get_db),
    ):
        builder = apply_filters(
            SQLAlchemyBuilder(Product), Product,
            filters=params.filters, orders=params.orders,
        )
        return db.scalars(builder.build()).all()

Errors raised by the core are programming or configuration problems, with
one exception: UnknownColumnError from the SQLAlchemy adapter, which a
wildcard policy can surface for client-chosen names. register_error_handlers
maps ValidationError (and subclasses) to HTTP 400.
"""

import logging
from typing import Any

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, Field

from src.errors.domain import ValidationError
from src.query_filters.config import get_filter_key, get_order_key
from src.query_filters.parser import parse_query_params

logger = logging.getLogger(__name__)


class FilterParams(BaseModel):
    """Raw filter and order input extracted from a request."""

    filters: Any = Field(default_factory=list, description="Raw filter conditions.")
    orders: Any = Field(default_factory=list, description="Raw order entries.")


def get_filter_params(request: Request) -> FilterParams:
    """Dependency decoding filter/order input from the query string.

    Keys come from QUERY_FILTERS_KEY and QUERY_FILTERS_ORDER_KEY.

    Args:
        request: The incoming request.

    Returns:
        FilterParams with nested raw input (empty lists when absent).
    """
    decoded = parse_query_params(request.query_params.multi_items())
    return FilterParams(
        filters=decoded.get(get_filter_key()) or [],
        orders=decoded.get(get_order_key()) or [],
    )


async def validation_error_handler(
    request: Request, exc: ValidationError
) -> JSONResponse:
    """Return a 400 response for domain validation failures.

    Args:
        request: The incoming request.
        exc: The ValidationError exception.

    Returns:
        JSONResponse with the error message.
    """
    logger.info("Rejected query on %s: %s", request.url.path, exc)
    return JSONResponse(status_code=400, content={"detail": str(exc)})


def register_error_handlers(app: FastAPI) -> None:
    """Install query-filters exception handlers on an application."""
    app.add_exception_handler(ValidationError, validation_error_handler)
