"""Tests for the FastAPI filter dependency and error handlers.

Uses TestClient (FastAPI) against a small app wired the way a consumer
would wire it: query string → FilterParams → apply_filters → SQLite.
"""

import pytest
from fastapi import Depends, FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker

from src.api.dependencies import FilterParams, get_filter_params, register_error_handlers
from src.query_filters.builder import SQLAlchemyBuilder
from src.query_filters.registry import apply_filters
from tests.helpers.catalog import AuditEntry, Product


@pytest.fixture
def client(db_engine) -> TestClient:
    session_factory = sessionmaker(bind=db_engine)

    def get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app = FastAPI()
    register_error_handlers(app)

    @app.get("/params")
    def echo_params(params: FilterParams = Depends(get_filter_params)) -> dict:
        return params.model_dump()

    @app.get("/products")
    def list_products(
        params: FilterParams = Depends(get_filter_params),
        db: Session = Depends(get_db),
    ) -> list[int]:
        builder = apply_filters(
            SQLAlchemyBuilder(Product), Product, filters=params.filters, orders=params.orders
        )
        return [product.id for product in db.scalars(builder.build())]

    @app.get("/audit")
    def list_audit(
        params: FilterParams = Depends(get_filter_params),
        db: Session = Depends(get_db),
    ) -> list[int]:
        builder = apply_filters(
            SQLAlchemyBuilder(AuditEntry), AuditEntry, filters=params.filters
        )
        return [entry.id for entry in db.scalars(builder.build())]

    return TestClient(app)


class TestGetFilterParams:
    """Verify query-string extraction."""

    def test_absent_keys_are_empty(self, client):
        response = client.get("/params")
        assert response.status_code == 200
        assert response.json() == {"filters": [], "orders": []}

    def test_bracketed_input_decoded(self, client):
        response = client.get(
            "/params",
            params={"f[0][c]": "price", "f[0][o]": ">=", "f[0][v]": "10", "o[0][c]": "name"},
        )
        assert response.json() == {
            "filters": {"0": {"c": "price", "o": ">=", "v": "10"}},
            "orders": {"0": {"c": "name"}},
        }

    def test_configured_keys(self, client, monkeypatch):
        monkeypatch.setenv("QUERY_FILTERS_KEY", "filter")
        monkeypatch.setenv("QUERY_FILTERS_ORDER_KEY", "sort")
        response = client.get("/params", params={"filter[0][c]": "a", "f[0][c]": "b"})
        assert response.json()["filters"] == {"0": {"c": "a"}}


@pytest.mark.integration
class TestFilteredEndpoint:
    """Verify filtered queries through the HTTP layer."""

    def test_filter_and_order(self, client):
        response = client.get(
            "/products",
            params={
                "f[0][c]": "price",
                "f[0][o]": "<",
                "f[0][v]": "100",
                "o[0][c]": "name",
                "o[0][v]": "desc",
            },
        )
        assert response.status_code == 200
        # Table Lamp, Red Chair, Desk Lamp, Blue Chair
        assert response.json() == [5, 1, 3, 2]

    def test_grouped_or_from_query_string(self, client):
        response = client.get(
            "/products",
            params={
                "f[0][0][c]": "status",
                "f[0][0][o]": "=",
                "f[0][0][v]": "2",
                "f[0][1][c]": "category",
                "f[0][1][o]": "null",
                "f[0][1][t]": "or",
                "o[0][c]": "id",
            },
        )
        assert response.json() == [3, 4]

    def test_disallowed_column_ignored(self, client):
        response = client.get(
            "/products",
            params={"f[0][c]": "product_name", "f[0][o]": "=", "f[0][v]": "x", "o[0][c]": "id"},
        )
        assert response.json() == [1, 2, 3, 4, 5]

    def test_wildcard_unknown_column_is_400(self, client):
        response = client.get(
            "/audit", params={"f[0][c]": "password", "f[0][o]": "=", "f[0][v]": "x"}
        )
        assert response.status_code == 400
        assert "password" in response.json()["detail"]

    def test_deeply_nested_filter_ignored(self, client):
        prefix = "f" + "[0]" * 300
        response = client.get(
            "/products",
            params={
                f"{prefix}[c]": "price",
                f"{prefix}[o]": ">",
                f"{prefix}[v]": "100",
                "o[0][c]": "id",
            },
        )
        assert response.status_code == 200
        assert response.json() == [1, 2, 3, 4, 5]
