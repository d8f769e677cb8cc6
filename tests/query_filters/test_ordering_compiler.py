"""Tests for the Ordering compiler."""

import pytest

from src.errors.domain import PolicyResolutionError
from src.query_filters.models import ColumnPolicy
from src.query_filters.ordering import Ordering
from src.query_filters.parser import parse_query_string
from tests.helpers.catalog import AuditEntry, Customer, Product
from tests.helpers.recording_builder import RecordingBuilder


def _apply(orders, schema) -> list[tuple]:
    return Ordering().load(orders, schema).apply(RecordingBuilder()).summary()


class TestOrdering:
    """Verify order entries become order_by calls."""

    def test_single_entry(self):
        assert _apply([{"c": "name", "v": "desc"}], Customer) == [("order_by", "name", "desc")]

    def test_direction_defaults_to_asc(self):
        assert _apply([{"c": "age"}], Customer) == [("order_by", "age", "asc")]

    def test_input_order_preserved(self):
        orders = [{"c": "age", "v": "desc"}, {"c": "name"}, {"c": "email", "v": "asc"}]
        assert _apply(orders, Customer) == [
            ("order_by", "age", "desc"),
            ("order_by", "name", "asc"),
            ("order_by", "email", "asc"),
        ]

    def test_disallowed_column_dropped(self):
        assert _apply([{"c": "password"}, {"c": "age"}], Customer) == [
            ("order_by", "age", "asc")
        ]

    def test_direction_coerced_not_dropped(self):
        assert _apply([{"c": "price", "v": "asc"}], Product) == [("order_by", "price", "desc")]

    @pytest.mark.parametrize("direction", [["desc"], {"0": "desc"}, True])
    def test_structured_direction_coerced(self, direction):
        assert _apply([{"c": "age", "v": direction}], Customer) == [("order_by", "age", "asc")]

    def test_structured_direction_uses_first_allowed(self):
        assert _apply([{"c": "price", "v": ["asc"]}], Product) == [("order_by", "price", "desc")]

    def test_bracketed_array_direction_coerced(self):
        decoded = parse_query_string("o[0][c]=age&o[0][v][]=desc")
        assert _apply(decoded["o"], Customer) == [("order_by", "age", "asc")]

    def test_uppercase_direction_normalized(self):
        assert _apply([{"c": "age", "v": "DESC"}], Customer) == [("order_by", "age", "desc")]

    def test_alias_resolved(self):
        assert _apply([{"c": "name", "v": "desc"}], Product) == [
            ("order_by", "product_name", "desc")
        ]

    def test_entry_without_column_skipped(self):
        assert _apply([{"v": "desc"}, "age", None], Customer) == []

    def test_wildcard_column_name_sanitized(self):
        assert _apply([{"c": "name; DROP TABLE users;"}], AuditEntry) == [
            ("order_by", "nameDROPTABLEusers", "asc")
        ]

    def test_column_empty_after_sanitizing_dropped(self):
        assert _apply([{"c": "'; --"}, {"c": "actor"}], AuditEntry) == [
            ("order_by", "actor", "asc")
        ]

    def test_configured_real_column_sanitized(self):
        policy = ColumnPolicy.from_config({"name": {"column": "users.name"}})
        assert _apply([{"c": "name"}], policy) == [("order_by", "usersname", "asc")]

    def test_empty_orders_skip_policy_resolution(self):
        assert _apply([], object()) == []

    def test_unusable_schema_raises(self):
        with pytest.raises(PolicyResolutionError):
            _apply([{"c": "a"}], object())

    def test_apply_returns_builder(self):
        builder = RecordingBuilder()
        assert Ordering().load([{"c": "age"}], Customer).apply(builder) is builder
