"""Test helper utilities for compiler and integration testing."""

from tests.helpers.catalog import AuditEntry, Base, Customer, Product
from tests.helpers.recording_builder import BuilderCall, RecordingBuilder

__all__ = [
    "AuditEntry",
    "Base",
    "BuilderCall",
    "Customer",
    "Product",
    "RecordingBuilder",
]
