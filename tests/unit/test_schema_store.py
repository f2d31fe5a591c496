"""
Tests unitarios para SchemaStore (esquema write-once por tabla).
"""
import pytest

from tablesync.shared.exceptions.domain import SchemaError, ValidationError


class TestSchemaStore:

    def test_creates_new_table_with_frozen_bold_header(self, schema_store, backend):
        handle = schema_store.ensure_table("Forms", ["URI", "Status"])

        assert handle.created is True
        assert handle.headers == ("URI", "Status")
        assert backend.read_headers("Forms") == ["URI", "Status"]
        assert backend.is_header_frozen("Forms")

    def test_existing_table_keeps_its_headers(self, schema_store, backend):
        schema_store.ensure_table("Forms", ["URI", "Status"])

        handle = schema_store.ensure_table("Forms", ["Other", "Headers", "Here"])

        assert handle.created is False
        assert handle.headers == ("URI", "Status")
        assert backend.read_headers("Forms") == ["URI", "Status"]

    def test_existing_table_ignores_empty_headers(self, schema_store):
        schema_store.ensure_table("Forms", ["URI"])

        assert schema_store.ensure_table("Forms", []).headers == ("URI",)

    def test_new_table_requires_headers(self, schema_store):
        with pytest.raises(SchemaError):
            schema_store.ensure_table("Forms", [])

    def test_new_table_rejects_duplicate_headers(self, schema_store):
        with pytest.raises(SchemaError):
            schema_store.ensure_table("Forms", ["URI", "URI"])

    def test_blank_name_is_validation_error(self, schema_store):
        with pytest.raises(ValidationError):
            schema_store.ensure_table("  ", ["URI"])

    def test_get_table_missing(self, schema_store):
        with pytest.raises(SchemaError) as exc:
            schema_store.get_table("Nope")

        assert exc.value.details == {"table": "Nope"}

    def test_schema_index_of(self, schema_store):
        handle = schema_store.ensure_table("Forms", ["URI", "Status"])

        assert handle.schema.index_of("Status") == 1
        assert "URI" in handle.schema
        with pytest.raises(SchemaError):
            handle.schema.index_of("Missing")
