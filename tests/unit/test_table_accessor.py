from unittest.mock import Mock

import pytest

from dynamodb_access import (
    ConflictError,
    DefaultRequestBuilder,
    GetRequest,
    PutRequest,
    TableAccessor,
    UnknownSchemaError,
    UpdateExpression,
    UpdateRequest,
    ValidationError,
    define_schema,
)


class TestTableAccessor:
    """Test cases for TableAccessor against moto."""

    def test_round_trip(self, table_accessor):
        """Test that a put record is returned by get with the key stamped."""
        written = table_accessor.put("abc", {"V": "x"})

        assert written == {"K": "abc", "V": "x"}
        assert table_accessor.get("abc") == {"K": "abc", "V": "x"}

    def test_round_trip_value_types(self, table_accessor):
        """Test that stored values read back with the types they were written with."""
        attributes = {
            "f": 0.1,
            "neg": -3.75,
            "i": 7,
            "b": b"\x00\x01",
            "t": True,
            "n": None,
            "l": [1, "a", 2.5],
            "m": {"x": 1.25, "y": [None]},
        }

        table_accessor.put("abc", attributes)
        result = table_accessor.get("abc")

        assert result == {"K": "abc", **attributes}
        assert isinstance(result["f"], float)
        assert isinstance(result["i"], int)

    def test_get_missing(self, table_accessor):
        assert table_accessor.get("missing") is None

    def test_exists(self, table_accessor):
        assert table_accessor.exists("abc") is False

        table_accessor.put("abc", {"V": "x"})

        assert table_accessor.exists("abc") is True

    def test_key_argument_wins_over_attributes(self, table_accessor):
        """Test that the key argument overrides a primary key in the attributes."""
        table_accessor.put("abc", {"K": "other", "V": "x"})

        assert table_accessor.get("abc") == {"K": "abc", "V": "x"}
        assert table_accessor.get("other") is None

    def test_put_if_absent(self, table_accessor):
        table_accessor.put_if_absent("abc", {"V": "first"})

        with pytest.raises(ConflictError):
            table_accessor.put_if_absent("abc", {"V": "second"})

        assert table_accessor.get("abc")["V"] == "first"

    def test_update_is_partial(self, table_accessor):
        table_accessor.put("abc", {"V": "x", "W": 1})

        result = table_accessor.update("abc", {"W": 2})

        assert result == {"K": "abc", "V": "x", "W": 2}

    def test_delete(self, table_accessor):
        table_accessor.put("abc", {"V": "x"})

        assert table_accessor.delete("abc") == {"K": "abc", "V": "x"}
        assert table_accessor.exists("abc") is False

    def test_query_by_key(self, table_accessor):
        table_accessor.put("abc", {"V": "x"})

        assert list(table_accessor.query("abc")) == [{"K": "abc", "V": "x"}]

    def test_invalid_key_type(self, table_accessor):
        with pytest.raises(ValidationError):
            table_accessor.get(42)


class TestAccessorConstruction:
    """Test schema checks when binding an accessor."""

    def test_unregistered_schema(self, storage_client):
        with pytest.raises(UnknownSchemaError):
            TableAccessor(storage_client, define_schema("nope", primary_key="id"))

    def test_schema_mismatch(self, storage_client):
        """Test that a schema differing from the registered one is rejected."""
        with pytest.raises(ValidationError, match="differs"):
            TableAccessor(storage_client, define_schema("T", primary_key="other"))


class TestRequestBuilderInjection:
    """Test that request shaping is delegated to the injected builder."""

    def test_custom_builder_is_used(self, storage_client, simple_schema):
        builder = Mock()
        builder.build_get_request.return_value = GetRequest(key="abc", consistent_read=True)
        builder.build_put_request.return_value = PutRequest(record={"K": "abc", "V": "built"})
        builder.build_update_request.return_value = UpdateRequest(
            key="abc", expression=UpdateExpression.of({"V": "updated"}), return_values='UPDATED_NEW'
        )
        accessor = TableAccessor(storage_client, simple_schema, builder)

        accessor.put("abc", {"V": "ignored"})
        assert accessor.get("abc") == {"K": "abc", "V": "built"}
        assert accessor.update("abc", {"V": "ignored"}) == {"V": "updated"}

        builder.build_put_request.assert_called_once_with(simple_schema, "abc", {"V": "ignored"})
        builder.build_get_request.assert_called_with(simple_schema, "abc")
        builder.build_update_request.assert_called_once_with(simple_schema, "abc", {"V": "ignored"})

    def test_default_builder(self, simple_schema):
        builder = DefaultRequestBuilder()

        put = builder.build_put_request(simple_schema, "abc", {"V": 1})
        update = builder.build_update_request(simple_schema, "abc", {"V": 2})

        assert put.record == {"K": "abc", "V": 1}
        assert update.expression.assignments == {"V": 2}
        assert update.return_values == "ALL_NEW"
