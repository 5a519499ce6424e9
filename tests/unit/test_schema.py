from decimal import Decimal

import pytest
from pydantic import ValidationError as PydanticValidationError

from dynamodb_access import (
    AttributeType,
    DuplicateSchemaError,
    IndexDescriptor,
    ProjectionType,
    SchemaDescriptor,
    SchemaRegistry,
    UnknownIndexError,
    UnknownSchemaError,
    ValidationError,
    define_schema,
)


class TestDefineSchema:
    """Test schema descriptor construction and invariants."""

    def test_minimal_schema(self):
        """Test a schema with only a hash key."""
        schema = define_schema("T", primary_key="K")

        assert schema.table_name == "T"
        assert schema.primary_key == "K"
        assert schema.primary_key_type == AttributeType.STRING
        assert schema.indexes == ()
        assert schema.index_names == []

    def test_index_reusing_primary_key_is_rejected(self):
        """Test that an index may not be keyed on the primary key attribute."""
        with pytest.raises(ValidationError) as exc_info:
            define_schema(
                "jobs",
                primary_key="K1",
                indexes=[IndexDescriptor(index_name="ByK1", attribute_name="K1")],
            )

        assert exc_info.value.context['table_name'] == "jobs"
        assert "validation_errors" in exc_info.value.context

    def test_duplicate_index_names_are_rejected(self):
        """Test that index names must be unique within a schema."""
        with pytest.raises(ValidationError):
            define_schema(
                "jobs",
                primary_key="K1",
                indexes=[
                    IndexDescriptor(index_name="StatusIndex", attribute_name="K2"),
                    IndexDescriptor(index_name="StatusIndex", attribute_name="K3"),
                ],
            )

    def test_empty_primary_key_is_rejected(self):
        """Test that a blank primary key name is a validation error."""
        with pytest.raises(ValidationError) as exc_info:
            define_schema("T", primary_key="")

        assert "primary_key" in exc_info.value.errors

    def test_direct_construction_raises_package_error(self):
        """Test that building a SchemaDescriptor directly reports the same error type."""
        with pytest.raises(ValidationError) as exc_info:
            SchemaDescriptor(
                table_name="jobs",
                primary_key="K1",
                indexes=(IndexDescriptor(index_name="ByK1", attribute_name="K1"),),
            )

        assert exc_info.value.context["table_name"] == "jobs"
        assert isinstance(exc_info.value.original_error, PydanticValidationError)

    def test_schema_is_immutable(self):
        """Test that descriptors cannot be modified after construction."""
        schema = define_schema("T", primary_key="K")

        with pytest.raises(Exception):
            schema.primary_key = "other"

    def test_get_index(self, status_schema):
        """Test index lookup by name."""
        index = status_schema.get_index("StatusIndex")

        assert index.attribute_name == "K2"

    def test_get_unknown_index(self, status_schema):
        """Test that undeclared indexes raise UnknownIndexError."""
        with pytest.raises(UnknownIndexError) as exc_info:
            status_schema.get_index("Nope")

        assert exc_info.value.index_name == "Nope"
        assert exc_info.value.table_name == "jobs"


class TestIndexDescriptor:
    """Test secondary index descriptors."""

    def test_include_projection_requires_attributes(self):
        """Test that INCLUDE projections must list non-key attributes."""
        with pytest.raises(ValidationError, match="INCLUDE") as exc_info:
            IndexDescriptor(index_name="ByOwner", attribute_name="owner", projection=ProjectionType.INCLUDE)

        assert exc_info.value.context["index_name"] == "ByOwner"

    def test_non_key_attributes_require_include(self):
        """Test that non-key attributes are only allowed with INCLUDE."""
        with pytest.raises(ValidationError, match="without INCLUDE"):
            IndexDescriptor(index_name="ByOwner", attribute_name="owner", non_key_attributes=("title",))

    def test_projection_block(self):
        """Test the Projection block sent to CreateTable."""
        index = IndexDescriptor(
            index_name="ByOwner",
            attribute_name="owner",
            projection=ProjectionType.INCLUDE,
            non_key_attributes=("title", "created_at"),
        )

        assert index.projection_block() == {
            'ProjectionType': 'INCLUDE',
            'NonKeyAttributes': ['title', 'created_at'],
        }

    def test_index_name_length(self):
        """Test that index names shorter than three characters are rejected."""
        with pytest.raises(ValidationError) as exc_info:
            IndexDescriptor(index_name="ab", attribute_name="owner")

        assert "index_name" in exc_info.value.errors


class TestKeyValidation:
    """Test key construction from primary key values."""

    def test_string_key(self, simple_schema):
        assert simple_schema.key_for("abc") == {"K": "abc"}

    @pytest.mark.parametrize("value", ["", None, 5, b"abc"])
    def test_invalid_string_keys(self, simple_schema, value):
        """Test that non-string or empty values are rejected for string keys."""
        with pytest.raises(ValidationError):
            simple_schema.key_for(value)

    def test_number_key_converts_float(self):
        """Test that float keys are sent as Decimal."""
        schema = define_schema("counters", primary_key="id", primary_key_type=AttributeType.NUMBER)

        assert schema.key_for(7) == {"id": 7}
        assert schema.key_for(1.5) == {"id": Decimal("1.5")}

    def test_number_key_rejects_bool(self):
        """Test that booleans are not accepted as numbers."""
        schema = define_schema("counters", primary_key="id", primary_key_type=AttributeType.NUMBER)

        with pytest.raises(ValidationError):
            schema.key_for(True)

    def test_binary_key(self):
        """Test binary keys accept bytes and reject empty values."""
        schema = define_schema("blobs", primary_key="digest", primary_key_type=AttributeType.BINARY)

        assert schema.key_for(bytearray(b"\x01\x02")) == {"digest": b"\x01\x02"}
        with pytest.raises(ValidationError):
            schema.key_for(b"")


class TestCreateTableBlocks:
    """Test the CreateTable fragments derived from a schema."""

    def test_key_schema(self, status_schema):
        assert status_schema.key_schema() == [{'AttributeName': 'K1', 'KeyType': 'HASH'}]

    def test_attribute_definitions_deduplicate(self):
        """Test that an attribute shared by two indexes is defined once."""
        schema = define_schema(
            "events",
            primary_key="id",
            indexes=[
                IndexDescriptor(index_name="ByKind", attribute_name="kind"),
                IndexDescriptor(index_name="ByKindKeys", attribute_name="kind", projection=ProjectionType.KEYS_ONLY),
            ],
        )

        assert schema.attribute_definitions() == [
            {'AttributeName': 'id', 'AttributeType': 'S'},
            {'AttributeName': 'kind', 'AttributeType': 'S'},
        ]

    def test_conflicting_attribute_types_are_rejected(self):
        """Test that two indexes may not declare one attribute with different types."""
        with pytest.raises(ValidationError, match="declared as S and N") as exc_info:
            define_schema(
                "events",
                primary_key="id",
                indexes=[
                    IndexDescriptor(index_name="ByKind", attribute_name="kind"),
                    IndexDescriptor(index_name="ByKindNumber", attribute_name="kind", attribute_type=AttributeType.NUMBER),
                ],
            )

        assert exc_info.value.context["table_name"] == "events"

    def test_global_secondary_indexes_on_demand(self, status_schema):
        """Test GSI blocks without provisioned throughput."""
        gsis = status_schema.global_secondary_indexes()

        assert gsis == [{
            'IndexName': 'StatusIndex',
            'KeySchema': [{'AttributeName': 'K2', 'KeyType': 'HASH'}],
            'Projection': {'ProjectionType': 'ALL'},
        }]

    def test_global_secondary_indexes_provisioned(self, status_schema):
        """Test GSI blocks carry the throughput block when given."""
        throughput = {'ReadCapacityUnits': 2, 'WriteCapacityUnits': 1}

        gsis = status_schema.global_secondary_indexes(throughput)

        assert gsis[0]['ProvisionedThroughput'] == throughput


class TestSchemaRegistry:
    """Test cases for SchemaRegistry."""

    def test_register_and_lookup(self, simple_schema):
        registry = SchemaRegistry()
        registry.register(simple_schema)

        assert registry.lookup("T") is simple_schema
        assert "T" in registry
        assert len(registry) == 1

    def test_duplicate_registration(self, simple_schema):
        """Test that a table name can only be registered once."""
        registry = SchemaRegistry(simple_schema)

        with pytest.raises(DuplicateSchemaError) as exc_info:
            registry.register(define_schema("T", primary_key="other"))

        assert exc_info.value.table_name == "T"
        assert registry.lookup("T") is simple_schema

    def test_unknown_lookup(self):
        """Test lookup of an unregistered table."""
        registry = SchemaRegistry()

        with pytest.raises(UnknownSchemaError, match="No schema registered for table 'missing'"):
            registry.lookup("missing")

    def test_iteration_preserves_order(self, simple_schema, status_schema):
        registry = SchemaRegistry(status_schema, simple_schema)

        assert registry.table_names() == ["jobs", "T"]
        assert [schema.table_name for schema in registry] == ["jobs", "T"]
