"""
Declarative table schema descriptors.

A SchemaDescriptor names a table, its hash key and the secondary indexes
queries may use. Descriptors are frozen pydantic models: they are built once
at startup and shared by every layer without copying. Building one directly
or through define_schema reports a broken invariant as ValidationError.

Example:
    >>> orders = define_schema(
    ...     "orders",
    ...     primary_key="order_id",
    ...     indexes=[IndexDescriptor(index_name="StatusIndex", attribute_name="status")],
    ... )
    >>> orders.key_for("o-1")
    {'order_id': 'o-1'}
"""

from decimal import Decimal
from enum import Enum
from typing import Any, ClassVar, Dict, Iterable, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError as PydanticValidationError, model_validator

from ..exceptions import UnknownIndexError, ValidationError


class AttributeType(str, Enum):
    """Key attribute types supported by the backend."""
    STRING = "S"
    NUMBER = "N"
    BINARY = "B"


class ProjectionType(str, Enum):
    """Attributes returned by a secondary index query."""
    ALL = "ALL"
    KEYS_ONLY = "KEYS_ONLY"
    INCLUDE = "INCLUDE"


def check_key_value(attribute_name: str, attribute_type: AttributeType, value: Any) -> Any:
    """Validate a key value against its declared type.

    Returns the value in the form sent to the backend (floats become Decimal).

    Raises:
        ValidationError: value is missing, empty or of the wrong type
    """
    context = {'attribute': attribute_name, 'expected_type': attribute_type.value}
    if value is None:
        raise ValidationError(f"Key attribute '{attribute_name}' must not be None", context=context)

    if attribute_type is AttributeType.STRING:
        if not isinstance(value, str) or not value:
            raise ValidationError(f"Key attribute '{attribute_name}' must be a non-empty string, got {value!r}", context=context)
        return value

    if attribute_type is AttributeType.NUMBER:
        if isinstance(value, bool) or not isinstance(value, (int, float, Decimal)):
            raise ValidationError(f"Key attribute '{attribute_name}' must be a number, got {value!r}", context=context)
        if isinstance(value, float):
            return Decimal(str(value))
        return value

    if not isinstance(value, (bytes, bytearray)) or not value:
        raise ValidationError(f"Key attribute '{attribute_name}' must be non-empty bytes, got {value!r}", context=context)
    return bytes(value)


class _Descriptor(BaseModel):
    """Frozen model whose construction errors surface as the package's ValidationError."""

    error_subject: ClassVar[str] = "descriptor"
    error_name_field: ClassVar[str] = ""

    model_config = ConfigDict(frozen=True)

    def __init__(self, **data: Any):
        try:
            super().__init__(**data)
        except PydanticValidationError as e:
            name = data.get(self.error_name_field)
            errors = {'.'.join(str(part) for part in err['loc']) or 'schema': err['msg'] for err in e.errors()}
            raise ValidationError(
                f"Invalid {self.error_subject} '{name}'",
                errors=errors,
                original_error=e,
                context={self.error_name_field: name},
            ) from e


class IndexDescriptor(_Descriptor):
    """A global secondary index keyed on a single attribute."""

    index_name: str = Field(..., min_length=3, max_length=255, description="Index name, unique within the schema")
    attribute_name: str = Field(..., min_length=1, description="Hash key attribute of the index")
    attribute_type: AttributeType = Field(AttributeType.STRING, description="Type of the indexed attribute")
    projection: ProjectionType = Field(ProjectionType.ALL, description="Attributes copied into the index")
    non_key_attributes: Tuple[str, ...] = Field(default=(), description="Extra attributes for INCLUDE projections")

    error_subject: ClassVar[str] = "index"
    error_name_field: ClassVar[str] = "index_name"

    @model_validator(mode='after')
    def validate_projection(self):
        if self.projection is ProjectionType.INCLUDE and not self.non_key_attributes:
            raise ValueError(f"Index '{self.index_name}' uses INCLUDE projection but lists no non_key_attributes")
        if self.projection is not ProjectionType.INCLUDE and self.non_key_attributes:
            raise ValueError(f"Index '{self.index_name}' lists non_key_attributes without INCLUDE projection")
        return self

    def projection_block(self) -> Dict[str, Any]:
        block: Dict[str, Any] = {'ProjectionType': self.projection.value}
        if self.non_key_attributes:
            block['NonKeyAttributes'] = list(self.non_key_attributes)
        return block


class SchemaDescriptor(_Descriptor):
    """Immutable description of one table.

    Invariants:
        - the primary key attribute is not the attribute of any index
        - index names are unique within the schema
        - an attribute shared by several indexes has one declared type
    """

    table_name: str = Field(..., min_length=1, max_length=255, description="Logical table name, unique per registry")
    primary_key: str = Field(..., min_length=1, description="Hash key attribute name")
    primary_key_type: AttributeType = Field(AttributeType.STRING, description="Hash key attribute type")
    indexes: Tuple[IndexDescriptor, ...] = Field(default=(), description="Secondary indexes in declaration order")

    error_subject: ClassVar[str] = "schema for table"
    error_name_field: ClassVar[str] = "table_name"

    @model_validator(mode='after')
    def validate_indexes(self):
        seen = set()
        attribute_types: Dict[str, AttributeType] = {}
        for index in self.indexes:
            if index.attribute_name == self.primary_key:
                raise ValueError(
                    f"Index '{index.index_name}' reuses primary key attribute '{self.primary_key}'"
                )
            if index.index_name in seen:
                raise ValueError(f"Duplicate index name '{index.index_name}'")
            seen.add(index.index_name)
            declared = attribute_types.setdefault(index.attribute_name, index.attribute_type)
            if declared != index.attribute_type:
                raise ValueError(
                    f"Attribute '{index.attribute_name}' is declared as {declared.value} and "
                    f"{index.attribute_type.value} by different indexes"
                )
        return self

    @property
    def index_names(self) -> List[str]:
        return [index.index_name for index in self.indexes]

    def get_index(self, index_name: str) -> IndexDescriptor:
        """Return the named index.

        Raises:
            UnknownIndexError: the schema declares no such index
        """
        for index in self.indexes:
            if index.index_name == index_name:
                return index
        raise UnknownIndexError(self.table_name, index_name)

    def key_for(self, value: Any) -> Dict[str, Any]:
        """Build the backend key map for a primary key value."""
        return {self.primary_key: check_key_value(self.primary_key, self.primary_key_type, value)}

    def key_schema(self) -> List[Dict[str, str]]:
        return [{'AttributeName': self.primary_key, 'KeyType': 'HASH'}]

    def attribute_definitions(self) -> List[Dict[str, str]]:
        """AttributeDefinitions for CreateTable: the hash key plus every indexed attribute once."""
        definitions = {self.primary_key: self.primary_key_type.value}
        for index in self.indexes:
            definitions.setdefault(index.attribute_name, index.attribute_type.value)
        return [{'AttributeName': name, 'AttributeType': kind} for name, kind in definitions.items()]

    def global_secondary_indexes(self, throughput: Optional[Dict[str, int]] = None) -> List[Dict[str, Any]]:
        """GlobalSecondaryIndexes for CreateTable.

        Args:
            throughput: ProvisionedThroughput block for PROVISIONED billing, None for on-demand
        """
        result = []
        for index in self.indexes:
            gsi: Dict[str, Any] = {
                'IndexName': index.index_name,
                'KeySchema': [{'AttributeName': index.attribute_name, 'KeyType': 'HASH'}],
                'Projection': index.projection_block(),
            }
            if throughput:
                gsi['ProvisionedThroughput'] = dict(throughput)
            result.append(gsi)
        return result


def define_schema(
    table_name: str,
    primary_key: str,
    primary_key_type: AttributeType = AttributeType.STRING,
    indexes: Iterable[IndexDescriptor] = (),
) -> SchemaDescriptor:
    """Build a SchemaDescriptor, reporting invariant violations as ValidationError.

    Raises:
        ValidationError: the descriptor breaks a schema invariant
    """
    return SchemaDescriptor(
        table_name=table_name,
        primary_key=primary_key,
        primary_key_type=primary_key_type,
        indexes=tuple(indexes),
    )
