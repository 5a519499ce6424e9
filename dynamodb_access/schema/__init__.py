"""
Table schema definitions and the schema registry.

- SchemaDescriptor / IndexDescriptor: frozen, declarative table descriptions
- define_schema: constructor that reports invariant violations as ValidationError
- SchemaRegistry: write-once lookup by table name
"""

from .descriptors import (
    AttributeType,
    IndexDescriptor,
    ProjectionType,
    SchemaDescriptor,
    check_key_value,
    define_schema,
)
from .registry import SchemaRegistry

__all__ = [
    "AttributeType",
    "IndexDescriptor",
    "ProjectionType",
    "SchemaDescriptor",
    "SchemaRegistry",
    "check_key_value",
    "define_schema",
]
