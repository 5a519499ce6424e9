"""
Simple key/value accessor.

Single hash-key table with an arbitrary payload. ``set_value`` writes one
attribute in place without touching the rest of the item.
"""

import logging
from typing import Any, Mapping, Optional

from ..core import StorageClient
from ..models import UpdateExpression, UpdateRequest
from ..schema import SchemaDescriptor
from ..utils import Record
from .table_accessor import DefaultRequestBuilder, TableAccessor

logger = logging.getLogger(__name__)


class SimpleRequestBuilder(DefaultRequestBuilder):
    """Updates return only the attributes they changed."""

    def build_update_request(self, schema: SchemaDescriptor, key: Any, changes: Mapping[str, Any]) -> UpdateRequest:
        return UpdateRequest(
            key=key,
            expression=UpdateExpression.of(changes),
            return_values='UPDATED_NEW',
        )


class SimpleAccessor:
    """Key/value access to a single hash-key table."""

    def __init__(self, client: StorageClient, schema: SchemaDescriptor, value_attribute: str = "value"):
        self.value_attribute = value_attribute
        self._table = TableAccessor(client, schema, SimpleRequestBuilder())

    @property
    def schema(self) -> SchemaDescriptor:
        return self._table.schema

    def get(self, key: Any) -> Optional[Record]:
        return self._table.get(key)

    def put(self, key: Any, attributes: Mapping[str, Any]) -> Record:
        return self._table.put(key, attributes)

    def exists(self, key: Any) -> bool:
        return self._table.exists(key)

    def delete(self, key: Any) -> Optional[Record]:
        return self._table.delete(key)

    def set_value(self, key: Any, value: Any) -> Any:
        """Set the value attribute of ``key`` (creating the item if needed) and return the stored value."""
        updated = self._table.update(key, {self.value_attribute: value})
        return (updated or {}).get(self.value_attribute)

    def get_value(self, key: Any, default: Any = None) -> Any:
        """Value attribute of ``key``, or ``default`` when the item or attribute is missing."""
        record = self._table.get(key)
        if record is None:
            return default
        return record.get(self.value_attribute, default)
