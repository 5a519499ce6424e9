"""
Multi-index accessor.

Hash-key table with a secondary index on a status attribute and a
last-updated attribute maintained on every write. Status changes and their
timestamp are written by a single UpdateItem call, so both land or neither
does.
"""

import logging
from typing import Any, Callable, Iterator, Mapping, Optional

from boto3.dynamodb.conditions import Attr

from ..core import StorageClient
from ..exceptions import ValidationError
from ..models import PutRequest, UpdateExpression, UpdateRequest
from ..schema import IndexDescriptor, SchemaDescriptor
from ..utils import Record, serialize_value, utc_now_iso
from .table_accessor import DefaultRequestBuilder, TableAccessor

logger = logging.getLogger(__name__)


class MultiIndexRequestBuilder(DefaultRequestBuilder):
    """Stamps the last-updated attribute on puts and updates."""

    def __init__(self, updated_at_attribute: str = "updated_at", clock: Callable[[], str] = utc_now_iso):
        self.updated_at_attribute = updated_at_attribute
        self.clock = clock

    def build_put_request(self, schema: SchemaDescriptor, key: Any, attributes: Mapping[str, Any]) -> PutRequest:
        request = super().build_put_request(schema, key, attributes)
        record = dict(request.record)
        record[self.updated_at_attribute] = self.clock()
        return PutRequest(record=record)

    def build_update_request(self, schema: SchemaDescriptor, key: Any, changes: Mapping[str, Any]) -> UpdateRequest:
        changes = dict(changes)
        changes.setdefault(self.updated_at_attribute, self.clock())
        return UpdateRequest(
            key=key,
            expression=UpdateExpression.of(changes, timestamp_attribute=self.updated_at_attribute),
            return_values='ALL_NEW',
        )


class MultiIndexAccessor:
    """
    Status-tracking records reachable by primary key or by status.

    The status attribute is the attribute of the schema's secondary index
    (the first declared one unless ``index_name`` is given).
    """

    def __init__(
        self,
        client: StorageClient,
        schema: SchemaDescriptor,
        index_name: Optional[str] = None,
        updated_at_attribute: str = "updated_at",
        clock: Callable[[], str] = utc_now_iso,
    ):
        if not schema.indexes:
            raise ValidationError(
                f"Table '{schema.table_name}' declares no secondary index",
                context={'table_name': schema.table_name},
            )
        self.index: IndexDescriptor = schema.get_index(index_name) if index_name else schema.indexes[0]
        if updated_at_attribute in (schema.primary_key, self.index.attribute_name):
            raise ValidationError(
                f"Last-updated attribute '{updated_at_attribute}' collides with a key attribute",
                context={'table_name': schema.table_name},
            )
        self.updated_at_attribute = updated_at_attribute
        self._table = TableAccessor(client, schema, MultiIndexRequestBuilder(updated_at_attribute, clock))

    @property
    def schema(self) -> SchemaDescriptor:
        return self._table.schema

    @property
    def status_attribute(self) -> str:
        return self.index.attribute_name

    def get(self, key: Any) -> Optional[Record]:
        return self._table.get(key)

    def put(self, key: Any, attributes: Mapping[str, Any]) -> Record:
        """Replace the item under ``key``; the last-updated attribute is stamped."""
        return self._table.put(key, attributes)

    def exists(self, key: Any) -> bool:
        return self._table.exists(key)

    def delete(self, key: Any) -> Optional[Record]:
        return self._table.delete(key)

    def update(self, key: Any, status: Any) -> Record:
        """
        Set the status of ``key`` and refresh its last-updated stamp in one call.

        Creates the item if it does not exist.

        Returns:
            The full item after the update
        """
        return self._table.update(key, {self.status_attribute: status}) or {}

    def filter_by_primary(self, key: Any, status: Any) -> Iterator[Record]:
        """
        Items under ``key`` whose status equals ``status``.

        Cost caveat: the status test is a filter applied after the read, so
        the query consumes read capacity for every item under the key, matched
        or not. Prefer filter_by_secondary_index when querying by status alone.
        """
        return self._table.query(key, filter_condition=Attr(self.status_attribute).eq(serialize_value(status)))

    def filter_by_secondary_index(self, status: Any) -> Iterator[Record]:
        """
        Items whose status equals ``status``, read straight from the index.

        Only the attributes projected into the index are returned.
        """
        return self._table.query(status, index_name=self.index.index_name)
