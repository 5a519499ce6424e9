"""
Generic schema-bound accessor.

A TableAccessor binds one SchemaDescriptor to a StorageClient and delegates
request shaping to a RequestBuilder strategy. Specialized accessors inject
their own builder instead of subclassing, so the same accessor code serves
every record shape.
"""

import logging
from typing import Any, Iterator, Mapping, Optional, Protocol

from boto3.dynamodb.conditions import Attr

from ..core import StorageClient
from ..exceptions import ValidationError
from ..models import GetRequest, PutRequest, UpdateExpression, UpdateRequest
from ..schema import SchemaDescriptor
from ..utils import Record

logger = logging.getLogger(__name__)


class RequestBuilder(Protocol):
    """Capabilities a TableAccessor needs from its record-shaping strategy."""

    def build_get_request(self, schema: SchemaDescriptor, key: Any) -> GetRequest:
        ...

    def build_put_request(self, schema: SchemaDescriptor, key: Any, attributes: Mapping[str, Any]) -> PutRequest:
        ...

    def build_update_request(self, schema: SchemaDescriptor, key: Any, changes: Mapping[str, Any]) -> UpdateRequest:
        ...


class DefaultRequestBuilder:
    """Pass-through shaping: stamp the key on puts, assign changes as given on updates."""

    consistent_read = False

    def build_get_request(self, schema: SchemaDescriptor, key: Any) -> GetRequest:
        return GetRequest(key=key, consistent_read=self.consistent_read)

    def build_put_request(self, schema: SchemaDescriptor, key: Any, attributes: Mapping[str, Any]) -> PutRequest:
        record = dict(attributes)
        if schema.primary_key in record and record[schema.primary_key] != key:
            logger.debug(f"Overriding '{schema.primary_key}' in attributes with key {key!r}")
        record[schema.primary_key] = key
        return PutRequest(record=record)

    def build_update_request(self, schema: SchemaDescriptor, key: Any, changes: Mapping[str, Any]) -> UpdateRequest:
        return UpdateRequest(key=key, expression=UpdateExpression.of(changes))


class TableAccessor:
    """
    CRUD and query operations for one table.

    Thread-safe: holds only the client, the schema and the builder, none of
    which change after construction. Per-key consistency is whatever a single
    DynamoDB call provides.
    """

    def __init__(self, client: StorageClient, schema: SchemaDescriptor, builder: Optional[RequestBuilder] = None):
        """Initialize accessor.

        Args:
            client: Storage client whose registry holds ``schema``
            schema: Schema of the table to access
            builder: Request-shaping strategy (default: DefaultRequestBuilder)
        """
        self.client = client
        registered = client.registry.lookup(schema.table_name)
        if registered != schema:
            raise ValidationError(
                f"Schema for '{schema.table_name}' differs from the one registered with the client",
                context={'table_name': schema.table_name},
            )
        self.schema = registered
        self.builder = builder or DefaultRequestBuilder()

    @property
    def table_name(self) -> str:
        return self.schema.table_name

    def get(self, key: Any) -> Optional[Record]:
        """Return the record stored under ``key``, or None."""
        request = self.builder.build_get_request(self.schema, key)
        return self.client.get_item(self.table_name, request.key, consistent_read=request.consistent_read)

    def put(self, key: Any, attributes: Mapping[str, Any]) -> Record:
        """
        Store ``attributes`` under ``key``, replacing the whole item.

        The primary key attribute is always set to ``key``.

        Returns:
            The record as written
        """
        request = self.builder.build_put_request(self.schema, key, attributes)
        self.client.put_item(self.table_name, request.record)
        return dict(request.record)

    def put_if_absent(self, key: Any, attributes: Mapping[str, Any]) -> Record:
        """
        Like put(), but only if no item exists under ``key``, in one atomic call.

        Raises:
            ConflictError: an item already exists under ``key``
        """
        request = self.builder.build_put_request(self.schema, key, attributes)
        self.client.put_item(
            self.table_name,
            request.record,
            condition=Attr(self.schema.primary_key).not_exists(),
        )
        return dict(request.record)

    def exists(self, key: Any) -> bool:
        """
        True if an item is stored under ``key``.

        This is get() followed by a test. Combining it with a later put() is
        a check-then-act race against concurrent writers; use put_if_absent()
        when that matters.
        """
        return self.get(key) is not None

    def update(self, key: Any, changes: Mapping[str, Any]) -> Optional[Record]:
        """
        Apply a partial update shaped by the builder; creates the item if absent.

        Returns:
            Attributes selected by the builder's return_values
        """
        request = self.builder.build_update_request(self.schema, key, changes)
        return self.client.update_item(
            self.table_name,
            request.key,
            request.expression,
            return_values=request.return_values,
        )

    def delete(self, key: Any) -> Optional[Record]:
        """Delete the item under ``key``; returns it, or None if there was none."""
        return self.client.delete_item(self.table_name, key)

    def query(
        self,
        key_condition: Any,
        index_name: Optional[str] = None,
        filter_condition: Any = None,
        page_size: Optional[int] = None
    ) -> Iterator[Record]:
        """Lazy query by primary key or secondary index; see StorageClient.query."""
        return self.client.query(
            self.table_name,
            key_condition,
            index_name=index_name,
            filter_condition=filter_condition,
            page_size=page_size,
        )
