"""
Storage Client

Owns the boto3 session for one StorageConfig and translates abstract
read/write/query requests into DynamoDB calls. Every table it touches must
be registered in the SchemaRegistry it was built with; the schema supplies
key types, index names and CreateTable parameters.

Design notes:
- No module-level session. Build one StorageClient per configuration and pass
  it explicitly; several clients (e.g. production and a local endpoint) can
  live in one process.
- Each public call issues one blocking backend call (plus bounded retries),
  except query(), which fetches further pages lazily as the caller iterates.
- Every public call accepts ``timeout`` (seconds). It bounds retries and
  waits; the socket timeout of a single request is
  StorageConfig.timeout_seconds.
- Query result order is backend-defined and not guaranteed.
"""

import logging
import threading
import time
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, TypeVar, Union

import boto3
from boto3.dynamodb.conditions import ConditionBase, Key
from botocore.config import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..config import StorageConfig
from ..exceptions import BackendUnavailableError, ConflictError, TableProvisionError, ValidationError
from ..models import UpdateExpression
from ..models.requests import ReturnValues
from ..schema import SchemaDescriptor, SchemaRegistry, check_key_value
from ..utils import Record, coerce_filter, deserialize_record, serialize_record
from .errors import map_backend_error
from .retry import Deadline, call_with_retry

logger = logging.getLogger(__name__)

T = TypeVar('T')


class StorageClient:
    """
    Session owner and request translator for one DynamoDB endpoint.

    Key principles:
    - Tables are addressed by logical name; the physical name adds the
      configured prefix and environment
    - Missing items are reported as None, never as an empty record
    - Backend failures surface as StorageAccessError subclasses with table,
      operation and key context; nothing is swallowed except "table already
      exists" during ensure_table
    """

    def __init__(self, config: StorageConfig, registry: SchemaRegistry):
        """Initialize storage client.

        Args:
            config: Connection configuration, owned by this client from now on
            registry: Schemas of every table this client may address
        """
        self.config = config
        self.registry = registry
        self._dynamodb = None
        self._lock = threading.Lock()

        if config.enable_debug_logging:
            logging.getLogger(__name__.split('.')[0]).setLevel(logging.DEBUG)

    @property
    def dynamodb(self):
        """Lazy initialization of DynamoDB resource."""
        if self._dynamodb is None:
            with self._lock:
                if self._dynamodb is None:
                    self._dynamodb = self._create_resource()
        return self._dynamodb

    def _create_resource(self):
        try:
            session = boto3.Session(
                aws_access_key_id=self.config.aws_access_key_id,
                aws_secret_access_key=self.config.aws_secret_access_key,
                aws_session_token=self.config.aws_session_token,
                region_name=self.config.region_name
            )

            # Configure connection parameters
            dynamodb_config: Dict[str, Any] = {
                'region_name': self.config.region_name
            }

            if self.config.endpoint_url:
                dynamodb_config['endpoint_url'] = self.config.endpoint_url

            # Add retry and timeout configuration
            dynamodb_config['config'] = Config(
                retries={'max_attempts': self.config.retries},
                max_pool_connections=self.config.max_pool_connections,
                read_timeout=self.config.timeout_seconds,
                connect_timeout=self.config.timeout_seconds
            )

            return session.resource('dynamodb', **dynamodb_config)
        except (BotoCoreError, ValueError) as e:
            logger.error(f"Failed to create DynamoDB resource: {e}")
            raise BackendUnavailableError(f"Failed to connect to DynamoDB: {e}", e) from e

    @property
    def client(self):
        """Low-level client sharing the resource's connection pool (table lifecycle calls)."""
        return self.dynamodb.meta.client

    @property
    def diagnostics(self):
        """Diagnostic surface (scan, describe, drop). Not for production read paths."""
        from .diagnostics import StorageDiagnostics
        return StorageDiagnostics(self)

    # ------------------------------------------------------------------
    # Naming and plumbing
    # ------------------------------------------------------------------

    def schema(self, table_name: str) -> SchemaDescriptor:
        return self.registry.lookup(table_name)

    def physical_table_name(self, table_name: str) -> str:
        """Backend table name for a registered logical table name."""
        return self.config.get_table_name(self.registry.lookup(table_name).table_name)

    def table(self, table_name: str):
        """boto3 Table resource for a registered logical table name."""
        return self.dynamodb.Table(self.physical_table_name(table_name))

    def _deadline(self, timeout: Optional[float]) -> Deadline:
        return Deadline(timeout if timeout is not None else self.config.default_call_timeout_seconds)

    def _call(self, fn: Callable[[], T], operation: str, physical: str,
              key: Optional[Any] = None, timeout: Optional[float] = None) -> T:
        return call_with_retry(
            fn,
            config=self.config,
            operation=operation,
            table_name=physical,
            deadline=self._deadline(timeout),
            key=key,
        )

    # ------------------------------------------------------------------
    # Table lifecycle
    # ------------------------------------------------------------------

    def create_table_params(self, table_name: str) -> Dict[str, Any]:
        """CreateTable parameters for a registered table under this client's config."""
        schema = self.registry.lookup(table_name)
        throughput = self.config.provisioned_throughput()
        params: Dict[str, Any] = {
            'TableName': self.config.get_table_name(schema.table_name),
            'KeySchema': schema.key_schema(),
            'AttributeDefinitions': schema.attribute_definitions(),
            'BillingMode': self.config.billing_mode,
        }
        if throughput:
            params['ProvisionedThroughput'] = throughput
        indexes = schema.global_secondary_indexes(throughput)
        if indexes:
            params['GlobalSecondaryIndexes'] = indexes
        return params

    def ensure_table(self, table_name: str, timeout: Optional[float] = None) -> Dict[str, Any]:
        """
        Create the table if absent and block until it and its indexes are ACTIVE.

        Idempotent: an existing table is not an error. An existing table whose
        definition differs from the schema is not detected.

        Args:
            table_name: Registered logical table name
            timeout: Overall wait in seconds (default: config.provision_timeout_seconds)

        Returns:
            DescribeTable "Table" block of the ready table

        Raises:
            TableProvisionError: table not ACTIVE before the deadline
            StorageAccessError: any other backend failure
        """
        params = self.create_table_params(table_name)
        physical = params['TableName']
        deadline = Deadline(timeout if timeout is not None else self.config.provision_timeout_seconds)

        try:
            self._call(lambda: self.client.create_table(**params), "CreateTable", physical,
                       timeout=deadline.remaining())
            logger.info(f"Creating table {physical}")
        except ConflictError as e:
            if e.context.get('error_code') != 'ResourceInUseException':
                raise
            logger.info(f"Table {physical} already exists")

        return self._wait_until_active(physical, deadline)

    @staticmethod
    def _is_ready(description: Mapping[str, Any]) -> bool:
        if description.get('TableStatus') != 'ACTIVE':
            return False
        return all(
            index.get('IndexStatus', 'ACTIVE') == 'ACTIVE'
            for index in description.get('GlobalSecondaryIndexes', [])
        )

    def _wait_until_active(self, physical: str, deadline: Deadline) -> Dict[str, Any]:
        started = time.monotonic()
        delay = self.config.provision_poll_seconds
        last_status: Optional[str] = None

        while True:
            try:
                description = self.client.describe_table(TableName=physical)['Table']
                last_status = description.get('TableStatus')
                if self._is_ready(description):
                    logger.info(f"Table {physical} is ACTIVE")
                    return description
            except (ClientError, BotoCoreError) as e:
                error = map_backend_error(e, "DescribeTable", physical)
                if error.context.get('error_code') == 'ResourceNotFoundException':
                    # CreateTable is eventually consistent with DescribeTable
                    last_status = 'NOT_FOUND'
                elif not error.retryable:
                    raise error from e
                else:
                    logger.warning(f"DescribeTable on {physical} failed transiently: {error}")

            remaining = deadline.remaining()
            if remaining is not None and remaining <= 0:
                raise TableProvisionError(physical, last_status, time.monotonic() - started)

            pause = delay if remaining is None else min(delay, remaining)
            logger.debug(f"Table {physical} is {last_status}, polling again in {pause:.2f}s")
            time.sleep(pause)
            delay = min(delay * 2, self.config.provision_poll_max_seconds)

    # ------------------------------------------------------------------
    # Item operations
    # ------------------------------------------------------------------

    def get_item(
        self,
        table_name: str,
        key: Any,
        consistent_read: bool = False,
        timeout: Optional[float] = None
    ) -> Optional[Record]:
        """
        Fetch one record by primary key value.

        Returns:
            The record, or None when no item has that key
        """
        schema = self.registry.lookup(table_name)
        key_map = schema.key_for(key)
        table = self.table(table_name)

        response = self._call(
            lambda: table.get_item(Key=key_map, ConsistentRead=consistent_read),
            "GetItem", table.name, key, timeout
        )
        item = response.get('Item')
        logger.debug(f"GetItem on {table.name} for {key!r}: {'hit' if item is not None else 'miss'}")
        return deserialize_record(item)

    def put_item(
        self,
        table_name: str,
        record: Mapping[str, Any],
        condition: Optional[ConditionBase] = None,
        timeout: Optional[float] = None
    ) -> None:
        """
        Write a complete item, replacing any item stored under the same key.

        Attributes of the previous item that are absent from ``record`` are
        lost; use update_item for partial changes.

        Args:
            table_name: Registered logical table name
            record: Item including the primary key attribute
            condition: Optional boto3 condition; failure raises ConflictError
            timeout: Deadline in seconds

        Raises:
            ValidationError: record lacks a valid primary key
            ConflictError: condition not met
        """
        schema = self.registry.lookup(table_name)
        item = serialize_record(record)
        if schema.primary_key not in item:
            raise ValidationError(
                f"Record is missing primary key attribute '{schema.primary_key}'",
                context={'table_name': table_name},
            )
        key = item[schema.primary_key] = check_key_value(
            schema.primary_key, schema.primary_key_type, item[schema.primary_key]
        )
        table = self.table(table_name)

        put_kwargs: Dict[str, Any] = {'Item': item}
        if condition is not None:
            put_kwargs['ConditionExpression'] = condition

        self._call(lambda: table.put_item(**put_kwargs), "PutItem", table.name, key, timeout)
        logger.info(f"Put item in {table.name}: {key!r}")

    def update_item(
        self,
        table_name: str,
        key: Any,
        expression: Union[UpdateExpression, Mapping[str, Any]],
        return_values: ReturnValues = 'NONE',
        condition: Optional[ConditionBase] = None,
        timeout: Optional[float] = None
    ) -> Optional[Record]:
        """
        Apply a partial, attribute-level update.

        Creates the item when the key does not exist yet. All assignments of
        the expression land in one UpdateItem call.

        Args:
            table_name: Registered logical table name
            key: Primary key value
            expression: UpdateExpression, or a plain attribute -> value mapping
            return_values: What UpdateItem returns ('NONE' returns None)
            condition: Optional boto3 condition; failure raises ConflictError
            timeout: Deadline in seconds

        Returns:
            Returned attributes if return_values != 'NONE'
        """
        schema = self.registry.lookup(table_name)
        key_map = schema.key_for(key)
        if not isinstance(expression, UpdateExpression):
            expression = UpdateExpression.of(expression)
        rendered = expression.render(schema.primary_key)
        table = self.table(table_name)

        update_kwargs: Dict[str, Any] = {
            'Key': key_map,
            'UpdateExpression': rendered.update_expression,
            'ExpressionAttributeNames': rendered.expression_attribute_names,
            'ExpressionAttributeValues': rendered.expression_attribute_values,
            'ReturnValues': return_values,
        }
        if condition is not None:
            update_kwargs['ConditionExpression'] = condition

        response = self._call(lambda: table.update_item(**update_kwargs), "UpdateItem", table.name, key, timeout)
        logger.info(f"Updated item in {table.name}: {key!r}")

        return deserialize_record(response.get('Attributes', {})) if return_values != 'NONE' else None

    def delete_item(self, table_name: str, key: Any, timeout: Optional[float] = None) -> Optional[Record]:
        """
        Delete one item by primary key value.

        Returns:
            The deleted record, or None if there was none
        """
        schema = self.registry.lookup(table_name)
        key_map = schema.key_for(key)
        table = self.table(table_name)

        response = self._call(
            lambda: table.delete_item(Key=key_map, ReturnValues='ALL_OLD'),
            "DeleteItem", table.name, key, timeout
        )
        old = response.get('Attributes')
        if old is not None:
            logger.info(f"Deleted item from {table.name}: {key!r}")
        return deserialize_record(old)

    def query(
        self,
        table_name: str,
        key_condition: Any,
        index_name: Optional[str] = None,
        filter_condition: Any = None,
        page_size: Optional[int] = None,
        timeout: Optional[float] = None
    ) -> Iterator[Record]:
        """
        Query by primary key, or by a secondary index when ``index_name`` is given.

        The returned iterator is lazy, finite and single-use: pages are fetched
        as it is consumed and it cannot be restarted. Order is backend-defined.

        Args:
            table_name: Registered logical table name
            key_condition: Hash key value (equality), or a boto3 Key condition
            index_name: Secondary index declared on the table's schema
            filter_condition: boto3 Attr condition or {attribute: value} equalities.
                Filters run after the read, so they do not reduce consumed capacity.
            page_size: Items per backend page (Limit)
            timeout: Deadline in seconds for each page fetch

        Raises:
            UnknownIndexError: index_name is not declared on the schema (raised
                immediately, before iteration)
            ValidationError: key value has the wrong type
        """
        schema = self.registry.lookup(table_name)
        if index_name is None:
            attribute, attribute_type = schema.primary_key, schema.primary_key_type
        else:
            index = schema.get_index(index_name)
            attribute, attribute_type = index.attribute_name, index.attribute_type

        if isinstance(key_condition, ConditionBase):
            key_expression = key_condition
        else:
            key_expression = Key(attribute).eq(check_key_value(attribute, attribute_type, key_condition))

        if page_size is not None and page_size < 1:
            raise ValidationError(f"page_size must be positive, got {page_size}")

        query_kwargs: Dict[str, Any] = {'KeyConditionExpression': key_expression}
        if index_name is not None:
            query_kwargs['IndexName'] = index_name
        filter_expression = coerce_filter(filter_condition)
        if filter_expression is not None:
            query_kwargs['FilterExpression'] = filter_expression
        if page_size:
            query_kwargs['Limit'] = page_size

        table = self.table(table_name)
        return self._paginate("Query", table.name, table.query, query_kwargs, timeout)

    def _paginate(
        self,
        operation: str,
        physical: str,
        fetch: Callable[..., Dict[str, Any]],
        kwargs: Dict[str, Any],
        timeout: Optional[float]
    ) -> Iterator[Record]:
        page_kwargs = dict(kwargs)
        pages = 0
        count = 0
        while True:
            response = self._call(lambda: fetch(**page_kwargs), operation, physical, timeout=timeout)
            pages += 1
            for item in response.get('Items', []):
                count += 1
                yield deserialize_record(item)

            last_key = response.get('LastEvaluatedKey')
            if not last_key:
                break
            page_kwargs['ExclusiveStartKey'] = last_key

        logger.debug(f"{operation} on {physical} returned {count} items in {pages} pages")
