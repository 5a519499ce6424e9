"""
Test configuration and fixtures for the data-access layer.

Unit tests run against moto's in-process DynamoDB. Every environment-driven
config field is pinned so a developer's shell or .env cannot leak into tests.
"""

import pytest
from moto import mock_aws

from dynamodb_access import (
    IndexDescriptor,
    MultiIndexAccessor,
    SchemaRegistry,
    SimpleAccessor,
    StorageClient,
    TableAccessor,
    define_schema,
)
from tests.helpers import make_config


@pytest.fixture
def mock_storage_config():
    """Storage configuration for mocked testing."""
    return make_config()


@pytest.fixture
def simple_schema():
    """Single hash-key table "T" keyed on "K"."""
    return define_schema("T", primary_key="K")


@pytest.fixture
def status_schema():
    """Table keyed on "K1" with a secondary index on "K2"."""
    return define_schema(
        "jobs",
        primary_key="K1",
        indexes=[IndexDescriptor(index_name="StatusIndex", attribute_name="K2")],
    )


@pytest.fixture
def registry(simple_schema, status_schema):
    return SchemaRegistry(simple_schema, status_schema)


@pytest.fixture
def mock_aws_backend():
    """Activate moto for the duration of a test."""
    with mock_aws():
        yield


@pytest.fixture
def storage_client(mock_aws_backend, mock_storage_config, registry):
    """StorageClient against moto with every registered table provisioned."""
    client = StorageClient(mock_storage_config, registry)
    for table_name in registry.table_names():
        client.ensure_table(table_name)
    return client


@pytest.fixture
def table_accessor(storage_client, simple_schema):
    return TableAccessor(storage_client, simple_schema)


@pytest.fixture
def simple_accessor(storage_client, simple_schema):
    return SimpleAccessor(storage_client, simple_schema)


@pytest.fixture
def multi_index_accessor(storage_client, status_schema):
    return MultiIndexAccessor(storage_client, status_schema)
