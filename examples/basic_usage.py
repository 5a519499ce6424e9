#!/usr/bin/env python3
"""
Basic usage of the data-access layer.

1. Declare schemas and register them
2. Build a StorageClient from configuration
3. Provision tables
4. Use the simple and multi-index accessors

Run against DynamoDB Local:
    docker run -p 8000:8000 amazon/dynamodb-local
    python examples/basic_usage.py
"""

import logging

from dynamodb_access import (
    ConflictError,
    IndexDescriptor,
    MultiIndexAccessor,
    SchemaRegistry,
    SimpleAccessor,
    StorageClient,
    StorageConfig,
    TableAccessor,
    define_schema,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def main():
    """Walk through the main operations on a local endpoint."""

    # 1. Schemas are declared once at startup
    print("1. Registering schemas...")
    settings = define_schema("settings", primary_key="name")
    jobs = define_schema(
        "jobs",
        primary_key="job_id",
        indexes=[IndexDescriptor(index_name="StatusIndex", attribute_name="status")],
    )
    registry = SchemaRegistry(settings, jobs)

    # 2. One client per endpoint; nothing is global
    print("2. Creating storage client...")
    config = StorageConfig.for_local_development()
    # config = StorageConfig.from_env()  # production: credentials and prefix from the environment
    client = StorageClient(config, registry)

    # 3. Idempotent table provisioning
    print("3. Ensuring tables exist...")
    for table_name in registry.table_names():
        client.ensure_table(table_name)

    # 4. Key/value access
    print("4. Simple key/value access...")
    settings_store = SimpleAccessor(client, settings)
    settings_store.set_value("max_workers", 8)
    print(f"   max_workers = {settings_store.get_value('max_workers')}")
    print(f"   missing     = {settings_store.get_value('nope', default='<unset>')}")

    # 5. Status tracking with a secondary index
    print("5. Status tracking...")
    job_store = MultiIndexAccessor(client, jobs)
    job_store.put("job-1", {"status": "queued", "owner": "etl"})
    job_store.put("job-2", {"status": "queued", "owner": "reports"})
    updated = job_store.update("job-1", "running")
    print(f"   job-1 is {updated['status']} (updated_at={updated['updated_at']})")

    queued = [item["job_id"] for item in job_store.filter_by_secondary_index("queued")]
    print(f"   queued jobs: {queued}")

    # 6. Atomic create-only writes
    print("6. Conditional writes...")
    generic = TableAccessor(client, settings)
    try:
        generic.put_if_absent("max_workers", {"value": 1})
    except ConflictError as e:
        print(f"   refused to overwrite: {e.message}")

    print("Done.")


if __name__ == "__main__":
    main()
