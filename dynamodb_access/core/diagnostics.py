"""
Diagnostic operations kept off the production surface.

Full-table scans cost O(table size) in time and read capacity, so they live
here instead of on StorageClient or the accessors. Reach them explicitly via
``client.diagnostics`` in tests, scripts and admin tooling.
"""

import logging
from typing import Any, Dict, Iterator, Optional

from ..utils import Record

logger = logging.getLogger(__name__)


class StorageDiagnostics:
    """Scan/describe/drop helpers bound to one StorageClient."""

    def __init__(self, client):
        self._client = client

    def scan(self, table_name: str, page_size: Optional[int] = None, timeout: Optional[float] = None) -> Iterator[Record]:
        """
        Iterate over every item of a table.

        ⚠️  Reads the whole table. Use query() on a key or index for any
        production read path.
        """
        table = self._client.table(table_name)
        logger.warning(f"Full scan of {table.name} requested - diagnostic use only")

        scan_kwargs: Dict[str, Any] = {}
        if page_size:
            scan_kwargs['Limit'] = page_size
        return self._client._paginate("Scan", table.name, table.scan, scan_kwargs, timeout)

    def describe_table(self, table_name: str, timeout: Optional[float] = None) -> Dict[str, Any]:
        """Raw DescribeTable "Table" block."""
        physical = self._client.physical_table_name(table_name)
        response = self._client._call(
            lambda: self._client.client.describe_table(TableName=physical),
            "DescribeTable", physical, timeout=timeout
        )
        return response['Table']

    def drop_table(self, table_name: str, timeout: Optional[float] = None) -> None:
        """Delete a table and its data. Returns once deletion has started."""
        physical = self._client.physical_table_name(table_name)
        self._client._call(
            lambda: self._client.client.delete_table(TableName=physical),
            "DeleteTable", physical, timeout=timeout
        )
        logger.info(f"Deleting table {physical}")
