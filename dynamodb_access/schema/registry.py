import logging
from typing import Dict, Iterator, List

from ..exceptions import DuplicateSchemaError, UnknownSchemaError
from .descriptors import SchemaDescriptor

logger = logging.getLogger(__name__)


class SchemaRegistry:
    """Write-once collection of table schemas, keyed by logical table name.

    Populate it during startup; afterwards it is only read, so one registry
    can be shared by any number of clients and accessors.
    """

    def __init__(self, *schemas: SchemaDescriptor):
        self._schemas: Dict[str, SchemaDescriptor] = {}
        for schema in schemas:
            self.register(schema)

    def register(self, descriptor: SchemaDescriptor) -> SchemaDescriptor:
        """Register a schema.

        Raises:
            DuplicateSchemaError: a schema with the same table name exists
        """
        if descriptor.table_name in self._schemas:
            raise DuplicateSchemaError(descriptor.table_name)
        self._schemas[descriptor.table_name] = descriptor
        logger.debug(f"Registered schema for table {descriptor.table_name}")
        return descriptor

    def lookup(self, table_name: str) -> SchemaDescriptor:
        """Return the schema for a table.

        Raises:
            UnknownSchemaError: no schema registered under that name
        """
        try:
            return self._schemas[table_name]
        except KeyError:
            raise UnknownSchemaError(table_name) from None

    def table_names(self) -> List[str]:
        return list(self._schemas)

    def __contains__(self, table_name: object) -> bool:
        return table_name in self._schemas

    def __iter__(self) -> Iterator[SchemaDescriptor]:
        return iter(list(self._schemas.values()))

    def __len__(self) -> int:
        return len(self._schemas)
