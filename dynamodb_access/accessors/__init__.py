"""
Schema-bound accessors.

- TableAccessor: generic CRUD/query over one schema, shaped by a RequestBuilder
- SimpleAccessor: key/value tables (set_value / get_value)
- MultiIndexAccessor: status-indexed tables with an automatic last-updated stamp
"""

from .multi_index import MultiIndexAccessor, MultiIndexRequestBuilder
from .simple import SimpleAccessor, SimpleRequestBuilder
from .table_accessor import DefaultRequestBuilder, RequestBuilder, TableAccessor

__all__ = [
    "DefaultRequestBuilder",
    "MultiIndexAccessor",
    "MultiIndexRequestBuilder",
    "RequestBuilder",
    "SimpleAccessor",
    "SimpleRequestBuilder",
    "TableAccessor",
]
