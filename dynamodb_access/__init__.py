from .config import StorageConfig
from .exceptions import (
    AccessDeniedError,
    BackendUnavailableError,
    ConflictError,
    DuplicateSchemaError,
    StorageAccessError,
    TableNotFoundError,
    TableProvisionError,
    ThrottledError,
    UnknownIndexError,
    UnknownSchemaError,
    ValidationError,
)
from .schema import (
    AttributeType,
    IndexDescriptor,
    ProjectionType,
    SchemaDescriptor,
    SchemaRegistry,
    define_schema,
)
from .models import (
    GetRequest,
    PutRequest,
    UpdateExpression,
    UpdateRequest,
)
from .core import (
    StorageClient,
    StorageDiagnostics,
)
from .accessors import (
    DefaultRequestBuilder,
    MultiIndexAccessor,
    MultiIndexRequestBuilder,
    RequestBuilder,
    SimpleAccessor,
    SimpleRequestBuilder,
    TableAccessor,
)

__version__ = "1.0.0"
__all__ = [
    # Configuration
    "StorageConfig",

    # Exceptions
    "AccessDeniedError",
    "BackendUnavailableError",
    "ConflictError",
    "DuplicateSchemaError",
    "StorageAccessError",
    "TableNotFoundError",
    "TableProvisionError",
    "ThrottledError",
    "UnknownIndexError",
    "UnknownSchemaError",
    "ValidationError",

    # Schemas
    "AttributeType",
    "IndexDescriptor",
    "ProjectionType",
    "SchemaDescriptor",
    "SchemaRegistry",
    "define_schema",

    # Requests and expressions
    "GetRequest",
    "PutRequest",
    "UpdateExpression",
    "UpdateRequest",

    # Storage client
    "StorageClient",
    "StorageDiagnostics",

    # Accessors
    "DefaultRequestBuilder",
    "MultiIndexAccessor",
    "MultiIndexRequestBuilder",
    "RequestBuilder",
    "SimpleAccessor",
    "SimpleRequestBuilder",
    "TableAccessor",
]
