"""
Request models produced by request builders.

A TableAccessor asks its builder for one of these per operation and hands
the contents to the StorageClient. Keeping them as plain, frozen values lets
builders be swapped without touching the accessor.
"""

from typing import Any, Dict, Literal

from pydantic import BaseModel, ConfigDict, Field

from .expressions import UpdateExpression

ReturnValues = Literal['NONE', 'ALL_OLD', 'UPDATED_OLD', 'ALL_NEW', 'UPDATED_NEW']


class GetRequest(BaseModel):
    """Read one item by primary key value."""

    key: Any = Field(..., description="Primary key value")
    consistent_read: bool = Field(False, description="Request a strongly consistent read")

    model_config = ConfigDict(frozen=True)


class PutRequest(BaseModel):
    """Replace the whole item stored under the record's key."""

    record: Dict[str, Any] = Field(..., description="Complete item, including the primary key attribute")

    model_config = ConfigDict(frozen=True)


class UpdateRequest(BaseModel):
    """Apply a partial update to one item."""

    key: Any = Field(..., description="Primary key value")
    expression: UpdateExpression = Field(..., description="Assignments to apply")
    return_values: ReturnValues = Field('ALL_NEW', description="Attributes returned by UpdateItem")

    model_config = ConfigDict(frozen=True)
