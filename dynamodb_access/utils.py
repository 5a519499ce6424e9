"""
Data-Access Utilities

Helpers shared by the storage client and the accessors.

Key Features:
- Record serialization (float -> Decimal before writes, Decimal/Binary -> Python types after reads)
- UTC timestamps for last-updated attributes
- Filter expression building from plain equality maps
"""

import logging
import math
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, Mapping, Optional

from boto3.dynamodb.conditions import Attr, ConditionBase
from boto3.dynamodb.types import Binary

from .exceptions import ValidationError

logger = logging.getLogger(__name__)

Record = Dict[str, Any]


# =============================================================================
# Timestamps
# =============================================================================

def to_utc(dt: datetime) -> datetime:
    """Convert datetime to UTC.

    Naive datetimes are assumed to already be in UTC.

    Examples:
        >>> to_utc(datetime(2024, 1, 1, 10, 0))  # -> 2024-01-01 10:00:00+00:00
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def utc_now_iso() -> str:
    """Current time as an ISO-8601 UTC string, the stored form of last-updated stamps."""
    return to_utc(datetime.now(timezone.utc)).isoformat()


# =============================================================================
# Record Serialization
# =============================================================================

def serialize_value(value: Any) -> Any:
    """Convert a Python value into something boto3's serializer accepts.

    boto3 refuses floats, so they are sent as Decimal. Datetimes are stored as
    UTC ISO strings.

    Raises:
        ValidationError: NaN or infinity, or a type the backend cannot store
    """
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, float):
        if not math.isfinite(value):
            raise ValidationError(f"Numbers must be finite, got {value!r}")
        return Decimal(str(value))
    if isinstance(value, Decimal):
        if not value.is_finite():
            raise ValidationError(f"Numbers must be finite, got {value!r}")
        return value
    if isinstance(value, (str, int, bytes, Binary)):
        return value
    if isinstance(value, datetime):
        return to_utc(value).isoformat()
    if isinstance(value, bytearray):
        return bytes(value)
    if isinstance(value, Mapping):
        return {str(k): serialize_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [serialize_value(v) for v in value]
    if isinstance(value, (set, frozenset)):
        return {serialize_value(v) for v in value}
    raise ValidationError(f"Unsupported attribute value type {type(value).__name__}")


def deserialize_value(value: Any) -> Any:
    """Convert a boto3-deserialized value back to plain Python types.

    Integral Decimals become int. Other Decimals become float when the float
    prints back to the same digits, so written floats read back equal;
    anything more precise stays Decimal.
    """
    if isinstance(value, bool) or value is None:
        return value
    if isinstance(value, Decimal):
        if value == value.to_integral_value():
            return int(value)
        as_float = float(value)
        if Decimal(repr(as_float)) == value:
            return as_float
        return value
    if isinstance(value, Binary):
        return value.value
    if isinstance(value, dict):
        return {k: deserialize_value(v) for k, v in value.items()}
    if isinstance(value, list):
        return [deserialize_value(v) for v in value]
    if isinstance(value, set):
        return {deserialize_value(v) for v in value}
    return value


def serialize_record(record: Mapping[str, Any]) -> Record:
    """Prepare a record for PutItem.

    Raises:
        ValidationError: record is not a mapping, has non-string attribute
            names, or holds a value the backend cannot store
    """
    if not isinstance(record, Mapping):
        raise ValidationError(f"Record must be a mapping, got {type(record).__name__}")
    bad_names = [name for name in record if not isinstance(name, str) or not name]
    if bad_names:
        raise ValidationError(f"Attribute names must be non-empty strings: {bad_names!r}")
    item = {}
    for name, value in record.items():
        try:
            item[name] = serialize_value(value)
        except ValidationError as e:
            raise ValidationError(f"Attribute '{name}': {e.message}", context={'attribute': name}) from e
    return item


def deserialize_record(item: Optional[Mapping[str, Any]]) -> Optional[Record]:
    if item is None:
        return None
    return {name: deserialize_value(value) for name, value in item.items()}


# =============================================================================
# Query Building Utilities
# =============================================================================

def build_filter_expression(filters: Optional[Mapping[str, Any]]):
    """Build FilterExpression for DynamoDB operations.

    Args:
        filters: Dictionary of attribute names to values

    Returns:
        FilterExpression for boto3, or None if no filters

    Example:
        >>> build_filter_expression({'status': 'open', 'region': 'eu'})
        # Returns: Attr('status').eq('open') & Attr('region').eq('eu')
    """
    if not filters:
        return None

    conditions = [Attr(attr_name).eq(serialize_value(value)) for attr_name, value in filters.items()]

    # Combine conditions with AND
    filter_expr = conditions[0]
    for condition in conditions[1:]:
        filter_expr = filter_expr & condition

    return filter_expr


def coerce_filter(filter_condition: Any):
    """Accept a boto3 condition or an equality map and return a boto3 condition (or None)."""
    if filter_condition is None or isinstance(filter_condition, ConditionBase):
        return filter_condition
    if isinstance(filter_condition, Mapping):
        return build_filter_expression(filter_condition)
    raise ValidationError(
        f"Filter must be a boto3 condition or a mapping, got {type(filter_condition).__name__}"
    )


__all__ = [
    "Record",
    "to_utc",
    "utc_now_iso",
    "serialize_value",
    "deserialize_value",
    "serialize_record",
    "deserialize_record",
    "build_filter_expression",
    "coerce_filter",
]
