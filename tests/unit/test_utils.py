from datetime import datetime, timedelta, timezone
from decimal import Decimal

import pytest
from boto3.dynamodb.conditions import Attr
from boto3.dynamodb.types import Binary

from dynamodb_access.exceptions import ValidationError
from dynamodb_access.utils import (
    build_filter_expression,
    coerce_filter,
    deserialize_record,
    deserialize_value,
    serialize_record,
    serialize_value,
    to_utc,
    utc_now_iso,
)


class TestTimestamps:
    """Test UTC timestamp helpers."""

    def test_naive_datetime_assumed_utc(self):
        result = to_utc(datetime(2024, 1, 1, 10, 0))

        assert result.tzinfo == timezone.utc
        assert result.hour == 10

    def test_aware_datetime_converted(self):
        plus_two = timezone(timedelta(hours=2))

        result = to_utc(datetime(2024, 1, 1, 10, 0, tzinfo=plus_two))

        assert result.hour == 8

    def test_utc_now_iso_is_utc(self):
        assert utc_now_iso().endswith("+00:00")


class TestSerialization:
    """Test conversion to and from boto3's attribute value types."""

    def test_float_becomes_decimal(self):
        assert serialize_value(1.1) == Decimal("1.1")

    def test_nested_values(self):
        value = {"scores": [1.5, 2], "tags": {"a"}, "when": datetime(2024, 1, 1, tzinfo=timezone.utc)}

        assert serialize_value(value) == {
            "scores": [Decimal("1.5"), 2],
            "tags": {"a"},
            "when": "2024-01-01T00:00:00+00:00",
        }

    def test_bool_and_none_untouched(self):
        assert serialize_value(True) is True
        assert serialize_value(None) is None

    def test_integral_decimal_becomes_int(self):
        assert deserialize_value(Decimal("3")) == 3
        assert isinstance(deserialize_value(Decimal("3")), int)

    def test_fractional_decimal_reads_back_as_float(self):
        """Test that a float written as Decimal reads back equal to the float."""
        for value in (0.1, 3.25, -2.5e-07, 1234.5678):
            result = deserialize_value(serialize_value(value))

            assert isinstance(result, float)
            assert result == value

    def test_high_precision_decimal_kept(self):
        """Test that Decimals a float cannot represent are not rounded."""
        value = Decimal("0.10000000000000000000001")

        assert deserialize_value(value) is value

    def test_binary_unwrapped(self):
        assert deserialize_value(Binary(b"\x00\x01")) == b"\x00\x01"

    def test_deserialize_record(self):
        item = {"K": "abc", "n": Decimal("2"), "nested": {"m": [Decimal("1.5")]}}

        assert deserialize_record(item) == {"K": "abc", "n": 2, "nested": {"m": [1.5]}}
        assert deserialize_record(None) is None

    def test_serialize_record_requires_mapping(self):
        with pytest.raises(ValidationError, match="mapping"):
            serialize_record(["not", "a", "record"])

    def test_serialize_record_rejects_bad_names(self):
        with pytest.raises(ValidationError):
            serialize_record({1: "x"})

    @pytest.mark.parametrize("value", [float("nan"), float("inf"), float("-inf"), Decimal("NaN"), Decimal("Infinity")])
    def test_non_finite_numbers_rejected(self, value):
        with pytest.raises(ValidationError, match="finite"):
            serialize_value(value)

    def test_unsupported_type_rejected(self):
        with pytest.raises(ValidationError, match="Unsupported attribute value type object"):
            serialize_value(object())

    def test_nested_bad_value_names_the_attribute(self):
        """Test that a bad value deep in a record is reported with its attribute."""
        with pytest.raises(ValidationError) as exc_info:
            serialize_record({"K": "abc", "scores": [1, float("nan")]})

        assert exc_info.value.context == {"attribute": "scores"}


class TestFilters:
    """Test filter expression helpers."""

    def test_no_filters(self):
        assert build_filter_expression({}) is None
        assert build_filter_expression(None) is None

    def test_single_filter(self):
        assert build_filter_expression({"status": "open"}) == Attr("status").eq("open")

    def test_filters_are_anded(self):
        expected = Attr("status").eq("open") & Attr("region").eq("eu")

        assert build_filter_expression({"status": "open", "region": "eu"}) == expected

    def test_coerce_filter_passthrough(self):
        condition = Attr("status").eq("open")

        assert coerce_filter(condition) is condition
        assert coerce_filter(None) is None

    def test_coerce_filter_from_mapping(self):
        assert coerce_filter({"status": "open"}) == Attr("status").eq("open")

    def test_coerce_filter_rejects_other_types(self):
        with pytest.raises(ValidationError):
            coerce_filter("status = open")
