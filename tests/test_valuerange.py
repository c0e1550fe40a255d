import math

import pytest

from devicesdk.commandvalue import ValueType
from devicesdk.valuerange import TransformOverflowError, check_transformed_value_in_range

MAX_UINT8 = 2**8 - 1
MAX_UINT16 = 2**16 - 1
MAX_UINT32 = 2**32 - 1
MAX_UINT64 = 2**64 - 1
MAX_INT8 = 2**7 - 1
MAX_INT16 = 2**15 - 1
MAX_INT32 = 2**31 - 1
MAX_INT64 = 2**63 - 1
MAX_FLOAT32 = 3.40282346638528859811704183484516925440e38
MAX_FLOAT64 = 1.79769313486231570814527423731704356798070e308


@pytest.mark.parametrize(
    "origin_type, transformed",
    [
        (ValueType.UINT8, float(MAX_UINT8)),
        (ValueType.UINT16, float(MAX_UINT16)),
        (ValueType.UINT32, float(MAX_UINT32)),
        (ValueType.UINT64, float(MAX_UINT64)),
        (ValueType.INT8, float(MAX_INT8)),
        (ValueType.INT16, float(MAX_INT16)),
        (ValueType.INT32, float(MAX_INT32)),
        (ValueType.INT64, float(MAX_INT64)),
        (ValueType.FLOAT32, float(MAX_FLOAT32)),
        (ValueType.FLOAT64, float(MAX_FLOAT64)),
    ],
)
def test_in_range(origin_type, transformed):
    assert check_transformed_value_in_range(origin_type, transformed) is True


@pytest.mark.parametrize(
    "origin_type, transformed",
    [
        (ValueType.UINT8, float(MAX_UINT8 + 1)),
        (ValueType.UINT16, float(MAX_UINT16 + 1)),
        (ValueType.UINT32, float(MAX_UINT32 + 1)),
        (ValueType.UINT64, float(MAX_UINT64) * 2),
        (ValueType.INT8, float(MAX_INT8 + 1)),
        (ValueType.INT16, float(MAX_INT16 + 1)),
        (ValueType.INT32, float(MAX_INT32 + 1)),
        (ValueType.INT64, float(MAX_UINT64)),
        (ValueType.FLOAT32, MAX_FLOAT32 * 2),
    ],
)
def test_out_of_range(origin_type, transformed):
    assert check_transformed_value_in_range(origin_type, transformed) is False


def test_unsupported_data_type():
    assert check_transformed_value_in_range(ValueType.STRING, 123.0) is False


def test_unsigned_rejects_negative():
    assert check_transformed_value_in_range(ValueType.UINT32, -1.0) is False


def test_float32_zero_is_out_of_range():
    assert check_transformed_value_in_range(ValueType.FLOAT32, 0.0) is False


def test_float64_infinity_is_out_of_range():
    assert check_transformed_value_in_range(ValueType.FLOAT64, math.inf) is False


def test_nan_is_out_of_range():
    assert check_transformed_value_in_range(ValueType.INT32, math.nan) is False


def test_overflow_error_message_and_fields():
    err = TransformOverflowError(ValueType.UINT8, float(MAX_UINT8 + 1))
    assert err.origin_type == ValueType.UINT8
    assert err.transformed == 256.0
    assert str(err) == (
        "overflow failed, transformed value '256' is not within the 'uint8' value type range"
    )


def test_overflow_error_is_overflow_error():
    err = TransformOverflowError(ValueType.INT8, 1000.0)
    assert isinstance(err, OverflowError)
    assert err.origin_type == ValueType.INT8
    assert err.transformed == 1000.0
    assert str(err) == (
        "overflow failed, transformed value '1000' is not within the 'int8' value type range"
    )