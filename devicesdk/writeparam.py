"""Inverse transformations applied to parameters before they are written to a device."""

from __future__ import annotations

import math

from devicesdk.commandvalue import CommandValue, ValueType
from devicesdk.transform import (
    DEFAULT_BASE,
    DEFAULT_OFFSET,
    DEFAULT_SCALE,
    PropertyValue,
    _INT_LAYOUT,
    _parse_float,
    _parse_int,
    _parse_uint,
    _to_f32,
)

_UNTRANSFORMED_TYPES = frozenset({ValueType.STRING, ValueType.BOOL, ValueType.BINARY})


def _applies(setting: str, default: str) -> bool:
    return setting != "" and setting != default


def _bounds(value_type: ValueType) -> tuple[int, int]:
    bits, signed = _INT_LAYOUT[value_type]
    if signed:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    return 0, (1 << bits) - 1


def _wrap(value_type: ValueType, value: int) -> int:
    """Reduce an integer to the width of ``value_type`` with two's-complement wrapping."""
    bits, signed = _INT_LAYOUT[value_type]
    modulus = 1 << bits
    if signed:
        half = 1 << (bits - 1)
        return (value + half) % modulus - half
    return value % modulus


def _from_float(value_type: ValueType, value: float) -> int | float:
    """Convert a float result to ``value_type``, truncating and saturating integers."""
    if value_type == ValueType.FLOAT64:
        return value
    if value_type == ValueType.FLOAT32:
        return _to_f32(value)
    low, high = _bounds(value_type)
    if math.isnan(value):
        return 0
    if math.isinf(value):
        return high if value > 0 else low
    return min(max(int(value), low), high)


def _divide(numerator: float, denominator: float) -> float:
    try:
        return numerator / denominator
    except ZeroDivisionError:
        if numerator == 0 or math.isnan(numerator):
            return math.nan
        sign = math.copysign(1.0, numerator) * math.copysign(1.0, denominator)
        return math.copysign(math.inf, sign)


def _log(value: float) -> float:
    if math.isnan(value) or value < 0:
        return math.nan
    if value == 0:
        return -math.inf
    if math.isinf(value):
        return math.inf
    return math.log(value)


def _write_offset(value_type: ValueType, value: int | float, offset: str) -> int | float:
    if value_type == ValueType.FLOAT64:
        return value - _parse_float(offset, 64)
    if value_type == ValueType.FLOAT32:
        return _to_f32(value - _parse_float(offset, 32))
    bits, signed = _INT_LAYOUT[value_type]
    o = _parse_int(offset, bits) if signed else _parse_uint(offset, bits)
    return _wrap(value_type, value - o)


def _write_scale(value_type: ValueType, value: int | float, scale: str) -> int | float:
    if value_type == ValueType.FLOAT64:
        return _divide(value, _parse_float(scale, 64))
    if value_type == ValueType.FLOAT32:
        return _to_f32(_divide(value, _parse_float(scale, 32)))
    return _from_float(value_type, _divide(float(value), _parse_float(scale, 64)))


def _write_base(value_type: ValueType, value: int | float, base: str) -> int | float:
    b = _parse_float(base, 64)
    if b == 0:
        return value
    transformed = _divide(_log(float(value)), _log(b))
    return _from_float(value_type, transformed)


def transform_write_parameter(cv: CommandValue, pv: PropertyValue) -> None:
    """Undo offset, scale and base from ``pv`` on ``cv`` in place, in that order.

    String, Bool and Binary values are left untouched. Integer subtraction
    wraps around the value's width. Raises TransformError when a setting
    cannot be parsed.
    """
    if cv.type in _UNTRANSFORMED_TYPES:
        return
    value_type = cv.type
    value = cv.numeric()
    new_value = value

    if _applies(pv.offset, DEFAULT_OFFSET):
        new_value = _write_offset(value_type, new_value, pv.offset)

    if _applies(pv.scale, DEFAULT_SCALE):
        new_value = _write_scale(value_type, new_value, pv.scale)

    if _applies(pv.base, DEFAULT_BASE):
        new_value = _write_base(value_type, new_value, pv.base)

    if new_value != value:
        cv.set_numeric(new_value)