"""Transformations applied to readings according to a resource's property value."""

from __future__ import annotations

import logging
import math
import re
import struct
from dataclasses import dataclass
from typing import Callable

from devicesdk.commandvalue import (
    CommandValue,
    ValueType,
    new_string_value,
)
from devicesdk.valuerange import TransformOverflowError, check_transformed_value_in_range

logger = logging.getLogger(__name__)

DEFAULT_BASE = "0"
DEFAULT_SCALE = "1.0"
DEFAULT_OFFSET = "0.0"
DEFAULT_MASK = "0"
DEFAULT_SHIFT = "0"

_UINT64_MODULUS = 1 << 64

_INT_LAYOUT = {
    ValueType.UINT8: (8, False),
    ValueType.UINT16: (16, False),
    ValueType.UINT32: (32, False),
    ValueType.UINT64: (64, False),
    ValueType.INT8: (8, True),
    ValueType.INT16: (16, True),
    ValueType.INT32: (32, True),
    ValueType.INT64: (64, True),
}

_UNSIGNED_TYPES = frozenset(vt for vt, (_, signed) in _INT_LAYOUT.items() if not signed)
_UNTRANSFORMED_TYPES = frozenset({ValueType.STRING, ValueType.BOOL, ValueType.BINARY})

_UINT_SYNTAX = re.compile(r"[0-9]+")
_INT_SYNTAX = re.compile(r"[+-]?[0-9]+")
_FLOAT_SYNTAX = re.compile(r"[+-]?(?:[0-9]+\.?[0-9]*|\.[0-9]+)(?:[eE][+-]?[0-9]+)?")
_HEX_FLOAT_SYNTAX = re.compile(
    r"[+-]?0[xX](?:[0-9a-fA-F]+\.?[0-9a-fA-F]*|\.[0-9a-fA-F]+)[pP][+-]?[0-9]+"
)
_SPECIAL_FLOAT_SYNTAX = re.compile(r"[+-]?(?:inf|infinity)|nan", re.IGNORECASE)


@dataclass
class PropertyValue:
    """Value properties of a device resource that drive transformations."""

    type: str = ""
    read_write: str = ""
    minimum: str = ""
    maximum: str = ""
    default_value: str = ""
    size: str = ""
    mask: str = ""
    shift: str = ""
    scale: str = ""
    offset: str = ""
    base: str = ""
    assertion: str = ""
    precision: str = ""
    float_encoding: str = ""
    media_type: str = ""


class TransformError(ValueError):
    """A transformation parameter is invalid or its result does not fit."""


def _quote(text: str) -> str:
    return '"' + text.replace("\\", "\\\\").replace('"', '\\"') + '"'


def _syntax_error(func: str, text: str) -> TransformError:
    return TransformError(f"strconv.{func}: parsing {_quote(text)}: invalid syntax")


def _range_error(func: str, text: str) -> TransformError:
    return TransformError(f"strconv.{func}: parsing {_quote(text)}: value out of range")


def _parse_uint(text: str, bits: int) -> int:
    if not _UINT_SYNTAX.fullmatch(text):
        raise _syntax_error("ParseUint", text)
    value = int(text)
    if value >= 1 << bits:
        raise _range_error("ParseUint", text)
    return value


def _parse_int(text: str, bits: int) -> int:
    if not _INT_SYNTAX.fullmatch(text):
        raise _syntax_error("ParseInt", text)
    value = int(text)
    if not -(1 << (bits - 1)) <= value < 1 << (bits - 1):
        raise _range_error("ParseInt", text)
    return value


def _to_f32(value: float) -> float:
    try:
        return struct.unpack(">f", struct.pack(">f", value))[0]
    except OverflowError:
        return math.copysign(math.inf, value)


def _parse_float(text: str, bits: int) -> float:
    special = _SPECIAL_FLOAT_SYNTAX.fullmatch(text) is not None
    if special or _FLOAT_SYNTAX.fullmatch(text):
        value = float(text)
    elif _HEX_FLOAT_SYNTAX.fullmatch(text):
        try:
            value = float.fromhex(text)
        except OverflowError:
            raise _range_error("ParseFloat", text) from None
    else:
        raise _syntax_error("ParseFloat", text)
    if special:
        return value
    if math.isinf(value):
        raise _range_error("ParseFloat", text)
    if bits == 32:
        value = _to_f32(value)
        if math.isinf(value):
            raise _range_error("ParseFloat", text)
    return value


def _int_bounds(value_type: ValueType) -> tuple[int, int]:
    bits, signed = _INT_LAYOUT[value_type]
    if signed:
        return -(1 << (bits - 1)), (1 << (bits - 1)) - 1
    return 0, (1 << bits) - 1


def _from_float(value_type: ValueType, value: float) -> int | float:
    """Convert a float result back to ``value_type``, truncating integers."""
    if value_type == ValueType.FLOAT64:
        return value
    if value_type == ValueType.FLOAT32:
        return _to_f32(value)
    low, high = _int_bounds(value_type)
    return min(max(int(value), low), high)


def _ensure_in_range(value_type: ValueType, transformed: float) -> None:
    if not check_transformed_value_in_range(value_type, transformed):
        raise TransformOverflowError(value_type, transformed)


def _pow(x: float, y: float) -> float:
    try:
        return math.pow(x, y)
    except OverflowError:
        if x < 0 and y.is_integer() and int(y) % 2:
            return -math.inf
        return math.inf
    except ValueError:
        return math.inf if x == 0 else math.nan


def _read_base(value_type: ValueType, value: int | float, base: str) -> int | float:
    b = _parse_float(base, 64)
    if b == 0:
        return value
    transformed = _pow(float(value), b)
    _ensure_in_range(value_type, transformed)
    return _from_float(value_type, transformed)


def _read_scale(value_type: ValueType, value: int | float, scale: str) -> int | float:
    if value_type == ValueType.FLOAT64:
        return value * _parse_float(scale, 64)
    if value_type == ValueType.FLOAT32:
        transformed = _to_f32(value * _parse_float(scale, 32))
        _ensure_in_range(value_type, transformed)
        return transformed
    transformed = float(value) * _parse_float(scale, 64)
    _ensure_in_range(value_type, transformed)
    return _from_float(value_type, transformed)


def _read_offset(value_type: ValueType, value: int | float, offset: str) -> int | float:
    if value_type == ValueType.FLOAT64:
        return value + _parse_float(offset, 64)
    if value_type == ValueType.FLOAT32:
        transformed = float(value) + _parse_float(offset, 32)
        _ensure_in_range(value_type, transformed)
        return _to_f32(transformed)
    bits, signed = _INT_LAYOUT[value_type]
    if value_type == ValueType.UINT64:
        return (value + _parse_uint(offset, 64)) % _UINT64_MODULUS
    if value_type == ValueType.INT64:
        total = value + _parse_int(offset, 64)
        return (total + (1 << 63)) % _UINT64_MODULUS - (1 << 63)
    o = _parse_int(offset, bits) if signed else _parse_uint(offset, bits)
    transformed = float(value) + float(o)
    _ensure_in_range(value_type, transformed)
    return _from_float(value_type, transformed)


def _read_mask(value_type: ValueType, value: int, mask: str) -> int:
    try:
        m = _parse_uint(mask, 64)
    except TransformError as exc:
        raise TransformError(
            f"invalid mask value, the mask {mask} should be unsigned and parsed to uint64. {exc}"
        ) from exc
    return value & m


def _is_signed_number(shift: str) -> bool:
    try:
        s = _parse_float(shift, 64)
    except TransformError as exc:
        raise TransformError(
            f"invalid shift value, the shift {shift} should be parsed to float64 "
            f"for checking the sign of the number. {exc}"
        ) from exc
    return math.copysign(1.0, s) < 0


def _read_shift(value_type: ValueType, value: int, shift: str) -> int:
    if _is_signed_number(shift):
        transformed = value >> -_parse_int(shift, 64)
    else:
        amount = _parse_uint(shift, 64)
        transformed = 0 if amount >= 64 else (value << amount) % _UINT64_MODULUS
    _ensure_in_range(value_type, float(transformed))
    return transformed


def _applies(setting: str, default: str) -> bool:
    return setting != "" and setting != default


def _guarded(
    prefix: str,
    step: Callable[[ValueType, int | float, str], int | float],
    value_type: ValueType,
    value: int | float,
    setting: str,
) -> int | float:
    try:
        return step(value_type, value, setting)
    except TransformOverflowError as exc:
        raise TransformError(f"{prefix}: {exc}") from exc


def transform_read_result(cv: CommandValue, pv: PropertyValue) -> None:
    """Apply mask, shift, base, scale and offset from ``pv`` to ``cv`` in place.

    String, Bool and Binary values are left untouched. Mask and shift apply
    only to unsigned integers. Raises TransformError when a setting cannot be
    parsed or the result does not fit the value's type; an overflow carries
    the TransformOverflowError as its cause.
    """
    if cv.type in _UNTRANSFORMED_TYPES:
        return
    value_type = cv.type
    value = cv.numeric()
    new_value = value
    quoted = f"Overflow failed for device resource '{cv.device_resource_name}' "

    if _applies(pv.mask, DEFAULT_MASK) and value_type in _UNSIGNED_TYPES:
        new_value = _read_mask(value_type, new_value, pv.mask)

    if _applies(pv.shift, DEFAULT_SHIFT) and value_type in _UNSIGNED_TYPES:
        new_value = _guarded(quoted, _read_shift, value_type, new_value, pv.shift)

    if _applies(pv.base, DEFAULT_BASE):
        new_value = _guarded(quoted, _read_base, value_type, new_value, pv.base)

    if _applies(pv.scale, DEFAULT_SCALE):
        new_value = _guarded(quoted, _read_scale, value_type, new_value, pv.scale)

    if _applies(pv.offset, DEFAULT_OFFSET):
        new_value = _guarded(
            f"Overflow failed for device resource: {cv.device_resource_name}",
            _read_offset,
            value_type,
            new_value,
            pv.offset,
        )

    if new_value != value:
        cv.set_numeric(new_value)


def map_command_value(
    value: CommandValue, mappings: dict[str, str]
) -> CommandValue | None:
    """Return a String value mapped from ``value``'s text, or None if unmapped."""
    mapped = mappings.get(value.value_to_string())
    if mapped is None:
        return None
    return new_string_value(value.device_resource_name, value.origin, mapped)