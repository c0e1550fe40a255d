"""Typed reading and parameter values exchanged with protocol drivers."""

from __future__ import annotations

import base64
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Any

import cbor2

# Policy limit for binary readings: 16 MiB.
MAX_BINARY_BYTES = 16 * 2**20

BASE64_ENCODING = "base64"
E_NOTATION = "eNotation"
DEFAULT_FLOAT_ENCODING = BASE64_ENCODING


class ValueType(IntEnum):
    """Data type carried by a CommandValue."""

    BOOL = 0
    STRING = 1
    UINT8 = 2
    UINT16 = 3
    UINT32 = 4
    UINT64 = 5
    INT8 = 6
    INT16 = 7
    INT32 = 8
    INT64 = 9
    FLOAT32 = 10
    FLOAT64 = 11
    BINARY = 12

    @property
    def label(self) -> str:
        """Display name used in string representations, e.g. ``Uint8``."""
        return _LABELS[self]

    @property
    def native_name(self) -> str:
        """Lower-case primitive type name, e.g. ``uint8``."""
        return _NATIVE_NAMES[self]

    @property
    def is_numeric(self) -> bool:
        return self in _NUMERIC_TYPES


_LABELS = {
    ValueType.BOOL: "Bool",
    ValueType.STRING: "String",
    ValueType.UINT8: "Uint8",
    ValueType.UINT16: "Uint16",
    ValueType.UINT32: "Uint32",
    ValueType.UINT64: "Uint64",
    ValueType.INT8: "Int8",
    ValueType.INT16: "Int16",
    ValueType.INT32: "Int32",
    ValueType.INT64: "Int64",
    ValueType.FLOAT32: "Float32",
    ValueType.FLOAT64: "Float64",
    ValueType.BINARY: "Binary",
}

_NATIVE_NAMES = {vt: label.lower() for vt, label in _LABELS.items()}
_NATIVE_NAMES[ValueType.BINARY] = "[]uint8"

_FORMATS = {
    ValueType.BOOL: ">?",
    ValueType.UINT8: ">B",
    ValueType.UINT16: ">H",
    ValueType.UINT32: ">I",
    ValueType.UINT64: ">Q",
    ValueType.INT8: ">b",
    ValueType.INT16: ">h",
    ValueType.INT32: ">i",
    ValueType.INT64: ">q",
    ValueType.FLOAT32: ">f",
    ValueType.FLOAT64: ">d",
}

_NUMERIC_TYPES = frozenset(_FORMATS) - {ValueType.BOOL}
_FLOAT_TYPES = frozenset({ValueType.FLOAT32, ValueType.FLOAT64})


class ValueTypeMismatchError(TypeError):
    """Raised when a value is read as a type other than the one it holds."""


class PayloadTooLargeError(ValueError):
    """Raised when a binary payload exceeds MAX_BINARY_BYTES."""


def parse_value_type(type_name: str) -> ValueType:
    """Map a type name (case-insensitive) to a ValueType; unknown names give STRING."""
    try:
        return ValueType[type_name.upper()]
    except KeyError:
        return ValueType.STRING


def _encode(value_type: ValueType, value: Any) -> bytes:
    try:
        return struct.pack(_FORMATS[value_type], value)
    except (struct.error, OverflowError) as exc:
        raise ValueError(
            f"cannot encode {value!r} as {value_type.native_name}: {exc}"
        ) from exc


def encode_binary(value: Any) -> bytes:
    """CBOR-encode a value."""
    return cbor2.dumps(value)


def decode_binary(data: bytes) -> Any:
    """Decode a CBOR payload."""
    return cbor2.loads(data)


@dataclass
class CommandValue:
    """A reading from a driver or a parameter sent to one."""

    device_resource_name: str
    origin: int
    type: ValueType
    numeric_value: bytes = b""
    bin_value: bytes = b""
    text: str = ""

    def _decode(self, value_type: ValueType) -> Any:
        try:
            return struct.unpack_from(_FORMATS[value_type], self.numeric_value)[0]
        except struct.error as exc:
            raise ValueError(
                f"cannot decode {value_type.native_name} from "
                f"{len(self.numeric_value)} bytes"
            ) from exc

    def _typed(self, value_type: ValueType) -> Any:
        if self.type != value_type:
            raise ValueTypeMismatchError(
                f"the data type is not {value_type.native_name}"
            )
        return self._decode(value_type)

    def _decode_or_zero(self) -> Any:
        try:
            return self._decode(self.type)
        except ValueError:
            return False if self.type == ValueType.BOOL else 0

    def value_to_string(self, encoding: str | None = None) -> str:
        """Return the value rendered as text.

        Floats are base64 of their big-endian bytes unless ``encoding`` is
        E_NOTATION.
        """
        if self.type == ValueType.STRING:
            return self.text
        if self.type == ValueType.BINARY:
            head = self.bin_value[:20].decode("utf-8", errors="replace")
            return f"Binary: [{head}...]"
        if self.type == ValueType.BOOL:
            return "true" if self._decode_or_zero() else "false"
        if self.type in _FLOAT_TYPES:
            if _float_encoding(encoding) == E_NOTATION:
                return "%e" % self._decode_or_zero()
            return base64.b64encode(self.numeric_value).decode("ascii")
        return str(self._decode_or_zero())

    def __str__(self) -> str:
        return f"Origin: {self.origin}, {self.type.label}: {self.value_to_string()}"

    def bool_value(self) -> bool:
        return self._typed(ValueType.BOOL)

    def string_value(self) -> str:
        if self.type != ValueType.STRING:
            raise ValueTypeMismatchError("the data type is not string")
        return self.text

    def uint8_value(self) -> int:
        return self._typed(ValueType.UINT8)

    def uint16_value(self) -> int:
        return self._typed(ValueType.UINT16)

    def uint32_value(self) -> int:
        return self._typed(ValueType.UINT32)

    def uint64_value(self) -> int:
        return self._typed(ValueType.UINT64)

    def int8_value(self) -> int:
        return self._typed(ValueType.INT8)

    def int16_value(self) -> int:
        return self._typed(ValueType.INT16)

    def int32_value(self) -> int:
        return self._typed(ValueType.INT32)

    def int64_value(self) -> int:
        return self._typed(ValueType.INT64)

    def float32_value(self) -> float:
        return self._typed(ValueType.FLOAT32)

    def float64_value(self) -> float:
        return self._typed(ValueType.FLOAT64)

    def binary_value(self) -> Any:
        """Decode the CBOR payload held by a Binary value."""
        if self.type != ValueType.BINARY:
            raise ValueTypeMismatchError(
                f"the CommandValue ({self}) data type ({int(self.type)}) is not binary!"
            )
        return decode_binary(self.bin_value)

    def numeric(self) -> int | float:
        """Return the held number for any integer or float type."""
        if not self.type.is_numeric:
            raise ValueTypeMismatchError(
                f"wrong data type of CommandValue to transform: {self}"
            )
        return self._decode(self.type)

    def set_numeric(self, value: int | float) -> None:
        """Replace the held number, encoded as this value's own type."""
        if not self.type.is_numeric:
            raise ValueTypeMismatchError(
                f"wrong data type of CommandValue to transform: {self}"
            )
        self.numeric_value = _encode(self.type, value)


def _float_encoding(encoding: str | None) -> str:
    if encoding in (BASE64_ENCODING, E_NOTATION):
        return encoding
    return DEFAULT_FLOAT_ENCODING


def _new_numeric(
    resource_name: str, origin: int, value: Any, value_type: ValueType
) -> CommandValue:
    return CommandValue(
        resource_name, origin, value_type, numeric_value=_encode(value_type, value)
    )


def new_bool_value(resource_name: str, origin: int, value: bool) -> CommandValue:
    return _new_numeric(resource_name, origin, value, ValueType.BOOL)


def new_string_value(resource_name: str, origin: int, value: str) -> CommandValue:
    return CommandValue(resource_name, origin, ValueType.STRING, text=value)


def new_uint8_value(resource_name: str, origin: int, value: int) -> CommandValue:
    return _new_numeric(resource_name, origin, value, ValueType.UINT8)


def new_uint16_value(resource_name: str, origin: int, value: int) -> CommandValue:
    return _new_numeric(resource_name, origin, value, ValueType.UINT16)


def new_uint32_value(resource_name: str, origin: int, value: int) -> CommandValue:
    return _new_numeric(resource_name, origin, value, ValueType.UINT32)


def new_uint64_value(resource_name: str, origin: int, value: int) -> CommandValue:
    return _new_numeric(resource_name, origin, value, ValueType.UINT64)


def new_int8_value(resource_name: str, origin: int, value: int) -> CommandValue:
    return _new_numeric(resource_name, origin, value, ValueType.INT8)


def new_int16_value(resource_name: str, origin: int, value: int) -> CommandValue:
    return _new_numeric(resource_name, origin, value, ValueType.INT16)


def new_int32_value(resource_name: str, origin: int, value: int) -> CommandValue:
    return _new_numeric(resource_name, origin, value, ValueType.INT32)


def new_int64_value(resource_name: str, origin: int, value: int) -> CommandValue:
    return _new_numeric(resource_name, origin, value, ValueType.INT64)


def new_float32_value(resource_name: str, origin: int, value: float) -> CommandValue:
    return _new_numeric(resource_name, origin, value, ValueType.FLOAT32)


def new_float64_value(resource_name: str, origin: int, value: float) -> CommandValue:
    return _new_numeric(resource_name, origin, value, ValueType.FLOAT64)


def new_command_value(
    resource_name: str, origin: int, value: Any, value_type: ValueType
) -> CommandValue:
    """Create a CommandValue of the given type; Binary values are CBOR-encoded."""
    value_type = ValueType(value_type)
    if value_type == ValueType.BINARY:
        return CommandValue(
            resource_name, origin, value_type, bin_value=encode_binary(value)
        )
    if value_type == ValueType.STRING:
        if not isinstance(value, str):
            raise TypeError(f"expected str for a String value, got {type(value).__name__}")
        return new_string_value(resource_name, origin, value)
    return _new_numeric(resource_name, origin, value, value_type)


def new_binary_value(resource_name: str, origin: int, value: bytes) -> CommandValue:
    """Create a Binary CommandValue holding raw bytes, enforcing the size limit."""
    if len(value) > MAX_BINARY_BYTES:
        raise PayloadTooLargeError(
            "Requested CommandValue payload exceeds limit for binary readings "
            f"({MAX_BINARY_BYTES} bytes)"
        )
    return CommandValue(resource_name, origin, ValueType.BINARY, bin_value=bytes(value))