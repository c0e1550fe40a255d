"""Range checks for transformed numeric values."""

from __future__ import annotations

import logging
import math

from devicesdk.commandvalue import ValueType

logger = logging.getLogger(__name__)

_MAX_FLOAT32 = 3.4028234663852886e38
_SMALLEST_FLOAT32 = 1.401298464324817e-45
_MAX_FLOAT64 = 1.7976931348623157e308
_SMALLEST_FLOAT64 = 5e-324

_INTEGER_BOUNDS = {
    ValueType.UINT8: (0.0, float(2**8 - 1)),
    ValueType.UINT16: (0.0, float(2**16 - 1)),
    ValueType.UINT32: (0.0, float(2**32 - 1)),
    ValueType.UINT64: (0.0, float(2**64 - 1)),
    ValueType.INT8: (float(-(2**7)), float(2**7 - 1)),
    ValueType.INT16: (float(-(2**15)), float(2**15 - 1)),
    ValueType.INT32: (float(-(2**31)), float(2**31 - 1)),
    ValueType.INT64: (float(-(2**63)), float(2**63 - 1)),
}

_FLOAT_BOUNDS = {
    ValueType.FLOAT32: (_SMALLEST_FLOAT32, _MAX_FLOAT32),
    ValueType.FLOAT64: (_SMALLEST_FLOAT64, _MAX_FLOAT64),
}


def _format_number(value: float) -> str:
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "+Inf" if value > 0 else "-Inf"
    if value == int(value) and abs(value) < 1e21:
        return str(int(value))
    return repr(value)


class TransformOverflowError(OverflowError):
    """A transformed value does not fit the type of the original value."""

    def __init__(self, origin_type: ValueType, transformed: float) -> None:
        self.origin_type = ValueType(origin_type)
        self.transformed = transformed
        super().__init__(
            f"overflow failed, transformed value '{_format_number(transformed)}' "
            f"is not within the '{self.origin_type.native_name}' value type range"
        )


def check_transformed_value_in_range(origin_type: ValueType, transformed: float) -> bool:
    """Return whether ``transformed`` fits the numeric type ``origin_type``.

    Float types require a magnitude between the smallest non-zero and the
    largest finite value. Non-numeric types are never in range.
    """
    if origin_type in _INTEGER_BOUNDS:
        low, high = _INTEGER_BOUNDS[origin_type]
        return low <= transformed <= high
    if origin_type in _FLOAT_BOUNDS:
        smallest, largest = _FLOAT_BOUNDS[origin_type]
        return smallest <= abs(transformed) <= largest
    logger.error("data type %s doesn't support range checking", origin_type)
    return False