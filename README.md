# devicesdk

Building blocks for writing a device service: typed command values that carry
readings between a protocol driver and the rest of the service, the transforms
that turn raw device readings into engineering values (and back again for
writes), and the interfaces a protocol driver implements.

## Installation

```
pip install .
```

To run the tests:

```
pip install ".[test]"
pytest
```

## Command values

`devicesdk.commandvalue.CommandValue` holds one reading or one write
parameter. Numeric and boolean values are stored big-endian in the width of
their `ValueType`; strings are kept as text and binary payloads as bytes.

```python
from devicesdk.commandvalue import (
    ValueType,
    new_uint16_value,
    new_float32_value,
    new_string_value,
    parse_value_type,
)

cv = new_uint16_value("temperature", 0, 65535)
cv.uint16_value()        # 65535
cv.value_to_string()     # "65535"
str(cv)                  # "Origin: 0, Uint16: 65535"

f = new_float32_value("pressure", 0, 3.5)
f.value_to_string()             # base64 of the four big-endian bytes (the default)
f.value_to_string("eNotation")  # "3.500000e+00"

parse_value_type("uint8")    # ValueType.UINT8; unknown names give ValueType.STRING
```

There is one constructor per type (`new_bool_value`, `new_string_value`,
`new_uint8_value` … `new_float64_value`) and a matching accessor on
`CommandValue` (`bool_value`, `string_value`, `uint8_value` …
`float64_value`). Asking for a value as the wrong type raises
`ValueTypeMismatchError`; a value that does not fit its type raises
`ValueError` when it is encoded.

`new_command_value(resource_name, origin, value, value_type)` picks the
encoding from `value_type`; for `ValueType.BINARY` the value is CBOR-encoded.
`new_binary_value` stores raw bytes and refuses payloads larger than 16 MiB
with `PayloadTooLargeError`. `binary_value()` decodes a binary value's payload
as CBOR, and `encode_binary` / `decode_binary` convert any value to and from
CBOR.

`numeric()` returns the number held by any integer or float value, and
`set_numeric(value)` replaces it, encoded in the value's own type.

## Transforming readings

A device resource's `devicesdk.transform.PropertyValue` may declare a mask,
shift, base, scale and offset. `transform_read_result` applies them, in that
order, to a reading in place:

```python
from devicesdk.commandvalue import new_uint8_value
from devicesdk.transform import PropertyValue, transform_read_result

cv = new_uint8_value("level", 0, 51)
transform_read_result(cv, PropertyValue(scale="5"))
cv.uint8_value()   # 255
```

- String, Bool and Binary values are left untouched.
- Mask and shift apply only to unsigned integers. A negative shift shifts
  right, a positive one shifts left.
- Base raises the value to the given power; a base of `0` does nothing.
- Settings left empty or equal to their defaults (`"0"`, `"1.0"`, `"0.0"`)
  are skipped.

A setting that cannot be parsed raises `TransformError`. When a result no
longer fits the reading's type, a `TransformError` naming the device resource
is raised, with a `TransformOverflowError` as its `__cause__`. Offsets on
64-bit integers wrap around instead of being range-checked, and scale and
offset on 64-bit floats are not range-checked.

`map_command_value(value, mappings)` returns a new String value holding
`mappings[value.value_to_string()]`, or `None` if the text is not mapped.

`devicesdk.valuerange.check_transformed_value_in_range(origin_type,
transformed)` tells whether a float lies within the range of an integer
`ValueType`, or, for float types, whether its magnitude lies between the
smallest non-zero and the largest finite value. Non-numeric types are never in
range.

## Transforming write parameters

`devicesdk.writeparam.transform_write_parameter(cv, pv)` undoes offset, scale
and base, in that order, on a parameter before it is written to a device.
Integer subtraction wraps around the value's width; integer division and
logarithm results are truncated and clamped to the type's range. String, Bool
and Binary values are left untouched, and a setting that cannot be parsed
raises `TransformError`.

## Writing a protocol driver

Subclass `ProtocolDriver` from `devicesdk.models` and implement
`initialize(logger, async_queue)`, `handle_read_commands(device_name,
protocols, reqs)`, `handle_write_commands(device_name, protocols, reqs,
params)` and `stop(force)`. Each read or write request arrives as a
`CommandRequest`; readings pushed without being asked go onto the
asynchronous queue as `AsyncValues`. Drivers that can find devices on their
own also implement `ProtocolDiscovery.discover`.

`Event` groups `Reading` objects for one device, and `Event.has_binary_value`
tells whether any of them carries a binary payload.

## What this package does not do

It provides the data types, transforms and driver interfaces only. It does not
run a device service: there is no command to start one, no HTTP server or REST
API, no registration with a metadata service, no device or profile cache, no
configuration loading and no scheduling of readings. Code that drives a
`ProtocolDriver` and delivers its readings has to be supplied by the
application.