"""Minimal protocol buffer wire-format encoding helpers.

Every ``field_*`` function returns an empty byte string when the value is
``None``, which is how an unset optional field is left out of a message.
"""

from __future__ import annotations

import struct

_WIRE_VARINT = 0
_WIRE_LENGTH_DELIMITED = 2
_WIRE_FIXED32 = 5

_UINT64_MASK = (1 << 64) - 1


def encode_varint(value: int) -> bytes:
    """Encode an integer as a base-128 varint.

    Negative numbers use their 64-bit two's complement, as int32 and int64
    fields do on the wire.
    """
    value = int(value)
    if value < 0:
        if value < -(1 << 63):
            raise ValueError(f"varint value {value} is out of range")
        value &= _UINT64_MASK
    elif value > _UINT64_MASK:
        raise ValueError(f"varint value {value} is out of range")
    out = bytearray()
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)
    return bytes(out)


def _key(number: int, wire_type: int) -> bytes:
    if number < 1:
        raise ValueError(f"invalid field number {number}")
    return encode_varint((number << 3) | wire_type)


def field_varint(number: int, value: int | bool | None) -> bytes:
    """Encode an integer, boolean or enum field."""
    if value is None:
        return b""
    return _key(number, _WIRE_VARINT) + encode_varint(int(value))


def field_bytes(number: int, value: bytes | None) -> bytes:
    """Encode a bytes field or an embedded, already serialized message."""
    if value is None:
        return b""
    data = bytes(value)
    return _key(number, _WIRE_LENGTH_DELIMITED) + encode_varint(len(data)) + data


def field_string(number: int, value: str | None) -> bytes:
    """Encode a string field as UTF-8."""
    if value is None:
        return b""
    return field_bytes(number, value.encode("utf-8"))


def field_float32(number: int, value: float | None) -> bytes:
    """Encode a 32-bit float field."""
    if value is None:
        return b""
    return _key(number, _WIRE_FIXED32) + struct.pack("<f", value)