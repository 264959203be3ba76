"""Comparators used by HBase filters, encoded for the wire."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from hbasekit.protowire import field_bytes, field_string, field_varint

COMPARATOR_PATH = "org.apache.hadoop.hbase.filter."


class BitwiseOp(IntEnum):
    """Bitwise operation applied by a BitComparator."""

    AND = 1
    OR = 2
    XOR = 3


@dataclass(frozen=True)
class PBComparator:
    """A comparator as sent to the server: its Java class name and payload."""

    name: str
    serialized_comparator: bytes

    def serialize(self) -> bytes:
        """Encode this comparator message."""
        return field_string(1, self.name) + field_bytes(2, self.serialized_comparator)


class Comparator(ABC):
    """Anything that can be turned into a PBComparator."""

    @abstractmethod
    def construct_pb_comparator(self) -> PBComparator:
        """Build the wire representation of this comparator."""


def _require(value, field_name: str):
    if value is None:
        raise ValueError(f"required field {field_name} is not set")
    return value


def _pb(class_name: str, payload: bytes) -> PBComparator:
    return PBComparator(COMPARATOR_PATH + class_name, payload)


@dataclass
class ByteArrayComparable:
    """The byte value a comparator compares against."""

    value: Optional[bytes] = None

    def serialize(self) -> bytes:
        """Encode this message."""
        return field_bytes(1, self.value)


def _comparable(comparable: Optional[ByteArrayComparable]) -> bytes:
    return field_bytes(1, _require(comparable, "comparable").serialize())


@dataclass
class BinaryComparator(Comparator):
    """Lexicographic byte comparison."""

    comparable: ByteArrayComparable

    def construct_pb_comparator(self) -> PBComparator:
        return _pb("BinaryComparator", _comparable(self.comparable))


@dataclass
class LongComparator(Comparator):
    """Comparison of values as 64-bit integers."""

    comparable: ByteArrayComparable

    def construct_pb_comparator(self) -> PBComparator:
        return _pb("LongComparator", _comparable(self.comparable))


@dataclass
class BinaryPrefixComparator(Comparator):
    """Byte comparison limited to the length of the comparable."""

    comparable: ByteArrayComparable

    def construct_pb_comparator(self) -> PBComparator:
        return _pb("BinaryPrefixComparator", _comparable(self.comparable))


@dataclass
class BitComparator(Comparator):
    """Bitwise comparison with a given operator."""

    bitwise_op: int
    comparable: ByteArrayComparable

    def construct_pb_comparator(self) -> PBComparator:
        if not BitwiseOp.AND <= int(self.bitwise_op) <= BitwiseOp.XOR:
            raise ValueError("Invalid bitwise operator specified")
        payload = _comparable(self.comparable) + field_varint(2, int(self.bitwise_op))
        return _pb("BitComparator", payload)


@dataclass
class NullComparator(Comparator):
    """Matches null or missing values."""

    def construct_pb_comparator(self) -> PBComparator:
        return _pb("NullComparator", b"")


@dataclass
class RegexStringComparator(Comparator):
    """Regular expression match on string values."""

    pattern: str
    pattern_flags: int
    charset: str
    engine: str

    def construct_pb_comparator(self) -> PBComparator:
        payload = (
            field_string(1, _require(self.pattern, "pattern"))
            + field_varint(2, _require(self.pattern_flags, "pattern_flags"))
            + field_string(3, _require(self.charset, "charset"))
            + field_string(4, self.engine)
        )
        return _pb("RegexStringComparator", payload)


@dataclass
class SubstringComparator(Comparator):
    """Case-insensitive substring match."""

    substr: str

    def construct_pb_comparator(self) -> PBComparator:
        return _pb("SubstringComparator", field_string(1, _require(self.substr, "substr")))