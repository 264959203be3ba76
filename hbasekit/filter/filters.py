"""HBase scan and get filters, encoded for the wire."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Optional, Union

from hbasekit.filter.comparator import Comparator, PBComparator
from hbasekit.protowire import field_bytes, field_string, field_varint

FILTER_PATH = "org.apache.hadoop.hbase.filter."


class ListOperator(IntEnum):
    """How the filters of a FilterList combine."""

    MUST_PASS_ALL = 1
    MUST_PASS_ONE = 2


class CompareType(IntEnum):
    """Comparison operation of a compare filter."""

    LESS = 0
    LESS_OR_EQUAL = 1
    EQUAL = 2
    NOT_EQUAL = 3
    GREATER_OR_EQUAL = 4
    GREATER = 5
    NO_OP = 6


@dataclass(frozen=True)
class PBFilter:
    """A filter as sent to the server: its Java class name and payload."""

    name: str
    serialized_filter: bytes

    def serialize(self) -> bytes:
        """Encode this filter message."""
        return field_string(1, self.name) + field_bytes(2, self.serialized_filter)


class Filter(ABC):
    """Anything that can be turned into a PBFilter."""

    @abstractmethod
    def construct_pb_filter(self) -> PBFilter:
        """Build the wire representation of this filter."""


def _require(value, field_name: str):
    if value is None:
        raise ValueError(f"required field {field_name} is not set")
    return value


def _to_pb_filter(value: Union[Filter, PBFilter]) -> PBFilter:
    return value if isinstance(value, PBFilter) else value.construct_pb_filter()


def _to_pb_comparator(value: Union[Comparator, PBComparator]) -> PBComparator:
    return value if isinstance(value, PBComparator) else value.construct_pb_comparator()


@dataclass
class BytesBytesPair:
    """A pair of byte strings, as used by FuzzyRowFilter."""

    first: bytes
    second: bytes

    def serialize(self) -> bytes:
        """Encode this pair."""
        return field_bytes(1, _require(self.first, "first")) + field_bytes(
            2, _require(self.second, "second")
        )


class FilterList(Filter):
    """Combination of filters under one operator.

    Filters are turned into their wire form as they are added.
    """

    def __init__(self, operator: int, *filters: Union[Filter, PBFilter]) -> None:
        self.operator = operator
        self.filters: list[PBFilter] = []
        self.add_filters(*filters)

    def add_filters(self, *args: Union[Filter, PBFilter]) -> None:
        """Append filters to the list."""
        self.filters.extend(_to_pb_filter(f) for f in args)

    def construct_pb_filter(self) -> PBFilter:
        if not ListOperator.MUST_PASS_ALL <= int(self.operator) <= ListOperator.MUST_PASS_ONE:
            raise ValueError("invalid operator specified")
        payload = field_varint(1, int(self.operator)) + b"".join(
            field_bytes(2, f.serialize()) for f in self.filters
        )
        return PBFilter(FILTER_PATH + "FilterList", payload)


@dataclass
class ColumnCountGetFilter(Filter):
    """Returns at most ``limit`` columns of a row."""

    limit: int

    def construct_pb_filter(self) -> PBFilter:
        payload = field_varint(1, _require(self.limit, "limit"))
        return PBFilter(FILTER_PATH + "ColumnCountGetFilter", payload)


@dataclass
class ColumnPaginationFilter(Filter):
    """Returns a page of columns of each row."""

    limit: int
    offset: int
    column_offset: Optional[bytes] = None

    def construct_pb_filter(self) -> PBFilter:
        payload = (
            field_varint(1, _require(self.limit, "limit"))
            + field_varint(2, self.offset)
            + field_bytes(3, self.column_offset)
        )
        return PBFilter(FILTER_PATH + "ColumnPaginationFilter", payload)


@dataclass
class ColumnPrefixFilter(Filter):
    """Keeps columns whose qualifier starts with ``prefix``."""

    prefix: bytes

    def construct_pb_filter(self) -> PBFilter:
        payload = field_bytes(1, _require(self.prefix, "prefix"))
        return PBFilter(FILTER_PATH + "ColumnPrefixFilter", payload)


@dataclass
class ColumnRangeFilter(Filter):
    """Keeps columns whose qualifier lies within a range."""

    min_column: Optional[bytes]
    max_column: Optional[bytes]
    min_column_inclusive: bool
    max_column_inclusive: bool

    def construct_pb_filter(self) -> PBFilter:
        payload = (
            field_bytes(1, self.min_column)
            + field_varint(2, self.min_column_inclusive)
            + field_bytes(3, self.max_column)
            + field_varint(4, self.max_column_inclusive)
        )
        return PBFilter(FILTER_PATH + "ColumnRangeFilter", payload)


@dataclass
class CompareFilter(Filter):
    """Comparison operator and comparator shared by compare-based filters.

    The comparator is turned into its wire form on construction.
    """

    compare_op: int
    comparator: Union[Comparator, PBComparator]

    def __post_init__(self) -> None:
        self.comparator = _to_pb_comparator(self.comparator)

    def serialize(self) -> bytes:
        """Encode this compare filter message."""
        return field_varint(1, _require(self.compare_op, "compare_op")) + field_bytes(
            2, self.comparator.serialize()
        )

    def construct_pb_filter(self) -> PBFilter:
        return PBFilter(FILTER_PATH + "CompareFilter", self.serialize())


def _compare_filter(compare_filter: Optional[CompareFilter]) -> bytes:
    return field_bytes(1, _require(compare_filter, "compare_filter").serialize())


@dataclass
class DependentColumnFilter(Filter):
    """Keeps cells with the timestamp of a reference column."""

    compare_filter: CompareFilter
    column_family: Optional[bytes]
    column_qualifier: Optional[bytes]
    drop_dependent_column: bool

    def construct_pb_filter(self) -> PBFilter:
        payload = (
            _compare_filter(self.compare_filter)
            + field_bytes(2, self.column_family)
            + field_bytes(3, self.column_qualifier)
            + field_varint(4, self.drop_dependent_column)
        )
        return PBFilter(FILTER_PATH + "DependentColumnFilter", payload)


@dataclass
class FamilyFilter(Filter):
    """Filters on the column family."""

    compare_filter: CompareFilter

    def construct_pb_filter(self) -> PBFilter:
        return PBFilter(FILTER_PATH + "FamilyFilter", _compare_filter(self.compare_filter))


@dataclass
class FilterWrapper(Filter):
    """Wraps another filter; it is turned into its wire form on construction."""

    filter: Union[Filter, PBFilter]

    def __post_init__(self) -> None:
        self.filter = _to_pb_filter(self.filter)

    def construct_pb_filter(self) -> PBFilter:
        return PBFilter(FILTER_PATH + "FilterWrapper", field_bytes(1, self.filter.serialize()))


@dataclass
class FirstKeyOnlyFilter(Filter):
    """Returns only the first cell of each row."""

    def construct_pb_filter(self) -> PBFilter:
        return PBFilter(FILTER_PATH + "FirstKeyOnlyFilter", b"")


@dataclass
class FirstKeyValueMatchingQualifiersFilter(Filter):
    """Returns the first cell of each row matching one of the qualifiers."""

    qualifiers: list[bytes] = field(default_factory=list)

    def construct_pb_filter(self) -> PBFilter:
        payload = b"".join(field_bytes(1, q) for q in self.qualifiers or ())
        return PBFilter(FILTER_PATH + "FirstKeyValueMatchingQualifiersFilter", payload)


@dataclass
class FuzzyRowFilter(Filter):
    """Matches row keys against fuzzy key and mask pairs."""

    pairs: list[BytesBytesPair] = field(default_factory=list)

    def construct_pb_filter(self) -> PBFilter:
        payload = b"".join(field_bytes(1, p.serialize()) for p in self.pairs or ())
        return PBFilter(FILTER_PATH + "FuzzyRowFilter", payload)


@dataclass
class InclusiveStopFilter(Filter):
    """Stops the scan after the given row, which is included."""

    stop_row_key: Optional[bytes] = None

    def construct_pb_filter(self) -> PBFilter:
        return PBFilter(FILTER_PATH + "InclusiveStopFilter", field_bytes(1, self.stop_row_key))