"""Row, value and wrapping filters for HBase scans and gets, encoded for the wire."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional, Union

from hbasekit.filter.comparator import Comparator, PBComparator
from hbasekit.filter.filters import FILTER_PATH, CompareFilter, CompareType, Filter, PBFilter
from hbasekit.protowire import (
    encode_varint,
    field_bytes,
    field_float32,
    field_varint,
)


def _require(value, field_name: str):
    if value is None:
        raise ValueError(f"required field {field_name} is not set")
    return value


def _as_pb_filter(value: Union[Filter, PBFilter]) -> PBFilter:
    return value if isinstance(value, PBFilter) else value.construct_pb_filter()


def _as_pb_comparator(value: Union[Comparator, PBComparator]) -> PBComparator:
    return value if isinstance(value, PBComparator) else value.construct_pb_comparator()


def _pb(class_name: str, payload: bytes) -> PBFilter:
    return PBFilter(FILTER_PATH + class_name, payload)


def _compare_filter(compare_filter: Optional[CompareFilter]) -> bytes:
    return field_bytes(1, _require(compare_filter, "compare_filter").serialize())


@dataclass
class KeyOnlyFilter(Filter):
    """Returns only the keys of cells, optionally with the value length as value."""

    len_as_val: bool

    def construct_pb_filter(self) -> PBFilter:
        return _pb("KeyOnlyFilter", field_varint(1, _require(self.len_as_val, "len_as_val")))


@dataclass
class MultipleColumnPrefixFilter(Filter):
    """Keeps columns whose qualifier starts with any of the sorted prefixes."""

    sorted_prefixes: list[bytes] = field(default_factory=list)

    def construct_pb_filter(self) -> PBFilter:
        payload = b"".join(field_bytes(1, p) for p in self.sorted_prefixes or ())
        return _pb("MultipleColumnPrefixFilter", payload)


@dataclass
class PageFilter(Filter):
    """Limits the number of rows returned."""

    page_size: int

    def construct_pb_filter(self) -> PBFilter:
        return _pb("PageFilter", field_varint(1, _require(self.page_size, "page_size")))


@dataclass
class PrefixFilter(Filter):
    """Keeps rows whose key starts with ``prefix``."""

    prefix: Optional[bytes] = None

    def construct_pb_filter(self) -> PBFilter:
        return _pb("PrefixFilter", field_bytes(1, self.prefix))


@dataclass
class QualifierFilter(Filter):
    """Filters on the column qualifier."""

    compare_filter: CompareFilter

    def construct_pb_filter(self) -> PBFilter:
        return _pb("QualifierFilter", _compare_filter(self.compare_filter))


@dataclass
class RandomRowFilter(Filter):
    """Keeps each row with the given probability."""

    chance: float

    def construct_pb_filter(self) -> PBFilter:
        return _pb("RandomRowFilter", field_float32(1, _require(self.chance, "chance")))


@dataclass
class RowFilter(Filter):
    """Filters on the row key."""

    compare_filter: CompareFilter

    def construct_pb_filter(self) -> PBFilter:
        return _pb("RowFilter", _compare_filter(self.compare_filter))


@dataclass
class SingleColumnValueFilter(Filter):
    """Keeps rows by the value of one column.

    The comparator is turned into its wire form on construction.
    """

    column_family: Optional[bytes]
    column_qualifier: Optional[bytes]
    compare_op: int
    comparator: Union[Comparator, PBComparator]
    filter_if_missing: bool
    latest_version_only: bool

    def __post_init__(self) -> None:
        self.comparator = _as_pb_comparator(self.comparator)

    def validate(self) -> "SingleColumnValueFilter":
        """Check the compare operation; return this filter when it is valid."""
        op = _require(self.compare_op, "compare_op")
        if not CompareType.LESS <= int(op) <= CompareType.NO_OP:
            raise ValueError("invalid compare operation specified")
        return self

    def serialize(self) -> bytes:
        """Encode this filter's message."""
        return (
            field_bytes(1, self.column_family)
            + field_bytes(2, self.column_qualifier)
            + field_varint(3, int(_require(self.compare_op, "compare_op")))
            + field_bytes(4, _require(self.comparator, "comparator").serialize())
            + field_varint(5, self.filter_if_missing)
            + field_varint(6, self.latest_version_only)
        )

    def construct_pb_filter(self) -> PBFilter:
        return _pb("SingleColumnValueFilter", self.serialize())


@dataclass
class SingleColumnValueExcludeFilter(Filter):
    """Like SingleColumnValueFilter, but leaves the tested column out of results."""

    single_column_value_filter: SingleColumnValueFilter

    def construct_pb_filter(self) -> PBFilter:
        inner = _require(self.single_column_value_filter, "single_column_value_filter")
        return _pb("SingleColumnValueExcludeFilter", field_bytes(1, inner.serialize()))


@dataclass
class SkipFilter(Filter):
    """Skips a whole row when the wrapped filter drops any of its cells.

    The wrapped filter is turned into its wire form on construction.
    """

    filter: Union[Filter, PBFilter]

    def __post_init__(self) -> None:
        self.filter = _as_pb_filter(self.filter)

    def construct_pb_filter(self) -> PBFilter:
        return _pb("SkipFilter", field_bytes(1, self.filter.serialize()))


@dataclass
class TimestampsFilter(Filter):
    """Keeps only cells with one of the given timestamps."""

    timestamps: list[int] = field(default_factory=list)

    def construct_pb_filter(self) -> PBFilter:
        stamps = list(self.timestamps or ())
        payload = b""
        if stamps:
            payload = field_bytes(1, b"".join(encode_varint(t) for t in stamps))
        return _pb("TimestampsFilter", payload)


@dataclass
class ValueFilter(Filter):
    """Filters on the cell value."""

    compare_filter: CompareFilter

    def construct_pb_filter(self) -> PBFilter:
        return _pb("ValueFilter", _compare_filter(self.compare_filter))


@dataclass
class WhileMatchFilter(Filter):
    """Ends the scan as soon as the wrapped filter drops a row.

    The wrapped filter is turned into its wire form on construction.
    """

    filter: Union[Filter, PBFilter]

    def __post_init__(self) -> None:
        self.filter = _as_pb_filter(self.filter)

    def construct_pb_filter(self) -> PBFilter:
        return _pb("WhileMatchFilter", field_bytes(1, self.filter.serialize()))


@dataclass
class AllFilter(Filter):
    """Drops every row."""

    def construct_pb_filter(self) -> PBFilter:
        return _pb("FilterAllFilter", b"")


@dataclass
class RowRange(Filter):
    """A range of row keys with inclusive or exclusive ends."""

    start_row: Optional[bytes]
    stop_row: Optional[bytes]
    start_row_inclusive: bool
    stop_row_inclusive: bool

    def serialize(self) -> bytes:
        """Encode this range's message."""
        return (
            field_bytes(1, self.start_row)
            + field_varint(2, self.start_row_inclusive)
            + field_bytes(3, self.stop_row)
            + field_varint(4, self.stop_row_inclusive)
        )

    def construct_pb_filter(self) -> PBFilter:
        return _pb("RowRange", self.serialize())


@dataclass
class MultiRowRangeFilter(Filter):
    """Keeps rows that fall within any of the given ranges."""

    row_range_list: list[RowRange] = field(default_factory=list)

    def construct_pb_filter(self) -> PBFilter:
        payload = b"".join(field_bytes(1, r.serialize()) for r in self.row_range_list or ())
        return _pb("MultiRowRangeFilter", payload)