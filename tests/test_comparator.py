import pytest

from hbasekit.filter.comparator import (
    COMPARATOR_PATH,
    BinaryComparator,
    BinaryPrefixComparator,
    BitComparator,
    BitwiseOp,
    ByteArrayComparable,
    Comparator,
    LongComparator,
    NullComparator,
    PBComparator,
    RegexStringComparator,
    SubstringComparator,
)


def _read_varint(data, pos=0):
    result = 0
    shift = 0
    while True:
        byte = data[pos]
        pos += 1
        result |= (byte & 0x7F) << shift
        shift += 7
        if byte < 0x80:
            return result, pos


def _parse(data):
    fields = []
    pos = 0
    while pos < len(data):
        key, pos = _read_varint(data, pos)
        number, wire_type = key >> 3, key & 7
        if wire_type == 0:
            value, pos = _read_varint(data, pos)
        elif wire_type == 2:
            length, pos = _read_varint(data, pos)
            value = data[pos:pos + length]
            pos += length
        else:
            raise AssertionError(f"unexpected wire type {wire_type}")
        fields.append((number, value))
    return fields


@pytest.mark.parametrize(
    "cls, java_name",
    [
        (BinaryComparator, "org.apache.hadoop.hbase.filter.BinaryComparator"),
        (LongComparator, "org.apache.hadoop.hbase.filter.LongComparator"),
        (BinaryPrefixComparator, "org.apache.hadoop.hbase.filter.BinaryPrefixComparator"),
    ],
)
def test_comparable_comparators(cls, java_name):
    comparable = ByteArrayComparable(b"value")
    pb = cls(comparable).construct_pb_comparator()
    assert pb.name == java_name
    assert _parse(pb.serialized_comparator) == [(1, comparable.serialize())]
    assert _parse(comparable.serialize()) == [(1, b"value")]


@pytest.mark.parametrize(
    "comparator, java_name",
    [
        (SubstringComparator("a"), COMPARATOR_PATH + "SubstringComparator"),
        (NullComparator(), COMPARATOR_PATH + "NullComparator"),
    ],
)
def test_comparators_through_comparator_interface(comparator, java_name):
    assert isinstance(comparator, Comparator)
    base: Comparator = comparator
    assert base.construct_pb_comparator().name == java_name


def test_byte_array_comparable_without_value():
    assert ByteArrayComparable().serialize() == b""


def test_missing_comparable_raises():
    with pytest.raises(ValueError):
        BinaryComparator(None).construct_pb_comparator()


@pytest.mark.parametrize("op", list(BitwiseOp))
def test_bit_comparator_valid_ops(op):
    comparable = ByteArrayComparable(b"\x0f")
    pb = BitComparator(op, comparable).construct_pb_comparator()
    assert pb.name == COMPARATOR_PATH + "BitComparator"
    assert _parse(pb.serialized_comparator) == [(1, comparable.serialize()), (2, int(op))]


@pytest.mark.parametrize("op", [0, 4, -1])
def test_bit_comparator_invalid_op(op):
    with pytest.raises(ValueError, match="Invalid bitwise operator specified"):
        BitComparator(op, ByteArrayComparable(b"x")).construct_pb_comparator()


def test_null_comparator():
    pb = NullComparator().construct_pb_comparator()
    assert pb.name == "org.apache.hadoop.hbase.filter.NullComparator"
    assert pb.serialized_comparator == b""


def test_regex_string_comparator_fields():
    pb = RegexStringComparator("^ab.*", 2, "UTF-8", "JAVA").construct_pb_comparator()
    assert pb.name == COMPARATOR_PATH + "RegexStringComparator"
    assert _parse(pb.serialized_comparator) == [
        (1, b"^ab.*"),
        (2, 2),
        (3, b"UTF-8"),
        (4, b"JAVA"),
    ]


def test_substring_comparator():
    pb = SubstringComparator("needle").construct_pb_comparator()
    assert pb.name == COMPARATOR_PATH + "SubstringComparator"
    assert _parse(pb.serialized_comparator) == [(1, b"needle")]


def test_pb_comparator_serialize():
    pb = PBComparator(COMPARATOR_PATH + "X", b"payload")
    assert _parse(pb.serialize()) == [(1, pb.name.encode()), (2, b"payload")]