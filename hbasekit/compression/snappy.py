"""Snappy block compression for HBase cell blocks."""

from __future__ import annotations

_MAX_BLOCK_SIZE = 65536
_MIN_NON_LITERAL_BLOCK_SIZE = 17
_MAX_VARINT_LEN = 10
_MAX_DECODED_LEN = 0xFFFFFFFF

_TAG_LITERAL = 0x00
_TAG_COPY1 = 0x01
_TAG_COPY2 = 0x02
_TAG_COPY4 = 0x03

# Based on the Hadoop SnappyCodec buffer size (256 KiB) minus snappy overhead.
SNAPPY_CHUNK_LEN = 256 * 1024 * 5 // 6 - 32
COMPRESSOR_CLASS = "org.apache.hadoop.io.compress.SnappyCodec"


class CorruptInputError(ValueError):
    """Raised when snappy-compressed input cannot be decoded."""

    def __init__(self, message: str = "snappy: corrupt input") -> None:
        super().__init__(message)


def _put_uvarint(out: bytearray, value: int) -> None:
    while value >= 0x80:
        out.append((value & 0x7F) | 0x80)
        value >>= 7
    out.append(value)


def _read_uvarint(src: bytes) -> tuple[int, int]:
    result = 0
    shift = 0
    for pos, byte in enumerate(src[:_MAX_VARINT_LEN]):
        if byte < 0x80:
            if pos == _MAX_VARINT_LEN - 1 and byte > 1:
                raise CorruptInputError()
            return result | (byte << shift), pos + 1
        result |= (byte & 0x7F) << shift
        shift += 7
    raise CorruptInputError()


def _emit_literal(out: bytearray, literal: bytes) -> None:
    n = len(literal) - 1
    if n < 60:
        out.append(_TAG_LITERAL | (n << 2))
    elif n < 0x100:
        out.append(_TAG_LITERAL | (60 << 2))
        out.append(n)
    else:
        out.append(_TAG_LITERAL | (61 << 2))
        out += n.to_bytes(2, "little")
    out += literal


def _emit_copy2(out: bytearray, offset: int, length: int) -> None:
    out.append(_TAG_COPY2 | ((length - 1) << 2))
    out += offset.to_bytes(2, "little")


def _emit_copy(out: bytearray, offset: int, length: int) -> None:
    while length >= 68:
        _emit_copy2(out, offset, 64)
        length -= 64
    if length > 64:
        _emit_copy2(out, offset, 60)
        length -= 60
    if length >= 12 or offset >= 2048:
        _emit_copy2(out, offset, length)
    else:
        out.append(_TAG_COPY1 | ((offset >> 8) << 5) | ((length - 4) << 2))
        out.append(offset & 0xFF)


def _encode_block(out: bytearray, block: bytes) -> None:
    size = len(block)
    if size < _MIN_NON_LITERAL_BLOCK_SIZE:
        _emit_literal(out, block)
        return

    table: dict[bytes, int] = {}
    literal_start = 0
    pos = 0
    while pos <= size - 4:
        key = block[pos:pos + 4]
        candidate = table.get(key)
        table[key] = pos
        if candidate is None:
            pos += 1
            continue
        length = 4
        while pos + length < size and block[candidate + length] == block[pos + length]:
            length += 1
        if literal_start < pos:
            _emit_literal(out, block[literal_start:pos])
        _emit_copy(out, pos - candidate, length)
        pos += length
        literal_start = pos
    if literal_start < size:
        _emit_literal(out, block[literal_start:])


def encode(src: bytes | None) -> bytes:
    """Return the snappy block encoding of ``src``."""
    data = bytes(src or b"")
    out = bytearray()
    _put_uvarint(out, len(data))
    for start in range(0, len(data), _MAX_BLOCK_SIZE):
        _encode_block(out, data[start:start + _MAX_BLOCK_SIZE])
    return bytes(out)


def _append_copy(out: bytearray, offset: int, length: int, limit: int) -> None:
    if offset <= 0 or offset > len(out) or len(out) + length > limit:
        raise CorruptInputError()
    start = len(out) - offset
    if offset >= length:
        out += out[start:start + length]
    else:
        pattern = bytes(out[start:])
        repeats = -(-length // offset)
        out += (pattern * repeats)[:length]


def decode(src: bytes) -> bytes:
    """Decode a snappy block, raising CorruptInputError on bad input."""
    data = bytes(src)
    expected, pos = _read_uvarint(data)
    if expected > _MAX_DECODED_LEN:
        raise CorruptInputError("snappy: decoded block is too large")
    out = bytearray()
    end = len(data)
    while pos < end:
        tag = data[pos]
        kind = tag & 0x03
        if kind == _TAG_LITERAL:
            value = tag >> 2
            if value < 60:
                pos += 1
            else:
                width = value - 59
                if pos + 1 + width > end:
                    raise CorruptInputError()
                value = int.from_bytes(data[pos + 1:pos + 1 + width], "little")
                pos += 1 + width
            length = value + 1
            if pos + length > end or len(out) + length > expected:
                raise CorruptInputError()
            out += data[pos:pos + length]
            pos += length
            continue
        if kind == _TAG_COPY1:
            if pos + 2 > end:
                raise CorruptInputError()
            length = 4 + ((tag >> 2) & 0x07)
            offset = ((tag & 0xE0) << 3) | data[pos + 1]
            pos += 2
        elif kind == _TAG_COPY2:
            if pos + 3 > end:
                raise CorruptInputError()
            length = 1 + (tag >> 2)
            offset = int.from_bytes(data[pos + 1:pos + 3], "little")
            pos += 3
        else:
            if pos + 5 > end:
                raise CorruptInputError()
            length = 1 + (tag >> 2)
            offset = int.from_bytes(data[pos + 1:pos + 5], "little")
            pos += 5
        _append_copy(out, offset, length, expected)
    if len(out) != expected:
        raise CorruptInputError()
    return bytes(out)


def _append(dst: bytes | bytearray | None, chunk: bytes) -> bytes | bytearray:
    if isinstance(dst, bytearray):
        dst.extend(chunk)
        return dst
    return bytes(dst or b"") + chunk


class SnappyCodec:
    """Snappy codec for cell block compression."""

    def encode(self, src: bytes | None, dst: bytes | bytearray | None = None):
        """Compress ``src`` and append it to ``dst``.

        Returns the combined buffer and the size of the compressed chunk.
        A bytearray ``dst`` is extended in place and returned.
        """
        chunk = encode(src)
        return _append(dst, chunk), len(chunk)

    def decode(self, src: bytes, dst: bytes | bytearray | None = None):
        """Decompress ``src`` and append it to ``dst``.

        Returns the combined buffer and the size of the decompressed chunk.
        """
        chunk = decode(src)
        return _append(dst, chunk), len(chunk)

    def chunk_len(self) -> int:
        """Maximum size of an uncompressed chunk."""
        return SNAPPY_CHUNK_LEN

    def cell_block_compressor_class(self) -> str:
        """Java class name of the matching compressor on the server."""
        return COMPRESSOR_CLASS