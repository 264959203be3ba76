"""Compression codec interface and factory."""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from hbasekit.compression.snappy import SnappyCodec


@runtime_checkable
class Codec(Protocol):
    """Encodes and decodes chunks of cell blocks."""

    def encode(self, src, dst=None):
        """Compress ``src`` onto ``dst``; return the buffer and chunk size."""
        ...

    def decode(self, src, dst=None):
        """Decompress ``src`` onto ``dst``; return the buffer and chunk size."""
        ...

    def chunk_len(self) -> int:
        """Maximum size of a chunk for this codec."""
        ...

    def cell_block_compressor_class(self) -> str:
        """Java class name of the compressor on the server side."""
        ...


_CODECS = {
    "snappy": SnappyCodec,
}


def new_codec(name: str) -> Codec:
    """Instantiate the codec called ``name``. Only "snappy" is supported."""
    try:
        factory = _CODECS[name]
    except KeyError:
        raise ValueError(f"unknown compression codec: {name!r}") from None
    return factory()