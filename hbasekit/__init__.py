"""Client-side building blocks for HBase: region caches, filters, compression and client state."""

__version__ = "0.1.0"