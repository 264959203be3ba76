# hbasekit

These are client-side building blocks for working with HBase from Python.

- **Region caches** (`hbasekit.caches`): `KeyRegionCache` keeps regions sorted
  by region name. It finds the region that sorts just before a search key. When
  a new region overlaps cached ones, it replaces them if all of them are older,
  judged by region id. `ClientRegionCache` records which region-server
  connection serves which regions.
- **Scan filters and comparators** (`hbasekit.filter`): Python objects for the
  HBase filter and comparator families. Each one builds the protobuf wire form
  the region server expects. `hbasekit.protowire` holds the small
  wire-encoding helpers these objects use.
- **Cell-block compression** (`hbasekit.compression`): a snappy block codec
  written in pure Python, behind a small `Codec` interface.
- **Client state** (`hbasekit.client`): client options, the region caches a
  client holds, closing the client, and a JSON dump of all that for debugging.

## Installation

```
pip install hbasekit
```

The only runtime dependency is `sortedcontainers`.

## Filters

```python
from hbasekit.filter.comparator import BinaryComparator, ByteArrayComparable
from hbasekit.filter.filters import CompareFilter, CompareType, FilterList, ListOperator
from hbasekit.filter.row_filters import PrefixFilter, RowFilter

row_filter = RowFilter(
    CompareFilter(CompareType.GREATER_OR_EQUAL,
                  BinaryComparator(ByteArrayComparable(b"row-100")))
)
combined = FilterList(ListOperator.MUST_PASS_ALL, PrefixFilter(b"row-"), row_filter)

pb = combined.construct_pb_filter()
print(pb.name)          # org.apache.hadoop.hbase.filter.FilterList
wire = pb.serialize()   # bytes of the protobuf Filter message
```

Filters that take part in a `FilterList`, `FilterWrapper`, `SkipFilter` or
`WhileMatchFilter` are converted to their wire form when you add or wrap them.
The same happens to the comparator of a `CompareFilter` or
`SingleColumnValueFilter`. Some invalid settings raise `ValueError`, and so
does a required field that is `None`:

- an unknown `ListOperator` raises when `FilterList.construct_pb_filter` is called;
- an unknown `BitwiseOp` raises when `BitComparator.construct_pb_comparator` is called;
- an out-of-range compare type raises when `SingleColumnValueFilter.validate` is called.

## Compression

```python
from hbasekit.compression.codec import new_codec

codec = new_codec("snappy")
out, size = codec.encode(b"test", bytearray())
data, n = codec.decode(bytes(out), bytearray())
assert bytes(data) == b"test"
```

`encode` and `decode` append their result to `dst`. A `bytearray` is extended
in place; any other `dst` gives a new `bytes` object. Both return the buffer
together with the size of the chunk they produced. The module-level
`hbasekit.compression.snappy.encode` and `decode` work on whole byte strings.

`new_codec` raises `ValueError` for any name other than `"snappy"`. Decoding
malformed input raises `hbasekit.compression.snappy.CorruptInputError`, which
is a `ValueError`.

## Region caches

```python
from hbasekit.caches import KeyRegionCache, RegionInfo, region_search_key

cache = KeyRegionCache()
region = RegionInfo(1, table=b"test", name=b"test,,1234567890.abc.")
overlaps, stored = cache.put(region)        # ([], True)

name, found = cache.get(region_search_key(b"test", b"some-row"))
```

`KeyRegionCache.get` returns the cached `(name, region)` entry that sorts just
before the search key, or `None` if there is none. It does not check whether
that entry belongs to the table you asked for, so the caller has to. Regions
that a `put` replaces are removed from the cache and marked dead, and so are
regions passed to `delete`.

## Debugging client state

```python
from hbasekit.client import Client, ClientOptions, ClientType, debug_state

with Client("localhost", ClientType.REGION, ClientOptions(rpc_queue_size=10)) as client:
    print(debug_state(client))
```

`debug_state` returns JSON as bytes, and `Client.state()` returns the same data
as a dict. The document holds:

- the client type;
- every cached region and region client;
- the key → region and client → region mappings;
- the meta and admin region descriptions;
- whether the client is closed;
- the region lookup and read timeouts, in nanoseconds.

Closing a client marks its cached regions unavailable and closes their region
clients. Calling `close` more than once is harmless.

## What this package does not do

`Client` holds configuration and caches, and nothing more. It does not:

- connect to ZooKeeper or to region servers;
- look regions up in the meta table;
- send RPCs, so there is no Get, Put, Delete, Scan or admin operation here.

The `zk_dialer` and `region_dialer` options are stored but never called. The
package has no command-line program.

## Running the tests

```
pip install -e ".[test]"
pytest
```