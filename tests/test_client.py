import json

import pytest

from hbasekit.caches import RegionInfo
from hbasekit.client import (
    DEFAULT_EFFECTIVE_USER,
    DEFAULT_RPC_QUEUE_SIZE,
    DEFAULT_ZK_ROOT,
    Client,
    ClientOptions,
    ClientType,
    debug_state,
)


class FakeRegionClient:
    def __init__(self, addr):
        self.addr = addr
        self.closed = 0

    def close(self):
        self.closed += 1


def _populated_client():
    client = Client("~invalid.quorum~")
    reg_client = FakeRegionClient("regionserver:1")
    specs = [
        (1, b"test,,1234567890042.56f833d5569a27c7a43fbf547b4924a4.", b"", b"foo"),
        (2, b"test,foo,1234567890042.56f833d5569a27c7a43fbf547b4924a4.", b"foo", b"gohbase"),
        (3, b"test,gohbase,1234567890042.56f833d5569a27c7a43fbf547b4924a4.", b"gohbase", b""),
    ]
    regions = []
    for rid, name, start, stop in specs:
        reg = RegionInfo(rid, b"", b"test", name, start, stop)
        overlaps, replaced = client.regions.put(reg)
        assert replaced
        assert overlaps == []
        reg.client = reg_client
        client.clients.put("regionserver:1", reg, lambda: reg_client)
        regions.append(reg)
    return client, reg_client, regions


def test_debug_state_sanity():
    client, _, _ = _populated_client()
    raw = debug_state(client)
    assert isinstance(raw, bytes)
    data = json.loads(raw)
    assert data["ClientType"] == ClientType.REGION.value
    assert len(data["ClientRegionMap"]) == 1
    assert len(data["RegionInfoMap"]) == 3
    assert len(data["KeyRegionCache"]) == 3
    assert len(data["ClientRegionCache"]) == 1


def test_debug_state_region_references_agree():
    client, _, _ = _populated_client()
    data = json.loads(client.to_json())
    refs = set(data["KeyRegionCache"].values())
    assert refs == set(data["RegionInfoMap"])
    (client_refs,) = data["ClientRegionCache"].values()
    assert set(client_refs) == refs
    (client_state,) = data["ClientRegionMap"].values()
    assert client_state["Addr"] == "regionserver:1"


def test_state_of_new_region_client():
    client = Client("quorum")
    state = client.state()
    assert state["Done_Status"] == "Not Closed"
    assert state["KeyRegionCache"] == {}
    assert state["MetaRegionInfo"]["Name"] == "hbase:meta,,1"
    assert state["MetaRegionInfo"]["Namespace"] == "hbase"
    assert state["MetaRegionInfo"]["Table"] == "meta"
    assert state["AdminRegionInfo"] is None


def test_master_client_has_admin_region():
    client = Client("quorum", client_type=ClientType.MASTER)
    state = client.state()
    assert state["ClientType"] == "MasterService"
    assert state["MetaRegionInfo"] is None
    assert state["AdminRegionInfo"]["ID"] == 0


def test_default_options():
    client = Client("quorum")
    assert client.options.rpc_queue_size == DEFAULT_RPC_QUEUE_SIZE == 100
    assert client.options.zk_root == DEFAULT_ZK_ROOT == "/hbase"
    assert client.options.effective_user == DEFAULT_EFFECTIVE_USER == "root"
    assert client.compression_codec is None


def test_timeouts_reported_in_nanoseconds():
    options = ClientOptions(region_lookup_timeout=2.5, region_read_timeout=0.001)
    state = Client("quorum", options=options).state()
    assert state["RegionLookupTimeout"] == 2_500_000_000
    assert state["RegionReadTimeout"] == 1_000_000


def test_snappy_codec_option():
    client = Client("quorum", options=ClientOptions(compression_codec="snappy"))
    assert (
        client.compression_codec.cell_block_compressor_class()
        == "org.apache.hadoop.io.compress.SnappyCodec"
    )


def test_unknown_codec_option_raises():
    with pytest.raises(ValueError):
        Client("quorum", options=ClientOptions(compression_codec="lz4"))


def test_close_closes_clients_once():
    client, reg_client, regions = _populated_client()
    client.close()
    client.close()
    assert client.closed is True
    assert reg_client.closed == 1
    assert all(not r.available for r in regions)
    assert all(r.client is None for r in regions)
    assert client.state()["Done_Status"] == "Closed"


def test_master_close_closes_admin_client():
    client = Client("quorum", client_type=ClientType.MASTER)
    admin = FakeRegionClient("master:1")
    client.admin_region_info.client = admin
    client.close()
    assert admin.closed == 1


def test_context_manager_closes():
    with Client("quorum") as client:
        assert client.closed is False
    assert client.closed is True