"""HBase client state: options, region caches, shutdown and debug dumps."""

from __future__ import annotations

import json
import logging
import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional

from hbasekit.caches import ClientRegionCache, KeyRegionCache, RegionClient, RegionInfo
from hbasekit.compression.codec import Codec, new_codec

_log = logging.getLogger(__name__)

DEFAULT_RPC_QUEUE_SIZE = 100
DEFAULT_FLUSH_INTERVAL = 0.020
DEFAULT_ZK_ROOT = "/hbase"
DEFAULT_ZK_TIMEOUT = 30.0
DEFAULT_EFFECTIVE_USER = "root"
DEFAULT_REGION_LOOKUP_TIMEOUT = 30.0
DEFAULT_REGION_READ_TIMEOUT = 60.0

Dialer = Callable[[str, str], Any]


class ClientType(str, Enum):
    """Which HBase service a client talks to."""

    REGION = "ClientService"
    MASTER = "MasterService"


@dataclass
class ClientOptions:
    """Optional settings of a client. Times are in seconds."""

    rpc_queue_size: int = DEFAULT_RPC_QUEUE_SIZE
    flush_interval: float = DEFAULT_FLUSH_INTERVAL
    zk_root: str = DEFAULT_ZK_ROOT
    zk_timeout: float = DEFAULT_ZK_TIMEOUT
    effective_user: str = DEFAULT_EFFECTIVE_USER
    region_lookup_timeout: float = DEFAULT_REGION_LOOKUP_TIMEOUT
    region_read_timeout: float = DEFAULT_REGION_READ_TIMEOUT
    compression_codec: Optional[str] = None
    zk_dialer: Optional[Dialer] = field(default=None, repr=False)
    region_dialer: Optional[Dialer] = field(default=None, repr=False)
    logger: Optional[logging.Logger] = field(default=None, repr=False)


def _text(value: bytes) -> str:
    return value.decode("utf-8", "backslashreplace")


def _region_state(info: Optional[RegionInfo]) -> Optional[dict[str, Any]]:
    if info is None:
        return None
    return {
        "ID": info.id,
        "Namespace": _text(info.namespace),
        "Table": _text(info.table),
        "Name": _text(info.name),
        "StartKey": _text(info.start_key),
        "StopKey": _text(info.stop_key),
        "Available": info.available,
        "Dead": info.dead,
    }


def _client_state(client: RegionClient) -> dict[str, Any]:
    return {"Addr": getattr(client, "addr", None), "Repr": repr(client)}


def _nanoseconds(seconds: float) -> int:
    return int(round(seconds * 1_000_000_000))


class Client:
    """Access point to an HBase cluster holding its region caches."""

    def __init__(
        self,
        zkquorum: str,
        client_type: ClientType = ClientType.REGION,
        options: Optional[ClientOptions] = None,
    ) -> None:
        self.zkquorum = zkquorum
        self.client_type = ClientType(client_type)
        self.options = options or ClientOptions()
        self.logger = self.options.logger or _log
        self.compression_codec: Optional[Codec] = (
            new_codec(self.options.compression_codec)
            if self.options.compression_codec is not None
            else None
        )
        self.meta_region_info: Optional[RegionInfo] = None
        self.admin_region_info: Optional[RegionInfo] = None
        if self.client_type is ClientType.MASTER:
            # An empty region the master connection can be attached to.
            self.admin_region_info = RegionInfo(0)
        else:
            self.meta_region_info = RegionInfo(0, b"hbase", b"meta", b"hbase:meta,,1")
        self.regions = KeyRegionCache(self.logger)
        self.clients = ClientRegionCache(self.logger)
        self._done = threading.Event()
        self._close_lock = threading.Lock()
        self.logger.debug("Creating new client. Host=%s", zkquorum)

    @property
    def closed(self) -> bool:
        """Whether close() has been called."""
        return self._done.is_set()

    def close(self) -> None:
        """Close connections to the master and region servers. Safe to repeat."""
        with self._close_lock:
            if self._done.is_set():
                return
            self._done.set()
            if self.client_type is ClientType.MASTER and self.admin_region_info is not None:
                admin = self.admin_region_info.client
                if admin is not None:
                    admin.close()
            self.clients.close_all()

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def state(self) -> dict[str, Any]:
        """Snapshot of the client and its caches for debugging."""
        regions: dict[str, RegionInfo] = {}
        clients: dict[str, RegionClient] = {}
        client_region_cache = self.clients.debug_info(regions, clients)
        key_region_cache = self.regions.debug_info(regions)
        return {
            "ClientType": self.client_type.value,
            "ClientRegionMap": {ref: _client_state(c) for ref, c in clients.items()},
            "RegionInfoMap": {ref: _region_state(r) for ref, r in regions.items()},
            "KeyRegionCache": key_region_cache,
            "ClientRegionCache": client_region_cache,
            "MetaRegionInfo": _region_state(self.meta_region_info),
            "AdminRegionInfo": _region_state(self.admin_region_info),
            "Done_Status": "Closed" if self.closed else "Not Closed",
            "RegionLookupTimeout": _nanoseconds(self.options.region_lookup_timeout),
            "RegionReadTimeout": _nanoseconds(self.options.region_read_timeout),
        }

    def to_json(self) -> str:
        """The debug state encoded as JSON."""
        return json.dumps(self.state())


def debug_state(client: Client) -> bytes:
    """Return the client's debug state as JSON bytes."""
    try:
        return client.to_json().encode("utf-8")
    except (TypeError, ValueError) as err:
        logger = getattr(client, "logger", _log)
        logger.error("Cannot turn client into JSON bytes array: %s", err)
        raise