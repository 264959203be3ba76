"""Region caches: key -> region and client -> regions."""

from __future__ import annotations

import logging
import threading
from dataclasses import dataclass, field
from typing import Callable, Optional, Protocol, runtime_checkable

from sortedcontainers import SortedDict

_log = logging.getLogger(__name__)


@runtime_checkable
class RegionClient(Protocol):
    """A connection to a region server."""

    addr: str

    def close(self) -> None:
        """Close the connection."""
        ...


@dataclass(eq=False)
class RegionInfo:
    """Description of one region of a table."""

    id: int
    namespace: bytes = b""
    table: bytes = b""
    name: bytes = b""
    start_key: bytes = b""
    stop_key: bytes = b""
    client: Optional[RegionClient] = field(default=None, repr=False)
    _dead: threading.Event = field(default_factory=threading.Event, init=False, repr=False)
    _available: threading.Event = field(
        default_factory=threading.Event, init=False, repr=False
    )
    _state_lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        self.namespace = bytes(self.namespace or b"")
        self.table = bytes(self.table or b"")
        self.name = bytes(self.name or b"")
        self.start_key = bytes(self.start_key or b"")
        self.stop_key = bytes(self.stop_key or b"")
        self._available.set()

    @property
    def fully_qualified_table(self) -> bytes:
        """Table name prefixed by its namespace when there is one."""
        if self.namespace:
            return self.namespace + b":" + self.table
        return self.table

    @property
    def dead(self) -> bool:
        """Whether the region was removed from the cache for good."""
        return self._dead.is_set()

    @property
    def available(self) -> bool:
        """Whether the region is currently usable."""
        return self._available.is_set()

    def mark_dead(self) -> None:
        """Signal that anyone establishing this region may give up."""
        self._dead.set()

    def mark_unavailable(self) -> bool:
        """Mark the region unavailable; return True if it was available."""
        with self._state_lock:
            was_available = self._available.is_set()
            self._available.clear()
            return was_available


def _ref(obj: object) -> str:
    return f"{id(obj):#x}"


def region_search_key(table: bytes, key: bytes) -> bytes:
    """Key that sorts just after every region of ``table`` starting at ``key``."""
    return bytes(table) + b"," + bytes(key) + b",:"


def _name_order(name: bytes) -> tuple[bytes, bytes, bytes]:
    # Region names look like "table,start_key,id.hash."; tables hold no
    # commas and the id part holds none either.
    first = name.find(b",")
    last = name.rfind(b",")
    if first < 0 or first == last:
        return (name, b"", b"")
    return (name[:first], name[first + 1:last], name[last + 1:])


def is_region_overlap(reg_a: RegionInfo, reg_b: RegionInfo) -> bool:
    """Whether two regions of the same table share part of their key range."""
    # An empty stop key stands for the greatest key.
    return (
        reg_a.namespace == reg_b.namespace
        and reg_a.table == reg_b.table
        and (not reg_b.stop_key or reg_a.start_key < reg_b.stop_key)
        and (not reg_a.stop_key or reg_a.stop_key > reg_b.start_key)
    )


class ClientRegionCache:
    """Maps each region client to the regions it serves."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._lock = threading.RLock()
        self._logger = logger or _log
        self._regions: dict[RegionClient, dict[RegionInfo, None]] = {}

    def put(
        self, addr: str, region: RegionInfo, new_client: Callable[[], RegionClient]
    ) -> RegionClient:
        """Associate ``region`` with the client for ``addr``.

        Returns the existing client for that address, or one made by
        ``new_client`` if there is none yet.
        """
        with self._lock:
            for existing, regions in self._regions.items():
                if existing.addr == addr:
                    regions.setdefault(region, None)
                    self._logger.debug("region client is already in client's cache: %r", existing)
                    return existing
            client = new_client()
            self._regions[client] = {region: None}
        self._logger.info("added new region client: %r", client)
        return client

    def delete(self, region: RegionInfo) -> None:
        """Detach ``region`` from its client."""
        with self._lock:
            client = region.client
            if client is not None:
                region.client = None
                self._regions.get(client, {}).pop(region, None)

    def close_all(self) -> None:
        """Mark every region unavailable and close every client."""
        with self._lock:
            for client, regions in self._regions.items():
                for region in regions:
                    region.mark_unavailable()
                    region.client = None
                client.close()

    def client_down(self, client: RegionClient) -> list[RegionInfo]:
        """Forget ``client`` and return the regions it served."""
        with self._lock:
            regions = self._regions.pop(client, None)
        if regions is None:
            return []
        self._logger.info("removed region client: %r", client)
        return list(regions)

    def debug_info(
        self, regions: dict[str, RegionInfo], clients: dict[str, RegionClient]
    ) -> dict[str, list[str]]:
        """Record every region and client into the given maps.

        Returns a map from each client reference to its region references.
        """
        result: dict[str, list[str]] = {}
        with self._lock:
            for client, infos in self._regions.items():
                client_ref = _ref(client)
                clients[client_ref] = client
                refs = []
                for info in infos:
                    info_ref = _ref(info)
                    regions[info_ref] = info
                    refs.append(info_ref)
                result[client_ref] = refs
        return result


class KeyRegionCache:
    """Ordered cache from region names to regions."""

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._lock = threading.RLock()
        self._logger = logger or _log
        self._tree: SortedDict = SortedDict(_name_order)

    def __len__(self) -> int:
        with self._lock:
            return len(self._tree)

    def get(self, key: bytes) -> tuple[bytes, RegionInfo] | None:
        """Return the (name, region) entry sorting just before search ``key``."""
        with self._lock:
            if key in self._tree:
                raise RuntimeError(f"got exact match for region search key {key!r}")
            index = self._tree.bisect_left(key)
            if index == 0:
                return None
            return self._tree.peekitem(index - 1)

    def _overlaps(self, region: RegionInfo) -> list[RegionInfo]:
        if not self._tree:
            return []
        key = region_search_key(region.fully_qualified_table, region.start_key)
        if key in self._tree:
            raise RuntimeError(f"found a region with exact name as the search key {key!r}")
        start = max(self._tree.bisect_left(key) - 1, 0)
        candidates = (self._tree[name] for name in self._tree.islice(start))
        overlaps = []
        first = next(candidates)
        if is_region_overlap(first, region):
            overlaps.append(first)
        for other in candidates:
            if not is_region_overlap(other, region):
                break
            overlaps.append(other)
        return overlaps

    def get_overlaps(self, region: RegionInfo) -> list[RegionInfo]:
        """Return cached regions whose key range overlaps ``region``."""
        with self._lock:
            return self._overlaps(region)

    def put(self, region: RegionInfo) -> tuple[list[RegionInfo], bool]:
        """Cache ``region`` unless a region of that name or a younger overlap exists.

        Returns the overlapping regions and whether ``region`` was stored.
        Older overlapping regions are removed and marked dead.
        """
        with self._lock:
            existing = self._tree.get(region.name)
            if existing is not None:
                overlaps = [existing]
                replaced = False
            else:
                overlaps = self._overlaps(region)
                replaced = all(o.id <= region.id for o in overlaps)
            if not replaced:
                self._logger.debug(
                    "region is already in cache: %r overlaps=%r", region, overlaps
                )
                return overlaps, False
            self._tree[region.name] = region
            for other in overlaps:
                del self._tree[other.name]
                other.mark_dead()
        self._logger.info("added new region: %r overlaps=%r", region, overlaps)
        return overlaps, True

    def delete(self, region: RegionInfo) -> bool:
        """Remove the region with this name; return whether one was cached."""
        with self._lock:
            removed = self._tree.pop(region.name, None) is not None
        region.mark_dead()
        self._logger.debug("removed region: %r", region)
        return removed

    def debug_info(self, regions: dict[str, RegionInfo]) -> dict[str, str]:
        """Record every cached region into ``regions``.

        Returns a map from each region name to the region's reference.
        """
        with self._lock:
            items = list(self._tree.items())
        result: dict[str, str] = {}
        for name, region in items:
            ref = _ref(region)
            regions[ref] = region
            result[name.decode("utf-8", "backslashreplace")] = ref
        return result