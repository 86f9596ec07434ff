"""
Response Cache - content-addressed store for rendered images.

Entries are keyed by the SHA-256 of the canonical request string and kept
on disk under ``<cache_dir>/<first two hex chars>/<key>``, with the content
type in a ``<key>.type`` sidecar. Writes are staged in a temp file in the
destination directory and published with os.replace; the sidecar is
published before the data file, so a reader that finds the data file
always finds a complete entry.

Concurrent misses for the same key are collapsed into one build
(single-flight): the first caller builds, later callers wait on its
completion and receive the same entry or the same exception.

There is no eviction or expiry; the cache grows without bound.
"""

import hashlib
import logging
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from threading import Event, Lock
from typing import Any, Callable, Dict, Optional, Tuple, Union

from api.exceptions import CacheReadFailedException, CacheWriteFailedException
from core.constants import CacheConstants, FormatConstants

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CacheEntry:
    """Cached response body and its content type"""

    data: bytes
    content_type: str


@dataclass
class _Flight:
    """An in-progress build that other callers can wait on"""

    done: Event = field(default_factory=Event)
    entry: Optional[CacheEntry] = None
    error: Optional[BaseException] = None
    waiters: int = 0


class ResponseCache:
    """Content-addressed response cache with single-flight builds"""

    def __init__(self, cache_dir: Union[str, Path] = CacheConstants.DEFAULT_CACHE_DIR):
        """
        Initialize Response Cache

        Args:
            cache_dir: Root directory for cache entries (created if missing)
        """
        self.cache_dir = Path(cache_dir)
        self.cache_dir.mkdir(parents=True, exist_ok=True)

        self._flights: Dict[str, _Flight] = {}
        self.lock = Lock()

        # Statistics
        self.hits = 0
        self.misses = 0
        self.builds = 0
        self.shared_waits = 0
        self.read_failures = 0
        self.write_failures = 0

        logger.info(f"Response Cache initialized at: {self.cache_dir}")

    @staticmethod
    def key(raw_request: str) -> str:
        """Hash the canonical request string (decoded path + query), byte-exact"""
        return hashlib.sha256(raw_request.encode("utf-8")).hexdigest()

    def _paths(self, key: str) -> Tuple[Path, Path]:
        shard = self.cache_dir / key[: CacheConstants.SHARD_PREFIX_LENGTH]
        data_path = shard / key
        type_path = shard / f"{key}{CacheConstants.CONTENT_TYPE_SUFFIX}"
        return data_path, type_path

    def _read(self, key: str) -> Optional[CacheEntry]:
        data_path, type_path = self._paths(key)
        try:
            data = data_path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise CacheReadFailedException(f"Couldn't read cache entry {key}: {e}")

        try:
            content_type = type_path.read_text(encoding="utf-8").strip()
        except OSError as e:
            raise CacheReadFailedException(f"Couldn't read content type for {key}: {e}")

        return CacheEntry(data=data, content_type=content_type or FormatConstants.DEFAULT_MIME_TYPE)

    def get(self, key: str) -> Optional[CacheEntry]:
        """
        Look up an entry.

        A read failure is logged and reported as a miss so the caller
        recomputes instead of failing.

        Returns:
            CacheEntry on hit, None on miss
        """
        try:
            entry = self._read(key)
        except CacheReadFailedException as e:
            logger.warning(f"{e.detail}; treating as miss")
            with self.lock:
                self.read_failures += 1
            entry = None

        with self.lock:
            if entry is None:
                self.misses += 1
            else:
                self.hits += 1
        return entry

    @staticmethod
    def _publish(target: Path, payload: bytes) -> None:
        fd, tmp_name = tempfile.mkstemp(
            dir=target.parent, prefix=f".{target.name}.", suffix=CacheConstants.TEMP_SUFFIX
        )
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(payload)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_name, target)
        except BaseException:
            try:
                os.unlink(tmp_name)
            except OSError:
                pass
            raise

    def put(self, key: str, data: bytes, content_type: str) -> None:
        """
        Store an entry atomically.

        Raises:
            CacheWriteFailedException: If staging or publishing failed
        """
        data_path, type_path = self._paths(key)
        try:
            data_path.parent.mkdir(parents=True, exist_ok=True)
            self._publish(type_path, content_type.encode("utf-8"))
            self._publish(data_path, data)
        except OSError as e:
            raise CacheWriteFailedException(f"Couldn't write cache entry {key}: {e}")

        logger.debug(f"Cached {len(data)} bytes under {key}")

    def get_or_build(self, key: str, builder: Callable[[], CacheEntry]) -> CacheEntry:
        """
        Return the cached entry for ``key``, building it at most once.

        The first caller to miss becomes the leader and runs ``builder``;
        callers arriving while that build is in flight wait for it and share
        its outcome. A failed build is not cached.

        Args:
            key: Cache key from ResponseCache.key
            builder: Produces the entry on a miss

        Returns:
            The cached or freshly built entry
        """
        entry = self.get(key)
        if entry is not None:
            logger.info(f"cache hit: {key}")
            return entry

        with self.lock:
            flight = self._flights.get(key)
            leader = flight is None
            if leader:
                flight = _Flight()
                self._flights[key] = flight
            else:
                flight.waiters += 1
                self.shared_waits += 1

        if not leader:
            # Holds the calling thread until the leader finishes; callers size
            # their pool for this (see ImageSettings.render_workers)
            logger.info(f"cache miss, waiting on in-flight build: {key}")
            flight.done.wait()
            if flight.error is not None:
                raise flight.error
            return flight.entry

        logger.info(f"cache miss: {key}")
        try:
            # A build may have completed between our miss and taking the lead
            entry = self._read_quietly(key)
            if entry is None:
                with self.lock:
                    self.builds += 1
                entry = builder()
                self._store_quietly(key, entry)
            flight.entry = entry
            return entry
        except BaseException as e:
            flight.error = e
            raise
        finally:
            with self.lock:
                self._flights.pop(key, None)
            flight.done.set()

    def _read_quietly(self, key: str) -> Optional[CacheEntry]:
        try:
            return self._read(key)
        except CacheReadFailedException as e:
            logger.warning(f"{e.detail}; rebuilding")
            with self.lock:
                self.read_failures += 1
            return None

    def _store_quietly(self, key: str, entry: CacheEntry) -> None:
        try:
            self.put(key, entry.data, entry.content_type)
        except CacheWriteFailedException as e:
            logger.error(f"{e.detail}; serving uncached response")
            with self.lock:
                self.write_failures += 1

    def in_flight(self) -> int:
        with self.lock:
            return len(self._flights)

    def get_statistics(self) -> Dict[str, Any]:
        """Get cache statistics"""
        with self.lock:
            lookups = self.hits + self.misses
            hit_rate = (self.hits / lookups) * 100 if lookups else 0.0
            return {
                "hits": self.hits,
                "misses": self.misses,
                "builds": self.builds,
                "shared_waits": self.shared_waits,
                "read_failures": self.read_failures,
                "write_failures": self.write_failures,
                "in_flight": len(self._flights),
                "hit_rate": round(hit_rate, 2),
            }
