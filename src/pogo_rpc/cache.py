"""
Cached config blobs (asset digest, item templates).

A blob is stored together with the time it was fetched. It is reused only
while that fetch time is not older than the freshness timestamp the remote
config version response reports for the artifact.
"""

import logging
import time
from pathlib import Path
from typing import Optional, Protocol

from pydantic import ValidationError

from pogo_rpc.models.envelope import WireModel

logger = logging.getLogger(__name__)

ASSET_DIGEST_KEY = "asset_digest"
ITEM_TEMPLATES_KEY = "item_templates"


class CachedBlob(WireModel):
    data: bytes
    timestamp_ms: int

    def is_fresh(self, remote_timestamp_ms: int) -> bool:
        return self.timestamp_ms >= remote_timestamp_ms


class DataCache(Protocol):
    def get_cached(self, key: str) -> Optional[CachedBlob]: ...

    def save(self, key: str, data: bytes) -> CachedBlob: ...


def _now_ms() -> int:
    return int(time.time() * 1000)


class MemoryDataCache:
    def __init__(self) -> None:
        self._blobs: dict[str, CachedBlob] = {}

    def get_cached(self, key: str) -> Optional[CachedBlob]:
        return self._blobs.get(key)

    def save(self, key: str, data: bytes) -> CachedBlob:
        blob = CachedBlob(data=data, timestamp_ms=_now_ms())
        self._blobs[key] = blob
        return blob


class FileDataCache:
    """One JSON file per key under `directory`."""

    def __init__(self, directory: Path):
        self._directory = Path(directory)

    def _path(self, key: str) -> Path:
        return self._directory / f"{key}.json"

    def get_cached(self, key: str) -> Optional[CachedBlob]:
        try:
            return CachedBlob.from_bytes(self._path(key).read_bytes())
        except FileNotFoundError:
            return None
        except ValidationError as e:
            logger.warning(f"Ignoring unreadable cache entry '{key}': {e}")
            return None

    def save(self, key: str, data: bytes) -> CachedBlob:
        blob = CachedBlob(data=data, timestamp_ms=_now_ms())
        self._directory.mkdir(parents=True, exist_ok=True)
        self._path(key).write_bytes(blob.to_bytes())
        return blob
