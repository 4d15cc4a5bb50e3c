"""
Resource cache: response content loaded once per location, served from
memory afterwards, with the resource's simulated latency on every read.
"""

import asyncio
from pathlib import Path
from typing import Dict, Optional, TYPE_CHECKING, Union

from shared.errors import ResourceUnavailableError
from shared.logging import get_logger
from ..config.models import Resource

if TYPE_CHECKING:  # pragma: no cover - imported for typing only
    from shared.metrics import MetricsCollector


class ResourceCache:
    """Process-lifetime content store keyed by resource location."""

    def __init__(self, resource_root: Union[str, Path], metrics: Optional["MetricsCollector"] = None):
        self.resource_root = Path(resource_root)
        self.metrics = metrics
        self.logger = get_logger("mock.resource_cache")
        self._content: Dict[str, str] = {}
        self._load_locks: Dict[str, asyncio.Lock] = {}

    async def get(self, resource: Resource) -> str:
        """Return the content for ``resource``, honouring its delay."""
        if resource.delay_ms > 0:
            self.logger.debug("About to delay", delay_ms=resource.delay_ms, location=resource.location)
            await asyncio.sleep(resource.delay_ms / 1000)

        cached = self._content.get(resource.location)
        if cached is not None:
            return cached

        # Single-flight: concurrent first reads of one location share a load
        lock = self._load_locks.setdefault(resource.location, asyncio.Lock())
        async with lock:
            cached = self._content.get(resource.location)
            if cached is not None:
                return cached
            content = await self._load(resource.location)
            self._content[resource.location] = content
        # Cached content is read without locking from here on
        self._load_locks.pop(resource.location, None)
        return content

    def is_cached(self, resource: Resource) -> bool:
        return resource.location in self._content

    def clear(self):
        """Drop all cached content."""
        self._content.clear()
        self._load_locks.clear()

    async def _load(self, location: str) -> str:
        path = self.resource_root / location
        self.logger.debug("About to load data", location=location, path=str(path))
        try:
            content = await asyncio.to_thread(path.read_text, encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            if self.metrics:
                self.metrics.record_resource_load("error")
            raise ResourceUnavailableError(location, details={"error": str(e)}) from e

        if self.metrics:
            self.metrics.record_resource_load("ok")
        return content
