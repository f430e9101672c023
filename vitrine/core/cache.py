"""Rendered content cache for shapes that carry a ``cache_id``."""

from __future__ import annotations

import threading
import time
from typing import Any, Callable, Optional

from .context import ShapeDisplayContext
from .events import ShapeDisplayEvents


class MemoryContentCache:
    """In-process content cache with a fixed time-to-live per entry."""

    def __init__(self, ttl: float = 300.0, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, tuple[float, Any]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            expires, content = entry
            if self._clock() >= expires:
                del self._entries[key]
                return None
            return content

    def set(self, key: str, content: Any) -> None:
        with self._lock:
            self._entries[key] = (self._clock() + self.ttl, content)

    def remove(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class ShapeCacheEvents(ShapeDisplayEvents):
    """Serves cached renderings and stores fresh ones.

    A cache hit is supplied as child content while displaying, which makes
    the engine skip processing and binding execution for that shape.
    Cached renderings already include their wrappers, so the hit is marked
    as wrapped and wrappers added by later hooks are not applied again.
    """

    def __init__(self, cache: MemoryContentCache):
        self.cache = cache
        self._served: set[int] = set()

    async def displaying(self, context: ShapeDisplayContext) -> None:
        cache_id = context.shape_metadata.cache_id
        if not cache_id:
            return
        cached = self.cache.get(cache_id)
        if cached is not None:
            context.child_content = cached
            context.content_wrapped = True
            self._served.add(id(context))

    async def displayed(self, context: ShapeDisplayContext) -> None:
        cache_id = context.shape_metadata.cache_id
        if id(context) in self._served:
            return
        if cache_id and context.child_content is not None:
            self.cache.set(cache_id, context.child_content)

    async def displaying_finalized(self, context: ShapeDisplayContext) -> None:
        self._served.discard(id(context))
