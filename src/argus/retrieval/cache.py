"""
Bounded file-content cache.

Eviction is by insertion order (FIFO): reading an entry does not refresh it,
so callers must not rely on reads protecting an entry.
"""

import threading
from collections import OrderedDict
from typing import Dict, Optional

from argus.logging_config import logger
from .config import CACHE_CONFIG


class ContentCache:
    """
    Maps file path -> raw (untruncated) content, holding at most `max_entries`.
    """

    def __init__(self, max_entries: int = None):
        self.max_entries = max_entries or CACHE_CONFIG["max_entries"]
        self._entries: "OrderedDict[str, str]" = OrderedDict()
        self._lock = threading.Lock()

    def get(self, path: str) -> Optional[str]:
        """Return cached content, or None on a miss. Does not change eviction order."""
        with self._lock:
            return self._entries.get(path)

    def put(self, path: str, content: str) -> None:
        """
        Insert or overwrite an entry, evicting the oldest inserted entry first
        when the cache is full.
        """
        with self._lock:
            if path in self._entries:
                # Overwriting keeps the original insertion slot
                self._entries[path] = content
                return
            if len(self._entries) >= self.max_entries:
                evicted, _ = self._entries.popitem(last=False)
                logger.debug(f"Content cache full ({self.max_entries}), evicted '{evicted}'")
            self._entries[path] = content

    def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def snapshot(self) -> Dict[str, str]:
        with self._lock:
            return dict(self._entries)

    def __contains__(self, path: str) -> bool:
        with self._lock:
            return path in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
