import time
from typing import Any, Callable, Dict, Hashable, Tuple


class TTLCache:
    """
    Small time-to-live cache for file listings and fragment positions.

    Entries older than `ttl` seconds are recomputed on the next `get`. The
    clock is injectable so expiry can be tested without sleeping.
    """

    def __init__(self, ttl: float, clock: Callable[[], float] = time.monotonic):
        self.ttl = ttl
        self._clock = clock
        self._entries: Dict[Hashable, Tuple[float, Any]] = {}

    def get(self, key: Hashable, factory: Callable[[], Any]) -> Any:
        now = self._clock()
        entry = self._entries.get(key)
        if entry is not None and now - entry[0] < self.ttl:
            return entry[1]

        value = factory()
        self._entries[key] = (now, value)
        return value

    def invalidate(self, key: Hashable):
        self._entries.pop(key, None)

    def clear(self):
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
