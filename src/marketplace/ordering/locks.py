"""Per-key mutual exclusion for order transitions.

Each order id maps to its own lock, created on first use and discarded when
the last holder releases it, so unrelated orders never contend.
"""

import threading
from contextlib import contextmanager
from dataclasses import dataclass, field


@dataclass
class _Entry:
    lock: threading.Lock = field(default_factory=threading.Lock)
    holders: int = 0


class KeyedLock:
    def __init__(self) -> None:
        self._guard = threading.Lock()
        self._entries: dict[str, _Entry] = {}

    @contextmanager
    def hold(self, key):
        key = str(key)
        with self._guard:
            entry = self._entries.setdefault(key, _Entry())
            entry.holders += 1

        entry.lock.acquire()
        try:
            yield
        finally:
            entry.lock.release()
            with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    del self._entries[key]

    def active_keys(self) -> int:
        with self._guard:
            return len(self._entries)


# Shared by the order lifecycle and the payment gate
order_locks = KeyedLock()
