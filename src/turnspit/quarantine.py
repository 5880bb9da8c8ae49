import threading
from collections.abc import Iterable

from .state import QuarantineEntry
from .types import BLOCK_DURATION


class QuarantineStore:
    """Thread-safe table of (credential, scope) pairs barred from use.

    An entry is active while ``now - blocked_at < block_duration``. Expired
    entries are purged lazily; nothing is persisted, so the table starts empty
    with every process.
    """

    def __init__(self, block_duration: float = BLOCK_DURATION):
        self.block_duration = block_duration
        self._entries: dict[tuple[str, str], QuarantineEntry] = {}
        self._lock = threading.Lock()

    def _purge(self, now: float) -> None:
        expired = [
            pair
            for pair, entry in self._entries.items()
            if entry.expires_at(self.block_duration) <= now
        ]
        for pair in expired:
            del self._entries[pair]

    def _active(self, credential: str, scope: str, now: float) -> bool:
        entry = self._entries.get((credential, scope))
        return entry is not None and entry.is_active(now, self.block_duration)

    def purge_expired(self, now: float) -> None:
        with self._lock:
            self._purge(now)

    def is_blocked(self, credential: str, scope: str, now: float) -> bool:
        with self._lock:
            self._purge(now)
            return self._active(credential, scope, now)

    def block(self, credential: str, scope: str, now: float) -> None:
        # Re-blocking restarts the window at `now`.
        with self._lock:
            self._purge(now)
            self._entries[(credential, scope)] = QuarantineEntry(credential, scope, now)

    def available(self, credentials: Iterable[str], scope: str, now: float) -> list[str]:
        """Purge, then return the credentials not blocked for `scope`, in order."""
        with self._lock:
            self._purge(now)
            return [c for c in credentials if not self._active(c, scope, now)]

    def entries(self) -> list[QuarantineEntry]:
        with self._lock:
            return [
                QuarantineEntry(e.credential, e.scope, e.blocked_at)
                for e in self._entries.values()
            ]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


_store: QuarantineStore | None = None
_store_lock = threading.Lock()


def get_quarantine_store() -> QuarantineStore:
    """Return the process-wide store, creating it on first use."""
    global _store  # noqa: PLW0603
    if _store is None:
        with _store_lock:
            if _store is None:
                _store = QuarantineStore()
    return _store
