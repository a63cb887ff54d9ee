"""Per-repository single-flight latch."""

from __future__ import annotations

import threading


class ProcessingGuard:
    """At most one generation/commit cycle in flight per repository.

    ``try_acquire`` never blocks: a busy repository simply reports ``False``
    and the caller drops the notification. Entries live in memory only.
    """

    def __init__(self) -> None:
        self._held: dict[str, bool] = {}
        self._lock = threading.Lock()

    def try_acquire(self, repo_id: str) -> bool:
        with self._lock:
            if self._held.get(repo_id, False):
                return False
            self._held[repo_id] = True
            return True

    def release(self, repo_id: str) -> None:
        with self._lock:
            self._held[repo_id] = False

    def is_held(self, repo_id: str) -> bool:
        with self._lock:
            return self._held.get(repo_id, False)
