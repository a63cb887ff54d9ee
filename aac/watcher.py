"""Repository registry and polling change watcher."""

from __future__ import annotations

import logging
import threading
from concurrent.futures import Future, ThreadPoolExecutor
from pathlib import Path
from typing import Callable, Dict, Iterable, List, Optional

from .config import DEFAULT_POLL_INTERVAL
from .core import ChangeOrchestrator, CycleResult
from .exceptions import GitError
from .git import GitRepo, find_git_repo_root
from .vcs import RepositoryState

logger = logging.getLogger(__name__)


class RepositoryRegistry:
    """Known repositories and a change stream built from polling.

    ``poll`` reports a repository whenever its staged or unstaged change
    lists differ from the previous poll. The first poll after a repository
    is added always reports it.
    """

    def __init__(
        self,
        paths: Iterable[str] = (),
        vcs_factory: Callable[[str], GitRepo] = GitRepo,
    ) -> None:
        self._vcs_factory = vcs_factory
        self._repos: Dict[str, GitRepo] = {}
        self._last_seen: Dict[str, RepositoryState] = {}
        self._lock = threading.Lock()
        for path in paths:
            self.add(path)

    def add(self, path: str) -> str:
        """Register the repository containing ``path`` and return its root."""
        root = find_git_repo_root(Path(path))
        if root is None:
            raise GitError(f"Not a Git repository: {path}")
        key = str(root)
        with self._lock:
            if key not in self._repos:
                self._repos[key] = self._vcs_factory(key)
                logger.debug("watching %s", key)
        return key

    def remove(self, path: str) -> None:
        root = find_git_repo_root(Path(path))
        key = str(root or Path(path).expanduser().resolve(strict=False))
        with self._lock:
            self._repos.pop(key, None)
            self._last_seen.pop(key, None)

    def repositories(self) -> List[str]:
        with self._lock:
            return list(self._repos)

    def poll(self) -> List[RepositoryState]:
        with self._lock:
            repos = list(self._repos.items())
        changed: List[RepositoryState] = []
        for key, repo in repos:
            try:
                state = repo.snapshot()
            except GitError as exc:
                logger.warning("cannot read state of %s: %s", key, exc)
                continue
            with self._lock:
                if self._last_seen.get(key) == state:
                    continue
                self._last_seen[key] = state
            changed.append(state)
        return changed


class RepositoryWatcher:
    """Poll the registry and dispatch each change to the orchestrator.

    Cycles run on a worker pool so a slow generation call for one repository
    does not stall polling or other repositories. Events for a repository
    whose cycle is still running are dropped by the orchestrator's guard.
    """

    def __init__(
        self,
        registry: RepositoryRegistry,
        orchestrator: ChangeOrchestrator,
        interval: float = DEFAULT_POLL_INTERVAL,
        max_workers: int = 4,
    ) -> None:
        self.registry = registry
        self.orchestrator = orchestrator
        self.interval = interval
        self._executor = ThreadPoolExecutor(
            max_workers=max_workers, thread_name_prefix="aac-cycle"
        )
        self._stop = threading.Event()

    def run_once(self) -> List[Future]:
        futures: List[Future] = []
        for state in self.registry.poll():
            future = self._executor.submit(self.orchestrator.handle_change, state)
            future.add_done_callback(self._log_unexpected)
            futures.append(future)
        return futures

    def run(self, max_polls: Optional[int] = None) -> None:
        """Block polling until ``stop`` is called or ``max_polls`` is reached."""
        polls = 0
        interrupted = True
        try:
            while not self._stop.is_set():
                self.run_once()
                polls += 1
                if max_polls is not None and polls >= max_polls:
                    break
                self._stop.wait(self.interval)
            interrupted = False
        finally:
            # A cycle may be blocked on the confirmation prompt; do not wait
            # for it when the loop is torn down by an exception.
            self._executor.shutdown(wait=not interrupted, cancel_futures=interrupted)

    def stop(self) -> None:
        self._stop.set()

    @staticmethod
    def _log_unexpected(future: Future) -> None:
        exc = future.exception()
        if exc is not None:
            logger.error("cycle crashed: %r", exc, exc_info=exc)
            return
        result: CycleResult = future.result()
        logger.debug("[%s] cycle outcome %s", result.repo_path, result.outcome.value)
