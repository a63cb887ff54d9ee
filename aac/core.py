"""Change-notification to commit orchestration for aac."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional, Protocol

from .config import GenerationConfig, load_generation_config
from .exceptions import (
    AutoCommitError,
    DiffUnavailable,
    GenAuthError,
    GenQuotaError,
    GenUnavailable,
    GitError,
    NoApiKeyConfigured,
    SanitizeRejected,
)
from .git import GitRepo
from .guard import ProcessingGuard
from .llm import MessageGenerator
from .prompt import build_prompt
from .sanitize import clean_commit_message
from .vcs import RepositoryState, VcsPort

logger = logging.getLogger(__name__)


class CycleState(Enum):
    IDLE = "idle"
    GUARDED = "guarded"
    AWAITING_APPROVAL = "awaiting-approval"


class CycleOutcome(Enum):
    SKIPPED_BUSY = "skipped-busy"
    NO_STAGED_CHANGES = "no-staged-changes"
    EMPTY_DIFF = "empty-diff"
    COMMITTED = "committed"
    DECLINED = "declined"
    FAILED = "failed"


@dataclass
class CycleResult:
    """Result of one dispatched change notification."""

    outcome: CycleOutcome
    repo_path: str
    message: Optional[str] = None
    error: Optional[AutoCommitError] = None

    @property
    def success(self) -> bool:
        return self.outcome is CycleOutcome.COMMITTED


class Notifier(Protocol):
    """User-visible feedback channel supplied by the host."""

    def info(self, text: str) -> None:
        ...

    def error(self, text: str) -> None:
        ...

    def status(self, repo_path: str, text: str) -> None:
        ...


class LoggingNotifier:
    """Notifier that only writes to the log; used when no UI is attached."""

    def info(self, text: str) -> None:
        logger.info("%s", text)

    def error(self, text: str) -> None:
        logger.error("%s", text)

    def status(self, repo_path: str, text: str) -> None:
        logger.debug("[%s] %s", repo_path, text)


Approver = Callable[[str, str], bool]


def decline_all(_repo_path: str, _message: str) -> bool:
    return False


def describe_error(error: AutoCommitError) -> str:
    """Single user-facing line for a failed cycle."""
    if isinstance(error, SanitizeRejected):
        return "The model produced no usable commit message."
    if isinstance(error, GenAuthError):
        return f"Invalid API key; check your settings. ({error})"
    if isinstance(error, GenQuotaError):
        return f"Generation quota reached; wait a moment and try again. ({error})"
    if isinstance(error, GenUnavailable):
        return f"Could not reach the generation service: {error}"
    return str(error)


class ChangeOrchestrator:
    """Drive one generation/commit cycle per repository change notification.

    States per repository: ``IDLE`` -> ``GUARDED`` -> (``AWAITING_APPROVAL``)
    -> ``IDLE``. Every path back to ``IDLE`` releases the guard before any
    error is reported, so the next notification can retry.
    """

    def __init__(
        self,
        guard: Optional[ProcessingGuard] = None,
        config_loader: Optional[Callable[[], GenerationConfig]] = None,
        generator_factory: Optional[Callable[[GenerationConfig], Any]] = None,
        approver: Approver = decline_all,
        notifier: Optional[Notifier] = None,
        vcs_factory: Optional[Callable[[str], VcsPort]] = None,
    ) -> None:
        self.guard = guard or ProcessingGuard()
        self.config_loader = config_loader or load_generation_config
        self.generator_factory = generator_factory or MessageGenerator
        self.approver = approver
        self.notifier: Notifier = notifier or LoggingNotifier()
        self.vcs_factory = vcs_factory or GitRepo
        self._states: Dict[str, CycleState] = {}

    def state_of(self, repo_path: str) -> CycleState:
        return self._states.get(repo_path, CycleState.IDLE)

    def handle_change(self, repo: RepositoryState) -> CycleResult:
        """Dispatch entry point, called once per change notification."""
        repo_path = repo.root
        self._states.setdefault(repo_path, CycleState.IDLE)

        if not repo.has_staged_changes:
            logger.debug("[%s] no staged changes", repo_path)
            return CycleResult(CycleOutcome.NO_STAGED_CHANGES, repo_path)

        if not self.guard.try_acquire(repo_path):
            logger.debug("[%s] cycle already in flight; dropping event", repo_path)
            return CycleResult(CycleOutcome.SKIPPED_BUSY, repo_path)

        logger.debug(
            "[%s] staged changes detected: %s",
            repo_path,
            ", ".join(change.path for change in repo.staged),
        )
        self._states[repo_path] = CycleState.GUARDED
        self.notifier.status(repo_path, "Generating commit message...")
        try:
            result = self._run_cycle(repo_path)
        except AutoCommitError as exc:
            logger.warning("[%s] cycle failed: %s", repo_path, exc)
            result = CycleResult(CycleOutcome.FAILED, repo_path, error=exc)
        except Exception as exc:
            logger.exception("[%s] cycle crashed", repo_path)
            error = AutoCommitError(f"Unexpected error during commit cycle: {exc!r}")
            error.__cause__ = exc
            result = CycleResult(CycleOutcome.FAILED, repo_path, error=error)
        finally:
            self._states[repo_path] = CycleState.IDLE
            self.guard.release(repo_path)

        self._report(result)
        return result

    def _run_cycle(self, repo_path: str) -> CycleResult:
        config = self.config_loader()
        if not config.api_key:
            raise NoApiKeyConfigured(
                "No API key configured. Run 'aac set-api-key' to set one."
            )

        try:
            vcs = self.vcs_factory(repo_path)
        except GitError as exc:
            raise DiffUnavailable(repo_path, str(exc)) from exc
        diff = vcs.get_staged_diff()
        if not diff.strip():
            logger.debug("[%s] staged diff is empty; nothing to do", repo_path)
            return CycleResult(CycleOutcome.EMPTY_DIFF, repo_path)

        prompt = build_prompt(config.custom_prompt, diff)
        raw = self.generator_factory(config).generate(prompt)
        message = clean_commit_message(raw)
        logger.debug("[%s] sanitized message: %r", repo_path, message)

        if not config.auto_commit_enabled:
            # The guard stays held while the user decides.
            self._states[repo_path] = CycleState.AWAITING_APPROVAL
            if not self.approver(repo_path, message):
                logger.debug("[%s] commit declined", repo_path)
                return CycleResult(CycleOutcome.DECLINED, repo_path, message=message)

        vcs.commit(message)
        return CycleResult(CycleOutcome.COMMITTED, repo_path, message=message)

    def _report(self, result: CycleResult) -> None:
        if result.error is not None:
            self.notifier.error(describe_error(result.error))
        elif result.outcome is CycleOutcome.COMMITTED:
            self.notifier.info(f"Committed: {result.message}")
        self.notifier.status(result.repo_path, "Ready")
