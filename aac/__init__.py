"""aac - drafts commit messages for staged changes with a generative model."""

from importlib import import_module
from typing import TYPE_CHECKING

__version__ = "0.1.0"

# Public API (lazy-exported to avoid import-time side effects)
__all__ = [
    # Config
    "GenerationConfig", "ConfigStore", "SecretStore", "load_generation_config",
    # Pipeline
    "GitRepo", "MessageGenerator", "ProcessingGuard", "ChangeOrchestrator",
    "CycleResult", "CycleOutcome", "build_prompt", "clean_commit_message",
    "RepositoryRegistry", "RepositoryWatcher", "AutoCommitApp",
    # Exceptions
    "AutoCommitError", "GitError", "DiffUnavailable", "CommitFailed",
    "LLMError", "GenAuthError", "GenQuotaError", "GenUnavailable",
    "ValidationError", "SanitizeRejected", "ConfigError", "NoApiKeyConfigured",
]

_EXCEPTIONS = (
    "AutoCommitError", "GitError", "DiffUnavailable", "CommitFailed",
    "LLMError", "GenAuthError", "GenQuotaError", "GenUnavailable",
    "ValidationError", "SanitizeRejected", "ConfigError", "NoApiKeyConfigured",
)


def __getattr__(name: str):
    """Load public names on first access so ``import aac`` stays cheap."""
    mapping = {
        "GenerationConfig": ("aac.config", "GenerationConfig"),
        "ConfigStore": ("aac.config", "ConfigStore"),
        "SecretStore": ("aac.config", "SecretStore"),
        "load_generation_config": ("aac.config", "load_generation_config"),
        "GitRepo": ("aac.git", "GitRepo"),
        "MessageGenerator": ("aac.llm", "MessageGenerator"),
        "ProcessingGuard": ("aac.guard", "ProcessingGuard"),
        "ChangeOrchestrator": ("aac.core", "ChangeOrchestrator"),
        "CycleResult": ("aac.core", "CycleResult"),
        "CycleOutcome": ("aac.core", "CycleOutcome"),
        "build_prompt": ("aac.prompt", "build_prompt"),
        "clean_commit_message": ("aac.sanitize", "clean_commit_message"),
        "RepositoryRegistry": ("aac.watcher", "RepositoryRegistry"),
        "RepositoryWatcher": ("aac.watcher", "RepositoryWatcher"),
        "AutoCommitApp": ("aac.app", "AutoCommitApp"),
    }
    mapping.update({exc: ("aac.exceptions", exc) for exc in _EXCEPTIONS})
    if name in mapping:
        mod_name, attr = mapping[name]
        value = getattr(import_module(mod_name), attr)
        globals()[name] = value  # cache for future access
        return value
    raise AttributeError(f"module 'aac' has no attribute {name!r}")


if TYPE_CHECKING:
    from .app import AutoCommitApp
    from .config import ConfigStore, GenerationConfig, SecretStore, load_generation_config
    from .core import ChangeOrchestrator, CycleOutcome, CycleResult
    from .exceptions import (
        AutoCommitError,
        CommitFailed,
        ConfigError,
        DiffUnavailable,
        GenAuthError,
        GenQuotaError,
        GenUnavailable,
        GitError,
        LLMError,
        NoApiKeyConfigured,
        SanitizeRejected,
        ValidationError,
    )
    from .git import GitRepo
    from .guard import ProcessingGuard
    from .llm import MessageGenerator
    from .prompt import build_prompt
    from .sanitize import clean_commit_message
    from .watcher import RepositoryRegistry, RepositoryWatcher
