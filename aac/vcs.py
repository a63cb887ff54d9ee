"""Version-control types shared by the orchestrator and the git adapter."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Protocol


@dataclass(frozen=True)
class Change:
    """One entry of a staged or unstaged change list."""

    path: str
    status: str  # git name-status letter: 'A' | 'M' | 'D' | 'R' ...


@dataclass(frozen=True)
class RepositoryState:
    """What the registry knows about a repository at notification time."""

    root: str
    staged: tuple[Change, ...] = field(default_factory=tuple)
    unstaged: tuple[Change, ...] = field(default_factory=tuple)

    @property
    def has_staged_changes(self) -> bool:
        return bool(self.staged)


class VcsPort(Protocol):
    """Operations the core needs from a working copy."""

    repo_path: object

    def get_staged_diff(self) -> str:
        ...

    def commit(self, message: str) -> None:
        ...

    def list_staged_changes(self) -> list[Change]:
        ...

    def list_unstaged_changes(self) -> list[Change]:
        ...
