"""Git operations for aac."""

import subprocess
from pathlib import Path
from typing import Optional

from .exceptions import CommitFailed, DiffUnavailable, GitError
from .vcs import Change, RepositoryState


def find_git_repo_root(start_path: Optional[Path] = None) -> Optional[Path]:
    """Return the top-level Git repository directory for ``start_path``.

    Attempts ``git rev-parse --show-toplevel`` first so worktrees and
    submodules are handled correctly. Falls back to walking parent
    directories looking for a ``.git`` directory or file. Returns ``None``
    when no Git repository can be found starting from ``start_path``.
    """

    path = Path(start_path or Path.cwd()).expanduser().resolve(strict=False)
    if path.is_file():
        path = path.parent

    try:
        result = subprocess.run(
            ["git", "rev-parse", "--show-toplevel"],
            cwd=path,
            capture_output=True,
            text=True,
            check=True,
        )
        top = result.stdout.strip()
        if top:
            return Path(top)
    except (subprocess.CalledProcessError, FileNotFoundError, NotADirectoryError):
        pass

    for candidate in (path, *path.parents):
        git_meta = candidate / ".git"
        if git_meta.exists():
            return candidate

    return None


def parse_name_status(output: str) -> list[Change]:
    """Parse ``git diff --name-status`` output into changes.

    Renames and copies (``R100\\told\\tnew``) report the destination path.
    """
    changes: list[Change] = []
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = line.split("\t")
        status = parts[0].strip()[:1]
        if len(parts) < 2 or not status:
            continue
        changes.append(Change(path=parts[-1], status=status))
    return changes


class GitRepo:
    """Handles Git repository operations for a single working copy."""

    def __init__(self, repo_path: str) -> None:
        self.repo_path = Path(repo_path)
        if not self._is_git_repo():
            raise GitError(f"Not a Git repository: {self.repo_path}")

    def _is_git_repo(self) -> bool:
        """Check if the directory is a Git repository."""
        try:
            self._run_git_command(["rev-parse", "--git-dir"])
            return True
        except GitError:
            return False

    def _run_git_command(self, args: list[str]) -> str:
        """Run a Git command and return its output."""
        try:
            result = subprocess.run(
                ["git"] + args,
                cwd=self.repo_path,
                capture_output=True,
                text=True,
                encoding="utf-8",
                errors="replace",
                check=True,
            )
            return result.stdout
        except subprocess.CalledProcessError as e:
            cmd = " ".join(args[:2])
            raise GitError(f"Git command failed: {cmd}\n{e.stderr or ''}") from e
        except FileNotFoundError as exc:
            raise GitError("Git command not found. Please install Git.") from exc
        except OSError as exc:
            raise GitError(f"Git command could not run: {exc}") from exc

    def get_staged_diff(self) -> str:
        """Get the diff of staged changes against HEAD.

        An empty string means nothing is staged; that is not an error here.
        """
        try:
            return self._run_git_command(["diff", "--cached"])
        except GitError as exc:
            raise DiffUnavailable(self.repo_path, str(exc)) from exc

    def list_staged_changes(self) -> list[Change]:
        return parse_name_status(
            self._run_git_command(["diff", "--cached", "--name-status"])
        )

    def list_unstaged_changes(self) -> list[Change]:
        return parse_name_status(self._run_git_command(["diff", "--name-status"]))

    def snapshot(self) -> RepositoryState:
        """Return the staged and unstaged change lists for the registry."""
        return RepositoryState(
            root=str(self.repo_path),
            staged=tuple(self.list_staged_changes()),
            unstaged=tuple(self.list_unstaged_changes()),
        )

    def commit(self, message: str) -> None:
        """Create one commit of everything currently staged.

        The message travels as a single argv element, so quotes in it never
        reach a shell.
        """
        try:
            self._run_git_command(["commit", "-m", message])
        except GitError as exc:
            raise CommitFailed(self.repo_path, str(exc)) from exc
