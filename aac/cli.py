"""Command line interface for aac."""

from __future__ import annotations

import argparse
import getpass
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Optional

from .app import AutoCommitApp
from .config import poll_interval
from .core import CycleOutcome
from .exceptions import AutoCommitError
from .git import find_git_repo_root
from .vcs import RepositoryState
from .watcher import RepositoryWatcher

RESET = "\033[0m"
BOLD = "\033[1m"
CYAN = "\033[96m"
GREEN = "\033[92m"
DIM = "\033[2m"
RED = "\033[91m"


class ConsoleNotifier:
    """Print cycle feedback to the terminal."""

    def __init__(self, color: bool = True) -> None:
        self._color = color

    def _paint(self, code: str, text: str) -> str:
        return f"{code}{text}{RESET}" if self._color else text

    def info(self, text: str) -> None:
        print(self._paint(GREEN, f"aac: {text}"))

    def error(self, text: str) -> None:
        print(self._paint(RED, f"aac error: {text}"), file=sys.stderr)

    def status(self, repo_path: str, text: str) -> None:
        print(self._paint(DIM, f"[{repo_path}] {text}"))


class ConsoleApprover:
    """Ask y/N on the terminal; one question at a time across repositories."""

    def __init__(self, input_fn=input) -> None:
        self._input = input_fn
        self._lock = threading.Lock()

    def __call__(self, repo_path: str, message: str) -> bool:
        with self._lock:
            print(f"\n{BOLD}Generated commit message for {repo_path}:{RESET}")
            print(f"{CYAN}{message}{RESET}")
            try:
                answer = self._input("Commit with this message? [y/N]: ")
            except EOFError:
                return False
            return answer.strip().lower() in {"y", "yes"}


class CLI:
    """argparse front-end over :class:`AutoCommitApp`."""

    def __init__(self, app: Optional[AutoCommitApp] = None) -> None:
        self._app = app
        self.parser = self._create_parser()

    @property
    def app(self) -> AutoCommitApp:
        if self._app is None:
            self._app = AutoCommitApp()
        return self._app

    def _create_parser(self) -> argparse.ArgumentParser:
        parser = argparse.ArgumentParser(
            prog="aac",
            description=(
                "Watch Git repositories and draft commit messages for staged "
                "changes with a generative model."
            ),
        )
        parser.add_argument(
            "--debug", action="store_true", help="Enable debug logging"
        )
        parser.add_argument(
            "--no-color", action="store_true", help="Disable ANSI colors"
        )
        sub = parser.add_subparsers(dest="command")

        watch = sub.add_parser("watch", help="Watch repositories for staged changes")
        watch.add_argument("paths", nargs="*", default=["."])
        watch.add_argument(
            "--interval", type=float, default=None, help="Poll interval in seconds"
        )
        watch.add_argument(
            "--auto-commit",
            action="store_true",
            help="Commit without confirmation for this session",
        )

        run = sub.add_parser("run", help="Run one cycle for the staged changes now")
        run.add_argument("path", nargs="?", default=".")

        sub.add_parser("toggle-auto-commit", help="Flip the auto-commit setting")

        api_key = sub.add_parser("set-api-key", help="Store the API key")
        api_key.add_argument("value", nargs="?")

        prompt = sub.add_parser("set-prompt", help="Store a custom prompt template")
        group = prompt.add_mutually_exclusive_group(required=True)
        group.add_argument("value", nargs="?")
        group.add_argument("--file", type=Path, help="Read the prompt from a file")

        sub.add_parser("settings", help="Interactive settings menu")
        sub.add_parser("status", help="Show the current settings summary")
        return parser

    def run(self, args: Optional[list[str]] = None) -> int:
        try:
            parsed = self.parser.parse_args(args)
        except SystemExit as e:
            return int(e.code or 0)

        logging.basicConfig(
            level=logging.DEBUG if parsed.debug else logging.WARNING,
            format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        )
        color = not parsed.no_color and sys.stdout.isatty()

        handlers = {
            "watch": self._cmd_watch,
            "run": self._cmd_run,
            "toggle-auto-commit": self._cmd_toggle,
            "set-api-key": self._cmd_set_api_key,
            "set-prompt": self._cmd_set_prompt,
            "settings": self._cmd_settings,
            "status": self._cmd_status,
        }
        handler = handlers.get(parsed.command)
        if handler is None:
            self.parser.print_help()
            return 2
        try:
            return handler(parsed, color)
        except AutoCommitError as e:
            ConsoleNotifier(color).error(str(e))
            return 1
        except KeyboardInterrupt:
            return 130

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------
    def _cmd_watch(self, parsed: argparse.Namespace, color: bool) -> int:
        registry = self.app.initialize(parsed.paths, interactive=sys.stdin.isatty())
        if not registry.repositories():
            return 1
        orchestrator = self.app.build_orchestrator(
            notifier=ConsoleNotifier(color),
            approver=ConsoleApprover(),
            force_auto_commit=parsed.auto_commit,
        )
        interval = parsed.interval or poll_interval(self.app.config_store)
        watcher = RepositoryWatcher(registry, orchestrator, interval=interval)

        print(self.app.status_text())
        for repo in registry.repositories():
            print(f"  watching {repo}")
        signal.signal(signal.SIGTERM, lambda *_: watcher.stop())
        try:
            watcher.run()
        except KeyboardInterrupt:
            watcher.stop()
        return 0

    def _cmd_run(self, parsed: argparse.Namespace, color: bool) -> int:
        root = find_git_repo_root(Path(parsed.path))
        if root is None:
            ConsoleNotifier(color).error(f"Not a Git repository: {parsed.path}")
            return 1
        registry = self.app.initialize([str(root)])
        states = [s for s in registry.poll() if s.root == str(root)]
        state = states[0] if states else RepositoryState(root=str(root))
        orchestrator = self.app.build_orchestrator(
            notifier=ConsoleNotifier(color), approver=ConsoleApprover()
        )
        result = orchestrator.handle_change(state)
        if result.outcome is CycleOutcome.NO_STAGED_CHANGES:
            print("No staged changes found. Stage your changes first.")
        return 1 if result.outcome is CycleOutcome.FAILED else 0

    def _cmd_toggle(self, parsed: argparse.Namespace, color: bool) -> int:
        self.app.toggle_auto_commit()
        return 0

    def _cmd_set_api_key(self, parsed: argparse.Namespace, color: bool) -> int:
        value = parsed.value
        if value is None:
            value = getpass.getpass("API key: ")
        self.app.set_api_key(value)
        return 0

    def _cmd_set_prompt(self, parsed: argparse.Namespace, color: bool) -> int:
        if parsed.file is not None:
            value = parsed.file.read_text(encoding="utf-8")
        else:
            value = parsed.value
        self.app.set_custom_prompt(value)
        return 0

    def _cmd_settings(self, parsed: argparse.Namespace, color: bool) -> int:
        self.app.settings_menu()
        return 0

    def _cmd_status(self, parsed: argparse.Namespace, color: bool) -> int:
        print(self.app.status_text())
        return 0


def main(argv: Optional[list[str]] = None) -> int:
    return CLI().run(argv)


if __name__ == "__main__":
    sys.exit(main())
