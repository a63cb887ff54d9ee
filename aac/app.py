"""Host-facing facade: settings operations and orchestrator wiring."""

from __future__ import annotations

import getpass
import logging
import os
import sys
from dataclasses import replace
from typing import Callable, Iterable, Optional, TextIO

from .config import (
    ConfigStore,
    GenerationConfig,
    SecretStore,
    auto_commit_enabled,
    config_file_path,
    custom_prompt,
    describe_provider,
    load_generation_config,
    resolve_api_key,
    resolve_provider,
    secret_key_for,
    stored_auto_commit,
)
from .core import Approver, ChangeOrchestrator, Notifier, decline_all
from .exceptions import ConfigError, GitError
from .guard import ProcessingGuard
from .watcher import RepositoryRegistry

logger = logging.getLogger(__name__)


class AutoCommitApp:
    """Settings commands plus construction of the watch pipeline."""

    def __init__(
        self,
        config_store: Optional[ConfigStore] = None,
        secret_store: Optional[SecretStore] = None,
        input_fn: Callable[[str], str] = input,
        secret_input_fn: Callable[[str], str] = getpass.getpass,
        out: Optional[TextIO] = None,
    ) -> None:
        self.config_store = config_store or ConfigStore()
        self.secret_store = secret_store or SecretStore()
        self._input = input_fn
        self._secret_input = secret_input_fn
        self._out = out or sys.stdout
        self.guard = ProcessingGuard()

    def _say(self, text: str) -> None:
        print(text, file=self._out)

    # ------------------------------------------------------------------
    # Configuration snapshot
    # ------------------------------------------------------------------
    def load_config(self) -> GenerationConfig:
        return load_generation_config(self.config_store, self.secret_store)

    def has_api_key(self) -> bool:
        provider = resolve_provider(self.config_store)
        return bool(resolve_api_key(provider, self.secret_store))

    # ------------------------------------------------------------------
    # Exposed operations
    # ------------------------------------------------------------------
    def initialize(
        self, paths: Iterable[str], interactive: bool = False
    ) -> RepositoryRegistry:
        """Check API key setup and register the repositories to watch."""
        if not self.has_api_key():
            self._say("aac needs an API key for the generation service.")
            if interactive:
                answer = self._input("Set it now? [y/N]: ").strip().lower()
                if answer in {"y", "yes"}:
                    self.set_api_key(self._secret_input("API key: "))

        registry = RepositoryRegistry()
        for path in paths:
            try:
                root = registry.add(path)
                logger.debug("registered %s for %s", root, path)
            except GitError as exc:
                self._say(f"Skipping {path}: {exc}")
        if not registry.repositories():
            self._say(
                "No Git repositories found. Make sure the paths point into a "
                "Git working copy."
            )
        return registry

    def toggle_auto_commit(self) -> bool:
        new_value = not stored_auto_commit(self.config_store)
        self.config_store.set("autoCommitEnabled", new_value)
        self._say(f"Auto-commit {'enabled' if new_value else 'disabled'}.")
        if os.environ.get("AAC_AUTO_COMMIT"):
            effective = "on" if auto_commit_enabled(self.config_store) else "off"
            self._say(
                "Note: AAC_AUTO_COMMIT is set and overrides the stored setting "
                f"(currently {effective})."
            )
        return new_value

    def set_api_key(self, value: Optional[str]) -> None:
        key = (value or "").strip()
        if not key:
            raise ConfigError("API key cannot be empty.")
        provider = resolve_provider(self.config_store)
        self.secret_store.set(secret_key_for(provider), key)
        self._say(f"API key saved for {provider}.")

    def set_custom_prompt(self, value: str) -> None:
        self.config_store.set("customPrompt", value)
        self._say("Custom prompt saved.")

    def status_text(self) -> str:
        auto = "on" if auto_commit_enabled(self.config_store) else "off"
        key = "set" if self.has_api_key() else "missing"
        provider = resolve_provider(self.config_store)
        return f"aac [{provider}] auto-commit: {auto}, API key: {key}"

    def settings_menu(self) -> None:
        """Interactive numbered menu over the settings operations."""
        auto = "on" if auto_commit_enabled(self.config_store) else "off"
        key = "set" if self.has_api_key() else "missing"
        self._say("aac settings")
        self._say(f"  1. Toggle auto-commit (currently {auto})")
        self._say(f"  2. Set API key (currently {key})")
        self._say("  3. Edit custom prompt")
        self._say("  4. Show configuration")
        choice = self._input("Select [1-4] (Enter to cancel): ").strip()
        if choice == "1":
            self.toggle_auto_commit()
        elif choice == "2":
            self.set_api_key(self._secret_input("API key: "))
        elif choice == "3":
            self._say("Current prompt:")
            self._say(custom_prompt(self.config_store))
            new_prompt = self._input("New prompt (Enter to keep): ")
            if new_prompt.strip():
                self.set_custom_prompt(new_prompt)
        elif choice == "4":
            self.show_config()

    def show_config(self) -> None:
        provider = resolve_provider(self.config_store)
        self._say(f"Config file: {config_file_path()}")
        self._say(f"Provider:    {describe_provider(provider)}")
        for name, value in self.load_config().to_dict().items():
            if name == "custom_prompt":
                value = value.splitlines()[0] + " ..." if value else ""
            self._say(f"  {name}: {value}")

    # ------------------------------------------------------------------
    # Wiring
    # ------------------------------------------------------------------
    def build_orchestrator(
        self,
        notifier: Optional[Notifier] = None,
        approver: Approver = decline_all,
        force_auto_commit: bool = False,
    ) -> ChangeOrchestrator:
        """Wire an orchestrator that snapshots settings at each cycle start.

        ``force_auto_commit`` turns auto-commit on for this session only,
        without touching the stored setting.
        """

        def config_loader() -> GenerationConfig:
            config = self.load_config()
            if force_auto_commit:
                config = replace(config, auto_commit_enabled=True)
            return config

        return ChangeOrchestrator(
            guard=self.guard,
            config_loader=config_loader,
            approver=approver,
            notifier=notifier,
        )
