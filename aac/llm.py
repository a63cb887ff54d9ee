"""Provider-aware commit message generation for aac."""

from __future__ import annotations

import logging

from .config import GenerationConfig
from .exceptions import GenUnavailable, NoApiKeyConfigured
from .providers.base import BaseDriver
from .providers.gemini_driver import GeminiDriver
from .providers.openai_driver import OpenAIDriver

logger = logging.getLogger(__name__)


class MessageGenerator:
    """Send a prompt to the configured provider and return its raw text.

    The result is untrusted and must go through
    :func:`aac.sanitize.clean_commit_message` before use. No retries are
    made: a failure is surfaced once rather than spending repeatedly against
    a paid API.
    """

    def __init__(self, config: GenerationConfig, debug: bool = False) -> None:
        if not config.api_key:
            raise NoApiKeyConfigured(
                f"No API key configured for provider '{config.provider}'. "
                "Run 'aac set-api-key' first."
            )
        self.config = config
        self.debug = debug

        self._driver: BaseDriver
        if config.provider == "gemini":
            self._driver = GeminiDriver(config, debug=debug)
        elif config.provider == "openai":
            self._driver = OpenAIDriver(config, debug=debug)
        else:
            raise GenUnavailable(f"Unsupported provider: {config.provider}")

    def generate(self, prompt: str) -> str:
        raw = self._driver.invoke(prompt)
        if not raw or not raw.strip():
            raise GenUnavailable("Empty response from the generation service")
        logger.debug("generated %d characters via %s", len(raw), self.config.provider)
        return raw
