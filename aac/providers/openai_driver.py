from __future__ import annotations

import logging
from typing import Any, Callable, Optional

import openai

from ..config import GenerationConfig
from ..exceptions import GenAuthError, GenQuotaError, GenUnavailable
from .base import BaseDriver, classify_provider_error

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You write git commit messages. Reply with the commit message only: "
    "no code fences, no quotes, no explanations."
)


class OpenAIDriver(BaseDriver):
    """Driver for OpenAI and OpenAI-compatible chat completion endpoints."""

    def __init__(
        self,
        config: GenerationConfig,
        debug: bool = False,
        client_factory: Optional[Callable[..., Any]] = None,
    ) -> None:
        super().__init__(config, debug)
        factory = client_factory or openai.OpenAI
        self._client = factory(
            base_url=config.endpoint,
            api_key=config.api_key,
            timeout=config.request_timeout,
            max_retries=0,
        )

    def invoke(self, prompt: str) -> str:
        logger.debug(
            "openai request model=%s prompt_len=%d", self.config.model, len(prompt)
        )
        try:
            resp = self._client.chat.completions.create(
                model=self.config.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": prompt},
                ],
            )
        except (openai.AuthenticationError, openai.PermissionDeniedError) as e:
            raise GenAuthError(f"OpenAI rejected the API key: {e}") from e
        except openai.RateLimitError as e:
            raise GenQuotaError(f"OpenAI rate limit or quota reached: {e}") from e
        except openai.APIStatusError as e:
            error_cls = classify_provider_error(e.status_code, str(e))
            raise error_cls(f"OpenAI error {e.status_code}: {e}") from e
        except openai.OpenAIError as e:
            raise GenUnavailable(f"OpenAI client error: {e}") from e

        try:
            choice0 = resp.choices[0]
        except (AttributeError, IndexError, TypeError):
            raise GenUnavailable("Missing choices in OpenAI response") from None

        content = getattr(getattr(choice0, "message", None), "content", "")
        if isinstance(content, list):
            content = "".join(
                str(part.get("text", "")) if isinstance(part, dict)
                else str(getattr(part, "text", "") or "")
                for part in content
            )
        if not isinstance(content, str) or not content.strip():
            raise GenUnavailable("Empty OpenAI response")
        return content
