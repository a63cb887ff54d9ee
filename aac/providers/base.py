from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Optional, Type

from ..config import GenerationConfig
from ..exceptions import GenAuthError, GenQuotaError, GenUnavailable, LLMError

_AUTH_MARKERS = ("API_KEY_INVALID", "UNAUTHENTICATED", "PERMISSION_DENIED")
_QUOTA_MARKERS = ("QUOTA_EXCEEDED", "RESOURCE_EXHAUSTED", "insufficient_quota")


def classify_provider_error(
    status: Optional[int], detail: str = ""
) -> Type[LLMError]:
    """Map an HTTP status and provider error text to the error taxonomy.

    Text markers win over the status code: Gemini reports an invalid key as
    HTTP 400 with reason ``API_KEY_INVALID``.
    """
    if any(marker in detail for marker in _AUTH_MARKERS):
        return GenAuthError
    if any(marker in detail for marker in _QUOTA_MARKERS):
        return GenQuotaError
    if status in (401, 403):
        return GenAuthError
    if status == 429:
        return GenQuotaError
    return GenUnavailable


class BaseDriver(ABC):
    """Abstract base for provider-specific generation calls.

    A driver performs exactly one outbound request per ``invoke`` and maps
    every failure into ``GenAuthError``, ``GenQuotaError`` or
    ``GenUnavailable``. Retrying is the caller's decision.
    """

    def __init__(self, config: GenerationConfig, debug: bool = False) -> None:
        self.config = config
        self.debug = debug

    @abstractmethod
    def invoke(self, prompt: str) -> str:
        """Return the raw text produced for ``prompt``."""
        raise NotImplementedError
