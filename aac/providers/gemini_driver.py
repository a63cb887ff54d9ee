from __future__ import annotations

import logging
from typing import Any

import httpx

from ..exceptions import GenUnavailable
from .base import BaseDriver, classify_provider_error

logger = logging.getLogger(__name__)


class GeminiDriver(BaseDriver):
    """Driver handling Google Gemini ``generateContent`` REST calls."""

    def _url(self) -> str:
        base = self.config.endpoint.rstrip("/")
        return f"{base}/models/{self.config.model}:generateContent"

    def invoke(self, prompt: str) -> str:
        headers = {
            "x-goog-api-key": self.config.api_key,
            "content-type": "application/json",
        }
        payload = {"contents": [{"role": "user", "parts": [{"text": prompt}]}]}
        logger.debug(
            "gemini request model=%s prompt_len=%d", self.config.model, len(prompt)
        )
        try:
            response = httpx.post(
                self._url(),
                headers=headers,
                json=payload,
                timeout=self.config.request_timeout,
            )
        except httpx.HTTPError as e:
            raise GenUnavailable(f"Gemini network error: {e}") from e

        status = response.status_code
        if status >= 400:
            body = response.text or ""
            error_cls = classify_provider_error(status, body)
            raise error_cls(f"Gemini error {status}: {body[:500]}")

        try:
            data = response.json()
        except ValueError as e:
            raise GenUnavailable("Gemini returned a malformed response") from e
        return self._extract_text(data)

    @staticmethod
    def _extract_text(data: Any) -> str:
        if not isinstance(data, dict):
            raise GenUnavailable("Gemini returned a malformed response")
        candidates = data.get("candidates") or []
        if not isinstance(candidates, list):
            raise GenUnavailable("Gemini returned malformed candidates")
        if not candidates:
            feedback = data.get("promptFeedback")
            reason = feedback.get("blockReason") if isinstance(feedback, dict) else None
            if reason:
                raise GenUnavailable(f"Gemini blocked the prompt: {reason}")
            raise GenUnavailable("Gemini returned no candidates")
        candidate = candidates[0]
        if not isinstance(candidate, dict):
            raise GenUnavailable("Gemini returned a malformed candidate")
        content = candidate.get("content") or {}
        if not isinstance(content, dict):
            raise GenUnavailable("Gemini returned malformed candidate content")
        parts = content.get("parts") or []
        if not isinstance(parts, list):
            raise GenUnavailable("Gemini returned malformed candidate parts")
        texts = [
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str)
        ]
        text = "".join(texts)
        if not text.strip():
            raise GenUnavailable("Gemini returned an empty response")
        return text
