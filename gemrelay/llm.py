from __future__ import annotations

"""Gemini ``generateContent`` client.

Talks to the Generative Language REST API directly with httpx instead of going
through an SDK, so the request body (including the base64 inline parts) is
built by the relay itself.  Every failure surfaces as :class:`ProviderError`
whose message starts with ``[GoogleGenerativeAI Error]``.
"""

from typing import Any, Optional, Protocol

import httpx
from loguru import logger

from gemrelay.errors import ConfigurationError, ProviderError
from gemrelay.schemas import GenerationRequest
from gemrelay.settings import Settings

PROVIDER_ERROR_MARKER = "GoogleGenerativeAI Error"

# Finish reasons for which the candidate carries no usable text.
BLOCKED_FINISH_REASONS = {
    "SAFETY",
    "RECITATION",
    "LANGUAGE",
    "BLOCKLIST",
    "PROHIBITED_CONTENT",
    "SPII",
}


class GenerativeModel(Protocol):
    async def generate(self, request: GenerationRequest) -> str: ...

    async def aclose(self) -> None: ...


def provider_error(message: str) -> ProviderError:
    return ProviderError(f"[{PROVIDER_ERROR_MARKER}]: {message}")


def _format_block_reason(kind: str, reason: str, message: Optional[str]) -> str:
    text = f"{kind} was blocked due to {reason}"
    if message:
        text += f": {message}"
    return text


def extract_text(payload: Any) -> str:
    """Return the generated text of a ``generateContent`` response body.

    Mirrors the SDK's ``response.text()``: concatenates the text parts of the
    first candidate and raises when the prompt or the candidate was blocked.
    """
    if not isinstance(payload, dict):
        raise provider_error(f"Unexpected response body: expected a JSON object, got {type(payload).__name__}")

    candidates = payload.get("candidates") or []
    if not candidates:
        feedback = payload.get("promptFeedback") or {}
        reason = feedback.get("blockReason")
        if reason:
            raise provider_error(
                "Text not available. "
                + _format_block_reason("Response", reason, feedback.get("blockReasonMessage"))
            )
        return ""

    if len(candidates) > 1:
        logger.warning(f"Response contains {len(candidates)} candidates; returning text from the first one.")

    first = candidates[0]
    finish_reason = first.get("finishReason")
    if finish_reason in BLOCKED_FINISH_REASONS:
        raise provider_error(
            _format_block_reason("Candidate", finish_reason, first.get("finishMessage"))
        )

    parts = (first.get("content") or {}).get("parts") or []
    return "".join(part.get("text", "") for part in parts if isinstance(part, dict))


def _error_message(response: httpx.Response) -> str:
    """Pull the provider message out of an error body, whatever its shape."""
    try:
        body = response.json()
    except ValueError:
        return response.text

    error = body.get("error") if isinstance(body, dict) else None
    if isinstance(error, dict) and isinstance(error.get("message"), str):
        return error["message"]
    if isinstance(error, str):
        return error
    return response.text


class GeminiModel:
    """Async client for one Gemini model."""

    def __init__(
        self,
        api_key: str | None,
        model: str = "models/gemini-1.5-flash",
        base_url: str = "https://generativelanguage.googleapis.com/v1beta",
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        if not api_key:
            raise ConfigurationError(
                "GEMINI_API_KEY is not set. Define it via environment variable (.env or export) before starting the relay."
            )
        self.model = model if "/" in model else f"models/{model}"
        self.url = f"{base_url.rstrip('/')}/{self.model}:generateContent"
        self._client = httpx.AsyncClient(
            timeout=timeout,
            transport=transport,
            headers={"x-goog-api-key": api_key, "Content-Type": "application/json"},
        )
        logger.info(f"Configured Gemini model: {self.model}")

    @classmethod
    def from_settings(cls, settings: Settings) -> "GeminiModel":
        return cls(
            api_key=settings.GEMINI_API_KEY,
            model=settings.GEMINI_MODEL,
            base_url=settings.GEMINI_BASE_URL,
            timeout=settings.MODEL_TIMEOUT,
        )

    async def generate(self, request: GenerationRequest) -> str:
        body = {"contents": [{"role": "user", "parts": request.to_parts()}]}
        logger.debug(
            f"[LLM] POST {self.url} (inline part: {request.part.mime_type if request.part else 'none'})"
        )

        try:
            response = await self._client.post(self.url, json=body)
        except httpx.HTTPError as exc:
            logger.error(f"[LLM] HTTP request error to Gemini: {exc!r}")
            raise provider_error(f"Error fetching from {self.url}: {exc}") from exc

        if response.is_error:
            message = _error_message(response)
            raise provider_error(
                f"Error fetching from {self.url}: [{response.status_code} {response.reason_phrase}] {message}".rstrip()
            )

        try:
            payload = response.json()
        except ValueError as exc:
            raise provider_error(f"Invalid JSON in response from {self.url}") from exc
        return extract_text(payload)

    async def aclose(self) -> None:
        await self._client.aclose()
