"""Client wrapper for interacting with Google Gemini models."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Callable

import google.generativeai as genai
from google.api_core.exceptions import GoogleAPIError, NotFound

from app.core.config import GeminiSettings


logger = logging.getLogger(__name__)


class GeminiModelError(RuntimeError):
    """Raised when the Gemini call itself fails, times out, or is misconfigured."""


class GeminiClient:
    """Provide JSON generation and token counting against one Gemini model."""

    def __init__(self, settings: GeminiSettings) -> None:
        self._settings = settings
        # Configure the global client once per process.
        genai.configure(api_key=settings.api_key)

    @property
    def model_name(self) -> str:
        return self._settings.model_name

    async def generate_json(
        self,
        *,
        system_instruction: str,
        prompt: str,
        temperature: float,
        max_output_tokens: int,
    ) -> str:
        """Generate a reply constrained to JSON text and return it unparsed."""

        generation_config = genai.GenerationConfig(
            temperature=temperature,
            max_output_tokens=max_output_tokens,
            response_mime_type="application/json",
        )

        def _invoke() -> str:
            model = genai.GenerativeModel(
                self._settings.model_name,
                system_instruction=system_instruction,
            )
            response = self._call(
                error_prefix="Gemini generate_content failed",
                call=lambda: model.generate_content(
                    prompt,
                    generation_config=generation_config,
                    request_options={
                        "timeout": self._settings.request_timeout_seconds
                    },
                ),
            )
            return _response_text(response)

        return await self._run_with_timeout(_invoke, "generate_content")

    async def count_tokens(self, text: str) -> int:
        """Return the model's token count for ``text``."""

        def _invoke() -> int:
            model = genai.GenerativeModel(self._settings.model_name)
            result = self._call(
                error_prefix="Gemini count_tokens failed",
                call=lambda: model.count_tokens(text),
            )
            return int(result.total_tokens)

        return await self._run_with_timeout(_invoke, "count_tokens")

    async def _run_with_timeout(self, func: Callable[[], Any], operation: str) -> Any:
        timeout = self._settings.request_timeout_seconds
        try:
            return await asyncio.wait_for(asyncio.to_thread(func), timeout=timeout)
        except asyncio.TimeoutError as exc:
            raise GeminiModelError(
                f"Gemini {operation} timed out after {timeout:g}s"
            ) from exc

    def _call(self, *, error_prefix: str, call: Callable[[], Any]) -> Any:
        try:
            return call()
        except NotFound as exc:
            logger.warning(
                "Gemini model '%s' not found.", self._settings.model_name
            )
            raise GeminiModelError(
                "Gemini model '"
                f"{self._settings.model_name}"
                "' is not available. Update GEMINI_MODEL_NAME to a supported value."
            ) from exc
        except GoogleAPIError as exc:
            # Covers call errors and RetryError raised when the retry deadline lapses.
            raise GeminiModelError(f"{error_prefix}: {exc}") from exc


def _response_text(response: Any) -> str:
    # ``response.text`` raises when the candidate carries no parts (for example
    # a safety block); that is an empty reply, not a transport failure.
    try:
        return response.text or ""
    except ValueError:
        logger.warning("Gemini response contained no text parts.")
        return ""


__all__ = ["GeminiClient", "GeminiModelError"]
