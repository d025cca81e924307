"""Gemini AI client for filing analysis."""
import logging
from typing import Any, Optional

import httpx

from filing_insights.config import Settings, get_settings
from filing_insights.services.exceptions import (
    AnalysisAPIError,
    AnalysisModelError,
    AnalysisRateLimitError,
    AnalysisTimeoutError,
)

logger = logging.getLogger(__name__)

GEMINI_API_BASE = "https://generativelanguage.googleapis.com/v1beta"


def _completion_text(data: Any) -> Optional[str]:
    """Join the text parts of the first candidate that has any; tolerates unexpected shapes."""
    if not isinstance(data, dict):
        return None
    candidates = data.get("candidates")
    if not isinstance(candidates, list):
        return None
    for candidate in candidates:
        content = candidate.get("content") if isinstance(candidate, dict) else None
        parts = content.get("parts") if isinstance(content, dict) else None
        if not isinstance(parts, list):
            continue
        texts = [
            part["text"]
            for part in parts
            if isinstance(part, dict) and isinstance(part.get("text"), str) and part["text"]
        ]
        if texts:
            return "".join(texts)
    return None


class GeminiClient:
    """Client for interacting with Gemini AI over its REST API."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize Gemini client.

        Args:
            settings: Application settings carrying the API key and generation config
            transport: Optional httpx transport, used to stub the API in tests
        """
        settings = settings or get_settings()
        self.api_key = settings.gemini_api_key
        self.model_name = settings.gemini_model
        self.request_timeout = settings.gemini_request_timeout
        self.generation_config = {
            "maxOutputTokens": settings.gemini_max_output_tokens,
            "temperature": settings.gemini_temperature,
        }
        self._transport = transport

    def _resolve_model_path(self) -> str:
        name = self.model_name
        return name if name.startswith("models/") else f"models/{name}"

    def _timeout(self) -> httpx.Timeout:
        if self.request_timeout is None:
            return httpx.Timeout(None)
        return httpx.Timeout(self.request_timeout)

    async def generate(self, system_prompt: str, prompt: str) -> str:
        """
        Run a single completion: system instruction plus one user turn.

        Raises:
            AnalysisRateLimitError: When API returns 429 (rate limit exceeded)
            AnalysisAPIError: When API returns other 4xx/5xx errors or no text
            AnalysisTimeoutError: When request times out
        """
        payload = {
            "systemInstruction": {"parts": [{"text": system_prompt}]},
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "generationConfig": self.generation_config,
        }
        url = f"{GEMINI_API_BASE}/{self._resolve_model_path()}:generateContent"

        try:
            async with httpx.AsyncClient(timeout=self._timeout(), transport=self._transport) as client:
                response = await client.post(url, params={"key": self.api_key}, json=payload)

                if response.status_code == 429:
                    retry_after = response.headers.get("Retry-After")
                    retry_seconds = int(retry_after) if retry_after and retry_after.isdigit() else None
                    raise AnalysisRateLimitError(
                        "Gemini API rate limit exceeded.", retry_after=retry_seconds
                    )

                if response.status_code >= 400:
                    raise AnalysisAPIError(
                        f"Gemini API error: {response.status_code}",
                        status_code=response.status_code,
                        response_body=response.text[:500],
                    )

                data = response.json()

        except httpx.TimeoutException as timeout_exc:
            raise AnalysisTimeoutError(
                f"Gemini API request timed out after {self.request_timeout}s"
            ) from timeout_exc

        except AnalysisModelError:
            raise

        except Exception as unexpected_exc:
            raise AnalysisAPIError(
                f"Unexpected error during Gemini API call: {unexpected_exc}",
                status_code=500,
            ) from unexpected_exc

        text = _completion_text(data)
        if text:
            return text

        raise AnalysisAPIError(
            "Gemini API returned no text content",
            status_code=500,
            response_body=str(data)[:500],
        )
