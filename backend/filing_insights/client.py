"""Caller-side client for the Filing Insights API with a local result cache."""
import logging
from typing import Any, Dict, Optional

import httpx

from filing_insights.models.schemas import (
    AnalysisResult,
    CacheStats,
    DocumentExtraction,
    FilingRef,
    placeholder_highlights,
)
from filing_insights.services.exceptions import ExtractionError, RetrievalError
from filing_insights.services.local_cache import ResultCache

logger = logging.getLogger(__name__)


class FilingInsightsClient:
    """Consults the local cache before asking the API to analyse a filing."""

    def __init__(
        self,
        base_url: str,
        cache: Optional[ResultCache] = None,
        api_version: str = "v1",
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.api_prefix = f"/api/{api_version}"
        self.cache = cache
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(base_url=self.base_url, transport=self._transport)

    @staticmethod
    def _error_details(response: httpx.Response) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError:
            return {"details": response.text}
        return payload if isinstance(payload, dict) else {"details": payload}

    async def extract_document_text(self, document_url: str) -> DocumentExtraction:
        """
        Ask the API to download and parse a document.

        Raises:
            RetrievalError: The registry could not supply the document
            ExtractionError: The document yielded no usable text
        """
        async with self._client() as client:
            response = await client.post(
                f"{self.api_prefix}/documents/download",
                json={"documentUrl": document_url, "parseOnly": True},
            )

        if response.status_code == 422:
            raise ExtractionError(self._error_details(response).get("details", response.text))
        if response.is_error:
            details = self._error_details(response)
            raise RetrievalError(
                details.get("details") or f"Document request failed: {response.status_code}",
                status_code=details.get("upstream_status") or response.status_code,
                body_text=response.text,
            )

        return DocumentExtraction.model_validate(response.json())

    async def analyze_filing(
        self,
        filing: FilingRef,
        document_url: Optional[str] = None,
        use_model: bool = True,
        use_cache: bool = True,
    ) -> AnalysisResult:
        """
        Analyse a filing, reusing a cached result for the same document.

        Document text is fetched when a URL is given; if that fails the
        analysis proceeds from metadata alone. Only model analyses of the
        extracted document text are cached; local fallbacks are recomputed
        on the next call.
        """
        if use_cache and self.cache is not None and document_url:
            cached = self.cache.get(document_url)
            if cached is not None:
                logger.info("Using cached analysis for %s", document_url)
                return AnalysisResult(
                    summary=cached.summary,
                    key_insights=cached.insights,
                    financial_highlights=cached.financial_highlights or placeholder_highlights(),
                )

        document_content = None
        extracted = False
        if document_url:
            try:
                extraction = await self.extract_document_text(document_url)
                document_content = extraction.extracted_text
                extracted = True
            except (RetrievalError, ExtractionError) as exc:
                logger.warning("Document text unavailable, analysing metadata only: %s", exc)

        async with self._client() as client:
            response = await client.post(
                f"{self.api_prefix}/analysis/filing",
                json={
                    "filing": filing.model_dump(mode="json"),
                    "documentContent": document_content,
                    "useModel": use_model,
                },
            )
            response.raise_for_status()

        payload = response.json()
        result = AnalysisResult(
            summary=payload["summary"],
            key_insights=payload["key_insights"],
            financial_highlights=payload.get("financial_highlights") or placeholder_highlights(),
        )

        cacheable = extracted and use_model and payload.get("used_model", False)
        if self.cache is not None and document_url and cacheable:
            self.cache.set(
                document_url,
                result.summary,
                result.key_insights,
                result.financial_highlights,
            )

        return result

    def clear_cache(self) -> None:
        if self.cache is not None:
            self.cache.clear()

    def cache_stats(self) -> CacheStats:
        return self.cache.stats() if self.cache is not None else CacheStats()
