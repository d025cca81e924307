"""Tiered filing analysis: one model attempt, then a deterministic sibling."""
from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Optional, Protocol

from filing_insights.config import Settings, get_settings
from filing_insights.models.schemas import AnalysisResult, FilingRef
from filing_insights.services.analysis_fallback import (
    analyze_content_basically,
    generate_enhanced_analysis,
    generate_metadata_analysis,
)
from filing_insights.services.content_optimizer import optimize_document_content
from filing_insights.services.exceptions import AnalysisModelError
from filing_insights.services.gemini_client import GeminiClient
from filing_insights.services.response_parser import (
    DEFAULT_INSIGHTS,
    DEFAULT_SUMMARY,
    parse_model_response,
)
from filing_insights.services.text_extractor import is_placeholder_text

logger = logging.getLogger(__name__)

MIN_GROUNDED_CONTENT_CHARS = 100
MAX_PROMPT_CONTENT_CHARS = 12_000

SYSTEM_PROMPT = (
    "You are a financial analyst expert in UK company filings and Companies House documents. "
    "Extract specific financial data and provide actionable business insights from the provided "
    "document content."
)


class AnalysisTier(str, Enum):
    CONTENT_GROUNDED = "content_grounded"
    METADATA_ONLY = "metadata_only"
    ENHANCED_LOCAL = "enhanced_local"


class AnalysisModel(Protocol):
    async def generate(self, system_prompt: str, prompt: str) -> str:
        ...


@dataclass
class TieredAnalysis:
    tier: AnalysisTier
    result: AnalysisResult
    used_model: bool


def select_tier(document_content: Optional[str], use_model: bool) -> AnalysisTier:
    """
    Decide which tier runs for a request.

    No usable content (absent, blank or the PDF placeholder) always means
    metadata-only. Content that is present but short, or any content when the
    caller opted out of the model, is analysed locally.
    """
    content = (document_content or "").strip()
    if not content or is_placeholder_text(content):
        return AnalysisTier.METADATA_ONLY
    if use_model and len(content) > MIN_GROUNDED_CONTENT_CHARS:
        return AnalysisTier.CONTENT_GROUNDED
    return AnalysisTier.ENHANCED_LOCAL


def build_content_prompt(filing: FilingRef, document_content: str) -> str:
    if len(document_content) > MAX_PROMPT_CONTENT_CHARS:
        document_content = document_content[:MAX_PROMPT_CONTENT_CHARS] + "...[content truncated]"

    return f"""
Analyze this UK company filing document and provide detailed insights:

Filing Information:
- Type: {filing.category.value}
- Description: {filing.description}
- Date: {filing.date.isoformat()}
- Pages: {filing.pages or 'Unknown'}

Document Content:
{document_content}

Please provide:
1. A comprehensive summary (2-3 sentences) of the key information in this document
2. 3-5 specific key insights about the company's financial position, operations, or governance
3. Financial highlights including specific figures where available (revenue, profit, assets, liabilities, etc.)

Focus on extracting concrete financial data and meaningful business insights from the actual document content.
"""


def build_metadata_prompt(filing: FilingRef) -> str:
    return f"""
Describe what this UK company filing typically contains. The document text is not available.

Filing Information:
- Type: {filing.category.value}
- Description: {filing.description}
- Date: {filing.date.isoformat()}
- Pages: {filing.pages or 'Unknown'}

Please provide:
1. A short summary (2-3 sentences) of what this filing discloses
2. 3-5 key insights an analyst would look for in this type of filing
3. Financial highlights only if the filing type normally reports figures

Do not invent specific figures.
"""


def ensure_complete(result: AnalysisResult) -> AnalysisResult:
    """Backfill an empty summary or insight list with defaults."""
    summary = result.summary if result.summary.strip() else DEFAULT_SUMMARY
    insights = [item for item in result.key_insights if item.strip()] or list(DEFAULT_INSIGHTS)
    if summary == result.summary and insights == result.key_insights:
        return result
    return AnalysisResult(
        summary=summary,
        key_insights=insights,
        financial_highlights=result.financial_highlights,
    )


class FilingAnalyzer:
    """Runs exactly one tier per request and always returns a result."""

    def __init__(self, settings: Optional[Settings] = None, model: Optional[AnalysisModel] = None):
        self.settings = settings or get_settings()
        if model is None:
            model = GeminiClient(self.settings)
        self.model = model

    async def _run_tier(
        self,
        tier: AnalysisTier,
        prompt: Optional[str],
        local: Callable[[], AnalysisResult],
    ) -> TieredAnalysis:
        """Network arm when a prompt is given, local arm otherwise or on model failure."""
        if prompt is not None:
            try:
                completion = await self.model.generate(SYSTEM_PROMPT, prompt)
                return TieredAnalysis(tier, ensure_complete(parse_model_response(completion)), True)
            except AnalysisModelError as exc:
                logger.warning("Model call failed for %s tier, using local analysis: %s", tier.value, exc)

        return TieredAnalysis(tier, ensure_complete(local()), False)

    async def analyze(
        self,
        filing: FilingRef,
        document_content: Optional[str] = None,
        use_model: bool = True,
    ) -> TieredAnalysis:
        """
        Analyse a filing, optionally grounded in its extracted text.

        Args:
            filing: Filing metadata from the registry
            document_content: Extracted document text, if any
            use_model: False keeps the analysis fully local

        Returns:
            TieredAnalysis with the tier that ran and its result
        """
        tier = select_tier(document_content, use_model)
        logger.info(
            "Analysing %s filing dated %s using %s tier",
            filing.category.value,
            filing.date.isoformat(),
            tier.value,
        )

        if tier == AnalysisTier.METADATA_ONLY:
            prompt = build_metadata_prompt(filing) if use_model else None
            return await self._run_tier(tier, prompt, lambda: generate_metadata_analysis(filing))

        optimized = optimize_document_content(document_content or "")
        logger.info("Optimized content length: %s characters", len(optimized))

        if tier == AnalysisTier.CONTENT_GROUNDED:
            return await self._run_tier(
                tier,
                build_content_prompt(filing, optimized),
                lambda: analyze_content_basically(filing, optimized),
            )

        return await self._run_tier(tier, None, lambda: generate_enhanced_analysis(filing, optimized))
