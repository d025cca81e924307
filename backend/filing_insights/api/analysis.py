"""Filing analysis endpoints."""
import logging

from fastapi import APIRouter, Depends

from filing_insights.models.schemas import AnalyzeFilingRequest, AnalyzeFilingResponse
from filing_insights.services.analysis_orchestrator import FilingAnalyzer

router = APIRouter()
logger = logging.getLogger(__name__)


def get_filing_analyzer() -> FilingAnalyzer:
    return FilingAnalyzer()


@router.post("/filing", response_model=AnalyzeFilingResponse)
async def analyze_filing(
    request: AnalyzeFilingRequest,
    analyzer: FilingAnalyzer = Depends(get_filing_analyzer),
):
    """
    Summarise a filing from its metadata and, when supplied, its extracted text.

    Model failures never surface here; a locally generated analysis is
    returned instead.
    """
    filing = request.filing
    if request.document_content:
        logger.info("Analysing document content (%s characters)", len(request.document_content))

    analysis = await analyzer.analyze(
        filing,
        document_content=request.document_content,
        use_model=request.use_model,
    )

    return AnalyzeFilingResponse(
        filing_id=filing.transaction_id,
        filing_type=filing.category,
        filing_date=filing.date,
        tier=analysis.tier.value,
        summary=analysis.result.summary,
        key_insights=analysis.result.key_insights,
        financial_highlights=analysis.result.financial_highlights,
        used_model=analysis.used_model,
    )
