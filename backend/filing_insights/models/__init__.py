"""Domain models and API schemas."""
from filing_insights.models.schemas import (
    AnalysisResult,
    AnalyzeFilingRequest,
    AnalyzeFilingResponse,
    CachedEntry,
    CacheStats,
    DocumentExtraction,
    DocumentType,
    ExtractedText,
    FilingCategory,
    FilingRef,
    RawDocument,
)

__all__ = [
    "AnalysisResult",
    "AnalyzeFilingRequest",
    "AnalyzeFilingResponse",
    "CachedEntry",
    "CacheStats",
    "DocumentExtraction",
    "DocumentType",
    "ExtractedText",
    "FilingCategory",
    "FilingRef",
    "RawDocument",
]
