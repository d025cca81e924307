"""Pydantic schemas for API models."""
from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

HIGHLIGHT_KEYS = ("revenue", "profit", "assets", "liabilities")
HIGHLIGHT_PLACEHOLDER = "Requires detailed analysis"


def placeholder_highlights() -> Dict[str, str]:
    return {key: HIGHLIGHT_PLACEHOLDER for key in HIGHLIGHT_KEYS}


class FilingCategory(str, Enum):
    ACCOUNTS = "accounts"
    ANNUAL_RETURN = "annual-return"
    CONFIRMATION_STATEMENT = "confirmation-statement"
    OTHER = "other"

    @classmethod
    def from_raw(cls, value: Any) -> "FilingCategory":
        """Map a registry category string onto the categories the analyzer knows."""
        if isinstance(value, cls):
            return value
        raw = str(value or "").strip().lower()
        if raw == "annual-returns":
            return cls.ANNUAL_RETURN
        try:
            return cls(raw)
        except ValueError:
            return cls.OTHER


class DocumentType(str, Enum):
    PDF = "PDF"
    HTML = "HTML"
    TEXT = "TEXT"


# Filing schemas
class FilingRef(BaseModel):
    """A filing as listed in a company's filing history."""

    model_config = ConfigDict(frozen=True)

    category: FilingCategory = FilingCategory.OTHER
    description: str = ""
    date: dt.date
    pages: Optional[int] = None
    barcode: Optional[str] = None
    transaction_id: Optional[str] = None
    type: Optional[str] = None
    # Category string as the registry sent it, kept for display
    registry_category: Optional[str] = None

    @model_validator(mode="before")
    @classmethod
    def _keep_registry_category(cls, data: Any) -> Any:
        if isinstance(data, dict) and not data.get("registry_category"):
            raw = data.get("category")
            if isinstance(raw, str) and raw.strip():
                data = {**data, "registry_category": raw.strip()}
        return data

    @field_validator("category", mode="before")
    @classmethod
    def _normalize_category(cls, value: Any) -> FilingCategory:
        return FilingCategory.from_raw(value)


# Document schemas
@dataclass
class RawDocument:
    content: bytes
    content_type: str
    url: str


@dataclass
class ExtractedText:
    text: str
    document_type: DocumentType


class DocumentRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    document_url: str = Field(default="", alias="documentUrl")
    parse_only: bool = Field(default=False, alias="parseOnly")


class DocumentExtraction(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    document_type: DocumentType = Field(alias="documentType")
    content_length: int = Field(alias="contentLength")
    extracted_text: str = Field(alias="extractedText")
    original_url: str = Field(alias="originalUrl")


# Analysis schemas
class AnalysisResult(BaseModel):
    summary: str
    key_insights: List[str]
    financial_highlights: Dict[str, str] = Field(default_factory=placeholder_highlights)

    @model_validator(mode="after")
    def _check_complete(self) -> "AnalysisResult":
        if not self.summary.strip():
            raise ValueError("summary must not be empty")
        if not self.key_insights:
            raise ValueError("key_insights must contain at least one entry")
        return self


class AnalyzeFilingRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    filing: FilingRef
    document_content: Optional[str] = Field(default=None, alias="documentContent")
    use_model: bool = Field(default=True, alias="useModel")


class AnalyzeFilingResponse(BaseModel):
    filing_id: Optional[str] = None
    filing_type: FilingCategory
    filing_date: dt.date
    tier: str
    summary: str
    key_insights: List[str]
    financial_highlights: Dict[str, str]
    used_model: bool = False


# Cache schemas
class CachedEntry(BaseModel):
    summary: str
    insights: List[str]
    financial_highlights: Optional[Dict[str, str]] = None
    timestamp: int
    document_url: str


class CacheStats(BaseModel):
    total: int = 0
    size: int = 0
