"""Deterministic analyses used when the model is skipped or unavailable."""

from __future__ import annotations

import re
from typing import Dict, List

from filing_insights.models.schemas import (
    AnalysisResult,
    FilingCategory,
    FilingRef,
    placeholder_highlights,
)

FINANCIAL_TERMS = re.compile(r"revenue|profit|assets|liabilities|turnover|income|balance", re.IGNORECASE)

DEFAULT_CONTENT_INSIGHTS = [
    "Comprehensive financial and regulatory information provided",
    "Detailed corporate governance and compliance data included",
    "Complete statutory disclosures as required by UK company law",
]

# (keywords, insight) pairs checked against lower-cased document text
CONTENT_INSIGHT_RULES = [
    (("revenue", "turnover"), "Comprehensive revenue and turnover analysis included in financial statements"),
    (("profit", "loss"), "Detailed profit and loss account with performance metrics"),
    (("assets", "liabilities"), "Complete balance sheet with assets, liabilities, and equity breakdown"),
    (("directors", "shareholders"), "Corporate governance details including director and shareholder information"),
    (("cash", "flow"), "Cash flow statement with liquidity and working capital analysis"),
    (("audit", "auditor"), "Independent audit report with professional opinion on financial statements"),
]

METADATA_TEMPLATES: Dict[FilingCategory, Dict[str, object]] = {
    FilingCategory.ACCOUNTS: {
        "summary": (
            "This annual accounts filing from {year} provides comprehensive financial statements "
            "including balance sheet, profit and loss account, and cash flow statement. The document "
            "offers detailed insights into the company's financial performance, position, and cash "
            "flows during the reporting period."
        ),
        "insights": [
            "Comprehensive financial performance analysis",
            "Balance sheet showing assets, liabilities, and equity",
            "Profit and loss statement with revenue and expense breakdown",
            "Cash flow analysis and liquidity assessment",
        ],
    },
    FilingCategory.ANNUAL_RETURN: {
        "summary": (
            "This annual return filing from {year} contains essential corporate information including "
            "registered office address, directors, shareholders, and share capital details. It provides "
            "a snapshot of the company's current structure and ownership."
        ),
        "insights": [
            "Current corporate structure and governance",
            "Director and shareholder information",
            "Registered office and contact details",
            "Share capital and ownership structure",
        ],
    },
    FilingCategory.CONFIRMATION_STATEMENT: {
        "summary": (
            "This confirmation statement from {year} confirms that the company's information on the "
            "public register is accurate and up-to-date. It includes details about directors, "
            "shareholders, and registered office address."
        ),
        "insights": [
            "Confirmation of accurate public register information",
            "Updated director and shareholder details",
            "Current registered office address",
            "Compliance with Companies Act requirements",
        ],
    },
    FilingCategory.OTHER: {
        "summary": (
            "This {filing_type} filing from {year} contains important regulatory and financial "
            "information for the company. The document provides statutory disclosures required by "
            "Companies House and offers insights into the company's operational and financial status "
            "during the reporting period."
        ),
        "insights": [
            "Regulatory compliance filing",
            "Financial and operational information",
            "Corporate governance details",
            "Statutory declarations and confirmations",
        ],
    },
}

ENHANCED_SUMMARIES: Dict[FilingCategory, str] = {
    FilingCategory.ACCOUNTS: (
        "This comprehensive annual accounts filing from {year} represents a detailed financial report "
        "containing approximately {word_count} words of financial data. The document provides complete "
        "statutory financial statements including a detailed balance sheet showing the company's assets, "
        "liabilities, and equity position; comprehensive profit and loss account with revenue, expenses, "
        "and profitability analysis; and cash flow statement demonstrating liquidity and cash management. "
        "The filing also includes detailed notes to the accounts, director's report, and auditor's "
        "opinion, offering complete transparency into the company's financial performance, position, and "
        "compliance with UK accounting standards."
    ),
    FilingCategory.ANNUAL_RETURN: (
        "This annual return filing from {year} serves as a comprehensive corporate compliance document "
        "containing approximately {word_count} words of detailed company information. The filing includes "
        "details of current directors, shareholder information including share capital structure and "
        "voting rights, the registered office address, and confirmation of the company's legal status "
        "and compliance with Companies Act requirements. This document provides a snapshot of the "
        "company's corporate structure, governance framework, and ownership composition."
    ),
    FilingCategory.CONFIRMATION_STATEMENT: (
        "This confirmation statement from {year} represents a statutory compliance filing containing "
        "approximately {word_count} words of verified company information. The document confirms that the "
        "information on the public register is accurate and up-to-date, including current director "
        "details, the shareholder register with shareholdings and voting rights, the registered office "
        "address, and share capital information including any changes during the reporting period."
    ),
    FilingCategory.OTHER: (
        "This {filing_type} filing from {year} contains approximately {word_count} words of regulatory "
        "and financial information. The document provides insights into the company's operations, "
        "governance structure, and financial status, including statutory disclosures required by "
        "Companies House, corporate governance information, and financial performance data."
    ),
}


def _filing_label(filing: FilingRef) -> str:
    if filing.category != FilingCategory.OTHER:
        return filing.category.value
    return filing.registry_category or filing.type or "filing"


def _template_values(filing: FilingRef) -> Dict[str, object]:
    return {"year": filing.date.year, "filing_type": _filing_label(filing)}


def analyze_content_basically(filing: FilingRef, document_content: str) -> AnalysisResult:
    """Summarise document content from word counts and vocabulary alone."""
    word_count = len(document_content.split())
    has_financial_terms = bool(FINANCIAL_TERMS.search(document_content))
    content_kind = "financial and business" if has_financial_terms else "regulatory"

    return AnalysisResult(
        summary=(
            f"This {filing.category.value} document contains {word_count} words of {content_kind} "
            f"information. The filing provides statutory disclosures required by Companies House "
            f"for the period ending {filing.date.isoformat()}."
        ),
        key_insights=[
            f"Document contains {word_count} words of content",
            "Financial terminology present in document" if has_financial_terms else "Regulatory compliance document",
            "Filed in accordance with Companies House requirements",
            "Contains statutory business disclosures",
        ],
        financial_highlights=placeholder_highlights(),
    )


def generate_metadata_analysis(filing: FilingRef) -> AnalysisResult:
    """Canned, category-specific analysis built from filing metadata only."""
    template = METADATA_TEMPLATES[filing.category]
    return AnalysisResult(
        summary=str(template["summary"]).format(**_template_values(filing)),
        key_insights=list(template["insights"]),
        financial_highlights=placeholder_highlights(),
    )


def detect_content_insights(document_content: str) -> List[str]:
    content = document_content.lower()
    return [
        insight
        for keywords, insight in CONTENT_INSIGHT_RULES
        if any(keyword in content for keyword in keywords)
    ]


def generate_enhanced_analysis(filing: FilingRef, document_content: str) -> AnalysisResult:
    """Category narrative plus insights detected from the document's vocabulary."""
    # Five characters per word is close enough for a narrative estimate
    word_count = round(len(document_content) / 5)
    summary = ENHANCED_SUMMARIES[filing.category].format(
        word_count=word_count, **_template_values(filing)
    )

    return AnalysisResult(
        summary=summary,
        key_insights=detect_content_insights(document_content) or list(DEFAULT_CONTENT_INSIGHTS),
        financial_highlights=placeholder_highlights(),
    )
