"""Turn free-text model completions into structured analysis results."""
import re
from typing import Dict, List, Optional

from filing_insights.models.schemas import AnalysisResult, placeholder_highlights

DEFAULT_SUMMARY = (
    "Analysis of this financial document reveals important business and regulatory information."
)
DEFAULT_INSIGHTS = [
    "Document contains detailed financial information",
    "Company maintains regulatory compliance",
    "Financial position documented as per Companies House requirements",
]

_NUMBERED_LINE = re.compile(r"^\d+\.")
_BULLET_ITEM = re.compile(r"^[-•*]\s")
_NUMBERED_ITEM = re.compile(r"^\d+\.\s")
_LIST_MARKER = re.compile(r"^(?:[-•*]|\d+\.)\s+")
_FIGURE = re.compile(r"\d[\d,]*")

HIGHLIGHT_GROUPS = {
    "revenue": ("revenue", "turnover"),
    "profit": ("profit", "income"),
    "assets": ("assets",),
    "liabilities": ("liabilities",),
}


def extract_section(content: str, section_name: str) -> Optional[str]:
    """
    Collect the lines that follow the first line mentioning ``section_name``.

    Stops at a blank line or a numbered heading such as ``2. Key insights``.
    """
    name = section_name.lower()
    in_section = False
    parts: List[str] = []

    for line in content.split("\n"):
        if not in_section:
            in_section = name in line.lower()
            continue
        if line.strip() == "" or _NUMBERED_LINE.match(line):
            break
        parts.append(line.strip())

    section = " ".join(parts).strip()
    return section or None


def extract_list_items(content: str, section_name: str) -> Optional[List[str]]:
    """Collect bullet or numbered items after the line mentioning ``section_name``."""
    name = section_name.lower()
    in_section = False
    items: List[str] = []

    for line in content.split("\n"):
        if not in_section:
            in_section = name in line.lower()
            continue
        trimmed = line.strip()
        if _BULLET_ITEM.match(trimmed) or _NUMBERED_ITEM.match(trimmed):
            items.append(_NUMBERED_ITEM.sub("", _BULLET_ITEM.sub("", trimmed, count=1), count=1))
        elif trimmed == "":
            break

    return items or None


def extract_financial_highlights(content: str) -> Optional[Dict[str, str]]:
    """Pick the first figure on lines mentioning revenue, profit, assets or liabilities."""
    highlights: Dict[str, str] = {}

    for line in content.lower().split("\n"):
        body = _LIST_MARKER.sub("", line.strip(), count=1)
        figure = _FIGURE.search(body)
        if not figure:
            continue
        for key, keywords in HIGHLIGHT_GROUPS.items():
            if key not in highlights and any(keyword in body for keyword in keywords):
                highlights[key] = f"£{figure.group(0)}"

    return highlights or None


def extract_first_paragraph(content: str) -> Optional[str]:
    paragraphs = [p.strip() for p in content.split("\n\n") if len(p.strip()) > 20]
    return paragraphs[0] if paragraphs else None


def parse_model_response(content: str) -> AnalysisResult:
    """Build an AnalysisResult from a completion, substituting defaults where needed."""
    summary = (
        extract_section(content, "summary")
        or extract_first_paragraph(content)
        or DEFAULT_SUMMARY
    )
    insights = (
        extract_list_items(content, "insights")
        or extract_list_items(content, "key")
        or list(DEFAULT_INSIGHTS)
    )
    highlights = placeholder_highlights()
    highlights.update(extract_financial_highlights(content) or {})

    return AnalysisResult(
        summary=summary,
        key_insights=insights,
        financial_highlights=highlights,
    )
