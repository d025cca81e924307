"""Reduce extracted filing text to a bounded, finance-heavy excerpt."""
import re
from typing import List

from filing_insights.services.text_extractor import clean_text

MAX_EXCERPT_CHARS = 8_000
FALLBACK_PREFIX_CHARS = 2_000
MIN_KEYWORD_LINE_CHARS = 10
MIN_SECTION_CHARS = 50

FINANCIAL_KEYWORDS = (
    "revenue",
    "profit",
    "loss",
    "assets",
    "liabilities",
    "equity",
    "turnover",
    "gross",
    "net",
    "operating",
    "financial",
    "cash",
    "balance sheet",
    "profit and loss",
    "income statement",
    "directors",
    "shareholders",
    "capital",
    "dividend",
)

SECTION_HEADER = re.compile(
    r"^(balance sheet|profit and loss|income statement|directors|shareholders|notes)",
    re.IGNORECASE,
)


def _has_financial_content(line: str) -> bool:
    lowered = line.lower()
    return any(keyword in lowered for keyword in FINANCIAL_KEYWORDS)


def extract_key_sections(text: str) -> List[str]:
    """Group keyword-bearing lines into sections split at statement headers."""
    sections: List[str] = []
    current = ""

    for line in text.split("\n"):
        # A header only opens the next section. It is never appended to the
        # previous one, so it neither appears twice nor counts toward the
        # previous section's minimum length.
        if SECTION_HEADER.match(line):
            if len(current) > MIN_SECTION_CHARS:
                sections.append(current.strip())
            current = line + "\n"
        elif len(line) > MIN_KEYWORD_LINE_CHARS and _has_financial_content(line):
            current += line + "\n"

    if len(current) > MIN_SECTION_CHARS:
        sections.append(current.strip())

    return sections


def optimize_document_content(content: str) -> str:
    """
    Select the financially relevant parts of a document.

    Falls back to the first FALLBACK_PREFIX_CHARS characters when no key
    section is found. The result never exceeds MAX_EXCERPT_CHARS.
    """
    normalized = clean_text(content)
    sections = extract_key_sections(normalized)

    if sections:
        optimized = "\n\n".join(sections)
    else:
        optimized = normalized[:FALLBACK_PREFIX_CHARS]

    return optimized[:MAX_EXCERPT_CHARS]
