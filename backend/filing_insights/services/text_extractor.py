"""Best-effort text extraction for registry documents."""
import logging
import math
import re
from typing import Callable, List, Optional, Tuple

from bs4 import BeautifulSoup

from filing_insights.models.schemas import DocumentType, ExtractedText, RawDocument
from filing_insights.services.exceptions import ExtractionError
from filing_insights.services.format_classifier import classify_document

logger = logging.getLogger(__name__)

MIN_PARSED_TEXT_CHARS = 50
MIN_PDF_HEURISTIC_CHARS = 100
PDF_BYTES_PER_PAGE = 50_000

PDF_PLACEHOLDER_MARKER = "Content extraction would require a production PDF parser."

# Text-showing operators in uncompressed content streams look like "(Turnover) Tj"
_PARENTHESIZED_TEXT = re.compile(r"\(([A-Za-z0-9 .,;:!?'\"&%$\xa3/\-]{3,})\)")
_ASCII_RUN = re.compile(r"[A-Za-z0-9 \t\r\n.,;:!?'\"()&%$\xa3/\-]{10,}")

_HORIZONTAL_WHITESPACE = re.compile(r"[^\S\n]+")
_NEWLINE_RUNS = re.compile(r"\n+")


def clean_text(text: str) -> str:
    """Collapse whitespace runs to single spaces and newline runs to single newlines."""
    if not text:
        return ""
    collapsed = _HORIZONTAL_WHITESPACE.sub(" ", text)
    lines = (line.strip() for line in collapsed.split("\n"))
    return _NEWLINE_RUNS.sub("\n", "\n".join(lines)).strip()


def is_placeholder_text(text: Optional[str]) -> bool:
    return bool(text) and PDF_PLACEHOLDER_MARKER in text


def extract_html(content: bytes) -> str:
    """Return the visible text of an HTML document."""
    try:
        soup = BeautifulSoup(content.decode("utf-8", errors="replace"), "html.parser")
        for element in soup(["script", "style"]):
            element.decompose()
        root = soup.body or soup
        return root.get_text(separator="\n")
    except Exception as exc:
        raise ExtractionError(f"Failed to parse HTML document: {exc}") from exc


def extract_plain_text(content: bytes) -> str:
    try:
        return content.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise ExtractionError(f"Document is not valid UTF-8 text: {exc}") from exc


def _parenthesized_text(raw: str) -> str:
    return " ".join(match.group(1) for match in _PARENTHESIZED_TEXT.finditer(raw))


def _ascii_runs_text(raw: str) -> str:
    return " ".join(match.group(0) for match in _ASCII_RUN.finditer(raw))


PDF_HEURISTICS: List[Tuple[str, Callable[[str], str]]] = [
    ("parenthesized", _parenthesized_text),
    ("ascii-runs", _ascii_runs_text),
]


def pdf_placeholder_text(size_bytes: int) -> str:
    """Describe a PDF we could not read by its size alone."""
    estimated_pages = math.ceil(size_bytes / PDF_BYTES_PER_PAGE)
    return (
        "PDF Document\n"
        f"Size: {size_bytes} bytes\n"
        f"Estimated pages: {estimated_pages}\n"
        "This filing contains financial statements and regulatory information.\n"
        f"{PDF_PLACEHOLDER_MARKER}"
    )


def extract_pdf(content: bytes) -> str:
    """
    Pull readable text out of a PDF without parsing its object model.

    Each heuristic is tried in order and accepted once its cleaned output
    exceeds MIN_PDF_HEURISTIC_CHARS. When none qualifies a placeholder
    describing the document is returned, so this never raises.
    """
    raw = content.decode("latin-1")

    for name, heuristic in PDF_HEURISTICS:
        candidate = clean_text(heuristic(raw))
        if len(candidate) > MIN_PDF_HEURISTIC_CHARS:
            logger.info("PDF text recovered with %s heuristic (%s chars)", name, len(candidate))
            return candidate

    logger.info("PDF heuristics found no readable text; using placeholder for %s bytes", len(content))
    return pdf_placeholder_text(len(content))


_EXTRACTORS = {
    DocumentType.PDF: extract_pdf,
    DocumentType.HTML: extract_html,
    DocumentType.TEXT: extract_plain_text,
}


def extract_text(document: RawDocument, parse_only: bool = True) -> ExtractedText:
    """
    Convert a raw document into cleaned text.

    Args:
        document: Buffered document payload
        parse_only: When True, implausibly short non-PDF text is an error

    Returns:
        ExtractedText tagged with the detected document type

    Raises:
        ExtractionError: HTML/text decoding failed or the text is too short
    """
    document_type = classify_document(document.content_type, document.url)
    text = clean_text(_EXTRACTORS[document_type](document.content))
    logger.info("Extracted %s characters from %s document", len(text), document_type.value)

    if parse_only and (
        not text or (len(text) < MIN_PARSED_TEXT_CHARS and document_type != DocumentType.PDF)
    ):
        raise ExtractionError("Document appears to be empty or too short")

    return ExtractedText(text=text, document_type=document_type)
