"""Pick an extraction strategy from a document's declared type and URL."""
from typing import Optional
from urllib.parse import urlparse

from filing_insights.models.schemas import DocumentType


def classify_document(content_type: Optional[str], url: Optional[str]) -> DocumentType:
    """
    Classify a document as PDF, HTML or plain text.

    The declared content type wins; the URL suffix is only consulted when the
    content type is not recognised. Anything else is handled as plain text.
    """
    declared = (content_type or "").lower()
    if "application/pdf" in declared:
        return DocumentType.PDF
    if "text/html" in declared:
        return DocumentType.HTML

    path = urlparse(url or "").path.lower()
    if path.endswith(".pdf"):
        return DocumentType.PDF
    if path.endswith((".html", ".htm")):
        return DocumentType.HTML

    return DocumentType.TEXT
