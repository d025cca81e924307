"""Document download and text extraction entry points."""
import logging
from typing import Optional

from filing_insights.models.schemas import DocumentExtraction
from filing_insights.services.document_fetcher import DocumentFetcher, ProxiedDocument
from filing_insights.services.text_extractor import extract_text

logger = logging.getLogger(__name__)


class DocumentService:
    """Fetch a registry document and either stream it or extract its text."""

    def __init__(self, fetcher: Optional[DocumentFetcher] = None):
        self.fetcher = fetcher or DocumentFetcher()

    async def extract_text(self, document_url: str, parse_only: bool = True) -> DocumentExtraction:
        """
        Download a document and return its cleaned text.

        Raises:
            RetrievalError: The document could not be downloaded
            ExtractionError: Extraction failed or produced too little text
        """
        document = await self.fetcher.fetch_document(document_url)
        extracted = extract_text(document, parse_only=parse_only)
        return DocumentExtraction(
            document_type=extracted.document_type,
            content_length=len(extracted.text),
            extracted_text=extracted.text,
            original_url=document_url,
        )

    async def open_proxy(self, document_url: str) -> ProxiedDocument:
        return await self.fetcher.open_stream(document_url)
