"""Document download and parsing endpoints."""
import logging
from typing import Optional

from fastapi import APIRouter, Body, Depends, HTTPException
from fastapi.responses import StreamingResponse
from starlette.background import BackgroundTask

from filing_insights.models.schemas import DocumentRequest
from filing_insights.services.document_fetcher import get_document_fetcher
from filing_insights.services.document_service import DocumentService

router = APIRouter()
logger = logging.getLogger(__name__)


def get_document_service() -> DocumentService:
    return DocumentService(get_document_fetcher())


async def _process_document(document_url: Optional[str], parse_only: bool, service: DocumentService):
    if not document_url:
        raise HTTPException(status_code=400, detail="Document URL is required")

    if parse_only:
        return await service.extract_text(document_url, parse_only=True)

    proxied = await service.open_proxy(document_url)
    logger.info("Proxying document directly: %s bytes", proxied.content_length or "unknown")
    return StreamingResponse(
        proxied.iter_bytes(),
        media_type=proxied.content_type,
        headers=proxied.headers(),
        background=BackgroundTask(proxied.aclose),
    )


@router.get("/download", response_model=None)
async def download_document(
    documentUrl: Optional[str] = None,
    parseOnly: bool = False,
    service: DocumentService = Depends(get_document_service),
):
    """Stream a document through, or return its extracted text when parseOnly is set."""
    return await _process_document(documentUrl, parseOnly, service)


@router.post("/download", response_model=None)
async def download_document_post(
    request: DocumentRequest = Body(...),
    service: DocumentService = Depends(get_document_service),
):
    """POST variant of the download endpoint taking a JSON body."""
    return await _process_document(request.document_url, request.parse_only, service)
