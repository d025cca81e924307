"""Companies House document retrieval service."""
import logging
import re
from typing import AsyncIterator, Dict, Optional

import httpx

from filing_insights.config import Settings, get_settings
from filing_insights.models.schemas import RawDocument
from filing_insights.services.exceptions import RetrievalError

logger = logging.getLogger(__name__)

_DOCUMENT_ID = re.compile(r"/document/([^/]+)/content")

_EXTENSIONS = {
    "application/pdf": "pdf",
    "text/html": "html",
    "application/xhtml+xml": "html",
    "text/plain": "txt",
}


def attachment_filename(url: str, content_type: str) -> str:
    """Name a downloaded document after its registry id where the URL carries one."""
    media_type = (content_type or "application/pdf").split(";")[0].strip().lower()
    extension = _EXTENSIONS.get(media_type, "pdf")
    match = _DOCUMENT_ID.search(url)
    stem = match.group(1) if match else "document"
    return f"{stem}.{extension}"


class ProxiedDocument:
    """An upstream response streamed through to the caller without buffering."""

    def __init__(self, url: str, response: httpx.Response, client: httpx.AsyncClient):
        self.url = url
        self._response = response
        self._client = client
        self._closed = False

    @property
    def content_type(self) -> str:
        return self._response.headers.get("content-type") or "application/pdf"

    @property
    def content_length(self) -> Optional[str]:
        return self._response.headers.get("content-length")

    @property
    def filename(self) -> str:
        return attachment_filename(self.url, self.content_type)

    def headers(self) -> Dict[str, str]:
        headers = {
            "Content-Type": self.content_type,
            "Content-Disposition": f'attachment; filename="{self.filename}"',
        }
        if self.content_length:
            headers["Content-Length"] = self.content_length
        # Raw bytes are forwarded, so any transfer compression must be declared too
        encoding = self._response.headers.get("content-encoding")
        if encoding:
            headers["Content-Encoding"] = encoding
        return headers

    async def iter_bytes(self) -> AsyncIterator[bytes]:
        try:
            async for chunk in self._response.aiter_raw():
                yield chunk
        finally:
            await self.aclose()

    async def aclose(self) -> None:
        if self._closed:
            return
        self._closed = True
        await self._response.aclose()
        await self._client.aclose()


class DocumentFetcher:
    """Single-shot client for the registry's document content endpoint."""

    def __init__(
        self,
        settings: Optional[Settings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """
        Initialize the fetcher.

        Args:
            settings: Settings carrying the Companies House API key and user agent
            transport: Optional httpx transport, used to stub the registry in tests
        """
        settings = settings or get_settings()
        self.api_key = settings.companies_house_api_key
        self.user_agent = settings.user_agent
        self._transport = transport

    def _client(self) -> httpx.AsyncClient:
        # The API key is the username; the password is always empty
        return httpx.AsyncClient(
            auth=httpx.BasicAuth(self.api_key, ""),
            headers={"User-Agent": self.user_agent},
            transport=self._transport,
            follow_redirects=True,
        )

    async def fetch_document(self, url: str) -> RawDocument:
        """
        Download the full document payload for parsing.

        Raises:
            RetrievalError: Upstream returned non-success or was unreachable
        """
        logger.info("Downloading document from: %s", url)
        try:
            async with self._client() as client:
                response = await client.get(url)
        except httpx.HTTPError as exc:
            raise RetrievalError(f"Document service unreachable: {exc}") from exc

        if response.is_error:
            raise RetrievalError(
                f"Failed to download document: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                body_text=response.text,
            )

        content_type = response.headers.get("content-type", "")
        logger.info("Downloaded %s bytes (%s)", len(response.content), content_type or "unknown type")
        return RawDocument(content=response.content, content_type=content_type, url=url)

    async def open_stream(self, url: str) -> ProxiedDocument:
        """
        Open the document for pass-through streaming.

        The caller owns the returned document and must exhaust ``iter_bytes``
        or call ``aclose``.

        Raises:
            RetrievalError: Upstream returned non-success or was unreachable
        """
        logger.info("Proxying document from: %s", url)
        client = self._client()
        try:
            response = await client.send(client.build_request("GET", url), stream=True)
        except httpx.HTTPError as exc:
            await client.aclose()
            raise RetrievalError(f"Document service unreachable: {exc}") from exc

        if response.is_error:
            body = await response.aread()
            await response.aclose()
            await client.aclose()
            raise RetrievalError(
                f"Failed to download document: {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                body_text=body.decode("utf-8", errors="replace"),
            )

        return ProxiedDocument(url, response, client)


def get_document_fetcher() -> DocumentFetcher:
    return DocumentFetcher(get_settings())
