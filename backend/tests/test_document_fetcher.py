"""Tests for the registry document fetcher, using httpx.MockTransport."""
import asyncio
import base64
import gzip

import httpx
import pytest

from conftest import streamed_response
from filing_insights.models.schemas import DocumentType
from filing_insights.services.document_fetcher import DocumentFetcher, attachment_filename
from filing_insights.services.document_service import DocumentService
from filing_insights.services.exceptions import ExtractionError, RetrievalError

DOCUMENT_URL = "https://document-api.company-information.service.gov.uk/document/abc123/content"
PDF_BYTES = b"%PDF-1.4\n" + b"\x00\x01binary-payload\x02" * 64


def run(coro):
    return asyncio.run(coro)


def make_fetcher(settings, handler):
    return DocumentFetcher(settings, transport=httpx.MockTransport(handler))


class TestFetchDocument:
    def test_sends_basic_auth_and_user_agent(self, settings):
        seen = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, content=PDF_BYTES, headers={"content-type": "application/pdf"})

        document = run(make_fetcher(settings, handler).fetch_document(DOCUMENT_URL))

        expected = "Basic " + base64.b64encode(b"test-key:").decode("ascii")
        assert seen[0].headers["authorization"] == expected
        assert seen[0].headers["user-agent"] == "UK-Company-Insights/1.0"
        assert document.content == PDF_BYTES
        assert document.content_type == "application/pdf"
        assert document.url == DOCUMENT_URL

    def test_upstream_error_keeps_status_and_body(self, settings):
        def handler(request):
            return httpx.Response(404, text="document not found")

        with pytest.raises(RetrievalError) as exc_info:
            run(make_fetcher(settings, handler).fetch_document(DOCUMENT_URL))

        assert exc_info.value.status_code == 404
        assert exc_info.value.body_text == "document not found"

    def test_unreachable_service_has_no_status(self, settings):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        with pytest.raises(RetrievalError) as exc_info:
            run(make_fetcher(settings, handler).fetch_document(DOCUMENT_URL))

        assert exc_info.value.status_code is None

    def test_redirects_are_followed(self, settings):
        def handler(request):
            if request.url.host == "document-api.company-information.service.gov.uk":
                return httpx.Response(302, headers={"location": "https://s3.example.com/abc123.pdf"})
            return httpx.Response(200, content=PDF_BYTES, headers={"content-type": "application/pdf"})

        document = run(make_fetcher(settings, handler).fetch_document(DOCUMENT_URL))

        assert document.content == PDF_BYTES


class TestOpenStream:
    def test_proxy_headers_and_bytes(self, settings):
        def handler(request):
            return streamed_response(200, PDF_BYTES, {"content-type": "application/pdf"})

        async def consume():
            proxied = await make_fetcher(settings, handler).open_stream(DOCUMENT_URL)
            headers = proxied.headers()
            body = b"".join([chunk async for chunk in proxied.iter_bytes()])
            return headers, body

        headers, body = run(consume())

        assert body == PDF_BYTES
        assert headers["Content-Type"] == "application/pdf"
        assert headers["Content-Disposition"] == 'attachment; filename="abc123.pdf"'
        assert headers["Content-Length"] == str(len(PDF_BYTES))

    def test_compressed_bytes_are_forwarded_raw(self, settings):
        compressed = gzip.compress(PDF_BYTES)

        def handler(request):
            return streamed_response(
                200,
                compressed,
                {"content-type": "application/pdf", "content-encoding": "gzip"},
            )

        async def consume():
            proxied = await make_fetcher(settings, handler).open_stream(DOCUMENT_URL)
            headers = proxied.headers()
            body = b"".join([chunk async for chunk in proxied.iter_bytes()])
            await proxied.aclose()
            return headers, body

        headers, body = run(consume())

        assert body == compressed
        assert headers["Content-Encoding"] == "gzip"
        assert headers["Content-Length"] == str(len(compressed))

    def test_missing_content_type_defaults_to_pdf(self, settings):
        def handler(request):
            return streamed_response(200, PDF_BYTES)

        async def open_and_close():
            proxied = await make_fetcher(settings, handler).open_stream(DOCUMENT_URL)
            await proxied.aclose()
            return proxied.content_type

        assert run(open_and_close()) == "application/pdf"

    def test_upstream_error_before_streaming(self, settings):
        def handler(request):
            return httpx.Response(401, text="invalid api key")

        with pytest.raises(RetrievalError) as exc_info:
            run(make_fetcher(settings, handler).open_stream(DOCUMENT_URL))

        assert exc_info.value.status_code == 401
        assert exc_info.value.body_text == "invalid api key"


class TestAttachmentFilename:
    @pytest.mark.parametrize(
        "url,content_type,expected",
        [
            (DOCUMENT_URL, "application/pdf", "abc123.pdf"),
            (DOCUMENT_URL, "text/html; charset=utf-8", "abc123.html"),
            (DOCUMENT_URL, "", "abc123.pdf"),
            ("https://example.com/files/report", "text/plain", "document.txt"),
        ],
    )
    def test_names(self, url, content_type, expected):
        assert attachment_filename(url, content_type) == expected


class TestDocumentService:
    def test_html_document_extracted(self, settings):
        html = (
            b"<html><body><h1>Directors' report</h1>"
            b"<p>The directors present their report and the financial statements for the year.</p>"
            b"</body></html>"
        )

        def handler(request):
            return httpx.Response(200, content=html, headers={"content-type": "text/html"})

        service = DocumentService(make_fetcher(settings, handler))
        extraction = run(service.extract_text(DOCUMENT_URL))

        assert extraction.success is True
        assert extraction.document_type == DocumentType.HTML
        assert extraction.extracted_text.startswith("Directors' report")
        assert extraction.content_length == len(extraction.extracted_text)
        assert extraction.original_url == DOCUMENT_URL

    def test_short_text_is_extraction_error(self, settings):
        def handler(request):
            return httpx.Response(200, content=b"n/a", headers={"content-type": "text/plain"})

        service = DocumentService(make_fetcher(settings, handler))

        with pytest.raises(ExtractionError):
            run(service.extract_text(DOCUMENT_URL))
