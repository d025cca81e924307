"""Tests for the Gemini REST client and its error mapping."""
import asyncio
import json

import httpx
import pytest

from filing_insights.services.analysis_fallback import generate_metadata_analysis
from filing_insights.services.analysis_orchestrator import FilingAnalyzer
from filing_insights.services.exceptions import (
    AnalysisAPIError,
    AnalysisRateLimitError,
    AnalysisTimeoutError,
)
from filing_insights.services.gemini_client import GeminiClient


def run(coro):
    return asyncio.run(coro)


def completion(*texts):
    return {"candidates": [{"content": {"parts": [{"text": text} for text in texts]}}]}


def make_client(settings, handler):
    return GeminiClient(settings, transport=httpx.MockTransport(handler))


def test_request_shape(settings):
    seen = []

    def handler(request):
        seen.append(request)
        return httpx.Response(200, json=completion("Summary\nAll good."))

    text = run(make_client(settings, handler).generate("system text", "user prompt"))

    assert text == "Summary\nAll good."
    request = seen[0]
    assert request.url.path == "/v1beta/models/gemini-2.5-flash:generateContent"
    assert request.url.params["key"] == "gemini-key"
    body = json.loads(request.content)
    assert body["systemInstruction"] == {"parts": [{"text": "system text"}]}
    assert body["contents"] == [{"role": "user", "parts": [{"text": "user prompt"}]}]
    assert body["generationConfig"] == {"maxOutputTokens": 1000, "temperature": 0.2}


def test_multiple_parts_are_joined(settings):
    def handler(request):
        return httpx.Response(200, json=completion("Summary\n", "Strong year."))

    assert run(make_client(settings, handler).generate("s", "p")) == "Summary\nStrong year."


def test_rate_limit(settings):
    def handler(request):
        return httpx.Response(429, headers={"Retry-After": "30"}, text="quota")

    with pytest.raises(AnalysisRateLimitError) as exc_info:
        run(make_client(settings, handler).generate("s", "p"))

    assert exc_info.value.retry_after == 30


@pytest.mark.parametrize("status_code", [400, 403, 500, 503])
def test_error_status(settings, status_code):
    def handler(request):
        return httpx.Response(status_code, text="failure")

    with pytest.raises(AnalysisAPIError) as exc_info:
        run(make_client(settings, handler).generate("s", "p"))

    assert exc_info.value.status_code == status_code
    assert exc_info.value.response_body == "failure"


def test_timeout(settings):
    def handler(request):
        raise httpx.ReadTimeout("slow", request=request)

    with pytest.raises(AnalysisTimeoutError):
        run(make_client(settings, handler).generate("s", "p"))


def test_connection_failure(settings):
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    with pytest.raises(AnalysisAPIError) as exc_info:
        run(make_client(settings, handler).generate("s", "p"))

    assert exc_info.value.status_code == 500


@pytest.mark.parametrize(
    "payload",
    [
        {},
        {"candidates": []},
        {"candidates": [{"finishReason": "SAFETY"}]},
        {"candidates": [{"content": {"parts": [{"text": ""}]}}]},
        ["unexpected"],
        {"candidates": {"content": "not a list"}},
        {"candidates": ["not a dict"]},
        {"candidates": [{"content": "not a dict"}]},
        {"candidates": [{"content": {"parts": [["nested"], {"text": 42}]}}]},
    ],
)
def test_no_text_is_api_error(settings, payload):
    def handler(request):
        return httpx.Response(200, json=payload)

    with pytest.raises(AnalysisAPIError, match="no text"):
        run(make_client(settings, handler).generate("s", "p"))


def test_non_json_body_is_api_error(settings):
    def handler(request):
        return httpx.Response(200, text="<html>gateway page</html>")

    with pytest.raises(AnalysisAPIError):
        run(make_client(settings, handler).generate("s", "p"))


def test_malformed_completion_falls_back_to_local_analysis(settings, accounts_filing):
    def handler(request):
        return httpx.Response(200, json=["unexpected"])

    analyzer = FilingAnalyzer(settings, model=make_client(settings, handler))
    analysis = run(analyzer.analyze(accounts_filing))

    assert analysis.used_model is False
    assert analysis.result == generate_metadata_analysis(accounts_filing)
