"""Shared fixtures for the Filing Insights test suite."""
from datetime import date

import httpx
import pytest

from filing_insights.config import Settings
from filing_insights.models.schemas import FilingRef
from filing_insights.services.exceptions import AnalysisAPIError


def streamed_response(status_code: int, body: bytes, headers: dict = None) -> httpx.Response:
    """Upstream response whose body is only read when the caller streams it."""
    headers = {"content-length": str(len(body)), **(headers or {})}
    return httpx.Response(status_code, headers=headers, stream=httpx.ByteStream(body))


class FakeModel:
    """Stand-in for the Gemini client that records every prompt it receives."""

    def __init__(self, completion: str = "", error: Exception = None):
        self.completion = completion
        self.error = error
        self.calls = []

    async def generate(self, system_prompt: str, prompt: str) -> str:
        self.calls.append((system_prompt, prompt))
        if self.error is not None:
            raise self.error
        return self.completion


@pytest.fixture
def settings():
    """Settings with dummy credentials and no .env lookup."""
    return Settings(
        _env_file=None,
        companies_house_api_key="test-key",
        gemini_api_key="gemini-key",
    )


@pytest.fixture
def accounts_filing():
    return FilingRef(
        category="accounts",
        description="Total exemption full accounts made up to 31 March 2023",
        date=date(2023, 6, 30),
        pages=12,
        transaction_id="MzM4NjYxOTk3NmFkaXF6a2N4",
        type="AA",
    )


@pytest.fixture
def failing_model():
    return FakeModel(error=AnalysisAPIError("Gemini API error: 503", status_code=503))
