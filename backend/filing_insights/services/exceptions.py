"""Error taxonomy for the document and analysis pipeline."""
from typing import Optional


class FilingInsightsError(Exception):
    """Base exception for all pipeline errors."""
    pass


class ConfigurationError(FilingInsightsError):
    """Raised at startup when a required credential is absent."""
    pass


class RetrievalError(FilingInsightsError):
    """Raised when the document service returns non-success or is unreachable."""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body_text: Optional[str] = None,
    ):
        """
        Initialize retrieval error.

        Args:
            message: Error message
            status_code: Upstream HTTP status, None when the service was unreachable
            body_text: Upstream response body
        """
        super().__init__(message)
        self.status_code = status_code
        self.body_text = body_text


class ExtractionError(FilingInsightsError):
    """Raised when HTML/text extraction fails or yields implausibly short text."""
    pass


class AnalysisModelError(FilingInsightsError):
    """Base exception for failed calls to the analysis model."""
    pass


class AnalysisRateLimitError(AnalysisModelError):
    """Raised when the model API rate limit is exceeded (HTTP 429)."""

    def __init__(self, message: str, retry_after: Optional[int] = None):
        super().__init__(message)
        self.retry_after = retry_after


class AnalysisAPIError(AnalysisModelError):
    """Raised for model API errors (4xx/5xx excluding 429) and empty completions."""

    def __init__(self, message: str, status_code: int, response_body: Optional[str] = None):
        """
        Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code
            response_body: Response body from API
        """
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class AnalysisTimeoutError(AnalysisModelError):
    """Raised when the model request times out."""
    pass
