"""
Custom exceptions for the page parser.

Error policy:
  - Malformed HTML     → never raised; the builder recovers best-effort.
  - LinkResolutionError → per anchor; analytics.links() skips and logs it
                          unless called with strict=True.
  - SanitizerError      → NON-FATAL: the normalized HTML passes through, warning logged.
  - FetchError          → FAIL HARD: there is nothing to parse without a response body.
  - ConfigError         → FAIL HARD at startup.
"""

from typing import Optional


class PageParserError(Exception):
    """Base exception for all page parser errors."""

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


class LinkResolutionError(PageParserError):
    """
    Raised when an anchor's href cannot be turned into an absolute URL.

    Either the href attribute is missing, or joining it with the document's
    base URL does not produce a valid absolute URL.
    """

    def __init__(
        self,
        message: str,
        href: Optional[str] = None,
        base_url: Optional[str] = None,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.href = href
        self.base_url = base_url


class SanitizerError(PageParserError):
    """
    Raised inside the sanitizer when the tokenizer fails.

    Non-fatal - the sanitizer catches it, logs a warning and
    passes through the string-normalized HTML.
    """
    pass


class FetchError(PageParserError):
    """Raised when the HTTP request for a page fails."""

    def __init__(
        self,
        message: str,
        url: str,
        status_code: Optional[int] = None,
        details: Optional[dict] = None
    ):
        super().__init__(message, details)
        self.url = url
        self.status_code = status_code  # None for transport errors (DNS, timeout, ...)

    def to_response(self) -> dict:
        """Convert to a JSON-friendly error payload for the CLI."""
        return {
            "error": "FetchError",
            "message": self.message,
            "url": self.url,
            "status_code": self.status_code,
            "details": self.details
        }


class ConfigError(PageParserError):
    """Raised when an environment setting has an invalid value."""
    pass
