"""
Main orchestrator for the page parser.

Wires the stages together: Fetcher → (Sanitizer) → builder → analytics.
Only the builder and analytics are core; fetching and sanitizing are
optional collaborators around them.
"""

from typing import Optional

from .builder import build
from .sanitizer import Sanitizer
from .fetcher import Fetcher
from .analytics import summarize
from .config import Settings, load_settings
from .schemas import Document, PageReport
from .logger import get_module_logger, setup_logger

logger = get_module_logger("main")


class PageParser:
    """
    Fetches and parses pages according to Settings.

    Stages:
    1. Fetcher: GET the page (parse_url only)
    2. Sanitizer: allow-list filtering (when settings.sanitize)
    3. builder: HTML → Document
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        fetcher: Optional[Fetcher] = None,
        sanitizer: Optional[Sanitizer] = None,
        log_level: Optional[int] = None
    ):
        self.settings = settings or load_settings()

        if log_level is not None:
            setup_logger(level=log_level)

        self.fetcher = fetcher or Fetcher(
            timeout=self.settings.timeout,
            user_agent=self.settings.user_agent
        )
        self.sanitizer = sanitizer or Sanitizer(backend=self.settings.backend)

    def parse(self, html: str, base_url: Optional[str] = None) -> Document:
        """
        Build a Document from an HTML string.

        Args:
            html: Raw HTML string
            base_url: URL for link resolution (default: settings.base_url)

        Returns:
            Document
        """
        base_url = base_url if base_url is not None else self.settings.base_url

        if self.settings.sanitize:
            sanitized = self.sanitizer.sanitize(html)
            for warning in sanitized.warnings:
                logger.debug(f"Sanitizer: {warning}")
            html = sanitized.html

        document = build(
            html,
            base_url=base_url,
            text_policy=self.settings.text_policy,
            backend=self.settings.backend
        )

        logger.info(f"Parsed {len(document)} nodes from {base_url or '<no base>'}")
        return document

    def parse_url(self, url: Optional[str] = None) -> Document:
        """
        Fetch a page and parse it, resolving links against the effective URL.

        Raises:
            FetchError: the page could not be fetched
        """
        page = self.fetcher.fetch(url or self.settings.base_url)
        return self.parse(page.html, base_url=page.url)

    def report(self, document: Document, top: Optional[int] = None) -> PageReport:
        return summarize(document, top=top)


def parse_html(html: str, base_url: str = "", sanitize: bool = False) -> Document:
    """Convenience function to parse an HTML string."""
    settings = load_settings(base_url=base_url, sanitize=sanitize)
    return PageParser(settings=settings).parse(html, base_url=base_url)


def parse_url(url: str) -> Document:
    """Convenience function to fetch and parse a page."""
    return PageParser().parse_url(url)
