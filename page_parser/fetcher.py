"""
HTTP fetching of pages (requests).

Sits outside the parsing core: it only supplies the response body and the
effective URL, which becomes the Document's base URL.
"""

import re
from typing import Optional

import requests

from .schemas import FetchedPage
from .exceptions import FetchError
from .logger import get_module_logger

logger = get_module_logger("fetcher")

# WHATWG encoding spec: browsers silently remap these charsets.
# https://encoding.spec.whatwg.org/#names-and-labels
# iso-8859-1 and windows-1252 agree on 0x00-0x7F, but windows-1252 defines
# printable characters in 0x80-0x9F; decoding like a browser avoids mojibake.
WHATWG_CHARSET_MAP = {
    'iso-8859-1': 'windows-1252',
    'iso8859-1': 'windows-1252',
    'iso88591': 'windows-1252',
    'latin-1': 'windows-1252',
    'latin1': 'windows-1252',
    'us-ascii': 'windows-1252',
    'ascii': 'windows-1252',
    'iso-8859-9': 'windows-1254',
    'iso-8859-11': 'windows-874',
}


def detect_charset_from_bytes(raw_bytes: bytes) -> str:
    """
    Detect charset from raw HTML bytes by scanning the first 2048 bytes
    for <meta charset=...> or <meta http-equiv="Content-Type" content="...; charset=...">.

    Returns the browser-equivalent charset or 'utf-8' as default.
    """
    # Declarations must appear within the first 1024 bytes; 2048 leaves slack
    head_str = raw_bytes[:2048].decode('ascii', errors='ignore')

    charset = None

    # Modern form: <meta charset="...">
    m = re.search(r'<meta[^>]+charset=["\']?\s*([^\s"\';>]+)', head_str, re.IGNORECASE)
    if m:
        charset = m.group(1).strip().lower()

    # Legacy form: <meta http-equiv="Content-Type" content="...; charset=...">
    if not charset:
        m = re.search(
            r'<meta[^>]+content=["\'][^"\']*charset=([^\s"\';>]+)',
            head_str, re.IGNORECASE
        )
        if m:
            charset = m.group(1).strip().lower()

    if not charset:
        return 'utf-8'

    return WHATWG_CHARSET_MAP.get(charset, charset)


class Fetcher:
    """Fetches HTML documents over HTTP GET."""

    def __init__(
        self,
        timeout: float = 10.0,
        user_agent: Optional[str] = None,
        session: Optional[requests.Session] = None
    ):
        self.timeout = timeout
        self.session = session or requests.Session()
        if user_agent:
            self.session.headers["User-Agent"] = user_agent

    def _decode(self, response: requests.Response) -> tuple[str, str]:
        """Decode the body, preferring the charset the server declared."""
        content_type = response.headers.get("Content-Type", "")
        if "charset=" in content_type.lower() and response.encoding:
            encoding = WHATWG_CHARSET_MAP.get(response.encoding.lower(), response.encoding)
        else:
            # requests falls back to ISO-8859-1 for text/* without a charset;
            # the page's own <meta> declaration is the better source
            encoding = detect_charset_from_bytes(response.content)

        try:
            return response.content.decode(encoding, errors='replace'), encoding
        except LookupError:
            logger.warning(f"Unknown charset {encoding!r}, decoding as utf-8")
            return response.content.decode('utf-8', errors='replace'), 'utf-8'

    def fetch(self, url: str) -> FetchedPage:
        """
        GET a page.

        Raises:
            FetchError: transport failure or non-2xx status
        """
        logger.info(f"Fetching {url}")

        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            logger.error(f"Request for {url} failed: {e}")
            raise FetchError(
                f"Request failed: {e}",
                url=url,
                details={"error": str(e)}
            )

        if not response.ok:
            raise FetchError(
                f"HTTP {response.status_code} for {url}",
                url=url,
                status_code=response.status_code,
                details={"reason": response.reason}
            )

        html, encoding = self._decode(response)
        if response.url != url:
            logger.info(f"Redirected to {response.url}")

        return FetchedPage(
            url=response.url,
            html=html,
            status_code=response.status_code,
            encoding=encoding
        )
