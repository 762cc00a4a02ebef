"""
Optional sanitization stage, run before the builder.

Two passes:
- String-level normalization (bad code points, NULL bytes, doubled angle
  brackets, line endings, control characters)
- Allow-list filtering: tags outside the allow-list are removed together
  with everything inside them, attributes outside it are deleted, and
  comments are dropped. Nothing is escaped; removed content is gone.

Design principle: NEVER FAIL on bad HTML. If the tokenizer breaks, the
normalized string passes through unfiltered and a warning is logged.
"""

import re
from typing import Iterable, Optional

from bs4 import Comment

from .builder import make_soup
from .schemas import SanitizedHTML
from .exceptions import SanitizerError
from .logger import get_module_logger

logger = get_module_logger("sanitizer")

DEFAULT_ALLOWED_TAGS = frozenset([
    'html', 'head', 'body', 'title',
    'h1', 'h2', 'h3', 'h4', 'h5', 'h6', 'p', 'div', 'span', 'br', 'hr',
    'a', 'b', 'i', 'u', 'em', 'strong', 'small', 'code', 'pre', 'blockquote',
    'ul', 'ol', 'li', 'dl', 'dt', 'dd', 'abbr', 'cite', 'q',
    'table', 'thead', 'tbody', 'tfoot', 'tr', 'th', 'td', 'caption',
    'main', 'article', 'section', 'header', 'footer', 'nav', 'aside',
    'figure', 'figcaption', 'img',
])

# "*" applies to every allowed tag
DEFAULT_ALLOWED_ATTRIBUTES = {
    '*': frozenset(['id', 'title', 'lang']),
    'a': frozenset(['href', 'name', 'target']),
    'img': frozenset(['src', 'alt', 'width', 'height']),
    'td': frozenset(['colspan', 'rowspan']),
    'th': frozenset(['colspan', 'rowspan', 'scope']),
}


def normalize_html(html: str) -> tuple[str, list[str]]:
    """
    Fix common string-level malformations before tokenizing.

    Returns:
        Tuple of (normalized HTML, list of warnings)
    """
    warnings = []

    # Lone surrogates can't be encoded; 'replace' turns them into '?'
    normalized = html.encode('utf-8', errors='replace').decode('utf-8')
    if normalized != html:
        warnings.append("Replaced invalid code points")

    if '\x00' in normalized:
        normalized = normalized.replace('\x00', '')
        warnings.append("Removed NULL bytes")

    # <<p>> from copy-paste corruption
    double_bracket_pattern = r'<{2,}(\/?[a-zA-Z][^>]*?)>{2,}'
    if re.search(double_bracket_pattern, normalized):
        normalized = re.sub(double_bracket_pattern, r'<\1>', normalized)
        warnings.append("Fixed double angle brackets")

    normalized = normalized.replace('\r\n', '\n').replace('\r', '\n')

    # Everything below 0x20 except tab and newline (CR is gone by now)
    control_chars = ''.join(chr(c) for c in range(32) if c not in (9, 10))
    if any(c in normalized for c in control_chars):
        normalized = normalized.translate(str.maketrans('', '', control_chars))
        warnings.append("Removed control characters")

    return normalized, warnings


class Sanitizer:
    """Allow-list HTML sanitizer."""

    def __init__(
        self,
        allowed_tags: Optional[Iterable[str]] = None,
        allowed_attributes: Optional[dict] = None,
        backend: str = "html.parser"
    ):
        """
        Args:
            allowed_tags: Tag names to keep (default: DEFAULT_ALLOWED_TAGS)
            allowed_attributes: tag → attribute names to keep; "*" for all tags
            backend: Preferred BeautifulSoup tree builder
        """
        tags = DEFAULT_ALLOWED_TAGS if allowed_tags is None else allowed_tags
        attributes = DEFAULT_ALLOWED_ATTRIBUTES if allowed_attributes is None else allowed_attributes

        self.allowed_tags = frozenset(t.lower() for t in tags)
        self.allowed_attributes = {
            tag.lower(): frozenset(a.lower() for a in names)
            for tag, names in attributes.items()
        }
        self.backend = backend

    def _attribute_allowed(self, tag: str, name: str) -> bool:
        name = name.lower()
        return (name in self.allowed_attributes.get(tag, ())
                or name in self.allowed_attributes.get('*', ()))

    def _filter(self, html: str) -> tuple[str, list[str], int]:
        try:
            soup = make_soup(html, self.backend)
        except Exception as e:
            raise SanitizerError(f"Tokenizing failed: {e}", details={"error": str(e)})

        for comment in soup.find_all(string=lambda s: isinstance(s, Comment)):
            comment.extract()

        removed_tags = []
        removed_attributes = 0

        # find_all() returns a snapshot, so decomposed subtrees are still in
        # the list; skip their elements once their ancestor is gone
        for tag in soup.find_all(True):
            if tag.decomposed:
                continue

            if tag.name.lower() not in self.allowed_tags:
                removed_tags.append(tag.name.lower())
                tag.decompose()
                continue

            for name in list(tag.attrs):
                if not self._attribute_allowed(tag.name.lower(), name):
                    del tag.attrs[name]
                    removed_attributes += 1

        # A leftover doctype or stray text is not a document
        if soup.find(True) is None:
            return "", removed_tags, removed_attributes

        return str(soup), removed_tags, removed_attributes

    def sanitize(self, html: str) -> SanitizedHTML:
        """
        Sanitize an HTML string.

        Args:
            html: Raw HTML string

        Returns:
            SanitizedHTML with the filtered markup and what was removed
        """
        normalized, warnings = normalize_html(html)

        if not normalized.strip():
            return SanitizedHTML(html="", warnings=warnings)

        try:
            filtered, removed_tags, removed_attributes = self._filter(normalized)
        except SanitizerError as e:
            logger.warning(f"Sanitization skipped, passing HTML through: {e.message}")
            warnings.append(f"Sanitization skipped: {e.message}")
            return SanitizedHTML(html=normalized, warnings=warnings)

        if removed_tags:
            warnings.append(f"Removed {len(removed_tags)} disallowed elements")
        if removed_attributes:
            warnings.append(f"Removed {removed_attributes} disallowed attributes")

        logger.debug(
            f"Sanitization complete: {len(removed_tags)} elements, "
            f"{removed_attributes} attributes removed"
        )
        return SanitizedHTML(
            html=filtered,
            warnings=warnings,
            removed_tags=removed_tags,
            removed_attributes=removed_attributes
        )


def sanitize(html: str, **kwargs) -> SanitizedHTML:
    """
    Convenience function to sanitize HTML.

    Args:
        html: Raw HTML string
        **kwargs: Passed to Sanitizer

    Returns:
        SanitizedHTML result
    """
    return Sanitizer(**kwargs).sanitize(html)
