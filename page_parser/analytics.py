"""
Read-only text analytics over a built Document.

Links, text blocks, words, word frequencies and n-grams. Every function
takes a Document and returns plain lists; none of them modify the Document.
"""

import re
from collections import Counter
from typing import Optional
from urllib.parse import urljoin, urlsplit, urlunsplit

from .schemas import Document, Node, PageReport
from .exceptions import LinkResolutionError
from .logger import get_module_logger

logger = get_module_logger("analytics")

WHITESPACE = re.compile(r"\s+")


# --- Links ---

def resolve_link(node: Node, base_url: str) -> str:
    """
    Resolve an anchor's href against the base URL.

    Raises:
        LinkResolutionError: href missing, or the result is not an absolute URL
    """
    href = node.attributes.get("href")
    if href is None:
        raise LinkResolutionError(
            f"<{node.tag}> node {node.id} has no href",
            href=href,
            base_url=base_url
        )

    try:
        resolved = urljoin(base_url, href.strip())
        parts = urlsplit(resolved)
    except ValueError as e:
        # urllib rejects things like an unterminated IPv6 host ("http://[::1")
        raise LinkResolutionError(
            f"Invalid URL {href!r}: {e}",
            href=href,
            base_url=base_url,
            details={"error": str(e)}
        )

    if not parts.scheme:
        raise LinkResolutionError(
            f"{href!r} does not resolve to an absolute URL against {base_url!r}",
            href=href,
            base_url=base_url
        )

    # http://example.com and http://example.com/ are the same resource
    if parts.scheme in ("http", "https") and parts.netloc and not parts.path:
        resolved = urlunsplit(parts._replace(path="/"))

    return resolved


def _resolve_all(document: Document, strict: bool) -> tuple[list[str], int]:
    resolved = []
    skipped = 0

    for node in document.find_all("a"):
        try:
            resolved.append(resolve_link(node, document.base_url))
        except LinkResolutionError as e:
            if strict:
                raise
            # One bad anchor should not cost the rest of the page
            skipped += 1
            logger.warning(f"Skipping link: {e.message}")

    return resolved, skipped


def links(document: Document, strict: bool = False) -> list[str]:
    """
    Absolute URLs of all <a> elements, in document order.

    Anchors whose href cannot be resolved are skipped and logged. With
    strict=True the first LinkResolutionError is raised instead.
    """
    return _resolve_all(document, strict)[0]


# --- Text ---

def text(document: Document, include_null: bool = False) -> list[str]:
    """
    Text blocks of the document.

    By default only nodes with non-empty text are returned, ordered by
    where their text appeared in the markup. With include_null=True every
    node contributes its `text` (possibly None), in document order.
    """
    if include_null:
        return [node.text for node in document.nodes]

    with_text = [node for node in document.nodes if node.text]
    with_text.sort(key=lambda node: node.text_index)
    return [node.text for node in with_text]


def text_by_tag(document: Document) -> list[tuple[str, Optional[str]]]:
    """(tag, text) for every node in document order, None text included."""
    return [(node.tag, node.text) for node in document.nodes]


def _joined_text(document: Document) -> str:
    return " ".join(text(document))


def words(document: Document) -> list[str]:
    """All text blocks joined by a space and split on whitespace runs."""
    return _joined_text(document).split()


def frequencies(document: Document) -> list[tuple[str, int]]:
    """
    Case-insensitive word counts, highest count first.

    Words with the same count keep the order in which they first appeared.
    """
    # Counter remembers insertion order and most_common() sorts stably
    counts = Counter(WHITESPACE.split(_joined_text(document).lower()))
    counts.pop("", None)
    return counts.most_common()


def ngrams(document: Document, n: int) -> list[list[str]]:
    """
    Sliding windows of n consecutive words (case as found).

    Only full windows are returned, so fewer than n words gives [].
    """
    if n < 1:
        raise ValueError(f"n must be at least 1, got {n}")

    tokens = words(document)
    return [tokens[i:i + n] for i in range(len(tokens) - n + 1)]


def bigrams(document: Document) -> list[list[str]]:
    return ngrams(document, 2)


def trigrams(document: Document) -> list[list[str]]:
    return ngrams(document, 3)


# --- Report ---

def summarize(document: Document, top: Optional[int] = None) -> PageReport:
    """
    Collect every derived view into one PageReport.

    Args:
        document: Built document
        top: Keep only the `top` most frequent words (all if None)
    """
    resolved, skipped = _resolve_all(document, strict=False)
    counts = frequencies(document)
    if top is not None:
        counts = counts[:top]

    return PageReport(
        url=document.base_url,
        links=resolved,
        skipped_links=skipped,
        text=text(document),
        words=words(document),
        frequencies=counts,
        bigrams=bigrams(document),
        trigrams=trigrams(document)
    )
