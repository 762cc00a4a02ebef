"""
Document builder: turns an HTML string into a flat Document of Nodes.

BeautifulSoup does the tokenizing and error recovery; the builder walks the
resulting tree as a stream of start / data / end events and keeps only three
pieces of state of its own:

  - the open-tag stack (ids of the currently open ancestors, outermost first)
  - one pending-text slot per open node
  - the node table, indexed by id

Every new node is registered as a descendant of *all* open ancestors, so
`descendants` is the full nested subtree, not just the direct children.
"""

from enum import Enum
from typing import Optional

from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

from .schemas import Document, Node
from .logger import get_module_logger

logger = get_module_logger("builder")

# Tried in order after the preferred backend. html.parser keeps every open
# tag where the markup put it; lxml and html5lib repair the tree like a
# browser (wrapper elements, moved or dropped tags) and are only fallbacks
# or an explicit opt-in.
BACKENDS = ("html.parser", "lxml", "html5lib")


class TextPolicy(Enum):
    """How several text runs at the same nesting level end up in `Node.text`."""
    OVERWRITE = "overwrite"        # only the last run before the close tag is kept
    CONCATENATE = "concatenate"    # non-empty runs are joined with a single space


def make_soup(html: str, backend: str = "html.parser") -> BeautifulSoup:
    """
    Parse HTML with the preferred backend, falling back along BACKENDS.

    Attribute values are kept as plain strings (no class lists).
    """
    candidates = [backend] + [b for b in BACKENDS if b != backend]
    last_error = None

    for candidate in candidates:
        try:
            return BeautifulSoup(html, candidate, multi_valued_attributes=None)
        except Exception as e:
            # bs4 raises FeatureNotFound for a missing backend; anything else
            # is a tokenizer bug on this input. Either way try the next one.
            logger.warning(f"{candidate} parsing failed, trying next backend: {e}")
            last_error = e

    raise last_error


class DocumentBuilder:
    """
    Tokenizer target that records Nodes.

    Usable directly through start() / data() / end() / close(), or with
    feed(), which tokenizes an HTML string and drives those methods.
    A builder produces one Document; create a new one per parse.
    """

    def __init__(
        self,
        base_url: str = "",
        text_policy: TextPolicy = TextPolicy.OVERWRITE,
        backend: str = "html.parser"
    ):
        self.base_url = base_url
        self.text_policy = TextPolicy(text_policy)
        self.backend = backend

        self._open: list[int] = []
        self._pending: list[Optional[str]] = []
        self._pending_index: list[Optional[int]] = []
        self._records: list[dict] = []
        self._text_count = 0
        self._ignored_closes = 0
        self._closed = False

    # --- tokenizer target interface ---

    def start(self, tag: str, attributes: Optional[dict] = None) -> int:
        """Open a new node and return its id."""
        node_id = len(self._records)

        self._records.append({
            "id": node_id,
            "tag": tag.lower(),
            "attributes": {str(k): str(v) for k, v in (attributes or {}).items()},
            "text": None,
            "text_index": None,
            "descendants": [],
        })

        # Register with every open ancestor, not only the parent
        for ancestor_id in self._open:
            self._records[ancestor_id]["descendants"].append(node_id)

        self._open.append(node_id)
        self._pending.append(None)
        self._pending_index.append(None)
        return node_id

    def data(self, text: str) -> None:
        """Record a text run for the innermost open node."""
        index = self._text_count
        self._text_count += 1

        # Text outside any element has no node to attach to
        if not self._open:
            return

        run = text.strip()
        if self.text_policy is TextPolicy.OVERWRITE:
            self._pending[-1] = run
            self._pending_index[-1] = index
        elif run:
            if self._pending[-1]:
                self._pending[-1] = f"{self._pending[-1]} {run}"
            else:
                self._pending[-1] = run
                self._pending_index[-1] = index

    def end(self, tag: Optional[str] = None) -> Optional[int]:
        """
        Close the innermost open node and return its id.

        A close with nothing open is ignored. The tag name is accepted for
        interface compatibility but not matched; the stack decides.
        """
        if not self._open:
            self._ignored_closes += 1
            logger.debug(f"Ignoring unmatched close tag: {tag}")
            return None

        node_id = self._open.pop()
        record = self._records[node_id]
        record["text"] = self._pending.pop()
        record["text_index"] = self._pending_index.pop()
        return node_id

    def close(self) -> Document:
        """Close whatever is still open and return the finished Document."""
        if self._open:
            logger.debug(f"Closing {len(self._open)} unclosed element(s) at end of input")
        while self._open:
            self.end()

        self._closed = True
        if self._ignored_closes:
            logger.debug(f"Ignored {self._ignored_closes} unmatched close tag(s)")

        return Document(
            base_url=self.base_url,
            nodes=[Node(**record) for record in self._records]
        )

    # --- driving the target from BeautifulSoup ---

    def feed(self, html: str) -> Document:
        """Tokenize a complete HTML string and return its Document."""
        if self._closed:
            raise RuntimeError("DocumentBuilder already produced its Document")

        if not html or not html.strip():
            return self.close()

        try:
            soup = make_soup(html, self.backend)
        except Exception as e:
            # Every backend rejected the markup; an empty Document is the
            # best-effort result
            logger.error(f"HTML parsing failed with all backends: {e}")
            return self.close()

        self._walk(soup)
        document = self.close()

        logger.debug(f"Built document with {len(document)} nodes")
        return document

    def _walk(self, soup: BeautifulSoup) -> None:
        """
        Emit start/data/end for the parsed tree in document order.

        Iterative so that deeply nested pages don't hit the recursion limit.
        Void elements have no children and get their end() right away.
        """
        stack = [iter(soup.contents)]

        while stack:
            child = next(stack[-1], None)

            if child is None:
                stack.pop()
                # The soup object itself is not an element
                if stack:
                    self.end()
                continue

            if isinstance(child, Tag):
                self.start(child.name, child.attrs)
                stack.append(iter(child.contents))
            elif isinstance(child, NavigableString) and not isinstance(child, PreformattedString):
                # Comments, doctypes, CDATA and processing instructions are
                # PreformattedStrings and carry no document text
                self.data(str(child))


def build(
    html: str,
    base_url: str = "",
    text_policy: TextPolicy = TextPolicy.OVERWRITE,
    backend: str = "html.parser"
) -> Document:
    """
    Build a Document from an HTML string.

    Never raises on malformed markup. Empty input gives an empty Document.

    Args:
        html: Complete HTML string
        base_url: URL relative links are resolved against
        text_policy: How repeated text runs in one element are kept
        backend: Preferred BeautifulSoup tree builder

    Returns:
        Document with one Node per element, in open-tag order
    """
    return DocumentBuilder(base_url, text_policy=text_policy, backend=backend).feed(html)
