"""
Pydantic schemas for the data passed between the parser's stages.

Data flow:
  Fetcher → FetchedPage → (Sanitizer → SanitizedHTML) → builder → Document
  Document → analytics → PageReport
"""

from typing import Optional
from pydantic import BaseModel, ConfigDict, Field


# --- Document model: output of the builder ---

class Node(BaseModel):
    """
    One element encountered while parsing.

    `descendants` holds the ids of every node opened while this one was
    still open, not only its direct children.
    """
    model_config = ConfigDict(frozen=True)

    id: int = Field(description="Position of the node in Document.nodes")
    tag: str = Field(description="Lower-cased element name")
    attributes: dict[str, str] = Field(default_factory=dict)
    text: Optional[str] = None
    # Sequence number of the text run that ended up in `text`; lets callers
    # list text blocks in the order they appeared in the markup
    text_index: Optional[int] = None
    descendants: tuple[int, ...] = ()


class Document(BaseModel):
    """All nodes of one parse, ordered by creation (open-tag) order."""
    model_config = ConfigDict(frozen=True)

    base_url: str = ""
    nodes: tuple[Node, ...] = ()

    def __len__(self) -> int:
        return len(self.nodes)

    def get(self, node_id: int) -> Node:
        return self.nodes[node_id]

    def find_all(self, tag: str) -> list[Node]:
        """Nodes with the given tag name, in document order."""
        tag = tag.lower()
        return [node for node in self.nodes if node.tag == tag]

    def descendants_of(self, node: Node) -> list[Node]:
        return [self.nodes[i] for i in node.descendants]


# --- Pre-processing ---

class SanitizedHTML(BaseModel):
    """Output of the optional sanitization stage."""
    html: str
    warnings: list[str] = Field(default_factory=list)
    removed_tags: list[str] = Field(default_factory=list)   # one entry per removed element
    removed_attributes: int = 0


# --- HTTP collaborator ---

class FetchedPage(BaseModel):
    """A response body plus the URL it was finally served from."""
    url: str                # Effective URL after redirects; used as the base URL
    html: str
    status_code: int = 200
    encoding: str = "utf-8"


# --- Derived views, serialized by the CLI ---

class PageReport(BaseModel):
    """Summary of the analytics over one Document."""
    url: str
    links: list[str] = Field(default_factory=list)
    skipped_links: int = 0   # Anchors whose href could not be resolved
    text: list[str] = Field(default_factory=list)
    words: list[str] = Field(default_factory=list)
    frequencies: list[tuple[str, int]] = Field(default_factory=list)
    bigrams: list[list[str]] = Field(default_factory=list)
    trigrams: list[list[str]] = Field(default_factory=list)
