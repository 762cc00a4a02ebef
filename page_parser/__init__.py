"""
Page Parser

Turns an HTML page into a flat, queryable Document and derives text
analytics from it.
- builder:   HTML string → Document of Nodes (tag, attributes, text, descendants)
- analytics: links, text blocks, words, frequencies, n-grams
- sanitizer: optional allow-list filtering before building
- fetcher:   HTTP GET of the page to parse

Public API surface:
  Building       : build, DocumentBuilder, TextPolicy
  Analytics      : links, text, text_by_tag, words, frequencies, ngrams, bigrams, trigrams, summarize
  Pipeline       : PageParser, parse_html, parse_url, Sanitizer, Fetcher
  Data models    : Document, Node, PageReport, SanitizedHTML, FetchedPage
  Configuration  : Settings, load_settings
  Error types    : LinkResolutionError, FetchError, ConfigError, PageParserError
"""

# --- Core ---
from .builder import build, DocumentBuilder, TextPolicy
from .analytics import (
    links, text, text_by_tag, words, frequencies, ngrams, bigrams, trigrams, summarize
)

# --- Pipeline around the core ---
from .main import PageParser, parse_html, parse_url
from .sanitizer import Sanitizer
from .fetcher import Fetcher

# --- Data models ---
from .schemas import Document, Node, PageReport, SanitizedHTML, FetchedPage

# --- Configuration ---
from .config import Settings, load_settings

# --- Exceptions ---
from .exceptions import PageParserError, LinkResolutionError, FetchError, ConfigError

__version__ = "0.1.0"
__all__ = [
    "build",
    "DocumentBuilder",
    "TextPolicy",
    "links",
    "text",
    "text_by_tag",
    "words",
    "frequencies",
    "ngrams",
    "bigrams",
    "trigrams",
    "summarize",
    "PageParser",
    "parse_html",
    "parse_url",
    "Sanitizer",
    "Fetcher",
    "Document",
    "Node",
    "PageReport",
    "SanitizedHTML",
    "FetchedPage",
    "Settings",
    "load_settings",
    "PageParserError",
    "LinkResolutionError",
    "FetchError",
    "ConfigError",
]
