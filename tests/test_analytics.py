"""
Unit tests for the text analytics over a Document.
"""

import pytest

from page_parser.builder import build
from page_parser.analytics import (
    resolve_link, links, text, text_by_tag, words, frequencies,
    ngrams, bigrams, trigrams, summarize,
)
from page_parser.exceptions import LinkResolutionError


BASE = "http://example.com"


@pytest.fixture
def page():
    return build('<div><a href="/x">hi</a> there</div>', base_url=BASE)


class TestRoundTrip:
    def test_links(self, page):
        assert links(page) == ["http://example.com/x"]

    def test_text(self, page):
        assert text(page) == ["hi", "there"]

    def test_words(self, page):
        assert words(page) == ["hi", "there"]

    def test_bigrams(self, page):
        assert bigrams(page) == [["hi", "there"]]

    def test_trigrams_too_short(self, page):
        assert trigrams(page) == []


class TestLinks:
    def test_upper_case_markup(self):
        doc = build('<A HREF="/y">L</A>', base_url=BASE)

        assert links(doc) == ["http://example.com/y"]

    def test_document_order(self):
        doc = build(
            '<a href="/1">1</a><p><a href="two">2</a></p>'
            '<a href="https://other.org/a?b=1#c">3</a>',
            base_url="http://example.com/dir/page.html"
        )

        assert links(doc) == [
            "http://example.com/1",
            "http://example.com/dir/two",
            "https://other.org/a?b=1#c",
        ]

    def test_missing_href_is_skipped(self):
        doc = build('<a name="top">no</a><a href="/ok">ok</a>', base_url=BASE)

        assert links(doc) == ["http://example.com/ok"]

    def test_missing_href_strict(self):
        doc = build('<a name="top">no</a><a href="/ok">ok</a>', base_url=BASE)

        with pytest.raises(LinkResolutionError) as exc_info:
            links(doc, strict=True)
        assert exc_info.value.href is None
        assert exc_info.value.base_url == BASE

    def test_relative_href_without_base(self):
        doc = build('<a href="/x">x</a>')

        assert links(doc) == []
        with pytest.raises(LinkResolutionError):
            links(doc, strict=True)

    def test_invalid_url(self):
        doc = build('<a href="http://[::1">bad</a>', base_url=BASE)

        assert links(doc) == []
        with pytest.raises(LinkResolutionError):
            links(doc, strict=True)

    def test_empty_href_is_the_base(self):
        doc = build('<a href="">self</a>', base_url=BASE)

        assert links(doc) == ["http://example.com/"]

    def test_href_is_trimmed(self):
        doc = build('<a href="  /padded ">p</a>', base_url=BASE)

        assert links(doc) == ["http://example.com/padded"]

    def test_non_http_schemes(self):
        doc = build('<a href="mailto:me@example.com">mail</a>', base_url=BASE)

        assert links(doc) == ["mailto:me@example.com"]

    def test_resolve_link(self, page):
        anchor = page.find_all("a")[0]

        assert resolve_link(anchor, "https://example.org/a/b") == "https://example.org/x"


class TestText:
    def test_skips_nodes_without_text(self):
        doc = build("<div><p>one</p><p></p><p>two</p></div>")

        assert text(doc) == ["one", "two"]

    def test_include_null(self):
        doc = build("<div><p>one</p><p></p></div>")

        result = text(doc, include_null=True)
        assert len(result) == len(doc)
        assert result == [node.text for node in doc.nodes]
        assert None in result

    def test_text_by_tag(self):
        doc = build('<div><a href="/x">hi</a> there</div>', backend="html.parser")

        assert text_by_tag(doc) == [("div", "there"), ("a", "hi")]

    def test_text_by_tag_keeps_null(self):
        doc = build("<div><br></div>", backend="html.parser")

        assert text_by_tag(doc) == [("div", None), ("br", None)]


class TestWords:
    def test_split_on_whitespace_runs(self):
        doc = build("<p>a\n\n b\tc</p><p>d</p>")

        assert words(doc) == ["a", "b", "c", "d"]

    def test_case_is_kept(self):
        doc = build("<p>Hello World</p>")

        assert words(doc) == ["Hello", "World"]


class TestFrequencies:
    def test_counts_sorted_descending(self):
        doc = build("<p>the cat the dog the</p>")

        assert frequencies(doc) == [("the", 3), ("cat", 1), ("dog", 1)]

    def test_ties_keep_first_seen_order(self):
        doc = build("<p>dog cat bird</p>")

        assert frequencies(doc) == [("dog", 1), ("cat", 1), ("bird", 1)]

    def test_case_insensitive(self):
        doc = build("<p>The cat</p><p>the Cat</p>")

        assert frequencies(doc) == [("the", 2), ("cat", 2)]


class TestNgrams:
    DOC = "<p>one two three</p><p>four five</p>"

    @pytest.mark.parametrize("n", [1, 2, 3, 4, 5, 6, 10])
    def test_length(self, n):
        doc = build(self.DOC)

        assert len(ngrams(doc, n)) == max(0, len(words(doc)) - n + 1)

    def test_windows_cross_blocks(self):
        doc = build(self.DOC)

        assert trigrams(doc) == [
            ["one", "two", "three"],
            ["two", "three", "four"],
            ["three", "four", "five"],
        ]

    def test_invalid_n(self):
        doc = build(self.DOC)

        with pytest.raises(ValueError):
            ngrams(doc, 0)


class TestEmptyDocument:
    def test_all_views_empty(self):
        doc = build("", base_url=BASE)

        assert links(doc) == []
        assert text(doc) == []
        assert text(doc, include_null=True) == []
        assert text_by_tag(doc) == []
        assert words(doc) == []
        assert frequencies(doc) == []
        assert bigrams(doc) == []


class TestSummarize:
    def test_report(self):
        doc = build('<p>go go <a href="/x">now</a></p><a>dead</a>', base_url=BASE)

        report = summarize(doc)
        assert report.url == BASE
        assert report.links == ["http://example.com/x"]
        assert report.skipped_links == 1
        assert report.text == ["go go", "now", "dead"]
        assert report.frequencies[0] == ("go", 2)

    def test_top(self):
        doc = build("<p>a a a b b c</p>")

        assert summarize(doc, top=2).frequencies == [("a", 3), ("b", 2)]
