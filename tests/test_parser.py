"""Test document parsing"""

from unittest.mock import Mock

import pytest

from promo_site.content.parser import (
    DocumentParser,
    markdown_to_html,
    parse_front_matter,
    split_front_matter,
)
from promo_site.core.exceptions import FetchError


class TestSplitFrontMatter:
    """Test front matter fence detection"""

    def test_fenced_document(self):
        meta, body = split_front_matter("---\ntitle: A\n---\nBody text\n")
        assert meta == "title: A"
        assert body == "Body text\n"

    def test_no_fence(self):
        text = "Just prose\n---\nwith a rule"
        assert split_front_matter(text) == ("", text)

    def test_unclosed_fence_is_body(self):
        text = "---\ntitle: A\nno closing fence"
        assert split_front_matter(text) == ("", text)

    def test_empty_metadata_block(self):
        assert split_front_matter("---\n---\nBody") == ("", "Body")

    def test_closing_fence_without_trailing_newline(self):
        assert split_front_matter("---\ntitle: A\n---") == ("title: A", "")

    def test_crlf_line_endings(self):
        meta, body = split_front_matter("---\r\ntitle: A\r\n---\r\nBody")
        assert meta.strip() == "title: A"
        assert body == "Body"

    def test_later_rules_stay_in_body(self):
        meta, body = split_front_matter("---\na: 1\n---\nOne\n---\nTwo")
        assert meta == "a: 1"
        assert body == "One\n---\nTwo"


class TestParseFrontMatter:
    """Test key: value metadata parsing"""

    def test_basic_pairs(self):
        assert parse_front_matter("title: Night Drive\nrelease_date: 2023-10-06") == {
            "title": "Night Drive",
            "release_date": "2023-10-06",
        }

    def test_value_keeps_later_colons(self):
        assert parse_front_matter("stream: https://example.com/a:b") == {
            "stream": "https://example.com/a:b"
        }

    def test_whitespace_trimmed(self):
        assert parse_front_matter("  title  :   Spaced Out  ") == {"title": "Spaced Out"}

    def test_malformed_lines_skipped(self):
        metadata = parse_front_matter("no colon here\n: empty key\n\ntitle: Kept")
        assert metadata == {"title": "Kept"}

    def test_last_write_wins(self):
        metadata = parse_front_matter("title: First\ngenre: ambient\ntitle: Second")
        assert metadata == {"title": "Second", "genre": "ambient"}
        assert list(metadata) == ["title", "genre"]

    def test_empty_value(self):
        assert parse_front_matter("featured:") == {"featured": ""}


class TestDocumentParser:
    """Test DocumentParser.parse and load_from"""

    def test_parse_fenced_document(self):
        doc = DocumentParser().parse("---\ntitle: A\nfeatured: true\n---\nHello **world**\n")
        assert dict(doc.metadata) == {"title": "A", "featured": "true"}
        assert doc.content == "<p>Hello <strong>world</strong></p>\n"

    def test_parse_without_fence_converts_everything(self):
        doc = DocumentParser().parse("# Heading\n\ntext")
        assert dict(doc.metadata) == {}
        assert doc.content == markdown_to_html("# Heading\n\ntext")

    @pytest.mark.parametrize("raw", ["", None, "---", "---\n", "---\n---", "\n\n---\nx"])
    def test_parse_never_raises(self, raw):
        doc = DocumentParser().parse(raw)
        assert isinstance(doc.content, str)

    def test_converter_failure_falls_back_to_raw_body(self):
        converter = Mock(side_effect=ValueError("boom"))
        doc = DocumentParser(converter=converter).parse("---\ntitle: A\n---\n*raw* body")
        assert doc.get("title") == "A"
        assert doc.content == "*raw* body"

    def test_custom_converter(self):
        doc = DocumentParser(converter=str.upper).parse("quiet")
        assert doc.content == "QUIET"

    def test_load_from(self, parser):
        doc = parser.load_from("bio.md")
        assert doc is not None
        assert doc.get("title") == "About"
        assert "Songwriter from Leipzig." in doc.content

    def test_load_from_missing_file(self, parser):
        assert parser.load_from("missing.md") is None

    def test_load_from_http_error(self):
        fetcher = Mock()
        fetcher.fetch_text.side_effect = FetchError("HTTP 500 for news.md", status_code=500)
        assert DocumentParser(fetcher).load_from("news.md") is None

    def test_load_from_without_fetcher(self):
        assert DocumentParser().load_from("home.md") is None
