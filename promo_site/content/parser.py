"""
Document parsing for promo-site.

Every content document (album info, static sections, lyrics) uses the
same hybrid format: an optional front matter block of `key: value` lines
fenced by `---`, followed by a Markdown body.

    ---
    title: Night Drive
    release_date: 2023-10-06
    featured: true
    ---
    Recorded over three winter nights in **Leipzig**.

Parsing never raises. A document without front matter has empty metadata,
malformed metadata lines are skipped, and a body the Markdown converter
chokes on is returned unconverted. Only fetching can fail, and
load_from() reports that as None.

Usage:
    from promo_site.content.parser import DocumentParser

    parser = DocumentParser(fetcher)
    doc = parser.parse(text)
    doc = parser.load_from("albums/night-drive/info.md")  # or None
"""

import re
from typing import Callable

from markdown_it import MarkdownIt

from promo_site.content.fetcher import ContentFetcher
from promo_site.content.models import ParsedDocument
from promo_site.core.exceptions import FetchError
from promo_site.core.logger import get_logger

logger = get_logger(__name__)


# Opening fence at the very start, closing fence on its own line.
# The metadata block may be empty; the body may be absent.
FRONT_MATTER_PATTERN = re.compile(
    r"\A---\r?\n(?:(?P<meta>.*?)\r?\n)?---(?:\r?\n(?P<body>.*))?\Z",
    re.DOTALL,
)

Converter = Callable[[str], str]


def _create_markdown() -> MarkdownIt:
    # CommonMark plus the two GFM extensions authors actually use
    return MarkdownIt("commonmark").enable(["table", "strikethrough"])


_markdown = _create_markdown()


def markdown_to_html(text: str) -> str:
    """Convert Markdown text to an HTML fragment."""
    return _markdown.render(text)


def split_front_matter(text: str) -> tuple[str, str]:
    """
    Split a document into its front matter block and its body.

    Returns:
        (front_matter, body). front_matter is "" when the document has no
        fence pattern, in which case body is the whole text.
    """
    match = FRONT_MATTER_PATTERN.match(text)
    if match is None:
        return "", text
    return match.group("meta") or "", match.group("body") or ""


def parse_front_matter(front_matter: str) -> dict[str, str]:
    """
    Parse `key: value` lines into an ordered dictionary.

    Rules:
        - Blank lines are skipped
        - The line is split on the FIRST colon; the value keeps later colons
        - Key and value are trimmed
        - Lines without a colon or with an empty key are skipped
        - Duplicate keys: the last value wins

    Example:
        parse_front_matter("title: Night Drive\\nstream: https://x.y/z")
        # {'title': 'Night Drive', 'stream': 'https://x.y/z'}
    """
    metadata: dict[str, str] = {}

    for line_number, line in enumerate(front_matter.splitlines(), start=1):
        if not line.strip():
            continue

        key, colon, value = line.partition(":")
        key = key.strip()
        if not colon or not key:
            logger.debug(f"Ignoring malformed front matter line {line_number}: {line!r}")
            continue

        metadata[key] = value.strip()

    return metadata


class DocumentParser:
    """
    Parses content documents and loads them through a ContentFetcher.

    Attributes:
        fetcher: Source for load_from(). May be None for a parse-only parser.
        converter: Markdown -> markup function. Defaults to markdown-it-py
                   with the CommonMark preset.
    """

    def __init__(
        self,
        fetcher: ContentFetcher | None = None,
        converter: Converter | None = None
    ) -> None:
        self.fetcher = fetcher
        self.converter = converter or markdown_to_html

    def parse(self, raw_text: str | None) -> ParsedDocument:
        """
        Split raw_text into metadata and converted body.

        This method is total: whatever happens internally, it returns a
        ParsedDocument. If parsing itself fails the result has empty
        metadata and the raw text as content.
        """
        if raw_text is None:
            raw_text = ""

        try:
            front_matter, body = split_front_matter(raw_text)
            metadata = parse_front_matter(front_matter)
        except Exception as e:
            logger.error(f"Failed to parse document: {e}")
            return ParsedDocument(metadata={}, content=raw_text if isinstance(raw_text, str) else "")

        return ParsedDocument(metadata=metadata, content=self.convert(body))

    def convert(self, body: str) -> str:
        """Convert a body to markup, returning it unchanged if conversion fails."""
        try:
            return self.converter(body)
        except Exception as e:
            logger.warning(f"Markdown conversion failed, using raw text: {e}")
            return body

    def load_from(self, path: str) -> ParsedDocument | None:
        """
        Fetch the document at path and parse it.

        Returns:
            The parsed document, or None if it couldn't be fetched
            (non-success status, network failure, missing file).
        """
        if self.fetcher is None:
            logger.error(f"No content fetcher configured, cannot load {path}")
            return None

        try:
            text = self.fetcher.fetch_text(path)
        except FetchError as e:
            logger.warning(f"Could not load {path}: {e.message}")
            return None

        return self.parse(text)
