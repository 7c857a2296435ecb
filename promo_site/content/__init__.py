"""
Content pipeline for promo-site.

    fetcher.py - ContentFetcher: reads content paths from a URL or directory
    parser.py  - DocumentParser: front matter + Markdown documents
    models.py  - ParsedDocument, AlbumRecord, Track
    store.py   - ContentStore: one-shot discovery producing a ContentCatalog

Usage:
    from promo_site.content import ContentFetcher, ContentStore

    catalog = ContentStore(ContentFetcher("./content")).initialize()
"""

from promo_site.content.fetcher import ContentFetcher
from promo_site.content.models import AlbumRecord, ParsedDocument, Track
from promo_site.content.parser import (
    DocumentParser,
    markdown_to_html,
    parse_front_matter,
    split_front_matter,
)
from promo_site.content.store import ContentCatalog, ContentStore

__all__ = [
    "ContentFetcher",
    "DocumentParser",
    "markdown_to_html",
    "parse_front_matter",
    "split_front_matter",
    "ParsedDocument",
    "AlbumRecord",
    "Track",
    "ContentStore",
    "ContentCatalog",
]
