"""Test configuration and fixtures"""

import json
from pathlib import Path

import pytest

from promo_site.content import ContentFetcher, ContentStore, DocumentParser
from promo_site.site import Page


NIGHT_DRIVE_TRACKS = [
    {"title": "Intro", "duration": "1:12", "file": "01-intro.mp3", "lyrics": "01-intro.md"},
    {"title": "Headlights", "duration": "3:41", "file": "02-headlights.mp3"},
]

NIGHT_DRIVE_INFO = f"""---
title: Night Drive
release_date: 2023-10-06
featured: true
tracks: {json.dumps(NIGHT_DRIVE_TRACKS)}
---
Recorded over three winter nights in **Leipzig**.
"""

FIRST_LIGHT_INFO = """---
title: First Light
release_date: 2021-04-16
featured: false
---
The debut EP.
"""


def write_content_tree(root: Path, albums: dict[str, str | None], index: list | None = None) -> Path:
    """
    Write a content directory.

    Args:
        root: Directory to write into.
        albums: Album id -> info.md text. None lists the album in the
                index without writing its info.md (a missing album).
        index: Explicit albumDirectories value; defaults to the album ids.
    """
    albums_dir = root / "albums"
    albums_dir.mkdir(parents=True, exist_ok=True)
    (albums_dir / "index.json").write_text(
        json.dumps({"albumDirectories": list(albums) if index is None else index}),
        encoding="utf-8"
    )
    for album_id, info in albums.items():
        if info is None:
            continue
        album_dir = albums_dir / album_id
        (album_dir / "tracks").mkdir(parents=True, exist_ok=True)
        (album_dir / "lyrics").mkdir(parents=True, exist_ok=True)
        (album_dir / "info.md").write_text(info, encoding="utf-8")
    return root


@pytest.fixture
def content_dir(tmp_path):
    """A complete content tree: two albums, lyrics and static documents"""
    root = write_content_tree(
        tmp_path / "content",
        {"night-drive": NIGHT_DRIVE_INFO, "first-light": FIRST_LIGHT_INFO}
    )
    (root / "albums" / "night-drive" / "lyrics" / "01-intro.md").write_text(
        "---\ntitle: Intro\n---\nHeadlights on the *wet* road\n", encoding="utf-8"
    )
    (root / "home.md").write_text("# Welcome\n\nNew record out now.\n", encoding="utf-8")
    (root / "bio.md").write_text("---\ntitle: About\n---\nSongwriter from Leipzig.\n", encoding="utf-8")
    (root / "news.md").write_text("* Tour dates announced\n", encoding="utf-8")
    return root


@pytest.fixture
def fetcher(content_dir):
    """Fetcher reading the local content tree"""
    fetcher = ContentFetcher(str(content_dir))
    yield fetcher
    fetcher.close()


@pytest.fixture
def parser(fetcher):
    return DocumentParser(fetcher)


@pytest.fixture
def catalog(fetcher, parser):
    """Catalog loaded from the content tree"""
    return ContentStore(fetcher, parser).initialize()


@pytest.fixture
def page():
    """Page built from the packaged skeleton"""
    page = Page.from_skeleton()
    yield page
    page.close()
