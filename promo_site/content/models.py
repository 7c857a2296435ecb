"""
Data models for site content.

This module defines immutable dataclasses for parsed content documents,
albums and tracks. Documents are produced by the parser, albums by the
content store, and both are read (never modified) by the renderer.

Design Decisions:
    - All dataclasses are frozen to prevent accidental modification
    - Metadata is exposed as a read-only mapping
    - Album paths are derived from the identifier, not stored
    - Rendering reads metadata through accessors that fall back to
      empty/default values instead of failing on absent keys

Usage:
    from promo_site.content.models import ParsedDocument, AlbumRecord

    album = AlbumRecord(album_id="night-drive", document=doc)
    print(album.title, album.cover_path, len(album.tracks))
"""

import json
from dataclasses import dataclass, field
from functools import cached_property
from types import MappingProxyType
from typing import Any, Mapping

from promo_site.core.logger import get_logger
from promo_site.utils import join_path

logger = get_logger(__name__)


DEFAULT_ALBUMS_DIR = "albums"
COVER_FILENAME = "cover.jpg"
TRACKS_SUBDIR = "tracks"
LYRICS_SUBDIR = "lyrics"


def _freeze(metadata: Mapping[str, str] | None) -> Mapping[str, str]:
    return MappingProxyType(dict(metadata or {}))


@dataclass(frozen=True)
class ParsedDocument:
    """
    A content document split into metadata and converted markup.

    Attributes:
        metadata: Read-only mapping of the `key: value` lines found in the
                  document's front matter, in first-seen key order.
        content: Markup converted from the document body, or the raw body
                 text if conversion failed.
    """

    metadata: Mapping[str, str] = field(default_factory=dict)
    content: str = ""

    def __post_init__(self) -> None:
        # Copy into a proxy so callers can't mutate through the original dict
        object.__setattr__(self, "metadata", _freeze(self.metadata))

    def get(self, key: str, default: str = "") -> str:
        """Return a metadata value, or default when the key is absent."""
        return self.metadata.get(key, default)


@dataclass(frozen=True)
class Track:
    """
    A single track of an album.

    Attributes:
        title: Track title. Empty string when not declared.
        duration: Display duration as authored (e.g. "3:41").
        file: Audio file name inside the album's tracks directory.
        lyrics: Lyrics document name inside the album's lyrics directory,
                or None if the track has no lyrics.
    """

    title: str = ""
    duration: str = ""
    file: str = ""
    lyrics: str | None = None

    @classmethod
    def from_metadata(cls, data: Mapping[str, Any]) -> "Track":
        """
        Build a Track from one decoded entry of the `tracks` metadata value.

        Values are converted to strings; a missing or blank lyrics entry
        means the track has no lyrics.
        """
        lyrics = data.get("lyrics")
        lyrics = str(lyrics).strip() if lyrics is not None else ""
        return cls(
            title=str(data.get("title", "") or ""),
            duration=str(data.get("duration", "") or ""),
            file=str(data.get("file", "") or ""),
            lyrics=lyrics or None,
        )


@dataclass(frozen=True)
class AlbumRecord:
    """
    An album discovered from the album index.

    Attributes:
        album_id: Directory name of the album, as listed in the index.
        document: The album's parsed info document.
        albums_dir: Content directory that holds all album directories.

    Derived Paths:
        cover_path: "<albums_dir>/<album_id>/cover.jpg"
        tracks_dir: "<albums_dir>/<album_id>/tracks/"
        lyrics_dir: "<albums_dir>/<album_id>/lyrics/"

    Known Metadata:
        title, release_date, featured and tracks are read through
        accessors; any other key is available from `metadata`.
    """

    album_id: str
    document: ParsedDocument
    albums_dir: str = DEFAULT_ALBUMS_DIR

    @property
    def metadata(self) -> Mapping[str, str]:
        return self.document.metadata

    @property
    def content(self) -> str:
        return self.document.content

    @property
    def directory(self) -> str:
        return join_path(self.albums_dir, self.album_id)

    @property
    def cover_path(self) -> str:
        return join_path(self.directory, COVER_FILENAME)

    @property
    def tracks_dir(self) -> str:
        return join_path(self.directory, TRACKS_SUBDIR) + "/"

    @property
    def lyrics_dir(self) -> str:
        return join_path(self.directory, LYRICS_SUBDIR) + "/"

    @property
    def title(self) -> str:
        return self.document.get("title")

    @property
    def release_date(self) -> str:
        return self.document.get("release_date")

    @property
    def featured(self) -> bool:
        return self.document.get("featured").strip().lower() == "true"

    @cached_property
    def tracks(self) -> tuple[Track, ...]:
        """
        Tracks declared by the album's `tracks` metadata value.

        The value is a single-line JSON array of objects, since front
        matter lines are flat `key: value` pairs:

            tracks: [{"title": "Intro", "duration": "1:12", "file": "01-intro.mp3"}]

        Returns an empty tuple when the key is absent or malformed;
        non-object entries are skipped.
        """
        raw = self.document.get("tracks").strip()
        if not raw:
            return ()
        try:
            entries = json.loads(raw)
        except json.JSONDecodeError as e:
            logger.warning(f"Album '{self.album_id}' has unreadable tracks metadata: {e}")
            return ()
        if not isinstance(entries, list):
            logger.warning(f"Album '{self.album_id}' tracks metadata is not a list")
            return ()
        return tuple(
            Track.from_metadata(entry) for entry in entries if isinstance(entry, dict)
        )

    def track_path(self, track: Track) -> str:
        """Content path of a track's audio file."""
        return self.tracks_dir + track.file

    def lyrics_path(self, track: Track) -> str | None:
        """Content path of a track's lyrics document, or None."""
        if not track.lyrics:
            return None
        return self.lyrics_dir + track.lyrics
