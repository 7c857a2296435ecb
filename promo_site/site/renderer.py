"""
Section rendering for promo-site.

The renderer turns the read-only ContentCatalog into page markup. Each
section of the skeleton is an element whose id is the section name:

    home, about, news  - static prose: the mapped document's markup is
                         injected into the section's .markdown-content slot
    music              - the album catalogue: one card per album in
                         .albums-grid, each with an inline player
    #featured          - populated once from the first featured album

Overlays:
    Clicking an album card opens the album overlay (cover, title, prose,
    track list with a player per track). A track's lyrics button fetches
    its lyrics document on the page's worker pool; the result is shown in
    a second overlay when the page processes its events. Both overlays
    close from their close button or a click on the backdrop itself.

Cancellation:
    Rendering receives the CancellationToken of the navigation that
    requested it and keeps it as the current token. Overlays and lyrics
    requests take the token current at the time of the click, so a lyrics
    continuation is dropped only when a navigation happens while its
    fetch is in flight.

Usage:
    renderer = SectionRenderer(page, catalog, parser)
    renderer.render_featured()
    renderer.render("music")
"""

from concurrent.futures import Future
from typing import Callable, Mapping

from bs4 import Tag

from promo_site.content.models import AlbumRecord, ParsedDocument, Track
from promo_site.content.parser import DocumentParser
from promo_site.content.store import ContentCatalog
from promo_site.core.config import DEFAULT_STATIC_DOCUMENTS
from promo_site.core.exceptions import RenderError
from promo_site.core.logger import get_logger
from promo_site.site.dom import CancellationToken, Event, Page
from promo_site.site.player import HeadlessMediaElement, MediaElement, PlaybackWidget

logger = get_logger(__name__)


MUSIC_SECTION = "music"
FEATURED_SECTION = "featured"
LYRICS_UNAVAILABLE = "Lyrics not available"
CLOSE_SYMBOL = "×"

MediaFactory = Callable[[], MediaElement]


class SectionRenderer:
    """
    Materializes sections and overlays from the content catalog.

    Attributes:
        page: Page to render into.
        catalog: Read-only content loaded at startup.
        parser: Parser used to fetch lyrics on demand.
        static_documents: Section name -> static document name.
        media_factory: Creates the media element for each new player.
    """

    def __init__(
        self,
        page: Page,
        catalog: ContentCatalog,
        parser: DocumentParser,
        static_documents: Mapping[str, str] | None = None,
        media_factory: MediaFactory | None = None
    ) -> None:
        self.page = page
        self.catalog = catalog
        self.parser = parser
        self.static_documents = dict(static_documents or DEFAULT_STATIC_DOCUMENTS)
        self.media_factory = media_factory or (lambda: HeadlessMediaElement(parser.fetcher))
        self._widgets: dict[int, PlaybackWidget] = {}
        self._token = CancellationToken()

    @property
    def current_token(self) -> CancellationToken:
        """Token of the most recent render request."""
        return self._token

    @property
    def sections(self) -> list[str]:
        """Section names this renderer knows how to render."""
        return [*self.static_documents, MUSIC_SECTION]

    def has_section(self, section: str) -> bool:
        return section == MUSIC_SECTION or section in self.static_documents

    def render(self, section: str, token: CancellationToken | None = None) -> bool:
        """
        Render one section.

        Returns:
            True if the section was rendered. False when the section is
            unknown, its element is missing from the page, or a static
            section has no loaded document or slot; the failure is logged
            and nothing else is affected.
        """
        self._token = token or CancellationToken(section)
        try:
            container = self._section_container(section)
            if section == MUSIC_SECTION:
                self.render_music(container)
                rendered = True
            elif section in self.static_documents:
                rendered = self.render_static(section, container)
            else:
                logger.warning(f"Unknown section: {section}")
                return False
        except RenderError as e:
            logger.error(f"Could not render section '{section}': {e}")
            return False

        if rendered:
            logger.debug(f"Section rendered: {section}")
        return rendered

    def _section_container(self, section: str) -> Tag:
        container = self.page.by_id(section)
        if container is None:
            raise RenderError(
                "Section container not found",
                details={"section": section}
            )
        return container

    # ------------------------------------------------------------------
    # Static sections
    # ------------------------------------------------------------------

    def render_static(self, section: str, container: Tag) -> bool:
        """Inject the section's document into its .markdown-content slot."""
        name = self.static_documents.get(section, section)
        document = self.catalog.document(name)
        if document is None:
            logger.warning(f"No content loaded for '{name}', leaving section '{section}' as is")
            return False

        slot = self.page.query(".markdown-content", container)
        if slot is None:
            logger.error(f"Content container not found for: {name}")
            return False

        self.page.set_inner_html(slot, document.content)
        return True

    # ------------------------------------------------------------------
    # Music catalogue
    # ------------------------------------------------------------------

    def render_music(self, container: Tag) -> Tag:
        """
        Rebuild the album grid.

        Raises:
            RenderError: If the section has no .albums-grid element.
        """
        grid = self.page.query(".albums-grid", container)
        if grid is None:
            raise RenderError("Albums grid container not found", details={"section": MUSIC_SECTION})

        self.page.clear(grid)
        for album in self.catalog.albums.values():
            grid.append(self._album_card(album))

        logger.debug(f"Rendered {len(self.catalog.albums)} album card(s)")
        return grid

    def _album_card(self, album: AlbumRecord) -> Tag:
        page = self.page
        card = page.create("article", class_="album-card")
        card["data-album"] = album.album_id

        card.append(page.create("img", src=album.cover_path, alt=f"{album.title} Cover"))
        card.append(page.create("h3", text=album.title))

        meta = page.create("div", class_="album-meta")
        meta.append(page.create("span", class_="release-date", text=album.release_date))
        meta.append(page.create("span", class_="track-count", text=_track_count(album)))
        card.append(meta)

        preview = page.create("div", class_="album-preview")
        card.append(preview)
        widget = self._mount_player(preview)
        if album.tracks:
            widget.load_track(album.track_path(album.tracks[0]))

        def on_click(event: Event) -> None:
            logger.debug(f"Album clicked: {album.title or album.album_id}")
            self.show_album(album)

        page.add_listener(card, "click", on_click)
        return card

    # ------------------------------------------------------------------
    # Overlays
    # ------------------------------------------------------------------

    def show_album(self, album: AlbumRecord) -> Tag:
        """Open the album overlay and return its element."""
        page = self.page

        modal, content = self._overlay("album-details")
        full = page.create("div", class_="album-full")
        full.append(page.create("img", src=album.cover_path, alt=album.title))

        info = page.create("div", class_="album-info")
        info.append(page.create("h2", text=album.title))
        description = page.create("div", class_="album-description markdown-content")
        info.append(description)
        track_list = page.create("div", class_="track-list")
        info.append(track_list)
        full.append(info)
        content.append(full)

        self._open(modal)
        page.set_inner_html(description, album.content)
        for number, track in enumerate(album.tracks, start=1):
            track_list.append(self._track_item(album, track, number))

        logger.debug(f"Album overlay shown: {album.title or album.album_id}")
        return modal

    def _track_item(self, album: AlbumRecord, track: Track, number: int) -> Tag:
        page = self.page
        item = page.create("div", class_="track-item")
        item.append(page.create("span", class_="track-number", text=str(number)))
        item.append(page.create("span", class_="track-title", text=track.title))
        item.append(page.create("span", class_="track-duration", text=track.duration))

        widget = self._mount_player(item)
        widget.load_track(album.track_path(track))

        item.append(page.create(
            "a",
            class_="download-track",
            text="Download",
            href=album.track_path(track),
            download=track.file
        ))

        if track.lyrics:
            button = page.create("button", class_="show-lyrics", text="Lyrics", type="button")
            button["data-lyrics"] = track.lyrics
            page.add_listener(button, "click", lambda event: self.show_lyrics(album, track))
            item.append(button)

        return item

    def show_lyrics(
        self,
        album: AlbumRecord,
        track: Track,
        token: CancellationToken | None = None
    ) -> Future | None:
        """
        Fetch a track's lyrics off the page thread.

        The overlay is opened by a continuation when the page processes
        its events, unless token was cancelled in the meantime. Without a
        token the current render token is used. Lyrics are fetched fresh
        every time.
        """
        path = album.lyrics_path(track)
        if path is None:
            return None
        token = token or self._token

        logger.debug(f"Loading lyrics from: {path}")

        def on_done(document: ParsedDocument | None, error: BaseException | None) -> None:
            if token.cancelled:
                logger.debug(f"Dropping lyrics for '{track.title}': navigation moved on")
                return
            if error is not None:
                logger.error(f"Error loading lyrics from {path}: {error}")
                document = None
            self.show_lyrics_overlay(document)

        return self.page.submit(self.parser.load_from, path, on_done=on_done)

    def show_lyrics_overlay(self, document: ParsedDocument | None) -> Tag:
        """Open the lyrics overlay; a missing or blank document shows the unavailable notice."""
        modal, content = self._overlay("lyrics-modal")
        body = self.page.create("div", class_="lyrics-content markdown-content")
        content.append(body)
        self._open(modal)

        if document is None or not document.content.strip():
            self.page.set_text(body, LYRICS_UNAVAILABLE)
        else:
            self.page.set_inner_html(body, document.content)
        return modal

    def close_overlay(self, modal: Tag) -> None:
        if self.page.contains(modal):
            self.page.remove(modal)
            logger.debug("Overlay closed")

    def _overlay(self, kind: str) -> tuple[Tag, Tag]:
        modal = self.page.create("div", class_=f"modal {kind}")
        content = self.page.create("div", class_="modal-content")
        content.append(self.page.create("button", class_="close-modal", text=CLOSE_SYMBOL, type="button"))
        modal.append(content)
        return modal, content

    def _open(self, modal: Tag) -> None:
        self.page.body.append(modal)

        close_button = self.page.query(".close-modal", modal)
        self.page.add_listener(close_button, "click", lambda event: self.close_overlay(modal))

        def on_backdrop_click(event: Event) -> None:
            if event.target is modal:
                self.close_overlay(modal)

        self.page.add_listener(modal, "click", on_backdrop_click)

    # ------------------------------------------------------------------
    # Featured album
    # ------------------------------------------------------------------

    def render_featured(self) -> bool:
        """Populate #featured from the first featured album."""
        album = self.catalog.featured_album()
        if album is None:
            logger.warning("No featured album found")
            return False

        section = self.page.by_id(FEATURED_SECTION)
        if section is None:
            logger.error("Featured section not found")
            return False

        art = self.page.query(".album-art", section)
        title = self.page.query(".album-title", section)
        description = self.page.query(".album-description", section)
        if art is None or title is None or description is None:
            logger.error("Featured section is missing .album-art, .album-title or .album-description")
            return False

        self.page.clear(art)
        art.append(self.page.create("img", src=album.cover_path, alt=album.title))
        self.page.set_text(title, album.title)
        self.page.set_inner_html(description, album.content)

        logger.info(f"Featured album: {album.title or album.album_id}")
        return True

    # ------------------------------------------------------------------
    # Players
    # ------------------------------------------------------------------

    def widget_for(self, element: Tag) -> PlaybackWidget | None:
        """Return the player mounted in element (or the first one below it)."""
        root = element if "audio-player" in element.get_attribute_list("class") else self.page.query(".audio-player", element)
        if root is None:
            return None
        return self._widgets.get(id(root))

    @property
    def active_widgets(self) -> list[PlaybackWidget]:
        return list(self._widgets.values())

    def _mount_player(self, container: Tag) -> PlaybackWidget:
        widget = PlaybackWidget(self.page, container, self.media_factory())
        key = id(widget.root)
        self._widgets[key] = widget
        self.page.on_teardown(widget.root, lambda: self._widgets.pop(key, None))
        return widget


def _track_count(album: AlbumRecord) -> str:
    return f"{len(album.tracks)} tracks"
