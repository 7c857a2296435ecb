"""
Content store for promo-site.

The store discovers albums and loads static documents exactly once, at
startup, and hands back a read-only ContentCatalog that the renderer
and navigation read for the rest of the page's lifetime.

Initialization Workflow:
    1. Fetch the album index (albums/index.json):
           {"albumDirectories": ["night-drive", "first-light"]}
       Any failure here is FATAL: ContentIndexError propagates.
    2. For each album identifier (in parallel):
       a. Fetch albums/<id>/info.md
       b. Parse it with the DocumentParser
       c. Wrap it in an AlbumRecord (cover/tracks/lyrics paths derived)
       A failing album is logged to album_failures.log and skipped.
    3. Insert albums in INDEX order, whatever order the fetches finished in
    4. Fetch and parse each static document (home.md, bio.md, news.md);
       a failing document is logged and left out of the cache
    5. Freeze both collections into a ContentCatalog

Usage:
    from promo_site.content.store import ContentStore

    store = ContentStore(fetcher, threads=4)
    catalog = store.initialize()  # raises ContentIndexError if no index

    for album in catalog.albums.values():
        print(album.title)
"""

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Callable, Mapping

from promo_site.content.fetcher import ContentFetcher
from promo_site.content.models import AlbumRecord, ParsedDocument
from promo_site.content.parser import DocumentParser
from promo_site.core.config import ContentConfig
from promo_site.core.exceptions import ContentIndexError, FetchError, StoreStateError
from promo_site.core.logger import get_logger, log_album_failure
from promo_site.utils import join_path, run_in_parallel

logger = get_logger(__name__)


ALBUM_INDEX_KEY = "albumDirectories"
ALBUM_INFO_FILENAME = "info.md"
STATIC_DOCUMENT_EXTENSION = ".md"


@dataclass(frozen=True)
class ContentCatalog:
    """
    Read-only view of everything the store loaded.

    Attributes:
        albums: Album identifier -> AlbumRecord, in album index order.
        documents: Static document name -> ParsedDocument. Documents that
                   failed to load are absent.

    Both mappings are immutable proxies; the catalog cannot be refreshed
    or modified after initialization.
    """

    albums: Mapping[str, AlbumRecord] = field(default_factory=dict)
    documents: Mapping[str, ParsedDocument] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "albums", MappingProxyType(dict(self.albums)))
        object.__setattr__(self, "documents", MappingProxyType(dict(self.documents)))

    def album(self, album_id: str) -> AlbumRecord | None:
        return self.albums.get(album_id)

    def document(self, name: str) -> ParsedDocument | None:
        return self.documents.get(name)

    def featured_album(self) -> AlbumRecord | None:
        """Return the first album (in catalogue order) marked as featured."""
        return next((album for album in self.albums.values() if album.featured), None)


class ContentStore:
    """
    Builds the ContentCatalog from the content root.

    Attributes:
        fetcher: Content source for the index and documents.
        parser: DocumentParser used for every document.
        content_config: Paths of the index, albums directory and the
                        static documents to load.
        threads: Number of parallel fetch threads.
        progress_factory: Optional callable taking the number of albums and
                          returning a progress bar (context manager with an
                          update(loaded=bool) method).

    Lifecycle:
        initialize() may be called once. The returned catalog is also
        available afterwards as `catalog`.
    """

    def __init__(
        self,
        fetcher: ContentFetcher,
        parser: DocumentParser | None = None,
        content_config: ContentConfig | None = None,
        threads: int = 4,
        progress_factory: Callable[[int], Any] | None = None
    ) -> None:
        self.fetcher = fetcher
        self.parser = parser or DocumentParser(fetcher)
        self.content_config = content_config or ContentConfig()
        self.threads = threads
        self.progress_factory = progress_factory
        self._catalog: ContentCatalog | None = None
        self._initializing = False

    @property
    def catalog(self) -> ContentCatalog:
        """The catalog produced by initialize()."""
        if self._catalog is None:
            raise StoreStateError("Content store has not been initialized")
        return self._catalog

    @property
    def initialized(self) -> bool:
        return self._catalog is not None

    def initialize(self) -> ContentCatalog:
        """
        Discover albums and load static documents.

        Returns:
            The frozen ContentCatalog.

        Raises:
            ContentIndexError: If the album index can't be fetched or read.
                               Nothing is published in that case.
            StoreStateError: If the store was already initialized.
        """
        if self._catalog is not None or self._initializing:
            raise StoreStateError("Content store is already initialized")

        self._initializing = True
        try:
            albums = self.discover_albums()
            documents = self.load_static_content()
        except ContentIndexError as e:
            logger.error(f"Content initialization failed: {e.message}")
            raise
        finally:
            self._initializing = False

        self._catalog = ContentCatalog(albums=albums, documents=documents)
        logger.info(
            f"Content loaded: {len(albums)} album(s), "
            f"static documents: {', '.join(documents) or 'none'}"
        )
        return self._catalog

    def discover_albums(self) -> dict[str, AlbumRecord]:
        """
        Fetch the album index and load every album it lists.

        Returns:
            Album identifier -> AlbumRecord, in index order. Albums that
            failed to load are missing.

        Raises:
            ContentIndexError: If the index itself is unusable.
        """
        album_ids = self._fetch_index()
        albums: dict[str, AlbumRecord] = {}
        if not album_ids:
            logger.warning("Album index lists no albums")
            return albums

        progress = self.progress_factory(len(album_ids)) if self.progress_factory else None

        def on_complete(album_id: str, result: AlbumRecord | Exception) -> None:
            if progress is not None:
                progress.update(loaded=isinstance(result, AlbumRecord))

        if progress is not None:
            progress.start()
        try:
            results = run_in_parallel(
                self._load_album,
                album_ids,
                num_threads=self.threads,
                on_complete=on_complete
            )
        finally:
            if progress is not None:
                progress.stop()

        # run_in_parallel preserves input order, so this follows the index
        for album_id, result in results:
            if isinstance(result, Exception):
                reason = result.message if isinstance(result, FetchError) else str(result)
                log_album_failure(
                    logger,
                    album_id=album_id,
                    path=self._album_info_path(album_id),
                    reason=reason
                )
                continue
            albums[album_id] = result

        logger.debug(f"Discovered {len(albums)} of {len(album_ids)} album(s)")
        return albums

    def load_static_content(self) -> dict[str, ParsedDocument]:
        """
        Load the configured static documents.

        Returns:
            Document name -> ParsedDocument for every document that loaded.
            Failed documents are logged and left out (no placeholder).
        """
        names = list(dict.fromkeys(self.content_config.static_documents.values()))
        documents: dict[str, ParsedDocument] = {}

        results = run_in_parallel(
            lambda name: self.parser.load_from(name + STATIC_DOCUMENT_EXTENSION),
            names,
            num_threads=self.threads
        )
        for name, result in results:
            if isinstance(result, ParsedDocument):
                documents[name] = result
            elif isinstance(result, Exception):
                logger.error(f"Error loading static document '{name}': {result}")
            else:
                logger.warning(f"Static document '{name}' is unavailable")

        return documents

    def _fetch_index(self) -> list[str]:
        """
        Fetch the album index and return its album identifiers.

        Non-string entries are skipped; duplicates keep their first position.
        """
        index_path = self.content_config.index_path
        try:
            index_data = self.fetcher.fetch_json(index_path)
        except FetchError as e:
            raise ContentIndexError(
                f"Failed to load album index: {e.message}",
                details={"path": index_path, **e.details},
                status_code=e.status_code
            ) from e

        if not isinstance(index_data, dict):
            raise ContentIndexError(
                "Album index must be a JSON object",
                details={"path": index_path}
            )

        raw_ids = index_data.get(ALBUM_INDEX_KEY)
        if not isinstance(raw_ids, list):
            raise ContentIndexError(
                f"Album index must contain a '{ALBUM_INDEX_KEY}' list",
                details={"path": index_path}
            )

        album_ids: list[str] = []
        for entry in raw_ids:
            if not isinstance(entry, str) or not entry.strip():
                logger.warning(f"Ignoring invalid album index entry: {entry!r}")
                continue
            album_id = entry.strip().strip("/")
            if album_id in album_ids:
                logger.warning(f"Album '{album_id}' is listed more than once in the index")
                continue
            album_ids.append(album_id)

        return album_ids

    def _album_info_path(self, album_id: str) -> str:
        return join_path(self.content_config.albums_dir, album_id, ALBUM_INFO_FILENAME)

    def _load_album(self, album_id: str) -> AlbumRecord:
        """
        Fetch and parse one album's info document.

        Raises:
            FetchError: If the document can't be fetched. The caller turns
                        this into a logged, skipped album.
        """
        text = self.fetcher.fetch_text(self._album_info_path(album_id))
        return AlbumRecord(
            album_id=album_id,
            document=self.parser.parse(text),
            albums_dir=self.content_config.albums_dir
        )
