"""Test content discovery and the read-only catalog"""

import threading
from unittest.mock import Mock

import pytest

from conftest import FIRST_LIGHT_INFO, NIGHT_DRIVE_INFO, write_content_tree
from promo_site.content import ContentFetcher, ContentStore, DocumentParser
from promo_site.core.config import ContentConfig
from promo_site.core.exceptions import ContentIndexError, FetchError, StoreStateError


class FakeFetcher:
    """
    In-memory fetcher whose first album only completes after the second.

    Simulates out-of-order network completion deterministically.
    """

    def __init__(self, documents: dict[str, str], index: dict):
        self.documents = documents
        self.index = index
        self.second_fetched = threading.Event()
        self.completion_order: list[str] = []
        self._lock = threading.Lock()

    def fetch_json(self, path):
        return self.index

    def fetch_text(self, path):
        if path == "albums/alpha/info.md":
            assert self.second_fetched.wait(timeout=5)
        if path not in self.documents:
            raise FetchError(f"HTTP 404 for {path}", status_code=404)
        with self._lock:
            self.completion_order.append(path)
        if path == "albums/beta/info.md":
            self.second_fetched.set()
        return self.documents[path]


class TestDiscovery:
    """Test album discovery"""

    def test_albums_in_index_order(self, catalog):
        assert list(catalog.albums) == ["night-drive", "first-light"]
        assert catalog.album("night-drive").title == "Night Drive"
        assert len(catalog.album("night-drive").tracks) == 2

    def test_order_kept_under_out_of_order_completion(self):
        fetcher = FakeFetcher(
            documents={
                "albums/alpha/info.md": "---\ntitle: Alpha\n---\n",
                "albums/beta/info.md": "---\ntitle: Beta\n---\n",
            },
            index={"albumDirectories": ["alpha", "beta"]},
        )
        catalog = ContentStore(fetcher, DocumentParser(fetcher), threads=2).initialize()

        assert fetcher.completion_order[:2] == ["albums/beta/info.md", "albums/alpha/info.md"]
        assert list(catalog.albums) == ["alpha", "beta"]

    def test_failing_album_is_skipped(self, tmp_path, caplog):
        root = write_content_tree(
            tmp_path,
            {"night-drive": NIGHT_DRIVE_INFO, "missing": None, "first-light": FIRST_LIGHT_INFO},
        )
        catalog = ContentStore(ContentFetcher(str(root))).initialize()

        assert list(catalog.albums) == ["night-drive", "first-light"]
        assert "Skipping album 'missing'" in caplog.text

    def test_album_failure_carries_report_fields(self, tmp_path, caplog):
        root = write_content_tree(tmp_path, {"missing": None})
        ContentStore(ContentFetcher(str(root))).initialize()

        records = [r for r in caplog.records if hasattr(r, "album_failed_id")]
        assert len(records) == 1
        assert records[0].album_failed_id == "missing"
        assert records[0].album_failed_path == "albums/missing/info.md"

    def test_duplicate_ids_loaded_once(self, tmp_path):
        root = write_content_tree(
            tmp_path,
            {"night-drive": NIGHT_DRIVE_INFO},
            index=["night-drive", "night-drive"],
        )
        catalog = ContentStore(ContentFetcher(str(root))).initialize()
        assert list(catalog.albums) == ["night-drive"]

    def test_invalid_entries_skipped(self, tmp_path):
        root = write_content_tree(
            tmp_path,
            {"night-drive": NIGHT_DRIVE_INFO},
            index=[3, "", None, "night-drive"],
        )
        catalog = ContentStore(ContentFetcher(str(root))).initialize()
        assert list(catalog.albums) == ["night-drive"]

    def test_empty_index(self, tmp_path):
        root = write_content_tree(tmp_path, {})
        catalog = ContentStore(ContentFetcher(str(root))).initialize()
        assert len(catalog.albums) == 0

    def test_progress_reports_each_album(self, tmp_path):
        root = write_content_tree(tmp_path, {"night-drive": NIGHT_DRIVE_INFO, "missing": None})
        progress = Mock()
        factory = Mock(return_value=progress)

        ContentStore(ContentFetcher(str(root)), progress_factory=factory).initialize()

        factory.assert_called_once_with(2)
        progress.start.assert_called_once()
        progress.stop.assert_called_once()
        loaded = sorted(call.kwargs["loaded"] for call in progress.update.call_args_list)
        assert loaded == [False, True]


class TestIndexFailures:
    """Test that an unusable index fails initialization"""

    def test_missing_index(self, tmp_path):
        with pytest.raises(ContentIndexError) as exc_info:
            ContentStore(ContentFetcher(str(tmp_path))).initialize()
        assert exc_info.value.status_code == 404

    @pytest.mark.parametrize("index_text", [
        "{not json",
        "[]",
        '{"albums": []}',
        '{"albumDirectories": "night-drive"}',
    ])
    def test_unusable_index(self, tmp_path, index_text):
        (tmp_path / "albums").mkdir()
        (tmp_path / "albums" / "index.json").write_text(index_text, encoding="utf-8")
        store = ContentStore(ContentFetcher(str(tmp_path)))

        with pytest.raises(ContentIndexError):
            store.initialize()
        assert not store.initialized

    def test_custom_index_path(self, tmp_path):
        root = write_content_tree(tmp_path, {"night-drive": NIGHT_DRIVE_INFO})
        (root / "albums" / "index.json").rename(root / "catalogue.json")
        config = ContentConfig(index_path="catalogue.json")

        catalog = ContentStore(ContentFetcher(str(root)), content_config=config).initialize()
        assert list(catalog.albums) == ["night-drive"]


class TestStaticContent:
    """Test static document loading"""

    def test_documents_loaded(self, catalog):
        assert set(catalog.documents) == {"home", "bio", "news"}
        assert "<h1>Welcome</h1>" in catalog.document("home").content

    def test_missing_document_left_out(self, content_dir):
        (content_dir / "news.md").unlink()
        catalog = ContentStore(ContentFetcher(str(content_dir))).initialize()
        assert catalog.document("news") is None
        assert "news" not in catalog.documents

    def test_configured_documents(self, content_dir):
        (content_dir / "shows.md").write_text("Tour", encoding="utf-8")
        config = ContentConfig(static_documents={"home": "home", "live": "shows"})

        catalog = ContentStore(ContentFetcher(str(content_dir)), content_config=config).initialize()
        assert set(catalog.documents) == {"home", "shows"}


class TestCatalog:
    """Test catalog lifecycle and immutability"""

    def test_catalog_is_read_only(self, catalog):
        with pytest.raises(TypeError):
            catalog.albums["new"] = catalog.album("night-drive")
        with pytest.raises(TypeError):
            catalog.documents["home"] = None

    def test_featured_album(self, catalog):
        assert catalog.featured_album().album_id == "night-drive"

    def test_no_featured_album(self, tmp_path):
        root = write_content_tree(tmp_path, {"first-light": FIRST_LIGHT_INFO})
        catalog = ContentStore(ContentFetcher(str(root))).initialize()
        assert catalog.featured_album() is None

    def test_second_initialize_refused(self, fetcher):
        store = ContentStore(fetcher)
        catalog = store.initialize()
        with pytest.raises(StoreStateError):
            store.initialize()
        assert store.catalog is catalog

    def test_catalog_before_initialize(self, fetcher):
        with pytest.raises(StoreStateError):
            ContentStore(fetcher).catalog
