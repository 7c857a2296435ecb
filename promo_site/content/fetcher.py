"""
Content retrieval for promo-site.

Every content file (album index, album documents, static documents,
lyrics) is addressed by a site-relative path such as
"albums/night-drive/info.md". The ContentFetcher resolves that path
against the configured content root, which is either:

    - an http(s) base URL: fetched with requests, one Session per thread
    - a local directory: read from disk

Both modes raise FetchError for anything that isn't a successful read,
so callers never have to care which one is in use.

Usage:
    from promo_site.content.fetcher import ContentFetcher

    fetcher = ContentFetcher("https://band.example.com/content")
    text = fetcher.fetch_text("home.md")
    index = fetcher.fetch_json("albums/index.json")
"""

import json
import threading
from pathlib import Path
from typing import Any

import requests

from promo_site.core.exceptions import FetchError
from promo_site.core.logger import get_logger
from promo_site.utils import join_path

logger = get_logger(__name__)


DEFAULT_TIMEOUT = 15.0
DEFAULT_USER_AGENT = "promo-site/0.1"


def is_remote_root(root: str) -> bool:
    """Return True if root is an http(s) URL rather than a directory."""
    return root.startswith(("http://", "https://"))


class ContentFetcher:
    """
    Fetches content files relative to a content root.

    Attributes:
        root: The content root (URL without trailing slash, or directory).
        timeout: Per-request timeout in seconds (HTTP roots only).

    Thread Safety:
        fetch_text() may be called from several discovery threads at once.
        Each thread gets its own requests.Session, created lazily.
    """

    def __init__(
        self,
        root: str,
        timeout: float = DEFAULT_TIMEOUT,
        user_agent: str = DEFAULT_USER_AGENT
    ) -> None:
        self.remote = is_remote_root(root)
        self.root = root.rstrip("/") if self.remote else str(Path(root))
        self.timeout = timeout
        self.user_agent = user_agent
        self._local = threading.local()
        self._sessions: list[requests.Session] = []
        self._sessions_lock = threading.Lock()

    def __repr__(self) -> str:
        return f"ContentFetcher(root={self.root!r})"

    @property
    def session(self) -> requests.Session:
        """The calling thread's HTTP session."""
        session = getattr(self._local, "session", None)
        if session is None:
            session = requests.Session()
            session.headers.update({"User-Agent": self.user_agent})
            self._local.session = session
            with self._sessions_lock:
                self._sessions.append(session)
        return session

    def url_for(self, path: str) -> str:
        """Return the absolute URL or filesystem path for a content path."""
        if self.remote:
            return f"{self.root}/{join_path(path)}"
        return str(Path(self.root) / join_path(path))

    def local_path(self, path: str) -> Path | None:
        """
        Return the local file for a content path, if the root is local.

        Used by media elements to probe audio files on disk. Returns None
        for remote roots and for files that don't exist.
        """
        if self.remote:
            return None
        candidate = Path(self.root) / join_path(path)
        return candidate if candidate.is_file() else None

    def fetch_text(self, path: str) -> str:
        """
        Fetch a content file as text.

        Args:
            path: Site-relative content path.

        Returns:
            The decoded file content.

        Raises:
            FetchError: On non-success HTTP status, network failure,
                        missing local file or read error.
        """
        if self.remote:
            return self._fetch_remote(path)
        return self._fetch_local(path)

    def fetch_json(self, path: str) -> Any:
        """
        Fetch and decode a JSON content file.

        Raises:
            FetchError: If the file can't be fetched or isn't valid JSON.
        """
        text = self.fetch_text(path)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            raise FetchError(
                f"Invalid JSON in {path}: {e}",
                details={"path": path, "original_error": str(e)}
            ) from e

    def close(self) -> None:
        """
        Close every HTTP session this fetcher opened, on any thread.

        Threads that fetch again afterwards open a fresh session.
        """
        with self._sessions_lock:
            sessions, self._sessions = self._sessions, []
        for session in sessions:
            session.close()
        self._local = threading.local()
        if sessions:
            logger.debug(f"Closed {len(sessions)} HTTP session(s)")

    def _fetch_remote(self, path: str) -> str:
        url = self.url_for(path)
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.RequestException as e:
            raise FetchError(
                f"Network error fetching {path}: {e}",
                details={"path": path, "url": url, "original_error": str(e)}
            ) from e

        if not response.ok:
            raise FetchError(
                f"HTTP {response.status_code} for {path}",
                details={"path": path, "url": url},
                status_code=response.status_code
            )

        # Content files are UTF-8; servers often omit the charset for .md
        if "charset" not in response.headers.get("Content-Type", "").lower():
            response.encoding = "utf-8"
        return response.text

    def _fetch_local(self, path: str) -> str:
        file_path = Path(self.url_for(path))
        if not file_path.is_file():
            raise FetchError(
                f"Content file not found: {path}",
                details={"path": path, "file_path": str(file_path)},
                status_code=404
            )
        try:
            return file_path.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as e:
            raise FetchError(
                f"Failed to read {path}: {e}",
                details={"path": path, "file_path": str(file_path), "original_error": str(e)}
            ) from e
