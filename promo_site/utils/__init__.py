"""
Utility functions for promo-site.

This module provides common utility functions used across the application:
    - Ordered parallel processing on a thread pool
    - Content path joining
    - Directory creation

Usage:
    from promo_site.utils import run_in_parallel, join_path, ensure_directory
"""

from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Callable, Iterable, TypeVar

from promo_site.core.logger import get_logger

logger = get_logger(__name__)


# Type variables for generic parallel processing
T = TypeVar("T")
R = TypeVar("R")


def join_path(*parts: str) -> str:
    """
    Join content path segments with single forward slashes.

    Content paths are URL-style regardless of platform, since the same
    path may be appended to an http base URL or a local directory.
    A trailing slash on the last segment is kept.

    Example:
        join_path("albums", "demo/", "tracks/")  # "albums/demo/tracks/"
        join_path("albums/", "/demo")            # "albums/demo"
    """
    cleaned = [part.strip("/") for part in parts if part and part.strip("/")]
    joined = "/".join(cleaned)
    if parts and parts[-1].endswith("/") and joined:
        joined += "/"
    return joined


def ensure_directory(path: Path) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Returns:
        The same path (for chaining).

    Raises:
        OSError: If directory cannot be created (permissions, etc.)
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


def run_in_parallel(
    func: Callable[[T], R],
    items: Iterable[T],
    num_threads: int = 4,
    on_complete: Callable[[T, R | Exception], None] | None = None
) -> list[tuple[T, R | Exception]]:
    """
    Run a function on multiple items in parallel, keeping input order.

    Args:
        func: Function to call for each item. Takes one argument.
        items: Iterable of items to process.
        num_threads: Number of parallel threads.
        on_complete: Optional callback invoked on the calling thread as
                     each item finishes, in completion order. Used for
                     progress reporting.

    Returns:
        List of (item, result) tuples in the ORIGINAL item order, where
        result is either the return value or the Exception raised.

    Behavior:
        1. Create thread pool with num_threads workers
        2. Submit func(item) for each item
        3. Collect results as they complete (including exceptions)
        4. Return results re-ordered by input position

    Error Handling:
        Exceptions are caught and returned in the result tuple.
        Processing continues for other items.

    Example:
        results = run_in_parallel(fetch_album, ["a", "b", "c"], num_threads=4)
        for album_id, result in results:  # always a, b, c
            if isinstance(result, Exception):
                print(f"Failed: {album_id} - {result}")
    """
    items_list = list(items)
    if not items_list:
        return []

    results: list[R | Exception | None] = [None] * len(items_list)

    with ThreadPoolExecutor(max_workers=max(1, num_threads)) as executor:
        future_to_index = {
            executor.submit(func, item): index
            for index, item in enumerate(items_list)
        }

        for future in as_completed(future_to_index):
            index = future_to_index[future]
            try:
                result = future.result()
            except Exception as e:
                result = e
            results[index] = result
            if on_complete is not None:
                on_complete(items_list[index], result)

    return list(zip(items_list, results))


__all__ = [
    "join_path",
    "ensure_directory",
    "run_in_parallel",
]
