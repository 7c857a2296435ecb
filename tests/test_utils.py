# tests/test_utils.py
"""Test utilities and helpers"""

import threading

import pytest

from promo_site.utils import ensure_directory, join_path, run_in_parallel


class TestJoinPath:
    """Test content path joining"""

    @pytest.mark.parametrize("parts,expected", [
        (("albums", "demo", "info.md"), "albums/demo/info.md"),
        (("albums/", "/demo"), "albums/demo"),
        (("albums", "demo/", "tracks/"), "albums/demo/tracks/"),
        (("", "home.md"), "home.md"),
        (("/home.md",), "home.md"),
        ((), ""),
    ])
    def test_join_path(self, parts, expected):
        assert join_path(*parts) == expected


class TestRunInParallel:
    """Test ordered parallel execution"""

    def test_results_in_input_order(self):
        release_first = threading.Event()

        def work(item):
            if item == "first":
                assert release_first.wait(timeout=5)
            else:
                release_first.set()
            return item.upper()

        completed = []
        results = run_in_parallel(
            work,
            ["first", "second"],
            num_threads=2,
            on_complete=lambda item, result: completed.append(item)
        )

        assert results == [("first", "FIRST"), ("second", "SECOND")]
        assert completed == ["second", "first"]

    def test_exceptions_returned(self):
        def work(item):
            if item == 2:
                raise ValueError("bad item")
            return item * 10

        results = run_in_parallel(work, [1, 2, 3])

        assert results[0] == (1, 10)
        assert isinstance(results[1][1], ValueError)
        assert results[2] == (3, 30)

    def test_empty_input(self):
        assert run_in_parallel(lambda item: item, []) == []


class TestEnsureDirectory:
    """Test directory creation"""

    def test_creates_nested(self, tmp_path):
        path = tmp_path / "a" / "b"
        assert ensure_directory(path) == path
        assert path.is_dir()
        ensure_directory(path)
