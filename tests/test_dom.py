"""Test the headless page: events, teardown and continuations"""

import threading

import pytest

from promo_site.site.dom import CancellationToken, Page


@pytest.fixture
def tree(page):
    outer = page.create("div", class_="outer")
    inner = page.create("div", class_="inner")
    button = page.create("button", text="Go")
    inner.append(button)
    outer.append(inner)
    page.body.append(outer)
    return outer, inner, button


class TestSkeleton:
    """Test the packaged skeleton"""

    def test_sections_present(self, page):
        for section in ("featured", "home", "music", "about", "news"):
            assert page.by_id(section) is not None
        assert [a["href"] for a in page.query_all(".nav-menu a")] == ["#home", "#music", "#about", "#news"]
        assert page.query("#music .albums-grid") is not None


class TestEvents:
    """Test listener dispatch and bubbling"""

    def test_bubbles_to_ancestors(self, page, tree):
        outer, inner, button = tree
        seen = []
        page.add_listener(outer, "click", lambda e: seen.append(("outer", e.target, e.current_target)))
        page.add_listener(button, "click", lambda e: seen.append(("button", e.target, e.current_target)))

        page.click(button)

        assert seen == [("button", button, button), ("outer", button, outer)]

    def test_stop_propagation(self, page, tree):
        outer, inner, button = tree
        seen = []
        page.add_listener(inner, "click", lambda e: e.stop_propagation())
        page.add_listener(outer, "click", seen.append)

        event = page.click(button)

        assert event.propagation_stopped
        assert seen == []

    def test_prevent_default(self, page, tree):
        _, _, button = tree
        page.add_listener(button, "click", lambda e: e.prevent_default())
        assert page.click(button).default_prevented

    def test_failing_listener_does_not_block_others(self, page, tree):
        _, _, button = tree
        seen = []

        def broken(event):
            raise RuntimeError("listener bug")

        page.add_listener(button, "click", broken)
        page.add_listener(button, "click", seen.append)
        page.click(button)

        assert len(seen) == 1

    def test_remove_listener(self, page, tree):
        _, _, button = tree
        seen = []
        page.add_listener(button, "click", seen.append)
        page.remove_listener(button, "click", seen.append)
        page.click(button)
        assert seen == []

    def test_other_event_types_ignored(self, page, tree):
        _, _, button = tree
        seen = []
        page.add_listener(button, "click", seen.append)
        page.dispatch(button, "keydown")
        assert seen == []


class TestTeardown:
    """Test removal hooks"""

    def test_remove_runs_hooks_below(self, page, tree):
        outer, inner, button = tree
        released = []
        page.on_teardown(inner, lambda: released.append("inner"))
        page.on_teardown(button, lambda: released.append("button"))

        page.remove(outer)

        assert sorted(released) == ["button", "inner"]
        assert not page.contains(outer)

    def test_clear_keeps_element(self, page, tree):
        outer, inner, _ = tree
        released = []
        page.on_teardown(inner, lambda: released.append("inner"))

        page.clear(outer)

        assert released == ["inner"]
        assert page.contains(outer)
        assert list(outer.children) == []

    def test_removed_listeners_are_gone(self, page, tree):
        outer, _, button = tree
        seen = []
        page.add_listener(button, "click", seen.append)
        page.remove(outer)
        page.click(button)
        assert seen == []

    def test_set_inner_html(self, page, tree):
        outer, inner, _ = tree
        released = []
        page.on_teardown(inner, lambda: released.append("inner"))

        page.set_inner_html(outer, "<p>one</p><p>two</p>")

        assert released == ["inner"]
        assert [p.get_text() for p in page.query_all("p", outer)] == ["one", "two"]


class TestContinuations:
    """Test the worker pool and the continuation pump"""

    def test_continuation_runs_on_process_events(self, page):
        results = []
        main_thread = threading.current_thread()

        page.submit(lambda x: x * 2, 21, on_done=lambda r, e: results.append((r, e, threading.current_thread())))
        assert page.wait_idle(timeout=5)
        assert results == []

        assert page.process_events() == 1
        assert results == [(42, None, main_thread)]

    def test_error_delivered_to_continuation(self, page):
        errors = []

        def fail():
            raise ValueError("fetch failed")

        page.submit(fail, on_done=lambda r, e: errors.append(e))
        page.process_events(wait=True, timeout=5)

        assert isinstance(errors[0], ValueError)

    def test_call_soon(self, page):
        calls = []
        page.call_soon(lambda: calls.append(1))
        page.call_soon(lambda: calls.append(2))
        assert page.process_events() == 2
        assert calls == [1, 2]

    def test_wait_idle_timeout(self, page):
        gate = threading.Event()
        page.submit(gate.wait, 5)
        assert page.wait_idle(timeout=0.05) is False
        gate.set()
        assert page.wait_idle(timeout=5)


class TestCancellationToken:
    """Test cancellation flags"""

    def test_cancel(self):
        token = CancellationToken("music")
        assert not token.cancelled
        token.cancel()
        assert token.cancelled
        assert "cancelled" in repr(token)

    def test_independent_tokens(self):
        first, second = CancellationToken(), CancellationToken()
        first.cancel()
        assert not second.cancelled


def test_page_from_markup():
    page = Page("<html><body><p id='x'>hi</p></body></html>")
    try:
        assert page.by_id("x").get_text() == "hi"
        assert page.by_id("") is None
    finally:
        page.close()
