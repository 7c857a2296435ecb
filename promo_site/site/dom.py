"""
Headless page model for promo-site.

The site is rendered into a BeautifulSoup document built from the page
skeleton. On top of the tree this module adds the small slice of browser
behaviour the renderer relies on:

    - Event listeners on elements, with bubbling to ancestors,
      prevent_default() and stop_propagation()
    - Teardown hooks run when an element (or an ancestor) is removed,
      so components can release what they hold
    - A continuation pump: slow work (lyrics fetches) runs on a worker
      pool, but its continuation is queued and only applied when the
      page thread calls process_events(). DOM mutation therefore stays
      on one thread, like a browser's event loop.

Usage:
    page = Page.from_skeleton()
    link = page.query(".nav-menu a")
    page.add_listener(link, "click", lambda event: event.prevent_default())
    event = page.dispatch(link, "click")
    assert event.default_prevented
"""

import queue
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Callable

from bs4 import BeautifulSoup, Tag

from promo_site.core.logger import get_logger

logger = get_logger(__name__)


HTML_PARSER = "html.parser"
DEFAULT_SKELETON = "index.html"

Listener = Callable[["Event"], None]


@dataclass
class Event:
    """
    A dispatched page event.

    Attributes:
        type: Event name, e.g. "click".
        target: The element the event was dispatched on.
        current_target: The element whose listener is running.
        default_prevented: Set by prevent_default().
        propagation_stopped: Set by stop_propagation(); ancestors are skipped.
        detail: Optional payload.
    """

    type: str
    target: Tag
    current_target: Tag | None = None
    default_prevented: bool = False
    propagation_stopped: bool = False
    detail: Any = None

    def prevent_default(self) -> None:
        self.default_prevented = True

    def stop_propagation(self) -> None:
        self.propagation_stopped = True


@dataclass
class _Binding:
    element: Tag
    listeners: dict[str, list[Listener]] = field(default_factory=dict)
    teardowns: list[Callable[[], None]] = field(default_factory=list)


class Page:
    """
    A rendered page: document tree, listeners and continuation queue.

    Attributes:
        soup: The BeautifulSoup document.

    Thread Safety:
        Everything except submit()'s worker function runs on the page
        thread. Worker results reach the page thread only through
        process_events().
    """

    def __init__(self, markup: str, workers: int = 2) -> None:
        self.soup = BeautifulSoup(markup, HTML_PARSER)
        self._bindings: dict[int, _Binding] = {}
        self._continuations: "queue.Queue[Callable[[], None]]" = queue.Queue()
        self._pending: set[Future] = set()
        self._idle = threading.Condition()
        self._workers = workers
        self._executor: ThreadPoolExecutor | None = None

    @classmethod
    def from_file(cls, path: Path, **kwargs) -> "Page":
        return cls(path.read_text(encoding="utf-8"), **kwargs)

    @classmethod
    def from_skeleton(cls, path: Path | None = None, **kwargs) -> "Page":
        """Build a page from a skeleton file, or the one shipped with the package."""
        if path is not None:
            return cls.from_file(path, **kwargs)
        markup = resources.files("promo_site.site").joinpath("templates", DEFAULT_SKELETON).read_text(encoding="utf-8")
        return cls(markup, **kwargs)

    # ------------------------------------------------------------------
    # Tree access
    # ------------------------------------------------------------------

    @property
    def body(self) -> Tag:
        return self.soup.body or self.soup

    def query(self, selector: str, root: Tag | None = None) -> Tag | None:
        return (root or self.soup).select_one(selector)

    def query_all(self, selector: str, root: Tag | None = None) -> list[Tag]:
        return list((root or self.soup).select(selector))

    def by_id(self, element_id: str) -> Tag | None:
        if not element_id:
            return None
        return self.soup.find(id=element_id)

    def create(self, name: str, class_: str | None = None, text: str | None = None, **attrs: Any) -> Tag:
        """Create a detached element."""
        if class_:
            attrs["class"] = class_
        element = self.soup.new_tag(name, attrs={k: str(v) for k, v in attrs.items()})
        if text is not None:
            element.string = text
        return element

    def fragment(self, markup: str) -> list[Any]:
        """Parse a markup fragment into nodes ready to be appended."""
        return list(BeautifulSoup(markup, HTML_PARSER).contents)

    def set_inner_html(self, element: Tag, markup: str) -> None:
        """Replace an element's children with parsed markup."""
        self.clear(element)
        for node in self.fragment(markup):
            element.append(node.extract())

    def set_text(self, element: Tag, text: str) -> None:
        element.string = text

    def html(self) -> str:
        return str(self.soup)

    # ------------------------------------------------------------------
    # Removal and teardown
    # ------------------------------------------------------------------

    def clear(self, element: Tag) -> None:
        """Remove all children of element, running their teardown hooks."""
        for child in list(element.children):
            if isinstance(child, Tag):
                self._release(child)
        element.clear()

    def remove(self, element: Tag) -> None:
        """Detach element from the tree, running teardown hooks beneath it."""
        self._release(element)
        element.extract()

    def contains(self, element: Tag) -> bool:
        """Whether element is currently attached to this page's document."""
        return any(parent is self.soup for parent in element.parents)

    def on_teardown(self, element: Tag, callback: Callable[[], None]) -> None:
        """Register callback to run when element is removed from the page."""
        self._binding(element).teardowns.append(callback)

    def _release(self, element: Tag) -> None:
        for node in [element, *element.find_all(True)]:
            binding = self._bindings.pop(id(node), None)
            if binding is None:
                continue
            for callback in binding.teardowns:
                try:
                    callback()
                except Exception as e:
                    logger.error(f"Teardown failed for <{node.name}>: {e}")

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def _binding(self, element: Tag) -> _Binding:
        binding = self._bindings.get(id(element))
        if binding is None or binding.element is not element:
            binding = _Binding(element=element)
            self._bindings[id(element)] = binding
        return binding

    def add_listener(self, element: Tag, event_type: str, listener: Listener) -> None:
        self._binding(element).listeners.setdefault(event_type, []).append(listener)

    def remove_listener(self, element: Tag, event_type: str, listener: Listener) -> None:
        binding = self._bindings.get(id(element))
        if binding is None or binding.element is not element:
            return
        handlers = binding.listeners.get(event_type, [])
        if listener in handlers:
            handlers.remove(listener)

    def dispatch(self, element: Tag, event_type: str, detail: Any = None) -> Event:
        """
        Dispatch an event on element and bubble it up through its ancestors.

        Listener exceptions are logged and do not stop the other listeners,
        the same way an uncaught error in one browser handler doesn't
        prevent the others from running.
        """
        event = Event(type=event_type, target=element, detail=detail)
        node: Tag | None = element
        while node is not None and not event.propagation_stopped:
            binding = self._bindings.get(id(node))
            if binding is not None and binding.element is node:
                event.current_target = node
                for listener in list(binding.listeners.get(event_type, [])):
                    try:
                        listener(event)
                    except Exception as e:
                        logger.error(f"Unhandled error in '{event_type}' listener: {e}")
            node = node.parent if isinstance(node.parent, Tag) else None
        event.current_target = None
        return event

    def click(self, element: Tag) -> Event:
        return self.dispatch(element, "click")

    # ------------------------------------------------------------------
    # Continuations
    # ------------------------------------------------------------------

    def call_soon(self, callback: Callable[[], None]) -> None:
        """Queue callback to run on the page thread at the next process_events()."""
        self._continuations.put(callback)

    def submit(
        self,
        func: Callable[..., Any],
        *args: Any,
        on_done: Callable[[Any, BaseException | None], None] | None = None
    ) -> Future:
        """
        Run func(*args) on a worker thread.

        on_done(result, error) is queued as a continuation when the work
        finishes; it runs on the page thread during process_events().
        """
        if self._executor is None:
            self._executor = ThreadPoolExecutor(max_workers=self._workers, thread_name_prefix="page")

        future = self._executor.submit(func, *args)
        with self._idle:
            self._pending.add(future)

        def finished(done: Future) -> None:
            if on_done is not None:
                error = done.exception()
                result = None if error is not None else done.result()
                self.call_soon(lambda: on_done(result, error))
            with self._idle:
                self._pending.discard(done)
                self._idle.notify_all()

        future.add_done_callback(finished)
        return future

    def process_events(self, wait: bool = False, timeout: float | None = None) -> int:
        """
        Run queued continuations on the calling (page) thread.

        Args:
            wait: First wait for all submitted work to finish.
            timeout: Upper bound in seconds for that wait.

        Returns:
            Number of continuations run.
        """
        if wait:
            self.wait_idle(timeout)

        count = 0
        while True:
            try:
                callback = self._continuations.get_nowait()
            except queue.Empty:
                break
            count += 1
            try:
                callback()
            except Exception as e:
                logger.error(f"Continuation failed: {e}")
        return count

    def wait_idle(self, timeout: float | None = None) -> bool:
        """
        Block until every submitted task has finished and queued its continuation.

        Returns:
            True if the page went idle within timeout.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._idle:
            while self._pending:
                remaining = None if deadline is None else deadline - time.monotonic()
                if remaining is not None and remaining <= 0:
                    return False
                self._idle.wait(remaining)
        return True

    def close(self) -> None:
        """Tear down every bound element and stop the worker pool."""
        self._release(self.soup)
        if self._executor is not None:
            self._executor.shutdown(wait=True)
            self._executor = None


class CancellationToken:
    """
    Cancellation flag owned by one navigation transition.

    Continuations capture the token that was current when their work was
    submitted and check it before touching the page. A later navigation
    cancels the token, so late results are dropped instead of applied.
    """

    def __init__(self, label: str = "") -> None:
        self.label = label
        self._cancelled = threading.Event()

    @property
    def cancelled(self) -> bool:
        return self._cancelled.is_set()

    def cancel(self) -> None:
        self._cancelled.set()

    def __repr__(self) -> str:
        state = "cancelled" if self.cancelled else "active"
        return f"CancellationToken({self.label!r}, {state})"
