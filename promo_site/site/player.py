"""
Audio playback widget for promo-site.

A PlaybackWidget is mounted once per playable surface (an album card's
preview, each track of the album overlay). It builds its own sub-tree
in the page and keeps a small state machine in sync with a MediaElement:

    PAUSED ──toggle──> (play requested) ──ok──> PLAYING
      ^                       │                   │  │
      │                    refused             waiting playing
      │                       v                   v  │
      └───────────────── PAUSED             BUFFERING┘
    PLAYING ──ended──> ENDED        any ──error──> ERRORED
    any ──load_track──> PAUSED

Widget Markup:
    <div class="audio-player" data-src="albums/d/tracks/01.mp3">
      <button class="play-pause" aria-label="Play">Play</button>
      <div class="progress-bar"><div class="progress" style="width: 0%"></div></div>
      <span class="current-time">0:00</span>
      <span class="duration">0:00</span>
    </div>

Media Elements:
    MediaElement is the interface the widget drives. HeadlessMediaElement
    is the implementation used when rendering without a browser: it keeps
    playback state in memory, is advanced explicitly (advance(), finish(),
    fail()), and reads the real duration of local audio files with mutagen.

Usage:
    widget = PlaybackWidget(page, container, HeadlessMediaElement(fetcher))
    widget.load_track("albums/night-drive/tracks/01-intro.mp3")
    widget.toggle()
"""

import math
from abc import ABC, abstractmethod
from concurrent.futures import Future
from enum import Enum
from pathlib import Path
from typing import Any, Callable

import mutagen
from bs4 import Tag

from promo_site.content.fetcher import ContentFetcher
from promo_site.core.exceptions import PlaybackError
from promo_site.core.logger import get_logger
from promo_site.site.dom import Event, Page

logger = get_logger(__name__)


MEDIA_EVENTS = ("timeupdate", "loadedmetadata", "ended", "error", "waiting", "playing")

ZERO_TIME = "0:00"
PLAY_LABEL = "Play"
PAUSE_LABEL = "Pause"


def format_time(seconds: Any) -> str:
    """
    Format a duration in seconds as "m:ss".

    Fractions are truncated. Anything that isn't a finite, non-negative
    number is shown as "0:00".

    Example:
        format_time(65)     # "1:05"
        format_time(599.9)  # "9:59"
        format_time(None)   # "0:00"
    """
    if isinstance(seconds, bool):
        return ZERO_TIME
    try:
        value = float(seconds)
    except (TypeError, ValueError):
        return ZERO_TIME
    if not math.isfinite(value) or value < 0:
        return ZERO_TIME

    minutes, remaining = divmod(int(value), 60)
    return f"{minutes}:{remaining:02d}"


class PlaybackState(Enum):
    PAUSED = "paused"
    PLAYING = "playing"
    BUFFERING = "buffering"
    ENDED = "ended"
    ERRORED = "errored"


class MediaErrorKind(Enum):
    """
    Classification of a media error.

    The numeric media error codes 1-4 map to the first four kinds;
    anything else is UNKNOWN.
    """

    ABORTED = 1
    NETWORK = 2
    DECODE = 3
    SRC_NOT_SUPPORTED = 4
    UNKNOWN = 0

    @classmethod
    def from_code(cls, code: Any) -> "MediaErrorKind":
        if isinstance(code, int) and not isinstance(code, bool):
            for kind in cls:
                if kind.value == code and kind is not cls.UNKNOWN:
                    return kind
        return cls.UNKNOWN

    @property
    def description(self) -> str:
        return _ERROR_DESCRIPTIONS[self]


_ERROR_DESCRIPTIONS = {
    MediaErrorKind.ABORTED: "Playback aborted by user",
    MediaErrorKind.NETWORK: "Network error while loading",
    MediaErrorKind.DECODE: "Audio decoding failed",
    MediaErrorKind.SRC_NOT_SUPPORTED: "Audio format not supported",
    MediaErrorKind.UNKNOWN: "Unknown error",
}


MediaListener = Callable[["MediaElement"], None]


class MediaElement(ABC):
    """
    Interface of the media element a PlaybackWidget drives.

    Attributes:
        src: Current source URL or content path ("" when unset).
        paused: True unless playback is running.
        current_time: Elapsed seconds.
        duration: Total seconds, or None while unknown.
        error_code: Media error code of the last failure, or None.

    Listeners receive the element itself and are called on the page
    thread for the events in MEDIA_EVENTS.
    """

    def __init__(self) -> None:
        self._src = ""
        self.paused = True
        self.current_time = 0.0
        self.duration: float | None = None
        self.error_code: int | None = None
        self._listeners: dict[str, list[MediaListener]] = {}

    @property
    def src(self) -> str:
        return self._src

    @src.setter
    def src(self, value: str) -> None:
        self._src = value or ""
        self.paused = True
        self.current_time = 0.0
        self.duration = None
        self.error_code = None

    def add_event_listener(self, event_type: str, listener: MediaListener) -> None:
        self._listeners.setdefault(event_type, []).append(listener)

    def remove_event_listener(self, event_type: str, listener: MediaListener) -> None:
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def emit(self, event_type: str) -> None:
        for listener in list(self._listeners.get(event_type, [])):
            listener(self)

    @abstractmethod
    def play(self) -> Future:
        """Request playback. The future fails if the host refuses."""
        pass

    @abstractmethod
    def pause(self) -> None:
        pass

    def release(self) -> None:
        """Drop the source and every listener."""
        self._listeners.clear()
        self._src = ""
        self.paused = True


class HeadlessMediaElement(MediaElement):
    """
    In-memory media element.

    Playback doesn't progress on its own; call advance() to move time
    forward, finish() to reach the end and fail() to simulate a media
    error. When a fetcher is given and the source resolves to a local
    file, the duration is read from the file's audio stream with mutagen
    and "loadedmetadata" is emitted.

    Attributes:
        fetcher: Resolves content paths to local files for probing.
        allow_playback: When False, play() is refused, like a browser
                        blocking autoplay.
    """

    def __init__(self, fetcher: ContentFetcher | None = None, allow_playback: bool = True) -> None:
        super().__init__()
        self.fetcher = fetcher
        self.allow_playback = allow_playback

    @MediaElement.src.setter
    def src(self, value: str) -> None:
        MediaElement.src.fset(self, value)
        if not self._src:
            return
        duration = self._probe_duration(self._src)
        if duration is not None:
            self.set_duration(duration)

    def _probe_duration(self, source: str) -> float | None:
        if self.fetcher is None:
            return None
        path = self.fetcher.local_path(source)
        if path is None:
            return None
        return probe_duration(path)

    def set_duration(self, seconds: float) -> None:
        self.duration = seconds
        self.emit("loadedmetadata")

    def play(self) -> Future:
        future: Future = Future()
        if not self._src:
            future.set_exception(PlaybackError(
                "No source loaded",
                kind=MediaErrorKind.SRC_NOT_SUPPORTED
            ))
            return future
        if not self.allow_playback:
            future.set_exception(PlaybackError(
                "Playback was refused by the host",
                details={"src": self._src}
            ))
            return future

        # Playing a finished track starts it over
        if self.duration is not None and self.current_time >= self.duration:
            self.current_time = 0.0
        if self.paused:
            self.paused = False
            self.emit("playing")
        future.set_result(None)
        return future

    def pause(self) -> None:
        self.paused = True

    def advance(self, seconds: float) -> None:
        """Move playback forward; emits "timeupdate", then "ended" at the end."""
        if self.paused:
            return
        self.current_time += seconds
        if self.duration is not None and self.current_time >= self.duration:
            self.current_time = self.duration
            self.emit("timeupdate")
            self.finish()
            return
        self.emit("timeupdate")

    def stall(self) -> None:
        self.emit("waiting")

    def resume(self) -> None:
        self.emit("playing")

    def finish(self) -> None:
        self.paused = True
        self.emit("ended")

    def fail(self, code: int | None) -> None:
        self.error_code = code
        self.paused = True
        self.emit("error")


def probe_duration(path: Path) -> float | None:
    """
    Read the length in seconds of an audio file.

    Returns:
        The duration, or None if mutagen can't identify the file.
    """
    try:
        audio = mutagen.File(path)
    except (mutagen.MutagenError, OSError) as e:
        logger.debug(f"Could not read audio info from {path}: {e}")
        return None
    if audio is None or getattr(audio, "info", None) is None:
        return None
    length = getattr(audio.info, "length", None)
    return float(length) if length else None


class PlaybackWidget:
    """
    Play/pause control with a progress bar for one media source.

    Attributes:
        page: Page the widget is mounted in.
        root: The widget's `.audio-player` element.
        media: The MediaElement being driven.
        state: Current PlaybackState.
        last_error: Most recent PlaybackError, or None.

    Lifecycle:
        The constructor mounts the markup into `container` and registers
        teardown() with the page, so removing the container (or any
        ancestor) through the page releases the widget.
    """

    def __init__(self, page: Page, container: Tag, media: MediaElement | None = None) -> None:
        self.page = page
        self.media = media or HeadlessMediaElement()
        self.state = PlaybackState.PAUSED
        self.last_error: PlaybackError | None = None
        self.progress_percent = 0.0
        self._torn_down = False

        self.root = page.create("div", class_="audio-player")
        self.button = page.create("button", class_="play-pause", text=PLAY_LABEL, type="button")
        self.button["aria-label"] = PLAY_LABEL
        progress_bar = page.create("div", class_="progress-bar")
        self.progress = page.create("div", class_="progress", style="width: 0%")
        progress_bar.append(self.progress)
        self.current_time = page.create("span", class_="current-time", text=ZERO_TIME)
        self.duration = page.create("span", class_="duration", text=ZERO_TIME)
        for child in (self.button, progress_bar, self.current_time, self.duration):
            self.root.append(child)
        container.append(self.root)

        self._media_handlers: dict[str, Callable[[MediaElement], None]] = {
            "timeupdate": lambda media: self._on_time_update(),
            "loadedmetadata": lambda media: self._on_metadata(),
            "ended": lambda media: self._on_ended(),
            "error": lambda media: self._on_error(),
            "waiting": lambda media: self._set_state(PlaybackState.BUFFERING),
            "playing": lambda media: self._on_playing(),
        }
        for event_type, handler in self._media_handlers.items():
            self.media.add_event_listener(event_type, handler)

        page.add_listener(self.button, "click", self._on_button_click)
        page.on_teardown(self.root, self.teardown)

    @property
    def source(self) -> str:
        return self.media.src

    @property
    def torn_down(self) -> bool:
        return self._torn_down

    def load_track(self, url: str) -> None:
        """
        Point the widget at a new source and reset it to PAUSED.

        Works from any state; a previous error is cleared.
        """
        if self._torn_down:
            logger.warning(f"Ignoring load_track on a torn down player: {url}")
            return

        if not self.media.paused:
            self.media.pause()
        self.last_error = None
        self.root["data-src"] = url
        self.page.set_text(self.duration, ZERO_TIME)
        self.media.src = url
        self._reset()
        self._set_state(PlaybackState.PAUSED)
        logger.debug(f"Loaded track: {url}")

    def toggle(self) -> None:
        """Start playback when paused, pause it otherwise."""
        if self._torn_down:
            return

        if not self.media.paused:
            self.media.pause()
            self._set_state(PlaybackState.PAUSED)
            self._update_button(False)
            return

        try:
            request = self.media.play()
        except Exception as e:
            self._on_play_settled(None, e)
            return

        if request.done():
            self._settle(request)
        else:
            # Resolved off-thread; apply the result on the page thread
            request.add_done_callback(lambda done: self.page.call_soon(lambda: self._settle(done)))

    def teardown(self) -> None:
        """Detach listeners, stop playback and release the media element."""
        if self._torn_down:
            return
        self._torn_down = True

        self.page.remove_listener(self.button, "click", self._on_button_click)
        for event_type, handler in self._media_handlers.items():
            self.media.remove_event_listener(event_type, handler)
        if not self.media.paused:
            self.media.pause()
        self.media.release()
        logger.debug(f"Player released: {self.root.get('data-src', '')}")

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _on_button_click(self, event: Event) -> None:
        # Keep the click from reaching an enclosing album card
        event.stop_propagation()
        self.toggle()

    def _settle(self, request: Future) -> None:
        error = request.exception()
        self._on_play_settled(None, error)

    def _on_play_settled(self, result: Any, error: BaseException | None) -> None:
        if self._torn_down:
            return

        if error is None:
            self._set_state(PlaybackState.PLAYING)
            self._update_button(True)
            return

        if isinstance(error, PlaybackError):
            self.last_error = error
        else:
            self.last_error = PlaybackError(str(error), details={"src": self.media.src})
        logger.error(f"Playback failed for {self.media.src or '<no source>'}: {self.last_error.message}")
        self._set_state(PlaybackState.PAUSED)
        self._update_button(False)

    def _on_playing(self) -> None:
        if self.state in (PlaybackState.PAUSED, PlaybackState.BUFFERING):
            self._set_state(PlaybackState.PLAYING)

    def _on_time_update(self) -> None:
        duration = self.media.duration
        elapsed = self.media.current_time
        if duration and duration > 0 and math.isfinite(duration):
            percent = min(max(elapsed / duration * 100, 0.0), 100.0)
        else:
            percent = 0.0
        self._set_progress(percent)
        self.page.set_text(self.current_time, format_time(elapsed))

    def _on_metadata(self) -> None:
        self.page.set_text(self.duration, format_time(self.media.duration))

    def _on_ended(self) -> None:
        self._set_state(PlaybackState.ENDED)
        self._reset()

    def _on_error(self) -> None:
        kind = MediaErrorKind.from_code(self.media.error_code)
        self.last_error = PlaybackError(
            kind.description,
            details={"src": self.media.src, "code": self.media.error_code},
            kind=kind
        )
        logger.error(f"Audio error for {self.media.src or '<no source>'}: {kind.description}")
        self._set_state(PlaybackState.ERRORED)
        self._update_button(False)

    # ------------------------------------------------------------------
    # Display
    # ------------------------------------------------------------------

    def _set_state(self, state: PlaybackState) -> None:
        if state is not self.state:
            logger.debug(f"Player {self.state.value} -> {state.value}")
            self.state = state

    def _reset(self) -> None:
        self._set_progress(0.0)
        self.page.set_text(self.current_time, ZERO_TIME)
        self._update_button(False)

    def _set_progress(self, percent: float) -> None:
        self.progress_percent = percent
        self.progress["style"] = f"width: {round(percent, 2):g}%"

    def _update_button(self, playing: bool) -> None:
        label = PAUSE_LABEL if playing else PLAY_LABEL
        self.button["aria-label"] = label
        self.page.set_text(self.button, label)
        classes = [name for name in self.button.get_attribute_list("class") if name and name != "playing"]
        if playing:
            classes.append("playing")
        self.button["class"] = classes
