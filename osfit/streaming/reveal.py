"""
Chunked reveal of an already-complete text.

A finished AI answer is shown to the reader a few characters at a time so it
reads like live generation. Chunk sizes follow the content: whole short words
at word boundaries, long strides inside fenced code, single characters on
punctuation, and small random strides elsewhere.

The engine does not own a clock. Each call to ``tick`` carries a timestamp in
milliseconds and a chunk is revealed only once ``base_interval_ms`` has passed
since the previous reveal, so the pace does not depend on how often ticks
arrive. An optional scheduler (see scheduler.py) drives ticks continuously.
"""

import random
import re
import threading
from dataclasses import dataclass
from typing import Any, Callable, Optional

from osfit.logger import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_INTERVAL_MS = 8

WORD_RUN_MAX = 15
CODE_FENCE = "```"
CODE_CHUNK = 10
PUNCTUATION = ".,!?:;"
MIN_STRIDE = 2
MAX_STRIDE = 5  # exclusive

_WORD_RUN = re.compile(r"^\s*\S+")


def next_chunk_size(position: int, text: str, rng: Optional[random.Random] = None) -> int:
    """
    Number of characters to reveal from ``position``.

    Always within [0, len(text) - position]; 0 only when nothing remains.
    """
    remaining = len(text) - position
    if remaining <= 0:
        return 0

    char = text[position]

    # At word boundaries, take the whole upcoming word
    if char.isspace():
        # One character past the limit is enough to tell a short run from a long one
        match = _WORD_RUN.match(text[position:position + WORD_RUN_MAX + 1])
        if match and len(match.group(0)) <= WORD_RUN_MAX:
            return min(len(match.group(0)), remaining)

    # Code streams faster
    if CODE_FENCE in text[max(0, position - 3):position]:
        return min(CODE_CHUNK, remaining)

    if char in PUNCTUATION:
        return 1

    rng = rng or random
    return min(rng.randrange(MIN_STRIDE, MAX_STRIDE), remaining)


@dataclass
class RevealState:
    """Progress of one reveal session."""
    source_text: str = ""
    revealed_length: int = 0
    is_complete: bool = False
    last_tick_timestamp: Optional[float] = None

    def reset(self, source_text: str) -> None:
        self.source_text = source_text
        self.revealed_length = 0
        self.is_complete = False
        self.last_tick_timestamp = None

    @property
    def visible_prefix(self) -> str:
        return self.source_text[:self.revealed_length]


class RevealEngine:
    """
    Reveals a text incrementally and reports completion once.

    Args:
        scheduler: Object with ``request_frame(callback) -> handle`` and
            ``cancel_frame(handle)``. Without one, the caller ticks by hand.
        on_update: Called with the visible prefix after every reveal.
        on_complete: Called once when the whole text is visible.
        rng: Random source for the default stride.

    Frames may arrive on a scheduler thread while start or cancel are called
    from another; a re-entrant lock serialises them, so callbacks may call
    back into the engine.
    """

    def __init__(
        self,
        scheduler: Any = None,
        on_update: Optional[Callable[[str], None]] = None,
        on_complete: Optional[Callable[[], None]] = None,
        rng: Optional[random.Random] = None,
    ):
        self.scheduler = scheduler
        self.on_update = on_update
        self.on_complete = on_complete
        self.rng = rng or random.Random()
        self.state = RevealState()
        self.base_interval_ms: float = DEFAULT_BASE_INTERVAL_MS
        self._started = False
        self._frame_handle = None
        self._frame_token = None
        self._lock = threading.RLock()

    @property
    def is_complete(self) -> bool:
        return self.state.is_complete

    @property
    def is_running(self) -> bool:
        return self._frame_handle is not None

    def start(self, source_text: str, base_interval_ms: float = DEFAULT_BASE_INTERVAL_MS) -> None:
        """Begin revealing ``source_text``, restarting if it differs from the current text."""
        if base_interval_ms < 0:
            raise ValueError("base_interval_ms must not be negative")
        with self._lock:
            self.base_interval_ms = base_interval_ms

            if not self._started or source_text != self.state.source_text:
                # A replaced text is abandoned without firing completion for it
                self._cancel_frame()
                self.state.reset(source_text)
                self._started = True
                logger.debug(f"Reveal started for {len(source_text)} chars")

            if not self.state.is_complete:
                self._schedule()

    def get_visible_prefix(self) -> str:
        with self._lock:
            return self.state.visible_prefix

    def cancel(self) -> None:
        """Stop the scheduling loop. Safe to call repeatedly or after completion."""
        with self._lock:
            self._cancel_frame()

    def tick(self, timestamp_ms: float) -> None:
        """Advance the reveal by at most one chunk."""
        with self._lock:
            self._tick(timestamp_ms)

    def _tick(self, timestamp_ms: float) -> None:
        state = self.state
        if not self._started or state.is_complete:
            return

        if state.revealed_length >= len(state.source_text):
            self._complete()
            return

        if state.last_tick_timestamp is None:
            state.last_tick_timestamp = timestamp_ms

        if timestamp_ms - state.last_tick_timestamp < self.base_interval_ms:
            return

        state.last_tick_timestamp = timestamp_ms
        chunk = next_chunk_size(state.revealed_length, state.source_text, self.rng)
        state.revealed_length = min(state.revealed_length + chunk, len(state.source_text))

        if self.on_update is not None:
            self.on_update(state.visible_prefix)

        if state.revealed_length >= len(state.source_text):
            self._complete()

    def _complete(self) -> None:
        self.state.is_complete = True
        self._cancel_frame()
        logger.debug("Reveal complete")
        if self.on_complete is not None:
            self.on_complete()

    def _schedule(self) -> None:
        if self.scheduler is None or self._frame_handle is not None:
            return
        token = object()
        self._frame_token = token
        self._frame_handle = self.scheduler.request_frame(
            lambda timestamp_ms: self._on_frame(timestamp_ms, token)
        )

    def _on_frame(self, timestamp_ms: float, token: object) -> None:
        with self._lock:
            # A frame that was already in flight when the loop was cancelled or restarted
            if token is not self._frame_token:
                return
            self._frame_handle = None
            self._frame_token = None
            self._tick(timestamp_ms)
            if not self.state.is_complete:
                self._schedule()

    def _cancel_frame(self) -> None:
        self._frame_token = None
        if self._frame_handle is not None:
            handle = self._frame_handle
            self._frame_handle = None
            self.scheduler.cancel_frame(handle)
