"""
Drivers for the reveal engine.

FrameScheduler plays the part of a display's frame callback: every requested
frame runs once, after one frame interval, with a millisecond timestamp.
iter_reveal drives the same engine from a generator so a web response can
stream the reveal.
"""

import random
import threading
import time
from typing import Callable, Iterator, Optional

from osfit.streaming.reveal import DEFAULT_BASE_INTERVAL_MS, RevealEngine

DEFAULT_FRAME_INTERVAL_MS = 16


def monotonic_ms() -> float:
    return time.monotonic() * 1000.0


class FrameScheduler:
    """Runs one callback per requested frame on a timer thread."""

    def __init__(self, frame_interval_ms: float = DEFAULT_FRAME_INTERVAL_MS,
                 clock: Callable[[], float] = monotonic_ms):
        self.frame_interval_ms = frame_interval_ms
        self.clock = clock
        self._lock = threading.Lock()
        self._pending = set()

    def request_frame(self, callback: Callable[[float], None]) -> threading.Timer:
        timer = None

        def run():
            with self._lock:
                self._pending.discard(timer)
            callback(self.clock())

        timer = threading.Timer(self.frame_interval_ms / 1000.0, run)
        timer.daemon = True
        with self._lock:
            self._pending.add(timer)
        timer.start()
        return timer

    def cancel_frame(self, handle: threading.Timer) -> None:
        handle.cancel()
        with self._lock:
            self._pending.discard(handle)

    @property
    def pending_frames(self) -> int:
        with self._lock:
            return len(self._pending)


def iter_reveal(
    content: str,
    base_interval_ms: float = DEFAULT_BASE_INTERVAL_MS,
    clock: Callable[[], float] = monotonic_ms,
    sleep: Callable[[float], None] = time.sleep,
    rng: Optional[random.Random] = None,
) -> Iterator[str]:
    """
    Yield the newly visible fragment of ``content`` after each reveal tick.

    Joining everything yielded gives back ``content``. Closing the generator
    early cancels the engine.
    """
    engine = RevealEngine(rng=rng)
    engine.start(content, base_interval_ms)
    emitted = 0
    try:
        while True:
            engine.tick(clock())
            visible = engine.get_visible_prefix()
            if len(visible) > emitted:
                yield visible[emitted:]
                emitted = len(visible)
            if engine.is_complete:
                return
            sleep(base_interval_ms / 1000.0)
    finally:
        engine.cancel()
