"""
Streaming module - Progressive reveal of finished AI answers

This module provides:
- RevealEngine: content-aware chunked reveal with cancel and restart
- FrameScheduler: timer-driven frame callbacks for the engine
- iter_reveal: generator driver used for Server-Sent Events
"""

from osfit.streaming.reveal import (
    DEFAULT_BASE_INTERVAL_MS,
    RevealEngine,
    RevealState,
    next_chunk_size,
)
from osfit.streaming.scheduler import FrameScheduler, iter_reveal
