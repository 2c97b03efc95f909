"""
Playback synchronization: clocks, cue cursors, the SyncEngine and the
host-side scheduler.
"""

from .clock import ManualClock, PlaybackClock, WallClock
from .cursor import CueCursor
from .engine import SyncEngine
from .scheduler import PANEL_SEPARATOR, PlaybackScheduler, PlaybackSnapshot

__all__ = [
    "ManualClock",
    "PlaybackClock",
    "WallClock",
    "CueCursor",
    "SyncEngine",
    "PANEL_SEPARATOR",
    "PlaybackScheduler",
    "PlaybackSnapshot",
]
