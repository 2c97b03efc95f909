"""
Host-side scheduler: one tick per display refresh.

Reads the clock, applies the video and caption offsets, asks the SyncEngine
what is active, and packages the result for whoever draws it. Timing loops
live here, never in the engine, so the engine stays testable with synthetic
time values.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence

from models.frame_set import FrameSet
from models.rect import Rectangle
from .clock import PlaybackClock
from .engine import SyncEngine

# Blank line between tracks sharing a panel.
PANEL_SEPARATOR = "\n\n"


@dataclass
class PlaybackSnapshot:
    """
    What to show for one tick.
    
    Attributes:
        time: Clock time the tick was resolved for.
        frame_index: Active frame, or None (blank stage).
        frame_changed: True when frame_index differs from the last drawn frame.
        rectangles: Rectangles of the active frame (empty when none).
        cues: Active cue text per track (None when no cue is active).
        panels: Text per display panel, tracks joined by a blank line.
        ended: Playback reached the end; the host should stop ticking.
    """
    time: float
    frame_index: Optional[int] = None
    frame_changed: bool = False
    rectangles: List[Rectangle] = field(default_factory=list)
    cues: Dict[str, Optional[str]] = field(default_factory=dict)
    panels: Dict[str, str] = field(default_factory=dict)
    ended: bool = False


class PlaybackScheduler:
    """
    Drives a SyncEngine from a PlaybackClock.

    Example:
        engine = SyncEngine.from_frame_set(frame_set, clock.duration, tracks)
        scheduler = PlaybackScheduler(engine, frame_set, clock,
                                      panels={"left": ["jp", "romaji"], "right": ["en", "es"]})
        snapshot = scheduler.tick()
    """

    def __init__(
        self,
        engine: SyncEngine,
        frame_set: FrameSet,
        clock: PlaybackClock,
        panels: Optional[Mapping[str, Sequence[str]]] = None,
        video_offset: float = 0.0,
        caption_offset: float = 0.0,
    ):
        self.engine = engine
        self.frame_set = frame_set
        self.clock = clock
        self.panels: Dict[str, List[str]] = {k: list(v) for k, v in (panels or {}).items()}
        self.video_offset = video_offset
        self.caption_offset = caption_offset
        self._last_frame: Optional[int] = None

    @property
    def last_frame(self) -> Optional[int]:
        return self._last_frame

    def tick(self, now: Optional[float] = None) -> PlaybackSnapshot:
        """Resolve the clock's current time, or `now` when given."""
        t = self.clock.current_time() if now is None else now

        video_t = max(0.0, t + self.video_offset)
        idx = self.engine.active_frame(video_t)
        ended = self.clock.ended or self.engine.is_finished(video_t)

        frame_changed = idx is not None and idx != self._last_frame
        if frame_changed:
            self._last_frame = idx
        rects = self.frame_set.frames[idx] if idx is not None else []

        if ended:
            cue_texts: Dict[str, Optional[str]] = {name: None for name in self.engine.track_names}
        else:
            active = self.engine.active_cues(t + self.caption_offset)
            cue_texts = {name: (cue.text if cue else None) for name, cue in active.items()}

        panels = {
            panel: PANEL_SEPARATOR.join(cue_texts[name] for name in names if cue_texts.get(name))
            for panel, names in self.panels.items()
        }

        return PlaybackSnapshot(
            time=t,
            frame_index=idx,
            frame_changed=frame_changed,
            rectangles=list(rects),
            cues=cue_texts,
            panels=panels,
            ended=ended,
        )

    def run(
        self,
        on_snapshot: Callable[[PlaybackSnapshot], None],
        interval: float = 1.0 / 60.0,
        sleep: Callable[[float], None] = time.sleep,
        max_ticks: Optional[int] = None,
    ) -> int:
        """
        Tick until playback ends (or `max_ticks` is reached).

        Returns:
            Number of ticks issued.
        """
        ticks = 0
        logging.info(
            f"Sync clock: frames={self.engine.frame_count}, duration={self.engine.duration}, "
            f"effective_fps={self.engine.effective_rate:.3f}, video_offset={self.video_offset}"
        )
        while max_ticks is None or ticks < max_ticks:
            snapshot = self.tick()
            ticks += 1
            on_snapshot(snapshot)
            if snapshot.ended:
                break
            sleep(interval)
        logging.info(f"Playback stopped after {ticks} ticks")
        return ticks
