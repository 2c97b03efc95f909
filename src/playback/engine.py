"""
Playback synchronization engine.

Maps one continuously advancing time value (the audio clock) onto a frame
index and onto the active cue of each caption track. The engine never reads
a clock itself; the host calls it with the time it wants resolved.
"""

from __future__ import annotations

import math
from typing import Dict, Iterable, Mapping, Optional, Union

from models.cue import Cue, CueTrack
from models.frame_set import FrameSet
from .cursor import CueCursor

Tracks = Union[Mapping[str, CueTrack], Iterable[CueTrack]]


class SyncEngine:
    """
    Frame and cue resolution for one playback session.

    The effective frame rate is `frame_count / duration`, computed once here
    from the measured audio duration rather than from the frame set's
    encode-time fps, so the animation always spans the whole track.

    Out-of-range or unknown inputs yield None; nothing here raises during
    playback.
    """

    def __init__(self, frame_count: int, duration: Optional[float], tracks: Tracks = ()):
        self._frame_count = max(0, int(frame_count))
        self._duration = duration
        if duration is not None and math.isfinite(duration) and duration > 0:
            self._rate = self._frame_count / duration
        else:
            self._rate = 0.0

        if isinstance(tracks, Mapping):
            items = list(tracks.items())
        else:
            items = [(track.name, track) for track in tracks]
        self._cursors: Dict[str, CueCursor] = {name: CueCursor(track.cues) for name, track in items}

    @classmethod
    def from_frame_set(
        cls,
        frame_set: FrameSet,
        duration: Optional[float],
        tracks: Tracks = (),
    ) -> "SyncEngine":
        return cls(frame_set.frame_count, duration, tracks)

    @property
    def frame_count(self) -> int:
        return self._frame_count

    @property
    def duration(self) -> Optional[float]:
        return self._duration

    @property
    def effective_rate(self) -> float:
        """Frames per second of audio; 0.0 when the duration is unknown."""
        return self._rate

    @property
    def track_names(self):
        return list(self._cursors)

    def frame_position(self, t: float) -> Optional[int]:
        """
        Unbounded frame position for `t` (negative time clamps to 0).

        NaN gives None. A position too large to represent (including +inf)
        maps to frame_count, i.e. past the end.
        """
        if not self._rate or math.isnan(t):
            return None
        pos = max(0.0, t) * self._rate
        if not math.isfinite(pos):
            return self._frame_count
        return int(math.floor(pos))

    def active_frame(self, t: float) -> Optional[int]:
        """Frame index for time `t`, or None past the end of playback."""
        idx = self.frame_position(t)
        if idx is None or idx >= self._frame_count:
            return None
        return idx

    def is_finished(self, t: float) -> bool:
        """True once `t` maps at or past the last frame's end."""
        idx = self.frame_position(t)
        return idx is not None and idx >= self._frame_count

    def active_cue(self, track: str, t: float) -> Optional[Cue]:
        """Active cue on `track` at time `t`, or None (also for unknown tracks)."""
        cursor = self._cursors.get(track)
        if cursor is None:
            return None
        return cursor.lookup(t)

    def active_cues(self, t: float) -> Dict[str, Optional[Cue]]:
        return {name: cursor.lookup(t) for name, cursor in self._cursors.items()}

    def reset(self) -> None:
        """Rewind every cue cursor to the start."""
        for cursor in self._cursors.values():
            cursor.reset()
