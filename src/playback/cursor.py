"""
Forward-biased cue lookup.

While query time does not decrease, the cursor only moves forward and each
call is amortized O(1). A backward jump (seek/rewind) repositions the
cursor with a binary search over the running maximum of cue end times, which
lands exactly where a fresh scan from the first cue would.
"""

from __future__ import annotations

import math
from bisect import bisect_left
from typing import List, Optional, Sequence

from models.cue import Cue


class CueCursor:
    """
    Cursor over one cue track.

    `lookup(t)` returns the first cue (in track order) that contains `t`,
    or None. Overlapping cues resolve to the earlier one.
    """

    def __init__(self, cues: Sequence[Cue]):
        self._cues: List[Cue] = list(cues)
        # Running max of ends: monotone even when authored cues overlap.
        self._max_ends: List[float] = []
        running = -math.inf
        for cue in self._cues:
            running = max(running, cue.end)
            self._max_ends.append(running)
        self._index = 0
        self._last_t: Optional[float] = None

    @property
    def index(self) -> int:
        return self._index

    def __len__(self) -> int:
        return len(self._cues)

    def reset(self) -> None:
        """Move back to the first cue."""
        self._index = 0
        self._last_t = None

    def seek(self, t: float) -> int:
        """Reposition for time `t` without scanning; returns the new index."""
        self._index = bisect_left(self._max_ends, t)
        self._last_t = t
        return self._index

    def lookup(self, t: float) -> Optional[Cue]:
        cues = self._cues
        if not cues or math.isnan(t):
            return None

        if self._last_t is not None and t < self._last_t:
            self.seek(t)
        else:
            i = self._index
            while i < len(cues) and cues[i].end < t:
                i += 1
            self._index = i
            self._last_t = t

        i = self._index
        if i < len(cues) and cues[i].contains(t):
            return cues[i]
        return None
