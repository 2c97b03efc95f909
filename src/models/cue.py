"""
Caption models: raw timed-text blocks, compiled cues and cue tracks.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterator, List, Optional


@dataclass(frozen=True)
class RawTimedBlock:
    """
    One human-authored caption block before compilation.
    
    Attributes:
        start_timestamp: Start time as written (e.g. "00:01:02,500").
        end_timestamp: End time as written.
        lines: Text lines in authoring order.
        index: Optional sequence number from the source file.
    """
    start_timestamp: str
    end_timestamp: str
    lines: List[str] = field(default_factory=list)
    index: Optional[int] = None


@dataclass(frozen=True)
class Cue:
    """
    A compiled caption cue.
    
    Attributes:
        start: Start time in seconds.
        end: End time in seconds (strictly after start).
        text: Caption text; multiple lines are joined with "\\n".
    """
    start: float
    end: float
    text: str

    def __post_init__(self):
        if not self.start < self.end:
            raise ValueError(f"Cue start must be before end ({self.start} >= {self.end})")
        if not self.text:
            raise ValueError("Cue text must not be empty")

    def contains(self, t: float) -> bool:
        """Inclusive at both ends."""
        return self.start <= t <= self.end

    def to_dict(self) -> dict:
        """Compact cue-file record."""
        return {"s": self.start, "e": self.end, "t": self.text}


@dataclass
class CueTrack:
    """
    Cues for one caption track, sorted ascending by start.

    An empty track is valid and means "no captions available".
    """
    name: str = ""
    cues: List[Cue] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.cues)

    def __iter__(self) -> Iterator[Cue]:
        return iter(self.cues)

    def __getitem__(self, index: int) -> Cue:
        return self.cues[index]

    @property
    def is_empty(self) -> bool:
        return not self.cues

    @property
    def duration(self) -> float:
        """End of the last cue, 0.0 for an empty track."""
        return max((c.end for c in self.cues), default=0.0)
