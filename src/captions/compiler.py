"""
Caption compiler: raw timed-text blocks -> sorted CueTrack.

One bad block never invalidates the track: blocks that cannot become a
valid cue are dropped with a warning.
Overlapping cues are kept as authored; at lookup time the earlier cue wins.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Iterable, List, Optional, Union

from models.cue import Cue, CueTrack, RawTimedBlock
from .srt import parse_srt, parse_timestamp


def _block_label(position: int, block: RawTimedBlock) -> str:
    label = f"block {position}"
    if block.index is not None:
        label += f" (#{block.index})"
    return f"{label} [{block.start_timestamp} --> {block.end_timestamp}]"


def compile_block(block: RawTimedBlock) -> Cue:
    """
    Compile a single block.

    Raises:
        ValueError: If the block cannot become a valid cue.
    """
    start = parse_timestamp(block.start_timestamp)
    end = parse_timestamp(block.end_timestamp)
    if start >= end:
        raise ValueError(f"start {start:.3f}s is not before end {end:.3f}s")

    text = "\n".join(line.rstrip() for line in block.lines if line.strip()).strip()
    if not text:
        raise ValueError("no text")
    return Cue(start=start, end=end, text=text)


def compile_cues(blocks: Iterable[RawTimedBlock], name: str = "") -> CueTrack:
    """
    Compile blocks into a CueTrack sorted by start.

    Ties keep authoring order. Empty input, or input where every block is
    dropped, gives a valid empty track.
    """
    cues: List[Cue] = []
    dropped = 0
    for position, block in enumerate(blocks):
        try:
            cues.append(compile_block(block))
        except ValueError as e:
            dropped += 1
            logging.warning(f"Caption track '{name}': dropping {_block_label(position, block)}: {e}")

    cues.sort(key=lambda c: c.start)

    if dropped:
        logging.info(f"Caption track '{name}': kept {len(cues)} cues, dropped {dropped}")
    if not cues:
        logging.warning(f"Caption track '{name}' is empty")
    return CueTrack(name=name, cues=cues)


def compile_srt(text: str, name: str = "") -> CueTrack:
    """Parse and compile an SRT document."""
    return compile_cues(parse_srt(text), name=name)


def compile_srt_file(path: Union[str, Path], name: Optional[str] = None) -> CueTrack:
    """Read a UTF-8 SRT file and compile it; the track name defaults to the file stem."""
    path = Path(path)
    text = path.read_text(encoding="utf-8-sig")
    return compile_srt(text, name=name if name is not None else path.stem)
