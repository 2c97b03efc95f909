"""
SubRip (.srt) reader.

Splits a subtitle document into RawTimedBlocks. Accepted block shapes:

    1
    00:00:01,000 --> 00:00:02,000
    text...

or, without the numeric index:

    00:00:01,000 --> 00:00:02,000
    text...
"""

from __future__ import annotations

import logging
import re
from typing import List, Optional

from models.cue import RawTimedBlock

TIME_ARROW = "-->"

_BLOCK_SPLIT = re.compile(r"\n[ \t]*\n")


class TimestampError(ValueError):
    """A caption timestamp could not be parsed."""


def parse_timestamp(ts: str) -> float:
    """
    Parse "HH:MM:SS,mmm", "HH:MM:SS.mmm", "MM:SS.mmm" or "SS.mmm" into seconds.

    The fractional part is read as milliseconds: shorter fractions are
    right-padded ("5" -> 500 ms) and longer ones truncated.

    Raises:
        TimestampError: If the value is not a well-formed timestamp.
    """
    raw = ts
    ts = ts.strip().replace(",", ".")
    if not ts:
        raise TimestampError("empty timestamp")

    clock, _, frac = ts.partition(".")
    parts = clock.split(":")
    if len(parts) > 3 or not all(p.strip().isdigit() for p in parts):
        raise TimestampError(f"malformed timestamp: {raw!r}")
    if frac and not frac.isdigit():
        raise TimestampError(f"malformed fraction in timestamp: {raw!r}")

    seconds = 0
    for p in parts:
        seconds = seconds * 60 + int(p)
    millis = int(frac[:3].ljust(3, "0")) if frac else 0
    return seconds + millis / 1000.0


def _parse_block(block: str) -> Optional[RawTimedBlock]:
    lines = [line.rstrip() for line in block.split("\n")]
    if lines and TIME_ARROW in lines[0]:
        time_idx = 0
    elif len(lines) > 1 and TIME_ARROW in lines[1]:
        time_idx = 1
    else:
        return None

    start_ts, _, end_part = lines[time_idx].partition(TIME_ARROW)
    # Anything after the end time (e.g. position hints) is ignored.
    end_tokens = end_part.split()
    start_ts = start_ts.strip()
    if not start_ts or not end_tokens:
        return None

    index = None
    if time_idx == 1 and lines[0].strip().isdigit():
        index = int(lines[0].strip())

    return RawTimedBlock(
        start_timestamp=start_ts,
        end_timestamp=end_tokens[0],
        lines=lines[time_idx + 1:],
        index=index,
    )


def parse_srt(text: str) -> List[RawTimedBlock]:
    """Split an SRT document into raw blocks in file order."""
    norm = text.lstrip("\ufeff").replace("\r\n", "\n").replace("\r", "\n")
    blocks: List[RawTimedBlock] = []
    for n, chunk in enumerate(_BLOCK_SPLIT.split(norm)):
        chunk = chunk.strip("\n")
        if not chunk.strip():
            continue
        block = _parse_block(chunk)
        if block is None:
            logging.debug(f"Skipping SRT chunk {n}: no time line")
            continue
        blocks.append(block)
    return blocks
