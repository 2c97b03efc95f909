"""
Caption handling: SRT parsing and cue compilation.
"""

from .srt import TimestampError, parse_srt, parse_timestamp
from .compiler import compile_block, compile_cues, compile_srt, compile_srt_file

__all__ = [
    "TimestampError",
    "parse_srt",
    "parse_timestamp",
    "compile_block",
    "compile_cues",
    "compile_srt",
    "compile_srt_file",
]
