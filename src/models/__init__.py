"""
Typed models for the rectframes application.

Value types shared by the encoder, caption compiler, artifact codecs and
the playback engine.
"""

from .frame import BinaryFrame, FrameImage
from .rect import Rectangle, ON, OFF
from .frame_set import FrameSet
from .cue import Cue, CueTrack, RawTimedBlock
from .config import (
    Config,
    ConverterConfig,
    CaptionsConfig,
    TrackConfig,
    ServerConfig,
    PlaybackConfig,
)

__all__ = [
    # Frames
    "BinaryFrame",
    "FrameImage",
    "Rectangle",
    "ON",
    "OFF",
    "FrameSet",
    # Captions
    "Cue",
    "CueTrack",
    "RawTimedBlock",
    # Config
    "Config",
    "ConverterConfig",
    "CaptionsConfig",
    "TrackConfig",
    "ServerConfig",
    "PlaybackConfig",
]
