"""
Artifact files: frame set and cue codecs, plus the staleness check used by
the offline build.
"""

from .errors import ArtifactError
from .frame_set_codec import (
    DEFAULT_FILE_NAME,
    dump_frame_set,
    frame_set_from_dict,
    frame_set_to_dict,
    load_frame_set,
)
from .cue_codec import cue_track_from_list, dump_cue_track, load_cue_track
from .freshness import ensure_fresh, needs_regen

__all__ = [
    "ArtifactError",
    "DEFAULT_FILE_NAME",
    "dump_frame_set",
    "frame_set_from_dict",
    "frame_set_to_dict",
    "load_frame_set",
    "cue_track_from_list",
    "dump_cue_track",
    "load_cue_track",
    "ensure_fresh",
    "needs_regen",
]
