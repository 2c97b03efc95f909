"""
Load-time errors for artifact files.
"""

from __future__ import annotations


class ArtifactError(ValueError):
    """
    An artifact file could not be loaded; `field` names the offending part.

    Attributes:
        artifact: Artifact name or path.
        field: Offending field path (e.g. "rect_frames[3][0]"), or "<file>" /
            "<json>" for I/O and syntax failures.
    """

    def __init__(self, artifact: str, field: str, message: str):
        self.artifact = artifact
        self.field = field
        super().__init__(f"{artifact}: {field}: {message}")
