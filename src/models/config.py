"""
Typed configuration: one dataclass per section of config/default.yaml.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ConverterConfig:
    """Frame conversion configuration."""
    frames_dir: str = "frames"
    output_file: str = "rectFrames.json"
    width: int = 256
    height: int = 192
    fps: float = 30
    invert: bool = False
    th_mul: float = 0.95
    progress_interval: int = 200

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ConverterConfig":
        """Build from the `converter` section."""
        return cls(
            frames_dir=d.get("frames_dir", "frames"),
            output_file=d.get("output_file", "rectFrames.json"),
            width=d.get("width", 256),
            height=d.get("height", 192),
            fps=d.get("fps", 30),
            invert=bool(d.get("invert", False)),
            th_mul=d.get("th_mul", 0.95),
            progress_interval=d.get("progress_interval", 200),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "frames_dir": self.frames_dir,
            "output_file": self.output_file,
            "width": self.width,
            "height": self.height,
            "fps": self.fps,
            "invert": self.invert,
            "th_mul": self.th_mul,
            "progress_interval": self.progress_interval,
        }


@dataclass
class TrackConfig:
    """One caption track: SRT source, cue JSON output and display panel."""
    name: str
    source: str
    output: str
    panel: str = "left"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "TrackConfig":
        name = d["name"]
        return cls(
            name=name,
            source=d.get("source", f"transcript_{name}.srt"),
            output=d.get("output", f"transcript_{name}.json"),
            panel=d.get("panel", "left"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "source": self.source,
            "output": self.output,
            "panel": self.panel,
        }


def _default_tracks() -> List[TrackConfig]:
    return [
        TrackConfig("jp", "transcript_jp.srt", "transcript_jp.json", "left"),
        TrackConfig("romaji", "transcript_romaji.srt", "transcript_romaji.json", "left"),
        TrackConfig("en", "transcript_en.srt", "transcript_en.json", "right"),
        TrackConfig("es", "transcript_es.srt", "transcript_es.json", "right"),
    ]


@dataclass
class CaptionsConfig:
    """Caption compilation configuration."""
    lyrics_dir: str = "lyrics"
    tracks: List[TrackConfig] = field(default_factory=_default_tracks)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "CaptionsConfig":
        tracks = d.get("tracks")
        return cls(
            lyrics_dir=d.get("lyrics_dir", "lyrics"),
            tracks=[TrackConfig.from_dict(t) for t in tracks] if tracks else _default_tracks(),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lyrics_dir": self.lyrics_dir,
            "tracks": [t.to_dict() for t in self.tracks],
        }


@dataclass
class ServerConfig:
    """Artifact server configuration."""
    out_dir: str = "out"
    host: str = "127.0.0.1"
    port: int = 8080
    mount: str = "/out"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ServerConfig":
        return cls(
            out_dir=d.get("out_dir", "out"),
            host=d.get("host", "127.0.0.1"),
            port=d.get("port", 8080),
            mount=d.get("mount", "/out"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "out_dir": self.out_dir,
            "host": self.host,
            "port": self.port,
            "mount": self.mount,
        }


@dataclass
class PlaybackConfig:
    """Playback synchronization configuration."""
    video_offset_sec: float = 0.0
    caption_offset_sec: float = 0.0
    duration: Optional[float] = None
    tick_interval: float = 1.0 / 60.0

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "PlaybackConfig":
        return cls(
            video_offset_sec=d.get("video_offset_sec", 0.0),
            caption_offset_sec=d.get("caption_offset_sec", 0.0),
            duration=d.get("duration"),
            tick_interval=d.get("tick_interval", 1.0 / 60.0),
        )

    def to_dict(self) -> Dict[str, Any]:
        d: Dict[str, Any] = {
            "video_offset_sec": self.video_offset_sec,
            "caption_offset_sec": self.caption_offset_sec,
            "tick_interval": self.tick_interval,
        }
        if self.duration is not None:
            d["duration"] = self.duration
        return d


@dataclass
class Config:
    """
    Everything the command-line tools need, one section per concern.
    
    Built from the merged YAML layers plus command-line overrides.
    """
    converter: ConverterConfig = field(default_factory=ConverterConfig)
    captions: CaptionsConfig = field(default_factory=CaptionsConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    playback: PlaybackConfig = field(default_factory=PlaybackConfig)
    log_path: str = "logs/rectframes.log"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Config":
        """Build from the merged config dictionary; absent sections take defaults."""
        return cls(
            converter=ConverterConfig.from_dict(d.get("converter", {}) or {}),
            captions=CaptionsConfig.from_dict(d.get("captions", {}) or {}),
            server=ServerConfig.from_dict(d.get("server", {}) or {}),
            playback=PlaybackConfig.from_dict(d.get("playback", {}) or {}),
            log_path=d.get("log_path", "logs/rectframes.log"),
            log_level=d.get("log_level", "INFO"),
        )

    def to_dict(self) -> Dict[str, Any]:
        """Inverse of from_dict."""
        return {
            "converter": self.converter.to_dict(),
            "captions": self.captions.to_dict(),
            "server": self.server.to_dict(),
            "playback": self.playback.to_dict(),
            "log_path": self.log_path,
            "log_level": self.log_level,
        }
