"""
Command-line entry point for rectframes.

Builds the playback artifacts (rectangle frame set + caption cue files),
serves them to the browser player, and can replay them headlessly.

Usage:
    python src/main.py build --config config/config.yaml
    python src/main.py serve --config config/config.yaml
    python src/main.py convert --frames-dir frames --out out/rectFrames.json --w 192 --h 144
    python src/main.py captions --srt lyrics/transcript_en.srt --out out/transcript_en.json
    python src/main.py play --duration 219.0

Arguments:
    --config: Path to configuration file (layered over config/default.yaml)
"""

import argparse
import logging
import math
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import uvicorn
import yaml

from artifacts.cue_codec import dump_cue_track, load_cue_track
from artifacts.errors import ArtifactError
from artifacts.frame_set_codec import dump_frame_set, load_frame_set
from captions.compiler import compile_srt_file
from encoding.rect_encoder import FrameDimensionError
from models.config import Config
from ops.logging import setup_logging
from pipeline.build import build_artifacts
from pipeline.engine import create_pipeline_from_config
from playback.clock import ManualClock, WallClock
from playback.engine import SyncEngine
from playback.scheduler import PlaybackScheduler, PlaybackSnapshot
from web.app import create_app


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge `override` into `base` in place; nested mappings merge key by key."""
    for key, value in (override or {}).items():
        if isinstance(value, dict) and isinstance(base.get(key), dict):
            _deep_merge(base[key], value)
        else:
            base[key] = value
    return base


def _config_layers(config_path: str) -> List[str]:
    """default.yaml, then config.yaml, then the explicit path if it is a third file."""
    config_dir = os.path.dirname(config_path)
    layers = [os.path.join(config_dir, "default.yaml"), os.path.join(config_dir, "config.yaml")]
    if os.path.abspath(config_path) not in {os.path.abspath(p) for p in layers}:
        layers.append(config_path)
    return [p for p in layers if os.path.exists(p)]


def load_config(config_path: str) -> Dict[str, Any]:
    """
    Load the layered YAML configuration.

    `default.yaml` next to `config_path` is checked in; `config.yaml` holds
    local overrides; `config_path` itself, when it names some other file,
    is applied last. Exits the process if a layer cannot be read.
    """
    merged: Dict[str, Any] = {}
    for path in _config_layers(config_path):
        try:
            with open(path, "r", encoding="utf-8") as f:
                layer = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            logging.error(f"Failed to load configuration from {path}: {e}")
            sys.exit(1)
        if not isinstance(layer, dict):
            logging.error(f"Configuration file {path} must contain a mapping")
            sys.exit(1)
        _deep_merge(merged, layer)
    return merged


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool) and math.isfinite(value)


def validate_config(config: Dict[str, Any]) -> Tuple[bool, Optional[str]]:
    """
    Validate configuration file structure and values.

    Args:
        config: Configuration dictionary

    Returns:
        Tuple of (is_valid, error_message)
    """
    required_sections = ['converter', 'server', 'log_path', 'log_level']
    for section in required_sections:
        if section not in config:
            return False, f"Missing required configuration section: {section}"

    # Converter
    converter = config.get('converter') or {}
    for key in ('width', 'height'):
        if key not in converter:
            return False, f"Missing converter.{key}"
        value = converter[key]
        if not isinstance(value, int) or isinstance(value, bool) or value <= 0:
            return False, f"converter.{key} must be a positive integer"
    if 'fps' in converter and (not _is_number(converter['fps']) or converter['fps'] <= 0):
        return False, "converter.fps must be a positive number"
    if 'th_mul' in converter and (not _is_number(converter['th_mul']) or converter['th_mul'] <= 0):
        return False, "converter.th_mul must be a positive number"
    if 'invert' in converter and converter['invert'] not in (True, False, 0, 1):
        return False, "converter.invert must be a boolean"

    # Captions (optional; defaults to four tracks)
    captions = config.get('captions') or {}
    tracks = captions.get('tracks')
    if tracks is not None:
        if not isinstance(tracks, list):
            return False, "captions.tracks must be a list"
        seen = set()
        for i, track in enumerate(tracks):
            if not isinstance(track, dict) or not isinstance(track.get('name'), str) or not track.get('name'):
                return False, f"captions.tracks[{i}].name is required"
            if track['name'] in seen:
                return False, f"captions.tracks[{i}].name '{track['name']}' is duplicated"
            seen.add(track['name'])

    # Server
    server = config.get('server') or {}
    port = server.get('port', 8080)
    if not isinstance(port, int) or isinstance(port, bool) or not (0 < port < 65536):
        return False, "server.port must be an integer between 1 and 65535"
    if 'out_dir' in server and not isinstance(server['out_dir'], str):
        return False, "server.out_dir must be a string"

    # Playback (optional)
    playback = config.get('playback') or {}
    for key in ('video_offset_sec', 'caption_offset_sec'):
        if key in playback and not _is_number(playback[key]):
            return False, f"playback.{key} must be a number"
    duration = playback.get('duration')
    if duration is not None and (not _is_number(duration) or duration <= 0):
        return False, "playback.duration must be a positive number"
    if 'tick_interval' in playback and (not _is_number(playback['tick_interval']) or playback['tick_interval'] <= 0):
        return False, "playback.tick_interval must be a positive number"

    # Log settings
    valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
    if config['log_level'] not in valid_log_levels:
        return False, f"log_level must be one of: {', '.join(valid_log_levels)}"

    return True, None


def apply_cli_overrides(config: Dict[str, Any], args: argparse.Namespace) -> Dict[str, Any]:
    """Fold explicitly given command-line flags into the config dict."""
    mapping = {
        'frames_dir': ('converter', 'frames_dir'),
        'w': ('converter', 'width'),
        'h': ('converter', 'height'),
        'fps': ('converter', 'fps'),
        'th_mul': ('converter', 'th_mul'),
        'invert': ('converter', 'invert'),
        'lyrics_dir': ('captions', 'lyrics_dir'),
        'dir': ('server', 'out_dir'),
        'host': ('server', 'host'),
        'port': ('server', 'port'),
        'mount': ('server', 'mount'),
        'duration': ('playback', 'duration'),
        'video_offset': ('playback', 'video_offset_sec'),
        'caption_offset': ('playback', 'caption_offset_sec'),
    }
    for attr, (section, key) in mapping.items():
        value = getattr(args, attr, None)
        if value is None:
            continue
        if attr == 'invert':
            value = bool(value)
        config.setdefault(section, {})
        if config[section] is None:
            config[section] = {}
        config[section][key] = value
    return config


def cmd_convert(cfg: Config, args: argparse.Namespace) -> int:
    out_path = args.out or os.path.join(cfg.server.out_dir, cfg.converter.output_file)
    frame_set = create_pipeline_from_config(cfg).run()
    dump_frame_set(frame_set, out_path)
    logging.info(f"frames_count: {frame_set.frame_count}, avg threshold: {frame_set.threshold}")
    return 0


def cmd_captions(cfg: Config, args: argparse.Namespace) -> int:
    track = compile_srt_file(args.srt, name=args.name)
    out_path = args.out or str(Path(cfg.server.out_dir) / f"{Path(args.srt).stem}.json")
    dump_cue_track(track, out_path)
    return 0


def cmd_build(cfg: Config, args: argparse.Namespace) -> int:
    build_artifacts(cfg)
    return 0


def cmd_serve(cfg: Config, args: argparse.Namespace) -> int:
    if not args.skip_build:
        build_artifacts(cfg)
    server = cfg.server
    logging.info(f"Serving '{server.out_dir}' at http://{server.host}:{server.port}{server.mount}")
    uvicorn.run(
        create_app(server.out_dir, mount=server.mount, frame_set_file=cfg.converter.output_file),
        host=server.host,
        port=server.port,
        log_level=cfg.log_level.lower(),
    )
    return 0


def _log_snapshot_changes(log_every: int):
    last_panels: Dict[str, str] = {}

    def on_snapshot(snapshot: PlaybackSnapshot) -> None:
        nonlocal last_panels
        if snapshot.frame_changed and log_every and snapshot.frame_index % log_every == 0:
            logging.info(
                f"t={snapshot.time:.3f}s frame={snapshot.frame_index} rects={len(snapshot.rectangles)}"
            )
        if snapshot.panels != last_panels:
            for panel, text in snapshot.panels.items():
                if text != last_panels.get(panel):
                    logging.info(f"t={snapshot.time:.3f}s [{panel}] {text!r}")
            last_panels = snapshot.panels

    return on_snapshot


def cmd_play(cfg: Config, args: argparse.Namespace) -> int:
    out_dir = Path(cfg.server.out_dir)
    # Everything loads up front; a bad artifact aborts before the first tick.
    frame_set = load_frame_set(out_dir / cfg.converter.output_file)
    tracks = [load_cue_track(out_dir / t.output, name=t.name) for t in cfg.captions.tracks]
    empty = [t.name for t in tracks if t.is_empty]
    if empty:
        logging.warning(f"Some subtitle tracks are empty: {empty}")

    duration = cfg.playback.duration
    if duration is None:
        if not frame_set.fps:
            logging.error("No playback duration configured and the frame set has no fps")
            return 1
        duration = frame_set.frame_count / frame_set.fps
        logging.warning(f"No audio duration given; assuming {duration:.3f}s from fps metadata")

    panels: Dict[str, List[str]] = {}
    for t in cfg.captions.tracks:
        panels.setdefault(t.panel, []).append(t.name)

    interval = cfg.playback.tick_interval
    if args.realtime:
        clock = WallClock(duration)
        clock.start()
        sleep = None
    else:
        clock = ManualClock(duration)
        sleep = clock.advance

    engine = SyncEngine.from_frame_set(frame_set, duration, tracks)
    scheduler = PlaybackScheduler(
        engine,
        frame_set,
        clock,
        panels=panels,
        video_offset=cfg.playback.video_offset_sec,
        caption_offset=cfg.playback.caption_offset_sec,
    )
    run_kwargs = {"interval": interval}
    if sleep is not None:
        run_kwargs["sleep"] = sleep
    scheduler.run(_log_snapshot_changes(args.log_every), **run_kwargs)
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description='Rectframes - binary video to rectangle frames')
    parser.add_argument('--config', type=str, default='config/config.yaml',
                        help='Path to configuration file')
    sub = parser.add_subparsers(dest='command', required=True)

    def add_converter_args(p):
        p.add_argument('--frames-dir', dest='frames_dir', type=str, help='Directory containing PNG frames')
        p.add_argument('--w', type=int, help='Grid width in cells')
        p.add_argument('--h', type=int, help='Grid height in cells')
        p.add_argument('--fps', type=float, help='Frame rate recorded as metadata')
        p.add_argument('--invert', type=int, choices=(0, 1), help='Invert on/off (0/1)')
        p.add_argument('--th-mul', dest='th_mul', type=float, help='Threshold multiplier')

    def add_out_dir_arg(p):
        p.add_argument('--dir', type=str, help='Artifact directory (e.g. "out")')

    p = sub.add_parser('convert', help='Encode a PNG frame sequence into a frame set file')
    add_converter_args(p)
    add_out_dir_arg(p)
    p.add_argument('--out', type=str, help='Output file (default: <dir>/rectFrames.json)')
    p.set_defaults(func=cmd_convert)

    p = sub.add_parser('captions', help='Compile one SRT file into a cue file')
    p.add_argument('--srt', type=str, required=True, help='Input .srt file')
    p.add_argument('--out', type=str, help='Output file (default: <dir>/<stem>.json)')
    p.add_argument('--name', type=str, help='Track name (default: file stem)')
    add_out_dir_arg(p)
    p.set_defaults(func=cmd_captions)

    p = sub.add_parser('build', help='Regenerate stale artifacts')
    add_converter_args(p)
    add_out_dir_arg(p)
    p.add_argument('--lyrics-dir', dest='lyrics_dir', type=str, help='Directory containing SRT lyrics')
    p.set_defaults(func=cmd_build)

    p = sub.add_parser('serve', help='Build stale artifacts, then serve them')
    add_converter_args(p)
    add_out_dir_arg(p)
    p.add_argument('--lyrics-dir', dest='lyrics_dir', type=str, help='Directory containing SRT lyrics')
    p.add_argument('--host', type=str, help='Bind host')
    p.add_argument('--port', type=int, help='Bind port')
    p.add_argument('--mount', type=str, help='URL mount path')
    p.add_argument('--skip-build', dest='skip_build', action='store_true',
                   help='Serve existing artifacts without regenerating')
    p.set_defaults(func=cmd_serve)

    p = sub.add_parser('play', help='Replay artifacts headlessly and log what would be shown')
    add_out_dir_arg(p)
    p.add_argument('--duration', type=float, help='Audio duration in seconds')
    p.add_argument('--video-offset', dest='video_offset', type=float, help='Video time offset (s)')
    p.add_argument('--caption-offset', dest='caption_offset', type=float, help='Caption time offset (s)')
    p.add_argument('--realtime', action='store_true', help='Follow the wall clock instead of simulating')
    p.add_argument('--log-every', dest='log_every', type=int, default=60,
                   help='Log every Nth frame change (0 disables)')
    p.set_defaults(func=cmd_play)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main application function."""
    args = build_parser().parse_args(argv)

    # Load configuration
    config = apply_cli_overrides(load_config(args.config), args)

    # Validate configuration
    is_valid, error_msg = validate_config(config)
    if not is_valid:
        logging.error(f"Configuration validation failed: {error_msg}")
        return 1

    # Setup logging
    setup_logging(config['log_path'], config['log_level'])
    cfg = Config.from_dict(config)

    try:
        return args.func(cfg, args)
    except KeyboardInterrupt:
        logging.info("Interrupted by user")
        return 130
    except (ArtifactError, FrameDimensionError, FileNotFoundError, RuntimeError) as e:
        logging.error(f"{args.command} failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
