"""
Pytest configuration and shared fixtures.
"""

import os
import sys

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "src"))


SAMPLE_SRT = """1
00:00:01,000 --> 00:00:02,500
first line
second line

2
00:00:03,000 --> 00:00:04,000
third

00:00:05.000 --> 00:00:06.000
no index
"""


@pytest.fixture
def sample_srt():
    return SAMPLE_SRT


@pytest.fixture
def temp_config_dir(tmp_path):
    """Create a temporary config directory with default.yaml."""
    config_dir = tmp_path / "config"
    config_dir.mkdir()

    default_yaml = config_dir / "default.yaml"
    default_yaml.write_text("""
converter:
  frames_dir: "frames"
  width: 8
  height: 6
  fps: 30
  th_mul: 0.95

server:
  out_dir: "out"
  port: 8080

log_path: "logs/test.log"
log_level: "INFO"
""")

    return config_dir


@pytest.fixture
def valid_config():
    """Return a valid configuration dictionary."""
    return {
        "converter": {
            "frames_dir": "frames",
            "width": 256,
            "height": 192,
            "fps": 30,
            "invert": False,
            "th_mul": 0.95,
        },
        "captions": {
            "lyrics_dir": "lyrics",
            "tracks": [
                {"name": "jp", "panel": "left"},
                {"name": "en", "panel": "right"},
            ],
        },
        "server": {
            "out_dir": "out",
            "host": "127.0.0.1",
            "port": 8080,
        },
        "playback": {
            "video_offset_sec": 0.0,
            "caption_offset_sec": 0.0,
        },
        "log_path": "logs/test.log",
        "log_level": "INFO",
    }
