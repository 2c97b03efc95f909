"""
Tests for the conversion pipeline and the artifact build.
"""

import json

import cv2
import numpy as np
import pytest

from artifacts.frame_set_codec import load_frame_set
from encoding.rect_encoder import FrameDimensionError
from models.config import Config, ConverterConfig, TrackConfig
from models.frame import FrameImage
from models.rect import Rectangle
from observation.base import ObservationConfig, ObservationSource
from observation.image_sequence import ImageSequenceConfig, ImageSequenceSource
from pipeline.build import build_artifacts, ensure_cue_track, ensure_frame_set
from pipeline.engine import ConversionPipeline, create_pipeline_from_config


class MockObservationSource(ObservationSource):
    """Mock source for testing."""

    def __init__(self, config: ObservationConfig, images: list):
        super().__init__(config)
        self._images = images
        self._pos = 0
        self.closed = False

    @property
    def frame_total(self):
        return len(self._images)

    def open(self) -> None:
        self._is_open = True
        self._pos = 0
        self._frame_index = 0

    def read(self):
        if not self._is_open or self._pos >= len(self._images):
            return None
        image = self._images[self._pos]
        frame = FrameImage(image=image, frame_index=self._pos, source=f"{self._pos:04d}.png")
        self._pos += 1
        self._frame_index = self._pos
        return frame

    def close(self) -> None:
        self._is_open = False
        self.closed = True


def _image(rows):
    """Black (0) where '#', white (255) elsewhere."""
    return np.array([[0 if ch == "#" else 255 for ch in row] for row in rows], dtype=np.uint8)


class TestConversionPipeline:
    def test_converts_frames(self):
        images = [
            _image(["##..", "##..", "...."]),
            _image(["....", "....", "...."]),
            _image(["...#", "...#", "...#"]),
        ]
        source = MockObservationSource(ObservationConfig(source_id="test"), images)
        config = ConverterConfig(width=4, height=3, fps=24, th_mul=1.0)
        pipeline = ConversionPipeline(source, config)

        fs = pipeline.run()

        assert (fs.width, fs.height, fs.fps) == (4, 3, 24)
        assert fs.frames[0] == [Rectangle(0, 0, 2, 2)]
        # Uniform frame: nothing is darker than its own mean.
        assert fs.frames[1] == []
        assert fs.frames[2] == [Rectangle(3, 0, 1, 3)]
        assert pipeline.stats.frame_count == 3
        assert pipeline.stats.rect_count == 2
        assert 0 <= fs.threshold <= 255
        assert source.closed is True

    def test_invert(self):
        images = [_image(["#...", "....", "...."])]
        source = MockObservationSource(ObservationConfig(), images)
        fs = ConversionPipeline(source, ConverterConfig(width=4, height=3, invert=True, th_mul=1.0)).run()
        assert fs.invert is True
        assert fs.paint(0).sum() == 11

    def test_dimension_mismatch_stops_with_frame_index(self):
        images = [_image(["....", "....", "...."]), _image(["...", "...", "..."])]
        source = MockObservationSource(ObservationConfig(), images)
        pipeline = ConversionPipeline(source, ConverterConfig(width=4, height=3))

        with pytest.raises(FrameDimensionError) as exc_info:
            pipeline.run()
        assert exc_info.value.frame_index == 1
        assert exc_info.value.source == "0001.png"
        assert source.closed is True

    def test_empty_source(self):
        source = MockObservationSource(ObservationConfig(), [])
        with pytest.raises(RuntimeError):
            ConversionPipeline(source, ConverterConfig(width=4, height=3)).run()

    def test_callbacks(self):
        images = [_image(["#..", "..."])]
        source = MockObservationSource(ObservationConfig(), images)
        pipeline = ConversionPipeline(source, ConverterConfig(width=3, height=2, th_mul=1.0))
        seen = []
        pipeline.add_callback(lambda idx, rects: seen.append((idx, rects)))
        pipeline.add_callback(lambda idx, rects: 1 / 0)  # errors are logged, not raised

        pipeline.run()
        assert seen == [(0, [Rectangle(0, 0, 1, 1)])]


def _write_frames(directory, images):
    directory.mkdir(parents=True, exist_ok=True)
    for i, image in enumerate(images):
        assert cv2.imwrite(str(directory / f"{i:04d}.png"), image)


class TestImageSequenceSource:
    def test_reads_sorted_png_files(self, tmp_path):
        frames = tmp_path / "frames"
        _write_frames(frames, [_image(["#.", ".."]), _image(["..", ".#"])])
        (frames / "notes.txt").write_text("ignored")

        with ImageSequenceSource(ImageSequenceConfig(directory=str(frames))) as source:
            assert source.frame_total == 2
            images = list(source)

        assert [f.source for f in images] == ["0000.png", "0001.png"]
        assert [f.frame_index for f in images] == [0, 1]
        assert images[0].image.shape == (2, 2)
        assert images[1].image[1, 1] == 0

    def test_missing_directory(self, tmp_path):
        source = ImageSequenceSource(ImageSequenceConfig(directory=str(tmp_path / "nope")))
        with pytest.raises(RuntimeError, match="not found"):
            source.open()

    def test_empty_directory(self, tmp_path):
        source = ImageSequenceSource(ImageSequenceConfig(directory=str(tmp_path)))
        with pytest.raises(RuntimeError, match="No"):
            source.open()

    def test_iterating_closed_source(self, tmp_path):
        source = ImageSequenceSource(ImageSequenceConfig(directory=str(tmp_path)))
        with pytest.raises(RuntimeError):
            list(source)


SRT = "1\n00:00:00,000 --> 00:00:01,000\nhello\n"


@pytest.fixture
def project(tmp_path):
    """Frames, lyrics and a config pointing at them."""
    _write_frames(tmp_path / "frames", [_image(["##..", "....", "...."]), _image(["....", "....", "...#"])])
    lyrics = tmp_path / "lyrics"
    lyrics.mkdir()
    (lyrics / "a.srt").write_text(SRT, encoding="utf-8")
    (lyrics / "b.srt").write_text("", encoding="utf-8")

    cfg = Config.from_dict({
        "converter": {"frames_dir": str(tmp_path / "frames"), "width": 4, "height": 3, "fps": 10, "th_mul": 1.0},
        "captions": {
            "lyrics_dir": str(lyrics),
            "tracks": [
                {"name": "a", "source": "a.srt", "output": "a.json"},
                {"name": "b", "source": "b.srt", "output": "b.json", "panel": "right"},
            ],
        },
        "server": {"out_dir": str(tmp_path / "out")},
    })
    return cfg


class TestBuildArtifacts:
    def test_builds_everything_then_is_idempotent(self, project):
        results = build_artifacts(project)
        assert results == {"rectFrames.json": True, "a.json": True, "b.json": True}

        out = project.server.out_dir
        fs = load_frame_set(f"{out}/rectFrames.json")
        assert fs.frame_count == 2
        assert fs.frames[0] == [Rectangle(0, 0, 2, 1)]
        assert json.loads(open(f"{out}/a.json", encoding="utf-8").read()) == [{"s": 0.0, "e": 1.0, "t": "hello"}]
        assert json.loads(open(f"{out}/b.json", encoding="utf-8").read()) == []

        assert build_artifacts(project) == {"rectFrames.json": False, "a.json": False, "b.json": False}

    def test_missing_srt_is_an_error(self, project):
        track = TrackConfig(name="zz", source="zz.srt", output="zz.json")
        with pytest.raises(FileNotFoundError):
            ensure_cue_track(project, track)

    def test_shipped_frame_set_without_frames_dir(self, project, tmp_path):
        ensure_frame_set(project)
        project.converter.frames_dir = str(tmp_path / "gone")
        assert ensure_frame_set(project) is False

    def test_no_frames_and_no_artifact(self, project, tmp_path):
        project.converter.frames_dir = str(tmp_path / "gone")
        with pytest.raises(RuntimeError):
            ensure_frame_set(project)

    def test_factory_reads_frames_dir(self, project):
        pipeline = create_pipeline_from_config(project)
        assert isinstance(pipeline.source, ImageSequenceSource)
        assert pipeline.config.width == 4
