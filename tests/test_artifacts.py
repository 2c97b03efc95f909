"""
Tests for artifact codecs and the staleness check.
"""

import json
import logging
import os
import time

import pytest

from artifacts.cue_codec import cue_track_from_list, dump_cue_track, load_cue_track
from artifacts.errors import ArtifactError
from artifacts.frame_set_codec import (
    dump_frame_set,
    frame_set_from_dict,
    frame_set_to_dict,
    load_frame_set,
)
from artifacts.freshness import ensure_fresh, needs_regen
from models.cue import Cue, CueTrack
from models.frame_set import FrameSet
from models.rect import Rectangle


def _doc(**overrides):
    doc = {
        "width": 4,
        "height": 3,
        "fps": 30,
        "rect_frames": [[{"x": 0, "y": 0, "w": 2, "h": 1, "v": 1}], []],
    }
    doc.update(overrides)
    return doc


class TestFrameSetDecode:
    def test_record_rectangles(self):
        fs = frame_set_from_dict(_doc())
        assert (fs.width, fs.height, fs.fps) == (4, 3, 30)
        assert fs.frames == [[Rectangle(0, 0, 2, 1, 1)], []]

    def test_tuple_rectangles_and_default_value(self):
        fs = frame_set_from_dict(_doc(rect_frames=[[[1, 1, 2, 2], [0, 0, 1, 1, 1]]]))
        assert fs.frames == [[Rectangle(1, 1, 2, 2, 1), Rectangle(0, 0, 1, 1, 1)]]

    def test_record_without_value_means_on(self):
        fs = frame_set_from_dict(_doc(rect_frames=[[{"x": 0, "y": 0, "w": 1, "h": 1}]]))
        assert fs.frames[0][0].v == 1

    def test_camel_case_frames_key(self):
        doc = _doc()
        doc["rectFrames"] = doc.pop("rect_frames")
        assert frame_set_from_dict(doc).frame_count == 2

    @pytest.mark.parametrize("fps", [None, "absent"])
    def test_fps_optional(self, fps):
        doc = _doc()
        if fps == "absent":
            del doc["fps"]
        else:
            doc["fps"] = None
        assert frame_set_from_dict(doc).fps is None

    @pytest.mark.parametrize("field", ["width", "height"])
    def test_missing_dimension(self, field):
        doc = _doc()
        del doc[field]
        with pytest.raises(ArtifactError) as exc_info:
            frame_set_from_dict(doc, artifact="rectFrames.json")
        assert exc_info.value.field == field
        assert exc_info.value.artifact == "rectFrames.json"

    def test_non_positive_dimension(self):
        with pytest.raises(ArtifactError) as exc_info:
            frame_set_from_dict(_doc(width=0))
        assert exc_info.value.field == "width"

    def test_missing_frames(self):
        doc = _doc()
        del doc["rect_frames"]
        with pytest.raises(ArtifactError) as exc_info:
            frame_set_from_dict(doc)
        assert exc_info.value.field == "rect_frames"

    def test_empty_frames(self):
        with pytest.raises(ArtifactError):
            frame_set_from_dict(_doc(rect_frames=[]))

    def test_bad_rectangle_is_located(self):
        with pytest.raises(ArtifactError) as exc_info:
            frame_set_from_dict(_doc(rect_frames=[[], [[0, 0, 1]]]))
        assert exc_info.value.field == "rect_frames[1][0]"

    def test_out_of_bounds_rectangle(self):
        with pytest.raises(ArtifactError) as exc_info:
            frame_set_from_dict(_doc(rect_frames=[[[3, 0, 2, 1, 1]]]))
        assert exc_info.value.field == "rect_frames[0][0]"

    def test_frames_count_mismatch(self):
        with pytest.raises(ArtifactError) as exc_info:
            frame_set_from_dict(_doc(frames_count=5))
        assert exc_info.value.field == "frames_count"

    def test_not_an_object(self):
        with pytest.raises(ArtifactError):
            frame_set_from_dict([1, 2, 3])


class TestFrameSetFiles:
    def test_dump_and_load(self, tmp_path):
        fs = FrameSet(
            width=4,
            height=2,
            fps=24.0,
            frames=[[Rectangle(0, 0, 4, 2)], [], [Rectangle(1, 1, 1, 1)]],
            threshold=110,
            th_mul=0.95,
        )
        path = tmp_path / "out" / "rectFrames.json"
        dump_frame_set(fs, path)

        raw = json.loads(path.read_text())
        assert raw["frames_count"] == 3
        assert raw["rect_frames"][0] == [{"x": 0, "y": 0, "w": 4, "h": 2, "v": 1}]

        loaded = load_frame_set(path)
        assert loaded == fs
        assert frame_set_to_dict(loaded) == raw

    def test_paint_reconstructs_frame(self):
        fs = FrameSet(width=3, height=2, frames=[[Rectangle(1, 0, 2, 2)]])
        assert fs.paint(0).tolist() == [[False, True, True], [False, True, True]]

    def test_not_json(self, tmp_path):
        path = tmp_path / "rectFrames.json"
        path.write_text("<html>not found</html>")
        with pytest.raises(ArtifactError) as exc_info:
            load_frame_set(path)
        assert exc_info.value.field == "<json>"

    def test_infinite_rectangle_field_is_located(self, tmp_path):
        path = tmp_path / "rectFrames.json"
        path.write_text('{"width":4,"height":4,"rect_frames":[[[0,0,Infinity,1]]]}')
        with pytest.raises(ArtifactError) as exc_info:
            load_frame_set(path)
        assert exc_info.value.field == "rect_frames[0][0]"

    def test_missing_file(self, tmp_path):
        with pytest.raises(ArtifactError) as exc_info:
            load_frame_set(tmp_path / "nope.json")
        assert exc_info.value.field == "<file>"


class TestCueCodec:
    def test_skips_unusable_records(self, caplog):
        data = [
            {"s": 2, "e": 3, "t": "b"},
            {"s": 0, "e": 1, "t": "a"},
            {"s": "x", "e": 1, "t": "bad start"},
            {"s": 4, "e": 5},
            {"s": 6, "e": 7, "t": ""},
            {"e": 9, "t": "no start"},
            {"s": 9, "e": 8, "t": "reversed"},
            "not a record",
        ]
        with caplog.at_level(logging.WARNING):
            track = cue_track_from_list(data, name="en")
        assert [c.text for c in track] == ["a", "b"]
        assert "record 2" in caplog.text

    def test_blank_text_is_unusable(self):
        track = cue_track_from_list([{"s": 0, "e": 1, "t": "  \n "}, {"s": 2, "e": 3, "t": "ok"}])
        assert [c.text for c in track] == ["ok"]

    def test_numeric_strings_are_accepted(self):
        track = cue_track_from_list([{"s": "1.5", "e": "2", "t": "x"}])
        assert track[0] == Cue(1.5, 2.0, "x")

    def test_not_a_list(self):
        with pytest.raises(ArtifactError):
            cue_track_from_list({"s": 0, "e": 1, "t": "x"}, name="en")

    def test_dump_and_load(self, tmp_path):
        track = CueTrack(name="jp", cues=[Cue(0.0, 1.0, "こんにちは\n世界"), Cue(2.0, 3.5, "b")])
        path = tmp_path / "transcript_jp.json"
        dump_cue_track(track, path)

        assert json.loads(path.read_text(encoding="utf-8"))[0] == {"s": 0.0, "e": 1.0, "t": "こんにちは\n世界"}
        loaded = load_cue_track(path, name="jp")
        assert loaded == track

    def test_empty_track_loads(self, tmp_path):
        path = tmp_path / "empty.json"
        path.write_text("[]")
        track = load_cue_track(path)
        assert track.is_empty
        assert track.name == "empty"


class TestFreshness:
    def _touch(self, path, mtime):
        path.write_text("x")
        os.utime(path, (mtime, mtime))

    def test_missing_artifact_needs_regen(self, tmp_path):
        src = tmp_path / "a.srt"
        self._touch(src, 1000)
        assert needs_regen([src], tmp_path / "a.json") is True

    def test_older_artifact_needs_regen(self, tmp_path):
        src, dst = tmp_path / "a.srt", tmp_path / "a.json"
        self._touch(dst, 1000)
        self._touch(src, 2000)
        assert needs_regen([src], dst) is True

    def test_newer_artifact_is_fresh(self, tmp_path):
        src, dst = tmp_path / "a.srt", tmp_path / "a.json"
        self._touch(src, 1000)
        self._touch(dst, 2000)
        assert needs_regen([src], dst) is False

    def test_directory_source_uses_newest_entry(self, tmp_path):
        frames = tmp_path / "frames"
        frames.mkdir()
        dst = tmp_path / "rectFrames.json"
        self._touch(dst, 2000)
        self._touch(frames / "0001.png", 1000)
        os.utime(frames, (1000, 1000))
        assert needs_regen([frames], dst) is False
        self._touch(frames / "0002.png", 3000)
        os.utime(frames, (1000, 1000))
        assert needs_regen([frames], dst) is True

    def test_missing_source_raises(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            needs_regen([tmp_path / "missing.srt"], tmp_path / "a.json")

    def test_ensure_fresh_is_idempotent(self, tmp_path):
        src, dst = tmp_path / "a.srt", tmp_path / "a.json"
        self._touch(src, time.time() - 100)
        calls = []

        def build():
            calls.append(1)
            dst.write_text("built")

        assert ensure_fresh([src], dst, build) is True
        assert ensure_fresh([src], dst, build) is False
        assert len(calls) == 1
