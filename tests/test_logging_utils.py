"""
Tests for the session recorder.

Verifies:
  - Session directories, headers and the last-session marker
  - Buffered rows reach disk on flush threshold and on close
  - Value formatting (bools, floats, embedded commas)
  - Colliding session ids get a numeric suffix
  - latest_session_dir follows the marker
"""

import csv
import json

from orbit_viz.core.logging_utils import SessionRecorder, latest_session_dir


def _rows(path):
    with path.open() as fh:
        return list(csv.reader(fh))


class TestSessionRecorder:
    def test_layout(self, tmp_path):
        with SessionRecorder(tmp_path, session_id="demo") as recorder:
            assert recorder.session_dir == tmp_path / "demo"
            assert (tmp_path / SessionRecorder.MARKER_NAME).read_text() == "demo"
        assert _rows(recorder.timeseries_path) == [SessionRecorder.TIMESERIES_HEADER]
        assert _rows(recorder.events_path) == [SessionRecorder.EVENTS_HEADER]

    def test_buffer_flushes_at_threshold(self, tmp_path):
        recorder = SessionRecorder(tmp_path, session_id="s", timeseries_flush_threshold=2)
        recorder.log_frame([0.0, 0.016, 1, 2, 3, "home", 0, 0.0])
        assert _rows(recorder.timeseries_path)[1:] == []
        recorder.log_frame([0.1, 0.016, 1, 2, 3, "home", 0, 0.0])
        assert len(_rows(recorder.timeseries_path)) == 3
        recorder.close()

    def test_close_flushes_and_is_idempotent(self, tmp_path):
        recorder = SessionRecorder(tmp_path, session_id="s")
        recorder.log_event([1.5, "project_click", 10, ""])
        recorder.close()
        recorder.close()
        recorder.log_event([2.0, "ignored", 0, ""])
        assert _rows(recorder.events_path)[1:] == [["1.5", "project_click", "10", ""]]

    def test_value_formatting(self, tmp_path):
        with SessionRecorder(tmp_path, session_id="s") as recorder:
            recorder.log_event([1 / 3, True, "a,b", None])
        row = _rows(recorder.events_path)[1]
        assert row == ["0.3333333333", "1", "a;b", "None"]

    def test_collision_suffix(self, tmp_path):
        first = SessionRecorder(tmp_path, session_id="run")
        second = SessionRecorder(tmp_path, session_id="run")
        assert second.session_id == "run_1"
        first.close()
        second.close()

    def test_meta(self, tmp_path):
        with SessionRecorder(tmp_path, session_id="s") as recorder:
            recorder.write_meta({"projects": 3, "folders": 1})
        assert json.loads(recorder.meta_path.read_text()) == {"folders": 1, "projects": 3}


class TestLatestSession:
    def test_follows_marker(self, tmp_path):
        SessionRecorder(tmp_path, session_id="a").close()
        SessionRecorder(tmp_path, session_id="b").close()
        assert latest_session_dir(tmp_path) == tmp_path / "b"

    def test_no_marker(self, tmp_path):
        assert latest_session_dir(tmp_path) is None

    def test_marker_to_deleted_session(self, tmp_path):
        (tmp_path / SessionRecorder.MARKER_NAME).write_text("gone")
        assert latest_session_dir(tmp_path) is None
