"""
Tests for the session analysis and cleanup scripts.

Verifies:
  - A recorded scene session loads back into columns and events
  - Mode durations and event counts
  - analyze_session.main writes every figure
  - delete_sessions removes sessions and the marker, honours dry runs
  - The host loop logs cursors the display driver cannot provide
"""

import logging

import numpy as np
import pygame
import pytest

import analyze_session
import delete_sessions
import main
from orbit_viz.core.logging_utils import SessionRecorder
from orbit_viz.scene import Scene
from orbit_viz.scene.camera import FolderMode


@pytest.fixture()
def recorded_session(tmp_path, demo_folders):
    recorder = SessionRecorder(tmp_path, session_id="recorded")
    scene = Scene(demo_folders, recorder=recorder)
    for _ in range(40):
        scene.tick(0.02)
    scene.camera.set_mode(FolderMode(1))
    for _ in range(40):
        scene.tick(0.02)
    scene.dispose()
    recorder.close()
    return recorder.session_dir


# ─── Loading ─────────────────────────────────────────────────

class TestLoading:
    def test_timeseries_columns(self, recorded_session):
        ts = analyze_session.load_timeseries(recorded_session / analyze_session.TIMESERIES_FILENAME)
        assert ts["t"].size == 8
        assert ts["t"].dtype == float
        assert ts["camera_mode"][0] == "home"
        assert ts["camera_mode"][-1] == "folder:1"

    def test_events(self, recorded_session):
        events = analyze_session.load_events(recorded_session / analyze_session.EVENTS_FILENAME)
        assert analyze_session.summarize_events(events) == {"dispose": 1}

    def test_mode_durations(self):
        ts = {
            "t": np.array([1.0, 2.0, 4.0]),
            "camera_mode": np.array(["home", "home", "folder:1"], dtype=object),
        }
        assert analyze_session.mode_durations(ts) == {"home": 2.0, "folder:1": 2.0}

    def test_camera_distance(self):
        ts = {"cam_x": np.array([3.0]), "cam_y": np.array([0.0]), "cam_z": np.array([4.0])}
        np.testing.assert_allclose(analyze_session.camera_distance(ts), [5.0])


# ─── Command line ────────────────────────────────────────────

class TestAnalyzeMain:
    def test_writes_figures(self, recorded_session, capsys):
        analyze_session.main(["--sessions-dir", str(recorded_session.parent)])
        figs = recorded_session / analyze_session.FIGS_SUBDIR
        for name in ("camera_xz.png", "camera_distance.png", "indicator_progress.png", "frame_delta.png"):
            assert (figs / name).exists()
        out = capsys.readouterr().out
        assert "Session: recorded" in out
        assert "Camera home" in out

    def test_resolve_by_id(self, recorded_session):
        resolved = analyze_session.resolve_session_dir("recorded", recorded_session.parent)
        assert resolved == recorded_session

    def test_missing_marker(self, tmp_path):
        assert analyze_session.resolve_session_dir(None, tmp_path) is None
        with pytest.raises(SystemExit):
            analyze_session.main(["--sessions-dir", str(tmp_path)])


# ─── Cleanup ─────────────────────────────────────────────────

class TestDeleteSessions:
    @pytest.fixture()
    def sessions(self, tmp_path):
        for name in ("a_session", "b_session"):
            (tmp_path / name).mkdir()
            (tmp_path / name / "events.csv").write_text("t,type\n")
        (tmp_path / delete_sessions.MARKER_NAME).write_text("b_session")
        return tmp_path

    def test_find(self, sessions):
        assert [p.name for p in delete_sessions.find_sessions(sessions)] == ["a_session", "b_session"]

    def test_dry_run(self, sessions):
        assert delete_sessions.delete_sessions(sessions, dry_run=True) == (0, 0)
        assert len(delete_sessions.find_sessions(sessions)) == 2

    def test_delete(self, sessions):
        assert delete_sessions.delete_sessions(sessions, confirm=False) == (2, 0)
        assert delete_sessions.find_sessions(sessions) == []
        assert not (sessions / delete_sessions.MARKER_NAME).exists()

    def test_keep_marker(self, sessions):
        delete_sessions.delete_sessions(sessions, confirm=False, keep_marker=True)
        assert (sessions / delete_sessions.MARKER_NAME).exists()

    def test_cancelled(self, sessions, monkeypatch):
        monkeypatch.setattr("builtins.input", lambda prompt: "no")
        assert delete_sessions.delete_sessions(sessions) == (0, 0)
        assert len(delete_sessions.find_sessions(sessions)) == 2

    def test_missing_directory(self, tmp_path):
        assert delete_sessions.delete_sessions(tmp_path / "nope") == (0, 0)


# ─── Host loop helpers ───────────────────────────────────────

class TestCursor:
    def test_unavailable_cursor_is_logged(self, monkeypatch, caplog):
        def refuse(cursor):
            raise pygame.error("no system cursors")

        monkeypatch.setattr(pygame.mouse, "set_cursor", refuse)
        with caplog.at_level(logging.DEBUG, logger="orbit_viz.main"):
            main._set_cursor("pointer")
        assert any("Cursor 'pointer' unavailable" in record.getMessage() for record in caplog.records)
