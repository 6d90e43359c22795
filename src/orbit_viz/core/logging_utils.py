"""Session recording helpers scoped to the orbit visualization package."""
from __future__ import annotations

import itertools
import json
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence, TextIO


def format_value(value: object) -> str:
    if isinstance(value, bool):
        return str(int(value))
    if isinstance(value, (int, float)):
        return f"{value:.10g}"
    # commas would split the CSV column
    return str(value).replace(",", ";")


class _CsvStream:
    """One CSV file with a header row and a row buffer flushed in batches."""

    def __init__(self, path: Path, header: Sequence[str], flush_every: int) -> None:
        self.path = path
        self._fh: TextIO = path.open("w", newline="", encoding="utf-8")
        self._fh.write(",".join(header) + "\n")
        self._fh.flush()
        self._pending: list[str] = []
        self._flush_every = max(1, flush_every)

    def append(self, values: Sequence[object]) -> None:
        self._pending.append(",".join(format_value(v) for v in values))
        if len(self._pending) >= self._flush_every:
            self.flush()

    def flush(self) -> None:
        if not self._pending:
            return
        self._fh.writelines(line + "\n" for line in self._pending)
        self._fh.flush()
        self._pending.clear()

    def close(self) -> None:
        self.flush()
        self._fh.close()


class SessionRecorder:
    """Buffered recorder that stores per-frame scene diagnostics to CSV files.

    One directory per session under ``root_dir`` holds ``timeseries.csv``,
    ``events.csv`` and ``meta.json``; ``last_session.txt`` in ``root_dir``
    names the newest one. Output is write-only: nothing recorded here is
    ever loaded back into a scene.
    """

    TIMESERIES_HEADER = [
        "t",
        "dt",
        "cam_x",
        "cam_y",
        "cam_z",
        "camera_mode",
        "indicators",
        "mean_progress",
    ]
    EVENTS_HEADER = ["t", "type", "entity_id", "details"]
    MARKER_NAME = "last_session.txt"

    def __init__(
        self,
        root_dir: str | Path = "data/sessions",
        session_id: Optional[str] = None,
        *,
        timeseries_flush_threshold: int = 200,
        events_flush_threshold: int = 50,
    ) -> None:
        self.root_dir = Path(root_dir)
        self.root_dir.mkdir(parents=True, exist_ok=True)

        self.session_id = self._unused_id(session_id)
        self.session_dir = self.root_dir / self.session_id
        self.session_dir.mkdir(parents=True, exist_ok=False)

        self.timeseries_path = self.session_dir / "timeseries.csv"
        self.events_path = self.session_dir / "events.csv"
        self.meta_path = self.session_dir / "meta.json"

        self._frames = _CsvStream(self.timeseries_path, self.TIMESERIES_HEADER, timeseries_flush_threshold)
        self._events = _CsvStream(self.events_path, self.EVENTS_HEADER, events_flush_threshold)
        self.closed = False

        (self.root_dir / self.MARKER_NAME).write_text(self.session_id, encoding="utf-8")

    def _unused_id(self, requested: Optional[str]) -> str:
        """``requested`` (or a timestamped id), suffixed until no directory clashes."""

        if requested:
            candidates = itertools.chain([requested], (f"{requested}_{n}" for n in itertools.count(1)))
        else:
            stamp = datetime.now().strftime("%Y%m%d_%H%M%S") + "_session"
            candidates = itertools.chain([stamp], (f"{stamp}_{n:02d}" for n in itertools.count(1)))
        return next(c for c in candidates if not (self.root_dir / c).exists())

    def write_meta(self, meta: dict) -> None:
        self.meta_path.write_text(json.dumps(meta, indent=2, sort_keys=True), encoding="utf-8")

    def log_frame(self, values: Sequence[object]) -> None:
        if not self.closed:
            self._frames.append(values)

    def log_event(self, values: Sequence[object]) -> None:
        if not self.closed:
            self._events.append(values)

    def close(self) -> None:
        if self.closed:
            return
        self._frames.close()
        self._events.close()
        self.closed = True

    def __enter__(self) -> "SessionRecorder":
        return self

    def __exit__(self, exc_type, exc, tb) -> Optional[bool]:
        self.close()
        return None


def latest_session_dir(root_dir: str | Path = "data/sessions") -> Optional[Path]:
    """Directory named by the ``last_session.txt`` marker, if it still exists."""

    root = Path(root_dir)
    marker = root / SessionRecorder.MARKER_NAME
    if not marker.exists():
        return None
    session_dir = root / marker.read_text(encoding="utf-8").strip()
    return session_dir if session_dir.is_dir() else None


__all__ = ["SessionRecorder", "format_value", "latest_session_dir"]
