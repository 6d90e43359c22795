"""Analyze a recorded viewer session and generate diagnostic figures."""
from __future__ import annotations

import argparse
import csv
import json
from collections import Counter
from pathlib import Path
from typing import Dict, List

import numpy as np

import matplotlib

matplotlib.use("Agg")
import matplotlib.pyplot as plt


TIMESERIES_FILENAME = "timeseries.csv"
EVENTS_FILENAME = "events.csv"
META_FILENAME = "meta.json"
MARKER_FILENAME = "last_session.txt"
FIGS_SUBDIR = "figs"
TEXT_COLUMNS = ("camera_mode",)


def load_timeseries(path: Path) -> Dict[str, np.ndarray]:
    with path.open("r", newline="") as fh:
        reader = csv.DictReader(fh)
        columns: Dict[str, List] = {name: [] for name in reader.fieldnames or []}
        for row in reader:
            for key, value in row.items():
                if key is None:
                    continue
                columns.setdefault(key, []).append(value if key in TEXT_COLUMNS else float(value))
    return {
        key: np.asarray(values, dtype=object if key in TEXT_COLUMNS else float)
        for key, values in columns.items()
    }


def load_events(path: Path) -> List[dict]:
    with path.open("r", newline="") as fh:
        reader = csv.DictReader(fh)
        events: List[dict] = []
        for row in reader:
            if not row:
                continue
            events.append(
                {
                    "t": float(row["t"]),
                    "type": row["type"],
                    "entity_id": row.get("entity_id", ""),
                    "details": row.get("details", ""),
                }
            )
    return events


def ensure_fig_dir(session_dir: Path) -> Path:
    fig_dir = session_dir / FIGS_SUBDIR
    fig_dir.mkdir(parents=True, exist_ok=True)
    return fig_dir


def summarize_events(events: List[dict]) -> Dict[str, int]:
    return dict(Counter(event["type"] for event in events))


def mode_durations(ts: Dict[str, np.ndarray]) -> Dict[str, float]:
    """Seconds spent in each camera mode, attributing each sample's span to its mode."""

    if "camera_mode" not in ts or ts["t"].size == 0:
        return {}
    durations: Dict[str, float] = {}
    times = ts["t"]
    spans = np.diff(times, prepend=0.0)
    for mode, span in zip(ts["camera_mode"], spans):
        durations[str(mode)] = durations.get(str(mode), 0.0) + float(span)
    return durations


def camera_distance(ts: Dict[str, np.ndarray]) -> np.ndarray:
    return np.sqrt(ts["cam_x"] ** 2 + ts["cam_y"] ** 2 + ts["cam_z"] ** 2)


def plot_camera_path(fig_dir: Path, ts: Dict[str, np.ndarray]) -> None:
    fig, ax = plt.subplots(figsize=(6, 6))
    ax.plot(ts["cam_x"], ts["cam_z"], color="#6bc5c0", lw=1.5, label="Camera")
    ax.scatter([0.0], [0.0], color="#ff00ff", s=60, label="Home")
    ax.set_aspect("equal", "box")
    ax.set_xlabel("x")
    ax.set_ylabel("z")
    ax.set_title("Camera path (x-z)")
    ax.legend()
    fig.tight_layout()
    fig.savefig(fig_dir / "camera_xz.png", dpi=150)
    plt.close(fig)


def plot_distance(fig_dir: Path, ts: Dict[str, np.ndarray], events: List[dict]) -> None:
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot(ts["t"], camera_distance(ts), color="#4dabf7")
    for event in events:
        if event["type"].endswith("_click"):
            ax.axvline(event["t"], color="#d9480f", linestyle="--", alpha=0.4)
    ax.set_xlabel("t [s]")
    ax.set_ylabel("|camera|")
    ax.set_title("Camera distance from origin")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(fig_dir / "camera_distance.png", dpi=150)
    plt.close(fig)


def plot_progress(fig_dir: Path, ts: Dict[str, np.ndarray]) -> None:
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.plot(ts["t"], ts["mean_progress"], color="#94d82d")
    ax.set_xlabel("t [s]")
    ax.set_ylabel("mean progress [-]")
    ax.set_ylim(-0.05, 1.05)
    ax.set_title("Mean indicator progress")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(fig_dir / "indicator_progress.png", dpi=150)
    plt.close(fig)


def plot_frame_times(fig_dir: Path, ts: Dict[str, np.ndarray], max_delta: float | None) -> None:
    fig, ax = plt.subplots(figsize=(7, 4))
    ax.hist(ts["dt"] * 1000.0, bins=40, color="#ffa94d")
    if max_delta:
        ax.axvline(max_delta * 1000.0, color="#c92a2a", linestyle=":", label="clamp")
        ax.legend()
    ax.set_xlabel("dt [ms]")
    ax.set_ylabel("samples")
    ax.set_title("Frame delta distribution")
    ax.grid(True, alpha=0.3)
    fig.tight_layout()
    fig.savefig(fig_dir / "frame_delta.png", dpi=150)
    plt.close(fig)


def print_summary(
    session_dir: Path,
    meta: dict,
    ts: Dict[str, np.ndarray],
    event_summary: Dict[str, int],
    durations: Dict[str, float],
) -> None:
    print(f"Session: {session_dir.name}")
    print(
        f" Folders: {meta.get('folders', '?')}, projects: {meta.get('projects', '?')},"
        f" indicators: {meta.get('indicators', '?')}"
    )
    skipped = meta.get("skipped_indicators") or []
    if skipped:
        print(f" Skipped indicators: {', '.join(str(s) for s in skipped)}")
    if ts["t"].size:
        print(f" Duration: {ts['t'][-1]:.2f} s over {ts['t'].size} samples")
        print(f" Mean frame delta: {np.mean(ts['dt']) * 1000.0:.2f} ms")
    for mode, seconds in sorted(durations.items(), key=lambda item: -item[1]):
        print(f" Camera {mode}: {seconds:.1f} s")
    if event_summary:
        print(" Events:" + ",".join(f" {etype}: {count}" for etype, count in sorted(event_summary.items())))
    else:
        print(" Events: none")


def resolve_session_dir(arg: str | None, base_dir: Path) -> Path | None:
    if arg:
        session_path = Path(arg)
        if not session_path.is_dir():
            session_path = base_dir / arg
        return session_path
    marker = base_dir / MARKER_FILENAME
    if not marker.exists():
        return None
    return base_dir / marker.read_text(encoding="utf-8").strip()


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(description="Analyze a recorded session and write figures.")
    parser.add_argument("session_dir", nargs="?", help="Path or id of a session directory")
    parser.add_argument("--sessions-dir", type=Path, default=Path("data") / "sessions")
    args = parser.parse_args(argv)

    session_path = resolve_session_dir(args.session_dir, args.sessions_dir)
    if session_path is None:
        parser.error(f"No session given and {MARKER_FILENAME} is missing.")
    if not session_path.is_dir():
        parser.error(f"Session directory not found: {session_path}")

    meta_path = session_path / META_FILENAME
    ts_path = session_path / TIMESERIES_FILENAME
    ev_path = session_path / EVENTS_FILENAME
    if not ts_path.exists() or not ev_path.exists():
        parser.error("Session directory is missing timeseries.csv or events.csv.")

    meta: dict = {}
    if meta_path.exists():
        with meta_path.open("r", encoding="utf-8") as fh:
            meta = json.load(fh)

    ts = load_timeseries(ts_path)
    events = load_events(ev_path)
    if not ts or ts["t"].size == 0:
        parser.error("timeseries.csv is empty, nothing to analyze.")

    fig_dir = ensure_fig_dir(session_path)
    plot_camera_path(fig_dir, ts)
    plot_distance(fig_dir, ts, events)
    plot_progress(fig_dir, ts)
    plot_frame_times(fig_dir, ts, meta.get("max_frame_delta"))

    print_summary(session_path, meta, ts, summarize_events(events), mode_durations(ts))


if __name__ == "__main__":
    main()
