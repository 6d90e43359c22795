#!/usr/bin/env python3
"""
Script to delete recorded session directories from data/sessions/.

Removes every session directory (e.g., 20260110_124236_session/) and
optionally clears the last_session.txt marker file.
"""

import argparse
import shutil
from pathlib import Path

MARKER_NAME = "last_session.txt"


def find_sessions(sessions_dir: Path) -> list[Path]:
    if not sessions_dir.exists():
        return []
    return sorted(d for d in sessions_dir.iterdir() if d.is_dir())


def delete_sessions(
    sessions_dir: Path,
    *,
    dry_run: bool = False,
    keep_marker: bool = False,
    confirm: bool = True,
) -> tuple[int, int]:
    """
    Delete all session directories.

    Parameters
    ----------
    sessions_dir : Path
        Path to the sessions directory (e.g., data/sessions)
    dry_run : bool
        If True, only print what would be deleted
    keep_marker : bool
        If True, keep the last_session.txt file
    confirm : bool
        Ask on stdin before deleting

    Returns
    -------
    (deleted, failed) counts
    """
    if not sessions_dir.exists():
        print(f"Error: Directory {sessions_dir} does not exist.")
        return 0, 0

    session_dirs = find_sessions(sessions_dir)
    if not session_dirs:
        print(f"No session directories found in {sessions_dir}")
        return 0, 0

    print(f"Found {len(session_dirs)} session directories:")
    for session_dir in session_dirs:
        print(f"  - {session_dir.name}")

    marker = sessions_dir / MARKER_NAME
    if dry_run:
        print("\n[DRY RUN] Would delete the above directories.")
        if not keep_marker and marker.exists():
            print(f"[DRY RUN] Would also delete {marker}")
        return 0, 0

    if confirm:
        response = input(f"\nDelete all {len(session_dirs)} session directories? (yes/no): ")
        if response.lower() not in ["yes", "y"]:
            print("Deletion cancelled.")
            return 0, 0

    deleted_count = 0
    failed_count = 0
    for session_dir in session_dirs:
        try:
            shutil.rmtree(session_dir)
        except OSError as e:
            print(f"Error deleting {session_dir.name}: {e}")
            failed_count += 1
        else:
            print(f"Deleted: {session_dir.name}")
            deleted_count += 1

    if not keep_marker and marker.exists():
        try:
            marker.unlink()
        except OSError as e:
            print(f"Error deleting {marker.name}: {e}")
        else:
            print(f"Deleted: {marker.name}")

    print(f"\nSummary: {deleted_count} directories deleted, {failed_count} failed.")
    return deleted_count, failed_count


def main():
    parser = argparse.ArgumentParser(
        description="Delete all session directories from data/sessions/",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Preview what would be deleted (dry run)
  python delete_sessions.py --dry-run

  # Delete all sessions without confirmation
  python delete_sessions.py --yes
        """,
    )
    parser.add_argument(
        "--sessions-dir",
        type=Path,
        default=Path("data/sessions"),
        help="Path to the sessions directory (default: data/sessions)",
    )
    parser.add_argument("--dry-run", action="store_true", help="Preview without deleting")
    parser.add_argument("--keep-marker", action="store_true", help="Keep last_session.txt")
    parser.add_argument("--yes", action="store_true", help="Skip confirmation prompt")
    args = parser.parse_args()

    delete_sessions(
        args.sessions_dir,
        dry_run=args.dry_run,
        keep_marker=args.keep_marker,
        confirm=not args.yes,
    )


if __name__ == "__main__":
    main()
