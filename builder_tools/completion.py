"""
Script: builder_tools/completion.py
What: Marks the run as finished and keeps the process alive afterwards.
Doing: Writes `build_complete` (tag, then timestamp) and `last_built_commit.txt`, then sleeps in a loop.
Why: An external watcher polls the status directory, and orchestration expects a long-running container.
"""

from __future__ import annotations

import time
from datetime import datetime
from pathlib import Path
from typing import Callable

from builder_tools.common import format_timestamp, log, write_status_file


COMPLETE_MARKER_FILE = "build_complete"
LAST_BUILT_COMMIT_FILE = "last_built_commit.txt"
IDLE_INTERVAL_SECONDS = 3600


def completion_marker_text(pushed_tag: str, completed_at: datetime) -> str:
    return f"{pushed_tag}\n{format_timestamp(completed_at)}\n"


def signal_build_complete(status_dir: Path, pushed_tag: str, completed_at: datetime) -> Path:
    log(f"Build complete: {pushed_tag}")
    status_dir.mkdir(parents=True, exist_ok=True)
    marker = status_dir / COMPLETE_MARKER_FILE
    marker.write_text(completion_marker_text(pushed_tag, completed_at), encoding="utf-8")
    return marker


def record_built_commit(status_dir: Path, commit: str) -> Path:
    return write_status_file(status_dir, LAST_BUILT_COMMIT_FILE, commit)


def idle_forever(sleep: Callable[[float], None] = time.sleep) -> None:
    """Block without doing work; only an exception raised by `sleep` ends the loop."""
    log("Build complete. Container will remain running.")
    while True:
        sleep(IDLE_INTERVAL_SECONDS)
