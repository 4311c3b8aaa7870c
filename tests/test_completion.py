from __future__ import annotations

import io
import tempfile
import unittest
from contextlib import redirect_stdout
from datetime import datetime
from pathlib import Path

from builder_tools.completion import (
    IDLE_INTERVAL_SECONDS,
    completion_marker_text,
    idle_forever,
    record_built_commit,
    signal_build_complete,
)


class _StopIdle(Exception):
    pass


class CompletionTests(unittest.TestCase):
    def test_marker_has_tag_then_timestamp(self) -> None:
        text = completion_marker_text("sha-abc1234", datetime(2026, 10, 17, 8, 30, 0))
        self.assertEqual(text, "sha-abc1234\n2026-10-17 08:30:00\n")

    def test_signal_overwrites_marker(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir, redirect_stdout(io.StringIO()):
            status_dir = Path(temp_dir) / "status"
            signal_build_complete(status_dir, "sha-old", datetime(2026, 1, 1))
            marker = signal_build_complete(status_dir, "sha-new", datetime(2026, 1, 2))
            lines = marker.read_text(encoding="utf-8").splitlines()

        self.assertEqual(lines, ["sha-new", "2026-01-02 00:00:00"])

    def test_record_built_commit(self) -> None:
        with tempfile.TemporaryDirectory() as temp_dir:
            path = record_built_commit(Path(temp_dir), "abc1234def")
            self.assertEqual(path.read_text(encoding="utf-8"), "abc1234def\n")

    def test_idle_sleeps_in_long_intervals(self) -> None:
        sleeps: list[float] = []

        def _sleep(seconds: float) -> None:
            sleeps.append(seconds)
            if len(sleeps) == 3:
                raise _StopIdle()

        with redirect_stdout(io.StringIO()), self.assertRaises(_StopIdle):
            idle_forever(_sleep)

        self.assertEqual(sleeps, [IDLE_INTERVAL_SECONDS] * 3)


if __name__ == "__main__":
    unittest.main()
