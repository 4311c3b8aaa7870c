"""
Script: tests/test_cli.py
What: Tests for the `builder_tools` command dispatcher.
Doing: Checks command-map entries, parser behavior, command-run paths, and exit codes.
Why: The container entrypoint calls these command names directly.
Goal: Protect the main command entry surface used by the image entrypoint.
"""

from __future__ import annotations

import io
import unittest
from contextlib import redirect_stderr
from unittest import mock

from builder_tools.cli import build_parser, command_map, exit_code_for, main, run_command
from builder_tools.common import BuilderError, CommandError, MissingPreconditionError


class CliTests(unittest.TestCase):
    def test_command_map_contains_expected_entries(self) -> None:
        commands = command_map()
        self.assertEqual(set(commands.keys()), {"run", "write-env-file"})

    def test_parser_accepts_known_command(self) -> None:
        parser = build_parser({"demo-command": lambda: None})
        args = parser.parse_args(["demo-command"])
        self.assertEqual(args.command, "demo-command")

    def test_run_command_calls_target_function(self) -> None:
        called = {"value": False}

        def _target() -> None:
            called["value"] = True

        run_command("demo", {"demo": _target})
        self.assertTrue(called["value"])

    def test_exit_code_uses_tool_status(self) -> None:
        self.assertEqual(exit_code_for(CommandError("boom", 3)), 3)
        self.assertEqual(exit_code_for(CommandError("boom", -9)), 1)
        self.assertEqual(exit_code_for(MissingPreconditionError("ERROR: Dockerfile not found")), 1)

    def test_main_reports_error_and_exits_non_zero(self) -> None:
        def _failing() -> None:
            raise CommandError("Command failed: npm ci", 7)

        stderr = io.StringIO()
        with mock.patch("builder_tools.cli.command_map", return_value={"run": _failing}):
            with redirect_stderr(stderr), self.assertRaises(SystemExit) as ctx:
                main(["run"])

        self.assertEqual(ctx.exception.code, 7)
        self.assertIn("npm ci", stderr.getvalue())

    def test_main_missing_env_exits_one(self) -> None:
        def _failing() -> None:
            raise BuilderError("Missing required environment variable: BUILDER_GITHUB_TOKEN")

        with mock.patch("builder_tools.cli.command_map", return_value={"run": _failing}):
            with redirect_stderr(io.StringIO()), self.assertRaises(SystemExit) as ctx:
                main(["run"])

        self.assertEqual(ctx.exception.code, 1)


if __name__ == "__main__":
    unittest.main()
