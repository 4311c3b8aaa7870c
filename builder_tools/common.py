"""
Script: builder_tools/common.py
What: Shared helper functions used by all `builder_tools` modules.
Doing: Wraps env reads, command execution, timestamped log lines, and status-file writes.
Why: Avoids duplicated helper code across pipeline steps.
Goal: Keep behavior consistent across all pipeline steps.
"""

from __future__ import annotations

import os
import subprocess
from datetime import datetime
from pathlib import Path
from typing import Callable, Mapping, Sequence


TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


class BuilderError(RuntimeError):
    """Raised when a pipeline step hits a known error condition."""


class MissingPreconditionError(BuilderError):
    """Raised when a required input file is absent before a step runs."""


class CommandError(BuilderError):
    """Raised when an external command exits non-zero."""

    def __init__(self, message: str, returncode: int) -> None:
        self.returncode = returncode
        super().__init__(message)


def require_env(name: str, environ: Mapping[str, str] | None = None) -> str:
    """Return a required environment variable or raise a clear error."""
    source = os.environ if environ is None else environ
    value = source.get(name)
    if value is None or value == "":
        raise BuilderError(f"Missing required environment variable: {name}")
    return value


def optional_env(name: str, default: str = "", environ: Mapping[str, str] | None = None) -> str:
    """Return an environment variable with a fallback default."""
    source = os.environ if environ is None else environ
    return source.get(name, default)


def format_timestamp(moment: datetime) -> str:
    return moment.strftime(TIMESTAMP_FORMAT)


def log(message: str) -> None:
    """Print one log line prefixed with the local time, like `date +'%Y-%m-%d %H:%M:%S'`."""
    print(f"{format_timestamp(datetime.now())} - {message}", flush=True)


def redact(text: str, secrets: Sequence[str]) -> str:
    """Replace every non-empty secret in `text` with `***`."""
    for secret in secrets:
        if secret:
            text = text.replace(secret, "***")
    return text


def run_cmd(
    args: Sequence[str],
    *,
    capture_output: bool = True,
    cwd: str | None = None,
    input_text: str | None = None,
    secrets: Sequence[str] = (),
) -> str:
    """
    Run a command and return stdout, raising a readable error on failure.

    `secrets` are masked out of the error message so tokens embedded in
    clone URLs never end up in logs.
    """
    try:
        result = subprocess.run(
            list(args),
            check=True,
            text=True,
            capture_output=capture_output,
            cwd=cwd,
            input=input_text,
        )
    except FileNotFoundError as exc:
        raise CommandError(f"Command not found: {args[0]}", 127) from exc
    except subprocess.CalledProcessError as exc:
        stderr = (exc.stderr or "").strip()
        stdout = (exc.stdout or "").strip()
        details = stderr or stdout or f"exit status {exc.returncode}"
        message = f"Command failed: {' '.join(args)}\n{details}"
        raise CommandError(redact(message, secrets), exc.returncode) from exc

    if not capture_output:
        return ""
    return result.stdout


# Step functions take a runner with `run_cmd`'s signature so tests can
# record commands instead of executing them.
CommandRunner = Callable[..., str]


def write_status_file(status_dir: Path, name: str, value: str) -> Path:
    """Overwrite one status file with `value` plus a trailing newline."""
    status_dir.mkdir(parents=True, exist_ok=True)
    path = status_dir / name
    path.write_text(f"{value}\n", encoding="utf-8")
    return path


def normalize_registry_name(name: str) -> str:
    """Lowercase one path segment of an image ref; registries reject uppercase repository names."""
    return name.lower()
