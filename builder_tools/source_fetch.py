"""
Script: builder_tools/source_fetch.py
What: Clones the application repository at the configured branch.
Doing: Removes any old checkout, runs `git clone -b <branch>` with a token URL, then reads the commit.
Why: Every run must build from a fresh checkout of the branch head.
Goal: Provide the checkout and its commit id for later steps.
"""

from __future__ import annotations

import shutil
from pathlib import Path

from builder_tools.common import CommandRunner, log, run_cmd
from builder_tools.config import ControlSettings


def clone_url(control: ControlSettings) -> str:
    # GitHub accepts `x-access-token` in the username position for token auth.
    return f"https://x-access-token:{control.token}@{control.git_host}/{control.repo_slug}.git"


def read_commit(checkout_dir: Path, runner: CommandRunner = run_cmd) -> str:
    return runner(["git", "rev-parse", "HEAD"], cwd=str(checkout_dir)).strip()


def read_short_hash(checkout_dir: Path, runner: CommandRunner = run_cmd) -> str:
    return runner(["git", "rev-parse", "--short", "HEAD"], cwd=str(checkout_dir)).strip()


def clone_repository(control: ControlSettings, runner: CommandRunner = run_cmd) -> str:
    """Clone `<org>/<repo>` at the branch head into the checkout dir and return the commit."""
    checkout_dir = control.checkout_dir
    log(f"Cloning repository: {control.repo_slug}, branch: {control.branch}")

    # Start from a clean checkout each run so there is no leftover state.
    shutil.rmtree(checkout_dir, ignore_errors=True)
    checkout_dir.parent.mkdir(parents=True, exist_ok=True)

    runner(
        ["git", "clone", "-b", control.branch, clone_url(control), str(checkout_dir)],
        capture_output=False,
        secrets=[control.token],
    )

    commit = read_commit(checkout_dir, runner)
    log(f"Current commit: {commit}")
    return commit
