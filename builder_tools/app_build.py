"""
Script: builder_tools/app_build.py
What: Builds the Next.js application inside the checkout.
Doing: Runs `npm ci` and then `npm run build`.
Why: The container image copies the production build output.
"""

from __future__ import annotations

from pathlib import Path

from builder_tools.common import CommandRunner, log, run_cmd


APP_BUILD_COMMANDS = (
    ("npm", "ci"),
    ("npm", "run", "build"),
)


def build_application(checkout_dir: Path, runner: CommandRunner = run_cmd) -> None:
    log("Building Next.js application")
    # `npm ci` installs exactly what the lockfile pins; the build reads `.env.production`.
    for command in APP_BUILD_COMMANDS:
        runner(list(command), cwd=str(checkout_dir), capture_output=False)
    log("Next.js build completed successfully")
