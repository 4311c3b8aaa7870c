"""
Script: builder_tools/pipeline.py
What: Runs the full build-and-publish sequence once.
Doing: Logs in, clones, writes the env file, builds the app, builds and pushes the image, then signals completion.
Why: Keeps step order and the values passed between steps in one place.
Goal: Either reach `signaled` with a pushed image, or stop at the first failure.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Mapping

from builder_tools.app_build import build_application
from builder_tools.common import BuilderError, CommandRunner, log, run_cmd
from builder_tools.completion import idle_forever, record_built_commit, signal_build_complete
from builder_tools.config import RUN_MODE_ONCE, BuilderConfig, load_config
from builder_tools.env_file import select_forwarded_variables, write_env_file
from builder_tools.image_build import build_image
from builder_tools.image_publish import publish_image, registry_login
from builder_tools.source_fetch import clone_repository, read_commit, read_short_hash


class PipelineState(str, Enum):
    START = "start"
    AUTHENTICATED = "authenticated"
    FETCHED = "fetched"
    CONFIGURED = "configured"
    APP_BUILT = "app-built"
    IMAGE_BUILT = "image-built"
    PUSHED = "pushed"
    SIGNALED = "signaled"
    IDLING = "idling"
    ABORTED = "aborted"


@dataclass
class RunContext:
    """Values produced by one step and consumed by a later one."""

    state: PipelineState = PipelineState.START
    commit: str = ""
    short_hash: str = ""
    registry_path: str = ""
    image_tags: tuple[str, ...] = ()
    pushed_tag: str = ""
    completed_at: datetime | None = None

    def advance(self, state: PipelineState) -> None:
        self.state = state


def run_pipeline(
    config: BuilderConfig,
    *,
    runner: CommandRunner = run_cmd,
    environ: Mapping[str, str] | None = None,
    now: Callable[[], datetime] = datetime.now,
    context: RunContext | None = None,
) -> RunContext:
    """
    Run every step once, in order.

    Any `BuilderError` marks the context `aborted` and propagates; nothing is
    retried. `environ` is the live environment the image build re-reads its
    build args from (defaults to `os.environ`).
    """
    live_environ = os.environ if environ is None else environ
    control = config.control
    ctx = context if context is not None else RunContext()

    try:
        log("Starting build process")
        registry_login(control, runner)
        ctx.advance(PipelineState.AUTHENTICATED)

        ctx.commit = clone_repository(control, runner)
        ctx.advance(PipelineState.FETCHED)

        write_env_file(control.checkout_dir, config.forwarded)
        ctx.advance(PipelineState.CONFIGURED)

        build_application(control.checkout_dir, runner)
        ctx.advance(PipelineState.APP_BUILT)

        ctx.short_hash = read_short_hash(control.checkout_dir, runner)
        ctx.registry_path = control.registry_path
        # Build args are derived again from the live environment, not from `.env.production`.
        ctx.image_tags = tuple(
            build_image(control, ctx.short_hash, select_forwarded_variables(live_environ), runner)
        )
        ctx.advance(PipelineState.IMAGE_BUILT)

        ctx.pushed_tag = publish_image(control, ctx.short_hash, runner)
        ctx.advance(PipelineState.PUSHED)

        # Checked before the marker is written so an aborted run never looks complete.
        final_commit = read_commit(control.checkout_dir, runner)
        if final_commit != ctx.commit:
            raise BuilderError(
                f"Checkout moved during the run: started at {ctx.commit}, ended at {final_commit}"
            )

        ctx.completed_at = now()
        signal_build_complete(control.status_dir, ctx.pushed_tag, ctx.completed_at)
        ctx.advance(PipelineState.SIGNALED)
        log("Build process completed successfully")

        record_built_commit(control.status_dir, final_commit)
    except BuilderError:
        ctx.advance(PipelineState.ABORTED)
        raise

    return ctx


def main(
    *,
    environ: Mapping[str, str] | None = None,
    runner: CommandRunner = run_cmd,
    idle: Callable[[], None] = idle_forever,
) -> RunContext:
    """Run the pipeline, then return (`once`) or idle (`daemon`)."""
    live_environ = os.environ if environ is None else environ
    config = load_config(live_environ)
    log(f"Starting build in {config.control.run_mode} mode")
    ctx = run_pipeline(config, runner=runner, environ=live_environ)

    if config.control.run_mode == RUN_MODE_ONCE:
        log(f"Run-once mode: exiting after pushing {ctx.pushed_tag}")
        return ctx

    ctx.advance(PipelineState.IDLING)
    idle()
    return ctx


if __name__ == "__main__":
    main()
