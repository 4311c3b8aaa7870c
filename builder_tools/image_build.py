"""
Script: builder_tools/image_build.py
What: Builds the application container image from the checkout's Dockerfile.
Doing: Checks the Dockerfile exists, passes forwarded variables as `--build-arg`s, and tags `<short sha>` and `latest`.
Why: One build produces both tags, so they always point at the same image content.
Goal: Leave a local image ready for the publish step and record its hash and registry path.
"""

from __future__ import annotations

from pathlib import Path

from builder_tools.common import (
    CommandRunner,
    MissingPreconditionError,
    log,
    run_cmd,
    write_status_file,
)
from builder_tools.config import ControlSettings
from builder_tools.env_file import ForwardedVariable


DOCKERFILE_NAME = "Dockerfile"
BUILD_TARGET = "production"
LATEST_TAG = "latest"
CURRENT_SHA_FILE = "current_git_sha.txt"
REGISTRY_PATH_FILE = "registry_path.txt"


def build_arg_list(forwarded: tuple[ForwardedVariable, ...]) -> list[str]:
    """Return `--build-arg NAME=VALUE` pairs as separate argv entries."""
    args: list[str] = []
    for variable in forwarded:
        args.extend(["--build-arg", variable.as_pair()])
    return args


def image_tags(registry_path: str, short_hash: str) -> list[str]:
    return [f"{registry_path}:{short_hash}", f"{registry_path}:{LATEST_TAG}"]


def build_command(
    *,
    registry_path: str,
    short_hash: str,
    forwarded: tuple[ForwardedVariable, ...],
    network: str = "",
) -> list[str]:
    command = ["docker", "build"]
    if network:
        command.extend(["--network", network])
    command.extend(build_arg_list(forwarded))
    command.extend(["--target", BUILD_TARGET])
    for tag in image_tags(registry_path, short_hash):
        command.extend(["-t", tag])
    command.append(".")
    return command


def ensure_dockerfile(checkout_dir: Path) -> Path:
    dockerfile = checkout_dir / DOCKERFILE_NAME
    if not dockerfile.is_file():
        raise MissingPreconditionError(f"ERROR: Dockerfile not found in repository root: {dockerfile}")
    return dockerfile


def build_image(
    control: ControlSettings,
    short_hash: str,
    forwarded: tuple[ForwardedVariable, ...],
    runner: CommandRunner = run_cmd,
) -> list[str]:
    """
    Build the image and return the two local tags.

    `forwarded` must come from the live environment, not from the
    generated env file.
    """
    registry_path = control.registry_path
    log(f"Building Docker image with tags: {short_hash} and {LATEST_TAG}")

    # Check before calling docker so the failure names the real problem.
    ensure_dockerfile(control.checkout_dir)

    log(f"Running build with args: {' '.join(build_arg_list(forwarded))}")
    command = build_command(
        registry_path=registry_path,
        short_hash=short_hash,
        forwarded=forwarded,
        network=control.network,
    )
    runner(command, cwd=str(control.checkout_dir), capture_output=False)

    # Recorded for external observers only; later steps get these values in memory.
    write_status_file(control.status_dir, CURRENT_SHA_FILE, short_hash)
    write_status_file(control.status_dir, REGISTRY_PATH_FILE, registry_path)

    tags = image_tags(registry_path, short_hash)
    log(f"Docker image built successfully with tags: {' and '.join(tags)}")
    return tags
