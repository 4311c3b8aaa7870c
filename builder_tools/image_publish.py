"""
Script: builder_tools/image_publish.py
What: Logs in to the registry and pushes the built image.
Doing: Runs `docker login`, aliases `<short sha>` as `sha-<short sha>`, then pushes `sha-<short sha>` and `latest`.
Why: Deployments pull the `sha-` tag; the bare hash tag stays local.
Goal: Publish the image under the tags the deploy side expects.
"""

from __future__ import annotations

from builder_tools.common import CommandRunner, log, run_cmd, write_status_file
from builder_tools.config import ControlSettings
from builder_tools.image_build import LATEST_TAG


SHA_TAG_PREFIX = "sha-"
LAST_PUSHED_TAG_FILE = "last_pushed_tag.txt"


def sha_tag(short_hash: str) -> str:
    return f"{SHA_TAG_PREFIX}{short_hash}"


def pushed_refs(registry_path: str, short_hash: str) -> list[str]:
    """Refs pushed to the registry, in push order."""
    return [f"{registry_path}:{sha_tag(short_hash)}", f"{registry_path}:{LATEST_TAG}"]


def registry_login(control: ControlSettings, runner: CommandRunner = run_cmd) -> None:
    """Authenticate to the registry with the org as username and the token on stdin."""
    log(f"Logging in to container registry {control.registry_host}")
    runner(
        ["docker", "login", control.registry_host, "-u", control.org, "--password-stdin"],
        input_text=control.token,
        secrets=[control.token],
    )


def publish_image(control: ControlSettings, short_hash: str, runner: CommandRunner = run_cmd) -> str:
    """Push `sha-<short sha>` and `latest`; return the `sha-` tag name."""
    registry_path = control.registry_path
    registry_login(control, runner)

    # "Alias tag" here means a second name for the same local image; no rebuild happens.
    log(f"Tagging with {SHA_TAG_PREFIX} prefix")
    runner(
        ["docker", "tag", f"{registry_path}:{short_hash}", f"{registry_path}:{sha_tag(short_hash)}"],
        capture_output=False,
    )

    log("Pushing images to container registry")
    refs = pushed_refs(registry_path, short_hash)
    for ref in refs:
        runner(["docker", "push", ref], capture_output=False)
    log(f"Images pushed successfully as: {', '.join(refs)}")

    pushed_tag = sha_tag(short_hash)
    write_status_file(control.status_dir, LAST_PUSHED_TAG_FILE, pushed_tag)
    return pushed_tag
