"""
Script: builder_tools/config.py
What: Builds the run configuration once from the process environment.
Doing: Reads `BUILDER_*` control variables into `ControlSettings` and collects forwarded `NEXT_*` variables.
Why: Steps get explicit values instead of each re-reading the environment.
Goal: Fail fast on missing inputs before any clone or build starts.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from builder_tools.common import BuilderError, normalize_registry_name, optional_env, require_env
from builder_tools.env_file import ForwardedVariable, select_forwarded_variables


RUN_MODE_DAEMON = "daemon"
RUN_MODE_ONCE = "once"
RUN_MODES = (RUN_MODE_DAEMON, RUN_MODE_ONCE)

DEFAULT_CHECKOUT_DIR = "/app"
DEFAULT_STATUS_DIR = "/builder"
DEFAULT_REGISTRY_HOST = "ghcr.io"
DEFAULT_GIT_HOST = "github.com"


@dataclass(frozen=True)
class ControlSettings:
    token: str
    branch: str
    org: str
    repo: str
    network: str = ""
    run_mode: str = RUN_MODE_DAEMON
    checkout_dir: Path = Path(DEFAULT_CHECKOUT_DIR)
    status_dir: Path = Path(DEFAULT_STATUS_DIR)
    registry_host: str = DEFAULT_REGISTRY_HOST
    git_host: str = DEFAULT_GIT_HOST

    @property
    def repo_slug(self) -> str:
        return f"{self.org}/{self.repo}"

    @property
    def registry_path(self) -> str:
        # Only the image path is lowercased; login and clone use the names as given.
        return (
            f"{self.registry_host}/{normalize_registry_name(self.org)}/{normalize_registry_name(self.repo)}"
        )

    def __repr__(self) -> str:
        return (
            f"ControlSettings(repo_slug={self.repo_slug!r}, branch={self.branch!r}, "
            f"run_mode={self.run_mode!r}, token=***)"
        )


@dataclass(frozen=True)
class BuilderConfig:
    control: ControlSettings
    forwarded: tuple[ForwardedVariable, ...]


def load_control_settings(environ: Mapping[str, str]) -> ControlSettings:
    run_mode = optional_env("BUILDER_RUN_MODE", RUN_MODE_DAEMON, environ).strip().lower()
    if run_mode not in RUN_MODES:
        raise BuilderError(
            f"Unsupported BUILDER_RUN_MODE={run_mode!r}; expected one of: {', '.join(RUN_MODES)}"
        )

    return ControlSettings(
        token=require_env("BUILDER_GITHUB_TOKEN", environ),
        branch=require_env("BUILDER_GITHUB_BRANCH", environ),
        org=require_env("BUILDER_ORG_NAME", environ),
        repo=require_env("BUILDER_REPO_NAME", environ),
        network=optional_env("BUILDER_NETWORK", "", environ).strip(),
        run_mode=run_mode,
        checkout_dir=Path(optional_env("BUILDER_APP_DIR", DEFAULT_CHECKOUT_DIR, environ) or DEFAULT_CHECKOUT_DIR),
        status_dir=Path(optional_env("BUILDER_STATUS_DIR", DEFAULT_STATUS_DIR, environ) or DEFAULT_STATUS_DIR),
        registry_host=optional_env("BUILDER_REGISTRY_HOST", DEFAULT_REGISTRY_HOST, environ)
        or DEFAULT_REGISTRY_HOST,
        git_host=optional_env("BUILDER_GIT_HOST", DEFAULT_GIT_HOST, environ) or DEFAULT_GIT_HOST,
    )


def load_config(environ: Mapping[str, str]) -> BuilderConfig:
    """Read control settings and forwarded variables from one environment snapshot."""
    return BuilderConfig(
        control=load_control_settings(environ),
        forwarded=select_forwarded_variables(environ),
    )
