"""
Script: builder_tools/env_file.py
What: Selects forwarded `NEXT_*` variables and writes `.env.production`.
Doing: Filters the environment by prefix, strips `NEXT_PRIVATE_`, and writes `name=value` lines.
Why: The web build reads its configuration from this file, and the image build needs the same set.
Goal: Give both builds one consistent, deterministic variable set.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping

from builder_tools.common import BuilderError, log


CONTROL_PREFIX = "BUILDER_"
FORWARD_PREFIX = "NEXT_"
PRIVATE_PREFIX = "NEXT_PRIVATE_"
ENV_FILE_NAME = ".env.production"


@dataclass(frozen=True)
class ForwardedVariable:
    source_name: str
    name: str
    value: str

    def as_pair(self) -> str:
        return f"{self.name}={self.value}"


def forwarded_name(source_name: str) -> str:
    """Return the emitted name: `NEXT_PRIVATE_X` becomes `X`, others stay as-is."""
    if source_name.startswith(PRIVATE_PREFIX):
        return source_name[len(PRIVATE_PREFIX):]
    return source_name


def select_forwarded_variables(environ: Mapping[str, str]) -> tuple[ForwardedVariable, ...]:
    """
    Pick the variables that get baked into the application and the image.

    Rules:
    - only names starting with `NEXT_` are considered
    - names starting with `BUILDER_` are control variables and never forwarded
    - `NEXT_PRIVATE_` is stripped from the emitted name

    Values are written verbatim, so a value holding a newline cannot be
    represented as one line and is rejected. Two sources mapping to the same
    emitted name are rejected as well.
    """
    selected: list[ForwardedVariable] = []
    seen: dict[str, str] = {}
    for source_name in sorted(environ):
        if not source_name.startswith(FORWARD_PREFIX):
            continue
        if source_name.startswith(CONTROL_PREFIX):
            continue

        value = environ[source_name]
        if "\n" in value or "\r" in value:
            raise BuilderError(f"Value of {source_name} contains a line break; cannot forward it")

        name = forwarded_name(source_name)
        if not name:
            raise BuilderError(f"Variable {source_name} has an empty name after prefix removal")
        if name in seen:
            raise BuilderError(f"Variables {seen[name]} and {source_name} both forward as {name}")
        seen[name] = source_name
        selected.append(ForwardedVariable(source_name=source_name, name=name, value=value))
    return tuple(selected)


def render_env_lines(forwarded: tuple[ForwardedVariable, ...]) -> str:
    return "".join(f"{variable.as_pair()}\n" for variable in forwarded)


def write_env_file(checkout_dir: Path, forwarded: tuple[ForwardedVariable, ...]) -> Path:
    """Write `.env.production` into the checkout, replacing any previous file."""
    env_path = checkout_dir / ENV_FILE_NAME
    log(f"Creating {ENV_FILE_NAME} file")

    # Write in text mode with "w" so older contents are truncated, never appended.
    with open(env_path, "w", encoding="utf-8", newline="\n") as handle:
        handle.write(render_env_lines(forwarded))

    log("Environment file created with the following variables:")
    print(env_path.read_text(encoding="utf-8"), end="")
    return env_path


def main(environ: Mapping[str, str] | None = None) -> Path:
    # Standalone entry: write the env file into the configured checkout.
    from builder_tools.config import load_config

    config = load_config(os.environ if environ is None else environ)
    return write_env_file(config.control.checkout_dir, config.forwarded)


if __name__ == "__main__":
    main()
