"""
Script: builder_tools package
What: Holds the build-and-publish service that replaced the older shell entrypoint.
Doing: Groups pipeline steps, the CLI entrypoint, and shared utility code in one importable package.
Why: Keeps build logic readable and testable instead of living in one long shell script.
Goal: Provide a clear, maintainable home for clone, build, and image publish logic.
"""
