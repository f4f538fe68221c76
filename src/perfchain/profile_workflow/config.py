from __future__ import annotations

import os
import shlex
from collections.abc import Mapping
from pathlib import Path

import attrs

from . import paths
from .model import PipelineConfig, ToolPaths

ENV_PREFIX = "PERFCHAIN_"

# ToolPaths field -> environment variable that overrides it.
TOOL_ENV_VARS: dict[str, str] = {
    "build": f"{ENV_PREFIX}BUILD",
    "sampler": f"{ENV_PREFIX}SAMPLER",
    "folder": f"{ENV_PREFIX}FOLDER",
    "renderer": f"{ENV_PREFIX}RENDERER",
    "instrumenter": f"{ENV_PREFIX}INSTRUMENTER",
    "annotator": f"{ENV_PREFIX}ANNOTATOR",
}
BIN_ENV_VAR = f"{ENV_PREFIX}BIN"


def split_args(value: str | None) -> tuple[str, ...] | None:
    """Shell-split a CLI argument string; None means "not given"."""
    if value is None:
        return None
    return tuple(shlex.split(value))


def resolve_tools(
    overrides: Mapping[str, str | None] | None = None,
    *,
    environ: Mapping[str, str] | None = None,
) -> ToolPaths:
    """Defaults < environment variables < explicit overrides, per tool."""
    env = os.environ if environ is None else environ
    chosen: dict[str, str] = {}
    for field, var in TOOL_ENV_VARS.items():
        value = (overrides or {}).get(field) or env.get(var)
        if value:
            chosen[field] = value
    return ToolPaths(**chosen)


def load_config(
    work_dir: str | Path | None = None,
    *,
    tools: Mapping[str, str | None] | None = None,
    bin_name: str | None = None,
    sampling_args: str | None = None,
    instrumentation_args: str | None = None,
    renderer_args: str | None = None,
    annotate_args: str | None = None,
    source_dir: str | None = None,
    top_n: int | None = None,
    environ: Mapping[str, str] | None = None,
) -> PipelineConfig:
    """Build a PipelineConfig for `work_dir`.

    String-valued argument lists (`sampling_args` etc.) are shell-split. Anything
    left as None keeps its default.
    """
    env = os.environ if environ is None else environ
    root = paths.resolve_work_dir(work_dir)
    config = PipelineConfig(
        work_dir=root,
        bin_name=bin_name or env.get(BIN_ENV_VAR) or paths.default_bin_name(root),
        tools=resolve_tools(tools, environ=env),
    )

    changes: dict[str, object] = {}
    for name, raw in (
        ("sampling_args", sampling_args),
        ("instrumentation_args", instrumentation_args),
        ("renderer_args", renderer_args),
        ("annotate_args", annotate_args),
    ):
        parsed = split_args(raw)
        if parsed is not None:
            changes[name] = parsed
    if source_dir is not None:
        changes["source_dir"] = paths.normalize_source_dir(source_dir)
    if top_n is not None:
        if top_n < 1:
            raise ValueError(f"top_n must be >= 1 (got {top_n})")
        changes["top_n"] = top_n
    return attrs.evolve(config, **changes)
