"""One function per external tool invocation.

Every stage runs with `cwd=config.work_dir`. Stderr is never captured, so the
tools' own diagnostics reach the user unmodified; stdout is captured only where
it carries data for the next stage (trace export, folding, rendering,
annotation).
"""

from __future__ import annotations

import shlex
import subprocess
import sys
from collections.abc import Sequence
from pathlib import Path

from . import paths
from .errors import (
    EXIT_INTERRUPTED,
    EXIT_NOT_EXECUTABLE,
    EXIT_NOT_FOUND,
    BuildFailure,
    PipelineError,
    ProfilerFailure,
    TransformFailure,
)
from .model import PipelineConfig


def _run_stage(
    argv: Sequence[str],
    *,
    stage: str,
    cwd: Path,
    failure: type[PipelineError],
    stdin: bytes | None = None,
    capture: bool = False,
) -> bytes:
    """Run one stage to completion; raise `failure` on any non-zero outcome."""
    argv = [str(a) for a in argv]
    print(f"+ {shlex.join(argv)}", file=sys.stderr, flush=True)
    try:
        proc = subprocess.run(
            argv,
            cwd=cwd,
            input=stdin,
            stdout=subprocess.PIPE if capture else None,
            check=False,
        )
    except FileNotFoundError as e:
        raise failure(stage=stage, argv=argv, returncode=EXIT_NOT_FOUND, message=f"{argv[0]} not found") from e
    except PermissionError as e:
        raise failure(stage=stage, argv=argv, returncode=EXIT_NOT_EXECUTABLE, message=f"{argv[0]} is not executable") from e
    except KeyboardInterrupt as e:
        # subprocess.run has already killed and reaped the child.
        raise ProfilerFailure(stage=stage, argv=argv, returncode=EXIT_INTERRUPTED, message="interrupted") from e

    if proc.returncode != 0:
        raise failure(stage=stage, argv=argv, returncode=proc.returncode)
    return proc.stdout or b""


def build_argv(config: PipelineConfig) -> list[str]:
    return [config.tools.build, *config.build_args]


def record_argv(config: PipelineConfig) -> list[str]:
    a = paths.artifact_paths(config)
    return [
        config.tools.sampler,
        "record",
        "-g",
        "-o",
        str(a.raw_trace),
        "--",
        str(a.build_artifact),
        *config.sampling_args,
    ]


def export_argv(config: PipelineConfig) -> list[str]:
    return [config.tools.sampler, "script", "-i", str(paths.artifact_paths(config).raw_trace)]


def fold_argv(config: PipelineConfig) -> list[str]:
    return [config.tools.folder]


def render_argv(config: PipelineConfig) -> list[str]:
    return [config.tools.renderer, *config.renderer_args]


def instrument_argv(config: PipelineConfig) -> list[str]:
    return [
        config.tools.instrumenter,
        "--tool=cachegrind",
        "--cache-sim=yes",
        str(paths.build_artifact_path(config)),
        *config.instrumentation_args,
    ]


def annotate_argv(config: PipelineConfig, outputs: Sequence[Path]) -> list[str]:
    return [config.tools.annotator, *config.annotate_args, *(str(p) for p in outputs)]


def build(config: PipelineConfig) -> None:
    """Release build; writes the binary at `paths.build_artifact_path(config)`."""
    _run_stage(build_argv(config), stage="build", cwd=config.work_dir, failure=BuildFailure)


def record_samples(config: PipelineConfig) -> None:
    _run_stage(record_argv(config), stage="sample", cwd=config.work_dir, failure=ProfilerFailure)


def export_trace(config: PipelineConfig) -> bytes:
    """Dump the recorded trace as text (input of the stack folder)."""
    return _run_stage(
        export_argv(config), stage="export_trace", cwd=config.work_dir, failure=TransformFailure, capture=True
    )


def fold_stacks(config: PipelineConfig, trace: bytes) -> bytes:
    """Trace text in, folded stacks (`frame;frame;frame count` per line) out."""
    return _run_stage(
        fold_argv(config), stage="fold", cwd=config.work_dir, failure=TransformFailure, stdin=trace, capture=True
    )


def render_flamegraph(config: PipelineConfig, folded: bytes) -> bytes:
    """Folded stacks in, SVG document out."""
    return _run_stage(
        render_argv(config), stage="render", cwd=config.work_dir, failure=TransformFailure, stdin=folded, capture=True
    )


def run_instrumentation(config: PipelineConfig) -> None:
    """Run the binary under cachegrind; it drops one `cachegrind.out.<pid>` per run."""
    _run_stage(instrument_argv(config), stage="instrument", cwd=config.work_dir, failure=ProfilerFailure)


def annotate(config: PipelineConfig, outputs: Sequence[Path]) -> str:
    out = _run_stage(
        annotate_argv(config, outputs), stage="annotate", cwd=config.work_dir, failure=TransformFailure, capture=True
    )
    return out.decode(errors="replace")
