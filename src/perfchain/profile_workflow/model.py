from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import attrs

CheckStatus = Literal["pass", "fail"]
ReportFormat = Literal["text", "markdown"]


@attrs.define(frozen=True, slots=True)
class PrerequisiteCheck:
    check_name: str
    status: CheckStatus
    details: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"check_name": self.check_name, "status": self.status, "details": self.details}


@attrs.define(frozen=True, slots=True)
class ToolPaths:
    """Executables for each external collaborator (names on PATH or absolute paths)."""

    build: str = "cargo"
    sampler: str = "perf"
    folder: str = "stackcollapse-perf.pl"
    renderer: str = "flamegraph.pl"
    instrumenter: str = "valgrind"
    annotator: str = "cg_annotate"

    def to_dict(self) -> dict[str, str]:
        return attrs.asdict(self)


@attrs.define(frozen=True, slots=True)
class PipelineConfig:
    work_dir: Path
    bin_name: str
    tools: ToolPaths = attrs.field(factory=ToolPaths)
    build_args: tuple[str, ...] = ("build", "--release")
    sampling_args: tuple[str, ...] = ("1000",)
    instrumentation_args: tuple[str, ...] = ()
    renderer_args: tuple[str, ...] = ()
    annotate_args: tuple[str, ...] = ()
    source_dir: str = "src"
    top_n: int = 10
    instrumentation_pattern: str = "cachegrind.out.*"
    raw_trace_name: str = "perf.data"
    flamegraph_name: str = "flamegraph.svg"


@attrs.define(frozen=True, slots=True)
class ArtifactPaths:
    build_artifact: Path
    raw_trace: Path
    flamegraph_svg: Path

    def to_dict(self) -> dict[str, Any]:
        return {
            "build_artifact": str(self.build_artifact),
            "raw_trace": str(self.raw_trace),
            "flamegraph_svg": str(self.flamegraph_svg),
        }


@attrs.define(frozen=True, slots=True)
class AnnotatedLine:
    """One cost line of the annotation report that belongs to the project's sources."""

    cost: int
    percent: float | None
    location: str
    text: str
