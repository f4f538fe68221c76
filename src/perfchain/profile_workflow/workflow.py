from __future__ import annotations

import sys
from typing import TextIO

from . import artifacts, paths, prereqs, report, toolchain
from .errors import PipelineError
from .model import AnnotatedLine, PipelineConfig, ReportFormat


def _fail(e: PipelineError) -> int:
    print(str(e), file=sys.stderr)
    return e.returncode


def clean(config: PipelineConfig) -> int:
    """Remove stale instrumentation outputs. Never fails for lack of files.

    An unlink error (e.g. permissions) is summarized on stderr and returns 1.
    """
    try:
        removed = artifacts.clean_instrumentation_outputs(config.work_dir, config.instrumentation_pattern)
    except OSError as e:
        print(f"clean failed: {e}", file=sys.stderr)
        return 1
    if removed:
        print(f"Removed {len(removed)} stale file(s): {', '.join(p.name for p in removed)}", file=sys.stderr)
    else:
        print(f"Nothing to clean ({config.instrumentation_pattern})", file=sys.stderr)
    return 0


def annotate_report(config: PipelineConfig) -> list[AnnotatedLine]:
    """Top-N project source lines over every instrumentation output in the work dir.

    No output files means an empty report; the annotator is not invoked.
    """
    outputs = artifacts.instrumentation_outputs(config.work_dir, config.instrumentation_pattern)
    if not outputs:
        return []
    annotated = toolchain.annotate(config, outputs)
    lines = report.project_lines(annotated, paths.source_prefixes(config))
    return report.top_lines(lines, config.top_n)


def _print_report(lines: list[AnnotatedLine], fmt: ReportFormat, out: TextIO) -> None:
    text = report.format_report(lines, fmt)
    if text:
        print(text, file=out)


def annotate(config: PipelineConfig, *, fmt: ReportFormat = "text", out: TextIO | None = None) -> int:
    """Report over whatever outputs already exist (no build, no run)."""
    try:
        lines = annotate_report(config)
    except PipelineError as e:
        return _fail(e)
    _print_report(lines, fmt, out or sys.stdout)
    return 0


def profile_sampling(config: PipelineConfig) -> int:
    """build -> perf record -> perf script | fold | render -> flamegraph.svg.

    The SVG is only written once rendering succeeded; a failed run leaves any
    previous image in place.
    """
    svg_path = paths.artifact_paths(config).flamegraph_svg
    try:
        toolchain.build(config)
        toolchain.record_samples(config)
        trace = toolchain.export_trace(config)
        folded = toolchain.fold_stacks(config, trace)
        svg = toolchain.render_flamegraph(config, folded)
    except PipelineError as e:
        return _fail(e)
    artifacts.write_flamegraph(svg_path, svg)
    print(f"Flamegraph: {svg_path}", file=sys.stderr)
    return 0


def profile_instrumentation(config: PipelineConfig, *, fmt: ReportFormat = "text", out: TextIO | None = None) -> int:
    """clean -> build -> cachegrind -> cg_annotate | project lines | top N."""
    rc = clean(config)
    if rc != 0:
        return rc
    try:
        toolchain.build(config)
        toolchain.run_instrumentation(config)
        lines = annotate_report(config)
    except PipelineError as e:
        return _fail(e)
    _print_report(lines, fmt, out or sys.stdout)
    return 0


def check(config: PipelineConfig) -> int:
    checks = prereqs.check_all(config)
    for c in checks:
        print(f"[{c.status}] {c.check_name}", file=sys.stderr)
    if any(c.status == "fail" for c in checks):
        print(prereqs.format_prereq_failures(checks), file=sys.stderr)
        return 2
    return 0
