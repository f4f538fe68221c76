from __future__ import annotations

import argparse
from typing import cast

from . import config as config_mod
from . import workflow
from .model import PipelineConfig, ReportFormat


def _add_common(p: argparse.ArgumentParser) -> None:
    p.add_argument("--work-dir", default=None, help="Project root (default: current directory).")
    p.add_argument("--bin", dest="bin_name", default=None, help="Binary name under target/release (default: Cargo.toml package name).")
    tools = p.add_argument_group("tools", "Override tool executables (also via PERFCHAIN_* environment variables).")
    tools.add_argument("--build-tool", default=None, help="Build tool (default: cargo).")
    tools.add_argument("--sampler", default=None, help="Sampling profiler (default: perf).")
    tools.add_argument("--folder", default=None, help="Stack folder (default: stackcollapse-perf.pl).")
    tools.add_argument("--renderer", default=None, help="Flamegraph renderer (default: flamegraph.pl).")
    tools.add_argument("--instrumenter", default=None, help="Instrumentation simulator (default: valgrind).")
    tools.add_argument("--annotator", default=None, help="Annotation tool (default: cg_annotate).")


def _add_report(p: argparse.ArgumentParser) -> None:
    p.add_argument("--top-n", type=int, default=None, help="Number of hot lines to print (default: 10).")
    p.add_argument("--source-dir", default=None, help="Project source directory used to filter lines (default: src).")
    p.add_argument("--annotate-args", default=None, help="Extra annotation tool args (e.g. \"--show=Ir,D1mr\").")
    p.add_argument("--format", dest="fmt", default="text", choices=["text", "markdown"])


def build_parser() -> argparse.ArgumentParser:
    """Build CLI parser for the profiling workflows."""
    parser = argparse.ArgumentParser(
        prog="perfchain",
        description="Build a release binary and profile it (perf flamegraph or cachegrind hot lines).",
    )
    sub = parser.add_subparsers(dest="cmd", required=True)

    sampling = sub.add_parser("profile-sampling", help="Build, sample with perf, render flamegraph.svg.")
    _add_common(sampling)
    sampling.add_argument("--sampling-args", default=None, help="Program args for the sampled run (default: \"1000\").")
    sampling.add_argument("--renderer-args", default=None, help="Extra renderer args (e.g. \"--title lispy\").")

    instr = sub.add_parser("profile-instrumentation", help="Clean, build, run under cachegrind, print hot lines.")
    _add_common(instr)
    instr.add_argument("--instrumentation-args", default=None, help="Program args for the instrumented run (default: none).")
    _add_report(instr)

    clean = sub.add_parser("clean", help="Delete stale instrumentation output files.")
    _add_common(clean)

    annotate = sub.add_parser("annotate", help="Print hot lines from existing instrumentation outputs.")
    _add_common(annotate)
    _add_report(annotate)

    check = sub.add_parser("check", help="Check that the configured tools and project layout are usable.")
    _add_common(check)

    return parser


def config_from_args(ns: argparse.Namespace) -> PipelineConfig:
    return config_mod.load_config(
        ns.work_dir,
        tools={
            "build": ns.build_tool,
            "sampler": ns.sampler,
            "folder": ns.folder,
            "renderer": ns.renderer,
            "instrumenter": ns.instrumenter,
            "annotator": ns.annotator,
        },
        bin_name=ns.bin_name,
        sampling_args=getattr(ns, "sampling_args", None),
        instrumentation_args=getattr(ns, "instrumentation_args", None),
        renderer_args=getattr(ns, "renderer_args", None),
        annotate_args=getattr(ns, "annotate_args", None),
        source_dir=getattr(ns, "source_dir", None),
        top_n=getattr(ns, "top_n", None),
    )


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint. Returns process exit code."""
    parser = build_parser()
    ns = parser.parse_args(argv)
    try:
        config = config_from_args(ns)
    except ValueError as e:
        parser.error(str(e))

    if ns.cmd == "profile-sampling":
        return workflow.profile_sampling(config)
    if ns.cmd == "profile-instrumentation":
        return workflow.profile_instrumentation(config, fmt=cast(ReportFormat, ns.fmt))
    if ns.cmd == "clean":
        return workflow.clean(config)
    if ns.cmd == "annotate":
        return workflow.annotate(config, fmt=cast(ReportFormat, ns.fmt))
    if ns.cmd == "check":
        return workflow.check(config)

    raise AssertionError(f"Unhandled cmd: {ns.cmd}")


if __name__ == "__main__":
    raise SystemExit(main())
