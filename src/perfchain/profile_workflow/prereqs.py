from __future__ import annotations

import os
import shutil
from pathlib import Path

from . import paths
from .model import PipelineConfig, PrerequisiteCheck

# ToolPaths field -> install hint shown when the tool is missing.
_INSTALL_HINTS: dict[str, str] = {
    "build": "Install Rust via rustup (https://rustup.rs) so `cargo` is on PATH.",
    "sampler": "Install perf (e.g., `apt install linux-tools-common linux-tools-$(uname -r)`).",
    "folder": "Clone https://github.com/brendangregg/FlameGraph and put it on PATH (or set PERFCHAIN_FOLDER).",
    "renderer": "Clone https://github.com/brendangregg/FlameGraph and put it on PATH (or set PERFCHAIN_RENDERER).",
    "instrumenter": "Install valgrind (e.g., `apt install valgrind`).",
    "annotator": "cg_annotate ships with valgrind; install valgrind.",
}


def check_tool_available(field: str, tool: str) -> PrerequisiteCheck:
    """Pass if `tool` resolves via PATH (or is an executable path)."""
    name = f"{field}_available"
    if shutil.which(tool) is not None:
        return PrerequisiteCheck(check_name=name, status="pass")
    return PrerequisiteCheck(check_name=name, status="fail", details=f"`{tool}` not found. {_INSTALL_HINTS[field]}")


def check_build_manifest(work_dir: Path) -> PrerequisiteCheck:
    if (work_dir / paths.BUILD_MANIFEST).is_file():
        return PrerequisiteCheck(check_name="build_manifest", status="pass")
    return PrerequisiteCheck(
        check_name="build_manifest",
        status="fail",
        details=f"Missing {paths.BUILD_MANIFEST} in {work_dir} (pass --work-dir to the project root).",
    )


def check_work_dir_writable(work_dir: Path) -> PrerequisiteCheck:
    test = work_dir / f".perfchain_write_test_{os.getpid()}"
    try:
        test.write_text("ok")
        test.unlink()
        return PrerequisiteCheck(check_name="work_dir_writable", status="pass")
    except OSError as e:
        return PrerequisiteCheck(check_name="work_dir_writable", status="fail", details=str(e))


def check_all(config: PipelineConfig) -> list[PrerequisiteCheck]:
    checks = [check_tool_available(field, tool) for field, tool in config.tools.to_dict().items()]
    checks.append(check_build_manifest(config.work_dir))
    checks.append(check_work_dir_writable(config.work_dir))
    return checks


def format_prereq_failures(checks: list[PrerequisiteCheck]) -> str:
    lines: list[str] = ["Missing prerequisites:"]
    for c in checks:
        if c.status != "fail":
            continue
        hint = f" - {c.details}" if c.details else ""
        lines.append(f"- {c.check_name}{hint}")
    return "\n".join(lines)
