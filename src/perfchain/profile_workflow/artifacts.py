from __future__ import annotations

from pathlib import Path


def instrumentation_outputs(work_dir: Path, pattern: str) -> list[Path]:
    """Return the instrumentation output files currently in `work_dir` (sorted)."""
    return sorted(p for p in work_dir.glob(pattern) if p.is_file())


def clean_instrumentation_outputs(work_dir: Path, pattern: str) -> list[Path]:
    """Delete stale instrumentation outputs and return what was removed.

    Finding nothing to delete is a normal outcome, and so is a file vanishing
    between the glob and the unlink.
    """
    removed: list[Path] = []
    for p in instrumentation_outputs(work_dir, pattern):
        p.unlink(missing_ok=True)
        removed.append(p)
    return removed


def write_flamegraph(svg_path: Path, svg: bytes) -> None:
    """Replace the flamegraph image with freshly rendered bytes."""
    svg_path.write_bytes(svg)
