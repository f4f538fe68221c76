from __future__ import annotations

import tomllib
from pathlib import Path, PurePosixPath

from .model import ArtifactPaths, PipelineConfig

BUILD_MANIFEST = "Cargo.toml"
RELEASE_DIR = Path("target") / "release"


def resolve_work_dir(work_dir: str | Path | None) -> Path:
    """Return an absolute, existing work dir (defaults to the process cwd)."""
    p = Path(work_dir).expanduser() if work_dir is not None else Path.cwd()
    p = p.resolve()
    if not p.is_dir():
        raise ValueError(f"Work dir does not exist: {p}")
    return p


def default_bin_name(work_dir: Path) -> str:
    """Binary name from `[package].name` in Cargo.toml, else the work dir's name."""
    manifest = work_dir / BUILD_MANIFEST
    if manifest.is_file():
        with manifest.open("rb") as f:
            data = tomllib.load(f)
        name = data.get("package", {}).get("name")
        if isinstance(name, str) and name:
            return name
    return work_dir.name


def build_artifact_path(config: PipelineConfig) -> Path:
    return config.work_dir / RELEASE_DIR / config.bin_name


def artifact_paths(config: PipelineConfig) -> ArtifactPaths:
    return ArtifactPaths(
        build_artifact=build_artifact_path(config),
        raw_trace=config.work_dir / config.raw_trace_name,
        flamegraph_svg=config.work_dir / config.flamegraph_name,
    )


def normalize_source_dir(source_dir: str) -> str:
    """`src`, `./src`, `src/` and `/src` all name the same project-relative directory."""
    rel = PurePosixPath(source_dir.strip()).as_posix().strip("/")
    if rel in ("", "."):
        raise ValueError(f"source_dir must name a directory (got {source_dir!r})")
    return rel


def source_prefixes(config: PipelineConfig) -> tuple[str, ...]:
    """Path prefixes that mark a location as part of the project's own sources."""
    rel = normalize_source_dir(config.source_dir)
    return (f"{rel}/", f"./{rel}/", f"{config.work_dir / rel}/")
