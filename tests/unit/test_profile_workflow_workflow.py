from __future__ import annotations

from pathlib import Path

import pytest

from perfchain.profile_workflow import artifacts, workflow
from perfchain.profile_workflow.model import PipelineConfig, ToolPaths


def _unlink_denied(work_dir: Path, pattern: str) -> list[Path]:
    raise PermissionError(13, "Permission denied", str(work_dir / "cachegrind.out.1"))


def test_clean_error_is_one_line_summary(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, capsys: pytest.CaptureFixture[str]
) -> None:
    monkeypatch.setattr(artifacts, "clean_instrumentation_outputs", _unlink_denied)
    cfg = PipelineConfig(work_dir=tmp_path, bin_name="lispy")
    assert workflow.clean(cfg) == 1
    err = capsys.readouterr().err
    assert err.startswith("clean failed:")
    assert "Traceback" not in err


def test_clean_error_stops_instrumentation_pipeline(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(artifacts, "clean_instrumentation_outputs", _unlink_denied)
    marker = tmp_path / "built"
    build = tmp_path / "cargo"
    build.write_text(f"#!/usr/bin/env bash\ntouch {marker}\n")
    build.chmod(0o755)
    cfg = PipelineConfig(work_dir=tmp_path, bin_name="lispy", tools=ToolPaths(build=str(build)))
    assert workflow.profile_instrumentation(cfg) == 1
    assert not marker.exists()
