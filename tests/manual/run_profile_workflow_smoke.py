from __future__ import annotations

import argparse
import subprocess
import sys

from perfchain.profile_workflow import config, paths, prereqs


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Manual smoke: run both profiling workflows on a real cargo project.")
    parser.add_argument("--work-dir", required=True, help="Cargo project root to profile.")
    ns = parser.parse_args(argv)

    cfg = config.load_config(ns.work_dir)
    checks = prereqs.check_all(cfg)
    if any(c.status == "fail" for c in checks):
        print("Skipping: missing prerequisites")
        print(prereqs.format_prereq_failures(checks))
        return 0

    for cmd in ("profile-sampling", "profile-instrumentation"):
        rc = subprocess.call([sys.executable, "-m", "perfchain.profile_workflow", cmd, "--work-dir", str(cfg.work_dir)])
        if rc != 0:
            return rc
    print(f"Flamegraph: {paths.artifact_paths(cfg).flamegraph_svg}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
