from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import attrs
import pytest

from perfchain.profile_workflow import config
from perfchain.profile_workflow.model import PipelineConfig

# Stub tools speak just enough of each real tool's command line for the
# workflows; FAKE_* environment variables steer their output and failures.
_STUBS: dict[str, str] = {
    "cargo": """\
#!/usr/bin/env bash
if [ -n "${FAKE_CARGO_FAIL:-}" ]; then
  echo "error[E0425]: cannot find value in this scope" >&2
  exit 101
fi
mkdir -p target/release
printf '#!/usr/bin/env bash\\nexit 0\\n' > target/release/lispy
chmod +x target/release/lispy
""",
    "perf": """\
#!/usr/bin/env bash
cmd="$1"; shift
case "$cmd" in
  record)
    out=perf.data
    while [ $# -gt 0 ]; do
      case "$1" in
        -o) out="$2"; shift 2 ;;
        --) shift; break ;;
        *) shift ;;
      esac
    done
    "$@"
    echo "lispy;main;eval;${FAKE_SAMPLE_TAG:-sample};n=${2:-none}" > "$out"
    ;;
  script)
    cat "$2"
    ;;
  *)
    exit 2
    ;;
esac
""",
    "stackcollapse-perf.pl": """\
#!/usr/bin/env bash
if [ -n "${FAKE_FOLD_FAIL:-}" ]; then
  echo "malformed trace" >&2
  exit 3
fi
sed 's/$/ 1/'
""",
    "flamegraph.pl": """\
#!/usr/bin/env bash
printf '<svg>\\n'
cat
printf '</svg>\\n'
""",
    "valgrind": """\
#!/usr/bin/env bash
if [ -n "${FAKE_VALGRIND_FAIL:-}" ]; then
  exit 1
fi
while [ $# -gt 0 ]; do
  case "$1" in
    --*) shift ;;
    *) break ;;
  esac
done
"$@"
tag="${FAKE_CG_TAG:-new}"
{
  echo "5,000 (50.0%)  src/eval.rs:lispy::eval::eval_${tag}"
  echo "3,000 (30.0%)  /usr/lib/x86_64-linux-gnu/libc.so.6:memcpy"
  echo "1,000 (10.0%)  src/env.rs:lispy::env::get_${tag}"
} > "$(mktemp cachegrind.out.XXXXXX)"
""",
    "cg_annotate": """\
#!/usr/bin/env bash
files=()
for a in "$@"; do
  case "$a" in
    --*) ;;
    *) files+=("$a") ;;
  esac
done
if [ ${#files[@]} -eq 0 ]; then
  echo "cg_annotate: no input files" >&2
  exit 1
fi
cat "${files[@]}"
""",
}

# Names of the FAKE_* switches, cleared for every test.
_FAKE_ENV = ("FAKE_CARGO_FAIL", "FAKE_SAMPLE_TAG", "FAKE_FOLD_FAIL", "FAKE_VALGRIND_FAIL", "FAKE_CG_TAG")


@pytest.fixture(autouse=True)
def _clear_fake_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _FAKE_ENV:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def stub_bin(tmp_path: Path) -> Path:
    bin_dir = tmp_path / "stub-bin"
    bin_dir.mkdir()
    for name, body in _STUBS.items():
        p = bin_dir / name
        p.write_text(body)
        p.chmod(0o755)
    return bin_dir


@pytest.fixture
def project(tmp_path: Path) -> Path:
    root = tmp_path / "lispy"
    (root / "src").mkdir(parents=True)
    (root / "Cargo.toml").write_text('[package]\nname = "lispy"\nversion = "0.1.0"\n')
    (root / "src" / "main.rs").write_text("fn main() {}\n")
    return root


@pytest.fixture
def stub_config(project: Path, stub_bin: Path) -> PipelineConfig:
    return config.load_config(
        project,
        tools={
            "build": str(stub_bin / "cargo"),
            "sampler": str(stub_bin / "perf"),
            "folder": str(stub_bin / "stackcollapse-perf.pl"),
            "renderer": str(stub_bin / "flamegraph.pl"),
            "instrumenter": str(stub_bin / "valgrind"),
            "annotator": str(stub_bin / "cg_annotate"),
        },
        environ={},
    )


@pytest.fixture
def with_tools() -> Callable[..., PipelineConfig]:
    def _with(cfg: PipelineConfig, **tools: str) -> PipelineConfig:
        return attrs.evolve(cfg, tools=attrs.evolve(cfg.tools, **tools))

    return _with
