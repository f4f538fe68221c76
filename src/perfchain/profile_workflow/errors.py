from __future__ import annotations

import shlex
from collections.abc import Sequence

EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126
EXIT_INTERRUPTED = 130


class PipelineError(RuntimeError):
    """A pipeline stage failed; `returncode` is the exit status to report."""

    kind = "pipeline"

    def __init__(self, *, stage: str, argv: Sequence[str], returncode: int, message: str | None = None) -> None:
        self.stage = stage
        self.argv = list(argv)
        self.returncode = exit_status(returncode)
        self.message = message
        detail = message or f"exit {returncode}"
        super().__init__(f"{self.kind}: {stage} failed ({detail}): {shlex.join(self.argv)}")


class BuildFailure(PipelineError):
    kind = "build_failure"


class ProfilerFailure(PipelineError):
    kind = "profiler_failure"


class TransformFailure(PipelineError):
    kind = "transform_failure"


def exit_status(returncode: int) -> int:
    """Map a subprocess returncode onto a non-zero process exit status.

    subprocess reports death-by-signal as a negative number; shells report it as
    128 + signal, which is what callers of the CLI expect.
    """
    if returncode < 0:
        return 128 - returncode
    if returncode == 0:
        raise ValueError("exit status 0 is not a failure")
    return returncode
