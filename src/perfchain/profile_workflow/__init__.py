"""Build + profile workflows (sampling -> flamegraph, cachegrind -> hot lines).

Entry points live in `__main__`; each stage is a small function in `toolchain`
that shells out to one external tool, and `workflow` chains the stages.
"""

from __future__ import annotations
