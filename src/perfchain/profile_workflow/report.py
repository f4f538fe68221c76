"""Reduce `cg_annotate` output to the hottest lines of the project's own sources."""

from __future__ import annotations

import re
from collections.abc import Iterable, Sequence

from mdutils.mdutils import MdUtils  # type: ignore[import-untyped]

from .model import AnnotatedLine, ReportFormat

# Leading cost column, e.g. "1,234,567 (38.6%)  src/eval.rs:lispy::eval::eval".
# Extra event columns (I1mr, ILmr, ...) may follow before the location. Newer
# multi-file cg_annotate adds a cumulative percent, "(52.9%, 52.9%)", and marks
# file:function summary lines with a leading "<" or ">".
_COST_LINE_RE = re.compile(r"^[<>]?\s*(?P<cost>\d[\d,]*)(?:\s+\(\s*(?P<pct>\d+(?:\.\d+)?)%(?:,\s*\d+(?:\.\d+)?%)?\))?\s+(?P<rest>\S.*)$")

REPORT_TITLE = "Hot source lines"


def parse_cost_line(line: str, prefixes: Sequence[str]) -> AnnotatedLine | None:
    """Parse one annotation line; None unless it has a cost and an in-tree location."""
    m = _COST_LINE_RE.match(line)
    if m is None:
        return None
    location = next((tok for tok in m.group("rest").split() if tok.startswith(tuple(prefixes))), None)
    if location is None:
        return None
    pct = m.group("pct")
    return AnnotatedLine(
        cost=int(m.group("cost").replace(",", "")),
        percent=float(pct) if pct is not None else None,
        location=location,
        text=line.rstrip(),
    )


def project_lines(annotated: str, prefixes: Sequence[str]) -> list[AnnotatedLine]:
    """Keep lines attributed to the project's source tree, in tool order."""
    out: list[AnnotatedLine] = []
    for line in annotated.splitlines():
        parsed = parse_cost_line(line, prefixes)
        if parsed is not None:
            out.append(parsed)
    return out


def top_lines(lines: Iterable[AnnotatedLine], n: int) -> list[AnnotatedLine]:
    """Descending cost (stable for ties), truncated to `n`."""
    if n < 1:
        raise ValueError(f"n must be >= 1 (got {n})")
    return sorted(lines, key=lambda ln: ln.cost, reverse=True)[:n]


def _md_cell(s: str) -> str:
    return s.replace("|", "\\|")


def format_markdown(lines: Sequence[AnnotatedLine]) -> str:
    md = MdUtils(file_name="hot_lines", title=REPORT_TITLE)
    if not lines:
        md.new_paragraph("No cost lines attributed to project sources.")
        return md.get_md_text()
    cells: list[str] = ["Cost", "%", "Location"]
    for ln in lines:
        pct = f"{ln.percent:.1f}" if ln.percent is not None else ""
        cells.extend([f"{ln.cost:,}", pct, _md_cell(ln.location)])
    md.new_table(columns=3, rows=len(lines) + 1, text=cells, text_align="left")
    return md.get_md_text()


def format_report(lines: Sequence[AnnotatedLine], fmt: ReportFormat = "text") -> str:
    if fmt == "markdown":
        return format_markdown(lines)
    if fmt == "text":
        return "\n".join(ln.text for ln in lines)
    raise ValueError(f"Unsupported report format: {fmt}")
