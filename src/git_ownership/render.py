from __future__ import annotations

import csv
import io
import json

from .errors import UnknownOutputFormat
from .models import FORMAT_CHOICES, AuthorRecord

HEADER = ["Name", "Lines", "Commits", "Files"]


def author_row(a: AuthorRecord) -> dict[str, object]:
    return {"name": a.name, "lines": a.line_count, "commits": a.commit_count, "files": a.file_count}


def render_tabular(authors: list[AuthorRecord]) -> str:
    rows = [HEADER] + [[a.name, str(a.line_count), str(a.commit_count), str(a.file_count)] for a in authors]
    # every column but the last is padded to its widest cell plus one space
    widths = [max(len(r[i]) for r in rows) + 1 for i in range(len(HEADER) - 1)]
    out: list[str] = []
    for r in rows:
        cells = [r[i].ljust(widths[i]) for i in range(len(widths))]
        out.append("".join(cells) + r[-1])
    return "\n".join(out)


def render_csv(authors: list[AuthorRecord]) -> str:
    buf = io.StringIO()
    writer = csv.writer(buf, lineterminator="\n")
    writer.writerow(HEADER)
    for a in authors:
        writer.writerow([a.name, a.line_count, a.commit_count, a.file_count])
    return buf.getvalue().rstrip("\n")


def _dumps(row: dict[str, object]) -> str:
    return json.dumps(row, separators=(",", ":"), ensure_ascii=False)


def render_json(authors: list[AuthorRecord]) -> str:
    return "[" + ",".join(_dumps(author_row(a)) for a in authors) + "]"


def render_json_lines(authors: list[AuthorRecord]) -> str:
    return "\n".join(_dumps(author_row(a)) for a in authors)


_RENDERERS = {
    "tabular": render_tabular,
    "csv": render_csv,
    "json": render_json,
    "json-lines": render_json_lines,
}


def render(authors: list[AuthorRecord], fmt: str = "tabular") -> str:
    fn = _RENDERERS.get(fmt)
    if fn is None:
        raise UnknownOutputFormat(f"unknown output format {fmt!r}; expected one of: {', '.join(FORMAT_CHOICES)}")
    return fn(authors)
