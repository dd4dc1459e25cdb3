"""CSV output and the Markdown output derived from it.

Markdown is produced by rendering CSV first, splitting it into one block per
table, re-reading each block with floating-point cells normalized, and
emitting a pipe table per block.
"""

import csv
import io
import math
import re
from typing import TextIO

import numpy as np

from ..benchstat import Table
from ..errors import FormatError

_DECIMAL = re.compile(r"^[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?$")


def _csv_header(table: Table, no_range: bool) -> list[str]:
    header = ["name"]
    for config in table.configs:
        header.append(f"{config} {table.metric} ({table.unit})")
        if not no_range:
            header.append("±")
    if table.old_new_delta:
        header.extend(["delta", "note"])
    return header


def format_csv(stream: TextIO, tables: list[Table], *, no_range: bool = False) -> None:
    """Write tables as CSV blocks separated by a blank line.

    Means are written unscaled in the table's unit.
    """
    for t, table in enumerate(tables):
        if t > 0:
            stream.write("\n")
        writer = csv.writer(stream, lineterminator="\n")
        writer.writerow(_csv_header(table, no_range))
        group = ""
        for row in table.rows:
            if row.group != group:
                group = row.group
                writer.writerow([group])
            cells = [row.benchmark]
            for metrics in row.metrics:
                cells.append(f"{metrics.mean:f}" if metrics.unit else "")
                if not no_range:
                    cells.append(metrics.format_diff())
            if table.old_new_delta:
                cells.extend([row.delta, row.note])
            writer.writerow(cells)


def normalize_float(cell: str) -> str:
    """Shortest positional form of a decimal cell; other cells pass through."""
    if not _DECIMAL.match(cell):
        return cell
    value = float(cell)
    if not math.isfinite(value):
        return cell
    return np.format_float_positional(value, trim="-")


def _read_csv(text: str) -> list[list[str]]:
    try:
        return list(csv.reader(io.StringIO(text), strict=True))
    except csv.Error as exc:
        raise FormatError(f"malformed CSV table: {exc}") from exc


def refloat_csv(text: str) -> str:
    """Rewrite a CSV block with every numeric cell normalized."""
    out = io.StringIO()
    writer = csv.writer(out, lineterminator="\n")
    for row in _read_csv(text):
        writer.writerow([normalize_float(cell) for cell in row])
    return out.getvalue()


def _split_blocks(data: str) -> list[str]:
    blocks: list[str] = []
    current: list[str] = []
    for line in data.splitlines():
        if not line.strip():
            if current:
                blocks.append("\n".join(current) + "\n")
            current = []
            continue
        current.append(line)
    if current:
        blocks.append("\n".join(current) + "\n")
    return blocks


def _markdown_cell(cell: str) -> str:
    return cell.replace("|", "\\|").replace("\n", " ")


def _markdown_table(rows: list[list[str]]) -> str:
    if not rows:
        return ""
    ncols = max(len(row) for row in rows)
    cells = [[_markdown_cell(c) for c in row] + [""] * (ncols - len(row)) for row in rows]
    widths = [max(3, *(len(row[i]) for row in cells)) for i in range(ncols)]

    def render(row: list[str]) -> str:
        return "| " + " | ".join(c.ljust(w) for c, w in zip(row, widths, strict=True)) + " |"

    lines = [render(cells[0])]
    lines.append("|" + "|".join("-" * (w + 2) for w in widths) + "|")
    lines.extend(render(row) for row in cells[1:])
    return "\n".join(lines) + "\n"


def csv_to_markdown(data: str) -> list[str]:
    """Convert blank-line separated CSV blocks into Markdown tables."""
    tables = []
    for block in _split_blocks(data):
        tables.append(_markdown_table(_read_csv(refloat_csv(block))))
    return tables


def format_markdown(stream: TextIO, tables: list[Table], *, no_range: bool = False) -> None:
    buf = io.StringIO()
    format_csv(buf, tables, no_range=no_range)
    stream.write("\n".join(csv_to_markdown(buf.getvalue())))
