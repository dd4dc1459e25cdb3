from html import escape
from typing import TextIO

from ..benchstat import Row, Table

DEFAULT_HTML_HEADER = """<!doctype html>
<html>
<head>
<meta charset="utf-8">
<title>Performance Result Comparison</title>
<style>
.benchstat { border-collapse: collapse; }
.benchstat th:nth-child(1) { text-align: left; }
.benchstat tbody td:nth-child(1n+2):not(.note) { text-align: right; padding: 0em 1em; }
.benchstat tr:not(.configs) th { border-top: 1px solid #666; border-bottom: 1px solid #ccc; }
.benchstat .nodelta { text-align: center !important; }
.benchstat .better td.delta { font-weight: bold; }
.benchstat .worse td.delta { font-weight: bold; color: #c00; }
</style>
</head>
<body>
"""

DEFAULT_HTML_FOOTER = """</body>
</html>
"""

_CHANGE_CLASSES = {1: "better", -1: "worse", 0: "unchanged"}


def _colspan(table: Table) -> int:
    span = 1 + len(table.configs)
    if table.old_new_delta:
        span += 2
    return span


def _row_html(table: Table, row: Row) -> str:
    cells = [f"<td>{escape(row.benchmark)}"]
    cells.extend(f"<td>{escape(m.format(row.scaler))}" for m in row.metrics)
    if table.old_new_delta:
        delta_class = "nodelta" if row.delta == "~" else "delta"
        # typographic minus sign
        delta = row.delta.replace("-", "−")
        cells.append(f"<td class='{delta_class}'>{escape(delta)}")
        cells.append(f"<td class='note'>{escape(row.note)}")
        return f"<tr class='{_CHANGE_CLASSES[row.change]}'>" + "".join(cells)
    return "<tr>" + "".join(cells)


def _table_html(table: Table) -> str:
    configs = "".join(f"<th>{escape(c)}" for c in table.configs)
    metric = escape(table.metric)
    table_class = "benchstat oldnew" if table.old_new_delta else "benchstat"
    lines = [f"<table class='{table_class}'>", f"<tr class='configs'><th>{configs}", "<tbody>"]
    if len(table.configs) == 1:
        lines.append(f"<tr><th><th>{metric}")
    elif table.old_new_delta:
        lines.append(f"<tr><th><th colspan='2' class='metric'>{metric}<th>delta")
    else:
        lines.append(f"<tr><th><th colspan='{len(table.configs)}' class='metric'>{metric}")

    group: str | None = None
    for row in table.rows:
        if row.group != group:
            if group is not None:
                lines.append("<tr><td>&nbsp;")
            group = row.group
            if len(table.groups) > 1 and row.group:
                lines.append(
                    f"<tr class='group'><th colspan='{_colspan(table)}'>{escape(row.group)}"
                )
        lines.append(_row_html(table, row))
    lines.append("<tr><td>&nbsp;")
    lines.extend(["</tbody>", "</table>"])
    return "\n".join(lines) + "\n"


def format_html_tables(stream: TextIO, tables: list[Table]) -> None:
    for table in tables:
        stream.write(_table_html(table))


def format_html(
    stream: TextIO,
    tables: list[Table],
    *,
    header: str = DEFAULT_HTML_HEADER,
    footer: str = DEFAULT_HTML_FOOTER,
) -> None:
    """Write a full HTML document; an empty header or footer is omitted."""
    if header:
        stream.write(header)
    format_html_tables(stream, tables)
    if footer:
        stream.write(footer)
