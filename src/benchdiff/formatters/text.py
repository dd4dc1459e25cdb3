from typing import TextIO

from ..benchstat import Table


def _trim(cols: list[str]) -> list[str]:
    while cols and cols[-1] == "":
        cols.pop()
    return cols


def _text_rows(table: Table) -> list[list[str]]:
    rows: list[list[str]] = []
    if len(table.configs) == 1:
        rows.append(["name", table.metric])
    elif len(table.configs) == 2:
        rows.append(["name", "old " + table.metric, "new " + table.metric, "delta"])
    else:
        rows.append(["name \\ " + table.metric, *table.configs])

    group = ""
    for row in table.rows:
        if row.group != group:
            group = row.group
            rows.append([group])
        cols = [row.benchmark]
        cols.extend(m.format(row.scaler) for m in row.metrics)
        if len(table.configs) == 2:
            cols.append("~   " if row.delta == "~" else row.delta)
            cols.append(row.note)
        rows.append(cols)
    return [_trim(cols) for cols in rows]


def format_text(stream: TextIO, tables: list[Table]) -> None:
    """Write tables as aligned columns, one blank line between tables."""
    text_tables = [_text_rows(table) for table in tables]

    widths: list[int] = []
    for text_table in text_tables:
        for cols in text_table:
            if len(cols) == 1:
                continue
            while len(widths) < len(cols):
                widths.append(0)
            for i, col in enumerate(cols):
                widths[i] = max(widths[i], len(col))

    for t, text_table in enumerate(text_tables):
        if t > 0:
            stream.write("\n")

        heading = text_table[0]
        for i, col in enumerate(heading):
            if i == 0:
                stream.write(col.ljust(widths[i]))
            elif i == len(heading) - 1:
                stream.write(f"  {col}\n")
            else:
                stream.write("  " + col.ljust(widths[i]))

        for cols in text_table[1:]:
            if len(cols) == 1:
                # group label
                stream.write(cols[0] + "\n")
                continue
            for i, col in enumerate(cols):
                if i == 0:
                    stream.write(col.ljust(widths[i]))
                elif i == len(cols) - 1 and col.startswith("("):
                    # p-value notes stay left aligned
                    stream.write(f"  {col}")
                else:
                    stream.write("  " + col.rjust(widths[i]))
            stream.write("\n")
