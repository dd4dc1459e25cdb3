"""Output encodings for comparison tables."""

from collections.abc import Callable
from functools import partial
from typing import TextIO

from ..benchstat import Table
from ..errors import FormatError
from .html import DEFAULT_HTML_FOOTER, DEFAULT_HTML_HEADER, format_html, format_html_tables
from .tabular import csv_to_markdown, format_csv, format_markdown, normalize_float, refloat_csv
from .text import format_text

OutputFormatter = Callable[[TextIO, list[Table]], None]

FORMATS = ("text", "csv", "markdown", "html")


def get_formatter(
    name: str,
    *,
    no_range: bool = False,
    html_header: str | None = None,
    html_footer: str | None = None,
) -> OutputFormatter:
    """Return the formatter for ``name``.

    ``html_header``/``html_footer`` of None keep the defaults; an empty string
    drops that part of the document.
    """
    if name == "text":
        return format_text
    if name == "csv":
        return partial(format_csv, no_range=no_range)
    if name == "markdown":
        return partial(format_markdown, no_range=no_range)
    if name == "html":
        return partial(
            format_html,
            header=DEFAULT_HTML_HEADER if html_header is None else html_header,
            footer=DEFAULT_HTML_FOOTER if html_footer is None else html_footer,
        )
    raise FormatError(f"unknown output format {name!r}; expected one of {', '.join(FORMATS)}")


__all__ = [
    "DEFAULT_HTML_FOOTER",
    "DEFAULT_HTML_HEADER",
    "FORMATS",
    "OutputFormatter",
    "csv_to_markdown",
    "format_csv",
    "format_html",
    "format_html_tables",
    "format_markdown",
    "format_text",
    "get_formatter",
    "normalize_float",
    "refloat_csv",
]
