"""Reader for Go benchmark output.

A sample file holds lines such as::

    goos: linux
    pkg: example.com/mod/pkg
    BenchmarkParse/size=small-8   1000000   1042 ns/op   96 B/op   2 allocs/op

``key: value`` lines set labels for every benchmark line that follows them.
Everything else (``PASS``, ``ok ...`` and test chatter) is ignored.
"""

import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field

_CONFIG_LINE = re.compile(r"^([a-z][^\s:]*):\s*(.*?)\s*$")
_GOMAXPROCS_SUFFIX = re.compile(r"-(\d+)$")


@dataclass(slots=True)
class BenchResult:
    """One benchmark line and the labels in effect when it was read."""

    name: str
    iterations: int
    values: list[tuple[float, str]]
    labels: dict[str, str] = field(default_factory=dict)
    name_labels: dict[str, str] = field(default_factory=dict)
    line: int = 0

    def label(self, key: str) -> str:
        return self.name_labels.get(key) or self.labels.get(key, "")


def parse_name_labels(full_name: str) -> dict[str, str]:
    labels: dict[str, str] = {}
    name = full_name
    match = _GOMAXPROCS_SUFFIX.search(name)
    if match:
        labels["gomaxprocs"] = match.group(1)
        name = name[: match.start()]
    parts = name.split("/")
    labels["name"] = parts[0]
    for part in parts[1:]:
        key, sep, value = part.partition("=")
        if sep:
            labels[key] = value
    return labels


def _parse_float(text: str) -> float | None:
    try:
        return float(text)
    except ValueError:
        return None


def parse_bench_line(line: str, labels: dict[str, str], lineno: int = 0) -> BenchResult | None:
    fields = line.split()
    if len(fields) < 4 or not fields[0].startswith("Benchmark"):
        return None
    name = fields[0][len("Benchmark") :]
    try:
        iterations = int(fields[1])
    except ValueError:
        return None
    if iterations == 0:
        return None

    values: list[tuple[float, str]] = []
    for i in range(2, len(fields) - 1, 2):
        value = _parse_float(fields[i])
        if value is None:
            continue
        values.append((value, fields[i + 1]))

    return BenchResult(
        name=name,
        iterations=iterations,
        values=values,
        labels=dict(labels),
        name_labels=parse_name_labels(name),
        line=lineno,
    )


def parse_bench_output(lines: Iterable[str]) -> Iterator[BenchResult]:
    """Yield every benchmark result in ``lines``."""
    labels: dict[str, str] = {}
    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        config = _CONFIG_LINE.match(line)
        if config:
            key, value = config.groups()
            if value:
                labels[key] = value
            else:
                labels.pop(key, None)
            continue
        result = parse_bench_line(line, labels, lineno)
        if result is not None:
            yield result
