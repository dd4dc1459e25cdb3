import logging
import math
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, NamedTuple, TextIO

from scipy import stats

from .deltas import DeltaTest, DeltaTestError, u_test
from .metrics import Metrics
from .parse import BenchResult, parse_bench_output
from .scaler import Scaler, new_scaler

logger = logging.getLogger(__name__)

DEFAULT_ALPHA = 0.05
GEOMEAN_ROW = "[Geo mean]"

_METRIC_NAMES = {
    "ns/op": "time/op",
    "B/op": "alloc/op",
    "MB/s": "speed",
}


def metric_of(unit: str) -> str:
    return _METRIC_NAMES.get(unit, unit)


def _pct_change(old: float, new: float) -> float:
    # A zero baseline makes any change infinite, as benchstat reports it
    if old == 0:
        return math.copysign(math.inf, new)
    return (new / old - 1.0) * 100.0


def _format_pct(pct: float) -> str:
    if math.isinf(pct):
        return "+Inf%" if pct > 0 else "-Inf%"
    return f"{pct:+.2f}%"


class Key(NamedTuple):
    config: str
    group: str
    benchmark: str
    unit: str


@dataclass
class Row:
    benchmark: str
    group: str = ""
    scaler: Scaler | None = None
    metrics: list[Metrics] = field(default_factory=list)
    pct_delta: float = math.nan
    delta: str = ""
    note: str = ""
    change: int = 0  # +1 better, -1 worse, 0 unchanged


@dataclass
class Table:
    metric: str
    unit: str
    configs: list[str]
    groups: list[str]
    rows: list[Row] = field(default_factory=list)
    old_new_delta: bool = False


# Sort keys for table rows.
Order = Callable[[Row], Any]


def by_name(row: Row) -> Any:
    return row.benchmark


def by_delta(row: Row) -> Any:
    # Rows without a significant change sort as unchanged
    return 0.0 if math.isnan(row.pct_delta) else abs(row.pct_delta)


ORDERS: dict[str, Order] = {
    "name": by_name,
    "delta": by_delta,
}


@dataclass
class Collection:
    """Benchmark samples grouped by config, ready to be compared.

    Configs are the sample sets being compared (one per file); with exactly
    two configs every table gets a delta column.
    """

    alpha: float = DEFAULT_ALPHA
    delta_test: DeltaTest | None = None
    add_geomean: bool = False
    split_by: list[str] = field(default_factory=list)
    order: Order | None = None
    reverse_order: bool = False

    configs: list[str] = field(default_factory=list, init=False)
    groups: list[str] = field(default_factory=list, init=False)
    benchmarks: dict[str, list[str]] = field(default_factory=dict, init=False)
    units: list[str] = field(default_factory=list, init=False)
    metrics: dict[Key, Metrics] = field(default_factory=dict, init=False)

    def add_file(self, config: str, path: str | Path) -> None:
        with open(path, encoding="utf-8") as f:
            self.add_stream(config, f)

    def add_stream(self, config: str, stream: TextIO) -> None:
        self.configs.append(config)
        count = 0
        for result in parse_bench_output(stream):
            self._add_result(config, result)
            count += 1
        logger.debug("Read %d benchmark lines for %s", count, config)

    def add_text(self, config: str, text: str) -> None:
        self.configs.append(config)
        for result in parse_bench_output(text.splitlines()):
            self._add_result(config, result)

    def _make_group(self, result: BenchResult) -> str:
        parts = []
        for key in self.split_by:
            value = result.label(key)
            if value:
                parts.append(f"{key}:{value}")
        return " ".join(parts)

    def _add_result(self, config: str, result: BenchResult) -> None:
        group = self._make_group(result)
        for value, unit in result.values:
            key = Key(config, group, result.name, unit)
            metrics = self.metrics.get(key)
            if metrics is None:
                metrics = Metrics(unit=unit)
                self.metrics[key] = metrics
                if group not in self.benchmarks:
                    self.groups.append(group)
                    self.benchmarks[group] = []
                if result.name not in self.benchmarks[group]:
                    self.benchmarks[group].append(result.name)
                if unit not in self.units:
                    self.units.append(unit)
            metrics.values.append(value)

    def tables(self) -> list[Table]:
        """Build one comparison table per unit."""
        delta_test = self.delta_test or u_test
        alpha = self.alpha or DEFAULT_ALPHA

        for metrics in self.metrics.values():
            metrics.compute_stats()

        tables: list[Table] = []
        for unit in self.units:
            table = Table(
                metric=metric_of(unit),
                unit=unit,
                configs=list(self.configs),
                groups=list(self.groups),
                old_new_delta=len(self.configs) == 2,
            )
            for group in self.groups:
                for benchmark in self.benchmarks[group]:
                    row = self._build_row(table, group, benchmark, delta_test, alpha)
                    if row is not None:
                        table.rows.append(row)

            if not table.rows:
                continue
            if self.order is not None:
                table.rows.sort(key=self.order, reverse=self.reverse_order)
            if self.add_geomean:
                self._add_geomean_row(table)
            tables.append(table)
        return tables

    def _build_row(
        self,
        table: Table,
        group: str,
        benchmark: str,
        delta_test: DeltaTest,
        alpha: float,
    ) -> Row | None:
        row = Row(benchmark=benchmark, group=group if len(self.groups) > 1 else "")
        for config in self.configs:
            metrics = self.metrics.get(Key(config, group, benchmark, table.unit))
            if metrics is None:
                row.metrics.append(Metrics())
                continue
            row.metrics.append(metrics)
            if row.scaler is None:
                row.scaler = new_scaler(metrics.mean, metrics.unit)

        if not table.old_new_delta:
            return row

        old = self.metrics.get(Key(self.configs[0], group, benchmark, table.unit))
        new = self.metrics.get(Key(self.configs[1], group, benchmark, table.unit))
        # Benchmarks present on only one side are not comparable
        if old is None or new is None:
            return None

        row.delta = "~"
        try:
            pval = delta_test(old, new)
        except DeltaTestError as exc:
            row.note = exc.note or f"({exc})"
            return row

        if 0 <= pval < alpha:
            if new.mean == old.mean:
                row.delta = "0.00%"
            else:
                pct = _pct_change(old.mean, new.mean)
                row.pct_delta = pct
                row.delta = _format_pct(pct)
                smaller_is_better = table.metric != "speed"
                row.change = 1 if (pct < 0) == smaller_is_better else -1
        if pval != -1:
            row.note = f"(p={pval:0.3f} n={len(old.rvalues)}+{len(new.rvalues)})"
        return row

    def _add_geomean_row(self, table: Table) -> None:
        row = Row(benchmark=GEOMEAN_ROW)
        geomeans: list[float] = []
        max_count = 0
        delta = table.old_new_delta
        for config in self.configs:
            # Zero means would make the geomean zero or undefined; skip them
            means = [
                metrics.mean
                for group in self.groups
                for benchmark in self.benchmarks[group]
                if (metrics := self.metrics.get(Key(config, group, benchmark, table.unit)))
                is not None
                and metrics.mean != 0
            ]
            max_count = max(max_count, len(means))
            if not means:
                row.metrics.append(Metrics())
                delta = False
                continue
            geomean = float(stats.gmean(means))
            geomeans.append(geomean)
            if row.scaler is None:
                row.scaler = new_scaler(geomean, table.unit)
            row.metrics.append(Metrics(unit=table.unit, mean=geomean))

        # A single contributing benchmark makes the geomean redundant
        if max_count <= 1:
            return
        if delta:
            pct = _pct_change(geomeans[0], geomeans[1])
            row.pct_delta = pct
            row.delta = _format_pct(pct)
        table.rows.append(row)
