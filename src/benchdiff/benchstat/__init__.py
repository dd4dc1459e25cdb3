"""Statistical comparison of Go benchmark sample files."""

from .collection import (
    DEFAULT_ALPHA,
    GEOMEAN_ROW,
    ORDERS,
    Collection,
    Order,
    Row,
    Table,
    by_delta,
    by_name,
    metric_of,
)
from .deltas import (
    DELTA_TESTS,
    DeltaTest,
    DeltaTestError,
    SampleSizeError,
    SamplesEqualError,
    ZeroVarianceError,
    no_delta_test,
    t_test,
    u_test,
)
from .metrics import Metrics
from .parse import BenchResult, parse_bench_output
from .scaler import Scaler, new_scaler

__all__ = [
    "DEFAULT_ALPHA",
    "DELTA_TESTS",
    "GEOMEAN_ROW",
    "ORDERS",
    "BenchResult",
    "Collection",
    "DeltaTest",
    "DeltaTestError",
    "Metrics",
    "Order",
    "Row",
    "SampleSizeError",
    "SamplesEqualError",
    "Scaler",
    "Table",
    "ZeroVarianceError",
    "by_delta",
    "by_name",
    "metric_of",
    "new_scaler",
    "no_delta_test",
    "parse_bench_output",
    "t_test",
    "u_test",
]
