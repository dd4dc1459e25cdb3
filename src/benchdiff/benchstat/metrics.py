import math
from dataclasses import dataclass, field

import numpy as np

from .scaler import Scaler


@dataclass
class Metrics:
    """Samples of one unit for one benchmark under one config."""

    unit: str = ""
    values: list[float] = field(default_factory=list)
    rvalues: list[float] = field(default_factory=list)
    min: float = 0.0
    mean: float = 0.0
    max: float = 0.0

    def compute_stats(self) -> None:
        """Drop outliers outside 1.5 IQR of the quartiles and summarize the rest."""
        if not self.values:
            self.rvalues = []
            self.min = self.mean = self.max = 0.0
            return
        # R-8 quantiles: median-unbiased regardless of distribution
        q1, q3 = np.percentile(self.values, [25, 75], method="median_unbiased")
        lo = q1 - 1.5 * (q3 - q1)
        hi = q3 + 1.5 * (q3 - q1)
        self.rvalues = [v for v in self.values if lo <= v <= hi]
        self.min = min(self.rvalues)
        self.max = max(self.rvalues)
        self.mean = math.fsum(self.rvalues) / len(self.rvalues)

    def format_mean(self, scaler: Scaler | None) -> str:
        if scaler is not None:
            return scaler(self.mean)
        return f"{self.mean:g}"

    def format_diff(self) -> str:
        """Largest deviation of min/max from the mean, as a whole percentage."""
        if self.mean == 0 or self.max == 0:
            return ""
        diff = max(1 - self.min / self.mean, self.max / self.mean - 1)
        return f"{diff * 100.0:.0f}%"

    def format(self, scaler: Scaler | None) -> str:
        if not self.unit:
            return ""
        mean = self.format_mean(scaler)
        diff = self.format_diff()
        if not diff:
            return mean + "     "
        return f"{mean} ±{diff:>3}"
