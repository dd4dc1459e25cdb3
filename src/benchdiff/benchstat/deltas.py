"""Significance tests deciding whether two sample sets differ."""

from collections.abc import Callable

import numpy as np
from scipy import stats

from .metrics import Metrics

# Returns a p-value, or -1 when the test does not produce one.
DeltaTest = Callable[[Metrics, Metrics], float]


class DeltaTestError(ValueError):
    """A delta test could not be applied to the samples."""

    note = ""


class SampleSizeError(DeltaTestError):
    note = "(too few samples)"


class ZeroVarianceError(DeltaTestError):
    note = "(zero variance)"


class SamplesEqualError(DeltaTestError):
    note = "(all equal)"


def u_test(old: Metrics, new: Metrics) -> float:
    """Two-sided Mann-Whitney U-test on the outlier-free samples."""
    if not old.rvalues or not new.rvalues:
        raise SampleSizeError("samples are empty")
    first = old.rvalues[0]
    if all(v == first for v in old.rvalues) and all(v == first for v in new.rvalues):
        raise SamplesEqualError("all samples are equal")
    result = stats.mannwhitneyu(old.rvalues, new.rvalues, alternative="two-sided")
    return float(result.pvalue)


def t_test(old: Metrics, new: Metrics) -> float:
    """Two-sided Welch's t-test on the outlier-free samples."""
    if len(old.rvalues) < 2 or len(new.rvalues) < 2:
        raise SampleSizeError("need at least two samples on each side")
    if np.var(old.rvalues, ddof=1) == 0 and np.var(new.rvalues, ddof=1) == 0:
        raise ZeroVarianceError("both samples have zero variance")
    result = stats.ttest_ind(old.rvalues, new.rvalues, equal_var=False)
    return float(result.pvalue)


def no_delta_test(old: Metrics, new: Metrics) -> float:
    return -1


DELTA_TESTS: dict[str, DeltaTest] = {
    "utest": u_test,
    "ttest": t_test,
    "none": no_delta_test,
}
