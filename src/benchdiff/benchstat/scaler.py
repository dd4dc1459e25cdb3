"""Human-readable scaling of benchmark means (``1.23ms``, ``45.6MB/s``)."""

from collections.abc import Callable

Scaler = Callable[[float], str]

_SI_STEPS: list[tuple[float, int, float, str]] = [
    (99.5e12, 0, 1e12, "T"),
    (9.95e12, 1, 1e12, "T"),
    (995e9, 2, 1e12, "T"),
    (99.5e9, 0, 1e9, "G"),
    (9.95e9, 1, 1e9, "G"),
    (995e6, 2, 1e9, "G"),
    (99.5e6, 0, 1e6, "M"),
    (9.95e6, 1, 1e6, "M"),
    (995e3, 2, 1e6, "M"),
    (99.5e3, 0, 1e3, "k"),
    (9.95e3, 1, 1e3, "k"),
    (995, 2, 1e3, "k"),
    (99.5, 0, 1, ""),
    (9.95, 1, 1, ""),
]

_TIME_STEPS: list[tuple[float, int, float, str]] = [
    (99.5, 0, 1, "s"),
    (9.95, 1, 1, "s"),
    (0.995, 2, 1, "s"),
    (0.0995, 0, 1e3, "ms"),
    (0.00995, 1, 1e3, "ms"),
    (0.000995, 2, 1e3, "ms"),
    (0.0000995, 0, 1e6, "µs"),
    (0.00000995, 1, 1e6, "µs"),
    (0.000000995, 2, 1e6, "µs"),
    (0.0000000995, 0, 1e9, "ns"),
    (0.00000000995, 1, 1e9, "ns"),
]


def _time_scaler(ns: float) -> Scaler:
    seconds = ns / 1e9
    digits, scale, suffix = 2, 1e9, "ns"
    for threshold, step_digits, step_scale, step_suffix in _TIME_STEPS:
        if seconds >= threshold:
            digits, scale, suffix = step_digits, step_scale, step_suffix
            break

    def scale_time(value: float) -> str:
        return f"{value / 1e9 * scale:.{digits}f}{suffix}"

    return scale_time


def new_scaler(value: float, unit: str) -> Scaler:
    """Pick a display scale suited to ``value`` and reuse it for a whole row."""
    if unit == "ns/op":
        return _time_scaler(value)

    prescale = 1e6 if unit == "MB/s" else 1.0
    x = value * prescale
    digits, scale, suffix = 2, 1.0, ""
    for threshold, step_digits, step_scale, step_suffix in _SI_STEPS:
        if x >= threshold:
            digits, scale, suffix = step_digits, step_scale, step_suffix
            break

    if unit == "B/op":
        suffix += "B"
    elif unit == "MB/s":
        suffix += "B/s"
    scale /= prescale

    def scale_value(v: float) -> str:
        return f"{v / scale:.{digits}f}{suffix}"

    return scale_value
