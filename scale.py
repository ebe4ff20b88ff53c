# scale.py
"""Linear indicator scale, colour binning and number formatting for the map."""

import math
from typing import Iterable, Optional, Tuple

import numpy as np
import pandas as pd

from config import BIN_THRESHOLDS, MISSING_COLOUR, TILE_COLOURS

_SI_PREFIXES = ["y", "z", "a", "f", "p", "n", "µ", "m", "", "k", "M", "G", "T", "P", "E", "Z", "Y"]


def _is_missing(value) -> bool:
    return value is None or (isinstance(value, (float, np.floating)) and math.isnan(value))


class LinearScale:
    """Maps a continuous domain linearly onto a range, [0, 1] by default."""

    def __init__(self, domain: Tuple[float, float] = (0.0, 1.0), range_: Tuple[float, float] = (0.0, 1.0)):
        self.domain = (float(domain[0]), float(domain[1]))
        self.range = (float(range_[0]), float(range_[1]))

    @staticmethod
    def _interpolate(value: float, source: Tuple[float, float], target: Tuple[float, float]) -> float:
        width = source[1] - source[0]
        # A zero-width source maps everything to the middle of the target
        t = (value - source[0]) / width if width else 0.5
        return target[0] + t * (target[1] - target[0])

    def __call__(self, value) -> float:
        if _is_missing(value):
            return float("nan")
        return self._interpolate(float(value), self.domain, self.range)

    def invert(self, value) -> float:
        if _is_missing(value):
            return float("nan")
        return self._interpolate(float(value), self.range, self.domain)


def compute_domain(values: Iterable[float]) -> Tuple[float, float]:
    """
    Extent of the aggregated values. An all-zero (or empty) set is widened to
    [0, 1] so the scale never has zero width at zero.
    """
    series = pd.Series(list(values), dtype=float).dropna()
    if series.empty:
        return (0.0, 1.0)
    low, high = float(series.min()), float(series.max())
    if low == high == 0:
        high = 1.0
    return (low, high)


def build_indicator_scale(values: Iterable[float]) -> LinearScale:
    return LinearScale(domain=compute_domain(values))


def get_bin_index(scaled: Optional[float]) -> Optional[int]:
    """
    Bin of a scaled value: 0 for > 0.8 down to 4 for <= 0.2, None when missing.
    Thresholds are exclusive, so exactly 0.8 lands in the > 0.6 bin.
    """
    if _is_missing(scaled):
        return None
    for index, threshold in enumerate(BIN_THRESHOLDS[:-1]):
        if scaled > threshold:
            return index
    return len(BIN_THRESHOLDS) - 1


def get_tile_colour(scaled: Optional[float]) -> str:
    index = get_bin_index(scaled)
    return MISSING_COLOUR if index is None else TILE_COLOURS[index]


def format_si(value: Optional[float], precision: int = 2) -> str:
    """
    Formats a number with `precision` significant digits and an SI magnitude
    suffix, trailing zeros trimmed. Giga is written 'B' for billion.
    """
    if _is_missing(value):
        return "N/A"
    if value == 0:
        return "0"

    sign = "-" if value < 0 else ""
    rounded = float(f"{abs(value):.{precision - 1}e}")
    exponent = int(math.floor(math.log10(rounded)))
    prefix_exponent = max(-8, min(8, exponent // 3))
    scaled = rounded / 10 ** (prefix_exponent * 3)
    decimals = max(0, precision - 1 - (exponent - prefix_exponent * 3))

    text = f"{scaled:.{decimals}f}"
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return f"{sign}{text}{_SI_PREFIXES[prefix_exponent + 8]}".replace("G", "B")


def format_value(value: Optional[float]) -> str:
    """Tooltip formatting: integers above 100, two decimals otherwise, comma thousands."""
    if _is_missing(value):
        return "N/A"
    if value > 100:
        return f"{value:,.0f}"
    if value >= 0:
        return f"{value:,.2f}"
    return f"{value:.2f}"
