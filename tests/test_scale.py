import math

import numpy as np
import pytest

from config import MISSING_COLOUR, TILE_COLOURS
from scale import (
    LinearScale,
    build_indicator_scale,
    compute_domain,
    format_si,
    format_value,
    get_bin_index,
    get_tile_colour,
)


def test_domain_is_extent_of_values():
    assert compute_domain([3.0, 10.0, 7.0]) == (3.0, 10.0)


def test_all_zero_domain_is_widened():
    """All-zero aggregates must not produce a zero-width scale."""
    assert compute_domain([0.0, 0.0]) == (0.0, 1.0)
    assert compute_domain([]) == (0.0, 1.0)


def test_scale_maps_and_inverts():
    scale = build_indicator_scale([10.0, 30.0])
    assert scale(20.0) == pytest.approx(0.5)
    assert scale.invert(0.8) == pytest.approx(26.0)
    assert math.isnan(scale(None))
    assert math.isnan(scale(np.nan))


def test_degenerate_non_zero_domain_maps_to_middle():
    scale = LinearScale(domain=(5.0, 5.0))
    assert scale(5.0) == 0.5


@pytest.mark.parametrize("scaled, expected", [
    (1.0, 0),
    (0.81, 0),
    (0.8, 1),
    (0.61, 1),
    (0.6, 2),
    (0.4, 3),
    (0.2, 4),
    (0.0, 4),
    (np.nan, None),
    (None, None),
])
def test_bin_boundaries_are_exclusive(scaled, expected):
    assert get_bin_index(scaled) == expected


def test_tile_colours():
    assert get_tile_colour(0.9) == TILE_COLOURS[0]
    assert get_tile_colour(0.8) == TILE_COLOURS[1]
    assert get_tile_colour(0.1) == TILE_COLOURS[4]
    assert get_tile_colour(float("nan")) == MISSING_COLOUR


@pytest.mark.parametrize("value, expected", [
    (0, "0"),
    (15, "15"),
    (150, "150"),
    (1234, "1.2k"),
    (1_234_567, "1.2M"),
    (2_000_000, "2M"),
    (1_500_000_000, "1.5B"),
    (0.5, "500m"),
    (-2500, "-2.5k"),
    (None, "N/A"),
])
def test_format_si(value, expected):
    assert format_si(value) == expected


@pytest.mark.parametrize("value, expected", [
    (1234567.8, "1,234,568"),
    (12.346, "12.35"),
    (-3.5, "-3.50"),
    (0.0, "0.00"),
    (np.nan, "N/A"),
    (None, "N/A"),
])
def test_format_value(value, expected):
    assert format_value(value) == expected
