# config.py

"""
Central configuration file for the World Indicator dashboard.
This file stores constants and settings to make the application more maintainable.
"""

from typing import Dict, Final, FrozenSet, List, Tuple

# File paths for local data assets
DATA_PATH: Final[str] = "data/world_indicators.csv"
GEOJSON_PATH: Final[str] = "data/countries.geojson"
REGIONS_PATH: Final[str] = "data/country_regions.csv"

# Country boundaries with ISO ids (numeric or alpha-3) and a "name" property
GEOJSON_URL: Final[str] = (
    "https://raw.githubusercontent.com/johan/world.geo.json/master/countries.geo.json"
)

# Selection defaults
DEFAULT_REGION: Final[str] = "World"
DEFAULT_INDICATOR: Final[str] = "Population, total"
MAX_COMPARISON_AREAS: Final[int] = 4

# Indicator catalogue, keyed by the IndicatorName used in the dataset
INDICATORS: Final[Dict[str, str]] = {
    "POPULATION_TOTAL": "Population, total",
    "GDP_PER_CAPITA": "GDP per capita (current US$)",
    "LIFE_EXPECTANCY": "Life expectancy at birth, total (years)",
    "CO2_PER_CAPITA": "CO2 emissions (metric tons per capita)",
    "URBAN_POPULATION": "Urban population (% of total population)",
}

# Aggregate codes that have no matching country geometry
WORLD_AGGREGATE_CODES: Final[FrozenSet[str]] = frozenset({"WLD"})

# --- Map defaults ---
DEFAULT_COORDS: Final[Tuple[float, float]] = (36.1408, 5.3536)
DEFAULT_ZOOM: Final[int] = 2
RESET_ZOOM: Final[int] = 1
MIN_ZOOM: Final[int] = 1
MAX_ZOOM: Final[int] = 18
MAP_WIDTH: Final[int] = 960
MAP_HEIGHT: Final[int] = 500
DEFAULT_BORDER_COLOUR: Final[str] = "white"
DEFAULT_STROKE_WIDTH: Final[float] = 1.0
BASE_FILL_OPACITY: Final[float] = 0.5

# --- Palette ---
# Bin 1 (darkest, > 0.8) through bin 5 (<= 0.2)
TILE_COLOURS: Final[List[str]] = ["#08519c", "#3182bd", "#6baed6", "#bdd7e7", "#eff3ff"]
BIN_THRESHOLDS: Final[List[float]] = [0.8, 0.6, 0.4, 0.2, 0.0]
MISSING_COLOUR: Final[str] = "#808080"
FOCUSED_AREA_COLOUR: Final[str] = "#d95f02"
COMPARISON_AREA_COLOUR: Final[str] = "#7570b3"
HOVER_BORDER_COLOUR: Final[str] = "black"
