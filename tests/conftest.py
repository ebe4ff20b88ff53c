from pathlib import Path

import geopandas as gpd
import pandas as pd
import pytest
from shapely.geometry import box

from countries import CountryDirectory
from events import EventBus
from selection import Selection

REGIONS_CSV = Path(__file__).resolve().parent.parent / "data" / "country_regions.csv"


@pytest.fixture
def directory():
    return CountryDirectory.from_csv(str(REGIONS_CSV))


@pytest.fixture
def event_bus():
    return EventBus()


@pytest.fixture
def selection(directory, event_bus):
    return Selection(directory, event_bus=event_bus)


@pytest.fixture
def observations():
    """Two indicators over three years for a handful of countries plus the world aggregate."""
    rows = [
        ("USA", "X", 2010, 10.0), ("USA", "X", 2011, 20.0), ("USA", "X", 2012, 90.0),
        ("CAN", "X", 2010, 30.0), ("CAN", "X", 2011, 50.0),
        ("MEX", "X", 2010, 0.0), ("MEX", "X", 2011, 0.0),
        ("FRA", "X", 2012, 5.0),
        ("WLD", "X", 2010, 1000.0), ("WLD", "X", 2011, 1000.0),
        ("USA", "Y", 2010, 1.0), ("CAN", "Y", 2010, 2.0),
    ]
    return pd.DataFrame(rows, columns=["CountryCode", "IndicatorName", "Year", "Value"])


@pytest.fixture
def countries_gdf():
    """Rectangular stand-ins for country shapes. USA and Canada share the 49th parallel."""
    records = [
        {"id": 840, "name": "United States of America", "geometry": box(-125, 25, -66, 49)},
        {"id": 124, "name": "Canada", "geometry": box(-141, 49, -52, 70)},
        {"id": 484, "name": "Mexico", "geometry": box(-117, 14, -86, 32)},
        {"id": 250, "name": "France", "geometry": box(-5, 42, 8, 51)},
        {"id": None, "name": "N. Cyprus", "geometry": box(32, 35, 34, 36)},
        {"id": 10, "name": "Antarctica", "geometry": None},
    ]
    gdf = gpd.GeoDataFrame(records, geometry="geometry", crs="EPSG:4326")
    gdf["id"] = pd.array([r["id"] for r in records], dtype="Int64")
    return gdf
