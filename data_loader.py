import json
import os
import time

import geopandas as gpd
import pandas as pd
import pycountry
import requests
import streamlit as st

from config import DATA_PATH, GEOJSON_PATH, GEOJSON_URL, REGIONS_PATH
from countries import CountryDirectory
from schemas import observation_schema

OBSERVATION_COLUMNS = ["CountryCode", "IndicatorName", "Year", "Value"]


@st.cache_data(show_spinner=False)
def get_observations(path: str = DATA_PATH) -> pd.DataFrame:
    """
    Loads the long-format indicator observations.
    Cached for the session as the dataset is static.
    """
    if not os.path.exists(path):
        st.error(f"Fatal Error: The indicator data file was not found at {path}")
        return pd.DataFrame(columns=OBSERVATION_COLUMNS)

    df = pd.read_csv(path)
    missing = [col for col in OBSERVATION_COLUMNS if col not in df.columns]
    if missing:
        st.error(f"The indicator data file is missing columns: {', '.join(missing)}")
        return pd.DataFrame(columns=OBSERVATION_COLUMNS)

    df = df[OBSERVATION_COLUMNS].copy()
    # Coerce 'Value' to numeric, turning any non-numeric placeholders (e.g., '..') into NaN
    df["Value"] = pd.to_numeric(df["Value"], errors="coerce")
    df["CountryCode"] = df["CountryCode"].astype(str).str.strip().str.upper()
    df.dropna(subset=["Year"], inplace=True)

    try:
        return observation_schema.validate(df)
    except Exception as e:
        st.error(f"Indicator data validation failed: {e}")
        return pd.DataFrame(columns=OBSERVATION_COLUMNS)


def _download_geojson(url: str, path: str) -> bool:
    """Downloads the country boundaries with retries. Returns True when the file was saved."""
    for attempt in range(3):
        try:
            response = requests.get(url, timeout=60)
            response.raise_for_status()
            os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
            with open(path, "w", encoding="utf-8") as f:
                f.write(response.text)
            return True
        except requests.RequestException as e:
            print(f"  - ATTEMPT {attempt + 1} FAILED for {url}: {e}")
            if attempt < 2:
                time.sleep(5)
    return False


def _numeric_id(raw_id) -> int | None:
    """ISO numeric code of a feature id given either as a number or as an alpha-3 code."""
    if raw_id is None:
        return None
    try:
        return int(raw_id)
    except (TypeError, ValueError):
        pass
    country = pycountry.countries.get(alpha_3=str(raw_id).upper())
    return int(country.numeric) if country is not None else None


def features_to_geodataframe(feature_collection: dict) -> gpd.GeoDataFrame:
    """
    Builds the country GeoDataFrame from a GeoJSON feature collection, keeping
    each feature's numeric 'id' (None when it is absent or not a number).
    """
    features = feature_collection.get("features", [])
    if not features:
        return gpd.GeoDataFrame({"id": [], "name": []}, geometry=[], crs="EPSG:4326")

    gdf = gpd.GeoDataFrame.from_features(features, crs="EPSG:4326")
    ids = [_numeric_id(feature.get("id", feature.get("properties", {}).get("id"))) for feature in features]
    gdf["id"] = pd.array(ids, dtype="Int64")
    if "name" not in gdf.columns:
        gdf["name"] = None
    return gdf[["id", "name", "geometry"]]


@st.cache_data(show_spinner=False)
def get_geojson(path: str = GEOJSON_PATH, url: str = GEOJSON_URL) -> gpd.GeoDataFrame | None:
    """
    Loads the country boundaries, downloading them once when no local copy exists.
    Cached indefinitely as it's a static file.
    """
    if not os.path.exists(path):
        with st.spinner("Downloading country boundaries..."):
            if not _download_geojson(url, path):
                st.error(f"Fatal Error: The GeoJSON file was not found at {path} and could not be downloaded.")
                return None

    try:
        with open(path, encoding="utf-8") as f:
            return features_to_geodataframe(json.load(f))
    except (OSError, json.JSONDecodeError) as e:
        st.error(f"Could not read the GeoJSON file at {path}: {e}")
        return None


@st.cache_resource(show_spinner=False)
def get_country_directory(path: str = REGIONS_PATH) -> CountryDirectory | None:
    if not os.path.exists(path):
        st.error(f"Fatal Error: The region table was not found at {path}")
        return None
    return CountryDirectory.from_csv(path)


def get_year_bounds(data: pd.DataFrame) -> tuple[int, int] | None:
    """Smallest and largest year present in the observations."""
    if data.empty:
        return None
    return int(data["Year"].min()), int(data["Year"].max())
