# aggregation.py
"""Reduces raw indicator observations to one mean value per country."""

import logging
from typing import Iterable

import pandas as pd

from config import WORLD_AGGREGATE_CODES

logger = logging.getLogger(__name__)


def filter_observations(data: pd.DataFrame, indicator: str, years: Iterable[int]) -> pd.DataFrame:
    """Keeps the rows of the active indicator whose year is one of `years`."""
    years = list(years)
    if data.empty or not years:
        return data.iloc[0:0]
    mask = data["Year"].isin(years) & (data["IndicatorName"] == indicator)
    return data[mask]


def aggregate_by_country(data: pd.DataFrame, indicator: str, years: Iterable[int]) -> pd.Series:
    """
    Mean of `Value` per `CountryCode` over the selected years for one indicator.

    Countries without observations are absent from the result rather than zero.
    World-level aggregate codes are dropped since no country geometry matches them.

    Args:
        data: Observations with CountryCode, IndicatorName, Year and Value columns.
        indicator: The IndicatorName to keep.
        years: Explicit set of years to keep.

    Returns:
        A float Series indexed by alpha-3 country code.
    """
    filtered = filter_observations(data, indicator, years)
    grouped = filtered.groupby("CountryCode")["Value"].mean().dropna()

    aggregates = [code for code in grouped.index if code in WORLD_AGGREGATE_CODES]
    if aggregates:
        grouped = grouped.drop(aggregates)

    logger.debug("Aggregated %d rows into %d countries for %r", len(filtered), len(grouped), indicator)
    return grouped.astype(float)
