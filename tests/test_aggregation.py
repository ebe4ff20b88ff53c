import numpy as np
import pandas as pd

from aggregation import aggregate_by_country, filter_observations


def test_mean_over_selected_years():
    """Two yearly observations for one country average to their mean."""
    data = pd.DataFrame([
        {"CountryCode": "USA", "Year": 2010, "Value": 10, "IndicatorName": "X"},
        {"CountryCode": "USA", "Year": 2011, "Value": 20, "IndicatorName": "X"},
    ])
    result = aggregate_by_country(data, "X", {2010, 2011})
    assert result["USA"] == 15


def test_filters_by_indicator_and_years(observations):
    result = aggregate_by_country(observations, "X", [2010, 2011])
    assert result.to_dict() == {"CAN": 40.0, "MEX": 0.0, "USA": 15.0}


def test_missing_country_is_absent_not_zero(observations):
    result = aggregate_by_country(observations, "X", [2010, 2011])
    assert "FRA" not in result.index
    assert result["MEX"] == 0.0


def test_world_aggregate_is_dropped(observations):
    result = aggregate_by_country(observations, "X", [2010])
    assert "WLD" not in result.index


def test_nan_values_do_not_count(observations):
    data = pd.concat([
        observations,
        pd.DataFrame([{"CountryCode": "FRA", "IndicatorName": "X", "Year": 2011, "Value": np.nan}]),
    ])
    result = aggregate_by_country(data, "X", [2011, 2012])
    assert result["FRA"] == 5.0


def test_no_years_gives_empty_result(observations):
    assert aggregate_by_country(observations, "X", []).empty
    assert filter_observations(observations, "X", []).empty


def test_unknown_indicator_gives_empty_result(observations):
    assert aggregate_by_country(observations, "Z", [2010, 2011]).empty
