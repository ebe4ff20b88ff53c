import plotly.graph_objects as go

from config import FOCUSED_AREA_COLOUR
from plotting import area_country_codes, area_trend, plot_indicator_trends


def test_area_country_codes(directory):
    assert area_country_codes("Canada", directory) == ["CAN"]
    assert area_country_codes("North America", directory) == ["CAN", "USA"]


def test_region_trend_averages_members(observations, selection, directory):
    selection.set_items({"region": "North America"}, "X", 2010, 2011)
    ts = area_trend(observations, selection, "North America", directory)
    assert ts.to_dict() == {2010: 20.0, 2011: 35.0}


def test_plot_indicator_trends_one_line_per_area(observations, selection, directory):
    selection.set_items({"region": "North America", "country": "United States"}, "X", 2010, 2012)
    selection.add_comparison_area("Canada")
    selection.add_comparison_area("Japan")

    fig = plot_indicator_trends(observations, selection, directory)

    assert isinstance(fig, go.Figure)
    assert [trace.name for trace in fig.data] == ["United States", "Canada"]
    assert fig.data[0].line.color == FOCUSED_AREA_COLOUR
    assert fig.data[0].line.width > fig.data[1].line.width
    assert list(fig.data[0].y) == [10.0, 20.0, 90.0]


def test_plot_indicator_trends_without_data(observations, selection, directory):
    fig = plot_indicator_trends(observations, selection, directory)
    assert len(fig.data) == 0
    assert fig.layout.annotations[0].text == "No data for the current selection"
