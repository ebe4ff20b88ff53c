import pandas as pd
import plotly.graph_objects as go

from aggregation import filter_observations
from config import COMPARISON_AREA_COLOUR, FOCUSED_AREA_COLOUR
from countries import CountryDirectory
from selection import Selection


def area_country_codes(area: str, directory: CountryDirectory) -> list[str]:
    """Alpha-3 codes behind a selected area: the country itself, or every member of a region."""
    if directory.is_region(area):
        return directory.get_country_alpha3s(directory.get_countries_of_region(area))
    return directory.get_country_alpha3s([area])


def area_trend(data: pd.DataFrame, selection: Selection, area: str, directory: CountryDirectory) -> pd.Series:
    """Yearly value of the selected indicator for one area; regions average their member countries."""
    filtered = filter_observations(data, selection.indicator, selection.selected_years)
    filtered = filtered[filtered["CountryCode"].isin(area_country_codes(area, directory))]
    return filtered.groupby("Year")["Value"].mean().dropna()


def plot_indicator_trends(data: pd.DataFrame, selection: Selection, directory: CountryDirectory) -> go.Figure:
    """Line chart of the active indicator for the focus area and every comparison area."""
    fig = go.Figure()
    for position, area in enumerate(selection.all_selected_areas):
        ts = area_trend(data, selection, area, directory)
        if ts.empty:
            continue
        is_focus = position == 0
        fig.add_trace(
            go.Scatter(
                x=ts.index,
                y=ts,
                mode="lines+markers",
                name=area,
                line=dict(
                    color=FOCUSED_AREA_COLOUR if is_focus else None,
                    width=3.5 if is_focus else 2,
                ),
            )
        )

    if not fig.data:
        fig.add_annotation(text="No data for the current selection", showarrow=False,
                           xref="paper", yref="paper", x=0.5, y=0.5)

    fig.update_layout(
        title=f"{selection.indicator} over time",
        xaxis_title="Year",
        yaxis_title=selection.indicator,
        legend_title="Areas",
        template="plotly_white",
        colorway=[COMPARISON_AREA_COLOUR, "#1b9e77", "#e7298a", "#66a61e"],
        font=dict(size=14),
        height=450,
    )
    return fig
