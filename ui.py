# -*- coding: utf-8 -*-
"""
This module contains the UI components for the Streamlit application.
The widgets only call into the Selection's mutators; they hold no state of their own.
"""
import streamlit as st
import pandas as pd

from config import INDICATORS, MAX_COMPARISON_AREAS
from countries import CountryDirectory
from geo_map import Tooltip
from selection import Selection


def setup_page_config():
    """Sets the Streamlit page configuration."""
    st.set_page_config(
        page_title="World Indicator Explorer",
        page_icon="🌍",
        layout="wide",
    )


def display_header_and_about():
    """Displays the main title and the 'About' expander."""
    st.title("World Indicator Explorer")
    st.markdown(
        "Pick a focus country or region, up to four areas to compare it with, an indicator and a year range. "
        "The map shades every country by its average value over the selected years."
    )
    with st.expander("About the map"):
        st.markdown(
            """
            - **Colours:** values are scaled between the lowest and highest country average and split into five bins. Gray means no data.
            - **Borders:** the focus country is outlined in orange, comparison countries in purple.
            - **Regions:** a region in the selection is compared in the trend chart as the average of its member countries.
            """
        )


def _display_focus_controls(selection: Selection, directory: CountryDirectory):
    regions = directory.get_regions()
    current_region = selection.area["region"] if selection.area["region"] in regions else regions[0]
    region = st.selectbox(
        "1. Focus Region:",
        options=regions,
        index=regions.index(current_region),
        key="region_selectbox",
    )

    countries = [""] + directory.get_countries_of_region(region)
    current_country = selection.area["country"] if selection.area["country"] in countries else ""
    country = st.selectbox(
        "2. Focus Country (optional):",
        options=countries,
        index=countries.index(current_country),
        format_func=lambda x: x or "Whole region",
        key=f"country_selectbox_{region}",
    )

    if region != selection.area["region"] or country != selection.area["country"]:
        selection.set_area({"region": region, "country": country})
        if not country:
            selection.clear_country()


def _display_indicator_controls(selection: Selection, year_bounds: tuple[int, int]):
    indicators = list(INDICATORS.values())
    if selection.indicator not in indicators:
        indicators.append(selection.indicator)
    indicator = st.selectbox(
        "3. Indicator:",
        options=indicators,
        index=indicators.index(selection.indicator),
        key="indicator_selectbox",
    )
    if indicator != selection.indicator:
        selection.set_indicator(indicator)

    low, high = year_bounds
    current = (selection.time_interval.get("min", low), selection.time_interval.get("max", high))
    min_year, max_year = st.slider(
        "4. Year Range:",
        min_value=low,
        max_value=high,
        value=current,
        key="year_slider",
    )
    if (min_year, max_year) != current or not selection.time_interval:
        selection.set_time_interval(min_year, max_year)


def _display_comparison_controls(selection: Selection, directory: CountryDirectory):
    st.subheader(f"Comparison Areas (up to {MAX_COMPARISON_AREAS})")

    taken = set(selection.all_selected_areas)
    options = [area for area in directory.get_regions() + directory.get_all_country_names() if area not in taken]
    candidate = st.selectbox(
        "Add a country or region:",
        options=[""] + options,
        format_func=lambda x: x or "Choose an area",
        key="comparison_selectbox",
    )
    if st.button("Add to comparison", key="add_comparison_button", disabled=not candidate):
        selection.add_comparison_area(candidate)

    for area in list(selection.comparison_areas):
        name_col, button_col = st.columns([3, 1])
        name_col.markdown(f"- {area}")
        if button_col.button("Remove", key=f"remove_{area}"):
            selection.remove_comparison_area(area)
            st.rerun()


def display_sidebar(selection: Selection, directory: CountryDirectory, year_bounds: tuple[int, int]):
    """
    Renders the sidebar controls and applies the user's choices to the selection.

    Args:
        selection: The session's selection.
        directory: Country directory providing regions and country names.
        year_bounds: Smallest and largest year available in the data.
    """
    with st.sidebar:
        st.header("Dashboard Controls")
        _display_focus_controls(selection, directory)
        _display_indicator_controls(selection, year_bounds)
        _display_comparison_controls(selection, directory)


def display_tooltip(tooltip: Tooltip):
    """Shows the details of the country the user last pointed at on the map."""
    if tooltip.visible:
        st.markdown(tooltip.to_html(), unsafe_allow_html=True)


def display_download_button(data: pd.DataFrame, selection: Selection, country_codes: list[str]):
    """
    Renders the download button in the sidebar.

    Args:
        data (pd.DataFrame): All observations.
        selection (Selection): The current selection.
        country_codes (list): Alpha-3 codes of the selected countries.
    """
    subset = data[
        data["CountryCode"].isin(country_codes)
        & (data["IndicatorName"] == selection.indicator)
        & data["Year"].isin(selection.selected_years)
    ]
    if not subset.empty:
        st.sidebar.download_button(
            label="Download Selected Data (CSV)",
            data=subset.to_csv(index=False).encode("utf-8"),
            file_name=f"indicator_data_{'_'.join(country_codes)}.csv",
            mime="text/csv",
            key="download_button",
        )


def display_map_download_button(svg: str, indicator: str):
    """Offers the map view currently on screen as an SVG file."""
    st.sidebar.download_button(
        label="Download Map View (SVG)",
        data=svg.encode("utf-8"),
        file_name=f"map_{'_'.join(indicator.split())}.svg",
        mime="image/svg+xml",
        key="map_download_button",
    )
