# -*- coding: utf-8 -*-
import logging

import streamlit as st

# --- Custom Modules ---
from data_loader import get_country_directory, get_geojson, get_observations, get_year_bounds
from events import EventBus, SelectionEvent
from geo_map import GeoMap
from map_view import build_svg, render_map, route_pointer
from plotting import plot_indicator_trends
from selection import Selection
from ui import (
    setup_page_config,
    display_header_and_about,
    display_sidebar,
    display_tooltip,
    display_download_button,
    display_map_download_button,
)

logging.basicConfig(level=logging.INFO, format="%(asctime)s %(name)s %(levelname)s: %(message)s")


def get_session_selection(directory) -> Selection:
    """The selection lives for the whole browser session."""
    if "selection" not in st.session_state:
        st.session_state.selection = Selection(directory)
    return st.session_state.selection


def get_session_map(data, countries, selection: Selection, directory) -> GeoMap:
    """
    The map and its render state live for the session, so a rerun without a
    selection change keeps the viewport the user panned or zoomed to.
    """
    geo_map = st.session_state.get("geo_map")
    if geo_map is None or geo_map.data is not data or geo_map.countries is not countries:
        geo_map = GeoMap(data, countries, selection, directory=directory)
        st.session_state.geo_map = geo_map
        st.session_state.pointer = None
    return geo_map


def main() -> None:
    """Main function to run the Streamlit application."""
    setup_page_config()
    display_header_and_about()

    directory = get_country_directory()
    data = get_observations()
    countries = get_geojson()
    if directory is None or countries is None:
        st.stop()

    year_bounds = get_year_bounds(data)
    if year_bounds is None:
        st.error("No indicator data could be loaded. The dashboard cannot be displayed.")
        st.stop()

    # A fresh bus per script run; the session's map is its only renderer
    event_bus = EventBus()
    selection = get_session_selection(directory)
    selection.set_event_bus(event_bus)
    geo_map = get_session_map(data, countries, selection, directory)
    geo_map.set_event_bus(event_bus)

    notices = []
    event_bus.subscribe(
        SelectionEvent.ERROR_TOO_MANY_COMPARISONS,
        lambda event, payload: notices.append("You can compare at most four areas. Remove one before adding another."),
    )
    event_bus.subscribe(
        SelectionEvent.MAP_ITEM_HOVER, lambda event, payload: st.session_state.update(hovered_area=payload)
    )
    event_bus.subscribe(
        SelectionEvent.MAP_ITEM_UNHOVER, lambda event, payload: st.session_state.update(hovered_area=None)
    )

    display_sidebar(selection, directory, year_bounds)
    for notice in notices:
        st.sidebar.warning(notice)

    if not geo_map.base_paths:
        geo_map.update_vis()

    st.header(f"{selection.indicator}")
    st.markdown(f"**Selected areas:** `{', '.join(selection.all_selected_areas)}`")

    map_col, detail_col = st.columns([3, 1])
    with map_col:
        ref = render_map(geo_map)
    if route_pointer(geo_map, ref, st.session_state.get("pointer")):
        st.session_state.pointer = ref
        # Redraw so the map shows the pointed-at border
        st.rerun()
    with detail_col:
        if geo_map.tooltip.visible:
            display_tooltip(geo_map.tooltip)
            if st.session_state.get("hovered_area"):
                st.caption(f"{st.session_state.hovered_area} is part of your selection.")
        else:
            st.info("Click a country on the map to see its details.")

    st.plotly_chart(plot_indicator_trends(data, selection, directory), use_container_width=True)

    display_download_button(data, selection, geo_map.alpha3_codes_of_selected)
    display_map_download_button(build_svg(geo_map), selection.indicator)
    st.markdown("---")
    st.markdown("Data Source: [World Bank World Development Indicators](https://databank.worldbank.org/source/world-development-indicators)")


if __name__ == "__main__":
    main()
