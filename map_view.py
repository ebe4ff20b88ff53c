import html

import folium
from folium.features import GeoJson, GeoJsonTooltip
from streamlit_folium import st_folium
import pandas as pd
from geopandas import GeoDataFrame
from typing import Optional, Dict, Any, List

from config import MAP_HEIGHT, MIN_ZOOM
from geo_map import FeatureRef, GeoMap, Legend, RenderedPath, Viewport
from scale import format_value

# --- Constants ---
TILES = "cartodbpositron"
LEGEND_BOX_LENGTH = 12
TOOLTIP_STYLE = """
    background-color: #F0EFEF;
    border: 2px solid black;
    border-radius: 3px;
    box-shadow: 3px;
"""

# --- Helper Functions ---

def paths_to_geodataframe(paths: List[RenderedPath], geo_map: GeoMap) -> GeoDataFrame:
    """Collects rendered paths with their styling into a GeoDataFrame for Folium."""
    years = geo_map.format_years()
    records = [
        {
            "country_id": path.ref.country_id,
            "name": path.name,
            "years": years,
            "value": format_value(geo_map.get_value_of_country(path.ref.country_id)),
            "fill": path.fill,
            "fill_opacity": path.fill_opacity if path.fill_opacity is not None else 0.0,
            "stroke": path.stroke,
            "stroke_width": path.stroke_width,
        }
        for path in paths
    ]
    geometries = [path.geometry for path in paths]
    gdf = GeoDataFrame(records, geometry=geometries, crs="EPSG:4326")
    if not records:
        for column in ["country_id", "name", "years", "value", "fill", "fill_opacity", "stroke", "stroke_width"]:
            gdf[column] = []
    gdf["country_id"] = pd.Series([path.ref.country_id for path in paths], index=gdf.index, dtype=object)
    return gdf


def style_function(feature: Dict[str, Any]) -> Dict[str, Any]:
    """
    Applies the styling computed by the map to a GeoJSON feature.
    A 'none' fill is drawn fully transparent.
    """
    props = feature["properties"]
    is_unfilled = props.get("fill") == "none"
    return {
        "fillColor": "#000000" if is_unfilled else props.get("fill"),
        "fillOpacity": 0.0 if is_unfilled else props.get("fill_opacity"),
        "color": props.get("stroke"),
        "weight": props.get("stroke_width"),
    }


def highlight_function(feature: Dict[str, Any]) -> Dict[str, Any]:
    return {"color": "black"}


def build_legend_html(legend: Legend) -> str:
    """Legend overlay: indicator title and one colour swatch with label per bin."""
    rows = "".join(
        f'<div style="display:flex;align-items:center;margin:2px 0;">'
        f'<span style="display:inline-block;width:{LEGEND_BOX_LENGTH}px;height:{LEGEND_BOX_LENGTH}px;'
        f'background:{entry.colour};opacity:0.7;margin-right:5px;"></span>'
        f'<span style="font-size:{LEGEND_BOX_LENGTH - 1}px;">{entry.label}</span></div>'
        for entry in legend.entries
    )
    return (
        '<div class="info-legend-container" style="position:fixed;bottom:30px;left:20px;z-index:9999;'
        'background-color:rgba(255,255,255,0.5);padding:8px 10px;border-radius:6px;">'
        f'<div class="title" style="font-weight:bold;font-size:12px;max-width:180px;">{legend.title}</div>'
        f'{rows}</div>'
    )

# --- Main Map Creation Function ---

def create_interactive_map(geo_map: GeoMap) -> folium.Map:
    """
    Builds a Folium map from the current render state of `geo_map`, centred
    and zoomed as its viewport.

    All countries are drawn first with white borders, then the selected
    countries are drawn again on top with a transparent fill and emphasized
    borders, so shared borders between selected countries stay visible.
    """
    viewport = geo_map.viewport
    m = folium.Map(
        location=list(viewport.center),
        zoom_start=viewport.zoom,
        min_zoom=MIN_ZOOM,
        tiles=TILES,
    )

    tooltip_fields = ["name", "years", "value"]
    tooltip_aliases = ["Country:", "Years:", f"Average {geo_map.selected.indicator}:"]

    base_gdf = paths_to_geodataframe(geo_map.base_paths, geo_map)
    if not base_gdf.empty:
        GeoJson(
            base_gdf,
            style_function=style_function,
            highlight_function=highlight_function,
            tooltip=GeoJsonTooltip(
                fields=tooltip_fields, aliases=tooltip_aliases, localize=True, sticky=True, style=TOOLTIP_STYLE
            ),
            name="countries",
        ).add_to(m)

    selected_gdf = paths_to_geodataframe(geo_map.selected_paths, geo_map)
    if not selected_gdf.empty:
        GeoJson(
            selected_gdf,
            style_function=style_function,
            highlight_function=highlight_function,
            tooltip=GeoJsonTooltip(
                fields=tooltip_fields, aliases=tooltip_aliases, localize=True, sticky=True, style=TOOLTIP_STYLE
            ),
            name="selected countries",
        ).add_to(m)

    m.get_root().html.add_child(folium.Element(build_legend_html(geo_map.legend)))
    return m


def feature_ref_from_output(map_output: Optional[Dict[str, Any]]) -> Optional[FeatureRef]:
    """Reads the structured country id of the last feature the user interacted with."""
    if not map_output or not map_output.get("last_active_drawing"):
        return None
    props = map_output["last_active_drawing"].get("properties") or {}
    country_id = props.get("country_id")
    if country_id is None:
        return FeatureRef(None)
    try:
        return FeatureRef(int(country_id))
    except (TypeError, ValueError):
        return FeatureRef(None)


def viewport_from_output(map_output: Optional[Dict[str, Any]], current: Viewport) -> Optional[Viewport]:
    """The view reported by the browser after a pan or zoom, or None when it did not move."""
    if not map_output or not map_output.get("center") or map_output.get("zoom") is None:
        return None
    center = (map_output["center"]["lat"], map_output["center"]["lng"])
    zoom = map_output["zoom"]
    if center == current.center and zoom == current.zoom:
        return None
    return Viewport(center=center, zoom=zoom, width=current.width, height=current.height)


def render_map(geo_map: GeoMap, key: str = "world_map") -> Optional[FeatureRef]:
    """
    Displays the map at the render viewport and captures user interaction.
    A pan or zoom re-projects the map's paths without recomputing its data.

    Returns:
        The reference of the last country the user interacted with, or None.
    """
    m = create_interactive_map(geo_map)
    map_output = st_folium(
        m, width="100%", height=MAP_HEIGHT, key=key,
        center=list(geo_map.viewport.center), zoom=geo_map.viewport.zoom,
        returned_objects=["last_active_drawing", "zoom", "center"],
    )

    viewport = viewport_from_output(map_output, geo_map.viewport)
    if viewport is not None:
        geo_map.on_viewport_change(viewport)

    return feature_ref_from_output(map_output)


def route_pointer(geo_map: GeoMap, ref: Optional[FeatureRef], previous: Optional[FeatureRef]) -> bool:
    """
    Moves the map's pointer state from `previous` to `ref`: the previous
    country is left before the new one is entered.

    Returns:
        True when the pointed-at country changed.
    """
    if ref == previous:
        return False
    if previous is not None:
        geo_map.handle_mouse_leave(previous)
    if ref is not None:
        geo_map.handle_mouse_enter(ref)
    return True


def build_svg(geo_map: GeoMap) -> str:
    """The current map view as a standalone SVG, base layer first, selected layer on top."""
    viewport = geo_map.viewport
    paths = "".join(
        f'<path d="{path.d}" fill="{path.fill}" fill-opacity="{path.fill_opacity if path.fill_opacity is not None else 1}" '
        f'stroke="{path.stroke}" stroke-width="{path.stroke_width}" stroke-linejoin="round">'
        f'<title>{html.escape(path.name)}</title></path>'
        for path in [*geo_map.base_paths, *geo_map.selected_paths]
        if path.d
    )
    return (
        f'<svg xmlns="http://www.w3.org/2000/svg" width="{viewport.width}" height="{viewport.height}" '
        f'viewBox="0 0 {viewport.width} {viewport.height}">'
        f'<title>{html.escape(geo_map.legend.title)}</title>{paths}</svg>'
    )
