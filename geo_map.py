# geo_map.py
"""
Choropleth world map: aggregates the active indicator per country, colours the
country shapes, emphasizes the selected areas and keeps a legend and a tooltip
in step with the selection.

The map renders into plain render state (projected SVG path data, legend
entries, tooltip) which `map_view` turns into a Folium map.
"""

import logging
import math
from dataclasses import dataclass, field
from typing import Any, Callable, List, Optional, Tuple

import geopandas as gpd
import pandas as pd
from pyproj import Transformer
from shapely.affinity import affine_transform

from aggregation import aggregate_by_country
from config import (
    BASE_FILL_OPACITY,
    BIN_THRESHOLDS,
    COMPARISON_AREA_COLOUR,
    DEFAULT_BORDER_COLOUR,
    DEFAULT_COORDS,
    DEFAULT_STROKE_WIDTH,
    DEFAULT_ZOOM,
    FOCUSED_AREA_COLOUR,
    HOVER_BORDER_COLOUR,
    MAP_HEIGHT,
    MAP_WIDTH,
    MAX_ZOOM,
    MIN_ZOOM,
    MISSING_COLOUR,
    RESET_ZOOM,
    TILE_COLOURS,
)
from countries import CountryDirectory
from events import EventBus, SelectionEvent
from scale import LinearScale, build_indicator_scale, format_si, format_value, get_tile_colour
from selection import Selection

logger = logging.getLogger(__name__)

BASE_LAYER = "base"
SELECTED_LAYER = "selected"
MAX_LATITUDE = 85.0511287798
MERCATOR_HALF_EXTENT = 20037508.342789244
LON_LAT = "EPSG:4326"
WEB_MERCATOR = "EPSG:3857"
TO_MERCATOR = Transformer.from_crs(LON_LAT, WEB_MERCATOR, always_xy=True)
TO_LON_LAT = Transformer.from_crs(WEB_MERCATOR, LON_LAT, always_xy=True)


# --- Viewport ---

class Viewport:
    """Web Mercator view of the map: a centre, a zoom level and a pixel size."""

    TILE_SIZE = 256

    def __init__(self, center: Tuple[float, float] = DEFAULT_COORDS, zoom: float = DEFAULT_ZOOM,
                 width: int = MAP_WIDTH, height: int = MAP_HEIGHT):
        self.center = (float(center[0]), float(center[1]))
        self.zoom = zoom
        self.width = width
        self.height = height

    def set_view(self, center: Tuple[float, float], zoom: float) -> None:
        self.center = (float(center[0]), float(center[1]))
        self.zoom = max(MIN_ZOOM, min(MAX_ZOOM, zoom))

    def world_size(self) -> float:
        return self.TILE_SIZE * 2 ** self.zoom

    def affine(self) -> List[float]:
        """Coefficients for shapely's affine_transform from Web Mercator metres to view pixels."""
        scale = self.world_size() / (2 * MERCATOR_HALF_EXTENT)
        cx, cy = TO_MERCATOR.transform(self.center[1], self.center[0])
        return [scale, 0.0, 0.0, -scale, self.width / 2 - cx * scale, self.height / 2 + cy * scale]

    def to_pixels(self, projected):
        """Moves a Web Mercator geometry into view pixels, origin at the top-left corner."""
        return affine_transform(projected, self.affine())

    def project(self, lon: float, lat: float) -> Tuple[float, float]:
        """Pixel position of a lon/lat point relative to the top-left corner of the view."""
        x, y = TO_MERCATOR.transform(lon, max(-MAX_LATITUDE, min(MAX_LATITUDE, lat)))
        a, _, _, e, x_off, y_off = self.affine()
        return a * x + x_off, e * y + y_off

    def fit_bounds(self, bounds: Tuple[float, float, float, float]) -> None:
        """Centres and zooms the view on Web Mercator bounds (min_x, min_y, max_x, max_y)."""
        min_x, min_y, max_x, max_y = bounds
        span_x, span_y = max_x - min_x, max_y - min_y
        world_metres = 2 * MERCATOR_HALF_EXTENT

        if span_x <= 0 and span_y <= 0:
            zoom = MAX_ZOOM
        else:
            scales = []
            if span_x > 0:
                scales.append(self.width * world_metres / (span_x * self.TILE_SIZE))
            if span_y > 0:
                scales.append(self.height * world_metres / (span_y * self.TILE_SIZE))
            zoom = math.floor(math.log2(min(scales)))

        lon, lat = TO_LON_LAT.transform((min_x + max_x) / 2, (min_y + max_y) / 2)
        self.set_view((lat, lon), zoom)


def project_countries(countries: gpd.GeoDataFrame) -> gpd.GeoSeries:
    """Country shapes in Web Mercator, clipped to the latitudes the projection can show."""
    geometry = countries.geometry
    if geometry.crs is None:
        geometry = geometry.set_crs(LON_LAT)
    return geometry.clip_by_rect(-180.0, -MAX_LATITUDE, 180.0, MAX_LATITUDE).to_crs(WEB_MERCATOR)


# --- Render state ---

@dataclass(frozen=True)
class FeatureRef:
    """Identity of a rendered country shape; country_id is None when the feature has no usable code."""
    country_id: Optional[int]


@dataclass
class RenderedPath:
    layer: str
    ref: FeatureRef
    name: str
    d: str
    fill: str
    stroke: str
    stroke_width: float
    fill_opacity: Optional[float] = None
    geometry: Any = field(default=None, repr=False, compare=False)
    projected: Any = field(default=None, repr=False, compare=False)


@dataclass
class LegendEntry:
    colour: str
    label: str


@dataclass
class Legend:
    title: str = ""
    entries: List[LegendEntry] = field(default_factory=list)


@dataclass
class Tooltip:
    visible: bool = False
    x: float = 0.0
    y: float = 0.0
    country_name: str = ""
    years: str = ""
    indicator: str = ""
    value: str = ""

    def to_html(self) -> str:
        return (f"<strong>{self.country_name}</strong><br>"
                f"<i>{self.years}</i><br>"
                f"Average {self.indicator}:<br>"
                f"   {self.value}")


# --- Map ---

class GeoMap:
    """
    Choropleth map of the active indicator.

    Args:
        data: Observations with CountryCode, IndicatorName, Year and Value.
        countries: Country shapes with an integer 'id', a 'name' and a geometry.
        selection: The dashboard selection; read on every render cycle.
        event_bus: When given, the map re-renders on SELECTION_CHANGED and
            emits MAP_ITEM_HOVER / MAP_ITEM_UNHOVER for selected countries.
        directory: Country directory, defaults to the selection's.
        viewport: Persistent map view.
    """

    def __init__(
        self,
        data: pd.DataFrame,
        countries: gpd.GeoDataFrame,
        selection: Selection,
        event_bus: Optional[EventBus] = None,
        directory: Optional[CountryDirectory] = None,
        viewport: Optional[Viewport] = None,
    ):
        self.data = data
        self.countries = countries
        self.selected = selection
        self.directory = directory or selection.directory
        self.viewport = viewport or Viewport()
        self.projected_geometry = project_countries(countries)

        self.indicator_scale = LinearScale()
        self.grouped_data = pd.Series(dtype=float)
        self.country_codes_of_selected: List[int] = []
        self.alpha3_codes_of_selected: List[str] = []
        self.selected_countries = countries.iloc[0:0]

        self.base_paths: List[RenderedPath] = []
        self.selected_paths: List[RenderedPath] = []
        self.legend = Legend()
        self.tooltip = Tooltip()

        self.event_bus = None
        self._unsubscribe: Optional[Callable[[], None]] = None
        self.set_event_bus(event_bus)

    def set_event_bus(self, event_bus: Optional[EventBus]) -> None:
        """Listens for SELECTION_CHANGED on event_bus instead of the previous bus."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        self.event_bus = event_bus
        if event_bus is not None:
            self._unsubscribe = event_bus.subscribe(SelectionEvent.SELECTION_CHANGED, self._on_selection_changed)

    def _on_selection_changed(self, event: SelectionEvent, payload) -> None:
        self.update_vis()

    def update_vis(self) -> None:
        """Runs a full render cycle from the current selection."""
        self.update_data()
        self.update_map_bounds()
        self.update_domain()
        self.render_vis()
        logger.info("Rendered %d countries, %d selected, for %r",
                    len(self.base_paths), len(self.selected_paths), self.selected.indicator)

    def render_vis(self) -> None:
        self.render_legend()
        self.render_all_countries_with_white_border()
        # Drawn last so shared borders of selected countries are not hidden
        self.render_selected_countries()

    # --- Data ---

    def update_data(self) -> None:
        areas = self.selected.all_selected_areas
        self.country_codes_of_selected = self.directory.get_country_num_codes(areas)
        self.alpha3_codes_of_selected = self.directory.get_country_alpha3s(areas)
        self.selected_countries = self.countries[self.countries["id"].isin(self.country_codes_of_selected)]

        self.grouped_data = aggregate_by_country(
            self.data, self.selected.indicator, self.selected.selected_years
        )

    def update_map_bounds(self) -> None:
        """Fits the view to the selected countries, or resets to the world view when none has a shape."""
        shapes = self.projected_geometry.loc[self.selected_countries.index]
        shapes = shapes[shapes.notna() & ~shapes.is_empty]
        if len(shapes) > 0:
            self.viewport.fit_bounds(tuple(shapes.total_bounds))
        else:
            self.viewport.set_view(DEFAULT_COORDS, RESET_ZOOM)

    def update_domain(self) -> None:
        self.indicator_scale = build_indicator_scale(self.grouped_data.values)

    def get_value_of_country(self, country_id: Optional[int]) -> float:
        alpha_3 = self.directory.convert_to_alpha3(country_id)
        if alpha_3 is None:
            return float("nan")
        return float(self.grouped_data.get(alpha_3, float("nan")))

    # --- Styling ---

    def _focus_country_code(self) -> Optional[int]:
        return self.directory.get_country_num_code(self.selected.area["country"])

    def get_border_colour(self, country_id: Optional[int]) -> str:
        if country_id is not None and country_id == self._focus_country_code():
            return FOCUSED_AREA_COLOUR
        if country_id in self.country_codes_of_selected:
            return COMPARISON_AREA_COLOUR
        return DEFAULT_BORDER_COLOUR

    def get_fill_colour(self, country_id: Optional[int]) -> str:
        return get_tile_colour(self.indicator_scale(self.get_value_of_country(country_id)))

    def get_stroke_width(self, country_id: Optional[int]) -> float:
        if country_id in self.country_codes_of_selected:
            return DEFAULT_STROKE_WIDTH * 2
        return DEFAULT_STROKE_WIDTH

    # --- Paths ---

    def geo_path(self, projected) -> str:
        """SVG path data of a Web Mercator (multi)polygon placed in the current viewport."""
        if projected is None or projected.is_empty:
            return ""
        pixels = self.viewport.to_pixels(projected)
        parts = []
        for polygon in getattr(pixels, "geoms", [pixels]):
            if polygon.geom_type != "Polygon":
                continue
            for ring in [polygon.exterior, *polygon.interiors]:
                parts.append("M" + "L".join(f"{x:.1f},{y:.1f}" for x, y, *_ in ring.coords) + "Z")
        return "".join(parts)

    def _iter_features(self, features: gpd.GeoDataFrame):
        projected = self.projected_geometry.loc[features.index]
        for row, shape in zip(features.itertuples(index=False), projected):
            geometry = row.geometry
            if geometry is None or geometry.is_empty:
                logger.debug("Skipping feature %r without geometry", getattr(row, "name", None))
                continue
            country_id = None if pd.isna(row.id) else int(row.id)
            yield FeatureRef(country_id), getattr(row, "name", "") or "", geometry, shape

    def render_all_countries_with_white_border(self) -> None:
        self.base_paths = [
            RenderedPath(
                layer=BASE_LAYER,
                ref=ref,
                name=name,
                d=self.geo_path(shape),
                fill=self.get_fill_colour(ref.country_id),
                fill_opacity=BASE_FILL_OPACITY,
                stroke=DEFAULT_BORDER_COLOUR,
                stroke_width=DEFAULT_STROKE_WIDTH,
                geometry=geometry,
                projected=shape,
            )
            for ref, name, geometry, shape in self._iter_features(self.countries)
        ]

    def render_selected_countries(self) -> None:
        self.selected_paths = [
            RenderedPath(
                layer=SELECTED_LAYER,
                ref=ref,
                name=name,
                d=self.geo_path(shape),
                fill="none",
                stroke=self.get_border_colour(ref.country_id),
                stroke_width=self.get_stroke_width(ref.country_id),
                geometry=geometry,
                projected=shape,
            )
            for ref, name, geometry, shape in self._iter_features(self.selected_countries)
        ]

    def on_viewport_change(self, viewport: Optional[Viewport] = None) -> None:
        """Re-projects both layers after a pan or zoom; colours and data are left as they are."""
        if viewport is not None:
            self.viewport = viewport
        for path in [*self.base_paths, *self.selected_paths]:
            path.d = self.geo_path(path.projected)

    # --- Legend ---

    def render_legend(self) -> None:
        entries = [
            LegendEntry(colour=colour, label=format_si(self.indicator_scale.invert(lower_bound)))
            for colour, lower_bound in zip(TILE_COLOURS, BIN_THRESHOLDS)
        ]
        entries.append(LegendEntry(colour=MISSING_COLOUR, label="N/A"))
        self.legend = Legend(title=self.selected.indicator, entries=entries)

    # --- Interaction ---

    def _paths_of(self, country_id: int) -> List[RenderedPath]:
        layer = self.selected_paths if country_id in self.country_codes_of_selected else self.base_paths
        return [path for path in layer if path.ref.country_id == country_id]

    def set_border_colour_of_country(self, country_id: int,
                                     colour_fn: Optional[Callable[[Optional[int]], str]] = None) -> None:
        """Sets the border to the hover colour, or to colour_fn(country_id) when given."""
        colour = colour_fn(country_id) if colour_fn else HOVER_BORDER_COLOUR
        for path in self._paths_of(country_id):
            path.stroke = colour

    def emphasize_country(self, country: str) -> None:
        """Outlines a selected country in the hover colour."""
        code = self.directory.get_country_num_code(country)
        for path in self.selected_paths:
            if code is not None and path.ref.country_id == code:
                path.stroke = HOVER_BORDER_COLOUR

    def de_emphasize_country(self, country: str) -> None:
        code = self.directory.get_country_num_code(country)
        for path in self.selected_paths:
            if code is not None and path.ref.country_id == code:
                path.stroke = self.get_border_colour(code)

    def _selected_area_name(self, country_name: Optional[str]) -> Optional[str]:
        if not country_name:
            return None
        for area in self.selected.all_selected_areas:
            if self.directory.is_same_country_name(area, country_name):
                return area
        return None

    def handle_mouse_enter(self, ref: FeatureRef, pointer: Tuple[float, float] = (0.0, 0.0)) -> None:
        if ref is None or ref.country_id is None:
            return
        country_id = ref.country_id
        info = self.directory.get_all_info_of_country(country_id)

        self.set_border_colour_of_country(country_id)
        self.show_tooltip(pointer, country_id, info["country_name"])

        area = self._selected_area_name(info["country_name"])
        if area and self.event_bus is not None:
            self.event_bus.emit(SelectionEvent.MAP_ITEM_HOVER, area)

    def handle_mouse_leave(self, ref: FeatureRef) -> None:
        if ref is None or ref.country_id is None:
            return
        country_id = ref.country_id

        self.tooltip.visible = False
        self.set_border_colour_of_country(country_id, self.get_border_colour)

        info = self.directory.get_all_info_of_country(country_id)
        area = self._selected_area_name(info["country_name"])
        if area and self.event_bus is not None:
            self.event_bus.emit(SelectionEvent.MAP_ITEM_UNHOVER, area)

    def _feature_name(self, country_id: int) -> Optional[str]:
        matches = self.countries[self.countries["id"].isin([country_id])]
        if matches.empty or "name" not in matches.columns:
            return None
        name = matches["name"].iloc[0]
        return name if isinstance(name, str) and name else None

    def format_years(self) -> str:
        interval = self.selected.time_interval
        if not interval:
            return "No years selected"
        return f"{interval['min']}-{interval['max']}"

    def show_tooltip(self, pointer: Tuple[float, float], country_id: int, country_name: Optional[str]) -> None:
        """Fills the tooltip for a country; nothing is shown when the country has no name at all."""
        name = country_name or self._feature_name(country_id)
        if not name:
            return
        self.tooltip = Tooltip(
            visible=True,
            x=float(pointer[0]),
            y=float(pointer[1]),
            country_name=name,
            years=self.format_years(),
            indicator=self.selected.indicator,
            value=format_value(self.get_value_of_country(country_id)),
        )
