# selection.py
"""
Selection model: the focused area, the comparison areas, the indicator and the
time interval currently chosen on the dashboard.
"""

import logging
from typing import Dict, List, Optional

from config import DEFAULT_INDICATOR, DEFAULT_REGION, MAX_COMPARISON_AREAS
from countries import CountryDirectory, InputSanitizer
from events import EventBus, SelectionEvent

logger = logging.getLogger(__name__)


class Selection:
    """
    Holds the selected items of the dashboard.

    Args:
        directory: Country directory used for region membership and name equivalence.
        area: {"region": str, "country": str} focus area. Defaults to the whole world.
        comparison_areas: Countries or regions compared against the focus area.
        indicator: Selected indicator name.
        time_interval: {"min": int, "max": int} year bounds, empty until set.
        event_bus: Receives SELECTION_CHANGED and ERROR_TOO_MANY_COMPARISONS.
    """

    def __init__(
        self,
        directory: CountryDirectory,
        area: Optional[Dict[str, str]] = None,
        comparison_areas: Optional[List[str]] = None,
        indicator: Optional[str] = None,
        time_interval: Optional[Dict[str, int]] = None,
        event_bus: Optional[EventBus] = None,
    ):
        self.directory = directory
        self.input_sanitizer = InputSanitizer(directory)
        self.area = dict(area) if area else {"region": DEFAULT_REGION, "country": ""}
        self.comparison_areas = list(comparison_areas) if comparison_areas else []
        self.indicator = indicator or DEFAULT_INDICATOR
        self.time_interval = dict(time_interval) if time_interval else {}
        self.event_bus = event_bus
        self._suspended = False
        self._pending_change = False

        self.all_selected_areas: List[str] = []
        self._update_all_selected_areas()

    def set_event_bus(self, event_bus: Optional[EventBus]) -> None:
        self.event_bus = event_bus

    # --- Comparison areas ---

    def add_comparison_area(self, country_or_region: str) -> None:
        """
        Adds a country or region to the comparison list unless it is the focus
        area or already listed. A full list emits ERROR_TOO_MANY_COMPARISONS.
        """
        country_or_region = self.input_sanitizer.format_country_or_region_names(country_or_region)

        is_focus_area = any(
            self.directory.is_same_country_name(country_or_region, focus)
            for focus in (self.area["region"], self.area["country"])
        )
        is_list_full = len(self.comparison_areas) >= MAX_COMPARISON_AREAS
        is_already_in_list = any(
            self.directory.is_same_country_name(country_or_region, area) for area in self.comparison_areas
        )

        if is_list_full:
            self._emit(SelectionEvent.ERROR_TOO_MANY_COMPARISONS, self)
            return
        if is_focus_area or is_already_in_list or not country_or_region:
            logger.debug("Ignoring comparison area %r", country_or_region)
            return

        self.comparison_areas.append(country_or_region)
        self._changed()

    def remove_comparison_area(self, country_or_region: str) -> None:
        if country_or_region in self.comparison_areas:
            self.comparison_areas.remove(country_or_region)
            self._changed()

    def is_focus_country_in_list(self, focused_country: str) -> bool:
        if not focused_country:
            return False
        return any(
            self.directory.is_same_country_name(comparison_area, focused_country)
            for comparison_area in self.comparison_areas
        )

    def _remove_focus_from_comparisons(self, region: Optional[str], country: Optional[str]) -> None:
        """A focus area and a comparison area are mutually exclusive."""
        if country and self.is_focus_country_in_list(country):
            match = next(
                area for area in self.comparison_areas
                if self.directory.is_same_country_name(area, country)
            )
            self.comparison_areas.remove(match)
        if region and region in self.comparison_areas:
            self.comparison_areas.remove(region)

    # --- Focus area ---

    def set_area(self, area: Optional[Dict[str, str]]) -> None:
        """
        Sets the focus region (kept when not given), then the country if it
        belongs to that region. The new focus area leaves the comparison list.
        """
        area = area or {}
        region = self.input_sanitizer.format_country_or_region_names(area.get("region"))
        country = self.input_sanitizer.format_country_or_region_names(area.get("country"))

        if region:
            self.area["region"] = region
            if self.area["country"] not in self.directory.get_countries_of_region(region):
                self.area["country"] = ""
        self._set_country(country)

        accepted_country = country if country and self.area["country"] == country else None
        self._remove_focus_from_comparisons(region, accepted_country)
        self._changed()

    def _set_country(self, country: str) -> None:
        if not country:
            return
        if country in self.directory.get_countries_of_region(self.area["region"]):
            self.area["country"] = country
        else:
            logger.debug("Country %r is not in region %r; keeping %r",
                         country, self.area["region"], self.area["country"])

    def clear_country(self) -> None:
        """Drops the focus country so the region becomes the focus area."""
        if self.area["country"]:
            self.area["country"] = ""
            self._changed()

    # --- Indicator and time interval ---

    def set_indicator(self, indicator: Optional[str]) -> None:
        if indicator:
            self.indicator = indicator
            self._changed()

    def set_time_interval(self, min_year: Optional[int], max_year: Optional[int]) -> None:
        """Replaces the interval only when both bounds are given and in order."""
        if not (min_year and max_year):
            logger.debug("Ignoring partial time interval (%r, %r)", min_year, max_year)
            return
        if int(min_year) > int(max_year):
            logger.debug("Ignoring reversed time interval (%r, %r)", min_year, max_year)
            return
        self.time_interval = {"min": int(min_year), "max": int(max_year)}
        self._changed()

    def set_items(self, area, indicator, min_year, max_year) -> None:
        """Applies area, indicator and interval together; listeners hear one SELECTION_CHANGED."""
        self._suspended = True
        try:
            self.set_area(area)
            self.set_indicator(indicator)
            self.set_time_interval(min_year, max_year)
        finally:
            self._suspended = False
        if self._pending_change:
            self._pending_change = False
            self._emit(SelectionEvent.SELECTION_CHANGED, self)

    @property
    def selected_years(self) -> List[int]:
        """Every year within the time interval, bounds included."""
        if not self.time_interval:
            return []
        return list(range(self.time_interval["min"], self.time_interval["max"] + 1))

    # --- Helpers ---

    def _update_all_selected_areas(self) -> None:
        region = self.input_sanitizer.format_country_or_region_names(self.area["region"])
        country = self.input_sanitizer.format_country_or_region_names(self.area["country"])
        focus = country if country else region
        self.all_selected_areas = [focus, *self.comparison_areas]

    def _changed(self) -> None:
        self._update_all_selected_areas()
        if self._suspended:
            self._pending_change = True
            return
        self._emit(SelectionEvent.SELECTION_CHANGED, self)

    def _emit(self, event: SelectionEvent, payload) -> None:
        if self.event_bus is not None:
            self.event_bus.emit(event, payload)

    def __repr__(self) -> str:
        return (f"Selection(area={self.area!r}, comparison_areas={self.comparison_areas!r}, "
                f"indicator={self.indicator!r}, time_interval={self.time_interval!r})")
