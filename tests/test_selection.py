import pytest

from events import SelectionEvent
from selection import Selection


def record(event_bus, event):
    received = []
    event_bus.subscribe(event, lambda e, payload: received.append(payload))
    return received


def test_defaults(selection):
    """A new selection focuses the whole world with the default indicator and no interval."""
    assert selection.area == {"region": "World", "country": ""}
    assert selection.comparison_areas == []
    assert selection.indicator == "Population, total"
    assert selection.time_interval == {}
    assert selection.all_selected_areas == ["World"]
    assert selection.selected_years == []


def test_add_comparison_area_appends_and_updates_all_selected(selection):
    selection.add_comparison_area("Canada")
    selection.add_comparison_area("Mexico")
    assert selection.comparison_areas == ["Canada", "Mexico"]
    assert selection.all_selected_areas == ["World", "Canada", "Mexico"]


def test_add_comparison_area_sanitizes_name(selection):
    selection.add_comparison_area("  united   states ")
    assert selection.comparison_areas == ["United States"]


def test_add_comparison_area_ignores_focus_and_duplicates(selection):
    selection.set_area({"region": "North America", "country": "Canada"})
    selection.add_comparison_area("Canada")
    selection.add_comparison_area("North America")
    selection.add_comparison_area("Mexico")
    selection.add_comparison_area("Mexico")
    assert selection.comparison_areas == ["Mexico"]


def test_fifth_comparison_area_emits_error_and_keeps_list(selection, event_bus):
    errors = record(event_bus, SelectionEvent.ERROR_TOO_MANY_COMPARISONS)
    for name in ["Canada", "Mexico", "France", "Japan"]:
        selection.add_comparison_area(name)

    selection.add_comparison_area("Brazil")

    assert selection.comparison_areas == ["Canada", "Mexico", "France", "Japan"]
    assert errors == [selection]


def test_overflow_without_event_bus_is_silent(directory):
    selection = Selection(directory)
    for name in ["Canada", "Mexico", "France", "Japan", "Brazil"]:
        selection.add_comparison_area(name)
    assert len(selection.comparison_areas) == 4


@pytest.mark.parametrize("names", [
    ["Canada", "Canada", "World", "Mexico", "France", "Japan", "Brazil", "India"],
    ["europe & central asia", "France", "Germany", "Europe & Central Asia", "Spain", "Italy"],
])
def test_comparison_invariants_hold_for_any_sequence(selection, names):
    for name in names:
        selection.add_comparison_area(name)
    areas = selection.comparison_areas
    assert len(areas) <= 4
    assert len(set(areas)) == len(areas)
    assert selection.area["region"] not in areas
    assert selection.area["country"] not in areas
    assert len(selection.all_selected_areas) == len(areas) + 1


def test_remove_comparison_area(selection):
    selection.add_comparison_area("Canada")
    selection.add_comparison_area("Mexico")
    selection.remove_comparison_area("Canada")
    selection.remove_comparison_area("Atlantis")
    assert selection.comparison_areas == ["Mexico"]
    assert selection.all_selected_areas == ["World", "Mexico"]


def test_set_area_with_country_in_region(selection):
    selection.set_area({"region": "Europe & Central Asia", "country": "France"})
    assert selection.area == {"region": "Europe & Central Asia", "country": "France"}
    assert selection.all_selected_areas[0] == "France"


def test_set_country_outside_region_keeps_prior_country(selection):
    selection.set_area({"region": "Europe & Central Asia", "country": "France"})
    selection.set_area({"country": "Japan"})
    assert selection.area["country"] == "France"


def test_set_area_without_region_keeps_region(selection):
    selection.set_area({"region": "South Asia"})
    selection.set_area({"country": "India"})
    assert selection.area == {"region": "South Asia", "country": "India"}


def test_changing_region_drops_country_outside_it(selection):
    selection.set_area({"region": "South Asia", "country": "India"})
    selection.set_area({"region": "North America"})
    assert selection.area == {"region": "North America", "country": ""}
    assert selection.all_selected_areas == ["North America"]


def test_focus_region_leaves_comparison_list(selection):
    selection.add_comparison_area("South Asia")
    selection.add_comparison_area("Canada")
    selection.set_area({"region": "South Asia"})
    assert selection.comparison_areas == ["Canada"]
    assert selection.all_selected_areas == ["South Asia", "Canada"]


def test_focus_country_leaves_comparison_list_under_alternate_spelling(selection):
    selection.add_comparison_area("Russia")
    selection.set_area({"region": "Europe & Central Asia", "country": "Russia"})
    assert selection.comparison_areas == []


def test_is_focus_country_in_list_uses_name_equivalence(selection):
    selection.add_comparison_area("Russia")
    assert selection.is_focus_country_in_list("Russian Federation")
    assert not selection.is_focus_country_in_list("France")
    assert not selection.is_focus_country_in_list("")


def test_clear_country(selection):
    selection.set_area({"region": "North America", "country": "Canada"})
    selection.clear_country()
    assert selection.area == {"region": "North America", "country": ""}
    assert selection.all_selected_areas == ["North America"]


def test_set_indicator_ignores_empty(selection):
    selection.set_indicator("GDP per capita (current US$)")
    selection.set_indicator("")
    selection.set_indicator(None)
    assert selection.indicator == "GDP per capita (current US$)"


def test_partial_time_interval_is_rejected(selection):
    selection.set_time_interval(2000, 2005)
    selection.set_time_interval(2010, None)
    selection.set_time_interval(None, 2012)
    assert selection.time_interval == {"min": 2000, "max": 2005}
    assert selection.selected_years == [2000, 2001, 2002, 2003, 2004, 2005]


def test_set_items_applies_area_indicator_and_interval(selection):
    selection.set_items({"region": "North America", "country": "Canada"}, "X", 2010, 2011)
    assert selection.area == {"region": "North America", "country": "Canada"}
    assert selection.indicator == "X"
    assert selection.selected_years == [2010, 2011]


def test_mutations_emit_selection_changed(selection, event_bus):
    changes = record(event_bus, SelectionEvent.SELECTION_CHANGED)
    selection.set_indicator("X")
    selection.add_comparison_area("Canada")
    selection.add_comparison_area("Canada")
    selection.set_time_interval(2010, None)
    assert len(changes) == 2


def test_reversed_time_interval_keeps_prior_interval(selection):
    selection.set_time_interval(2010, 2015)
    selection.set_time_interval(2015, 2010)
    assert selection.time_interval == {"min": 2010, "max": 2015}
    assert selection.time_interval["min"] <= selection.time_interval["max"]


def test_set_items_emits_one_selection_changed(selection, event_bus):
    changes = record(event_bus, SelectionEvent.SELECTION_CHANGED)
    selection.set_items({"region": "North America", "country": "Canada"}, "X", 2010, 2011)
    assert changes == [selection]


def test_same_country_under_another_name_is_added_once(selection):
    selection.add_comparison_area("Russia")
    selection.add_comparison_area("Russian Federation")
    assert selection.comparison_areas == ["Russia"]


def test_focus_country_under_another_name_is_not_a_comparison(selection):
    selection.set_area({"region": "Europe & Central Asia", "country": "Russia"})
    selection.add_comparison_area("Russian Federation")
    assert selection.comparison_areas == []
