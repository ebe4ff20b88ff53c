# countries.py
"""
Country directory: lookups between display names, ISO numeric codes and
ISO alpha-3 codes, plus region membership.

Display names and regions come from the static region table; numeric codes and
alternate spellings are resolved through pycountry.
"""

import logging
from typing import Dict, List, Optional

import pandas as pd
import pycountry

from config import DEFAULT_REGION, REGIONS_PATH
from schemas import region_membership_schema

logger = logging.getLogger(__name__)


def _normalize(name: str) -> str:
    return " ".join(str(name).split()).casefold()


class CountryDirectory:
    """Bidirectional mapping between country names and codes."""

    def __init__(self, regions_df: pd.DataFrame):
        regions_df = region_membership_schema.validate(regions_df)
        self._table = regions_df.reset_index(drop=True)
        self._name_to_alpha3: Dict[str, str] = dict(zip(self._table["country"], self._table["alpha_3"]))
        self._alpha3_to_name: Dict[str, str] = dict(zip(self._table["alpha_3"], self._table["country"]))
        self._folded_names: Dict[str, str] = {_normalize(n): n for n in self._table["country"]}

    @classmethod
    def from_csv(cls, path: str = REGIONS_PATH) -> "CountryDirectory":
        return cls(pd.read_csv(path, dtype=str))

    # --- Regions ---

    def get_regions(self) -> List[str]:
        """Returns the default 'World' region followed by every region in the table."""
        return [DEFAULT_REGION] + sorted(self._table["region"].unique().tolist())

    def get_all_country_names(self) -> List[str]:
        return sorted(self._table["country"].tolist())

    def get_countries_of_region(self, region_name: str) -> List[str]:
        """Returns the display names of all countries in a region ('World' holds every country)."""
        if region_name == DEFAULT_REGION:
            return self.get_all_country_names()
        members = self._table[self._table["region"] == region_name]
        return sorted(members["country"].tolist())

    def is_region(self, name: str) -> bool:
        return name in self.get_regions()

    # --- Name and code lookups ---

    def canonical_name(self, name: str) -> Optional[str]:
        """Returns the directory spelling of a country or region name, ignoring case and spacing."""
        if not name:
            return None
        folded = _normalize(name)
        for region in self.get_regions():
            if _normalize(region) == folded:
                return region
        return self._folded_names.get(folded)

    def get_country_alpha3(self, name: str) -> Optional[str]:
        if not name:
            return None
        if name in self._name_to_alpha3:
            return self._name_to_alpha3[name]
        canonical = self._folded_names.get(_normalize(name))
        if canonical:
            return self._name_to_alpha3[canonical]
        if self.is_region(name):
            return None
        try:
            return pycountry.countries.lookup(name).alpha_3
        except LookupError:
            return None

    def get_country_num_code(self, name: str) -> Optional[int]:
        alpha_3 = self.get_country_alpha3(name)
        if alpha_3 is None:
            return None
        country = pycountry.countries.get(alpha_3=alpha_3)
        if country is None:
            return None
        return int(country.numeric)

    def get_country_alpha3s(self, names: List[str]) -> List[str]:
        """Alpha-3 codes of the given names; names that are not countries are skipped."""
        codes = [self.get_country_alpha3(name) for name in names]
        return [code for code in codes if code is not None]

    def get_country_num_codes(self, names: List[str]) -> List[int]:
        """Numeric codes of the given names; names that are not countries are skipped."""
        codes = [self.get_country_num_code(name) for name in names]
        return [code for code in codes if code is not None]

    def convert_to_alpha3(self, code: Optional[int]) -> Optional[str]:
        if code is None or pd.isna(code) or int(code) < 0:
            return None
        country = pycountry.countries.get(numeric=f"{int(code):03d}")
        return country.alpha_3 if country is not None else None

    def get_all_info_of_country(self, code: Optional[int]) -> Dict[str, Optional[str]]:
        """Returns {'alpha_3', 'country_name'} for a numeric code; both None when unknown."""
        alpha_3 = self.convert_to_alpha3(code)
        if alpha_3 is None:
            return {"alpha_3": None, "country_name": None}
        name = self._alpha3_to_name.get(alpha_3)
        if name is None:
            country = pycountry.countries.get(alpha_3=alpha_3)
            name = getattr(country, "common_name", None) or country.name
        return {"alpha_3": alpha_3, "country_name": name}

    def is_same_country_name(self, first: str, second: str) -> bool:
        """True when both names refer to the same country, e.g. 'Russia' and 'Russian Federation'."""
        if not first or not second:
            return False
        if _normalize(first) == _normalize(second):
            return True
        first_code = self.get_country_alpha3(first)
        return first_code is not None and first_code == self.get_country_alpha3(second)


class InputSanitizer:
    """Canonicalizes user-entered country and region names."""

    def __init__(self, directory: Optional[CountryDirectory] = None):
        self.directory = directory

    def format_country_or_region_names(self, name: Optional[str]) -> str:
        if not name:
            return ""
        cleaned = " ".join(str(name).split())
        if self.directory is not None:
            canonical = self.directory.canonical_name(cleaned)
            if canonical:
                return canonical
        return cleaned
