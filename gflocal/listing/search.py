from __future__ import annotations

import pandas as pd

from ..store.models import Restaurant

ALL_CITIES = "all"

# Each field is matched on its own; a query never spans two fields.
SEARCH_COLUMNS = ["name", "cuisine", "notes", "gf_options", "city"]


def to_dataframe(restaurants: list[Restaurant]) -> pd.DataFrame:
    """One row per restaurant with lower-cased helper columns for matching."""
    df = pd.DataFrame(
        {
            "name": [r.name.lower() for r in restaurants],
            "cuisine": [r.cuisine.lower() for r in restaurants],
            "notes": [r.notes.lower() for r in restaurants],
            "gf_options": [r.gf_options.lower() for r in restaurants],
            "city": [r.city for r in restaurants],
            "menu_items": [[item.name.lower() for item in r.menu_items] for r in restaurants],
            "doordash": [bool(r.doordash) for r in restaurants],
        }
    )
    return df


def _search_mask(df: pd.DataFrame, query: str) -> pd.Series:
    q = query.lower()
    mask = df["menu_items"].apply(lambda items: any(q in item for item in items))
    for column in SEARCH_COLUMNS:
        mask |= df[column].str.lower().str.contains(q, regex=False)
    return mask


def filter_restaurants(
    restaurants: list[Restaurant],
    query: str = "",
    city: str = ALL_CITIES,
    doordash_only: bool = False,
) -> list[Restaurant]:
    """Apply the DoorDash, city and free-text filters, keeping dataset order."""
    if not restaurants:
        return []
    df = to_dataframe(restaurants)
    mask = pd.Series(True, index=df.index)

    if doordash_only:
        mask &= df["doordash"]
    if city and city != ALL_CITIES:
        mask &= df["city"] == city
    # A blank query disables the search, but a non-blank one is matched as typed.
    if query and query.strip():
        mask &= _search_mask(df, query)

    return [restaurants[i] for i in df.index[mask]]


def list_cities(restaurants: list[Restaurant]) -> list[str]:
    return [ALL_CITIES, *sorted({r.city for r in restaurants})]


def has_active_filters(query: str = "", city: str = ALL_CITIES, doordash_only: bool = False) -> bool:
    return bool(query) or doordash_only or city != ALL_CITIES
