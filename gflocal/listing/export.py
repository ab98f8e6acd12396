from __future__ import annotations

import csv
import json
from typing import Any

import pandas as pd

from ..store.models import Restaurant

CSV_COLUMNS = ["Name", "Cuisine", "City", "Address", "GF Options", "Menu Items", "DoorDash", "Notes"]
CSV_FILENAME = "gf-restaurants.csv"
GEOJSON_FILENAME = "gf-restaurants.geojson"


def _menu_entry(name: str, price: float | None) -> str:
    return name if price is None else f"{name} (${price:.2f})"


def _menu_summary(r: Restaurant) -> str:
    return "; ".join(_menu_entry(item.name, item.price) for item in r.menu_items)


def to_csv(restaurants: list[Restaurant]) -> str:
    rows = [
        [
            r.name,
            r.cuisine,
            r.city,
            r.address,
            r.gf_options,
            _menu_summary(r),
            "Yes" if r.doordash else "No",
            r.notes,
        ]
        for r in restaurants
    ]
    df = pd.DataFrame(rows, columns=CSV_COLUMNS)
    return df.to_csv(index=False, quoting=csv.QUOTE_ALL, lineterminator="\n")


def _description(r: Restaurant) -> str:
    menu = ", ".join(item.name for item in r.menu_items)
    return f"{r.cuisine}\n\nGF Options: {r.gf_options}\n\nMenu Items: {menu}\n\n{r.notes}"


def to_geojson(restaurants: list[Restaurant]) -> dict[str, Any]:
    """
    FeatureCollection for importing into Google My Maps.

    Restaurants without both coordinates have no point to plot and are left out.
    """
    return {
        "type": "FeatureCollection",
        "features": [
            {
                "type": "Feature",
                "properties": {
                    "name": r.name,
                    "description": _description(r),
                    "cuisine": r.cuisine,
                    "gfOptions": r.gf_options,
                    "doordash": r.doordash,
                },
                "geometry": {"type": "Point", "coordinates": [r.lng, r.lat]},
            }
            for r in restaurants
            if r.lat is not None and r.lng is not None
        ],
    }


def geojson_text(restaurants: list[Restaurant]) -> str:
    return json.dumps(to_geojson(restaurants), indent=2, ensure_ascii=False)
