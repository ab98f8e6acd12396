from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from .models import Restaurant

logger = logging.getLogger(__name__)

_DEFAULT_DATASET = Path(__file__).resolve().parent.parent / "data" / "restaurants.json"

_restaurants: list[Restaurant] | None = None


class DatasetError(ValueError):
    """The dataset file cannot be read as a list of restaurants."""


def default_dataset_path() -> Path:
    override = os.getenv("GFLOCAL_DATASET_PATH")
    return Path(override) if override else _DEFAULT_DATASET


class DatasetStore:
    """Whole-file JSON repository for the restaurant list."""

    def __init__(self, path: Path | str | None = None) -> None:
        self.path = Path(path) if path is not None else default_dataset_path()

    def load(self) -> list[Restaurant]:
        if not self.path.exists():
            logger.warning("Dataset %s does not exist, starting empty", self.path)
            return []
        try:
            raw = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise DatasetError(f"{self.path} is not valid JSON: {exc}") from exc
        if not isinstance(raw, list):
            raise DatasetError(f"{self.path} must hold a JSON array of restaurants")

        restaurants: list[Restaurant] = []
        for index, item in enumerate(raw):
            if not isinstance(item, dict):
                raise DatasetError(f"{self.path}: record #{index} is not an object")
            try:
                restaurants.append(Restaurant.from_json(item))
            except ValidationError as exc:
                raise DatasetError(f"{self.path}: record #{index} has no usable id: {exc}") from exc
        return restaurants

    def save(self, restaurants: list[Restaurant]) -> None:
        payload = json.dumps(
            [r.to_json() for r in restaurants], indent=2, ensure_ascii=False
        )
        self.path.parent.mkdir(parents=True, exist_ok=True)

        # Write a sibling temp file and rename it over the target so readers
        # never observe a half-written dataset.
        fd, tmp_name = tempfile.mkstemp(
            dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                fh.write(payload + "\n")
            os.replace(tmp_name, self.path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        logger.info("Wrote %d restaurants to %s", len(restaurants), self.path)


def next_id(restaurants: list[Restaurant]) -> int:
    return max((r.id for r in restaurants), default=0) + 1


def existing_names(restaurants: list[Restaurant]) -> set[str]:
    return {r.name.lower() for r in restaurants}


def get_restaurants() -> list[Restaurant]:
    """Return the in-memory restaurant list, loading it on first call."""
    global _restaurants
    if _restaurants is None:
        _restaurants = DatasetStore().load()
    return _restaurants


def reload_restaurants() -> list[Restaurant]:
    global _restaurants
    _restaurants = None
    return get_restaurants()
