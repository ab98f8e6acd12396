from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, field_validator


class MenuItem(BaseModel):
    name: str
    price: float = 0.0


class RestaurantCandidate(BaseModel):
    """A restaurant without an id, as proposed by the research model."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: str = Field(..., min_length=1)
    cuisine: str = ""
    address: str = ""
    city: str = Field(..., min_length=1)
    lat: float = 0.0
    lng: float = 0.0
    gf_options: str = Field(default="", alias="gfOptions")
    menu_items: list[MenuItem] = Field(default_factory=list, alias="menuItems")
    doordash: bool = False
    notes: str = ""
    website: str = ""
    doordash_url: str | None = Field(default=None, alias="doordashUrl")

    @field_validator("name", "city")
    @classmethod
    def _strip_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("must not be blank")
        return value


def _as_text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _as_number(value: Any) -> float | None:
    if value is None or isinstance(value, bool):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class StoredMenuItem(BaseModel):
    name: str = ""
    price: float | None = None

    @field_validator("name", mode="before")
    @classmethod
    def _name(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("price", mode="before")
    @classmethod
    def _price(cls, value: Any) -> float | None:
        return _as_number(value)


class Restaurant(BaseModel):
    """
    A record already in the dataset.

    Field types are lenient so one odd value never makes the dataset
    unreadable. The record's JSON is kept as loaded and written back
    unchanged by ``to_json()``.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int
    name: str = ""
    cuisine: str = ""
    address: str = ""
    city: str = ""
    lat: float | None = None
    lng: float | None = None
    gf_options: str = Field(default="", alias="gfOptions")
    menu_items: list[StoredMenuItem] = Field(default_factory=list, alias="menuItems")
    doordash: bool = False
    notes: str = ""
    website: str = ""
    doordash_url: str | None = Field(default=None, alias="doordashUrl")

    _raw: dict[str, Any] | None = PrivateAttr(default=None)

    @field_validator("name", "cuisine", "address", "city", "gf_options", "notes", "website", mode="before")
    @classmethod
    def _text(cls, value: Any) -> str:
        return _as_text(value)

    @field_validator("lat", "lng", mode="before")
    @classmethod
    def _coordinate(cls, value: Any) -> float | None:
        return _as_number(value)

    @field_validator("menu_items", mode="before")
    @classmethod
    def _menu(cls, value: Any) -> list[Any]:
        if not isinstance(value, list):
            return []
        return [item for item in value if isinstance(item, dict)]

    @field_validator("doordash", mode="before")
    @classmethod
    def _flag(cls, value: Any) -> bool:
        if isinstance(value, str):
            return value.strip().lower() in {"true", "yes", "1"}
        return bool(value)

    @field_validator("doordash_url", mode="before")
    @classmethod
    def _url(cls, value: Any) -> str | None:
        return None if value in (None, "") else _as_text(value)

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> "Restaurant":
        restaurant = cls.model_validate(raw)
        restaurant._raw = dict(raw)
        return restaurant

    @classmethod
    def from_candidate(cls, id: int, candidate: RestaurantCandidate) -> "Restaurant":
        return cls.from_json({"id": id, **candidate.model_dump(by_alias=True)})

    def to_json(self) -> dict[str, Any]:
        """Return the record as loaded, or ``id`` first and camelCase keys for a new one."""
        if self._raw is not None:
            return dict(self._raw)
        return {"id": self.id, **self.model_dump(by_alias=True, exclude={"id"})}
