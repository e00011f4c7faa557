"""
Database Schemas for the Car Rental Admin Console

Each Pydantic model corresponds to a MongoDB collection document. Field names
follow the stored documents exactly (camelCase, tariff keys starting with
digits are exposed through aliases).
"""
from __future__ import annotations
import math
from typing import Any, Dict, List, Optional, Tuple
from pydantic import BaseModel, ConfigDict, Field, field_validator

SEAT_OPTIONS: Tuple[int, ...] = (4, 7, 8, 12)

FULL_DAY_TARIFF_KEYS: Tuple[str, ...] = (
    "12HrsRent",
    "24HrsRent",
    "perKm",
    "perExtraHour",
    "12HrsDriverBatta",
    "24HrsDriverBatta",
)
LOCAL_TRIP_KEYS: Tuple[str, ...] = ("4Hrs40Km", "8Hrs80Km", "perExtraKm", "perExtraHour")


class FullDayTariffs(BaseModel):
    # Tariff values are kept as the text the admin typed.
    model_config = ConfigDict(populate_by_name=True, frozen=True, coerce_numbers_to_str=True)

    rent_12h: str = Field("", alias="12HrsRent")
    rent_24h: str = Field("", alias="24HrsRent")
    per_km: str = Field("", alias="perKm")
    per_extra_hour: str = Field("", alias="perExtraHour")
    driver_batta_12h: str = Field("", alias="12HrsDriverBatta")
    driver_batta_24h: str = Field("", alias="24HrsDriverBatta")


class LocalTrips(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True, coerce_numbers_to_str=True)

    hours4_km40: str = Field("", alias="4Hrs40Km")
    hours8_km80: str = Field("", alias="8Hrs80Km")
    per_extra_km: str = Field("", alias="perExtraKm")
    per_extra_hour: str = Field("", alias="perExtraHour")


class Tariffs(BaseModel):
    model_config = ConfigDict(frozen=True)

    fullDayTariffs: FullDayTariffs = Field(default_factory=FullDayTariffs)
    localTrips: LocalTrips = Field(default_factory=LocalTrips)

    def to_document(self) -> Dict[str, Dict[str, str]]:
        return self.model_dump(by_alias=True)


TARIFF_GROUPS: Dict[str, Tuple[str, ...]] = {
    "fullDayTariffs": FULL_DAY_TARIFF_KEYS,
    "localTrips": LOCAL_TRIP_KEYS,
}


class CarListing(BaseModel):
    """A car offered for rent (collection: cars)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str = Field(..., description="Document id assigned by the store")
    name: Optional[str] = None
    seats: Optional[int] = Field(None, description="One of 4, 7, 8 or 12")
    pricePerKm: Optional[float] = Field(None, description="Rate per km in rupees")
    description: Optional[str] = None
    image: Optional[str] = Field(None, description="Picture as a data URI")
    tariffs: Optional[Tariffs] = None

    @field_validator("seats", "pricePerKm", mode="before")
    @classmethod
    def _nan_as_missing(cls, value: Any) -> Any:
        # Older documents hold NaN where a blank number was saved.
        if isinstance(value, float) and not math.isfinite(value):
            return None
        return value

    def card(self) -> Dict[str, Any]:
        card: Dict[str, Any] = {"id": self.id}
        if self.image:
            card["image"] = {"src": self.image, "alt": self.name or "Car Image"}
        card["title"] = self.name or "No Name"
        card["seats"] = f"Seats: {self.seats}" if self.seats is not None else "Seats: -"
        if self.pricePerKm is not None:
            card["price"] = f"Price per Km: ₹{self.pricePerKm:.2f}"
        card["description"] = self.description or "No Description"
        if self.tariffs is not None:
            tariffs = self.tariffs.to_document()
            card["tariffs"] = {
                group: [f"{key}: ₹{value}" for key, value in rates.items()]
                for group, rates in tariffs.items()
            }
        return card


class SpecialAd(BaseModel):
    """An image in the special ads gallery (collection: adds)."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    image: Optional[str] = None

    def card(self) -> Dict[str, Any]:
        card: Dict[str, Any] = {"id": self.id}
        if self.image:
            card["image"] = {"src": self.image, "alt": "Car Image"}
        return card


def tariff_keys(group: str) -> List[str]:
    if group not in TARIFF_GROUPS:
        raise ValueError(f"Unknown tariff group: {group}")
    return list(TARIFF_GROUPS[group])
