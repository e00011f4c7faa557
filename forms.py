"""
Form state for creating and editing catalog entities.

The state is an immutable value; every admin action maps the current state to
a new one through ``reduce``. Nothing here talks to the database: building the
documents to persist happens at submit time through the payload helpers.
"""
import math
from typing import AbstractSet, Any, Dict, FrozenSet, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from exceptions import InvalidTransition
from schemas import SEAT_OPTIONS, CarListing, SpecialAd, Tariffs, tariff_keys

FormPhase = Literal["closed", "open", "submitting"]
FormMode = Literal["add", "edit"]
CarField = Literal["name", "seats", "pricePerKm", "description"]


class CarFormFields(BaseModel):
    """Working copy of the editable fields, all held as text."""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    seats: str = ""
    pricePerKm: str = ""
    description: str = ""
    tariffs: Tariffs = Field(default_factory=Tariffs)

    @classmethod
    def from_entity(cls, entity: Union[CarListing, SpecialAd]) -> "CarFormFields":
        if not isinstance(entity, CarListing):
            return cls()
        return cls(
            name=entity.name or "",
            seats="" if entity.seats is None else str(entity.seats),
            pricePerKm="" if entity.pricePerKm is None else str(entity.pricePerKm),
            description=entity.description or "",
            tariffs=entity.tariffs or Tariffs(),
        )


class FormState(BaseModel):
    model_config = ConfigDict(frozen=True)

    phase: FormPhase = "closed"
    mode: FormMode = "add"
    selected: Optional[Union[CarListing, SpecialAd]] = None
    fields: CarFormFields = Field(default_factory=CarFormFields)
    # The picked file is never serialized with the view state.
    image: Optional[Any] = Field(None, exclude=True)
    touched: FrozenSet[str] = frozenset()


class OpenAdd(BaseModel):
    pass


class OpenEdit(BaseModel):
    entity: Union[CarListing, SpecialAd]


class EditField(BaseModel):
    name: CarField
    value: str


class EditTariff(BaseModel):
    group: Literal["fullDayTariffs", "localTrips"]
    key: str
    value: str


class AttachImage(BaseModel):
    upload: Optional[Any] = None


class Submit(BaseModel):
    pass


class Settle(BaseModel):
    pass


class Cancel(BaseModel):
    pass


Action = Union[OpenAdd, OpenEdit, EditField, EditTariff, AttachImage, Submit, Settle, Cancel]


def _require(state: FormState, action: BaseModel, *phases: str) -> None:
    if state.phase not in phases:
        raise InvalidTransition(type(action).__name__, state.phase)


def _with_tariff(tariffs: Tariffs, group: str, key: str, value: str) -> Tariffs:
    if key not in tariff_keys(group):
        raise ValueError(f"Unknown tariff '{key}' in {group}")
    rates = getattr(tariffs, group).model_dump(by_alias=True)
    rates[key] = value
    return tariffs.model_copy(update={group: type(getattr(tariffs, group)).model_validate(rates)})


def reduce(state: FormState, action: Action) -> FormState:
    if isinstance(action, OpenAdd):
        _require(state, action, "closed", "open")
        return FormState(phase="open", mode="add")

    if isinstance(action, OpenEdit):
        _require(state, action, "closed", "open")
        return FormState(
            phase="open",
            mode="edit",
            selected=action.entity,
            fields=CarFormFields.from_entity(action.entity),
        )

    if isinstance(action, EditField):
        _require(state, action, "open")
        return state.model_copy(update={
            "fields": state.fields.model_copy(update={action.name: action.value}),
            "touched": state.touched | {action.name},
        })

    if isinstance(action, EditTariff):
        _require(state, action, "open")
        tariffs = _with_tariff(state.fields.tariffs, action.group, action.key, action.value)
        return state.model_copy(update={
            "fields": state.fields.model_copy(update={"tariffs": tariffs}),
            "touched": state.touched | {"tariffs"},
        })

    if isinstance(action, AttachImage):
        _require(state, action, "open")
        return state.model_copy(update={"image": action.upload})

    if isinstance(action, Submit):
        _require(state, action, "open")
        return state.model_copy(update={"phase": "submitting"})

    if isinstance(action, Settle):
        _require(state, action, "submitting")
        return FormState()

    if isinstance(action, Cancel):
        _require(state, action, "open")
        return FormState()

    raise TypeError(f"Unsupported form action: {action!r}")


def coerce_seats(value: str) -> Optional[int]:
    """Blank means no value; anything else must be one of the seat options."""
    value = value.strip()
    if not value:
        return None
    seats = int(value)
    if seats not in SEAT_OPTIONS:
        raise ValueError(f"Seats must be one of {SEAT_OPTIONS}, got {seats}")
    return seats


def coerce_price(value: str) -> Optional[float]:
    value = value.strip()
    if not value:
        return None
    price = float(value)
    if price < 0 or not math.isfinite(price):
        raise ValueError(f"Price per km must be a non-negative number, got {value}")
    return price


def _car_document(fields: CarFormFields, names: AbstractSet[str], with_tariffs: bool) -> Dict[str, Any]:
    document: Dict[str, Any] = {}
    if "name" in names:
        document["name"] = fields.name
    if "seats" in names:
        document["seats"] = coerce_seats(fields.seats)
    if "pricePerKm" in names:
        document["pricePerKm"] = coerce_price(fields.pricePerKm)
    if "description" in names:
        document["description"] = fields.description
    if with_tariffs and "tariffs" in names:
        # Stored as typed, no numeric coercion.
        document["tariffs"] = fields.tariffs.to_document()
    return document


def car_create_payload(state: FormState, with_tariffs: bool = True) -> Dict[str, Any]:
    names = {"name", "seats", "pricePerKm", "description", "tariffs"}
    return _car_document(state.fields, names, with_tariffs)


def car_update_payload(state: FormState, with_tariffs: bool = True) -> Dict[str, Any]:
    return _car_document(state.fields, state.touched, with_tariffs)
