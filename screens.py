"""Admin screens: the cars catalog and the special ads gallery."""
import logging
from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional, Tuple

from catalog import CatalogStore
from exceptions import EntityNotFoundError
from forms import (
    Action,
    FormState,
    OpenAdd,
    OpenEdit,
    Settle,
    Submit,
    car_create_payload,
    car_update_payload,
    reduce,
)
from gateway import SyncGateway

logger = logging.getLogger(__name__)


class AdminScreen(ABC):
    """Binds a form to a collection through its gateway.

    The screen holds no form state itself; each caller threads its own
    ``FormState`` through the methods below.
    """

    def __init__(self, gateway: SyncGateway):
        self.gateway = gateway

    @property
    def catalog(self) -> CatalogStore:
        return self.gateway.catalog

    @property
    def collection(self) -> str:
        return self.gateway.collection

    async def mount(self) -> List[Dict[str, Any]]:
        await self.gateway.refresh()
        return self.catalog.render()

    def dispatch(self, state: FormState, action: Action) -> FormState:
        return reduce(state, action)

    def open_add(self, state: Optional[FormState] = None) -> FormState:
        return reduce(state or FormState(), OpenAdd())

    def open_edit(self, entity_id: str, state: Optional[FormState] = None) -> FormState:
        entity = self.catalog.find(entity_id)
        if entity is None:
            raise EntityNotFoundError(self.collection, entity_id)
        return reduce(state or FormState(), OpenEdit(entity=entity))

    async def submit(self, state: FormState) -> Tuple[FormState, bool]:
        """Persist the form and close it, whatever the outcome."""
        state = reduce(state, Submit())
        try:
            if state.mode == "add":
                saved = await self._create(state)
            else:
                saved = await self._update(state)
        finally:
            state = reduce(state, Settle())
        return state, saved

    async def delete(self, entity_id: str) -> bool:
        return await self.gateway.delete(entity_id)

    async def _create(self, state: FormState) -> bool:
        try:
            fields = self.create_fields(state)
        except ValueError:
            logger.exception("Invalid values in %s form", self.collection)
            return False
        return await self.gateway.create(fields, state.image)

    async def _update(self, state: FormState) -> bool:
        try:
            fields = self.update_fields(state)
        except ValueError:
            logger.exception("Invalid values in %s form", self.collection)
            return False
        return await self.gateway.update(state.selected.id, fields, state.image)

    @abstractmethod
    def create_fields(self, state: FormState) -> Dict[str, Any]:
        """Document fields to insert for an add form."""

    @abstractmethod
    def update_fields(self, state: FormState) -> Dict[str, Any]:
        """Document fields to write for an edit form."""


class CarsScreen(AdminScreen):
    def __init__(self, gateway: SyncGateway, tariffs: bool = True):
        super().__init__(gateway)
        self.tariffs = tariffs

    def create_fields(self, state: FormState) -> Dict[str, Any]:
        return car_create_payload(state, with_tariffs=self.tariffs)

    def update_fields(self, state: FormState) -> Dict[str, Any]:
        return car_update_payload(state, with_tariffs=self.tariffs)


class AddsScreen(AdminScreen):
    """Special ads carry nothing but the picture."""

    def create_fields(self, state: FormState) -> Dict[str, Any]:
        return {}

    def update_fields(self, state: FormState) -> Dict[str, Any]:
        return {}
