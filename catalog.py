"""In-memory list of the entities of one collection, as last fetched."""
import logging
from typing import Any, Dict, Iterable, List, Optional, Tuple, Type, Union

from pydantic import ValidationError

from schemas import CarListing, SpecialAd

logger = logging.getLogger(__name__)

Entity = Union[CarListing, SpecialAd]


class CatalogStore:
    def __init__(self, model: Type[Entity]):
        self.model = model
        self._items: Tuple[Entity, ...] = ()

    @property
    def items(self) -> List[Entity]:
        return list(self._items)

    def __len__(self) -> int:
        return len(self._items)

    def replace(self, documents: Iterable[Dict[str, Any]]) -> None:
        """Swap in the fetched documents, leaving out any that cannot be read."""
        entities = []
        for doc in documents:
            try:
                entities.append(self.model.model_validate(doc))
            except ValidationError as e:
                logger.warning(
                    "Skipping unreadable %s document %s: %s",
                    self.model.__name__, doc.get("id"), e.errors(include_url=False),
                )
        # Built fully before the swap so readers never see a partial list.
        self._items = tuple(entities)

    def find(self, entity_id: str) -> Optional[Entity]:
        for entity in self._items:
            if entity.id == entity_id:
                return entity
        return None

    def documents(self) -> List[Dict[str, Any]]:
        return [entity.model_dump(by_alias=True, exclude_none=True) for entity in self._items]

    def render(self) -> List[Dict[str, Any]]:
        return [entity.card() for entity in self._items]
