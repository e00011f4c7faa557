"""
Create, update and delete against a remote collection.

Each mutation runs as one pipeline: read the picked image into a data URI,
persist, then re-fetch the whole collection into the catalog. A failure in any
stage is logged and skips the stages after it; callers only learn whether the
pipeline went through.
"""
import logging
from typing import Any, Dict, List, Optional

from starlette.concurrency import run_in_threadpool

from catalog import CatalogStore, Entity
from database import DocumentStore
from exceptions import ImageRequiredError
from imaging import Upload, read_as_data_url

logger = logging.getLogger(__name__)


class SyncGateway:
    def __init__(self, store: DocumentStore, collection: str, catalog: CatalogStore):
        self.store = store
        self.collection = collection
        self.catalog = catalog

    async def refresh(self) -> List[Entity]:
        documents = await run_in_threadpool(self.store.list_all, self.collection)
        self.catalog.replace(documents)
        logger.debug("Fetched %d documents from %s", len(self.catalog), self.collection)
        return self.catalog.items

    async def create(self, fields: Dict[str, Any], image: Optional[Upload]) -> bool:
        try:
            if image is None:
                raise ImageRequiredError(self.collection)
            document = dict(fields)
            document["image"] = await read_as_data_url(image, self.collection)
            entity_id = await run_in_threadpool(self.store.insert, self.collection, document)
            logger.info("Created %s/%s", self.collection, entity_id)
            await self.refresh()
        except Exception:
            logger.exception("Error creating document in %s", self.collection)
            return False
        return True

    async def update(
        self, entity_id: str, fields: Dict[str, Any], image: Optional[Upload] = None
    ) -> bool:
        if not fields and image is None:
            logger.info("Nothing to save for %s/%s", self.collection, entity_id)
            return True
        try:
            changes = dict(fields)
            if image is not None:
                changes["image"] = await read_as_data_url(image, self.collection)
            await run_in_threadpool(self.store.update, self.collection, entity_id, changes)
            logger.info("Updated %s/%s fields=%s", self.collection, entity_id, sorted(changes))
            await self.refresh()
        except Exception:
            logger.exception("Error saving %s/%s", self.collection, entity_id)
            return False
        return True

    async def delete(self, entity_id: str) -> bool:
        try:
            await run_in_threadpool(self.store.remove, self.collection, entity_id)
            logger.info("Deleted %s/%s", self.collection, entity_id)
            await self.refresh()
        except Exception:
            logger.exception("Error deleting %s/%s", self.collection, entity_id)
            return False
        return True
