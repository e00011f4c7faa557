"""
Document store access.

The admin screens only need four primitives per collection: list every
document, insert one, update some fields of one, remove one. MongoDB backs
them in production; an in-memory store is used when no database is
configured and in tests.
"""
import copy
import logging
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Protocol

from bson import ObjectId
from pymongo import MongoClient
from pymongo.database import Database

from config import load_config
from exceptions import EntityNotFoundError

logger = logging.getLogger(__name__)


class DocumentStore(Protocol):
    def list_all(self, collection_name: str) -> List[Dict[str, Any]]: ...

    def insert(self, collection_name: str, fields: Dict[str, Any]) -> str: ...

    def update(self, collection_name: str, entity_id: str, fields: Dict[str, Any]) -> None: ...

    def remove(self, collection_name: str, entity_id: str) -> None: ...


def serialize_doc(doc: Dict[str, Any]) -> Dict[str, Any]:
    if not doc:
        return doc
    doc["id"] = str(doc.pop("_id"))
    for k, v in list(doc.items()):
        if isinstance(v, ObjectId):
            doc[k] = str(v)
    return doc


class MongoDocumentStore:
    """DocumentStore over a pymongo database."""

    def __init__(self, database: Database):
        self.database = database

    def list_all(self, collection_name: str) -> List[Dict[str, Any]]:
        return [serialize_doc(doc) for doc in self.database[collection_name].find({})]

    def insert(self, collection_name: str, fields: Dict[str, Any]) -> str:
        data = dict(fields)
        now = datetime.now(timezone.utc)
        data["created_at"] = now
        data["updated_at"] = now
        result = self.database[collection_name].insert_one(data)
        return str(result.inserted_id)

    def update(self, collection_name: str, entity_id: str, fields: Dict[str, Any]) -> None:
        if not ObjectId.is_valid(entity_id):
            raise EntityNotFoundError(collection_name, entity_id)
        changes = dict(fields)
        changes["updated_at"] = datetime.now(timezone.utc)
        result = self.database[collection_name].update_one(
            {"_id": ObjectId(entity_id)}, {"$set": changes}
        )
        if result.matched_count == 0:
            raise EntityNotFoundError(collection_name, entity_id)

    def remove(self, collection_name: str, entity_id: str) -> None:
        if not ObjectId.is_valid(entity_id):
            logger.debug("Skipping delete of malformed id %s in %s", entity_id, collection_name)
            return
        self.database[collection_name].delete_one({"_id": ObjectId(entity_id)})


class InMemoryDocumentStore:
    """DocumentStore kept in process memory. Insertion order is fetch order."""

    def __init__(self):
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}

    def _collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        return self._collections.setdefault(name, {})

    def list_all(self, collection_name: str) -> List[Dict[str, Any]]:
        return [
            {"id": entity_id, **copy.deepcopy(doc)}
            for entity_id, doc in self._collection(collection_name).items()
        ]

    def insert(self, collection_name: str, fields: Dict[str, Any]) -> str:
        entity_id = uuid.uuid4().hex
        self._collection(collection_name)[entity_id] = copy.deepcopy(dict(fields))
        return entity_id

    def update(self, collection_name: str, entity_id: str, fields: Dict[str, Any]) -> None:
        collection = self._collection(collection_name)
        if entity_id not in collection:
            raise EntityNotFoundError(collection_name, entity_id)
        collection[entity_id].update(copy.deepcopy(dict(fields)))

    def remove(self, collection_name: str, entity_id: str) -> None:
        self._collection(collection_name).pop(entity_id, None)


def connect(database_url: Optional[str], database_name: Optional[str]) -> Optional[Database]:
    if not (database_url and database_name):
        return None
    client = MongoClient(database_url)
    return client[database_name]


_config = load_config()
db = connect(_config.database_url, _config.database_name)
