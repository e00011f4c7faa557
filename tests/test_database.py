"""Unit tests for the document stores."""

from unittest.mock import MagicMock

import pytest
from bson import ObjectId

from database import InMemoryDocumentStore, MongoDocumentStore, connect, serialize_doc
from exceptions import EntityNotFoundError


class TestInMemoryDocumentStore:
    """Tests for InMemoryDocumentStore."""

    def test_insert_assigns_unique_ids(self, store):
        first = store.insert("cars", {"name": "Sedan"})
        second = store.insert("cars", {"name": "Sedan"})
        assert first != second
        assert [doc["id"] for doc in store.list_all("cars")] == [first, second]

    def test_collections_are_separate(self, store):
        store.insert("cars", {"name": "Sedan"})
        assert store.list_all("adds") == []

    def test_update_merges_fields(self, store):
        entity_id = store.insert("cars", {"name": "Sedan", "seats": 4})
        store.update("cars", entity_id, {"seats": 7})
        assert store.list_all("cars") == [{"id": entity_id, "name": "Sedan", "seats": 7}]

    def test_update_missing_raises(self, store):
        with pytest.raises(EntityNotFoundError):
            store.update("cars", "nope", {"seats": 7})

    def test_remove_is_idempotent(self, store):
        entity_id = store.insert("cars", {"name": "Sedan"})
        store.remove("cars", entity_id)
        store.remove("cars", entity_id)
        assert store.list_all("cars") == []

    def test_listed_documents_are_copies(self, store):
        store.insert("cars", {"tariffs": {"localTrips": {"4Hrs40Km": "900"}}})
        listed = store.list_all("cars")
        listed[0]["tariffs"]["localTrips"]["4Hrs40Km"] = "0"
        assert store.list_all("cars")[0]["tariffs"]["localTrips"]["4Hrs40Km"] == "900"


class TestMongoDocumentStore:
    """Tests for MongoDocumentStore against a mocked pymongo database."""

    @pytest.fixture
    def collection(self):
        return MagicMock()

    @pytest.fixture
    def mongo_store(self, collection):
        database = MagicMock()
        database.__getitem__.return_value = collection
        return MongoDocumentStore(database)

    def test_list_all_serializes_ids(self, mongo_store, collection):
        oid = ObjectId()
        collection.find.return_value = [{"_id": oid, "name": "Sedan"}]
        assert mongo_store.list_all("cars") == [{"id": str(oid), "name": "Sedan"}]
        collection.find.assert_called_once_with({})

    def test_insert_adds_timestamps(self, mongo_store, collection):
        oid = ObjectId()
        collection.insert_one.return_value = MagicMock(inserted_id=oid)

        entity_id = mongo_store.insert("cars", {"name": "Sedan"})

        assert entity_id == str(oid)
        inserted = collection.insert_one.call_args[0][0]
        assert inserted["name"] == "Sedan"
        assert "created_at" in inserted and "updated_at" in inserted

    def test_update_sets_supplied_fields(self, mongo_store, collection):
        oid = ObjectId()
        collection.update_one.return_value = MagicMock(matched_count=1)

        mongo_store.update("cars", str(oid), {"pricePerKm": 15.0})

        query, change = collection.update_one.call_args[0]
        assert query == {"_id": oid}
        assert change["$set"]["pricePerKm"] == 15.0
        assert set(change["$set"]) == {"pricePerKm", "updated_at"}

    def test_update_unmatched_raises(self, mongo_store, collection):
        collection.update_one.return_value = MagicMock(matched_count=0)
        with pytest.raises(EntityNotFoundError):
            mongo_store.update("cars", str(ObjectId()), {"seats": 4})

    def test_update_malformed_id_raises(self, mongo_store, collection):
        with pytest.raises(EntityNotFoundError):
            mongo_store.update("cars", "not-an-id", {"seats": 4})
        collection.update_one.assert_not_called()

    def test_remove(self, mongo_store, collection):
        oid = ObjectId()
        mongo_store.remove("cars", str(oid))
        collection.delete_one.assert_called_once_with({"_id": oid})

    def test_remove_malformed_id_is_noop(self, mongo_store, collection):
        mongo_store.remove("cars", "not-an-id")
        collection.delete_one.assert_not_called()


def test_serialize_doc_converts_object_ids():
    oid, ref = ObjectId(), ObjectId()
    assert serialize_doc({"_id": oid, "ref": ref}) == {"id": str(oid), "ref": str(ref)}


def test_connect_without_settings():
    assert connect(None, "admin") is None
    assert connect("mongodb://localhost", None) is None
