"""Pytest configuration and shared fixtures."""

import io
from typing import Any, Dict

import pytest
from starlette.datastructures import Headers, UploadFile

from catalog import CatalogStore
from config import AdminConfig
from database import InMemoryDocumentStore
from gateway import SyncGateway
from schemas import CarListing, SpecialAd
from screens import AddsScreen, CarsScreen

PNG_BYTES = b"\x89PNG\r\n\x1a\n\x00\x00\x00\rIHDR"


def make_upload(content: bytes = PNG_BYTES, filename: str = "car.png",
                content_type: str = "image/png") -> UploadFile:
    return UploadFile(
        file=io.BytesIO(content),
        filename=filename,
        headers=Headers({"content-type": content_type}),
    )


@pytest.fixture
def upload():
    """Factory for in-memory picture uploads."""
    return make_upload


@pytest.fixture
def store() -> InMemoryDocumentStore:
    return InMemoryDocumentStore()


@pytest.fixture
def cars_gateway(store) -> SyncGateway:
    return SyncGateway(store, "cars", CatalogStore(CarListing))


@pytest.fixture
def adds_gateway(store) -> SyncGateway:
    return SyncGateway(store, "adds", CatalogStore(SpecialAd))


@pytest.fixture
def cars_screen(cars_gateway) -> CarsScreen:
    return CarsScreen(cars_gateway, tariffs=True)


@pytest.fixture
def adds_screen(adds_gateway) -> AddsScreen:
    return AddsScreen(adds_gateway)


@pytest.fixture
def sample_tariffs() -> Dict[str, Dict[str, str]]:
    return {
        "fullDayTariffs": {
            "12HrsRent": "1500",
            "24HrsRent": "2800",
            "perKm": "12",
            "perExtraHour": "150",
            "12HrsDriverBatta": "300",
            "24HrsDriverBatta": "500",
        },
        "localTrips": {
            "4Hrs40Km": "900",
            "8Hrs80Km": "1700",
            "perExtraKm": "14",
            "perExtraHour": "120",
        },
    }


@pytest.fixture
def sedan_document(sample_tariffs) -> Dict[str, Any]:
    return {
        "name": "Sedan",
        "seats": 4,
        "pricePerKm": 12.5,
        "description": "Compact",
        "image": "data:image/png;base64,AAAA",
        "tariffs": sample_tariffs,
    }


@pytest.fixture
def client(store):
    """Test client for the admin API, backed by a fresh in-memory store."""
    from fastapi.testclient import TestClient

    from main import app, build_screens

    app.state.screens = build_screens(store, AdminConfig())
    return TestClient(app)
