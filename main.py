import json
import logging
from typing import Any, Dict, Optional

from fastapi import Depends, FastAPI, File, Form, HTTPException, Request, UploadFile
from fastapi.middleware.cors import CORSMiddleware

from catalog import CatalogStore
from config import AdminConfig, load_config
from database import DocumentStore, InMemoryDocumentStore, MongoDocumentStore, db
from exceptions import EntityNotFoundError
from forms import AttachImage, EditField, EditTariff, FormState
from gateway import SyncGateway
from schemas import CarListing, SpecialAd
from screens import AddsScreen, AdminScreen, CarsScreen

config = load_config()

logging.basicConfig(
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    level=config.log_level,
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Car Rental Admin API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def build_screens(store: DocumentStore, settings: AdminConfig) -> Dict[str, AdminScreen]:
    cars = CarsScreen(
        SyncGateway(store, settings.cars_collection, CatalogStore(CarListing)),
        tariffs=settings.car_tariffs,
    )
    adds = AddsScreen(SyncGateway(store, settings.adds_collection, CatalogStore(SpecialAd)))
    return {"cars": cars, "adds": adds}


if db is None:
    logger.warning("Database not configured, using in-memory store")
    document_store: DocumentStore = InMemoryDocumentStore()
else:
    document_store = MongoDocumentStore(db)

app.state.screens = build_screens(document_store, config)


def get_cars_screen(request: Request) -> CarsScreen:
    return request.app.state.screens["cars"]


def get_adds_screen(request: Request) -> AddsScreen:
    return request.app.state.screens["adds"]


# Utilities
def upload_or_none(image: Any) -> Optional[UploadFile]:
    # Browsers send an empty part when no file was picked.
    if not hasattr(image, "read") or not getattr(image, "filename", None):
        return None
    return image


def listing_response(screen: AdminScreen) -> Dict[str, Any]:
    items = screen.catalog.documents()
    return {"items": items, "cards": screen.catalog.render(), "count": len(items)}


def mutation_response(screen: AdminScreen, saved: bool) -> Dict[str, Any]:
    items = screen.catalog.documents()
    return {"status": "ok" if saved else "error", "items": items, "count": len(items)}


def fill_car_form(
    screen: CarsScreen,
    state: FormState,
    name: Optional[str],
    seats: Optional[str],
    price_per_km: Optional[str],
    description: Optional[str],
    tariffs: Optional[str],
) -> FormState:
    values = {"name": name, "seats": seats, "pricePerKm": price_per_km, "description": description}
    for field_name, value in values.items():
        if value is not None:
            state = screen.dispatch(state, EditField(name=field_name, value=value))

    if tariffs:
        try:
            groups = json.loads(tariffs)
            if not isinstance(groups, dict):
                raise ValueError("tariffs must be an object")
            for group, rates in groups.items():
                if not isinstance(rates, dict):
                    raise ValueError(f"{group} must be an object")
                for key, value in rates.items():
                    text = "" if value is None else str(value)
                    state = screen.dispatch(state, EditTariff(group=group, key=key, value=text))
        except ValueError as e:
            raise HTTPException(status_code=400, detail=f"Invalid tariffs: {e}")
    return state


@app.get("/")
def read_root():
    return {"message": "Car Rental Admin Running"}


@app.get("/api/admin/cars")
async def list_cars(screen: CarsScreen = Depends(get_cars_screen)):
    await screen.mount()
    return listing_response(screen)


@app.get("/api/admin/cars/{car_id}")
async def get_car(car_id: str, screen: CarsScreen = Depends(get_cars_screen)):
    await screen.mount()
    car = screen.catalog.find(car_id)
    if car is None:
        raise HTTPException(status_code=404, detail="Car not found")
    return car.model_dump(by_alias=True, exclude_none=True)


@app.post("/api/admin/cars")
async def create_car(
    image: Optional[UploadFile] = File(None),
    name: str = Form(""),
    seats: str = Form(""),
    pricePerKm: str = Form(""),
    description: str = Form(""),
    tariffs: Optional[str] = Form(None),
    screen: CarsScreen = Depends(get_cars_screen),
):
    state = screen.open_add()
    state = fill_car_form(screen, state, name, seats, pricePerKm, description, tariffs)
    state = screen.dispatch(state, AttachImage(upload=upload_or_none(image)))
    _, saved = await screen.submit(state)
    return mutation_response(screen, saved)


@app.patch("/api/admin/cars/{car_id}")
async def update_car(
    car_id: str,
    image: Optional[UploadFile] = File(None),
    name: Optional[str] = Form(None),
    seats: Optional[str] = Form(None),
    pricePerKm: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    tariffs: Optional[str] = Form(None),
    screen: CarsScreen = Depends(get_cars_screen),
):
    await screen.mount()
    try:
        state = screen.open_edit(car_id)
    except EntityNotFoundError:
        raise HTTPException(status_code=404, detail="Car not found")
    state = fill_car_form(screen, state, name, seats, pricePerKm, description, tariffs)
    state = screen.dispatch(state, AttachImage(upload=upload_or_none(image)))
    _, saved = await screen.submit(state)
    return mutation_response(screen, saved)


@app.delete("/api/admin/cars/{car_id}")
async def delete_car(car_id: str, screen: CarsScreen = Depends(get_cars_screen)):
    saved = await screen.delete(car_id)
    return mutation_response(screen, saved)


@app.get("/api/admin/adds")
async def list_adds(screen: AddsScreen = Depends(get_adds_screen)):
    await screen.mount()
    return listing_response(screen)


@app.post("/api/admin/adds")
async def create_add(
    image: Optional[UploadFile] = File(None),
    screen: AddsScreen = Depends(get_adds_screen),
):
    state = screen.open_add()
    state = screen.dispatch(state, AttachImage(upload=upload_or_none(image)))
    _, saved = await screen.submit(state)
    return mutation_response(screen, saved)


@app.patch("/api/admin/adds/{ad_id}")
async def update_add(
    ad_id: str,
    image: Optional[UploadFile] = File(None),
    screen: AddsScreen = Depends(get_adds_screen),
):
    await screen.mount()
    try:
        state = screen.open_edit(ad_id)
    except EntityNotFoundError:
        raise HTTPException(status_code=404, detail="Ad not found")
    state = screen.dispatch(state, AttachImage(upload=upload_or_none(image)))
    _, saved = await screen.submit(state)
    return mutation_response(screen, saved)


@app.delete("/api/admin/adds/{ad_id}")
async def delete_add(ad_id: str, screen: AddsScreen = Depends(get_adds_screen)):
    saved = await screen.delete(ad_id)
    return mutation_response(screen, saved)


@app.get("/test")
def test_database():
    response = {
        "backend": "✅ Running",
        "database": "❌ Not Available",
        "database_url": None,
        "database_name": None,
        "connection_status": "Not Connected",
        "collections": [],
        "car_tariffs": config.car_tariffs,
    }

    try:
        if db is not None:
            response["database"] = "✅ Connected & Working"
            response["database_name"] = db.name
            response["connection_status"] = "Connected"
            try:
                collections = db.list_collection_names()
                response["collections"] = collections[:10]
            except Exception as e:
                response["database"] = f"⚠️ Connected but Error: {str(e)[:50]}"
        else:
            response["database"] = "❌ Not Configured (in-memory store)"
    except Exception as e:
        response["database"] = f"❌ Error: {str(e)[:50]}"

    # Env flags
    response["database_url"] = "✅ Set" if config.database_url else "❌ Not Set"
    response["database_name"] = "✅ Set" if config.database_name else "❌ Not Set"
    return response


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=config.port)
