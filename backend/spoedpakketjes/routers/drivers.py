from fastapi import APIRouter, Depends, HTTPException
from ..deps import get_service, get_storage
from ..schemas import Delivery, Driver, DriverCreate, DriverLocationIn, DriverPingIn
from ..services import DeliveryService
from ..storage.base import Storage

router = APIRouter(prefix="/api/drivers", tags=["drivers"])

def _move_driver(service: DeliveryService, driver_id: int, latitude: str, longitude: str) -> Driver:
    driver = service.storage.update_driver_location(driver_id, latitude, longitude)
    if not driver:
        raise HTTPException(404, "Driver not found")
    service.publish_driver_location(driver)
    return driver

@router.get("", response_model=list[Driver])
def available_drivers(storage: Storage = Depends(get_storage)):
    return storage.get_available_drivers()

@router.post("", response_model=Driver, status_code=201)
def create_driver(payload: DriverCreate, storage: Storage = Depends(get_storage)):
    return storage.create_driver(payload)

@router.post("/location", response_model=Driver)
def ping_location(payload: DriverPingIn, service: DeliveryService = Depends(get_service)):
    """Location ping from the driver app."""
    lat = payload.lat if payload.lat is not None else payload.latitude
    lng = payload.lng if payload.lng is not None else payload.longitude
    if lat is None or lng is None:
        raise HTTPException(400, "Latitude and longitude are required")
    return _move_driver(service, payload.driver_id, lat, lng)

@router.get("/{driver_id}", response_model=Driver)
def driver_detail(driver_id: int, storage: Storage = Depends(get_storage)):
    driver = storage.get_driver(driver_id)
    if not driver:
        raise HTTPException(404, "Driver not found")
    return driver

@router.put("/{driver_id}/location", response_model=Driver)
def update_location(driver_id: int, payload: DriverLocationIn, service: DeliveryService = Depends(get_service)):
    return _move_driver(service, driver_id, payload.latitude, payload.longitude)

@router.get("/{driver_id}/deliveries", response_model=list[Delivery])
def driver_deliveries(driver_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_deliveries_by_driver_id(driver_id)
