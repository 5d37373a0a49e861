from fastapi import APIRouter, Depends, HTTPException
from fastapi.concurrency import run_in_threadpool
from ..deps import get_service, get_simulator, get_storage
from ..lifecycle import InvalidTransition
from ..schemas import (
    AcceptIn, Delivery, DeliveryCreate, DeliveryStatus, DeliveryWithDriver, StatusUpdateIn,
)
from ..services import DeliveryService, UnknownReference
from ..simulation import ProgressSimulator
from ..storage.base import Storage

router = APIRouter(prefix="/api/deliveries", tags=["deliveries"])

async def _change_status(service: DeliveryService, simulator: ProgressSimulator | None,
                         delivery_id: int, status: DeliveryStatus, driver_id: int | None) -> Delivery:
    # an explicit update always wins over a pending simulated step
    if simulator is not None:
        simulator.cancel(delivery_id)
    try:
        delivery = await run_in_threadpool(service.change_status, delivery_id, status, driver_id)
    except UnknownReference as e:
        raise HTTPException(400, str(e))
    except InvalidTransition as e:
        raise HTTPException(409, str(e))
    if not delivery:
        raise HTTPException(404, "Delivery not found")
    return delivery

@router.get("", response_model=list[Delivery])
def all_deliveries(storage: Storage = Depends(get_storage)):
    return storage.get_all_deliveries()

@router.post("", response_model=Delivery)
async def create_delivery(
    payload: DeliveryCreate,
    service: DeliveryService = Depends(get_service),
    simulator: ProgressSimulator | None = Depends(get_simulator),
):
    try:
        delivery = await run_in_threadpool(service.create_delivery, payload)
    except UnknownReference as e:
        raise HTTPException(400, str(e))
    if simulator is not None and delivery.status == DeliveryStatus.assigned:
        simulator.start(delivery.id)
    return delivery

@router.get("/user/{user_id}", response_model=list[Delivery])
def user_deliveries(user_id: int, storage: Storage = Depends(get_storage)):
    return storage.get_deliveries_by_user_id(user_id)

@router.get("/{delivery_id}", response_model=DeliveryWithDriver)
def delivery_detail(delivery_id: int, service: DeliveryService = Depends(get_service)):
    delivery = service.storage.get_delivery(delivery_id)
    if not delivery:
        raise HTTPException(404, "Delivery not found")
    return DeliveryWithDriver(**delivery.model_dump(), driver=service.driver_for(delivery))

@router.patch("/{delivery_id}/status", response_model=Delivery)
async def update_status(
    delivery_id: int,
    payload: StatusUpdateIn,
    service: DeliveryService = Depends(get_service),
    simulator: ProgressSimulator | None = Depends(get_simulator),
):
    return await _change_status(service, simulator, delivery_id, payload.status, payload.driver_id)

# some clients POST status updates
router.add_api_route("/{delivery_id}/status", update_status, methods=["POST"], response_model=Delivery)

@router.post("/{delivery_id}/accept", response_model=Delivery)
async def accept_delivery(
    delivery_id: int,
    payload: AcceptIn,
    service: DeliveryService = Depends(get_service),
    simulator: ProgressSimulator | None = Depends(get_simulator),
):
    """Driver takes the delivery."""
    return await _change_status(service, simulator, delivery_id, DeliveryStatus.assigned, payload.driver_id)
