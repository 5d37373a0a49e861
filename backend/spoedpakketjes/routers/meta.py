from fastapi import APIRouter, Depends
from ..deps import get_settings, get_service
from ..pricing import quote
from ..schemas import ConfigOut, EstimateIn, EstimateOut, HealthOut
from ..services import DeliveryService
from ..settings import Settings
from ..utils import utcnow

router = APIRouter(prefix="/api", tags=["meta"])

@router.post("/estimate", response_model=EstimateOut)
def estimate(payload: EstimateIn, service: DeliveryService = Depends(get_service)):
    q = quote(
        payload.type,
        payload.pickup_latitude, payload.pickup_longitude,
        payload.delivery_latitude, payload.delivery_longitude,
        jitter=service.price_jitter, rng=service.rng,
    )
    return EstimateOut(estimated_price=str(q.price), estimated_time=q.minutes)

@router.get("/health", response_model=HealthOut)
def health():
    return HealthOut(status="ok", timestamp=utcnow())

@router.get("/config", response_model=ConfigOut)
def public_config(settings: Settings = Depends(get_settings)):
    return ConfigOut(
        GOOGLE_MAPS_API_KEY=settings.GOOGLE_MAPS_API_KEY,
        LOCATIONIQ_API_KEY=settings.LOCATIONIQ_API_KEY,
    )

@router.get("/locationiq-key", response_model=dict)
def locationiq_key(settings: Settings = Depends(get_settings)):
    return {"key": settings.LOCATIONIQ_API_KEY or ""}
