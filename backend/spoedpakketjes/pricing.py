"""Price and time quotes for a delivery request."""
import math
import random
from dataclasses import dataclass
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional
from .schemas import DeliveryType

EARTH_RADIUS_KM = 6371.0
PRICE_PER_KM = Decimal("0.50")

BASE_PRICES = {
    DeliveryType.letter: Decimal("8.50"),
    DeliveryType.package: Decimal("12.50"),
    DeliveryType.express: Decimal("15.75"),
}

EXPRESS_MINUTES = 30
STANDARD_MINUTES = 45


@dataclass(frozen=True)
class Quote:
    price: Decimal
    minutes: int
    distance_km: Optional[float] = None


def haversine_km(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Great-circle distance in kilometres between two points given in degrees."""
    d_lat = math.radians(lat2 - lat1)
    d_lon = math.radians(lon2 - lon1)
    a = (math.sin(d_lat / 2) ** 2
         + math.cos(math.radians(lat1)) * math.cos(math.radians(lat2)) * math.sin(d_lon / 2) ** 2)
    a = min(a, 1.0)  # rounding can push near-antipodal points just past 1
    return EARTH_RADIUS_KM * 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))


def estimated_minutes(delivery_type: DeliveryType) -> int:
    return EXPRESS_MINUTES if delivery_type == DeliveryType.express else STANDARD_MINUTES


def quote(delivery_type: DeliveryType,
          pickup_latitude=None, pickup_longitude=None,
          delivery_latitude=None, delivery_longitude=None,
          jitter: float = 0.0, rng: Optional[random.Random] = None) -> Quote:
    """Base price by type, 0.50/km when all four coordinates are known, plus
    a uniform surcharge in ``[0, jitter]``."""
    price = BASE_PRICES[DeliveryType(delivery_type)]

    distance = None
    coords = (pickup_latitude, pickup_longitude, delivery_latitude, delivery_longitude)
    if all(c is not None for c in coords):
        distance = haversine_km(*(float(c) for c in coords))
        price += Decimal(str(distance)) * PRICE_PER_KM

    if jitter > 0:
        price += Decimal(str((rng or random).uniform(0, jitter)))

    return Quote(
        price=price.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP),
        minutes=estimated_minutes(delivery_type),
        distance_km=distance,
    )
