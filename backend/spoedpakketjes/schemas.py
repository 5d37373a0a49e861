import enum
from datetime import datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Annotated, Optional
from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel


class DeliveryType(str, enum.Enum):
    package = "package"
    letter = "letter"
    express = "express"


class DeliveryStatus(str, enum.Enum):
    pending = "pending"
    assigned = "assigned"
    picked_up = "picked_up"
    in_transit = "in_transit"
    delivered = "delivered"
    cancelled = "cancelled"


def _to_decimal(v) -> Decimal:
    if isinstance(v, bool):
        raise ValueError("expected a decimal number")
    try:
        d = Decimal(str(v).strip())
    except InvalidOperation:
        raise ValueError("expected a decimal number")
    if not d.is_finite():
        raise ValueError("expected a finite decimal number")
    return d


def _coordinate(limit: int):
    # 8 fraction digits, same as the Numeric(.., 8) columns
    def _inner(v):
        if v is None or v == "":
            return None
        d = _to_decimal(v)
        if abs(d) > limit:
            raise ValueError(f"must be between -{limit} and {limit}")
        d = d.quantize(Decimal("0.00000001"), rounding=ROUND_HALF_UP)
        if not d:
            return "0"
        return format(d.normalize(), "f")
    return _inner


def _quantized(places: str, upper: Optional[Decimal] = None):
    def _inner(v):
        if v is None or v == "":
            return None
        d = _to_decimal(v)
        if upper is not None and not 0 <= d <= upper:
            raise ValueError(f"must be between 0 and {upper}")
        try:
            return format(d.quantize(Decimal(places), rounding=ROUND_HALF_UP), "f")
        except InvalidOperation:
            raise ValueError("too many digits")
    return _inner


# Decimal strings: "52.3676", "12.50", "4.8"
Latitude = Annotated[Optional[str], BeforeValidator(_coordinate(90))]
Longitude = Annotated[Optional[str], BeforeValidator(_coordinate(180))]
RequiredLatitude = Annotated[str, BeforeValidator(_coordinate(90))]
RequiredLongitude = Annotated[str, BeforeValidator(_coordinate(180))]
Money = Annotated[Optional[str], BeforeValidator(_quantized("0.01"))]
Rating = Annotated[Optional[str], BeforeValidator(_quantized("0.1", upper=Decimal(5)))]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


# --- Domain records -------------------------------------------------------

class User(CamelModel):
    id: int
    username: str
    password_hash: str = Field(exclude=True)
    full_name: str
    email: str
    phone: Optional[str] = None


class Address(CamelModel):
    id: int
    user_id: Optional[int] = None
    label: str
    street: str
    city: str
    postal_code: str
    country: str = "Netherlands"
    latitude: Latitude = None
    longitude: Longitude = None


class Driver(CamelModel):
    id: int
    name: str
    phone: str
    email: str
    rating: Rating = "5.0"
    vehicle: str
    vehicle_type: str
    is_active: bool = True
    current_latitude: Latitude = None
    current_longitude: Longitude = None


class Delivery(CamelModel):
    id: int
    user_id: Optional[int] = None
    driver_id: Optional[int] = None
    order_number: str
    type: DeliveryType
    status: DeliveryStatus = DeliveryStatus.pending

    pickup_address_id: Optional[int] = None
    pickup_street: str
    pickup_city: str
    pickup_postal_code: str
    pickup_latitude: Latitude = None
    pickup_longitude: Longitude = None

    delivery_address_id: Optional[int] = None
    delivery_street: str
    delivery_city: str
    delivery_postal_code: str
    delivery_latitude: Latitude = None
    delivery_longitude: Longitude = None

    estimated_price: Money
    final_price: Money = None
    estimated_delivery_time: Optional[int] = None

    created_at: datetime
    picked_up_at: Optional[datetime] = None
    delivered_at: Optional[datetime] = None


class DeliveryWithDriver(Delivery):
    driver: Optional[Driver] = None


# --- Inputs ---------------------------------------------------------------

class UserCreate(CamelModel):
    username: str = Field(min_length=2, max_length=120)
    password: str = Field(min_length=4, max_length=255)
    full_name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=3, max_length=255)
    phone: Optional[str] = None


class UserOut(CamelModel):
    id: int
    username: str
    full_name: str
    email: str
    phone: Optional[str] = None


class LoginIn(BaseModel):
    username: str = Field(min_length=1, max_length=120)
    password: str = Field(min_length=1, max_length=255)


class TokenOut(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int
    full_name: str


class AddressCreate(CamelModel):
    user_id: Optional[int] = None
    label: str = Field(min_length=1, max_length=120)
    street: str = Field(min_length=1)
    city: str = Field(min_length=1)
    postal_code: str = Field(min_length=1)
    country: str = "Netherlands"
    latitude: Latitude = None
    longitude: Longitude = None


class DriverCreate(CamelModel):
    name: str = Field(min_length=1, max_length=255)
    phone: str = Field(min_length=1, max_length=60)
    email: str = Field(min_length=3, max_length=255)
    rating: Rating = "5.0"
    vehicle: str = Field(min_length=1)
    vehicle_type: str = Field(min_length=1)
    is_active: bool = True
    current_latitude: Latitude = None
    current_longitude: Longitude = None


class DriverLocationIn(CamelModel):
    latitude: RequiredLatitude
    longitude: RequiredLongitude


class DriverPingIn(CamelModel):
    """Location ping from the driver app; accepts lat/lng or latitude/longitude."""
    driver_id: int
    lat: Latitude = None
    lng: Longitude = None
    latitude: Latitude = None
    longitude: Longitude = None


class DeliveryCreate(CamelModel):
    user_id: Optional[int] = None
    type: DeliveryType

    pickup_address_id: Optional[int] = None
    pickup_street: str = Field(min_length=1)
    pickup_city: str = Field(min_length=1)
    pickup_postal_code: str = Field(min_length=1)
    pickup_latitude: Latitude = None
    pickup_longitude: Longitude = None

    delivery_address_id: Optional[int] = None
    delivery_street: str = Field(min_length=1)
    delivery_city: str = Field(min_length=1)
    delivery_postal_code: str = Field(min_length=1)
    delivery_latitude: Latitude = None
    delivery_longitude: Longitude = None


class NewDelivery(DeliveryCreate):
    """Priced delivery handed to storage."""
    estimated_price: Money
    estimated_delivery_time: Optional[int] = None
    status: DeliveryStatus = DeliveryStatus.pending
    driver_id: Optional[int] = None


class StatusUpdateIn(CamelModel):
    status: DeliveryStatus
    driver_id: Optional[int] = None


class AcceptIn(CamelModel):
    driver_id: int


class EstimateIn(CamelModel):
    type: DeliveryType
    pickup_latitude: Latitude = None
    pickup_longitude: Longitude = None
    delivery_latitude: Latitude = None
    delivery_longitude: Longitude = None


class EstimateOut(CamelModel):
    estimated_price: Money
    estimated_time: int
    currency: str = "EUR"


class HealthOut(BaseModel):
    status: str
    timestamp: datetime


class ConfigOut(BaseModel):
    GOOGLE_MAPS_API_KEY: Optional[str] = None
    LOCATIONIQ_API_KEY: Optional[str] = None

