from datetime import datetime
from decimal import Decimal
from sqlalchemy import String, Integer, DateTime, Enum, ForeignKey, Text, Numeric, Boolean
from sqlalchemy.orm import Mapped, mapped_column, relationship
from .db import Base
from .schemas import DeliveryStatus, DeliveryType

class User(Base):
    __tablename__ = "users"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    username: Mapped[str] = mapped_column(String(120), unique=True, index=True, nullable=False)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    full_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(String(255), index=True, nullable=False)
    phone: Mapped[str | None] = mapped_column(String(60), nullable=True)

    addresses: Mapped[list["Address"]] = relationship(back_populates="user")

class Address(Base):
    __tablename__ = "addresses"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), index=True, nullable=True)
    label: Mapped[str] = mapped_column(String(120), nullable=False)  # "Thuis", "Kantoor"
    street: Mapped[str] = mapped_column(Text, nullable=False)
    city: Mapped[str] = mapped_column(String(255), nullable=False)
    postal_code: Mapped[str] = mapped_column(String(20), nullable=False)
    country: Mapped[str] = mapped_column(String(120), default="Netherlands", nullable=False)
    latitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 8), nullable=True)
    longitude: Mapped[Decimal | None] = mapped_column(Numeric(11, 8), nullable=True)

    user: Mapped["User"] = relationship(back_populates="addresses")

class Driver(Base):
    __tablename__ = "drivers"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    phone: Mapped[str] = mapped_column(String(60), nullable=False)
    email: Mapped[str] = mapped_column(String(255), nullable=False)
    rating: Mapped[Decimal | None] = mapped_column(Numeric(2, 1), default=Decimal("5.0"), nullable=True)
    vehicle: Mapped[str] = mapped_column(String(255), nullable=False)
    vehicle_type: Mapped[str] = mapped_column(String(30), nullable=False)  # van, car, bike
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, index=True, nullable=False)
    current_latitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 8), nullable=True)
    current_longitude: Mapped[Decimal | None] = mapped_column(Numeric(11, 8), nullable=True)

    deliveries: Mapped[list["Delivery"]] = relationship(back_populates="driver")

class Delivery(Base):
    __tablename__ = "deliveries"
    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    user_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("users.id"), index=True, nullable=True)
    driver_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("drivers.id"), index=True, nullable=True)
    order_number: Mapped[str] = mapped_column(String(40), unique=True, index=True, nullable=False)  # SP2025-001
    type: Mapped[DeliveryType] = mapped_column(Enum(DeliveryType, native_enum=False, length=20), nullable=False)
    status: Mapped[DeliveryStatus] = mapped_column(
        Enum(DeliveryStatus, native_enum=False, length=20), default=DeliveryStatus.pending, nullable=False
    )

    pickup_address_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("addresses.id"), nullable=True)
    pickup_street: Mapped[str] = mapped_column(Text, nullable=False)
    pickup_city: Mapped[str] = mapped_column(String(255), nullable=False)
    pickup_postal_code: Mapped[str] = mapped_column(String(20), nullable=False)
    pickup_latitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 8), nullable=True)
    pickup_longitude: Mapped[Decimal | None] = mapped_column(Numeric(11, 8), nullable=True)

    delivery_address_id: Mapped[int | None] = mapped_column(Integer, ForeignKey("addresses.id"), nullable=True)
    delivery_street: Mapped[str] = mapped_column(Text, nullable=False)
    delivery_city: Mapped[str] = mapped_column(String(255), nullable=False)
    delivery_postal_code: Mapped[str] = mapped_column(String(20), nullable=False)
    delivery_latitude: Mapped[Decimal | None] = mapped_column(Numeric(10, 8), nullable=True)
    delivery_longitude: Mapped[Decimal | None] = mapped_column(Numeric(11, 8), nullable=True)

    estimated_price: Mapped[Decimal] = mapped_column(Numeric(8, 2), nullable=False)
    final_price: Mapped[Decimal | None] = mapped_column(Numeric(8, 2), nullable=True)
    estimated_delivery_time: Mapped[int | None] = mapped_column(Integer, nullable=True)  # minutes

    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    picked_up_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)
    delivered_at: Mapped[datetime | None] = mapped_column(DateTime, nullable=True)

    driver: Mapped["Driver"] = relationship(back_populates="deliveries")
