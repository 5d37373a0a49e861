import uuid
from decimal import Decimal
from typing import Optional, List
from sqlalchemy import select
from sqlalchemy.orm import Session, sessionmaker
from .. import models
from ..schemas import (
    User, Address, Driver, Delivery, DeliveryStatus,
    AddressCreate, DriverCreate, NewDelivery,
)
from ..utils import utcnow, order_number
from .base import Storage


def _dec(v: Optional[str]) -> Optional[Decimal]:
    return Decimal(v) if v is not None else None


class SqlStorage(Storage):
    """SQLAlchemy-backed storage, one short session per call."""

    def __init__(self, session_factory: sessionmaker):
        self._session_factory = session_factory

    def _session(self) -> Session:
        return self._session_factory()

    # Users
    def get_user(self, user_id: int) -> Optional[User]:
        with self._session() as db:
            row = db.get(models.User, user_id)
            return User.model_validate(row) if row else None

    def get_user_by_username(self, username: str) -> Optional[User]:
        with self._session() as db:
            row = db.scalars(select(models.User).where(models.User.username == username)).first()
            return User.model_validate(row) if row else None

    def create_user(self, username, password_hash, full_name, email, phone=None) -> User:
        with self._session() as db:
            row = models.User(username=username, password_hash=password_hash,
                              full_name=full_name, email=email, phone=phone)
            db.add(row); db.commit(); db.refresh(row)
            return User.model_validate(row)

    # Addresses
    def get_address(self, address_id: int) -> Optional[Address]:
        with self._session() as db:
            row = db.get(models.Address, address_id)
            return Address.model_validate(row) if row else None

    def get_addresses_by_user_id(self, user_id: int) -> List[Address]:
        with self._session() as db:
            rows = db.scalars(
                select(models.Address).where(models.Address.user_id == user_id).order_by(models.Address.id)
            ).all()
            return [Address.model_validate(r) for r in rows]

    def create_address(self, data: AddressCreate) -> Address:
        with self._session() as db:
            fields = data.model_dump()
            fields["latitude"] = _dec(fields["latitude"])
            fields["longitude"] = _dec(fields["longitude"])
            row = models.Address(**fields)
            db.add(row); db.commit(); db.refresh(row)
            return Address.model_validate(row)

    # Drivers
    def get_driver(self, driver_id: int) -> Optional[Driver]:
        with self._session() as db:
            row = db.get(models.Driver, driver_id)
            return Driver.model_validate(row) if row else None

    def get_available_drivers(self) -> List[Driver]:
        with self._session() as db:
            rows = db.scalars(
                select(models.Driver).where(models.Driver.is_active.is_(True)).order_by(models.Driver.id)
            ).all()
            return [Driver.model_validate(r) for r in rows]

    def create_driver(self, data: DriverCreate) -> Driver:
        with self._session() as db:
            fields = data.model_dump()
            for k in ("rating", "current_latitude", "current_longitude"):
                fields[k] = _dec(fields[k])
            row = models.Driver(**fields)
            db.add(row); db.commit(); db.refresh(row)
            return Driver.model_validate(row)

    def update_driver_location(self, driver_id, latitude, longitude) -> Optional[Driver]:
        with self._session() as db:
            row = db.get(models.Driver, driver_id)
            if not row:
                return None
            row.current_latitude = _dec(latitude)
            row.current_longitude = _dec(longitude)
            db.commit(); db.refresh(row)
            return Driver.model_validate(row)

    # Deliveries
    def get_delivery(self, delivery_id: int) -> Optional[Delivery]:
        with self._session() as db:
            row = db.get(models.Delivery, delivery_id)
            return Delivery.model_validate(row) if row else None

    def _deliveries_where(self, *criteria) -> List[Delivery]:
        with self._session() as db:
            rows = db.scalars(select(models.Delivery).where(*criteria).order_by(models.Delivery.id)).all()
            return [Delivery.model_validate(r) for r in rows]

    def get_all_deliveries(self) -> List[Delivery]:
        return self._deliveries_where()

    def get_deliveries_by_user_id(self, user_id: int) -> List[Delivery]:
        return self._deliveries_where(models.Delivery.user_id == user_id)

    def get_deliveries_by_driver_id(self, driver_id: int) -> List[Delivery]:
        return self._deliveries_where(models.Delivery.driver_id == driver_id)

    def create_delivery(self, data: NewDelivery) -> Delivery:
        fields = data.model_dump()
        for k in ("pickup_latitude", "pickup_longitude", "delivery_latitude",
                  "delivery_longitude", "estimated_price"):
            fields[k] = _dec(fields[k])
        with self._session() as db:
            row = models.Delivery(
                **fields,
                # unique placeholder until the id is known
                order_number=f"tmp-{uuid.uuid4().hex}",
                created_at=utcnow(),
                picked_up_at=None,
                delivered_at=None,
            )
            db.add(row)
            db.flush()
            row.order_number = order_number(row.id, row.created_at)
            db.commit(); db.refresh(row)
            return Delivery.model_validate(row)

    def _update_delivery(self, delivery_id: int, **changes) -> Optional[Delivery]:
        with self._session() as db:
            row = db.get(models.Delivery, delivery_id)
            if not row:
                return None
            for k, v in changes.items():
                setattr(row, k, v)
            db.commit(); db.refresh(row)
            return Delivery.model_validate(row)

    def update_delivery_status(self, delivery_id, status, driver_id=None) -> Optional[Delivery]:
        changes = {"status": DeliveryStatus(status)}
        if driver_id is not None:
            changes["driver_id"] = driver_id
        return self._update_delivery(delivery_id, **changes)

    def update_delivery_pickup_time(self, delivery_id) -> Optional[Delivery]:
        return self._update_delivery(delivery_id, picked_up_at=utcnow())

    def update_delivery_delivered_time(self, delivery_id) -> Optional[Delivery]:
        return self._update_delivery(delivery_id, delivered_at=utcnow())

    def update_delivery_final_price(self, delivery_id, price) -> Optional[Delivery]:
        return self._update_delivery(delivery_id, final_price=_dec(price))
