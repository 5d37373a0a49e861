import threading
from typing import Dict, Optional, List
from ..schemas import (
    User, Address, Driver, Delivery, DeliveryStatus,
    AddressCreate, DriverCreate, NewDelivery,
)
from ..utils import utcnow, order_number
from .base import Storage


class MemStorage(Storage):
    """Dict-backed storage; each instance owns its records and id counters."""

    def __init__(self):
        self._lock = threading.Lock()
        self._users: Dict[int, User] = {}
        self._addresses: Dict[int, Address] = {}
        self._drivers: Dict[int, Driver] = {}
        self._deliveries: Dict[int, Delivery] = {}
        self._next_id = {"user": 1, "address": 1, "driver": 1, "delivery": 1}

    def _take_id(self, kind: str) -> int:
        n = self._next_id[kind]
        self._next_id[kind] = n + 1
        return n

    @staticmethod
    def _copy(record):
        return record.model_copy() if record is not None else None

    @staticmethod
    def _sorted(records):
        return [r.model_copy() for r in sorted(records, key=lambda r: r.id)]

    # Users
    def get_user(self, user_id: int) -> Optional[User]:
        return self._copy(self._users.get(user_id))

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self._copy(next((u for u in self._users.values() if u.username == username), None))

    def create_user(self, username, password_hash, full_name, email, phone=None) -> User:
        with self._lock:
            user = User(id=self._take_id("user"), username=username, password_hash=password_hash,
                        full_name=full_name, email=email, phone=phone)
            self._users[user.id] = user
        return user.model_copy()

    # Addresses
    def get_address(self, address_id: int) -> Optional[Address]:
        return self._copy(self._addresses.get(address_id))

    def get_addresses_by_user_id(self, user_id: int) -> List[Address]:
        return self._sorted(a for a in self._addresses.values() if a.user_id == user_id)

    def create_address(self, data: AddressCreate) -> Address:
        with self._lock:
            address = Address(id=self._take_id("address"), **data.model_dump())
            self._addresses[address.id] = address
        return address.model_copy()

    # Drivers
    def get_driver(self, driver_id: int) -> Optional[Driver]:
        return self._copy(self._drivers.get(driver_id))

    def get_available_drivers(self) -> List[Driver]:
        return self._sorted(d for d in self._drivers.values() if d.is_active)

    def create_driver(self, data: DriverCreate) -> Driver:
        with self._lock:
            driver = Driver(id=self._take_id("driver"), **data.model_dump())
            self._drivers[driver.id] = driver
        return driver.model_copy()

    def update_driver_location(self, driver_id, latitude, longitude) -> Optional[Driver]:
        return self._update(self._drivers, Driver, driver_id,
                            current_latitude=latitude, current_longitude=longitude)

    # Deliveries
    def get_delivery(self, delivery_id: int) -> Optional[Delivery]:
        return self._copy(self._deliveries.get(delivery_id))

    def get_all_deliveries(self) -> List[Delivery]:
        return self._sorted(self._deliveries.values())

    def get_deliveries_by_user_id(self, user_id: int) -> List[Delivery]:
        return self._sorted(d for d in self._deliveries.values() if d.user_id == user_id)

    def get_deliveries_by_driver_id(self, driver_id: int) -> List[Delivery]:
        return self._sorted(d for d in self._deliveries.values() if d.driver_id == driver_id)

    def create_delivery(self, data: NewDelivery) -> Delivery:
        with self._lock:
            delivery_id = self._take_id("delivery")
            created_at = utcnow()
            delivery = Delivery(
                **data.model_dump(),
                id=delivery_id,
                order_number=order_number(delivery_id, created_at),
                created_at=created_at,
                picked_up_at=None,
                delivered_at=None,
            )
            self._deliveries[delivery_id] = delivery
        return delivery.model_copy()

    def update_delivery_status(self, delivery_id, status, driver_id=None) -> Optional[Delivery]:
        changes = {"status": DeliveryStatus(status)}
        if driver_id is not None:
            changes["driver_id"] = driver_id
        return self._update(self._deliveries, Delivery, delivery_id, **changes)

    def update_delivery_pickup_time(self, delivery_id) -> Optional[Delivery]:
        return self._update(self._deliveries, Delivery, delivery_id, picked_up_at=utcnow())

    def update_delivery_delivered_time(self, delivery_id) -> Optional[Delivery]:
        return self._update(self._deliveries, Delivery, delivery_id, delivered_at=utcnow())

    def update_delivery_final_price(self, delivery_id, price) -> Optional[Delivery]:
        return self._update(self._deliveries, Delivery, delivery_id, final_price=price)

    def _update(self, table: dict, model, record_id: int, **changes):
        with self._lock:
            current = table.get(record_id)
            if current is None:
                return None
            # re-validate so decimal strings get normalized like on create
            updated = model.model_validate({**current.model_dump(), **changes})
            table[record_id] = updated
        return updated.model_copy()
