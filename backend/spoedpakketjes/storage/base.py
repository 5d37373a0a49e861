"""Storage contract shared by the in-memory and the SQL backend.

Lookups by id return ``None`` when nothing matches; callers at the HTTP
boundary turn that into a 404. Sequences come back ordered by id.
"""
from abc import ABC, abstractmethod
from typing import Optional, List, Union
from ..schemas import (
    User, Address, Driver, Delivery, DeliveryStatus,
    AddressCreate, DriverCreate, NewDelivery,
)


class Storage(ABC):

    # Users
    @abstractmethod
    def get_user(self, user_id: int) -> Optional[User]: ...

    @abstractmethod
    def get_user_by_username(self, username: str) -> Optional[User]: ...

    @abstractmethod
    def create_user(self, username: str, password_hash: str, full_name: str,
                    email: str, phone: Optional[str] = None) -> User: ...

    # Addresses
    @abstractmethod
    def get_address(self, address_id: int) -> Optional[Address]: ...

    @abstractmethod
    def get_addresses_by_user_id(self, user_id: int) -> List[Address]: ...

    @abstractmethod
    def create_address(self, data: AddressCreate) -> Address: ...

    # Drivers
    @abstractmethod
    def get_driver(self, driver_id: int) -> Optional[Driver]: ...

    @abstractmethod
    def get_available_drivers(self) -> List[Driver]:
        """Drivers whose active flag is set."""

    @abstractmethod
    def create_driver(self, data: DriverCreate) -> Driver: ...

    @abstractmethod
    def update_driver_location(self, driver_id: int, latitude: str, longitude: str) -> Optional[Driver]: ...

    # Deliveries
    @abstractmethod
    def get_delivery(self, delivery_id: int) -> Optional[Delivery]: ...

    @abstractmethod
    def get_all_deliveries(self) -> List[Delivery]: ...

    @abstractmethod
    def get_deliveries_by_user_id(self, user_id: int) -> List[Delivery]: ...

    @abstractmethod
    def get_deliveries_by_driver_id(self, driver_id: int) -> List[Delivery]: ...

    @abstractmethod
    def create_delivery(self, data: NewDelivery) -> Delivery:
        """Assign id and order number, stamp ``created_at``; both progress
        timestamps start out null."""

    @abstractmethod
    def update_delivery_status(self, delivery_id: int, status: Union[DeliveryStatus, str],
                               driver_id: Optional[int] = None) -> Optional[Delivery]:
        """Set the status; a driver id, when given, is assigned as well."""

    @abstractmethod
    def update_delivery_pickup_time(self, delivery_id: int) -> Optional[Delivery]: ...

    @abstractmethod
    def update_delivery_delivered_time(self, delivery_id: int) -> Optional[Delivery]: ...

    @abstractmethod
    def update_delivery_final_price(self, delivery_id: int, price: str) -> Optional[Delivery]: ...
