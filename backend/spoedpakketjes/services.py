import logging
import random
from typing import Optional
from .lifecycle import InvalidTransition, check_transition, PICKED_UP_OR_LATER
from .pricing import quote
from .schemas import Delivery, DeliveryCreate, DeliveryStatus, Driver, NewDelivery
from .sse import EventBroadcaster
from .storage.base import Storage

log = logging.getLogger(__name__)


class UnknownReference(ValueError):
    """Payload points at a user, address or driver that does not exist."""


class DeliveryService:
    def __init__(self, storage: Storage, broadcaster: Optional[EventBroadcaster] = None,
                 price_jitter: float = 0.0, auto_assign: bool = True,
                 enforce_transitions: bool = True, rng: Optional[random.Random] = None):
        self.storage = storage
        self.broadcaster = broadcaster
        self.price_jitter = price_jitter
        self.auto_assign = auto_assign
        self.enforce_transitions = enforce_transitions
        self.rng = rng or random.Random()

    def create_delivery(self, payload: DeliveryCreate) -> Delivery:
        if payload.user_id is not None and not self.storage.get_user(payload.user_id):
            raise UnknownReference(f"User {payload.user_id} not found")
        for address_id in (payload.pickup_address_id, payload.delivery_address_id):
            if address_id is not None and not self.storage.get_address(address_id):
                raise UnknownReference(f"Address {address_id} not found")

        q = quote(
            payload.type,
            payload.pickup_latitude, payload.pickup_longitude,
            payload.delivery_latitude, payload.delivery_longitude,
            jitter=self.price_jitter, rng=self.rng,
        )
        delivery = self.storage.create_delivery(NewDelivery(
            **payload.model_dump(),
            estimated_price=str(q.price),
            estimated_delivery_time=q.minutes,
            status=DeliveryStatus.pending,
        ))
        log.info("created delivery %s (%s, %s EUR)", delivery.order_number, delivery.type.value, delivery.estimated_price)

        if self.auto_assign:
            drivers = self.storage.get_available_drivers()
            if drivers:
                delivery = self.storage.update_delivery_status(
                    delivery.id, DeliveryStatus.assigned, drivers[0].id
                )
                log.info("assigned delivery %s to driver %s", delivery.order_number, drivers[0].id)

        self._publish(delivery)
        return delivery

    def change_status(self, delivery_id: int, status: DeliveryStatus,
                      driver_id: Optional[int] = None) -> Optional[Delivery]:
        """Move a delivery to ``status``; returns None for an unknown id.

        Raises InvalidTransition for a backwards move and UnknownReference for
        a driver id that does not exist.
        """
        status = DeliveryStatus(status)
        delivery = self.storage.get_delivery(delivery_id)
        if delivery is None:
            return None
        if driver_id is not None and not self.storage.get_driver(driver_id):
            raise UnknownReference(f"Driver {driver_id} not found")

        if self.enforce_transitions:
            try:
                check_transition(delivery.status, status,
                                 has_driver=driver_id is not None or delivery.driver_id is not None)
            except InvalidTransition as e:
                log.warning("delivery %s: %s", delivery_id, e)
                raise

        delivery = self.storage.update_delivery_status(delivery_id, status, driver_id)
        if status in PICKED_UP_OR_LATER and delivery.picked_up_at is None:
            delivery = self.storage.update_delivery_pickup_time(delivery_id)
        if status == DeliveryStatus.delivered:
            if delivery.delivered_at is None:
                delivery = self.storage.update_delivery_delivered_time(delivery_id)
            if delivery.final_price is None:
                delivery = self.storage.update_delivery_final_price(delivery_id, delivery.estimated_price)

        log.info("delivery %s is now %s", delivery.order_number, status.value)
        self._publish(delivery)
        return delivery

    def driver_for(self, delivery: Delivery) -> Optional[Driver]:
        if delivery.driver_id is None:
            return None
        return self.storage.get_driver(delivery.driver_id)

    def publish_driver_location(self, driver: Driver):
        if self.broadcaster is None:
            return
        self.broadcaster.publish({
            "type": "DRIVER_LOCATION",
            "driver_id": driver.id,
            "lat": driver.current_latitude,
            "lng": driver.current_longitude,
            "name": driver.name,
        })

    def _publish(self, delivery: Delivery):
        if self.broadcaster is None:
            return
        self.broadcaster.publish({
            "type": "DELIVERY_STATUS",
            "delivery_id": delivery.id,
            "order_number": delivery.order_number,
            "status": delivery.status.value,
            "driver_id": delivery.driver_id,
            "picked_up_at": delivery.picked_up_at.isoformat() if delivery.picked_up_at else None,
            "delivered_at": delivery.delivered_at.isoformat() if delivery.delivered_at else None,
        })
