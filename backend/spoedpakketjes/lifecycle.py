from .schemas import DeliveryStatus

FLOW = [
    DeliveryStatus.pending,
    DeliveryStatus.assigned,
    DeliveryStatus.picked_up,
    DeliveryStatus.in_transit,
    DeliveryStatus.delivered,
]
TERMINAL = {DeliveryStatus.delivered, DeliveryStatus.cancelled}
NEEDS_DRIVER = set(FLOW[1:])
PICKED_UP_OR_LATER = set(FLOW[2:])


class InvalidTransition(Exception):
    def __init__(self, current: DeliveryStatus, requested: DeliveryStatus, reason: str):
        self.current = current
        self.requested = requested
        super().__init__(f"Cannot move delivery from {current.value} to {requested.value}: {reason}")


def check_transition(current: DeliveryStatus, requested: DeliveryStatus, has_driver: bool) -> None:
    """Forward-only walk through FLOW; cancelled from any open status.

    Re-setting the current status is allowed (driver reassignment).
    """
    current, requested = DeliveryStatus(current), DeliveryStatus(requested)
    if requested in NEEDS_DRIVER and not has_driver:
        raise InvalidTransition(current, requested, "no driver assigned")
    if requested == current:
        return
    if current in TERMINAL:
        raise InvalidTransition(current, requested, "delivery is closed")
    if requested == DeliveryStatus.cancelled:
        return
    if FLOW.index(requested) < FLOW.index(current):
        raise InvalidTransition(current, requested, "status can only move forward")
