"""Demo-only progress: an assigned delivery gets picked up and goes in transit
on its own after fixed delays.

Each delivery has at most one pending step. Explicit status updates cancel it,
and a step that finds the delivery in an unexpected status does nothing.
Timers live on the event loop; the storage work of a step runs in the default
executor so a database-backed store never blocks the loop.
"""
import asyncio
import functools
import logging
import threading
from typing import Callable, Dict, Optional
from .lifecycle import InvalidTransition
from .schemas import DeliveryStatus

log = logging.getLogger(__name__)


def _loop_call_later(delay: float, callback: Callable, *args):
    return asyncio.get_running_loop().call_later(delay, callback, *args)


def _in_executor(fn: Callable, *args, done: Callable):
    """Run ``fn`` off the loop, then hand its result to ``done`` on the loop."""
    def _finished(fut):
        if fut.cancelled():
            return
        exc = fut.exception()
        if exc is not None:
            log.error("simulated step failed", exc_info=exc)
            return
        done(fut.result())

    asyncio.get_running_loop().run_in_executor(None, fn, *args).add_done_callback(_finished)


class ProgressSimulator:
    def __init__(self, service, pickup_delay: float = 5.0, transit_delay: float = 5.0,
                 call_later: Optional[Callable] = None, run_blocking: Optional[Callable] = None):
        self.service = service
        self.pickup_delay = pickup_delay
        self.transit_delay = transit_delay
        self._call_later = call_later or _loop_call_later
        self._run_blocking = run_blocking or _in_executor
        self._pending: Dict[int, object] = {}
        self._lock = threading.Lock()

    def start(self, delivery_id: int):
        """Schedule assigned -> picked_up; must run on the event loop."""
        self._schedule(delivery_id, self.pickup_delay,
                       DeliveryStatus.assigned, DeliveryStatus.picked_up)

    def cancel(self, delivery_id: int) -> bool:
        with self._lock:
            handle = self._pending.pop(delivery_id, None)
        if handle is None:
            return False
        handle.cancel()
        log.debug("cancelled simulated progress for delivery %s", delivery_id)
        return True

    def shutdown(self):
        with self._lock:
            handles = list(self._pending.values())
            self._pending.clear()
        for h in handles:
            h.cancel()

    def is_scheduled(self, delivery_id: int) -> bool:
        return delivery_id in self._pending

    def _schedule(self, delivery_id, delay, expected, target):
        self.cancel(delivery_id)
        handle = self._call_later(delay, self._step, delivery_id, expected, target)
        with self._lock:
            self._pending[delivery_id] = handle

    def _step(self, delivery_id: int, expected: DeliveryStatus, target: DeliveryStatus):
        with self._lock:
            self._pending.pop(delivery_id, None)
        self._run_blocking(self._advance, delivery_id, expected, target,
                           done=functools.partial(self._after_step, delivery_id, target))

    def _advance(self, delivery_id: int, expected: DeliveryStatus, target: DeliveryStatus) -> bool:
        delivery = self.service.storage.get_delivery(delivery_id)
        if delivery is None or delivery.status != expected:
            return False
        try:
            self.service.change_status(delivery_id, target)
        except InvalidTransition as e:
            log.warning("simulated step skipped: %s", e)
            return False
        log.info("simulated delivery %s -> %s", delivery_id, target.value)
        return True

    def _after_step(self, delivery_id: int, target: DeliveryStatus, advanced: bool):
        # an explicit update may have scheduled or cancelled in the meantime
        if advanced and target == DeliveryStatus.picked_up and not self.is_scheduled(delivery_id):
            self._schedule(delivery_id, self.transit_delay,
                           DeliveryStatus.picked_up, DeliveryStatus.in_transit)
