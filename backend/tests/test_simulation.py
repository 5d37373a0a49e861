import asyncio
import threading

import pytest

from spoedpakketjes.schemas import DeliveryStatus
from spoedpakketjes.services import DeliveryService
from spoedpakketjes.simulation import ProgressSimulator
from spoedpakketjes.storage.memory import MemStorage
from spoedpakketjes.storage.seed import seed_demo_data

from conftest import delivery_create


class FakeHandle:
    def __init__(self, delay, callback, args):
        self.delay = delay
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self):
        self.cancelled = True

    def fire(self):
        assert not self.cancelled
        self.callback(*self.args)


class FakeClock:
    def __init__(self):
        self.handles = []

    def call_later(self, delay, callback, *args):
        h = FakeHandle(delay, callback, args)
        self.handles.append(h)
        return h

    def run_blocking(self, fn, *args, done):
        done(fn(*args))

    @property
    def last(self):
        return self.handles[-1]


@pytest.fixture
def service():
    storage = MemStorage()
    seed_demo_data(storage)
    return DeliveryService(storage)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def simulator(service, clock):
    return ProgressSimulator(service, pickup_delay=5, transit_delay=7, call_later=clock.call_later,
                             run_blocking=clock.run_blocking)


def test_assigned_delivery_is_picked_up_then_in_transit(service, simulator, clock):
    d = service.create_delivery(delivery_create())
    assert d.status == DeliveryStatus.assigned

    simulator.start(d.id)
    assert clock.last.delay == 5
    clock.last.fire()

    picked = service.storage.get_delivery(d.id)
    assert picked.status == DeliveryStatus.picked_up
    assert picked.picked_up_at is not None
    assert clock.last.delay == 7
    assert simulator.is_scheduled(d.id)

    clock.last.fire()
    assert service.storage.get_delivery(d.id).status == DeliveryStatus.in_transit
    assert not simulator.is_scheduled(d.id)
    assert len(clock.handles) == 2


def test_cancel_drops_the_pending_step(service, simulator, clock):
    d = service.create_delivery(delivery_create())
    simulator.start(d.id)
    assert simulator.cancel(d.id) is True
    assert clock.last.cancelled
    assert simulator.cancel(d.id) is False


def test_step_is_skipped_when_status_moved_on(service, simulator, clock):
    d = service.create_delivery(delivery_create())
    simulator.start(d.id)
    handle = clock.last
    service.change_status(d.id, DeliveryStatus.cancelled)

    handle.fire()
    assert service.storage.get_delivery(d.id).status == DeliveryStatus.cancelled
    assert len(clock.handles) == 1


def test_restart_replaces_previous_step(service, simulator, clock):
    d = service.create_delivery(delivery_create())
    simulator.start(d.id)
    first = clock.last
    simulator.start(d.id)
    assert first.cancelled
    assert len(clock.handles) == 2


def test_shutdown_cancels_everything(service, simulator, clock):
    a = service.create_delivery(delivery_create())
    b = service.create_delivery(delivery_create(type="letter"))
    simulator.start(a.id)
    simulator.start(b.id)
    simulator.shutdown()
    assert all(h.cancelled for h in clock.handles)
    assert not simulator.is_scheduled(a.id)


def test_storage_work_runs_off_the_event_loop(service):
    seen = []
    get_delivery = service.storage.get_delivery

    def recording_get_delivery(delivery_id):
        seen.append(threading.get_ident())
        return get_delivery(delivery_id)

    service.storage.get_delivery = recording_get_delivery
    d = service.create_delivery(delivery_create())

    async def scenario():
        simulator = ProgressSimulator(service, pickup_delay=0.01, transit_delay=0.01)
        simulator.start(d.id)
        for _ in range(200):
            await asyncio.sleep(0.01)
            if service.storage.get_delivery(d.id).status == DeliveryStatus.in_transit:
                break
        return threading.get_ident()

    seen.clear()
    loop_thread = asyncio.run(scenario())
    assert service.storage.get_delivery(d.id).status == DeliveryStatus.in_transit
    step_threads = [t for t in seen if t != loop_thread]
    assert len(step_threads) >= 2
