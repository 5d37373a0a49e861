import asyncio
import json

from spoedpakketjes.schemas import DeliveryStatus
from spoedpakketjes.services import DeliveryService
from spoedpakketjes.sse import EventBroadcaster
from spoedpakketjes.storage.memory import MemStorage
from spoedpakketjes.storage.seed import seed_demo_data

from conftest import delivery_create


def test_status_changes_reach_subscribers():
    async def scenario():
        broadcaster = EventBroadcaster()
        q = await broadcaster.register()
        storage = MemStorage()
        seed_demo_data(storage)
        service = DeliveryService(storage, broadcaster=broadcaster)

        d = service.create_delivery(delivery_create())
        service.change_status(d.id, DeliveryStatus.picked_up)

        first = json.loads(await asyncio.wait_for(q.get(), 1))
        second = json.loads(await asyncio.wait_for(q.get(), 1))
        await broadcaster.unregister(q)
        return first, second, broadcaster.client_count

    first, second, remaining = asyncio.run(scenario())
    assert first["type"] == "DELIVERY_STATUS"
    assert first["status"] == "assigned"
    assert second["status"] == "picked_up"
    assert second["picked_up_at"] is not None
    assert remaining == 0


def test_full_queue_drops_events():
    async def scenario():
        broadcaster = EventBroadcaster()
        q = await broadcaster.register()
        for i in range(150):
            broadcaster.publish({"n": i})
        await asyncio.sleep(0)
        return q.qsize()

    assert asyncio.run(scenario()) == 100
