import asyncio
import json
from typing import Any, Dict, Set, Tuple

class EventBroadcaster:
    """Fan-out of lifecycle events to connected /events clients.

    ``publish`` may be called from worker threads (sync endpoints) as well as
    from the event loop; each queue is fed on the loop that owns it.
    """

    def __init__(self):
        self._clients: Set[Tuple[asyncio.Queue, asyncio.AbstractEventLoop]] = set()
        self._lock = asyncio.Lock()

    async def register(self) -> asyncio.Queue:
        q: asyncio.Queue = asyncio.Queue(maxsize=100)
        async with self._lock:
            self._clients.add((q, asyncio.get_running_loop()))
        return q

    async def unregister(self, q: asyncio.Queue):
        async with self._lock:
            self._clients = {c for c in self._clients if c[0] is not q}

    @property
    def client_count(self) -> int:
        return len(self._clients)

    def publish(self, event: Dict[str, Any]):
        data = json.dumps(event, ensure_ascii=False, default=str)
        for q, loop in list(self._clients):
            loop.call_soon_threadsafe(_offer, q, data)

def _offer(q: asyncio.Queue, data: str):
    # a slow client loses events rather than blocking the others
    try:
        q.put_nowait(data)
    except asyncio.QueueFull:
        pass
