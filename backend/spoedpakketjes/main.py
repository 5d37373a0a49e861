import logging
from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, StreamingResponse
from .db import Base, make_engine, make_session_factory
from .routers.addresses import router as addresses_router
from .routers.auth import router as auth_router
from .routers.deliveries import router as deliveries_router
from .routers.drivers import router as drivers_router
from .routers.meta import router as meta_router
from .services import DeliveryService
from .settings import Settings, settings as default_settings
from .simulation import ProgressSimulator
from .sse import EventBroadcaster
from .storage.base import Storage
from .storage.memory import MemStorage
from .storage.seed import seed_demo_data
from .storage.sql import SqlStorage
from . import models  # noqa: F401  registers the tables on Base

log = logging.getLogger(__name__)

def build_storage(settings: Settings) -> Storage:
    if not settings.DATABASE_URL:
        return MemStorage()
    engine = make_engine(settings.DATABASE_URL)
    Base.metadata.create_all(bind=engine)
    return SqlStorage(make_session_factory(engine))

def create_app(settings: Settings | None = None, storage: Storage | None = None) -> FastAPI:
    settings = settings or default_settings
    logging.basicConfig(level=settings.LOG_LEVEL.upper(),
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    app = FastAPI(title=settings.APP_NAME)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    broadcaster = EventBroadcaster()
    storage = storage or build_storage(settings)
    service = DeliveryService(
        storage,
        broadcaster=broadcaster,
        price_jitter=settings.PRICE_JITTER,
        auto_assign=settings.AUTO_ASSIGN_DRIVERS,
        enforce_transitions=settings.ENFORCE_FORWARD_TRANSITIONS,
    )
    simulator = None
    if settings.SIMULATE_PROGRESS:
        simulator = ProgressSimulator(service, settings.PICKUP_DELAY_SECONDS, settings.TRANSIT_DELAY_SECONDS)

    app.state.settings = settings
    app.state.storage = storage
    app.state.service = service
    app.state.simulator = simulator
    app.state.broadcaster = broadcaster

    app.include_router(auth_router)
    app.include_router(addresses_router)
    app.include_router(drivers_router)
    app.include_router(deliveries_router)
    app.include_router(meta_router)

    @app.exception_handler(RequestValidationError)
    async def validation_error(request: Request, exc: RequestValidationError):
        return JSONResponse(status_code=400, content={"detail": jsonable_encoder(exc.errors())})

    @app.exception_handler(Exception)
    async def unexpected_error(request: Request, exc: Exception):
        log.exception("unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"detail": "Internal server error"})

    @app.get("/events")
    async def sse_events(request: Request):
        q = await broadcaster.register()

        async def event_generator():
            try:
                yield "event: hello\ndata: connected\n\n"

                while True:
                    if await request.is_disconnected():
                        break
                    data = await q.get()
                    yield f"data: {data}\n\n"
            finally:
                await broadcaster.unregister(q)

        return StreamingResponse(event_generator(), media_type="text/event-stream")

    @app.on_event("startup")
    def startup():
        if settings.SEED_DEMO_DATA:
            seed_demo_data(storage)
        log.info("%s ready (%s)", settings.APP_NAME, type(storage).__name__)

    @app.on_event("shutdown")
    def shutdown():
        if simulator is not None:
            simulator.shutdown()

    return app

app = create_app()
