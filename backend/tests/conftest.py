import pytest
from fastapi.testclient import TestClient

from spoedpakketjes.db import Base, make_engine, make_session_factory
from spoedpakketjes.main import create_app
from spoedpakketjes.schemas import DeliveryCreate
from spoedpakketjes.settings import Settings
from spoedpakketjes.storage.memory import MemStorage
from spoedpakketjes.storage.sql import SqlStorage
from spoedpakketjes import models  # noqa: F401


def make_sql_storage() -> SqlStorage:
    engine = make_engine("sqlite://")
    Base.metadata.create_all(bind=engine)
    return SqlStorage(make_session_factory(engine))


@pytest.fixture(params=["memory", "sql"])
def storage(request):
    if request.param == "memory":
        return MemStorage()
    return make_sql_storage()


@pytest.fixture
def settings():
    return Settings(
        DATABASE_URL=None,
        SEED_DEMO_DATA=True,
        SIMULATE_PROGRESS=False,
        PRICE_JITTER=0.0,
        SECRET_KEY="test-secret",
    )


@pytest.fixture
def app(settings):
    return create_app(settings, storage=MemStorage())


@pytest.fixture
def client(app):
    with TestClient(app) as c:
        yield c


def delivery_payload(**overrides) -> dict:
    body = {
        "userId": 1,
        "type": "package",
        "pickupStreet": "Keizersgracht 123",
        "pickupCity": "Amsterdam",
        "pickupPostalCode": "1015 CJ",
        "pickupLatitude": "52.3676",
        "pickupLongitude": "4.9041",
        "deliveryStreet": "Vondelpark 45",
        "deliveryCity": "Amsterdam",
        "deliveryPostalCode": "1071 AA",
        "deliveryLatitude": "52.3580",
        "deliveryLongitude": "4.8690",
    }
    body.update(overrides)
    return {k: v for k, v in body.items() if v is not None}


def delivery_create(**overrides) -> DeliveryCreate:
    return DeliveryCreate.model_validate(delivery_payload(**overrides))
