import logging
from ..schemas import AddressCreate, DriverCreate
from ..security import hash_password
from .base import Storage

log = logging.getLogger(__name__)

DEMO_USERNAME = "testuser"

def seed_demo_data(storage: Storage) -> bool:
    """Demo customer, two saved addresses and one active driver.

    Returns False when the demo user is already there.
    """
    if storage.get_user_by_username(DEMO_USERNAME):
        return False

    user = storage.create_user(
        username=DEMO_USERNAME,
        password_hash=hash_password("password"),
        full_name="Jan Smit",
        email="jan@example.com",
        phone="+31612345678",
    )
    storage.create_address(AddressCreate(
        user_id=user.id, label="Thuis", street="Keizersgracht 123", city="Amsterdam",
        postal_code="1015 CJ", latitude="52.3676", longitude="4.9041",
    ))
    storage.create_address(AddressCreate(
        user_id=user.id, label="Kantoor", street="Vondelpark 45", city="Amsterdam",
        postal_code="1071 AA", latitude="52.3580", longitude="4.8690",
    ))
    storage.create_driver(DriverCreate(
        name="Marco van der Berg", phone="+31687654321", email="marco@spoedpakketjes.nl",
        rating="4.8", vehicle="Toyota Hiace", vehicle_type="van", is_active=True,
        current_latitude="52.3702", current_longitude="4.8952",
    ))
    log.info("seeded demo data for user %s", DEMO_USERNAME)
    return True
