import random
from decimal import Decimal

import pytest

from spoedpakketjes.pricing import BASE_PRICES, haversine_km, quote
from spoedpakketjes.schemas import DeliveryType

HOME = (52.3676, 4.9041)
OFFICE = (52.3580, 4.8690)


def test_haversine_is_symmetric():
    assert haversine_km(*HOME, *OFFICE) == pytest.approx(haversine_km(*OFFICE, *HOME))


def test_haversine_same_point_is_zero():
    assert haversine_km(*HOME, *HOME) == 0


def test_haversine_amsterdam_home_to_office():
    assert haversine_km(*HOME, *OFFICE) == pytest.approx(2.61, abs=0.01)


def test_haversine_one_degree_of_latitude():
    assert haversine_km(0, 0, 1, 0) == pytest.approx(111.19, abs=0.01)


def test_package_quote_with_coordinates():
    q = quote(DeliveryType.package, *HOME, *OFFICE)
    assert q.price == Decimal("13.81")
    assert q.minutes == 45
    assert q.distance_km == pytest.approx(2.61, abs=0.01)


def test_express_quote_without_coordinates():
    q = quote(DeliveryType.express)
    assert q.price == Decimal("15.75")
    assert q.minutes == 30
    assert q.distance_km is None


@pytest.mark.parametrize("delivery_type,base", [
    ("letter", "8.50"), ("package", "12.50"), ("express", "15.75"),
])
def test_identical_points_cost_the_base_price(delivery_type, base):
    assert quote(delivery_type, *HOME, *HOME).price == Decimal(base)


def test_zero_coordinates_still_count():
    q = quote(DeliveryType.letter, 0, 0, 0, 1)
    assert q.distance_km == pytest.approx(111.19, abs=0.01)
    assert q.price > BASE_PRICES[DeliveryType.letter]


def test_partial_coordinates_skip_the_surcharge():
    q = quote(DeliveryType.package, HOME[0], HOME[1], OFFICE[0], None)
    assert q.price == Decimal("12.50")


def test_price_never_decreases_with_distance():
    prices = [quote(DeliveryType.package, 52.0, 4.9, 52.0 + step / 10, 4.9).price for step in range(20)]
    assert prices == sorted(prices)
    assert prices[0] == BASE_PRICES[DeliveryType.package]


def test_jitter_stays_within_bounds():
    rng = random.Random(7)
    for _ in range(200):
        price = quote(DeliveryType.letter, jitter=2.0, rng=rng).price
        assert Decimal("8.50") <= price <= Decimal("10.50")


def test_coordinate_strings_are_accepted():
    assert quote(DeliveryType.package, "52.3676", "4.9041", "52.3580", "4.8690").price == Decimal("13.81")


def test_antipodal_points_are_half_the_circumference():
    assert haversine_km(-90, 180, 90, -180) == pytest.approx(6371 * 3.141592653589793, rel=1e-9)
    assert haversine_km(0, 0, 0, 180) == pytest.approx(20015.09, abs=0.01)
