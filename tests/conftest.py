import pytest

from bookings.tests.factories import (
    create_banquet,
    create_custom_order,
    create_location_and_service,
    customer_details,
    delivery_details,
)


@pytest.fixture
def service(db):
    _, service = create_location_and_service()
    return service


@pytest.fixture
def function_service(db):
    _, service = create_location_and_service(
        is_function=True,
        name="Function Hall",
        venue_options={
            "indoor": {"available": True, "min_people": 35, "max_people": 60},
            "outdoor": {
                "available": True,
                "min_people": 20,
                "max_people": 90,
                "venue_charge": "200",
                "charge_threshold": 35,
            },
        },
    )
    return service


@pytest.fixture
def banquet(service):
    package, chicken, dal = create_banquet(service)
    package.chicken = chicken
    package.dal = dal
    return package


@pytest.fixture
def custom_order(service):
    return create_custom_order(service.location)


@pytest.fixture
def customer():
    return customer_details()


@pytest.fixture
def pickup():
    return delivery_details()
