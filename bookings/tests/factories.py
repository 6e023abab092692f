from datetime import timedelta
from decimal import Decimal

from django.utils import timezone

from menus.models import CatalogItem, CustomOrderConfiguration, PackageDefinition
from services.models import Location, Service


def next_open_slot(now=None, weekday=1, hour=12):
    """The next given weekday (Tuesday by default) at ``hour`` local time, strictly after now."""
    local = timezone.localtime(now or timezone.now())
    days = (weekday - local.weekday()) % 7 or 7
    return (local + timedelta(days=days)).replace(hour=hour, minute=0, second=0, microsecond=0)


def customer_details(**overrides):
    data = {
        "name": "Priya Sharma",
        "email": "Priya@Example.com",
        "phone": "0412 345 678",
        "special_instructions": "Ring the bell",
        "dietary_requirements": ["vegetarian"],
        "spice_level": "hot",
    }
    data.update(overrides)
    return data


def delivery_details(delivery_type="Pickup", when=None, **overrides):
    data = {"delivery_type": delivery_type, "delivery_date": (when or next_open_slot()).isoformat()}
    if delivery_type == "Delivery":
        data["address"] = {"street": "1 George St", "suburb": "Parramatta", "postcode": "2150", "state": "NSW"}
    data.update(overrides)
    return data


def create_location_and_service(is_function=False, venue_options=None, name="Delivery"):
    location, _ = Location.objects.get_or_create(name="Harris Park", defaults={"city": "Sydney"})
    service = Service.objects.create(
        name=name,
        location=location,
        is_function=is_function,
        venue_options=venue_options or {},
    )
    return location, service


def create_banquet(service, base_price="25", **overrides):
    """Categorized package: one required single-select curry group and a drinks addon."""
    chicken = CatalogItem.objects.create(name="Butter Chicken", price=Decimal("12"), category="mains")
    dal = CatalogItem.objects.create(name="Dal Makhani", price=Decimal("10"), category="mains", is_vegetarian=True)
    fields = {
        "name": "Banquet",
        "service": service,
        "location": service.location,
        "base_price": Decimal(base_price),
        "categories": [
            {
                "name": "mains",
                "selection_groups": [
                    {
                        "name": "curry",
                        "selection_type": "single",
                        "is_required": True,
                        "items": [
                            {"item_id": chicken.id, "price_modifier": "5"},
                            {"item_id": dal.id, "price_modifier": "0"},
                        ],
                    }
                ],
            }
        ],
        "addons": {
            "enabled": True,
            "fixed_addons": [{"id": "drinks", "name": "Soft drinks", "price_per_person": "3"}],
            "variable_addons": [
                {"id": "ice", "name": "Ice bags", "price_per_unit": "4", "unit": "bags", "max_quantity": 10}
            ],
        },
    }
    fields.update(overrides)
    package = PackageDefinition.objects.create(**fields)
    return package, chicken, dal


def create_custom_order(location, service=None):
    return CustomOrderConfiguration.objects.create(
        name="Build your own",
        location=location,
        service=service,
        categories=[
            {"name": "mains", "items": [{"id": "m1", "name": "Biryani", "price_per_person": "12"}]},
            {"name": "desserts", "items": [{"id": "d1", "name": "Gulab Jamun", "price_per_person": "4", "is_vegetarian": True}]},
        ],
    )
