from decimal import Decimal

import pytest

from menus.definitions import (
    CatalogCategorizedDefinition,
    CatalogEntry,
    InlineCategorizedDefinition,
    SimpleDefinition,
)
from menus.pricing import price
from menus.selections import SelectionPayload
from services.venues import ServiceRecord, VenueOptions
from shared.exceptions import DefinitionError


@pytest.fixture
def catalog():
    return {
        1: CatalogEntry(id=1, name="Butter Chicken", price=Decimal("12")),
        2: CatalogEntry(id=2, name="Dal Makhani", price=Decimal("10")),
        3: CatalogEntry(id=3, name="Rice", price=Decimal("2")),
    }


@pytest.fixture
def banquet():
    return CatalogCategorizedDefinition(
        name="Banquet",
        base_price=Decimal("25"),
        categories=[
            {
                "name": "mains",
                "selection_groups": [
                    {
                        "name": "curry",
                        "is_required": True,
                        "items": [
                            {"item_id": 1, "price_modifier": "5", "options": [{"name": "Extra sauce", "price_modifier": "0.75"}]},
                            {"item_id": 2, "price_modifier": "0"},
                        ],
                    }
                ],
            }
        ],
        addons={
            "enabled": True,
            "fixed_addons": [{"id": "drinks", "name": "Soft drinks", "price_per_person": "3"}],
            "variable_addons": [{"id": "ice", "name": "Ice bags", "price_per_unit": "4.50", "unit": "bags"}],
        },
    )


def test_categorized_package_end_to_end_total(banquet, catalog):
    selection = SelectionPayload.model_validate(
        {"categories": {"mains": {"curry": [{"item_id": 1}]}}, "fixed_addons": ["drinks"]}
    )
    breakdown = price(banquet, selection, 20, catalog=catalog)

    assert breakdown.base == Decimal("500.00")
    assert breakdown.item_modifiers == Decimal("100.00")
    assert breakdown.fixed_addons == Decimal("60.00")
    assert breakdown.total == Decimal("660.00")
    assert breakdown.per_attendee == Decimal("33.00")


def test_options_and_variable_addons_are_separate_components(banquet, catalog):
    selection = SelectionPayload.model_validate(
        {"categories": {"mains": {"curry": [{"item_id": 1, "options": [0]}]}}, "variable_addons": {"ice": 3}}
    )
    breakdown = price(banquet, selection, 10, catalog=catalog)

    assert breakdown.option_modifiers == Decimal("7.50")
    assert breakdown.variable_addons == Decimal("13.50")
    assert breakdown.modifiers == Decimal("57.50")
    assert breakdown.addons == Decimal("13.50")
    assert breakdown.total == Decimal("321.00")
    assert [line.kind for line in breakdown.lines] == ["selected", "option", "variable_addon"]


def test_pricing_is_deterministic(banquet, catalog):
    selection = SelectionPayload.model_validate({"categories": {"mains": {"curry": [{"item_id": 1, "options": [0]}]}}})
    assert price(banquet, selection, 17, catalog=catalog) == price(banquet, selection, 17, catalog=catalog)


@pytest.mark.parametrize("attendees,expected", [(10, Decimal("200.00")), (15, Decimal("300.00"))])
def test_base_price_scales_linearly(attendees, expected):
    definition = SimpleDefinition(name="Plain", base_price=Decimal("20"), min_attendees=10, items=[{"name": "Platter"}])
    assert price(definition, SelectionPayload(), attendees).total == expected


def test_simple_item_quantity_scales_by_units_not_attendees():
    definition = SimpleDefinition(
        name="Party Box",
        base_price=Decimal("10"),
        items=[
            {
                "name": "Wrap",
                "price_modifier": "2",
                "has_choices": True,
                "choices": [{"name": "Chicken", "price_modifier": "1"}],
                "options": [{"name": "Cheese", "price_modifier": "0.5"}],
            },
            {"name": "Cake", "price_modifier": "30", "quantity": 2},
        ],
    )
    selection = SelectionPayload.model_validate({"simple_items": {"0": {"choices": [0], "options": [0]}}})
    breakdown = price(definition, selection, 10)

    assert breakdown.item_modifiers == Decimal("80.00")
    assert breakdown.choice_modifiers == Decimal("10.00")
    assert breakdown.option_modifiers == Decimal("5.00")
    assert breakdown.total == Decimal("195.00")


def test_custom_order_items_are_priced_per_person_and_quantity():
    definition = InlineCategorizedDefinition(
        name="Custom",
        categories=[{"name": "mains", "items": [{"id": "m1", "name": "Biryani", "price_per_person": "12.25"}]}],
    )
    selection = SelectionPayload.model_validate({"category_items": {"mains": [{"item_id": "m1", "quantity": 2}]}})
    breakdown = price(definition, selection, 8)

    assert breakdown.base == Decimal("0.00")
    assert breakdown.item_modifiers == Decimal("196.00")
    assert breakdown.total == Decimal("196.00")


@pytest.mark.parametrize("attendees,surcharge", [(30, Decimal("200.00")), (40, Decimal("0.00"))])
def test_outdoor_venue_surcharge_threshold(attendees, surcharge):
    definition = SimpleDefinition(name="Function", items=[{"name": "Platter"}])
    service = ServiceRecord(
        name="Function Hall",
        is_function=True,
        venue_options=VenueOptions(
            outdoor={"available": True, "min_people": 20, "max_people": 90, "venue_charge": "200", "charge_threshold": 35}
        ),
    )
    breakdown = price(definition, SelectionPayload(venue="outdoor"), attendees, service=service)
    assert breakdown.venue_surcharge == surcharge
    assert breakdown.total == surcharge


def test_indoor_charge_applies_unconditionally():
    definition = SimpleDefinition(name="Function", items=[{"name": "Platter"}])
    service = ServiceRecord(
        is_function=True,
        venue_options=VenueOptions(indoor={"available": True, "min_people": 10, "max_people": 60, "venue_charge": "50"}),
    )
    assert price(definition, SelectionPayload(venue="indoor"), 59, service=service).venue_surcharge == Decimal("50.00")


def test_unresolved_catalog_reference_is_a_definition_error(banquet):
    selection = SelectionPayload.model_validate({"categories": {"mains": {"curry": [{"item_id": 1}]}}})
    with pytest.raises(DefinitionError):
        price(banquet, selection, 10, catalog={})
