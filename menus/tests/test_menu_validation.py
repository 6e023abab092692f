from decimal import Decimal

from django.test import SimpleTestCase

from menus.definitions import (
    CatalogCategorizedDefinition,
    CatalogEntry,
    InlineCategorizedDefinition,
    SimpleDefinition,
)
from menus.selections import SelectionPayload
from menus.validation import validate
from services.venues import ServiceRecord, VenueOptions


def _catalog(*entries):
    return {entry.id: entry for entry in entries}


class CategorizedSelectionTests(SimpleTestCase):
    def setUp(self):
        self.catalog = _catalog(
            CatalogEntry(id=1, name="Butter Chicken", price=Decimal("12")),
            CatalogEntry(id=2, name="Dal Makhani", price=Decimal("10")),
            CatalogEntry(id=3, name="Lamb Rogan Josh", price=Decimal("14")),
            CatalogEntry(id=4, name="Naan", price=Decimal("2")),
            CatalogEntry(id=5, name="Retired Curry", price=Decimal("9"), is_active=False),
        )
        self.definition = CatalogCategorizedDefinition(
            name="Banquet",
            base_price=Decimal("25"),
            min_attendees=10,
            max_attendees=200,
            categories=[
                {
                    "name": "mains",
                    "included_items": [{"item_id": 4}],
                    "selection_groups": [
                        {
                            "name": "curry",
                            "selection_type": "single",
                            "is_required": True,
                            "items": [
                                {"item_id": 1, "price_modifier": "5", "options": [{"name": "Extra sauce", "price_modifier": "1"}]},
                                {"item_id": 2},
                                {"item_id": 5},
                            ],
                        },
                        {
                            "name": "specials",
                            "selection_type": "multiple",
                            "max_selections": 2,
                            "items": [{"item_id": 1}, {"item_id": 2}, {"item_id": 3}],
                        },
                    ],
                }
            ],
            addons={
                "enabled": True,
                "fixed_addons": [{"id": "drinks", "name": "Soft drinks", "price_per_person": "3"}],
                "variable_addons": [
                    {"id": "ice", "name": "Ice bags", "price_per_unit": "4", "unit": "bags", "min_quantity": 1, "max_quantity": 5}
                ],
            },
        )

    def _validate(self, payload, attendees=20, service=None):
        return validate(
            self.definition, SelectionPayload.model_validate(payload), attendees, catalog=self.catalog, service=service
        )

    def test_single_required_selection_is_accepted(self):
        result = self._validate({"categories": {"mains": {"curry": [{"item_id": 1}]}}})
        self.assertTrue(result.ok, result.errors)

    def test_required_group_without_selection_is_rejected(self):
        result = self._validate({})
        self.assertFalse(result.ok)
        self.assertIn("A selection is required for 'curry' in mains", result.errors)

    def test_single_group_rejects_extra_selection(self):
        result = self._validate({"categories": {"mains": {"curry": [{"item_id": 1}, {"item_id": 2}]}}})
        self.assertIn("Only one selection is allowed for 'curry' in mains", result.errors)

    def test_multiple_group_accepts_exactly_max(self):
        result = self._validate(
            {"categories": {"mains": {"curry": [{"item_id": 2}], "specials": [{"item_id": 1}, {"item_id": 3}]}}}
        )
        self.assertTrue(result.ok, result.errors)

    def test_multiple_group_rejects_more_than_max(self):
        result = self._validate(
            {
                "categories": {
                    "mains": {
                        "curry": [{"item_id": 2}],
                        "specials": [{"item_id": 1}, {"item_id": 2}, {"item_id": 3}],
                    }
                }
            }
        )
        self.assertEqual(["Too many selections for 'specials' in mains: the maximum is 2"], result.errors)

    def test_inactive_catalog_item_and_bad_option(self):
        result = self._validate({"categories": {"mains": {"curry": [{"item_id": 5}], "specials": [{"item_id": 1, "options": [0]}]}}})
        self.assertIn("'Retired Curry' is not available", result.errors)
        self.assertIn("Option 0 is out of range for 'Butter Chicken'", result.errors)

    def test_item_outside_group_and_unknown_category(self):
        result = self._validate(
            {"categories": {"mains": {"curry": [{"item_id": 3}]}, "desserts": {"cake": [{"item_id": 1}]}}}
        )
        self.assertIn("Item 3 is not part of 'curry' in mains", result.errors)
        self.assertIn("Unknown category 'desserts'", result.errors)

    def test_attendee_bounds(self):
        self.assertIn("Attendee count must be at least 1", self._validate({}, attendees=0).errors)
        result = self._validate({"categories": {"mains": {"curry": [{"item_id": 2}]}}}, attendees=9)
        self.assertEqual(["Attendee count must be between 10 and 200 for 'Banquet'"], result.errors)

    def test_addon_bounds_are_named(self):
        result = self._validate(
            {
                "categories": {"mains": {"curry": [{"item_id": 2}]}},
                "fixed_addons": ["drinks", "napkins"],
                "variable_addons": {"ice": 6},
            }
        )
        self.assertEqual(
            ["Fixed addon 'napkins' does not exist", "Quantity for 'Ice bags' must be between 1 and 5 bags"],
            result.errors,
        )

    def test_disabled_addons_cannot_be_selected(self):
        self.definition.addons.enabled = False
        result = self._validate({"categories": {"mains": {"curry": [{"item_id": 2}]}}, "fixed_addons": ["drinks"]})
        self.assertEqual(["Addons are not enabled for 'Banquet'"], result.errors)

    def test_all_violations_are_collected(self):
        result = self._validate({"fixed_addons": ["napkins"], "variable_addons": {"ice": 0}}, attendees=500)
        self.assertEqual(4, len(result.errors))


class VenueSelectionTests(SimpleTestCase):
    def setUp(self):
        self.definition = SimpleDefinition(name="Function", items=[{"name": "Platter"}], max_attendees=200)
        self.service = ServiceRecord(
            id=1,
            name="Function Hall",
            is_function=True,
            venue_options=VenueOptions(
                indoor={"available": True, "min_people": 35, "max_people": 60},
                outdoor={"available": True, "min_people": 20, "max_people": 90, "venue_charge": "200", "charge_threshold": 35},
            ),
        )

    def _errors(self, payload, attendees, service=None):
        return validate(self.definition, SelectionPayload.model_validate(payload), attendees, service=service).errors

    def test_function_service_requires_venue(self):
        self.assertEqual(["A venue selection is required for 'Function Hall'"], self._errors({}, 40, self.service))

    def test_venue_headcount_range(self):
        self.assertEqual(
            ["Venue option 'indoor' requires between 35 and 60 attendees"],
            self._errors({"venue": "indoor"}, 70, self.service),
        )
        self.assertEqual([], self._errors({"venue": "outdoor"}, 30, self.service))

    def test_unavailable_venue(self):
        self.assertEqual(["Venue option 'both' is not available"], self._errors({"venue": "both"}, 80, self.service))

    def test_venue_on_regular_service_is_rejected(self):
        self.assertEqual(["A venue can only be selected for function services"], self._errors({"venue": "indoor"}, 40))


class SimpleAndCustomOrderSelectionTests(SimpleTestCase):
    def test_simple_choice_and_option_indices(self):
        definition = SimpleDefinition(
            name="Party Box",
            items=[
                {
                    "name": "Wrap",
                    "has_choices": True,
                    "choices": [{"name": "Chicken"}, {"name": "Falafel"}],
                    "options": [{"name": "Extra cheese", "price_modifier": "1.5"}],
                },
                {"name": "Chips"},
            ],
        )
        ok = validate(definition, SelectionPayload.model_validate({"simple_items": {"0": {"choices": [1], "options": [0]}}}), 5)
        self.assertTrue(ok.ok, ok.errors)

        bad = validate(
            definition,
            SelectionPayload.model_validate({"simple_items": {"0": {"choices": [2], "options": [1]}, "1": {"choices": [0]}, "4": {}}}),
            5,
        )
        self.assertEqual(
            [
                "Choice 2 is out of range for 'Wrap'",
                "Option 1 is out of range for 'Wrap'",
                "'Chips' does not offer choices",
                "Item 4 is out of range",
            ],
            bad.errors,
        )

    def test_simple_item_with_choices_requires_one(self):
        definition = SimpleDefinition(name="Party Box", items=[{"name": "Wrap", "has_choices": True, "choices": [{"name": "Chicken"}]}])
        result = validate(definition, SelectionPayload(), 5)
        self.assertEqual(["A choice is required for 'Wrap'"], result.errors)

    def test_custom_order_items_must_exist_and_be_available(self):
        definition = InlineCategorizedDefinition(
            name="Custom",
            max_attendees=100,
            categories=[
                {
                    "name": "mains",
                    "items": [
                        {"id": "m1", "name": "Biryani", "price_per_person": "12"},
                        {"id": "m2", "name": "Korma", "price_per_person": "11", "is_available": False},
                    ],
                },
                {"name": "desserts", "is_active": False, "items": [{"id": "d1", "name": "Kulfi"}]},
            ],
        )
        payload = SelectionPayload.model_validate(
            {"category_items": {"mains": [{"item_id": "m1"}, {"item_id": "m2"}, {"item_id": "m9"}], "desserts": [{"item_id": "d1"}]}}
        )
        result = validate(definition, payload, 10)
        self.assertEqual(
            ["'Korma' is not available", "Item 'm9' does not exist in mains", "Category 'desserts' is not available"],
            result.errors,
        )
