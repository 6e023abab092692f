from decimal import Decimal

from django.core.exceptions import ValidationError
from django.test import TestCase
from pydantic import ValidationError as PydanticValidationError

from menus.pricing import venue_surcharge
from menus.selections import SelectionPayload
from services.models import Location, Service
from services.venues import ServiceRecord, VenueOption, VenueOptions


class ServiceQuerySetTests(TestCase):
    def setUp(self):
        self.location = Location.objects.create(name="Parramatta", city="Sydney")
        self.closed = Location.objects.create(name="Closed Site", city="Sydney", is_active=False)

    def test_active_queryset_excludes_inactive_services_and_locations(self):
        active = Service.objects.create(name="Delivery", location=self.location)
        Service.objects.create(name="Archived", location=self.location, is_active=False)
        Service.objects.create(name="Delivery", location=self.closed)

        self.assertEqual([active], list(Service.objects.active()))
        self.assertEqual([self.location], list(Location.objects.active()))

    def test_functions_filter(self):
        Service.objects.create(name="Delivery", location=self.location)
        hall = Service.objects.create(name="Function Hall", location=self.location, is_function=True)

        self.assertEqual([hall], list(Service.objects.functions()))


class ServiceRecordTests(TestCase):
    def setUp(self):
        self.location = Location.objects.create(name="Parramatta", city="Sydney")

    def test_record_uses_default_venue_options(self):
        service = Service.objects.create(name="Function Hall", location=self.location, is_function=True)
        record = service.to_record()

        self.assertTrue(record.is_function)
        self.assertEqual(record.location_id, self.location.id)
        self.assertEqual(record.venue_options.outdoor.charge_threshold, 35)
        self.assertEqual(record.venue_options.outdoor.venue_charge, Decimal("200"))
        self.assertEqual(record.venue_options.indoor.min_people, 35)

    def test_clean_rejects_inverted_range(self):
        service = Service(
            name="Function Hall",
            location=self.location,
            is_function=True,
            venue_options={"indoor": {"available": True, "min_people": 80, "max_people": 40}},
        )
        with self.assertRaises(ValidationError) as ctx:
            service.clean()
        self.assertIn("venue_options", ctx.exception.message_dict)


class VenueSurchargeTests(TestCase):
    def test_outdoor_charge_applies_below_threshold_only(self):
        outdoor = VenueOptions().outdoor
        self.assertEqual(outdoor.surcharge(30), Decimal("200.00"))
        self.assertEqual(outdoor.surcharge(35), Decimal("0"))
        self.assertEqual(outdoor.surcharge(40), Decimal("0"))

    def test_unconditional_charge_without_threshold(self):
        indoor = VenueOption(available=True, min_people=10, max_people=50, venue_charge=Decimal("75"))
        self.assertEqual(indoor.surcharge(49), Decimal("75.00"))

    def test_unknown_venue_name(self):
        self.assertIsNone(VenueOptions().get("rooftop"))

    def test_indoor_charge_is_not_waived_for_large_parties(self):
        record = ServiceRecord(
            name="Function Hall",
            is_function=True,
            venue_options=VenueOptions(
                indoor={"available": True, "min_people": 35, "max_people": 60, "venue_charge": "100"}
            ),
        )
        self.assertEqual(venue_surcharge(SelectionPayload(venue="indoor"), 50, record), Decimal("100.00"))

    def test_threshold_rejected_outside_outdoor(self):
        for name in ("both", "indoor"):
            with self.subTest(venue=name):
                with self.assertRaises(PydanticValidationError):
                    VenueOptions(**{name: {"available": True, "venue_charge": "100", "charge_threshold": 40}})

    def test_clean_reports_threshold_on_indoor(self):
        service = Service(
            name="Function Hall",
            location=Location(name="Parramatta", city="Sydney"),
            is_function=True,
            venue_options={"indoor": {"available": True, "venue_charge": "100", "charge_threshold": 40}},
        )
        with self.assertRaises(ValidationError) as ctx:
            service.clean()
        self.assertIn("only supported for the outdoor venue", ctx.exception.message_dict["venue_options"][0])
