from django.conf import settings
from django.utils import timezone
from rest_framework import serializers

from .models import Booking

DIETARY_CHOICES = ["vegetarian", "vegan", "gluten-free", "halal-friendly"]
PHONE_PATTERN = r"^[0-9+\-\s()]{10,15}$"

WEEKDAY_NAMES = ["Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday"]


def flatten_errors(errors, prefix=""):
    """Turn DRF's nested ``serializer.errors`` into a flat list of messages."""
    messages = []
    if isinstance(errors, dict):
        for field, detail in errors.items():
            path = prefix if field == "non_field_errors" else f"{prefix}{field}"
            messages.extend(flatten_errors(detail, f"{path}." if path else ""))
    elif isinstance(errors, (list, tuple)):
        for detail in errors:
            messages.extend(flatten_errors(detail, prefix))
    else:
        field = prefix.rstrip(".")
        messages.append(f"{field}: {errors}" if field else str(errors))
    return messages


class CustomerDetailsSerializer(serializers.Serializer):
    name = serializers.CharField(min_length=2, max_length=100)
    email = serializers.EmailField()
    phone = serializers.RegexField(
        PHONE_PATTERN,
        error_messages={"invalid": "Enter a phone number of 10-15 digits, spaces, +, - or brackets."},
    )
    special_instructions = serializers.CharField(max_length=1000, allow_blank=True, required=False, default="")
    dietary_requirements = serializers.ListField(
        child=serializers.ChoiceField(choices=DIETARY_CHOICES), required=False, default=list
    )
    spice_level = serializers.ChoiceField(
        choices=Booking.SpiceLevel.choices, required=False, default=Booking.SpiceLevel.MEDIUM
    )

    def validate_email(self, value):
        return value.lower()

    def validate_dietary_requirements(self, value):
        # Keep first occurrence order, drop repeats
        return list(dict.fromkeys(value))


class AddressSerializer(serializers.Serializer):
    street = serializers.CharField(max_length=200)
    suburb = serializers.CharField(max_length=100)
    postcode = serializers.RegexField(r"^[0-9A-Za-z\s-]{3,10}$", error_messages={"invalid": "Enter a valid postcode."})
    state = serializers.CharField(max_length=50)
    country = serializers.CharField(max_length=100, required=False)

    def validate(self, data):
        data.setdefault("country", getattr(settings, "CATERING_DEFAULT_COUNTRY", "Australia"))
        return data


class DeliverySerializer(serializers.Serializer):
    """Delivery details and the business rules around them.

    Context:
        ``is_function``: the booked service is a venue-based function service.
        ``now``: reference time for the "in the future" rule (defaults to now).
    """

    delivery_type = serializers.ChoiceField(choices=Booking.DeliveryType.choices)
    delivery_date = serializers.DateTimeField()
    address = AddressSerializer(required=False, allow_null=True)

    def validate(self, data):
        errors = {}
        delivery_type = data["delivery_type"]
        is_function = self.context.get("is_function", False)
        if is_function and delivery_type != Booking.DeliveryType.EVENT:
            errors["delivery_type"] = ["Function bookings must use the Event delivery type."]
        elif not is_function and delivery_type == Booking.DeliveryType.EVENT:
            errors["delivery_type"] = ["Only function bookings can use the Event delivery type."]

        date_errors = delivery_date_errors(data["delivery_date"], self.context.get("now"))
        if date_errors:
            errors["delivery_date"] = date_errors

        if delivery_type == Booking.DeliveryType.DELIVERY:
            if not data.get("address"):
                errors["address"] = ["An address is required for delivery."]
        else:
            data["address"] = None

        if errors:
            raise serializers.ValidationError(errors)
        return data


def delivery_date_errors(delivery_date, now=None):
    errors = []
    now = now or timezone.now()
    local = timezone.localtime(delivery_date) if timezone.is_aware(delivery_date) else delivery_date
    if delivery_date <= now:
        errors.append("Delivery date must be in the future.")

    closed_weekday = getattr(settings, "CATERING_CLOSED_WEEKDAY", 0)
    if closed_weekday is not None and local.weekday() == closed_weekday:
        errors.append(f"We are closed on {WEEKDAY_NAMES[closed_weekday]}s.")

    opens, closes = getattr(settings, "CATERING_SERVICE_HOURS", (11, 20))
    if not opens <= local.hour < closes:
        errors.append(f"Delivery time must be between {opens:02d}:00 and {closes:02d}:00.")
    return errors
