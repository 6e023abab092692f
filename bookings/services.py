"""
Booking operations.

``create_booking`` is the only way a booking comes into existence; after that
the status fields move through ``bookings.lifecycle`` and a bounded set of
fields can be edited by an operator.
"""

import logging
from decimal import InvalidOperation
from functools import partial

from django.conf import settings
from django.db import IntegrityError, transaction
from django.utils import timezone
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from coupons.evaluator import evaluate
from coupons.services import get_coupon, redeem_coupon
from menus.selections import SelectionPayload, payload_errors
from menus.services import price_resolved, resolve_definition, validate_resolved
from shared.exceptions import NotFoundError, ValidationError
from shared.money import ZERO, format_money, round_money
from shared.pydantic_models import PriceBreakdown

from .lifecycle import check_payment_transition, check_status_transition
from .models import Booking
from .references import BookingReferenceGenerator
from .serializers import CustomerDetailsSerializer, DeliverySerializer, flatten_errors
from .snapshot import build_selected_items

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = ("customer", "attendee_count", "delivery", "selected_items", "pricing", "admin_notes")
PRICING_FIELDS = (
    "base_price",
    "modifiers_price",
    "addons_price",
    "venue_charge",
    "subtotal",
    "discount_amount",
    "total",
)


class BookingSelection(BaseModel):
    """Which definition was ordered, what was picked and for how many people."""

    model_config = ConfigDict(extra="forbid")
    definition_id: int
    is_custom_order: bool = False
    payload: SelectionPayload = Field(default_factory=SelectionPayload)
    attendee_count: int


def _parse_money(value, label, errors):
    try:
        amount = round_money(value)
    except (InvalidOperation, TypeError, ValueError):
        errors.append(f"{label} must be a number")
        return None
    if amount < 0:
        errors.append(f"{label} cannot be negative")
        return None
    return amount


def _price_mismatches(supplied, expected: PriceBreakdown):
    """Compare a client-supplied breakdown with a fresh quote, component by component."""
    if supplied is None:
        return []
    if isinstance(supplied, PriceBreakdown):
        supplied = supplied.components()
    if not isinstance(supplied, dict) or "total" not in supplied:
        return ["Price breakdown must include a total"]

    mismatches = []
    for component, amount in expected.components().items():
        if component not in supplied:
            continue
        quoted = _parse_money(supplied[component], f"Price component '{component}'", mismatches)
        if quoted is not None and quoted != amount:
            mismatches.append(f"Price component '{component}' is {quoted} but the selection prices at {amount}")
    return mismatches


def _claim_reference(booking, reference):
    booking.reference = reference
    try:
        with transaction.atomic():
            booking.save(force_insert=True)
    except IntegrityError:
        if Booking.objects.filter(reference=reference).exists():
            booking.pk = None
            return False
        raise
    return True


def create_booking(selection, price_breakdown, customer, delivery, coupon_code=None, now=None, generator=None) -> Booking:
    """Validate, re-price and persist a new booking.

    Every violated rule is collected into one ``ValidationError``. The supplied
    ``price_breakdown`` must match a fresh quote for the same selection. When a
    coupon code is given its discount is frozen into the booking and one use is
    redeemed in the same transaction.
    """
    now = now or timezone.now()
    try:
        if not isinstance(selection, BookingSelection):
            selection = BookingSelection.model_validate(selection)
    except PydanticValidationError as exc:
        raise ValidationError(payload_errors(exc))

    resolved = resolve_definition(selection.definition_id, custom_order=selection.is_custom_order)
    definition = resolved.definition
    payload = selection.payload
    attendee_count = selection.attendee_count

    errors = []
    if not selection.is_custom_order and (definition.id is None or definition.service_id is None):
        errors.append("A package booking requires a package and a service")
    if selection.is_custom_order and not any(payload.category_items.values()):
        errors.append("A custom order must include at least one item")
    max_attendees = settings.CATERING_MAX_ATTENDEES
    if attendee_count > max_attendees:
        errors.append(f"Attendee count cannot exceed {max_attendees}")
    errors.extend(validate_resolved(resolved, payload, attendee_count).errors)

    customer_serializer = CustomerDetailsSerializer(data=customer or {})
    if not customer_serializer.is_valid():
        errors.extend(flatten_errors(customer_serializer.errors, "customer."))
    is_function = bool(resolved.service and resolved.service.is_function)
    delivery_serializer = DeliverySerializer(data=delivery or {}, context={"is_function": is_function, "now": now})
    if not delivery_serializer.is_valid():
        errors.extend(flatten_errors(delivery_serializer.errors, "delivery."))
    if errors:
        raise ValidationError(errors)

    quote = price_resolved(resolved, payload, attendee_count)
    mismatches = _price_mismatches(price_breakdown, quote)
    if mismatches:
        logger.warning(f"Rejected stale price breakdown for definition {definition.id}: {mismatches}")
        raise ValidationError(mismatches)

    instance = resolved.instance
    coupon = None
    discount = ZERO
    total = quote.total
    if coupon_code:
        coupon = get_coupon(coupon_code)
        result = evaluate(coupon, quote.total, instance.location_id, definition.service_id, now=now)
        if not result.applicable:
            raise ValidationError([result.reason])
        discount, total = result.discount, result.new_total

    customer_data = customer_serializer.validated_data
    delivery_data = delivery_serializer.validated_data
    location = instance.location
    service = instance.service
    booking = Booking(
        is_custom_order=selection.is_custom_order,
        package=None if selection.is_custom_order else instance,
        custom_order=instance if selection.is_custom_order else None,
        location=location,
        service=service,
        menu_name=definition.name,
        menu_base_price=round_money(definition.base_price),
        location_name=location.name if location else "",
        service_name=service.name if service else "",
        customer_name=customer_data["name"],
        customer_email=customer_data["email"],
        customer_phone=customer_data["phone"],
        special_instructions=customer_data.get("special_instructions", ""),
        dietary_requirements=customer_data.get("dietary_requirements", []),
        spice_level=customer_data.get("spice_level", Booking.SpiceLevel.MEDIUM),
        attendee_count=attendee_count,
        selection=payload.model_dump(mode="json"),
        selected_items=build_selected_items(definition, payload, attendee_count, resolved.catalog),
        base_price=quote.base,
        modifiers_price=quote.modifiers,
        addons_price=quote.addons,
        venue_charge=quote.venue_surcharge,
        subtotal=quote.total,
        discount_amount=discount,
        total=total,
        price_breakdown=quote.model_dump(mode="json", exclude={"errors"}),
        coupon_code=coupon.code if coupon else "",
        delivery_type=delivery_data["delivery_type"],
        delivery_date=delivery_data["delivery_date"],
        address=dict(delivery_data["address"]) if delivery_data.get("address") else None,
        venue_selection=payload.venue or "",
        is_function=is_function,
        order_date=now,
    )

    generator = generator or BookingReferenceGenerator()
    with transaction.atomic():
        generator.generate(selection.is_custom_order, accept=partial(_claim_reference, booking))
        if coupon is not None:
            redeem_coupon(coupon, booking, discount_amount=discount, now=now)

    logger.info(f"Booking {booking.reference} created for {booking.attendee_count} attendees, total {format_money(booking.total)}")
    return booking


def get_booking(booking_id) -> Booking:
    try:
        return Booking.objects.live().get(pk=booking_id)
    except Booking.DoesNotExist:
        raise NotFoundError(f"Booking {booking_id} does not exist")


def _locked_booking(booking_id) -> Booking:
    try:
        return Booking.objects.live().select_for_update().get(pk=booking_id)
    except Booking.DoesNotExist:
        raise NotFoundError(f"Booking {booking_id} does not exist")


def transition_status(booking_id, new_status, admin_notes=None, cancellation_reason=None) -> Booking:
    with transaction.atomic():
        booking = _locked_booking(booking_id)
        previous = booking.status
        target = check_status_transition(previous, new_status)
        fields = ["status", "updated_at"]
        if cancellation_reason is not None:
            if target != Booking.Status.CANCELLED:
                raise ValidationError(["A cancellation reason can only be recorded when cancelling"])
            booking.cancellation_reason = cancellation_reason
            fields.append("cancellation_reason")
        if admin_notes is not None:
            booking.admin_notes = admin_notes
            fields.append("admin_notes")
        booking.status = target
        booking.save(update_fields=fields)

    logger.info(f"Booking {booking.reference} status {previous} -> {target.value}")
    return booking


def transition_payment_status(booking_id, new_payment_status, deposit_amount=None) -> Booking:
    with transaction.atomic():
        booking = _locked_booking(booking_id)
        previous = booking.payment_status
        target = check_payment_transition(previous, new_payment_status)
        fields = ["payment_status", "updated_at"]
        if deposit_amount is not None:
            errors = []
            deposit = _parse_money(deposit_amount, "Deposit amount", errors)
            if deposit is not None and deposit > booking.total:
                errors.append(f"Deposit amount must be between 0.00 and {booking.total}")
            if errors:
                raise ValidationError(errors)
            booking.deposit_amount = deposit
            fields.append("deposit_amount")
        booking.payment_status = target
        booking.save(update_fields=fields)

    logger.info(f"Booking {booking.reference} payment status {previous} -> {target.value}")
    return booking


def cancel_booking(booking_id, reason=None, admin_notes=None) -> Booking:
    return transition_status(
        booking_id,
        Booking.Status.CANCELLED,
        admin_notes=admin_notes,
        cancellation_reason=reason if reason is not None else "",
    )


def _apply_pricing(booking, values, errors):
    if not isinstance(values, dict):
        errors.append("Pricing must be a mapping")
        return []
    unknown = sorted(set(values) - set(PRICING_FIELDS))
    errors.extend(f"Pricing field '{name}' cannot be edited" for name in unknown)

    cleaned = {}
    for name in PRICING_FIELDS:
        if name in values:
            amount = _parse_money(values[name], f"Pricing field '{name}'", errors)
            if amount is not None:
                cleaned[name] = amount
    if unknown or len(cleaned) != len(set(values) & set(PRICING_FIELDS)):
        return []

    pricing = {**booking.pricing, **cleaned}
    if "subtotal" not in cleaned:
        pricing["subtotal"] = (
            pricing["base_price"] + pricing["modifiers_price"] + pricing["addons_price"] + pricing["venue_charge"]
        )
    if "total" not in cleaned:
        pricing["total"] = pricing["subtotal"] - pricing["discount_amount"]
    if pricing["total"] < 0:
        errors.append("Total cannot be negative")
        return []
    if booking.deposit_amount > pricing["total"]:
        errors.append(f"Total cannot be less than the deposit already paid ({booking.deposit_amount})")
        return []

    for name, amount in pricing.items():
        setattr(booking, name, amount)
    return list(PRICING_FIELDS)


def update_booking(booking_id, changes, now=None) -> Booking:
    """Operator edit of the editable fields; completed and cancelled bookings are read-only.

    ``customer`` and ``delivery`` are partial updates merged over the current
    values and re-validated as a whole, so the delivery rules still hold.
    """
    unknown = sorted(set(changes) - set(EDITABLE_FIELDS))
    if unknown:
        raise ValidationError([f"Field '{name}' cannot be edited" for name in unknown])

    with transaction.atomic():
        booking = _locked_booking(booking_id)
        if booking.is_terminal:
            raise ValidationError([f"Booking {booking.reference} is {booking.status} and can no longer be edited"])

        errors = []
        fields = []
        if "customer" in changes:
            serializer = CustomerDetailsSerializer(data={**booking.customer_details(), **(changes["customer"] or {})})
            if serializer.is_valid():
                data = serializer.validated_data
                booking.customer_name = data["name"]
                booking.customer_email = data["email"]
                booking.customer_phone = data["phone"]
                booking.special_instructions = data.get("special_instructions", "")
                booking.dietary_requirements = data.get("dietary_requirements", [])
                booking.spice_level = data.get("spice_level", Booking.SpiceLevel.MEDIUM)
                fields += [
                    "customer_name",
                    "customer_email",
                    "customer_phone",
                    "special_instructions",
                    "dietary_requirements",
                    "spice_level",
                ]
            else:
                errors.extend(flatten_errors(serializer.errors, "customer."))

        if "delivery" in changes:
            serializer = DeliverySerializer(
                data={**booking.delivery_details(), **(changes["delivery"] or {})},
                context={"is_function": booking.is_function, "now": now or timezone.now()},
            )
            if serializer.is_valid():
                data = serializer.validated_data
                booking.delivery_type = data["delivery_type"]
                booking.delivery_date = data["delivery_date"]
                booking.address = dict(data["address"]) if data.get("address") else None
                fields += ["delivery_type", "delivery_date", "address"]
            else:
                errors.extend(flatten_errors(serializer.errors, "delivery."))

        if "attendee_count" in changes:
            count = changes["attendee_count"]
            max_attendees = settings.CATERING_MAX_ATTENDEES
            if isinstance(count, bool) or not isinstance(count, int) or not 1 <= count <= max_attendees:
                errors.append(f"Attendee count must be between 1 and {max_attendees}")
            else:
                booking.attendee_count = count
                fields.append("attendee_count")

        if "selected_items" in changes:
            items = changes["selected_items"]
            if not isinstance(items, list) or not all(isinstance(item, dict) and item.get("name") for item in items):
                errors.append("Selected items must be a list of items that each have a name")
            elif booking.is_custom_order and not items:
                errors.append("A custom order must include at least one item")
            else:
                booking.selected_items = items
                fields.append("selected_items")

        if "pricing" in changes:
            fields += _apply_pricing(booking, changes["pricing"], errors)

        if "admin_notes" in changes:
            booking.admin_notes = changes["admin_notes"] or ""
            fields.append("admin_notes")

        if errors:
            raise ValidationError(errors)
        booking.save(update_fields=fields + ["updated_at"])

    logger.info(f"Booking {booking.reference} updated: {', '.join(sorted(changes))}")
    return booking


def soft_delete_booking(booking_id) -> Booking:
    with transaction.atomic():
        booking = _locked_booking(booking_id)
        booking.is_deleted = True
        booking.save(update_fields=["is_deleted", "updated_at"])
    logger.info(f"Booking {booking.reference} deleted")
    return booking
