from collections import OrderedDict
from decimal import Decimal

from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import Q
from django.utils import timezone

from services.venues import VENUE_BOTH, VENUE_INDOOR, VENUE_OUTDOOR


class BookingQuerySet(models.QuerySet):
    def live(self):
        return self.filter(is_deleted=False)


class Booking(models.Model):
    """A placed catering order.

    Menu, location and service names and all prices are copied in at creation
    time, and ``selected_items`` is a denormalized snapshot, so later catalog or
    package edits never change what was ordered. The foreign keys are kept only
    for reporting and are nulled if the referenced row goes away.
    """

    class Status(models.TextChoices):
        PENDING = "pending", "Pending"
        CONFIRMED = "confirmed", "Confirmed"
        PREPARING = "preparing", "Preparing"
        READY = "ready", "Ready"
        COMPLETED = "completed", "Completed"
        CANCELLED = "cancelled", "Cancelled"

    class PaymentStatus(models.TextChoices):
        PENDING = "pending", "Pending"
        DEPOSIT_PAID = "deposit_paid", "Deposit paid"
        FULLY_PAID = "fully_paid", "Fully paid"

    class DeliveryType(models.TextChoices):
        PICKUP = "Pickup", "Pickup"
        DELIVERY = "Delivery", "Delivery"
        EVENT = "Event", "Event"

    class SpiceLevel(models.TextChoices):
        MILD = "mild", "Mild"
        MEDIUM = "medium", "Medium"
        HOT = "hot", "Hot"
        EXTRA_HOT = "extra-hot", "Extra hot"

    class Venue(models.TextChoices):
        BOTH = VENUE_BOTH, "Indoor & outdoor"
        INDOOR = VENUE_INDOOR, "Indoor"
        OUTDOOR = VENUE_OUTDOOR, "Outdoor"

    reference = models.CharField(max_length=16, unique=True, editable=False)
    is_custom_order = models.BooleanField(default=False)

    package = models.ForeignKey(
        "menus.PackageDefinition", on_delete=models.SET_NULL, null=True, blank=True, related_name="bookings"
    )
    custom_order = models.ForeignKey(
        "menus.CustomOrderConfiguration", on_delete=models.SET_NULL, null=True, blank=True, related_name="bookings"
    )
    location = models.ForeignKey(
        "services.Location", on_delete=models.SET_NULL, null=True, blank=True, related_name="bookings"
    )
    service = models.ForeignKey(
        "services.Service", on_delete=models.SET_NULL, null=True, blank=True, related_name="bookings"
    )

    # Snapshot of the menu at order time
    menu_name = models.CharField(max_length=200)
    menu_base_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    location_name = models.CharField(max_length=200, blank=True)
    service_name = models.CharField(max_length=200, blank=True)

    customer_name = models.CharField(max_length=100)
    customer_email = models.EmailField()
    customer_phone = models.CharField(max_length=15)
    special_instructions = models.TextField(blank=True)
    dietary_requirements = models.JSONField(default=list, blank=True)
    spice_level = models.CharField(max_length=10, choices=SpiceLevel.choices, default=SpiceLevel.MEDIUM)

    attendee_count = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    selection = models.JSONField(default=dict, blank=True)
    selected_items = models.JSONField(default=list, blank=True)

    base_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    modifiers_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    addons_price = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    venue_charge = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    subtotal = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    discount_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    total = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    price_breakdown = models.JSONField(default=dict, blank=True)
    coupon_code = models.CharField(max_length=20, blank=True)

    delivery_type = models.CharField(max_length=10, choices=DeliveryType.choices)
    delivery_date = models.DateTimeField()
    address = models.JSONField(null=True, blank=True)
    venue_selection = models.CharField(max_length=10, choices=Venue.choices, blank=True)
    is_function = models.BooleanField(default=False)

    status = models.CharField(max_length=20, choices=Status.choices, default=Status.PENDING)
    payment_status = models.CharField(max_length=20, choices=PaymentStatus.choices, default=PaymentStatus.PENDING)
    deposit_amount = models.DecimalField(max_digits=10, decimal_places=2, default=Decimal("0.00"))
    order_date = models.DateTimeField(default=timezone.now)
    admin_notes = models.TextField(blank=True)
    cancellation_reason = models.TextField(blank=True)
    is_deleted = models.BooleanField(default=False)

    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = BookingQuerySet.as_manager()

    class Meta:
        ordering = ["-order_date", "-id"]
        indexes = [
            models.Index(fields=["status", "delivery_date"], name="booking_status_delivery_idx"),
            models.Index(fields=["customer_email"], name="booking_customer_email_idx"),
        ]
        constraints = [
            models.CheckConstraint(condition=Q(attendee_count__gte=1), name="booking_attendee_count_positive"),
            models.CheckConstraint(condition=Q(total__gte=0), name="booking_total_non_negative"),
            models.CheckConstraint(condition=Q(deposit_amount__gte=0), name="booking_deposit_non_negative"),
        ]

    def __str__(self):
        return f"{self.reference} - {self.customer_name} ({self.get_status_display()})"

    @property
    def is_terminal(self) -> bool:
        return self.status in (self.Status.COMPLETED, self.Status.CANCELLED)

    @property
    def pricing(self) -> dict:
        return {
            "base_price": self.base_price,
            "modifiers_price": self.modifiers_price,
            "addons_price": self.addons_price,
            "venue_charge": self.venue_charge,
            "subtotal": self.subtotal,
            "discount_amount": self.discount_amount,
            "total": self.total,
        }

    @property
    def balance_due(self) -> Decimal:
        if self.payment_status == self.PaymentStatus.FULLY_PAID:
            return Decimal("0.00")
        return max(Decimal("0.00"), self.total - self.deposit_amount)

    def customer_details(self) -> dict:
        return {
            "name": self.customer_name,
            "email": self.customer_email,
            "phone": self.customer_phone,
            "special_instructions": self.special_instructions,
            "dietary_requirements": list(self.dietary_requirements or []),
            "spice_level": self.spice_level,
        }

    def delivery_details(self) -> dict:
        return {
            "delivery_type": self.delivery_type,
            "delivery_date": self.delivery_date,
            "address": self.address,
        }

    def items_by_category(self) -> "OrderedDict[str, list]":
        """Group the snapshot items by category, keeping order of first appearance."""
        grouped = OrderedDict()
        for item in self.selected_items or []:
            grouped.setdefault(item.get("category") or "other", []).append(item)
        return grouped
