from django.contrib import admin, messages

from shared.exceptions import ValidationError

from .lifecycle import STATUS_TRANSITIONS
from .models import Booking
from .services import soft_delete_booking, transition_status


@admin.register(Booking)
class BookingAdmin(admin.ModelAdmin):
    list_display = (
        "reference",
        "customer_name",
        "menu_name",
        "attendee_count",
        "delivery_type",
        "delivery_date",
        "total",
        "status",
        "payment_status",
        "is_deleted",
    )
    list_filter = ("status", "payment_status", "delivery_type", "is_custom_order", "is_deleted", "location")
    search_fields = ("reference", "customer_name", "customer_email", "customer_phone", "menu_name")
    date_hierarchy = "delivery_date"
    readonly_fields = (
        "reference",
        "is_custom_order",
        "menu_name",
        "menu_base_price",
        "location_name",
        "service_name",
        "selection",
        "selected_items",
        "price_breakdown",
        "coupon_code",
        "attendee_count",
        "delivery_type",
        "delivery_date",
        "address",
        "venue_selection",
        "base_price",
        "modifiers_price",
        "addons_price",
        "venue_charge",
        "subtotal",
        "discount_amount",
        "total",
        "status",
        "payment_status",
        "order_date",
        "created_at",
        "updated_at",
    )
    actions = ["confirm_bookings", "soft_delete_bookings"]

    def has_delete_permission(self, request, obj=None):
        # Bookings are only ever soft deleted
        return False

    @admin.action(description="Confirm selected pending bookings")
    def confirm_bookings(self, request, queryset):
        confirmed = 0
        for booking in queryset:
            if Booking.Status.CONFIRMED not in STATUS_TRANSITIONS.get(Booking.Status(booking.status), set()):
                continue
            try:
                transition_status(booking.pk, Booking.Status.CONFIRMED)
                confirmed += 1
            except ValidationError as exc:
                self.message_user(request, f"{booking.reference}: {exc}", level=messages.WARNING)
        self.message_user(request, f"{confirmed} booking(s) confirmed.")

    @admin.action(description="Soft delete selected bookings")
    def soft_delete_bookings(self, request, queryset):
        deleted = 0
        for booking in queryset.filter(is_deleted=False):
            soft_delete_booking(booking.pk)
            deleted += 1
        self.message_user(request, f"{deleted} booking(s) deleted.")
