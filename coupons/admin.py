from django.contrib import admin

from .models import Coupon, CouponRedemption


class CouponRedemptionInline(admin.TabularInline):
    model = CouponRedemption
    extra = 0
    readonly_fields = ("booking", "discount_amount", "redeemed_at")
    can_delete = False


@admin.register(Coupon)
class CouponAdmin(admin.ModelAdmin):
    list_display = (
        "code",
        "name",
        "discount_percentage",
        "used_count",
        "usage_limit",
        "expiry_date",
        "is_active",
    )
    list_filter = ("is_active", "applicable_locations")
    search_fields = ("code", "name")
    filter_horizontal = ("applicable_locations", "applicable_services")
    readonly_fields = ("used_count",)
    inlines = [CouponRedemptionInline]


@admin.register(CouponRedemption)
class CouponRedemptionAdmin(admin.ModelAdmin):
    list_display = ("coupon", "booking", "discount_amount", "redeemed_at")
    search_fields = ("coupon__code", "booking__reference")
    readonly_fields = ("coupon", "booking", "discount_amount", "redeemed_at")
