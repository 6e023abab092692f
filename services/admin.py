from django.contrib import admin

from .models import Location, Service


class ServiceInline(admin.TabularInline):
    model = Service
    extra = 0
    fields = (
        "name",
        "is_function",
        "is_active",
    )


@admin.register(Location)
class LocationAdmin(admin.ModelAdmin):
    list_display = ("name", "city", "is_active", "created_at")
    list_filter = ("is_active", "city")
    search_fields = ("name", "city")
    inlines = [ServiceInline]


@admin.register(Service)
class ServiceAdmin(admin.ModelAdmin):
    list_display = (
        "name",
        "location",
        "is_function",
        "is_active",
    )
    list_filter = ("is_function", "is_active")
    search_fields = ("name", "location__name")
