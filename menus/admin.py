from django.contrib import admin

from shared.exceptions import DefinitionError

from .models import CatalogItem, CustomOrderConfiguration, PackageDefinition


class CatalogItemAdmin(admin.ModelAdmin):
    list_display = ('name', 'category', 'price', 'is_vegetarian', 'is_vegan', 'is_active')
    list_filter = ('category', 'is_vegetarian', 'is_vegan', 'is_active')
    search_fields = ('name', 'description')


class PackageDefinitionAdmin(admin.ModelAdmin):
    list_display = ('name', 'service', 'location', 'package_type', 'base_price', 'get_summary', 'is_active')
    list_filter = ('package_type', 'is_active', 'location')
    search_fields = ('name', 'service__name', 'location__name')

    def get_summary(self, obj):
        try:
            summary = obj.summary
        except DefinitionError:
            return "malformed"
        return f"{summary['total_items']} items, {summary['enabled_categories']} categories, {summary['addon_count']} addons"
    get_summary.short_description = 'Contents'


class CustomOrderConfigurationAdmin(admin.ModelAdmin):
    list_display = ('name', 'location', 'service', 'min_attendees', 'max_attendees', 'is_active')
    list_filter = ('is_active', 'location')
    search_fields = ('name', 'location__name')


admin.site.register(CatalogItem, CatalogItemAdmin)
admin.site.register(PackageDefinition, PackageDefinitionAdmin)
admin.site.register(CustomOrderConfiguration, CustomOrderConfigurationAdmin)
