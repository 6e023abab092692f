from django.core.exceptions import ValidationError
from django.core.validators import MinValueValidator
from django.db import models
from django.db.models import F, Q
from django.utils import timezone
from pydantic import ValidationError as PydanticValidationError

from shared.exceptions import DefinitionError

from .definitions import (
    KIND_CATALOG_CATEGORIZED,
    KIND_INLINE_CATEGORIZED,
    KIND_SIMPLE,
    CatalogEntry,
    parse_definition,
)


class ActiveQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)


class CatalogItem(models.Model):
    class Category(models.TextChoices):
        ENTREE = "entree", "Entree"
        MAINS = "mains", "Mains"
        DESSERTS = "desserts", "Desserts"
        ADDONS = "addons", "Addons"

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    category = models.CharField(max_length=20, choices=Category.choices)
    is_vegetarian = models.BooleanField(default=False)
    is_vegan = models.BooleanField(default=False)
    allergens = models.JSONField(default=list, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ["category", "name", "id"]
        constraints = [
            models.CheckConstraint(condition=Q(price__gte=0), name="catalog_item_price_non_negative"),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_category_display()})"

    def to_entry(self) -> CatalogEntry:
        return CatalogEntry(
            id=self.id,
            name=self.name,
            description=self.description,
            price=self.price,
            category=self.category,
            is_vegetarian=self.is_vegetarian,
            is_vegan=self.is_vegan,
            allergens=list(self.allergens or []),
            is_active=self.is_active,
        )


class DefinitionModelMixin:
    """Shared ``clean``/materialization for models stored as JSON structures."""

    def definition_data(self) -> dict:
        raise NotImplementedError

    def to_definition(self):
        try:
            return parse_definition(self.definition_data())
        except PydanticValidationError as exc:
            raise DefinitionError(f"{self._meta.verbose_name} '{self.name}' is malformed: {exc}") from exc

    def clean(self):
        super().clean()
        if self.min_attendees and self.max_attendees and self.min_attendees > self.max_attendees:
            raise ValidationError({"min_attendees": "Minimum attendees cannot be greater than maximum attendees"})
        try:
            definition = self.to_definition()
        except DefinitionError as exc:
            raise ValidationError(str(exc))
        errors = definition.structure_errors()
        if errors:
            raise ValidationError(errors)

    @property
    def summary(self) -> dict:
        return self.to_definition().summary()


class PackageDefinition(DefinitionModelMixin, models.Model):
    """A sellable package: categorized (catalog references) or simple (flat item list)."""

    class PackageType(models.TextChoices):
        CATEGORIZED = "categorized", "Categorized"
        SIMPLE = "simple", "Simple"

    name = models.CharField(max_length=200)
    service = models.ForeignKey("services.Service", on_delete=models.PROTECT, related_name="packages")
    location = models.ForeignKey("services.Location", on_delete=models.PROTECT, related_name="packages")
    description = models.TextField(blank=True)
    base_price = models.DecimalField(max_digits=10, decimal_places=2, validators=[MinValueValidator(0)])
    min_attendees = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    max_attendees = models.PositiveIntegerField(default=1000, validators=[MinValueValidator(1)])
    package_type = models.CharField(max_length=20, choices=PackageType.choices, default=PackageType.CATEGORIZED)
    categories = models.JSONField(default=list, blank=True)
    simple_items = models.JSONField(default=list, blank=True)
    addons = models.JSONField(default=dict, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ["location_id", "name", "id"]
        constraints = [
            models.UniqueConstraint(fields=["name", "service"], name="package_unique_name_per_service"),
            models.CheckConstraint(condition=Q(min_attendees__gte=1), name="package_min_attendees_positive"),
            models.CheckConstraint(
                condition=Q(min_attendees__lte=F("max_attendees")),
                name="package_min_lte_max_attendees",
            ),
        ]

    def __str__(self):
        return f"{self.name} ({self.get_package_type_display()})"

    def definition_data(self):
        data = {
            "id": self.id,
            "name": self.name,
            "service_id": self.service_id,
            "location_id": self.location_id,
            "description": self.description,
            "base_price": self.base_price if self.base_price is not None else 0,
            "min_attendees": self.min_attendees,
            "max_attendees": self.max_attendees,
            "addons": self.addons or {},
        }
        if self.package_type == self.PackageType.SIMPLE:
            data.update(kind=KIND_SIMPLE, items=self.simple_items or [])
        else:
            data.update(kind=KIND_CATALOG_CATEGORIZED, categories=self.categories or [])
        return data


class CustomOrderConfiguration(DefinitionModelMixin, models.Model):
    """Location-scoped catalog from which customers compose a free-form order.

    Items carry their own ``price_per_person``; there is no base price.
    """

    name = models.CharField(max_length=200)
    description = models.TextField(blank=True)
    location = models.ForeignKey("services.Location", on_delete=models.PROTECT, related_name="custom_orders")
    service = models.ForeignKey(
        "services.Service",
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name="custom_orders",
    )
    min_attendees = models.PositiveIntegerField(default=1, validators=[MinValueValidator(1)])
    max_attendees = models.PositiveIntegerField(default=100, validators=[MinValueValidator(1)])
    categories = models.JSONField(default=list, blank=True)
    addons = models.JSONField(default=dict, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ActiveQuerySet.as_manager()

    class Meta:
        ordering = ["location_id", "name", "id"]
        constraints = [
            models.UniqueConstraint(fields=["name", "location"], name="custom_order_unique_name_per_location"),
            models.CheckConstraint(
                condition=Q(min_attendees__lte=F("max_attendees")),
                name="custom_order_min_lte_max_attendees",
            ),
        ]

    def __str__(self):
        return f"{self.name} (custom order)"

    def definition_data(self):
        return {
            "kind": KIND_INLINE_CATEGORIZED,
            "id": self.id,
            "name": self.name,
            "service_id": self.service_id,
            "location_id": self.location_id,
            "description": self.description,
            "min_attendees": self.min_attendees,
            "max_attendees": self.max_attendees,
            "categories": self.categories or [],
            "addons": self.addons or {},
        }
