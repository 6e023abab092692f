from django.core.exceptions import ValidationError
from django.db import models
from django.utils import timezone
from pydantic import ValidationError as PydanticValidationError

from .venues import ServiceRecord, VenueOptions


class LocationQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True)


class Location(models.Model):
    name = models.CharField(max_length=200, unique=True)
    city = models.CharField(max_length=120)
    address = models.CharField(max_length=255, blank=True)
    is_active = models.BooleanField(default=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = LocationQuerySet.as_manager()

    class Meta:
        ordering = ["name", "id"]

    def __str__(self):
        return f"{self.name} ({self.city})"


class ServiceQuerySet(models.QuerySet):
    def active(self):
        return self.filter(is_active=True, location__is_active=True)

    def functions(self):
        return self.filter(is_function=True)


class Service(models.Model):
    """A service offered at a location, e.g. delivery catering or a function venue.

    ``venue_options`` only matters when ``is_function`` is set; it holds the
    ``both``/``indoor``/``outdoor`` configuration described by ``VenueOptions``.
    """

    name = models.CharField(max_length=200)
    location = models.ForeignKey(Location, on_delete=models.PROTECT, related_name="services")
    description = models.TextField(blank=True)
    is_active = models.BooleanField(default=True)
    is_function = models.BooleanField(default=False)
    venue_options = models.JSONField(default=dict, blank=True)
    created_at = models.DateTimeField(default=timezone.now)
    updated_at = models.DateTimeField(auto_now=True)

    objects = ServiceQuerySet.as_manager()

    class Meta:
        ordering = ["location_id", "name", "id"]
        constraints = [
            models.UniqueConstraint(fields=["name", "location"], name="service_unique_name_per_location"),
        ]

    def __str__(self):
        return f"{self.name} @ {self.location.name}"

    def get_venue_options(self) -> VenueOptions:
        return VenueOptions.model_validate(self.venue_options or {})

    def clean(self):
        try:
            self.get_venue_options()
        except PydanticValidationError as exc:
            raise ValidationError({"venue_options": f"Invalid venue options: {exc.errors()[0]['msg']}"})

    def to_record(self) -> ServiceRecord:
        return ServiceRecord(
            id=self.id,
            name=self.name,
            location_id=self.location_id,
            is_function=self.is_function,
            venue_options=self.get_venue_options(),
        )
