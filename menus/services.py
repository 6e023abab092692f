"""
Definition resolution for the selection validator and price calculator.

The engine in ``menus.validation`` and ``menus.pricing`` only works on
materialized data. These helpers load a package or custom-order
configuration, the catalog items it references and its service record, then
hand them over.
"""

from dataclasses import dataclass
from typing import Dict, Optional

from pydantic import ValidationError as PydanticValidationError

from shared.exceptions import NotFoundError
from shared.pydantic_models import PriceBreakdown, ValidationResult

from . import pricing, validation
from .definitions import KIND_CATALOG_CATEGORIZED, CatalogEntry
from .models import CatalogItem, CustomOrderConfiguration, PackageDefinition
from .selections import SelectionPayload, parse_selection, payload_errors


@dataclass
class ResolvedDefinition:
    instance: object
    definition: object
    catalog: Dict[int, CatalogEntry]
    service: Optional[object]


def resolve_definition(definition_id, custom_order=False) -> ResolvedDefinition:
    model = CustomOrderConfiguration if custom_order else PackageDefinition
    try:
        instance = model.objects.active().select_related("service").get(pk=definition_id)
    except model.DoesNotExist:
        raise NotFoundError(f"{model._meta.verbose_name.capitalize()} {definition_id} does not exist")

    definition = instance.to_definition()
    catalog = {}
    if definition.kind == KIND_CATALOG_CATEGORIZED:
        ids = definition.referenced_catalog_ids()
        catalog = {item.id: item.to_entry() for item in CatalogItem.objects.filter(id__in=ids)}
    service = instance.service.to_record() if instance.service_id else None
    return ResolvedDefinition(instance=instance, definition=definition, catalog=catalog, service=service)


def _parse(payload):
    try:
        return parse_selection(payload), []
    except PydanticValidationError as exc:
        return None, payload_errors(exc)


def validate_resolved(resolved: ResolvedDefinition, selection: SelectionPayload, attendee_count) -> ValidationResult:
    return validation.validate(
        resolved.definition, selection, attendee_count, catalog=resolved.catalog, service=resolved.service
    )


def price_resolved(resolved: ResolvedDefinition, selection: SelectionPayload, attendee_count) -> PriceBreakdown:
    result = validate_resolved(resolved, selection, attendee_count)
    if not result.ok:
        return PriceBreakdown(attendee_count=attendee_count, errors=result.errors)
    return pricing.price(
        resolved.definition, selection, attendee_count, catalog=resolved.catalog, service=resolved.service
    )


def validate_selection(definition_id, payload, attendee_count, custom_order=False) -> ValidationResult:
    """Validate a selection against a stored package or custom-order configuration.

    Raises ``NotFoundError`` for an unknown or inactive definition; everything
    else is reported on the result.
    """
    resolved = resolve_definition(definition_id, custom_order=custom_order)
    selection, errors = _parse(payload)
    if errors:
        return ValidationResult(errors=errors)
    return validate_resolved(resolved, selection, attendee_count)


def compute_price(definition_id, payload, attendee_count, custom_order=False) -> PriceBreakdown:
    """Price a selection. An invalid selection yields an empty breakdown carrying ``errors``."""
    resolved = resolve_definition(definition_id, custom_order=custom_order)
    selection, errors = _parse(payload)
    if errors:
        return PriceBreakdown(attendee_count=attendee_count, errors=errors)
    return price_resolved(resolved, selection, attendee_count)
