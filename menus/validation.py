"""
Selection validation.

``validate`` never raises for a bad selection; it collects every violated rule
into a ``ValidationResult`` and leaves the decision to the caller.
"""

from collections import Counter
from typing import Mapping, Optional

from services.venues import ServiceRecord
from shared.pydantic_models import ValidationResult

from .definitions import (
    KIND_CATALOG_CATEGORIZED,
    KIND_INLINE_CATEGORIZED,
    KIND_SIMPLE,
    CatalogEntry,
)
from .selections import SelectionPayload


def _duplicates(values):
    return [value for value, count in Counter(values).items() if count > 1]


def _check_indices(result, indices, available, what, owner):
    for index in indices:
        if index < 0 or index >= len(available):
            result.add(f"{what.capitalize()} {index} is out of range for '{owner}'")
    for index in _duplicates(indices):
        result.add(f"{what.capitalize()} {index} for '{owner}' is selected more than once")


def _validate_attendees(result, definition, attendee_count):
    if attendee_count < 1:
        result.add("Attendee count must be at least 1")
    elif not definition.min_attendees <= attendee_count <= definition.max_attendees:
        result.add(
            f"Attendee count must be between {definition.min_attendees} "
            f"and {definition.max_attendees} for '{definition.name}'"
        )


def _validate_catalog_categories(result, definition, selection, catalog):
    for category in definition.categories:
        if not category.enabled:
            continue
        for ref in category.included_items:
            entry = catalog.get(ref.item_id)
            if entry is None:
                result.add(f"Catalog item {ref.item_id} in '{category.name}' does not exist")
            elif not entry.is_active:
                result.add(f"Included item '{entry.name}' in '{category.name}' is no longer available")

        picked_groups = selection.categories.get(category.name, {})
        for group in category.selection_groups:
            picks = picked_groups.get(group.name, [])
            label = f"'{group.name}' in {category.name}"
            if group.is_required and not picks:
                result.add(f"A selection is required for {label}")
            if group.selection_type == "single" and len(picks) > 1:
                result.add(f"Only one selection is allowed for {label}")
            elif group.selection_type == "multiple" and len(picks) > group.max_selections:
                result.add(f"Too many selections for {label}: the maximum is {group.max_selections}")
            if picks and len(picks) < group.min_selections:
                result.add(f"Too few selections for {label}: the minimum is {group.min_selections}")
            for item_id in _duplicates(pick.item_id for pick in picks):
                result.add(f"Item {item_id} is selected more than once for {label}")

            for pick in picks:
                ref = group.find(pick.item_id)
                if ref is None:
                    result.add(f"Item {pick.item_id} is not part of {label}")
                    continue
                entry = catalog.get(pick.item_id)
                if entry is None:
                    result.add(f"Catalog item {pick.item_id} does not exist")
                    continue
                if not entry.is_active:
                    result.add(f"'{entry.name}' is not available")
                _check_indices(result, pick.options, ref.options, "option", entry.name)

        for group_name in picked_groups:
            if category.group(group_name) is None:
                result.add(f"Unknown selection group '{group_name}' in {category.name}")

    for category_name in selection.categories:
        category = definition.category(category_name)
        if category is None:
            result.add(f"Unknown category '{category_name}'")
        elif not category.enabled:
            result.add(f"Category '{category_name}' is not enabled")


def _validate_inline_categories(result, definition, selection, catalog):
    for category_name, picks in selection.category_items.items():
        category = definition.category(category_name)
        if category is None:
            result.add(f"Unknown category '{category_name}'")
            continue
        if not category.is_active:
            result.add(f"Category '{category_name}' is not available")
            continue
        for item_id in _duplicates(pick.item_id for pick in picks):
            result.add(f"Item '{item_id}' is selected more than once in {category_name}")
        for pick in picks:
            item = category.find(pick.item_id)
            if item is None:
                result.add(f"Item '{pick.item_id}' does not exist in {category_name}")
            elif not item.is_available:
                result.add(f"'{item.name}' is not available")


def _validate_simple_items(result, definition, selection, catalog):
    for index, pick in selection.simple_items.items():
        if index < 0 or index >= len(definition.items):
            result.add(f"Item {index} is out of range")
            continue
        item = definition.items[index]
        if pick.choices and not item.has_choices:
            result.add(f"'{item.name}' does not offer choices")
        else:
            _check_indices(result, pick.choices, item.choices, "choice", item.name)
            if item.selection_type == "single" and len(pick.choices) > 1:
                result.add(f"Only one choice is allowed for '{item.name}'")
        _check_indices(result, pick.options, item.options, "option", item.name)

    for index, item in enumerate(definition.items):
        pick = selection.simple_items.get(index)
        if item.has_choices and item.choices and (pick is None or not pick.choices):
            result.add(f"A choice is required for '{item.name}'")


def _validate_addons(result, definition, selection):
    addons = definition.addons
    if (selection.fixed_addons or selection.variable_addons) and not addons.enabled:
        result.add(f"Addons are not enabled for '{definition.name}'")
        return

    for addon_id in _duplicates(selection.fixed_addons):
        result.add(f"Fixed addon '{addon_id}' is selected more than once")
    for addon_id in selection.fixed_addons:
        addon = addons.fixed(addon_id)
        if addon is None:
            result.add(f"Fixed addon '{addon_id}' does not exist")
        elif not addon.is_available:
            result.add(f"Fixed addon '{addon.name}' is not available")

    for addon_id, quantity in selection.variable_addons.items():
        addon = addons.variable(addon_id)
        if addon is None:
            result.add(f"Variable addon '{addon_id}' does not exist")
            continue
        if not addon.is_available:
            result.add(f"Variable addon '{addon.name}' is not available")
        if not addon.min_quantity <= quantity <= addon.max_quantity:
            result.add(
                f"Quantity for '{addon.name}' must be between {addon.min_quantity} "
                f"and {addon.max_quantity} {addon.unit}"
            )


def _validate_venue(result, selection, attendee_count, service):
    if service is None or not service.is_function:
        if selection.venue:
            result.add("A venue can only be selected for function services")
        return
    if not selection.venue:
        result.add(f"A venue selection is required for '{service.name}'")
        return
    option = service.venue_options.get(selection.venue)
    if option is None:
        result.add(f"Unknown venue option '{selection.venue}'")
    elif not option.available:
        result.add(f"Venue option '{selection.venue}' is not available")
    elif not option.min_people <= attendee_count <= option.max_people:
        result.add(
            f"Venue option '{selection.venue}' requires between {option.min_people} "
            f"and {option.max_people} attendees"
        )


_CONTENT_VALIDATORS = {
    KIND_CATALOG_CATEGORIZED: _validate_catalog_categories,
    KIND_INLINE_CATEGORIZED: _validate_inline_categories,
    KIND_SIMPLE: _validate_simple_items,
}


def validate(
    definition,
    selection: SelectionPayload,
    attendee_count: int,
    catalog: Optional[Mapping[int, CatalogEntry]] = None,
    service: Optional[ServiceRecord] = None,
) -> ValidationResult:
    """Check ``selection`` against ``definition`` and report every violation."""
    result = ValidationResult()
    _validate_attendees(result, definition, attendee_count)
    _CONTENT_VALIDATORS[definition.kind](result, definition, selection, catalog or {})
    _validate_addons(result, definition, selection)
    _validate_venue(result, selection, attendee_count, service)
    return result
