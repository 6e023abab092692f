"""
Price calculation.

Every component is kept separately on the ``PriceBreakdown``; the total is
derived. Call ``price`` only with a selection that passed ``menus.validation``:
a reference that cannot be resolved here is a programmer error and raises
``DefinitionError``.
"""

from decimal import Decimal
from typing import Mapping, Optional

from services.venues import ServiceRecord
from shared.exceptions import DefinitionError
from shared.money import ZERO, round_money, to_decimal
from shared.pydantic_models import PriceBreakdown, PriceLine

from .definitions import (
    KIND_CATALOG_CATEGORIZED,
    KIND_INLINE_CATEGORIZED,
    KIND_SIMPLE,
    CatalogEntry,
)
from .selections import SelectionPayload


class _Accumulator:
    def __init__(self):
        self.totals = {
            "item_modifiers": ZERO,
            "choice_modifiers": ZERO,
            "option_modifiers": ZERO,
            "fixed_addons": ZERO,
            "variable_addons": ZERO,
        }
        self.lines = []

    def add(self, component, kind, name, unit_price, multiplier, category="", group=""):
        unit_price = to_decimal(unit_price)
        amount = unit_price * multiplier
        self.totals[component] += amount
        self.lines.append(
            PriceLine(
                kind=kind,
                name=name,
                category=category,
                group=group,
                unit_price=unit_price,
                multiplier=multiplier,
                amount=round_money(amount),
            )
        )


def _catalog_name(catalog, item_id):
    entry = catalog.get(item_id)
    if entry is None:
        raise DefinitionError(f"Catalog item {item_id} could not be resolved")
    return entry.name


def _option(options, index, owner):
    if index < 0 or index >= len(options):
        raise DefinitionError(f"Option {index} of '{owner}' could not be resolved")
    return options[index]


def _price_catalog_categories(acc, definition, selection, attendee_count, catalog):
    for category in definition.categories:
        if not category.enabled:
            continue
        for ref in category.included_items:
            acc.add(
                "item_modifiers", "included", _catalog_name(catalog, ref.item_id),
                ref.price_modifier, attendee_count, category=category.name,
            )
        picked_groups = selection.categories.get(category.name, {})
        for group in category.selection_groups:
            for pick in picked_groups.get(group.name, []):
                ref = group.find(pick.item_id)
                if ref is None:
                    raise DefinitionError(f"Item {pick.item_id} is not part of '{group.name}'")
                name = _catalog_name(catalog, ref.item_id)
                acc.add(
                    "item_modifiers", "selected", name, ref.price_modifier, attendee_count,
                    category=category.name, group=group.name,
                )
                for index in pick.options:
                    option = _option(ref.options, index, name)
                    acc.add(
                        "option_modifiers", "option", f"{name}: {option.name}", option.price_modifier,
                        attendee_count, category=category.name, group=group.name,
                    )


def _price_inline_categories(acc, definition, selection, attendee_count, catalog):
    for category_name, picks in selection.category_items.items():
        category = definition.category(category_name)
        if category is None:
            raise DefinitionError(f"Category '{category_name}' could not be resolved")
        for pick in picks:
            item = category.find(pick.item_id)
            if item is None:
                raise DefinitionError(f"Item '{pick.item_id}' could not be resolved in {category_name}")
            acc.add(
                "item_modifiers", "selected", item.name, item.price_per_person,
                attendee_count * pick.quantity, category=category_name,
            )


def _price_simple_items(acc, definition, selection, attendee_count, catalog):
    for index, item in enumerate(definition.items):
        multiplier = item.quantity if item.quantity is not None else attendee_count
        acc.add("item_modifiers", "included", item.name, item.price_modifier, multiplier)
        pick = selection.simple_items.get(index)
        if pick is None:
            continue
        for choice_index in pick.choices:
            choice = _option(item.choices, choice_index, item.name)
            acc.add("choice_modifiers", "choice", f"{item.name}: {choice.name}", choice.price_modifier, multiplier)
        for option_index in pick.options:
            option = _option(item.options, option_index, item.name)
            acc.add("option_modifiers", "option", f"{item.name}: {option.name}", option.price_modifier, multiplier)


def _price_addons(acc, definition, selection, attendee_count):
    addons = definition.addons
    for addon_id in selection.fixed_addons:
        addon = addons.fixed(addon_id)
        if addon is None:
            raise DefinitionError(f"Fixed addon '{addon_id}' could not be resolved")
        acc.add("fixed_addons", "fixed_addon", addon.name, addon.price_per_person, attendee_count)
    for addon_id, quantity in selection.variable_addons.items():
        addon = addons.variable(addon_id)
        if addon is None:
            raise DefinitionError(f"Variable addon '{addon_id}' could not be resolved")
        if quantity:
            acc.add("variable_addons", "variable_addon", addon.name, addon.price_per_unit, quantity)


def venue_surcharge(selection, attendee_count, service) -> Decimal:
    if service is None or not service.is_function or not selection.venue:
        return ZERO
    option = service.venue_options.get(selection.venue)
    if option is None:
        raise DefinitionError(f"Venue option '{selection.venue}' could not be resolved")
    return option.surcharge(attendee_count)


_CONTENT_PRICERS = {
    KIND_CATALOG_CATEGORIZED: _price_catalog_categories,
    KIND_INLINE_CATEGORIZED: _price_inline_categories,
    KIND_SIMPLE: _price_simple_items,
}


def price(
    definition,
    selection: SelectionPayload,
    attendee_count: int,
    catalog: Optional[Mapping[int, CatalogEntry]] = None,
    service: Optional[ServiceRecord] = None,
) -> PriceBreakdown:
    """Turn a validated selection into a ``PriceBreakdown``. Deterministic and side-effect free."""
    acc = _Accumulator()
    _CONTENT_PRICERS[definition.kind](acc, definition, selection, attendee_count, catalog or {})
    _price_addons(acc, definition, selection, attendee_count)

    surcharge = venue_surcharge(selection, attendee_count, service)
    if surcharge:
        acc.lines.append(
            PriceLine(kind="venue", name=selection.venue, unit_price=surcharge, multiplier=1, amount=surcharge)
        )

    return PriceBreakdown(
        attendee_count=attendee_count,
        base_price=round_money(definition.base_price),
        base=round_money(definition.base_price * attendee_count),
        venue_surcharge=round_money(surcharge),
        lines=acc.lines,
        **{component: round_money(total) for component, total in acc.totals.items()},
    )
