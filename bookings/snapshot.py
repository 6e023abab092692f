"""
Denormalized copy of what was ordered.

Everything the kitchen and the customer need is copied out of the definition
and the catalog into plain JSON, so the booking never points back at data that
can change.
"""

from menus.definitions import KIND_CATALOG_CATEGORIZED, KIND_INLINE_CATEGORIZED, KIND_SIMPLE

ITEM_INCLUDED = "included"
ITEM_SELECTED = "selected"
ITEM_ADDON = "addon"


def _money(value):
    return str(value)


def _catalog_item(entry, ref, category, item_type, group="", option_names=()):
    return {
        "name": entry.name,
        "description": entry.description,
        "category": category,
        "group": group,
        "type": item_type,
        "price": _money(entry.price),
        "price_modifier": _money(ref.price_modifier),
        "quantity": 1,
        "options": list(option_names),
        "is_vegetarian": entry.is_vegetarian,
        "is_vegan": entry.is_vegan,
        "allergens": list(entry.allergens),
    }


def _catalog_categorized_items(definition, selection, attendee_count, catalog):
    items = []
    for category in definition.categories:
        if not category.enabled:
            continue
        for ref in category.included_items:
            items.append(_catalog_item(catalog[ref.item_id], ref, category.name, ITEM_INCLUDED))
        picked_groups = selection.categories.get(category.name, {})
        for group in category.selection_groups:
            for pick in picked_groups.get(group.name, []):
                ref = group.find(pick.item_id)
                option_names = [ref.options[index].name for index in pick.options]
                items.append(
                    _catalog_item(catalog[ref.item_id], ref, category.name, ITEM_SELECTED, group.name, option_names)
                )
    return items


def _inline_categorized_items(definition, selection, attendee_count, catalog):
    items = []
    for category_name, picks in selection.category_items.items():
        category = definition.category(category_name)
        for pick in picks:
            item = category.find(pick.item_id)
            items.append(
                {
                    "id": item.id,
                    "name": item.name,
                    "description": item.description,
                    "category": category.name,
                    "type": ITEM_SELECTED,
                    "price_per_person": _money(item.price_per_person),
                    "quantity": pick.quantity,
                    "is_vegetarian": item.is_vegetarian,
                    "is_vegan": item.is_vegan,
                    "is_gluten_free": item.is_gluten_free,
                }
            )
    return items


def _simple_items(definition, selection, attendee_count, catalog):
    items = []
    for index, item in enumerate(definition.items):
        pick = selection.simple_items.get(index)
        items.append(
            {
                "name": item.name,
                "category": "items",
                "type": ITEM_INCLUDED,
                "price_modifier": _money(item.price_modifier),
                "quantity": item.quantity if item.quantity is not None else attendee_count,
                "choices": [item.choices[i].name for i in pick.choices] if pick else [],
                "options": [item.options[i].name for i in pick.options] if pick else [],
            }
        )
    return items


def _addon_items(definition, selection, attendee_count):
    items = []
    for addon_id in selection.fixed_addons:
        addon = definition.addons.fixed(addon_id)
        items.append(
            {
                "id": addon.id,
                "name": addon.name,
                "category": "addons",
                "type": ITEM_ADDON,
                "addon_kind": "fixed",
                "price_per_person": _money(addon.price_per_person),
                "quantity": attendee_count,
                "is_vegetarian": addon.is_vegetarian,
                "is_vegan": addon.is_vegan,
                "is_gluten_free": addon.is_gluten_free,
            }
        )
    for addon_id, quantity in selection.variable_addons.items():
        if not quantity:
            continue
        addon = definition.addons.variable(addon_id)
        items.append(
            {
                "id": addon.id,
                "name": addon.name,
                "category": "addons",
                "type": ITEM_ADDON,
                "addon_kind": "variable",
                "price_per_unit": _money(addon.price_per_unit),
                "unit": addon.unit,
                "quantity": quantity,
            }
        )
    return items


_SNAPSHOTTERS = {
    KIND_CATALOG_CATEGORIZED: _catalog_categorized_items,
    KIND_INLINE_CATEGORIZED: _inline_categorized_items,
    KIND_SIMPLE: _simple_items,
}


def build_selected_items(definition, selection, attendee_count, catalog=None):
    """Snapshot of a validated selection, in menu order followed by addons."""
    items = _SNAPSHOTTERS[definition.kind](definition, selection, attendee_count, catalog or {})
    return items + _addon_items(definition, selection, attendee_count)
