"""
Typed package structures.

Package definitions and custom-order configurations are stored as JSON on their
Django models and materialized into one of three ``Definition`` variants,
distinguished by ``kind``:

* ``catalog_categorized`` -- categories whose items reference ``CatalogItem`` rows
* ``inline_categorized`` -- custom-order categories carrying their own per-person prices
* ``simple`` -- a flat list of items with nested choices/options

Validation and pricing dispatch on ``kind``; see ``menus.validation`` and
``menus.pricing``.
"""

from decimal import Decimal
from typing import Annotated, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, model_validator

from shared.money import ZERO

KIND_CATALOG_CATEGORIZED = "catalog_categorized"
KIND_INLINE_CATEGORIZED = "inline_categorized"
KIND_SIMPLE = "simple"

SelectionType = Literal["single", "multiple"]


class _Strict(BaseModel):
    model_config = ConfigDict(extra="forbid")


class PricedName(_Strict):
    """A choice or option: a name plus what it adds per attendee."""

    name: str = Field(..., min_length=1)
    price_modifier: Decimal = ZERO


class DietaryFlags(_Strict):
    is_vegetarian: bool = False
    is_vegan: bool = False
    is_gluten_free: bool = False


class CatalogEntry(_Strict):
    """Materialized ``CatalogItem`` as seen by validation and pricing."""

    id: int
    name: str
    description: str = ""
    price: Decimal = ZERO
    category: str = ""
    is_vegetarian: bool = False
    is_vegan: bool = False
    allergens: List[str] = Field(default_factory=list)
    is_active: bool = True


# ---------------------------------------------------------------------------
# Addons
# ---------------------------------------------------------------------------

class FixedAddon(DietaryFlags):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    price_per_person: Decimal = Field(ZERO, ge=0)
    is_available: bool = True


class VariableAddon(_Strict):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    price_per_unit: Decimal = Field(ZERO, ge=0)
    unit: str = "each"
    min_quantity: int = Field(0, ge=0)
    max_quantity: int = Field(20, ge=0)
    is_available: bool = True

    @model_validator(mode="after")
    def _check_bounds(self):
        if self.min_quantity > self.max_quantity:
            raise ValueError(f"Variable addon '{self.name}' has min_quantity greater than max_quantity")
        return self


class AddonSet(_Strict):
    enabled: bool = False
    fixed_addons: List[FixedAddon] = Field(default_factory=list)
    variable_addons: List[VariableAddon] = Field(default_factory=list)

    def fixed(self, addon_id: str) -> Optional[FixedAddon]:
        return next((a for a in self.fixed_addons if a.id == addon_id), None)

    def variable(self, addon_id: str) -> Optional[VariableAddon]:
        return next((a for a in self.variable_addons if a.id == addon_id), None)

    @property
    def count(self) -> int:
        return len(self.fixed_addons) + len(self.variable_addons)


# ---------------------------------------------------------------------------
# Catalog-referencing categories (packages)
# ---------------------------------------------------------------------------

class CatalogRef(_Strict):
    item_id: int
    price_modifier: Decimal = ZERO
    options: List[PricedName] = Field(default_factory=list)


class SelectionGroup(_Strict):
    name: str = ""
    items: List[CatalogRef] = Field(default_factory=list)
    selection_type: SelectionType = "single"
    min_selections: int = Field(0, ge=0)
    max_selections: int = Field(1, ge=1)
    is_required: bool = False

    def find(self, item_id: int) -> Optional[CatalogRef]:
        return next((ref for ref in self.items if ref.item_id == item_id), None)


class Category(_Strict):
    name: str = ""
    enabled: bool = True
    included_items: List[CatalogRef] = Field(default_factory=list)
    selection_groups: List[SelectionGroup] = Field(default_factory=list)

    def group(self, name: str) -> Optional[SelectionGroup]:
        return next((g for g in self.selection_groups if g.name == name), None)


# ---------------------------------------------------------------------------
# Inline categories (custom orders)
# ---------------------------------------------------------------------------

class InlineItem(DietaryFlags):
    id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    description: str = ""
    price_per_person: Decimal = Field(ZERO, ge=0)
    is_available: bool = True


class InlineCategory(_Strict):
    name: Literal["entree", "mains", "desserts", "sides", "beverages"]
    display_name: str = ""
    is_active: bool = True
    items: List[InlineItem] = Field(default_factory=list)

    def find(self, item_id: str) -> Optional[InlineItem]:
        return next((item for item in self.items if item.id == item_id), None)


# ---------------------------------------------------------------------------
# Simple packages
# ---------------------------------------------------------------------------

class SimpleItem(_Strict):
    name: str = ""
    price_modifier: Decimal = ZERO
    # None scales modifiers per attendee; an integer is a fixed number of units
    quantity: Optional[int] = Field(None, ge=1)
    has_choices: bool = False
    selection_type: SelectionType = "single"
    choices: List[PricedName] = Field(default_factory=list)
    options: List[PricedName] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Definition variants
# ---------------------------------------------------------------------------

class BaseDefinition(_Strict):
    id: Optional[int] = None
    name: str = Field(..., min_length=1)
    service_id: Optional[int] = None
    location_id: Optional[int] = None
    description: str = ""
    base_price: Decimal = Field(ZERO, ge=0)
    min_attendees: int = Field(1, ge=1)
    max_attendees: int = Field(1000, ge=1)
    addons: AddonSet = Field(default_factory=AddonSet)

    def structure_errors(self) -> List[str]:
        """Every structural problem of the definition; an empty list means it can be sold."""
        errors = []
        if self.min_attendees > self.max_attendees:
            errors.append("Minimum attendees cannot be greater than maximum attendees")
        errors.extend(self._content_errors())
        return errors

    def _content_errors(self) -> List[str]:
        raise NotImplementedError

    def summary(self) -> Dict[str, int]:
        return {
            "total_items": self._item_count(),
            "enabled_categories": self._enabled_category_count(),
            "addon_count": self.addons.count,
        }

    def _item_count(self) -> int:
        raise NotImplementedError

    def _enabled_category_count(self) -> int:
        return 0


class CatalogCategorizedDefinition(BaseDefinition):
    kind: Literal["catalog_categorized"] = KIND_CATALOG_CATEGORIZED
    categories: List[Category] = Field(default_factory=list)

    def category(self, name: str) -> Optional[Category]:
        return next((c for c in self.categories if c.name == name), None)

    def referenced_catalog_ids(self) -> List[int]:
        ids = []
        for category in self.categories:
            ids.extend(ref.item_id for ref in category.included_items)
            for group in category.selection_groups:
                ids.extend(ref.item_id for ref in group.items)
        return sorted(set(ids))

    def _content_errors(self):
        errors = []
        if not self.categories:
            errors.append("Categorized packages must have at least one category")
        for position, category in enumerate(self.categories, start=1):
            label = category.name or f"#{position}"
            if not category.name.strip():
                errors.append(f"Category {label} must have a name")
            for group in category.selection_groups:
                if not group.name.strip():
                    errors.append(f"Selection groups in category '{label}' must have a name")
                if not group.items:
                    errors.append(f"Selection group '{group.name}' in category '{label}' must contain at least one item")
                if group.min_selections > group.max_selections:
                    errors.append(f"Selection group '{group.name}' has min_selections greater than max_selections")
            if category.enabled and not category.included_items and not any(
                g.items for g in category.selection_groups
            ):
                errors.append(f"Category '{label}' must have at least one included item or selection group")
        return errors

    def _item_count(self):
        return sum(
            len(c.included_items) + sum(len(g.items) for g in c.selection_groups)
            for c in self.categories
        )

    def _enabled_category_count(self):
        return sum(1 for c in self.categories if c.enabled)


class InlineCategorizedDefinition(BaseDefinition):
    kind: Literal["inline_categorized"] = KIND_INLINE_CATEGORIZED
    categories: List[InlineCategory] = Field(default_factory=list)

    def category(self, name: str) -> Optional[InlineCategory]:
        return next((c for c in self.categories if c.name == name), None)

    def _content_errors(self):
        errors = []
        seen = set()
        for category in self.categories:
            if category.name in seen:
                errors.append(f"Category '{category.name}' is defined more than once")
            seen.add(category.name)
            ids = [item.id for item in category.items]
            if len(ids) != len(set(ids)):
                errors.append(f"Category '{category.name}' has duplicate item ids")
        return errors

    def _item_count(self):
        return sum(len(c.items) for c in self.categories)

    def _enabled_category_count(self):
        return sum(1 for c in self.categories if c.is_active)


class SimpleDefinition(BaseDefinition):
    kind: Literal["simple"] = KIND_SIMPLE
    items: List[SimpleItem] = Field(default_factory=list)

    def _content_errors(self):
        errors = []
        if not self.items:
            errors.append("Simple packages must have at least one item")
        for position, item in enumerate(self.items, start=1):
            if not item.name.strip():
                errors.append(f"Item #{position} must have a name")
            if item.has_choices and not item.choices:
                errors.append(f"Item '{item.name}' offers choices but defines none")
        return errors

    def _item_count(self):
        return len(self.items)


Definition = Annotated[
    Union[CatalogCategorizedDefinition, InlineCategorizedDefinition, SimpleDefinition],
    Field(discriminator="kind"),
]

_definition_adapter = TypeAdapter(Definition)


def parse_definition(data) -> Definition:
    """Build the matching variant from a dict carrying a ``kind`` key."""
    return _definition_adapter.validate_python(data)
