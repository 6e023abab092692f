# shared/pydantic_models.py
from decimal import Decimal
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from shared.money import ZERO, round_money


class ValidationResult(BaseModel):
    model_config = ConfigDict(extra="forbid")
    errors: List[str] = Field(default_factory=list)

    @computed_field
    @property
    def ok(self) -> bool:
        return not self.errors

    def add(self, message: str) -> None:
        self.errors.append(message)


class PriceLine(BaseModel):
    """One priced component of an order, kept for display and the booking snapshot."""

    model_config = ConfigDict(extra="forbid")
    kind: str = Field(..., description="item, choice, option, fixed_addon, variable_addon or venue")
    name: str
    category: str = ""
    group: str = ""
    unit_price: Decimal = ZERO
    multiplier: int = Field(1, description="Attendee count or unit quantity the unit price is scaled by")
    amount: Decimal = ZERO


class PriceBreakdown(BaseModel):
    model_config = ConfigDict(extra="forbid")
    attendee_count: int
    base_price: Decimal = Field(ZERO, description="Per-attendee base price of the definition")
    base: Decimal = ZERO
    item_modifiers: Decimal = ZERO
    choice_modifiers: Decimal = ZERO
    option_modifiers: Decimal = ZERO
    fixed_addons: Decimal = ZERO
    variable_addons: Decimal = ZERO
    venue_surcharge: Decimal = ZERO
    lines: List[PriceLine] = Field(default_factory=list)
    errors: List[str] = Field(default_factory=list)

    @computed_field
    @property
    def modifiers(self) -> Decimal:
        return round_money(self.item_modifiers + self.choice_modifiers + self.option_modifiers)

    @computed_field
    @property
    def addons(self) -> Decimal:
        return round_money(self.fixed_addons + self.variable_addons)

    @computed_field
    @property
    def total(self) -> Decimal:
        return round_money(self.base + self.modifiers + self.addons + self.venue_surcharge)

    @computed_field
    @property
    def per_attendee(self) -> Decimal:
        if self.attendee_count < 1:
            return ZERO
        return round_money(self.total / self.attendee_count)

    @property
    def ok(self) -> bool:
        return not self.errors

    def components(self) -> dict:
        """Every separately retained component, used to compare two quotes."""
        return {
            "base": self.base,
            "item_modifiers": self.item_modifiers,
            "choice_modifiers": self.choice_modifiers,
            "option_modifiers": self.option_modifiers,
            "fixed_addons": self.fixed_addons,
            "variable_addons": self.variable_addons,
            "venue_surcharge": self.venue_surcharge,
            "total": self.total,
        }


class CouponResult(BaseModel):
    model_config = ConfigDict(extra="forbid")
    code: str
    applicable: bool
    discount: Decimal = ZERO
    original_total: Decimal = ZERO
    new_total: Decimal = ZERO
    reason: Optional[str] = None
