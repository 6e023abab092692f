"""
Venue options of a "function" service.

Service records are owned by the location/service directory; the pricing
engine only ever sees them through the materialized ``ServiceRecord``.
"""

from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from shared.money import ZERO, round_money

VENUE_BOTH = "both"
VENUE_INDOOR = "indoor"
VENUE_OUTDOOR = "outdoor"
VENUE_CHOICES = (VENUE_BOTH, VENUE_INDOOR, VENUE_OUTDOOR)


class VenueOption(BaseModel):
    model_config = ConfigDict(extra="forbid")
    available: bool = False
    min_people: int = Field(1, ge=1)
    max_people: int = Field(1000, ge=1)
    venue_charge: Decimal = Field(ZERO, ge=0)
    # Charge only applies below this attendee count; None charges unconditionally
    charge_threshold: Optional[int] = Field(None, ge=1)

    @model_validator(mode="after")
    def _check_range(self):
        if self.min_people > self.max_people:
            raise ValueError("min_people cannot be greater than max_people")
        return self

    def surcharge(self, attendee_count: int) -> Decimal:
        if self.venue_charge <= 0:
            return ZERO
        if self.charge_threshold is not None and attendee_count >= self.charge_threshold:
            return ZERO
        return round_money(self.venue_charge)


class VenueOptions(BaseModel):
    model_config = ConfigDict(extra="forbid")
    both: VenueOption = Field(default_factory=lambda: VenueOption(min_people=70, max_people=120))
    indoor: VenueOption = Field(default_factory=lambda: VenueOption(min_people=35, max_people=60))
    outdoor: VenueOption = Field(
        default_factory=lambda: VenueOption(
            min_people=20, max_people=90, venue_charge=Decimal("200"), charge_threshold=35
        )
    )

    @model_validator(mode="after")
    def _check_thresholds(self):
        # Only the outdoor area waives its charge for larger parties
        for name in (VENUE_BOTH, VENUE_INDOOR):
            if getattr(self, name).charge_threshold is not None:
                raise ValueError(f"charge_threshold is only supported for the {VENUE_OUTDOOR} venue, not {name}")
        return self

    def get(self, name: str) -> Optional[VenueOption]:
        if name not in VENUE_CHOICES:
            return None
        return getattr(self, name)


class ServiceRecord(BaseModel):
    """Read-only view of a service as consumed by validation and pricing."""

    model_config = ConfigDict(extra="forbid")
    id: Optional[int] = None
    name: str = ""
    location_id: Optional[int] = None
    is_function: bool = False
    venue_options: VenueOptions = Field(default_factory=VenueOptions)
