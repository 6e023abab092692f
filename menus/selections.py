"""Customer selection payloads, one shape shared by every definition kind."""

from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError


class CatalogPick(BaseModel):
    model_config = ConfigDict(extra="forbid")
    item_id: int
    options: List[int] = Field(default_factory=list, description="Indices into the item's options")


class InlinePick(BaseModel):
    model_config = ConfigDict(extra="forbid")
    item_id: str
    quantity: int = Field(1, ge=1)


class SimplePick(BaseModel):
    model_config = ConfigDict(extra="forbid")
    choices: List[int] = Field(default_factory=list)
    options: List[int] = Field(default_factory=list)


class SelectionPayload(BaseModel):
    """
    What the customer picked.

    ``categories`` maps category name -> selection group name -> picked catalog items
    (categorized packages). ``category_items`` maps a custom-order category to its
    picked inline items. ``simple_items`` is keyed by the item's position in a simple
    package.
    """

    model_config = ConfigDict(extra="forbid")
    categories: Dict[str, Dict[str, List[CatalogPick]]] = Field(default_factory=dict)
    category_items: Dict[str, List[InlinePick]] = Field(default_factory=dict)
    simple_items: Dict[int, SimplePick] = Field(default_factory=dict)
    fixed_addons: List[str] = Field(default_factory=list)
    variable_addons: Dict[str, int] = Field(default_factory=dict)
    venue: Optional[str] = None


def payload_errors(exc: PydanticValidationError) -> List[str]:
    """Flatten a payload parsing failure into readable messages."""
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()))
        messages.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    return messages


def parse_selection(payload) -> SelectionPayload:
    if isinstance(payload, SelectionPayload):
        return payload
    return SelectionPayload.model_validate(payload or {})
