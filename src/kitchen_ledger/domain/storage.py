"""Domain models for kitchen storage and frozen portions."""

from dataclasses import dataclass
from datetime import datetime

from kitchen_ledger.domain.quantities import Quantity

KITCHEN = "kitchen"


@dataclass(frozen=True)
class Ingredient:
    """Ingredient master record."""

    id: str
    name: str
    unit: str
    unit_size: Quantity | None = None


@dataclass(frozen=True)
class StorageItem:
    """Stock of one ingredient in one location."""

    ingredient_id: str
    quantity: Quantity
    open_container_remaining: Quantity | None = None
    reference_weight_per_bunch: Quantity | None = None
    id: str | None = None
    location: str = KITCHEN
    last_updated: datetime | None = None

    @property
    def open_amount(self) -> float:
        if self.open_container_remaining is None:
            return 0.0
        return self.open_container_remaining.value


@dataclass(frozen=True)
class FrozenPortionPool:
    """Frozen portions of an ingredient."""

    id: str | None
    ingredient_id: str
    ingredient_name: str
    portions: int
    yield_per_portion: Quantity
    date_frozen: datetime | None = None
    best_before: datetime | None = None
    notes: str | None = None

    @property
    def total(self) -> Quantity:
        return self.yield_per_portion.with_value(
            self.portions * self.yield_per_portion.value
        )
