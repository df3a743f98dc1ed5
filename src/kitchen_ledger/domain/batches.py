"""Domain models for production batches."""

from dataclasses import dataclass
from datetime import datetime

from kitchen_ledger.domain.quantities import PORTION, Quantity
from kitchen_ledger.domain.storage import FrozenPortionPool, StorageItem

DRAFT = "draft"
PREPARING = "preparing"
READY = "ready"
COMPLETED = "completed"
FINISHED = "finished"

PORTIONS_DIMENSION = "portions"
YIELD_DIMENSION = "yield"


@dataclass(frozen=True)
class Batch:
    """A production batch and its output."""

    id: str
    name: str
    status: str
    portions: float
    yield_quantity: Quantity
    original_portions: float | None = None
    original_yield: float | None = None
    start_time: datetime | None = None
    end_time: datetime | None = None
    notes: str | None = None


@dataclass(frozen=True)
class Requirement:
    """One ingredient line of a batch recipe."""

    id: str
    quantity: Quantity
    name: str = ""
    ingredient_id: str | None = None
    source_batch_id: str | None = None
    is_batch: bool = False

    @property
    def key(self) -> str:
        """Identifier used to attach split decisions to this requirement."""
        return self.id

    @property
    def target_id(self) -> str:
        return (self.source_batch_id if self.is_batch else self.ingredient_id) or ""

    @property
    def batch_dimension(self) -> str:
        if self.quantity.unit == PORTION:
            return PORTIONS_DIMENSION
        return YIELD_DIMENSION


@dataclass(frozen=True)
class StorageInstruction:
    """New state for a kitchen storage record."""

    before: StorageItem | None
    after: StorageItem


@dataclass(frozen=True)
class FreezerInstruction:
    """New state for a frozen portion pool."""

    before: FrozenPortionPool
    after: FrozenPortionPool


@dataclass(frozen=True)
class BatchInstruction:
    """New state for a referenced batch."""

    before: Batch
    after: Batch


DeductionInstruction = StorageInstruction | FreezerInstruction | BatchInstruction
