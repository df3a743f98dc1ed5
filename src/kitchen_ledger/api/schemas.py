"""Pydantic models for kitchen API payloads."""

from datetime import datetime

from pydantic import BaseModel, Field

from kitchen_ledger.domain.quantities import Quantity
from kitchen_ledger.services.sources import SourceSplit


class QuantityIn(BaseModel):
    """A value with its unit."""

    value: float
    unit: str

    def to_quantity(self) -> Quantity:
        return Quantity(self.value, self.unit)


class SplitIn(BaseModel):
    """Operator-chosen kitchen/freezer split for one requirement."""

    from_kitchen: float
    from_freezer: float

    def to_split(self) -> SourceSplit:
        return SourceSplit(
            from_kitchen=self.from_kitchen, from_freezer=self.from_freezer
        )


class StartBatchRequest(BaseModel):
    """Decisions supplied when starting or resuming a batch start.

    ``split_decisions`` is keyed by requirement id and ``reference_weights``
    by ingredient id.
    """

    split_decisions: dict[str, SplitIn] = Field(default_factory=dict)
    reference_weights: dict[str, QuantityIn] = Field(default_factory=dict)


class ReceiveStockRequest(BaseModel):
    """Stock arriving in the kitchen."""

    quantity: QuantityIn


class ReferenceWeightRequest(BaseModel):
    """Weight of one bunch."""

    reference_weight: QuantityIn


class DepositRequest(BaseModel):
    """Stock to freeze as equal portions."""

    quantity: QuantityIn
    portions: int = Field(gt=0)
    best_before: datetime | None = None
    notes: str | None = None


class WithdrawRequest(BaseModel):
    """Whole portions to take out of a freezer pool."""

    portions: int = Field(default=1, gt=0)


class BatchStatusRequest(BaseModel):
    """Target status for a batch."""

    status: str
