"""Batch status state machine."""

from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol

from kitchen_ledger.domain.batches import (
    COMPLETED,
    DRAFT,
    FINISHED,
    PREPARING,
    READY,
    Batch,
    Requirement,
)
from kitchen_ledger.domain.errors import BatchNotFound, InvalidBatchTransition
from kitchen_ledger.services.audit import AuditService

TRANSITIONS: dict[str, set[str]] = {
    DRAFT: {PREPARING, FINISHED},
    PREPARING: {READY, FINISHED},
    READY: {PREPARING, COMPLETED, FINISHED},
    COMPLETED: {DRAFT, FINISHED},
    FINISHED: set(),
}

# Targets with their own entry points: starting deducts stock, restocking resets output.
_GUARDED_TARGETS = {PREPARING, DRAFT}


class BatchRepository(Protocol):
    """Persistence interface for batches and their requirements."""

    def read_batch(self, batch_id: str) -> Batch | None:
        """Return a batch by id, if present."""

    def write_batch(self, batch: Batch) -> Batch:
        """Persist a batch and return it; raise on failure."""

    def list_requirements(self, batch_id: str) -> list[Requirement]:
        """Return the ingredient requirements of a batch."""


def apply_transition(batch: Batch, target: str, now: datetime | None = None) -> Batch:
    """Return the batch in ``target`` status with timestamps recorded."""
    if target not in TRANSITIONS.get(batch.status, set()):
        raise InvalidBatchTransition(batch.id, batch.status, target)
    moment = now or datetime.now(tz=UTC)
    if target == PREPARING:
        return replace(batch, status=target, start_time=moment, end_time=None)
    if target in {COMPLETED, FINISHED}:
        return replace(batch, status=target, end_time=moment)
    return replace(batch, status=target)


@dataclass
class BatchLifecycleService:
    """Moves batches through draft, preparing, ready and completed."""

    repository: BatchRepository
    audit_service: AuditService

    def get_batch(self, batch_id: str) -> Batch:
        """Return a batch or raise BatchNotFound."""
        batch = self.repository.read_batch(batch_id)
        if batch is None:
            raise BatchNotFound(batch_id)
        return batch

    def transition(self, batch_id: str, target: str) -> Batch:
        """Move a batch to ready, completed or finished."""
        batch = self.get_batch(batch_id)
        if target in _GUARDED_TARGETS:
            raise InvalidBatchTransition(batch.id, batch.status, target)
        updated = self.repository.write_batch(apply_transition(batch, target))
        self.audit_service.record(
            "Update Batch",
            f"Batch '{batch.name}' moved from {batch.status} to {target}",
        )
        return updated

    def restock(self, batch_id: str) -> Batch:
        """Return a completed batch to draft with its original output."""
        batch = self.get_batch(batch_id)
        if batch.status != COMPLETED:
            raise InvalidBatchTransition(batch.id, batch.status, DRAFT)
        portions = (
            batch.original_portions
            if batch.original_portions is not None
            else batch.portions
        )
        yield_value = (
            batch.original_yield
            if batch.original_yield is not None
            else batch.yield_quantity.value
        )
        restocked = replace(
            apply_transition(batch, DRAFT),
            portions=portions,
            yield_quantity=batch.yield_quantity.with_value(yield_value),
            start_time=None,
            end_time=None,
        )
        updated = self.repository.write_batch(restocked)
        self.audit_service.record(
            "Restock Batch",
            f"Batch '{batch.name}' restocked to {portions:g} portions, "
            f"{updated.yield_quantity}",
        )
        return updated
