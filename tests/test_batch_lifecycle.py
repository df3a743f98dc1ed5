"""Tests for the batch status state machine."""

from datetime import UTC, datetime

import pytest

from kitchen_ledger.domain.batches import Batch
from kitchen_ledger.domain.errors import BatchNotFound, InvalidBatchTransition
from kitchen_ledger.domain.quantities import Quantity
from kitchen_ledger.services.audit import AuditService
from kitchen_ledger.services.batches import BatchLifecycleService, apply_transition
from tests.conftest import InMemoryAuditRepository, InMemoryBatchRepository


def _batch(status: str, **kwargs) -> Batch:  # type: ignore[no-untyped-def]
    return Batch(
        id="b1",
        name="Tomato Sauce",
        status=status,
        portions=kwargs.pop("portions", 10),
        yield_quantity=kwargs.pop("yield_quantity", Quantity(5, "l")),
        **kwargs,
    )


def test_preparing_records_start_time() -> None:
    moment = datetime(2024, 3, 1, 9, tzinfo=UTC)

    started = apply_transition(_batch("draft"), "preparing", now=moment)

    assert started.status == "preparing"
    assert started.start_time == moment
    assert started.end_time is None


@pytest.mark.parametrize("target", ["completed", "finished"])
def test_terminal_moves_record_end_time(target: str) -> None:
    moment = datetime(2024, 3, 1, 18, tzinfo=UTC)

    updated = apply_transition(_batch("ready"), target, now=moment)

    assert updated.end_time == moment


@pytest.mark.parametrize(
    ("current", "target"),
    [
        ("draft", "ready"),
        ("preparing", "completed"),
        ("completed", "preparing"),
        ("finished", "draft"),
        ("finished", "finished"),
    ],
)
def test_invalid_transitions(current: str, target: str) -> None:
    with pytest.raises(InvalidBatchTransition):
        apply_transition(_batch(current), target)


@pytest.fixture
def service(
    batch_repository: InMemoryBatchRepository,
    audit_repository: InMemoryAuditRepository,
) -> BatchLifecycleService:
    return BatchLifecycleService(batch_repository, AuditService(audit_repository))


def test_transition_persists_and_audits(
    service: BatchLifecycleService,
    batch_repository: InMemoryBatchRepository,
    audit_repository: InMemoryAuditRepository,
) -> None:
    batch_repository.batches["b1"] = _batch("preparing")

    updated = service.transition("b1", "ready")

    assert updated.status == "ready"
    assert batch_repository.batches["b1"].status == "ready"
    assert audit_repository.entries[-1]["action"] == "Update Batch"


def test_transition_cannot_start_a_batch(
    service: BatchLifecycleService, batch_repository: InMemoryBatchRepository
) -> None:
    batch_repository.batches["b1"] = _batch("draft")

    with pytest.raises(InvalidBatchTransition):
        service.transition("b1", "preparing")


def test_transition_unknown_batch(service: BatchLifecycleService) -> None:
    with pytest.raises(BatchNotFound):
        service.transition("missing", "ready")


def test_restock_resets_to_original_output(
    service: BatchLifecycleService,
    batch_repository: InMemoryBatchRepository,
    audit_repository: InMemoryAuditRepository,
) -> None:
    batch_repository.batches["b1"] = _batch(
        "completed",
        portions=0,
        yield_quantity=Quantity(0.5, "l"),
        original_portions=10,
        original_yield=5,
        start_time=datetime(2024, 3, 1, 9, tzinfo=UTC),
        end_time=datetime(2024, 3, 1, 18, tzinfo=UTC),
    )

    restocked = service.restock("b1")

    assert restocked.status == "draft"
    assert restocked.portions == 10
    assert restocked.yield_quantity == Quantity(5, "l")
    assert restocked.start_time is None
    assert restocked.end_time is None
    assert audit_repository.entries[-1]["action"] == "Restock Batch"


def test_restock_requires_completed_batch(
    service: BatchLifecycleService, batch_repository: InMemoryBatchRepository
) -> None:
    batch_repository.batches["b1"] = _batch("ready")

    with pytest.raises(InvalidBatchTransition):
        service.restock("b1")
