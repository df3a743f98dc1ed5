"""Two-phase validate-then-commit deduction for batch starts."""

import logging
from dataclasses import dataclass, field, replace
from typing import Protocol

from kitchen_ledger.domain.batches import (
    DRAFT,
    PORTIONS_DIMENSION,
    PREPARING,
    READY,
    Batch,
    BatchInstruction,
    DeductionInstruction,
    FreezerInstruction,
    Requirement,
    StorageInstruction,
)
from kitchen_ledger.domain.errors import (
    BatchNotFound,
    BatchNotReady,
    CommitFailed,
    DeductionError,
    IncompatibleUnits,
    InsufficientStock,
    InvalidBatchTransition,
    MissingReferenceWeight,
)
from kitchen_ledger.domain.quantities import (
    EPSILON,
    PORTION,
    STOCK_TOLERANCE,
    Quantity,
)
from kitchen_ledger.domain.storage import FrozenPortionPool, StorageItem
from kitchen_ledger.services.audit import FAILED, PENDING, SUCCESS, AuditService
from kitchen_ledger.services.batches import BatchRepository, apply_transition
from kitchen_ledger.services.freezer import (
    FreezerRepository,
    available_in,
    plan_withdrawal,
)
from kitchen_ledger.services.ingredients import IngredientService
from kitchen_ledger.services.kitchen import StorageRepository
from kitchen_ledger.services.ledger import StorageLedger
from kitchen_ledger.services.sources import NeedsSplitInput, SourceResolver, SourceSplit
from kitchen_ledger.services.units import convert_quantity, is_converted

_logger = logging.getLogger(__name__)

STARTED = "started"
STARTABLE_STATUSES = {DRAFT, READY}


class SplitDecisionProvider(Protocol):
    """Caller-supplied source split decision, typically a user prompt."""

    def request_split_decision(  # noqa: PLR0913
        self,
        ingredient_name: str,
        required: float,
        kitchen_available: float,
        freezer_available: float,
        unit: str,
    ) -> SourceSplit:
        """Return how much to take from the kitchen and from the freezer."""


class ReferenceWeightProvider(Protocol):
    """Caller-supplied weight of one bunch of an ingredient."""

    def request_reference_weight(self, ingredient_name: str) -> Quantity:
        """Return the weight of one bunch."""


@dataclass(frozen=True)
class BatchStartWorkflow:
    """Resumable state of a batch start awaiting human input."""

    batch_id: str
    requirements: tuple[Requirement, ...]
    split_decisions: dict[str, SourceSplit] = field(default_factory=dict)
    reference_weights: dict[str, Quantity] = field(default_factory=dict)
    pending_splits: tuple[NeedsSplitInput, ...] = ()
    missing_reference_weights: tuple[MissingReferenceWeight, ...] = ()

    def to_dict(self) -> dict[str, object]:
        return {
            "batch_id": self.batch_id,
            "pending_splits": [prompt.to_dict() for prompt in self.pending_splits],
            "missing_reference_weights": [
                error.to_dict() for error in self.missing_reference_weights
            ],
        }


@dataclass(frozen=True)
class ValidationReport:
    """Everything the validation pass found, without side effects."""

    errors: list[DeductionError]
    pending_splits: list[NeedsSplitInput]
    instructions: list[DeductionInstruction]

    @property
    def missing_reference_weights(self) -> list[MissingReferenceWeight]:
        return [e for e in self.errors if isinstance(e, MissingReferenceWeight)]

    @property
    def blocking_errors(self) -> list[DeductionError]:
        return [e for e in self.errors if not isinstance(e, MissingReferenceWeight)]


@dataclass(frozen=True)
class BatchStartResult:
    """Outcome of a batch start attempt."""

    status: str
    batch: Batch
    workflow: BatchStartWorkflow
    errors: list[DeductionError] = field(default_factory=list)
    instructions: list[DeductionInstruction] = field(default_factory=list)

    def to_dict(self) -> dict[str, object]:
        return {
            "status": self.status,
            "batch_id": self.batch.id,
            "batch_status": self.batch.status,
            "errors": [error.to_dict() for error in self.errors],
            "workflow": self.workflow.to_dict(),
        }


@dataclass
class _Snapshots:
    """Working copies of every record touched by a validation pass."""

    storage_repository: StorageRepository
    freezer_repository: FreezerRepository
    batch_repository: BatchRepository
    storage: dict[str, StorageItem | None] = field(default_factory=dict)
    storage_before: dict[str, StorageItem | None] = field(default_factory=dict)
    pools: dict[str, list[FrozenPortionPool]] = field(default_factory=dict)
    pools_before: dict[str, list[FrozenPortionPool]] = field(default_factory=dict)
    batches: dict[str, Batch | None] = field(default_factory=dict)
    batches_before: dict[str, Batch | None] = field(default_factory=dict)

    def storage_for(self, ingredient_id: str) -> StorageItem | None:
        if ingredient_id not in self.storage:
            item = self.storage_repository.read_storage(ingredient_id)
            self.storage[ingredient_id] = item
            self.storage_before[ingredient_id] = item
        return self.storage[ingredient_id]

    def pools_for(self, ingredient_id: str) -> list[FrozenPortionPool]:
        if ingredient_id not in self.pools:
            pools = list(self.freezer_repository.read_frozen_pools(ingredient_id))
            self.pools[ingredient_id] = pools
            self.pools_before[ingredient_id] = list(pools)
        return self.pools[ingredient_id]

    def batch_for(self, batch_id: str) -> Batch | None:
        if batch_id not in self.batches:
            batch = self.batch_repository.read_batch(batch_id)
            self.batches[batch_id] = batch
            self.batches_before[batch_id] = batch
        return self.batches[batch_id]

    def instructions(self) -> list[DeductionInstruction]:
        """Return one instruction per record whose state changed."""
        result: list[DeductionInstruction] = []
        for ingredient_id, after in self.storage.items():
            before = self.storage_before[ingredient_id]
            if after is not None and after != before:
                result.append(StorageInstruction(before=before, after=after))
        for ingredient_id, pools in self.pools.items():
            originals = self.pools_before[ingredient_id]
            for before, after in zip(originals, pools, strict=True):
                if after != before:
                    result.append(FreezerInstruction(before=before, after=after))
        for batch_id, after in self.batches.items():
            before = self.batches_before[batch_id]
            if after is not None and before is not None and after != before:
                result.append(BatchInstruction(before=before, after=after))
        return result


@dataclass
class BatchDeductionOrchestrator:
    """Validates every requirement of a batch, then commits all deductions."""

    storage_repository: StorageRepository
    freezer_repository: FreezerRepository
    batch_repository: BatchRepository
    ingredient_service: IngredientService
    audit_service: AuditService
    ledger: StorageLedger = field(default_factory=StorageLedger)
    resolver: SourceResolver = field(default_factory=SourceResolver)
    compensate_failed_commits: bool = True
    max_resume_rounds: int = 10

    def start(
        self,
        batch_id: str,
        split_decisions: dict[str, SourceSplit] | None = None,
        reference_weights: dict[str, Quantity] | None = None,
    ) -> BatchStartResult:
        """Start a batch, consuming its ingredients if all are available."""
        batch = self._load_startable(batch_id)
        workflow = BatchStartWorkflow(
            batch_id=batch_id,
            requirements=tuple(self.batch_repository.list_requirements(batch_id)),
            split_decisions=dict(split_decisions or {}),
            reference_weights=dict(reference_weights or {}),
        )
        return self._run(batch, workflow)

    def resume(
        self,
        workflow: BatchStartWorkflow,
        split_decisions: dict[str, SourceSplit] | None = None,
        reference_weights: dict[str, Quantity] | None = None,
    ) -> BatchStartResult:
        """Re-validate a pending start with the newly supplied decisions."""
        batch = self._load_startable(workflow.batch_id)
        merged = replace(
            workflow,
            split_decisions={**workflow.split_decisions, **(split_decisions or {})},
            reference_weights={
                **workflow.reference_weights,
                **(reference_weights or {}),
            },
            pending_splits=(),
            missing_reference_weights=(),
        )
        return self._run(batch, merged)

    def run_interactive(
        self,
        batch_id: str,
        split_provider: SplitDecisionProvider,
        reference_weight_provider: ReferenceWeightProvider,
    ) -> BatchStartResult:
        """Start a batch, asking the providers whenever a decision is needed."""
        result = self.start(batch_id)
        rounds = 0
        while result.status == PENDING and rounds < self.max_resume_rounds:
            rounds += 1
            splits = {
                prompt.requirement_key: split_provider.request_split_decision(
                    ingredient_name=prompt.ingredient_name,
                    required=prompt.required,
                    kitchen_available=prompt.kitchen_available,
                    freezer_available=prompt.freezer_available,
                    unit=prompt.unit,
                )
                for prompt in result.workflow.pending_splits
            }
            weights = {
                error.ingredient_id or "": (
                    reference_weight_provider.request_reference_weight(
                        error.ingredient_name
                    )
                )
                for error in result.workflow.missing_reference_weights
            }
            result = self.resume(result.workflow, splits, weights)
        return result

    def validate(self, workflow: BatchStartWorkflow) -> ValidationReport:
        """Check every requirement against snapshots; nothing is written."""
        snapshots = _Snapshots(
            storage_repository=self.storage_repository,
            freezer_repository=self.freezer_repository,
            batch_repository=self.batch_repository,
        )
        errors: list[DeductionError] = []
        pending: list[NeedsSplitInput] = []
        for requirement in workflow.requirements:
            try:
                if requirement.is_batch:
                    self._check_batch_reference(requirement, snapshots)
                    continue
                prompt = self._check_ingredient(requirement, workflow, snapshots)
            except DeductionError as exc:
                if exc.ingredient_id is None:
                    exc.ingredient_id = requirement.target_id
                errors.append(exc)
                continue
            if prompt is not None:
                pending.append(prompt)
        return ValidationReport(
            errors=errors,
            pending_splits=pending,
            instructions=snapshots.instructions(),
        )

    def _run(self, batch: Batch, workflow: BatchStartWorkflow) -> BatchStartResult:
        report = self.validate(workflow)
        _logger.info(
            "Batch %s validation: %s error(s), %s split prompt(s), "
            "%s missing reference weight(s)",
            batch.id,
            len(report.blocking_errors),
            len(report.pending_splits),
            len(report.missing_reference_weights),
        )
        if report.blocking_errors:
            self.audit_service.record(
                "Start Batch",
                f"Cannot start '{batch.name}': "
                + "; ".join(error.message for error in report.errors),
                FAILED,
            )
            return BatchStartResult(
                status=FAILED, batch=batch, workflow=workflow, errors=report.errors
            )
        if report.pending_splits or report.missing_reference_weights:
            waiting = replace(
                workflow,
                pending_splits=tuple(report.pending_splits),
                missing_reference_weights=tuple(report.missing_reference_weights),
            )
            self.audit_service.record(
                "Start Batch", f"Awaiting input to start '{batch.name}'", PENDING
            )
            return BatchStartResult(
                status=PENDING,
                batch=batch,
                workflow=waiting,
                errors=report.errors,
            )
        started = self._commit(batch, report.instructions)
        self.audit_service.record(
            "Start Batch",
            f"Started '{batch.name}' with {len(workflow.requirements)} ingredient(s)",
            SUCCESS,
        )
        return BatchStartResult(
            status=STARTED,
            batch=started,
            workflow=workflow,
            instructions=report.instructions,
        )

    def _load_startable(self, batch_id: str) -> Batch:
        batch = self.batch_repository.read_batch(batch_id)
        if batch is None:
            raise BatchNotFound(batch_id)
        if batch.status not in STARTABLE_STATUSES:
            raise InvalidBatchTransition(batch.id, batch.status, PREPARING)
        return batch

    def _check_ingredient(
        self,
        requirement: Requirement,
        workflow: BatchStartWorkflow,
        snapshots: _Snapshots,
    ) -> NeedsSplitInput | None:
        ingredient_id = requirement.ingredient_id or ""
        descriptor, unit_size = self.ingredient_service.describe(ingredient_id)
        item = snapshots.storage_for(ingredient_id)
        captured = workflow.reference_weights.get(ingredient_id)
        if item is not None and captured is not None:
            item = replace(item, reference_weight_per_bunch=captured)
            snapshots.storage[ingredient_id] = item
        pools = snapshots.pools_for(ingredient_id)

        unit = requirement.quantity.unit
        required = requirement.quantity.value
        freezer_available = available_in(pools, unit)
        kitchen_available = self.ledger.available(item, unit, descriptor, unit_size)
        outcome = self.resolver.resolve(
            required,
            kitchen_available,
            freezer_available,
            workflow.split_decisions.get(requirement.key),
            requirement_key=requirement.key,
            ingredient_id=ingredient_id,
            ingredient_name=requirement.name or descriptor,
            unit=unit,
        )
        if isinstance(outcome, NeedsSplitInput):
            return outcome

        if outcome.from_kitchen > EPSILON:
            if item is None:
                raise InsufficientStock(outcome.from_kitchen, 0.0, unit, ingredient_id)
            snapshots.storage[ingredient_id] = self.ledger.deduct(
                item, Quantity(outcome.from_kitchen, unit), descriptor, unit_size
            )
        if outcome.from_freezer > EPSILON:
            updates = {
                id(instruction.before): instruction.after
                for instruction in plan_withdrawal(
                    pools, Quantity(outcome.from_freezer, unit)
                )
            }
            snapshots.pools[ingredient_id] = [
                updates.get(id(pool), pool) for pool in pools
            ]
        return None

    def _check_batch_reference(
        self, requirement: Requirement, snapshots: _Snapshots
    ) -> None:
        source_id = requirement.source_batch_id or ""
        source = snapshots.batch_for(source_id)
        if source is None or source.status != READY:
            raise BatchNotReady(source_id, source.status if source else None)
        need = requirement.quantity
        if requirement.batch_dimension == PORTIONS_DIMENSION:
            if need.value > source.portions + STOCK_TOLERANCE:
                raise InsufficientStock(need.value, source.portions, PORTION, source_id)
            snapshots.batches[source_id] = replace(
                source, portions=max(0.0, source.portions - need.value)
            )
            return
        yield_unit = source.yield_quantity.unit
        converted = convert_quantity(need, yield_unit)
        if not is_converted(converted, yield_unit):
            raise IncompatibleUnits(need.unit, yield_unit, source_id)
        on_hand = source.yield_quantity.value
        if converted.value > on_hand + STOCK_TOLERANCE:
            raise InsufficientStock(converted.value, on_hand, yield_unit, source_id)
        snapshots.batches[source_id] = replace(
            source,
            yield_quantity=source.yield_quantity.with_value(
                max(0.0, on_hand - converted.value)
            ),
        )

    def _commit(
        self, batch: Batch, instructions: list[DeductionInstruction]
    ) -> Batch:
        """Apply every instruction, then move the batch to preparing."""
        started = apply_transition(batch, PREPARING)
        steps = [
            *sorted(instructions, key=_commit_order),
            BatchInstruction(before=batch, after=started),
        ]
        applied: list[DeductionInstruction] = []
        for step in steps:
            try:
                self._write(step.after)
            except Exception as exc:
                compensated = False
                if self.compensate_failed_commits:
                    compensated = self._compensate(applied)
                target = _describe(step)
                self.audit_service.record(
                    "Start Batch",
                    f"Failed to persist {target} while starting '{batch.name}'",
                    FAILED,
                )
                raise CommitFailed(target, len(applied), compensated) from exc
            applied.append(step)
        return started

    def _compensate(self, applied: list[DeductionInstruction]) -> bool:
        """Restore earlier writes in reverse order; return True if all succeed."""
        restored = True
        for step in reversed(applied):
            if step.before is None:
                continue
            try:
                self._write(step.before)
            except Exception:
                _logger.exception("Failed to restore %s", _describe(step))
                restored = False
        return restored

    def _write(self, record: StorageItem | FrozenPortionPool | Batch) -> None:
        if isinstance(record, StorageItem):
            self.storage_repository.write_storage(record)
        elif isinstance(record, FrozenPortionPool):
            self.freezer_repository.write_frozen_pool(record)
        else:
            self.batch_repository.write_batch(record)


def _commit_order(instruction: DeductionInstruction) -> int:
    if isinstance(instruction, StorageInstruction):
        return 0
    if isinstance(instruction, FreezerInstruction):
        return 1
    return 2


def _describe(instruction: DeductionInstruction) -> str:
    if isinstance(instruction, StorageInstruction):
        return f"kitchen storage for {instruction.after.ingredient_id}"
    if isinstance(instruction, FreezerInstruction):
        return f"freezer pool {instruction.after.id}"
    return f"batch {instruction.after.id}"
