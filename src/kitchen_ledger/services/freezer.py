"""Frozen portion pools."""

import logging
import math
from dataclasses import dataclass, replace
from datetime import UTC, datetime
from typing import Protocol

from kitchen_ledger.domain.batches import FreezerInstruction
from kitchen_ledger.domain.errors import InsufficientStock, PoolNotFound
from kitchen_ledger.domain.quantities import EPSILON, STOCK_TOLERANCE, Quantity
from kitchen_ledger.domain.storage import FrozenPortionPool, StorageItem
from kitchen_ledger.services.audit import AuditService
from kitchen_ledger.services.ingredients import IngredientService
from kitchen_ledger.services.kitchen import StorageRepository
from kitchen_ledger.services.ledger import StorageLedger
from kitchen_ledger.services.units import convert_quantity, is_converted

_logger = logging.getLogger(__name__)


class FreezerRepository(Protocol):
    """Persistence interface for frozen portion pools."""

    def read_frozen_pools(self, ingredient_id: str) -> list[FrozenPortionPool]:
        """Return every pool for an ingredient."""

    def get_pool(self, pool_id: str) -> FrozenPortionPool | None:
        """Return a pool by id, if present."""

    def create_pool(self, pool: FrozenPortionPool) -> FrozenPortionPool:
        """Create a pool and return it with its id."""

    def write_frozen_pool(self, pool: FrozenPortionPool) -> FrozenPortionPool:
        """Persist a pool's portion count; raise on failure."""


def available_in(pools: list[FrozenPortionPool], unit: str) -> float:
    """Return the frozen stock expressed in ``unit``.

    Pools whose yield cannot be converted into ``unit`` are ignored.
    """
    total = 0.0
    for pool in pools:
        converted = convert_quantity(pool.total, unit)
        if is_converted(converted, unit):
            total += converted.value
    return total


def plan_withdrawal(
    pools: list[FrozenPortionPool], amount: Quantity
) -> list[FreezerInstruction]:
    """Return the pool updates that cover ``amount``, oldest pools first.

    Portions are thawed whole, so a pool gives up enough portions to cover
    its share even when that overshoots.
    """
    if amount.value <= 0:
        return []
    available = available_in(pools, amount.unit)
    if amount.value > available + STOCK_TOLERANCE:
        ingredient_id = pools[0].ingredient_id if pools else None
        raise InsufficientStock(amount.value, available, amount.unit, ingredient_id)

    instructions: list[FreezerInstruction] = []
    remaining = amount.value
    for pool in sorted(pools, key=_frozen_order):
        if remaining <= EPSILON:
            break
        per_portion = convert_quantity(pool.yield_per_portion, amount.unit)
        if not is_converted(per_portion, amount.unit) or pool.portions <= 0:
            continue
        take = min(remaining, pool.portions * per_portion.value)
        used = min(pool.portions, math.ceil(take / per_portion.value - EPSILON))
        remaining -= take
        instructions.append(
            FreezerInstruction(
                before=pool, after=replace(pool, portions=pool.portions - used)
            )
        )
    return instructions


def _frozen_order(pool: FrozenPortionPool) -> float:
    if pool.date_frozen is None:
        return math.inf
    return pool.date_frozen.timestamp()


@dataclass
class FreezerService:
    """Moves stock between kitchen storage and frozen portions."""

    freezer_repository: FreezerRepository
    storage_repository: StorageRepository
    ingredient_service: IngredientService
    audit_service: AuditService
    ledger: StorageLedger

    def deposit(  # noqa: PLR0913
        self,
        ingredient_id: str,
        quantity: Quantity,
        portions: int,
        best_before: datetime | None = None,
        notes: str | None = None,
    ) -> FrozenPortionPool:
        """Freeze stock taken from kitchen storage as equal portions."""
        if quantity.value <= 0 or portions <= 0:
            raise ValueError("Quantity and portions must be positive")
        descriptor, unit_size = self.ingredient_service.describe(ingredient_id)
        storage = self.storage_repository.read_storage(ingredient_id)
        if storage is None:
            raise InsufficientStock(quantity.value, 0.0, quantity.unit, ingredient_id)
        updated = self.ledger.deduct(storage, quantity, descriptor, unit_size)
        self.storage_repository.write_storage(updated)
        try:
            pool = self.freezer_repository.create_pool(
                FrozenPortionPool(
                    id=None,
                    ingredient_id=ingredient_id,
                    ingredient_name=descriptor,
                    portions=portions,
                    yield_per_portion=quantity.with_value(quantity.value / portions),
                    date_frozen=datetime.now(tz=UTC),
                    best_before=best_before,
                    notes=notes,
                )
            )
        except Exception:
            self._restore(storage)
            raise
        self.audit_service.record(
            "Freeze", f"Froze {quantity} of {descriptor} as {portions} portions"
        )
        return pool

    def withdraw(self, pool_id: str, portions: int = 1) -> FrozenPortionPool:
        """Take whole portions out of a pool."""
        if portions <= 0:
            raise ValueError("Portions to withdraw must be positive")
        pool = self.freezer_repository.get_pool(pool_id)
        if pool is None:
            raise PoolNotFound(pool_id)
        if portions > pool.portions:
            raise InsufficientStock(
                portions, pool.portions, "portion", pool.ingredient_id
            )
        saved = self.freezer_repository.write_frozen_pool(
            replace(pool, portions=pool.portions - portions)
        )
        self.audit_service.record(
            "Use Portion",
            f"Used {portions} portion(s) of {pool.ingredient_name}; "
            f"{saved.portions} remaining",
        )
        return saved

    def _restore(self, storage: StorageItem) -> None:
        try:
            self.storage_repository.write_storage(storage)
        except Exception:
            _logger.exception(
                "Failed to restore kitchen storage for %s", storage.ingredient_id
            )
