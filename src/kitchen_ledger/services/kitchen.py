"""Kitchen storage operations outside of batch starts."""

from dataclasses import dataclass, replace
from typing import Protocol

from kitchen_ledger.domain.quantities import BUNCH, Quantity, is_measure
from kitchen_ledger.domain.storage import StorageItem
from kitchen_ledger.services.audit import AuditService
from kitchen_ledger.services.ingredients import IngredientService
from kitchen_ledger.services.ledger import StorageLedger


class StorageRepository(Protocol):
    """Persistence interface for kitchen storage records."""

    def read_storage(self, ingredient_id: str) -> StorageItem | None:
        """Return the storage record for an ingredient, if present."""

    def write_storage(self, item: StorageItem) -> StorageItem:
        """Persist a storage record and return it; raise on failure."""


@dataclass(frozen=True)
class ReceiveResult:
    """Outcome of receiving stock into the kitchen."""

    item: StorageItem
    reference_weight_missing: bool


@dataclass
class KitchenStorageService:
    """Receives stock and records bunch conversion factors."""

    storage_repository: StorageRepository
    ingredient_service: IngredientService
    audit_service: AuditService
    ledger: StorageLedger

    def get_item(self, ingredient_id: str) -> StorageItem | None:
        """Return the current storage record."""
        return self.storage_repository.read_storage(ingredient_id)

    def receive_stock(self, ingredient_id: str, quantity: Quantity) -> ReceiveResult:
        """Add stock, creating the record on first arrival."""
        if quantity.value <= 0:
            raise ValueError("Received quantity must be positive")
        descriptor, unit_size = self.ingredient_service.describe(ingredient_id)
        existing = self.storage_repository.read_storage(ingredient_id)
        if existing is None:
            native = (
                self.ingredient_service.native_unit(ingredient_id) or quantity.unit
            )
            existing = StorageItem(
                ingredient_id=ingredient_id, quantity=Quantity(0, native)
            )
        updated = self.ledger.replenish(existing, quantity, descriptor, unit_size)
        saved = self.storage_repository.write_storage(updated)
        self.audit_service.record(
            "Import", f"Received {quantity} of {descriptor} into kitchen storage"
        )
        missing = (
            saved.quantity.unit == BUNCH and saved.reference_weight_per_bunch is None
        )
        return ReceiveResult(item=saved, reference_weight_missing=missing)

    def set_reference_weight(
        self, ingredient_id: str, reference_weight: Quantity
    ) -> StorageItem:
        """Store how much one bunch weighs."""
        if reference_weight.value <= 0 or not is_measure(reference_weight.unit):
            raise ValueError("Reference weight must be a positive weight or volume")
        existing = self.storage_repository.read_storage(ingredient_id)
        if existing is None:
            existing = StorageItem(
                ingredient_id=ingredient_id, quantity=Quantity(0, BUNCH)
            )
        saved = self.storage_repository.write_storage(
            replace(existing, reference_weight_per_bunch=reference_weight)
        )
        descriptor, _ = self.ingredient_service.describe(ingredient_id)
        self.audit_service.record(
            "Reference Weight", f"Set 1 bunch of {descriptor} = {reference_weight}"
        )
        return saved

