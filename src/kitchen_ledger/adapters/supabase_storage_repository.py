"""Supabase implementation for kitchen storage records."""

from dataclasses import dataclass
from datetime import UTC, datetime

from supabase import Client

from kitchen_ledger.adapters._rows import (
    format_timestamp,
    parse_quantity,
    parse_timestamp,
    split_quantity,
)
from kitchen_ledger.domain.quantities import Quantity
from kitchen_ledger.domain.storage import KITCHEN, StorageItem
from kitchen_ledger.services.kitchen import StorageRepository


@dataclass
class SupabaseStorageRepository(StorageRepository):
    """Supabase-backed repository for the kitchen_storage table."""

    client: Client

    def read_storage(self, ingredient_id: str) -> StorageItem | None:
        """Return the storage record for an ingredient, if present."""
        response = (
            self.client.table("kitchen_storage")
            .select("*")
            .eq("ingredient_id", ingredient_id)
            .eq("location", KITCHEN)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_storage(response.data[0])

    def write_storage(self, item: StorageItem) -> StorageItem:
        """Upsert a storage record keyed by ingredient and location."""
        open_value, open_unit = split_quantity(item.open_container_remaining)
        weight_value, weight_unit = split_quantity(item.reference_weight_per_bunch)
        payload: dict[str, object] = {
            "ingredient_id": item.ingredient_id,
            "location": item.location,
            "quantity": item.quantity.value,
            "unit": item.quantity.unit,
            "open_container_remaining": open_value,
            "open_container_unit": open_unit,
            "reference_weight_per_bunch": weight_value,
            "reference_weight_unit": weight_unit,
            "last_updated": format_timestamp(datetime.now(tz=UTC)),
        }
        if item.id is not None:
            payload["id"] = item.id
        response = (
            self.client.table("kitchen_storage")
            .upsert(payload, on_conflict="ingredient_id,location")
            .execute()
        )
        if not response.data:
            raise RuntimeError(
                f"Failed to write kitchen storage for {item.ingredient_id}"
            )
        return _parse_storage(response.data[0])


def _parse_storage(row: dict[str, object]) -> StorageItem:
    """Parse a kitchen_storage row into a domain model."""
    return StorageItem(
        id=str(row["id"]) if row.get("id") is not None else None,
        ingredient_id=str(row["ingredient_id"]),
        location=str(row.get("location") or KITCHEN),
        quantity=Quantity(float(row.get("quantity") or 0.0), str(row.get("unit", ""))),
        open_container_remaining=parse_quantity(
            row.get("open_container_remaining"), row.get("open_container_unit")
        ),
        reference_weight_per_bunch=parse_quantity(
            row.get("reference_weight_per_bunch"), row.get("reference_weight_unit")
        ),
        last_updated=parse_timestamp(row.get("last_updated")),
    )
