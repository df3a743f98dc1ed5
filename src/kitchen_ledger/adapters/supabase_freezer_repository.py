"""Supabase implementation for frozen portion pools."""

from dataclasses import dataclass

from supabase import Client

from kitchen_ledger.adapters._rows import format_timestamp, parse_timestamp
from kitchen_ledger.domain.quantities import Quantity
from kitchen_ledger.domain.storage import FrozenPortionPool
from kitchen_ledger.services.freezer import FreezerRepository


@dataclass
class SupabaseFreezerRepository(FreezerRepository):
    """Supabase-backed repository for the freezer_items table."""

    client: Client

    def read_frozen_pools(self, ingredient_id: str) -> list[FrozenPortionPool]:
        """Return every pool for an ingredient, oldest first."""
        response = (
            self.client.table("freezer_items")
            .select("*")
            .eq("ingredient_id", ingredient_id)
            .order("date_frozen")
            .execute()
        )
        return [_parse_pool(row) for row in response.data or []]

    def get_pool(self, pool_id: str) -> FrozenPortionPool | None:
        """Return a pool by id, if present."""
        response = (
            self.client.table("freezer_items")
            .select("*")
            .eq("id", pool_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_pool(response.data[0])

    def create_pool(self, pool: FrozenPortionPool) -> FrozenPortionPool:
        """Insert a pool and return it with its id."""
        response = (
            self.client.table("freezer_items")
            .insert(
                {
                    "ingredient_id": pool.ingredient_id,
                    "ingredient_name": pool.ingredient_name,
                    "quantity_to_freeze": pool.total.value,
                    "number_of_portions": pool.portions,
                    "yield_per_portion": pool.yield_per_portion.value,
                    "unit": pool.yield_per_portion.unit,
                    "date_frozen": format_timestamp(pool.date_frozen),
                    "best_before": format_timestamp(pool.best_before),
                    "notes": pool.notes,
                }
            )
            .execute()
        )
        if not response.data:
            raise RuntimeError("Failed to create freezer pool")
        return _parse_pool(response.data[0])

    def write_frozen_pool(self, pool: FrozenPortionPool) -> FrozenPortionPool:
        """Update the remaining portion count of a pool."""
        if pool.id is None:
            raise RuntimeError("Cannot update a freezer pool without an id")
        response = (
            self.client.table("freezer_items")
            .update({"number_of_portions": pool.portions})
            .eq("id", pool.id)
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to update freezer pool {pool.id}")
        return _parse_pool(response.data[0])


def _parse_pool(row: dict[str, object]) -> FrozenPortionPool:
    return FrozenPortionPool(
        id=str(row["id"]),
        ingredient_id=str(row["ingredient_id"]),
        ingredient_name=str(row.get("ingredient_name") or ""),
        portions=int(row.get("number_of_portions") or 0),
        yield_per_portion=Quantity(
            float(row.get("yield_per_portion") or 0.0), str(row.get("unit", ""))
        ),
        date_frozen=parse_timestamp(row.get("date_frozen")),
        best_before=parse_timestamp(row.get("best_before")),
        notes=row.get("notes"),
    )
