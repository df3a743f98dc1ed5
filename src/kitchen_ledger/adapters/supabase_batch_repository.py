"""Supabase implementation for batches and their ingredient lines."""

from dataclasses import dataclass

from supabase import Client

from kitchen_ledger.adapters._rows import format_timestamp, parse_timestamp
from kitchen_ledger.domain.batches import Batch, Requirement
from kitchen_ledger.domain.quantities import Quantity
from kitchen_ledger.services.batches import BatchRepository


@dataclass
class SupabaseBatchRepository(BatchRepository):
    """Supabase-backed repository for batches."""

    client: Client

    def read_batch(self, batch_id: str) -> Batch | None:
        """Return a batch by id, if present."""
        response = (
            self.client.table("batches")
            .select("*")
            .eq("id", batch_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_batch(response.data[0])

    def write_batch(self, batch: Batch) -> Batch:
        """Update a batch's status, output and timestamps."""
        response = (
            self.client.table("batches")
            .update(
                {
                    "status": batch.status,
                    "portions": batch.portions,
                    "yield": batch.yield_quantity.value,
                    "yield_unit": batch.yield_quantity.unit,
                    "start_time": format_timestamp(batch.start_time),
                    "end_time": format_timestamp(batch.end_time),
                }
            )
            .eq("id", batch.id)
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to update batch {batch.id}")
        return _parse_batch(response.data[0])

    def list_requirements(self, batch_id: str) -> list[Requirement]:
        """Return the ingredient lines of a batch."""
        response = (
            self.client.table("batch_ingredients")
            .select("*, ingredients(name)")
            .eq("batch_id", batch_id)
            .execute()
        )
        return [_parse_requirement(row) for row in response.data or []]


def _parse_batch(row: dict[str, object]) -> Batch:
    original_portions = row.get("original_portions")
    original_yield = row.get("original_yield")
    return Batch(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        status=str(row.get("status", "")),
        portions=float(row.get("portions") or 0.0),
        yield_quantity=Quantity(
            float(row.get("yield") or 0.0), str(row.get("yield_unit") or "portion")
        ),
        original_portions=(
            float(original_portions) if original_portions is not None else None
        ),
        original_yield=float(original_yield) if original_yield is not None else None,
        start_time=parse_timestamp(row.get("start_time")),
        end_time=parse_timestamp(row.get("end_time")),
        notes=row.get("notes"),
    )


def _parse_requirement(row: dict[str, object]) -> Requirement:
    ingredient = row.get("ingredients")
    name = ingredient.get("name", "") if isinstance(ingredient, dict) else ""
    is_batch = bool(row.get("is_batch"))
    return Requirement(
        id=str(row["id"]),
        quantity=Quantity(
            float(row.get("required_quantity") or 0.0), str(row.get("unit", ""))
        ),
        name=str(name or ""),
        ingredient_id=str(row["ingredient_id"]) if row.get("ingredient_id") else None,
        source_batch_id=(
            str(row["source_batch_id"]) if row.get("source_batch_id") else None
        ),
        is_batch=is_batch,
    )
