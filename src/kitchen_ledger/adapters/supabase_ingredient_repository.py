"""Supabase implementation for ingredient master records."""

from dataclasses import dataclass

from supabase import Client

from kitchen_ledger.adapters._rows import parse_quantity
from kitchen_ledger.domain.quantities import Quantity
from kitchen_ledger.domain.storage import Ingredient
from kitchen_ledger.services.ingredients import IngredientRepository


@dataclass
class SupabaseIngredientRepository(IngredientRepository):
    """Supabase-backed repository for the ingredients table."""

    client: Client

    def get_ingredient(self, ingredient_id: str) -> Ingredient | None:
        """Return an ingredient by id, if present."""
        response = (
            self.client.table("ingredients")
            .select("id, name, unit, unit_size, unit_size_unit")
            .eq("id", ingredient_id)
            .limit(1)
            .execute()
        )
        if not response.data:
            return None
        return _parse_ingredient(response.data[0])

    def list_ingredients(self) -> list[Ingredient]:
        """Return all ingredients ordered by name."""
        response = (
            self.client.table("ingredients")
            .select("id, name, unit, unit_size, unit_size_unit")
            .order("name")
            .execute()
        )
        return [_parse_ingredient(row) for row in response.data or []]

    def set_unit_size(self, ingredient_id: str, unit_size: Quantity) -> None:
        """Persist the size of one countable unit."""
        response = (
            self.client.table("ingredients")
            .update({"unit_size": unit_size.value, "unit_size_unit": unit_size.unit})
            .eq("id", ingredient_id)
            .execute()
        )
        if not response.data:
            raise RuntimeError(f"Failed to update unit size for {ingredient_id}")


def _parse_ingredient(row: dict[str, object]) -> Ingredient:
    return Ingredient(
        id=str(row["id"]),
        name=str(row.get("name", "")),
        unit=str(row.get("unit", "")),
        unit_size=parse_quantity(row.get("unit_size"), row.get("unit_size_unit")),
    )
