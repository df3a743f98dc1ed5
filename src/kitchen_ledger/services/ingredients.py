"""Ingredient lookups and the unit-size backfill."""

import logging
from dataclasses import dataclass
from typing import Protocol

from kitchen_ledger.domain.quantities import (
    COUNT,
    Quantity,
    normalize_unit,
    unit_class,
)
from kitchen_ledger.domain.storage import Ingredient
from kitchen_ledger.services.pack_size import parse_pack_token

_logger = logging.getLogger(__name__)


class IngredientRepository(Protocol):
    """Persistence interface for ingredient master records."""

    def get_ingredient(self, ingredient_id: str) -> Ingredient | None:
        """Return an ingredient by id, if present."""

    def list_ingredients(self) -> list[Ingredient]:
        """Return all ingredients."""

    def set_unit_size(self, ingredient_id: str, unit_size: Quantity) -> None:
        """Persist the size of one countable unit."""


@dataclass
class IngredientService:
    """Service for ingredient descriptors and per-unit sizes."""

    repository: IngredientRepository

    def describe(self, ingredient_id: str) -> tuple[str, Quantity | None]:
        """Return the descriptor and explicit unit size for an ingredient."""
        ingredient = self.repository.get_ingredient(ingredient_id)
        if ingredient is None:
            return ingredient_id, None
        return ingredient.name, ingredient.unit_size

    def native_unit(self, ingredient_id: str) -> str | None:
        """Return the unit an ingredient is stocked in, if it is known."""
        ingredient = self.repository.get_ingredient(ingredient_id)
        if ingredient is None:
            return None
        return normalize_unit(ingredient.unit)

    def backfill_unit_sizes(self) -> list[str]:
        """Store a unit size for counted ingredients whose name carries one.

        Returns the ids of the ingredients that were updated.
        """
        updated: list[str] = []
        for ingredient in self.repository.list_ingredients():
            if ingredient.unit_size is not None:
                continue
            if unit_class(ingredient.unit) != COUNT:
                continue
            token = parse_pack_token(ingredient.name)
            if token is None:
                continue
            self.repository.set_unit_size(ingredient.id, token)
            updated.append(ingredient.id)
        _logger.info("Backfilled unit sizes for %s ingredient(s)", len(updated))
        return updated
