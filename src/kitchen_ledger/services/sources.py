"""Apportioning a requirement between kitchen storage and the freezer."""

from dataclasses import dataclass

from kitchen_ledger.domain.errors import InsufficientStock, InvalidSplit
from kitchen_ledger.domain.quantities import STOCK_TOLERANCE


@dataclass(frozen=True)
class SourceSplit:
    """Amounts taken from each stock pool."""

    from_kitchen: float
    from_freezer: float


@dataclass(frozen=True)
class NeedsSplitInput:
    """Both pools are needed and the caller must choose the split."""

    requirement_key: str
    ingredient_id: str | None
    ingredient_name: str
    required: float
    kitchen_available: float
    freezer_available: float
    unit: str

    def to_dict(self) -> dict[str, object]:
        return {
            "requirement_key": self.requirement_key,
            "ingredient_id": self.ingredient_id,
            "ingredient_name": self.ingredient_name,
            "required": self.required,
            "kitchen_available": self.kitchen_available,
            "freezer_available": self.freezer_available,
            "unit": self.unit,
        }


@dataclass
class SourceResolver:
    """Decides how much of a requirement comes from each pool."""

    tolerance: float = STOCK_TOLERANCE

    def resolve(  # noqa: PLR0913
        self,
        required: float,
        kitchen_available: float,
        freezer_available: float,
        explicit_split: SourceSplit | None = None,
        *,
        requirement_key: str = "",
        ingredient_id: str | None = None,
        ingredient_name: str = "",
        unit: str = "",
    ) -> SourceSplit | NeedsSplitInput:
        """Return the split for a requirement or ask for one."""
        if explicit_split is not None:
            self._validate(
                explicit_split,
                required,
                kitchen_available,
                freezer_available,
                ingredient_id,
            )
            return explicit_split
        if kitchen_available >= required - self.tolerance:
            return SourceSplit(from_kitchen=required, from_freezer=0.0)
        if freezer_available >= required - self.tolerance:
            return SourceSplit(from_kitchen=0.0, from_freezer=required)
        combined = kitchen_available + freezer_available
        if combined >= required - self.tolerance and (
            kitchen_available > 0 and freezer_available > 0
        ):
            return NeedsSplitInput(
                requirement_key=requirement_key,
                ingredient_id=ingredient_id,
                ingredient_name=ingredient_name,
                required=required,
                kitchen_available=kitchen_available,
                freezer_available=freezer_available,
                unit=unit,
            )
        raise InsufficientStock(required, combined, unit, ingredient_id)

    def _validate(
        self,
        split: SourceSplit,
        required: float,
        kitchen_available: float,
        freezer_available: float,
        ingredient_id: str | None,
    ) -> None:
        if split.from_kitchen < 0 or split.from_freezer < 0:
            raise InvalidSplit("quantities cannot be negative", ingredient_id)
        if split.from_kitchen > kitchen_available + self.tolerance:
            raise InvalidSplit(
                f"{split.from_kitchen:g} exceeds kitchen stock of "
                f"{kitchen_available:g}",
                ingredient_id,
            )
        if split.from_freezer > freezer_available + self.tolerance:
            raise InvalidSplit(
                f"{split.from_freezer:g} exceeds freezer stock of "
                f"{freezer_available:g}",
                ingredient_id,
            )
        if abs(split.from_kitchen + split.from_freezer - required) > self.tolerance:
            raise InvalidSplit(
                f"split totals {split.from_kitchen + split.from_freezer:g}, "
                f"required {required:g}",
                ingredient_id,
            )
