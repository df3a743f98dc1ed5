"""Quantities and unit classes."""

from dataclasses import dataclass

WEIGHT = "weight"
VOLUME = "volume"
COUNT = "count"

UNIT_ALIASES = {
    "g": "g",
    "gm": "g",
    "gms": "g",
    "gr": "g",
    "gram": "g",
    "grams": "g",
    "kg": "kg",
    "kgs": "kg",
    "kilo": "kg",
    "kilogram": "kg",
    "kilograms": "kg",
    "ml": "ml",
    "millilitre": "ml",
    "milliliter": "ml",
    "milliliters": "ml",
    "l": "l",
    "ltr": "l",
    "litre": "l",
    "liter": "l",
    "litres": "l",
    "liters": "l",
    "tsp": "tsp",
    "teaspoon": "tsp",
    "tbsp": "tbsp",
    "tablespoon": "tbsp",
    "cup": "cup",
    "cups": "cup",
    "piece": "piece",
    "pieces": "piece",
    "pc": "piece",
    "pcs": "piece",
    "each": "piece",
    "pack": "pack",
    "packs": "pack",
    "pkt": "pack",
    "packet": "pack",
    "tray": "tray",
    "trays": "tray",
    "bunch": "bunch",
    "bunches": "bunch",
    "dozen": "dozen",
    "box": "box",
    "bottle": "bottle",
    "can": "can",
    "jar": "jar",
    "bag": "bag",
    "portion": "portion",
    "portions": "portion",
}

# Factors into the base unit of each class (g, ml, piece).
WEIGHT_FACTORS = {"g": 1.0, "kg": 1000.0}
VOLUME_FACTORS = {"ml": 1.0, "l": 1000.0, "tsp": 5.0, "tbsp": 15.0, "cup": 240.0}
COUNT_FACTORS = {
    "piece": 1.0,
    "pack": 1.0,
    "tray": 1.0,
    "bunch": 1.0,
    "dozen": 12.0,
    "box": 1.0,
    "bottle": 1.0,
    "can": 1.0,
    "jar": 1.0,
    "bag": 1.0,
    "portion": 1.0,
}

BUNCH = "bunch"
PORTION = "portion"
EPSILON = 1e-9
STOCK_TOLERANCE = 1e-6


def normalize_unit(unit: str) -> str:
    """Return the canonical token for a unit, or the cleaned input if unknown."""
    cleaned = unit.strip().lower().rstrip(".")
    return UNIT_ALIASES.get(cleaned, cleaned)


def unit_class(unit: str) -> str | None:
    """Return the magnitude class of a unit, if known."""
    canonical = normalize_unit(unit)
    if canonical in WEIGHT_FACTORS:
        return WEIGHT
    if canonical in VOLUME_FACTORS:
        return VOLUME
    if canonical in COUNT_FACTORS:
        return COUNT
    return None


def is_measure(unit: str) -> bool:
    """Return True for weight and volume units."""
    return unit_class(unit) in {WEIGHT, VOLUME}


def base_factor(unit: str) -> float | None:
    """Return the factor into the class base unit."""
    canonical = normalize_unit(unit)
    for table in (WEIGHT_FACTORS, VOLUME_FACTORS, COUNT_FACTORS):
        if canonical in table:
            return table[canonical]
    return None


@dataclass(frozen=True)
class Quantity:
    """A value with a unit."""

    value: float
    unit: str

    def __post_init__(self) -> None:
        object.__setattr__(self, "unit", normalize_unit(self.unit))
        object.__setattr__(self, "value", float(self.value))

    @property
    def unit_class(self) -> str | None:
        return unit_class(self.unit)

    def with_value(self, value: float) -> "Quantity":
        """Return a quantity in the same unit with a new value."""
        return Quantity(value, self.unit)

    def __str__(self) -> str:
        return f"{self.value:g} {self.unit}"
