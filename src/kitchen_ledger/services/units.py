"""Best-effort unit conversion."""

from kitchen_ledger.domain.quantities import (
    COUNT,
    Quantity,
    base_factor,
    is_measure,
    normalize_unit,
    unit_class,
)
from kitchen_ledger.services.pack_size import extract_pack_size

# Count units with a fixed ratio between them; other count pairs do not convert.
PIECE_UNITS = frozenset({"piece", "dozen"})


def convert(
    value: float,
    from_unit: str,
    to_unit: str,
    descriptor: str | None = None,
    unit_size: Quantity | None = None,
) -> Quantity:
    """Convert a value between units.

    Same-class conversions use fixed ratios; weight and volume convert 1:1
    through g and ml. Count units convert to weight or volume through the
    per-unit size, taken from ``unit_size`` or parsed from ``descriptor``.
    When no conversion is possible the input is returned unchanged, in its
    original unit.
    """
    source = normalize_unit(from_unit)
    target = normalize_unit(to_unit)
    if source == target:
        return Quantity(value, target)

    source_class = unit_class(source)
    target_class = unit_class(target)
    if source_class is None or target_class is None:
        return Quantity(value, source)

    if source_class == COUNT and target_class == COUNT:
        if {source, target} <= PIECE_UNITS:
            return Quantity(value * base_factor(source) / base_factor(target), target)
        return Quantity(value, source)

    if is_measure(source) and is_measure(target):
        return Quantity(value * base_factor(source) / base_factor(target), target)

    if source_class == COUNT:
        size = per_unit_size(target, descriptor, unit_size)
        if size is None:
            return Quantity(value, source)
        return Quantity(value * base_factor(source) * size, target)

    if target_class == COUNT:
        size = per_unit_size(source, descriptor, unit_size)
        if size is None:
            return Quantity(value, source)
        return Quantity(value / size / base_factor(target), target)

    return Quantity(value, source)


def convert_quantity(
    quantity: Quantity,
    to_unit: str,
    descriptor: str | None = None,
    unit_size: Quantity | None = None,
) -> Quantity:
    """Convert a Quantity; see ``convert``."""
    return convert(quantity.value, quantity.unit, to_unit, descriptor, unit_size)


def is_converted(result: Quantity, to_unit: str) -> bool:
    """Return True when a conversion result is in the requested unit."""
    return result.unit == normalize_unit(to_unit)


def per_unit_size(
    unit: str, descriptor: str | None = None, unit_size: Quantity | None = None
) -> float | None:
    """Return the content of one countable unit expressed in ``unit``."""
    if not is_measure(unit):
        return None
    if unit_size is not None and is_measure(unit_size.unit) and unit_size.value > 0:
        return unit_size.value * base_factor(unit_size.unit) / base_factor(unit)
    return extract_pack_size(descriptor, unit)
