"""Deduction and replenishment rules for a single storage record."""

import math
from dataclasses import dataclass, replace

from kitchen_ledger.domain.errors import (
    IncompatibleUnits,
    InsufficientStock,
    MissingReferenceWeight,
    UnknownPackSize,
)
from kitchen_ledger.domain.quantities import (
    BUNCH,
    COUNT,
    EPSILON,
    STOCK_TOLERANCE,
    Quantity,
    is_measure,
    unit_class,
)
from kitchen_ledger.domain.storage import StorageItem
from kitchen_ledger.services.units import (
    convert_quantity,
    is_converted,
    per_unit_size,
)


@dataclass
class StorageLedger:
    """Computes new StorageItem states without persisting them.

    Three deduction rules apply, selected by the item's native unit:

    * weight or volume stock is reduced directly after converting the
      requirement into the native unit;
    * countable stock (packs, pieces, trays) is consumed from the open
      container first, then by opening whole packs one at a time;
    * bunches follow the pack rule using the stored weight per bunch.
    """

    def deduct(
        self,
        item: StorageItem,
        required: Quantity,
        descriptor: str | None = None,
        unit_size: Quantity | None = None,
    ) -> StorageItem:
        """Return the item state after removing ``required``."""
        if required.value <= 0:
            return item
        native = item.quantity.unit
        if is_measure(native):
            return _deduct_homogeneous(item, required, descriptor, unit_size)
        if unit_class(native) != COUNT:
            raise IncompatibleUnits(required.unit, native, item.ingredient_id)
        whole = convert_quantity(required, native)
        if is_converted(whole, native):
            return _deduct_whole_units(item, whole)
        size = self.unit_size_for(item, required.unit, descriptor, unit_size)
        return _deduct_packs(item, required, size)

    def available(
        self,
        item: StorageItem | None,
        unit: str,
        descriptor: str | None = None,
        unit_size: Quantity | None = None,
    ) -> float:
        """Return the total stock of ``item`` expressed in ``unit``."""
        if item is None:
            return 0.0
        native = item.quantity.unit
        if is_measure(native):
            converted = convert_quantity(item.quantity, unit, descriptor, unit_size)
            if not is_converted(converted, unit):
                raise _conversion_error(item, native, unit, descriptor)
            return converted.value
        whole = convert_quantity(item.quantity, unit)
        if is_converted(whole, unit):
            return whole.value
        if item.quantity.value <= 0 and item.open_amount <= 0:
            return 0.0
        size = self.unit_size_for(item, unit, descriptor, unit_size)
        return item.quantity.value * size + _open_in(item, unit)

    def replenish(
        self,
        item: StorageItem,
        amount: Quantity,
        descriptor: str | None = None,
        unit_size: Quantity | None = None,
    ) -> StorageItem:
        """Return the item state after adding ``amount``.

        Loose weight or volume added to countable stock goes into the open
        container; every full unit it completes is folded back into the
        whole-unit quantity.
        """
        native = item.quantity.unit
        direct = convert_quantity(amount, native)
        if is_converted(direct, native):
            total = item.quantity.value + direct.value
            return replace(item, quantity=item.quantity.with_value(total))
        if unit_class(native) != COUNT or not is_measure(amount.unit):
            raise IncompatibleUnits(amount.unit, native, item.ingredient_id)
        size = self.unit_size_for(item, amount.unit, descriptor, unit_size)
        loose = _open_in(item, amount.unit) + amount.value
        folded = math.floor(loose / size + EPSILON)
        remainder = max(0.0, loose - folded * size)
        return replace(
            item,
            quantity=item.quantity.with_value(item.quantity.value + folded),
            open_container_remaining=_open_quantity(remainder, amount.unit),
        )

    def unit_size_for(
        self,
        item: StorageItem,
        unit: str,
        descriptor: str | None = None,
        unit_size: Quantity | None = None,
    ) -> float:
        """Return the content of one native unit of ``item`` in ``unit``."""
        if not is_measure(unit):
            raise IncompatibleUnits(unit, item.quantity.unit, item.ingredient_id)
        if item.quantity.unit == BUNCH:
            reference = item.reference_weight_per_bunch
            if reference is None or reference.value <= 0:
                raise MissingReferenceWeight(
                    descriptor or item.ingredient_id, item.ingredient_id
                )
            size = per_unit_size(unit, unit_size=reference)
        else:
            size = per_unit_size(unit, descriptor, unit_size)
        if size is None or size <= 0:
            raise UnknownPackSize(descriptor or "", item.ingredient_id)
        return size


def _deduct_homogeneous(
    item: StorageItem,
    required: Quantity,
    descriptor: str | None,
    unit_size: Quantity | None,
) -> StorageItem:
    native = item.quantity.unit
    converted = convert_quantity(required, native, descriptor, unit_size)
    if not is_converted(converted, native):
        raise _conversion_error(item, required.unit, native, descriptor)
    on_hand = item.quantity.value
    if converted.value > on_hand + STOCK_TOLERANCE:
        raise InsufficientStock(converted.value, on_hand, native, item.ingredient_id)
    return replace(
        item, quantity=item.quantity.with_value(max(0.0, on_hand - converted.value))
    )


def _deduct_whole_units(item: StorageItem, required: Quantity) -> StorageItem:
    on_hand = item.quantity.value
    if required.value > on_hand + STOCK_TOLERANCE:
        raise InsufficientStock(
            required.value, on_hand, item.quantity.unit, item.ingredient_id
        )
    return replace(
        item, quantity=item.quantity.with_value(max(0.0, on_hand - required.value))
    )


def _deduct_packs(item: StorageItem, required: Quantity, size: float) -> StorageItem:
    unit = required.unit
    packs = item.quantity.value
    open_amount = _open_in(item, unit)
    available = packs * size + open_amount
    need = required.value
    if need > available + STOCK_TOLERANCE:
        raise InsufficientStock(need, available, unit, item.ingredient_id)

    from_open = min(open_amount, need)
    open_amount -= from_open
    need -= from_open
    while need > EPSILON and packs > 0:
        content = min(1.0, packs) * size
        packs = max(0.0, packs - 1.0)
        if need >= content - EPSILON:
            need -= content
        else:
            open_amount = content - need
            need = 0.0

    return replace(
        item,
        quantity=item.quantity.with_value(packs),
        open_container_remaining=_open_quantity(open_amount, unit),
    )


def _open_in(item: StorageItem, unit: str) -> float:
    remaining = item.open_container_remaining
    if remaining is None or remaining.value <= 0:
        return 0.0
    converted = convert_quantity(remaining, unit)
    if not is_converted(converted, unit):
        raise IncompatibleUnits(remaining.unit, unit, item.ingredient_id)
    return converted.value


def _open_quantity(amount: float, unit: str) -> Quantity | None:
    if amount <= EPSILON:
        return None
    return Quantity(amount, unit)


def _conversion_error(
    item: StorageItem, from_unit: str, to_unit: str, descriptor: str | None
) -> Exception:
    if unit_class(from_unit) == COUNT or unit_class(to_unit) == COUNT:
        return UnknownPackSize(descriptor or "", item.ingredient_id)
    return IncompatibleUnits(from_unit, to_unit, item.ingredient_id)
