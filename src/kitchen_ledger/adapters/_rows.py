"""Row parsing helpers shared by the Supabase adapters."""

from datetime import datetime

from kitchen_ledger.domain.quantities import Quantity


def parse_timestamp(raw: object) -> datetime | None:
    """Parse an ISO timestamp column, if set."""
    if isinstance(raw, str) and raw:
        return datetime.fromisoformat(raw)
    return None


def format_timestamp(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def parse_quantity(value: object, unit: object) -> Quantity | None:
    """Combine a value column and its unit column into a Quantity."""
    if value is None or not unit:
        return None
    return Quantity(float(value), str(unit))


def split_quantity(quantity: Quantity | None) -> tuple[float | None, str | None]:
    if quantity is None:
        return None, None
    return quantity.value, quantity.unit
