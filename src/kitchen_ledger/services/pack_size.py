"""Pack size hints embedded in ingredient descriptors."""

import re

from kitchen_ledger.domain.quantities import Quantity, base_factor, is_measure

PACK_TOKEN_PATTERN = re.compile(
    r"(\d+(?:[.,]\d+)?)\s*(LTR|ML|KG|L|G)\b",
    re.IGNORECASE,
)


def parse_pack_token(descriptor: str | None) -> Quantity | None:
    """Return the first "<number> <unit>" token in a descriptor, if any."""
    if not descriptor:
        return None
    match = PACK_TOKEN_PATTERN.search(descriptor)
    if match is None:
        return None
    amount = float(match.group(1).replace(",", "."))
    if amount <= 0:
        return None
    return Quantity(amount, match.group(2))


def extract_pack_size(descriptor: str | None, requested_unit: str) -> float | None:
    """Return how much one countable unit holds, expressed in requested_unit.

    "Olive Oil 4 LTR" gives 4000 for ml and 4 for l. Weight and volume are
    treated as 1:1. Returns None when the descriptor has no size token or the
    requested unit is not a weight or volume unit.
    """
    token = parse_pack_token(descriptor)
    if token is None or not is_measure(requested_unit):
        return None
    token_factor = base_factor(token.unit)
    requested_factor = base_factor(requested_unit)
    if token_factor is None or requested_factor is None:
        return None
    return token.value * token_factor / requested_factor
