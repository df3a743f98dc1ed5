"""Tests for pack size extraction."""

import pytest

from kitchen_ledger.domain.quantities import Quantity
from kitchen_ledger.services.pack_size import extract_pack_size, parse_pack_token


def test_extract_pack_size_in_requested_unit() -> None:
    assert extract_pack_size("Olive Oil 4 LTR", "ml") == 4000
    assert extract_pack_size("Olive Oil 4 LTR", "l") == 4


def test_extract_pack_size_without_token() -> None:
    assert extract_pack_size("Plain Rice", "g") is None


def test_extract_pack_size_for_count_unit() -> None:
    assert extract_pack_size("Olive Oil 4 LTR", "piece") is None


@pytest.mark.parametrize(
    ("descriptor", "expected"),
    [
        ("Flour 25KG sack", Quantity(25, "kg")),
        ("Cream 500 ml", Quantity(500, "ml")),
        ("Butter 0,5 kg", Quantity(0.5, "kg")),
        ("Tomato Paste 400G", Quantity(400, "g")),
    ],
)
def test_parse_pack_token(descriptor: str, expected: Quantity) -> None:
    assert parse_pack_token(descriptor) == expected


def test_parse_pack_token_ignores_empty_descriptor() -> None:
    assert parse_pack_token(None) is None
    assert parse_pack_token("") is None
