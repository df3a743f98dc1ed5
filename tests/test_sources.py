"""Tests for kitchen and freezer source resolution."""

import pytest

from kitchen_ledger.domain.errors import InsufficientStock, InvalidSplit
from kitchen_ledger.services.sources import NeedsSplitInput, SourceResolver, SourceSplit


def test_kitchen_covers_requirement() -> None:
    split = SourceResolver().resolve(4, kitchen_available=5, freezer_available=10)
    assert split == SourceSplit(from_kitchen=4, from_freezer=0)


def test_freezer_covers_requirement() -> None:
    split = SourceResolver().resolve(4, kitchen_available=1, freezer_available=10)
    assert split == SourceSplit(from_kitchen=0, from_freezer=4)


def test_both_pools_needed_asks_for_split() -> None:
    outcome = SourceResolver().resolve(
        6,
        kitchen_available=3,
        freezer_available=5,
        requirement_key="req-1",
        ingredient_id="ing-1",
        ingredient_name="Stock",
        unit="l",
    )

    assert isinstance(outcome, NeedsSplitInput)
    assert outcome.requirement_key == "req-1"
    assert outcome.to_dict()["freezer_available"] == 5


def test_explicit_split_is_accepted() -> None:
    split = SourceResolver().resolve(6, 3, 5, SourceSplit(3, 3))
    assert split == SourceSplit(3, 3)


@pytest.mark.parametrize(
    "split",
    [
        SourceSplit(4, 3),
        SourceSplit(1, 6),
        SourceSplit(2, 3),
        SourceSplit(-1, 7),
    ],
)
def test_explicit_split_out_of_bounds(split: SourceSplit) -> None:
    with pytest.raises(InvalidSplit):
        SourceResolver().resolve(6, 3, 5, split, ingredient_id="ing-1")


def test_combined_shortfall() -> None:
    with pytest.raises(InsufficientStock) as excinfo:
        SourceResolver().resolve(10, 3, 5, unit="kg", ingredient_id="ing-1")

    assert excinfo.value.shortfall == 2
