"""Tests for the kitchen API endpoints."""

from fastapi.testclient import TestClient

from kitchen_ledger.api.app import create_app
from kitchen_ledger.domain.batches import Batch, Requirement
from kitchen_ledger.domain.quantities import Quantity
from kitchen_ledger.domain.storage import FrozenPortionPool, Ingredient, StorageItem
from tests.conftest import (
    InMemoryBatchRepository,
    InMemoryFreezerRepository,
    InMemoryIngredientRepository,
    InMemoryStorageRepository,
)

HEADERS = {"X-Api-Token": "api-token"}


def _seed_curry(
    batch_repository: InMemoryBatchRepository, requirement: Requirement
) -> None:
    batch_repository.batches["b1"] = Batch(
        id="b1",
        name="Curry",
        status="draft",
        portions=12,
        yield_quantity=Quantity(6, "l"),
        original_portions=12,
        original_yield=6,
    )
    batch_repository.requirements["b1"] = [requirement]


def test_health_is_open(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_kitchen_routes_require_token(container) -> None:
    client = TestClient(create_app(container))

    response = client.get("/kitchen/storage/onion")
    wrong = client.get("/kitchen/storage/onion", headers={"X-Api-Token": "nope"})

    assert response.status_code == 401
    assert wrong.status_code == 401


def test_get_storage(
    container, storage_repository: InMemoryStorageRepository
) -> None:
    storage_repository.items["onion"] = StorageItem(
        ingredient_id="onion", quantity=Quantity(5, "kg")
    )
    client = TestClient(create_app(container))

    found = client.get("/kitchen/storage/onion", headers=HEADERS)
    missing = client.get("/kitchen/storage/garlic", headers=HEADERS)

    assert found.status_code == 200
    assert found.json()["item"]["quantity"] == {"value": 5.0, "unit": "kg"}
    assert missing.status_code == 404


def test_receive_and_reference_weight(
    container, ingredient_repository: InMemoryIngredientRepository
) -> None:
    ingredient_repository.add(Ingredient(id="mint", name="Mint", unit="bunch"))
    client = TestClient(create_app(container))

    received = client.post(
        "/kitchen/storage/mint/receive",
        json={"quantity": {"value": 4, "unit": "bunch"}},
        headers=HEADERS,
    )
    weighed = client.post(
        "/kitchen/storage/mint/reference-weight",
        json={"reference_weight": {"value": 80, "unit": "g"}},
        headers=HEADERS,
    )

    assert received.status_code == 200
    assert received.json()["reference_weight_missing"] is True
    assert weighed.status_code == 200
    assert weighed.json()["item"]["reference_weight_per_bunch"]["value"] == 80


def test_receive_rejects_non_positive_quantity(container) -> None:
    client = TestClient(create_app(container))

    response = client.post(
        "/kitchen/storage/mint/receive",
        json={"quantity": {"value": 0, "unit": "bunch"}},
        headers=HEADERS,
    )

    assert response.status_code == 422


def test_freezer_deposit_and_withdraw(
    container, storage_repository: InMemoryStorageRepository
) -> None:
    storage_repository.items["stock"] = StorageItem(
        ingredient_id="stock", quantity=Quantity(5, "l")
    )
    client = TestClient(create_app(container))

    deposited = client.post(
        "/kitchen/freezer/stock/deposit",
        json={"quantity": {"value": 2, "unit": "l"}, "portions": 4},
        headers=HEADERS,
    )
    pool_id = deposited.json()["pool"]["id"]
    withdrawn = client.post(
        f"/kitchen/freezer/pools/{pool_id}/withdraw",
        json={"portions": 3},
        headers=HEADERS,
    )
    too_many = client.post(
        f"/kitchen/freezer/pools/{pool_id}/withdraw",
        json={"portions": 2},
        headers=HEADERS,
    )
    unknown = client.post(
        "/kitchen/freezer/pools/missing/withdraw", json={}, headers=HEADERS
    )

    assert deposited.status_code == 200
    assert withdrawn.json()["pool"]["portions"] == 1
    assert too_many.status_code == 422
    assert too_many.json()["errors"][0]["kind"] == "InsufficientStock"
    assert unknown.status_code == 404


def test_start_batch_status_codes(
    container,
    storage_repository: InMemoryStorageRepository,
    freezer_repository: InMemoryFreezerRepository,
    batch_repository: InMemoryBatchRepository,
) -> None:
    storage_repository.items["stock"] = StorageItem(
        ingredient_id="stock", quantity=Quantity(3, "l")
    )
    freezer_repository.add(
        FrozenPortionPool(
            id="p1",
            ingredient_id="stock",
            ingredient_name="Stock",
            portions=5,
            yield_per_portion=Quantity(1, "l"),
        )
    )
    _seed_curry(
        batch_repository,
        Requirement(id="r1", ingredient_id="stock", quantity=Quantity(6, "l")),
    )
    client = TestClient(create_app(container))

    pending = client.post("/kitchen/batches/b1/start", json={}, headers=HEADERS)
    invalid = client.post(
        "/kitchen/batches/b1/start",
        json={"split_decisions": {"r1": {"from_kitchen": 4, "from_freezer": 2}}},
        headers=HEADERS,
    )
    started = client.post(
        "/kitchen/batches/b1/start",
        json={"split_decisions": {"r1": {"from_kitchen": 3, "from_freezer": 3}}},
        headers=HEADERS,
    )
    again = client.post("/kitchen/batches/b1/start", json={}, headers=HEADERS)

    assert pending.status_code == 202
    assert pending.json()["workflow"]["pending_splits"][0]["requirement_key"] == "r1"
    assert invalid.status_code == 409
    assert invalid.json()["errors"][0]["kind"] == "InvalidSplit"
    assert started.status_code == 200
    assert started.json()["batch_status"] == "preparing"
    assert again.status_code == 409


def test_start_batch_commit_failure(
    container,
    storage_repository: InMemoryStorageRepository,
    batch_repository: InMemoryBatchRepository,
) -> None:
    storage_repository.items["onion"] = StorageItem(
        ingredient_id="onion", quantity=Quantity(5, "kg")
    )
    storage_repository.failing_ingredients.add("onion")
    _seed_curry(
        batch_repository,
        Requirement(id="r1", ingredient_id="onion", quantity=Quantity(1, "kg")),
    )
    client = TestClient(create_app(container))

    response = client.post("/kitchen/batches/b1/start", json={}, headers=HEADERS)

    assert response.status_code == 502
    assert response.json()["applied"] == 0


def test_batch_status_and_restock(
    container, batch_repository: InMemoryBatchRepository
) -> None:
    _seed_curry(
        batch_repository,
        Requirement(id="r1", ingredient_id="onion", quantity=Quantity(1, "kg")),
    )
    client = TestClient(create_app(container))

    invalid = client.post(
        "/kitchen/batches/b1/status", json={"status": "completed"}, headers=HEADERS
    )
    unknown = client.post(
        "/kitchen/batches/nope/status", json={"status": "ready"}, headers=HEADERS
    )
    finished = client.post(
        "/kitchen/batches/b1/status", json={"status": "finished"}, headers=HEADERS
    )
    restock = client.post("/kitchen/batches/b1/restock", headers=HEADERS)

    assert invalid.status_code == 409
    assert unknown.status_code == 404
    assert finished.status_code == 200
    assert finished.json()["batch"]["status"] == "finished"
    assert restock.status_code == 409


def test_backfill_unit_sizes(
    container, ingredient_repository: InMemoryIngredientRepository
) -> None:
    ingredient_repository.add(
        Ingredient(id="oil", name="Olive Oil 4 LTR", unit="bottle")
    )
    client = TestClient(create_app(container))

    response = client.post(
        "/kitchen/ingredients/backfill-unit-sizes", headers=HEADERS
    )

    assert response.status_code == 200
    assert response.json() == {"updated": ["oil"]}
