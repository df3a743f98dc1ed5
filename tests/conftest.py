"""Shared test fixtures."""

from dataclasses import dataclass, field, replace

import pytest

from kitchen_ledger.config import Settings
from kitchen_ledger.containers import AppContainer
from kitchen_ledger.domain.batches import Batch, Requirement
from kitchen_ledger.domain.quantities import Quantity
from kitchen_ledger.domain.storage import FrozenPortionPool, Ingredient, StorageItem
from kitchen_ledger.services.audit import AuditRepository, AuditService
from kitchen_ledger.services.batches import BatchLifecycleService, BatchRepository
from kitchen_ledger.services.freezer import FreezerRepository, FreezerService
from kitchen_ledger.services.ingredients import IngredientRepository, IngredientService
from kitchen_ledger.services.kitchen import KitchenStorageService, StorageRepository
from kitchen_ledger.services.ledger import StorageLedger
from kitchen_ledger.services.orchestrator import BatchDeductionOrchestrator


@dataclass
class InMemoryStorageRepository(StorageRepository):
    """In-memory kitchen storage repository for tests."""

    items: dict[str, StorageItem] = field(default_factory=dict)
    writes: list[StorageItem] = field(default_factory=list)
    failing_ingredients: set[str] = field(default_factory=set)

    def read_storage(self, ingredient_id: str) -> StorageItem | None:
        return self.items.get(ingredient_id)

    def write_storage(self, item: StorageItem) -> StorageItem:
        if item.ingredient_id in self.failing_ingredients:
            raise RuntimeError(f"write refused for {item.ingredient_id}")
        saved = item
        if item.id is None:
            saved = replace(item, id=f"st-{item.ingredient_id}")
        self.items[item.ingredient_id] = saved
        self.writes.append(saved)
        return saved


@dataclass
class InMemoryFreezerRepository(FreezerRepository):
    """In-memory freezer repository for tests."""

    pools: dict[str, FrozenPortionPool] = field(default_factory=dict)
    writes: list[FrozenPortionPool] = field(default_factory=list)
    failing_pools: set[str] = field(default_factory=set)
    fail_create: bool = False

    def add(self, pool: FrozenPortionPool) -> FrozenPortionPool:
        self.pools[pool.id or f"pool-{len(self.pools) + 1}"] = pool
        return pool

    def read_frozen_pools(self, ingredient_id: str) -> list[FrozenPortionPool]:
        return [
            pool for pool in self.pools.values() if pool.ingredient_id == ingredient_id
        ]

    def get_pool(self, pool_id: str) -> FrozenPortionPool | None:
        return self.pools.get(pool_id)

    def create_pool(self, pool: FrozenPortionPool) -> FrozenPortionPool:
        if self.fail_create:
            raise RuntimeError(f"create refused for {pool.ingredient_id}")
        created = replace(pool, id=f"pool-{len(self.pools) + 1}")
        self.pools[created.id] = created
        return created

    def write_frozen_pool(self, pool: FrozenPortionPool) -> FrozenPortionPool:
        if pool.id in self.failing_pools:
            raise RuntimeError(f"write refused for pool {pool.id}")
        self.pools[pool.id] = pool
        self.writes.append(pool)
        return pool


@dataclass
class InMemoryBatchRepository(BatchRepository):
    """In-memory batch repository for tests."""

    batches: dict[str, Batch] = field(default_factory=dict)
    requirements: dict[str, list[Requirement]] = field(default_factory=dict)
    writes: list[Batch] = field(default_factory=list)
    failing_batches: set[str] = field(default_factory=set)

    def read_batch(self, batch_id: str) -> Batch | None:
        return self.batches.get(batch_id)

    def write_batch(self, batch: Batch) -> Batch:
        if batch.id in self.failing_batches:
            raise RuntimeError(f"write refused for batch {batch.id}")
        self.batches[batch.id] = batch
        self.writes.append(batch)
        return batch

    def list_requirements(self, batch_id: str) -> list[Requirement]:
        return list(self.requirements.get(batch_id, []))


@dataclass
class InMemoryIngredientRepository(IngredientRepository):
    """In-memory ingredient repository for tests."""

    ingredients: dict[str, Ingredient] = field(default_factory=dict)

    def add(self, ingredient: Ingredient) -> Ingredient:
        self.ingredients[ingredient.id] = ingredient
        return ingredient

    def get_ingredient(self, ingredient_id: str) -> Ingredient | None:
        return self.ingredients.get(ingredient_id)

    def list_ingredients(self) -> list[Ingredient]:
        return list(self.ingredients.values())

    def set_unit_size(self, ingredient_id: str, unit_size: Quantity) -> None:
        self.ingredients[ingredient_id] = replace(
            self.ingredients[ingredient_id], unit_size=unit_size
        )


@dataclass
class InMemoryAuditRepository(AuditRepository):
    """In-memory audit repository for tests."""

    entries: list[dict[str, str]] = field(default_factory=list)

    def append(self, log_type: str, action: str, details: str, outcome: str) -> None:
        self.entries.append(
            {
                "type": log_type,
                "action": action,
                "details": details,
                "status": outcome,
            }
        )


@pytest.fixture
def settings() -> Settings:
    return Settings(
        supabase_url="https://example.supabase.co",
        supabase_service_key="service-key",
        api_token="api-token",
    )


@pytest.fixture
def storage_repository() -> InMemoryStorageRepository:
    return InMemoryStorageRepository()


@pytest.fixture
def freezer_repository() -> InMemoryFreezerRepository:
    return InMemoryFreezerRepository()


@pytest.fixture
def batch_repository() -> InMemoryBatchRepository:
    return InMemoryBatchRepository()


@pytest.fixture
def ingredient_repository() -> InMemoryIngredientRepository:
    return InMemoryIngredientRepository()


@pytest.fixture
def audit_repository() -> InMemoryAuditRepository:
    return InMemoryAuditRepository()


@pytest.fixture
def ingredient_service(
    ingredient_repository: InMemoryIngredientRepository,
) -> IngredientService:
    return IngredientService(ingredient_repository)


@pytest.fixture
def audit_service(audit_repository: InMemoryAuditRepository) -> AuditService:
    return AuditService(audit_repository)


@pytest.fixture
def orchestrator(
    storage_repository: InMemoryStorageRepository,
    freezer_repository: InMemoryFreezerRepository,
    batch_repository: InMemoryBatchRepository,
    ingredient_service: IngredientService,
    audit_service: AuditService,
) -> BatchDeductionOrchestrator:
    return BatchDeductionOrchestrator(
        storage_repository=storage_repository,
        freezer_repository=freezer_repository,
        batch_repository=batch_repository,
        ingredient_service=ingredient_service,
        audit_service=audit_service,
    )


@pytest.fixture
def container(  # noqa: PLR0913
    settings: Settings,
    storage_repository: InMemoryStorageRepository,
    freezer_repository: InMemoryFreezerRepository,
    batch_repository: InMemoryBatchRepository,
    ingredient_service: IngredientService,
    audit_service: AuditService,
    orchestrator: BatchDeductionOrchestrator,
) -> AppContainer:
    ledger = StorageLedger()
    return AppContainer(
        settings=settings,
        ingredient_service=ingredient_service,
        kitchen_service=KitchenStorageService(
            storage_repository=storage_repository,
            ingredient_service=ingredient_service,
            audit_service=audit_service,
            ledger=ledger,
        ),
        freezer_service=FreezerService(
            freezer_repository=freezer_repository,
            storage_repository=storage_repository,
            ingredient_service=ingredient_service,
            audit_service=audit_service,
            ledger=ledger,
        ),
        batch_service=BatchLifecycleService(batch_repository, audit_service),
        orchestrator=orchestrator,
    )
