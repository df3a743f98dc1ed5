"""Dependency container wiring for the application."""

from dataclasses import dataclass

from supabase import create_client

from kitchen_ledger.adapters.supabase_audit_repository import SupabaseAuditRepository
from kitchen_ledger.adapters.supabase_batch_repository import SupabaseBatchRepository
from kitchen_ledger.adapters.supabase_freezer_repository import (
    SupabaseFreezerRepository,
)
from kitchen_ledger.adapters.supabase_ingredient_repository import (
    SupabaseIngredientRepository,
)
from kitchen_ledger.adapters.supabase_storage_repository import (
    SupabaseStorageRepository,
)
from kitchen_ledger.config import Settings
from kitchen_ledger.services.audit import AuditService
from kitchen_ledger.services.batches import BatchLifecycleService
from kitchen_ledger.services.freezer import FreezerService
from kitchen_ledger.services.ingredients import IngredientService
from kitchen_ledger.services.kitchen import KitchenStorageService
from kitchen_ledger.services.ledger import StorageLedger
from kitchen_ledger.services.orchestrator import BatchDeductionOrchestrator
from kitchen_ledger.services.sources import SourceResolver


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    ingredient_service: IngredientService
    kitchen_service: KitchenStorageService
    freezer_service: FreezerService
    batch_service: BatchLifecycleService
    orchestrator: BatchDeductionOrchestrator


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    supabase_client = create_client(
        resolved_settings.supabase_url, resolved_settings.supabase_service_key
    )
    storage_repository = SupabaseStorageRepository(supabase_client)
    freezer_repository = SupabaseFreezerRepository(supabase_client)
    batch_repository = SupabaseBatchRepository(supabase_client)
    ingredient_service = IngredientService(
        SupabaseIngredientRepository(supabase_client)
    )
    audit_service = AuditService(SupabaseAuditRepository(supabase_client))
    ledger = StorageLedger()
    kitchen_service = KitchenStorageService(
        storage_repository=storage_repository,
        ingredient_service=ingredient_service,
        audit_service=audit_service,
        ledger=ledger,
    )
    freezer_service = FreezerService(
        freezer_repository=freezer_repository,
        storage_repository=storage_repository,
        ingredient_service=ingredient_service,
        audit_service=audit_service,
        ledger=ledger,
    )
    batch_service = BatchLifecycleService(batch_repository, audit_service)
    orchestrator = BatchDeductionOrchestrator(
        storage_repository=storage_repository,
        freezer_repository=freezer_repository,
        batch_repository=batch_repository,
        ingredient_service=ingredient_service,
        audit_service=audit_service,
        ledger=ledger,
        resolver=SourceResolver(),
        compensate_failed_commits=resolved_settings.compensate_failed_commits,
        max_resume_rounds=resolved_settings.max_resume_rounds,
    )
    return AppContainer(
        settings=resolved_settings,
        ingredient_service=ingredient_service,
        kitchen_service=kitchen_service,
        freezer_service=freezer_service,
        batch_service=batch_service,
        orchestrator=orchestrator,
    )
