"""Kitchen operations endpoints with simple token auth."""

from __future__ import annotations

from dataclasses import asdict
from typing import TYPE_CHECKING

from fastapi import APIRouter, Depends, Header, HTTPException, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse

from kitchen_ledger.api.schemas import (
    BatchStatusRequest,
    DepositRequest,
    ReceiveStockRequest,
    ReferenceWeightRequest,
    StartBatchRequest,
    WithdrawRequest,
)
from kitchen_ledger.services.audit import FAILED, PENDING
from kitchen_ledger.services.orchestrator import STARTED

if TYPE_CHECKING:
    from kitchen_ledger.containers import AppContainer

router = APIRouter(prefix="/kitchen", tags=["kitchen"])

_START_STATUS_CODES = {
    STARTED: status.HTTP_200_OK,
    PENDING: status.HTTP_202_ACCEPTED,
    FAILED: status.HTTP_409_CONFLICT,
}


def _get_api_token(request: Request) -> str:
    container: AppContainer = request.app.state.container
    return container.settings.api_token


async def require_token(
    x_api_token: str | None = Header(default=None),
    api_token: str = Depends(_get_api_token),
) -> None:
    """Ensure requests include a valid API token."""
    if not x_api_token or x_api_token != api_token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)


@router.get("/storage/{ingredient_id}", dependencies=[Depends(require_token)])
async def get_storage(ingredient_id: str, request: Request) -> dict[str, object]:
    """Return the kitchen storage record of an ingredient."""
    container: AppContainer = request.app.state.container
    item = container.kitchen_service.get_item(ingredient_id)
    if item is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND)
    return {"item": asdict(item)}


@router.post("/storage/{ingredient_id}/receive", dependencies=[Depends(require_token)])
async def receive_stock(
    ingredient_id: str, body: ReceiveStockRequest, request: Request
) -> dict[str, object]:
    """Add received stock to kitchen storage."""
    container: AppContainer = request.app.state.container
    result = container.kitchen_service.receive_stock(
        ingredient_id, body.quantity.to_quantity()
    )
    return {
        "item": asdict(result.item),
        "reference_weight_missing": result.reference_weight_missing,
    }


@router.post(
    "/storage/{ingredient_id}/reference-weight",
    dependencies=[Depends(require_token)],
)
async def set_reference_weight(
    ingredient_id: str, body: ReferenceWeightRequest, request: Request
) -> dict[str, object]:
    """Record the weight of one bunch."""
    container: AppContainer = request.app.state.container
    item = container.kitchen_service.set_reference_weight(
        ingredient_id, body.reference_weight.to_quantity()
    )
    return {"item": asdict(item)}


@router.post("/freezer/{ingredient_id}/deposit", dependencies=[Depends(require_token)])
async def deposit(
    ingredient_id: str, body: DepositRequest, request: Request
) -> dict[str, object]:
    """Freeze kitchen stock as portions."""
    container: AppContainer = request.app.state.container
    pool = container.freezer_service.deposit(
        ingredient_id,
        body.quantity.to_quantity(),
        body.portions,
        best_before=body.best_before,
        notes=body.notes,
    )
    return {"pool": asdict(pool)}


@router.post("/freezer/pools/{pool_id}/withdraw", dependencies=[Depends(require_token)])
async def withdraw(
    pool_id: str, body: WithdrawRequest, request: Request
) -> dict[str, object]:
    """Take portions out of a freezer pool."""
    container: AppContainer = request.app.state.container
    pool = container.freezer_service.withdraw(pool_id, body.portions)
    return {"pool": asdict(pool)}


@router.post("/batches/{batch_id}/start", dependencies=[Depends(require_token)])
async def start_batch(
    batch_id: str, body: StartBatchRequest, request: Request
) -> JSONResponse:
    """Start a batch; 202 asks for decisions, 409 lists every failure."""
    container: AppContainer = request.app.state.container
    result = container.orchestrator.start(
        batch_id,
        split_decisions={
            key: split.to_split() for key, split in body.split_decisions.items()
        },
        reference_weights={
            key: weight.to_quantity()
            for key, weight in body.reference_weights.items()
        },
    )
    return JSONResponse(
        status_code=_START_STATUS_CODES[result.status],
        content=jsonable_encoder(result.to_dict()),
    )


@router.post("/batches/{batch_id}/status", dependencies=[Depends(require_token)])
async def update_batch_status(
    batch_id: str, body: BatchStatusRequest, request: Request
) -> dict[str, object]:
    """Move a batch to another status."""
    container: AppContainer = request.app.state.container
    batch = container.batch_service.transition(batch_id, body.status)
    return {"batch": asdict(batch)}


@router.post("/batches/{batch_id}/restock", dependencies=[Depends(require_token)])
async def restock_batch(batch_id: str, request: Request) -> dict[str, object]:
    """Return a completed batch to draft."""
    container: AppContainer = request.app.state.container
    batch = container.batch_service.restock(batch_id)
    return {"batch": asdict(batch)}


@router.post(
    "/ingredients/backfill-unit-sizes", dependencies=[Depends(require_token)]
)
async def backfill_unit_sizes(request: Request) -> dict[str, object]:
    """Store unit sizes parsed from ingredient names."""
    container: AppContainer = request.app.state.container
    return {"updated": container.ingredient_service.backfill_unit_sizes()}
