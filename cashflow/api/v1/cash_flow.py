"""Cash flow projection API routes."""

from fastapi import APIRouter, Depends

from cashflow.api.deps import get_settings
from cashflow.config import Settings
from cashflow.schemas.projection import (
    CashFlowProjection,
    ExclusionRequest,
    ProjectionRequest,
    ProjectionSnapshot,
)
from cashflow.services.cash_flow_service import CashFlowProjectionService
from cashflow.services.data_source import SnapshotDataSource

router = APIRouter()


@router.post("/projection", response_model=CashFlowProjection)
async def create_projection(
    body: ProjectionRequest,
    config: Settings = Depends(get_settings),
):
    """Project the entity's cash flow month by month from its data snapshot.

    Returns the monthly projections with opening/closing balances and health,
    a summary block, the liquidity position and the cash runway.
    """
    service = CashFlowProjectionService(SnapshotDataSource(body.snapshot), config)
    return await service.project(
        entity_id=body.entity_id,
        months_ahead=body.months_ahead,
        months_back=body.months_back,
        current_balance=body.current_balance,
        excluded_categories=body.excluded_categories,
        today=body.as_of,
    )


@router.post("/projection/exclusions", response_model=CashFlowProjection)
async def reapply_exclusions(
    body: ExclusionRequest,
    config: Settings = Depends(get_settings),
):
    """Re-walk a previously returned projection under a new set of excluded
    predicted-expense categories; an empty list restores them all. No data is
    read again."""
    service = CashFlowProjectionService(SnapshotDataSource(ProjectionSnapshot()), config)
    return service.reapply_exclusions(body.projection, body.excluded_categories)
