"""RFQ workflow API router."""

from __future__ import annotations

import uuid
from datetime import datetime

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from flowmarine.database.session import get_db
from flowmarine.models.enums import RfqStatus, UserRole
from flowmarine.modules.auth.auth import AuthenticatedUser, get_current_user, require_roles
from flowmarine.modules.rfq.rfq_service import RfqService
from flowmarine.modules.rfq.schemas import (
    AutoGenerateResponse,
    CancelRequest,
    DistributeRequest,
    DistributionResponse,
    NotificationRetryResponse,
    RfqCreate,
    RfqDetailResponse,
    RfqListResponse,
    RfqResponse,
    RfqStatisticsResponse,
    RfqUpdate,
    RfqVendorResponse,
    VendorSelectionRequest,
    VendorSelectionResponse,
)

router = APIRouter(prefix="/rfqs", tags=["rfqs"])

PROCUREMENT_ROLES = {
    UserRole.PROCUREMENT_MANAGER,
    UserRole.SUPERINTENDENT,
    UserRole.ADMIN,
}


def _require_procurement_role(user: AuthenticatedUser) -> None:
    require_roles(user, PROCUREMENT_ROLES)


# ---------------------------------------------------------------------------
# Collection
# ---------------------------------------------------------------------------


@router.post("/", response_model=RfqResponse, status_code=201)
async def create_rfq(
    body: RfqCreate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Convert an approved requisition into a DRAFT RFQ."""
    _require_procurement_role(user)
    rfq = await RfqService(db).create_rfq_from_requisition(body, user.id)
    return RfqResponse.model_validate(rfq)


@router.get("/", response_model=RfqListResponse)
async def list_rfqs(
    status: RfqStatus | None = Query(None),
    vessel_id: uuid.UUID | None = Query(None),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rfqs = await RfqService(db).get_rfqs(
        status=status,
        vessel_id=vessel_id,
        date_from=date_from,
        date_to=date_to,
    )
    return RfqListResponse(
        items=[RfqResponse.model_validate(r) for r in rfqs],
        count=len(rfqs),
    )


@router.get("/statistics", response_model=RfqStatisticsResponse)
async def get_rfq_statistics(
    vessel_id: uuid.UUID | None = Query(None),
    date_from: datetime | None = Query(None),
    date_to: datetime | None = Query(None),
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    stats = await RfqService(db).get_rfq_statistics(
        vessel_id=vessel_id,
        date_from=date_from,
        date_to=date_to,
    )
    return RfqStatisticsResponse.model_validate(stats)


@router.post(
    "/auto-generate/{requisition_id}",
    response_model=AutoGenerateResponse,
    status_code=201,
)
async def auto_generate_rfq(
    requisition_id: uuid.UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create, select vendors for, and distribute an RFQ in one call."""
    _require_procurement_role(user)
    result = await RfqService(db).auto_generate_rfq(requisition_id, user.id)
    return AutoGenerateResponse.model_validate(result)


# ---------------------------------------------------------------------------
# Single RFQ
# ---------------------------------------------------------------------------


@router.get("/{rfq_id}", response_model=RfqDetailResponse)
async def get_rfq(
    rfq_id: uuid.UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rfq = await RfqService(db).get_rfq_by_id(rfq_id)
    return RfqDetailResponse.model_validate(rfq)


@router.patch("/{rfq_id}", response_model=RfqResponse)
async def update_rfq(
    rfq_id: uuid.UUID,
    body: RfqUpdate,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    _require_procurement_role(user)
    rfq = await RfqService(db).update_rfq(rfq_id, body, user.id)
    return RfqResponse.model_validate(rfq)


@router.post("/{rfq_id}/select-vendors", response_model=VendorSelectionResponse)
async def select_vendors(
    rfq_id: uuid.UUID,
    body: VendorSelectionRequest | None = None,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Rank eligible vendors; omit ``criteria`` to derive it from the delivery location."""
    _require_procurement_role(user)
    criteria = body.criteria if body is not None else None
    result = await RfqService(db).select_vendors_for_rfq(rfq_id, criteria)
    return VendorSelectionResponse.model_validate(result)


@router.post("/{rfq_id}/distribute", response_model=DistributionResponse)
async def distribute_rfq(
    rfq_id: uuid.UUID,
    body: DistributeRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    _require_procurement_role(user)
    result = await RfqService(db).distribute_rfq(rfq_id, body.vendor_ids, user.id)
    return DistributionResponse.model_validate(result)


@router.post("/{rfq_id}/cancel", response_model=RfqResponse)
async def cancel_rfq(
    rfq_id: uuid.UUID,
    body: CancelRequest,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    _require_procurement_role(user)
    rfq = await RfqService(db).cancel_rfq(rfq_id, body.reason, user.id)
    return RfqResponse.model_validate(rfq)


# ---------------------------------------------------------------------------
# Notifications
# ---------------------------------------------------------------------------


@router.get("/{rfq_id}/notifications", response_model=list[RfqVendorResponse])
async def get_notification_status(
    rfq_id: uuid.UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    rows = await RfqService(db).get_notification_status(rfq_id)
    return [RfqVendorResponse.model_validate(row) for row in rows]


@router.post("/{rfq_id}/notifications/retry", response_model=NotificationRetryResponse)
async def retry_notifications(
    rfq_id: uuid.UUID,
    user: AuthenticatedUser = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    _require_procurement_role(user)
    stats = await RfqService(db).retry_failed_notifications(rfq_id=rfq_id)
    return NotificationRetryResponse.model_validate(stats)
