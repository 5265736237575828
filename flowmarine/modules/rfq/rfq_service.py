"""RFQ workflow service: requisition conversion, vendor selection, distribution."""

from __future__ import annotations

import functools
import logging
import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta

from sqlalchemy import and_, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import joinedload, selectinload

from flowmarine.config import settings
from flowmarine.exceptions import (
    AppException,
    BusinessRuleException,
    NotFoundException,
    ServiceFailureException,
)
from flowmarine.models.enums import (
    AuditAction,
    NotificationStatus,
    RequisitionStatus,
    RfqStatus,
)
from flowmarine.models.quote import Quote
from flowmarine.models.requisition import Requisition
from flowmarine.models.rfq import Rfq
from flowmarine.models.rfq_vendor import RfqVendor
from flowmarine.models.vendor import Vendor, VendorPortCapability, VendorServiceArea
from flowmarine.modules.audit.service import AuditService, snapshot
from flowmarine.modules.notifications.email_service import EmailService
from flowmarine.modules.rfq import statistics
from flowmarine.modules.rfq.constants import (
    AUDIT_RESOURCE_CANCELLATION,
    AUDIT_RESOURCE_DISTRIBUTION,
    AUDIT_RESOURCE_RFQ,
    AUTO_GENERATED_DESCRIPTION,
    AUTO_GENERATED_TITLE,
    DISTRIBUTABLE_STATUSES,
    UPDATABLE_FIELDS,
)
from flowmarine.modules.rfq.schemas import RfqCreate, RfqUpdate, VendorSelectionCriteria
from flowmarine.modules.rfq.vendor_selection import (
    ScoredVendor,
    build_default_criteria,
    rank_vendors,
)

logger = logging.getLogger(__name__)


@dataclass
class VendorSelectionResult:
    selected_vendors: list[ScoredVendor]
    selection_criteria: VendorSelectionCriteria
    total_eligible_vendors: int


@dataclass
class RfqDistributionResult:
    rfq_id: uuid.UUID
    sent_to_vendors: list[uuid.UUID] = field(default_factory=list)
    failed_vendors: list[uuid.UUID] = field(default_factory=list)

    @property
    def total_sent(self) -> int:
        return len(self.sent_to_vendors)


@dataclass
class AutoGenerateResult:
    rfq: Rfq
    vendor_selection: VendorSelectionResult
    distribution: RfqDistributionResult | None


def _wrap_failures(code: str, message: str):
    """Re-raise domain errors untouched; log anything else and replace it with a stable 500."""

    def decorator(method):
        @functools.wraps(method)
        async def wrapper(self, *args, **kwargs):
            try:
                return await method(self, *args, **kwargs)
            except AppException:
                raise
            except Exception as exc:
                logger.exception(
                    "%s: %s args=%s kwargs=%s", code, method.__name__, args, kwargs
                )
                raise ServiceFailureException(message, code=code) from exc

        return wrapper

    return decorator


def _rfq_not_found(rfq_id: uuid.UUID) -> NotFoundException:
    return NotFoundException(f"RFQ {rfq_id} not found", code="RFQ_NOT_FOUND")


class RfqService:
    def __init__(self, db: AsyncSession, email_service: EmailService | None = None):
        self.db = db
        self._email_service = email_service
        self.audit = AuditService(db)

    @property
    def email(self) -> EmailService:
        if self._email_service is None:
            self._email_service = EmailService()
        return self._email_service

    # ------------------------------------------------------------------
    # Loading helpers
    # ------------------------------------------------------------------

    async def _load_rfq_with_requisition(self, rfq_id: uuid.UUID) -> Rfq | None:
        result = await self.db.execute(
            select(Rfq)
            .options(
                joinedload(Rfq.requisition).joinedload(Requisition.vessel),
                joinedload(Rfq.requisition).selectinload(Requisition.items),
            )
            .where(Rfq.id == rfq_id)
        )
        return result.unique().scalar_one_or_none()

    async def _load_rfq(self, rfq_id: uuid.UUID) -> Rfq | None:
        result = await self.db.execute(select(Rfq).where(Rfq.id == rfq_id))
        return result.scalar_one_or_none()

    # ------------------------------------------------------------------
    # Reference number generation
    # ------------------------------------------------------------------

    async def _generate_rfq_number(self, offset: int = 0) -> str:
        """RFQ-YYYY-NNNN where NNNN is this year's RFQ count plus one.

        The count is not atomic and can trail the highest issued number, so
        create_rfq_from_requisition retries with a growing ``offset`` after a
        unique-constraint conflict.
        """
        now = datetime.now(UTC)
        year_start = datetime(now.year, 1, 1, tzinfo=UTC)
        next_year_start = datetime(now.year + 1, 1, 1, tzinfo=UTC)
        result = await self.db.execute(
            select(func.count())
            .select_from(Rfq)
            .where(Rfq.created_at >= year_start, Rfq.created_at < next_year_start)
        )
        count = result.scalar() or 0
        return f"RFQ-{now.year}-{count + 1 + offset:04d}"

    # ------------------------------------------------------------------
    # Creation
    # ------------------------------------------------------------------

    @_wrap_failures("RFQ_CREATION_FAILED", "Failed to create RFQ from requisition")
    async def create_rfq_from_requisition(self, data: RfqCreate, user_id: uuid.UUID) -> Rfq:
        """Convert an APPROVED requisition into a DRAFT RFQ.

        The RFQ insert and the requisition's move to CONVERTED_TO_RFQ share a
        savepoint, so either both land or neither does.
        """
        result = await self.db.execute(
            select(Requisition)
            .options(
                joinedload(Requisition.vessel),
                selectinload(Requisition.items),
            )
            .where(Requisition.id == data.requisition_id)
        )
        requisition = result.unique().scalar_one_or_none()
        if requisition is None:
            raise NotFoundException(
                f"Requisition {data.requisition_id} not found",
                code="REQUISITION_NOT_FOUND",
            )
        if requisition.status != RequisitionStatus.APPROVED:
            raise BusinessRuleException(
                "Only approved requisitions can be converted to RFQ",
                code="REQUISITION_NOT_APPROVED",
            )

        existing = await self.db.execute(
            select(Rfq.id).where(Rfq.requisition_id == data.requisition_id).limit(1)
        )
        if existing.scalar_one_or_none() is not None:
            raise BusinessRuleException(
                "RFQ already exists for this requisition", code="RFQ_ALREADY_EXISTS"
            )

        now = datetime.now(UTC)
        response_deadline = data.response_deadline or now + timedelta(
            days=settings.rfq_default_response_days
        )
        currency = data.currency or requisition.currency
        delivery_location = data.delivery_location or requisition.delivery_location
        delivery_date = data.delivery_date or requisition.delivery_date

        rfq: Rfq | None = None
        for attempt in range(1, settings.rfq_number_max_attempts + 1):
            rfq_number = await self._generate_rfq_number(offset=attempt - 1)
            candidate = Rfq(
                id=uuid.uuid4(),
                rfq_number=rfq_number,
                requisition_id=data.requisition_id,
                title=data.title,
                description=data.description,
                currency=currency,
                delivery_location=delivery_location,
                delivery_date=delivery_date,
                response_deadline=response_deadline,
                issue_date=now,
                status=RfqStatus.DRAFT,
                created_by=user_id,
            )
            try:
                async with self.db.begin_nested():
                    self.db.add(candidate)
                    requisition.status = RequisitionStatus.CONVERTED_TO_RFQ
            except IntegrityError:
                logger.warning(
                    "RFQ number %s already taken (attempt %d/%d), regenerating",
                    rfq_number, attempt, settings.rfq_number_max_attempts,
                )
                continue
            rfq = candidate
            break

        if rfq is None:
            raise ServiceFailureException(
                "Could not allocate a unique RFQ number", code="RFQ_CREATION_FAILED"
            )

        await self.audit.log(
            user_id=user_id,
            action=AuditAction.CREATE,
            resource=AUDIT_RESOURCE_RFQ,
            resource_id=rfq.id,
            new_values=snapshot(rfq),
            metadata={"requisition_id": data.requisition_id},
        )
        logger.info("Created RFQ %s (%s) from requisition %s", rfq.id, rfq.rfq_number, data.requisition_id)
        return rfq

    # ------------------------------------------------------------------
    # Vendor selection
    # ------------------------------------------------------------------

    async def _get_eligible_vendors(self, criteria: VendorSelectionCriteria) -> list[Vendor]:
        """Active, approved vendors passing every non-empty criterion."""
        query = (
            select(Vendor)
            .options(
                selectinload(Vendor.service_areas),
                selectinload(Vendor.port_capabilities),
            )
            .where(Vendor.is_active.is_(True), Vendor.is_approved.is_(True))
        )

        if criteria.min_rating:
            query = query.where(Vendor.overall_score >= criteria.min_rating)

        # Country and port must be served by the same service area
        area_filters = []
        if criteria.countries:
            area_filters.append(VendorServiceArea.country.in_(criteria.countries))
        if criteria.port_codes:
            area_filters.append(VendorServiceArea.ports.overlap(criteria.port_codes))
        if area_filters:
            query = query.where(Vendor.service_areas.any(and_(*area_filters)))

        if criteria.capabilities:
            query = query.where(
                Vendor.port_capabilities.any(
                    VendorPortCapability.capabilities.overlap(criteria.capabilities)
                )
            )

        result = await self.db.execute(query.order_by(Vendor.name))
        return list(result.scalars().all())

    @_wrap_failures("VENDOR_SELECTION_FAILED", "Failed to select vendors for RFQ")
    async def select_vendors_for_rfq(
        self,
        rfq_id: uuid.UUID,
        criteria: VendorSelectionCriteria | None = None,
    ) -> VendorSelectionResult:
        """Rank eligible vendors for an RFQ and keep the top ``max_vendors``.

        Without explicit criteria, defaults are derived from the delivery
        location (RFQ's own, else the requisition's).
        """
        rfq = await self._load_rfq_with_requisition(rfq_id)
        if rfq is None:
            raise _rfq_not_found(rfq_id)

        if criteria is None:
            location = rfq.delivery_location
            if not location and rfq.requisition is not None:
                location = rfq.requisition.delivery_location
            criteria = build_default_criteria(location)

        eligible = await self._get_eligible_vendors(criteria)
        ranked = rank_vendors(eligible, criteria)
        max_vendors = criteria.max_vendors or settings.vendor_selection_default_max_vendors

        logger.info(
            "Selected %d of %d eligible vendors for RFQ %s",
            min(max_vendors, len(ranked)), len(eligible), rfq_id,
        )
        return VendorSelectionResult(
            selected_vendors=ranked[:max_vendors],
            selection_criteria=criteria,
            total_eligible_vendors=len(eligible),
        )

    # ------------------------------------------------------------------
    # Distribution
    # ------------------------------------------------------------------

    async def _notify_vendor(self, rfq: Rfq, vendor: Vendor, rfq_vendor: RfqVendor) -> bool:
        """Send one RFQ email and record the outcome on the RfqVendor row."""
        rfq_vendor.notification_attempts = (rfq_vendor.notification_attempts or 0) + 1
        try:
            await self.email.send_rfq_notification(rfq, vendor)
        except Exception as exc:
            logger.warning(
                "Failed to send RFQ %s notification to vendor %s: %s",
                rfq.id, vendor.id, exc, exc_info=True,
            )
            rfq_vendor.notification_status = NotificationStatus.FAILED
            rfq_vendor.last_notification_error = str(exc)[:1000]
            return False

        rfq_vendor.notification_status = NotificationStatus.SENT
        rfq_vendor.notified_at = datetime.now(UTC)
        rfq_vendor.last_notification_error = None
        return True

    @_wrap_failures("RFQ_DISTRIBUTION_FAILED", "Failed to distribute RFQ")
    async def distribute_rfq(
        self,
        rfq_id: uuid.UUID,
        vendor_ids: list[uuid.UUID],
        user_id: uuid.UUID,
    ) -> RfqDistributionResult:
        """Send a DRAFT RFQ to the given vendors.

        The vendor links and the move to SENT are committed before any email
        goes out; per-vendor delivery failures are recorded, not raised.
        """
        rfq = await self._load_rfq_with_requisition(rfq_id)
        if rfq is None:
            raise _rfq_not_found(rfq_id)
        if rfq.status not in DISTRIBUTABLE_STATUSES:
            raise BusinessRuleException(
                "RFQ must be in draft status to distribute", code="INVALID_RFQ_STATUS"
            )

        requested_ids = list(dict.fromkeys(vendor_ids))
        if not requested_ids:
            raise BusinessRuleException(
                "At least one vendor must be selected", code="INVALID_VENDORS"
            )

        result = await self.db.execute(
            select(Vendor).where(
                Vendor.id.in_(requested_ids),
                Vendor.is_active.is_(True),
                Vendor.is_approved.is_(True),
            )
        )
        vendors_by_id = {vendor.id: vendor for vendor in result.scalars().all()}
        invalid_ids = [vid for vid in requested_ids if vid not in vendors_by_id]
        if invalid_ids:
            raise BusinessRuleException(
                "Some vendors are not found or not active",
                code="INVALID_VENDORS",
                details=[
                    {"field": "vendor_ids", "message": f"Vendor {vid} is not found or not active"}
                    for vid in invalid_ids
                ],
            )

        now = datetime.now(UTC)
        links: list[tuple[Vendor, RfqVendor]] = []
        async with self.db.begin_nested():
            for vendor_id in requested_ids:
                rfq_vendor = RfqVendor(
                    rfq_id=rfq.id,
                    vendor_id=vendor_id,
                    sent_at=now,
                    notification_status=NotificationStatus.PENDING,
                    notification_attempts=0,
                )
                self.db.add(rfq_vendor)
                links.append((vendors_by_id[vendor_id], rfq_vendor))
            old_status = rfq.status
            rfq.status = RfqStatus.SENT
        await self.db.commit()

        outcome = RfqDistributionResult(rfq_id=rfq.id)
        for vendor, rfq_vendor in links:
            if await self._notify_vendor(rfq, vendor, rfq_vendor):
                outcome.sent_to_vendors.append(vendor.id)
            else:
                outcome.failed_vendors.append(vendor.id)

        await self.audit.log(
            user_id=user_id,
            action=AuditAction.UPDATE,
            resource=AUDIT_RESOURCE_DISTRIBUTION,
            resource_id=rfq.id,
            old_values={"status": old_status},
            new_values={
                "status": RfqStatus.SENT,
                "vendor_ids": requested_ids,
                "sent_to_vendors": outcome.sent_to_vendors,
                "failed_vendors": outcome.failed_vendors,
            },
        )
        logger.info(
            "Distributed RFQ %s to %d vendors (%d notification failures)",
            rfq.id, len(requested_ids), len(outcome.failed_vendors),
        )
        return outcome

    # ------------------------------------------------------------------
    # Read / update / cancel
    # ------------------------------------------------------------------

    @_wrap_failures("RFQ_FETCH_FAILED", "Failed to get RFQ")
    async def get_rfq_by_id(self, rfq_id: uuid.UUID) -> Rfq:
        result = await self.db.execute(
            select(Rfq)
            .options(
                joinedload(Rfq.requisition).joinedload(Requisition.vessel),
                joinedload(Rfq.requisition).selectinload(Requisition.items),
                selectinload(Rfq.vendors).joinedload(RfqVendor.vendor).selectinload(
                    Vendor.service_areas
                ),
                selectinload(Rfq.vendors).joinedload(RfqVendor.vendor).selectinload(
                    Vendor.port_capabilities
                ),
                selectinload(Rfq.quotes).joinedload(Quote.vendor),
                selectinload(Rfq.quotes).selectinload(Quote.line_items),
            )
            .where(Rfq.id == rfq_id)
        )
        rfq = result.unique().scalar_one_or_none()
        if rfq is None:
            raise _rfq_not_found(rfq_id)
        return rfq

    @_wrap_failures("RFQ_UPDATE_FAILED", "Failed to update RFQ")
    async def update_rfq(self, rfq_id: uuid.UUID, data: RfqUpdate, user_id: uuid.UUID) -> Rfq:
        rfq = await self._load_rfq(rfq_id)
        if rfq is None:
            raise _rfq_not_found(rfq_id)
        if rfq.status == RfqStatus.CANCELLED:
            raise BusinessRuleException(
                "Cancelled RFQs cannot be updated", code="RFQ_ALREADY_CANCELLED"
            )

        old_values = snapshot(rfq)
        for key, value in data.model_dump(exclude_unset=True).items():
            if key in UPDATABLE_FIELDS:
                setattr(rfq, key, value)
        await self.db.flush()

        await self.audit.log(
            user_id=user_id,
            action=AuditAction.UPDATE,
            resource=AUDIT_RESOURCE_RFQ,
            resource_id=rfq.id,
            old_values=old_values,
            new_values=snapshot(rfq),
        )
        return rfq

    @_wrap_failures("RFQ_FETCH_FAILED", "Failed to get RFQs")
    async def get_rfqs(
        self,
        status: RfqStatus | None = None,
        vessel_id: uuid.UUID | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> list[Rfq]:
        """List RFQs newest first, optionally filtered by status, vessel and creation window."""
        query = select(Rfq).options(
            joinedload(Rfq.requisition).joinedload(Requisition.vessel),
            selectinload(Rfq.vendors).joinedload(RfqVendor.vendor),
            selectinload(Rfq.quotes),
        )

        if status is not None:
            query = query.where(Rfq.status == status)
        if vessel_id is not None:
            query = query.where(
                Rfq.requisition_id.in_(
                    select(Requisition.id).where(Requisition.vessel_id == vessel_id)
                )
            )
        if date_from is not None:
            query = query.where(Rfq.created_at >= date_from)
        if date_to is not None:
            query = query.where(Rfq.created_at <= date_to)

        result = await self.db.execute(query.order_by(Rfq.created_at.desc()))
        return list(result.unique().scalars().all())

    @_wrap_failures("RFQ_CANCELLATION_FAILED", "Failed to cancel RFQ")
    async def cancel_rfq(self, rfq_id: uuid.UUID, reason: str, user_id: uuid.UUID) -> Rfq:
        rfq = await self._load_rfq(rfq_id)
        if rfq is None:
            raise _rfq_not_found(rfq_id)
        if rfq.status == RfqStatus.CANCELLED:
            raise BusinessRuleException(
                "RFQ is already cancelled", code="RFQ_ALREADY_CANCELLED"
            )

        old_status = rfq.status
        rfq.status = RfqStatus.CANCELLED
        rfq.cancelled_at = datetime.now(UTC)
        rfq.cancellation_reason = reason
        await self.db.flush()

        await self.audit.log(
            user_id=user_id,
            action=AuditAction.UPDATE,
            resource=AUDIT_RESOURCE_CANCELLATION,
            resource_id=rfq.id,
            old_values={"status": old_status},
            new_values={"status": RfqStatus.CANCELLED, "reason": reason},
        )
        logger.info("Cancelled RFQ %s (was %s)", rfq.id, old_status.value)
        return rfq

    # ------------------------------------------------------------------
    # Composite workflows
    # ------------------------------------------------------------------

    async def auto_generate_rfq(
        self, requisition_id: uuid.UUID, user_id: uuid.UUID
    ) -> AutoGenerateResult:
        """Create, select vendors for, and distribute an RFQ in one go."""
        rfq = await self.create_rfq_from_requisition(
            RfqCreate(
                requisition_id=requisition_id,
                title=AUTO_GENERATED_TITLE,
                description=AUTO_GENERATED_DESCRIPTION,
            ),
            user_id,
        )
        selection = await self.select_vendors_for_rfq(rfq.id)

        distribution = None
        if selection.selected_vendors:
            distribution = await self.distribute_rfq(
                rfq.id,
                [scored.vendor.id for scored in selection.selected_vendors],
                user_id,
            )
        return AutoGenerateResult(rfq=rfq, vendor_selection=selection, distribution=distribution)

    async def get_rfq_statistics(
        self,
        vessel_id: uuid.UUID | None = None,
        date_from: datetime | None = None,
        date_to: datetime | None = None,
    ) -> dict:
        rfqs = await self.get_rfqs(vessel_id=vessel_id, date_from=date_from, date_to=date_to)
        return {
            "total": len(rfqs),
            "by_status": statistics.count_by_status(rfqs),
            "average_response_time": statistics.calculate_average_response_time(rfqs),
            "top_vendors_by_participation": statistics.top_vendors_by_participation(rfqs),
        }

    # ------------------------------------------------------------------
    # Notification tracking
    # ------------------------------------------------------------------

    @_wrap_failures("RFQ_FETCH_FAILED", "Failed to get RFQ notifications")
    async def get_notification_status(self, rfq_id: uuid.UUID) -> list[RfqVendor]:
        if await self._load_rfq(rfq_id) is None:
            raise _rfq_not_found(rfq_id)
        result = await self.db.execute(
            select(RfqVendor)
            .options(joinedload(RfqVendor.vendor))
            .where(RfqVendor.rfq_id == rfq_id)
            .order_by(RfqVendor.sent_at.asc())
        )
        return list(result.scalars().all())

    @_wrap_failures("NOTIFICATION_RETRY_FAILED", "Failed to retry RFQ notifications")
    async def retry_failed_notifications(
        self,
        rfq_id: uuid.UUID | None = None,
        max_attempts: int | None = None,
    ) -> dict:
        """Re-send FAILED vendor notifications on SENT RFQs below the attempt cap."""
        max_attempts = max_attempts or settings.notification_max_attempts

        if rfq_id is not None:
            rfq = await self._load_rfq(rfq_id)
            if rfq is None:
                raise _rfq_not_found(rfq_id)
            if rfq.status != RfqStatus.SENT:
                raise BusinessRuleException(
                    "Notifications can only be retried for sent RFQs",
                    code="INVALID_RFQ_STATUS",
                )

        query = (
            select(RfqVendor)
            .join(Rfq, Rfq.id == RfqVendor.rfq_id)
            .options(
                joinedload(RfqVendor.vendor),
                joinedload(RfqVendor.rfq)
                .joinedload(Rfq.requisition)
                .joinedload(Requisition.vessel),
            )
            .where(
                RfqVendor.notification_status == NotificationStatus.FAILED,
                RfqVendor.notification_attempts < max_attempts,
                Rfq.status == RfqStatus.SENT,
            )
        )
        if rfq_id is not None:
            query = query.where(RfqVendor.rfq_id == rfq_id)

        result = await self.db.execute(query)
        pending = list(result.unique().scalars().all())

        stats = {"checked": len(pending), "sent": 0, "failed": 0}
        for rfq_vendor in pending:
            if await self._notify_vendor(rfq_vendor.rfq, rfq_vendor.vendor, rfq_vendor):
                stats["sent"] += 1
            else:
                stats["failed"] += 1
        await self.db.flush()
        return stats
