"""Pydantic v2 schemas for the RFQ workflow API."""

from __future__ import annotations

import uuid
from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from flowmarine.models.enums import (
    NotificationStatus,
    QuoteStatus,
    RequisitionStatus,
    RfqStatus,
)

# ---------------------------------------------------------------------------
# Vendor selection
# ---------------------------------------------------------------------------


class VendorSelectionCriteria(BaseModel):
    countries: list[str] = Field(default_factory=list)
    regions: list[str] = Field(default_factory=list)
    port_codes: list[str] = Field(default_factory=list)
    capabilities: list[str] = Field(default_factory=list)
    min_rating: float | None = Field(None, ge=0, le=10)
    max_vendors: int | None = Field(None, ge=1, le=20)


class VendorSelectionRequest(BaseModel):
    criteria: VendorSelectionCriteria | None = None


class ServiceAreaResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    country: str
    region: str | None = None
    ports: list[str] = Field(default_factory=list)


class PortCapabilityResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    port_code: str
    capabilities: list[str] = Field(default_factory=list)


class VendorSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    code: str
    email: str | None = None
    contact_email: str | None = None
    overall_score: Decimal | None = None
    service_areas: list[ServiceAreaResponse] = Field(default_factory=list)
    port_capabilities: list[PortCapabilityResponse] = Field(default_factory=list)


class ScoredVendorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    vendor: VendorSummary
    selection_score: float
    performance_score: float
    location_score: float
    capability_score: float
    history_score: float


class VendorSelectionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    selected_vendors: list[ScoredVendorResponse]
    selection_criteria: VendorSelectionCriteria
    total_eligible_vendors: int


# ---------------------------------------------------------------------------
# RFQ
# ---------------------------------------------------------------------------


class RfqCreate(BaseModel):
    requisition_id: uuid.UUID
    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    currency: str | None = Field(None, min_length=3, max_length=3)
    delivery_location: str | None = Field(None, max_length=255)
    delivery_date: datetime | None = None
    response_deadline: datetime | None = None
    vendor_selection_criteria: VendorSelectionCriteria | None = None


class RfqUpdate(BaseModel):
    title: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    delivery_location: str | None = Field(None, max_length=255)
    delivery_date: datetime | None = None
    response_deadline: datetime | None = None
    status: RfqStatus | None = None

    @field_validator("title", "response_deadline", "status")
    @classmethod
    def _not_null(cls, v):
        # Omit the field to leave it unchanged; these columns are NOT NULL.
        if v is None:
            raise ValueError("may not be null")
        return v


class RfqResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    rfq_number: str
    requisition_id: uuid.UUID
    title: str
    description: str | None = None
    status: RfqStatus
    currency: str
    delivery_location: str | None = None
    delivery_date: datetime | None = None
    response_deadline: datetime
    issue_date: datetime
    cancelled_at: datetime | None = None
    cancellation_reason: str | None = None
    created_by: uuid.UUID | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


class VesselSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    name: str
    imo_number: str


class RequisitionItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    impa_code: str | None = None
    description: str
    quantity: Decimal
    unit_of_measure: str
    specifications: str | None = None


class RequisitionSummary(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    requisition_number: str
    status: RequisitionStatus
    currency: str
    delivery_location: str | None = None
    delivery_date: datetime | None = None
    vessel: VesselSummary | None = None
    items: list[RequisitionItemResponse] = Field(default_factory=list)


class RfqVendorResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    vendor_id: uuid.UUID
    sent_at: datetime
    notification_status: NotificationStatus
    notification_attempts: int
    notified_at: datetime | None = None
    last_notification_error: str | None = None
    vendor: VendorSummary | None = None


class QuoteLineItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    requisition_item_id: uuid.UUID | None = None
    description: str
    unit_price: Decimal
    quantity: Decimal
    total_price: Decimal
    lead_time_days: int | None = None


class QuoteResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: uuid.UUID
    vendor_id: uuid.UUID
    quote_number: str
    status: QuoteStatus
    total_amount: Decimal | None = None
    currency: str
    valid_until: datetime | None = None
    delivery_days: int | None = None
    submitted_at: datetime | None = None
    line_items: list[QuoteLineItemResponse] = Field(default_factory=list)


class RfqDetailResponse(RfqResponse):
    requisition: RequisitionSummary | None = None
    vendors: list[RfqVendorResponse] = Field(default_factory=list)
    quotes: list[QuoteResponse] = Field(default_factory=list)


class RfqListResponse(BaseModel):
    items: list[RfqResponse]
    count: int


# ---------------------------------------------------------------------------
# Distribution / cancellation
# ---------------------------------------------------------------------------


class DistributeRequest(BaseModel):
    vendor_ids: list[uuid.UUID] = Field(..., min_length=1)


class DistributionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    rfq_id: uuid.UUID
    sent_to_vendors: list[uuid.UUID]
    failed_vendors: list[uuid.UUID]
    total_sent: int


class CancelRequest(BaseModel):
    reason: str = Field(..., min_length=1, max_length=1000)


class NotificationRetryResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    checked: int
    sent: int
    failed: int


class AutoGenerateResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    rfq: RfqResponse
    vendor_selection: VendorSelectionResponse
    distribution: DistributionResponse | None = None


# ---------------------------------------------------------------------------
# Statistics
# ---------------------------------------------------------------------------


class StatusBreakdown(BaseModel):
    draft: int = 0
    sent: int = 0
    responses_received: int = 0
    evaluated: int = 0
    awarded: int = 0
    cancelled: int = 0


class VendorParticipation(BaseModel):
    vendor_id: uuid.UUID
    name: str
    count: int


class RfqStatisticsResponse(BaseModel):
    total: int
    by_status: StatusBreakdown
    average_response_time: int
    top_vendors_by_participation: list[VendorParticipation]
