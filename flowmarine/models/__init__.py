# Import all models so SQLAlchemy metadata is populated for Alembic autogenerate
from flowmarine.models.audit import AuditLog
from flowmarine.models.enums import (
    AuditAction,
    NotificationStatus,
    QuoteStatus,
    RequisitionStatus,
    RfqStatus,
    UserRole,
)
from flowmarine.models.quote import Quote, QuoteLineItem
from flowmarine.models.requisition import Requisition, RequisitionItem
from flowmarine.models.rfq import Rfq
from flowmarine.models.rfq_vendor import RfqVendor
from flowmarine.models.vendor import Vendor, VendorPortCapability, VendorServiceArea
from flowmarine.models.vessel import Vessel

__all__ = [
    "AuditAction",
    "AuditLog",
    "NotificationStatus",
    "Quote",
    "QuoteLineItem",
    "QuoteStatus",
    "Requisition",
    "RequisitionItem",
    "RequisitionStatus",
    "Rfq",
    "RfqStatus",
    "RfqVendor",
    "UserRole",
    "Vendor",
    "VendorPortCapability",
    "VendorServiceArea",
    "Vessel",
]
