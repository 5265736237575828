import enum


class UserRole(str, enum.Enum):
    VESSEL_CREW = "VESSEL_CREW"
    CHIEF_ENGINEER = "CHIEF_ENGINEER"
    CAPTAIN = "CAPTAIN"
    SUPERINTENDENT = "SUPERINTENDENT"
    PROCUREMENT_MANAGER = "PROCUREMENT_MANAGER"
    FINANCE_TEAM = "FINANCE_TEAM"
    ADMIN = "ADMIN"


class RequisitionStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    PENDING_APPROVAL = "PENDING_APPROVAL"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    CONVERTED_TO_RFQ = "CONVERTED_TO_RFQ"
    CANCELLED = "CANCELLED"


class RfqStatus(str, enum.Enum):
    DRAFT = "DRAFT"
    SENT = "SENT"
    RESPONSES_RECEIVED = "RESPONSES_RECEIVED"
    EVALUATED = "EVALUATED"
    AWARDED = "AWARDED"
    CANCELLED = "CANCELLED"


class QuoteStatus(str, enum.Enum):
    SUBMITTED = "SUBMITTED"
    UNDER_REVIEW = "UNDER_REVIEW"
    ACCEPTED = "ACCEPTED"
    REJECTED = "REJECTED"
    EXPIRED = "EXPIRED"


class NotificationStatus(str, enum.Enum):
    PENDING = "PENDING"
    SENT = "SENT"
    FAILED = "FAILED"


class AuditAction(str, enum.Enum):
    CREATE = "CREATE"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
