"""RFQ workflow constants: audit resources, defaults, and patch whitelist."""

from __future__ import annotations

from flowmarine.models.enums import RfqStatus

# Audit resource names
AUDIT_RESOURCE_RFQ = "rfq"
AUDIT_RESOURCE_DISTRIBUTION = "rfq_distribution"
AUDIT_RESOURCE_CANCELLATION = "rfq_cancellation"

# Only DRAFT RFQs can be distributed to vendors
DISTRIBUTABLE_STATUSES: set[RfqStatus] = {
    RfqStatus.DRAFT,
}

# Statuses that count as "vendors have answered" for response-time stats
RESPONDED_STATUSES: set[RfqStatus] = {
    RfqStatus.RESPONSES_RECEIVED,
    RfqStatus.EVALUATED,
    RfqStatus.AWARDED,
}

# Fields a PATCH may touch; everything else on the RFQ is workflow-owned
UPDATABLE_FIELDS: frozenset[str] = frozenset({
    "title",
    "description",
    "delivery_location",
    "delivery_date",
    "response_deadline",
    "status",
})

# Vendor selection score weights (sum to 1.0)
WEIGHT_PERFORMANCE = 0.4
WEIGHT_LOCATION = 0.3
WEIGHT_CAPABILITY = 0.2
WEIGHT_HISTORY = 0.1

MAX_COMPONENT_SCORE = 10.0
COUNTRY_MATCH_POINTS = 5.0
PORT_MATCH_POINTS = 5.0

# First run of five capital letters in a location string, e.g. "SGSIN"
PORT_CODE_PATTERN = r"([A-Z]{5})"

AUTO_GENERATED_TITLE = "Auto-generated RFQ for Requisition"
AUTO_GENERATED_DESCRIPTION = "Automatically generated RFQ from approved requisition"

TOP_VENDORS_LIMIT = 10
