"""Aggregations over already-loaded RFQs for the statistics endpoint."""

from __future__ import annotations

import math
from collections import Counter

from flowmarine.models.enums import RfqStatus
from flowmarine.modules.rfq.constants import RESPONDED_STATUSES, TOP_VENDORS_LIMIT

_SECONDS_PER_DAY = 86400


def count_by_status(rfqs) -> dict[str, int]:
    counts = Counter(rfq.status for rfq in rfqs)
    return {status.value.lower(): counts.get(status, 0) for status in RfqStatus}


def calculate_average_response_time(rfqs) -> int:
    """Mean whole days from issue to last update over RFQs vendors have answered."""
    durations = []
    for rfq in rfqs:
        if rfq.status not in RESPONDED_STATUSES:
            continue
        if rfq.issue_date is None or rfq.updated_at is None:
            continue
        elapsed = (rfq.updated_at - rfq.issue_date).total_seconds()
        durations.append(math.ceil(elapsed / _SECONDS_PER_DAY))

    if not durations:
        return 0
    # Halves round up (2.5 days -> 3), not to even
    return math.floor(sum(durations) / len(durations) + 0.5)


def top_vendors_by_participation(rfqs, limit: int = TOP_VENDORS_LIMIT) -> list[dict]:
    counts: Counter = Counter()
    names: dict = {}
    for rfq in rfqs:
        for rfq_vendor in rfq.vendors or []:
            counts[rfq_vendor.vendor_id] += 1
            if rfq_vendor.vendor is not None:
                names[rfq_vendor.vendor_id] = rfq_vendor.vendor.name

    return [
        {"vendor_id": vendor_id, "name": names.get(vendor_id, ""), "count": count}
        for vendor_id, count in counts.most_common(limit)
    ]
