"""Vendor selection scoring.

Pure functions over already-fetched vendors: nothing here touches the
database. A vendor's selection score is

    0.4 * performance + 0.3 * location + 0.2 * capability + 0.1 * history

with every component on a 0-10 scale. The history component is a configured
constant until past-order analysis exists.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from flowmarine.config import settings
from flowmarine.modules.rfq.constants import (
    COUNTRY_MATCH_POINTS,
    MAX_COMPONENT_SCORE,
    PORT_CODE_PATTERN,
    PORT_MATCH_POINTS,
    WEIGHT_CAPABILITY,
    WEIGHT_HISTORY,
    WEIGHT_LOCATION,
    WEIGHT_PERFORMANCE,
)
from flowmarine.modules.rfq.schemas import VendorSelectionCriteria

_PORT_CODE_RE = re.compile(PORT_CODE_PATTERN)


@dataclass
class ScoredVendor:
    vendor: object
    performance_score: float
    location_score: float
    capability_score: float
    history_score: float
    selection_score: float


def extract_port_code(location: str | None) -> str | None:
    if not location:
        return None
    match = _PORT_CODE_RE.search(location)
    return match.group(1) if match else None


def build_default_criteria(delivery_location: str | None) -> VendorSelectionCriteria:
    """Derive criteria from a delivery location like ``"Singapore SGSIN, Singapore"``.

    The last comma-separated token is taken as the country.
    """
    country = None
    if delivery_location:
        country = delivery_location.split(",")[-1].strip() or None
    port_code = extract_port_code(delivery_location)

    return VendorSelectionCriteria(
        countries=[country] if country else [],
        port_codes=[port_code] if port_code else [],
        capabilities=settings.vendor_selection_default_capabilities_list,
        min_rating=settings.vendor_selection_default_min_rating,
        max_vendors=settings.vendor_selection_default_max_vendors,
    )


def calculate_location_score(vendor, criteria: VendorSelectionCriteria) -> float:
    score = 0.0
    areas = vendor.service_areas or []

    if criteria.countries and any(area.country in criteria.countries for area in areas):
        score += COUNTRY_MATCH_POINTS

    if criteria.port_codes and any(
        port in criteria.port_codes for area in areas for port in (area.ports or [])
    ):
        score += PORT_MATCH_POINTS

    return min(score, MAX_COMPONENT_SCORE)


def calculate_capability_score(vendor, criteria: VendorSelectionCriteria) -> float:
    if not criteria.capabilities:
        return MAX_COMPONENT_SCORE

    offered = {
        capability
        for port_capability in (vendor.port_capabilities or [])
        for capability in (port_capability.capabilities or [])
    }
    matched = [cap for cap in criteria.capabilities if cap in offered]
    return len(matched) / len(criteria.capabilities) * MAX_COMPONENT_SCORE


def score_vendor(
    vendor,
    criteria: VendorSelectionCriteria,
    history_score: float | None = None,
) -> ScoredVendor:
    if history_score is None:
        history_score = settings.vendor_selection_history_score

    performance = float(vendor.overall_score) if vendor.overall_score is not None else 0.0
    location = calculate_location_score(vendor, criteria)
    capability = calculate_capability_score(vendor, criteria)

    total = (
        performance * WEIGHT_PERFORMANCE
        + location * WEIGHT_LOCATION
        + capability * WEIGHT_CAPABILITY
        + history_score * WEIGHT_HISTORY
    )
    return ScoredVendor(
        vendor=vendor,
        performance_score=performance,
        location_score=location,
        capability_score=capability,
        history_score=history_score,
        selection_score=round(total, 4),
    )


def rank_vendors(
    vendors: list,
    criteria: VendorSelectionCriteria,
    history_score: float | None = None,
) -> list[ScoredVendor]:
    """Score every vendor and sort best first; ties keep their input order."""
    scored = [score_vendor(v, criteria, history_score) for v in vendors]
    return sorted(scored, key=lambda s: s.selection_score, reverse=True)
