"""Tests for vendor scoring and default-criteria derivation."""

from __future__ import annotations

from decimal import Decimal
from types import SimpleNamespace

import pytest

from flowmarine.modules.rfq.schemas import VendorSelectionCriteria
from flowmarine.modules.rfq.vendor_selection import (
    build_default_criteria,
    calculate_capability_score,
    calculate_location_score,
    extract_port_code,
    rank_vendors,
    score_vendor,
)


def _vendor(score=None, country="Singapore", ports=("SGSIN",), capabilities=("delivery",), name="v"):
    return SimpleNamespace(
        name=name,
        overall_score=Decimal(str(score)) if score is not None else None,
        service_areas=[SimpleNamespace(country=country, ports=list(ports))],
        port_capabilities=[SimpleNamespace(port_code="SGSIN", capabilities=list(capabilities))],
    )


SINGAPORE = VendorSelectionCriteria(
    countries=["Singapore"],
    port_codes=["SGSIN"],
    capabilities=["delivery"],
)


class TestExtractPortCode:
    def test_finds_locode(self):
        assert extract_port_code("Singapore SGSIN, Singapore") == "SGSIN"

    def test_none_when_absent(self):
        assert extract_port_code("Port of Rotterdam, Netherlands") is None

    def test_none_for_empty(self):
        assert extract_port_code(None) is None
        assert extract_port_code("") is None


class TestBuildDefaultCriteria:
    def test_country_is_last_comma_token(self):
        criteria = build_default_criteria("Berth 4, Rotterdam NLRTM, Netherlands")
        assert criteria.countries == ["Netherlands"]
        assert criteria.port_codes == ["NLRTM"]

    def test_fixed_defaults(self):
        criteria = build_default_criteria("Singapore SGSIN, Singapore")
        assert criteria.capabilities == ["delivery"]
        assert criteria.min_rating == 6.0
        assert criteria.max_vendors == 5

    def test_missing_location_gives_empty_filters(self):
        criteria = build_default_criteria(None)
        assert criteria.countries == []
        assert criteria.port_codes == []
        assert criteria.capabilities == ["delivery"]


class TestComponentScores:
    def test_location_full_match(self):
        assert calculate_location_score(_vendor(), SINGAPORE) == 10.0

    def test_location_country_only(self):
        vendor = _vendor(ports=("SGJUR",))
        assert calculate_location_score(vendor, SINGAPORE) == 5.0

    def test_location_port_only(self):
        vendor = _vendor(country="Malaysia")
        assert calculate_location_score(vendor, SINGAPORE) == 5.0

    def test_location_without_criteria(self):
        assert calculate_location_score(_vendor(), VendorSelectionCriteria()) == 0.0

    def test_capability_defaults_to_full_when_none_requested(self):
        assert calculate_capability_score(_vendor(capabilities=()), VendorSelectionCriteria()) == 10.0

    def test_capability_partial(self):
        criteria = VendorSelectionCriteria(capabilities=["delivery", "bunkering"])
        assert calculate_capability_score(_vendor(), criteria) == 5.0

    def test_capability_none_matched(self):
        criteria = VendorSelectionCriteria(capabilities=["bunkering"])
        assert calculate_capability_score(_vendor(), criteria) == 0.0


class TestScoreVendor:
    def test_weighted_total(self):
        scored = score_vendor(_vendor(score=8.5), SINGAPORE)
        # 0.4*8.5 + 0.3*10 + 0.2*10 + 0.1*5
        assert scored.selection_score == pytest.approx(8.9)
        assert scored.history_score == 5.0

    def test_missing_rating_counts_as_zero(self):
        scored = score_vendor(_vendor(score=None), SINGAPORE)
        assert scored.performance_score == 0.0
        assert scored.selection_score == pytest.approx(5.5)

    def test_history_score_override(self):
        scored = score_vendor(_vendor(score=8.0), SINGAPORE, history_score=10.0)
        assert scored.selection_score == pytest.approx(3.2 + 3.0 + 2.0 + 1.0)


class TestRankVendors:
    def test_descending_by_score(self):
        low, high = _vendor(score=7.0, name="low"), _vendor(score=8.5, name="high")
        ranked = rank_vendors([low, high], SINGAPORE)
        assert [s.vendor.name for s in ranked] == ["high", "low"]

    def test_ties_keep_input_order(self):
        first, second = _vendor(score=7.0, name="first"), _vendor(score=7.0, name="second")
        ranked = rank_vendors([first, second], SINGAPORE)
        assert [s.vendor.name for s in ranked] == ["first", "second"]

    @pytest.mark.parametrize("raised_to", [6.5, 7.5, 9.0, 10.0])
    def test_raising_rating_never_lowers_rank(self, raised_to):
        others = [_vendor(score=s, name=f"o{s}") for s in (6.0, 7.0, 8.0)]
        candidate = _vendor(score=6.5, name="candidate")

        before = [s.vendor.name for s in rank_vendors(others + [candidate], SINGAPORE)]
        candidate.overall_score = Decimal(str(raised_to))
        after = [s.vendor.name for s in rank_vendors(others + [candidate], SINGAPORE)]

        assert after.index("candidate") <= before.index("candidate")
