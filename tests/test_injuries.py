"""
Tests for injury status parsing and availability maps.
Run with: pytest tests/test_injuries.py -v
"""

import pytest

from backend.core.records import AvailabilityStatus
from backend.services.injuries import InjuryReport, build_availability, parse_status


class TestParseStatus:
    """Provider vocabulary folds into five states"""

    @pytest.mark.parametrize("raw", ["Out", "OUT", "Out For Season", "Inactive", "Suspended"])
    def test_out_variants(self, raw):
        assert parse_status(raw) is AvailabilityStatus.OUT

    @pytest.mark.parametrize("raw", ["Day-To-Day", "day to day", "DTD", "GTD"])
    def test_day_to_day_variants(self, raw):
        assert parse_status(raw) is AvailabilityStatus.DAY_TO_DAY

    def test_doubtful_folds_into_questionable(self):
        assert parse_status("Doubtful") is AvailabilityStatus.QUESTIONABLE
        assert parse_status("Questionable") is AvailabilityStatus.QUESTIONABLE

    def test_probable(self):
        assert parse_status("Probable") is AvailabilityStatus.PROBABLE

    @pytest.mark.parametrize("raw", [None, "", "  ", "Active", "available"])
    def test_no_report_is_active(self, raw):
        assert parse_status(raw) is AvailabilityStatus.ACTIVE

    def test_enum_passes_through(self):
        assert parse_status(AvailabilityStatus.OUT) is AvailabilityStatus.OUT

    def test_unknown_status_is_questionable(self):
        assert parse_status("Personal reasons") is AvailabilityStatus.QUESTIONABLE


class TestBuildAvailability:
    """Player id → status map"""

    def test_maps_each_player(self):
        reports = [
            InjuryReport("1", AvailabilityStatus.OUT),
            InjuryReport("2", AvailabilityStatus.DAY_TO_DAY),
        ]
        availability = build_availability(reports)
        assert availability == {
            "1": AvailabilityStatus.OUT,
            "2": AvailabilityStatus.DAY_TO_DAY,
        }

    def test_first_report_wins(self):
        reports = [
            InjuryReport("1", AvailabilityStatus.QUESTIONABLE),
            InjuryReport("1", AvailabilityStatus.OUT),
        ]
        assert build_availability(reports)["1"] is AvailabilityStatus.QUESTIONABLE

    def test_empty(self):
        assert build_availability([]) == {}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
