"""
Tests for player-name canonicalisation.
Run with: pytest tests/test_names.py -v
"""

import pytest

from backend.core.names import name_key, strip_diacritics


class TestNameKey:
    """Canonical keys used for name fallback matching"""

    def test_diacritics_are_stripped(self):
        assert strip_diacritics("Luka Dončić") == "Luka Doncic"
        assert name_key("Nikola Jokić") == name_key("Nikola Jokic")

    def test_case_and_periods(self):
        assert name_key("P.J. Washington") == "pj washington"
        assert name_key("PJ WASHINGTON") == "pj washington"

    def test_apostrophes_are_dropped(self):
        assert name_key("De'Aaron Fox") == "deaaron fox"
        assert name_key("D’Angelo Russell") == "dangelo russell"

    def test_hyphen_becomes_word_break(self):
        assert name_key("Shai Gilgeous-Alexander") == "shai gilgeous alexander"

    def test_generational_suffixes_removed(self):
        assert name_key("Jaren Jackson Jr.") == "jaren jackson"
        assert name_key("Gary Trent Jr") == "gary trent"
        assert name_key("Marvin Bagley III") == "marvin bagley"

    def test_single_token_is_kept(self):
        # A lone suffix-like token is still a name
        assert name_key("V") == "v"

    def test_empty_name(self):
        assert name_key("") == ""

    def test_extra_whitespace(self):
        assert name_key("  LeBron   James ") == "lebron james"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
