"""
Tests for roster normalisation (live roster × season stats × injuries).
Run with: pytest tests/test_roster.py -v
"""

import pytest

from backend.core.records import (
    AvailabilityStatus,
    NormalizedRoster,
    RawRosterEntry,
    RosterUnavailable,
    SeasonStatLine,
)
from backend.services.injuries import InjuryReport
from backend.services.roster import DEFAULT_AVERAGES, match_season_lines, normalize_roster


def _line(pid, name, points, usage=0.2):
    return SeasonStatLine(player_id=pid, name=name, team_id="DEN", points=points, usage=usage)


class TestMatching:
    """Id first, then canonical name, never an ambiguous merge"""

    def test_match_by_id(self):
        roster = normalize_roster(
            [RawRosterEntry("1", "Nikola Jokic", "C")],
            [_line("1", "N. Jokic", 26.4)],
            team_id="DEN",
        )
        entry = roster.active[0]
        assert entry.baseline.points == 26.4
        assert entry.baseline.name == "Nikola Jokic"
        assert entry.baseline.position == "C"
        assert entry.uses_default_stats is False
        assert roster.unmatched == ()

    def test_name_fallback_handles_diacritics(self):
        roster = normalize_roster(
            [RawRosterEntry("live-7", "Nikola Jokić")],
            [_line("season-7", "Nikola Jokic", 26.4)],
        )
        entry = roster.active[0]
        assert entry.player_id == "live-7"
        assert entry.baseline.points == 26.4
        assert roster.unmatched == ()

    def test_ambiguous_name_is_unmatched(self):
        roster = normalize_roster(
            [RawRosterEntry("x", "Jaren Jackson")],
            [_line("s1", "Jaren Jackson Jr.", 22.0), _line("s2", "Jaren Jackson", 9.0)],
        )
        assert len(roster.unmatched) == 1
        assert roster.unmatched[0].reason.startswith("ambiguous")
        entry = roster.active[0]
        assert entry.uses_default_stats is True
        assert entry.baseline.points == DEFAULT_AVERAGES["points"]

    def test_claimed_line_is_not_reused(self):
        pairs, unmatched = match_season_lines(
            [RawRosterEntry("s1", "John Smith"), RawRosterEntry("x2", "John Smith")],
            [_line("s1", "John Smith", 12.0)],
        )
        assert pairs[0][1] is False
        assert pairs[1][1] is True
        assert [u.player_id for u in unmatched] == ["x2"]
        assert unmatched[0].reason == "no season statistics match"

    def test_unmatched_gets_suggestion(self):
        roster = normalize_roster(
            [RawRosterEntry("x", "Giannis Antetokounmpo")],
            [_line("s", "Giannis Antetokounmpoo", 30.0)],
        )
        diag = roster.unmatched[0]
        assert diag.suggestion == "giannis antetokounmpoo"
        # Suggestion never merges
        assert roster.active[0].uses_default_stats is True

    def test_no_suggestion_for_distant_names(self):
        roster = normalize_roster(
            [RawRosterEntry("x", "Completely Different")],
            [_line("s", "Giannis Antetokounmpo", 30.0)],
        )
        assert roster.unmatched[0].suggestion is None


class TestAvailabilityAndOrdering:
    """Out players split off; active list sorted by PPG"""

    def test_out_players_excluded_from_active(self):
        roster = normalize_roster(
            [RawRosterEntry("1", "A"), RawRosterEntry("2", "B")],
            [_line("1", "A", 30.0), _line("2", "B", 20.0)],
            injuries=[InjuryReport("1", AvailabilityStatus.OUT)],
        )
        assert [e.player_id for e in roster.active] == ["2"]
        assert [e.player_id for e in roster.inactive] == ["1"]
        assert roster.status_map()["1"] is AvailabilityStatus.OUT

    def test_non_out_statuses_annotated(self):
        roster = normalize_roster(
            [RawRosterEntry("1", "A")],
            [_line("1", "A", 30.0)],
            injuries=[InjuryReport("1", AvailabilityStatus.DAY_TO_DAY)],
        )
        assert roster.active[0].status is AvailabilityStatus.DAY_TO_DAY

    def test_sorted_by_points_descending(self):
        roster = normalize_roster(
            [RawRosterEntry("1", "A"), RawRosterEntry("2", "B"), RawRosterEntry("3", "C")],
            [_line("1", "A", 8.0), _line("2", "B", 25.0), _line("3", "C", 14.0)],
        )
        assert [e.player_id for e in roster.active] == ["2", "3", "1"]

    def test_entries_lists_active_first(self):
        roster = normalize_roster(
            [RawRosterEntry("1", "A"), RawRosterEntry("2", "B")],
            [_line("1", "A", 30.0), _line("2", "B", 20.0)],
            injuries=[InjuryReport("1", AvailabilityStatus.OUT)],
        )
        assert [e.player_id for e in roster.entries] == ["2", "1"]


class TestRosterUnavailable:
    """Missing data is a result, not an empty team"""

    @pytest.mark.parametrize("raw,stats", [([], []), (None, None), (None, [])])
    def test_nothing_available(self, raw, stats):
        result = normalize_roster(raw, stats, team_id="PHX")
        assert isinstance(result, RosterUnavailable)
        assert result.team_id == "PHX"

    def test_season_stats_stand_in_for_missing_roster(self):
        result = normalize_roster([], [_line("1", "A", 10.0), _line("2", "B", 20.0)], team_id="PHX")
        assert isinstance(result, NormalizedRoster)
        assert [e.player_id for e in result.active] == ["2", "1"]
        assert result.unmatched == ()

    def test_live_roster_without_stats_uses_defaults(self):
        result = normalize_roster([RawRosterEntry("1", "A")], [], team_id="PHX")
        assert isinstance(result, NormalizedRoster)
        assert result.active[0].uses_default_stats is True
        assert len(result.unmatched) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
