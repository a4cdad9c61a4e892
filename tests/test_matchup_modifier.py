"""
Tests for the play-type matchup modifier and the defense profile cache.
Run with: pytest tests/test_matchup_modifier.py -v
"""

import pytest

from backend.core.records import DefenseProfile, PlayTypeStat, SynergyProfile
from backend.services.matchup_modifier import (
    NEUTRAL,
    DefenseProfileCache,
    defense_key_for,
    matchup_modifier,
)


def _synergy(*play_types):
    return SynergyProfile("p1", tuple(PlayTypeStat(name, freq) for name, freq in play_types))


def _defense(**ranks):
    return DefenseProfile(team_id="1610612738", alias="BOS", **ranks)


class TestMatchupModifier:
    """Frequency-weighted blend against elite and weak defenses"""

    def test_weak_spotup_defense(self):
        result = matchup_modifier(_synergy(("Spotup", 0.30)), _defense(spotup=28))
        assert result.modifier == pytest.approx(1.03)
        assert result.reasons == ("Exploiting BOS's weak Spotup defense (Rank 28)",)

    def test_elite_only_lowers_modifier(self):
        result = matchup_modifier(
            _synergy(("Isolation", 0.25), ("PRBallHandler", 0.20)),
            _defense(iso=3, pnr=1),
        )
        assert result.modifier < 1.0
        assert result.modifier == pytest.approx(1.0 - 0.025 - 0.020)
        assert result.reasons[0] == "BOS has elite Isolation defense (Rank 3)"

    def test_weak_only_raises_modifier(self):
        result = matchup_modifier(
            _synergy(("Transition", 0.20), ("Postup", 0.16)),
            _defense(transition=30, postup=25),
        )
        assert result.modifier > 1.0

    def test_mixed_direction_follows_larger_contribution(self):
        weak_heavy = matchup_modifier(
            _synergy(("Isolation", 0.20), ("Spotup", 0.40)), _defense(iso=2, spotup=27)
        )
        assert weak_heavy.modifier > 1.0
        elite_heavy = matchup_modifier(
            _synergy(("Isolation", 0.40), ("Spotup", 0.20)), _defense(iso=2, spotup=27)
        )
        assert elite_heavy.modifier < 1.0
        # Reasons follow profile order
        assert elite_heavy.reasons[0].startswith("BOS has elite Isolation")
        assert elite_heavy.reasons[1].startswith("Exploiting BOS's weak Spotup")

    def test_rank_boundaries(self):
        assert matchup_modifier(_synergy(("Spotup", 0.3)), _defense(spotup=5)).modifier < 1.0
        assert matchup_modifier(_synergy(("Spotup", 0.3)), _defense(spotup=25)).modifier > 1.0
        assert matchup_modifier(_synergy(("Spotup", 0.3)), _defense(spotup=6)) == (1.0, ())
        assert matchup_modifier(_synergy(("Spotup", 0.3)), _defense(spotup=24)) == (1.0, ())

    def test_frequency_threshold(self):
        assert matchup_modifier(_synergy(("Spotup", 0.14)), _defense(spotup=30)) == (1.0, ())
        at_threshold = matchup_modifier(_synergy(("Spotup", 0.15)), _defense(spotup=30))
        assert at_threshold.modifier == pytest.approx(1.015)

    def test_unknown_play_type_skipped(self):
        result = matchup_modifier(_synergy(("Cut", 0.40)), _defense(spotup=30))
        assert result == NEUTRAL

    def test_missing_data_is_neutral(self):
        assert matchup_modifier(None, _defense(spotup=30)) == NEUTRAL
        assert matchup_modifier(_synergy(("Spotup", 0.3)), None) == NEUTRAL
        assert matchup_modifier(SynergyProfile("p1"), _defense()) == NEUTRAL

    def test_deterministic(self):
        synergy = _synergy(("Isolation", 0.22), ("Spotup", 0.31), ("Transition", 0.17))
        defense = _defense(iso=4, spotup=26, transition=29)
        assert matchup_modifier(synergy, defense) == matchup_modifier(synergy, defense)


class TestDefenseProfile:
    """Profile construction from provider ranks"""

    def test_defense_key_for(self):
        assert defense_key_for("PRBallHandler") == "pnr"
        assert defense_key_for("spotup") == "spotup"
        assert defense_key_for("Cut") is None

    def test_from_ranks_defaults_missing_types(self):
        profile = DefenseProfile.from_ranks("BOS", {"Spotup": 28, "iso": 3})
        assert profile.spotup == 28
        assert profile.iso == 3
        assert profile.pnr == 15
        assert profile.alias == "BOS"
        # (28 + 3 + 15 × 3) / 5 = 15.2
        assert profile.overall == 15

    def test_overall_rounds_half_up(self):
        profile = DefenseProfile.from_ranks("X", {"iso": 30, "pnr": 30, "spotup": 3, "transition": 7, "postup": 8})
        # 78 / 5 = 15.6
        assert profile.overall == 16

    def test_overall_derived_for_direct_construction(self):
        profile = DefenseProfile("X", iso=1, pnr=1, spotup=1, transition=1, postup=1)
        assert profile.overall == 1
        # (28 + 3 + 15 × 3) / 5 = 15.2
        assert _defense(spotup=28, iso=3).overall == 15
        assert DefenseProfile("Y").overall == 15

    def test_unknown_key_raises(self):
        with pytest.raises(KeyError):
            _defense().rank_for("cut")


class TestDefenseProfileCache:
    """Explicit, caller-owned cache"""

    def test_set_and_get(self):
        cache = DefenseProfileCache()
        assert cache.get("BOS") is None
        assert not cache.has_profiles()

        cache.set(DefenseProfile("BOS", spotup=28))
        assert cache.get("BOS").spotup == 28
        assert "BOS" in cache
        assert len(cache) == 1
        assert cache.teams() == ["BOS"]

    def test_set_replaces(self):
        cache = DefenseProfileCache([DefenseProfile("BOS", spotup=28)])
        cache.set(DefenseProfile("BOS", spotup=2))
        assert cache.get("BOS").spotup == 2
        assert len(cache) == 1

    def test_invalidate(self):
        cache = DefenseProfileCache([DefenseProfile("BOS"), DefenseProfile("LAL")])
        cache.invalidate("BOS")
        assert cache.teams() == ["LAL"]
        cache.invalidate()
        assert len(cache) == 0

    def test_instances_are_independent(self):
        first = DefenseProfileCache([DefenseProfile("BOS")])
        second = DefenseProfileCache()
        assert "BOS" in first
        assert "BOS" not in second


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
