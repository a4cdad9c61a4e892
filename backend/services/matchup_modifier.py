"""
Matchup modifier — how a player's play-type diet meets tonight's defense.

For every play type a player runs on at least 15% of possessions:

    opponent rank ≤ 5   (elite)  → total −= 0.10 × frequency
    opponent rank ≥ 25  (weak)   → total += 0.10 × frequency
    otherwise                    → no contribution

    modifier = 1 + total

This is a linear, frequency-weighted blend, not a probabilistic model.
It is intentionally simple and reproducible bit-for-bit: contributions are
accumulated in the order the play types appear in the profile.

Defense profiles can be held in a :class:`DefenseProfileCache`.  The cache
is an explicit object owned by the caller (the HTTP app keeps one on
``app.state``); nothing in the pipeline reaches for a global instance.
"""

import logging
from typing import Dict, Iterable, List, NamedTuple, Optional, Tuple

from backend.core.engine_config import EngineConfig
from backend.core.records import (
    DEFENSE_KEYS,
    PLAY_TYPE_TO_DEFENSE_KEY,
    DefenseProfile,
    SynergyProfile,
)

logger = logging.getLogger(__name__)


class MatchupModifier(NamedTuple):
    """Multiplicative efficiency modifier plus the reasons behind it."""

    modifier: float
    reasons: Tuple[str, ...]


NEUTRAL = MatchupModifier(1.0, ())


def defense_key_for(play_type: str) -> Optional[str]:
    """Map a provider play-type name (or a defense key) to a defense key."""
    if play_type in PLAY_TYPE_TO_DEFENSE_KEY:
        return PLAY_TYPE_TO_DEFENSE_KEY[play_type]
    lowered = play_type.lower()
    return lowered if lowered in DEFENSE_KEYS else None


def matchup_modifier(
    synergy: Optional[SynergyProfile],
    defense: Optional[DefenseProfile],
    config: Optional[EngineConfig] = None,
) -> MatchupModifier:
    """
    Signed efficiency adjustment for one player against one defense.

    Missing synergy or defense data yields the neutral modifier (1.0, no
    reasons).  Play types the defense feed does not rank are skipped.
    """
    cfg = config or EngineConfig.nba()
    if synergy is None or defense is None or not synergy.play_types:
        return NEUTRAL

    opponent = defense.alias or defense.team_id
    total = 0.0
    reasons: List[str] = []

    for play in synergy.play_types:
        key = defense_key_for(play.play_type)
        if key is None or play.frequency < cfg.min_play_type_frequency:
            continue

        rank = defense.rank_for(key)
        if rank <= cfg.elite_defense_rank:
            total -= cfg.synergy_penalty * play.frequency
            reasons.append(
                f"{opponent} has elite {play.play_type} defense (Rank {rank})"
            )
        elif rank >= cfg.weak_defense_rank:
            total += cfg.synergy_boost * play.frequency
            reasons.append(
                f"Exploiting {opponent}'s weak {play.play_type} defense (Rank {rank})"
            )

    return MatchupModifier(1.0 + total, tuple(reasons))


# ---------------------------------------------------------------------------
# Defense profile cache
# ---------------------------------------------------------------------------

class DefenseProfileCache:
    """
    In-memory store of team defense profiles, keyed by team id.

    Owned by whoever fetches the data; pass profiles out of it into
    ``analyze`` explicitly.
    """

    def __init__(self, profiles: Iterable[DefenseProfile] = ()):
        self._profiles: Dict[str, DefenseProfile] = {}
        for profile in profiles:
            self.set(profile)

    def get(self, team_id: str) -> Optional[DefenseProfile]:
        """Return the profile for a team, or None if not available."""
        return self._profiles.get(team_id)

    def set(self, profile: DefenseProfile) -> None:
        """Set or replace a team profile."""
        self._profiles[profile.team_id] = profile
        logger.debug("Cached defense profile for %s (overall %d)", profile.team_id, profile.overall)

    def invalidate(self, team_id: Optional[str] = None) -> None:
        """Drop one team, or every team when ``team_id`` is None."""
        if team_id is None:
            self._profiles.clear()
        else:
            self._profiles.pop(team_id, None)

    def teams(self) -> List[str]:
        """Return the team ids currently in the cache."""
        return list(self._profiles.keys())

    def has_profiles(self) -> bool:
        return len(self._profiles) > 0

    def __contains__(self, team_id: object) -> bool:
        return team_id in self._profiles

    def __len__(self) -> int:
        return len(self._profiles)
