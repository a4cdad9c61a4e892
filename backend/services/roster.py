"""
Roster normalisation — who is playing tonight, and what they usually produce.

Merges the live roster (tonight's availability) with season-level
baselines:

    1. Match each live player to a season line by stable player id.
    2. Fall back to canonical-name matching (see ``backend.core.names``).
       A name shared by more than one season line, or a line already
       claimed by another live player, is never merged: the player is
       reported as unmatched instead.
    3. Unmatched players receive conservative bench-level averages and an
       :class:`UnmatchedPlayer` diagnostic, so data degradation stays
       observable without failing the whole matchup.
    4. Out players are split off; the active list is sorted by season
       points per game, descending.  Later "top-N" steps rely on that order.

When neither a live roster nor season statistics exist the result is a
:class:`RosterUnavailable` record; callers must abort the matchup rather
than analyse an empty team.
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple, Union

from rapidfuzz import fuzz, process

from backend.core.names import name_key
from backend.core.records import (
    AvailabilityStatus,
    NormalizedRoster,
    PlayerBaseline,
    RawRosterEntry,
    RosterEntry,
    RosterUnavailable,
    SeasonStatLine,
    UnmatchedPlayer,
)
from backend.services.injuries import InjuryReport, build_availability

logger = logging.getLogger(__name__)

# Bench-level averages for players with no season line.
DEFAULT_AVERAGES: Dict[str, float] = {
    "points": 4.0,
    "assists": 1.0,
    "rebounds": 2.0,
    "threes": 0.4,
    "usage": 0.12,
}

# Minimum rapidfuzz score for a closest-name *suggestion*.  Suggestions are
# diagnostics only and never drive a merge.
SUGGESTION_MIN_SCORE = 85


# ---------------------------------------------------------------------------
# Matching helpers
# ---------------------------------------------------------------------------

def _baseline_from_line(
    line: SeasonStatLine, live: Optional[RawRosterEntry], team_id: str
) -> PlayerBaseline:
    return PlayerBaseline(
        player_id=live.player_id if live else line.player_id,
        name=live.name if live and live.name else line.name,
        team_id=(live.team_id if live and live.team_id else line.team_id) or team_id,
        position=(live.position if live and live.position else line.position),
        points=float(line.points),
        assists=float(line.assists),
        rebounds=float(line.rebounds),
        threes=float(line.threes),
        usage=float(line.usage),
    )


def _default_baseline(live: RawRosterEntry, team_id: str) -> PlayerBaseline:
    return PlayerBaseline(
        player_id=live.player_id,
        name=live.name,
        team_id=live.team_id or team_id,
        position=live.position,
        **DEFAULT_AVERAGES,
    )


def _closest_name(key: str, candidates: Sequence[str]) -> Optional[str]:
    if not key or not candidates:
        return None
    best = process.extractOne(
        key, candidates, scorer=fuzz.token_sort_ratio, score_cutoff=SUGGESTION_MIN_SCORE
    )
    return best[0] if best else None


def match_season_lines(
    raw_roster: Sequence[RawRosterEntry],
    season_stats: Sequence[SeasonStatLine],
    team_id: str = "",
) -> Tuple[List[Tuple[PlayerBaseline, bool]], List[UnmatchedPlayer]]:
    """
    Pair every live player with a baseline.

    Returns ``(pairs, unmatched)`` where each pair is
    ``(baseline, uses_default_stats)`` in live-roster order.
    """
    by_id: Dict[str, SeasonStatLine] = {}
    for line in season_stats:
        by_id.setdefault(line.player_id, line)

    by_key: Dict[str, List[SeasonStatLine]] = {}
    for line in season_stats:
        by_key.setdefault(name_key(line.name), []).append(line)

    live_ids = {p.player_id for p in raw_roster}
    claimed = {p.player_id for p in raw_roster if p.player_id in by_id}

    pairs: List[Tuple[PlayerBaseline, bool]] = []
    unmatched: List[UnmatchedPlayer] = []

    for live in raw_roster:
        line = by_id.get(live.player_id)
        if line is not None:
            pairs.append((_baseline_from_line(line, live, team_id), False))
            continue

        key = name_key(live.name)
        candidates = [
            c for c in by_key.get(key, [])
            if c.player_id not in claimed
            and (c.player_id == live.player_id or c.player_id not in live_ids)
        ]
        if key and len(candidates) == 1:
            claimed.add(candidates[0].player_id)
            pairs.append((_baseline_from_line(candidates[0], live, team_id), False))
            logger.debug(
                "Matched %s to season line %s by name", live.player_id, candidates[0].player_id
            )
            continue

        if len(candidates) > 1:
            reason = f"ambiguous name match ({len(candidates)} season lines share '{key}')"
            suggestion = None
        else:
            reason = "no season statistics match"
            suggestion = _closest_name(key, [k for k in by_key if k])

        logger.warning(
            "Unmatched player %s (%s): %s — using default averages",
            live.player_id, live.name, reason,
        )
        unmatched.append(
            UnmatchedPlayer(
                player_id=live.player_id,
                name=live.name,
                reason=reason,
                suggestion=suggestion,
            )
        )
        pairs.append((_default_baseline(live, team_id), True))

    return pairs, unmatched


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def normalize_roster(
    raw_roster: Optional[Sequence[RawRosterEntry]],
    season_stats: Optional[Sequence[SeasonStatLine]],
    injuries: Iterable[InjuryReport] = (),
    team_id: str = "",
) -> Union[NormalizedRoster, RosterUnavailable]:
    """
    Merge live roster, season baselines and injury status for one team.

    When the live roster is missing but season statistics exist, the
    season list stands in as the roster.
    """
    raw_roster = list(raw_roster or [])
    season_stats = list(season_stats or [])

    if not raw_roster and not season_stats:
        logger.warning("Roster unavailable for team %r", team_id or "?")
        return RosterUnavailable(
            team_id=team_id,
            reason="neither a live roster nor season statistics are available",
        )

    if raw_roster:
        pairs, unmatched = match_season_lines(raw_roster, season_stats, team_id)
    else:
        logger.info("No live roster for %r — using season statistics as roster", team_id)
        pairs = [(_baseline_from_line(line, None, team_id), False) for line in season_stats]
        unmatched = []

    availability = build_availability(injuries)

    active: List[RosterEntry] = []
    inactive: List[RosterEntry] = []
    for baseline, uses_defaults in pairs:
        status = availability.get(baseline.player_id, AvailabilityStatus.ACTIVE)
        entry = RosterEntry(baseline=baseline, status=status, uses_default_stats=uses_defaults)
        (inactive if status.is_out else active).append(entry)

    # Stable sort: equal PPG keeps provider order.
    active.sort(key=lambda e: e.baseline.points, reverse=True)
    inactive.sort(key=lambda e: e.baseline.points, reverse=True)

    logger.debug(
        "Normalised %s: %d active, %d out, %d unmatched",
        team_id or "?", len(active), len(inactive), len(unmatched),
    )
    return NormalizedRoster(
        team_id=team_id,
        active=tuple(active),
        inactive=tuple(inactive),
        unmatched=tuple(unmatched),
    )
