"""
Usage redistribution — who absorbs the shots when a core player sits.

The usage core is the top ``ceil(n × 0.2)`` players by usage share (at
least one).  When a core player is unavailable, their usage is handed to
every remaining active player *in proportion to that player's own share*:

    multiplier_i = (u_i + missing × u_i / active_total) / u_i

so a 30%-usage guard absorbs three times what a 10%-usage wing does.
Losing a non-core player moves nothing: rotation minutes get backfilled
without a measurable volume shift for the regulars.

Conservation: Σ_active u_i × multiplier_i = active_total + missing, i.e.
the core's missing usage is fully reallocated.

Every path is zero-safe: an empty roster returns an empty map, and zero
active usage (or a zero-usage player) leaves multipliers at 1.0.
"""

import logging
import math
from typing import Dict, List, Mapping, Optional, Sequence, Set

from backend.core.engine_config import EngineConfig
from backend.core.records import AvailabilityStatus, RosterEntry

logger = logging.getLogger(__name__)


def is_unavailable(status: AvailabilityStatus, config: Optional[EngineConfig] = None) -> bool:
    """True when ``status`` removes a player from the usage pool."""
    cfg = config or EngineConfig.nba()
    if status is AvailabilityStatus.OUT:
        return True
    return status is AvailabilityStatus.DAY_TO_DAY and cfg.day_to_day_unavailable


def _sorted_by_usage(roster: Sequence[RosterEntry]) -> List[RosterEntry]:
    # Stable: equal usage keeps roster (PPG) order.
    return sorted(roster, key=lambda e: e.baseline.usage, reverse=True)


def usage_core_size(roster_size: int, config: Optional[EngineConfig] = None) -> int:
    """``ceil(n × fraction)``, at least ``min_core_size``; 0 for an empty roster."""
    cfg = config or EngineConfig.nba()
    if roster_size <= 0:
        return 0
    return max(cfg.min_core_size, math.ceil(roster_size * cfg.usage_core_fraction))


def usage_core_ids(
    roster: Sequence[RosterEntry], config: Optional[EngineConfig] = None
) -> Set[str]:
    """Player ids in the usage core."""
    size = usage_core_size(len(roster), config)
    return {e.player_id for e in _sorted_by_usage(roster)[:size]}


def redistribute(
    roster: Sequence[RosterEntry],
    availability: Optional[Mapping[str, AvailabilityStatus]] = None,
    config: Optional[EngineConfig] = None,
) -> Dict[str, float]:
    """
    Volume multiplier per player id.

    Args:
        roster: Every player on the team, including Out players.
        availability: Optional status override by player id; defaults to
            each entry's own status.
        config: Engine constants.

    Returns:
        ``{player_id: multiplier}`` — 0.0 for unavailable players, 1.0 when
        nothing is redistributed, > 1.0 for players absorbing core usage.
    """
    cfg = config or EngineConfig.nba()
    if not roster:
        return {}

    def _status(entry: RosterEntry) -> AvailabilityStatus:
        if availability is not None and entry.player_id in availability:
            return availability[entry.player_id]
        return entry.status

    core = usage_core_ids(roster, cfg)
    multipliers: Dict[str, float] = {e.player_id: 1.0 for e in roster}

    active = []
    missing_usage = 0.0
    active_usage = 0.0
    for entry in roster:
        if is_unavailable(_status(entry), cfg):
            if entry.player_id in core:
                missing_usage += entry.baseline.usage
            multipliers[entry.player_id] = 0.0
        else:
            active.append(entry)
            active_usage += entry.baseline.usage

    if missing_usage > 0 and active_usage > 0:
        for entry in active:
            usage = entry.baseline.usage
            if usage <= 0:
                continue
            extra = missing_usage * (usage / active_usage)
            multipliers[entry.player_id] = (usage + extra) / usage
        logger.debug(
            "Redistributed %.3f core usage across %d active players",
            missing_usage, len(active),
        )

    return multipliers


def core_player_out(
    roster: Sequence[RosterEntry],
    player_id: Optional[str] = None,
    availability: Optional[Mapping[str, AvailabilityStatus]] = None,
    config: Optional[EngineConfig] = None,
) -> bool:
    """
    True when one of the top-N usage players (other than ``player_id``) is Out.

    Only ``Out`` counts here; a DayToDay star still plays.
    """
    cfg = config or EngineConfig.nba()
    for entry in _sorted_by_usage(roster)[: cfg.core_loss_top_n]:
        if entry.player_id == player_id:
            continue
        status = entry.status
        if availability is not None and entry.player_id in availability:
            status = availability[entry.player_id]
        if status is AvailabilityStatus.OUT:
            return True
    return False
