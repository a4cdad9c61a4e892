"""
Projection engine — one player, one statistic, one number you can audit.

Composes the adjustments in a fixed order.  Each step multiplies the
running projection and appends its reason, so the reason list reads as
the calculation did:

    1. Gate        Out → 0, confidence 100, edge 0; nothing else runs
    2. Base        season average for the statistic
    3. Volume      × redistribution multiplier (reason when > 1.0)
    4. Core loss   × (1 − 0.15) when a top-3 usage teammate is Out and
                   this player carries no injury report
    5. Matchup     × play-type modifier (reasons verbatim)
    6. Fatigue     × (1 − 0.03) on the second night of a back-to-back
    7. Confidence  85, −10 B2B, −15 volume > 1.2, −20 DayToDay, clamp [30, 95]
    8. Edge        (projection − line) / line × 100 against the market

Steps 3 and 4 both react to the same event (a core player sitting) with
independently tuned constants, and they compound.  This may double count
the absence; revisit both constants together if either changes.

Rounding happens once, when the :class:`Projection` record is built.
"""

import logging
from dataclasses import replace
from typing import Dict, List, Mapping, Optional, Sequence, Tuple

import numpy as np

from backend.core.engine_config import EngineConfig
from backend.core.odds_math import EdgeResult, calculate_edge, round_half_up
from backend.core.records import (
    TRACKED_STATS,
    AvailabilityStatus,
    DefenseProfile,
    MarketLine,
    PlayerBaseline,
    Projection,
    RosterEntry,
    StatKey,
    SynergyProfile,
)
from backend.services.matchup_modifier import matchup_modifier
from backend.services.redistribution import core_player_out

logger = logging.getLogger(__name__)

INACTIVE_REASON = "Player is OUT (inactive)"
DEFAULT_STATS_REASON = "No season statistics match; conservative default averages used"

STAT_LABELS: Dict[StatKey, str] = {
    StatKey.POINTS: "PPG",
    StatKey.ASSISTS: "APG",
    StatKey.REBOUNDS: "RPG",
    StatKey.THREES: "3PM",
}

MarketKey = Tuple[str, StatKey]


# ---------------------------------------------------------------------------
# Confidence
# ---------------------------------------------------------------------------

def confidence_score(
    availability: AvailabilityStatus,
    volume_multiplier: float,
    is_back_to_back: bool,
    config: Optional[EngineConfig] = None,
) -> int:
    """Bounded integer confidence for a playing player."""
    cfg = config or EngineConfig.nba()
    confidence = cfg.base_confidence
    if is_back_to_back:
        confidence -= cfg.b2b_confidence_penalty
    if volume_multiplier > cfg.high_volume_multiplier:
        confidence -= cfg.high_volume_confidence_penalty
    if availability is AvailabilityStatus.DAY_TO_DAY:
        confidence -= cfg.day_to_day_confidence_penalty
    return int(np.clip(confidence, cfg.min_confidence, cfg.max_confidence))


def confidence_label(score: float) -> str:
    """HIGH / MEDIUM / LOW bucket for display."""
    if score >= 75:
        return "HIGH"
    if score >= 50:
        return "MEDIUM"
    return "LOW"


# ---------------------------------------------------------------------------
# Projection
# ---------------------------------------------------------------------------

def _priced_edge(projected: float, line: float, cfg: EngineConfig) -> EdgeResult:
    # The published edge is rounded; the value flag must agree with it.
    raw, _ = calculate_edge(projected, line, cfg.value_edge_pct)
    edge = round_half_up(raw, 1)
    return EdgeResult(edge, abs(edge) >= cfg.value_edge_pct)


def _usable_line(market_line: Optional[MarketLine]) -> Optional[MarketLine]:
    if market_line is None:
        return None
    if market_line.line is None or market_line.line <= 0:
        logger.debug(
            "Ignoring non-positive line %r for %s %s",
            market_line.line, market_line.player_id, market_line.stat,
        )
        return None
    return market_line


def project(
    player: PlayerBaseline,
    availability: AvailabilityStatus,
    volume_multiplier: float,
    opponent_defense: Optional[DefenseProfile],
    is_back_to_back: bool,
    market_line: Optional[MarketLine] = None,
    stat: StatKey = StatKey.POINTS,
    synergy: Optional[SynergyProfile] = None,
    core_loss: bool = False,
    uses_default_stats: bool = False,
    config: Optional[EngineConfig] = None,
) -> Projection:
    """
    Project one statistic for one player.

    Args:
        player: Season baseline.
        availability: Tonight's status.
        volume_multiplier: From :func:`~backend.services.redistribution.redistribute`.
            A zero multiplier on a playing player (DayToDay under the
            usage policy) projects at normal volume.
        opponent_defense: Opponent play-type ranks, if known.
        is_back_to_back: Second game on consecutive days.
        market_line: Bookmaker line for this player and statistic.
        stat: Statistic to project.
        synergy: Player play-type profile, if known.
        core_loss: A top-usage teammate is Out (see
            :func:`~backend.services.redistribution.core_player_out`).
        uses_default_stats: Baseline came from default averages.
        config: Engine constants.
    """
    cfg = config or EngineConfig.nba()
    line = _usable_line(market_line)

    # 1. Gate
    if availability is AvailabilityStatus.OUT:
        return Projection(
            player_id=player.player_id,
            player_name=player.name,
            stat=stat,
            projection=0.0,
            confidence=100,
            reasons=(INACTIVE_REASON,),
            line=round_half_up(line.line, 1) if line else None,
            edge=0.0,
            is_value_bet=False,
            over_price=line.over_price if line else None,
            under_price=line.under_price if line else None,
        )

    reasons: List[str] = []

    # 2. Base
    base = player.average(stat)
    projected = base
    reasons.append(f"Base: {base:.1f} {STAT_LABELS[stat]} average")

    # 3. Volume redistribution
    volume = volume_multiplier if volume_multiplier and volume_multiplier > 0 else 1.0
    projected *= volume
    if volume > 1.0:
        reasons.append(f"+{(volume - 1.0) * 100:.0f}% volume (teammate absence)")

    # 4. Team-wide core-loss penalty
    if core_loss and availability is AvailabilityStatus.ACTIVE:
        projected *= 1.0 - cfg.core_loss_penalty
        reasons.append(
            f"-{cfg.core_loss_penalty * 100:.0f}% efficiency (spacing affected)"
        )

    # 5. Matchup modifier
    matchup = matchup_modifier(synergy, opponent_defense, cfg)
    projected *= matchup.modifier
    reasons.extend(matchup.reasons)

    # 6. Fatigue
    if is_back_to_back:
        projected *= 1.0 - cfg.b2b_penalty
        reasons.append("Back-to-back game fatigue")

    if uses_default_stats:
        reasons.append(DEFAULT_STATS_REASON)

    # 7. Confidence
    confidence = confidence_score(availability, volume, is_back_to_back, cfg)

    # 8. Edge
    if line is not None:
        edge, is_value = _priced_edge(projected, line.line, cfg)
    else:
        edge, is_value = 0.0, False

    return Projection(
        player_id=player.player_id,
        player_name=player.name,
        stat=stat,
        projection=round_half_up(projected, 1),
        confidence=confidence,
        reasons=tuple(reasons),
        line=round_half_up(line.line, 1) if line else None,
        edge=edge,
        is_value_bet=is_value,
        over_price=line.over_price if line else None,
        under_price=line.under_price if line else None,
    )


def apply_market_line(
    projection: Projection,
    market_line: Optional[MarketLine],
    config: Optional[EngineConfig] = None,
) -> Projection:
    """
    Re-price an existing projection against a (new) market line.

    Inactive projections keep a zero edge whatever the line says.
    """
    cfg = config or EngineConfig.nba()
    line = _usable_line(market_line)
    if line is None:
        return replace(
            projection, line=None, edge=0.0, is_value_bet=False,
            over_price=None, under_price=None,
        )

    if projection.reasons[:1] == (INACTIVE_REASON,):
        edge, is_value = 0.0, False
    else:
        edge, is_value = _priced_edge(projection.projection, line.line, cfg)

    return replace(
        projection,
        line=round_half_up(line.line, 1),
        edge=edge,
        is_value_bet=is_value,
        over_price=line.over_price,
        under_price=line.under_price,
    )


def index_market_lines(lines: Sequence[MarketLine]) -> Dict[MarketKey, MarketLine]:
    """(player id, stat) → line; the first line for a key wins."""
    indexed: Dict[MarketKey, MarketLine] = {}
    for line in lines:
        indexed.setdefault((line.player_id, StatKey(line.stat)), line)
    return indexed


# ---------------------------------------------------------------------------
# Team-level convenience
# ---------------------------------------------------------------------------

def project_team(
    roster: Sequence[RosterEntry],
    multipliers: Mapping[str, float],
    opponent_defense: Optional[DefenseProfile],
    is_back_to_back: bool,
    synergy: Optional[Mapping[str, SynergyProfile]] = None,
    market_lines: Optional[Mapping[MarketKey, MarketLine]] = None,
    stats: Sequence[StatKey] = TRACKED_STATS,
    config: Optional[EngineConfig] = None,
) -> List[Projection]:
    """
    Project every tracked statistic for every player in ``roster``.

    ``roster`` should contain the whole team (Out players included) so the
    core-loss check sees absent stars; output follows roster order, then
    ``stats`` order.
    """
    cfg = config or EngineConfig.nba()
    synergy = synergy or {}
    market_lines = market_lines or {}

    projections: List[Projection] = []
    for entry in roster:
        core_loss = core_player_out(roster, entry.player_id, config=cfg)
        for stat in stats:
            projections.append(
                project(
                    entry.baseline,
                    entry.status,
                    multipliers.get(entry.player_id, 1.0),
                    opponent_defense,
                    is_back_to_back,
                    market_line=market_lines.get((entry.player_id, stat)),
                    stat=stat,
                    synergy=synergy.get(entry.player_id),
                    core_loss=core_loss,
                    uses_default_stats=entry.uses_default_stats,
                    config=cfg,
                )
            )
    return projections
