"""
Matchup selector — team win probability and the best bet of the matchup.

Win probability
---------------
Team strength is the summed PPG of its top three scorers.  The home share
of combined strength, plus a flat 4% home-court bump, is clamped to
[20%, 80%] so thin samples never produce near-certainty:

    home = clamp(S_home / (S_home + S_away) + 0.04, 0.20, 0.80) × 100

Two empty teams split 50/50 before the home bump.

Best bet
--------
Evaluated in priority order, first match wins:

    1. Prop       largest |edge| ≥ 12% over every player and statistic.
                  Ties go to the first one met (home roster first, roster
                  order within a team).  Over for a positive edge, under
                  for a negative one.
    2. Moneyline  model probability minus a heuristic market probability
                  (58% for the side the model favours, 45% otherwise);
                  an edge ≥ 8% on either side qualifies.
    3. None       the common case, not an error.
"""

import logging
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np

from backend.core.engine_config import EngineConfig
from backend.core.odds_math import probability_to_american, round_half_up
from backend.core.records import (
    BestBet,
    BetKind,
    MoneylinePrice,
    PlayerBaseline,
    Projection,
    TeamWinEstimate,
)

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Win probability
# ---------------------------------------------------------------------------

def team_strength(players: Iterable[PlayerBaseline], top_n: int = 3) -> float:
    """Sum of season PPG over the ``top_n`` highest scorers."""
    ppg = sorted((max(0.0, p.points) for p in players), reverse=True)
    return float(sum(ppg[:top_n]))


def _top_scorer(players: Sequence[PlayerBaseline]) -> Optional[PlayerBaseline]:
    best = None
    for player in players:
        if best is None or player.points > best.points:
            best = player
    return best


def win_reasons(
    home_players: Sequence[PlayerBaseline],
    away_players: Sequence[PlayerBaseline],
    home_alias: str,
    away_alias: str,
    home_pct: float,
    home_advantage_pct: float,
    star_power_diff: float,
) -> Tuple[str, ...]:
    """
    Game-level reasoning, in order: top-scorer comparison, home court,
    star power (only when the top-3 gap exceeds 5 PPG), then the verdict.
    """
    reasons: List[str] = []

    home_top = _top_scorer(home_players)
    away_top = _top_scorer(away_players)
    if home_top is not None and away_top is not None:
        if home_top.points > away_top.points:
            reasons.append(
                f"{home_top.name} ({home_top.points:.1f} PPG) leads the scoring matchup "
                f"against {away_top.name} ({away_top.points:.1f} PPG)"
            )
        else:
            reasons.append(
                f"{away_top.name} ({away_top.points:.1f} PPG) has the scoring edge "
                f"over {home_top.name} ({home_top.points:.1f} PPG)"
            )

    reasons.append(f"Home court adds +{round_half_up(home_advantage_pct):.0f}% for {home_alias}")

    if abs(star_power_diff) > 5:
        stronger = home_alias if star_power_diff > 0 else away_alias
        reasons.append(f"{stronger} has more star power across the combined top 3")

    if home_pct >= 50.0:
        favored, pct = home_alias, home_pct
    else:
        favored, pct = away_alias, 100.0 - home_pct
    reasons.append(f"Win probability: {favored} {round_half_up(pct):.0f}%")
    return tuple(reasons)


def estimate_win_probability(
    home_players: Sequence[PlayerBaseline],
    away_players: Sequence[PlayerBaseline],
    config: Optional[EngineConfig] = None,
    home_alias: str = "home",
    away_alias: str = "away",
) -> TeamWinEstimate:
    """Home/away win probability (percent) from top-player strength."""
    cfg = config or EngineConfig.nba()
    home_strength = team_strength(home_players, cfg.strength_top_n)
    away_strength = team_strength(away_players, cfg.strength_top_n)

    total = home_strength + away_strength
    raw_home_share = home_strength / total if total > 0 else 0.5

    home_share = float(
        np.clip(raw_home_share + cfg.home_advantage, cfg.min_win_share, cfg.max_win_share)
    )
    home_pct = round_half_up(home_share * 100.0, 1)
    home_advantage = round_half_up(cfg.home_advantage * 100.0, 1)
    star_power_diff = round_half_up(home_strength - away_strength, 1)

    return TeamWinEstimate(
        home_win_probability=home_pct,
        away_win_probability=round_half_up(100.0 - home_pct, 1),
        home_advantage=home_advantage,
        star_power_diff=star_power_diff,
        reasons=win_reasons(
            home_players, away_players, home_alias, away_alias,
            home_pct, home_advantage, star_power_diff,
        ),
    )


# ---------------------------------------------------------------------------
# Best bet
# ---------------------------------------------------------------------------

def _capped_confidence(raw: float) -> int:
    return int(min(10, round_half_up(raw)))


def _best_prop(
    sides: Sequence[Tuple[str, str, Sequence[Projection]]],
    threshold_pct: float,
) -> Optional[Tuple[str, str, Projection]]:
    best: Optional[Tuple[str, str, Projection]] = None
    best_abs = -1.0
    for team_id, alias, projections in sides:
        for proj in projections:
            if not proj.has_market_line:
                continue
            magnitude = abs(proj.edge)
            if magnitude >= threshold_pct and magnitude > best_abs:
                best, best_abs = (team_id, alias, proj), magnitude
    return best


def _prop_pick(
    team_id: str, alias: str, proj: Projection, cfg: EngineConfig
) -> BestBet:
    is_over = proj.edge > 0
    if is_over:
        price = proj.over_price if proj.over_price is not None else cfg.default_prop_price
    else:
        price = proj.under_price if proj.under_price is not None else cfg.default_prop_price
    return BestBet(
        kind=BetKind.PROP_OVER if is_over else BetKind.PROP_UNDER,
        edge=proj.edge,
        confidence=_capped_confidence(5 + abs(proj.edge) / 5),
        price=int(price),
        team_id=team_id,
        team_alias=alias,
        player_id=proj.player_id,
        player_name=proj.player_name,
        stat=proj.stat,
        line=proj.line,
        projection=proj.projection,
    )


def implied_heuristic(model_pct: float, config: Optional[EngineConfig] = None) -> float:
    """Assumed market probability for a side, given the model's view of it."""
    cfg = config or EngineConfig.nba()
    return cfg.favorite_implied_pct if model_pct >= 50.0 else cfg.underdog_implied_pct


def moneyline_edges(
    estimate: TeamWinEstimate, config: Optional[EngineConfig] = None
) -> Tuple[float, float]:
    """(home edge, away edge) in probability points."""
    cfg = config or EngineConfig.nba()
    home = estimate.home_win_probability - implied_heuristic(estimate.home_win_probability, cfg)
    away = estimate.away_win_probability - implied_heuristic(estimate.away_win_probability, cfg)
    return round_half_up(home, 1), round_half_up(away, 1)


def select_best_bet(
    home_projections: Sequence[Projection],
    away_projections: Sequence[Projection],
    home_alias: str,
    away_alias: str,
    win_estimate: TeamWinEstimate,
    home_team_id: str = "",
    away_team_id: str = "",
    home_moneyline: Optional[MoneylinePrice] = None,
    away_moneyline: Optional[MoneylinePrice] = None,
    config: Optional[EngineConfig] = None,
) -> Optional[BestBet]:
    """
    The single highest-conviction pick for a matchup, or None.

    Moneyline prices, when supplied, are reported as the price taken; the
    edge itself always uses the heuristic market probability.  Without a
    price the fair price of that heuristic probability is quoted.
    """
    cfg = config or EngineConfig.nba()

    # 1. Props
    prop = _best_prop(
        [
            (home_team_id or home_alias, home_alias, home_projections),
            (away_team_id or away_alias, away_alias, away_projections),
        ],
        cfg.prop_pick_edge_pct,
    )
    if prop is not None:
        pick = _prop_pick(*prop, cfg)
        logger.info(
            "Best bet: %s %s %s %.1f (edge %+.1f%%)",
            pick.kind.value, pick.player_name, pick.stat.value, pick.line, pick.edge,
        )
        return pick

    # 2. Moneyline
    home_edge, away_edge = moneyline_edges(win_estimate, cfg)
    candidates: List[Tuple[float, str, str, float, Optional[MoneylinePrice]]] = [
        (home_edge, home_team_id or home_alias, home_alias,
         win_estimate.home_win_probability, home_moneyline),
        (away_edge, away_team_id or away_alias, away_alias,
         win_estimate.away_win_probability, away_moneyline),
    ]
    edge, team_id, alias, model_pct, price = max(candidates, key=lambda c: c[0])
    if edge >= cfg.moneyline_pick_edge_pct:
        implied = implied_heuristic(model_pct, cfg)
        quoted = price.price if price is not None else probability_to_american(implied)
        logger.info("Best bet: %s moneyline (edge %+.1f pts)", alias, edge)
        return BestBet(
            kind=BetKind.MONEYLINE_VALUE,
            edge=edge,
            confidence=_capped_confidence(5 + edge / 4),
            price=int(quoted),
            team_id=team_id,
            team_alias=alias,
            model_probability=model_pct,
            implied_probability=implied,
        )

    # 3. No bet
    logger.debug("No bet: no prop ≥ %.0f%%, no moneyline ≥ %.0f pts",
                 cfg.prop_pick_edge_pct, cfg.moneyline_pick_edge_pct)
    return None
