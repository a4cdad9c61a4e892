"""
Matchup analysis orchestration — the single entry point of the engine.

Workflow, per matchup:
    1. Normalise both rosters (live roster × season baselines × injuries)
    2. Redistribute core usage within each team
    3. Project every tracked statistic for every player against the
       opposing defense, pricing each projection against its market line
    4. Estimate home/away win probability from top-player strength
    5. Select at most one best bet (props first, then moneyline)

Everything here is pure and synchronous: inputs are already-fetched value
records, and the same inputs always produce equal outputs.  A team with no
roster data short-circuits the whole matchup with a
:class:`RosterUnavailable` record instead of an analysis built on an empty
team.
"""

import logging
from typing import Dict, Iterable, Optional, Sequence, Union

from backend.core.engine_config import EngineConfig
from backend.core.records import (
    DefenseProfile,
    MarketLine,
    MatchupAnalysis,
    MoneylinePrice,
    NormalizedRoster,
    RawRosterEntry,
    RosterUnavailable,
    SeasonStatLine,
    SynergyProfile,
    TeamAnalysis,
)
from backend.services.injuries import InjuryReport
from backend.services.projection import index_market_lines, project_team
from backend.services.redistribution import redistribute
from backend.services.roster import normalize_roster
from backend.services.selector import estimate_win_probability, select_best_bet

logger = logging.getLogger(__name__)


def _team_analysis(
    roster: NormalizedRoster,
    alias: str,
    win_probability: float,
    opponent_defense: Optional[DefenseProfile],
    is_back_to_back: bool,
    synergy: Dict[str, SynergyProfile],
    market_index,
    config: EngineConfig,
) -> TeamAnalysis:
    entries = roster.entries
    multipliers = redistribute(entries, config=config)
    projections = project_team(
        entries,
        multipliers,
        opponent_defense,
        is_back_to_back,
        synergy=synergy,
        market_lines=market_index,
        config=config,
    )
    return TeamAnalysis(
        team_id=roster.team_id,
        alias=alias,
        win_probability=win_probability,
        projections=tuple(projections),
        volume_multipliers=multipliers,
        unmatched=roster.unmatched,
    )


def analyze(
    home_raw_roster: Optional[Sequence[RawRosterEntry]],
    away_raw_roster: Optional[Sequence[RawRosterEntry]],
    home_season_stats: Optional[Sequence[SeasonStatLine]],
    away_season_stats: Optional[Sequence[SeasonStatLine]],
    injury_report: Iterable[InjuryReport] = (),
    is_home_b2b: bool = False,
    is_away_b2b: bool = False,
    market_lines: Optional[Sequence[MarketLine]] = None,
    *,
    home_team_id: str = "home",
    away_team_id: str = "away",
    home_alias: str = "",
    away_alias: str = "",
    synergy_profiles: Iterable[SynergyProfile] = (),
    home_defense: Optional[DefenseProfile] = None,
    away_defense: Optional[DefenseProfile] = None,
    home_moneyline: Optional[MoneylinePrice] = None,
    away_moneyline: Optional[MoneylinePrice] = None,
    config: Optional[EngineConfig] = None,
) -> Union[MatchupAnalysis, RosterUnavailable]:
    """
    Analyse one matchup end to end.

    Home players are projected against ``away_defense`` and vice versa.

    Returns:
        :class:`MatchupAnalysis`, or :class:`RosterUnavailable` for the
        first team (home checked first) with no roster data at all.
    """
    cfg = config or EngineConfig.nba()
    injuries = list(injury_report)
    home_alias = home_alias or home_team_id
    away_alias = away_alias or away_team_id

    home_roster = normalize_roster(home_raw_roster, home_season_stats, injuries, home_team_id)
    if isinstance(home_roster, RosterUnavailable):
        return home_roster
    away_roster = normalize_roster(away_raw_roster, away_season_stats, injuries, away_team_id)
    if isinstance(away_roster, RosterUnavailable):
        return away_roster

    synergy = {}
    for profile in synergy_profiles:
        synergy.setdefault(profile.player_id, profile)
    market_index = index_market_lines(market_lines or [])

    win = estimate_win_probability(
        [e.baseline for e in home_roster.active],
        [e.baseline for e in away_roster.active],
        cfg,
        home_alias=home_alias,
        away_alias=away_alias,
    )

    home = _team_analysis(
        home_roster, home_alias, win.home_win_probability, away_defense,
        is_home_b2b, synergy, market_index, cfg,
    )
    away = _team_analysis(
        away_roster, away_alias, win.away_win_probability, home_defense,
        is_away_b2b, synergy, market_index, cfg,
    )

    best_bet = select_best_bet(
        home.projections,
        away.projections,
        home_alias,
        away_alias,
        win,
        home_team_id=home_team_id,
        away_team_id=away_team_id,
        home_moneyline=home_moneyline,
        away_moneyline=away_moneyline,
        config=cfg,
    )

    logger.info(
        "Analysed %s @ %s: home %.1f%%, %d/%d projections, best bet %s",
        away_alias, home_alias, win.home_win_probability,
        len(home.projections), len(away.projections),
        best_bet.kind.value if best_bet else "none",
    )
    return MatchupAnalysis(
        home_team=home,
        away_team=away,
        win_estimate=win,
        best_bet=best_bet,
    )
