"""
Pydantic request/response schemas for the NBA Edge API.

Request models validate the wire payload and convert it into the frozen
value records the engine consumes (``to_record``).  Response models are
built from engine records with ``from_record`` so the engine itself never
depends on pydantic.
"""

from __future__ import annotations

from typing import Callable, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, field_validator

from backend.core.engine_config import EngineConfig
from backend.core.records import (
    BetKind,
    BestBet,
    DefenseProfile,
    MarketLine,
    MatchupAnalysis,
    MoneylinePrice,
    PlayTypeStat,
    Projection,
    RawRosterEntry,
    RosterUnavailable,
    SeasonStatLine,
    StatKey,
    SynergyProfile,
    TeamAnalysis,
    UnmatchedPlayer,
)
from backend.services.analysis import analyze
from backend.services.injuries import InjuryReport, parse_status
from backend.services.projection import confidence_label

StatName = Literal["points", "assists", "rebounds", "threes"]


def _validate_american(v: Optional[int], field_name: str) -> Optional[int]:
    if v is None:
        return v
    if -100 < v < 100:
        raise ValueError(
            f"{field_name}={v} is not valid American odds. "
            "Must be >= +100 or <= -100."
        )
    return v


# ---------------------------------------------------------------------------
# Request
# ---------------------------------------------------------------------------

class RosterPlayerIn(BaseModel):
    """One player on tonight's live roster."""
    player_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    position: str = ""
    team_id: str = ""

    def to_record(self) -> RawRosterEntry:
        return RawRosterEntry(
            player_id=self.player_id, name=self.name,
            position=self.position, team_id=self.team_id,
        )


class SeasonStatIn(BaseModel):
    """Season per-game averages for one player."""
    player_id: str = Field(..., min_length=1)
    name: str = Field(..., min_length=1)
    team_id: str = ""
    position: str = ""
    points: float = Field(0.0, ge=0)
    assists: float = Field(0.0, ge=0)
    rebounds: float = Field(0.0, ge=0)
    threes: float = Field(0.0, ge=0)
    usage: float = Field(0.0, ge=0.0, le=1.0, description="Usage share, 0-1")

    def to_record(self) -> SeasonStatLine:
        return SeasonStatLine(**self.model_dump())


class InjuryIn(BaseModel):
    """Provider injury entry.  ``status`` is free text ("Out", "GTD", ...)."""
    player_id: str = Field(..., min_length=1)
    status: str
    player_name: str = ""
    team: str = ""
    description: str = Field("", max_length=500)

    def to_record(self) -> InjuryReport:
        return InjuryReport(
            player_id=self.player_id,
            status=parse_status(self.status),
            player_name=self.player_name,
            team=self.team,
            description=self.description,
        )


class PlayTypeIn(BaseModel):
    play_type: str = Field(..., description='e.g. "Spotup", "PRBallHandler"')
    frequency: float = Field(..., ge=0.0, le=1.0)
    efficiency: float = Field(0.0, ge=0.0)


class SynergyIn(BaseModel):
    """A player's play-type profile."""
    player_id: str = Field(..., min_length=1)
    play_types: List[PlayTypeIn] = Field(default_factory=list)

    def to_record(self) -> SynergyProfile:
        return SynergyProfile(
            player_id=self.player_id,
            play_types=tuple(
                PlayTypeStat(p.play_type, p.frequency, p.efficiency) for p in self.play_types
            ),
        )


class DefenseIn(BaseModel):
    """
    Play-type defensive ranks for one team.

    Keys may be defense keys (``spotup``) or provider play-type names
    (``Spotup``); missing play types default to rank 15.
    """
    alias: str = ""
    ranks: Dict[str, int] = Field(default_factory=dict)

    @field_validator("ranks")
    @classmethod
    def validate_ranks(cls, v: Dict[str, int]) -> Dict[str, int]:
        for name, rank in v.items():
            if not 1 <= rank <= 30:
                raise ValueError(f"rank for {name!r} must be within 1-30, got {rank}")
        return v

    def to_record(self, team_id: str) -> DefenseProfile:
        return DefenseProfile.from_ranks(team_id, self.ranks, alias=self.alias)

    model_config = {
        "json_schema_extra": {
            "example": {"alias": "BOS", "ranks": {"Spotup": 28, "Isolation": 3}}
        }
    }


class MarketLineIn(BaseModel):
    """A player prop line."""
    player_id: str = Field(..., min_length=1)
    stat: StatName = "points"
    line: float = Field(..., description="Non-positive lines are ignored")
    over_price: Optional[int] = None
    under_price: Optional[int] = None

    @field_validator("over_price", "under_price")
    @classmethod
    def validate_prices(cls, v: Optional[int], info) -> Optional[int]:
        return _validate_american(v, info.field_name)

    def to_record(self) -> MarketLine:
        return MarketLine(
            player_id=self.player_id,
            stat=StatKey(self.stat),
            line=self.line,
            over_price=self.over_price,
            under_price=self.under_price,
        )


class AnalysisRequest(BaseModel):
    """
    Payload for POST /api/analysis.

    Defense profiles are optional: when omitted the app falls back to the
    profiles stored through PUT /api/defense/{team_id}.
    """

    home_team_id: str = Field(..., min_length=1)
    away_team_id: str = Field(..., min_length=1)
    home_alias: str = ""
    away_alias: str = ""

    home_roster: List[RosterPlayerIn] = Field(default_factory=list)
    away_roster: List[RosterPlayerIn] = Field(default_factory=list)
    home_season_stats: List[SeasonStatIn] = Field(default_factory=list)
    away_season_stats: List[SeasonStatIn] = Field(default_factory=list)
    injuries: List[InjuryIn] = Field(default_factory=list)
    synergy: List[SynergyIn] = Field(default_factory=list)

    home_defense: Optional[DefenseIn] = None
    away_defense: Optional[DefenseIn] = None

    is_home_b2b: bool = False
    is_away_b2b: bool = False

    market_lines: List[MarketLineIn] = Field(default_factory=list)
    home_moneyline: Optional[int] = Field(None, description="American odds")
    away_moneyline: Optional[int] = Field(None, description="American odds")

    @field_validator("home_moneyline", "away_moneyline")
    @classmethod
    def validate_moneyline(cls, v: Optional[int], info) -> Optional[int]:
        return _validate_american(v, info.field_name)

    def moneyline_records(self):
        home = MoneylinePrice(self.home_team_id, self.home_moneyline) \
            if self.home_moneyline is not None else None
        away = MoneylinePrice(self.away_team_id, self.away_moneyline) \
            if self.away_moneyline is not None else None
        return home, away

    def _defense(
        self,
        payload: Optional[DefenseIn],
        team_id: str,
        defense_lookup: Optional[Callable[[str], Optional[DefenseProfile]]],
    ) -> Optional[DefenseProfile]:
        if payload is not None:
            return payload.to_record(team_id)
        if defense_lookup is not None:
            return defense_lookup(team_id)
        return None

    def run(
        self,
        config: Optional[EngineConfig] = None,
        defense_lookup: Optional[Callable[[str], Optional[DefenseProfile]]] = None,
    ) -> Union[MatchupAnalysis, RosterUnavailable]:
        """
        Convert the payload to records and analyse the matchup.

        A defense profile in the payload wins; otherwise ``defense_lookup``
        (e.g. ``DefenseProfileCache.get``) is asked for the team.
        """
        home_moneyline, away_moneyline = self.moneyline_records()
        return analyze(
            [p.to_record() for p in self.home_roster],
            [p.to_record() for p in self.away_roster],
            [s.to_record() for s in self.home_season_stats],
            [s.to_record() for s in self.away_season_stats],
            [i.to_record() for i in self.injuries],
            self.is_home_b2b,
            self.is_away_b2b,
            [m.to_record() for m in self.market_lines],
            home_team_id=self.home_team_id,
            away_team_id=self.away_team_id,
            home_alias=self.home_alias,
            away_alias=self.away_alias,
            synergy_profiles=[s.to_record() for s in self.synergy],
            home_defense=self._defense(self.home_defense, self.home_team_id, defense_lookup),
            away_defense=self._defense(self.away_defense, self.away_team_id, defense_lookup),
            home_moneyline=home_moneyline,
            away_moneyline=away_moneyline,
            config=config,
        )

    model_config = {
        "json_schema_extra": {
            "example": {
                "home_team_id": "1610612738",
                "away_team_id": "1610612747",
                "home_alias": "BOS",
                "away_alias": "LAL",
                "home_roster": [{"player_id": "1628369", "name": "Jayson Tatum"}],
                "away_roster": [{"player_id": "2544", "name": "LeBron James"}],
                "home_season_stats": [{
                    "player_id": "1628369", "name": "Jayson Tatum",
                    "points": 27.0, "assists": 4.9, "rebounds": 8.1,
                    "threes": 3.1, "usage": 0.30,
                }],
                "away_season_stats": [{
                    "player_id": "2544", "name": "LeBron James",
                    "points": 25.4, "assists": 8.1, "rebounds": 7.3,
                    "threes": 2.1, "usage": 0.29,
                }],
                "injuries": [{"player_id": "2544", "status": "Day-To-Day"}],
                "is_away_b2b": True,
                "market_lines": [{"player_id": "1628369", "stat": "points", "line": 26.5}],
            }
        }
    }


# ---------------------------------------------------------------------------
# Response
# ---------------------------------------------------------------------------

class ProjectionOut(BaseModel):
    player_id: str
    player_name: str
    stat: StatName
    projection: float
    confidence: int
    confidence_label: str
    reasons: List[str]
    line: Optional[float]
    edge: float
    is_value_bet: bool
    has_market_line: bool

    @classmethod
    def from_record(cls, p: Projection) -> ProjectionOut:
        return cls(
            player_id=p.player_id,
            player_name=p.player_name,
            stat=p.stat.value,
            projection=p.projection,
            confidence=p.confidence,
            confidence_label=confidence_label(p.confidence),
            reasons=list(p.reasons),
            line=p.line,
            edge=p.edge,
            is_value_bet=p.is_value_bet,
            has_market_line=p.has_market_line,
        )


class UnmatchedOut(BaseModel):
    player_id: str
    name: str
    reason: str
    suggestion: Optional[str]

    @classmethod
    def from_record(cls, u: UnmatchedPlayer) -> UnmatchedOut:
        return cls(player_id=u.player_id, name=u.name, reason=u.reason, suggestion=u.suggestion)


class TeamAnalysisOut(BaseModel):
    team_id: str
    alias: str
    win_probability: float
    projections: List[ProjectionOut]
    volume_multipliers: Dict[str, float]
    unmatched: List[UnmatchedOut]

    @classmethod
    def from_record(cls, t: TeamAnalysis) -> TeamAnalysisOut:
        return cls(
            team_id=t.team_id,
            alias=t.alias,
            win_probability=t.win_probability,
            projections=[ProjectionOut.from_record(p) for p in t.projections],
            volume_multipliers={k: round(v, 4) for k, v in t.volume_multipliers.items()},
            unmatched=[UnmatchedOut.from_record(u) for u in t.unmatched],
        )


class WinEstimateOut(BaseModel):
    home_win_probability: float
    away_win_probability: float
    home_advantage: float
    star_power_diff: float
    favored_side: Literal["home", "away"]
    reasons: List[str] = Field(default_factory=list)


class BestBetOut(BaseModel):
    """The single pick of the matchup.  ``kind`` is "None" when there is no bet."""
    kind: Literal["PropOver", "PropUnder", "MoneylineValue", "None"]
    edge: float = 0.0
    confidence: int = 0
    price: Optional[int] = None
    team_id: Optional[str] = None
    team_alias: Optional[str] = None
    player_id: Optional[str] = None
    player_name: Optional[str] = None
    stat: Optional[StatName] = None
    line: Optional[float] = None
    projection: Optional[float] = None
    model_probability: Optional[float] = None
    implied_probability: Optional[float] = None

    @classmethod
    def from_record(cls, bet: Optional[BestBet]) -> BestBetOut:
        if bet is None:
            return cls(kind=BetKind.NONE.value)
        return cls(
            kind=bet.kind.value,
            edge=bet.edge,
            confidence=bet.confidence,
            price=bet.price,
            team_id=bet.team_id,
            team_alias=bet.team_alias,
            player_id=bet.player_id,
            player_name=bet.player_name,
            stat=bet.stat.value if bet.stat is not None else None,
            line=bet.line,
            projection=bet.projection,
            model_probability=bet.model_probability,
            implied_probability=bet.implied_probability,
        )


class AnalysisResponse(BaseModel):
    """Structure for the POST /api/analysis endpoint."""
    home_team: TeamAnalysisOut
    away_team: TeamAnalysisOut
    win_estimate: WinEstimateOut
    best_bet: BestBetOut
    demo: bool = False

    @classmethod
    def from_record(cls, analysis: MatchupAnalysis, demo: bool = False) -> AnalysisResponse:
        win = analysis.win_estimate
        return cls(
            home_team=TeamAnalysisOut.from_record(analysis.home_team),
            away_team=TeamAnalysisOut.from_record(analysis.away_team),
            win_estimate=WinEstimateOut(
                home_win_probability=win.home_win_probability,
                away_win_probability=win.away_win_probability,
                home_advantage=win.home_advantage,
                star_power_diff=win.star_power_diff,
                favored_side=win.favored_side,
                reasons=list(win.reasons),
            ),
            best_bet=BestBetOut.from_record(analysis.best_bet),
            demo=demo,
        )


class DefenseProfileResponse(BaseModel):
    """Response from PUT /api/defense/{team_id}."""
    team_id: str
    alias: str
    iso: int
    pnr: int
    spotup: int
    transition: int
    postup: int
    overall: int

    @classmethod
    def from_record(cls, profile: DefenseProfile) -> DefenseProfileResponse:
        return cls(
            team_id=profile.team_id,
            alias=profile.alias,
            iso=profile.iso,
            pnr=profile.pnr,
            spotup=profile.spotup,
            transition=profile.transition,
            postup=profile.postup,
            overall=profile.overall,
        )
