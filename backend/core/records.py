"""Value records shared by every stage of the projection pipeline.

All records are frozen dataclasses: stages return new records and never
mutate their inputs.  Records carry plain Python values only (no ORM rows,
no pydantic models), so the same objects flow from a JSON payload, a test
fixture, or a data-fetching collaborator without translation.

Error kinds are modelled as records too (:class:`RosterUnavailable`,
:class:`UnmatchedPlayer`) because a matchup with partial data is still a
valid, degraded result that the caller may render with a caveat.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional, Tuple


# ---------------------------------------------------------------------------
# Enumerations
# ---------------------------------------------------------------------------


class StatKey(str, Enum):
    """Per-game statistics the engine projects."""

    POINTS = "points"
    ASSISTS = "assists"
    REBOUNDS = "rebounds"
    THREES = "threes"


#: Projection order for every player.  Points first: it is the statistic
#: the selector meets first when scanning for ties.
TRACKED_STATS: Tuple[StatKey, ...] = (
    StatKey.POINTS,
    StatKey.ASSISTS,
    StatKey.REBOUNDS,
    StatKey.THREES,
)


class AvailabilityStatus(str, Enum):
    """Player availability for a specific game date."""

    ACTIVE = "Active"
    PROBABLE = "Probable"
    QUESTIONABLE = "Questionable"
    DAY_TO_DAY = "DayToDay"
    OUT = "Out"

    @property
    def is_out(self) -> bool:
        return self is AvailabilityStatus.OUT


class BetKind(str, Enum):
    """Tag of a :class:`BestBet`.  ``NONE`` is used only when serialising
    the absence of a pick; the selector itself returns ``None``."""

    PROP_OVER = "PropOver"
    PROP_UNDER = "PropUnder"
    MONEYLINE_VALUE = "MoneylineValue"
    NONE = "None"


#: Defense-rank keys, in display order.
DEFENSE_KEYS: Tuple[str, ...] = ("iso", "pnr", "spotup", "transition", "postup")

#: Provider play-type names → defense-rank key.
PLAY_TYPE_TO_DEFENSE_KEY: Dict[str, str] = {
    "Isolation": "iso",
    "PRBallHandler": "pnr",
    "Spotup": "spotup",
    "Transition": "transition",
    "Postup": "postup",
}


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RawRosterEntry:
    """One player on the live (tonight's) roster, as the provider lists it."""

    player_id: str
    name: str
    position: str = ""
    team_id: str = ""


@dataclass(frozen=True)
class SeasonStatLine:
    """Season-level per-game averages for one player."""

    player_id: str
    name: str
    team_id: str = ""
    position: str = ""
    points: float = 0.0
    assists: float = 0.0
    rebounds: float = 0.0
    threes: float = 0.0
    usage: float = 0.0  # fraction of team possessions used on court, 0-1


@dataclass(frozen=True)
class PlayerBaseline:
    """Immutable snapshot of one player's identity and season production."""

    player_id: str
    name: str
    team_id: str
    position: str
    points: float
    assists: float
    rebounds: float
    threes: float
    usage: float

    def average(self, stat: StatKey) -> float:
        """Season average for ``stat``."""
        return float(getattr(self, StatKey(stat).value))


@dataclass(frozen=True)
class PlayTypeStat:
    """One offensive play type: possession share and points per possession."""

    play_type: str
    frequency: float
    efficiency: float = 0.0


@dataclass(frozen=True)
class SynergyProfile:
    """A player's offensive tendencies.  Frequencies need not sum to 1."""

    player_id: str
    play_types: Tuple[PlayTypeStat, ...] = ()


@dataclass(frozen=True)
class DefenseProfile:
    """A team's play-type defensive ranks, 1 (stingiest) to 30 (most permissive)."""

    team_id: str
    alias: str = ""
    iso: int = 15
    pnr: int = 15
    spotup: int = 15
    transition: int = 15
    postup: int = 15

    @property
    def overall(self) -> int:
        """Rounded (half-up) mean of the five per-type ranks."""
        total = sum(self.rank_for(key) for key in DEFENSE_KEYS)
        n = len(DEFENSE_KEYS)
        return int((2 * total + n) // (2 * n))

    def rank_for(self, defense_key: str) -> int:
        """Rank for a defense key (``iso``, ``pnr``, ...)."""
        if defense_key not in DEFENSE_KEYS:
            raise KeyError(f"Unknown defense key {defense_key!r}")
        return int(getattr(self, defense_key))

    @classmethod
    def from_ranks(
        cls,
        team_id: str,
        ranks: Mapping[str, int],
        alias: str = "",
        default_rank: int = 15,
    ) -> DefenseProfile:
        """Build a profile from a partial rank mapping.

        Keys may be defense keys (``spotup``) or provider play-type names
        (``Spotup``).  Missing play types take ``default_rank``;
        ``overall`` is derived from the five per-type ranks.
        """
        resolved = {key: default_rank for key in DEFENSE_KEYS}
        for name, rank in ranks.items():
            key = PLAY_TYPE_TO_DEFENSE_KEY.get(name, name)
            if key in resolved:
                resolved[key] = int(rank)
        return cls(team_id=team_id, alias=alias or team_id, **resolved)


@dataclass(frozen=True)
class MarketLine:
    """A bookmaker line for one player and statistic."""

    player_id: str
    stat: StatKey
    line: float
    over_price: Optional[int] = None
    under_price: Optional[int] = None


@dataclass(frozen=True)
class MoneylinePrice:
    """Best available moneyline price (American odds) for one team."""

    team_id: str
    price: int


# ---------------------------------------------------------------------------
# Roster normalisation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class RosterEntry:
    """A baseline paired with its availability for tonight."""

    baseline: PlayerBaseline
    status: AvailabilityStatus = AvailabilityStatus.ACTIVE
    uses_default_stats: bool = False

    @property
    def player_id(self) -> str:
        return self.baseline.player_id


@dataclass(frozen=True)
class UnmatchedPlayer:
    """Diagnostic: a live-roster player with no season-statistics match."""

    player_id: str
    name: str
    reason: str
    suggestion: Optional[str] = None


@dataclass(frozen=True)
class RosterUnavailable:
    """Neither a live roster nor season statistics were obtainable for a team."""

    team_id: str
    reason: str


@dataclass(frozen=True)
class NormalizedRoster:
    """Normaliser output.

    ``active`` excludes Out players and is sorted by season points per
    game, descending.  ``inactive`` keeps the Out players because the
    redistribution stage needs their usage.
    """

    team_id: str
    active: Tuple[RosterEntry, ...] = ()
    inactive: Tuple[RosterEntry, ...] = ()
    unmatched: Tuple[UnmatchedPlayer, ...] = ()

    @property
    def entries(self) -> Tuple[RosterEntry, ...]:
        """Every player, active first."""
        return self.active + self.inactive

    def status_map(self) -> Dict[str, AvailabilityStatus]:
        return {entry.player_id: entry.status for entry in self.entries}


# ---------------------------------------------------------------------------
# Outputs
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Projection:
    """Engine output for one player and one statistic.

    ``line is None`` means no market price exists; ``edge`` is then 0 and
    must not be read as a real zero edge (see :attr:`has_market_line`).
    """

    player_id: str
    player_name: str
    stat: StatKey
    projection: float
    confidence: int
    reasons: Tuple[str, ...] = ()
    line: Optional[float] = None
    edge: float = 0.0
    is_value_bet: bool = False
    over_price: Optional[int] = None
    under_price: Optional[int] = None

    @property
    def has_market_line(self) -> bool:
        return self.line is not None


@dataclass(frozen=True)
class TeamWinEstimate:
    """Win probabilities in percent; home and away sum to 100.

    ``reasons`` is the game-level audit trail, in display order.
    """

    home_win_probability: float
    away_win_probability: float
    home_advantage: float
    star_power_diff: float
    reasons: Tuple[str, ...] = ()

    @property
    def favored_side(self) -> str:
        return "home" if self.home_win_probability >= 50.0 else "away"


@dataclass(frozen=True)
class BestBet:
    """The single highest-conviction pick for a matchup."""

    kind: BetKind
    edge: float
    confidence: int
    price: int
    team_id: str
    team_alias: str
    player_id: Optional[str] = None
    player_name: Optional[str] = None
    stat: Optional[StatKey] = None
    line: Optional[float] = None
    projection: Optional[float] = None
    model_probability: Optional[float] = None
    implied_probability: Optional[float] = None


@dataclass(frozen=True)
class TeamAnalysis:
    """One side of a matchup: projections plus the inputs worth auditing."""

    team_id: str
    alias: str
    win_probability: float
    projections: Tuple[Projection, ...] = ()
    volume_multipliers: Mapping[str, float] = field(default_factory=dict)
    unmatched: Tuple[UnmatchedPlayer, ...] = ()


@dataclass(frozen=True)
class MatchupAnalysis:
    """Complete analysis of one matchup."""

    home_team: TeamAnalysis
    away_team: TeamAnalysis
    win_estimate: TeamWinEstimate
    best_bet: Optional[BestBet] = None
