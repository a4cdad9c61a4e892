"""Engine configuration — every tunable projection constant in one place.

This module is the **registry** for the constants used by the projection
pipeline.  Nowhere else in the codebase should usage-core fractions,
matchup rank cut-offs, or pick thresholds be hard-coded.

Architecture
------------
:class:`EngineConfig` is a frozen dataclass carrying all constants.  The
named constructor :meth:`EngineConfig.nba` returns the canonical values.
Every service function accepts an optional ``config`` argument and falls
back to :meth:`EngineConfig.nba` when it is omitted, so the pipeline never
reads configuration implicitly.

Typical usage::

    from backend.core.engine_config import EngineConfig

    cfg = EngineConfig.nba()

    # Override a single constant for an experiment:
    from dataclasses import replace
    strict_cfg = replace(cfg, prop_pick_edge_pct=15.0)
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from typing import Final

#: Environment variables honoured by :meth:`EngineConfig.from_env`, mapped
#: to the field they override.
ENV_OVERRIDES: Final[dict[str, str]] = {
    "EDGE_VALUE_THRESHOLD_PCT": "value_edge_pct",
    "EDGE_PROP_PICK_PCT": "prop_pick_edge_pct",
    "EDGE_MONEYLINE_PICK_PCT": "moneyline_pick_edge_pct",
    "EDGE_HOME_ADVANTAGE": "home_advantage",
    "EDGE_B2B_PENALTY": "b2b_penalty",
    "EDGE_CORE_LOSS_PENALTY": "core_loss_penalty",
}

_TRUTHY: Final[frozenset[str]] = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class EngineConfig:
    """Immutable configuration bundle for the projection pipeline.

    Attributes:
        --- Usage redistribution ---
        usage_core_fraction: Share of the roster (by usage) that forms the
            usage core.  Core size is ``ceil(n × fraction)``, at least
            ``min_core_size``.
        min_core_size: Lower bound on the usage-core size.
        day_to_day_unavailable: When True a DayToDay player counts as a
            usage *source* (missing) for redistribution, matching the
            provider feed which only reports Out / Day-To-Day absences.

        --- Core-loss penalty ---
        core_loss_top_n: How many top-usage players are checked for an
            Out status before the team-wide spacing penalty applies.
        core_loss_penalty: Multiplicative efficiency loss (0.15 = −15%).

        --- Matchup modifier ---
        min_play_type_frequency: Play types run on fewer possessions than
            this are ignored.
        elite_defense_rank: Ranks at or below this are elite (penalty).
        weak_defense_rank: Ranks at or above this are weak (boost).
        synergy_boost: Frequency-weighted boost against weak defenses.
        synergy_penalty: Frequency-weighted penalty against elite defenses.
        default_defense_rank: Rank assumed when a team has no rank for a
            play type (league middle).

        --- Fatigue and confidence ---
        b2b_penalty: Second-night-of-back-to-back projection haircut.
        base_confidence: Starting confidence score.
        b2b_confidence_penalty / high_volume_confidence_penalty /
        day_to_day_confidence_penalty: Deductions from the base.
        high_volume_multiplier: Volume multiplier above which the
            high-volume deduction applies.
        min_confidence / max_confidence: Clamp bounds.

        --- Edges and picks ---
        value_edge_pct: |edge| (percent) at which a projection is a value bet.
        prop_pick_edge_pct: |edge| a prop needs to become the best bet.
        moneyline_pick_edge_pct: Model-minus-implied edge (points of
            probability) a moneyline needs to become the best bet.
        favorite_implied_pct / underdog_implied_pct: Heuristic market-implied
            win probabilities for the side the model favours / fades.
        default_prop_price: American price assumed when a prop line carries
            no bookmaker price.

        --- Win probability ---
        strength_top_n: Players per team summed into team strength.
        home_advantage: Flat home-court share added to the raw home share.
        min_win_share / max_win_share: Clamp on the home share.
    """

    # Usage redistribution
    usage_core_fraction: float = 0.20
    min_core_size: int = 1
    day_to_day_unavailable: bool = True

    # Core-loss penalty
    core_loss_top_n: int = 3
    core_loss_penalty: float = 0.15

    # Matchup modifier
    min_play_type_frequency: float = 0.15
    elite_defense_rank: int = 5
    weak_defense_rank: int = 25
    synergy_boost: float = 0.10
    synergy_penalty: float = 0.10
    default_defense_rank: int = 15

    # Fatigue and confidence
    b2b_penalty: float = 0.03
    base_confidence: int = 85
    b2b_confidence_penalty: int = 10
    high_volume_multiplier: float = 1.2
    high_volume_confidence_penalty: int = 15
    day_to_day_confidence_penalty: int = 20
    min_confidence: int = 30
    max_confidence: int = 95

    # Edges and picks
    value_edge_pct: float = 10.0
    prop_pick_edge_pct: float = 12.0
    moneyline_pick_edge_pct: float = 8.0
    favorite_implied_pct: float = 58.0
    underdog_implied_pct: float = 45.0
    default_prop_price: int = -110

    # Win probability
    strength_top_n: int = 3
    home_advantage: float = 0.04
    min_win_share: float = 0.20
    max_win_share: float = 0.80

    # ------------------------------------------------------------------ #
    #  Named constructors                                                  #
    # ------------------------------------------------------------------ #

    @classmethod
    def nba(cls) -> EngineConfig:
        """Return the canonical NBA configuration."""
        return cls()

    @classmethod
    def from_env(cls, base: EngineConfig | None = None) -> EngineConfig:
        """Return ``base`` (default :meth:`nba`) with environment overrides.

        Only the variables in :data:`ENV_OVERRIDES` plus
        ``EDGE_DTD_UNAVAILABLE`` are read.  Loading a ``.env`` file is the
        caller's job (see ``backend/main.py``).

        Raises:
            ValueError: If a numeric override cannot be parsed.
        """
        cfg = base or cls.nba()
        overrides: dict[str, object] = {}
        for env_name, field_name in ENV_OVERRIDES.items():
            raw = os.getenv(env_name)
            if raw is None or raw.strip() == "":
                continue
            try:
                overrides[field_name] = float(raw)
            except ValueError as exc:
                raise ValueError(
                    f"{env_name}={raw!r} is not a number"
                ) from exc

        dtd = os.getenv("EDGE_DTD_UNAVAILABLE")
        if dtd is not None and dtd.strip():
            overrides["day_to_day_unavailable"] = dtd.strip().lower() in _TRUTHY

        return replace(cfg, **overrides) if overrides else cfg

    def __repr__(self) -> str:
        return (
            f"EngineConfig(core={self.usage_core_fraction}, "
            f"value_edge={self.value_edge_pct}, "
            f"prop_pick={self.prop_pick_edge_pct}, "
            f"ml_pick={self.moneyline_pick_edge_pct})"
        )
