"""Odds and edge mathematics — the single source of truth.

Every function here is **pure**: no I/O, no logging, no side effects.
Import from this module; never reimplement locally in services.

The pillars exposed are:

1. **Odds conversion** — American ↔ decimal ↔ implied probability.
2. **Fair pricing** — probability → fair decimal / American price.
3. **Edge** — percentage deviation of a projection from a market line.

Design decisions
----------------
* American odds are accepted as ``int`` or ``float`` because sportsbook feeds
  return both.  Decimal odds must be converted by the caller.
* Percentages cross the module boundary on a 0–100 scale where the name
  says ``pct`` or ``percent``; plain ``prob`` arguments are 0–1.
* :func:`calculate_edge` returns the *unrounded* edge.  Rounding happens
  once, at the record boundary, in the projection engine.

Run tests with::

    pytest tests/test_odds_math.py -v
"""

from __future__ import annotations

import math
from typing import Final, NamedTuple

# ---------------------------------------------------------------------------
# Module-level constants
# ---------------------------------------------------------------------------

#: American-odds magnitude floor.  Sportsbooks never quote |odds| < 100;
#: values below this indicate a data error.
_MIN_ODDS_MAGNITUDE: Final[int] = 100

#: Edge (percent) at which a projection is flagged as a value bet.
DEFAULT_VALUE_EDGE_PCT: Final[float] = 10.0


class EdgeResult(NamedTuple):
    """Signed edge in percent and whether it clears the value threshold."""

    edge: float
    is_value: bool


# ---------------------------------------------------------------------------
# Odds conversion
# ---------------------------------------------------------------------------


def american_to_decimal(american: int | float) -> float:
    """Convert American odds to decimal (European) format.

    Examples::

        american_to_decimal(-110) → 1.9091   (risk 110 to win 100)
        american_to_decimal(+150) → 2.5000   (risk 100 to win 150)

    Raises:
        ValueError: If ``|american| < 100``, which is not a representable
            American odds value.
    """
    if abs(american) < _MIN_ODDS_MAGNITUDE:
        raise ValueError(
            f"Invalid American odds {american!r}: magnitude must be ≥ 100. "
            "Check upstream odds parsing for data errors."
        )
    if american > 0:
        return american / 100.0 + 1.0
    return 100.0 / abs(american) + 1.0


def decimal_to_american(decimal_odds: float) -> int:
    """Convert decimal odds to the nearest American integer.

    Raises:
        ValueError: If ``decimal_odds <= 1.0`` (no payout is representable).
    """
    if decimal_odds <= 1.0:
        raise ValueError(
            f"Decimal odds {decimal_odds!r} must be > 1.0."
        )
    if decimal_odds >= 2.0:
        return round((decimal_odds - 1.0) * 100)
    return round(-100.0 / (decimal_odds - 1.0))


def implied_prob(american: int | float) -> float:
    """Raw implied probability (0–1) from American odds, vig included.

    Examples::

        implied_prob(-110) → 0.5238
        implied_prob(+150) → 0.4000
    """
    return 1.0 / american_to_decimal(american)


def odds_to_implied_probability(decimal_odds: float) -> float:
    """Implied probability in percent from decimal odds (2.0 → 50.0)."""
    if decimal_odds <= 0:
        raise ValueError(f"Decimal odds {decimal_odds!r} must be positive.")
    return (1.0 / decimal_odds) * 100.0


def probability_to_fair_odds(probability_pct: float) -> float:
    """Fair (no-vig) decimal odds for a probability in percent (50 → 2.0)."""
    if probability_pct <= 0:
        raise ValueError(
            f"Probability {probability_pct!r}% must be positive."
        )
    return 100.0 / probability_pct


def probability_to_american(probability_pct: float) -> int:
    """Fair American price for a probability in percent (58 → -138).

    Probabilities at or above 100% have no representable price.
    """
    if probability_pct >= 100.0:
        raise ValueError(
            f"Probability {probability_pct!r}% leaves no payout to price."
        )
    return decimal_to_american(probability_to_fair_odds(probability_pct))


# ---------------------------------------------------------------------------
# Edge
# ---------------------------------------------------------------------------


def calculate_edge(
    projection: float,
    line: float,
    value_threshold_pct: float = DEFAULT_VALUE_EDGE_PCT,
) -> EdgeResult:
    """Percentage edge of a projection over a market line.

    ``edge = (projection − line) / line × 100``.  A positive edge points to
    the over, a negative edge to the under; the value flag uses the
    magnitude so either direction can qualify.

    A non-positive line has no meaningful percentage, so the result is
    ``EdgeResult(0.0, False)``.

    Examples::

        calculate_edge(28.1, 26.5) → EdgeResult(edge≈6.04, is_value=False)
        calculate_edge(30.0, 26.5) → EdgeResult(edge≈13.21, is_value=True)
    """
    if line <= 0 or not math.isfinite(line) or not math.isfinite(projection):
        return EdgeResult(0.0, False)
    edge = (projection - line) / line * 100.0
    return EdgeResult(edge, abs(edge) >= value_threshold_pct)


def round_half_up(value: float, digits: int = 0) -> float:
    """Round with halves away from zero, unlike Python's banker's ``round``.

    Keeps display values stable at .5 boundaries (``round_half_up(2.5)`` is
    3.0, where ``round(2.5)`` is 2).
    """
    factor = 10.0 ** digits
    scaled = abs(value) * factor
    rounded = math.floor(scaled + 0.5) / factor
    return math.copysign(rounded, value) if rounded else 0.0
