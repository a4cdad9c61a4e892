"""
Injury report parsing and roster availability.

Turns provider injury entries into the :class:`AvailabilityStatus` map the
projection pipeline consumes, so the model never trades blind into a
market that has already priced in a key absence.

Status vocabulary varies by source ("Out", "Day-To-Day", "GTD",
"Doubtful", ...).  Everything is folded into five states:

    Out           → projection gated to zero, usage redistributed
    DayToDay      → playing, confidence reduced (usage source by policy)
    Questionable  → playing (Doubtful folds in here)
    Probable      → playing
    Active        → no report

The free-text description is carried for display only; nothing in the
pipeline parses it.
"""

import logging
from dataclasses import dataclass
from typing import Dict, Iterable, Union

from backend.core.records import AvailabilityStatus

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Data structures
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class InjuryReport:
    """Single player injury entry."""

    player_id: str
    status: AvailabilityStatus
    player_name: str = ""
    team: str = ""
    description: str = ""  # display only
    source: str = "provider"


# ---------------------------------------------------------------------------
# Status parsing
# ---------------------------------------------------------------------------

def parse_status(raw: Union[str, AvailabilityStatus, None]) -> AvailabilityStatus:
    """
    Normalise a provider status string.

    Unrecognised non-empty statuses are treated as Questionable: the player
    keeps their volume but the entry is logged so the feed can be fixed.
    """
    if isinstance(raw, AvailabilityStatus):
        return raw
    if raw is None:
        return AvailabilityStatus.ACTIVE

    status_lower = raw.strip().lower()
    if not status_lower or status_lower in ("active", "available", "healthy"):
        return AvailabilityStatus.ACTIVE
    if "out" in status_lower or status_lower in ("inactive", "suspended"):
        return AvailabilityStatus.OUT
    if "day" in status_lower or status_lower in ("dtd", "gtd"):
        return AvailabilityStatus.DAY_TO_DAY
    if "doubtful" in status_lower or "questionable" in status_lower:
        return AvailabilityStatus.QUESTIONABLE
    if "probable" in status_lower:
        return AvailabilityStatus.PROBABLE

    logger.warning("Unrecognised injury status %r — treating as Questionable", raw)
    return AvailabilityStatus.QUESTIONABLE


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def build_availability(
    reports: Iterable[InjuryReport],
) -> Dict[str, AvailabilityStatus]:
    """
    Map player id → status.

    When a player appears more than once the first report wins; a
    conflicting later report is logged and ignored.
    """
    availability: Dict[str, AvailabilityStatus] = {}
    for report in reports:
        existing = availability.get(report.player_id)
        if existing is None:
            availability[report.player_id] = report.status
        elif existing is not report.status:
            logger.warning(
                "Conflicting injury reports for %s (%s): keeping %s, ignoring %s",
                report.player_id, report.player_name or "?",
                existing.value, report.status.value,
            )
    return availability
