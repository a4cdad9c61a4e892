"""
Player-name canonicalisation for matching across data sources.

Live rosters and season-statistics feeds spell names differently
("Luka Dončić" / "Luka Doncic", "P.J. Washington" / "PJ Washington",
"Jaren Jackson Jr." / "Jaren Jackson").  :func:`name_key` reduces a display
name to a canonical key so the two sides can be joined exactly.  It never
decides a match on its own; ambiguity is the caller's problem.
"""

import re
import unicodedata
from typing import FrozenSet

#: Generational suffixes dropped from the end of a name.
SUFFIXES: FrozenSet[str] = frozenset({"jr", "sr", "ii", "iii", "iv", "v"})

_DROP_CHARS = re.compile(r"[.'’`]")
_SEPARATORS = re.compile(r"[^a-z0-9]+")


def strip_diacritics(name: str) -> str:
    """
    Remove combining diacritical marks.

    Examples:
        >>> strip_diacritics("Nikola Jokić")
        'Nikola Jokic'
    """
    decomposed = unicodedata.normalize("NFD", name)
    return "".join(c for c in decomposed if unicodedata.category(c) != "Mn")


def name_key(name: str) -> str:
    """
    Canonical matching key for a player name.

    Lowercases, strips diacritics, drops periods and apostrophes, turns any
    other punctuation into a word break, and removes trailing generational
    suffixes.

    Examples:
        >>> name_key("Luka Dončić")
        'luka doncic'
        >>> name_key("Jaren Jackson Jr.")
        'jaren jackson'
        >>> name_key("De'Aaron Fox")
        'deaaron fox'
        >>> name_key("Shai Gilgeous-Alexander")
        'shai gilgeous alexander'
    """
    if not name:
        return ""
    lowered = strip_diacritics(name).lower()
    lowered = _DROP_CHARS.sub("", lowered)
    tokens = [t for t in _SEPARATORS.split(lowered) if t]
    # Keep at least one token so "V" alone is not erased.
    while len(tokens) > 1 and tokens[-1] in SUFFIXES:
        tokens.pop()
    return " ".join(tokens)
