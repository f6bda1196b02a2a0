"""Shared team-name normalization and similarity scoring.

Every provider spells teams differently ("UNC", "North Carolina",
"North Carolina Tar Heels", "Iowa St."). Reconciliation compares names only
after they pass through :func:`normalize_team_name`, and scores pairs with
:func:`match_score`. Both functions are pure so they can be tested without a
mapping store.
"""

from __future__ import annotations

import html as _html
import re
import unicodedata
from typing import Dict, Tuple

# Abbreviation expansions, keyed by the cleaned (lowercase, punctuation-free)
# form. Add entries here when unmatched names show up in ingestion logs.
KNOWN_ABBREVIATIONS: Dict[str, str] = {
    "unc": "north carolina",
    "usc": "southern california",
    "uva": "virginia",
    "uk": "kentucky",
    "vt": "virginia tech",
    "psu": "penn state",
    "uconn": "connecticut",
    "lsu": "louisiana state",
    "smu": "southern methodist",
    "tcu": "texas christian",
    "utep": "texas el paso",
    "unlv": "nevada las vegas",
    "ucf": "central florida",
    "uab": "alabama birmingham",
    "unt": "north texas",
    "utsa": "texas san antonio",
    "fiu": "florida international",
    "fau": "florida atlantic",
    "wku": "western kentucky",
    "odu": "old dominion",
    "vcu": "virginia commonwealth",
    "byu": "brigham young",
    "miami fl": "miami",
    "miami oh": "miami ohio",
}

_SEPARATOR_RE = re.compile(r"[-/]")
_PUNCT_RE = re.compile(r"[^a-z0-9\s]")
_SPACE_RE = re.compile(r"\s+")
_TRAILING_ST_RE = re.compile(r" st$")

# Prefix boost: a whole-token prefix of at least this many words scores
# PREFIX_BASE plus up to PREFIX_SPAN depending on how much of the longer
# name it covers.
PREFIX_MIN_WORDS = 2
PREFIX_BASE = 0.85
PREFIX_SPAN = 0.10


def _clean(name: str) -> str:
    s = _html.unescape(str(name))
    s = unicodedata.normalize("NFKD", s)
    s = "".join(ch for ch in s if not unicodedata.combining(ch))
    s = s.lower().strip()
    s = _SEPARATOR_RE.sub(" ", s)
    s = _PUNCT_RE.sub("", s)
    return _SPACE_RE.sub(" ", s).strip()


def normalize_team_name(name: str) -> str:
    """Normalize a team name for fuzzy comparison.

    Steps:
    1. Decode HTML entities and strip accents (``San José`` → ``san jose``)
    2. Lowercase, turn hyphens/slashes into spaces, drop other punctuation
    3. Collapse whitespace
    4. Expand known abbreviations (``UNC`` → ``north carolina``)
    5. Rewrite a trailing standalone ``st`` to ``state``

    Step 5 only touches the final token, so ``St. John's`` keeps its ``st``.
    The result is a fixed point: normalizing it again returns it unchanged.

    Examples::

        >>> normalize_team_name("Iowa St.")
        'iowa state'
        >>> normalize_team_name("St. John's")
        'st johns'
        >>> normalize_team_name("VCU")
        'virginia commonwealth'
    """
    if not name:
        return ""
    s = _clean(name)
    expanded = KNOWN_ABBREVIATIONS.get(s)
    if expanded is not None:
        return expanded
    return _TRAILING_ST_RE.sub(" state", s)


def levenshtein(a: str, b: str) -> int:
    """Edit distance between two strings (two-row dynamic programming)."""
    if len(a) < len(b):
        a, b = b, a
    if not b:
        return len(a)

    prev = list(range(len(b) + 1))
    for i, ca in enumerate(a, start=1):
        curr = [i] + [0] * len(b)
        for j, cb in enumerate(b, start=1):
            if ca == cb:
                curr[j] = prev[j - 1]
            else:
                curr[j] = 1 + min(prev[j], curr[j - 1], prev[j - 1])
        prev = curr
    return prev[-1]


def _ordered(na: str, nb: str) -> Tuple[str, str]:
    return (na, nb) if len(na) <= len(nb) else (nb, na)


def match_score(a: str, b: str) -> float:
    """Similarity in [0, 1] between two raw team names.

    Identical normalized names score 1.0. A multi-word name that is a
    whole-token prefix of the other ("Texas Tech" / "Texas Tech Red Raiders")
    scores 0.85-0.95. Otherwise the score is normalized Levenshtein
    similarity. Single-word names never get the prefix boost, so "Iowa" stays
    well below "Iowa State".

    The function is symmetric: ``match_score(a, b) == match_score(b, a)``.
    """
    na = normalize_team_name(a)
    nb = normalize_team_name(b)

    if na == nb:
        return 1.0 if na else 0.0
    if not na or not nb:
        return 0.0

    shorter, longer = _ordered(na, nb)
    if len(shorter.split(" ")) >= PREFIX_MIN_WORDS and longer.startswith(shorter + " "):
        return PREFIX_BASE + PREFIX_SPAN * (len(shorter) / len(longer))

    return 1.0 - levenshtein(na, nb) / max(len(na), len(nb))
