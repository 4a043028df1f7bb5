"""Name normalization for player, team and stat-type matching.

Handles common variations across providers:
- Suffixes: "Jr.", "Sr.", "III" are dropped for comparison
- Punctuation: "A'ja Wilson" -> "aja wilson"
- Accents: "Luka Dončić" -> "luka doncic"
- Case and extra spaces
"""
import re
import unicodedata

from rapidfuzz import fuzz

SUFFIXES = {'jr', 'sr', 'ii', 'iii', 'iv', 'v'}

# Minimum rapidfuzz WRatio for two team names to count as the same team
TEAM_FUZZY_THRESHOLD = 90


def normalize(name: str) -> str:
    """
    Normalize a player name for comparison.

    Examples:
        >>> normalize("Ronald Acuna Jr.")
        'ronald acuna'
        >>> normalize("Luka Dončić")
        'luka doncic'
        >>> normalize("A'ja  Wilson")
        'aja wilson'
    """
    if not name:
        return ""

    name = _remove_suffixes(name)
    name = _strip_accents(name).lower()
    name = re.sub(r'[^\w\s]', '', name)
    return ' '.join(name.split())


def _remove_suffixes(name: str) -> str:
    parts = name.split()
    if len(parts) > 1 and parts[-1].lower().replace('.', '') in SUFFIXES:
        return ' '.join(parts[:-1])
    return name


def _strip_accents(name: str) -> str:
    decomposed = unicodedata.normalize('NFD', name)
    return ''.join(c for c in decomposed if unicodedata.category(c) != 'Mn')


def normalize_team_name(team_name: str) -> str:
    """Lowercase, accent-free, punctuation-free team name."""
    if not team_name:
        return ""
    normalized = _strip_accents(team_name).lower()
    normalized = re.sub(r'[^\w\s]', '', normalized)
    return ' '.join(normalized.split())


def normalize_stat_type(stat_type: str) -> str:
    """Case- and spacing-insensitive key for stat types ("3-Pointers Made" == "3-pointers  made")."""
    if not stat_type:
        return ""
    return ' '.join(stat_type.lower().split())


def team_names_match(team_a: str, team_b: str) -> bool:
    """
    Best-effort team equivalence: "Lakers" matches "Los Angeles Lakers".

    Containment of one normalized name in the other first, then a
    rapidfuzz WRatio fallback for spelling differences.
    """
    a = normalize_team_name(team_a)
    b = normalize_team_name(team_b)
    if not a or not b:
        return False
    if a == b or a in b or b in a:
        return True
    return fuzz.WRatio(a, b) >= TEAM_FUZZY_THRESHOLD


def are_names_equal(name1: str, name2: str, fuzzy: bool = False) -> bool:
    """
    Check if two player names are equal after normalization.

    Args:
        fuzzy: also accept a rapidfuzz WRatio of 90 or more
    """
    norm1 = normalize(name1)
    norm2 = normalize(name2)

    if norm1 == norm2:
        return True

    if fuzzy:
        return fuzz.WRatio(norm1, norm2) >= 90

    return False
