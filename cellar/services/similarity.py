"""
Normalized edit-distance similarity for short text fields.

Wine and producer names are compared case-insensitively and otherwise
as-is: no punctuation stripping, and accents are only folded when the
caller asks for it.
"""

import unicodedata

from rapidfuzz.distance import Levenshtein


def fold_accents(text: str) -> str:
    """Strip combining marks ("Château" -> "Chateau")."""
    return "".join(
        char for char in unicodedata.normalize("NFD", text)
        if unicodedata.category(char) != "Mn"
    )


def edit_distance(a: str, b: str) -> int:
    """Unit-cost Levenshtein distance (insert, delete, substitute)."""
    return Levenshtein.distance(a, b)


def string_similarity(a: str, b: str, fold: bool = False) -> float:
    """
    Similarity in [0, 1] between two strings.

    (longer_length - edit_distance) / longer_length, with two empty
    strings defined as identical. Symmetric and never raises.
    """
    a = (a or "").lower()
    b = (b or "").lower()
    if fold:
        a = fold_accents(a)
        b = fold_accents(b)

    longest = max(len(a), len(b))
    if longest == 0:
        return 1.0

    return (longest - edit_distance(a, b)) / longest
