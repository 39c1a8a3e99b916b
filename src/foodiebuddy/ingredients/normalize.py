"""
FoodieBuddy - Name Normalization.

Maps a free-text ingredient name to a short matching key so that a
recipe line and a fridge entry phrased slightly differently still match.

This is a heuristic, not grammar: plurals are handled by dropping one
trailing "s" and there is no locale awareness. "Asparagus" becomes
"asparagu"; that is a known approximation, not a bug.
"""

import re

# Words whose following word is significant ("sauce de tomates" keeps "tomate")
LINKING_PARTICLES = frozenset({
    # French
    "de", "à", "aux", "d", "l", "pour",
    # English
    "of", "the", "for",
})

# Nouns that are too generic on their own ("sauce", "wine" of what?)
QUALIFIER_NOUNS = frozenset({
    "sauce", "vin",
    "wine",
})

_SPLIT_RE = re.compile(r"[ ']")


def _singularize(word: str) -> str:
    word = word.lower()
    return word[:-1] if word.endswith("s") else word


def standardize_name(name: str) -> str:
    """
    Standardize an ingredient name for matching.

    Operations:
    - Strip surrounding whitespace
    - Split on spaces and apostrophes
    - Lowercase each word and drop one trailing "s"
    - Keep the first word, plus every word that directly follows a run of
      linking particles or qualifier nouns (the particles themselves are
      dropped)

    Examples:
        standardize_name("Tomates") -> "tomate"
        standardize_name("Sauce de Tomates") -> "sauce tomate"
        standardize_name("Huile d'olive") -> "huile olive"
        standardize_name("Red onions") -> "red"

    An empty or blank name gives an empty key, which never matches anything.
    """
    words = [_singularize(w) for w in _SPLIT_RE.split(name.strip())]

    result = [words[0]]
    keep_next = False
    for word in words:
        if word in LINKING_PARTICLES or word in QUALIFIER_NOUNS:
            keep_next = True
        elif keep_next:
            result.append(word)
            keep_next = False

    return " ".join(result)


def names_match(a: str, b: str) -> bool:
    """Whether two standard names denote the same ingredient (empty keys never match)."""
    return bool(a) and a == b
